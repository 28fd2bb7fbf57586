"""
Unit tests for the command line interface.
"""

import json

import pytest

from beat_timeline import cli
from beat_timeline.config import settings as settings_module


@pytest.fixture(autouse=True)
def reset_global_settings(monkeypatch):
    monkeypatch.setattr(settings_module, '_settings', None)


class TestCli:
    """Test cases for the beat-timeline command."""

    def test_analyze_json(self, burst_wav, capsys):
        exit_code = cli.main(['analyze', burst_wav, '--json', '--columns', '120'])

        assert exit_code == 0
        result = json.loads(capsys.readouterr().out)
        assert result['beat_count'] == 4
        assert [b['sequence_number'] for b in result['beats']] == [1, 2, 3, 4]
        assert result['envelope_columns'] == 120
        assert result['duration_seconds'] == pytest.approx(2.0, abs=1e-3)

    def test_analyze_text_output(self, burst_wav, capsys):
        exit_code = cli.main(['analyze', burst_wav])

        assert exit_code == 0
        out = capsys.readouterr().out
        assert "0:02, 4 beat(s)" in out
        assert "#1" in out

    def test_analyze_with_plot(self, burst_wav, tmp_path, capsys):
        plot_path = tmp_path / "waveform.png"

        exit_code = cli.main(['analyze', burst_wav, '--plot', str(plot_path)])

        assert exit_code == 0
        assert plot_path.exists()

    def test_high_threshold_finds_nothing(self, burst_wav, capsys):
        exit_code = cli.main(['analyze', burst_wav, '--json', '--threshold', '255'])

        assert exit_code == 0
        assert json.loads(capsys.readouterr().out)['beat_count'] == 0

    def test_config_file(self, burst_wav, tmp_path, capsys):
        config = tmp_path / "config.yaml"
        config.write_text("waveform:\n  column_count: 50\n")

        exit_code = cli.main(['analyze', burst_wav, '--json', '--config', str(config)])

        assert exit_code == 0
        assert json.loads(capsys.readouterr().out)['envelope_columns'] == 50

    def test_missing_file_fails(self, tmp_path, capsys):
        exit_code = cli.main(['analyze', str(tmp_path / "missing.wav")])

        assert exit_code == 1
        assert "Audio file not found" in capsys.readouterr().err

    def test_missing_config_file_fails(self, burst_wav, tmp_path, capsys):
        missing = tmp_path / "absent.yaml"

        exit_code = cli.main(['analyze', burst_wav, '--json', '--config', str(missing)])

        captured = capsys.readouterr()
        assert exit_code == 1
        assert "Configuration file not found" in captured.err

    def test_invalid_override_fails(self, burst_wav, capsys):
        assert cli.main(['analyze', burst_wav, '--columns', '0']) == 1

    def test_command_required(self):
        with pytest.raises(SystemExit):
            cli.main([])
