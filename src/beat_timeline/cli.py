"""
Command line interface: analyse an audio file offline.
"""

import argparse
import json
import os
import sys
from typing import Any, Dict, List, Optional

from .audio.source import AudioSource
from .config.settings import Settings, load_settings
from .core.beat_detector import BeatEvent
from .core.player import OfflinePlayer
from .core.session import AnalysisSession
from .core.timeline import format_time
from .core.waveform import Envelope
from .utils.exceptions import BeatTimelineError, ConfigurationError
from .utils.logging import setup_logging, get_logger, StageProgress

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="beat-timeline",
        description="Detect beats and extract the waveform envelope of an audio file",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    analyze = subparsers.add_parser("analyze", help="Replay a file offline and report its beats")
    analyze.add_argument("audio", help="Path to the audio file")
    analyze.add_argument("--config", help="YAML configuration file")
    analyze.add_argument("--columns", type=int, help="Envelope column count")
    analyze.add_argument("--tick-rate", type=float, help="Analysis ticks per second")
    analyze.add_argument("--threshold", type=float, help="Bass energy threshold (0-255)")
    analyze.add_argument("--refractory", type=float, help="Minimum seconds between beats")
    analyze.add_argument("--plot", help="Write the waveform with beat markers to this image")
    analyze.add_argument("--json", action="store_true", help="Print the result as JSON")
    analyze.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level",
    )
    return parser


def _apply_overrides(settings: Settings, args: argparse.Namespace) -> Settings:
    if args.columns is not None:
        settings.waveform.column_count = args.columns
    if args.tick_rate is not None:
        settings.playback.tick_rate_hz = args.tick_rate
    if args.threshold is not None:
        settings.beat.energy_threshold = args.threshold
    if args.refractory is not None:
        settings.beat.refractory_period_seconds = args.refractory
    return settings.validate()


def _format_beat(event: BeatEvent) -> str:
    seconds = event.timestamp_seconds
    return f"#{event.sequence_number:<4d} {format_time(seconds)}.{int(seconds * 100) % 100:02d}"


def summarize(source: AudioSource, events: List[BeatEvent], envelope: Optional[Envelope]) -> Dict[str, Any]:
    return {
        'file': source.metadata.get('file_path'),
        'duration_seconds': source.duration,
        'sample_rate': source.sample_rate,
        'beat_count': len(events),
        'beats': [
            {'sequence_number': e.sequence_number, 'timestamp_seconds': e.timestamp_seconds}
            for e in events
        ],
        'envelope_columns': envelope.column_count if envelope else 0,
    }


STAGE_LOAD = "Loading audio"
STAGE_REPLAY = "Replaying track"
STAGE_ENVELOPE = "Extracting waveform envelope"
STAGE_PLOT = "Rendering waveform"


def _load_cli_settings(config_path: Optional[str]) -> Settings:
    if config_path and not os.path.isfile(config_path):
        raise ConfigurationError(f"Configuration file not found: {config_path}")
    return load_settings(config_path)


def run_analyze(args: argparse.Namespace) -> int:
    settings = _apply_overrides(_load_cli_settings(args.config), args)
    stages = [STAGE_LOAD, STAGE_REPLAY, STAGE_ENVELOPE] + ([STAGE_PLOT] if args.plot else [])
    progress = StageProgress(logger, stages, "Analysis")

    progress.begin(STAGE_LOAD)
    source = AudioSource.from_file(args.audio, settings)

    with AnalysisSession(settings) as session:
        session.load_source(source)

        progress.begin(STAGE_REPLAY)
        events = OfflinePlayer(session).run()

        progress.begin(STAGE_ENVELOPE)
        envelope = session.wait_for_envelope()

        if args.plot:
            if envelope is None:
                progress.skip(STAGE_PLOT, "no envelope")
            else:
                progress.begin(STAGE_PLOT)
                from .visual.waveform_plot import plot_envelope

                duration = source.duration
                ratios = [e.timestamp_seconds / duration for e in events] if duration > 0 else []
                plot_envelope(envelope, args.plot, beat_ratios=ratios,
                              height=settings.waveform.height, title=source.metadata.get('file_name'))

    progress.finish()
    result = summarize(source, events, envelope)

    if args.json:
        print(json.dumps(result, indent=2))
    else:
        print(f"{result['file']}: {format_time(source.duration)}, {len(events)} beat(s)")
        for event in events:
            print(f"  {_format_beat(event)}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.log_level)

    try:
        if args.command == "analyze":
            return run_analyze(args)
    except BeatTimelineError as e:
        logger.error(str(e))
        print(f"error: {e}", file=sys.stderr)
        return 1
    parser.error(f"Unknown command: {args.command}")
    return 2


if __name__ == "__main__":
    sys.exit(main())
