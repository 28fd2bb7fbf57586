"""
Logging setup shared by the library and the command line tool.

Library modules only ever call ``get_logger(__name__)``; handlers are
attached once, by whoever runs the program.
"""

import logging
import sys
from typing import Optional, Sequence, TextIO

PACKAGE_LOGGER = 'beat_timeline'
DEFAULT_FORMAT = '%(asctime)s %(levelname)-8s %(name)s: %(message)s'

# Decoding and plotting libraries log per call at INFO/DEBUG.
NOISY_LOGGERS = ('numba', 'librosa', 'audioread', 'matplotlib', 'PIL')


def setup_logging(level: str = "INFO", format_string: Optional[str] = None,
                  stream: Optional[TextIO] = None) -> logging.Logger:
    """
    Route package log records to ``stream`` (stdout by default).

    Args:
        level: Level name for the package logger
        format_string: Record format, ``DEFAULT_FORMAT`` if omitted
        stream: Output stream

    Returns:
        The package logger

    Raises:
        ValueError: If ``level`` is not a known level name
    """
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        raise ValueError(f"Unknown log level: {level}")

    logging.basicConfig(
        level=numeric_level,
        format=format_string or DEFAULT_FORMAT,
        stream=stream or sys.stdout,
    )

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(numeric_level)

    quiet_level = max(numeric_level, logging.WARNING)
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(quiet_level)

    return package_logger


def get_logger(name: str) -> logging.Logger:
    """Logger under the package namespace; ``__name__`` of package modules is used as-is."""
    if name == PACKAGE_LOGGER or name.startswith(PACKAGE_LOGGER + '.'):
        return logging.getLogger(name)
    return logging.getLogger(f'{PACKAGE_LOGGER}.{name}')


class StageProgress:
    """
    Logs "[i/n]" progress over a stage list fixed up front.

    Optional stages are declared when the job starts; a stage that turns out
    not to run is passed to ``skip`` so the count still reaches ``n``.
    """

    def __init__(self, logger: logging.Logger, stages: Sequence[str], description: str = "Processing"):
        if not stages:
            raise ValueError("StageProgress needs at least one stage")
        self.logger = logger
        self.stages = list(stages)
        self.description = description
        self.completed = 0

    @property
    def total(self) -> int:
        return len(self.stages)

    def _advance(self, stage: str) -> int:
        if stage not in self.stages:
            raise ValueError(f"Unknown stage: {stage}")
        self.completed = min(self.completed + 1, self.total)
        return self.completed

    def begin(self, stage: str):
        index = self._advance(stage)
        self.logger.info(f"{self.description} [{index}/{self.total}] {stage}")

    def skip(self, stage: str, reason: str = ""):
        index = self._advance(stage)
        suffix = f": {reason}" if reason else ""
        self.logger.info(f"{self.description} [{index}/{self.total}] {stage} skipped{suffix}")

    def finish(self):
        self.logger.info(f"{self.description} finished ({self.completed}/{self.total} stages)")
