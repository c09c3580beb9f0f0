"""
Logging Configuration

Everything logs below the ``rxlabel`` logger; this module configures that
logger once and provides the per-run pipeline logger.
"""

import logging
import sys
import time
from typing import Any, Dict, List, Optional, Union

from ..config.settings import LoggingConfig


ROOT_LOGGER_NAME = "rxlabel"
DEFAULT_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"


def setup_logging(
    level: Union[int, str] = logging.INFO,
    log_file: Optional[str] = None,
    format_string: Optional[str] = None
) -> None:
    """
    Point the package logger at stdout and, optionally, a file.

    Calling it again replaces the handlers from the previous call.

    Args:
        level: Level name ("debug", "INFO") or number
        log_file: Extra file to append log lines to
        format_string: Overrides DEFAULT_FORMAT
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())

    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    formatter = logging.Formatter(format_string or DEFAULT_FORMAT)
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)

    package_logger = logging.getLogger(ROOT_LOGGER_NAME)
    package_logger.setLevel(level)
    package_logger.handlers = handlers


def get_logger(name: str) -> logging.Logger:
    """Logger for ``name``, prefixed with the package name unless it already is."""
    if name != ROOT_LOGGER_NAME and not name.startswith(ROOT_LOGGER_NAME + "."):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    return logging.getLogger(name)


class PipelineLogger:
    """
    Logger bound to a single scan.

    Stage and metric lines are emitted at INFO for verbose runs and at
    DEBUG otherwise. Errors are always ERROR.

    Attributes:
        request_id: Id of the scan; its first 8 characters name the logger
        verbose: Whether tracing lines go out at INFO
    """

    def __init__(self, request_id: str, verbose: bool = False):
        self.request_id = request_id
        self.verbose = verbose
        self.logger = logging.getLogger(f"{ROOT_LOGGER_NAME}.pipeline.{request_id[:8]}")
        self._trace_level = logging.INFO if verbose else logging.DEBUG
        self._started: Dict[str, float] = {}

    def trace(self, message: str) -> None:
        self.logger.log(self._trace_level, message)

    def stage_start(self, stage_name: str) -> None:
        self._started[stage_name] = time.perf_counter()
        self.trace(f"Stage '{stage_name}' started")

    def stage_end(self, stage_name: str, success: bool = True) -> float:
        """Trace the end of a stage; returns milliseconds since stage_start, or 0."""
        started = self._started.pop(stage_name, None)
        duration = (time.perf_counter() - started) * 1000 if started is not None else 0.0
        self.trace(f"Stage '{stage_name}' {'completed' if success else 'failed'} in {duration:.2f}ms")
        return duration

    def stage_error(self, stage_name: str, error: Exception) -> None:
        self.logger.error(f"Stage '{stage_name}' error: {error}")

    def metric(self, name: str, value: Any, unit: str = "") -> None:
        self.trace(f"Metric [{name}]: {value}{unit}")


def configure_logging(config: LoggingConfig) -> None:
    """setup_logging driven by the ``logging`` section of AppConfig."""
    setup_logging(config.level, log_file=config.log_file, format_string=config.format)
