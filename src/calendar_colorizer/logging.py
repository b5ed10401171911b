"""Log files for calendar-colorizer.

Every calendar gets a rotating activity log, ``calendar-colorizer-<calendar>.log``,
holding the trace of what the rules did to its events. ERROR records of all
calendars also land in one shared ``calendar-colorizer-error.log``, tagged with
the calendar they came from:

    setup_logging(log_dir=settings.log_dir, debug=settings.debug)
    logger = get_calendar_logger("primary")
    logger.error("Could not create travel event")  # both files
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from logging.handlers import RotatingFileHandler
from pathlib import Path

PACKAGE_LOGGER = "calendar_colorizer"
ERROR_LOG_NAME = "calendar-colorizer-error.log"

ACTIVITY_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"
ERROR_FORMAT = "%(asctime)s [%(levelname)s] [%(calendar)s] %(message)s"


@dataclass(frozen=True)
class LogConfig:
    """Where log files go and when they rotate."""

    log_dir: Path = field(
        default_factory=lambda: Path.home() / ".local" / "state" / "calendar-colorizer"
    )
    level: int = logging.INFO
    max_bytes: int = 5 * 1024 * 1024
    backup_count: int = 3


class CalendarFilter(logging.Filter):
    """Stamps each record with the calendar it was logged for."""

    def __init__(self, calendar: str) -> None:
        super().__init__()
        self.calendar = calendar

    def filter(self, record: logging.LogRecord) -> bool:
        record.calendar = self.calendar
        return True


class LogFileHandler(RotatingFileHandler):
    """File handler installed by this module.

    Other handlers on the same logger (test capture, user config) are never
    touched; only instances of this class are added and removed here.
    """


_config = LogConfig()
_error_handler: LogFileHandler | None = None
_calendars: dict[str, logging.Logger] = {}


def setup_logging(
    log_dir: Path | None = None,
    log_level: str = "INFO",
    max_bytes: int | None = None,
    backup_count: int | None = None,
    debug: bool = False,
) -> None:
    """Configure log files.

    Calling it again moves calendar loggers handed out earlier to the new
    directory and level.

    Args:
        log_dir: Directory for log files.
        log_level: Minimum log level (default: INFO).
        max_bytes: Max size per log file before rotation (default: 5MB).
        backup_count: Number of rotated files to keep (default: 3).
        debug: Force DEBUG level so every evaluated event is traced.
    """
    global _config

    calendars = list(_calendars)
    reset_logging()

    defaults = LogConfig()
    _config = LogConfig(
        log_dir=log_dir or defaults.log_dir,
        level=logging.DEBUG if debug else getattr(logging, log_level.upper(), logging.INFO),
        max_bytes=max_bytes or defaults.max_bytes,
        backup_count=defaults.backup_count if backup_count is None else backup_count,
    )
    logging.getLogger(PACKAGE_LOGGER).setLevel(_config.level)

    for calendar in calendars:
        get_calendar_logger(calendar)


def get_calendar_logger(calendar: str) -> logging.Logger:
    """Get the logger writing the activity log of a calendar.

    Args:
        calendar: Calendar identifier (e.g. "primary" or an address).
    """
    if calendar in _calendars:
        return _calendars[calendar]

    safe_name = "".join(c if c.isalnum() else "-" for c in calendar)
    logger = logging.getLogger(f"{PACKAGE_LOGGER}.calendar.{safe_name}")
    logger.propagate = False
    logger.setLevel(_config.level)
    _detach(logger)

    for old in [f for f in logger.filters if isinstance(f, CalendarFilter)]:
        logger.removeFilter(old)
    logger.addFilter(CalendarFilter(calendar))

    _config.log_dir.mkdir(parents=True, exist_ok=True)
    logger.addHandler(_file_handler(f"calendar-colorizer-{safe_name}.log", ACTIVITY_FORMAT))
    logger.addHandler(_shared_error_handler())

    _calendars[calendar] = logger
    return logger


def reset_logging() -> None:
    """Close all log files and forget the calendar loggers."""
    global _error_handler, _config

    for logger in _calendars.values():
        _detach(logger)
    if _error_handler is not None:
        _error_handler.close()

    _calendars.clear()
    _error_handler = None
    _config = LogConfig()


def _file_handler(name: str, fmt: str, level: int = logging.NOTSET) -> LogFileHandler:
    handler = LogFileHandler(
        _config.log_dir / name,
        maxBytes=_config.max_bytes,
        backupCount=_config.backup_count,
        encoding="utf-8",
    )
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt))
    return handler


def _shared_error_handler() -> LogFileHandler:
    # One handler for all calendars, so rotation of the error log has one owner
    global _error_handler
    if _error_handler is None:
        _error_handler = _file_handler(ERROR_LOG_NAME, ERROR_FORMAT, logging.ERROR)
    return _error_handler


def _detach(logger: logging.Logger) -> None:
    for handler in [h for h in logger.handlers if isinstance(h, LogFileHandler)]:
        logger.removeHandler(handler)
        if handler is not _error_handler:
            handler.close()
