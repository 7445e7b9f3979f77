"""
hostcheck Logging Configuration

Centralized logging setup. Log records go to stderr so the report on
stdout stays clean; an optional rotating log file captures everything.

Usage:
    from hostcheck.utils.logging_config import setup_logging
    setup_logging(level=logging.DEBUG, log_file="/var/log/hostcheck.log")

    logger = logging.getLogger(__name__)
    logger.info("Message")
"""

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Optional

_initialized = False

DEFAULT_FORMAT = "%(asctime)s | %(name)s | %(levelname)s | %(message)s"
SIMPLE_FORMAT = "%(levelname)s: %(message)s"
DEBUG_FORMAT = "%(asctime)s | %(name)s:%(lineno)d | %(levelname)s | %(message)s"

LEVEL_COLORS = {
    'DEBUG': '\033[36m',     # Cyan
    'INFO': '\033[32m',      # Green
    'WARNING': '\033[33m',   # Yellow
    'ERROR': '\033[31m',     # Red
    'CRITICAL': '\033[35m',  # Magenta
}
RESET = '\033[0m'

# Loggers that are chatty at DEBUG and irrelevant to host diagnostics
NOISY_LOGGERS = ['markdown_it', 'asyncio', 'urllib3']


class ColoredFormatter(logging.Formatter):
    """Formatter that adds colors to log levels for terminal output."""

    def __init__(self, fmt=None, datefmt=None, use_colors=True, stream=None):
        super().__init__(fmt, datefmt)
        stream = stream or sys.stderr
        self.use_colors = use_colors and hasattr(stream, 'isatty') and stream.isatty()

    def format(self, record):
        if self.use_colors and record.levelname in LEVEL_COLORS:
            record = logging.makeLogRecord(record.__dict__)
            record.levelname = f"{LEVEL_COLORS[record.levelname]}{record.levelname}{RESET}"
        return super().format(record)


def parse_level(name: Optional[str], default: int = logging.WARNING) -> int:
    """Map a level name ("debug", "INFO") to a logging level."""
    if not name:
        return default
    level = logging.getLevelName(str(name).strip().upper())
    return level if isinstance(level, int) else default


def setup_logging(
    level: int = logging.WARNING,
    log_file: Optional[str] = None,
    log_format: Optional[str] = None,
    use_colors: bool = True,
    max_bytes: int = 5 * 1024 * 1024,  # 5MB
    backup_count: int = 3,
    suppress_libs: bool = True,
    force: bool = False,
) -> None:
    """
    Configure the root logger.

    Args:
        level: Logging level for the console handler
        log_file: Optional file path; always receives DEBUG records
        log_format: Format string (SIMPLE_FORMAT, or DEBUG_FORMAT at DEBUG)
        use_colors: Color level names on a TTY
        max_bytes: Max log file size before rotation
        backup_count: Number of rotated files to keep
        suppress_libs: Hold noisy third-party loggers at WARNING
        force: Reconfigure even if already initialized
    """
    global _initialized

    if _initialized and not force:
        return

    if log_format is None:
        log_format = DEBUG_FORMAT if level <= logging.DEBUG else SIMPLE_FORMAT

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG if log_file else level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    if use_colors:
        console_handler.setFormatter(ColoredFormatter(log_format))
    else:
        console_handler.setFormatter(logging.Formatter(log_format))
    root_logger.addHandler(console_handler)

    if log_file:
        try:
            log_path = Path(log_file)
            log_path.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.handlers.RotatingFileHandler(
                log_path,
                maxBytes=max_bytes,
                backupCount=backup_count,
            )
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(logging.Formatter(DEFAULT_FORMAT, datefmt='%Y-%m-%d %H:%M:%S'))
            root_logger.addHandler(file_handler)
        except OSError as e:
            root_logger.warning(f"Cannot write log file {log_file}: {e}")

    if suppress_libs:
        for lib_name in NOISY_LOGGERS:
            logging.getLogger(lib_name).setLevel(logging.WARNING)

    _initialized = True


def reset_logging() -> None:
    """Forget previous setup (useful for testing)."""
    global _initialized
    _initialized = False
