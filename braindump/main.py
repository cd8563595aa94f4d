"""Application Bootstrap (Entry Point)."""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from .cli import app
from .config import get_settings

LOG_FILE_MAX_BYTES = 5 * 1024 * 1024
LOG_FILE_BACKUP_COUNT = 3

FILE_LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
CONSOLE_LOG_FORMAT = "%(levelname)-8s | %(name)s | %(message)s"

# SDK loggers that are chatty at INFO (request lines, retries)
_NOISY_LOGGERS = ("httpx", "httpcore", "openai", "anthropic", "google_genai")

# Marks handlers installed here so repeated setup does not stack them
_HANDLER_TAG = "_braindump_handler"


def _logging_targets() -> tuple[Path, str, str]:
    """Return (log file, root level, console level) from settings.

    Falls back to a local log file at INFO when settings cannot be loaded,
    so a bad .env never leaves the CLI without logging.
    """
    try:
        settings = get_settings()
        return settings.log_file, settings.log_level, settings.console_log_level
    except Exception as e:
        print(f"Warning: Failed to load settings for logging: {e}", file=sys.stderr)
        return Path("braindump.log"), "INFO", "WARNING"


def _tagged(handler: logging.Handler) -> logging.Handler:
    setattr(handler, _HANDLER_TAG, True)
    return handler


def setup_logging() -> Path:
    """Configure application-wide logging.

    Everything at the configured level goes to a rotating file
    (~/.braindump/braindump.log by default); stderr only shows the console
    level (WARNING unless BRAINDUMP_CONSOLE_LOG_LEVEL says otherwise), so
    command output stays readable. Calling this again replaces the handlers
    from the previous call.

    Returns:
        Path of the log file in use.
    """
    log_file, log_level, console_level = _logging_targets()
    log_file.parent.mkdir(parents=True, exist_ok=True)

    file_handler = RotatingFileHandler(
        log_file,
        maxBytes=LOG_FILE_MAX_BYTES,
        backupCount=LOG_FILE_BACKUP_COUNT,
        encoding="utf-8",
    )
    file_handler.setFormatter(logging.Formatter(FILE_LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    file_handler.setLevel(logging.DEBUG)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(logging.Formatter(CONSOLE_LOG_FORMAT))
    console_handler.setLevel(getattr(logging, console_level))

    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        if getattr(handler, _HANDLER_TAG, False):
            root_logger.removeHandler(handler)
            handler.close()

    root_logger.setLevel(getattr(logging, log_level))
    root_logger.addHandler(_tagged(file_handler))
    root_logger.addHandler(_tagged(console_handler))

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return log_file


def main() -> None:
    """Main entry point for the braindump CLI."""
    setup_logging()
    app()


if __name__ == "__main__":
    main()
