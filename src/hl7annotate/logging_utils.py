"""Custom logging utilities for the HL7Annotate application."""
# src/hl7annotate/logging_utils.py

import logging
import sys
import time
from logging import FileHandler
from pathlib import Path

from . import paths

DEBUG_LOG_FILE_NAME = "debug.log"


class _UtcMicrosecondFormatter(logging.Formatter):
    """Formatter base that renders timestamps in UTC with 6-digit microseconds."""

    def __init__(self, fmt: str) -> None:
        super().__init__(fmt=fmt, datefmt="%Y-%m-%dT%H:%M:%S")
        self.converter = time.gmtime

    def formatTime(self, record: logging.LogRecord, datefmt: str | None = None) -> str:  # noqa: N802
        """Format the time with 6-digit microseconds and a 'Z' for UTC."""
        ct = self.converter(record.created)
        s = time.strftime(datefmt, ct) if datefmt else time.strftime(self.default_time_format, ct)
        microseconds = int((record.created - int(record.created)) * 1_000_000)
        return f"{s}.{microseconds:06d}Z"


class ConsoleFormatter(_UtcMicrosecondFormatter):
    """A custom formatter for console output to provide clean, user-friendly logs."""

    def __init__(self, version: str) -> None:
        """
        Initialize the formatter with the application version.

        Args:
            version: The HL7Annotate application version.

        """
        super().__init__(f"%(asctime)s | HL7Annotate - {version} | %(message)s")


class FileFormatter(_UtcMicrosecondFormatter):
    """A detailed formatter for debug log files, aimed at developers."""

    def __init__(self) -> None:
        """Initialize the detailed file formatter."""
        super().__init__("%(asctime)s | %(name)-28s | %(funcName)-24s:%(lineno)-4d | %(levelname)-8s | %(message)s")


def setup_logging(version: str, *, debug: bool = False, project_root: Path | None = None) -> None:
    """
    Configure the root logger for the HL7Annotate application.

    This function sets up a dual-logging system:
    1.  Console: User-facing messages. Level is INFO by default, DEBUG if debug=True.
    2.  File (DEBUG): Developer-facing, detailed logs written to
        '.hl7annotate/logs/debug.log' when debug=True.

    Args:
        version: The application version, included in console logs.
        debug: If True, enables detailed file logging and sets console level to DEBUG.
        project_root: Where to start looking for the project anchor. Defaults to CWD.

    """
    root_logger = logging.getLogger()
    if root_logger.hasHandlers():
        root_logger.handlers.clear()

    level = logging.DEBUG if debug else logging.INFO
    root_logger.setLevel(level)

    # --- Console Handler ---
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(ConsoleFormatter(version))
    root_logger.addHandler(console_handler)

    if debug:
        try:
            log_dir = paths.get_log_dir(project_root)
            paths.ensure_dir_exists(log_dir)
            log_file_path = log_dir / DEBUG_LOG_FILE_NAME

            # --- File Handler (DEBUG) ---
            file_handler = FileHandler(log_file_path, mode="w", encoding="utf-8")
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(FileFormatter())
            root_logger.addHandler(file_handler)

            logging.getLogger().info(
                "Debug mode enabled. Console level set to DEBUG. Detailed logs will be written to %s",
                log_file_path,
            )
        except OSError:
            # find_project_root raises FileNotFoundError, an OSError, when no anchor exists.
            logging.getLogger().exception("Failed to create debug log file. Continuing with console logging only.")
