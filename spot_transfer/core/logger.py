"""
Logging configuration for spot-transfer.

This module sets up the logging system with multiple outputs:
    - Console: Real-time progress with tqdm-compatible, colored formatting
    - log_full_{timestamp}.log: Complete log of all events (DEBUG and above)
    - log_errors_{timestamp}.log: Only ERROR and CRITICAL level messages
    - uncommitted_tracks_{timestamp}.log: Track URIs that a failed transfer
      did not add to the target playlist

Everything printed to screen is also saved to file, then filtered into
the specialized files.

Usage:
    from spot_transfer.core.logger import setup_logging, get_logger

    setup_logging(log_dir)  # Call once at startup
    logger = get_logger(__name__)  # Get logger for each module

    logger.info("Starting transfer")
"""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import TextIO

from tqdm import tqdm


# Log format for file output (detailed with timestamp)
FILE_LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
FILE_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Third-party loggers that are capped at WARNING
NOISY_LOGGERS = ["spotipy", "urllib3", "requests"]


class Colors:
    """ANSI color codes for terminal output."""
    RESET = "\033[0m"
    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    BLUE = "\033[34m"
    WHITE = "\033[37m"
    BOLD = "\033[1m"


class ColoredConsoleFormatter(logging.Formatter):
    """
    Formatter that prefixes the message with a colored level name.

    Colors:
        - DEBUG: Blue
        - INFO: Green
        - WARNING: Yellow
        - ERROR: Red
        - CRITICAL: Bold Red
    """

    LEVEL_COLORS = {
        logging.DEBUG: Colors.BLUE,
        logging.INFO: Colors.GREEN,
        logging.WARNING: Colors.YELLOW,
        logging.ERROR: Colors.RED,
        logging.CRITICAL: Colors.BOLD + Colors.RED,
    }

    def format(self, record: logging.LogRecord) -> str:
        color = self.LEVEL_COLORS.get(record.levelno, Colors.WHITE)
        return f"{color}{record.levelname}{Colors.RESET}: {record.getMessage()}"


class TqdmLoggingHandler(logging.Handler):
    """
    Logging handler that writes through tqdm.write().

    The batch progress bar redraws itself in place on stderr; writing log
    lines through tqdm keeps them above the bar instead of tearing it.

    Attributes:
        stream: The output stream (defaults to sys.stderr).
    """

    def __init__(self, stream: TextIO = sys.stderr) -> None:
        super().__init__()
        self.stream = stream

    def emit(self, record: logging.LogRecord) -> None:
        try:
            msg = self.format(record)
            tqdm.write(msg, file=self.stream)
        except Exception:
            self.handleError(record)


class UncommittedTracksHandler(logging.Handler):
    """
    Handler that writes the tracks a failed transfer did not add.

    It only reacts to log records carrying the extra fields written by
    log_uncommitted_tracks():
        - 'uncommitted_uris': list of track URIs not added
        - 'uncommitted_target': target playlist "name (id)"
        - 'uncommitted_failed_batch': 1-based index of the failed batch

    Output format:

        Target: My Playlist (copy-123456) (3AbC...)
        Failed at batch 2, 150 tracks not added:
        spotify:track:xxxxx
        spotify:track:yyyyy
        ...

    Attributes:
        report_path: Path to the uncommitted tracks report.
        report_file: Open file handle, set by open().
    """

    def __init__(self, report_path: Path) -> None:
        super().__init__()
        self.report_path = report_path
        self.report_file: TextIO | None = None

    def open(self) -> None:
        """Open the report file for writing (overwrites existing content)."""
        self.report_file = open(self.report_path, "w", encoding="utf-8")

    def emit(self, record: logging.LogRecord) -> None:
        if not hasattr(record, "uncommitted_uris"):
            return

        if self.report_file is None:
            return

        try:
            uris = getattr(record, "uncommitted_uris", [])
            target = getattr(record, "uncommitted_target", "Unknown")
            failed_batch = getattr(record, "uncommitted_failed_batch", None)

            self.report_file.write(f"Target: {target}\n")
            self.report_file.write(
                f"Failed at batch {failed_batch}, {len(uris)} tracks not added:\n"
            )
            for uri in uris:
                self.report_file.write(f"{uri}\n")
            self.report_file.write("\n")
            self.report_file.flush()
        except Exception:
            self.handleError(record)

    def close(self) -> None:
        """Close the report file handle. Safe to call multiple times."""
        if self.report_file is not None:
            try:
                self.report_file.close()
            except OSError:
                pass
            self.report_file = None
        super().close()


class ErrorOnlyFilter(logging.Filter):
    """Filter that only allows ERROR and CRITICAL level records."""

    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno >= logging.ERROR


def setup_logging(log_dir: Path, console_level: int = logging.INFO) -> None:
    """
    Configure the logging system for the application.

    Call this ONCE at startup, after the configuration is loaded.

    Args:
        log_dir: Directory where log files are created (created if missing).
        console_level: Minimum level printed to the console.

    Behavior:
        1. Create log_dir if it doesn't exist
        2. Configure root logger level to DEBUG, dropping old handlers
        3. Console handler (TqdmLoggingHandler, colored, console_level)
        4. Full log file handler (DEBUG)
        5. Error-only log file handler (ERROR via ErrorOnlyFilter)
        6. Uncommitted tracks report handler
        7. Cap noisy third-party loggers at WARNING

    Each run creates new files with a unique timestamp in their name.
    """
    log_dir.mkdir(parents=True, exist_ok=True)

    timestamp = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)
    root_logger.handlers.clear()

    console_handler = TqdmLoggingHandler()
    console_handler.setLevel(console_level)
    console_handler.setFormatter(ColoredConsoleFormatter())
    root_logger.addHandler(console_handler)

    full_handler = logging.FileHandler(
        log_dir / f"log_full_{timestamp}.log", mode="w", encoding="utf-8"
    )
    full_handler.setLevel(logging.DEBUG)
    full_handler.setFormatter(logging.Formatter(FILE_LOG_FORMAT, FILE_DATE_FORMAT))
    root_logger.addHandler(full_handler)

    error_handler = logging.FileHandler(
        log_dir / f"log_errors_{timestamp}.log", mode="w", encoding="utf-8"
    )
    error_handler.setLevel(logging.DEBUG)  # Filter handles the level restriction
    error_handler.setFormatter(logging.Formatter(FILE_LOG_FORMAT, FILE_DATE_FORMAT))
    error_handler.addFilter(ErrorOnlyFilter())
    root_logger.addHandler(error_handler)

    uncommitted_handler = UncommittedTracksHandler(
        log_dir / f"uncommitted_tracks_{timestamp}.log"
    )
    uncommitted_handler.open()
    root_logger.addHandler(uncommitted_handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for a module.

    Args:
        name: The logger name, typically __name__ of the calling module.

    Note:
        Loggers obtained before setup_logging() is called have no handlers
        of their own; records propagate to whatever the root logger has.
    """
    return logging.getLogger(name)


def log_uncommitted_tracks(
    logger: logging.Logger,
    uris: list[str],
    target: str,
    failed_batch: int
) -> None:
    """
    Log the tracks a failed transfer did not add, with the extra fields
    UncommittedTracksHandler looks for.

    Args:
        logger: Logger to emit the record on.
        uris: URIs from the failed batch onwards.
        target: Human-readable target playlist, e.g. "Name (id)".
        failed_batch: 1-based index of the batch that failed.
    """
    logger.warning(
        f"{len(uris)} tracks were not added to {target}",
        extra={
            "uncommitted_uris": list(uris),
            "uncommitted_target": target,
            "uncommitted_failed_batch": failed_batch,
        }
    )


def shutdown_logging() -> None:
    """
    Flush and close every handler on the root logger.

    Typically called in a finally block at application exit.
    """
    root_logger = logging.getLogger()

    for handler in root_logger.handlers[:]:
        try:
            handler.flush()
            handler.close()
        except (OSError, ValueError):
            pass
        root_logger.removeHandler(handler)
