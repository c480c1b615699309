"""
Centralized logging configuration for the FAQ chatbot backend.

- Console output with level colouring when attached to a TTY
- Rotating file handlers (all levels, and errors only)
- PerformanceLogger for timing store queries and searches

Environment:
    LOG_DIR: Directory for log files (defaults to <repo>/logs)
    LOG_FILES: Set to "0" to disable file output (e.g., read-only containers)
"""

import logging
import logging.handlers
import os
import sys
from pathlib import Path
from typing import Optional
from datetime import datetime


class ColoredFormatter(logging.Formatter):
    """Custom formatter with color support for console output."""

    COLORS = {
        "DEBUG": "\033[36m",  # Cyan
        "INFO": "\033[32m",  # Green
        "WARNING": "\033[33m",  # Yellow
        "ERROR": "\033[31m",  # Red
        "CRITICAL": "\033[35m",  # Magenta
        "RESET": "\033[0m",
    }

    def format(self, record):
        if sys.stdout.isatty() and record.levelname in self.COLORS:
            # Colour a copy so file handlers sharing the record stay plain
            record = logging.makeLogRecord(record.__dict__)
            record.levelname = (
                f"{self.COLORS[record.levelname]}{record.levelname}{self.COLORS['RESET']}"
            )
        return super().format(record)


def _default_log_dir() -> Path:
    env_dir = os.getenv("LOG_DIR")
    if env_dir:
        return Path(env_dir)
    return Path(__file__).parent.parent / "logs"


def _file_output_enabled() -> bool:
    return os.getenv("LOG_FILES", "1") != "0"


def setup_logger(
    name: str,
    level: str = "INFO",
    log_dir: Optional[Path] = None,
    console_output: bool = True,
    file_output: Optional[bool] = None,
    max_bytes: int = 10 * 1024 * 1024,  # 10MB
    backup_count: int = 5,
) -> logging.Logger:
    """
    Set up and configure a logger with console and file handlers.

    Args:
        name: Logger name (typically __name__ of the module)
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_dir: Directory for log files (defaults to LOG_DIR or <repo>/logs)
        console_output: Whether to output logs to console
        file_output: Whether to output logs to file (defaults to LOG_FILES env)
        max_bytes: Maximum size of each log file before rotation
        backup_count: Number of backup log files to keep

    Returns:
        Configured logger instance

    Example:
        logger = setup_logger(__name__, level="DEBUG")
        logger.info("Search engine ready")
    """
    logger = logging.getLogger(name)

    # Avoid adding handlers multiple times
    if logger.handlers:
        return logger

    logger.setLevel(getattr(logging, level.upper()))
    logger.propagate = False

    detailed_formatter = logging.Formatter(
        fmt="%(asctime)s | %(name)s | %(levelname)s | %(funcName)s:%(lineno)d | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console_formatter = ColoredFormatter(
        fmt="%(asctime)s | %(levelname)s | %(name)s | %(message)s", datefmt="%H:%M:%S"
    )

    if console_output:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(logging.INFO)
        console_handler.setFormatter(console_formatter)
        logger.addHandler(console_handler)

    if file_output is None:
        file_output = _file_output_enabled()

    if file_output:
        if log_dir is None:
            log_dir = _default_log_dir()

        log_dir.mkdir(parents=True, exist_ok=True)

        log_file = log_dir / f"{name.replace('.', '_')}.log"
        file_handler = logging.handlers.RotatingFileHandler(
            log_file, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(detailed_formatter)
        logger.addHandler(file_handler)

        error_log_file = log_dir / f"{name.replace('.', '_')}_errors.log"
        error_handler = logging.handlers.RotatingFileHandler(
            error_log_file,
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        error_handler.setLevel(logging.ERROR)
        error_handler.setFormatter(detailed_formatter)
        logger.addHandler(error_handler)

    return logger


def get_logger(name: str, level: str = "INFO") -> logging.Logger:
    """
    Get or create a logger with the specified name and level.

    Example:
        from utils.logger import get_logger
        logger = get_logger(__name__)
    """
    return setup_logger(name, level=level)


def set_log_level(level: str) -> None:
    """
    Change the level of every logger created through setup_logger.

    Used by the CLI --log-level flag and the API LOG_LEVEL setting.
    """
    numeric = getattr(logging, level.upper())
    logging.getLogger().setLevel(numeric)
    for logger in logging.Logger.manager.loggerDict.values():
        if isinstance(logger, logging.Logger) and logger.handlers and not logger.propagate:
            logger.setLevel(numeric)
            for handler in logger.handlers:
                if isinstance(handler, logging.StreamHandler) and not isinstance(
                    handler, logging.FileHandler
                ):
                    handler.setLevel(numeric)


class PerformanceLogger:
    """Context manager for logging elapsed time of an operation."""

    def __init__(
        self, logger: logging.Logger, operation: str, level: int = logging.DEBUG
    ):
        """
        Args:
            logger: Logger instance to use
            operation: Name of the operation being measured
            level: Logging level for performance metrics

        Example:
            with PerformanceLogger(logger, "FAQ query"):
                faqs = store.query_faqs(predicate)
        """
        self.logger = logger
        self.operation = operation
        self.level = level
        self.start_time = None
        self.elapsed: Optional[float] = None

    def __enter__(self):
        self.start_time = datetime.now()
        self.logger.log(self.level, f"Starting: {self.operation}")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.elapsed = (datetime.now() - self.start_time).total_seconds()
        if exc_type is not None:
            self.logger.error(
                f"Failed: {self.operation} (after {self.elapsed:.3f}s) - {exc_val}"
            )
        else:
            self.logger.log(
                self.level, f"Completed: {self.operation} in {self.elapsed:.3f}s"
            )


def configure_third_party_loggers():
    """Reduce verbosity of third-party library loggers."""
    logging.getLogger("psycopg").setLevel(logging.WARNING)
    logging.getLogger("psycopg.pool").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


configure_third_party_loggers()
