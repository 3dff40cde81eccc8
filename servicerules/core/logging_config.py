"""Logging configuration for service-rules.

This module sets up logging with file rotation and a separate
log for classification call results.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

DETAILED_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(filename)s:%(lineno)d | %(message)s"
CLASSIFY_FORMAT = "%(asctime)s | %(levelname)-8s | CLASSIFY | %(message)s"
SIMPLE_FORMAT = "%(levelname)s: %(message)s"

DEFAULT_LOG_LEVEL = logging.INFO
DEFAULT_MAX_BYTES = 10 * 1024 * 1024  # 10 MB
DEFAULT_BACKUP_COUNT = 5

ROOT_LOGGER_NAME = "servicerules"
CLASSIFY_LOGGER_NAME = f"{ROOT_LOGGER_NAME}.classify"


class ServiceRulesLogger:
    """Centralized logger management for service-rules.

    Manages two log files:
        - main.log: General application logging
        - classify.log: One line per classification call
    """

    _instance: Optional["ServiceRulesLogger"] = None
    log_level: int = DEFAULT_LOG_LEVEL

    def __new__(cls) -> "ServiceRulesLogger":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def setup(
        self,
        logs_dir: Path,
        log_level: int = DEFAULT_LOG_LEVEL,
        console_output: bool = True,
    ) -> None:
        """Initialize logging with specified configuration.

        Args:
            logs_dir: Directory for log files.
            log_level: Logging level (e.g., logging.INFO).
            console_output: Whether to also log to console.
        """
        self.log_level = log_level
        logs_dir.mkdir(parents=True, exist_ok=True)

        root_logger = logging.getLogger(ROOT_LOGGER_NAME)
        root_logger.setLevel(log_level)
        root_logger.handlers.clear()
        root_logger.addHandler(self._create_file_handler(logs_dir / "main.log", DETAILED_FORMAT))

        if console_output:
            console_handler = logging.StreamHandler(sys.stderr)
            console_handler.setLevel(log_level)
            console_handler.setFormatter(logging.Formatter(SIMPLE_FORMAT))
            root_logger.addHandler(console_handler)

        # Call results go to classify.log only
        classify_logger = logging.getLogger(CLASSIFY_LOGGER_NAME)
        classify_logger.setLevel(log_level)
        classify_logger.propagate = False
        classify_logger.handlers.clear()
        classify_logger.addHandler(
            self._create_file_handler(logs_dir / "classify.log", CLASSIFY_FORMAT)
        )

    def _create_file_handler(self, log_path: Path, format_string: str) -> RotatingFileHandler:
        """Create a rotating file handler at the current log level."""
        handler = RotatingFileHandler(
            log_path,
            maxBytes=DEFAULT_MAX_BYTES,
            backupCount=DEFAULT_BACKUP_COUNT,
            encoding="utf-8",
        )
        handler.setLevel(self.log_level)
        handler.setFormatter(logging.Formatter(format_string))
        return handler


# Global logger instance
_logger_manager = ServiceRulesLogger()


def setup_logging(
    logs_dir: Path,
    log_level: int = DEFAULT_LOG_LEVEL,
    console_output: bool = True,
) -> None:
    """Initialize the logging system.

    This should be called once at application startup.

    Args:
        logs_dir: Directory for log files.
        log_level: Logging level (default: INFO).
        console_output: Whether to also log to console (default: True).
    """
    _logger_manager.setup(logs_dir, log_level, console_output)


def get_logger(name: str = "main") -> logging.Logger:
    """Get a logger instance.

    Args:
        name: "main" for the root application logger, "classify" for
            classification call results.

    Returns:
        Logger instance.
    """
    if name == "main":
        return logging.getLogger(ROOT_LOGGER_NAME)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


def log_classification_result(
    filter_name: str,
    instance_count: int,
    matched_count: int,
    duration_ms: float,
) -> None:
    """Log the outcome of one classification call.

    Args:
        filter_name: Name of the rule filter that ran.
        instance_count: Number of instances offered for classification.
        matched_count: Number of instances that matched a ruleset.
        duration_ms: Call duration in milliseconds.
    """
    logging.getLogger(CLASSIFY_LOGGER_NAME).info(
        f"{filter_name} | Matched {matched_count}/{instance_count} instances "
        f"in {duration_ms:.1f}ms"
    )
