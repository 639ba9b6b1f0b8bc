"""
Reporting and logging setup for uccmake.

Components never write to a global logger. They receive a Reporter and
report through its four severities; the CLI wires a LoggingReporter to the
`uccmake` logger configured by setup_logging().
"""

import logging
import sys
from abc import ABC, abstractmethod
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

LOGGER_NAME = "uccmake"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class Reporter(ABC):
    """Capability passed to every component that needs to report progress."""

    @abstractmethod
    def info(self, message: str) -> None:
        ...

    @abstractmethod
    def warn(self, message: str) -> None:
        ...

    @abstractmethod
    def error(self, message: str) -> None:
        ...

    @abstractmethod
    def fatal(self, message: str) -> None:
        ...


class LoggingReporter(Reporter):
    """Reporter backed by a stdlib logger."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(LOGGER_NAME)

    def info(self, message: str) -> None:
        self.logger.info(message)

    def warn(self, message: str) -> None:
        self.logger.warning(message)

    def error(self, message: str) -> None:
        self.logger.error(message)

    def fatal(self, message: str) -> None:
        self.logger.critical(message)


class ColorFormatter(logging.Formatter):
    """Console formatter that colours warnings and errors."""

    RED = "\033[1;31m"
    YELLOW = "\033[1;33m"
    RESET = "\033[0m"

    def __init__(self, use_color: bool = True):
        super().__init__("%(message)s")
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        if record.levelno >= logging.CRITICAL:
            message = f"FATAL: {message}"
        if not self.use_color:
            return message
        if record.levelno >= logging.ERROR:
            return f"{self.RED}{message}{self.RESET}"
        if record.levelno >= logging.WARNING:
            return f"{self.YELLOW}{message}{self.RESET}"
        return message


def setup_logging(verbose: bool = False, log_file: Optional[Path] = None) -> logging.Logger:
    """Configure the uccmake logger.

    Args:
        verbose: Log at DEBUG instead of INFO
        log_file: Optional path of a rotating log file

    Returns:
        The configured logger
    """
    logger = logging.getLogger(LOGGER_NAME)
    level = logging.DEBUG if verbose else logging.INFO
    logger.setLevel(level)
    logger.propagate = False

    # Re-running setup replaces the handlers instead of stacking them
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(ColorFormatter(use_color=sys.stdout.isatty()))
    logger.addHandler(console_handler)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            str(log_file),
            maxBytes=10 * 1024 * 1024,  # 10MB
            backupCount=3,
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(file_handler)

    return logger
