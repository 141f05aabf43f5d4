"""
pcareg Logging Configuration

Logging setup shared by all components:
- Console output with color formatting
- Optional file logging
- Module-level loggers under the "pcareg" hierarchy
- Monotonic timing utility
"""

import logging
import sys
import time
from pathlib import Path
from typing import Optional
from datetime import datetime

ROOT_LOGGER_NAME = "pcareg"


class ColorFormatter(logging.Formatter):
    """Custom formatter with color support for console output"""

    COLORS = {
        "DEBUG": "\033[36m",     # Cyan
        "INFO": "\033[32m",      # Green
        "WARNING": "\033[33m",   # Yellow
        "ERROR": "\033[31m",     # Red
        "CRITICAL": "\033[35m",  # Magenta
        "RESET": "\033[0m",
    }

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, self.COLORS["RESET"])
        reset = self.COLORS["RESET"]

        timestamp = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")

        level_short = record.levelname[0]  # D, I, W, E, C
        return f"{color}[{timestamp}] {level_short} | {record.name}: {record.getMessage()}{reset}"


def setup_logging(
    level: str = "INFO",
    log_file: Optional[Path] = None,
    module_name: str = ROOT_LOGGER_NAME,
) -> logging.Logger:
    """
    Setup logging for pcareg

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_file: Optional path to log file
        module_name: Root module name for logger hierarchy

    Returns:
        Configured root logger
    """
    logger = logging.getLogger(module_name)
    logger.setLevel(getattr(logging, level.upper()))

    # Remove existing handlers
    logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.DEBUG)
    console_handler.setFormatter(ColorFormatter())
    logger.addHandler(console_handler)

    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_file, mode="w")
        file_handler.setLevel(logging.DEBUG)
        file_formatter = logging.Formatter(
            "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        )
        file_handler.setFormatter(file_formatter)
        logger.addHandler(file_handler)

    return logger


def get_logger(name: str) -> logging.Logger:
    """
    Get a module-level logger

    Args:
        name: Module name (will be prefixed with pcareg)

    Returns:
        Logger instance
    """
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


class Timer:
    """
    Monotonic stopwatch, usable as a context manager.

    Every start/stop pair counts as one run; ``mean`` is the total elapsed
    time divided by the number of completed runs, in seconds. When used as a
    context manager the elapsed time is logged only if the block succeeds.
    """

    def __init__(self, name: str = "", logger: Optional[logging.Logger] = None):
        self.name = name
        self.logger = logger or get_logger("timer")
        self.start_time: Optional[float] = None
        self.elapsed = 0.0
        self.total = 0.0
        self.runs = 0

    def start(self):
        self.start_time = time.perf_counter()

    def stop(self) -> float:
        if self.start_time is None:
            raise RuntimeError(f"Timer '{self.name}' stopped before it was started")
        self.elapsed = time.perf_counter() - self.start_time
        self.start_time = None
        self.total += self.elapsed
        self.runs += 1
        return self.elapsed

    @property
    def mean(self) -> float:
        """Mean elapsed seconds over completed runs"""
        if self.runs == 0:
            return 0.0
        return self.total / self.runs

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb):
        if exc_type is not None:
            # Failed block: drop the measurement
            self.start_time = None
            return False
        self.stop()
        self.logger.info(f"{self.name}: {self.elapsed:.2f}s")
        return False
