"""pcareg Utilities Module"""

from .logging_config import setup_logging, get_logger, ColorFormatter, Timer
from .formatting import bool_to_string, to_string, to_vector_of_strings

__all__ = [
    "setup_logging",
    "get_logger",
    "ColorFormatter",
    "Timer",
    "bool_to_string",
    "to_string",
    "to_vector_of_strings",
]
