"""pcareg Configuration Module"""

from .configuration import (
    Configuration,
    ParameterCastError,
    load_configuration,
    load_parameter_file,
    list_available_presets,
    load_preset,
)

__all__ = [
    "Configuration",
    "ParameterCastError",
    "load_configuration",
    "load_parameter_file",
    "list_available_presets",
    "load_preset",
]
