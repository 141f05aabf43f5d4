"""
pcareg - PCA metric registration components

Per-resolution configuration of the PCAMetric3 group-wise similarity
metric for a pluggable multi-resolution registration toolkit.

Key Features:
- Ordered, defaulted reading of level-aware and level-invariant parameters
- All-or-nothing moving image derivative scales
- Classification of the active transform (plain, B-spline, stack, stack of
  reduced-dimension B-splines) and the grid size that follows from it
- Timed one-shot initialization with a typed result
- Text formatting of scalars and fixed-size composites for logs
- Layered YAML parameter files with presets
"""

__version__ = "1.0.0"
__author__ = "pcareg Team"

from .config import load_configuration, load_parameter_file, Configuration, ParameterCastError
from .registration import (
    PCAMetric3,
    MetricParameters,
    ResolutionConfigurator,
    InitializationTimer,
    InitializationResult,
    InitializationError,
    RegistrationState,
    TransformVariant,
    inspect_transform,
)
from .utils import bool_to_string, to_string, to_vector_of_strings, setup_logging, get_logger

__all__ = [
    # Configuration
    "load_configuration",
    "load_parameter_file",
    "Configuration",
    "ParameterCastError",
    # Metric
    "PCAMetric3",
    "MetricParameters",
    "ResolutionConfigurator",
    "InitializationTimer",
    "InitializationResult",
    "InitializationError",
    "RegistrationState",
    "TransformVariant",
    "inspect_transform",
    # Formatting
    "bool_to_string",
    "to_string",
    "to_vector_of_strings",
    # Logging
    "setup_logging",
    "get_logger",
]
