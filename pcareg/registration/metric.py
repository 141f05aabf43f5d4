"""
pcareg PCA Metric Component

Per-resolution configuration and timed initialization of the PCAMetric3
group-wise similarity metric. The similarity value and its derivative are
computed by the host toolkit; this module decides which settings that
computation runs with at each level.

Parameters read at every level, in this order:

    SubtractMean                 bool, level independent       (false)
    NumAdditionalSamplesFixed    int,  one entry per level     (0)
    ReducedDimensionIndex        int,  level independent       (0)
    MovingImageDerivativeScales  float, one entry per axis     (disabled)

Derivative scales are used only if every axis has an entry.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

import numpy as np

from ..config import Configuration, ParameterCastError
from ..utils.formatting import to_vector_of_strings
from ..utils.logging_config import Timer, get_logger
from .base import BaseComponent, RegistrationState
from .transforms import TransformClassification, inspect_transform

logger = get_logger("metric")

# No fallback entry: a missing axis must not borrow another axis' value
NO_DEFAULT_ENTRY = -1


@dataclass
class MetricParameters:
    """Settings the metric computation runs with at the current level"""
    subtract_mean: bool = False
    num_additional_samples_fixed: int = 0
    reduced_dimension_index: int = 0
    use_moving_image_derivative_scales: bool = False
    moving_image_derivative_scales: Optional[np.ndarray] = None
    is_stack_transform: bool = False
    grid_size: Optional[np.ndarray] = None


class InitializationError(RuntimeError):
    """The base initialization of a component failed"""


@dataclass
class InitializationResult:
    """
    Outcome of a component initialization

    Attributes:
        ok: True if the base initialization completed
        elapsed_ms: Mean elapsed time in whole milliseconds (0 on failure)
        error: InitializationError wrapping the original exception
    """
    ok: bool
    elapsed_ms: int = 0
    error: Optional[InitializationError] = field(default=None)

    def raise_for_error(self):
        """Re-raise the original failure unchanged"""
        if self.error is not None:
            raise self.error.__cause__ or self.error


class InitializationTimer:
    """Times a one-shot initialization and reports it in one log line"""

    def __init__(self, component_name: str, logger: Optional[logging.Logger] = None):
        self.component_name = component_name
        self.logger = logger or get_logger("metric")

    def run(self, base_initialize: Callable[[], Any]) -> InitializationResult:
        timer = Timer(self.component_name, self.logger)
        timer.start()
        try:
            base_initialize()
        except Exception as e:
            error = InitializationError(f"Initialization of {self.component_name} failed: {e}")
            error.__cause__ = e
            return InitializationResult(ok=False, error=error)
        timer.stop()

        elapsed_ms = int(timer.mean * 1000)
        self.logger.info(f"Initialization of {self.component_name} metric took: {elapsed_ms} ms.")
        return InitializationResult(ok=True, elapsed_ms=elapsed_ms)


class ResolutionConfigurator:
    """
    Reads the metric settings for one resolution level

    Owns the MetricParameters of its component. Missing parameters fall back
    to their defaults; only entries that exist but cannot be read raise.
    """

    def __init__(
        self,
        configuration: Configuration,
        component_label: str,
        dimension: int,
        logger: Optional[logging.Logger] = None,
    ):
        self.configuration = configuration
        self.component_label = component_label
        self.dimension = dimension
        self.logger = logger or get_logger("metric")
        self.parameters = MetricParameters()

    def _read_unsigned(self, key: str, entry_index: int) -> int:
        _, value = self.configuration.read_parameter(
            key, self.component_label, entry_index, 0, default=0
        )
        if value < 0:
            raise ParameterCastError(f'Parameter "{key}": expected a non-negative integer, got {value}')
        return value

    def _read_derivative_scales(self) -> Optional[np.ndarray]:
        scales = np.zeros(self.dimension, dtype=np.float64)
        for axis in range(self.dimension):
            found, value = self.configuration.read_parameter(
                "MovingImageDerivativeScales",
                self.component_label,
                axis,
                NO_DEFAULT_ENTRY,
                default=0.0,
                lenient=True,
            )
            if not found:
                return None
            scales[axis] = value
        return scales

    def configure(self, level: int, transform: Any) -> MetricParameters:
        """
        Apply the settings for a resolution level

        Args:
            level: Current resolution level
            transform: Active transform of the run

        Returns:
            The updated MetricParameters
        """
        params = self.parameters

        _, params.subtract_mean = self.configuration.read_parameter(
            "SubtractMean", self.component_label, 0, 0, default=False
        )
        params.num_additional_samples_fixed = self._read_unsigned("NumAdditionalSamplesFixed", level)
        params.reduced_dimension_index = self._read_unsigned("ReducedDimensionIndex", 0)

        params.use_moving_image_derivative_scales = False
        params.moving_image_derivative_scales = None
        scales = self._read_derivative_scales()
        if scales is not None:
            params.use_moving_image_derivative_scales = True
            params.moving_image_derivative_scales = scales
            self.logger.info(
                f"Multiplying moving image derivatives by: [{', '.join(to_vector_of_strings(scales))}]"
            )

        self.apply_classification(inspect_transform(transform, self.dimension))
        return params

    def apply_classification(self, classification: TransformClassification):
        """Copy grid size and stack flag; absent values leave the old ones"""
        if classification.is_stack_transform:
            self.parameters.is_stack_transform = True
        if classification.grid_size is not None:
            self.parameters.grid_size = classification.grid_size.copy()


class PCAMetric3(BaseComponent):
    """
    PCA based group-wise metric component

    Example:
        >>> registration = RegistrationState(number_of_levels=3, transform=transform)
        >>> metric = PCAMetric3(configuration, registration, dimension=3)
        >>> metric.initialize(base_initialize).raise_for_error()
        >>> for level in registration.levels():
        ...     metric.before_each_resolution()
    """

    def __init__(
        self,
        configuration: Configuration,
        registration: RegistrationState,
        component_label: str = "Metric0",
        dimension: int = 3,
        logger: Optional[logging.Logger] = None,
    ):
        super().__init__(configuration, registration, component_label, logger or get_logger("metric"))
        self.dimension = dimension
        self.configurator = ResolutionConfigurator(
            configuration, component_label, dimension, self.logger
        )
        self.initialization_timer = InitializationTimer(self.name, self.logger)

    @property
    def parameters(self) -> MetricParameters:
        return self.configurator.parameters

    def initialize(self, base_initialize: Callable[[], Any]) -> InitializationResult:
        """
        Run the base initialization once, timed

        Args:
            base_initialize: Initialization of the underlying metric

        Returns:
            InitializationResult; failures are carried, not raised
        """
        return self.initialization_timer.run(base_initialize)

    def before_each_resolution(self) -> None:
        self.configurator.configure(self.registration.current_level, self.registration.transform)
