"""pcareg Registration Components"""

from .base import BaseComponent, RegistrationState, run_resolutions
from .transforms import (
    TransformVariant,
    TransformCapabilities,
    TransformClassification,
    CombinationTransformBase,
    BSplineTransformBase,
    ReducedDimensionBSplineTransformBase,
    StackTransformBase,
    AffineTransform,
    BSplineTransform,
    ReducedDimensionBSplineTransform,
    StackTransform,
    CombinationTransform,
    describe_transform,
    classify_transform,
    inspect_transform,
)
from .metric import (
    MetricParameters,
    ResolutionConfigurator,
    InitializationTimer,
    InitializationResult,
    InitializationError,
    PCAMetric3,
)

__all__ = [
    "BaseComponent",
    "RegistrationState",
    "run_resolutions",
    "TransformVariant",
    "TransformCapabilities",
    "TransformClassification",
    "CombinationTransformBase",
    "BSplineTransformBase",
    "ReducedDimensionBSplineTransformBase",
    "StackTransformBase",
    "AffineTransform",
    "BSplineTransform",
    "ReducedDimensionBSplineTransform",
    "StackTransform",
    "CombinationTransform",
    "describe_transform",
    "classify_transform",
    "inspect_transform",
    "MetricParameters",
    "ResolutionConfigurator",
    "InitializationTimer",
    "InitializationResult",
    "InitializationError",
    "PCAMetric3",
]
