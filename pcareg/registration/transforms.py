"""
pcareg Transform Hierarchy

Capability interfaces of the transforms a registration run can hold, small
descriptors implementing them, and the inspector that classifies the active
transform once per resolution level.

The active transform of a run is normally a combination transform wrapping
one current transform. The metric only needs to know which of four shapes
it has:

- PLAIN: anything that is not a combination transform
- BSPLINE: the current transform is a B-spline with a control point grid
- STACK_GENERIC: the current transform is a stack (one sub-transform per
  slice or time point) of anything else, or an empty stack
- STACK_OF_REDUCED_DIMENSION_BSPLINE: a stack whose first sub-transform is a
  reduced-dimension B-spline

For the last shape the grid size is filled with the number of
sub-transforms on every axis, not with the sub-transform's own grid.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Sequence, Tuple

import numpy as np

from ..utils.logging_config import get_logger

logger = get_logger("transforms")


class TransformVariant(Enum):
    """Shape of the active transform, as far as the metric is concerned"""
    PLAIN = "plain"
    BSPLINE = "bspline"
    STACK_GENERIC = "stack"
    STACK_OF_REDUCED_DIMENSION_BSPLINE = "stack-bspline"


# ----------------------------------------------------------------------------
# Capability interfaces
# ----------------------------------------------------------------------------

class CombinationTransformBase(ABC):
    """Composite transform wrapping one current transform"""

    @property
    @abstractmethod
    def current_transform(self) -> Any:
        pass


class BSplineTransformBase(ABC):
    """Transform parameterized by a regular control point grid"""

    @abstractmethod
    def grid_region_size(self) -> Sequence[int]:
        """Number of control points along each axis"""
        pass


class ReducedDimensionBSplineTransformBase(BSplineTransformBase):
    """B-spline on one dimension less than the image, used inside stacks"""


class StackTransformBase(ABC):
    """Ordered collection of sub-transforms, one per slice or time point"""

    @property
    @abstractmethod
    def number_of_sub_transforms(self) -> int:
        pass

    @abstractmethod
    def sub_transform(self, index: int) -> Any:
        pass


# ----------------------------------------------------------------------------
# Descriptors
# ----------------------------------------------------------------------------

@dataclass
class AffineTransform:
    """Transform without a control point grid"""
    dimension: int = 3


@dataclass
class BSplineTransform(BSplineTransformBase):
    grid_size: Tuple[int, ...] = (8, 8, 8)

    def grid_region_size(self) -> Sequence[int]:
        return tuple(self.grid_size)


@dataclass
class ReducedDimensionBSplineTransform(ReducedDimensionBSplineTransformBase):
    grid_size: Tuple[int, ...] = (8, 8)

    def grid_region_size(self) -> Sequence[int]:
        return tuple(self.grid_size)


class StackTransform(StackTransformBase):
    def __init__(self, sub_transforms: Sequence[Any] = ()):
        self._sub_transforms = list(sub_transforms)

    @property
    def number_of_sub_transforms(self) -> int:
        return len(self._sub_transforms)

    def sub_transform(self, index: int) -> Any:
        return self._sub_transforms[index]

    def __repr__(self) -> str:
        return f"StackTransform({self._sub_transforms!r})"


class CombinationTransform(CombinationTransformBase):
    def __init__(self, current_transform: Any = None):
        self._current_transform = current_transform

    @property
    def current_transform(self) -> Any:
        return self._current_transform

    def __repr__(self) -> str:
        return f"CombinationTransform({self._current_transform!r})"


# ----------------------------------------------------------------------------
# Inspection
# ----------------------------------------------------------------------------

@dataclass(frozen=True)
class TransformCapabilities:
    """Answers of the ordered capability queries on the active transform"""
    is_combination: bool = False
    current_is_bspline: bool = False
    bspline_grid_size: Optional[Tuple[int, ...]] = None
    current_is_stack: bool = False
    number_of_sub_transforms: int = 0
    first_sub_transform_is_reduced_dimension_bspline: bool = False


@dataclass(frozen=True)
class TransformClassification:
    """
    Result of classifying the active transform

    Attributes:
        variant: Shape of the transform
        is_stack_transform: True for both stack variants
        grid_size: Grid size to hand to the metric, None if the variant
            carries none
    """
    variant: TransformVariant
    is_stack_transform: bool = False
    grid_size: Optional[np.ndarray] = None


def describe_transform(transform: Any) -> TransformCapabilities:
    """
    Query the capabilities of a transform, first match wins

    Never raises for shapes that do not match; the unanswered queries keep
    their False/empty values.
    """
    if not isinstance(transform, CombinationTransformBase):
        return TransformCapabilities()

    current = transform.current_transform
    if isinstance(current, BSplineTransformBase):
        return TransformCapabilities(
            is_combination=True,
            current_is_bspline=True,
            bspline_grid_size=tuple(int(s) for s in current.grid_region_size()),
        )

    if not isinstance(current, StackTransformBase):
        return TransformCapabilities(is_combination=True)

    count = int(current.number_of_sub_transforms)
    first_is_bspline = count > 0 and isinstance(
        current.sub_transform(0), ReducedDimensionBSplineTransformBase
    )
    return TransformCapabilities(
        is_combination=True,
        current_is_stack=True,
        number_of_sub_transforms=count,
        first_sub_transform_is_reduced_dimension_bspline=first_is_bspline,
    )


def classify_transform(capabilities: TransformCapabilities, dimension: int) -> TransformClassification:
    """
    Classify a transform from its capabilities

    Args:
        capabilities: Result of describe_transform
        dimension: Image dimension, length of the produced grid size

    Returns:
        TransformClassification
    """
    if not capabilities.is_combination:
        return TransformClassification(TransformVariant.PLAIN)

    if capabilities.current_is_bspline:
        return TransformClassification(
            TransformVariant.BSPLINE,
            grid_size=np.asarray(capabilities.bspline_grid_size, dtype=np.int64),
        )

    if not capabilities.current_is_stack:
        # Unresolved combination (neither B-spline nor stack): reported as PLAIN,
        # it carries no grid size and no stack flag
        return TransformClassification(TransformVariant.PLAIN)

    if capabilities.number_of_sub_transforms == 0:
        return TransformClassification(TransformVariant.STACK_GENERIC, is_stack_transform=True)

    if capabilities.first_sub_transform_is_reduced_dimension_bspline:
        return TransformClassification(
            TransformVariant.STACK_OF_REDUCED_DIMENSION_BSPLINE,
            is_stack_transform=True,
            grid_size=np.full(dimension, capabilities.number_of_sub_transforms, dtype=np.int64),
        )

    return TransformClassification(TransformVariant.STACK_GENERIC, is_stack_transform=True)


def inspect_transform(transform: Any, dimension: int) -> TransformClassification:
    """Describe and classify the active transform of a run"""
    capabilities = describe_transform(transform)
    classification = classify_transform(capabilities, dimension)
    if capabilities.is_combination and classification.variant is TransformVariant.PLAIN:
        logger.debug("Active combination transform has no grid-bearing shape, treated as plain")
    else:
        logger.debug(f"Active transform classified as {classification.variant.value}")
    return classification
