"""
pcareg Base Component

Abstract base class for registration components and the pipeline state
they read at each resolution level.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Iterator, List, Optional

from ..config import Configuration
from ..utils.formatting import bool_to_string, to_string, to_vector_of_strings
from ..utils.logging_config import get_logger

logger = get_logger("registration")


@dataclass
class RegistrationState:
    """
    Host pipeline state visible to the components

    Attributes:
        number_of_levels: Number of resolution levels of the run
        transform: Active transform of the run
        current_level: Level currently being optimized
    """
    number_of_levels: int = 1
    transform: Any = None
    current_level: int = 0

    def levels(self) -> Iterator[int]:
        """Step through the levels in order, updating current_level"""
        for level in range(self.number_of_levels):
            self.current_level = level
            yield level


class BaseComponent(ABC):
    """
    Abstract base class for pluggable components

    Components get the run configuration, the pipeline state and a logger
    injected, and implement the per-level hook.
    """

    bool_to_string = staticmethod(bool_to_string)
    to_string = staticmethod(to_string)
    to_vector_of_strings = staticmethod(to_vector_of_strings)

    def __init__(
        self,
        configuration: Configuration,
        registration: RegistrationState,
        component_label: str,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Initialize component

        Args:
            configuration: Parameters of the run
            registration: Host pipeline state
            component_label: Label of this component in the parameter file,
                e.g. "Metric0"
            logger: Log sink; defaults to the module logger
        """
        self.configuration = configuration
        self.registration = registration
        self.component_label = component_label
        self.logger = logger or get_logger("registration")

    @property
    def name(self) -> str:
        """Component name"""
        return self.__class__.__name__

    @abstractmethod
    def before_each_resolution(self) -> None:
        """Reconfigure for registration.current_level"""
        pass


def run_resolutions(
    components: List[BaseComponent],
    registration: RegistrationState,
    optimize_level: Optional[Callable[[int], None]] = None,
):
    """
    Drive components through all resolution levels

    Args:
        components: Components to reconfigure at each level
        registration: Pipeline state; its current_level is advanced
        optimize_level: Optional callback running the level's optimization
    """
    for level in registration.levels():
        logger.info(f"Resolution {level + 1}/{registration.number_of_levels}")
        for component in components:
            component.before_each_resolution()
        if optimize_level is not None:
            optimize_level(level)
