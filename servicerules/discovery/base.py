"""Base interface for instance sources.

The rule filter does not discover anything itself. Instance sources are
the boundary to whatever discovers containers and ports and hands them
over for classification.
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from servicerules.core.models import Instance


class BaseInstanceSource(ABC):
    """Abstract base class for instance sources.

    Subclasses must implement:
        - discover(): Return the discovered instances
        - get_source_name(): Return the source identifier

    Example:
        class DockerSource(BaseInstanceSource):
            def get_source_name(self) -> str:
                return "docker"

            def discover(self) -> list[Instance]:
                return instances_from_docker_api()
    """

    @abstractmethod
    def discover(self) -> list["Instance"]:
        """Return discovered service instances in a stable order.

        Raises:
            OSError: If the underlying discovery mechanism fails.
        """
        pass

    @abstractmethod
    def get_source_name(self) -> str:
        """Return the source identifier."""
        pass

    def get_description(self) -> str:
        """Return a human-readable description of this source."""
        return f"Discovers service instances from {self.get_source_name()}"
