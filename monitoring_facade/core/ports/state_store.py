from abc import ABC, abstractmethod
from typing import Any, List, Optional

from ..domain.entity import EntityKind, LabelSelector


class StateStore(ABC):
    """
    Port (interface) for listing cluster state objects.
    Callers only use the length of the returned collections.
    """

    @abstractmethod
    async def list(
        self,
        kind: EntityKind,
        selector: Optional[LabelSelector] = None
    ) -> List[Any]:
        """
        List objects of an entity kind.

        Args:
            kind: Entity kind to list
            selector: Label selector restricting the listed objects, None for everything

        Returns:
            List of objects

        Raises:
            StateStoreError: If the list operation fails
        """
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """
        Check if the state store is reachable.

        Returns:
            True if healthy, False otherwise
        """
        pass
