"""
Entity counting for dashboard statistics.
Each kind is listed and counted independently, so a failing list only affects its own entry.
"""

import logging
from datetime import datetime, timezone
from typing import Callable, List, Optional

from ..domain.entity import (
    EntityCount,
    EntityKind,
    LabelSelector,
    USER_REFERENCE_LABEL
)
from ..ports.logger import Logger
from ..ports.state_store import StateStore


class EntityCounter:
    """Counts platform entities through a StateStore."""

    def __init__(
        self,
        state_store: StateStore,
        logger: Optional[Logger] = None,
        clock: Callable[[], datetime] = None
    ):
        """
        Initialize the counter.

        Args:
            state_store: Store used for list operations
            logger: Logger instance (optional)
            clock: Returns the timestamp stamped on counts, UTC now by default
        """
        self.state_store = state_store
        self.logger = logger or logging.getLogger(__name__)
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    async def count_cluster_stats(self) -> List[EntityCount]:
        """Count clusters, workspace templates and users, in that order."""
        now = self._clock()
        return [
            # At least one cluster always exists: the one serving this request
            await self._count(EntityKind.CLUSTER, None, now, floor=1),
            await self._count(EntityKind.WORKSPACE, None, now),
            await self._count(EntityKind.USER, None, now),
        ]

    async def count_workspace_stats(self, workspace: str) -> List[EntityCount]:
        """Count namespaces, DevOps projects, members and roles of a workspace, in that order."""
        now = self._clock()
        selector = LabelSelector.for_workspace(workspace)
        member_selector = selector.with_label(USER_REFERENCE_LABEL)
        return [
            await self._count(EntityKind.NAMESPACE, selector, now),
            await self._count(EntityKind.DEVOPS_PROJECT, selector, now),
            await self._count(EntityKind.MEMBER, member_selector, now),
            await self._count(EntityKind.ROLE, selector, now),
        ]

    async def _count(
        self,
        kind: EntityKind,
        selector: Optional[LabelSelector],
        now: datetime,
        floor: int = 0
    ) -> EntityCount:
        try:
            items = await self.state_store.list(kind, selector)
        except Exception as e:
            self.logger.error(f"Failed to count {kind.value} objects: {e}")
            return EntityCount(kind=kind, timestamp=now, error=str(e) or e.__class__.__name__)

        return EntityCount(kind=kind, timestamp=now, value=max(len(items), floor))
