from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from .metric import Metric


WORKSPACE_LABEL_KEY = "kubesphere.io/workspace"
USER_REFERENCE_LABEL = "iam.kubesphere.io/user-ref"


class EntityKind(str, Enum):
    """Kinds of platform entities counted for dashboard statistics."""
    CLUSTER = "cluster"
    WORKSPACE = "workspace"
    USER = "user"
    NAMESPACE = "namespace"
    DEVOPS_PROJECT = "devops_project"
    MEMBER = "member"
    ROLE = "role"

    @property
    def metric_name(self) -> str:
        return ENTITY_METRIC_NAMES[self]


ENTITY_METRIC_NAMES = {
    EntityKind.CLUSTER: "kubesphere_cluster_count",
    EntityKind.WORKSPACE: "kubesphere_workspace_count",
    EntityKind.USER: "kubesphere_user_count",
    EntityKind.NAMESPACE: "workspace_namespace_count",
    EntityKind.DEVOPS_PROJECT: "workspace_devops_project_count",
    EntityKind.MEMBER: "workspace_member_count",
    EntityKind.ROLE: "workspace_role_count",
}


@dataclass
class EntityCount:
    """Point-in-time count of one entity kind, or the error that prevented it."""
    kind: EntityKind
    timestamp: datetime
    value: Optional[int] = None
    error: Optional[str] = None

    def __post_init__(self):
        if self.error is None:
            if self.value is None or self.value < 0:
                raise ValueError("a successful entity count needs a non-negative value")
        elif self.value is not None:
            raise ValueError("a failed entity count cannot carry a value")

    @property
    def is_error(self) -> bool:
        return self.error is not None

    def to_metric(self) -> Metric:
        """Render the count as a single-sample vector metric."""
        if self.is_error:
            return Metric.failed(self.kind.metric_name, self.error)
        return Metric.vector(
            self.kind.metric_name,
            float(int(self.timestamp.timestamp())),
            float(self.value)
        )


@dataclass
class LabelSelector:
    """Label-equality and label-existence requirements for list operations."""
    match_labels: Dict[str, str] = field(default_factory=dict)
    exists: List[str] = field(default_factory=list)

    @classmethod
    def for_workspace(cls, workspace: str) -> "LabelSelector":
        return cls(match_labels={WORKSPACE_LABEL_KEY: workspace})

    def with_label(self, key: str) -> "LabelSelector":
        """Return a copy that additionally requires ``key`` to be present."""
        return LabelSelector(
            match_labels=dict(self.match_labels),
            exists=list(self.exists) + [key]
        )

    def __str__(self) -> str:
        parts = [f"{key}={value}" for key, value in sorted(self.match_labels.items())]
        parts.extend(sorted(self.exists))
        return ",".join(parts)
