from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Dict, List, Optional

from ..ports.exceptions import InvalidQueryError


def quote_label_value(value: str) -> str:
    """Render ``value`` as a double-quoted PromQL string literal."""
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


class MetricType:
    """Result shapes returned by the query engine."""
    VECTOR = "vector"
    MATRIX = "matrix"


class MonitoringLevel(str, Enum):
    """Resource level a named metric is evaluated at."""
    CLUSTER = "cluster"
    NODE = "node"
    WORKSPACE = "workspace"
    NAMESPACE = "namespace"
    WORKLOAD = "workload"
    POD = "pod"
    CONTAINER = "container"


@dataclass
class Point:
    """A single (timestamp, value) sample. Timestamp is in unix seconds."""
    timestamp: float
    value: float


@dataclass
class MetricValue:
    """One labelled series of a query result."""
    metadata: Dict[str, str] = field(default_factory=dict)
    sample: Optional[Point] = None
    series: List[Point] = field(default_factory=list)


@dataclass
class MetricData:
    """Successful payload of a query result."""
    metric_type: str
    metric_values: List[MetricValue] = field(default_factory=list)


@dataclass
class Metric:
    """
    Result of evaluating one expression or named metric.
    Either carries data or an error message, never both.
    """
    metric_name: str = ""
    metric_data: Optional[MetricData] = None
    error: Optional[str] = None

    def __post_init__(self):
        if self.metric_data is not None and self.error:
            raise ValueError("a metric result cannot carry both data and an error")

    @property
    def is_error(self) -> bool:
        return bool(self.error)

    @classmethod
    def failed(cls, metric_name: str, error: str) -> "Metric":
        return cls(metric_name=metric_name, error=error)

    @classmethod
    def vector(cls, metric_name: str, timestamp: float, value: float) -> "Metric":
        """Build a single-sample vector result."""
        return cls(
            metric_name=metric_name,
            metric_data=MetricData(
                metric_type=MetricType.VECTOR,
                metric_values=[MetricValue(sample=Point(timestamp, value))]
            )
        )


@dataclass
class Metrics:
    """Ordered batch of metric results; failures are reported per element."""
    results: List[Metric] = field(default_factory=list)

    def get_metric_by_name(self, metric_name: str) -> Optional[Metric]:
        for metric in self.results:
            if metric.metric_name == metric_name:
                return metric
        return None


@dataclass
class Metadata:
    """Metric metadata as returned by the backend."""
    data: List[Dict[str, Any]] = field(default_factory=list)


@dataclass
class LabelValues:
    """Values of a single label as returned by the backend."""
    data: List[str] = field(default_factory=list)


@dataclass
class MetricLabelSet:
    """Label sets of the series matching an expression."""
    data: List[Dict[str, str]] = field(default_factory=list)


@dataclass
class QueryOptions:
    """Options controlling how named metrics are resolved to expressions."""
    level: MonitoringLevel = MonitoringLevel.CLUSTER
    resource_filter: Optional[str] = None
    node_name: Optional[str] = None
    workspace_name: Optional[str] = None
    namespace_name: Optional[str] = None
    workload_kind: Optional[str] = None
    workload_name: Optional[str] = None
    pod_name: Optional[str] = None
    container_name: Optional[str] = None

    def selector(self) -> str:
        """Render the PromQL label matchers restricting a named metric to this scope."""
        matchers = []
        if self.level == MonitoringLevel.NODE:
            matchers.append(self._matcher("node", self.node_name))
        elif self.level == MonitoringLevel.WORKSPACE:
            matchers.append(self._matcher("workspace", self.workspace_name))
        elif self.level == MonitoringLevel.NAMESPACE:
            matchers.append(self._matcher("namespace", self.namespace_name))
        elif self.level == MonitoringLevel.WORKLOAD:
            matchers.append(self._exact("namespace", self.namespace_name))
            if self.workload_kind:
                matchers.append(self._exact("owner_kind", self.workload_kind))
            matchers.append(self._matcher("owner_name", self.workload_name))
        elif self.level == MonitoringLevel.POD:
            if self.node_name:
                matchers.append(self._exact("node", self.node_name))
            matchers.append(self._exact("namespace", self.namespace_name))
            matchers.append(self._matcher("pod", self.pod_name))
        elif self.level == MonitoringLevel.CONTAINER:
            matchers.append(self._exact("namespace", self.namespace_name))
            matchers.append(self._exact("pod", self.pod_name))
            matchers.append(self._matcher("container", self.container_name))

        return ", ".join(m for m in matchers if m)

    def _matcher(self, label: str, name: Optional[str]) -> str:
        # An explicit name wins over the resource filter
        if name:
            return self._exact(label, name)
        if self.resource_filter:
            return f'{label}=~{quote_label_value(self.resource_filter)}'
        return ""

    @staticmethod
    def _exact(label: str, value: Optional[str]) -> str:
        return f'{label}={quote_label_value(value)}' if value else ""


@dataclass
class RangeQuery:
    """Time window of a range query."""
    start: datetime
    end: datetime
    step: timedelta

    def __post_init__(self):
        if self.start > self.end:
            raise InvalidQueryError(
                "start time must not be after end time",
                f"start={self.start.isoformat()} end={self.end.isoformat()}"
            )
        if self.step <= timedelta(0):
            raise InvalidQueryError("step must be positive", f"step={self.step}")
