"""
GraphQL types for the Monitoring Service.
Strawberry GraphQL type definitions based on domain entities.
"""

import strawberry
from typing import List, Optional

from ...core.domain.metric import (
    Metric as DomainMetric,
    MetricData as DomainMetricData,
    MetricValue as DomainMetricValue,
    Point as DomainPoint,
    MonitoringLevel,
    QueryOptions
)
from ..models import format_sample_value


@strawberry.type
class Label:
    """GraphQL type for a single series label."""
    name: str
    value: str


@strawberry.type
class Sample:
    """GraphQL type for a (timestamp, value) sample. Values are strings so NaN and Inf survive."""
    timestamp: float
    value: str

    @classmethod
    def from_domain(cls, point: DomainPoint) -> "Sample":
        return cls(timestamp=point.timestamp, value=format_sample_value(point.value))


@strawberry.type
class Series:
    """GraphQL type for one labelled series."""
    labels: List[Label]
    sample: Optional[Sample] = None
    values: List[Sample] = strawberry.field(default_factory=list)

    @classmethod
    def from_domain(cls, metric_value: DomainMetricValue) -> "Series":
        return cls(
            labels=[Label(name=k, value=v) for k, v in sorted(metric_value.metadata.items())],
            sample=Sample.from_domain(metric_value.sample) if metric_value.sample else None,
            values=[Sample.from_domain(p) for p in metric_value.series]
        )


@strawberry.type
class MetricData:
    """GraphQL type for a successful query payload."""
    result_type: str
    result: List[Series]

    @classmethod
    def from_domain(cls, data: DomainMetricData) -> "MetricData":
        return cls(
            result_type=data.metric_type,
            result=[Series.from_domain(v) for v in data.metric_values]
        )


@strawberry.type
class MetricResult:
    """GraphQL type for a metric result; either data or error is set."""
    metric_name: str
    data: Optional[MetricData] = None
    error: Optional[str] = None

    @classmethod
    def from_domain(cls, metric: DomainMetric) -> "MetricResult":
        """Convert domain Metric to GraphQL type."""
        return cls(
            metric_name=metric.metric_name,
            data=MetricData.from_domain(metric.metric_data) if metric.metric_data else None,
            error=metric.error or None
        )


@strawberry.type
class HealthStatus:
    """GraphQL type for service health status."""
    status: str
    service: str
    prometheus: str
    prometheus_url: str
    timestamp: str


@strawberry.input
class QueryOptionsInput:
    """GraphQL input type for named metric options."""
    level: str = MonitoringLevel.CLUSTER.value
    resource_filter: Optional[str] = None
    node_name: Optional[str] = None
    workspace_name: Optional[str] = None
    namespace_name: Optional[str] = None
    workload_kind: Optional[str] = None
    workload_name: Optional[str] = None
    pod_name: Optional[str] = None
    container_name: Optional[str] = None

    def to_domain(self) -> QueryOptions:
        """Convert GraphQL input to domain QueryOptions."""
        return QueryOptions(
            level=MonitoringLevel(self.level),
            resource_filter=self.resource_filter,
            node_name=self.node_name,
            workspace_name=self.workspace_name,
            namespace_name=self.namespace_name,
            workload_kind=self.workload_kind,
            workload_name=self.workload_name,
            pod_name=self.pod_name,
            container_name=self.container_name
        )


@strawberry.type
class LabelSet:
    """GraphQL type for the labels of one matching series."""
    labels: List[Label]

    @classmethod
    def from_dict(cls, labels: dict) -> "LabelSet":
        return cls(labels=[Label(name=k, value=v) for k, v in sorted(labels.items())])
