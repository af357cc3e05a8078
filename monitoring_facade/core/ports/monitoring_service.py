from abc import ABC, abstractmethod
from typing import List
from datetime import datetime, timedelta

from ..domain.metric import (
    Metric,
    Metrics,
    Metadata,
    LabelValues,
    MetricLabelSet,
    QueryOptions
)


class MonitoringService(ABC):
    """
    Port (interface) for the monitoring query façade.
    This defines the contract exposed to the REST and GraphQL layers.
    """

    @abstractmethod
    async def get_metric(self, expr: str, namespace: str, time: datetime) -> Metric:
        """
        Run an instant query.

        Args:
            expr: Query expression, forwarded verbatim
            namespace: Namespace scope; not applied to instant queries
            time: Evaluation instant

        Returns:
            Metric with a vector result or the backend error
        """
        pass

    @abstractmethod
    async def get_metric_over_time(
        self,
        expr: str,
        namespace: str,
        start: datetime,
        end: datetime,
        step: timedelta
    ) -> Metric:
        """
        Run a range query.

        Raises:
            InvalidQueryError: If start is after end or step is not positive
        """
        pass

    @abstractmethod
    async def get_named_metrics(
        self,
        metrics: List[str],
        time: datetime,
        options: QueryOptions
    ) -> Metrics:
        """Evaluate named metrics at an instant; one result per name, in request order."""
        pass

    @abstractmethod
    async def get_named_metrics_over_time(
        self,
        metrics: List[str],
        start: datetime,
        end: datetime,
        step: timedelta,
        options: QueryOptions
    ) -> Metrics:
        """Evaluate named metrics over a range; one result per name, in request order."""
        pass

    @abstractmethod
    async def get_metadata(self, namespace: str) -> Metadata:
        pass

    @abstractmethod
    async def get_label_values(
        self,
        label: str,
        matches: List[str],
        start: datetime,
        end: datetime
    ) -> LabelValues:
        pass

    @abstractmethod
    async def get_metric_label_set(
        self,
        metric: str,
        namespace: str,
        start: datetime,
        end: datetime
    ) -> MetricLabelSet:
        """
        Fetch label sets for a metric, restricted to a namespace when one is given.
        Rewrite failures yield an empty label set instead of an error.
        """
        pass

    @abstractmethod
    async def get_cluster_stats(self) -> Metrics:
        """Count clusters, workspaces and users."""
        pass

    @abstractmethod
    async def get_workspace_stats(self, workspace: str) -> Metrics:
        """Count namespaces, DevOps projects, members and roles of a workspace."""
        pass
