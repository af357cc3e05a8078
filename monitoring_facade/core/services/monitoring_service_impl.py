"""
Implementation of the MonitoringService port.
Forwards queries to the monitoring backend and assembles the response envelopes.
"""

import logging
from typing import Dict, List, Mapping, Optional
from datetime import datetime, timedelta

from ..ports.monitoring_service import MonitoringService
from ..ports.monitoring_client import MonitoringClient
from ..ports.logger import Logger
from ..ports.exceptions import RewriteError
from ..domain.metric import (
    Metric,
    Metrics,
    Metadata,
    LabelValues,
    MetricLabelSet,
    QueryOptions,
    RangeQuery
)
from .entity_counter import EntityCounter
from .namespace_rewriter import (
    PROMETHEUS_BACKEND,
    RewriteFn,
    build_namespace_rewriters,
    scope_expression
)


class MonitoringServiceImpl(MonitoringService):
    """
    Concrete implementation of the MonitoringService port.
    Holds references to its backends only; every call builds its own response.
    """

    def __init__(
        self,
        monitoring_client: MonitoringClient,
        entity_counter: EntityCounter,
        rewriters: Optional[Mapping[str, RewriteFn]] = None,
        backend: str = PROMETHEUS_BACKEND,
        logger: Optional[Logger] = None
    ):
        """
        Initialize the monitoring service with its dependencies.

        Args:
            monitoring_client: Client for the time-series query engine
            entity_counter: Counter used for cluster and workspace statistics
            rewriters: Backend kind -> namespace rewrite function mapping
            backend: Kind of the active monitoring backend
            logger: Logger instance (optional)
        """
        self.monitoring_client = monitoring_client
        self.entity_counter = entity_counter
        self.rewriters = rewriters if rewriters is not None else build_namespace_rewriters()
        self.backend = backend
        self.logger = logger or logging.getLogger(__name__)

    async def get_metric(self, expr: str, namespace: str, time: datetime) -> Metric:
        # namespace is not applied to raw expressions
        return await self.monitoring_client.get_metric(expr, time)

    async def get_metric_over_time(
        self,
        expr: str,
        namespace: str,
        start: datetime,
        end: datetime,
        step: timedelta
    ) -> Metric:
        RangeQuery(start=start, end=end, step=step)
        return await self.monitoring_client.get_metric_over_time(expr, start, end, step)

    async def get_named_metrics(
        self,
        metrics: List[str],
        time: datetime,
        options: QueryOptions
    ) -> Metrics:
        try:
            results = await self.monitoring_client.get_named_metrics(metrics, time, options)
        except Exception as e:
            self.logger.error(f"Named metric query failed: {e}")
            results = [Metric.failed(name, str(e)) for name in metrics]

        return Metrics(results=self._align(metrics, results))

    async def get_named_metrics_over_time(
        self,
        metrics: List[str],
        start: datetime,
        end: datetime,
        step: timedelta,
        options: QueryOptions
    ) -> Metrics:
        RangeQuery(start=start, end=end, step=step)
        try:
            results = await self.monitoring_client.get_named_metrics_over_time(
                metrics, start, end, step, options
            )
        except Exception as e:
            self.logger.error(f"Named metric range query failed: {e}")
            results = [Metric.failed(name, str(e)) for name in metrics]

        return Metrics(results=self._align(metrics, results))

    async def get_metadata(self, namespace: str) -> Metadata:
        data = await self.monitoring_client.get_metadata(namespace)
        return Metadata(data=data)

    async def get_label_values(
        self,
        label: str,
        matches: List[str],
        start: datetime,
        end: datetime
    ) -> LabelValues:
        data = await self.monitoring_client.get_label_values(label, matches, start, end)
        return LabelValues(data=data)

    async def get_metric_label_set(
        self,
        metric: str,
        namespace: str,
        start: datetime,
        end: datetime
    ) -> MetricLabelSet:
        try:
            expr = scope_expression(self.rewriters, self.backend, metric, namespace)
        except RewriteError as e:
            # Dashboards keep rendering with an empty label set
            self.logger.error(
                f"Failed to scope metric '{metric}' to namespace '{namespace}' "
                f"for backend '{self.backend}': {e.message}"
            )
            return MetricLabelSet()

        data = await self.monitoring_client.get_metric_label_set(expr, start, end)
        return MetricLabelSet(data=data)

    async def get_cluster_stats(self) -> Metrics:
        counts = await self.entity_counter.count_cluster_stats()
        return Metrics(results=[count.to_metric() for count in counts])

    async def get_workspace_stats(self, workspace: str) -> Metrics:
        counts = await self.entity_counter.count_workspace_stats(workspace)
        return Metrics(results=[count.to_metric() for count in counts])

    def _align(self, names: List[str], results: List[Metric]) -> List[Metric]:
        """Return exactly one result per requested name, in request order."""
        if len(results) == len(names) and all(
            result.metric_name == name for name, result in zip(names, results)
        ):
            return list(results)

        pending: Dict[str, List[Metric]] = {}
        for result in results:
            pending.setdefault(result.metric_name, []).append(result)

        aligned = []
        for name in names:
            matches = pending.get(name)
            if matches:
                aligned.append(matches.pop(0))
            else:
                aligned.append(Metric.failed(name, "no result returned by the monitoring backend"))
        return aligned
