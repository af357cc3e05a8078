"""
GraphQL resolvers for the Monitoring Service.
Implements GraphQL query resolvers using the existing monitoring service.
"""

import strawberry
from typing import List, Optional
import logging
from datetime import datetime, timedelta, timezone

from ...core.ports.monitoring_service import MonitoringService
from ...core.ports.monitoring_client import MonitoringClient
from ...core.domain.metric import QueryOptions
from .types import (
    HealthStatus,
    LabelSet,
    MetricResult,
    QueryOptionsInput
)


# Global variables to store dependencies (will be set by create_graphql_query)
_monitoring_service: Optional[MonitoringService] = None
_monitoring_client: Optional[MonitoringClient] = None
_logger = logging.getLogger(__name__)

DEFAULT_STEP_SECONDS = 600.0
DEFAULT_LOOKBACK = timedelta(hours=1)


def _parse_datetime(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp; naive values are taken as UTC."""
    if not value:
        return None
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _service() -> MonitoringService:
    if _monitoring_service is None:
        raise Exception("Monitoring service not initialized")
    return _monitoring_service


@strawberry.type
class Query:
    """GraphQL Query resolvers for Monitoring Service."""

    @strawberry.field
    async def named_metrics(
        self,
        metrics: List[str],
        options: Optional[QueryOptionsInput] = None,
        time: Optional[str] = None,
        start: Optional[str] = None,
        end: Optional[str] = None,
        step_seconds: Optional[float] = None
    ) -> List[MetricResult]:
        """
        Evaluate named metrics. The range form is used when start and end are given.

        Returns:
            One result per requested metric, in request order
        """
        _logger.info(f"GraphQL query: namedMetrics - {len(metrics)} metrics")
        query_options = options.to_domain() if options else QueryOptions()

        if start or end:
            start_dt = _parse_datetime(start)
            end_dt = _parse_datetime(end)
            if start_dt is None or end_dt is None:
                raise Exception("start and end must be given together")
            step = timedelta(seconds=step_seconds if step_seconds is not None else DEFAULT_STEP_SECONDS)
            result = await _service().get_named_metrics_over_time(
                metrics, start_dt, end_dt, step, query_options
            )
        else:
            at = _parse_datetime(time) or datetime.now(timezone.utc)
            result = await _service().get_named_metrics(metrics, at, query_options)

        return [MetricResult.from_domain(m) for m in result.results]

    @strawberry.field
    async def metric_label_set(
        self,
        metric: str,
        namespace: str = "",
        start: Optional[str] = None,
        end: Optional[str] = None
    ) -> List[LabelSet]:
        """Get the label sets of a metric, restricted to a namespace when one is given."""
        _logger.info(f"GraphQL query: metricLabelSet - metric: {metric}, namespace: {namespace}")
        end_dt = _parse_datetime(end) or datetime.now(timezone.utc)
        start_dt = _parse_datetime(start) or end_dt - DEFAULT_LOOKBACK

        label_set = await _service().get_metric_label_set(metric, namespace, start_dt, end_dt)
        return [LabelSet.from_dict(labels) for labels in label_set.data]

    @strawberry.field
    async def cluster_stats(self) -> List[MetricResult]:
        """Count clusters, workspaces and users."""
        _logger.info("GraphQL query: clusterStats")
        stats = await _service().get_cluster_stats()
        return [MetricResult.from_domain(m) for m in stats.results]

    @strawberry.field
    async def workspace_stats(self, workspace: str) -> List[MetricResult]:
        """Count namespaces, DevOps projects, members and roles of a workspace."""
        _logger.info(f"GraphQL query: workspaceStats - workspace: {workspace}")
        stats = await _service().get_workspace_stats(workspace)
        return [MetricResult.from_domain(m) for m in stats.results]

    @strawberry.field
    async def monitoring_health(self) -> HealthStatus:
        """
        Get health status of the monitoring service and its query backend.

        Returns:
            HealthStatus object with service status information
        """
        _logger.info("GraphQL query: monitoringHealth")
        url = getattr(_monitoring_client, "url", "unknown")
        try:
            if _monitoring_client is None:
                raise Exception("Monitoring client not initialized")
            healthy = await _monitoring_client.health_check()

            return HealthStatus(
                status="healthy" if healthy else "degraded",
                service="monitoring",
                prometheus="healthy" if healthy else "unhealthy",
                prometheus_url=url,
                timestamp=datetime.now().isoformat()
            )
        except Exception as e:
            _logger.error(f"Health check failed: {e}")
            return HealthStatus(
                status="unhealthy",
                service="monitoring",
                prometheus="unhealthy",
                prometheus_url=url,
                timestamp=datetime.now().isoformat()
            )


def create_graphql_query(monitoring_service: MonitoringService, monitoring_client: MonitoringClient) -> type:
    """
    Factory function to create GraphQL Query with injected dependencies.

    Args:
        monitoring_service: Implementation of the MonitoringService port
        monitoring_client: Query engine client, used for health checks

    Returns:
        Query type bound to the injected dependencies
    """
    global _monitoring_service, _monitoring_client
    _monitoring_service = monitoring_service
    _monitoring_client = monitoring_client
    return Query
