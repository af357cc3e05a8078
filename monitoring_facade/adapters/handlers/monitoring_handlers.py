"""
FastAPI handlers for monitoring endpoints.
These handlers implement the REST API interface for the monitoring service.
"""

from fastapi import APIRouter, HTTPException, Query
from typing import Awaitable, List, Optional
from datetime import datetime, timedelta, timezone
import logging
import re

from ...core.ports.monitoring_service import MonitoringService
from ...core.ports.exceptions import InvalidQueryError, ExternalServiceError, MonitoringServiceError
from ...core.domain.metric import MonitoringLevel, QueryOptions
from ..models import (
    MetricModel,
    MetricsResponse,
    MetadataResponse,
    LabelValuesResponse,
    MetricLabelSetResponse,
    ErrorResponse
)


DEFAULT_STEP = timedelta(minutes=10)
DEFAULT_LOOKBACK = timedelta(hours=1)

_DURATION = re.compile(r"^(?:(\d+)w)?(?:(\d+)d)?(?:(\d+)h)?(?:(\d+)m)?(?:(\d+)s)?(?:(\d+)ms)?$")


class MonitoringHandlers:
    """
    FastAPI handlers for monitoring endpoints.
    Each route parses its parameters and delegates to the MonitoringService port.
    """

    def __init__(self, monitoring_service: MonitoringService, prefix: str = "/api/v1/monitoring"):
        """
        Initialize handlers with monitoring service dependency.

        Args:
            monitoring_service: Implementation of the MonitoringService port
            prefix: Route prefix for the router
        """
        self.monitoring_service = monitoring_service
        self.logger = logging.getLogger(__name__)

        # Create FastAPI router
        self.router = APIRouter(prefix=prefix, tags=["monitoring"])
        self._setup_routes()

        route_count = len(self.router.routes)
        self.logger.info(f"Monitoring router initialized with {route_count} routes")

    def _setup_routes(self):
        """Setup FastAPI routes."""
        error_responses = {
            400: {"model": ErrorResponse},
            422: {"model": ErrorResponse},
            500: {"model": ErrorResponse},
            502: {"model": ErrorResponse}
        }

        @self.router.get(
            "/query",
            response_model=MetricModel,
            responses=error_responses,
            summary="Instant Query",
            description="Evaluate an expression at a single instant"
        )
        async def instant_query(
            expr: str = Query(..., description="Query expression"),
            namespace: str = Query("", description="Namespace scope"),
            time: Optional[str] = Query(None, description="Evaluation time (ISO format or unix seconds), defaults to now")
        ):
            self.logger.info(f"GET /query called with expr={expr}")
            at = self._require_time(time, "time") if time else self._now()
            metric = await self._call(
                self.monitoring_service.get_metric(expr, namespace, at), "instant query"
            )
            return MetricModel.from_domain(metric)

        @self.router.get(
            "/query_range",
            response_model=MetricModel,
            responses=error_responses,
            summary="Range Query",
            description="Evaluate an expression over a time range at a fixed step"
        )
        async def range_query(
            expr: str = Query(..., description="Query expression"),
            start: str = Query(..., description="Range start (ISO format or unix seconds)"),
            end: str = Query(..., description="Range end (ISO format or unix seconds)"),
            step: str = Query("10m", description="Resolution step (e.g. '30s', '5m') or seconds"),
            namespace: str = Query("", description="Namespace scope")
        ):
            self.logger.info(f"GET /query_range called with expr={expr}")
            metric = await self._call(
                self.monitoring_service.get_metric_over_time(
                    expr,
                    namespace,
                    self._require_time(start, "start"),
                    self._require_time(end, "end"),
                    self._parse_step(step)
                ),
                "range query"
            )
            return MetricModel.from_domain(metric)

        @self.router.get(
            "/metrics",
            response_model=MetricsResponse,
            responses=error_responses,
            summary="Named Metrics",
            description="Evaluate named metrics; range form when start and end are given"
        )
        async def named_metrics(
            metrics: List[str] = Query(..., description="Metric names, in response order"),
            level: MonitoringLevel = Query(MonitoringLevel.CLUSTER, description="Resource level"),
            resources_filter: Optional[str] = Query(None, description="Regex over resource names"),
            node: Optional[str] = Query(None),
            workspace: Optional[str] = Query(None),
            namespace: Optional[str] = Query(None),
            workload_kind: Optional[str] = Query(None),
            workload: Optional[str] = Query(None),
            pod: Optional[str] = Query(None),
            container: Optional[str] = Query(None),
            time: Optional[str] = Query(None, description="Evaluation time for instant queries"),
            start: Optional[str] = Query(None, description="Range start"),
            end: Optional[str] = Query(None, description="Range end"),
            step: Optional[str] = Query(None, description="Resolution step for range queries")
        ):
            options = QueryOptions(
                level=level,
                resource_filter=resources_filter,
                node_name=node,
                workspace_name=workspace,
                namespace_name=namespace,
                workload_kind=workload_kind,
                workload_name=workload,
                pod_name=pod,
                container_name=container
            )
            self.logger.info(f"GET /metrics called for {len(metrics)} metrics at level {level.value}")

            if start or end:
                if not (start and end):
                    raise HTTPException(
                        status_code=422,
                        detail={
                            "error": "Validation error",
                            "message": "start and end must be given together"
                        }
                    )
                result = await self._call(
                    self.monitoring_service.get_named_metrics_over_time(
                        metrics,
                        self._require_time(start, "start"),
                        self._require_time(end, "end"),
                        self._parse_step(step) if step else DEFAULT_STEP,
                        options
                    ),
                    "named metrics range query"
                )
            else:
                at = self._require_time(time, "time") if time else self._now()
                result = await self._call(
                    self.monitoring_service.get_named_metrics(metrics, at, options),
                    "named metrics query"
                )
            return MetricsResponse.from_domain(result)

        @self.router.get(
            "/metadata",
            response_model=MetadataResponse,
            summary="Metric Metadata",
            description="Get metric metadata, optionally limited to a namespace"
        )
        async def metadata(namespace: str = Query("", description="Namespace scope")):
            result = await self._call(self.monitoring_service.get_metadata(namespace), "metadata lookup")
            return MetadataResponse.from_domain(result)

        @self.router.get(
            "/labels/{label}/values",
            response_model=LabelValuesResponse,
            responses=error_responses,
            summary="Label Values",
            description="Get the values of a label across matching series"
        )
        async def label_values(
            label: str,
            match: List[str] = Query([], alias="match[]", description="Series selectors"),
            start: Optional[str] = Query(None, description="Range start, defaults to one hour before end"),
            end: Optional[str] = Query(None, description="Range end, defaults to now")
        ):
            range_start, range_end = self._lookback_range(start, end)
            result = await self._call(
                self.monitoring_service.get_label_values(label, match, range_start, range_end),
                "label values lookup"
            )
            return LabelValuesResponse.from_domain(result)

        @self.router.get(
            "/labelsets",
            response_model=MetricLabelSetResponse,
            responses=error_responses,
            summary="Metric Label Sets",
            description="Get the label sets of a metric, restricted to a namespace when one is given"
        )
        async def metric_label_set(
            metric: str = Query(..., description="Metric name or selector"),
            namespace: str = Query("", description="Namespace scope"),
            start: Optional[str] = Query(None, description="Range start, defaults to one hour before end"),
            end: Optional[str] = Query(None, description="Range end, defaults to now")
        ):
            range_start, range_end = self._lookback_range(start, end)
            result = await self._call(
                self.monitoring_service.get_metric_label_set(metric, namespace, range_start, range_end),
                "label set lookup"
            )
            return MetricLabelSetResponse.from_domain(result)

        @self.router.get(
            "/stats/cluster",
            response_model=MetricsResponse,
            summary="Cluster Statistics",
            description="Count clusters, workspaces and users"
        )
        async def cluster_stats():
            self.logger.info("GET /stats/cluster called")
            result = await self._call(self.monitoring_service.get_cluster_stats(), "cluster statistics")
            return MetricsResponse.from_domain(result)

        @self.router.get(
            "/stats/workspaces/{workspace}",
            response_model=MetricsResponse,
            summary="Workspace Statistics",
            description="Count namespaces, DevOps projects, members and roles of a workspace"
        )
        async def workspace_stats(workspace: str):
            self.logger.info(f"GET /stats/workspaces/{workspace} called")
            result = await self._call(
                self.monitoring_service.get_workspace_stats(workspace), "workspace statistics"
            )
            return MetricsResponse.from_domain(result)

    async def _call(self, operation: Awaitable, action: str):
        """Await a service call, mapping domain errors to HTTP errors."""
        try:
            return await operation

        except InvalidQueryError as e:
            self.logger.warning(f"Invalid {action}: {e.message}")
            raise HTTPException(
                status_code=400,
                detail={
                    "error": "Invalid query",
                    "message": e.message,
                    "details": e.details
                }
            )

        except ExternalServiceError as e:
            self.logger.error(f"External service error during {action}: {e}")
            raise HTTPException(
                status_code=502,
                detail={
                    "error": "External service unavailable",
                    "message": e.message,
                    "service": e.service_name
                }
            )

        except MonitoringServiceError as e:
            # Formatted by the application-wide handlers in core.util.errorhandling
            self.logger.error(f"Service error during {action}: {e}")
            raise

        except Exception as e:
            self.logger.error(f"Unexpected error in {action}: {e}")
            raise HTTPException(
                status_code=500,
                detail={
                    "error": "Internal server error",
                    "message": f"An unexpected error occurred during {action}"
                }
            )

    def _lookback_range(self, start: Optional[str], end: Optional[str]):
        range_end = self._require_time(end, "end") if end else self._now()
        range_start = self._require_time(start, "start") if start else range_end - DEFAULT_LOOKBACK
        return range_start, range_end

    def _require_time(self, value: str, field: str) -> datetime:
        parsed = self._parse_datetime(value)
        if parsed is None:
            raise HTTPException(
                status_code=422,
                detail={
                    "error": "Invalid datetime format",
                    "message": f"{field} must be a valid ISO format timestamp or unix seconds"
                }
            )
        return parsed

    def _parse_datetime(self, datetime_str: Optional[str]) -> Optional[datetime]:
        """Parse an ISO-8601 string or unix seconds to an aware datetime."""
        if not datetime_str:
            return None

        try:
            return datetime.fromtimestamp(float(datetime_str), tz=timezone.utc)
        except (ValueError, OverflowError, OSError):
            pass

        try:
            # Handle ISO format with Z suffix
            if datetime_str.endswith('Z'):
                datetime_str = datetime_str[:-1] + '+00:00'

            parsed = datetime.fromisoformat(datetime_str)
            if parsed.tzinfo is None:
                parsed = parsed.replace(tzinfo=timezone.utc)
            return parsed

        except ValueError:
            self.logger.warning(f"Invalid datetime format: {datetime_str}")
            return None

    def _parse_step(self, step: str) -> timedelta:
        """Parse a Prometheus duration ('1h30m', '15s') or a number of seconds."""
        try:
            return timedelta(seconds=float(step))
        except (ValueError, OverflowError):
            pass

        match = _DURATION.match(step.strip()) if step else None
        if not match or not any(match.groups()):
            raise HTTPException(
                status_code=422,
                detail={
                    "error": "Invalid step",
                    "message": f"'{step}' is not a valid duration"
                }
            )

        weeks, days, hours, minutes, seconds, millis = (int(g) if g else 0 for g in match.groups())
        return timedelta(
            weeks=weeks, days=days, hours=hours,
            minutes=minutes, seconds=seconds, milliseconds=millis
        )

    @staticmethod
    def _now() -> datetime:
        return datetime.now(timezone.utc)
