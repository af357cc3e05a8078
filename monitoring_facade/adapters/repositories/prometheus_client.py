"""
Prometheus adapter for metric queries.
This implements the MonitoringClient port on top of the Prometheus HTTP API.
"""

from typing import Any, Dict, List, Optional
from datetime import datetime, timedelta, timezone
import logging

import httpx

from ...core.ports.monitoring_client import MonitoringClient
from ...core.ports.exceptions import BackendError, ExternalServiceError
from ...core.domain.metric import (
    Metric,
    MetricData,
    MetricType,
    MetricValue,
    Point,
    QueryOptions,
    quote_label_value
)
from .named_metrics import make_expression


class PrometheusClient(MonitoringClient):
    """
    Prometheus adapter that implements the MonitoringClient port.
    Query failures are returned as Metric errors, never raised.
    """

    def __init__(
        self,
        url: str,
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None
    ):
        """
        Initialize the Prometheus client.

        Args:
            url: Prometheus server URL (e.g., 'http://prometheus:9090')
            timeout: Request timeout in seconds
            client: Preconfigured HTTP client (optional, used in tests)
        """
        self.url = url.rstrip("/")
        self.timeout = timeout
        self.logger = logging.getLogger(__name__)
        self.client = client or httpx.AsyncClient(base_url=self.url, timeout=timeout)

    async def get_metric(self, expr: str, time: datetime) -> Metric:
        params = {"query": expr, "time": self._format_time(time)}
        return await self._query("/api/v1/query", params, metric_name="")

    async def get_metric_over_time(
        self,
        expr: str,
        start: datetime,
        end: datetime,
        step: timedelta
    ) -> Metric:
        params = {
            "query": expr,
            "start": self._format_time(start),
            "end": self._format_time(end),
            "step": self._format_step(step)
        }
        return await self._query("/api/v1/query_range", params, metric_name="")

    async def get_named_metrics(
        self,
        metrics: List[str],
        time: datetime,
        options: QueryOptions
    ) -> List[Metric]:
        results = []
        for name in metrics:
            expr = make_expression(name, options)
            if expr is None:
                results.append(Metric.failed(name, f"metric '{name}' is not supported"))
                continue
            params = {"query": expr, "time": self._format_time(time)}
            results.append(await self._query("/api/v1/query", params, metric_name=name))
        return results

    async def get_named_metrics_over_time(
        self,
        metrics: List[str],
        start: datetime,
        end: datetime,
        step: timedelta,
        options: QueryOptions
    ) -> List[Metric]:
        results = []
        for name in metrics:
            expr = make_expression(name, options)
            if expr is None:
                results.append(Metric.failed(name, f"metric '{name}' is not supported"))
                continue
            params = {
                "query": expr,
                "start": self._format_time(start),
                "end": self._format_time(end),
                "step": self._format_step(step)
            }
            results.append(await self._query("/api/v1/query_range", params, metric_name=name))
        return results

    async def get_metadata(self, namespace: str) -> List[dict]:
        """
        Fetch target metadata, limited to targets in ``namespace`` when given.
        Entries are deduplicated by metric name.
        """
        params = {}
        if namespace:
            params["match_target"] = f'{{namespace={quote_label_value(namespace)}}}'

        try:
            data = await self._get("/api/v1/targets/metadata", params)
        except BackendError as e:
            self.logger.error(f"Error fetching metadata from Prometheus: {e}")
            return []

        seen = set()
        metadata = []
        for entry in data or []:
            name = entry.get("metric")
            if not name or name in seen:
                continue
            seen.add(name)
            metadata.append({
                "metric": name,
                "type": entry.get("type", ""),
                "help": entry.get("help", "")
            })
        return metadata

    async def get_label_values(
        self,
        label: str,
        matches: List[str],
        start: datetime,
        end: datetime
    ) -> List[str]:
        params = {
            "match[]": list(matches or []),
            "start": self._format_time(start),
            "end": self._format_time(end)
        }
        try:
            data = await self._get(f"/api/v1/label/{label}/values", params)
        except BackendError as e:
            self.logger.error(f"Error fetching values of label '{label}' from Prometheus: {e}")
            return []
        return list(data or [])

    async def get_metric_label_set(
        self,
        expr: str,
        start: datetime,
        end: datetime
    ) -> List[dict]:
        params = {
            "match[]": [expr],
            "start": self._format_time(start),
            "end": self._format_time(end)
        }
        try:
            data = await self._get("/api/v1/series", params)
        except BackendError as e:
            self.logger.error(f"Error fetching label sets for '{expr}' from Prometheus: {e}")
            return []

        label_sets = []
        for series in data or []:
            labels = {k: v for k, v in series.items() if k != "__name__"}
            label_sets.append(labels)
        return label_sets

    async def health_check(self) -> bool:
        """
        Check if Prometheus is ready to serve queries.

        Returns:
            True if healthy, False otherwise
        """
        try:
            response = await self.client.get("/-/ready")
            return response.status_code == 200
        except httpx.HTTPError as e:
            self.logger.warning(f"Prometheus health check failed: {e}")
            return False

    async def close(self):
        """Close the underlying HTTP client."""
        await self.client.aclose()
        self.logger.info("Prometheus client connection closed")

    async def _query(self, path: str, params: Dict[str, Any], metric_name: str) -> Metric:
        self.logger.debug(f"Executing Prometheus query: {params.get('query')}")
        try:
            data = await self._get(path, params)
        except BackendError as e:
            self.logger.error(f"Prometheus query failed: {e}")
            error = f"{e.message}: {e.details}" if e.details else e.message
            return Metric.failed(metric_name, error)

        try:
            metric_data = self._parse_query_data(data)
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            self.logger.error(f"Unexpected Prometheus query payload for '{params.get('query')}': {e}")
            return Metric.failed(metric_name, f"Unexpected response from Prometheus: {e}")

        return Metric(metric_name=metric_name, metric_data=metric_data)

    async def _get(self, path: str, params: Dict[str, Any]) -> Any:
        """
        Issue a GET against the Prometheus API and unwrap the ``data`` field.

        Raises:
            ExternalServiceError: If Prometheus is unreachable or answers with an error status
            BackendError: If the response body is not a valid API envelope
        """
        try:
            response = await self.client.get(path, params=params)
        except httpx.HTTPError as e:
            raise ExternalServiceError("prometheus", response_body=str(e))

        try:
            body = response.json()
        except ValueError as e:
            if response.status_code >= 400:
                raise ExternalServiceError(
                    "prometheus", status_code=response.status_code, response_body=response.text
                )
            raise BackendError("Invalid response from Prometheus", e)

        if not isinstance(body, dict):
            raise BackendError("Invalid response from Prometheus", ValueError("response body is not a JSON object"))

        if body.get("status") != "success":
            raise ExternalServiceError(
                "prometheus",
                status_code=response.status_code if response.status_code >= 400 else None,
                response_body=f"{body.get('errorType', 'error')}: {body.get('error', 'unknown error')}"
            )
        return body.get("data")

    def _parse_query_data(self, data: Dict[str, Any]) -> MetricData:
        """
        Convert the ``data`` field of a query response to MetricData.

        Raises:
            ValueError: If the payload is missing or has an unsupported result type
        """
        if not isinstance(data, dict):
            raise ValueError("response carries no query data")

        result_type = data.get("resultType")
        result = data.get("result") or []

        if result_type not in (MetricType.VECTOR, MetricType.MATRIX, "scalar"):
            # String results carry no numeric samples
            raise ValueError(f"result type '{result_type}' is not supported")

        if result_type == MetricType.MATRIX:
            values = [
                MetricValue(
                    metadata=dict(item.get("metric", {})),
                    series=[self._parse_point(p) for p in item.get("values", [])]
                )
                for item in result
            ]
            return MetricData(metric_type=MetricType.MATRIX, metric_values=values)

        if result_type == "scalar":
            # Scalars have no labels, expose them as a single-sample vector
            return MetricData(
                metric_type=MetricType.VECTOR,
                metric_values=[MetricValue(sample=self._parse_point(result))]
            )

        values = [
            MetricValue(
                metadata=dict(item.get("metric", {})),
                sample=self._parse_point(item.get("value"))
            )
            for item in result
        ]
        return MetricData(metric_type=MetricType.VECTOR, metric_values=values)

    @staticmethod
    def _parse_point(raw) -> Point:
        timestamp, value = raw
        return Point(timestamp=float(timestamp), value=float(value))

    @staticmethod
    def _format_time(dt: datetime) -> str:
        """Format a datetime as unix seconds; naive datetimes are taken as UTC."""
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        return f"{dt.timestamp():.3f}"

    @staticmethod
    def _format_step(step: timedelta) -> str:
        return f"{step.total_seconds():g}s"
