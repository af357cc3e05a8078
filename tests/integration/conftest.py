"""
Configuration for integration tests.

The application is driven in-process through httpx.ASGITransport. Prometheus is
served by an httpx.MockTransport and the Kubernetes state store is mocked.
"""

import sys
from pathlib import Path

# Add project root directory to Python path so the package can be found
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root))

import pytest
import httpx
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

from monitoring_facade.main import create_app
from monitoring_facade.core.domain.entity import EntityKind
from monitoring_facade.core.ports.state_store import StateStore
from monitoring_facade.core.services.entity_counter import EntityCounter
from monitoring_facade.core.services.monitoring_service_impl import MonitoringServiceImpl
from monitoring_facade.core.services.namespace_rewriter import build_namespace_rewriters
from monitoring_facade.adapters.repositories.prometheus_client import PrometheusClient


PROMETHEUS_URL = "http://prometheus:9090"
FIXED_NOW = datetime(2024, 3, 1, 12, 0, 0, tzinfo=timezone.utc)


def _success(data):
    return httpx.Response(200, json={"status": "success", "data": data})


def prometheus_handler(request: httpx.Request) -> httpx.Response:
    """Answer Prometheus HTTP API requests with canned data."""
    path = request.url.path
    params = request.url.params

    if path == "/-/ready":
        return httpx.Response(200, text="Prometheus is Ready.")

    if path in ("/api/v1/query", "/api/v1/query_range"):
        query = params["query"]
        if "syntax_error" in query:
            return httpx.Response(400, json={
                "status": "error",
                "errorType": "bad_data",
                "error": "1:12: parse error: unexpected end of input"
            })
        if path == "/api/v1/query":
            return _success({
                "resultType": "vector",
                "result": [
                    {"metric": {"job": "api"}, "value": [1709294400, "1"]},
                    {"metric": {"job": "db"}, "value": [1709294400, "NaN"]}
                ]
            })
        return _success({
            "resultType": "matrix",
            "result": [{
                "metric": {"job": "api"},
                "values": [[1709290800, "0.5"], [1709291400, "0.75"]]
            }]
        })

    if path == "/api/v1/targets/metadata":
        return _success([
            {"target": {"job": "api"}, "metric": "up", "type": "gauge", "help": "Target is up"},
            {"target": {"job": "db"}, "metric": "up", "type": "gauge", "help": "Target is up"}
        ])

    if path.startswith("/api/v1/label/"):
        return _success(["default", "kube-system", "team-a"])

    if path == "/api/v1/series":
        return _success([
            {"__name__": "up", "namespace": "team-a", "pod": "web-0"},
            {"__name__": "up", "namespace": "team-a", "pod": "web-1"}
        ])

    return httpx.Response(404, text="404 page not found")


@pytest.fixture
def prometheus_requests():
    """Requests received by the mock Prometheus, in order."""
    return []


@pytest.fixture
def monitoring_client(prometheus_requests):
    """PrometheusClient backed by the mock Prometheus."""
    def handler(request):
        prometheus_requests.append(request)
        return prometheus_handler(request)

    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url=PROMETHEUS_URL)
    return PrometheusClient(url=PROMETHEUS_URL, client=http_client)


@pytest.fixture
def store_items():
    """Number of objects the state store returns per entity kind."""
    return {
        EntityKind.CLUSTER: 0,
        EntityKind.WORKSPACE: 3,
        EntityKind.USER: 5,
        EntityKind.NAMESPACE: 4,
        EntityKind.DEVOPS_PROJECT: 2,
        EntityKind.MEMBER: 7,
        EntityKind.ROLE: 4,
    }


@pytest.fixture
def state_store(store_items):
    """Mock StateStore backed by store_items."""
    store = MagicMock(spec=StateStore)

    async def list_objects(kind, selector=None):
        count = store_items[kind]
        if isinstance(count, Exception):
            raise count
        return [{"kind": kind.value}] * count

    store.list = AsyncMock(side_effect=list_objects)
    store.health_check = AsyncMock(return_value=True)
    return store


@pytest.fixture
def monitoring_service(monitoring_client, state_store):
    """MonitoringServiceImpl wired to the mock backends."""
    return MonitoringServiceImpl(
        monitoring_client=monitoring_client,
        entity_counter=EntityCounter(state_store, clock=lambda: FIXED_NOW),
        rewriters=build_namespace_rewriters()
    )


@pytest.fixture
def app(monitoring_service, monitoring_client, state_store):
    """FastAPI application under test."""
    return create_app(
        monitoring_service=monitoring_service,
        monitoring_client=monitoring_client,
        state_store=state_store
    )


@pytest.fixture
def api_base():
    """API base path."""
    return "/api/v1/monitoring"


@pytest.fixture
def graphql_url():
    """GraphQL endpoint path."""
    return "/api/v1/graphql"


@pytest.fixture
async def http_client(app):
    """HTTP client for testing."""
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test", timeout=30.0) as client:
        yield client


@pytest.fixture
def sample_time_range():
    """Sample time range as unix seconds."""
    return "1709290800", "1709294400"
