"""
Test configuration and fixtures for unit tests.
"""

import sys
from pathlib import Path

# Add project root directory to Python path so the package can be found
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root))

import pytest
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

from monitoring_facade.core.domain.entity import EntityKind
from monitoring_facade.core.domain.metric import Metric
from monitoring_facade.core.ports.monitoring_client import MonitoringClient
from monitoring_facade.core.ports.state_store import StateStore
from monitoring_facade.core.ports.logger import Logger


FIXED_NOW = datetime(2024, 3, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def fixed_clock():
    """Fixture providing a clock frozen at FIXED_NOW."""
    return lambda: FIXED_NOW


@pytest.fixture
def mock_monitoring_client():
    """Fixture providing a mock MonitoringClient."""
    mock_client = MagicMock(spec=MonitoringClient)

    mock_client.get_metric = AsyncMock(return_value=Metric.vector("", 1709294400.0, 1.0))
    mock_client.get_metric_over_time = AsyncMock(return_value=Metric.vector("", 1709294400.0, 1.0))
    mock_client.get_named_metrics = AsyncMock(
        side_effect=lambda names, time, options: [Metric.vector(n, 1709294400.0, 1.0) for n in names]
    )
    mock_client.get_named_metrics_over_time = AsyncMock(
        side_effect=lambda names, start, end, step, options: [Metric.vector(n, 1709294400.0, 1.0) for n in names]
    )
    mock_client.get_metadata = AsyncMock(return_value=[{"metric": "up", "type": "gauge", "help": ""}])
    mock_client.get_label_values = AsyncMock(return_value=["kube-system", "default"])
    mock_client.get_metric_label_set = AsyncMock(return_value=[{"namespace": "team-a", "pod": "web-0"}])
    mock_client.health_check = AsyncMock(return_value=True)

    return mock_client


@pytest.fixture
def store_items():
    """Number of objects the mock state store returns per entity kind."""
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
def mock_state_store(store_items):
    """Fixture providing a mock StateStore backed by store_items."""
    mock_store = MagicMock(spec=StateStore)

    async def list_objects(kind, selector=None):
        return [{"kind": kind.value, "index": i} for i in range(store_items[kind])]

    mock_store.list = AsyncMock(side_effect=list_objects)
    mock_store.health_check = AsyncMock(return_value=True)

    return mock_store


@pytest.fixture
def mock_logger():
    """Fixture providing a mock Logger."""
    mock_logger = MagicMock(spec=Logger)
    return mock_logger
