"""
Unit tests for the metric and entity domain objects.
"""

import pytest
from datetime import datetime, timedelta, timezone

from monitoring_facade.core.domain.metric import (
    Metric,
    MetricData,
    MetricType,
    Metrics,
    MonitoringLevel,
    QueryOptions,
    RangeQuery
)
from monitoring_facade.core.domain.entity import (
    EntityCount,
    EntityKind,
    LabelSelector,
    USER_REFERENCE_LABEL
)
from monitoring_facade.core.ports.exceptions import InvalidQueryError


class TestMetric:
    """Test cases for the Metric value object."""

    def test_vector_builds_single_sample(self):
        metric = Metric.vector("cluster_cpu_usage", 100.0, 2.5)

        assert metric.metric_name == "cluster_cpu_usage"
        assert metric.metric_data.metric_type == MetricType.VECTOR
        assert len(metric.metric_data.metric_values) == 1
        assert metric.metric_data.metric_values[0].sample.value == 2.5
        assert not metric.is_error

    def test_failed_carries_only_error(self):
        metric = Metric.failed("cluster_cpu_usage", "timeout")

        assert metric.is_error
        assert metric.metric_data is None
        assert metric.error == "timeout"

    def test_data_and_error_are_exclusive(self):
        with pytest.raises(ValueError):
            Metric(metric_name="x", metric_data=MetricData(metric_type=MetricType.VECTOR), error="boom")

    def test_metrics_lookup_by_name(self):
        metrics = Metrics(results=[Metric.vector("a", 1.0, 1.0), Metric.failed("b", "err")])

        assert metrics.get_metric_by_name("b").error == "err"
        assert metrics.get_metric_by_name("missing") is None


class TestRangeQuery:
    """Test cases for range validation."""

    def test_valid_range(self):
        start = datetime(2024, 1, 1, tzinfo=timezone.utc)
        query = RangeQuery(start=start, end=start + timedelta(hours=1), step=timedelta(minutes=1))
        assert query.step == timedelta(minutes=1)

    def test_start_equal_to_end_is_allowed(self):
        start = datetime(2024, 1, 1, tzinfo=timezone.utc)
        RangeQuery(start=start, end=start, step=timedelta(seconds=15))

    def test_start_after_end_is_rejected(self):
        end = datetime(2024, 1, 1, tzinfo=timezone.utc)
        with pytest.raises(InvalidQueryError):
            RangeQuery(start=end + timedelta(seconds=1), end=end, step=timedelta(minutes=1))

    @pytest.mark.parametrize("step", [timedelta(0), timedelta(seconds=-30)])
    def test_non_positive_step_is_rejected(self, step):
        start = datetime(2024, 1, 1, tzinfo=timezone.utc)
        with pytest.raises(InvalidQueryError):
            RangeQuery(start=start, end=start + timedelta(hours=1), step=step)


class TestQueryOptions:
    """Test cases for selector rendering."""

    def test_cluster_level_has_no_matchers(self):
        assert QueryOptions().selector() == ""

    def test_namespace_level_with_name(self):
        options = QueryOptions(level=MonitoringLevel.NAMESPACE, namespace_name="team-a")
        assert options.selector() == 'namespace="team-a"'

    def test_resource_filter_used_without_name(self):
        options = QueryOptions(level=MonitoringLevel.NODE, resource_filter="worker-.*")
        assert options.selector() == 'node=~"worker-.*"'

    def test_pod_level(self):
        options = QueryOptions(level=MonitoringLevel.POD, namespace_name="team-a", pod_name="web-0")
        assert options.selector() == 'namespace="team-a", pod="web-0"'

    def test_workload_level(self):
        options = QueryOptions(
            level=MonitoringLevel.WORKLOAD,
            namespace_name="team-a",
            workload_kind="Deployment",
            resource_filter="web.*"
        )
        assert options.selector() == 'namespace="team-a", owner_kind="Deployment", owner_name=~"web.*"'

    def test_quote_in_name_is_escaped(self):
        options = QueryOptions(level=MonitoringLevel.NAMESPACE, namespace_name='a"} or up{b="')
        assert options.selector() == 'namespace="a\\"} or up{b=\\""'

    def test_backslash_in_filter_is_escaped(self):
        options = QueryOptions(level=MonitoringLevel.POD, resource_filter=r"web-\d+")
        assert options.selector() == 'pod=~"web-\\\\d+"'


class TestEntityCount:
    """Test cases for entity counts."""

    def test_to_metric_success(self):
        now = datetime(2024, 3, 1, 12, 0, 0, tzinfo=timezone.utc)
        metric = EntityCount(kind=EntityKind.USER, timestamp=now, value=5).to_metric()

        assert metric.metric_name == "kubesphere_user_count"
        sample = metric.metric_data.metric_values[0].sample
        assert sample.value == 5.0
        assert sample.timestamp == now.timestamp()

    def test_to_metric_failure(self):
        now = datetime(2024, 3, 1, tzinfo=timezone.utc)
        metric = EntityCount(kind=EntityKind.ROLE, timestamp=now, error="forbidden").to_metric()

        assert metric.metric_name == "workspace_role_count"
        assert metric.error == "forbidden"
        assert metric.metric_data is None

    def test_negative_value_is_rejected(self):
        with pytest.raises(ValueError):
            EntityCount(kind=EntityKind.USER, timestamp=datetime.now(timezone.utc), value=-1)

    def test_failed_count_cannot_carry_value(self):
        with pytest.raises(ValueError):
            EntityCount(kind=EntityKind.USER, timestamp=datetime.now(timezone.utc), value=1, error="x")

    def test_every_kind_has_a_metric_name(self):
        names = {kind.metric_name for kind in EntityKind}
        assert len(names) == len(EntityKind)


class TestLabelSelector:
    """Test cases for label selector rendering."""

    def test_workspace_selector(self):
        assert str(LabelSelector.for_workspace("ws1")) == "kubesphere.io/workspace=ws1"

    def test_with_label_adds_existence_requirement(self):
        selector = LabelSelector.for_workspace("ws1")
        member_selector = selector.with_label(USER_REFERENCE_LABEL)

        assert str(member_selector) == "kubesphere.io/workspace=ws1,iam.kubesphere.io/user-ref"
        # The original selector is left untouched
        assert str(selector) == "kubesphere.io/workspace=ws1"

    def test_empty_selector(self):
        assert str(LabelSelector()) == ""
