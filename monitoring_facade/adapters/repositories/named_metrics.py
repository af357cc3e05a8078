"""
PromQL templates for named metrics.
``$selector`` is replaced with the label matchers rendered from QueryOptions.
"""

from string import Template
from typing import Dict, Optional

from ...core.domain.metric import QueryOptions


NAMED_METRIC_TEMPLATES: Dict[str, str] = {
    # Cluster
    "cluster_cpu_utilisation": ":node_cpu_utilisation:avg1m",
    "cluster_cpu_usage": 'round(:node_cpu_utilisation:avg1m * sum(node:node_num_cpu:sum), 0.001)',
    "cluster_cpu_total": "sum(node:node_num_cpu:sum)",
    "cluster_memory_utilisation": ":node_memory_utilisation:",
    "cluster_memory_usage_wo_cache": "sum(node:node_memory_bytes_total:sum) - sum(node:node_memory_bytes_available:sum)",
    "cluster_memory_total": "sum(node:node_memory_bytes_total:sum)",
    "cluster_pod_running_count": 'cluster:pod_running:count',
    "cluster_node_online": 'sum(kube_node_status_condition{condition="Ready",status="true"})',
    "cluster_node_total": "sum(kube_node_info)",

    # Node
    "node_cpu_utilisation": "node:node_cpu_utilisation:avg1m{$selector}",
    "node_cpu_total": "node:node_num_cpu:sum{$selector}",
    "node_memory_utilisation": "node:node_memory_utilisation:{$selector}",
    "node_memory_total": "node:node_memory_bytes_total:sum{$selector}",
    "node_pod_running_count": "node:pod_running:count{$selector}",

    # Workspace
    "workspace_cpu_usage": "round(sum by (workspace) (namespace:container_cpu_usage_seconds_total:sum_rate{$selector}), 0.001)",
    "workspace_memory_usage_wo_cache": "sum by (workspace) (namespace:container_memory_usage_bytes_wo_cache:sum{$selector})",
    "workspace_pod_count": "sum by (workspace) (kube_pod_status_phase{phase!~\"Failed|Succeeded\"} * on (namespace) group_left(workspace) kube_namespace_labels{$selector})",

    # Namespace
    "namespace_cpu_usage": "round(namespace:container_cpu_usage_seconds_total:sum_rate{$selector}, 0.001)",
    "namespace_memory_usage": "namespace:container_memory_usage_bytes:sum{$selector}",
    "namespace_memory_usage_wo_cache": "namespace:container_memory_usage_bytes_wo_cache:sum{$selector}",
    "namespace_pod_count": "sum by (namespace) (kube_pod_status_phase{phase!~\"Failed|Succeeded\", $selector})",

    # Workload
    "workload_cpu_usage": "round(namespace:workload_cpu_usage:sum{$selector}, 0.001)",
    "workload_memory_usage": "namespace:workload_memory_usage:sum{$selector}",
    "workload_memory_usage_wo_cache": "namespace:workload_memory_usage_wo_cache:sum{$selector}",

    # Pod
    "pod_cpu_usage": "round(sum by (namespace, pod) (irate(container_cpu_usage_seconds_total{job=\"kubelet\", image!=\"\", $selector}[5m])), 0.001)",
    "pod_memory_usage": "sum by (namespace, pod) (container_memory_usage_bytes{job=\"kubelet\", image!=\"\", $selector})",
    "pod_memory_usage_wo_cache": "sum by (namespace, pod) (container_memory_working_set_bytes{job=\"kubelet\", image!=\"\", $selector})",

    # Container
    "container_cpu_usage": "round(sum by (namespace, pod, container) (irate(container_cpu_usage_seconds_total{job=\"kubelet\", container!=\"POD\", container!=\"\", image!=\"\", $selector}[5m])), 0.001)",
    "container_memory_usage": "sum by (namespace, pod, container) (container_memory_usage_bytes{job=\"kubelet\", container!=\"POD\", container!=\"\", image!=\"\", $selector})",
    "container_memory_usage_wo_cache": "sum by (namespace, pod, container) (container_memory_working_set_bytes{job=\"kubelet\", container!=\"POD\", container!=\"\", image!=\"\", $selector})",
}


def make_expression(metric_name: str, options: QueryOptions) -> Optional[str]:
    """
    Render the PromQL expression for a named metric.

    Returns:
        The expression, or None if the name is unknown
    """
    template = NAMED_METRIC_TEMPLATES.get(metric_name)
    if template is None:
        return None

    selector = options.selector()
    expression = Template(template).safe_substitute(selector=selector)
    # A trailing matcher separator is left behind when the selector is empty
    return expression.replace(", }", "}").replace("{}", "")
