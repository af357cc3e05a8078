"""
Kubernetes adapter for entity listing.
This implements the StateStore port using the Kubernetes API.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional, Tuple

from kubernetes import client, config
from kubernetes.client.rest import ApiException
from kubernetes.config.config_exception import ConfigException

from ...core.ports.state_store import StateStore
from ...core.ports.exceptions import ConfigurationError, StateStoreError
from ...core.domain.entity import EntityKind, LabelSelector


# (group, version, plural) of the custom resources backing each kind
CUSTOM_RESOURCES: Dict[EntityKind, Tuple[str, str, str]] = {
    EntityKind.CLUSTER: ("cluster.kubesphere.io", "v1alpha1", "clusters"),
    EntityKind.WORKSPACE: ("tenant.kubesphere.io", "v1alpha2", "workspacetemplates"),
    EntityKind.USER: ("iam.kubesphere.io", "v1alpha2", "users"),
    EntityKind.DEVOPS_PROJECT: ("devops.kubesphere.io", "v1alpha3", "devopsprojects"),
    EntityKind.MEMBER: ("iam.kubesphere.io", "v1alpha2", "workspacerolebindings"),
    EntityKind.ROLE: ("iam.kubesphere.io", "v1alpha2", "workspaceroles"),
}


def load_api_client(in_cluster: bool = False, kubeconfig: Optional[str] = None) -> client.ApiClient:
    """
    Build a Kubernetes API client from in-cluster credentials or a kubeconfig file.

    Raises:
        ConfigurationError: If no usable configuration is found
    """
    try:
        if in_cluster:
            config.load_incluster_config()
        else:
            config.load_kube_config(config_file=kubeconfig)
    except (ConfigException, OSError) as e:
        raise ConfigurationError("Unable to load Kubernetes configuration", str(e))
    return client.ApiClient()


class KubernetesStateStore(StateStore):
    """
    Kubernetes adapter that implements the StateStore port.
    Namespaces come from the core API, everything else from KubeSphere custom resources.
    """

    def __init__(self, api_client: client.ApiClient):
        """
        Initialize the Kubernetes state store.

        Args:
            api_client: Configured Kubernetes API client
        """
        self.logger = logging.getLogger(__name__)
        self.core_v1 = client.CoreV1Api(api_client)
        self.custom_objects = client.CustomObjectsApi(api_client)

    async def list(
        self,
        kind: EntityKind,
        selector: Optional[LabelSelector] = None
    ) -> List[Any]:
        label_selector = str(selector) if selector else ""
        try:
            # The generated client is blocking
            return await asyncio.to_thread(self._list, kind, label_selector)
        except ApiException as e:
            self.logger.error(f"Kubernetes API error listing {kind.value} (HTTP {e.status}): {e.reason}")
            raise StateStoreError(kind.value, e)
        except Exception as e:
            self.logger.error(f"Error listing {kind.value} from Kubernetes: {e}")
            raise StateStoreError(kind.value, e)

    async def health_check(self) -> bool:
        """
        Check if the Kubernetes API server answers list requests.

        Returns:
            True if healthy, False otherwise
        """
        try:
            await asyncio.to_thread(self.core_v1.list_namespace, limit=1)
            return True
        except Exception as e:
            self.logger.warning(f"Kubernetes health check failed: {e}")
            return False

    def _list(self, kind: EntityKind, label_selector: str) -> List[Any]:
        if kind == EntityKind.NAMESPACE:
            return list(self.core_v1.list_namespace(label_selector=label_selector).items)

        resource = CUSTOM_RESOURCES.get(kind)
        if resource is None:
            raise ValueError(f"no resource mapping for entity kind '{kind.value}'")

        group, version, plural = resource
        response = self.custom_objects.list_cluster_custom_object(
            group=group,
            version=version,
            plural=plural,
            label_selector=label_selector
        )
        return list(response.get("items", []))
