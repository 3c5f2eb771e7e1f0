# src/kubeglance/clients/kubernetes/k8s_client.py
"""Kubernetes client set bound to a single kubeconfig context."""

import asyncio
from typing import Dict, Any, List, Optional, Tuple
import structlog
from kubernetes import client, config

from kubeglance.clients.kubernetes.kubeconfig import KubeConfig
from kubeglance.core.base_client import BaseClient
from kubeglance.core.exceptions import ClientConnectionException
from kubeglance.models.resource_kinds import ResourceKind

logger = structlog.get_logger(__name__)


class KubernetesClient(BaseClient):
    """Typed API handles for one context plus per-kind retrieval.

    Every retrieval returns plain JSON-shaped dicts (camelCase keys), the same
    shape ``kubectl -o json`` produces.
    """

    API_CALLS: Dict[ResourceKind, Tuple[str, str]] = {
        ResourceKind.VERSION: ("version_api", "get_code"),
        ResourceKind.NODES: ("core_v1", "list_node"),
        ResourceKind.NAMESPACES: ("core_v1", "list_namespace"),
        ResourceKind.PODS: ("core_v1", "list_pod_for_all_namespaces"),
        ResourceKind.DEPLOYMENTS: ("apps_v1", "list_deployment_for_all_namespaces"),
        ResourceKind.STATEFULSETS: ("apps_v1", "list_stateful_set_for_all_namespaces"),
        ResourceKind.DAEMONSETS: ("apps_v1", "list_daemon_set_for_all_namespaces"),
        ResourceKind.SERVICES: ("core_v1", "list_service_for_all_namespaces"),
        ResourceKind.INGRESSES: ("networking_v1", "list_ingress_for_all_namespaces"),
        ResourceKind.STORAGE_CLASSES: ("storage_v1", "list_storage_class"),
        ResourceKind.PERSISTENT_VOLUMES: ("core_v1", "list_persistent_volume"),
        ResourceKind.PERSISTENT_VOLUME_CLAIMS: ("core_v1", "list_persistent_volume_claim_for_all_namespaces"),
        ResourceKind.CUSTOM_RESOURCE_DEFINITIONS: ("apiextensions_v1", "list_custom_resource_definition"),
    }

    def __init__(self, kubeconfig: KubeConfig, config_dict: Optional[Dict[str, Any]] = None):
        super().__init__(config_dict, "KubernetesClient")
        self.kubeconfig = kubeconfig
        self.context = kubeconfig.current_context

        # API clients
        self.api_client: Optional[client.ApiClient] = None
        self.core_v1 = None
        self.apps_v1 = None
        self.networking_v1 = None
        self.storage_v1 = None
        self.custom_objects = None
        self.version_api = None
        self.apiextensions_v1 = None

    @property
    def kubeconfig_path(self) -> str:
        return self.kubeconfig.path

    async def connect(self) -> None:
        """Build a private ApiClient for the selected context."""
        try:
            # exec credential plugins may run here
            self.api_client = await asyncio.to_thread(
                config.new_client_from_config,
                config_file=self.kubeconfig.path,
                context=self.context,
                persist_config=False
            )
        except Exception as e:
            raise ClientConnectionException(
                "Kubernetes",
                f"Failed to load context {self.context}: {e}",
                {"context": self.context, "path": self.kubeconfig.path}
            )

        self.core_v1 = client.CoreV1Api(self.api_client)
        self.apps_v1 = client.AppsV1Api(self.api_client)
        self.networking_v1 = client.NetworkingV1Api(self.api_client)
        self.storage_v1 = client.StorageV1Api(self.api_client)
        self.custom_objects = client.CustomObjectsApi(self.api_client)
        self.version_api = client.VersionApi(self.api_client)
        self.apiextensions_v1 = client.ApiextensionsV1Api(self.api_client)

        self._connected = True
        self.logger.debug(f"Kubernetes client ready for context: {self.context}")

    async def disconnect(self) -> None:
        """Close the ApiClient connection pool."""
        if self.api_client is not None:
            self.api_client.close()
        self._connected = False
        self.logger.debug("Kubernetes client disconnected")

    async def health_check(self) -> bool:
        """Check Kubernetes client health."""
        try:
            if not self._connected or not self.version_api:
                return False
            await asyncio.to_thread(self.version_api.get_code)
            return True
        except Exception as e:
            self.logger.warning("Kubernetes health check failed", error=str(e))
            return False

    @classmethod
    def operation_name(cls, kind: ResourceKind) -> str:
        """Name of the API call used for ``kind``."""
        return cls.API_CALLS[kind][1]

    async def fetch(self, kind: ResourceKind) -> Any:
        """Retrieve one resource kind; a dict for version, otherwise a list of dicts."""
        if not self._connected:
            raise ClientConnectionException("Kubernetes", "Client not connected")

        api_attr, method_name = self.API_CALLS[kind]
        method = getattr(getattr(self, api_attr), method_name)
        response = await asyncio.to_thread(method)

        if kind.is_singleton:
            return self._serialize(response)
        return self._serialize_items(response)

    def _serialize(self, obj: Any) -> Any:
        return self.api_client.sanitize_for_serialization(obj)

    def _serialize_items(self, response: Any) -> List[Dict[str, Any]]:
        items = getattr(response, "items", None) or []
        return [self._serialize(item) for item in items]
