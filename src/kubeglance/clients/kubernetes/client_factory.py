# src/kubeglance/clients/kubernetes/client_factory.py
"""Kubernetes client factory."""

from typing import Dict, Any, Optional
import structlog

from kubeglance.clients.kubernetes.kubeconfig import KubeConfig, load_kubeconfig
from .k8s_client import KubernetesClient

logger = structlog.get_logger(__name__)


class KubernetesClientFactory:
    """Factory for creating context-bound Kubernetes client sets.

    The kubeconfig is re-read on every call so each client set works on its
    own copy; concurrent calls for different contexts never share state.
    """

    def __init__(self, config: Dict[str, Any]):
        self.config = config
        self.kubeconfig_path = config.get("kubeconfig_path")
        self.default_context = config.get("context")

        self.logger = logger.bind(factory="kubernetes")

    def load_config(self) -> KubeConfig:
        """Resolve the kubeconfig file into a private KubeConfig."""
        return load_kubeconfig(self.kubeconfig_path)

    def create_client(self, context: Optional[str] = None) -> KubernetesClient:
        """Create an unconnected client bound to ``context`` (or the current one)."""
        kubeconfig = self.load_config().select_context(context or self.default_context)
        self.logger.debug("Selected context", context=kubeconfig.current_context)
        return KubernetesClient(kubeconfig=kubeconfig, config_dict=self.config)

    async def make_client(self, context: Optional[str] = None) -> KubernetesClient:
        """Create and connect a client set for ``context``."""
        k8s_client = self.create_client(context)
        await k8s_client.connect()
        return k8s_client
