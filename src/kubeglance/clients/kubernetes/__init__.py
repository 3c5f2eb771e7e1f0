from .client_factory import KubernetesClientFactory
from .k8s_client import KubernetesClient
from .kubeconfig import KubeConfig, load_kubeconfig

__all__ = ["KubernetesClientFactory", "KubernetesClient", "KubeConfig", "load_kubeconfig"]
