from .kubectl.fallback import FallbackExecutor, KubectlFallbackExecutor
from .kubernetes.client_factory import KubernetesClientFactory

__all__ = ["FallbackExecutor", "KubectlFallbackExecutor", "KubernetesClientFactory"]
