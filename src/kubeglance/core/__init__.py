from .exceptions import *
from .base_client import BaseClient
from .utils import *

__all__ = [
    "BaseClient",
    "KubeGlanceException",
    "ConfigurationException",
    "ContextNotFoundException",
    "ClientConnectionException",
    "ClusterAPIException",
    "FallbackException",
    "SettledResult",
    "ensure_exec_path",
    "gather_with_concurrency",
    "safe_get",
    "settle_all",
    "setup_logging",
]
