"""Resource kinds tracked by the cluster summary."""

from enum import Enum
from typing import Dict, Tuple


class ResourceKind(str, Enum):
    """Cluster resource kinds, declared in fallback order."""
    VERSION = "version"
    NODES = "nodes"
    NAMESPACES = "namespaces"
    PODS = "pods"
    DEPLOYMENTS = "deployments"
    STATEFULSETS = "statefulsets"
    DAEMONSETS = "daemonsets"
    SERVICES = "services"
    INGRESSES = "ingresses"
    STORAGE_CLASSES = "storage_classes"
    PERSISTENT_VOLUMES = "persistent_volumes"
    PERSISTENT_VOLUME_CLAIMS = "persistent_volume_claims"
    CUSTOM_RESOURCE_DEFINITIONS = "custom_resource_definitions"

    @property
    def is_singleton(self) -> bool:
        return self is ResourceKind.VERSION


# Failure of either of these aborts the whole summary, checked in this order.
CRITICAL_KINDS: Tuple[ResourceKind, ...] = (ResourceKind.VERSION, ResourceKind.NODES)

KUBECTL_ARGS: Dict[ResourceKind, Tuple[str, ...]] = {
    ResourceKind.VERSION: ("version",),
    ResourceKind.NODES: ("get", "nodes"),
    ResourceKind.NAMESPACES: ("get", "namespaces"),
    ResourceKind.PODS: ("get", "pods", "--all-namespaces"),
    ResourceKind.DEPLOYMENTS: ("get", "deployments", "--all-namespaces"),
    ResourceKind.STATEFULSETS: ("get", "statefulsets", "--all-namespaces"),
    ResourceKind.DAEMONSETS: ("get", "daemonsets", "--all-namespaces"),
    ResourceKind.SERVICES: ("get", "services", "--all-namespaces"),
    ResourceKind.INGRESSES: ("get", "ingresses", "--all-namespaces"),
    ResourceKind.STORAGE_CLASSES: ("get", "storageclass"),
    ResourceKind.PERSISTENT_VOLUMES: ("get", "pv"),
    ResourceKind.PERSISTENT_VOLUME_CLAIMS: ("get", "pvc", "--all-namespaces"),
    ResourceKind.CUSTOM_RESOURCE_DEFINITIONS: ("get", "crd"),
}
