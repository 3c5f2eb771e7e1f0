from .resource_kinds import *
from .summary_models import *

__all__ = [
    "ResourceKind",
    "CRITICAL_KINDS",
    "KUBECTL_ARGS",
    "ContextIdentity",
    "VersionInfo",
    "NodeRow",
    "NodeStats",
    "NamespacePodCount",
    "NamespaceStats",
    "WorkloadCounts",
    "StorageCounts",
    "PodRow",
    "DeploymentRow",
    "ServiceRow",
    "IngressRow",
    "PersistentVolumeClaimRow",
    "SummaryDetails",
    "ClusterSummary",
]
