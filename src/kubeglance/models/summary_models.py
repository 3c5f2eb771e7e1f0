"""
Cluster Summary Models
Immutable snapshot of a cluster as seen through one kubeconfig context
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, Tuple


class SummaryBaseModel(BaseModel):
    """Base model for summary snapshots; instances are never mutated."""

    model_config = ConfigDict(frozen=True)


class ContextIdentity(SummaryBaseModel):
    """Locally resolved identity of the active context."""

    context: str
    cluster_server: Optional[str] = None
    user: Optional[str] = None
    namespace: Optional[str] = None


class VersionInfo(SummaryBaseModel):
    """Server version as reported by the API server."""

    git_version: Optional[str] = None
    platform: Optional[str] = None
    major: Optional[str] = None
    minor: Optional[str] = None


class NodeRow(SummaryBaseModel):
    """Display row for a single node."""

    name: str
    roles: Tuple[str, ...] = ()
    kubelet_version: str = "unknown"
    os_image: Optional[str] = None
    container_runtime: Optional[str] = None
    cpu: Optional[str] = None
    memory: Optional[str] = None


class NodeStats(SummaryBaseModel):
    """Node counts; ready + not_ready always equals total."""

    total: int = Field(0, ge=0)
    ready: int = Field(0, ge=0)
    not_ready: int = Field(0, ge=0)
    items: Tuple[NodeRow, ...] = ()


class NamespacePodCount(SummaryBaseModel):
    namespace: str
    pods: int = Field(0, ge=0)


class NamespaceStats(SummaryBaseModel):
    total: int = Field(0, ge=0)
    top_by_pods: Tuple[NamespacePodCount, ...] = ()


class WorkloadCounts(SummaryBaseModel):
    deployments: int = 0
    statefulsets: int = 0
    daemonsets: int = 0
    pods: int = 0
    services: int = 0
    ingresses: int = 0


class StorageCounts(SummaryBaseModel):
    storage_classes: int = 0
    persistent_volumes: int = 0
    persistent_volume_claims: int = 0


class PodRow(SummaryBaseModel):
    name: str
    namespace: str
    phase: Optional[str] = None


class DeploymentRow(SummaryBaseModel):
    name: str
    namespace: str
    ready: str = "0/0"
    replicas: int = 0


class ServiceRow(SummaryBaseModel):
    name: str
    namespace: str
    type: Optional[str] = None
    cluster_ip: Optional[str] = None


class IngressRow(SummaryBaseModel):
    name: str
    namespace: str
    hosts: Tuple[str, ...] = ()


class PersistentVolumeClaimRow(SummaryBaseModel):
    name: str
    namespace: str
    status: Optional[str] = None
    storage_class: Optional[str] = None
    capacity: Optional[str] = None


class SummaryDetails(SummaryBaseModel):
    """Capped row projections, only built on request."""

    pods: Tuple[PodRow, ...] = ()
    deployments: Tuple[DeploymentRow, ...] = ()
    services: Tuple[ServiceRow, ...] = ()
    ingresses: Tuple[IngressRow, ...] = ()
    pvcs: Tuple[PersistentVolumeClaimRow, ...] = ()


class ClusterSummary(SummaryBaseModel):
    """Aggregated, read-only view of one cluster context."""

    context: str
    cluster_server: Optional[str] = None
    user: Optional[str] = None
    namespace: Optional[str] = None
    version: Optional[VersionInfo] = None
    nodes: NodeStats = Field(default_factory=NodeStats)
    namespaces: NamespaceStats = Field(default_factory=NamespaceStats)
    workloads: WorkloadCounts = Field(default_factory=WorkloadCounts)
    storage: StorageCounts = Field(default_factory=StorageCounts)
    crds: int = 0
    details: Optional[SummaryDetails] = None
