"""Maps raw resource collections to the cluster summary model."""

from typing import Dict, Any, List, Optional
import structlog

from kubeglance.core.utils import safe_get
from kubeglance.models.resource_kinds import ResourceKind
from kubeglance.models.summary_models import (
    ClusterSummary,
    ContextIdentity,
    DeploymentRow,
    IngressRow,
    NamespacePodCount,
    NamespaceStats,
    NodeRow,
    NodeStats,
    PersistentVolumeClaimRow,
    PodRow,
    ServiceRow,
    StorageCounts,
    SummaryDetails,
    VersionInfo,
    WorkloadCounts,
)

logger = structlog.get_logger(__name__)

DETAIL_ROW_LIMIT = 500
TOP_NAMESPACE_LIMIT = 10
NODE_ROLE_PREFIX = "node-role.kubernetes.io"


def _name(obj: Dict[str, Any]) -> str:
    return safe_get(obj, "metadata.name") or "unknown"


def _namespace(obj: Dict[str, Any]) -> str:
    return safe_get(obj, "metadata.namespace") or "default"


class ClusterSummaryMapper:
    """Derives statistics and display rows from raw resource dicts.

    Inputs are JSON-shaped objects as returned by the API (camelCase keys);
    any field may be missing.
    """

    def map_summary(
        self,
        identity: ContextIdentity,
        collections: Dict[ResourceKind, Any],
        detail: bool = False
    ) -> ClusterSummary:
        """Fold all collections into a fresh ClusterSummary."""
        nodes = self._items(collections, ResourceKind.NODES)
        pods = self._items(collections, ResourceKind.PODS)

        return ClusterSummary(
            context=identity.context,
            cluster_server=identity.cluster_server,
            user=identity.user,
            namespace=identity.namespace,
            version=self.map_version(collections.get(ResourceKind.VERSION)),
            nodes=self.map_node_stats(nodes),
            namespaces=NamespaceStats(
                total=len(self._items(collections, ResourceKind.NAMESPACES)),
                top_by_pods=tuple(self.top_namespaces_by_pods(pods))
            ),
            workloads=WorkloadCounts(
                deployments=len(self._items(collections, ResourceKind.DEPLOYMENTS)),
                statefulsets=len(self._items(collections, ResourceKind.STATEFULSETS)),
                daemonsets=len(self._items(collections, ResourceKind.DAEMONSETS)),
                pods=len(pods),
                services=len(self._items(collections, ResourceKind.SERVICES)),
                ingresses=len(self._items(collections, ResourceKind.INGRESSES))
            ),
            storage=StorageCounts(
                storage_classes=len(self._items(collections, ResourceKind.STORAGE_CLASSES)),
                persistent_volumes=len(self._items(collections, ResourceKind.PERSISTENT_VOLUMES)),
                persistent_volume_claims=len(self._items(collections, ResourceKind.PERSISTENT_VOLUME_CLAIMS))
            ),
            crds=len(self._items(collections, ResourceKind.CUSTOM_RESOURCE_DEFINITIONS)),
            details=self.map_details(collections) if detail else None
        )

    @staticmethod
    def _items(collections: Dict[ResourceKind, Any], kind: ResourceKind) -> List[Dict[str, Any]]:
        return collections.get(kind) or []

    def map_version(self, version: Optional[Dict[str, Any]]) -> Optional[VersionInfo]:
        if not version:
            return None
        return VersionInfo(
            git_version=version.get("gitVersion"),
            platform=version.get("platform"),
            major=version.get("major"),
            minor=version.get("minor")
        )

    # Nodes

    @staticmethod
    def is_node_ready(node: Dict[str, Any]) -> bool:
        """A node is ready when its Ready condition has status "True"."""
        conditions = safe_get(node, "status.conditions") or []
        return any(
            c.get("type") == "Ready" and c.get("status") == "True"
            for c in conditions
            if isinstance(c, dict)
        )

    @staticmethod
    def node_roles(labels: Optional[Dict[str, Any]]) -> List[str]:
        """Role names from ``node-role.kubernetes.io/<role>`` label keys."""
        roles = []
        for key in (labels or {}):
            if key.startswith(NODE_ROLE_PREFIX):
                parts = key.split("/")
                roles.append(parts[1] if len(parts) > 1 and parts[1] else "role")
        return roles

    def map_node(self, node: Dict[str, Any]) -> NodeRow:
        node_info = safe_get(node, "status.nodeInfo") or {}
        capacity = safe_get(node, "status.capacity") or {}
        return NodeRow(
            name=_name(node),
            roles=tuple(self.node_roles(safe_get(node, "metadata.labels"))),
            kubelet_version=node_info.get("kubeletVersion") or "unknown",
            os_image=node_info.get("osImage"),
            container_runtime=node_info.get("containerRuntimeVersion"),
            cpu=capacity.get("cpu"),
            memory=capacity.get("memory")
        )

    def map_node_stats(self, nodes: List[Dict[str, Any]]) -> NodeStats:
        total = len(nodes)
        ready = sum(1 for node in nodes if self.is_node_ready(node))
        return NodeStats(
            total=total,
            ready=ready,
            not_ready=max(total - ready, 0),
            items=tuple(self.map_node(node) for node in nodes)
        )

    # Namespaces

    def top_namespaces_by_pods(
        self,
        pods: List[Dict[str, Any]],
        limit: int = TOP_NAMESPACE_LIMIT
    ) -> List[NamespacePodCount]:
        """Namespaces ordered by descending pod count; ties keep first-seen order."""
        counts: Dict[str, int] = {}
        for pod in pods:
            namespace = _namespace(pod)
            counts[namespace] = counts.get(namespace, 0) + 1

        # sorted() is stable, including with reverse=True
        ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)
        return [NamespacePodCount(namespace=ns, pods=count) for ns, count in ranked[:limit]]

    # Detail rows

    def map_pod(self, pod: Dict[str, Any]) -> PodRow:
        return PodRow(name=_name(pod), namespace=_namespace(pod), phase=safe_get(pod, "status.phase"))

    def map_deployment(self, deployment: Dict[str, Any]) -> DeploymentRow:
        status = deployment.get("status") or {}
        replicas = status.get("replicas") or 0
        ready_replicas = status.get("readyReplicas") or 0
        return DeploymentRow(
            name=_name(deployment),
            namespace=_namespace(deployment),
            ready=f"{ready_replicas}/{replicas}",
            replicas=replicas
        )

    def map_service(self, service: Dict[str, Any]) -> ServiceRow:
        return ServiceRow(
            name=_name(service),
            namespace=_namespace(service),
            type=safe_get(service, "spec.type"),
            cluster_ip=safe_get(service, "spec.clusterIP")
        )

    def map_ingress(self, ingress: Dict[str, Any]) -> IngressRow:
        rules = safe_get(ingress, "spec.rules") or []
        hosts = tuple(
            rule.get("host") for rule in rules
            if isinstance(rule, dict) and rule.get("host")
        )
        return IngressRow(name=_name(ingress), namespace=_namespace(ingress), hosts=hosts)

    def map_pvc(self, pvc: Dict[str, Any]) -> PersistentVolumeClaimRow:
        return PersistentVolumeClaimRow(
            name=_name(pvc),
            namespace=_namespace(pvc),
            status=safe_get(pvc, "status.phase"),
            storage_class=safe_get(pvc, "spec.storageClassName"),
            capacity=safe_get(pvc, "status.capacity.storage")
        )

    def map_details(
        self,
        collections: Dict[ResourceKind, Any],
        limit: int = DETAIL_ROW_LIMIT
    ) -> SummaryDetails:
        """Row projections of the first ``limit`` items per kind, in retrieval order."""
        def rows(kind, mapper):
            return tuple(mapper(item) for item in self._items(collections, kind)[:limit])

        return SummaryDetails(
            pods=rows(ResourceKind.PODS, self.map_pod),
            deployments=rows(ResourceKind.DEPLOYMENTS, self.map_deployment),
            services=rows(ResourceKind.SERVICES, self.map_service),
            ingresses=rows(ResourceKind.INGRESSES, self.map_ingress),
            pvcs=rows(ResourceKind.PERSISTENT_VOLUME_CLAIMS, self.map_pvc)
        )
