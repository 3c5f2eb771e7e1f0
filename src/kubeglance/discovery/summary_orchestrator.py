# src/kubeglance/discovery/summary_orchestrator.py
"""Summary orchestrator: fans out cluster queries and folds them into one summary."""

import json
from typing import Dict, Any, Optional
import structlog
from kubernetes.client.rest import ApiException

from kubeglance.clients.kubectl.fallback import FallbackExecutor, KubectlFallbackExecutor
from kubeglance.clients.kubernetes.client_factory import KubernetesClientFactory
from kubeglance.clients.kubernetes.k8s_client import KubernetesClient
from kubeglance.config.settings import Settings
from kubeglance.core.exceptions import ClusterAPIException
from kubeglance.core.utils import SettledResult, gather_with_concurrency, settle_all
from kubeglance.mappers.summary_mapper import ClusterSummaryMapper
from kubeglance.models.resource_kinds import CRITICAL_KINDS, ResourceKind
from kubeglance.models.summary_models import ClusterSummary

logger = structlog.get_logger(__name__)


def error_body(error: BaseException) -> Any:
    """Structured body of an API error when it carries one, else its text."""
    if isinstance(error, ApiException) and error.body:
        body = error.body.decode("utf-8", errors="replace") if isinstance(error.body, bytes) else error.body
        try:
            return json.loads(body)
        except ValueError:
            return body
    return str(error) or repr(error)


class SummaryOrchestrator:
    """
    Builds a ClusterSummary for one context.

    All primary retrievals run concurrently and settle independently. Version
    and node failures abort the build; every other failure degrades to an
    empty collection, which is then retried once through the fallback
    executor.
    """

    def __init__(
        self,
        client_factory: KubernetesClientFactory,
        fallback_executor: Optional[FallbackExecutor] = None,
        fallback_concurrency: int = 1,
        mapper: Optional[ClusterSummaryMapper] = None
    ):
        self.client_factory = client_factory
        self.fallback_executor = fallback_executor
        self.fallback_concurrency = max(1, fallback_concurrency)
        self.mapper = mapper or ClusterSummaryMapper()

        self.logger = logger.bind(orchestrator="cluster_summary")

    @classmethod
    def from_settings(cls, settings: Settings) -> "SummaryOrchestrator":
        """Wire the orchestrator from application settings."""
        fallback_executor = None
        if settings.fallback.enabled:
            fallback_executor = KubectlFallbackExecutor(settings.fallback.kubectl_binary)

        return cls(
            client_factory=KubernetesClientFactory(settings.kubernetes.model_dump()),
            fallback_executor=fallback_executor,
            fallback_concurrency=settings.fallback.concurrency
        )

    async def build_summary(self, context_name: Optional[str] = None, detail: bool = False) -> ClusterSummary:
        """Build a fresh summary for ``context_name`` (or the current context)."""
        self.logger.info("Building cluster summary", context=context_name, detail=detail)

        k8s_client = await self.client_factory.make_client(context_name)
        try:
            identity = k8s_client.kubeconfig.active_identity()
            outcomes = await settle_all({kind: k8s_client.fetch(kind) for kind in ResourceKind})
        finally:
            await k8s_client.disconnect()

        self._raise_for_critical(outcomes)

        collections = self._unwrap(outcomes)
        await self._apply_fallbacks(collections, k8s_client.kubeconfig_path, identity.context)

        summary = self.mapper.map_summary(identity, collections, detail)
        self.logger.info(
            "Cluster summary built",
            context=summary.context,
            nodes=summary.nodes.total,
            ready_nodes=summary.nodes.ready,
            pods=summary.workloads.pods,
            namespaces=summary.namespaces.total
        )
        return summary

    def _raise_for_critical(self, outcomes: Dict[ResourceKind, SettledResult]) -> None:
        for kind in CRITICAL_KINDS:
            outcome = outcomes[kind]
            if not outcome.success:
                operation = KubernetesClient.operation_name(kind)
                self.logger.error("Critical cluster API call failed", operation=operation, error=str(outcome.error))
                raise ClusterAPIException(operation, error_body(outcome.error)) from outcome.error

    def _unwrap(self, outcomes: Dict[ResourceKind, SettledResult]) -> Dict[ResourceKind, Any]:
        collections: Dict[ResourceKind, Any] = {}
        for kind, outcome in outcomes.items():
            if outcome.success:
                collections[kind] = outcome.value
            else:
                # Errors and empty results both fall through to the fallback
                self.logger.debug(f"Retrieval failed for {kind.value}", error=str(outcome.error))
                collections[kind] = None if kind.is_singleton else []
        return collections

    async def _apply_fallbacks(
        self,
        collections: Dict[ResourceKind, Any],
        kubeconfig_path: str,
        context: Optional[str]
    ) -> None:
        if self.fallback_executor is None:
            return

        pending = [kind for kind in ResourceKind if not collections.get(kind)]
        if not pending:
            return

        self.logger.warning("Using fallback for empty kinds", kinds=[kind.value for kind in pending])
        results = await gather_with_concurrency(
            [self.fallback_executor.fetch(kind, kubeconfig_path, context) for kind in pending],
            max_concurrency=self.fallback_concurrency,
            return_exceptions=True
        )

        for kind, result in zip(pending, results):
            if isinstance(result, BaseException):
                self.logger.warning(f"Fallback failed for {kind.value}", error=str(result))
                continue
            if result:
                collections[kind] = result
