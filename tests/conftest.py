"""Shared fixtures and test doubles."""

from __future__ import annotations

import logging
from typing import Any

import pytest
import structlog
import yaml

from kubeglance.clients.kubernetes.kubeconfig import KubeConfig, parse_kubeconfig
from kubeglance.models.resource_kinds import ResourceKind


@pytest.fixture(autouse=True, scope="session")
def quiet_structlog() -> None:
    # keep log lines out of captured CLI output
    structlog.configure(wrapper_class=structlog.make_filtering_bound_logger(logging.CRITICAL))


def sample_kubeconfig_dict() -> dict[str, Any]:
    return {
        "apiVersion": "v1",
        "kind": "Config",
        "current-context": "dev",
        "clusters": [
            {"name": "dev-cluster", "cluster": {"server": "https://dev.example:6443"}},
            {"name": "prod-cluster", "cluster": {
                "server": "https://prod.example:6443",
                "certificate-authority-data": "Q0EK",
            }},
        ],
        "users": [
            {"name": "dev-user", "user": {"token": "abc"}},
            {"name": "prod-user", "user": {"exec": {
                "apiVersion": "client.authentication.k8s.io/v1beta1",
                "command": "tcli",
            }}},
        ],
        "contexts": [
            {"name": "dev", "context": {"cluster": "dev-cluster", "user": "dev-user"}},
            {"name": "prod", "context": {
                "cluster": "prod-cluster",
                "user": "prod-user",
                "namespace": "payments",
            }},
        ],
    }


@pytest.fixture
def kubeconfig_dict() -> dict[str, Any]:
    return sample_kubeconfig_dict()


@pytest.fixture
def kubeconfig_file(tmp_path, kubeconfig_dict) -> str:
    path = tmp_path / "config"
    path.write_text(yaml.safe_dump(kubeconfig_dict))
    return str(path)


@pytest.fixture
def kubeconfig(kubeconfig_dict) -> KubeConfig:
    return parse_kubeconfig(kubeconfig_dict, "/home/dev/.kube/config")


def make_node(name: str, ready: bool = True, labels: dict | None = None) -> dict[str, Any]:
    return {
        "metadata": {"name": name, "labels": labels or {}},
        "status": {
            "conditions": [
                {"type": "MemoryPressure", "status": "False"},
                {"type": "Ready", "status": "True" if ready else "False"},
            ],
            "nodeInfo": {
                "kubeletVersion": "v1.29.2",
                "osImage": "Ubuntu 22.04.4 LTS",
                "containerRuntimeVersion": "containerd://1.7.13",
            },
            "capacity": {"cpu": "4", "memory": "16367452Ki"},
        },
    }


def make_pod(name: str, namespace: str | None = "default", phase: str = "Running") -> dict[str, Any]:
    metadata: dict[str, Any] = {"name": name}
    if namespace is not None:
        metadata["namespace"] = namespace
    return {"metadata": metadata, "status": {"phase": phase}}


def make_item(name: str, namespace: str | None = None) -> dict[str, Any]:
    metadata: dict[str, Any] = {"name": name}
    if namespace is not None:
        metadata["namespace"] = namespace
    return {"metadata": metadata}


def full_responses() -> dict[ResourceKind, Any]:
    """One populated response per kind."""
    return {
        ResourceKind.VERSION: {"gitVersion": "v1.29.2", "platform": "linux/amd64", "major": "1", "minor": "29"},
        ResourceKind.NODES: [make_node("cp-1", labels={"node-role.kubernetes.io/control-plane": ""}),
                             make_node("worker-1", ready=False)],
        ResourceKind.NAMESPACES: [make_item("default"), make_item("kube-system")],
        ResourceKind.PODS: [make_pod("api-1", "default"), make_pod("coredns", "kube-system"),
                            make_pod("api-2", "default")],
        ResourceKind.DEPLOYMENTS: [{"metadata": {"name": "api", "namespace": "default"},
                                    "status": {"replicas": 3, "readyReplicas": 2}}],
        ResourceKind.STATEFULSETS: [make_item("db", "default")],
        ResourceKind.DAEMONSETS: [make_item("kube-proxy", "kube-system")],
        ResourceKind.SERVICES: [{"metadata": {"name": "api", "namespace": "default"},
                                 "spec": {"type": "ClusterIP", "clusterIP": "10.0.0.10"}}],
        ResourceKind.INGRESSES: [{"metadata": {"name": "web", "namespace": "default"},
                                  "spec": {"rules": [{"host": "web.example.com"}, {}]}}],
        ResourceKind.STORAGE_CLASSES: [make_item("standard")],
        ResourceKind.PERSISTENT_VOLUMES: [make_item("pv-1")],
        ResourceKind.PERSISTENT_VOLUME_CLAIMS: [{"metadata": {"name": "data", "namespace": "default"},
                                                "spec": {"storageClassName": "standard"},
                                                "status": {"phase": "Bound", "capacity": {"storage": "10Gi"}}}],
        ResourceKind.CUSTOM_RESOURCE_DEFINITIONS: [make_item("widgets.example.com")],
    }


class FakeKubernetesClient:
    """Client-set double serving canned responses; exceptions are raised."""

    def __init__(self, kubeconfig: KubeConfig, responses: dict[ResourceKind, Any]):
        self.kubeconfig = kubeconfig
        self.responses = responses
        self.fetched: list[ResourceKind] = []
        self.disconnected = False

    @property
    def kubeconfig_path(self) -> str:
        return self.kubeconfig.path

    async def fetch(self, kind: ResourceKind) -> Any:
        self.fetched.append(kind)
        response = self.responses.get(kind, None if kind.is_singleton else [])
        if isinstance(response, BaseException):
            raise response
        return response

    async def disconnect(self) -> None:
        self.disconnected = True


class FakeClientFactory:
    def __init__(self, kubeconfig: KubeConfig, responses: dict[ResourceKind, Any]):
        self.kubeconfig = kubeconfig
        self.responses = responses
        self.requested: list[str | None] = []
        self.clients: list[FakeKubernetesClient] = []

    async def make_client(self, context: str | None = None) -> FakeKubernetesClient:
        self.requested.append(context)
        fake = FakeKubernetesClient(self.kubeconfig.select_context(context), dict(self.responses))
        self.clients.append(fake)
        return fake


class FakeFallbackExecutor:
    """Fallback double; missing kinds raise like a failing kubectl would."""

    def __init__(self, responses: dict[ResourceKind, Any] | None = None):
        self.responses = responses or {}
        self.calls: list[tuple[ResourceKind, str, str | None]] = []

    async def fetch(self, kind: ResourceKind, kubeconfig_path: str, context: str | None = None) -> Any:
        self.calls.append((kind, kubeconfig_path, context))
        if kind not in self.responses:
            raise RuntimeError(f"kubectl get {kind.value} failed")
        response = self.responses[kind]
        if isinstance(response, BaseException):
            raise response
        return response

    @property
    def kinds(self) -> list[ResourceKind]:
        return [call[0] for call in self.calls]
