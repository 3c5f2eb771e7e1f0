"""Tests for KubectlFallbackExecutor."""

from __future__ import annotations

import asyncio
import json
import os
import stat
import sys
from typing import Any

import pytest

from kubeglance.clients.kubectl.fallback import KubectlFallbackExecutor
from kubeglance.core.exceptions import FallbackException
from kubeglance.models.resource_kinds import KUBECTL_ARGS, ResourceKind


class FakeProcess:
    def __init__(self, stdout: bytes = b"", stderr: bytes = b"", returncode: int = 0):
        self._stdout = stdout
        self._stderr = stderr
        self.returncode = returncode

    async def communicate(self) -> tuple[bytes, bytes]:
        return self._stdout, self._stderr


class SubprocessRecorder:
    """Stands in for asyncio.create_subprocess_exec."""

    def __init__(self, process: FakeProcess | None = None, error: Exception | None = None):
        self.process = process or FakeProcess(stdout=b'{"items": []}')
        self.error = error
        self.calls: list[tuple[tuple[Any, ...], dict[str, Any]]] = []

    async def __call__(self, *args: Any, **kwargs: Any) -> FakeProcess:
        self.calls.append((args, kwargs))
        if self.error is not None:
            raise self.error
        return self.process


@pytest.fixture
def executor() -> KubectlFallbackExecutor:
    return KubectlFallbackExecutor()


def patch_subprocess(monkeypatch, recorder: SubprocessRecorder) -> SubprocessRecorder:
    monkeypatch.setattr("kubeglance.clients.kubectl.fallback.asyncio.create_subprocess_exec", recorder)
    return recorder


@pytest.mark.unit
class TestKubectlFallbackExecutor:
    """kubectl invocation and output handling."""

    def test_every_kind_has_kubectl_args(self) -> None:
        assert set(KUBECTL_ARGS) == set(ResourceKind)

    def test_build_args(self, executor: KubectlFallbackExecutor) -> None:
        assert executor.build_args(ResourceKind.PODS) == ["get", "pods", "--all-namespaces", "-o", "json"]
        assert executor.build_args(ResourceKind.STORAGE_CLASSES, "prod") == [
            "get", "storageclass", "--context", "prod", "-o", "json"]

    @pytest.mark.asyncio
    async def test_returns_items_and_sets_kubeconfig_env(self, executor, monkeypatch) -> None:
        items = [{"metadata": {"name": "pv-1"}}]
        recorder = patch_subprocess(
            monkeypatch, SubprocessRecorder(FakeProcess(stdout=json.dumps({"items": items}).encode()))
        )

        result = await executor.fetch(ResourceKind.PERSISTENT_VOLUMES, "/tmp/kubeconfig", "prod")

        assert result == items
        args, kwargs = recorder.calls[0]
        assert args == ("kubectl", "get", "pv", "--context", "prod", "-o", "json")
        assert kwargs["env"]["KUBECONFIG"] == "/tmp/kubeconfig"

    @pytest.mark.asyncio
    async def test_version_returns_server_version(self, executor, monkeypatch) -> None:
        payload = {"clientVersion": {"gitVersion": "v1.30.0"}, "serverVersion": {"gitVersion": "v1.29.2"}}
        patch_subprocess(monkeypatch, SubprocessRecorder(FakeProcess(stdout=json.dumps(payload).encode())))

        assert await executor.fetch(ResourceKind.VERSION, "/tmp/kubeconfig") == {"gitVersion": "v1.29.2"}

    @pytest.mark.asyncio
    async def test_version_without_server_version(self, executor, monkeypatch) -> None:
        payload = {"clientVersion": {"gitVersion": "v1.30.0"}}
        patch_subprocess(monkeypatch, SubprocessRecorder(FakeProcess(stdout=json.dumps(payload).encode())))

        assert await executor.fetch(ResourceKind.VERSION, "/tmp/kubeconfig") is None

    @pytest.mark.asyncio
    async def test_missing_items_is_empty(self, executor, monkeypatch) -> None:
        patch_subprocess(monkeypatch, SubprocessRecorder(FakeProcess(stdout=b'{"kind": "List"}')))
        assert await executor.fetch(ResourceKind.CUSTOM_RESOURCE_DEFINITIONS, "/tmp/kubeconfig") == []

    @pytest.mark.asyncio
    async def test_missing_binary(self, monkeypatch) -> None:
        patch_subprocess(monkeypatch, SubprocessRecorder(error=FileNotFoundError("kubectl")))
        executor = KubectlFallbackExecutor("kubectl-1.29")

        with pytest.raises(FallbackException, match="kubectl-1.29 not found"):
            await executor.fetch(ResourceKind.NODES, "/tmp/kubeconfig")

    @pytest.mark.asyncio
    async def test_non_zero_exit_reports_stderr(self, executor, monkeypatch) -> None:
        patch_subprocess(monkeypatch, SubprocessRecorder(FakeProcess(
            stderr=b'error: the server doesn\'t have a resource type "ingresses"', returncode=1
        )))

        with pytest.raises(FallbackException) as exc_info:
            await executor.fetch(ResourceKind.INGRESSES, "/tmp/kubeconfig")

        assert exc_info.value.kind == "ingresses"
        assert "doesn't have a resource type" in str(exc_info.value)
        assert exc_info.value.details == {"returncode": 1}

    @pytest.mark.asyncio
    async def test_non_zero_exit_without_output(self, executor, monkeypatch) -> None:
        patch_subprocess(monkeypatch, SubprocessRecorder(FakeProcess(returncode=7)))
        with pytest.raises(FallbackException, match="exit 7"):
            await executor.fetch(ResourceKind.PODS, "/tmp/kubeconfig")

    @pytest.mark.asyncio
    async def test_invalid_json(self, executor, monkeypatch) -> None:
        patch_subprocess(monkeypatch, SubprocessRecorder(FakeProcess(stdout=b"NAME   STATUS\nn1   Ready")))
        with pytest.raises(FallbackException, match="invalid JSON"):
            await executor.fetch(ResourceKind.NODES, "/tmp/kubeconfig")

    @pytest.mark.asyncio
    async def test_non_object_json(self, executor, monkeypatch) -> None:
        patch_subprocess(monkeypatch, SubprocessRecorder(FakeProcess(stdout=b"[1, 2]")))
        with pytest.raises(FallbackException, match="not a JSON object"):
            await executor.fetch(ResourceKind.NODES, "/tmp/kubeconfig")


class HangingProcess(FakeProcess):
    """A child that never finishes on its own."""

    def __init__(self):
        super().__init__(returncode=None)
        self.killed = False
        self.waited = False

    async def communicate(self) -> tuple[bytes, bytes]:
        await asyncio.sleep(30)
        return b"", b""

    def kill(self) -> None:
        self.killed = True
        self.returncode = -9

    async def wait(self) -> int:
        self.waited = True
        return self.returncode


@pytest.mark.unit
class TestKubectlCancellation:
    """Cancelling a fetch terminates the kubectl child."""

    @pytest.mark.asyncio
    async def test_cancelled_fetch_kills_and_reaps_child(self, executor, monkeypatch) -> None:
        process = HangingProcess()
        patch_subprocess(monkeypatch, SubprocessRecorder(process))

        with pytest.raises(asyncio.TimeoutError):
            await asyncio.wait_for(executor.fetch(ResourceKind.PODS, "/tmp/kubeconfig"), timeout=0.05)

        assert process.killed is True
        assert process.waited is True

    @pytest.mark.asyncio
    @pytest.mark.skipif(sys.platform == "win32", reason="needs a POSIX shell script")
    async def test_timed_out_kubectl_process_is_gone(self, tmp_path) -> None:
        script = tmp_path / "kubectl"
        script.write_text('#!/bin/sh\necho $$ > "$KUBECONFIG.pid"\nexec sleep 30\n')
        script.chmod(script.stat().st_mode | stat.S_IEXEC)
        kubeconfig_path = str(tmp_path / "config")
        executor = KubectlFallbackExecutor(str(script))

        with pytest.raises(asyncio.TimeoutError):
            await asyncio.wait_for(executor.fetch(ResourceKind.PODS, kubeconfig_path), timeout=0.5)

        pid = int((tmp_path / "config.pid").read_text().strip())
        with pytest.raises(ProcessLookupError):
            os.kill(pid, 0)
