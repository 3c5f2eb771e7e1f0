# src/kubeglance/clients/kubectl/fallback.py
"""kubectl-backed fallback for resource retrieval."""

import asyncio
import json
import os
from typing import Any, Dict, List, Optional, Protocol, Sequence, Union

import structlog

from kubeglance.core.exceptions import FallbackException
from kubeglance.models.resource_kinds import KUBECTL_ARGS, ResourceKind

logger = structlog.get_logger(__name__)

FallbackResult = Union[Optional[Dict[str, Any]], List[Dict[str, Any]]]


class FallbackExecutor(Protocol):
    """Re-derives one resource kind outside the API client path."""

    async def fetch(
        self,
        kind: ResourceKind,
        kubeconfig_path: str,
        context: Optional[str] = None
    ) -> FallbackResult:
        """Return the version object (or None) for version, else a list of items."""
        ...


class KubectlFallbackExecutor:
    """Runs ``kubectl ... -o json`` against the same kubeconfig."""

    def __init__(self, kubectl_binary: str = "kubectl"):
        self.kubectl_binary = kubectl_binary
        self.logger = logger.bind(executor="kubectl")

    def build_args(self, kind: ResourceKind, context: Optional[str] = None) -> List[str]:
        args = list(KUBECTL_ARGS[kind])
        if context:
            args.extend(["--context", context])
        args.extend(["-o", "json"])
        return args

    async def fetch(
        self,
        kind: ResourceKind,
        kubeconfig_path: str,
        context: Optional[str] = None
    ) -> FallbackResult:
        """Fetch ``kind`` with kubectl, raising FallbackException on any failure."""
        payload = await self._run_json(kind, self.build_args(kind, context), kubeconfig_path)

        if not isinstance(payload, dict):
            raise FallbackException(kind.value, "kubectl output is not a JSON object")

        if kind.is_singleton:
            return payload.get("serverVersion") or None

        items = payload.get("items") or []
        if not isinstance(items, list):
            raise FallbackException(kind.value, "kubectl output has no item list")
        return items

    async def _run_json(self, kind: ResourceKind, args: Sequence[str], kubeconfig_path: str) -> Any:
        env = {**os.environ, "KUBECONFIG": kubeconfig_path}
        command = f"{self.kubectl_binary} {' '.join(args)}"
        self.logger.debug("Running kubectl", command=command)

        try:
            process = await asyncio.create_subprocess_exec(
                self.kubectl_binary,
                *args,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                env=env
            )
        except FileNotFoundError:
            raise FallbackException(kind.value, f"{self.kubectl_binary} not found on PATH")
        except OSError as e:
            raise FallbackException(kind.value, f"could not start {self.kubectl_binary}: {e}")

        try:
            stdout, stderr = await process.communicate()
        except BaseException:
            # cancelled (e.g. by a timeout): never leave kubectl running
            if process.returncode is None:
                try:
                    process.kill()
                except ProcessLookupError:
                    pass
                await process.wait()
            raise

        out = stdout.decode("utf-8", errors="replace") if stdout else ""
        err = stderr.decode("utf-8", errors="replace") if stderr else ""

        if process.returncode != 0:
            message = err.strip() or out.strip() or f"exit {process.returncode}"
            raise FallbackException(
                kind.value,
                f"{command} failed: {message}",
                {"returncode": process.returncode}
            )

        try:
            return json.loads(out or "{}")
        except json.JSONDecodeError as e:
            raise FallbackException(kind.value, f"{command} returned invalid JSON: {e}")
