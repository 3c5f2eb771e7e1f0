# src/kubeglance/clients/kubernetes/kubeconfig.py
"""Kubeconfig loading and context selection."""

import os
from typing import Dict, Any, List, Optional, Tuple

import structlog
import yaml
from pydantic import BaseModel, Field, ValidationError

from kubeglance.core.exceptions import ConfigurationException, ContextNotFoundException
from kubeglance.models.summary_models import ContextIdentity

logger = structlog.get_logger(__name__)


class KubeContext(BaseModel):
    """A named (cluster, user, namespace) triple."""

    name: str
    cluster: str = ""
    user: str = ""
    namespace: Optional[str] = None


class KubeCluster(BaseModel):
    name: str
    server: Optional[str] = None
    certificate_authority_data: Optional[str] = None
    insecure_skip_tls_verify: bool = False


class KubeUser(BaseModel):
    name: str
    auth_type: str = "none"
    exec_command: Optional[str] = None


class KubeConfig(BaseModel):
    """Parsed kubeconfig file.

    Instances are private to one request: ``select_context`` returns a copy
    with the active-context pointer moved, leaving this instance untouched.
    """

    path: str
    contexts: List[KubeContext] = Field(default_factory=list)
    clusters: List[KubeCluster] = Field(default_factory=list)
    users: List[KubeUser] = Field(default_factory=list)
    current_context: Optional[str] = None

    def get_context(self, name: str) -> Optional[KubeContext]:
        return next((c for c in self.contexts if c.name == name), None)

    def get_cluster(self, name: str) -> Optional[KubeCluster]:
        return next((c for c in self.clusters if c.name == name), None)

    def get_user(self, name: str) -> Optional[KubeUser]:
        return next((u for u in self.users if u.name == name), None)

    def context_names(self) -> List[str]:
        return [c.name for c in self.contexts]

    def select_context(self, name: Optional[str] = None) -> "KubeConfig":
        """Return a copy whose active context is ``name`` (or the current one)."""
        if name is None:
            if not self.current_context:
                raise ConfigurationException(
                    f"No current context set in kubeconfig at {self.path}",
                    {"path": self.path}
                )
            name = self.current_context

        context = self.get_context(name)
        if context is None:
            raise ContextNotFoundException(name, self.context_names())

        if self.get_cluster(context.cluster) is None:
            raise ConfigurationException(
                f"Context {name} references unknown cluster: {context.cluster}",
                {"context": name, "cluster": context.cluster}
            )
        if self.get_user(context.user) is None:
            raise ConfigurationException(
                f"Context {name} references unknown user: {context.user}",
                {"context": name, "user": context.user}
            )

        return self.model_copy(update={"current_context": name}, deep=True)

    def active_identity(self) -> ContextIdentity:
        """Identity of the active context, read locally without network calls."""
        if not self.current_context:
            raise ConfigurationException(
                f"No current context set in kubeconfig at {self.path}",
                {"path": self.path}
            )
        context = self.get_context(self.current_context)
        if context is None:
            raise ContextNotFoundException(self.current_context, self.context_names())

        cluster = self.get_cluster(context.cluster)
        return ContextIdentity(
            context=context.name,
            cluster_server=cluster.server if cluster else None,
            user=context.user or None,
            namespace=context.namespace,
        )


def _user_auth_type(user: Dict[str, Any]) -> str:
    """Classify the credential spec of a kubeconfig user entry."""
    if user.get("exec"):
        return "exec"
    if user.get("auth-provider"):
        return "auth-provider"
    if user.get("token") or user.get("tokenFile"):
        return "token"
    if user.get("client-certificate") or user.get("client-certificate-data"):
        return "client-certificate"
    if user.get("username"):
        return "basic"
    return "none"


def _entries(
    data: Dict[str, Any],
    section: str,
    body_key: str,
    path: str
) -> List[Tuple[Dict[str, Any], Dict[str, Any]]]:
    """``(entry, body)`` pairs of one named list section, e.g. ``contexts``/``context``."""
    entries = data.get(section) or []
    if not isinstance(entries, list):
        raise ConfigurationException(
            f"kubeconfig at {path}: '{section}' is not a list", {"path": path, "section": section}
        )

    pairs = []
    for index, entry in enumerate(entries):
        body = (entry.get(body_key) or {}) if isinstance(entry, dict) else None
        if not isinstance(body, dict):
            raise ConfigurationException(
                f"kubeconfig at {path}: malformed {section} entry #{index}",
                {"path": path, "section": section, "index": index}
            )
        pairs.append((entry, body))
    return pairs


def parse_kubeconfig(data: Dict[str, Any], path: str) -> KubeConfig:
    """Parse a loaded kubeconfig document."""
    if not isinstance(data, dict):
        raise ConfigurationException(f"kubeconfig at {path} is not a mapping", {"path": path})

    try:
        contexts = [
            KubeContext(
                name=entry.get("name", ""),
                cluster=ctx.get("cluster", ""),
                user=ctx.get("user", ""),
                namespace=ctx.get("namespace")
            )
            for entry, ctx in _entries(data, "contexts", "context", path)
        ]

        clusters = [
            KubeCluster(
                name=entry.get("name", ""),
                server=cluster.get("server"),
                certificate_authority_data=cluster.get("certificate-authority-data"),
                insecure_skip_tls_verify=bool(cluster.get("insecure-skip-tls-verify", False))
            )
            for entry, cluster in _entries(data, "clusters", "cluster", path)
        ]

        users = []
        for entry, user in _entries(data, "users", "user", path):
            exec_spec = user.get("exec")
            users.append(KubeUser(
                name=entry.get("name", ""),
                auth_type=_user_auth_type(user),
                exec_command=exec_spec.get("command") if isinstance(exec_spec, dict) else None
            ))

        return KubeConfig(
            path=path,
            contexts=contexts,
            clusters=clusters,
            users=users,
            current_context=data.get("current-context") or None
        )
    except ValidationError as e:
        raise ConfigurationException(
            f"kubeconfig at {path} is invalid: {e.error_count()} field error(s)",
            {"path": path, "errors": e.errors(include_url=False)}
        )


def load_kubeconfig(path: str) -> KubeConfig:
    """Load and parse the kubeconfig file at ``path``."""
    path = os.path.expanduser(path)
    if not os.path.isfile(path) or os.path.getsize(path) == 0:
        raise ConfigurationException(f"kubeconfig not found or empty at {path}", {"path": path})

    try:
        with open(path, 'r') as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationException(f"Failed to read kubeconfig at {path}: {e}", {"path": path})

    if data is None:
        raise ConfigurationException(f"kubeconfig not found or empty at {path}", {"path": path})

    kubeconfig = parse_kubeconfig(data, path)
    logger.debug(
        "Loaded kubeconfig",
        path=path,
        contexts=len(kubeconfig.contexts),
        current_context=kubeconfig.current_context
    )
    return kubeconfig
