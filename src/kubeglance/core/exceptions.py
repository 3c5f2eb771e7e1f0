"""Custom exceptions for KubeGlance."""

import json
from typing import Optional, Dict, Any


class KubeGlanceException(Exception):
    """Base exception for KubeGlance."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ConfigurationException(KubeGlanceException):
    """Raised when the kubeconfig is missing, unreadable or inconsistent."""
    pass


class ContextNotFoundException(ConfigurationException):
    """Raised when a requested context is not present in the kubeconfig."""

    def __init__(self, context_name: str, available: Optional[list] = None):
        self.context_name = context_name
        super().__init__(
            f"Context not found: {context_name}",
            {"context": context_name, "available": list(available or [])}
        )


class ClientConnectionException(KubeGlanceException):
    """Raised when client connections fail."""

    def __init__(self, client_type: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.client_type = client_type
        super().__init__(f"{client_type} connection failed: {message}", details)


class ClusterAPIException(KubeGlanceException):
    """Raised when a critical cluster API call (version or nodes) fails."""

    def __init__(self, operation: str, body: Any):
        self.operation = operation
        self.body = body
        rendered = body if isinstance(body, str) else json.dumps(body, default=str)
        super().__init__(
            f"Cluster API request failed ({operation}): {rendered}",
            {"operation": operation, "body": body}
        )


class FallbackException(KubeGlanceException):
    """Raised when the external command-line fallback cannot produce data."""

    def __init__(self, kind: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.kind = kind
        super().__init__(f"Fallback failed for {kind}: {message}", details)
