from .fallback import FallbackExecutor, KubectlFallbackExecutor

__all__ = ["FallbackExecutor", "KubectlFallbackExecutor"]
