# config/settings.py
from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional, List
from enum import Enum
import os
from dotenv import load_dotenv

# Load .env file explicitly
load_dotenv()

DEFAULT_KUBECONFIG = os.path.join(os.path.expanduser("~"), ".kube", "config")

DEFAULT_EXTRA_BIN_PATHS = [
    os.path.join(os.path.expanduser("~"), ".local", "bin"),
    "/usr/local/bin",
    "/usr/bin",
    "/bin",
]


class LogLevel(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormat(str, Enum):
    JSON = "json"
    TEXT = "text"


class KubernetesSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="K8S_", populate_by_name=True)

    kubeconfig_path: str = Field(
        DEFAULT_KUBECONFIG,
        validation_alias=AliasChoices("kubeconfig_path", "KUBECONFIG_PATH", "K8S_KUBECONFIG_PATH"),
        description="Path to kubeconfig file"
    )
    context: Optional[str] = Field(None, description="Kubernetes context to use")

    @field_validator('kubeconfig_path', mode='after')
    @classmethod
    def expand_kubeconfig_path(cls, v):
        return os.path.expanduser(v)


class FallbackSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="FALLBACK_")

    enabled: bool = Field(True, description="Use kubectl when the API path returns nothing")
    kubectl_binary: str = Field("kubectl", description="kubectl executable name or path")
    concurrency: int = Field(1, ge=1, description="Maximum concurrent kubectl processes")
    augment_path: bool = Field(True, description="Append extra_bin_paths to PATH at startup")
    extra_bin_paths: List[str] = Field(
        default_factory=lambda: list(DEFAULT_EXTRA_BIN_PATHS),
        description="Directories searched for kubectl and exec credential plugins"
    )


class SummarySettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="SUMMARY_")

    timeout_seconds: float = Field(60.0, gt=0, description="Timeout for one summary build")
    refresh_interval_seconds: float = Field(0.0, ge=0, description="Refresh interval, 0 runs once")


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    debug: bool = Field(False, description="Debug mode")
    log_level: LogLevel = Field(LogLevel.INFO, description="Log level")
    log_format: LogFormat = Field(LogFormat.TEXT, description="Log format (json or text)")

    kubernetes: KubernetesSettings = Field(default_factory=lambda: KubernetesSettings())
    fallback: FallbackSettings = Field(default_factory=lambda: FallbackSettings())
    summary: SummarySettings = Field(default_factory=lambda: SummarySettings())

    @field_validator('log_level', mode='before')
    @classmethod
    def validate_log_level(cls, v):
        if isinstance(v, str):
            return LogLevel(v.upper())
        return v

    @field_validator('log_format', mode='before')
    @classmethod
    def validate_log_format(cls, v):
        if isinstance(v, str):
            return LogFormat(v.lower())
        return v

    @classmethod
    def create_from_env(cls) -> "Settings":
        """Create settings instance from environment variables."""
        return cls()
