"""Configuration for the Cluster Insights MCP server.

Settings are loaded from environment variables with the
``CLUSTER_INSIGHTS_`` prefix or from a ``.env`` file, and can be
overridden by command line arguments.
"""

from __future__ import annotations

import os
from enum import Enum
from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class TransportMode(str, Enum):
    """MCP transport used to serve tools."""

    STDIO = "stdio"
    SSE = "sse"
    STREAMABLE_HTTP = "streamable-http"


class AuthMode(str, Enum):
    """How the server authenticates to the Kubernetes API."""

    AUTO = "auto"
    KUBECONFIG = "kubeconfig"
    TOKEN = "token"


class LogLevel(str, Enum):
    """Logging verbosity."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


class ClusterInsightsConfig(BaseSettings):
    """Configuration for the Cluster Insights MCP server."""

    model_config = SettingsConfigDict(
        env_prefix="CLUSTER_INSIGHTS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Transport
    transport: TransportMode = Field(
        default=TransportMode.STDIO,
        description="MCP transport mode",
    )
    host: str = Field(default="127.0.0.1", description="Host for HTTP transports")
    port: int = Field(default=8000, ge=1, le=65535, description="Port for HTTP transports")

    # Kubernetes access
    auth_mode: AuthMode = Field(
        default=AuthMode.AUTO,
        description="Authentication mode (auto tries in-cluster first, then kubeconfig)",
    )
    kubeconfig_path: Path | None = Field(
        default=None,
        description="Path to kubeconfig file (default: ~/.kube/config)",
    )
    kubeconfig_context: str | None = Field(
        default=None,
        description="Kubeconfig context to use",
    )
    api_server: str | None = Field(
        default=None,
        description="Kubernetes API server URL for token authentication",
    )
    api_token: str | None = Field(
        default=None,
        description="Bearer token for token authentication",
    )
    verify_ssl: bool = Field(default=True, description="Verify API server TLS certificates")

    # Snapshot fetching
    concurrent_fetch: bool = Field(
        default=True,
        description="List nodes, pods and namespaces concurrently",
    )
    request_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Timeout applied to each Kubernetes list request",
    )
    page_size: int = Field(
        default=500,
        ge=1,
        description="Items requested per page when listing cluster resources",
    )
    inventory_file: Path | None = Field(
        default=None,
        description="Serve a static JSON/YAML inventory dump instead of a live cluster",
    )

    # Logging
    log_level: LogLevel = Field(default=LogLevel.INFO, description="Logging level")

    @property
    def effective_kubeconfig_path(self) -> Path:
        """Kubeconfig path, falling back to KUBECONFIG and ~/.kube/config."""
        if self.kubeconfig_path is not None:
            return self.kubeconfig_path.expanduser()
        env_path = os.environ.get("KUBECONFIG")
        if env_path:
            # KUBECONFIG may hold several paths; the first one is loaded
            return Path(env_path.split(os.pathsep)[0]).expanduser()
        return Path.home() / ".kube" / "config"

    @property
    def uses_static_inventory(self) -> bool:
        """Whether analysis runs against an inventory file instead of a cluster."""
        return self.inventory_file is not None

    def validate_auth_config(self) -> list[str]:
        """Validate the combination of authentication settings.

        Returns:
            Warnings that do not prevent startup.

        Raises:
            ValueError: If the configuration cannot work.
        """
        warnings: list[str] = []

        inventory_file = self.inventory_file
        if inventory_file is not None:
            if not inventory_file.exists():
                raise ValueError(f"Inventory file not found: {inventory_file}")
            warnings.append(
                f"Serving static inventory from {inventory_file}; "
                "results do not reflect a live cluster"
            )
            return warnings

        if self.auth_mode == AuthMode.TOKEN:
            if not self.api_server:
                raise ValueError("Token auth mode requires CLUSTER_INSIGHTS_API_SERVER")
            if not self.api_token:
                raise ValueError("Token auth mode requires CLUSTER_INSIGHTS_API_TOKEN")
        elif self.auth_mode == AuthMode.KUBECONFIG:
            if not self.effective_kubeconfig_path.exists():
                raise ValueError(f"Kubeconfig not found: {self.effective_kubeconfig_path}")

        if not self.verify_ssl:
            warnings.append("TLS verification is disabled for the Kubernetes API")

        return warnings


@lru_cache(maxsize=1)
def get_config() -> ClusterInsightsConfig:
    """Get the process-wide configuration loaded from the environment."""
    return ClusterInsightsConfig()
