"""FastMCP server definition for Cluster Insights with pluggy-based plugins."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Callable
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from http import HTTPStatus
from typing import Any

from mcp.server.fastmcp import FastMCP
from starlette.requests import Request
from starlette.responses import JSONResponse

from cluster_insights_mcp.clients.base import K8sClient
from cluster_insights_mcp.clients.inventory import KubernetesSnapshotSource
from cluster_insights_mcp.config import ClusterInsightsConfig, get_config
from cluster_insights_mcp.domains.capacity.snapshot import SnapshotSource, StaticSnapshotSource
from cluster_insights_mcp.plugin_manager import PluginManager
from cluster_insights_mcp.utils.errors import ClusterUnavailableError

logger = logging.getLogger(__name__)


class ClusterInsightsServer:
    """Cluster Insights MCP server with plugin discovery."""

    def __init__(self, config: ClusterInsightsConfig | None = None) -> None:
        self._config = config or get_config()
        self._k8s_client: K8sClient | None = None
        self._mcp: FastMCP | None = None
        self._plugin_manager: PluginManager | None = None

    @property
    def config(self) -> ClusterInsightsConfig:
        """Get server configuration."""
        return self._config

    @property
    def k8s(self) -> K8sClient:
        """Get the Kubernetes client.

        Raises:
            RuntimeError: If server is not running.
        """
        if self._k8s_client is None:
            raise RuntimeError("Server not running. K8s client not available.")
        return self._k8s_client

    @property
    def mcp(self) -> FastMCP:
        """Get the MCP server instance.

        Raises:
            RuntimeError: If server is not initialized.
        """
        if self._mcp is None:
            raise RuntimeError("Server not initialized.")
        return self._mcp

    @property
    def plugin_manager(self) -> PluginManager:
        """Get the plugin manager.

        Raises:
            RuntimeError: If server is not initialized.
        """
        if self._plugin_manager is None:
            raise RuntimeError("Server not initialized.")
        return self._plugin_manager

    @property
    def is_connected(self) -> bool:
        """Whether cluster inventory can be fetched."""
        if self._config.uses_static_inventory:
            return True
        return self._k8s_client is not None and self._k8s_client.is_connected

    def snapshot_source(self) -> SnapshotSource:
        """Create a snapshot source for one tool call.

        An inventory file is re-read on every call so edits to it are
        picked up without restarting the server.

        Raises:
            ClusterUnavailableError: If no cluster connection is available.
            ConfigurationError: If the inventory file cannot be loaded.
        """
        if self._config.inventory_file is not None:
            return StaticSnapshotSource.from_file(self._config.inventory_file)

        if self._k8s_client is None or not self._k8s_client.is_connected:
            raise ClusterUnavailableError(
                "cluster connection", "server is not connected to a Kubernetes cluster"
            )
        return KubernetesSnapshotSource(
            self._k8s_client,
            concurrent=self._config.concurrent_fetch,
            request_timeout=self._config.request_timeout_seconds,
            page_size=self._config.page_size,
        )

    def startup(self) -> None:
        """Connect to the cluster and run plugin health checks.

        A client that is already connected is kept. Safe to call more
        than once.
        """
        if self._config.uses_static_inventory:
            logger.info(f"Using static inventory from {self._config.inventory_file}")
        elif self._k8s_client is None or not self._k8s_client.is_connected:
            self._k8s_client = K8sClient(self._config)
            self._k8s_client.connect()

        if self._plugin_manager is not None:
            self._plugin_manager.run_health_checks(self)
            logger.info(
                f"Cluster Insights MCP server started with "
                f"{len(self._plugin_manager.healthy_plugins)}/"
                f"{len(self._plugin_manager.registered_plugins)} plugins active"
            )

    def shutdown(self) -> None:
        """Disconnect from the cluster."""
        if self._k8s_client is not None:
            self._k8s_client.disconnect()
        self._k8s_client = None
        logger.info("Cluster Insights MCP server shut down")

    def _create_lifespan(self) -> Callable[[Any], AbstractAsyncContextManager[None]]:
        """Create the lifespan context manager for the MCP server."""
        server_self = self

        @asynccontextmanager
        async def lifespan(_app: Any) -> AsyncIterator[None]:
            """Manage server lifecycle - connect K8s on startup, disconnect on shutdown."""
            logger.info("Starting Cluster Insights MCP server...")
            try:
                server_self.startup()
                yield
            finally:
                logger.info("Shutting down Cluster Insights MCP server...")
                server_self.shutdown()

        return lifespan

    def create_mcp(self) -> FastMCP:
        """Create and configure the FastMCP server."""
        self._plugin_manager = PluginManager()
        self._plugin_manager.load_core_plugins()
        self._plugin_manager.load_entrypoint_plugins()

        mcp = FastMCP(
            name="cluster-insights-mcp",
            instructions="MCP server for Kubernetes cluster capacity analysis - enables AI "
            "agents to inspect cluster, node and namespace resource allocation, find the "
            "largest pods, and check whether new workloads or replicas fit.",
            lifespan=self._create_lifespan(),
            host=self._config.host,
            port=self._config.port,
        )
        self._mcp = mcp

        self._plugin_manager.register_all_tools(mcp, self)
        self._plugin_manager.register_all_resources(mcp, self)

        self._register_health_endpoint(mcp)
        self._register_core_resources(mcp)

        return mcp

    def _health_payload(self) -> tuple[dict[str, Any], HTTPStatus]:
        connected = self.is_connected
        registered = self._plugin_manager.registered_plugins if self._plugin_manager else {}
        healthy = self._plugin_manager.healthy_plugins if self._plugin_manager else {}

        payload = {
            "status": "healthy" if connected else "unhealthy",
            "connected": connected,
            "source": "inventory-file" if self._config.uses_static_inventory else "cluster",
            "plugins": {
                "total": len(registered),
                "healthy": len(healthy),
            },
        }
        status = HTTPStatus.OK if connected else HTTPStatus.SERVICE_UNAVAILABLE
        return payload, status

    def _register_health_endpoint(self, mcp: FastMCP) -> None:
        """Register the /health route used by HTTP transports."""

        @mcp.custom_route("/health", methods=["GET"])
        async def health(_request: Request) -> JSONResponse:
            payload, status = self._health_payload()
            return JSONResponse(payload, status_code=status)

    def _register_core_resources(self, mcp: FastMCP) -> None:
        """Register core MCP resources describing the server itself."""

        @mcp.resource("insights://server/plugins")
        def server_plugins() -> dict:
            """Get information about loaded plugins and their health."""
            if self._plugin_manager is None:
                return {"total_plugins": 0, "active_plugins": 0, "plugins": {}}

            healthy = self._plugin_manager.healthy_plugins
            plugin_info = {
                meta.name: {
                    "version": meta.version,
                    "description": meta.description,
                    "maintainer": meta.maintainer,
                    "requires_cluster": meta.requires_cluster,
                    "healthy": meta.name in healthy,
                }
                for meta in self._plugin_manager.get_all_metadata()
            }
            return {
                "total_plugins": len(self._plugin_manager.registered_plugins),
                "active_plugins": len(healthy),
                "plugins": plugin_info,
            }

        logger.info("Registered core MCP resources")


def create_server(config: ClusterInsightsConfig | None = None) -> FastMCP:
    """Create and return the MCP server instance.

    This is the main entry point for creating the server.
    """
    return ClusterInsightsServer(config).create_mcp()
