"""Plugin interface for Cluster Insights MCP components.

This module defines the plugin base class and metadata that all plugins
use to integrate with the server via pluggy hooks.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from cluster_insights_mcp.hooks import hookimpl

if TYPE_CHECKING:
    from mcp.server.fastmcp import FastMCP

    from cluster_insights_mcp.server import ClusterInsightsServer


@dataclass
class PluginMetadata:
    """Metadata describing a Cluster Insights plugin."""

    name: str
    """Unique plugin name, e.g., 'capacity'."""

    version: str
    """Plugin version following semver, e.g., '1.0.0'."""

    description: str
    """Human-readable description of what this plugin provides."""

    maintainer: str
    """Maintainer email or team."""

    requires_cluster: bool = True
    """Whether the plugin needs cluster inventory to serve its tools.

    Plugins that need the cluster report unhealthy while the server has
    neither a connected Kubernetes client nor a static inventory.
    """


class BasePlugin:
    """Base implementation of a plugin with default hook methods.

    Subclasses override the hooks they need. All hook methods are
    decorated with @hookimpl to register them with pluggy.

    Example entry point in pyproject.toml for external plugins:
        [project.entry-points."cluster_insights_mcp.plugins"]
        my_plugin = "my_package.plugin:MyPlugin"
    """

    def __init__(self, metadata: PluginMetadata) -> None:
        self._metadata = metadata

    @property
    def metadata(self) -> PluginMetadata:
        """Plugin metadata."""
        return self._metadata

    @hookimpl
    def ci_get_plugin_metadata(self) -> PluginMetadata:
        """Return plugin metadata."""
        return self._metadata

    @hookimpl
    def ci_register_tools(self, mcp: FastMCP, server: ClusterInsightsServer) -> None:
        """Register MCP tools. Override in subclass."""
        pass

    @hookimpl
    def ci_register_resources(self, mcp: FastMCP, server: ClusterInsightsServer) -> None:
        """Register MCP resources. Override in subclass."""
        pass

    @hookimpl
    def ci_health_check(self, server: ClusterInsightsServer) -> tuple[bool, str]:
        """Report plugin-specific readiness. Override in subclass.

        The plugin manager only calls this for cluster-bound plugins once
        the cluster inventory is known to be reachable.
        """
        if not self._metadata.requires_cluster:
            return True, "No cluster requirements"
        return True, "Cluster inventory available"
