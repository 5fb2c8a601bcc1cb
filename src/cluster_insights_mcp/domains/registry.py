"""Registry of core domain plugins.

Each domain exposes its tools and resources through a plugin class using
pluggy hooks. The plugin manager loads the plugins returned by
``get_core_plugins``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from cluster_insights_mcp import __version__
from cluster_insights_mcp.hooks import hookimpl
from cluster_insights_mcp.plugin import BasePlugin, PluginMetadata

if TYPE_CHECKING:
    from mcp.server.fastmcp import FastMCP

    from cluster_insights_mcp.server import ClusterInsightsServer


class CapacityPlugin(BasePlugin):
    """Plugin for cluster capacity analysis.

    Provides cluster-wide and per-node capacity, namespace and pod
    resource statistics, and fit checks for new workloads or replicas.
    """

    def __init__(self) -> None:
        super().__init__(
            PluginMetadata(
                name="capacity",
                version=__version__,
                description="Cluster capacity analysis and fit checks",
                maintainer="cluster-insights-mcp maintainers",
                requires_cluster=True,
            )
        )

    @hookimpl
    def ci_register_tools(self, mcp: FastMCP, server: ClusterInsightsServer) -> None:
        from cluster_insights_mcp.domains.capacity.tools import register_tools

        register_tools(mcp, server)

    @hookimpl
    def ci_register_resources(self, mcp: FastMCP, server: ClusterInsightsServer) -> None:
        from cluster_insights_mcp.domains.capacity.resources import register_resources

        register_resources(mcp, server)


def get_core_plugins() -> list[BasePlugin]:
    """Return instances of all core domain plugins."""
    return [CapacityPlugin()]
