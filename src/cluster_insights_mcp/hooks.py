"""Pluggy hook specifications for Cluster Insights MCP plugins.

Plugins implement these hooks with the ``hookimpl`` marker to contribute
tools and resources to the server and to report their health.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import pluggy

if TYPE_CHECKING:
    from mcp.server.fastmcp import FastMCP

    from cluster_insights_mcp.plugin import PluginMetadata
    from cluster_insights_mcp.server import ClusterInsightsServer

PROJECT_NAME = "cluster_insights_mcp"

hookspec = pluggy.HookspecMarker(PROJECT_NAME)
hookimpl = pluggy.HookimplMarker(PROJECT_NAME)


class ClusterInsightsHookSpec:
    """Hooks a Cluster Insights plugin may implement."""

    @hookspec
    def ci_get_plugin_metadata(self) -> PluginMetadata:  # type: ignore[empty-body]
        """Return metadata describing the plugin."""

    @hookspec
    def ci_register_tools(self, mcp: FastMCP, server: ClusterInsightsServer) -> None:
        """Register MCP tools with the server."""

    @hookspec
    def ci_register_resources(self, mcp: FastMCP, server: ClusterInsightsServer) -> None:
        """Register MCP resources with the server."""

    @hookspec
    def ci_health_check(self, server: ClusterInsightsServer) -> tuple[bool, str]:  # type: ignore[empty-body]
        """Report whether the plugin can serve requests, with a message."""
