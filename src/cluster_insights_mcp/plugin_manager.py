"""Plugin manager for Cluster Insights MCP.

Plugins are registered under the name from their metadata. Cluster-bound
plugins are only reported healthy when the server can produce a snapshot
source, either from a connected cluster or from an inventory file.
"""

from __future__ import annotations

import logging
from importlib.metadata import entry_points
from typing import TYPE_CHECKING, Any

import pluggy

from cluster_insights_mcp.hooks import PROJECT_NAME, ClusterInsightsHookSpec
from cluster_insights_mcp.utils.errors import ClusterInsightsError

if TYPE_CHECKING:
    from mcp.server.fastmcp import FastMCP

    from cluster_insights_mcp.plugin import PluginMetadata
    from cluster_insights_mcp.server import ClusterInsightsServer

logger = logging.getLogger(__name__)

PLUGIN_ENTRY_POINT_GROUP = "cluster_insights_mcp.plugins"


class PluginManager:
    """Registers plugins and fans MCP registration and health checks out to them."""

    def __init__(self) -> None:
        self._pm = pluggy.PluginManager(PROJECT_NAME)
        self._pm.add_hookspecs(ClusterInsightsHookSpec)
        self._registered_plugins: dict[str, Any] = {}
        self._healthy_plugins: dict[str, Any] = {}

    @property
    def registered_plugins(self) -> dict[str, Any]:
        """Registered plugins by name."""
        return self._registered_plugins

    @property
    def healthy_plugins(self) -> dict[str, Any]:
        """Plugins that passed the last health check run."""
        return self._healthy_plugins

    def register_plugin(self, plugin: Any) -> str:
        """Register a plugin under its metadata name.

        Raises:
            TypeError: If the plugin does not implement ci_get_plugin_metadata.
            ValueError: If a plugin with the same name is already registered.
        """
        get_metadata = getattr(plugin, "ci_get_plugin_metadata", None)
        if get_metadata is None:
            raise TypeError(f"{type(plugin).__name__} does not provide plugin metadata")

        name = get_metadata().name
        if name in self._registered_plugins:
            raise ValueError(f"Plugin '{name}' is already registered")

        self._pm.register(plugin, name=name)
        self._registered_plugins[name] = plugin
        logger.debug(f"Registered plugin: {name}")
        return name

    def load_core_plugins(self) -> int:
        """Register the built-in domain plugins."""
        from cluster_insights_mcp.domains.registry import get_core_plugins

        plugins = get_core_plugins()
        for plugin in plugins:
            self.register_plugin(plugin)

        logger.info(f"Loaded {len(plugins)} core domain plugins")
        return len(plugins)

    def load_entrypoint_plugins(self) -> int:
        """Register plugins advertised under the cluster_insights_mcp.plugins group.

        An entry point may name a plugin class or a plugin instance. Entry
        points that fail to load or register are logged and skipped.

        Returns:
            Number of plugins registered.
        """
        loaded = 0
        for entry_point in entry_points(group=PLUGIN_ENTRY_POINT_GROUP):
            try:
                target = entry_point.load()
                plugin = target() if isinstance(target, type) else target
                name = self.register_plugin(plugin)
            except Exception as e:
                logger.warning(f"Skipping plugin entry point {entry_point.name}: {e}")
                continue
            logger.info(f"Loaded external plugin {name} from entry point {entry_point.name}")
            loaded += 1

        if loaded:
            logger.info(f"Loaded {loaded} external plugins from entry points")
        return loaded

    def get_all_metadata(self) -> list[PluginMetadata]:
        """Collect metadata from all registered plugins."""
        return [meta for meta in self._pm.hook.ci_get_plugin_metadata() if meta is not None]

    def register_all_tools(self, mcp: FastMCP, server: ClusterInsightsServer) -> None:
        """Let every plugin register its MCP tools."""
        self._pm.hook.ci_register_tools(mcp=mcp, server=server)
        logger.info(f"Registered tools from {len(self._registered_plugins)} plugins")

    def register_all_resources(self, mcp: FastMCP, server: ClusterInsightsServer) -> None:
        """Let every plugin register its MCP resources."""
        self._pm.hook.ci_register_resources(mcp=mcp, server=server)
        logger.info(f"Registered resources from {len(self._registered_plugins)} plugins")

    @staticmethod
    def _inventory_status(server: ClusterInsightsServer) -> tuple[bool, str]:
        try:
            server.snapshot_source()
        except ClusterInsightsError as e:
            return False, f"Cluster inventory unavailable: {e.message}"
        return True, "Cluster inventory available"

    def run_health_checks(self, server: ClusterInsightsServer) -> dict[str, tuple[bool, str]]:
        """Check every plugin and rebuild the healthy set.

        The snapshot source is checked at most once per run, and only when
        a registered plugin requires the cluster. Plugins needing an
        unavailable inventory are not asked for their own check.

        Returns:
            Plugin name mapped to a (healthy, message) tuple.
        """
        results: dict[str, tuple[bool, str]] = {}
        inventory: tuple[bool, str] | None = None
        self._healthy_plugins.clear()

        for name, plugin in self._registered_plugins.items():
            try:
                if plugin.ci_get_plugin_metadata().requires_cluster:
                    if inventory is None:
                        inventory = self._inventory_status(server)
                    if not inventory[0]:
                        results[name] = inventory
                        logger.warning(f"Plugin {name} unavailable: {inventory[1]}")
                        continue
                results[name] = plugin.ci_health_check(server=server)
            except Exception as e:
                results[name] = (False, f"Health check error: {e}")
                logger.warning(f"Plugin {name} health check failed with error: {e}")
                continue

            if results[name][0]:
                self._healthy_plugins[name] = plugin
                logger.info(f"Plugin {name} health check passed: {results[name][1]}")
            else:
                logger.warning(f"Plugin {name} unavailable: {results[name][1]}")

        return results
