"""Unit tests for hook specifications."""

import pluggy

from cluster_insights_mcp.hooks import PROJECT_NAME, ClusterInsightsHookSpec, hookimpl
from cluster_insights_mcp.plugin import PluginMetadata

HOOK_NAMES = (
    "ci_get_plugin_metadata",
    "ci_register_tools",
    "ci_register_resources",
    "ci_health_check",
)


class TestHookSpec:
    """Tests for ClusterInsightsHookSpec."""

    def test_project_name_defined(self) -> None:
        """Verify project name is defined correctly."""
        assert PROJECT_NAME == "cluster_insights_mcp"

    def test_hookspec_has_required_methods(self) -> None:
        """Verify hookspec defines all required hook methods."""
        spec = ClusterInsightsHookSpec()

        for hook_name in HOOK_NAMES:
            assert hasattr(spec, hook_name)

    def test_hookspec_can_be_added_to_pluggy(self) -> None:
        """Verify hookspec can be registered with pluggy."""
        pm = pluggy.PluginManager(PROJECT_NAME)
        pm.add_hookspecs(ClusterInsightsHookSpec)

        for hook_name in HOOK_NAMES:
            assert hasattr(pm.hook, hook_name)


class TestHookImpl:
    """Tests for hook implementations."""

    def test_hookimpl_decorator_works(self) -> None:
        """Verify hookimpl decorator can be used on methods."""

        class TestPlugin:
            @hookimpl
            def ci_get_plugin_metadata(self) -> dict:
                return {"name": "test"}

        plugin = TestPlugin()
        assert hasattr(plugin.ci_get_plugin_metadata, "cluster_insights_mcp_impl")

    def test_multiple_plugins_can_register(self) -> None:
        """Verify multiple plugins can be registered and hooks called."""

        class PluginA:
            @hookimpl
            def ci_get_plugin_metadata(self) -> PluginMetadata:
                return PluginMetadata(
                    name="plugin_a",
                    version="1.0.0",
                    description="Plugin A",
                    maintainer="test@example.com",
                )

        class PluginB:
            @hookimpl
            def ci_get_plugin_metadata(self) -> PluginMetadata:
                return PluginMetadata(
                    name="plugin_b",
                    version="2.0.0",
                    description="Plugin B",
                    maintainer="test@example.com",
                    requires_cluster=False,
                )

        pm = pluggy.PluginManager(PROJECT_NAME)
        pm.add_hookspecs(ClusterInsightsHookSpec)
        pm.register(PluginA())
        pm.register(PluginB())

        results = pm.hook.ci_get_plugin_metadata()
        assert {r.name for r in results} == {"plugin_a", "plugin_b"}
