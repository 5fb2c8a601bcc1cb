"""Tests for PluginManager and the core plugin registry."""

from unittest.mock import MagicMock, Mock, patch

import pytest

from cluster_insights_mcp.domains.registry import CapacityPlugin, get_core_plugins
from cluster_insights_mcp.hooks import hookimpl
from cluster_insights_mcp.plugin import BasePlugin, PluginMetadata
from cluster_insights_mcp.plugin_manager import PLUGIN_ENTRY_POINT_GROUP, PluginManager
from cluster_insights_mcp.utils.errors import ClusterUnavailableError


def make_plugin(name: str, requires_cluster: bool = True) -> BasePlugin:
    return BasePlugin(
        PluginMetadata(
            name=name,
            version="1.0.0",
            description=f"{name} plugin",
            maintainer="test@example.com",
            requires_cluster=requires_cluster,
        )
    )


def make_entry_point(name: str, target: object) -> Mock:
    entry_point = Mock()
    entry_point.name = name
    entry_point.load.return_value = target
    return entry_point


class TestRegistration:
    """Tests for registering plugins."""

    def test_register_uses_metadata_name(self) -> None:
        pm = PluginManager()

        name = pm.register_plugin(make_plugin("alpha"))

        assert name == "alpha"
        assert "alpha" in pm.registered_plugins

    def test_duplicate_name_rejected(self) -> None:
        pm = PluginManager()
        pm.register_plugin(make_plugin("alpha"))

        with pytest.raises(ValueError, match="already registered"):
            pm.register_plugin(make_plugin("alpha"))

        assert len(pm.registered_plugins) == 1

    def test_plugin_without_metadata_rejected(self) -> None:
        class Bare:
            pass

        with pytest.raises(TypeError, match="does not provide plugin metadata"):
            PluginManager().register_plugin(Bare())

    def test_load_core_plugins(self) -> None:
        pm = PluginManager()

        count = pm.load_core_plugins()

        assert count == 1
        assert isinstance(pm.registered_plugins["capacity"], CapacityPlugin)

    def test_get_all_metadata(self) -> None:
        pm = PluginManager()
        pm.register_plugin(make_plugin("alpha"))
        pm.register_plugin(make_plugin("beta"))

        names = {meta.name for meta in pm.get_all_metadata()}

        assert names == {"alpha", "beta"}


class TestEntryPointPlugins:
    """Tests for load_entrypoint_plugins."""

    def test_loads_instances_and_classes(self) -> None:
        class GpuPlugin(BasePlugin):
            def __init__(self) -> None:
                super().__init__(make_plugin("gpu").metadata)

        pm = PluginManager()
        advertised = [
            make_entry_point("quota", make_plugin("quota")),
            make_entry_point("gpu", GpuPlugin),
        ]

        with patch(
            "cluster_insights_mcp.plugin_manager.entry_points", return_value=advertised
        ) as eps:
            count = pm.load_entrypoint_plugins()

        eps.assert_called_once_with(group=PLUGIN_ENTRY_POINT_GROUP)
        assert count == 2
        assert set(pm.registered_plugins) == {"quota", "gpu"}
        assert isinstance(pm.registered_plugins["gpu"], GpuPlugin)

    def test_broken_entry_points_are_skipped(self) -> None:
        pm = PluginManager()
        pm.load_core_plugins()
        broken = make_entry_point("broken", None)
        broken.load.side_effect = ImportError("no module named broken")
        advertised = [
            broken,
            make_entry_point("shadow", make_plugin("capacity")),
            make_entry_point("quota", make_plugin("quota")),
        ]

        with patch("cluster_insights_mcp.plugin_manager.entry_points", return_value=advertised):
            count = pm.load_entrypoint_plugins()

        assert count == 1
        assert set(pm.registered_plugins) == {"capacity", "quota"}
        assert isinstance(pm.registered_plugins["capacity"], CapacityPlugin)


class TestHealthChecks:
    """Tests for run_health_checks."""

    def test_unavailable_inventory_fails_cluster_plugins(self) -> None:
        pm = PluginManager()
        pm.register_plugin(make_plugin("needs-cluster"))
        pm.register_plugin(make_plugin("standalone", requires_cluster=False))
        server = Mock()
        server.snapshot_source.side_effect = ClusterUnavailableError(
            "cluster connection", "server is not connected to a Kubernetes cluster"
        )

        results = pm.run_health_checks(server)

        healthy, message = results["needs-cluster"]
        assert not healthy
        assert message.startswith("Cluster inventory unavailable")
        assert "not connected" in message
        assert results["standalone"] == (True, "No cluster requirements")
        assert set(pm.healthy_plugins) == {"standalone"}

    def test_available_inventory_makes_plugins_healthy(self) -> None:
        pm = PluginManager()
        pm.load_core_plugins()
        server = Mock()

        results = pm.run_health_checks(server)

        server.snapshot_source.assert_called_once()
        assert results["capacity"] == (True, "Cluster inventory available")
        assert "capacity" in pm.healthy_plugins

    def test_inventory_checked_once_per_run(self) -> None:
        pm = PluginManager()
        pm.register_plugin(make_plugin("alpha"))
        pm.register_plugin(make_plugin("beta"))
        server = Mock()

        pm.run_health_checks(server)

        server.snapshot_source.assert_called_once()

    def test_inventory_not_checked_without_cluster_plugins(self) -> None:
        pm = PluginManager()
        pm.register_plugin(make_plugin("standalone", requires_cluster=False))
        server = Mock()

        pm.run_health_checks(server)

        server.snapshot_source.assert_not_called()

    def test_rerun_rebuilds_healthy_set(self) -> None:
        pm = PluginManager()
        pm.load_core_plugins()
        server = Mock()
        pm.run_health_checks(server)

        server.snapshot_source.side_effect = ClusterUnavailableError("pods", "timed out")
        pm.run_health_checks(server)

        assert pm.healthy_plugins == {}

    def test_health_check_error_marks_unhealthy(self) -> None:
        class BrokenPlugin(BasePlugin):
            @hookimpl
            def ci_health_check(self, server: object) -> tuple[bool, str]:
                raise RuntimeError("quota lookup failed")

        pm = PluginManager()
        pm.register_plugin(BrokenPlugin(make_plugin("broken").metadata))

        results = pm.run_health_checks(Mock())

        assert results["broken"] == (False, "Health check error: quota lookup failed")
        assert pm.healthy_plugins == {}


class TestCorePlugins:
    """Tests for the core plugin registry."""

    def test_core_plugins(self) -> None:
        plugins = get_core_plugins()

        assert [plugin.metadata.name for plugin in plugins] == ["capacity"]
        assert plugins[0].metadata.requires_cluster

    def test_capacity_plugin_registers_tools_and_resources(self) -> None:
        pm = PluginManager()
        pm.load_core_plugins()
        mock_mcp = MagicMock()
        mock_mcp.tool = MagicMock(return_value=lambda f: f)
        mock_mcp.resource = MagicMock(return_value=lambda f: f)

        pm.register_all_tools(mock_mcp, MagicMock())
        pm.register_all_resources(mock_mcp, MagicMock())

        assert mock_mcp.tool.call_count == 6
        mock_mcp.resource.assert_called_once_with("insights://cluster/snapshot")
