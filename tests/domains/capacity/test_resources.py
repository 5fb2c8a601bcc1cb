"""Tests for capacity MCP resources."""

from collections.abc import Callable
from typing import Any
from unittest.mock import MagicMock

from cluster_insights_mcp.domains.capacity.resources import register_resources
from cluster_insights_mcp.domains.capacity.snapshot import StaticSnapshotSource
from cluster_insights_mcp.utils.errors import ClusterUnavailableError


def capture_resources(server: MagicMock) -> dict[str, Callable[[], dict[str, Any]]]:
    captured: dict[str, Callable[[], dict[str, Any]]] = {}

    def capture_resource(uri: str):
        def decorator(f):
            captured[uri] = f
            return f

        return decorator

    mock_mcp = MagicMock()
    mock_mcp.resource = capture_resource
    register_resources(mock_mcp, server)
    return captured


def test_cluster_snapshot_summary(cluster_source: StaticSnapshotSource) -> None:
    server = MagicMock()
    server.snapshot_source.return_value = cluster_source
    server.config.uses_static_inventory = True

    result = capture_resources(server)["insights://cluster/snapshot"]()

    assert result["source"] == "inventory-file"
    assert result["nodes"] == 3
    assert result["namespaces"] == 5
    assert result["pods"]["total"] == 8
    assert result["pods"]["active"] == 6
    assert result["pods"]["unscheduled"] == 1
    assert result["pods"]["by_phase"] == {
        "Running": 4,
        "Pending": 2,
        "Succeeded": 1,
        "Failed": 1,
    }


def test_cluster_snapshot_unavailable() -> None:
    server = MagicMock()
    server.snapshot_source.side_effect = ClusterUnavailableError("pods", "connection refused")

    result = capture_resources(server)["insights://cluster/snapshot"]()

    assert result["error"] == "ClusterUnavailable"
    assert result["resource"] == "pods"
