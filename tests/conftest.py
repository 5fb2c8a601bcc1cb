"""Shared fixtures: a small cluster inventory with known totals.

Three nodes with 8 cores and 32Gi allocatable each. Non-terminal pods
request 12500m CPU and 48.2Gi memory in total; one of them is unscheduled.
Two terminal pods carry large requests that must never be counted.
"""

from datetime import datetime, timezone
from typing import Any

import pytest

from cluster_insights_mcp.domains.capacity.models import ClusterSnapshot
from cluster_insights_mcp.domains.capacity.snapshot import StaticSnapshotSource, build_snapshot

SNAPSHOT_TIME = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)


def _node(name: str) -> dict[str, Any]:
    return {
        "name": name,
        "capacity": {"cpu": "8", "memory": "33Gi"},
        "allocatable": {"cpu": "8000m", "memory": "32Gi"},
    }


@pytest.fixture
def cluster_inventory() -> dict[str, Any]:
    """Inventory dump as a snapshot source would supply it."""
    return {
        "nodes": [_node("node-a"), _node("node-b"), _node("node-c")],
        "pods": [
            {
                "name": "frontend-7d9f-abcde",
                "namespace": "shop",
                "node": "node-a",
                "phase": "Running",
                "requests": {"cpu": "2", "memory": "4Gi"},
                "limits": {"cpu": "4", "memory": "8Gi"},
            },
            {
                "name": "frontend-7d9f-fghij",
                "namespace": "shop",
                "node": "node-b",
                "phase": "Running",
                "requests": {"cpu": "2000m", "memory": "4Gi"},
            },
            {
                "name": "database-0",
                "namespace": "data",
                "node": "node-c",
                "phase": "Running",
                "requests": {"cpu": "4", "memory": "16Gi"},
                "limits": {"cpu": "4", "memory": "16Gi"},
            },
            {
                "name": "worker-1",
                "namespace": "batch",
                "node": "node-a",
                "phase": "Pending",
                "requests": {"cpu": "3500m", "memory": "20Gi"},
            },
            {
                "name": "cache-0",
                "namespace": "data",
                "node": None,
                "phase": "Pending",
                "requests": {"cpu": "1", "memory": "4.2Gi"},
            },
            {
                "name": "idle-pod",
                "namespace": "default",
                "node": "node-c",
                "phase": "Running",
            },
            {
                "name": "job-done",
                "namespace": "batch",
                "node": "node-b",
                "phase": "Succeeded",
                "requests": {"cpu": "8", "memory": "32Gi"},
            },
            {
                "name": "job-failed",
                "namespace": "batch",
                "node": "node-c",
                "phase": "Failed",
                "requests": {"cpu": "1", "memory": "1Gi"},
            },
        ],
        "namespaces": [
            {"name": "shop"},
            {"name": "data"},
            {"name": "batch"},
            {"name": "default"},
            {"name": "empty-ns"},
        ],
    }


@pytest.fixture
def cluster_source(cluster_inventory: dict[str, Any]) -> StaticSnapshotSource:
    return StaticSnapshotSource.from_dict(cluster_inventory)


@pytest.fixture
def cluster_snapshot(cluster_source: StaticSnapshotSource) -> ClusterSnapshot:
    return build_snapshot(cluster_source.fetch(), taken_at=SNAPSHOT_TIME)
