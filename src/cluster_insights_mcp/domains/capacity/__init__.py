"""Capacity domain - cluster capacity, fit and replica planning."""

from cluster_insights_mcp.domains.capacity.client import CapacityClient
from cluster_insights_mcp.domains.capacity.models import (
    ClusterCapacity,
    ClusterSnapshot,
    FitResult,
    NamespaceUsage,
    NodeBreakdown,
    PodRanking,
    ReplicaCapacityResult,
    ResourcePair,
)
from cluster_insights_mcp.domains.capacity.snapshot import (
    RawInventory,
    SnapshotSource,
    StaticSnapshotSource,
    build_snapshot,
)

__all__ = [
    "CapacityClient",
    "ClusterCapacity",
    "ClusterSnapshot",
    "FitResult",
    "NamespaceUsage",
    "NodeBreakdown",
    "PodRanking",
    "RawInventory",
    "ReplicaCapacityResult",
    "ResourcePair",
    "SnapshotSource",
    "StaticSnapshotSource",
    "build_snapshot",
]
