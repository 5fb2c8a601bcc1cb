"""MCP Resources for cluster capacity analysis."""

import logging
from typing import TYPE_CHECKING, Any

from mcp.server.fastmcp import FastMCP

from cluster_insights_mcp.domains.capacity.snapshot import build_snapshot
from cluster_insights_mcp.utils.errors import ClusterInsightsError

if TYPE_CHECKING:
    from cluster_insights_mcp.server import ClusterInsightsServer

logger = logging.getLogger(__name__)


def register_resources(mcp: FastMCP, server: "ClusterInsightsServer") -> None:
    """Register capacity resources with the MCP server."""

    @mcp.resource("insights://cluster/snapshot")
    def cluster_snapshot() -> dict[str, Any]:
        """Get a summary of the current cluster inventory.

        Returns node, pod and namespace counts along with the pods broken
        down by phase, so agents can judge the scale of the cluster before
        calling the capacity tools.
        """
        try:
            snapshot = build_snapshot(server.snapshot_source().fetch())
        except ClusterInsightsError as e:
            return e.to_dict()

        phases: dict[str, int] = {}
        for pod in snapshot.pods:
            phases[pod.phase.value] = phases.get(pod.phase.value, 0) + 1

        return {
            "source": "inventory-file" if server.config.uses_static_inventory else "cluster",
            "snapshot_time": snapshot.taken_at.isoformat(),
            "nodes": len(snapshot.nodes),
            "namespaces": len(snapshot.namespaces),
            "pods": {
                "total": len(snapshot.pods),
                "active": len(snapshot.active_pods),
                "unscheduled": sum(1 for pod in snapshot.active_pods if pod.node is None),
                "by_phase": phases,
            },
        }
