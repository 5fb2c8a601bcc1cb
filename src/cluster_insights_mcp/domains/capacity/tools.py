"""MCP Tools for cluster capacity analysis."""

import logging
from typing import TYPE_CHECKING, Any, Callable

from mcp.server.fastmcp import FastMCP

from cluster_insights_mcp.domains.capacity.client import CapacityClient
from cluster_insights_mcp.domains.capacity.responses import (
    cluster_capacity_response,
    fit_response,
    namespace_usage_response,
    node_breakdown_response,
    pod_stats_response,
    replica_capacity_response,
)
from cluster_insights_mcp.utils.errors import ClusterInsightsError

if TYPE_CHECKING:
    from cluster_insights_mcp.server import ClusterInsightsServer

logger = logging.getLogger(__name__)


def _run(tool_name: str, call: Callable[[], dict[str, Any]]) -> dict[str, Any]:
    """Run a tool body, converting failures into error results."""
    try:
        return call()
    except ClusterInsightsError as e:
        logger.info(f"{tool_name} failed: {e.message}")
        return e.to_dict()
    except Exception as e:
        logger.exception(f"Unexpected error in {tool_name}")
        return {
            "error": "Unexpected error",
            "message": str(e),
        }


def register_tools(mcp: FastMCP, server: "ClusterInsightsServer") -> None:
    """Register capacity analysis tools with the MCP server."""

    def client() -> CapacityClient:
        return CapacityClient(server.snapshot_source())

    @mcp.tool()
    def get_cluster_capacity() -> dict[str, Any]:
        """Get total, allocated and available CPU and memory for the cluster.

        Totals are the sum of node allocatable resources. Allocation is the
        sum of resource requests of all running and pending pods.

        Returns:
            Cluster capacity in cores and GB, utilization percentages, node
            count and an explanation.
        """
        return _run(
            "get_cluster_capacity",
            lambda: cluster_capacity_response(client().get_cluster_capacity()),
        )

    @mcp.tool()
    def check_resource_fit(cpu_cores: float, memory_gb: float) -> dict[str, Any]:
        """Check whether a workload of the given size fits in the cluster.

        The check compares against cluster-wide available resources and does
        not simulate scheduling onto individual nodes.

        Args:
            cpu_cores: CPU cores required (e.g. 2.5).
            memory_gb: Memory required in GB (e.g. 8).

        Returns:
            Whether the request fits, available resources, projected
            utilization and, when it does not fit, the shortfall.
        """
        return _run(
            "check_resource_fit",
            lambda: fit_response(client().check_resource_fit(cpu_cores, memory_gb)),
        )

    @mcp.tool()
    def get_node_breakdown() -> dict[str, Any]:
        """Get allocatable, allocated and available resources for each node.

        Returns:
            Per-node figures sorted by node name, plus resources requested by
            pods not assigned to any listed node.
        """
        return _run(
            "get_node_breakdown",
            lambda: node_breakdown_response(client().get_node_breakdown()),
        )

    @mcp.tool()
    def get_namespace_usage() -> dict[str, Any]:
        """Get CPU and memory requests and limits for each namespace.

        Returns:
            Namespaces sorted by CPU requests (descending) with pod counts.
        """
        return _run(
            "get_namespace_usage",
            lambda: namespace_usage_response(client().get_namespace_usage()),
        )

    @mcp.tool()
    def get_pod_resource_stats() -> dict[str, Any]:
        """Get the top 20 pods by CPU request.

        Returns:
            Pods with their namespace, node, phase, requests and limits.
        """
        return _run(
            "get_pod_resource_stats",
            lambda: pod_stats_response(client().get_pod_resource_stats()),
        )

    @mcp.tool()
    def check_replica_capacity(
        app_name: str,
        namespace: str,
        additional_replicas: int,
    ) -> dict[str, Any]:
        """Check whether more replicas of an existing application fit.

        The resource requests of a running pod of the application are used as
        the cost of each new replica.

        Args:
            app_name: Part of the application's pod names (e.g. "frontend").
            namespace: Namespace the application runs in.
            additional_replicas: Number of replicas to add (at least 1).

        Returns:
            Whether the replicas fit, the reference pod, per-replica and total
            resources, projected utilization and maximum possible replicas.
        """
        return _run(
            "check_replica_capacity",
            lambda: replica_capacity_response(
                client().check_replica_capacity(app_name, namespace, additional_replicas)
            ),
        )
