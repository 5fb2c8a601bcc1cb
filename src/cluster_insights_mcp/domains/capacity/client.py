"""Client for cluster capacity analysis.

The client owns no cluster connection of its own. It asks the injected
snapshot source for a fresh inventory on every call, so no result is ever
computed from cached data.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from cluster_insights_mcp.domains.capacity.aggregation import (
    TOP_POD_LIMIT,
    aggregate_namespaces,
    compute_cluster_capacity,
    compute_node_breakdown,
    rank_pods,
)
from cluster_insights_mcp.domains.capacity.explain import (
    explain_cluster_capacity,
    explain_fit,
    explain_namespace_usage,
    explain_node_breakdown,
    explain_pod_ranking,
    explain_replica_capacity,
)
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
from cluster_insights_mcp.domains.capacity.planning import check_fit, plan_replicas
from cluster_insights_mcp.domains.capacity.quantity import cores_to_millicores, gb_to_bytes
from cluster_insights_mcp.domains.capacity.snapshot import SnapshotSource, build_snapshot
from cluster_insights_mcp.utils.errors import InvalidParameterError

logger = logging.getLogger(__name__)


def _require_name(parameter: str, value: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvalidParameterError(parameter, value, "must be a non-empty string")
    return value.strip()


def _require_replicas(value: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidParameterError("additional_replicas", value, "must be an integer")
    if value < 1:
        raise InvalidParameterError("additional_replicas", value, "must be at least 1")
    return value


class CapacityClient:
    """Client for capacity, fit and replica planning queries."""

    def __init__(self, source: SnapshotSource) -> None:
        self._source = source

    def _snapshot(self) -> ClusterSnapshot:
        """Fetch the inventory and parse it into a snapshot.

        Raises:
            ClusterUnavailableError: If the source cannot supply the inventory.
            MalformedQuantityError: If any quantity in it is malformed.
        """
        inventory = self._source.fetch()
        snapshot = build_snapshot(inventory, taken_at=datetime.now(timezone.utc))
        logger.debug(
            f"Built snapshot with {len(snapshot.nodes)} nodes, {len(snapshot.pods)} pods, "
            f"{len(snapshot.namespaces)} namespaces"
        )
        return snapshot

    def get_cluster_capacity(self) -> ClusterCapacity:
        """Get total, allocated and available cluster resources."""
        capacity = compute_cluster_capacity(self._snapshot())
        return capacity.model_copy(update={"explanation": explain_cluster_capacity(capacity)})

    def check_resource_fit(self, cpu_cores: float, memory_gb: float) -> FitResult:
        """Check whether a request of ``cpu_cores`` and ``memory_gb`` fits.

        Args:
            cpu_cores: CPU cores required.
            memory_gb: Memory required in GB.

        Returns:
            The fit result against current cluster-wide availability.

        Raises:
            InvalidParameterError: If either amount is negative or not finite.
        """
        requested = ResourcePair(
            cpu=cores_to_millicores(cpu_cores, "cpu_cores"),
            memory=gb_to_bytes(memory_gb, "memory_gb"),
        )
        capacity = compute_cluster_capacity(self._snapshot())
        result = check_fit(capacity, requested)
        logger.debug(f"Fit check for {cpu_cores} cores, {memory_gb} GB: fits={result.fits}")
        return result.model_copy(update={"explanation": explain_fit(result)})

    def get_node_breakdown(self) -> NodeBreakdown:
        """Get per-node allocation."""
        breakdown = compute_node_breakdown(self._snapshot())
        return breakdown.model_copy(update={"explanation": explain_node_breakdown(breakdown)})

    def get_namespace_usage(self) -> NamespaceUsage:
        """Get requests and limits per namespace."""
        usage = aggregate_namespaces(self._snapshot())
        return usage.model_copy(update={"explanation": explain_namespace_usage(usage)})

    def get_pod_resource_stats(self) -> PodRanking:
        """Get the top pods by CPU request."""
        ranking = rank_pods(self._snapshot(), limit=TOP_POD_LIMIT)
        return ranking.model_copy(update={"explanation": explain_pod_ranking(ranking)})

    def check_replica_capacity(
        self,
        app_name: str,
        namespace: str,
        additional_replicas: int,
    ) -> ReplicaCapacityResult:
        """Check whether more replicas of an existing application fit.

        Args:
            app_name: Fragment of the pod names of the application.
            namespace: Namespace the application runs in.
            additional_replicas: Number of replicas to add, at least 1.

        Returns:
            The replica projection based on the reference pod's requests.

        Raises:
            InvalidParameterError: If a parameter is rejected.
            ReferencePodNotFoundError: If no pod matches ``app_name``.
        """
        app_name = _require_name("app_name", app_name)
        namespace = _require_name("namespace", namespace)
        additional_replicas = _require_replicas(additional_replicas)

        snapshot = self._snapshot()
        capacity = compute_cluster_capacity(snapshot)
        result = plan_replicas(snapshot, capacity, app_name, namespace, additional_replicas)
        logger.debug(
            f"Replica check for {app_name} in {namespace}: reference={result.reference_pod}, "
            f"fits={result.fits}"
        )
        return result.model_copy(update={"explanation": explain_replica_capacity(result)})
