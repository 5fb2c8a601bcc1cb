"""Fit checks and replica capacity planning.

Both compare against cluster-wide aggregate availability only. A request
can fit in aggregate and still fail to schedule on any single node; that
approximation is accepted here.
"""

from __future__ import annotations

from cluster_insights_mcp.domains.capacity.models import (
    ClusterCapacity,
    ClusterSnapshot,
    FitResult,
    PodRecord,
    ReplicaCapacityResult,
    ResourcePair,
)
from cluster_insights_mcp.utils.errors import ReferencePodNotFoundError


def check_fit(capacity: ClusterCapacity, requested: ResourcePair) -> FitResult:
    """Check a request against available capacity on each dimension."""
    return FitResult(requested=requested, capacity=capacity)


def find_matching_pods(snapshot: ClusterSnapshot, app_name: str, namespace: str) -> list[PodRecord]:
    """Find non-terminal pods in a namespace whose name contains ``app_name``.

    Results are sorted by name, so the first entry is the reference pod.
    """
    matches = [
        pod
        for pod in snapshot.active_pods
        if pod.namespace == namespace and app_name in pod.name
    ]
    return sorted(matches, key=lambda pod: pod.name)


def _max_replicas(available: int, per_replica: int) -> int | None:
    """Replicas that fit in ``available``, None when a replica costs nothing."""
    if per_replica == 0:
        return None
    return available // per_replica


def plan_replicas(
    snapshot: ClusterSnapshot,
    capacity: ClusterCapacity,
    app_name: str,
    namespace: str,
    additional_replicas: int,
) -> ReplicaCapacityResult:
    """Project whether ``additional_replicas`` copies of an app fit.

    The reference pod is the matching pod with the lexicographically
    smallest name; its requests are the per-replica cost.

    Raises:
        ReferencePodNotFoundError: If no non-terminal pod matches.
    """
    matches = find_matching_pods(snapshot, app_name, namespace)
    if not matches:
        raise ReferencePodNotFoundError(app_name, namespace)

    reference = matches[0]
    per_replica = reference.requests
    total_required = per_replica.scaled(additional_replicas)

    return ReplicaCapacityResult(
        app_name=app_name,
        namespace=namespace,
        additional_replicas=additional_replicas,
        reference_pod=reference.name,
        per_replica=per_replica,
        fit=check_fit(capacity, total_required),
        current_pod_count=len(matches),
        max_replicas_by_cpu=_max_replicas(capacity.available.cpu, per_replica.cpu),
        max_replicas_by_memory=_max_replicas(capacity.available.memory, per_replica.memory),
    )
