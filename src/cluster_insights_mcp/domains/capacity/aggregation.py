"""Capacity, namespace and pod aggregation over a cluster snapshot.

All sums run over non-terminal pods only; pods without a request or limit
for a resource contribute zero. Node totals use allocatable quantities,
which already exclude platform-reserved resources.
"""

from __future__ import annotations

from collections import defaultdict

from cluster_insights_mcp.domains.capacity.models import (
    ClusterCapacity,
    ClusterSnapshot,
    NamespaceAggregate,
    NamespaceUsage,
    NodeAllocation,
    NodeBreakdown,
    PodRanking,
    PodRecord,
    ResourcePair,
)

TOP_POD_LIMIT = 20
POD_SORT_CRITERION = "CPU requests (descending), then pod name (ascending)"


def compute_cluster_capacity(snapshot: ClusterSnapshot) -> ClusterCapacity:
    """Compute cluster-wide total, allocated and available resources.

    Allocation includes every non-terminal pod, scheduled or not.
    """
    total = ResourcePair.total(node.allocatable for node in snapshot.nodes)
    allocated = ResourcePair.total(pod.requests for pod in snapshot.active_pods)

    return ClusterCapacity(
        total=total,
        raw_capacity=ResourcePair.total(node.capacity for node in snapshot.nodes),
        allocated=allocated,
        available=total.clamped_sub(allocated),
        node_count=len(snapshot.nodes),
        snapshot_time=snapshot.taken_at,
    )


def compute_node_breakdown(snapshot: ClusterSnapshot) -> NodeBreakdown:
    """Compute allocation for each node, sorted by node name."""
    allocated_by_node: dict[str, ResourcePair] = defaultdict(ResourcePair)
    known_nodes = {node.name for node in snapshot.nodes}
    unassigned = ResourcePair()
    unassigned_pods = 0

    for pod in snapshot.active_pods:
        if pod.node is not None and pod.node in known_nodes:
            allocated_by_node[pod.node] = allocated_by_node[pod.node] + pod.requests
        else:
            unassigned = unassigned + pod.requests
            unassigned_pods += 1

    nodes = []
    for node in sorted(snapshot.nodes, key=lambda n: n.name):
        allocated = allocated_by_node.get(node.name, ResourcePair())
        nodes.append(
            NodeAllocation(
                name=node.name,
                capacity=node.capacity,
                allocatable=node.allocatable,
                allocated=allocated,
                available=node.allocatable.clamped_sub(allocated),
                pod_count=node.pod_count,
            )
        )

    return NodeBreakdown(
        nodes=nodes,
        unassigned=unassigned,
        unassigned_pod_count=unassigned_pods,
        snapshot_time=snapshot.taken_at,
    )


def aggregate_namespaces(snapshot: ClusterSnapshot) -> NamespaceUsage:
    """Sum requests and limits per namespace.

    Namespaces listed in the snapshot without any non-terminal pods are
    included with zero totals. Sorted by CPU requests descending, ties by
    namespace name ascending.
    """
    requests: dict[str, ResourcePair] = {ns.name: ResourcePair() for ns in snapshot.namespaces}
    limits: dict[str, ResourcePair] = {ns.name: ResourcePair() for ns in snapshot.namespaces}
    pod_counts: dict[str, int] = {ns.name: 0 for ns in snapshot.namespaces}

    for pod in snapshot.active_pods:
        # Pods may reference a namespace created after the namespace list was read
        requests[pod.namespace] = requests.get(pod.namespace, ResourcePair()) + pod.requests
        limits[pod.namespace] = limits.get(pod.namespace, ResourcePair()) + pod.limits
        pod_counts[pod.namespace] = pod_counts.get(pod.namespace, 0) + 1

    aggregates = [
        NamespaceAggregate(
            namespace=name,
            requests=requests[name],
            limits=limits[name],
            pod_count=pod_counts[name],
        )
        for name in requests
    ]
    aggregates.sort(key=lambda agg: (-agg.requests.cpu, agg.namespace))

    return NamespaceUsage(namespaces=aggregates, snapshot_time=snapshot.taken_at)


def _ranking_key(pod: PodRecord) -> tuple[int, str, str]:
    return (-pod.requests.cpu, pod.name, pod.namespace)


def rank_pods(snapshot: ClusterSnapshot, limit: int = TOP_POD_LIMIT) -> PodRanking:
    """Rank non-terminal pods by CPU request and keep the top ``limit``."""
    active = snapshot.active_pods
    ranked = sorted(active, key=_ranking_key)

    return PodRanking(
        top_pods=ranked[:limit],
        total_pods=len(snapshot.pods),
        ranked_pods=len(active),
        sorted_by=POD_SORT_CRITERION,
        limit=limit,
        snapshot_time=snapshot.taken_at,
    )
