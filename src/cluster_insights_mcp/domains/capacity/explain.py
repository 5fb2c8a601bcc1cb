"""Human-readable explanations for capacity results.

Every explanation repeats the figures of the structured result in prose
and states the snapshot time, since the three inventory lists are not read
atomically.
"""

from __future__ import annotations

from datetime import datetime

from cluster_insights_mcp.domains.capacity.models import (
    ClusterCapacity,
    FitResult,
    NamespaceUsage,
    NodeBreakdown,
    PodRanking,
    ReplicaCapacityResult,
    ResourcePair,
)


def _as_of(moment: datetime) -> str:
    return f"As of snapshot {moment.strftime('%Y-%m-%dT%H:%M:%SZ')}."


def _pair(pair: ResourcePair) -> str:
    return f"{pair.cpu_cores:.2f} CPU cores, {pair.memory_gb:.2f} GB memory"


def explain_cluster_capacity(capacity: ClusterCapacity) -> str:
    parts = [
        f"Cluster has {capacity.node_count} nodes.",
        f"Total allocatable capacity: {_pair(capacity.total)}.",
        f"Allocated (requests): {capacity.allocated.cpu_cores:.2f} CPU cores "
        f"({capacity.cpu_utilization_percent:.1f}%), {capacity.allocated.memory_gb:.2f} GB memory "
        f"({capacity.memory_utilization_percent:.1f}%).",
        f"Available: {_pair(capacity.available)}.",
    ]
    if capacity.overcommitted_cpu:
        parts.append("CPU requests exceed allocatable capacity (over-committed).")
    if capacity.overcommitted_memory:
        parts.append("Memory requests exceed allocatable capacity (over-committed).")
    parts.append(_as_of(capacity.snapshot_time))
    return " ".join(parts)


def explain_fit(result: FitResult) -> str:
    requested = result.requested
    available = result.capacity.available

    if result.fits:
        return (
            f"Resources FIT in cluster. Requested: {_pair(requested)}. "
            f"Available: {_pair(available)}. "
            f"After allocation, cluster would be at {result.projected_cpu_utilization_percent:.1f}% CPU "
            f"and {result.projected_memory_utilization_percent:.1f}% memory utilization. "
            f"{_as_of(result.capacity.snapshot_time)}"
        )

    shortages = []
    if not result.cpu_fits:
        shortages.append(
            f"CPU shortage: {result.shortfall.cpu_cores:.2f} cores more than the "
            f"{available.cpu_cores:.2f} available."
        )
    if not result.memory_fits:
        shortages.append(
            f"Memory shortage: {result.shortfall.memory_gb:.2f} GB more than the "
            f"{available.memory_gb:.2f} GB available."
        )
    return (
        f"Resources DO NOT FIT in cluster. Requested: {_pair(requested)}. "
        f"Available: {_pair(available)}. {' '.join(shortages)} "
        f"Projected utilization would be {result.projected_cpu_utilization_percent:.1f}% CPU "
        f"and {result.projected_memory_utilization_percent:.1f}% memory. "
        f"{_as_of(result.capacity.snapshot_time)}"
    )


def explain_node_breakdown(breakdown: NodeBreakdown) -> str:
    parts = [
        f"Cluster has {len(breakdown.nodes)} nodes. Each node shows allocatable capacity, "
        "allocated resources (requests), available resources, and pod count."
    ]
    if breakdown.unassigned_pod_count:
        parts.append(
            f"{breakdown.unassigned_pod_count} pods not assigned to a listed node request "
            f"{_pair(breakdown.unassigned)}; they count toward cluster-wide allocation only."
        )
    parts.append(_as_of(breakdown.snapshot_time))
    return " ".join(parts)


def explain_namespace_usage(usage: NamespaceUsage) -> str:
    parts = [
        f"Cluster has {len(usage.namespaces)} namespaces. Resource usage shows CPU/memory "
        "requests and limits of running and pending pods for each namespace, "
        "sorted by CPU requests (descending)."
    ]
    if usage.namespaces:
        top = usage.namespaces[0]
        parts.append(
            f"Largest: '{top.namespace}' with {top.requests.cpu_cores:.2f} CPU cores and "
            f"{top.requests.memory_gb:.2f} GB memory requested across {top.pod_count} pods."
        )
    parts.append(_as_of(usage.snapshot_time))
    return " ".join(parts)


def explain_pod_ranking(ranking: PodRanking) -> str:
    return (
        f"Showing top {len(ranking.top_pods)} pods (limit {ranking.limit}) out of "
        f"{ranking.ranked_pods} non-terminal pods ({ranking.total_pods} pods in total) "
        f"sorted by {ranking.sorted_by}. Each pod shows CPU/memory requests and limits, "
        f"along with the node it is scheduled on. {_as_of(ranking.snapshot_time)}"
    )


def explain_replica_capacity(result: ReplicaCapacityResult) -> str:
    capacity = result.capacity
    per_replica = result.per_replica
    required = result.total_required

    if result.fits:
        header = (
            f"Capacity CHECK PASSED: You can add {result.additional_replicas} more replicas of "
            f"'{result.app_name}' in namespace '{result.namespace}'."
        )
    else:
        header = (
            f"Capacity CHECK FAILED: Cannot add {result.additional_replicas} replicas of "
            f"'{result.app_name}' in namespace '{result.namespace}'."
        )

    lines = [
        header,
        "",
        f"Reference pod: {result.reference_pod}",
        f"- CPU per replica: {per_replica.cpu_cores:.3f} cores",
        f"- Memory per replica: {per_replica.memory_gb:.3f} GB",
        "",
        f"Total required for {result.additional_replicas} replicas:",
        f"- CPU: {required.cpu_cores:.3f} cores",
        f"- Memory: {required.memory_gb:.3f} GB",
        "",
        "Cluster availability:",
        f"- Available CPU: {capacity.available.cpu_cores:.3f} cores"
        f" ({_replica_bound(result.max_replicas_by_cpu)})",
        f"- Available Memory: {capacity.available.memory_gb:.3f} GB"
        f" ({_replica_bound(result.max_replicas_by_memory)})",
        "",
        "Projected utilization after adding replicas:",
        f"- CPU: {result.fit.projected_cpu_utilization_percent:.1f}% "
        f"(current: {capacity.cpu_utilization_percent:.1f}%)",
        f"- Memory: {result.fit.projected_memory_utilization_percent:.1f}% "
        f"(current: {capacity.memory_utilization_percent:.1f}%)",
    ]

    for resource in result.zero_request_resources:
        lines.append(
            f"Note: the reference pod declares no {_resource_label(resource)} request, so "
            f"{_resource_label(resource)} does not limit the replica count."
        )

    if not result.fits:
        lines.extend(["", "Issues:", *_replica_issues(result)])

    lines.extend(
        [
            "",
            f"Current pods matching '{result.app_name}': {result.current_pod_count}",
            _as_of(capacity.snapshot_time),
        ]
    )
    return "\n".join(lines)


def shortfall_reason(result: ReplicaCapacityResult) -> str | None:
    """One sentence naming the binding constraint, None when replicas fit."""
    resource = result.limiting_resource
    if resource is None:
        return None
    label = _resource_label(resource)
    return (
        f"{label[0].upper()}{label[1:]} is the binding constraint: at most "
        f"{result.max_possible_replicas} additional replicas fit."
    )


def _replica_bound(max_replicas: int | None) -> str:
    if max_replicas is None:
        return "not a constraint"
    return f"enough for {max_replicas} replicas"


def _resource_label(resource: str) -> str:
    return "CPU" if resource == "cpu" else "memory"


def _replica_issues(result: ReplicaCapacityResult) -> list[str]:
    capacity = result.capacity
    required = result.total_required
    issues = []

    if not result.fit.cpu_fits:
        issues.append(
            f"CPU shortage: Need {required.cpu_cores:.3f} cores but only "
            f"{capacity.available.cpu_cores:.3f} available "
            f"(shortfall: {result.fit.shortfall.cpu_cores:.3f} cores). "
            f"Maximum possible replicas based on CPU: {result.max_replicas_by_cpu}"
        )
    if not result.fit.memory_fits:
        issues.append(
            f"Memory shortage: Need {required.memory_gb:.3f} GB but only "
            f"{capacity.available.memory_gb:.3f} GB available "
            f"(shortfall: {result.fit.shortfall.memory_gb:.3f} GB). "
            f"Maximum possible replicas based on memory: {result.max_replicas_by_memory}"
        )

    reason = shortfall_reason(result)
    if reason:
        issues.append(reason)
    return issues
