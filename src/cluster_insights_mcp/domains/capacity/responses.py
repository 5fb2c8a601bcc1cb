"""Rendering of capacity results into tool response dictionaries.

Figures are converted from base units here and nowhere else: cores and GB
rounded to three decimals, percentages to two.
"""

from __future__ import annotations

from typing import Any

from cluster_insights_mcp.domains.capacity.explain import shortfall_reason
from cluster_insights_mcp.domains.capacity.models import (
    ClusterCapacity,
    FitResult,
    NamespaceUsage,
    NodeBreakdown,
    PodRanking,
    PodRecord,
    ReplicaCapacityResult,
    ResourcePair,
)
from cluster_insights_mcp.domains.capacity.quantity import bytes_to_mb

UNSCHEDULED = "unscheduled"


def _cores(pair: ResourcePair) -> float:
    return round(pair.cpu_cores, 3)


def _gb(pair: ResourcePair) -> float:
    return round(pair.memory_gb, 3)


def _percent(value: float) -> float:
    return round(value, 2)


def _pair_dict(pair: ResourcePair) -> dict[str, float]:
    return {"cpu_cores": _cores(pair), "memory_gb": _gb(pair)}


def _timestamp(result: Any) -> str:
    return result.snapshot_time.isoformat()


def cluster_capacity_response(capacity: ClusterCapacity) -> dict[str, Any]:
    return {
        "total_cpu_cores": _cores(capacity.total),
        "total_memory_gb": _gb(capacity.total),
        "raw_capacity_cpu_cores": _cores(capacity.raw_capacity),
        "raw_capacity_memory_gb": _gb(capacity.raw_capacity),
        "allocated_cpu_cores": _cores(capacity.allocated),
        "allocated_memory_gb": _gb(capacity.allocated),
        "available_cpu_cores": _cores(capacity.available),
        "available_memory_gb": _gb(capacity.available),
        "cpu_utilization_percent": _percent(capacity.cpu_utilization_percent),
        "memory_utilization_percent": _percent(capacity.memory_utilization_percent),
        "overcommitted_cpu": capacity.overcommitted_cpu,
        "overcommitted_memory": capacity.overcommitted_memory,
        "node_count": capacity.node_count,
        "snapshot_time": _timestamp(capacity),
        "explanation": capacity.explanation,
    }


def fit_response(result: FitResult) -> dict[str, Any]:
    response: dict[str, Any] = {
        "fits": result.fits,
        "cpu_fits": result.cpu_fits,
        "memory_fits": result.memory_fits,
        "requested_cpu_cores": _cores(result.requested),
        "requested_memory_gb": _gb(result.requested),
        "available_cpu_cores": _cores(result.capacity.available),
        "available_memory_gb": _gb(result.capacity.available),
        "cpu_utilization_percent": _percent(result.projected_cpu_utilization_percent),
        "memory_utilization_percent": _percent(result.projected_memory_utilization_percent),
        "snapshot_time": _timestamp(result.capacity),
        "explanation": result.explanation,
    }
    if not result.fits:
        response["shortfall"] = _pair_dict(result.shortfall)
    return response


def node_breakdown_response(breakdown: NodeBreakdown) -> dict[str, Any]:
    nodes = [
        {
            "name": node.name,
            "capacity_cpu_cores": _cores(node.capacity),
            "capacity_memory_gb": _gb(node.capacity),
            "total_cpu_cores": _cores(node.allocatable),
            "total_memory_gb": _gb(node.allocatable),
            "allocated_cpu_cores": _cores(node.allocated),
            "allocated_memory_gb": _gb(node.allocated),
            "available_cpu_cores": _cores(node.available),
            "available_memory_gb": _gb(node.available),
            "cpu_utilization_percent": _percent(node.cpu_utilization_percent),
            "memory_utilization_percent": _percent(node.memory_utilization_percent),
            "pod_count": node.pod_count,
        }
        for node in breakdown.nodes
    ]
    return {
        "nodes": nodes,
        "total_nodes": len(nodes),
        "unassigned": {
            **_pair_dict(breakdown.unassigned),
            "pod_count": breakdown.unassigned_pod_count,
        },
        "snapshot_time": _timestamp(breakdown),
        "explanation": breakdown.explanation,
    }


def namespace_usage_response(usage: NamespaceUsage) -> dict[str, Any]:
    namespaces = [
        {
            "namespace": ns.namespace,
            "cpu_requests_cores": _cores(ns.requests),
            "memory_requests_gb": _gb(ns.requests),
            "cpu_limits_cores": _cores(ns.limits),
            "memory_limits_gb": _gb(ns.limits),
            "pod_count": ns.pod_count,
        }
        for ns in usage.namespaces
    ]
    return {
        "namespaces": namespaces,
        "total_namespaces": len(namespaces),
        "snapshot_time": _timestamp(usage),
        "explanation": usage.explanation,
    }


def _pod_entry(pod: PodRecord) -> dict[str, Any]:
    return {
        "name": pod.name,
        "namespace": pod.namespace,
        "node": pod.node or UNSCHEDULED,
        "phase": pod.phase.value,
        "cpu_requests_millicores": pod.requests.cpu,
        "memory_requests_mb": bytes_to_mb(pod.requests.memory),
        "cpu_limits_millicores": pod.limits.cpu,
        "memory_limits_mb": bytes_to_mb(pod.limits.memory),
    }


def pod_stats_response(ranking: PodRanking) -> dict[str, Any]:
    return {
        "top_pods": [_pod_entry(pod) for pod in ranking.top_pods],
        "total_pods": ranking.total_pods,
        "ranked_pods": ranking.ranked_pods,
        "showing": len(ranking.top_pods),
        "sorted_by": ranking.sorted_by,
        "snapshot_time": _timestamp(ranking),
        "explanation": ranking.explanation,
    }


def replica_capacity_response(result: ReplicaCapacityResult) -> dict[str, Any]:
    capacity = result.capacity
    response: dict[str, Any] = {
        "fits": result.fits,
        "app_name": result.app_name,
        "namespace": result.namespace,
        "additional_replicas": result.additional_replicas,
        "reference_pod": result.reference_pod,
        "cpu_per_replica_cores": _cores(result.per_replica),
        "memory_per_replica_gb": _gb(result.per_replica),
        "total_cpu_required_cores": _cores(result.total_required),
        "total_memory_required_gb": _gb(result.total_required),
        "available_cpu_cores": _cores(capacity.available),
        "available_memory_gb": _gb(capacity.available),
        "current_cpu_utilization_percent": _percent(capacity.cpu_utilization_percent),
        "current_memory_utilization_percent": _percent(capacity.memory_utilization_percent),
        "projected_cpu_utilization_percent": _percent(
            result.fit.projected_cpu_utilization_percent
        ),
        "projected_memory_utilization_percent": _percent(
            result.fit.projected_memory_utilization_percent
        ),
        "current_pod_count": result.current_pod_count,
        "max_replicas_by_cpu": result.max_replicas_by_cpu,
        "max_replicas_by_memory": result.max_replicas_by_memory,
        "max_possible_replicas": result.max_possible_replicas,
        "zero_request_resources": result.zero_request_resources,
        "snapshot_time": _timestamp(capacity),
        "explanation": result.explanation,
    }
    if not result.fits:
        response["shortfall"] = _pair_dict(result.fit.shortfall)
        response["limiting_resource"] = result.limiting_resource
        response["shortfall_reason"] = shortfall_reason(result)
    return response
