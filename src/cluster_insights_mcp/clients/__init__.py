"""Kubernetes clients for Cluster Insights MCP."""

from cluster_insights_mcp.clients.base import K8sClient
from cluster_insights_mcp.clients.inventory import KubernetesSnapshotSource

__all__ = ["K8sClient", "KubernetesSnapshotSource"]
