"""Cluster Insights MCP server.

Read-only Kubernetes capacity analysis exposed as MCP tools: cluster
capacity, resource fit checks, node and namespace breakdowns, top pods
by CPU request, and replica capacity planning.
"""

__version__ = "0.1.0"
