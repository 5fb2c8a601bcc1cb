"""Utility helpers for the Cluster Insights MCP server."""

from cluster_insights_mcp.utils.errors import (
    ClusterInsightsError,
    ClusterUnavailableError,
    ConfigurationError,
    InvalidParameterError,
    MalformedQuantityError,
    ReferencePodNotFoundError,
)

__all__ = [
    "ClusterInsightsError",
    "ClusterUnavailableError",
    "ConfigurationError",
    "InvalidParameterError",
    "MalformedQuantityError",
    "ReferencePodNotFoundError",
]
