"""Domain modules providing Cluster Insights MCP tools."""
