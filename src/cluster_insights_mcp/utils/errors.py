"""Exception hierarchy for Cluster Insights operations.

Every error carries the offending field or value so the MCP layer can
relay a precise message to the end user. Tools convert these into
structured error results with ``to_dict()``.
"""

from __future__ import annotations

from typing import Any


class ClusterInsightsError(Exception):
    """Base exception for all Cluster Insights errors."""

    kind = "ClusterInsightsError"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def context(self) -> dict[str, Any]:
        """Return structured context describing the failure."""
        return {}

    def to_dict(self) -> dict[str, Any]:
        """Render the error as a tool result payload."""
        return {"error": self.kind, "message": self.message, **self.context()}


class MalformedQuantityError(ClusterInsightsError):
    """A resource quantity string could not be parsed."""

    kind = "MalformedQuantity"

    def __init__(self, field: str, value: Any, reason: str) -> None:
        self.field = field
        self.value = value
        self.reason = reason
        super().__init__(f"Malformed quantity {value!r} for {field}: {reason}")

    def context(self) -> dict[str, Any]:
        return {"field": self.field, "value": str(self.value)}


class ClusterUnavailableError(ClusterInsightsError):
    """The cluster could not supply one of the inventory lists."""

    kind = "ClusterUnavailable"

    def __init__(self, resource: str, reason: str) -> None:
        self.resource = resource
        self.reason = reason
        super().__init__(f"Failed to list {resource}: {reason}")

    def context(self) -> dict[str, Any]:
        return {"resource": self.resource}


class ReferencePodNotFoundError(ClusterInsightsError):
    """No running pod matched the application name in the namespace."""

    kind = "ReferencePodNotFound"

    def __init__(self, app_name: str, namespace: str) -> None:
        self.app_name = app_name
        self.namespace = namespace
        super().__init__(f"No pods found matching '{app_name}' in namespace '{namespace}'")

    def context(self) -> dict[str, Any]:
        return {"app_name": self.app_name, "namespace": self.namespace}


class InvalidParameterError(ClusterInsightsError):
    """A caller-supplied parameter was rejected before any cluster access."""

    kind = "InvalidParameter"

    def __init__(self, parameter: str, value: Any, reason: str) -> None:
        self.parameter = parameter
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid value {value!r} for {parameter}: {reason}")

    def context(self) -> dict[str, Any]:
        return {"parameter": self.parameter, "value": str(self.value)}


class ConfigurationError(ClusterInsightsError):
    """Server configuration is unusable."""

    kind = "ConfigurationError"
