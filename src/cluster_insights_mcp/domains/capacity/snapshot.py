"""Cluster snapshot sources and snapshot construction.

A snapshot source supplies the raw inventory as plain data (dicts of
quantity strings, never Kubernetes API objects). ``build_snapshot`` parses
every quantity while constructing the immutable ``ClusterSnapshot``.

Raw inventory shapes::

    nodes:      [{name, capacity: {cpu, memory}, allocatable: {cpu, memory}}]
    pods:       [{name, namespace, node, phase,
                  requests: {cpu, memory}, limits: {cpu, memory}}]
    namespaces: [{name}]

A pod may carry ``containers: [{requests, limits}]`` instead of pod-level
``requests``/``limits``; container values are parsed and summed.
"""

from __future__ import annotations

import copy
import json
import logging
from collections import Counter
from collections.abc import Mapping
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, NamedTuple, Protocol

import yaml

from cluster_insights_mcp.domains.capacity.models import (
    ClusterSnapshot,
    NamespaceRecord,
    NodeRecord,
    PodPhase,
    PodRecord,
    ResourcePair,
)
from cluster_insights_mcp.domains.capacity.quantity import parse_cpu, parse_memory
from cluster_insights_mcp.utils.errors import ConfigurationError

logger = logging.getLogger(__name__)


class RawInventory(NamedTuple):
    """Plain-data inventory as supplied by a snapshot source."""

    nodes: list[dict[str, Any]]
    pods: list[dict[str, Any]]
    namespaces: list[dict[str, Any]]


class SnapshotSource(Protocol):
    """Supplies a fresh inventory on every call.

    Implementations raise ``ClusterUnavailableError`` when any of the
    three lists cannot be obtained.
    """

    def fetch(self) -> RawInventory: ...


class StaticSnapshotSource:
    """Snapshot source over a fixed, in-memory inventory."""

    def __init__(
        self,
        nodes: list[dict[str, Any]] | None = None,
        pods: list[dict[str, Any]] | None = None,
        namespaces: list[dict[str, Any]] | None = None,
    ) -> None:
        self._nodes = nodes or []
        self._pods = pods or []
        self._namespaces = namespaces or []

    def fetch(self) -> RawInventory:
        # Deep copies keep callers from mutating the stored inventory
        return RawInventory(
            nodes=copy.deepcopy(self._nodes),
            pods=copy.deepcopy(self._pods),
            namespaces=copy.deepcopy(self._namespaces),
        )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> StaticSnapshotSource:
        """Create from a mapping with ``nodes``, ``pods`` and ``namespaces`` keys."""
        return cls(
            nodes=list(data.get("nodes") or []),
            pods=list(data.get("pods") or []),
            namespaces=list(data.get("namespaces") or []),
        )

    @classmethod
    def from_file(cls, path: Path) -> StaticSnapshotSource:
        """Load an inventory dump from a JSON or YAML file.

        Raises:
            ConfigurationError: If the file cannot be read or parsed.
        """
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigurationError(f"Cannot read inventory file {path}: {e}") from e

        try:
            if path.suffix.lower() == ".json":
                data = json.loads(text)
            else:
                data = yaml.safe_load(text)
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Cannot parse inventory file {path}: {e}") from e

        if not isinstance(data, Mapping):
            raise ConfigurationError(f"Inventory file {path} must contain a mapping")
        return cls.from_dict(data)


def _quantity_pair(block: Mapping[str, Any] | None, field: str) -> ResourcePair:
    """Parse a {cpu, memory} block. Absent values are zero."""
    if not block:
        return ResourcePair()
    cpu = block.get("cpu")
    memory = block.get("memory")
    return ResourcePair(
        cpu=parse_cpu(cpu, f"{field}.cpu") if cpu is not None else 0,
        memory=parse_memory(memory, f"{field}.memory") if memory is not None else 0,
    )


def _pod_resources(raw: Mapping[str, Any], key: str, label: str) -> ResourcePair:
    """Sum a pod's requests or limits, per container when containers are given."""
    containers = raw.get("containers")
    if containers is None:
        return _quantity_pair(raw.get(key), f"{label} {key}")
    return ResourcePair.total(
        _quantity_pair(
            (container or {}).get(key),
            f"{label} container {(container or {}).get('name', index)} {key}",
        )
        for index, container in enumerate(containers)
    )


def _build_pod(raw: Mapping[str, Any]) -> PodRecord:
    name = str(raw.get("name") or "")
    namespace = str(raw.get("namespace") or "default")
    label = f"pod {namespace}/{name}"
    return PodRecord(
        name=name,
        namespace=namespace,
        node=raw.get("node") or None,
        phase=PodPhase.from_str(raw.get("phase")),
        requests=_pod_resources(raw, "requests", label),
        limits=_pod_resources(raw, "limits", label),
    )


def _build_nodes(raw_nodes: list[dict[str, Any]], pods: list[PodRecord]) -> list[NodeRecord]:
    pods_per_node = Counter(pod.node for pod in pods if pod.node and not pod.is_terminal)
    nodes: list[NodeRecord] = []
    seen: set[str] = set()

    for raw in raw_nodes:
        name = str(raw.get("name") or "")
        if name in seen:
            logger.warning(f"Duplicate node '{name}' in inventory, keeping the first entry")
            continue
        seen.add(name)

        label = f"node {name}"
        capacity = _quantity_pair(raw.get("capacity"), f"{label} capacity")
        # Allocatable is always reported by the API; fall back for sparse dumps
        if raw.get("allocatable"):
            allocatable = _quantity_pair(raw.get("allocatable"), f"{label} allocatable")
        else:
            allocatable = capacity

        nodes.append(
            NodeRecord(
                name=name,
                capacity=capacity,
                allocatable=allocatable,
                pod_count=pods_per_node.get(name, 0),
            )
        )

    return nodes


def build_snapshot(inventory: RawInventory, taken_at: datetime | None = None) -> ClusterSnapshot:
    """Parse a raw inventory into an immutable snapshot.

    Args:
        inventory: Plain-data nodes, pods and namespaces.
        taken_at: When the inventory was fetched. Defaults to now (UTC).

    Returns:
        The parsed snapshot.

    Raises:
        MalformedQuantityError: If any quantity in the inventory is malformed.
    """
    pods = [_build_pod(raw) for raw in inventory.pods]
    nodes = _build_nodes(inventory.nodes, pods)
    namespaces = [NamespaceRecord(name=str(raw.get("name") or "")) for raw in inventory.namespaces]

    return ClusterSnapshot(
        nodes=tuple(nodes),
        pods=tuple(pods),
        namespaces=tuple(namespaces),
        taken_at=taken_at or datetime.now(timezone.utc),
    )
