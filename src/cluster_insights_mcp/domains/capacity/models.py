"""Pydantic models for cluster capacity analysis.

Snapshot records (nodes, pods, namespaces) are rebuilt on every call and
never mutated. Result models hold quantities in base units (millicores and
bytes); conversion to cores and GB happens when responses are rendered.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from cluster_insights_mcp.domains.capacity.quantity import bytes_to_gb, millicores_to_cores


class PodPhase(str, Enum):
    """Pod lifecycle phase."""

    RUNNING = "Running"
    PENDING = "Pending"
    SUCCEEDED = "Succeeded"
    FAILED = "Failed"
    UNKNOWN = "Unknown"

    @classmethod
    def from_str(cls, value: str | None) -> PodPhase:
        """Parse a phase string, mapping missing or unrecognized values to UNKNOWN."""
        if not value:
            return cls.UNKNOWN
        try:
            return cls(value)
        except ValueError:
            return cls.UNKNOWN

    @property
    def is_terminal(self) -> bool:
        """Terminal pods no longer hold cluster resources."""
        return self in (PodPhase.SUCCEEDED, PodPhase.FAILED)


def percent_of(part: int, whole: int) -> float:
    """Return part as a percentage of whole, 0.0 when whole is zero.

    Values above 100 are returned as-is; over-commitment is reportable.
    """
    if whole <= 0:
        return 0.0
    return part / whole * 100.0


class ResourcePair(BaseModel):
    """CPU and memory quantities in base units."""

    model_config = ConfigDict(frozen=True)

    cpu: int = Field(0, ge=0, description="CPU in millicores")
    memory: int = Field(0, ge=0, description="Memory in bytes")

    def __add__(self, other: ResourcePair) -> ResourcePair:
        return ResourcePair(cpu=self.cpu + other.cpu, memory=self.memory + other.memory)

    def scaled(self, factor: int) -> ResourcePair:
        """Multiply both dimensions by a non-negative integer."""
        return ResourcePair(cpu=self.cpu * factor, memory=self.memory * factor)

    def clamped_sub(self, other: ResourcePair) -> ResourcePair:
        """Subtract componentwise, saturating at zero."""
        return ResourcePair(
            cpu=max(self.cpu - other.cpu, 0),
            memory=max(self.memory - other.memory, 0),
        )

    def fits_within(self, other: ResourcePair) -> bool:
        """Whether both dimensions are at most those of other."""
        return self.cpu <= other.cpu and self.memory <= other.memory

    @property
    def cpu_cores(self) -> float:
        return millicores_to_cores(self.cpu)

    @property
    def memory_gb(self) -> float:
        return bytes_to_gb(self.memory)

    @classmethod
    def total(cls, pairs: Iterable[ResourcePair]) -> ResourcePair:
        """Sum an iterable of pairs."""
        cpu = 0
        memory = 0
        for pair in pairs:
            cpu += pair.cpu
            memory += pair.memory
        return cls(cpu=cpu, memory=memory)


# -----------------------------------------------------------------------------
# Snapshot records
# -----------------------------------------------------------------------------


class NodeRecord(BaseModel):
    """A node as seen in one snapshot."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Node name")
    capacity: ResourcePair = Field(default_factory=ResourcePair, description="Raw capacity")
    allocatable: ResourcePair = Field(
        default_factory=ResourcePair, description="Capacity usable by pods"
    )
    pod_count: int = Field(0, ge=0, description="Non-terminal pods assigned to the node")


class PodRecord(BaseModel):
    """A pod as seen in one snapshot."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Pod name")
    namespace: str = Field("default", description="Pod namespace")
    node: str | None = Field(None, description="Assigned node, None when unscheduled")
    phase: PodPhase = Field(PodPhase.UNKNOWN, description="Pod phase")
    requests: ResourcePair = Field(default_factory=ResourcePair, description="Summed requests")
    limits: ResourcePair = Field(
        default_factory=ResourcePair, description="Summed limits, zero when unset"
    )

    @property
    def is_terminal(self) -> bool:
        return self.phase.is_terminal


class NamespaceRecord(BaseModel):
    """A namespace as seen in one snapshot."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Namespace name")


class ClusterSnapshot(BaseModel):
    """Point-in-time cluster inventory. Not atomic across the three lists."""

    model_config = ConfigDict(frozen=True)

    nodes: tuple[NodeRecord, ...] = ()
    pods: tuple[PodRecord, ...] = ()
    namespaces: tuple[NamespaceRecord, ...] = ()
    taken_at: datetime = Field(..., description="When the inventory was fetched (UTC)")

    @property
    def active_pods(self) -> list[PodRecord]:
        """Pods that hold cluster resources (not Succeeded or Failed)."""
        return [pod for pod in self.pods if not pod.is_terminal]


# -----------------------------------------------------------------------------
# Results
# -----------------------------------------------------------------------------


class ClusterCapacity(BaseModel):
    """Cluster-wide capacity derived from node allocatable and pod requests."""

    model_config = ConfigDict(frozen=True)

    total: ResourcePair = Field(..., description="Sum of node allocatable")
    raw_capacity: ResourcePair = Field(..., description="Sum of node capacity")
    allocated: ResourcePair = Field(..., description="Sum of non-terminal pod requests")
    available: ResourcePair = Field(..., description="total - allocated, floored at zero")
    node_count: int = Field(..., description="Number of nodes")
    snapshot_time: datetime
    explanation: str = ""

    @property
    def cpu_utilization_percent(self) -> float:
        return percent_of(self.allocated.cpu, self.total.cpu)

    @property
    def memory_utilization_percent(self) -> float:
        return percent_of(self.allocated.memory, self.total.memory)

    @property
    def overcommitted_cpu(self) -> bool:
        return self.allocated.cpu > self.total.cpu

    @property
    def overcommitted_memory(self) -> bool:
        return self.allocated.memory > self.total.memory


class NodeAllocation(BaseModel):
    """Per-node allocation."""

    model_config = ConfigDict(frozen=True)

    name: str
    capacity: ResourcePair
    allocatable: ResourcePair
    allocated: ResourcePair
    available: ResourcePair
    pod_count: int

    @property
    def cpu_utilization_percent(self) -> float:
        return percent_of(self.allocated.cpu, self.allocatable.cpu)

    @property
    def memory_utilization_percent(self) -> float:
        return percent_of(self.allocated.memory, self.allocatable.memory)


class NodeBreakdown(BaseModel):
    """All nodes with their allocation.

    ``unassigned`` holds requests of non-terminal pods that are not on any
    node in the snapshot (unscheduled, or on a node that disappeared
    between list calls), so per-node allocation plus ``unassigned`` always
    equals cluster-wide allocation.
    """

    model_config = ConfigDict(frozen=True)

    nodes: list[NodeAllocation]
    unassigned: ResourcePair
    unassigned_pod_count: int
    snapshot_time: datetime
    explanation: str = ""


class NamespaceAggregate(BaseModel):
    """Requests and limits summed over one namespace's non-terminal pods."""

    model_config = ConfigDict(frozen=True)

    namespace: str
    requests: ResourcePair
    limits: ResourcePair
    pod_count: int


class NamespaceUsage(BaseModel):
    """Namespaces sorted by CPU requests descending, then name."""

    model_config = ConfigDict(frozen=True)

    namespaces: list[NamespaceAggregate]
    snapshot_time: datetime
    explanation: str = ""


class PodRanking(BaseModel):
    """Top pods by CPU request."""

    model_config = ConfigDict(frozen=True)

    top_pods: list[PodRecord]
    total_pods: int = Field(..., description="All pods in the snapshot, terminal included")
    ranked_pods: int = Field(..., description="Non-terminal pods considered for ranking")
    sorted_by: str
    limit: int
    snapshot_time: datetime
    explanation: str = ""


class FitResult(BaseModel):
    """Whether a hypothetical request fits current cluster-wide availability."""

    model_config = ConfigDict(frozen=True)

    requested: ResourcePair
    capacity: ClusterCapacity
    explanation: str = ""

    @property
    def cpu_fits(self) -> bool:
        return self.requested.cpu <= self.capacity.available.cpu

    @property
    def memory_fits(self) -> bool:
        return self.requested.memory <= self.capacity.available.memory

    @property
    def fits(self) -> bool:
        return self.requested.fits_within(self.capacity.available)

    @property
    def shortfall(self) -> ResourcePair:
        """Amount by which the request exceeds availability, per dimension."""
        return self.requested.clamped_sub(self.capacity.available)

    @property
    def projected_cpu_utilization_percent(self) -> float:
        return percent_of(self.capacity.allocated.cpu + self.requested.cpu, self.capacity.total.cpu)

    @property
    def projected_memory_utilization_percent(self) -> float:
        return percent_of(
            self.capacity.allocated.memory + self.requested.memory,
            self.capacity.total.memory,
        )


class ReplicaCapacityResult(BaseModel):
    """Projection of adding replicas of an existing application."""

    model_config = ConfigDict(frozen=True)

    app_name: str
    namespace: str
    additional_replicas: int
    reference_pod: str
    per_replica: ResourcePair
    fit: FitResult = Field(..., description="Fit of the total required resources")
    current_pod_count: int
    max_replicas_by_cpu: int | None = Field(None, description="None when CPU is unbounded")
    max_replicas_by_memory: int | None = Field(None, description="None when memory is unbounded")
    explanation: str = ""

    @property
    def total_required(self) -> ResourcePair:
        return self.fit.requested

    @property
    def capacity(self) -> ClusterCapacity:
        return self.fit.capacity

    @property
    def fits(self) -> bool:
        return self.fit.fits

    @property
    def zero_request_resources(self) -> list[str]:
        """Dimensions the reference pod does not request, which never constrain."""
        resources = []
        if self.per_replica.cpu == 0:
            resources.append("cpu")
        if self.per_replica.memory == 0:
            resources.append("memory")
        return resources

    @property
    def max_possible_replicas(self) -> int | None:
        """The binding replica count across bounded dimensions."""
        bounds = [b for b in (self.max_replicas_by_cpu, self.max_replicas_by_memory) if b is not None]
        return min(bounds) if bounds else None

    @property
    def limiting_resource(self) -> str | None:
        """The dimension that prevents the request from fitting, if any."""
        if self.fits:
            return None
        cpu_max = self.max_replicas_by_cpu
        memory_max = self.max_replicas_by_memory
        if cpu_max is None:
            return "memory"
        if memory_max is None:
            return "cpu"
        return "cpu" if cpu_max <= memory_max else "memory"
