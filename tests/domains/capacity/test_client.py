"""Tests for CapacityClient."""

import math
from unittest.mock import MagicMock

import pytest

from cluster_insights_mcp.domains.capacity.client import CapacityClient
from cluster_insights_mcp.domains.capacity.snapshot import StaticSnapshotSource
from cluster_insights_mcp.utils.errors import (
    ClusterUnavailableError,
    InvalidParameterError,
    MalformedQuantityError,
    ReferencePodNotFoundError,
)


@pytest.fixture
def client(cluster_source: StaticSnapshotSource) -> CapacityClient:
    return CapacityClient(cluster_source)


class TestCapacityClient:
    """Tests for the CapacityClient operations."""

    def test_get_cluster_capacity(self, client: CapacityClient) -> None:
        capacity = client.get_cluster_capacity()

        assert capacity.total.cpu_cores == 24.0
        assert capacity.allocated.cpu_cores == 12.5
        assert "3 nodes" in capacity.explanation
        assert "24.00 CPU cores" in capacity.explanation
        assert "As of snapshot" in capacity.explanation

    def test_check_resource_fit(self, client: CapacityClient) -> None:
        result = client.check_resource_fit(4.0, 16.0)

        assert result.fits
        assert result.explanation.startswith("Resources FIT in cluster.")
        assert "68.8% CPU" in result.explanation

    def test_check_resource_fit_shortage_explained(self, client: CapacityClient) -> None:
        result = client.check_resource_fit(20.0, 1.0)

        assert not result.fits
        assert result.explanation.startswith("Resources DO NOT FIT in cluster.")
        assert "CPU shortage: 8.50 cores" in result.explanation
        assert "Memory shortage" not in result.explanation

    def test_get_node_breakdown(self, client: CapacityClient) -> None:
        breakdown = client.get_node_breakdown()

        assert [node.name for node in breakdown.nodes] == ["node-a", "node-b", "node-c"]
        assert "1 pods not assigned" in breakdown.explanation

    def test_get_namespace_usage(self, client: CapacityClient) -> None:
        usage = client.get_namespace_usage()

        assert usage.namespaces[0].namespace == "data"
        assert "Largest: 'data'" in usage.explanation

    def test_get_pod_resource_stats(self, client: CapacityClient) -> None:
        ranking = client.get_pod_resource_stats()

        assert ranking.top_pods[0].name == "database-0"
        assert "out of 6 non-terminal pods (8 pods in total)" in ranking.explanation

    def test_check_replica_capacity(self, client: CapacityClient) -> None:
        result = client.check_replica_capacity("frontend", "shop", 10)

        assert not result.fits
        assert result.max_possible_replicas == 5
        assert result.explanation.startswith("Capacity CHECK FAILED")
        assert "Reference pod: frontend-7d9f-abcde" in result.explanation
        assert "Maximum possible replicas based on CPU: 5" in result.explanation
        assert "CPU is the binding constraint" in result.explanation

    def test_check_replica_capacity_passes(self, client: CapacityClient) -> None:
        result = client.check_replica_capacity(" frontend ", "shop", 2)

        assert result.fits
        assert result.app_name == "frontend"
        assert result.explanation.startswith("Capacity CHECK PASSED")
        assert "Issues:" not in result.explanation

    def test_zero_request_noted_in_explanation(self) -> None:
        source = StaticSnapshotSource(
            nodes=[{"name": "n1", "allocatable": {"cpu": "2", "memory": "1Gi"}}],
            pods=[{"name": "web-0", "namespace": "ns", "phase": "Running"}],
        )

        result = CapacityClient(source).check_replica_capacity("web", "ns", 100)

        assert result.fits
        assert "declares no CPU request" in result.explanation
        assert "declares no memory request" in result.explanation

    def test_reference_pod_not_found(self, client: CapacityClient) -> None:
        with pytest.raises(ReferencePodNotFoundError):
            client.check_replica_capacity("nonexistent", "shop", 1)


class TestParameterValidation:
    """Invalid parameters are rejected before the cluster is queried."""

    @pytest.fixture
    def source(self) -> MagicMock:
        return MagicMock()

    @pytest.mark.parametrize(
        ("cpu_cores", "memory_gb", "parameter"),
        [
            (-1.0, 1.0, "cpu_cores"),
            (1.0, -1.0, "memory_gb"),
            (math.nan, 1.0, "cpu_cores"),
            (1.0, math.inf, "memory_gb"),
        ],
    )
    def test_fit_rejects_invalid_amounts(
        self, source: MagicMock, cpu_cores: float, memory_gb: float, parameter: str
    ) -> None:
        with pytest.raises(InvalidParameterError) as exc_info:
            CapacityClient(source).check_resource_fit(cpu_cores, memory_gb)

        assert exc_info.value.parameter == parameter
        source.fetch.assert_not_called()

    @pytest.mark.parametrize(
        ("app_name", "namespace", "replicas", "parameter"),
        [
            ("", "shop", 1, "app_name"),
            ("   ", "shop", 1, "app_name"),
            ("web", "", 1, "namespace"),
            ("web", "shop", 0, "additional_replicas"),
            ("web", "shop", -3, "additional_replicas"),
            ("web", "shop", 1.5, "additional_replicas"),
            ("web", "shop", True, "additional_replicas"),
        ],
    )
    def test_replicas_rejects_invalid_parameters(
        self,
        source: MagicMock,
        app_name: str,
        namespace: str,
        replicas: int,
        parameter: str,
    ) -> None:
        with pytest.raises(InvalidParameterError) as exc_info:
            CapacityClient(source).check_replica_capacity(app_name, namespace, replicas)

        assert exc_info.value.parameter == parameter
        source.fetch.assert_not_called()


class TestSourceFailures:
    """Failures while obtaining or parsing the inventory abort the call."""

    def test_cluster_unavailable_propagates(self) -> None:
        source = MagicMock()
        source.fetch.side_effect = ClusterUnavailableError("pods", "connection refused")

        with pytest.raises(ClusterUnavailableError) as exc_info:
            CapacityClient(source).get_cluster_capacity()

        assert exc_info.value.resource == "pods"

    def test_malformed_quantity_aborts(self) -> None:
        source = StaticSnapshotSource(
            nodes=[{"name": "n1", "allocatable": {"cpu": "four"}}],
        )

        with pytest.raises(MalformedQuantityError):
            CapacityClient(source).get_node_breakdown()

    def test_fresh_snapshot_per_call(self, cluster_source: StaticSnapshotSource) -> None:
        source = MagicMock(wraps=cluster_source)
        client = CapacityClient(source)

        client.get_cluster_capacity()
        client.get_namespace_usage()

        assert source.fetch.call_count == 2
