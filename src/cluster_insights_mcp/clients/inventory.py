"""Snapshot source backed by a live Kubernetes cluster.

Nodes, pods and namespaces are listed through the Core V1 API and reduced
to the plain-data inventory shape consumed by ``build_snapshot``. Quantity
strings are passed through untouched; parsing happens when the snapshot
is built.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from typing import Any

import urllib3
from kubernetes.client.rest import ApiException  # type: ignore[import-untyped]

from cluster_insights_mcp.clients.base import K8sClient
from cluster_insights_mcp.domains.capacity.snapshot import RawInventory
from cluster_insights_mcp.utils.errors import ClusterUnavailableError

logger = logging.getLogger(__name__)

_RESOURCE_KEYS = ("cpu", "memory")


def _resource_block(values: dict[str, str] | None) -> dict[str, str]:
    """Keep the CPU and memory entries of a resource list."""
    if not values:
        return {}
    return {key: values[key] for key in _RESOURCE_KEYS if key in values}


def node_to_dict(node: Any) -> dict[str, Any]:
    """Reduce a V1Node to its name, capacity and allocatable resources."""
    status = node.status
    return {
        "name": node.metadata.name,
        "capacity": _resource_block(status.capacity if status else None),
        "allocatable": _resource_block(status.allocatable if status else None),
    }


def pod_to_dict(pod: Any) -> dict[str, Any]:
    """Reduce a V1Pod to placement, phase and per-container resources."""
    spec = pod.spec
    containers = []
    for container in (spec.containers if spec else None) or []:
        resources = container.resources
        containers.append(
            {
                "name": container.name,
                "requests": _resource_block(resources.requests if resources else None),
                "limits": _resource_block(resources.limits if resources else None),
            }
        )

    return {
        "name": pod.metadata.name,
        "namespace": pod.metadata.namespace,
        "node": spec.node_name if spec else None,
        "phase": pod.status.phase if pod.status else None,
        "containers": containers,
    }


def namespace_to_dict(namespace: Any) -> dict[str, Any]:
    return {"name": namespace.metadata.name}


class KubernetesSnapshotSource:
    """Fetches the cluster inventory through a connected ``K8sClient``.

    Each fetch issues three paginated list calls. When ``concurrent`` is
    set they run on a thread pool and all three are joined before the
    inventory is returned.
    """

    def __init__(
        self,
        k8s: K8sClient,
        concurrent: bool = True,
        request_timeout: float = 30.0,
        page_size: int = 500,
    ) -> None:
        self._k8s = k8s
        self._concurrent = concurrent
        self._request_timeout = request_timeout
        self._page_size = page_size

    def _list_all(self, resource: str, list_call: Callable[..., Any]) -> list[Any]:
        """Follow continue tokens until the list is exhausted.

        Raises:
            ClusterUnavailableError: If any page cannot be retrieved.
        """
        items: list[Any] = []
        continue_token: str | None = None

        while True:
            kwargs: dict[str, Any] = {
                "limit": self._page_size,
                "_request_timeout": self._request_timeout,
            }
            if continue_token:
                kwargs["_continue"] = continue_token

            try:
                result = list_call(**kwargs)
            except ApiException as e:
                raise ClusterUnavailableError(resource, f"API error {e.status}: {e.reason}") from e
            except urllib3.exceptions.HTTPError as e:
                raise ClusterUnavailableError(resource, str(e)) from e

            items.extend(result.items or [])
            token = result.metadata._continue if result.metadata else None
            if not isinstance(token, str) or not token:
                break
            continue_token = token

        logger.debug(f"Listed {len(items)} {resource}")
        return items

    def fetch_nodes(self) -> list[dict[str, Any]]:
        core_v1 = self._k8s.core_v1
        return [node_to_dict(n) for n in self._list_all("nodes", core_v1.list_node)]

    def fetch_pods(self) -> list[dict[str, Any]]:
        core_v1 = self._k8s.core_v1
        return [
            pod_to_dict(p) for p in self._list_all("pods", core_v1.list_pod_for_all_namespaces)
        ]

    def fetch_namespaces(self) -> list[dict[str, Any]]:
        core_v1 = self._k8s.core_v1
        return [
            namespace_to_dict(ns) for ns in self._list_all("namespaces", core_v1.list_namespace)
        ]

    def fetch(self) -> RawInventory:
        """Fetch nodes, pods and namespaces.

        Raises:
            ClusterUnavailableError: If any of the three lists fails. When
                several fail, the error for the first of nodes, pods and
                namespaces is raised.
        """
        if not self._concurrent:
            return RawInventory(
                nodes=self.fetch_nodes(),
                pods=self.fetch_pods(),
                namespaces=self.fetch_namespaces(),
            )

        with ThreadPoolExecutor(max_workers=3, thread_name_prefix="inventory") as executor:
            nodes = executor.submit(self.fetch_nodes)
            pods = executor.submit(self.fetch_pods)
            namespaces = executor.submit(self.fetch_namespaces)

        # Leaving the executor joins all three; result() re-raises failures
        return RawInventory(
            nodes=nodes.result(),
            pods=pods.result(),
            namespaces=namespaces.result(),
        )
