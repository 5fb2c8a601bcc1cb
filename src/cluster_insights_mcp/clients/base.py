"""Base Kubernetes client with connection management."""

from __future__ import annotations

import logging

from kubernetes import client, config  # type: ignore[import-untyped]
from kubernetes.client import ApiClient, CoreV1Api  # type: ignore[import-untyped]

from cluster_insights_mcp.config import AuthMode, ClusterInsightsConfig, get_config
from cluster_insights_mcp.utils.errors import ClusterUnavailableError

logger = logging.getLogger(__name__)


class K8sClient:
    """Kubernetes client wrapper holding an authenticated API connection.

    The client only ever issues list calls through ``core_v1``; it never
    creates, modifies or deletes cluster objects.
    """

    def __init__(self, config_obj: ClusterInsightsConfig | None = None) -> None:
        self._config = config_obj or get_config()
        self._api_client: ApiClient | None = None
        self._core_v1: CoreV1Api | None = None

    def connect(self) -> None:
        """Establish connection to the Kubernetes API.

        Raises:
            ClusterUnavailableError: If no usable cluster configuration loads.
        """
        mode = self._config.auth_mode
        try:
            if mode == AuthMode.TOKEN:
                self._api_client = self._token_api_client()
            elif mode == AuthMode.KUBECONFIG:
                self._api_client = self._kubeconfig_api_client()
            else:
                self._api_client = self._auto_api_client()
        except (config.ConfigException, OSError) as e:
            raise ClusterUnavailableError("cluster configuration", str(e)) from e

        self._core_v1 = client.CoreV1Api(self._api_client)
        logger.info(f"Connected to Kubernetes API using {mode.value} auth")

    def _token_api_client(self) -> ApiClient:
        configuration = client.Configuration()
        configuration.host = self._config.api_server
        configuration.api_key = {"authorization": f"Bearer {self._config.api_token}"}
        configuration.verify_ssl = self._config.verify_ssl
        logger.debug(f"Using token authentication against {self._config.api_server}")
        return ApiClient(configuration)

    def _kubeconfig_api_client(self) -> ApiClient:
        path = self._config.effective_kubeconfig_path
        logger.debug(f"Loading kubeconfig from {path}")
        api_client = config.new_client_from_config(
            config_file=str(path),
            context=self._config.kubeconfig_context,
        )
        if not self._config.verify_ssl:
            api_client.configuration.verify_ssl = False
        return api_client

    def _auto_api_client(self) -> ApiClient:
        try:
            config.load_incluster_config()
            logger.debug("Loaded in-cluster Kubernetes configuration")
            return ApiClient()
        except config.ConfigException:
            logger.debug("Not running in a cluster, falling back to kubeconfig")
        return self._kubeconfig_api_client()

    def disconnect(self) -> None:
        """Close the API connection."""
        if self._api_client is not None:
            self._api_client.close()
        self._api_client = None
        self._core_v1 = None
        logger.info("Disconnected from Kubernetes API")

    @property
    def is_connected(self) -> bool:
        """Whether an API connection is established."""
        return self._core_v1 is not None

    @property
    def core_v1(self) -> CoreV1Api:
        """Core V1 API for nodes, pods and namespaces.

        Raises:
            ClusterUnavailableError: If the client is not connected.
        """
        if self._core_v1 is None:
            raise ClusterUnavailableError("cluster connection", "Kubernetes client is not connected")
        return self._core_v1
