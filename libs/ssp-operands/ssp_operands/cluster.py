"""Kubernetes cluster connection."""

import base64
import tempfile
from pathlib import Path
from typing import Optional

from kubernetes import config
from kubernetes.client import ApiClient, Configuration
from kubernetes.dynamic import DynamicClient

from .models import ClusterConfig
from .store import ResourceStore


class ClusterConnection:
    """Represents a connection to a single Kubernetes cluster."""

    def __init__(self, cluster_config: ClusterConfig, request_timeout: Optional[float] = None):
        """
        Initialize cluster connection.

        Args:
            cluster_config: Cluster configuration
            request_timeout: Timeout in seconds for API calls made by the store

        Raises:
            ValueError: If kubeconfig is invalid
        """
        self.config = cluster_config
        self.request_timeout = request_timeout
        self._api_client: Optional[ApiClient] = None
        self._dynamic: Optional[DynamicClient] = None
        self._store: Optional[ResourceStore] = None
        self._temp_kubeconfig: Optional[Path] = None

        self._initialize_client()

    def _initialize_client(self):
        """Initialize Kubernetes API client."""
        client_config = Configuration()
        try:
            if self.config.kubeconfig_data:
                # Decode base64 kubeconfig and write to temp file
                kubeconfig_content = base64.b64decode(self.config.kubeconfig_data)
                with tempfile.NamedTemporaryFile(mode="wb", delete=False) as f:
                    f.write(kubeconfig_content)
                    self._temp_kubeconfig = Path(f.name)
                config.load_kube_config(
                    config_file=str(self._temp_kubeconfig),
                    context=self.config.context,
                    client_configuration=client_config,
                )
            elif self.config.kubeconfig_path:
                config.load_kube_config(
                    config_file=self.config.kubeconfig_path,
                    context=self.config.context,
                    client_configuration=client_config,
                )
            else:
                # Operator running inside the cluster
                config.load_incluster_config(client_configuration=client_config)

            self._api_client = ApiClient(configuration=client_config)
            self._dynamic = DynamicClient(self._api_client)
            self._store = ResourceStore(self._dynamic, request_timeout=self.request_timeout)

        except Exception as e:
            self.close()
            raise ValueError(f"Failed to initialize cluster connection: {e}") from e

    @property
    def api_client(self) -> ApiClient:
        """Get ApiClient instance."""
        if not self._api_client:
            raise RuntimeError("Cluster connection not initialized")
        return self._api_client

    @property
    def dynamic(self) -> DynamicClient:
        """Get DynamicClient instance."""
        if not self._dynamic:
            raise RuntimeError("Cluster connection not initialized")
        return self._dynamic

    @property
    def store(self) -> ResourceStore:
        """Get the resource store for this cluster."""
        if not self._store:
            raise RuntimeError("Cluster connection not initialized")
        return self._store

    def close(self):
        """Close the cluster connection and clean up resources."""
        if self._api_client:
            self._api_client.close()
            self._api_client = None

        # Clean up temporary kubeconfig file
        if self._temp_kubeconfig and self._temp_kubeconfig.exists():
            self._temp_kubeconfig.unlink()
            self._temp_kubeconfig = None

        self._dynamic = None
        self._store = None

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()
