"""Cluster connection resolution against the GKE management API."""

from __future__ import annotations

from typing import TYPE_CHECKING

from kubeboot.core.models import ClusterConnection
from kubeboot.utils.logging import get_logger

if TYPE_CHECKING:
    from kubeboot.clients.gke_client import GKEClient

logger = get_logger(__name__)


class ClusterResolver:
    """Resolves the control plane endpoint and CA for one cluster."""

    def __init__(self, gke_client: GKEClient):
        """Initialize cluster resolver.

        Args:
            gke_client: Authenticated GKE client
        """
        self.gke_client = gke_client

    def resolve(self, project_id: str, zone: str, cluster_name: str) -> ClusterConnection:
        """Resolve connection facts for a cluster.

        Endpoint and CA certificate are returned exactly as the management API
        reports them; certificate validation is left to the Kubernetes client.

        Args:
            project_id: GCP project ID
            zone: Cluster zone
            cluster_name: Cluster name as configured on the instance

        Returns:
            ClusterConnection

        Raises:
            ClusterResolutionError: If the cluster cannot be retrieved
        """
        cluster = self.gke_client.get_cluster(project_id, zone, cluster_name)

        connection = ClusterConnection(
            endpoint_host=cluster.endpoint,
            ca_certificate=cluster.master_auth.cluster_ca_certificate,
            name=cluster.name,
        )

        logger.info(
            "cluster_resolved",
            cluster=connection.name,
            endpoint=connection.endpoint_host,
            zone=zone,
        )
        return connection
