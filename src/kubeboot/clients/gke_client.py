"""GKE cluster management API client."""

from typing import Any

import google.auth
from google.api_core.exceptions import GoogleAPIError, NotFound
from google.auth.exceptions import DefaultCredentialsError, GoogleAuthError
from google.cloud import container_v1

from kubeboot.core.config import CLOUD_PLATFORM_SCOPE
from kubeboot.core.exceptions import ClusterResolutionError
from kubeboot.utils.logging import get_logger

logger = get_logger(__name__)


class GKEClient:
    """Client for GKE cluster lookups using the VM's ambient identity."""

    def __init__(
        self,
        scope: str = CLOUD_PLATFORM_SCOPE,
        cluster_manager: container_v1.ClusterManagerClient | None = None,
    ):
        """Initialize GKE client.

        Args:
            scope: OAuth scope requested for the ambient credentials
            cluster_manager: Existing ClusterManagerClient (optional)

        Raises:
            ClusterResolutionError: If ambient credentials are unavailable
        """
        if cluster_manager is not None:
            self.cluster_manager = cluster_manager
        else:
            try:
                credentials, _ = google.auth.default(scopes=[scope])
            except DefaultCredentialsError as e:
                logger.error("gke_credentials_unavailable", error=str(e))
                raise ClusterResolutionError(
                    "Failed to initialize credentials for the cluster management API"
                ) from e
            self.cluster_manager = container_v1.ClusterManagerClient(credentials=credentials)

        logger.debug("gke_client_initialized", scope=scope)

    def get_cluster(self, project_id: str, zone: str, cluster_name: str) -> Any:
        """Get a GKE cluster resource.

        Args:
            project_id: GCP project ID
            zone: Cluster zone (or region)
            cluster_name: Cluster name

        Returns:
            google.cloud.container_v1.Cluster

        Raises:
            ClusterResolutionError: If the cluster cannot be retrieved
        """
        name = f"projects/{project_id}/locations/{zone}/clusters/{cluster_name}"
        try:
            logger.debug("getting_gke_cluster", name=name)
            cluster = self.cluster_manager.get_cluster(name=name, retry=None)
        except NotFound as e:
            logger.error("gke_cluster_not_found", name=name)
            raise ClusterResolutionError(f"GKE cluster not found: {name}") from e
        except GoogleAPIError as e:
            logger.error("get_gke_cluster_failed", name=name, error=str(e))
            raise ClusterResolutionError(f"Failed to get GKE cluster {name}: {e}") from e
        except GoogleAuthError as e:
            logger.error("gke_authorization_failed", name=name, error=str(e))
            raise ClusterResolutionError(f"Failed to authorize GKE request for {name}: {e}") from e

        logger.info("gke_cluster_retrieved", name=name)
        return cluster
