"""Kubernetes client for cluster operations."""

from kubernetes import client
from kubernetes.client.exceptions import ApiException
from kubernetes.client.models import V1Pod
from urllib3.exceptions import HTTPError

from kubeboot.core.exceptions import KubernetesError
from kubeboot.utils.logging import get_logger

logger = get_logger(__name__)


class KubernetesClient:
    """Kubernetes client wrapper bound to an explicit client configuration."""

    def __init__(self, configuration: client.Configuration):
        """Initialize Kubernetes client.

        Args:
            configuration: Loaded client configuration (host, CA, credentials)
        """
        self.api_client = client.ApiClient(configuration=configuration)
        self.core_v1 = client.CoreV1Api(api_client=self.api_client)

        logger.debug("k8s_client_initialized", host=configuration.host)

    def get_pods(self, namespace: str = "default") -> list[V1Pod]:
        """Get pods in a namespace.

        Args:
            namespace: Namespace to query

        Returns:
            List of V1Pod objects

        Raises:
            KubernetesError: If pods cannot be retrieved
        """
        try:
            logger.debug("getting_pods", namespace=namespace)

            response = self.core_v1.list_namespaced_pod(namespace=namespace)
            pods = response.items

            logger.info("pods_retrieved", namespace=namespace, count=len(pods))
            return pods

        except ApiException as e:
            logger.error(
                "get_pods_failed",
                namespace=namespace,
                status=e.status,
                reason=e.reason,
            )
            raise KubernetesError(f"Failed to get pods in {namespace}: {e.reason}") from e
        except HTTPError as e:
            logger.error("get_pods_failed", namespace=namespace, error=str(e))
            raise KubernetesError(f"Failed to reach cluster API: {e}") from e

    def list_pod_names(self, namespace: str = "default") -> list[str]:
        """List pod names in a namespace.

        Args:
            namespace: Namespace to query

        Returns:
            Pod names in API order
        """
        return [pod.metadata.name for pod in self.get_pods(namespace=namespace)]
