"""Compute Engine metadata service client."""

import requests

from kubeboot.core.exceptions import MetadataError, MetadataNotDefinedError
from kubeboot.interfaces.metadata_provider import MetadataProvider
from kubeboot.utils.logging import get_logger

logger = get_logger(__name__)

METADATA_FLAVOR_HEADER = {"Metadata-Flavor": "Google"}


class MetadataClient(MetadataProvider):
    """HTTP client for the VM-local metadata service."""

    def __init__(
        self,
        host: str = "metadata.google.internal",
        timeout: float = 5.0,
        session: requests.Session | None = None,
    ):
        """Initialize metadata client.

        Args:
            host: Metadata server host (optionally with port)
            timeout: Connect/read timeout in seconds
            session: Existing requests session (optional)
        """
        self.base_url = f"http://{host}/computeMetadata/v1/"
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update(METADATA_FLAVOR_HEADER)

        logger.debug("metadata_client_initialized", base_url=self.base_url)

    def get(self, path: str) -> str:
        """Get the value stored at a metadata path.

        Args:
            path: Metadata path relative to computeMetadata/v1/

        Returns:
            Value as text, surrounding whitespace stripped

        Raises:
            MetadataNotDefinedError: If the key is not defined (HTTP 404)
            MetadataError: If the request fails for any other reason
        """
        url = self.base_url + path.lstrip("/")
        try:
            response = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as e:
            logger.debug("metadata_request_failed", path=path, error=str(e))
            raise MetadataError(f"Metadata request for {path} failed: {e}") from e

        if response.status_code == 404:
            raise MetadataNotDefinedError(f"Metadata key {path} is not defined")
        if response.status_code != 200:
            raise MetadataError(
                f"Metadata request for {path} returned status {response.status_code}"
            )

        return response.text.strip()
