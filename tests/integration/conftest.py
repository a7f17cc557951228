"""Integration test fixtures and configuration."""

import pytest

from kubeboot.clients.metadata_client import MetadataClient
from kubeboot.core.config import MetadataConfig
from kubeboot.core.exceptions import MetadataError


@pytest.fixture
def metadata_client() -> MetadataClient:
    """Metadata client for the VM the tests run on."""
    config = MetadataConfig()
    return MetadataClient(host=config.host, timeout=2.0)


@pytest.fixture
def skip_if_not_on_gce(metadata_client: MetadataClient):
    """Skip test unless a metadata service is reachable."""
    try:
        metadata_client.get("instance/name")
    except MetadataError as e:
        pytest.skip(f"Metadata service not available: {e}")
