"""Pytest configuration and shared fixtures."""

from typing import Any
from unittest.mock import MagicMock

import pytest

from kubeboot.core.exceptions import MetadataError, MetadataNotDefinedError
from kubeboot.core.models import ClusterConnection, VMIdentity
from kubeboot.interfaces.metadata_provider import MetadataProvider

ATTRIBUTES_PATH = "instance/attributes/"


class InMemoryMetadata(MetadataProvider):
    """Metadata provider backed by a dictionary.

    Values that are exceptions are raised on lookup; missing keys raise
    MetadataNotDefinedError. The attribute listing is derived from the keys
    unless set explicitly.
    """

    def __init__(self, values: dict[str, Any] | None = None):
        self.values: dict[str, Any] = dict(values or {})
        self.calls: list[str] = []

    def get(self, path: str) -> str:
        self.calls.append(path)
        if path == ATTRIBUTES_PATH and path not in self.values:
            return "\n".join(
                key[len(ATTRIBUTES_PATH) :]
                for key in self.values
                if key.startswith(ATTRIBUTES_PATH)
            )
        if path not in self.values:
            raise MetadataNotDefinedError(f"Metadata key {path} is not defined")
        value = self.values[path]
        if isinstance(value, Exception):
            raise value
        return value


@pytest.fixture
def metadata_values() -> dict[str, Any]:
    """Metadata of a VM configured for the dynamic auth mode."""
    return {
        "instance/name": "worker-1",
        "instance/hostname": "worker-1.us-central1-a.c.demo-project.internal",
        "instance/network-interfaces/0/ip": "10.128.0.7",
        "instance/network-interfaces/0/access-configs/0/external-ip": "34.66.10.20",
        "project/project-id": "demo-project",
        "instance/attributes/k8s-cluster-name": "demo-cluster",
        "instance/attributes/k8s-cluster-zone": "us-central1-a",
        "instance/attributes/k8s-label-team": "infra",
        "instance/attributes/other-attr": "x",
    }


@pytest.fixture
def metadata(metadata_values: dict[str, Any]) -> InMemoryMetadata:
    """In-memory metadata provider."""
    return InMemoryMetadata(metadata_values)


@pytest.fixture
def make_metadata() -> type[InMemoryMetadata]:
    """Factory for in-memory metadata providers."""
    return InMemoryMetadata


@pytest.fixture
def failing_metadata() -> InMemoryMetadata:
    """Metadata provider whose every lookup fails."""
    provider = InMemoryMetadata()
    provider.get = MagicMock(side_effect=MetadataError("metadata server unreachable"))  # type: ignore[method-assign]
    return provider


@pytest.fixture
def sample_identity() -> VMIdentity:
    """VM identity without a pre-provisioned service account."""
    return VMIdentity(
        instance_name="worker-1",
        hostname="worker-1.us-central1-a.c.demo-project.internal",
        internal_ip="10.128.0.7",
        external_ip="34.66.10.20",
        project_id="demo-project",
        cluster_name="demo-cluster",
        cluster_zone="us-central1-a",
        labels={"team": "infra"},
    )


@pytest.fixture
def sample_static_identity(sample_identity: VMIdentity) -> VMIdentity:
    """VM identity with a pre-provisioned service account token."""
    return sample_identity.model_copy(
        update={"ksa_name": "node-bootstrapper", "ksa_token": "eyJhbGciOiJSUzI1NiJ9.static"}
    )


@pytest.fixture
def sample_connection() -> ClusterConnection:
    """Resolved cluster connection facts."""
    return ClusterConnection(
        endpoint_host="35.200.1.2",
        ca_certificate="LS0tLS1CRUdJTiBDRVJUSUZJQ0FURS0tLS0tCg==",
        name="demo-cluster",
    )


@pytest.fixture
def mock_gke_cluster() -> MagicMock:
    """Mock container_v1.Cluster resource."""
    cluster = MagicMock()
    cluster.name = "demo-cluster"
    cluster.endpoint = "35.200.1.2"
    cluster.master_auth.cluster_ca_certificate = "LS0tLS1CRUdJTiBDRVJUSUZJQ0FURS0tLS0tCg=="
    return cluster


@pytest.fixture
def mock_cluster_manager(mock_gke_cluster: MagicMock) -> MagicMock:
    """Mock ClusterManagerClient."""
    manager = MagicMock()
    manager.get_cluster.return_value = mock_gke_cluster
    return manager


# ==============================================================================
# Pytest Markers
# ==============================================================================


def pytest_configure(config: Any) -> None:
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests")
