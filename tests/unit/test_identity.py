"""Unit tests for instance identity discovery."""

from unittest.mock import patch

import pytest

from kubeboot.bootstrap.identity import IdentityReader
from kubeboot.core.config import AttributeKeysConfig
from kubeboot.core.exceptions import IdentityError, MetadataError


class TestIdentityReader:
    """Tests for IdentityReader.read."""

    def test_read_required_fields(self, metadata) -> None:
        """Test all required fields are populated from metadata."""
        identity = IdentityReader(metadata).read()

        assert identity.instance_name == "worker-1"
        assert identity.hostname == "worker-1.us-central1-a.c.demo-project.internal"
        assert identity.internal_ip == "10.128.0.7"
        assert identity.external_ip == "34.66.10.20"
        assert identity.project_id == "demo-project"
        assert identity.cluster_name == "demo-cluster"
        assert identity.cluster_zone == "us-central1-a"

    @pytest.mark.parametrize(
        "missing",
        [
            "instance/name",
            "instance/hostname",
            "instance/network-interfaces/0/ip",
            "instance/network-interfaces/0/access-configs/0/external-ip",
            "project/project-id",
            "instance/attributes/k8s-cluster-name",
            "instance/attributes/k8s-cluster-zone",
        ],
    )
    def test_missing_required_field_is_fatal(self, make_metadata, metadata_values, missing) -> None:
        """Test any missing required field aborts the read."""
        del metadata_values[missing]
        reader = IdentityReader(make_metadata(metadata_values))

        with pytest.raises(IdentityError, match=missing):
            reader.read()

    def test_unreachable_metadata_stops_at_first_lookup(self, failing_metadata) -> None:
        """Test the read aborts on the first failing required lookup."""
        with pytest.raises(IdentityError, match="instance/name"):
            IdentityReader(failing_metadata).read()

        assert failing_metadata.get.call_count == 1

    def test_required_field_failure_keeps_cause(self, make_metadata, metadata_values) -> None:
        """Test the underlying metadata error is chained."""
        cause = MetadataError("metadata server unreachable")
        metadata_values["project/project-id"] = cause
        reader = IdentityReader(make_metadata(metadata_values))

        with pytest.raises(IdentityError) as exc_info:
            reader.read()

        assert exc_info.value.__cause__ is cause

    def test_optional_service_account_defaults_to_empty(self, metadata) -> None:
        """Test unset service account attributes read as empty strings."""
        identity = IdentityReader(metadata).read()

        assert identity.ksa_name == ""
        assert identity.ksa_token == ""
        assert identity.uses_static_token is False

    def test_optional_service_account_read_failure(self, make_metadata, metadata_values) -> None:
        """Test a failing optional lookup is treated as not configured."""
        metadata_values["instance/attributes/k8s-sa-name"] = MetadataError("timeout")
        metadata_values["instance/attributes/k8s-sa-token"] = "token-value"

        identity = IdentityReader(make_metadata(metadata_values)).read()

        assert identity.ksa_name == ""
        assert identity.ksa_token == "token-value"

    def test_service_account_read(self, make_metadata, metadata_values) -> None:
        """Test configured service account attributes are read."""
        metadata_values["instance/attributes/k8s-sa-name"] = "node-bootstrapper"
        metadata_values["instance/attributes/k8s-sa-token"] = "token-value"

        identity = IdentityReader(make_metadata(metadata_values)).read()

        assert identity.ksa_name == "node-bootstrapper"
        assert identity.ksa_token == "token-value"
        assert identity.uses_static_token is True

    def test_partial_service_account_warns(self, make_metadata, metadata_values) -> None:
        """Test partial service account config falls back with a warning."""
        metadata_values["instance/attributes/k8s-sa-name"] = "node-bootstrapper"

        with patch("kubeboot.bootstrap.identity.logger") as mock_logger:
            identity = IdentityReader(make_metadata(metadata_values)).read()

        assert identity.uses_static_token is False
        warned = [c.args[0] for c in mock_logger.warning.call_args_list]
        assert "partial_service_account_config" in warned

    def test_partial_service_account_strict(self, make_metadata, metadata_values) -> None:
        """Test strict mode rejects partial service account config."""
        metadata_values["instance/attributes/k8s-sa-token"] = "token-value"
        reader = IdentityReader(make_metadata(metadata_values), strict_service_account=True)

        with pytest.raises(IdentityError, match="Only one of"):
            reader.read()

    def test_custom_attribute_keys(self, make_metadata, metadata_values) -> None:
        """Test attribute names come from configuration."""
        metadata_values["instance/attributes/gke-cluster"] = "other-cluster"
        keys = AttributeKeysConfig(cluster_name="gke-cluster")

        identity = IdentityReader(make_metadata(metadata_values), keys=keys).read()

        assert identity.cluster_name == "other-cluster"


class TestReadLabels:
    """Tests for label extraction."""

    def test_labels_filter_and_strip_prefix(self, make_metadata) -> None:
        """Test only prefixed attributes become labels, without the prefix."""
        provider = make_metadata(
            {
                "instance/attributes/k8s-label-team": "infra",
                "instance/attributes/other-attr": "x",
            }
        )

        assert IdentityReader(provider).read_labels() == {"team": "infra"}

    def test_label_failure_degrades_to_empty(self, make_metadata) -> None:
        """Test one failing label does not abort the others."""
        provider = make_metadata(
            {
                "instance/attributes/k8s-label-team": MetadataError("timeout"),
                "instance/attributes/k8s-label-tier": "backend",
            }
        )

        with patch("kubeboot.bootstrap.identity.logger") as mock_logger:
            labels = IdentityReader(provider).read_labels()

        assert labels == {"team": "", "tier": "backend"}
        mock_logger.warning.assert_called_once()
        assert mock_logger.warning.call_args.args[0] == "label_lookup_failed"

    def test_labels_enumerated_once(self, make_metadata) -> None:
        """Test the attribute listing is requested a single time."""
        provider = make_metadata({"instance/attributes/k8s-label-team": "infra"})

        IdentityReader(provider).read_labels()

        assert provider.calls.count("instance/attributes/") == 1

    def test_label_listing_failure_is_fatal(self, make_metadata) -> None:
        """Test a failing attribute listing aborts the read."""
        provider = make_metadata({"instance/attributes/": MetadataError("timeout")})

        with pytest.raises(IdentityError, match="list instance attributes"):
            IdentityReader(provider).read_labels()

    def test_custom_label_prefix(self, make_metadata) -> None:
        """Test the label prefix is configurable."""
        provider = make_metadata(
            {
                "instance/attributes/node-label-zone": "a",
                "instance/attributes/k8s-label-team": "infra",
            }
        )
        keys = AttributeKeysConfig(label_prefix="node-label-")

        assert IdentityReader(provider, keys=keys).read_labels() == {"zone": "a"}

    def test_read_includes_labels(self, metadata) -> None:
        """Test the identity carries the extracted labels."""
        identity = IdentityReader(metadata).read()

        assert identity.labels == {"team": "infra"}
