"""Core data models for kubeboot."""

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, field_serializer


class VMIdentity(BaseModel):
    """Snapshot of the VM identity captured once at startup."""

    model_config = ConfigDict(frozen=True)

    instance_name: str = Field(..., description="Compute Engine instance name")
    hostname: str = Field(..., description="Fully qualified instance hostname")
    internal_ip: str = Field(..., description="Primary internal IP address")
    external_ip: str = Field(..., description="Primary external IP address")
    project_id: str = Field(..., description="GCP project ID")
    cluster_name: str = Field(..., description="Target GKE cluster name")
    cluster_zone: str = Field(..., description="Target GKE cluster zone")
    ksa_name: str = Field("", description="Pre-provisioned service account name")
    ksa_token: str = Field("", description="Pre-provisioned service account token")
    labels: dict[str, str] = Field(default_factory=dict)

    @property
    def uses_static_token(self) -> bool:
        """Whether both service account fields are set."""
        return bool(self.ksa_name) and bool(self.ksa_token)

    @property
    def has_partial_service_account(self) -> bool:
        """Whether exactly one of the service account fields is set."""
        return bool(self.ksa_name) != bool(self.ksa_token)


class ClusterConnection(BaseModel):
    """Connection facts for a GKE control plane."""

    model_config = ConfigDict(frozen=True)

    endpoint_host: str
    ca_certificate: str = Field(..., description="Base64 encoded cluster CA certificate")
    name: str = Field(..., description="Canonical cluster name")


class TokenGrant(BaseModel):
    """Access token grant returned by the metadata token endpoint."""

    access_token: str
    expires_in: int = Field(..., ge=0)
    token_type: str | None = None


def format_rfc3339(value: datetime) -> str:
    """Render a datetime as an RFC3339 UTC timestamp with a Z suffix."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


class CredentialResponse(BaseModel):
    """Credential written to the calling tool by get-credential."""

    access_token: str
    token_expiry: datetime

    @field_serializer("token_expiry")
    def _serialize_expiry(self, value: datetime) -> str:
        return format_rfc3339(value)
