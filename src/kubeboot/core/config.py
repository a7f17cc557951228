"""Configuration management for kubeboot."""

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field

from kubeboot.core.exceptions import ConfigurationError

CLOUD_PLATFORM_SCOPE = "https://www.googleapis.com/auth/cloud-platform"


def _default_metadata_host() -> str:
    return os.environ.get("GCE_METADATA_HOST", "metadata.google.internal")


class MetadataConfig(BaseModel):
    """Instance metadata service configuration."""

    host: str = Field(default_factory=_default_metadata_host)
    timeout_seconds: float = 5.0


class AttributeKeysConfig(BaseModel):
    """Custom instance attribute names read at startup."""

    cluster_name: str = "k8s-cluster-name"
    cluster_zone: str = "k8s-cluster-zone"
    ksa_name: str = "k8s-sa-name"
    ksa_token: str = "k8s-sa-token"
    label_prefix: str = "k8s-label-"


class BootstrapConfig(BaseModel):
    """Bootstrap behaviour configuration."""

    local_kubeconfig: str = "~/.kube/config"
    credential_command: str = "get-credential"
    auth_scope: str = CLOUD_PLATFORM_SCOPE
    # Treat exactly one of k8s-sa-name/k8s-sa-token being set as fatal
    strict_service_account: bool = False


class KubernetesConfig(BaseModel):
    """Smoke-test configuration."""

    namespace: str = "default"


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    format: str = "json"
    output: str = "stderr"


class KubebootConfig(BaseModel):
    """Main kubeboot configuration."""

    metadata: MetadataConfig = Field(default_factory=MetadataConfig)
    attributes: AttributeKeysConfig = Field(default_factory=AttributeKeysConfig)
    bootstrap: BootstrapConfig = Field(default_factory=BootstrapConfig)
    kubernetes: KubernetesConfig = Field(default_factory=KubernetesConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def from_file(cls, path: str | Path) -> "KubebootConfig":
        """Load configuration from YAML file.

        Args:
            path: Path to configuration file

        Returns:
            KubebootConfig instance

        Raises:
            ConfigurationError: If file cannot be loaded or parsed
        """
        config_path = Path(path).expanduser()

        if not config_path.exists():
            raise ConfigurationError(f"Configuration file not found: {config_path}")

        try:
            with config_path.open() as f:
                data = yaml.safe_load(f)
        except Exception as e:
            raise ConfigurationError(f"Failed to load configuration: {e}") from e

        try:
            return cls(**(data or {}))
        except Exception as e:
            raise ConfigurationError(f"Invalid configuration: {e}") from e

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to dictionary.

        Returns:
            Dictionary representation
        """
        return self.model_dump()
