"""Custom exceptions for kubeboot."""


class KubebootError(Exception):
    """Base exception for all kubeboot errors."""


class ConfigurationError(KubebootError):
    """Configuration-related errors."""


class MetadataError(KubebootError):
    """Instance metadata lookup failed."""


class MetadataNotDefinedError(MetadataError):
    """Requested metadata key is not defined for this instance."""


class IdentityError(KubebootError):
    """Required VM identity could not be read."""


class CredentialError(KubebootError):
    """Access token exchange failed."""


class ClusterResolutionError(KubebootError):
    """GKE cluster connection facts could not be resolved."""


class KubernetesError(KubebootError):
    """Kubernetes operation failed."""
