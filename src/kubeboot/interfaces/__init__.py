"""Interface definitions for kubeboot collaborators."""

from kubeboot.interfaces.metadata_provider import MetadataProvider

__all__ = [
    "MetadataProvider",
]
