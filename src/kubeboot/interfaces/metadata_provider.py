"""Metadata provider interface for instance identity lookups."""

from abc import ABC, abstractmethod


class MetadataProvider(ABC):
    """Read-only key-value view of the instance metadata service.

    Paths are relative to the metadata root, e.g. ``instance/name`` or
    ``project/project-id``. Implementations raise ``MetadataNotDefinedError``
    for keys the instance does not define and ``MetadataError`` for any other
    lookup failure.
    """

    @abstractmethod
    def get(self, path: str) -> str:
        """Get the value stored at a metadata path.

        Args:
            path: Metadata path relative to the metadata root

        Returns:
            Value as text, surrounding whitespace stripped

        Raises:
            MetadataError: If the value cannot be read
        """

    def instance_attribute(self, name: str) -> str:
        """Get a custom instance attribute value.

        Args:
            name: Attribute name

        Returns:
            Attribute value

        Raises:
            MetadataError: If the attribute cannot be read
        """
        return self.get(f"instance/attributes/{name}")

    def instance_attributes(self) -> list[str]:
        """List the names of all custom instance attributes.

        Returns:
            Attribute names in the order the service reports them

        Raises:
            MetadataError: If the listing cannot be read
        """
        listing = self.get("instance/attributes/")
        return [line for line in (part.strip() for part in listing.splitlines()) if line]
