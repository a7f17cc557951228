"""Instance identity discovery from the metadata service."""

from kubeboot.core.config import AttributeKeysConfig
from kubeboot.core.exceptions import IdentityError, MetadataError
from kubeboot.core.models import VMIdentity
from kubeboot.interfaces.metadata_provider import MetadataProvider
from kubeboot.utils.logging import get_logger

logger = get_logger(__name__)

INSTANCE_NAME_PATH = "instance/name"
HOSTNAME_PATH = "instance/hostname"
INTERNAL_IP_PATH = "instance/network-interfaces/0/ip"
EXTERNAL_IP_PATH = "instance/network-interfaces/0/access-configs/0/external-ip"
PROJECT_ID_PATH = "project/project-id"


class IdentityReader:
    """Reads a VMIdentity from an injected metadata provider.

    Required fields abort the read on the first failure. The optional
    service account fields and individual label values fall back to an empty
    string instead.
    """

    def __init__(
        self,
        metadata: MetadataProvider,
        keys: AttributeKeysConfig | None = None,
        strict_service_account: bool = False,
    ):
        """Initialize identity reader.

        Args:
            metadata: Metadata provider to read from
            keys: Custom attribute names (defaults if None)
            strict_service_account: Fail when only one service account field is set
        """
        self.metadata = metadata
        self.keys = keys or AttributeKeysConfig()
        self.strict_service_account = strict_service_account

    def _required(self, path: str) -> str:
        try:
            return self.metadata.get(path)
        except MetadataError as e:
            logger.error("required_metadata_missing", path=path, error=str(e))
            raise IdentityError(f"Failed to read required metadata {path}: {e}") from e

    def _required_attribute(self, name: str) -> str:
        return self._required(f"instance/attributes/{name}")

    def _optional_attribute(self, name: str) -> str:
        try:
            return self.metadata.instance_attribute(name)
        except MetadataError:
            logger.debug("optional_attribute_not_set", attribute=name)
            return ""

    def read_labels(self) -> dict[str, str]:
        """Collect prefixed instance attributes as labels.

        Returns:
            Mapping of label key (prefix stripped) to value

        Raises:
            IdentityError: If the attribute listing cannot be read
        """
        prefix = self.keys.label_prefix
        try:
            names = self.metadata.instance_attributes()
        except MetadataError as e:
            logger.error("attribute_listing_failed", error=str(e))
            raise IdentityError(f"Failed to list instance attributes: {e}") from e

        labels: dict[str, str] = {}
        for name in names:
            if not name.startswith(prefix):
                continue
            key = name[len(prefix) :]
            try:
                labels[key] = self.metadata.instance_attribute(name)
            except MetadataError as e:
                logger.warning("label_lookup_failed", attribute=name, error=str(e))
                labels[key] = ""

        return labels

    def read(self) -> VMIdentity:
        """Read the VM identity.

        Returns:
            VMIdentity snapshot

        Raises:
            IdentityError: If a required field cannot be read
        """
        instance_name = self._required(INSTANCE_NAME_PATH)
        hostname = self._required(HOSTNAME_PATH)
        internal_ip = self._required(INTERNAL_IP_PATH)
        external_ip = self._required(EXTERNAL_IP_PATH)
        project_id = self._required(PROJECT_ID_PATH)
        cluster_name = self._required_attribute(self.keys.cluster_name)
        cluster_zone = self._required_attribute(self.keys.cluster_zone)

        identity = VMIdentity(
            instance_name=instance_name,
            hostname=hostname,
            internal_ip=internal_ip,
            external_ip=external_ip,
            project_id=project_id,
            cluster_name=cluster_name,
            cluster_zone=cluster_zone,
            ksa_name=self._optional_attribute(self.keys.ksa_name),
            ksa_token=self._optional_attribute(self.keys.ksa_token),
            labels=self.read_labels(),
        )

        if identity.has_partial_service_account:
            if self.strict_service_account:
                raise IdentityError(
                    f"Only one of {self.keys.ksa_name}/{self.keys.ksa_token} is set"
                )
            logger.warning(
                "partial_service_account_config",
                ksa_name_set=bool(identity.ksa_name),
                ksa_token_set=bool(identity.ksa_token),
            )

        logger.info(
            "identity_read",
            instance_name=identity.instance_name,
            project_id=identity.project_id,
            cluster_name=identity.cluster_name,
            cluster_zone=identity.cluster_zone,
            static_token=identity.uses_static_token,
            label_count=len(identity.labels),
        )
        return identity
