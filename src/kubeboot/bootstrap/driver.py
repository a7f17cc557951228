"""Bootstrap driver producing a Kubernetes client configuration."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from kubernetes import client
from kubernetes.config import kube_config
from kubernetes.config.config_exception import ConfigException

from kubeboot.bootstrap.credentials import CommandCredentials
from kubeboot.bootstrap.identity import IdentityReader
from kubeboot.bootstrap.kubeconfig import (
    DynamicClientConfiguration,
    StaticClientConfiguration,
    synthesize,
)
from kubeboot.bootstrap.resolver import ClusterResolver
from kubeboot.clients.gke_client import GKEClient
from kubeboot.core.config import KubebootConfig
from kubeboot.core.exceptions import ConfigurationError
from kubeboot.core.models import ClusterConnection, VMIdentity
from kubeboot.interfaces.metadata_provider import MetadataProvider
from kubeboot.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class BootstrapResult:
    """Outcome of a bootstrap run."""

    configuration: client.Configuration
    source: str
    identity: VMIdentity | None = None
    connection: ClusterConnection | None = None
    client_configuration: DynamicClientConfiguration | StaticClientConfiguration | None = None


class BootstrapDriver:
    """Runs local-config lookup or discovery and loads the result.

    Either path yields a fully loaded ``kubernetes.client.Configuration`` or
    raises; nothing partial is ever returned.
    """

    def __init__(
        self,
        config: KubebootConfig,
        metadata: MetadataProvider,
        gke_client_factory: Callable[[], GKEClient] | None = None,
        executable: str | None = None,
    ):
        """Initialize bootstrap driver.

        Args:
            config: kubeboot configuration
            metadata: Metadata provider for identity discovery
            gke_client_factory: Builds the GKE client (defaults to ambient credentials)
            executable: Credential command path override for dynamic mode
        """
        self.config = config
        self.metadata = metadata
        self.gke_client_factory = gke_client_factory or (
            lambda: GKEClient(scope=config.bootstrap.auth_scope)
        )
        self.executable = executable

    def find_local_config(self) -> Path | None:
        """Return the local kubeconfig path if one exists."""
        path = Path(self.config.bootstrap.local_kubeconfig).expanduser()
        if path.is_file():
            return path
        logger.debug("local_kubeconfig_not_found", path=str(path))
        return None

    def load_local_config(self, path: Path) -> client.Configuration:
        """Load an existing kubeconfig file verbatim.

        Raises:
            ConfigurationError: If the file cannot be parsed
        """
        configuration = client.Configuration()
        try:
            kube_config.load_kube_config(
                config_file=str(path),
                client_configuration=configuration,
                persist_config=False,
            )
        except Exception as e:
            raise ConfigurationError(f"Failed to load kubeconfig {path}: {e}") from e

        logger.info("local_kubeconfig_loaded", path=str(path))
        return configuration

    def load_client_configuration(
        self, client_config: DynamicClientConfiguration | StaticClientConfiguration
    ) -> client.Configuration:
        """Load a synthesized kubeconfig into a client configuration.

        For the dynamic mode the token is fetched by running the credential
        command named in the document.

        Raises:
            ConfigurationError: If the document cannot be loaded
            CredentialError: If the credential command fails
        """
        credentials = None
        if isinstance(client_config, DynamicClientConfiguration):
            credentials = CommandCredentials(
                [client_config.command_path, client_config.command_args]
            )

        configuration = client.Configuration()
        try:
            loader = kube_config.KubeConfigLoader(
                config_dict=client_config.to_dict(),
                get_google_credentials=credentials,
            )
            loader.load_and_set(configuration)
        except (ConfigException, ValueError) as e:
            raise ConfigurationError(f"Failed to load synthesized kubeconfig: {e}") from e

        return configuration

    def discover(self) -> BootstrapResult:
        """Discover identity, resolve the cluster and synthesize a configuration.

        Raises:
            KubebootError: On the first failing step
        """
        identity = IdentityReader(
            self.metadata,
            keys=self.config.attributes,
            strict_service_account=self.config.bootstrap.strict_service_account,
        ).read()

        resolver = ClusterResolver(self.gke_client_factory())
        connection = resolver.resolve(
            identity.project_id, identity.cluster_zone, identity.cluster_name
        )

        client_config = synthesize(
            identity,
            connection,
            credential_command=self.config.bootstrap.credential_command,
            executable=self.executable,
        )

        return BootstrapResult(
            configuration=self.load_client_configuration(client_config),
            source=client_config.auth_mode,
            identity=identity,
            connection=connection,
            client_configuration=client_config,
        )

    def run(self) -> BootstrapResult:
        """Produce a client configuration from the local file or by discovery.

        Returns:
            BootstrapResult

        Raises:
            KubebootError: If any step fails
        """
        local_path = self.find_local_config()
        if local_path is not None:
            return BootstrapResult(
                configuration=self.load_local_config(local_path),
                source="local",
            )

        logger.info("bootstrap_discovery_started")
        return self.discover()
