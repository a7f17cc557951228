"""Kubeconfig synthesis for the two cluster authentication modes."""

from __future__ import annotations

import os
import sys
from abc import ABC, abstractmethod
from typing import Annotated, Any, Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field

from kubeboot.core.models import ClusterConnection, VMIdentity
from kubeboot.utils.logging import get_logger

logger = get_logger(__name__)

CREDENTIAL_TOKEN_KEY = "{.access_token}"
CREDENTIAL_EXPIRY_KEY = "{.token_expiry}"


class _Entry(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)


class ClusterEntry(_Entry):
    """Cluster connection settings."""

    server: str
    certificate_authority_data: str = Field(..., alias="certificate-authority-data")


class NamedCluster(_Entry):
    name: str
    cluster: ClusterEntry


class ContextEntry(_Entry):
    cluster: str
    user: str


class NamedContext(_Entry):
    name: str
    context: ContextEntry


class AuthProviderConfig(_Entry):
    """gcp auth-provider settings pointing at a credential command."""

    cmd_path: str = Field(..., alias="cmd-path")
    cmd_args: str = Field(..., alias="cmd-args")
    token_key: str = Field(CREDENTIAL_TOKEN_KEY, alias="token-key")
    expiry_key: str = Field(CREDENTIAL_EXPIRY_KEY, alias="expiry-key")


class AuthProvider(_Entry):
    name: Literal["gcp"] = "gcp"
    config: AuthProviderConfig


class CommandUser(_Entry):
    auth_provider: AuthProvider = Field(..., alias="auth-provider")


class TokenUser(_Entry):
    token: str


class NamedUser(_Entry):
    name: str
    user: CommandUser | TokenUser


class KubeconfigDocument(_Entry):
    """A kubeconfig holding exactly one cluster, context and user."""

    api_version: Literal["v1"] = Field("v1", alias="apiVersion")
    kind: Literal["Config"] = "Config"
    cluster: NamedCluster
    context: NamedContext
    user: NamedUser

    def to_dict(self) -> dict[str, Any]:
        """Render the kubeconfig structure.

        Returns:
            Dictionary in the standard kubeconfig layout
        """
        return {
            "apiVersion": self.api_version,
            "kind": self.kind,
            "clusters": [self.cluster.model_dump(by_alias=True)],
            "contexts": [self.context.model_dump(by_alias=True)],
            "current-context": self.context.name,
            "preferences": {},
            "users": [self.user.model_dump(by_alias=True)],
        }

    def to_yaml(self) -> str:
        return yaml.safe_dump(self.to_dict(), default_flow_style=False, sort_keys=False)


class _BaseClientConfiguration(BaseModel, ABC):
    model_config = ConfigDict(frozen=True)

    cluster_name: str
    endpoint_host: str
    ca_certificate: str

    @property
    def user_name(self) -> str:
        return self.cluster_name

    def _named_cluster(self) -> NamedCluster:
        return NamedCluster(
            name=self.cluster_name,
            cluster=ClusterEntry(
                server=f"https://{self.endpoint_host}",
                certificate_authority_data=self.ca_certificate,
            ),
        )

    def _named_context(self) -> NamedContext:
        return NamedContext(
            name=self.cluster_name,
            context=ContextEntry(cluster=self.cluster_name, user=self.user_name),
        )

    @abstractmethod
    def _named_user(self) -> NamedUser:
        """Build the user entry for this authentication mode."""

    def document(self) -> KubeconfigDocument:
        """Build the typed kubeconfig document for this configuration."""
        return KubeconfigDocument(
            cluster=self._named_cluster(),
            context=self._named_context(),
            user=self._named_user(),
        )

    def to_dict(self) -> dict[str, Any]:
        return self.document().to_dict()

    def render_yaml(self) -> str:
        return self.document().to_yaml()


class DynamicClientConfiguration(_BaseClientConfiguration):
    """Client configuration that re-runs a credential command for tokens."""

    auth_mode: Literal["dynamic"] = "dynamic"
    command_path: str
    command_args: str

    def _named_user(self) -> NamedUser:
        return NamedUser(
            name=self.user_name,
            user=CommandUser(
                auth_provider=AuthProvider(
                    config=AuthProviderConfig(cmd_path=self.command_path, cmd_args=self.command_args)
                )
            ),
        )


class StaticClientConfiguration(_BaseClientConfiguration):
    """Client configuration embedding a pre-provisioned bearer token."""

    auth_mode: Literal["static"] = "static"
    service_account: str
    token: str

    @property
    def user_name(self) -> str:
        return self.service_account

    def _named_user(self) -> NamedUser:
        return NamedUser(name=self.user_name, user=TokenUser(token=self.token))


ClientConfiguration = Annotated[
    DynamicClientConfiguration | StaticClientConfiguration,
    Field(discriminator="auth_mode"),
]


def current_executable() -> str:
    """Path of the running program as the caller will re-invoke it."""
    return os.path.join(os.getcwd(), sys.argv[0])


def synthesize(
    identity: VMIdentity,
    connection: ClusterConnection,
    credential_command: str = "get-credential",
    executable: str | None = None,
) -> DynamicClientConfiguration | StaticClientConfiguration:
    """Select the authentication mode and build the client configuration.

    Args:
        identity: VM identity read at startup
        connection: Resolved cluster connection facts
        credential_command: Subcommand that prints a fresh credential
        executable: Credential command path (defaults to this program)

    Returns:
        StaticClientConfiguration when both service account fields are set,
        DynamicClientConfiguration otherwise
    """
    if identity.uses_static_token:
        logger.info(
            "kubeconfig_synthesized",
            auth_mode="static",
            cluster=connection.name,
            user=identity.ksa_name,
        )
        return StaticClientConfiguration(
            cluster_name=connection.name,
            endpoint_host=connection.endpoint_host,
            ca_certificate=connection.ca_certificate,
            service_account=identity.ksa_name,
            token=identity.ksa_token,
        )

    command_path = executable if executable is not None else current_executable()
    logger.info(
        "kubeconfig_synthesized",
        auth_mode="dynamic",
        cluster=connection.name,
        command_path=command_path,
    )
    return DynamicClientConfiguration(
        cluster_name=connection.name,
        endpoint_host=connection.endpoint_host,
        ca_certificate=connection.ca_certificate,
        command_path=command_path,
        command_args=credential_command,
    )
