"""Access token exchange for the get-credential command."""

from __future__ import annotations

import json
import subprocess
from collections.abc import Callable
from datetime import datetime, timedelta, timezone

from pydantic import ValidationError

from kubeboot.core.exceptions import CredentialError, MetadataError
from kubeboot.core.models import CredentialResponse, TokenGrant
from kubeboot.interfaces.metadata_provider import MetadataProvider
from kubeboot.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_TOKEN_PATH = "instance/service-accounts/default/token"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TokenExchanger:
    """Exchanges the VM's attached service account for an access token."""

    def __init__(
        self,
        metadata: MetadataProvider,
        clock: Callable[[], datetime] = _utcnow,
        token_path: str = DEFAULT_TOKEN_PATH,
    ):
        """Initialize token exchanger.

        Args:
            metadata: Metadata provider serving the token endpoint
            clock: Returns the current time (timezone aware)
            token_path: Metadata path of the token endpoint
        """
        self.metadata = metadata
        self.clock = clock
        self.token_path = token_path

    def fetch_grant(self) -> TokenGrant:
        """Fetch a token grant from the metadata service.

        Returns:
            Parsed TokenGrant

        Raises:
            CredentialError: If the grant cannot be fetched or parsed
        """
        try:
            body = self.metadata.get(self.token_path)
        except MetadataError as e:
            logger.error("token_fetch_failed", error=str(e))
            raise CredentialError(f"Failed to fetch access token: {e}") from e

        try:
            return TokenGrant.model_validate_json(body)
        except ValidationError as e:
            raise CredentialError(f"Invalid token grant from metadata service: {e}") from e

    def exchange(self) -> CredentialResponse:
        """Exchange the ambient identity for a credential response.

        Expiry is anchored to the time of the exchange so the caller can compare
        it against its own clock.

        Returns:
            CredentialResponse with absolute UTC expiry

        Raises:
            CredentialError: If the exchange fails
        """
        grant = self.fetch_grant()
        issued_at = self.clock()
        expiry = issued_at + timedelta(seconds=grant.expires_in)

        logger.debug("token_exchanged", expires_in=grant.expires_in)
        return CredentialResponse(access_token=grant.access_token, token_expiry=expiry)


class CommandCredentials:
    """Credentials obtained by running a credential command.

    Mirrors the gcp auth-provider contract: the command prints a JSON object
    and the token and expiry are read from the configured keys. Instances are
    passed to the Kubernetes config loader as its Google credentials source.
    """

    def __init__(
        self,
        command: list[str],
        token_key: str = "access_token",
        expiry_key: str = "token_expiry",
    ):
        self.command = command
        self.token_key = token_key
        self.expiry_key = expiry_key
        self.token: str | None = None
        self.expiry: datetime | None = None

    def refresh(self) -> CommandCredentials:
        """Run the command and load token and expiry from its output.

        Raises:
            CredentialError: If the command fails or its output is malformed
        """
        try:
            result = subprocess.run(
                self.command,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                check=True,
                text=True,
            )
        except (OSError, subprocess.CalledProcessError) as e:
            stderr = getattr(e, "stderr", None)
            logger.error("credential_command_failed", command=self.command, stderr=stderr)
            raise CredentialError(f"Credential command failed: {e}") from e

        try:
            data = json.loads(result.stdout)
            self.token = data[self.token_key]
            expiry = datetime.fromisoformat(data[self.expiry_key].replace("Z", "+00:00"))
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            raise CredentialError(f"Malformed credential command output: {e}") from e

        self.expiry = expiry.astimezone(timezone.utc).replace(tzinfo=None)
        return self

    def __call__(self) -> CommandCredentials:
        return self.refresh()
