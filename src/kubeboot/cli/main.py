"""Main CLI entry point for kubeboot."""

from __future__ import annotations

import os
import sys
from typing import TYPE_CHECKING, NoReturn

import click
from rich.console import Console

from kubeboot import __version__
from kubeboot.core.exceptions import KubebootError

if TYPE_CHECKING:
    from kubeboot.core.config import KubebootConfig
    from kubeboot.interfaces.metadata_provider import MetadataProvider

console = Console()

CONFIG_ENVVAR = "KUBEBOOT_CONFIG"


def _usage_line() -> str:
    return f"Usage: {os.path.basename(sys.argv[0]) or 'kubeboot'} [command]"


class KubebootContext:
    """Shared context for CLI commands with lazy initialization."""

    def __init__(self, config_path: str | None):
        """Initialize context with optional config path.

        Args:
            config_path: Path to configuration file (defaults used if None)
        """
        self.config_path = config_path
        self._config: KubebootConfig | None = None
        self._metadata: MetadataProvider | None = None

    @property
    def config(self) -> KubebootConfig:
        """Get or create config lazily."""
        if self._config is None:
            from kubeboot.core.config import KubebootConfig

            if self.config_path:
                self._config = KubebootConfig.from_file(self.config_path)
            else:
                self._config = KubebootConfig()
        return self._config

    @property
    def metadata(self) -> MetadataProvider:
        """Get or create the metadata client lazily."""
        if self._metadata is None:
            from kubeboot.clients.metadata_client import MetadataClient

            self._metadata = MetadataClient(
                host=self.config.metadata.host,
                timeout=self.config.metadata.timeout_seconds,
            )
        return self._metadata

    def setup_logging(self) -> None:
        from kubeboot.utils.logging import setup_logging

        setup_logging(
            level=self.config.logging.level,
            format=self.config.logging.format,
            output=self.config.logging.output,
        )


class KubebootGroup(click.Group):
    """Command group that answers unknown or missing commands with a usage line."""

    def resolve_command(
        self, ctx: click.Context, args: list[str]
    ) -> tuple[str | None, click.Command | None, list[str]]:
        if args and self.get_command(ctx, args[0]) is None:
            return "usage", usage, []
        return super().resolve_command(ctx, args)


def _fail(error: KubebootError, operation: str) -> NoReturn:
    from kubeboot.utils.logging import get_logger, log_error

    log_error(get_logger(__name__), error, operation=operation)
    click.echo(f"Error: {error}", err=True)
    sys.exit(1)


@click.group(cls=KubebootGroup, invoke_without_command=True)
@click.version_option(version=__version__)
@click.option(
    "--config",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    envvar=CONFIG_ENVVAR,
    help="Path to configuration file",
)
@click.pass_context
def cli(ctx: click.Context, config: str | None) -> None:
    """Bootstrap a Compute Engine VM into an authenticated GKE client."""
    ctx.obj = KubebootContext(config_path=config)
    if config:
        # Inherited by the credential command the Kubernetes client runs.
        os.environ[CONFIG_ENVVAR] = os.path.abspath(config)

    if ctx.invoked_subcommand is None:
        click.echo(_usage_line())


@cli.command("usage", hidden=True)
def usage() -> None:
    """Print the usage line."""
    click.echo(_usage_line())


@cli.command("get-credential")
@click.pass_obj
def get_credential(obj: KubebootContext) -> None:
    """Print a fresh access token and its expiry as JSON."""
    from kubeboot.bootstrap.credentials import TokenExchanger

    try:
        obj.setup_logging()
        response = TokenExchanger(obj.metadata).exchange()
    except KubebootError as e:
        _fail(e, "get_credential")

    click.echo(response.model_dump_json())


@cli.command()
@click.option("--namespace", default=None, help="Namespace listed by the smoke test")
@click.pass_obj
def start(obj: KubebootContext, namespace: str | None) -> None:
    """Bootstrap a cluster client and list pods as a smoke test."""
    from kubeboot.bootstrap.driver import BootstrapDriver
    from kubeboot.clients.kubernetes_client import KubernetesClient

    try:
        obj.setup_logging()
        result = BootstrapDriver(obj.config, obj.metadata).run()
        target_namespace = namespace or obj.config.kubernetes.namespace
        names = KubernetesClient(result.configuration).list_pod_names(target_namespace)
    except KubebootError as e:
        _fail(e, "start")

    for name in names:
        console.print(name, highlight=False, markup=False, soft_wrap=True)


if __name__ == "__main__":
    cli()
