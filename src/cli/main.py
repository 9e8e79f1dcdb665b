"""CLI principal: `ship-dist [repo|cdn|both]`.

La CLI solo parsea argumentos, carga la configuración, construye los
colaboradores (build, git, storage, purge) y pinta el resultado. El orden y
la política fail-fast viven en `core.services.deploy_pipeline`.
"""

from pathlib import Path
from typing import Annotated, Optional

import httpx
import typer
from rich.console import Console

from adapters.build_step import CommandBuildStep
from adapters.bunny_storage import BunnyStorageUploader
from adapters.cache_purge import CachePurger
from adapters.git_repo import GitRepoPublisher
from adapters.http_client import build_client
from cli.ui_components import (
    console_hooks,
    print_configuration_error,
    print_banner,
    print_failure,
    print_success,
    print_usage,
)
from core.config import CDN_REQUIRED_ENV_KEYS, REQUIRED_ENV_KEYS, AppSettings, load_settings
from core.domain.errors import ConfigurationError, UsageError
from core.domain.models import DeployConfig
from core.domain.mode import RunMode
from core.interfaces.publisher import DeployHooks, Publisher
from core.services.cdn_publisher import CdnPublisher
from core.services.deploy_pipeline import run_deploy

HELP_ARGUMENTS = frozenset({"help"})
REQUIRED_KEYS_EPILOG = (
    "Environment variables required in .env file: "
    + ", ".join(REQUIRED_ENV_KEYS)
    + "; for cdn/both also "
    + ", ".join(CDN_REQUIRED_ENV_KEYS)
)

_console = Console()

app = typer.Typer(
    add_completion=False,
    context_settings={"help_option_names": ["-h", "--help"]},
    help="Build the site, then push the dist to git and/or upload it to BunnyCDN and flush caches.",
)


def build_publishers(
    *,
    config: DeployConfig,
    settings: AppSettings,
    client: httpx.Client,
    hooks: DeployHooks,
) -> dict[str, Publisher]:
    dist_dir = settings.dist_dir
    return {
        "repo": GitRepoPublisher(dist_dir, remote=settings.git_remote, hooks=hooks),
        "cdn": CdnPublisher(
            config,
            dist_dir,
            uploader=BunnyStorageUploader(config, client=client, hooks=hooks),
            purger=CachePurger(config, client=client, hooks=hooks),
            hooks=hooks,
        ),
    }


def build_step(settings: AppSettings, hooks: DeployHooks) -> CommandBuildStep | None:
    if not settings.build_command.strip():
        return None
    return CommandBuildStep(settings.build_command, hooks=hooks)


@app.command(epilog=REQUIRED_KEYS_EPILOG)
def ship(
    mode: Annotated[
        str,
        typer.Argument(help="repo | cdn | both (default) | help", show_default=False),
    ] = RunMode.default().value,
    env_file: Annotated[
        Path,
        typer.Option("--env-file", help="key=value file with the TS_* settings."),
    ] = Path(".env"),
    dist_dir: Annotated[
        Optional[Path],
        typer.Option("--dist-dir", help="Distribution directory (overrides TS_DIST_DIR)."),
    ] = None,
    skip_build: Annotated[
        bool,
        typer.Option("--skip-build", help="Do not run the build command."),
    ] = False,
) -> None:
    """Deploy the built static site."""

    if mode.strip().lower() in HELP_ARGUMENTS:
        print_usage(_console)
        raise typer.Exit(code=0)

    try:
        run_mode = RunMode.parse(mode)
    except UsageError as exc:
        print_failure(_console, str(exc))
        print_usage(_console)
        raise typer.Exit(code=1)

    if env_file.exists():
        _console.print(f"📋 Loading environment variables from {env_file}...")
    else:
        _console.print(f"[yellow]⚠️  {env_file} not found, using process environment only[/yellow]")

    overrides = {"dist_dir": dist_dir} if dist_dir is not None else {}
    try:
        settings = load_settings(env_file, **overrides)
        config = settings.to_deploy_config(cdn="cdn" in run_mode.publisher_names())
    except ConfigurationError as exc:
        print_configuration_error(_console, exc)
        raise typer.Exit(code=1)

    print_banner(_console, run_mode)
    hooks = console_hooks(_console)

    with build_client(settings) as client:
        result = run_deploy(
            mode=run_mode,
            publishers=build_publishers(config=config, settings=settings, client=client, hooks=hooks),
            build=None if skip_build else build_step(settings, hooks),
        )

    if not result.ok:
        print_failure(_console, f"Deployment failed: {result.error}")
        raise typer.Exit(code=1)

    print_success(_console)


def run() -> None:
    app()


if __name__ == "__main__":
    run()
