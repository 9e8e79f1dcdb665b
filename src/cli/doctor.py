"""Doctor command for environment diagnostics."""

import shlex
import shutil
from pathlib import Path

import httpx
import typer
from rich.console import Console
from rich.table import Table

from adapters.bunny_storage import storage_host
from adapters.http_client import build_client
from cli.ui_components import build_config_table, print_configuration_error
from core.config import (
    CDN_REQUIRED_FIELDS,
    REQUIRED_FIELDS,
    SECRET_FIELDS,
    AppSettings,
    env_name,
    load_settings,
    write_env_vars,
)
from core.domain.errors import ConfigurationError

app = typer.Typer(no_args_is_help=True, help="Environment diagnostics and configuration checks.")

_console = Console()


def _check_http(settings: AppSettings, url: str) -> tuple[bool, str]:
    try:
        with build_client(settings) as client:
            response = client.get(url)
        return True, f"HTTP {response.status_code}"
    except httpx.HTTPError as exc:
        return False, str(exc)


def _check_binary(command: str) -> tuple[bool, str]:
    argv = shlex.split(command)
    if not argv:
        return True, "no build command configured"
    found = shutil.which(argv[0])
    return found is not None, found or f"{argv[0]} not found on PATH"


def _load_or_exit(env_file: Path) -> AppSettings:
    try:
        return load_settings(env_file)
    except ConfigurationError as exc:
        print_configuration_error(_console, exc)
        raise typer.Exit(code=1)


@app.command()
def run(
    env_file: Path = typer.Option(Path(".env"), "--env-file", help="key=value file with the TS_* settings."),
    network: bool = typer.Option(False, "--network", help="Also check connectivity to the storage host."),
) -> None:
    """Run baseline diagnostics and show recommended fixes."""

    settings = _load_or_exit(env_file)
    _console.print(build_config_table(settings))

    table = Table(title="ship-dist Doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")

    table.add_row(".env file", "OK" if env_file.exists() else "OPTIONAL", str(env_file))

    dist_ok = settings.dist_dir.is_dir()
    table.add_row("Dist directory", "OK" if dist_ok else "FAIL", str(settings.dist_dir))

    git_repo = Path(".git").exists()
    table.add_row("Git repository", "OK" if git_repo else "FAIL", str(Path.cwd()))

    git_bin = shutil.which("git")
    table.add_row("git binary", "OK" if git_bin else "FAIL", git_bin or "git not found on PATH")

    ok_build, detail_build = _check_binary(settings.build_command)
    table.add_row("Build tool", "OK" if ok_build else "FAIL", detail_build)

    if network:
        if settings.bunny_region:
            host = storage_host(settings.bunny_region)
            ok_http, detail_http = _check_http(settings, f"https://{host}/")
            table.add_row("Storage connectivity", "OK" if ok_http else "FAIL", f"{host}: {detail_http}")
        else:
            table.add_row("Storage connectivity", "SKIPPED", "TS_BUNNY_REGION is not set")

    _console.print(table)

    missing = settings.missing_required_keys(cdn=True)
    if missing:
        _console.print(
            f"\n[yellow]Note:[/yellow] deployments will fail until these are set: {', '.join(missing)}"
        )
        raise typer.Exit(code=1)


@app.command(name="init-env")
def init_env(
    env_file: Path = typer.Option(Path(".env"), "--env-file", help="File to create or update."),
) -> None:
    """Interactive setup: prompt for the TS_* keys and store them in a .env file."""

    current = _load_or_exit(env_file)
    values: dict[str, str | None] = {}
    for name in (*REQUIRED_FIELDS, *CDN_REQUIRED_FIELDS):
        existing = getattr(current, name) or ""
        secret = name in SECRET_FIELDS
        value = typer.prompt(
            env_name(name),
            default="" if secret else existing,
            show_default=not secret,
            hide_input=secret,
        ).strip()
        if not value and secret and existing:
            value = existing
        values[env_name(name)] = value or None

    path = write_env_vars(env_file, values)
    _console.print(f"[green]Saved deploy config to:[/green] {path}")
