"""Componentes de UI para CLI (Rich).

Por qué separar componentes:
- Evita mezclar lógica de comandos con detalles visuales.
- `main` y `doctor` comparten usage, tablas y el binding de `DeployHooks`.
"""

from __future__ import annotations

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.config import (
    CDN_REQUIRED_ENV_KEYS,
    CDN_REQUIRED_FIELDS,
    REQUIRED_ENV_KEYS,
    REQUIRED_FIELDS,
    SECRET_FIELDS,
    AppSettings,
    env_name,
    mask_secret,
)
from core.domain.errors import ConfigurationError
from core.domain.mode import RunMode
from core.interfaces.publisher import DeployHooks

PROG_NAME = "ship-dist"


def print_banner(console: Console, mode: RunMode) -> None:
    title = Text("ship-dist", style="bold cyan")
    subtitle = Text(f"mode: {mode.value} • {mode.label()}", style="dim")
    console.print(Panel(Text.assemble(title, "\n", subtitle), border_style="cyan", expand=False))


def usage_text(prog: str = PROG_NAME) -> str:
    lines = [f"Usage: {prog} [repo|cdn|both]", "", "Commands:"]
    for mode in RunMode:
        lines.append(f"  {mode.value:<5} - {mode.label()}")
    lines.extend(["", "Environment variables required in .env file:"])
    lines.extend(f"  {key}" for key in REQUIRED_ENV_KEYS)
    lines.extend(["", "Also required for cdn/both:"])
    lines.extend(f"  {key}" for key in CDN_REQUIRED_ENV_KEYS)
    return "\n".join(lines)


def print_usage(console: Console, prog: str = PROG_NAME) -> None:
    console.print(usage_text(prog), markup=False, highlight=False)


def build_config_table(settings: AppSettings) -> Table:
    """Tabla de claves obligatorias (incluidas las de cdn) con secretos enmascarados."""

    table = Table(title="Deploy configuration")
    table.add_column("Key", style="cyan", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Value", style="dim")
    for name in (*REQUIRED_FIELDS, *CDN_REQUIRED_FIELDS):
        value = getattr(settings, name)
        shown = mask_secret(value) if name in SECRET_FIELDS else (value or "")
        table.add_row(env_name(name), "OK" if value else "MISSING", escape(shown))
    return table


def console_hooks(console: Console) -> DeployHooks:
    return DeployHooks(
        status=lambda msg: console.print(f"[green]🟢[/green] {escape(msg)}"),
        warning=lambda msg: console.print(f"[yellow]⚠️  {escape(msg)}[/yellow]"),
        detail=lambda msg: console.print(escape(msg), style="dim", highlight=False),
    )


def print_success(console: Console) -> None:
    console.print("[bold green]🎉 Deployment complete![/bold green]")


def print_failure(console: Console, message: str) -> None:
    console.print(f"[bold red]❌ {escape(message)}[/bold red]")


def print_configuration_error(console: Console, error: ConfigurationError) -> None:
    for key in error.missing:
        print_failure(console, f"Required environment variable {key} is not set!")
    for key, reason in error.invalid.items():
        print_failure(console, f"Invalid value for {key}: {reason}")
