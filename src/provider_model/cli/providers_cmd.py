"""Provider inspection commands.

Displays the providers declared in a configuration section, builds single
providers for inspection and checks that every declared provider can be
constructed.

Key Features:
    - `list`: declared names, type identifiers and the default marker
      (nothing is built)
    - `show`: builds one provider and prints its name, description, class
      and parameters
    - `check`: builds every provider and reports one status line each;
      exits with code 1 if any provider fails
"""

import sys
from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from provider_model.base.errors import ProviderModelError
from provider_model.registry import ProviderRegistry

console = Console()

config_option = click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help=(
        "Configuration file (default: CONFIG_FILE env var or ./config.yml). "
        "Its directory is added to the import path for the rest of the run so "
        "type identifiers can name modules next to it."
    ),
)


def _load_registry(section: str, config_path: str | None) -> ProviderRegistry:
    """Create a registry for the section, making the config directory importable."""
    registry = ProviderRegistry.from_config(section, config_path)

    # Type identifiers in project configs usually name modules next to config.yml
    config_dir = str(Path(registry.source.path).resolve().parent)
    if config_dir not in sys.path:
        sys.path.insert(0, config_dir)
    return registry


def _fail(message: str) -> None:
    console.print(f"[bold red]❌ {escape(message)}[/bold red]")
    sys.exit(1)


@click.command("list")
@click.argument("section")
@config_option
def list_providers(section: str, config_path: str | None):
    """List the providers declared in SECTION without building them."""
    try:
        registry = _load_registry(section, config_path)
        declarations = registry.get_declarations()
        default_name = registry.get_default_provider_name()
    except (ProviderModelError, FileNotFoundError, ValueError) as e:
        _fail(str(e))
        return

    table = Table(title=f"Providers: {section}", show_header=True, header_style="bold")
    table.add_column("Name", style="cyan", no_wrap=True)
    table.add_column("Type")
    table.add_column("Parameters", style="dim")
    table.add_column("Default", justify="center")

    for declaration in declarations:
        params = ", ".join(declaration.parameters) or "-"
        marker = "✓" if declaration.name == default_name else ""
        table.add_row(declaration.name, declaration.type_identifier, params, marker)

    console.print(table)
    if registry.uses_fallback():
        console.print("[yellow]Section not configured, showing fallback providers[/yellow]")


@click.command("show")
@click.argument("section")
@click.argument("name")
@config_option
def show_provider(section: str, name: str, config_path: str | None):
    """Build provider NAME from SECTION and show its details."""
    try:
        registry = _load_registry(section, config_path)
        provider = registry.get_provider(name)
    except (ProviderModelError, FileNotFoundError, ValueError) as e:
        _fail(str(e))
        return

    table = Table(show_header=False, box=None)
    table.add_column("Field", style="bold")
    table.add_column("Value")
    table.add_row("Name", str(getattr(provider, "name", name)))
    table.add_row("Description", str(getattr(provider, "description", None) or "-"))
    table.add_row("Class", f"{type(provider).__module__}.{type(provider).__qualname__}")

    parameters = getattr(provider, "parameters", None) or {}
    for key, value in parameters.items():
        table.add_row(f"  {key}", str(value))

    console.print(table)


@click.command("check")
@click.argument("section")
@config_option
def check_providers(section: str, config_path: str | None):
    """Build every provider in SECTION and report failures."""
    try:
        registry = _load_registry(section, config_path)
        names = registry.get_provider_names()
    except (ProviderModelError, FileNotFoundError, ValueError) as e:
        _fail(str(e))
        return

    failures = 0
    for name in names:
        try:
            provider = registry.get_provider(name)
        except ProviderModelError as e:
            failures += 1
            console.print(f"[red]✗ {escape(name)}[/red]: {escape(str(e))}")
        else:
            console.print(f"[green]✓ {name}[/green] ({type(provider).__name__})")

    if failures:
        _fail(f"{failures} of {len(names)} providers failed")
    console.print(f"[bold green]✅ All {len(names)} providers built[/bold green]")
