"""
Typer-based CLI for layerconf.

Resolves a configuration exactly as an application would and lets you look
at the result:

- ``show``: every resolved key with the origin that last defined it
- ``get``: a single value, honouring the active profile
- ``explain``: the full origin history of one key

Global options select the resources, the search path, the profile and seed
system properties (``-D key=value``) before resolution runs.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple

import typer
from rich.console import Console
from rich.panel import Panel
from rich.markup import escape
from rich.table import Table
from rich.text import Text

from layerconf.core.config import (
    DefaultConfiguration,
    SearchPathResourceLoader,
    get_system_properties,
)
from layerconf.core.config.facade import load_env_file
from layerconf.core.config.keys import PROFILE_PROPERTY
from layerconf.core.utils.logger import log_error, setup_logging

from .exit_codes import CliExit

console = Console()

app = typer.Typer(
    name="layerconf",
    help="layerconf - Layered properties configuration",
    add_completion=False,
    rich_markup_mode="rich",
)


@dataclass
class CliOptions:
    resources: List[str] = field(default_factory=list)
    search_path: List[Path] = field(default_factory=list)
    defines: List[str] = field(default_factory=list)
    profile: Optional[str] = None


def parse_define(define: str) -> Tuple[str, str]:
    """Split a ``key=value`` definition."""
    key, sep, value = define.partition("=")
    if not sep or not key.strip():
        raise CliExit.config_error(f"Invalid definition {define!r}; expected key=value")
    return key.strip(), value


def build_configuration(options: CliOptions) -> DefaultConfiguration:
    load_env_file()
    system_properties = get_system_properties()
    for define in options.defines:
        key, value = parse_define(define)
        system_properties[key] = value

    loader = SearchPathResourceLoader(search_path=options.search_path or None)
    try:
        config = DefaultConfiguration(*options.resources, resource_loader=loader)
    except ValueError as exc:
        log_error("CLI", "Could not build configuration", "", exc)
        raise CliExit.config_error(f"Configuration error: {exc}")

    if options.profile:
        config.set_property(PROFILE_PROPERTY, options.profile)
    return config


def _options(ctx: typer.Context) -> CliOptions:
    if isinstance(ctx.obj, CliOptions):
        return ctx.obj
    return CliOptions()


@app.callback()
def main(
    ctx: typer.Context,
    resource: List[str] = typer.Option(
        [],
        "--resource",
        "-r",
        help="Resource to load, lowest precedence first (repeatable)",
    ),
    search_path: List[Path] = typer.Option(
        [],
        "--search-path",
        "-p",
        help="Directory to search for resources, highest precedence first (repeatable)",
    ),
    define: List[str] = typer.Option(
        [],
        "--define",
        "-D",
        help="System property key=value set before resolution (repeatable)",
    ),
    profile: Optional[str] = typer.Option(
        None,
        "--profile",
        help="Activate a profile suffix after resolution",
    ),
    log_level: Optional[str] = typer.Option(
        None,
        "--log-level",
        help="Logging level (DEBUG, INFO, WARNING, ERROR)",
    ),
):
    """Inspect a resolved layerconf configuration."""
    setup_logging(level=log_level)
    ctx.obj = CliOptions(
        resources=list(resource),
        search_path=list(search_path),
        defines=list(define),
        profile=profile,
    )


@app.command()
def show(
    ctx: typer.Context,
    prefix: Optional[str] = typer.Option(None, "--prefix", help="Only keys starting with this prefix"),
    json_output: bool = typer.Option(False, "--json", help="Emit JSON"),
):
    """Show every resolved key and where it came from."""
    config = build_configuration(_options(ctx))
    keys = sorted(config.get_keys(prefix))

    if json_output:
        values = config.as_dict()
        print(json.dumps({key: values[key] for key in keys}, indent=2))
        return

    if not keys:
        console.print("[yellow]No parameters resolved.[/yellow]")
        return

    title = "Resolved Configuration"
    if config.profile:
        title += f" (profile: {config.profile})"
    table = Table(title=title)
    table.add_column("Key", style="cyan")
    table.add_column("Value", style="green")
    table.add_column("Origin", style="magenta")

    values = config.as_dict()
    for key in keys:
        history = config.get_history(key)
        table.add_row(escape(key), escape(values[key]), escape(history[0]) if history else "")

    console.print(table)


@app.command()
def get(
    ctx: typer.Context,
    key: str = typer.Argument(..., help="Key to read"),
    default: Optional[str] = typer.Option(None, "--default", help="Value printed when the key is missing"),
):
    """Print the value of KEY."""
    config = build_configuration(_options(ctx))
    value = config.get(key, default)
    if value is None:
        raise CliExit.error(f"Key not found: {key}")
    typer.echo(value)


@app.command()
def explain(
    ctx: typer.Context,
    key: str = typer.Argument(..., help="Key to explain"),
):
    """Show how KEY got its value."""
    config = build_configuration(_options(ctx))
    if not config.contains_key(key):
        raise CliExit.error(f"Key not found: {key}")

    effective = config.get_effective_key(key)
    lines = [
        f"Value: {config.get(key)}",
        f"Answered by: {effective}",
        f"Profile: {config.profile or '-'}",
        "History (most recent first):",
    ]
    lines.extend(f"  {index}. {origin}" for index, origin in enumerate(config.get_history(effective), 1))
    console.print(Panel(Text("\n".join(lines)), title=escape(key), expand=False))


if __name__ == "__main__":
    app()
