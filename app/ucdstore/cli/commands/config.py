"""Configuration commands.

Provides commands to show the effective configuration and to write a
config.toml with the defaults.
"""

from typing import Annotated

import typer
from rich.table import Table

from ucdstore.cli.types import get_config
from ucdstore.core.config import ConfigError, StoreConfig, save_config
from ucdstore.core.paths import get_config_path
from ucdstore.utils.formatting import console, print_error, print_info, print_success

app = typer.Typer(
    help="Show and create the ucdstore configuration.",
    invoke_without_command=True,
    no_args_is_help=True,
)


@app.command()
def show(ctx: typer.Context) -> None:
    """Show the effective configuration."""
    config = get_config(ctx)
    source = (ctx.obj or {}).get("config_path") or get_config_path()

    table = Table(title="Configuration", show_lines=False)
    table.add_column("Setting", style="bold")
    table.add_column("Value")

    table.add_row("base_path", str(config.base_path))
    table.add_row("api_url", config.api_url)
    table.add_row("versions", ", ".join(config.versions) or "[dim](all)[/dim]")
    table.add_row("concurrency", str(config.concurrency))
    table.add_row("include", ", ".join(config.include) or "-")
    table.add_row("exclude", ", ".join(config.exclude) or "-")
    table.add_row("disable_default_exclusions", str(config.disable_default_exclusions))
    table.add_row("timeout_seconds", str(config.timeout_seconds))

    console.print(table)
    console.print(f"\n[dim]Source: {source}[/dim]")


@app.command("init")
def init_config(
    ctx: typer.Context,
    versions: Annotated[
        list[str] | None,
        typer.Option("--version", "-v", help="Version to manage (repeatable)."),
    ] = None,
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Overwrite an existing config file."),
    ] = False,
) -> None:
    """Write a config.toml with default settings."""
    obj = ctx.obj or {}
    config_path = obj.get("config_path") or get_config_path()

    if config_path.exists() and not force:
        print_error(f"Config already exists: {config_path}")
        print_info("Use --force to overwrite.")
        raise typer.Exit(code=1)

    config = StoreConfig(versions=list(versions or []))
    if obj.get("store_path") is not None:
        config = config.model_copy(update={"base_path": obj["store_path"]})

    try:
        saved_path = save_config(config, config_path)
    except ConfigError as e:
        print_error(str(e))
        raise typer.Exit(code=1) from e
    print_success(f"Config created: {saved_path}")
