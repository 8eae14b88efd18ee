"""CLI package for ucdstore.

This package contains the Typer application and all subcommands.
"""

from ucdstore.cli.main import app

__all__ = ["app"]
