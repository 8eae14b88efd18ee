"""CLI commands for ucdstore.

This package contains all subcommand implementations.
"""

from ucdstore.cli.commands import config, files, lockfile, store

__all__ = ["config", "files", "lockfile", "store"]
