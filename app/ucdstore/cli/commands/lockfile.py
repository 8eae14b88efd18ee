"""Snapshot (lockfile) inspection commands."""

import json
from pathlib import Path
from typing import Annotated

import typer
from rich.table import Table

from ucdstore.bridge.local import LocalFileSystemBridge
from ucdstore.cli.types import OutputFormat, get_config, run_async
from ucdstore.lockfile.hashing import compute_content_hash, compute_file_hash, content_size
from ucdstore.lockfile.snapshot import read_snapshot, verify_snapshot
from ucdstore.utils.formatting import console, print_error, print_success, print_warning

app = typer.Typer(
    help="Inspect and validate per-version snapshots.",
    invoke_without_command=True,
    no_args_is_help=True,
)

VersionArgument = Annotated[str, typer.Argument(help="Unicode version, e.g. 16.0.0.")]


@app.command("hash")
def hash_file(
    path: Annotated[
        Path,
        typer.Argument(exists=True, dir_okay=False, readable=True, help="File to hash."),
    ],
) -> None:
    """Print the snapshot hashes of a local file."""
    content = path.read_bytes()
    console.print(f"hash:     {compute_content_hash(content)}", highlight=False, soft_wrap=True)
    console.print(f"fileHash: {compute_file_hash(content)}", highlight=False, soft_wrap=True)
    console.print(f"size:     {content_size(content)}", highlight=False, soft_wrap=True)


@app.command()
def info(
    ctx: typer.Context,
    version: VersionArgument,
    output_format: Annotated[
        OutputFormat,
        typer.Option("--format", "-f", help="Output format.", case_sensitive=False),
    ] = OutputFormat.TABLE,
) -> None:
    """Show the snapshot of a version."""
    bridge = LocalFileSystemBridge(get_config(ctx).base_path)
    snapshot = run_async(read_snapshot(bridge, "", version))

    if output_format == OutputFormat.JSON:
        console.print_json(json.dumps(snapshot.to_json_dict()))
        return

    table = Table(title=f"Snapshot {snapshot.unicode_version}", show_lines=False)
    table.add_column("Path", style="bold")
    table.add_column("Size", justify="right", style="info")
    table.add_column("File hash", style="dim", overflow="ellipsis")
    for file_path, entry in sorted(snapshot.files.items()):
        table.add_row(file_path, str(entry.size), entry.file_hash)
    console.print(table)
    console.print(f"\n[dim]{len(snapshot.files)} file(s)[/dim]")


@app.command()
def validate(
    ctx: typer.Context,
    version: VersionArgument,
) -> None:
    """Check that a snapshot is well-formed and matches the stored files."""
    bridge = LocalFileSystemBridge(get_config(ctx).base_path)
    snapshot = run_async(read_snapshot(bridge, "", version))
    problems = run_async(verify_snapshot(bridge, "", version, snapshot))
    if not problems:
        print_success(f"Snapshot for {version} matches {len(snapshot.files)} file(s).")
        return

    for file_path, problem in problems.items():
        print_warning(f"{file_path}: {problem}")
    print_error(f"Snapshot for {version} is out of date ({len(problems)} problem(s)).")
    raise typer.Exit(code=1)

