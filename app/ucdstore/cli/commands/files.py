"""Commands for reading mirrored files."""

import json
from typing import Annotated

import typer

from ucdstore.bridge.base import FSEntry
from ucdstore.cli.types import OutputFormat, build_store, run_async
from ucdstore.utils.formatting import build_file_tree, console, print_info

app = typer.Typer(
    help="List and read files of a mirrored version.",
    invoke_without_command=True,
    no_args_is_help=True,
)

VersionArgument = Annotated[str, typer.Argument(help="Unicode version, e.g. 16.0.0.")]
FiltersOption = Annotated[
    list[str] | None,
    typer.Option(
        "--filter",
        "-F",
        help="Glob pattern to include, or '!pattern' to exclude (repeatable).",
    ),
]


@app.command("list")
def list_files(
    ctx: typer.Context,
    version: VersionArgument,
    filters: FiltersOption = None,
    output_format: Annotated[
        OutputFormat,
        typer.Option("--format", "-f", help="Output format.", case_sensitive=False),
    ] = OutputFormat.TABLE,
) -> None:
    """List file paths of a version."""
    store = build_store(ctx)

    async def _run() -> list[str]:
        await store.init(persist=False)
        return await store.get_file_paths(version, filters)

    paths = run_async(_run())

    if output_format == OutputFormat.JSON:
        console.print_json(json.dumps(paths))
        return
    if not paths:
        print_info(f"No files stored for {version}.")
        return
    for path in paths:
        console.print(path, highlight=False)


@app.command()
def tree(
    ctx: typer.Context,
    version: VersionArgument,
    filters: FiltersOption = None,
) -> None:
    """Show the files of a version as a tree."""
    store = build_store(ctx)

    async def _run() -> list[FSEntry]:
        await store.init(persist=False)
        return await store.get_file_tree(version, filters)

    entries = run_async(_run())
    console.print(build_file_tree(version, entries))


@app.command()
def get(
    ctx: typer.Context,
    version: VersionArgument,
    path: Annotated[str, typer.Argument(help="Path relative to the version directory.")],
) -> None:
    """Print the content of a stored file."""
    store = build_store(ctx)

    async def _run() -> str:
        await store.init(persist=False)
        return await store.get_file(version, path)

    typer.echo(run_async(_run()), nl=False)
