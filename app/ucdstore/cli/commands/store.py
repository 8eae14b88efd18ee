"""Store reconciliation commands.

Provides commands to initialize a store, analyze drift against the
published manifests, mirror, clean or repair the local files, and compare
two versions.
"""

import json
from collections.abc import Sequence
from typing import Annotated

import typer
from rich.table import Table

from ucdstore.cli.types import OutputFormat, build_store, run_async
from ucdstore.store.compare import CompareMode
from ucdstore.store.models import (
    CleanResult,
    FailedFile,
    MirrorResult,
    RepairResult,
    VersionAnalysis,
    VersionComparison,
)
from ucdstore.utils.formatting import (
    console,
    create_analysis_table,
    format_analysis_row,
    print_info,
    print_success,
    print_warning,
)

app = typer.Typer(
    help="Initialize, analyze and reconcile the local store.",
    invoke_without_command=True,
    no_args_is_help=True,
)

VersionsOption = Annotated[
    list[str] | None,
    typer.Option(
        "--version",
        "-v",
        help="Version to operate on (repeatable). Defaults to all managed versions.",
    ),
]
ConcurrencyOption = Annotated[
    int | None,
    typer.Option(
        "--concurrency",
        "-j",
        help="Maximum number of concurrent file operations.",
    ),
]
DryRunOption = Annotated[
    bool,
    typer.Option("--dry-run", "-n", help="Show what would change without touching files."),
]
FormatOption = Annotated[
    OutputFormat,
    typer.Option(
        "--format",
        "-f",
        help="Output format.",
        case_sensitive=False,
    ),
]


@app.command()
def init(
    ctx: typer.Context,
    versions: VersionsOption = None,
) -> None:
    """Create or load the store manifest (.ucd-store.json).

    Without --version every version the UCD API lists is managed.
    """
    store = build_store(ctx, versions)
    managed = run_async(store.init())
    print_success(f"Store ready with {len(managed)} version(s)")
    if not (ctx.obj or {}).get("quiet"):
        console.print(f"  [muted]{', '.join(managed)}[/muted]")


@app.command()
def analyze(
    ctx: typer.Context,
    versions: VersionsOption = None,
    output_format: FormatOption = OutputFormat.TABLE,
) -> None:
    """Compare the local files with the expected files of each version."""
    store = build_store(ctx)

    async def _run() -> list[VersionAnalysis]:
        await store.init(persist=False)
        return await store.analyze(versions or None)

    reports = run_async(_run())

    if output_format == OutputFormat.JSON:
        console.print_json(json.dumps([r.to_dict() for r in reports]))
        return

    table = create_analysis_table()
    for report in reports:
        table.add_row(*format_analysis_row(report))
    console.print(table)

    incomplete = [r.version for r in reports if not r.is_complete]
    if incomplete:
        print_warning(f"{len(incomplete)} version(s) drifted: {', '.join(incomplete)}")
        print_info("Run 'ucdstore store repair' to fix them.")
    else:
        print_success("All versions are complete.")


@app.command()
def mirror(
    ctx: typer.Context,
    versions: VersionsOption = None,
    concurrency: ConcurrencyOption = None,
    dry_run: DryRunOption = False,
    force: Annotated[
        bool,
        typer.Option("--force", help="Download files even if they are present."),
    ] = False,
    output_format: FormatOption = OutputFormat.TABLE,
) -> None:
    """Download missing files of each version."""
    store = build_store(ctx, versions, concurrency)

    async def _run() -> list[MirrorResult]:
        await store.init(persist=not dry_run)
        return await store.mirror(versions or None, dry_run=dry_run, force=force)

    results = run_async(_run())

    if output_format == OutputFormat.JSON:
        console.print_json(json.dumps([r.to_dict() for r in results]))
    else:
        table = _result_table("Mirror Results", dry_run, ["Mirrored", "Skipped", "Failed"])
        for r in results:
            table.add_row(r.version, str(len(r.mirrored)), str(len(r.skipped)), str(len(r.failed)))
        console.print(table)
        _print_failures([f for r in results for f in r.failed])

    if any(r.failed for r in results):
        raise typer.Exit(code=1)


@app.command()
def clean(
    ctx: typer.Context,
    versions: VersionsOption = None,
    concurrency: ConcurrencyOption = None,
    dry_run: DryRunOption = False,
    output_format: FormatOption = OutputFormat.TABLE,
) -> None:
    """Delete files the manifests no longer list."""
    store = build_store(ctx, concurrency=concurrency)

    async def _run() -> list[CleanResult]:
        await store.init(persist=not dry_run)
        return await store.clean(versions or None, dry_run=dry_run)

    results = run_async(_run())

    if output_format == OutputFormat.JSON:
        console.print_json(json.dumps([r.to_dict() for r in results]))
    else:
        table = _result_table("Clean Results", dry_run, ["Deleted", "Skipped", "Failed"])
        for r in results:
            table.add_row(r.version, str(len(r.deleted)), str(len(r.skipped)), str(len(r.failed)))
        console.print(table)
        _print_failures([f for r in results for f in r.failed])

    if any(r.failed for r in results):
        raise typer.Exit(code=1)


@app.command()
def repair(
    ctx: typer.Context,
    versions: VersionsOption = None,
    concurrency: ConcurrencyOption = None,
    dry_run: DryRunOption = False,
    output_format: FormatOption = OutputFormat.TABLE,
) -> None:
    """Restore missing files and delete orphaned ones."""
    store = build_store(ctx, concurrency=concurrency)

    async def _run() -> list[RepairResult]:
        await store.init(persist=not dry_run)
        return await store.repair(versions or None, dry_run=dry_run)

    results = run_async(_run())

    if output_format == OutputFormat.JSON:
        console.print_json(json.dumps([r.to_dict() for r in results]))
    else:
        table = _result_table(
            "Repair Results",
            dry_run,
            ["Restored", "Removed", "Skipped", "Failed", "Status"],
        )
        for r in results:
            status = "[success]success[/]" if r.status == "success" else "[error]failure[/]"
            table.add_row(
                r.version,
                str(len(r.restored)),
                str(len(r.removed)),
                str(len(r.skipped)),
                str(len(r.failed)),
                status,
            )
        console.print(table)
        _print_failures([f for r in results for f in r.failed])

    if any(r.status == "failure" for r in results):
        raise typer.Exit(code=1)


@app.command()
def compare(
    ctx: typer.Context,
    from_version: Annotated[str, typer.Argument(help="Version to compare from.")],
    to_version: Annotated[str, typer.Argument(help="Version to compare to.")],
    mode: Annotated[
        CompareMode,
        typer.Option(
            "--mode",
            "-m",
            help="Read files from the local mirror, the UCD API, or local with API fallback.",
            case_sensitive=False,
        ),
    ] = CompareMode.PREFER_LOCAL,
    filters: Annotated[
        list[str] | None,
        typer.Option(
            "--filter",
            "-F",
            help="Glob pattern to include, or '!pattern' to exclude (repeatable).",
        ),
    ] = None,
    hashes: Annotated[
        bool,
        typer.Option("--hashes/--no-hashes", help="Compare the content of common files."),
    ] = True,
    concurrency: ConcurrencyOption = None,
    output_format: FormatOption = OutputFormat.TABLE,
) -> None:
    """Show files added, removed and modified between two versions."""
    store = build_store(ctx, concurrency=concurrency)

    async def _run() -> VersionComparison:
        await store.init(persist=False)
        return await store.compare(
            from_version,
            to_version,
            mode=mode,
            filters=filters,
            include_file_hashes=hashes,
        )

    comparison = run_async(_run())

    if output_format == OutputFormat.JSON:
        console.print_json(json.dumps(comparison.to_dict()))
        return

    table = Table(
        title=f"{from_version} -> {to_version}",
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Change", style="bold")
    table.add_column("Files", justify="right")
    table.add_row("[added]Added[/]", str(len(comparison.added)))
    table.add_row("[removed]Removed[/]", str(len(comparison.removed)))
    table.add_row("[missing]Modified[/]", str(len(comparison.modified)))
    table.add_row("Unchanged", str(len(comparison.unchanged)))
    console.print(table)

    for marker, style, paths in (
        ("+", "added", comparison.added),
        ("-", "removed", comparison.removed),
        ("~", "missing", comparison.modified),
    ):
        for path in paths:
            console.print(f"  [{style}]{marker} {path}[/]", highlight=False)


# === Private helper functions ===


def _result_table(title: str, dry_run: bool, columns: Sequence[str]) -> Table:
    """Create a per-version summary table."""
    table = Table(
        title=f"{title} (dry-run)" if dry_run else title,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Version", style="bold")
    for column in columns:
        table.add_column(column, justify="right")
    return table


def _print_failures(failures: list[FailedFile]) -> None:
    """List failed files with their error."""
    if not failures:
        return
    table = Table(title="Failures", show_lines=False)
    table.add_column("Path", style="bold")
    table.add_column("Operation", width=10)
    table.add_column("Error", style="dim")
    for failure in failures:
        table.add_row(failure.file_path, failure.operation.value, failure.error)
    console.print(table)
