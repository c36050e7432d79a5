"""
Typer CLI for proposal metadata extraction.

Commands:
- ``extract``: write the aggregate metadata JSON.
- ``validate``: print the validation report for the listing, a snapshot, or
  explicit files.
- ``snapshot``: capture inputs and expected results as a ``*.evosnapshot``
  directory for offline runs and tests.

Settings come from ``EVOMETA_*`` environment variables; the options below
override them for one invocation.
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, List, Optional

import typer

from .errors import ExtractionJobError
from .job import JobResult, Output, make_extraction_job
from .logging import configure_logging
from .settings import ExtractionSettings, LogFormat, LogLevel, get_settings
from .sources import SNAPSHOT_SUFFIX, FilesSource, NetworkSource, SnapshotSource, Source

app = typer.Typer(
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
    help="[bold]Evolution metadata[/bold]: extract and validate proposal metadata.",
)

FORCE_ALL = "all"


def _snapshot_path(value: Optional[Path]) -> Optional[Path]:
    if value is not None and value.suffix != SNAPSHOT_SUFFIX:
        raise typer.BadParameter(f"snapshot directories must end with '{SNAPSHOT_SUFFIX}'")
    return value


def _split_force(values: Optional[List[str]]) -> tuple[bool, list[str]]:
    """Return ``(force_all, ids)`` from repeated ``--force-extract`` values."""

    tokens = [token for value in values or [] for token in value.replace(",", " ").split()]
    force_all = any(token.lower() == FORCE_ALL for token in tokens)
    return force_all, [token for token in tokens if token.lower() != FORCE_ALL]


def _source(snapshot_path: Optional[Path]) -> Source:
    return SnapshotSource(snapshot_path) if snapshot_path is not None else NetworkSource()


def _run(
    settings: ExtractionSettings,
    source: Source,
    output: Output,
    force_extract: Optional[List[str]],
) -> JobResult:
    force_all, forced_ids = _split_force(force_extract)
    try:
        with make_extraction_job(
            source,
            output,
            settings=settings,
            ignore_previous=force_all,
            forced_ids=forced_ids,
        ) as job:
            return job.run()
    except ExtractionJobError as exc:
        typer.secho(f"✗ {exc.message}", err=True, fg=typer.colors.RED)
        raise typer.Exit(code=1)


SnapshotOption = Annotated[
    Optional[Path],
    typer.Option(
        "--snapshot-path",
        help="Read inputs from a local *.evosnapshot directory instead of GitHub",
        callback=_snapshot_path,
    ),
]
ForceOption = Annotated[
    Optional[List[str]],
    typer.Option(
        "--force-extract",
        help="Re-extract these proposal ids (e.g. SE-0001 or 1), or 'all' to ignore previous results",
    ),
]


@app.callback()
def root_callback(
    ctx: typer.Context,
    verbose: Annotated[
        bool, typer.Option("-v", "--verbose", help="Log progress at DEBUG level")
    ] = False,
    log_format: Annotated[
        Optional[LogFormat], typer.Option("--log-format", help="Logging format (console|json)")
    ] = None,
) -> None:
    """Configure logging and settings shared by every command."""

    try:
        settings = get_settings()
        updates: dict[str, object] = {}
        if verbose:
            updates["log_level"] = LogLevel.DEBUG
        if log_format is not None:
            updates["log_format"] = log_format
        if updates:
            settings = settings.model_copy(update=updates)
    except Exception as e:
        typer.secho(f"✗ Configuration Error: {e}", err=True, fg=typer.colors.RED)
        raise typer.Exit(code=1)
    configure_logging(settings.log_level.value, settings.log_format.value)
    ctx.obj = settings


@app.command()
def extract(
    ctx: typer.Context,
    snapshot_path: SnapshotOption = None,
    output_path: Annotated[
        Path, typer.Option("-o", "--output-path", help="Where to write the metadata JSON")
    ] = Path("evolution.json"),
    force_extract: ForceOption = None,
) -> None:
    """Extract metadata for every proposal and write the aggregate JSON."""

    result = _run(ctx.obj, _source(snapshot_path), Output.metadata_json(output_path), force_extract)
    typer.echo(
        f"Wrote {len(result.aggregate.records)} proposals to {output_path}", err=True
    )


@app.command()
def validate(
    ctx: typer.Context,
    filenames: Annotated[
        Optional[List[Path]], typer.Argument(help="Proposal files to validate")
    ] = None,
    snapshot_path: SnapshotOption = None,
    output_path: Annotated[
        Optional[Path],
        typer.Option("-o", "--output-path", help="Also write the metadata JSON here"),
    ] = None,
    force_extract: ForceOption = None,
) -> None:
    """Print the validation report; exits 1 when any proposal has errors."""

    source: Source
    if filenames:
        source = FilesSource(tuple(filenames))
    else:
        source = _source(snapshot_path)
    output = Output.metadata_json(output_path) if output_path else Output.validation_report()
    result = _run(ctx.obj, source, output, force_extract)
    if result.report:
        typer.echo(result.report, nl=False)
    if any(record.has_errors for record in result.aggregate.records):
        raise typer.Exit(code=1)


@app.command()
def snapshot(
    ctx: typer.Context,
    output_path: Annotated[
        Path,
        typer.Option(
            "-o",
            "--output-path",
            help="Snapshot directory to create",
            callback=_snapshot_path,
        ),
    ],
    snapshot_path: SnapshotOption = None,
) -> None:
    """Capture proposals, listing, and expected results into a snapshot directory."""

    _run(ctx.obj, _source(snapshot_path), Output.snapshot(output_path), None)
    typer.echo(f"Wrote snapshot to {output_path}", err=True)


def main() -> None:
    app()


if __name__ == "__main__":  # pragma: no cover
    main()
