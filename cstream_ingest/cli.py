"""Command-line interface for the ingestion engine."""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncIterator

import click

from . import console
from .batch import BatchJob, BatchProgress, BatchStatus, summarize_job
from .common.types import EpisodeRecord, MediaKind, RecordDraft
from .config import Settings
from .errors import BatchAbortedError, ImportValidationError
from .parsing import parse_source_text
from .store import MemoryRecordStore, RecordStore, RestRecordStore

_MEDIA_KINDS = click.Choice(
    [kind.value for kind in MediaKind] + ["series"], case_sensitive=False
)


@asynccontextmanager
async def _open_store(settings: Settings, dry_run: bool) -> AsyncIterator[RecordStore]:
    if dry_run:
        yield MemoryRecordStore()
        return
    if settings.store_url is None or not settings.store_api_key:
        raise click.UsageError(
            "STORE_URL and STORE_API_KEY must be provided (or use --dry-run)"
        )
    client = RestRecordStore.create_client(
        str(settings.store_url),
        settings.store_api_key,
        timeout=settings.store_timeout,
    )
    async with client:
        yield RestRecordStore(client, table=settings.store_table)


def _echo_progress(progress: BatchProgress) -> None:
    click.echo(
        f"  {progress.current}/{progress.total} processed"
        + (f" ({progress.failed} failed)" if progress.failed else ""),
        err=True,
    )


def _finish(job: BatchJob[Any]) -> None:
    summary = summarize_job(job)
    click.echo(summary.render())
    if job.status is BatchStatus.DONE_FAILED:
        raise click.exceptions.Exit(1)


def _read_source(path: Path) -> str:
    if str(path) == "-":
        return click.get_text_stream("stdin").read()
    return path.read_text(encoding="utf-8")


@click.group()
@click.option(
    "--log-level",
    envvar="LOG_LEVEL",
    show_envvar=True,
    type=click.Choice(
        ["critical", "error", "warning", "info", "debug", "notset"],
        case_sensitive=False,
    ),
    default="info",
    show_default=True,
    help="Logging level for console output",
)
@click.pass_context
def main(ctx: click.Context, log_level: str) -> None:
    """Bulk import and delete streaming sources."""

    logging.basicConfig(level=getattr(logging, log_level.upper(), logging.INFO))
    ctx.obj = Settings()


@main.command("parse")
@click.argument("source", type=click.Path(path_type=Path, allow_dash=True))
def parse_command(source: Path) -> None:
    """Preview the URL arrays detected in SOURCE."""

    outcome = parse_source_text(_read_source(source))
    if not outcome.arrays:
        raise click.ClickException("No valid URL found")
    click.echo(f"Strategy: {outcome.strategy.value}")
    for array in outcome.arrays:
        click.echo(f"{array.source_name}: {array.provider_name} ({len(array.urls)} URL(s))")
    if outcome.skipped:
        click.echo(f"Skipped {len(outcome.skipped)} invalid literal(s)")


@main.command("import")
@click.argument("source", type=click.Path(path_type=Path, allow_dash=True))
@click.option("--catalog-id", type=int, required=True, help="Linked catalog (TMDB) id")
@click.option("--title", required=True, help="Base title used in episode labels")
@click.option("--language", default=None, help="Language code (defaults to DEFAULT_LANGUAGE)")
@click.option("--season", type=click.IntRange(min=0), default=1, show_default=True)
@click.option("--media-kind", type=_MEDIA_KINDS, default="tv", show_default=True)
@click.option("--dry-run", is_flag=True, default=False, help="Use an in-memory store")
@click.pass_obj
def import_command(
    settings: Settings,
    source: Path,
    catalog_id: int,
    title: str,
    language: str | None,
    season: int,
    media_kind: str,
    dry_run: bool,
) -> None:
    """Import the episode arrays found in SOURCE."""

    request = console.BulkImportRequest(
        text=_read_source(source),
        title=title,
        linked_catalog_id=catalog_id,
        language=language or settings.default_language,
        season_number=season,
        media_kind=media_kind,
    )

    async def invoke() -> console.ImportResult:
        async with _open_store(settings, dry_run) as store:
            return await console.bulk_import(
                store, request, settings=settings, on_progress=_echo_progress
            )

    try:
        result = asyncio.run(invoke())
    except ImportValidationError as exc:
        raise click.ClickException(str(exc)) from exc
    except BatchAbortedError as exc:
        _finish(exc.job)
        return
    for name, coverage in console.summarize_sources(result.inserted).items():
        click.echo(f"{name}: {coverage}")
    if result.skipped:
        click.echo(f"Skipped {len(result.skipped)} invalid URL(s)")
    _finish(result.job)


@main.command("delete")
@click.argument("ids", nargs=-1, required=True)
@click.option("--dry-run", is_flag=True, default=False, help="Use an in-memory store")
@click.pass_obj
def delete_command(settings: Settings, ids: tuple[str, ...], dry_run: bool) -> None:
    """Delete the records with the given IDS."""

    async def invoke() -> BatchJob[str]:
        async with _open_store(settings, dry_run) as store:
            return await console.bulk_delete(
                store, ids, settings=settings, on_progress=_echo_progress
            )

    try:
        job = asyncio.run(invoke())
    except ImportValidationError as exc:
        raise click.ClickException(str(exc)) from exc
    except BatchAbortedError as exc:
        job = exc.job
    _finish(job)


@main.command("create")
@click.option("--label", required=True)
@click.option("--url", "base_url", required=True, help="Base URL of the source")
@click.option("--catalog-id", type=int, required=True, help="Linked catalog (TMDB) id")
@click.option("--media-kind", type=_MEDIA_KINDS, default="movie", show_default=True)
@click.option("--language", default=None, help="Language code (defaults to DEFAULT_LANGUAGE)")
@click.option("--season", type=click.IntRange(min=0), default=None)
@click.option("--episode", type=click.IntRange(min=0), default=None)
@click.option("--dry-run", is_flag=True, default=False, help="Use an in-memory store")
@click.pass_obj
def create_command(
    settings: Settings,
    label: str,
    base_url: str,
    catalog_id: int,
    media_kind: str,
    language: str | None,
    season: int | None,
    episode: int | None,
    dry_run: bool,
) -> None:
    """Create a single source."""

    draft = RecordDraft(
        label=label,
        base_url=base_url,
        linked_catalog_id=catalog_id,
        media_kind=media_kind,
        language=language or settings.default_language,
        season_number=season,
        episode_number=episode,
    )

    async def invoke() -> BatchJob[EpisodeRecord]:
        async with _open_store(settings, dry_run) as store:
            return await console.create_record(store, draft, settings=settings)

    try:
        job = asyncio.run(invoke())
    except ImportValidationError as exc:
        raise click.ClickException(str(exc)) from exc
    except BatchAbortedError as exc:
        job = exc.job
    for record in job.committed:
        click.echo(f"{record.id} {record.url}")
    _finish(job)


if __name__ == "__main__":
    main()
