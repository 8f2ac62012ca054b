"""Sync command implementation."""

import asyncio
import typing as t
from typing import Optional

import typer

from ...app import App, create_app
from ...config.settings import Settings
from ...domain.exceptions import CatalogError
from ...events import EventEmitter
from ...infrastructure.logging import get_logger
from ...mirror import ReconcileSummary
from ..output.progress import display_summary, subscribe_display
from ..state import CLIState


def resolve_settings(
    base: Settings,
    *,
    catalog_url: Optional[str] = None,
    exclude_versions: Optional[list[str]] = None,
    prerelease_markers: Optional[list[str]] = None,
    include_prereleases: bool = False,
    verify_downloads: Optional[bool] = None,
) -> Settings:
    """Apply command options on top of the global settings."""
    overrides: dict[str, t.Any] = {}
    if catalog_url:
        overrides["catalog_url"] = catalog_url
    if exclude_versions:
        overrides["excluded_versions"] = tuple(exclude_versions)
    if include_prereleases:
        overrides["prerelease_markers"] = ()
    elif prerelease_markers:
        overrides["prerelease_markers"] = tuple(prerelease_markers)
    if verify_downloads is not None:
        overrides["verify_downloads"] = verify_downloads
    return base.model_copy(update=overrides)


async def run_sync(app: App, emitter: EventEmitter) -> ReconcileSummary:
    """Fetch the catalog and reconcile the mirror against it.

    Raises:
        CatalogError: If the catalog cannot be fetched or parsed.
    """
    async with app.create_client() as client:
        catalog = await app.create_catalog_source(client).load()
        reconciler = app.create_reconciler(client, emitter=emitter)
        return await reconciler.run(catalog)


def sync(
    ctx: typer.Context,
    catalog_url: Optional[str] = typer.Option(
        None, "--catalog-url", help="Override the release listing URL"
    ),
    exclude_version: Optional[list[str]] = typer.Option(
        None,
        "--exclude-version",
        "-x",
        help="Version to leave alone (repeatable)",
    ),
    prerelease_marker: Optional[list[str]] = typer.Option(
        None,
        "--prerelease-marker",
        help="Substring marking a pre-release version (repeatable)",
    ),
    include_prereleases: bool = typer.Option(
        False, "--include-prereleases", help="Mirror pre-releases too"
    ),
    verify_downloads: Optional[bool] = typer.Option(
        None,
        "--verify-downloads/--trust-catalog-hash",
        help="Re-hash new downloads before writing their sidecar",
    ),
) -> None:
    """Download every catalog artifact that lacks a verified local copy.

    Examples:
        gomirror sync
        gomirror -d /srv/mirror sync --exclude-version go1.0.1
        gomirror sync --include-prereleases --verify-downloads
    """
    state: CLIState = ctx.obj
    settings = resolve_settings(
        state.settings,
        catalog_url=catalog_url,
        exclude_versions=exclude_version,
        prerelease_markers=prerelease_marker,
        include_prereleases=include_prereleases,
        verify_downloads=verify_downloads,
    )
    app = create_app(settings)
    logger = get_logger(__name__)

    try:
        settings.download_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        typer.secho(
            f"✗ Cannot use {settings.download_dir}: {e}", fg=typer.colors.RED, err=True
        )
        raise typer.Exit(code=1)

    emitter = EventEmitter(logger)
    subscribe_display(emitter)

    try:
        summary = asyncio.run(run_sync(app, emitter))
    except CatalogError as e:
        logger.error(str(e))
        typer.secho(f"✗ {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    display_summary(summary)
