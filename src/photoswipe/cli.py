"""Typer-based CLI entry point."""

from __future__ import annotations

import functools
from pathlib import Path
from typing import List, Optional

import typer
from rich import print
from rich.table import Table

from .application.dtos import ReviewOptions
from .application.services.collection_overview import (
    build_overview,
    collected_asset_ids,
    suggest_titles,
)
from .application.services.dispatch import Dispatcher, QueueDispatcher
from .application.services.review_modes import ReviewMode
from .application.use_cases import (
    CommitBucketsUseCase,
    StartReviewRequest,
    StartReviewUseCase,
)
from .di import Container, bootstrap
from .domain.models import CollectionKind, PreviewStatus
from .domain.repositories import ICollectionStore, IPreviewDecoder
from .errors import (
    AuthorizationDeniedError,
    LibraryUnavailableError,
    ManifestInvalidError,
    PhotoSwipeError,
    SettingsError,
)
from .events.bus import EventBus
from .gui.viewmodels import ReviewViewModel
from .settings import SettingsManager
from .utils.logging import ensure_console_logger, get_logger

app = typer.Typer(help="Swipe through a photo library and sort it into albums")

# Key -> drag direction; the vector length is scaled past the thresholds.
_SWIPE_KEYS = {
    "a": (-1.0, 0.0),
    "d": (1.0, 0.0),
    "w": (0.0, -1.0),
    "s": (0.0, 1.0),
    "": (0.0, 0.0),
}


def _handle_errors(func):
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except (LibraryUnavailableError, ManifestInvalidError, AuthorizationDeniedError) as exc:
            typer.echo(f"Error: {exc}", err=True)
            raise typer.Exit(1) from exc
        except SettingsError as exc:
            typer.echo(f"Settings error: {exc}", err=True)
            raise typer.Exit(1) from exc
        except PhotoSwipeError as exc:
            typer.echo(f"Unexpected error: {exc}", err=True)
            raise typer.Exit(1) from exc

    return wrapper


def _container(library: Path, settings_path: Optional[Path] = None) -> Container:
    if not library.is_dir():
        raise LibraryUnavailableError(f"Library root is not a directory: {library}")
    container = Container()
    bootstrap(container, library, settings_path=settings_path, dispatcher=QueueDispatcher())
    return container


def _bucket_table(view_model: ReviewViewModel) -> Table:
    table = Table(title="Buckets")
    table.add_column("Bucket")
    table.add_column("Label")
    table.add_column("Assets", justify="right")
    counts = view_model.bucket_counts.value
    for bucket_id, label in view_model.bucket_labels.value.items():
        table.add_row(bucket_id, label, str(counts.get(bucket_id, 0)))
    return table


@app.command()
@_handle_errors
def review(
    library: Path = typer.Argument(..., help="Library root folder"),
    mode: Optional[ReviewMode] = typer.Option(None, "--mode", "-m", help="cleanup or tagging"),
    start_from_last: Optional[bool] = typer.Option(
        None, "--oldest-first/--newest-first", help="Review order by capture date"
    ),
    limit: Optional[int] = typer.Option(None, "--limit", min=1, help="Review at most N photos"),
    group_label: Optional[List[str]] = typer.Option(
        None, "--group-label", "-g", help="Label for the next tagging group"
    ),
    hide_collected: bool = typer.Option(False, "--hide-collected", help="Skip photos already in albums"),
    settings_path: Optional[Path] = typer.Option(None, "--settings", help="Settings file to use"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Commit without asking"),
) -> None:
    """Review LIBRARY interactively: a/d/w/s swipe, Enter skips, u undoes, q finishes."""

    ensure_console_logger(get_logger(), "photoswipe-cli")
    container = _container(library, settings_path)
    settings: SettingsManager = container.resolve(SettingsManager)
    settings.remember_library(library)

    overrides = {}
    if mode is not None:
        overrides["mode"] = mode
    if start_from_last is not None:
        overrides["start_from_last"] = start_from_last
    if limit is not None:
        overrides["limit"] = limit
    if group_label:
        overrides["group_labels"] = tuple(group_label)
    options = ReviewOptions.from_settings(settings, **overrides)

    response = container.resolve(StartReviewUseCase).execute(StartReviewRequest(options=options))
    if not response.success:
        raise AuthorizationDeniedError(response.error or "Access denied")

    dispatcher: QueueDispatcher = container.resolve(Dispatcher)
    store: ICollectionStore = container.resolve(ICollectionStore)
    session = response.session
    view_model = ReviewViewModel(
        session,
        container.resolve(EventBus),
        container.resolve(CommitBucketsUseCase),
        collection_store=store,
        dispatcher=dispatcher,
    )
    try:
        if hide_collected:
            view_model.hide_assets(collected_asset_ids(store))
        _review_loop(view_model, dispatcher)

        dispatcher.drain()
        print(_bucket_table(view_model))
        pending = [b for b in session.buckets.non_empty() if b.persist]
        if not pending:
            print("[yellow]Nothing to commit")
            return
        if not yes and not typer.confirm("Commit these buckets?", default=False):
            print("[yellow]Commit skipped; nothing was changed")
            return

        result = view_model.commit().result()
        dispatcher.drain()
        for bucket_result in result.results.values():
            if bucket_result.success:
                print(f"[green]{bucket_result.label}: {bucket_result.member_count} assets committed")
            else:
                print(f"[red]{bucket_result.label}: {bucket_result.error}")
        if not result.success:
            raise typer.Exit(1)
    finally:
        view_model.dispose()
        container.resolve(IPreviewDecoder).shutdown(wait=False)
        store.shutdown()
        container.resolve(EventBus).shutdown()


def _review_loop(view_model: ReviewViewModel, dispatcher: QueueDispatcher) -> None:
    session = view_model.session
    scale_x = session.classifier.horizontal_threshold * 2 + 1
    scale_y = session.classifier.vertical_threshold * 2 + 1
    total = session.loader.total_count
    while not view_model.is_complete:
        dispatcher.drain()
        asset = view_model.current_asset.value
        entry = session.current_entry
        status = entry.status.value if entry is not None else PreviewStatus.PENDING.value
        titles = view_model.current_albums.value
        in_albums = f" [cyan]in {', '.join(titles)}[/cyan]" if titles else ""
        print(f"[bold]{view_model.position.value + 1}/{total}[/bold] {asset.id}{in_albums} [dim]({status})")
        key = typer.prompt("swipe a/d/w/s, u undo, q finish", default="", show_default=False)
        key = key.strip().lower()
        if key == "q":
            return
        if key == "u":
            if not view_model.undo():
                print("[yellow]Nothing to undo")
            continue
        direction = _SWIPE_KEYS.get(key)
        if direction is None:
            print(f"[red]Unknown key {key!r}")
            continue
        outcome = view_model.swipe(direction[0] * scale_x, direction[1] * scale_y)
        bucket_id = session.outcome_buckets.get(outcome)
        print(f"  -> {outcome.value}" + (f" ({bucket_id})" if bucket_id else ""))
    print("[green]All photos reviewed")


@app.command()
@_handle_errors
def albums(library: Path = typer.Argument(..., help="Library root folder")) -> None:
    """List folders and non-empty albums of LIBRARY."""

    container = _container(library)
    store: ICollectionStore = container.resolve(ICollectionStore)
    try:
        overview = build_overview(store)
        if not overview:
            print("[yellow]No albums yet")
            return
        table = Table(title=str(library))
        table.add_column("Title")
        table.add_column("Kind")
        table.add_column("Photos", justify="right")
        for collection in overview:
            count = "" if collection.kind is CollectionKind.FOLDER else str(collection.count)
            table.add_row(collection.title, collection.kind.value, count)
        print(table)
    finally:
        store.shutdown()


@app.command()
@_handle_errors
def suggest(
    library: Path = typer.Argument(..., help="Library root folder"),
    query: str = typer.Argument(..., help="Part of an album title"),
) -> None:
    """Suggest existing album titles matching QUERY."""

    container = _container(library)
    store: ICollectionStore = container.resolve(ICollectionStore)
    try:
        for title in suggest_titles(query, store.list_collections()):
            print(title)
    finally:
        store.shutdown()


if __name__ == "__main__":  # pragma: no cover
    app()
