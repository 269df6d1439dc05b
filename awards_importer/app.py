"""Typer CLI entrypoint for the awards importer."""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass
from typing import Callable, Optional

import typer
import yaml
from rich import box
from rich.console import Console
from rich.table import Table

from .config import CeremonyProfile, ConfigRepository, ImporterConfig
from .engine import WikipediaClient, transform_to_preview
from .errors import APIError, ImportServiceError, ParseError
from .infra import CatalogStore, SQLiteManager
from .logging_conf import configure_logging, log_path, tail_log
from .models import EventRecord, PreviewData
from .orchestrator import ImportOrchestrator, ImportStage

app = typer.Typer(
    help="Import awards ceremonies from Wikipedia into the catalog.",
    no_args_is_help=True,
    rich_markup_mode=None,
)
profile_app = typer.Typer(
    name="profile",
    help="Ceremony profile commands.",
    no_args_is_help=True,
    rich_markup_mode=None,
)
log_app = typer.Typer(
    name="log",
    help="Log viewing commands.",
    no_args_is_help=True,
    rich_markup_mode=None,
)

console = Console()

EXIT_PARSE = 1
EXIT_FETCH = 2
EXIT_SAVE = 3

_STAGE_LABELS = {
    ImportStage.VALIDATING: "Validating URL…",
    ImportStage.FETCHING: "Fetching article…",
    ImportStage.PARSING: "Parsing award tables…",
    ImportStage.ENRICHING: "Fetching images…",
    ImportStage.DEDUPLICATING: "Collecting people and works…",
    ImportStage.COMMITTING: "Writing catalog…",
}

OrchestratorFactory = Callable[[Optional[str], bool], ImportOrchestrator]


@dataclass
class AppState:
    repository: ConfigRepository
    config: ImporterConfig
    store: CatalogStore
    orchestrator_factory: OrchestratorFactory


def build_state(verbose: bool) -> AppState:
    repository = ConfigRepository()
    config = repository.load_config()
    configure_logging(verbose=verbose, log_dir=repository.locator.logs_dir)
    store = CatalogStore(SQLiteManager(), repository.database_path())

    def orchestrator_factory(profile_name: Optional[str], enrich_images: bool) -> ImportOrchestrator:
        effective = config if enrich_images else config.model_copy(update={"enrich_images": False})
        name = profile_name or config.default_profile
        profile = repository.load_profile(name) if name else None
        return ImportOrchestrator(
            config=effective,
            source=WikipediaClient(effective),
            store=store,
            profile=profile,
        )

    return AppState(
        repository=repository,
        config=config,
        store=store,
        orchestrator_factory=orchestrator_factory,
    )


def _get_state(ctx: typer.Context) -> AppState:
    state = ctx.obj
    if state is None:
        state = build_state(verbose=False)
        ctx.obj = state
    return state


def _make_orchestrator(state: AppState, profile: Optional[str], images: bool) -> ImportOrchestrator:
    try:
        return state.orchestrator_factory(profile, images)
    except FileNotFoundError as exc:
        console.print(str(exc), style="red")
        raise typer.Exit(code=EXIT_PARSE) from exc


def _is_duplicate_event(exc: ImportServiceError) -> bool:
    cause = exc.__cause__
    return isinstance(cause, sqlite3.IntegrityError) and "event.slug" in str(cause)


def _fail(exc: Exception) -> None:
    if isinstance(exc, ParseError):
        console.print(f"Not a valid awards page: {exc}", style="red")
        raise typer.Exit(code=EXIT_PARSE) from exc
    if isinstance(exc, APIError):
        console.print(f"Could not reach Wikipedia: {exc}", style="red")
        raise typer.Exit(code=EXIT_FETCH) from exc
    if isinstance(exc, ImportServiceError) and _is_duplicate_event(exc):
        console.print(
            "Event already imported. Delete the existing event first or import a different ceremony.",
            style="yellow",
        )
        raise typer.Exit(code=EXIT_SAVE) from exc
    console.print(f"Import failed: {exc}", style="red")
    raise typer.Exit(code=EXIT_SAVE) from exc


def _render_preview(preview: PreviewData) -> Table:
    event = preview.event
    table = Table(
        title=(
            f"{event.name} · {event.date:%Y-%m-%d} · {preview.category_count} categories, "
            f"{preview.nomination_count} nominations"
        ),
        box=box.SIMPLE_HEAD,
    )
    table.add_column("#", style="dim", justify="right")
    table.add_column("Category", style="cyan")
    table.add_column("Points", justify="right")
    table.add_column("Nominations", justify="right", style="green")
    table.add_column("Sample", overflow="fold")
    for category in preview.categories:
        samples = []
        for nomination in category.sample_nominations:
            label = " for ".join(part for part in (nomination.person_name, nomination.work_title) if part)
            samples.append(f"★ {label}" if nomination.is_winner else label)
        table.add_row(
            str(category.order + 1),
            category.name,
            str(category.point_value),
            str(category.nomination_count),
            "; ".join(samples),
        )
    return table


def _render_event(event: EventRecord) -> Table:
    table = Table(title=f"Imported {event.name} ({event.slug})", box=box.SIMPLE_HEAD)
    table.add_column("Category", style="cyan")
    table.add_column("Points", justify="right")
    table.add_column("Nominations", overflow="fold")
    for category in event.categories:
        table.add_row(
            category.name,
            str(category.points),
            "; ".join(nomination.nomination_text for nomination in category.nominations),
        )
    return table


def _track_stages(orchestrator: ImportOrchestrator, status) -> None:
    def listener(stage: ImportStage) -> None:
        label = _STAGE_LABELS.get(stage)
        if label:
            status.update(label)

    orchestrator.on_stage = listener


app.add_typer(profile_app, name="profile", help="List or inspect ceremony profiles.")
app.add_typer(log_app, name="log", help="Show importer logs.")


@app.callback()
def main(
    ctx: typer.Context, verbose: bool = typer.Option(False, "--verbose", help="Enable debug logging.", is_flag=True)
) -> None:
    ctx.obj = build_state(verbose)


@app.command("preview", help="Parse an awards article and show what would be imported.")
def preview(
    ctx: typer.Context,
    url: str = typer.Argument(..., help="Wikipedia article URL."),
    profile: Optional[str] = typer.Option(None, "--profile", help="Ceremony profile name."),
    no_images: bool = typer.Option(False, "--no-images", help="Skip image lookups.", is_flag=True),
    as_json: bool = typer.Option(False, "--json", help="Print the preview as JSON.", is_flag=True),
) -> None:
    state = _get_state(ctx)
    orchestrator = _make_orchestrator(state, profile, not no_images)
    try:
        with console.status("Validating URL…") as status:
            _track_stages(orchestrator, status)
            data = orchestrator.preview(url)
    except (ParseError, APIError) as exc:
        _fail(exc)
    finally:
        orchestrator.close()
    if as_json:
        console.print_json(data.model_dump_json())
        return
    console.print(_render_preview(data))


@app.command("commit", help="Import an awards article into the catalog.")
def commit(
    ctx: typer.Context,
    url: str = typer.Argument(..., help="Wikipedia article URL."),
    profile: Optional[str] = typer.Option(None, "--profile", help="Ceremony profile name."),
    no_images: bool = typer.Option(False, "--no-images", help="Skip image lookups.", is_flag=True),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation.", is_flag=True),
) -> None:
    state = _get_state(ctx)
    orchestrator = _make_orchestrator(state, profile, not no_images)
    try:
        with console.status("Validating URL…") as status:
            _track_stages(orchestrator, status)
            parsed = orchestrator.prepare(url)
        console.print(_render_preview(transform_to_preview(parsed, url)))
        if not yes and not typer.confirm("Import this event?", default=True):
            console.print("Import cancelled.", style="dim")
            raise typer.Exit(code=0)
        with console.status("Writing catalog…") as status:
            _track_stages(orchestrator, status)
            record = orchestrator.commit(url, parsed)
    except (ParseError, APIError, ImportServiceError) as exc:
        _fail(exc)
    finally:
        orchestrator.close()
    console.print(_render_event(record))
    nominations = sum(len(category.nominations) for category in record.categories)
    console.print(
        f"Imported {len(record.categories)} categories and {nominations} nominations.",
        style="green",
    )


@profile_app.command("list", help="List available ceremony profiles.")
def profile_list(ctx: typer.Context) -> None:
    state = _get_state(ctx)
    profiles = state.repository.list_profiles()
    if not profiles:
        console.print("No ceremony profiles found.", style="yellow")
        raise typer.Exit(code=0)
    table = Table(title=f"Ceremony profiles · {len(profiles)}", box=box.SIMPLE_HEAD)
    table.add_column("Name", style="cyan", no_wrap=True)
    table.add_column("Compact rows", justify="right")
    table.add_column("Points", justify="right")
    table.add_column("Description", overflow="fold")
    for item in profiles:
        points = item.point_value if item.point_value is not None else state.config.default_point_value
        marker = " (default)" if item.name == state.config.default_profile else ""
        table.add_row(item.name + marker, str(len(item.compact_categories)), str(points), item.description)
    console.print(table)


@profile_app.command("show", help="Show one ceremony profile.")
def profile_show(ctx: typer.Context, name: str = typer.Argument(..., help="Profile name.")) -> None:
    state = _get_state(ctx)
    try:
        item: CeremonyProfile = state.repository.load_profile(name)
    except FileNotFoundError as exc:
        console.print(str(exc), style="red")
        raise typer.Exit(code=1) from exc
    console.print(
        yaml.safe_dump(item.model_dump(mode="json"), allow_unicode=True, sort_keys=False),
        markup=False,
    )


@log_app.command("show", help="Show the latest importer log lines.")
def log_show(
    ctx: typer.Context,
    tail: int = typer.Option(100, "--tail", help="Number of lines to show."),
    errors: bool = typer.Option(False, "--errors", help="Show the error log.", is_flag=True),
) -> None:
    state = _get_state(ctx)
    path = log_path("error" if errors else "importer", state.repository.locator.logs_dir)
    lines = tail_log(path, tail)
    if not lines:
        console.print("No log entries yet.", style="dim")
        return
    console.print(f"{path.name} · last {len(lines)} lines", style="cyan")
    console.print("".join(lines), markup=False)


def cli() -> None:
    app()


if __name__ == "__main__":  # pragma: no cover
    cli()
