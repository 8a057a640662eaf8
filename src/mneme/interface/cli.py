"""Mneme CLI: root commands and subgroup registration."""

import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Annotated, Any

import typer

from mneme.application.config import AppConfig, config_file_path, resolve_config
from mneme.domain.errors import MnemeError
from mneme.domain.srs.models import ActivityType
from mneme.infrastructure.serialization import ensure_timezone

# ---------------------------------------------------------------------------
# Root app
# ---------------------------------------------------------------------------

app = typer.Typer(
    help="mneme: spaced-repetition scheduling for vocabulary practice.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(levelname)s:%(name)s:%(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Subgroups
# ---------------------------------------------------------------------------

item_app = typer.Typer(help="Manage vocabulary items.", no_args_is_help=True)
app.add_typer(item_app, name="item")

session_app = typer.Typer(help="Record drill sessions.", no_args_is_help=True)
app.add_typer(session_app, name="session")

config_app = typer.Typer(help="Manage mneme configuration.")
app.add_typer(config_app, name="config")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

StoreOption = Annotated[
    Path | None, typer.Option("--store", help="YAML store file. Defaults to config.")
]
NowOption = Annotated[
    str | None,
    typer.Option("--now", help="Reference time (ISO-8601). Defaults to the current time."),
]
JsonOption = Annotated[bool, typer.Option("--json", help="Output as JSON.")]


def _resolve_with_overrides(**overrides: Any) -> AppConfig:
    return resolve_config(overrides)


def _parse_now(value: str | None) -> datetime:
    if value is None:
        return datetime.now(timezone.utc)
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        typer.secho(f"Invalid timestamp: {value}", fg="red")
        raise typer.Exit(2)
    return ensure_timezone(parsed)


def _fail(e: MnemeError) -> typer.Exit:
    typer.secho(f"Error: {e}", fg="red", err=True)
    return typer.Exit(1)


def _json_default(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    raise TypeError(f"Not JSON serializable: {type(value).__name__}")


# ---------------------------------------------------------------------------
# Global callback
# ---------------------------------------------------------------------------


@app.callback()
def main_callback(
    ctx: typer.Context,
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose", "-v", count=True, help="Increase verbosity. Repeat for more detail."
        ),
    ] = 0,
):
    """Global settings for mneme."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    if verbose >= 2:
        logging.getLogger("mneme").setLevel(logging.DEBUG)
    elif verbose == 0:
        logging.getLogger("mneme").setLevel(logging.WARNING)


# ---------------------------------------------------------------------------
# Root commands
# ---------------------------------------------------------------------------


@app.command()
def review(
    item_id: Annotated[str, typer.Argument(help="Id of the reviewed item.")],
    activity: Annotated[
        ActivityType, typer.Option("--type", "-t", help="Skill axis exercised.")
    ] = ActivityType.RECOGNITION,
    correct: Annotated[
        bool, typer.Option("--correct/--incorrect", help="Whether the answer was right.")
    ] = True,
    score: Annotated[
        float | None,
        typer.Option(min=0.0, max=1.0, help="Continuous accuracy (production only)."),
    ] = None,
    store: StoreOption = None,
    now: NowOption = None,
    json_output: JsonOption = False,
):
    """[bold green]Record[/bold green] a practice outcome and reschedule the item."""
    from mneme.application.factory import get_store
    from mneme.application.outcome_classifier import performance_summary
    from mneme.application.review_service import ReviewService
    from mneme.domain.srs.models import ActivityOutcome
    from mneme.infrastructure.serialization import schedule_to_dict

    config = _resolve_with_overrides(store_path=store)
    attempted_at = _parse_now(now)
    outcome = ActivityOutcome(
        activity_type=activity,
        was_correct=correct,
        attempted_at=attempted_at,
        score=score,
    )

    try:
        service = ReviewService(get_store(config), min_interval_hours=config.min_interval_hours)
        item, update = service.record_outcome(item_id, outcome)
    except MnemeError as e:
        raise _fail(e) from e

    if json_output:
        payload = {
            "id": item.id,
            "quality": update.quality,
            "was_successful": update.was_successful,
            "schedule": schedule_to_dict(update.schedule),
            "summary": performance_summary(item, attempted_at),
        }
        typer.echo(json.dumps(payload, indent=2, default=_json_default))
        return

    color = "green" if update.was_successful else "yellow"
    typer.secho(
        f"{item.term}: quality {update.quality} "
        f"({'pass' if update.was_successful else 'fail'})",
        fg=color,
    )
    typer.echo(
        f"Streak: {update.schedule.streak}  Interval: {update.schedule.interval_hours}h  "
        f"Ease: {update.schedule.ease_factor}"
    )
    typer.echo(f"Next due: {update.schedule.due_at.isoformat()}")


@app.command("queue")
def queue(
    limit: Annotated[int | None, typer.Option(min=0, help="Maximum queue length.")] = None,
    window: Annotated[
        float | None, typer.Option(help="Upcoming window in hours.")
    ] = None,
    store: StoreOption = None,
    now: NowOption = None,
    json_output: JsonOption = False,
):
    """Build a practice queue: due, then upcoming, then new, then later items."""
    from mneme.application.factory import get_store
    from mneme.application.review_service import QueueService

    config = _resolve_with_overrides(
        store_path=store, upcoming_window_hours=window, queue_limit=limit
    )
    moment = _parse_now(now)

    try:
        service = QueueService(
            get_store(config),
            upcoming_window_hours=config.upcoming_window_hours,
            default_limit=config.queue_limit,
        )
        result = service.get_queue(moment)
    except MnemeError as e:
        raise _fail(e) from e

    if json_output:
        typer.echo(
            json.dumps(
                {
                    "queue": [item.id for item in result.queue],
                    "due_count": result.due_count,
                    "upcoming_count": result.upcoming_count,
                    "new_count": result.new_count,
                },
                indent=2,
            )
        )
        return

    typer.echo(
        f"Due: {result.due_count}  Upcoming: {result.upcoming_count}  New: {result.new_count}"
    )
    if not result.queue:
        typer.secho("Nothing to practice.", fg="yellow")
        return
    for i, item in enumerate(result.queue, start=1):
        when = item.schedule.due_at.isoformat() if item.schedule else "new"
        typer.echo(f"  [{i}] {item.term}  ({item.id}, {when})")


@app.command()
def progress(
    user: Annotated[str | None, typer.Option(help="Learner id to tag the stats with.")] = None,
    threshold: Annotated[
        int | None, typer.Option(help="Streak at which an item counts as learned.")
    ] = None,
    store: StoreOption = None,
    now: NowOption = None,
    json_output: JsonOption = False,
):
    """Show dashboard statistics: learned, due, and daily streak."""
    from dataclasses import asdict

    from mneme.application.factory import get_store
    from mneme.application.stats.service import ProgressService

    config = _resolve_with_overrides(store_path=store, learned_streak_threshold=threshold)
    moment = _parse_now(now)

    try:
        backend = get_store(config)
        service = ProgressService(
            backend, backend, learned_streak_threshold=config.learned_streak_threshold
        )
        stats = service.get_progress(moment, user_id=user)
    except MnemeError as e:
        raise _fail(e) from e

    if json_output:
        typer.echo(json.dumps(asdict(stats), indent=2, default=_json_default))
        return

    typer.echo(f"Vocabulary: {stats.total_vocab_count}  Learned: {stats.learned_vocab_count}")
    typer.echo(f"Due for review: {stats.review_due_count}")
    typer.echo(f"Streak: {stats.streak_days} day(s)")
    last = stats.last_session_at.isoformat() if stats.last_session_at else "never"
    typer.echo(f"Last session: {last}")


# ---------------------------------------------------------------------------
# Item subgroup
# ---------------------------------------------------------------------------


@item_app.command("add")
def item_add(
    term: Annotated[str, typer.Argument(help="The vocabulary term.")],
    meaning: Annotated[str, typer.Option(help="Definition or gloss.")] = "",
    store: StoreOption = None,
    now: NowOption = None,
):
    """Add a new (never reviewed) vocabulary item."""
    from mneme.application.factory import get_store
    from mneme.application.id_service import generate_item_id
    from mneme.domain.srs.models import VocabItem

    config = _resolve_with_overrides(store_path=store)
    item = VocabItem(
        id=generate_item_id(), term=term, meaning=meaning, created_at=_parse_now(now)
    )

    try:
        get_store(config).save_item(item)
    except MnemeError as e:
        raise _fail(e) from e

    typer.echo(item.id)


@item_app.command("show")
def item_show(
    item_id: Annotated[str, typer.Argument(help="Item id.")],
    store: StoreOption = None,
    now: NowOption = None,
):
    """Show an item's schedule and performance summary."""
    from mneme.application.factory import get_store
    from mneme.application.outcome_classifier import performance_summary

    config = _resolve_with_overrides(store_path=store)
    try:
        item = get_store(config).get_item(item_id)
    except MnemeError as e:
        raise _fail(e) from e

    summary = performance_summary(item, _parse_now(now))
    typer.echo(json.dumps({"id": item.id, "term": item.term, **summary}, indent=2))


@item_app.command("list")
def item_list(store: StoreOption = None):
    """List stored items."""
    from mneme.application.factory import get_store

    config = _resolve_with_overrides(store_path=store)
    try:
        items = get_store(config).list_items()
    except MnemeError as e:
        raise _fail(e) from e

    for item in items:
        streak = item.schedule.streak if item.schedule else "-"
        typer.echo(f"{item.id}  {item.term}  streak={streak}")


# ---------------------------------------------------------------------------
# Session subgroup
# ---------------------------------------------------------------------------


@session_app.command("add")
def session_add(
    started: Annotated[str, typer.Option(help="Session start (ISO-8601).")],
    ended: Annotated[str, typer.Option(help="Session end (ISO-8601).")],
    correct: Annotated[int, typer.Option(min=0)] = 0,
    incorrect: Annotated[int, typer.Option(min=0)] = 0,
    score: Annotated[float, typer.Option(min=0.0, max=1.0)] = 0.0,
    store: StoreOption = None,
):
    """Record a completed drill session."""
    from mneme.application.factory import get_store
    from mneme.application.id_service import generate_session_id
    from mneme.domain.srs.models import DrillSession

    config = _resolve_with_overrides(store_path=store)
    session = DrillSession(
        id=generate_session_id(),
        started_at=_parse_now(started),
        ended_at=_parse_now(ended),
        correct_count=correct,
        incorrect_count=incorrect,
        score=score,
    )

    try:
        get_store(config).add_session(session)
    except MnemeError as e:
        raise _fail(e) from e

    typer.echo(session.id)


# ---------------------------------------------------------------------------
# Config subgroup
# ---------------------------------------------------------------------------


@config_app.command("show")
def config_show():
    """Display final resolved configuration."""
    config = resolve_config()
    d = {k: str(v) if isinstance(v, Path) else v for k, v in config.model_dump().items()}
    typer.echo(json.dumps(d, indent=2))


@config_app.command("path")
def config_path():
    """Print the location of the config file."""
    typer.echo(str(config_file_path()))


@app.command()
def serve(
    port: Annotated[int, typer.Option(help="Port to bind the server to.")] = 8787,
    host: Annotated[str, typer.Option(help="Host to bind the server to.")] = "127.0.0.1",
    reload: Annotated[bool, typer.Option(help="Enable auto-reload.")] = False,
):
    """Run the HTTP API server."""
    import uvicorn

    uvicorn.run("mneme.server:app", host=host, port=port, reload=reload)


def run():
    app()
