"""prepcards CLI: scheduling, triage, session planning and progress import/export."""

import json
import logging
import sys
from dataclasses import asdict
from pathlib import Path
from typing import Annotated

import typer

from prepcards.application.config import resolve_config
from prepcards.application.scheduler import compute_next_review, triage_cards
from prepcards.application.session_builder import StudySessionService
from prepcards.application.stats import DeckStatsCalculator
from prepcards.domain.constants import DEFAULT_NEW_CARD_LIMIT
from prepcards.domain.errors import InvalidArgumentError
from prepcards.infrastructure.adapters.deck_file import load_deck_card_ids
from prepcards.interface._common import _configure_logging, _fail, _parse_now, _repository

# ---------------------------------------------------------------------------
# Root app
# ---------------------------------------------------------------------------

app = typer.Typer(
    help="prepcards: spaced-repetition flashcards for interview prep.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

config_app = typer.Typer(help="Manage prepcards configuration.")
app.add_typer(config_app, name="config")

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(levelname)s:%(name)s:%(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger(__name__)

ProgressOption = Annotated[
    Path | None, typer.Option("--progress", help="Progress JSON file. Defaults to config.")
]
NowOption = Annotated[
    str | None, typer.Option("--now", help="ISO-8601 time to use instead of the system clock.")
]
DeckArgument = Annotated[Path, typer.Argument(help="YAML deck file listing card ids.")]


# ---------------------------------------------------------------------------
# Global callback
# ---------------------------------------------------------------------------


@app.callback()
def main_callback(
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose", "-v", count=True, help="Increase verbosity. Repeat for more detail."
        ),
    ] = 0,
):
    """Global settings for prepcards."""
    level = _configure_logging(verbose)
    logger.debug(f"Log level {logging.getLevelName(level)}")


# ---------------------------------------------------------------------------
# Root commands
# ---------------------------------------------------------------------------


@app.command()
def schedule(
    level: Annotated[int, typer.Argument(help="Current mastery level.")],
    ease: Annotated[float, typer.Argument(help="Current ease factor.")],
    quality: Annotated[int, typer.Argument(help="Recall quality, 0-5.")],
    now: NowOption = None,
):
    """Preview the next review schedule for a card."""
    try:
        result = compute_next_review(level, ease, quality, now=_parse_now(now))
    except InvalidArgumentError as e:
        raise _fail(e) from e

    typer.echo(
        json.dumps(
            {
                "level": result.level,
                "ease_factor": result.ease_factor,
                "interval_days": result.interval_days,
                "next_review_at": result.next_review_at.isoformat(),
            },
            indent=2,
        )
    )


@app.command()
def triage(
    deck: DeckArgument,
    progress: ProgressOption = None,
    now: NowOption = None,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON.")] = False,
):
    """Split a deck into [red]overdue[/red], [yellow]due today[/yellow] and new cards."""
    try:
        card_ids = load_deck_card_ids(deck)
        records = _repository(progress).load()
        result = triage_cards(card_ids, records, now=_parse_now(now))
    except InvalidArgumentError as e:
        raise _fail(e) from e

    if json_output:
        typer.echo(json.dumps(asdict(result), indent=2))
        return

    not_due = len(card_ids) - len(result.overdue) - len(result.due_today) - len(result.new)
    typer.secho(f"Overdue: {len(result.overdue)}", fg="red" if result.overdue else None)
    typer.secho(f"Due today: {len(result.due_today)}", fg="yellow" if result.due_today else None)
    typer.echo(f"New: {len(result.new)}")
    typer.echo(f"Not due yet: {not_due}")


@app.command()
def plan(
    deck: DeckArgument,
    progress: ProgressOption = None,
    now: NowOption = None,
    new_limit: Annotated[
        int, typer.Option("--new-limit", help="Maximum new cards offered per session.")
    ] = DEFAULT_NEW_CARD_LIMIT,
):
    """Print the ordered study queue for one session.

    Overdue cards come first, then cards due today, then new cards,
    cut to the recommended session size.
    """
    try:
        card_ids = load_deck_card_ids(deck)
        service = StudySessionService(_repository(progress), new_card_limit=new_limit)
        session = service.plan(card_ids, now=_parse_now(now))
    except InvalidArgumentError as e:
        raise _fail(e) from e

    if not session.queue:
        typer.secho("Nothing to study.", fg="green")
        return

    typer.echo(f"Session: {len(session.queue)} cards (recommended {session.recommended_size})")
    for card_id in session.queue:
        typer.echo(card_id)


@app.command()
def review(
    card_id: Annotated[str, typer.Argument(help="Card that was answered.")],
    response: Annotated[str, typer.Argument(help="Answer: dont-know, hard, good or easy.")],
    progress: ProgressOption = None,
    now: NowOption = None,
):
    """Record an answer and store the card's new schedule."""
    try:
        service = StudySessionService(_repository(progress))
        record = service.record(card_id, response, now=_parse_now(now))
    except InvalidArgumentError as e:
        raise _fail(e) from e

    color = "green" if record.level > 0 else "yellow"
    typer.secho(
        f"{card_id}: level {record.level}, next review {record.next_review_at.isoformat()} "
        f"({record.interval_days}d)",
        fg=color,
    )


@app.command()
def stats(
    deck: DeckArgument,
    progress: ProgressOption = None,
    now: NowOption = None,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON.")] = False,
):
    """Show review counts, mastery, study streak and interview countdown for a deck."""
    try:
        card_ids = load_deck_card_ids(deck)
        repo = _repository(progress)
        summary = DeckStatsCalculator().summarize(
            card_ids,
            repo.load(),
            now=_parse_now(now),
            sessions=repo.load_sessions(),
            interview_date=repo.load_interview_date(),
        )
    except InvalidArgumentError as e:
        raise _fail(e) from e

    if json_output:
        typer.echo(json.dumps(asdict(summary), indent=2))
        return

    typer.echo(f"Cards: {summary.total_cards}  Tracked: {summary.tracked}")
    typer.echo(f"Due for review: {summary.total_due}  New: {summary.new}")
    typer.echo(f"Recommended session: {summary.recommended_size}")
    typer.echo(f"Mastery: {round(summary.mastery_rate)}%")
    typer.echo(f"Study streak: {summary.study_streak} days")
    typer.echo(f"Study time: {round(summary.study_minutes)} min")
    if summary.days_until_interview is not None:
        typer.secho(
            f"Days until interview: {summary.days_until_interview}",
            fg="red" if summary.days_until_interview <= 7 else None,
        )


@app.command("export")
def export_cmd(progress: ProgressOption = None):
    """Print the progress document as JSON."""
    try:
        typer.echo(_repository(progress).export_text())
    except InvalidArgumentError as e:
        raise _fail(e) from e


@app.command("import")
def import_cmd(
    source: Annotated[
        Path, typer.Argument(exists=True, dir_okay=False, help="Progress JSON to import.")
    ],
    progress: ProgressOption = None,
):
    """Replace stored progress with an exported document."""
    try:
        count = _repository(progress).import_file(source)
    except InvalidArgumentError as e:
        raise _fail(e) from e

    typer.secho(f"Imported {count} cards.", fg="green")


# ---------------------------------------------------------------------------
# Config subgroup
# ---------------------------------------------------------------------------


@config_app.command("show")
def config_show():
    """Display final resolved configuration."""
    config = resolve_config()
    d = {k: str(v) if isinstance(v, Path) else v for k, v in config.model_dump().items()}
    typer.echo(json.dumps(d, indent=2))
