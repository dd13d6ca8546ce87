"""cardledger CLI — study, statistics and configuration commands."""

import json
import logging
import sys
from dataclasses import asdict
from pathlib import Path
from typing import Annotated

import typer

from cardledger.application.config import resolve_config
from cardledger.application.factory import Services, build_services
from cardledger.domain.errors import CardLedgerError
from cardledger.domain.models import SessionResults, SessionType

# ---------------------------------------------------------------------------
# Root app
# ---------------------------------------------------------------------------

app = typer.Typer(
    help="cardledger: spaced-repetition scheduling and study statistics.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.WARNING,
    format="%(levelname)s:%(name)s:%(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger(__name__)

config_app = typer.Typer(help="Manage cardledger configuration.")
app.add_typer(config_app, name="config")


def _log_level(verbose: int) -> int:
    if verbose <= 0:
        return logging.WARNING
    if verbose == 1:
        return logging.INFO
    return logging.DEBUG


def _services(ctx: typer.Context) -> Services:
    overrides = (ctx.obj or {}).get("overrides")
    return build_services(resolve_config(overrides))


def _fail(message: str) -> typer.Exit:
    typer.secho(message, fg="red", err=True)
    return typer.Exit(code=1)


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
    data_file: Annotated[
        Path | None, typer.Option("--data-file", help="YAML file holding cards and history.")
    ] = None,
    backend: Annotated[str | None, typer.Option(help="Storage backend: yaml, memory.")] = None,
):
    """Global settings for cardledger."""
    ctx.ensure_object(dict)
    ctx.obj["overrides"] = {"data_file": data_file, "backend": backend, "verbose": verbose}
    logging.getLogger().setLevel(_log_level(verbose))


# ---------------------------------------------------------------------------
# Statistics
# ---------------------------------------------------------------------------


@app.command()
def stats(
    ctx: typer.Context,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON.")] = False,
):
    """Show card counts and study aggregates.

    The text streak is the live value; ``--json`` reports the stored one.
    """
    services = _services(ctx)
    basic = services.stats.get_basic_stats()
    extended = services.stats.get_extended_stats()

    if json_output:
        typer.echo(json.dumps({"basic": asdict(basic), "extended": asdict(extended)}, indent=2))
        return

    typer.secho("Cards", bold=True)
    typer.echo(f"  Total:     {basic.total_cards}")
    typer.echo(f"  Due today: {basic.due_today}")
    typer.echo(
        f"  New {basic.new_cards} / Learning {basic.learning_cards} / "
        f"Young {basic.young_cards} / Mature {basic.mature_cards}"
    )
    typer.secho("Study", bold=True)
    typer.echo(f"  Reviews:          {extended.total_reviews}")
    typer.echo(f"  Average easiness: {extended.average_easiness:.2f}")
    typer.echo(f"  Accuracy:         {extended.accuracy_rate:.1f}%")
    typer.echo(f"  Study time:       {extended.total_study_time // 60000} min")
    typer.echo(f"  Sessions:         {extended.sessions_completed}")
    typer.echo(f"  Streak:           {services.streaks.get_current_streak()} day(s)")


@app.command()
def tags(ctx: typer.Context):
    """Show how tags are distributed across cards."""
    shares = _services(ctx).stats.get_tag_distribution()
    if not shares:
        typer.secho("No tags found.", fg="yellow")
        return
    for share in shares:
        typer.echo(f"{share.tag:<30} {share.count:>5} {share.percentage:6.1f}%")


@app.command()
def progress(
    ctx: typer.Context,
    days: Annotated[int | None, typer.Option(help="Size of the trailing window in days.")] = None,
):
    """Show cards studied and accuracy per day."""
    services = _services(ctx)
    window = days or services.config.progress_window_days
    entries = services.stats.get_progress_over_time(window)
    if not entries:
        typer.secho(f"No study sessions in the last {window} day(s).", fg="yellow")
        return
    for entry in entries:
        typer.echo(f"{entry.date.isoformat()}  {entry.cards_studied:>4} cards  {entry.accuracy:>3}%")


@app.command()
def streak(
    ctx: typer.Context,
    days: Annotated[int | None, typer.Option(help="Days shown in the calendar strip.")] = None,
):
    """Show the current and longest learning streak."""
    services = _services(ctx)
    window = services.streaks.get_visualization(days or services.config.streak_window_days)
    typer.echo(f"Current streak: {services.streaks.get_current_streak()} day(s)")
    typer.echo(f"Longest streak: {services.streaks.get_longest_streak()} day(s)")
    typer.echo("".join("#" if day.studied else "." for day in window))


# ---------------------------------------------------------------------------
# Cards and reviews
# ---------------------------------------------------------------------------


@app.command()
def due(ctx: typer.Context):
    """List cards due today, highest priority first."""
    try:
        cards = _services(ctx).study.get_due_cards()
    except CardLedgerError as e:
        raise _fail(str(e)) from e
    if not cards:
        typer.secho("Nothing due. 🎉", fg="green")
        return
    for card in cards:
        typer.echo(f"{card.id}  {card.front}")


@app.command()
def add(
    ctx: typer.Context,
    front: Annotated[str, typer.Argument(help="Question side of the card.")],
    back: Annotated[str, typer.Argument(help="Answer side of the card.")],
    tag: Annotated[list[str] | None, typer.Option("--tag", "-t", help="Tag (repeatable).")] = None,
):
    """Add a new card, due immediately."""
    try:
        card = _services(ctx).study.add_card(front, back, tag or [])
    except CardLedgerError as e:
        raise _fail(str(e)) from e
    typer.secho(f"Added {card.id}", fg="green")


@app.command()
def review(
    ctx: typer.Context,
    card_id: Annotated[str, typer.Argument(help="ID of the card to grade.")],
    quality: Annotated[int, typer.Argument(help="Recall quality from 0 (blackout) to 4 (perfect).")],
):
    """Grade one card in a single-card review session."""
    services = _services(ctx)
    study = services.study
    try:
        session = study.start_session(SessionType.REVIEW).session
        try:
            card = study.review_card(card_id, quality, session_id=session.id)
        except CardLedgerError:
            services.ledger.end_session(session.id, SessionResults(0, 0, 0.0, quit_early=True))
            raise
        outcome = study.finish_session(session.id)
    except CardLedgerError as e:
        raise _fail(str(e)) from e

    typer.secho(
        f"Next review of {card.id} in {card.interval} day(s) "
        f"({card.next_review.date().isoformat()})",
        fg="green",
    )
    for achievement in outcome.unlocked:
        typer.secho(f"{achievement.icon} Achievement unlocked: {achievement.name}", fg="yellow")


# ---------------------------------------------------------------------------
# Data integrity
# ---------------------------------------------------------------------------


@app.command()
def validate(
    ctx: typer.Context,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON.")] = False,
):
    """Check the stored data for integrity problems."""
    try:
        result = _services(ctx).store.check()
    except CardLedgerError as e:
        raise _fail(str(e)) from e

    if json_output:
        payload = {
            "is_valid": result.is_valid,
            "errors": [
                {"type": i.type.value, "field": i.field, "message": i.message}
                for i in result.errors
            ],
            "warnings": [
                {"type": i.type.value, "field": i.field, "message": i.message}
                for i in result.warnings
            ],
        }
        typer.echo(json.dumps(payload, indent=2))
    else:
        for issue in result.errors:
            typer.secho(f"ERROR   {issue.message}", fg="red")
        for issue in result.warnings:
            typer.secho(f"WARNING {issue.message}", fg="yellow")
        if result.is_valid:
            typer.secho(f"Data is valid ({len(result.warnings)} warning(s)).", fg="green")

    if not result.is_valid:
        raise typer.Exit(code=1)


# ---------------------------------------------------------------------------
# Config subgroup
# ---------------------------------------------------------------------------


@config_app.command("show")
def config_show(ctx: typer.Context):
    """Display final resolved configuration."""
    config = resolve_config((ctx.obj or {}).get("overrides"))
    d = {k: str(v) if isinstance(v, Path) else v for k, v in config.model_dump().items()}
    typer.echo(json.dumps(d, indent=2))
