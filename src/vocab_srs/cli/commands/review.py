"""Interactive review command."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer

from vocab_srs.cli._helpers import fail, open_context, resolve_catalog, run_async
from vocab_srs.core.rating import Rating
from vocab_srs.engine.review_session import CardView, ReviewSession
from vocab_srs.errors import ImportFormatError, InvalidRatingError

# Keys 1-4 map to Again..Easy
RATING_KEYS = {str(int(r) + 1): r for r in Rating}
QUIT_KEYS = ("q", "quit")


def _show_front(view: CardView) -> None:
    typer.echo("")
    marker = " (new)" if view.is_new else ""
    typer.secho(f"[{view.remaining} left{marker}]", fg=typer.colors.BRIGHT_BLACK)
    typer.secho(view.front, bold=True)
    if view.note_front:
        typer.secho(f"  {view.note_front}", fg=typer.colors.BRIGHT_BLACK)


def _show_back(view: CardView) -> None:
    typer.secho(f"  → {view.back}", fg=typer.colors.CYAN)
    if view.note_back:
        typer.secho(f"  {view.note_back}", fg=typer.colors.BRIGHT_BLACK)
    if view.example:
        typer.secho(f"  e.g. {view.example}", fg=typer.colors.BRIGHT_BLACK)


def _ask_rating() -> Rating | None:
    """Prompt until a valid rating or quit is entered."""
    labels = "  ".join(f"{key}={r.label}" for key, r in RATING_KEYS.items())
    while True:
        answer = typer.prompt(f"{labels}  q=quit", default="", show_default=False)
        answer = answer.strip().lower()
        if answer in QUIT_KEYS:
            return None
        if answer in RATING_KEYS:
            return RATING_KEYS[answer]
        try:
            return Rating.parse(answer)
        except InvalidRatingError:
            typer.secho("Please enter 1-4 or q.", fg=typer.colors.YELLOW)


async def _run_session(session: ReviewSession, deck: str | None) -> None:
    session.select_deck(deck)
    dashboard = await session.dashboard()
    typer.echo(
        f"{deck or 'All decks'}: {dashboard.due} due, {dashboard.new} new, "
        f"{dashboard.total} total"
    )

    view = await session.start_review()
    if view is None:
        typer.secho("Nothing due. Come back later!", fg=typer.colors.GREEN)
        return

    while view is not None:
        _show_front(view)
        answer = typer.prompt("Enter to show answer, q to quit", default="", show_default=False)
        if answer.strip().lower() in QUIT_KEYS:
            session.abandon()
            break

        _show_back(session.flip())
        rating = _ask_rating()
        if rating is None:
            session.abandon()
            break

        outcome = await session.rate(rating)
        if outcome.applied:
            typer.secho(f"  next review in {outcome.interval}d", fg=typer.colors.BRIGHT_BLACK)
        else:
            typer.secho("  card changed elsewhere, skipped", fg=typer.colors.YELLOW)
        view = outcome.next_card

    tally = session.tally
    typer.echo("")
    typer.secho(
        f"Reviewed {tally.reviewed}: again {tally.again}, hard {tally.hard}, "
        f"good {tally.good}, easy {tally.easy}",
        fg=typer.colors.GREEN,
    )


def review(
    deck: Annotated[str | None, typer.Option("--deck", "-d", help="Review one deck only")] = None,
    catalog: Annotated[
        Path | None,
        typer.Option("--catalog", "-c", help="Sync this catalog before reviewing"),
    ] = None,
) -> None:
    """Review due cards interactively.

    New cards come first, then the most overdue. Press Enter to reveal the
    answer, then rate it 1 (Again), 2 (Hard), 3 (Good) or 4 (Easy).

    Examples:
        vsrs review
        vsrs review --deck verben --catalog vocab.json
    """

    async def _review() -> None:
        ctx = await open_context()
        if catalog is not None:
            result = await ctx.card_sync().sync_cards(resolve_catalog(catalog))
            if result.created:
                typer.echo(f"Added {result.created} new card(s) from the catalog.")
        await _run_session(ctx.new_session(), deck)

    try:
        run_async(_review())
    except ImportFormatError as e:
        fail(e)
