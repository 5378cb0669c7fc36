"""Card commands: sync, decks, stats, history."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, Any

import typer

from vocab_srs.cli._helpers import fail, open_context, output_result, resolve_catalog, run_async
from vocab_srs.engine.decks import summarize_decks
from vocab_srs.errors import ImportFormatError
from vocab_srs.utils.timeutils import MS_PER_DAY, format_ms, now_ms


def sync(
    catalog: Annotated[
        Path | None, typer.Argument(help="Catalog JSON export (default: $VOCAB_SRS_CATALOG)")
    ] = None,
    json_output: Annotated[bool, typer.Option("--json", "-j", help="Output as JSON")] = False,
) -> None:
    """Create cards for catalog items that are not tracked yet.

    Existing cards keep their progress; running it twice changes nothing.

    Examples:
        vsrs sync vocab.json
        vsrs sync --json
    """
    source = resolve_catalog(catalog)

    async def _sync() -> dict[str, Any]:
        ctx = await open_context()
        result = await ctx.card_sync().sync_cards(source)
        return result.to_dict()

    try:
        result = run_async(_sync())
    except ImportFormatError as e:
        fail(e)

    if json_output:
        output_result(result, True)
        return
    typer.secho(
        f"Synced {result['total']} items: {result['created']} new, {result['existing']} existing",
        fg=typer.colors.GREEN,
    )
    if result["collisions"]:
        typer.secho(
            f"  {result['collisions']} identity collision(s), see log for details",
            fg=typer.colors.YELLOW,
        )


def decks(
    catalog: Annotated[
        Path | None,
        typer.Option("--catalog", "-c", help="Catalog JSON for deck names and icons"),
    ] = None,
    json_output: Annotated[bool, typer.Option("--json", "-j", help="Output as JSON")] = False,
) -> None:
    """List decks with their due, new and total card counts.

    Examples:
        vsrs decks
        vsrs decks --catalog vocab.json
    """

    async def _decks() -> dict[str, Any]:
        ctx = await open_context()
        deck_info = await resolve_catalog(catalog).fetch_decks() if catalog else None
        overview = await summarize_decks(ctx.storage, deck_info)
        return overview.to_dict()

    try:
        result = run_async(_decks())
    except ImportFormatError as e:
        fail(e)

    if json_output:
        output_result(result, True)
        return

    if not result["decks"]:
        typer.echo("No cards yet. Run 'vsrs sync' first.")
        return

    typer.echo(f"All decks: {result['total_due']} due of {result['total_cards']} cards\n")
    for deck in result["decks"]:
        name = f"{deck['parent_name']} › {deck['name']}" if deck["parent_name"] else deck["name"]
        color = typer.colors.GREEN if deck["due"] else typer.colors.BRIGHT_BLACK
        typer.secho(
            f"  {deck['icon']} {name} [{deck['id']}]  "
            f"due: {deck['due']}  new: {deck['new']}  total: {deck['total']}",
            fg=color,
        )


def stats(
    deck: Annotated[str | None, typer.Option("--deck", "-d", help="Limit to one deck")] = None,
    json_output: Annotated[bool, typer.Option("--json", "-j", help="Output as JSON")] = False,
) -> None:
    """Show due/new/total counts and recent review activity.

    Examples:
        vsrs stats
        vsrs stats --deck verben --json
    """

    async def _stats() -> dict[str, Any]:
        ctx = await open_context()
        session = ctx.new_session()
        session.select_deck(deck)
        dashboard = await session.dashboard()
        now = now_ms()
        return {
            "deck": deck,
            "due": dashboard.due,
            "new": dashboard.new,
            "total": dashboard.total,
            "reviews_last_24h": await ctx.storage.count_reviews_since(now - MS_PER_DAY),
            "reviews_last_7d": await ctx.storage.count_reviews_since(now - 7 * MS_PER_DAY),
            "retention": ctx.settings.config.request_retention,
            "max_interval_days": ctx.settings.config.max_interval_days,
        }

    result = run_async(_stats())

    if json_output:
        output_result(result, True)
        return
    typer.echo(f"Deck: {result['deck'] or 'all decks'}")
    typer.echo(f"Due now: {result['due']}")
    typer.echo(f"New: {result['new']}")
    typer.echo(f"Total: {result['total']}")
    typer.echo(f"Reviews (24h): {result['reviews_last_24h']}")
    typer.echo(f"Reviews (7d): {result['reviews_last_7d']}")
    typer.secho(
        f"[retention: {result['retention']:.0%}, max interval: {result['max_interval_days']}d]",
        fg=typer.colors.BRIGHT_BLACK,
    )


def history(
    card_id: Annotated[str, typer.Argument(help="Card ID, e.g. srs_1a2b3c4d")],
    json_output: Annotated[bool, typer.Option("--json", "-j", help="Output as JSON")] = False,
) -> None:
    """Show a card's state and its review history.

    Examples:
        vsrs history srs_1a2b3c4d
    """

    async def _history() -> dict[str, Any]:
        ctx = await open_context()
        card = await ctx.storage.get_card(card_id)
        if card is None:
            return {"error": f"Card {card_id} not found"}
        events = await ctx.storage.get_review_history(card_id)
        return {"card": card.to_dict(), "reviews": [e.to_dict() for e in events]}

    result = run_async(_history())

    if json_output or "error" in result:
        output_result(result, json_output)
        if "error" in result:
            raise typer.Exit(1)
        return

    card = result["card"]
    typer.echo(f"{card['front']}  →  {card['back']}  [{card['deck']}]")
    typer.echo(
        f"state: {card['state']}  reps: {card['reps']}  lapses: {card['lapses']}  "
        f"due: {format_ms(card['due'])}"
    )
    if not result["reviews"]:
        typer.echo("No reviews yet.")
        return
    typer.echo("")
    for event in result["reviews"]:
        typer.echo(
            f"  {format_ms(event['timestamp'])}  rating {event['rating']}  "
            f"interval {event['interval']}d  S={event['stability']:.2f}  "
            f"D={event['difficulty']:.2f}"
        )
