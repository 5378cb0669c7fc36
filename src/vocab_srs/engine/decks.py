"""Deck summaries for the deck picker."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from vocab_srs.core.catalog import DEFAULT_DECK_ICON, DeckInfo
from vocab_srs.utils.timeutils import now_ms

if TYPE_CHECKING:
    from vocab_srs.storage.base import SRSStorage


@dataclass(frozen=True)
class DeckSummary:
    """Card counts for one deck plus its display metadata."""

    id: str
    name: str
    icon: str = DEFAULT_DECK_ICON
    parent_name: str = ""
    total: int = 0
    due: int = 0
    new: int = 0

    @property
    def label(self) -> str:
        """Display label, e.g. ``"📚 Chapter 1 › Verbs"``."""
        path = f"{self.parent_name} › {self.name}" if self.parent_name else self.name
        return f"{self.icon} {path}".strip()

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "icon": self.icon,
            "parent_name": self.parent_name,
            "total": self.total,
            "due": self.due,
            "new": self.new,
        }


@dataclass(frozen=True)
class DeckOverview:
    """All deck summaries plus totals across decks."""

    decks: list[DeckSummary] = field(default_factory=list)
    total_due: int = 0
    total_cards: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "decks": [d.to_dict() for d in self.decks],
            "total_due": self.total_due,
            "total_cards": self.total_cards,
        }


def deck_sort_key(summary: DeckSummary) -> tuple[bool, str]:
    """Decks with due cards first, then alphabetical by name."""
    return (summary.due == 0, summary.name.casefold())


async def summarize_decks(
    storage: SRSStorage,
    decks: Iterable[DeckInfo] | None = None,
    now: int | None = None,
) -> DeckOverview:
    """Count total, due and new cards per deck.

    Args:
        storage: Card store to read
        decks: Catalog deck metadata for names, icons and parents; decks
            without metadata are shown by id with the default icon
        now: Epoch ms cutoff for "due", defaults to the current time

    Returns:
        DeckOverview with summaries sorted for display
    """
    cutoff = now_ms() if now is None else now
    info = {d.id: d for d in decks or ()}

    counts: dict[str, list[int]] = {}
    for card in await storage.get_all_cards():
        total, due, new = counts.setdefault(card.deck, [0, 0, 0])
        counts[card.deck] = [
            total + 1,
            due + (1 if card.is_due(cutoff) else 0),
            new + (1 if card.is_new else 0),
        ]

    summaries = []
    for deck_id, (total, due, new) in counts.items():
        meta = info.get(deck_id)
        parent = info.get(meta.parent_id) if meta and meta.parent_id else None
        summaries.append(
            DeckSummary(
                id=deck_id,
                name=meta.name if meta else deck_id,
                icon=meta.icon if meta else DEFAULT_DECK_ICON,
                parent_name=parent.name if parent else "",
                total=total,
                due=due,
                new=new,
            )
        )
    summaries.sort(key=deck_sort_key)

    return DeckOverview(
        decks=summaries,
        total_due=sum(s.due for s in summaries),
        total_cards=sum(s.total for s in summaries),
    )
