"""Read-only views of the external vocabulary catalog."""

from __future__ import annotations

from dataclasses import dataclass

from vocab_srs.core.card import DEFAULT_BACK_LANG, DEFAULT_DECK, DEFAULT_FRONT_LANG

DEFAULT_DECK_ICON = "📚"


@dataclass(frozen=True)
class CatalogItem:
    """
    A vocabulary item owned by the catalog.

    Attributes:
        front: Prompt side text
        back: Answer side text
        front_lang: Language code of the front
        back_lang: Language code of the back
        deck: Deck/category key, None when uncategorized
        note_front: Optional note shown with the front
        note_back: Optional note shown with the back
        example: Optional usage example
    """

    front: str
    back: str
    front_lang: str = DEFAULT_FRONT_LANG
    back_lang: str = DEFAULT_BACK_LANG
    deck: str | None = None
    note_front: str = ""
    note_back: str = ""
    example: str = ""

    @property
    def deck_key(self) -> str:
        return self.deck or DEFAULT_DECK


@dataclass(frozen=True)
class DeckInfo:
    """Display metadata for a deck. Never used by scheduling logic."""

    id: str
    name: str
    icon: str = DEFAULT_DECK_ICON
    parent_id: str | None = None
