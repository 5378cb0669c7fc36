"""Catalog sources - read-only access to externally owned vocabulary.

The core never writes to a catalog. A source yields the current list of
items and the deck metadata used for display.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError

from vocab_srs.core.card import DEFAULT_BACK_LANG, DEFAULT_FRONT_LANG
from vocab_srs.core.catalog import DEFAULT_DECK_ICON, CatalogItem, DeckInfo
from vocab_srs.errors import ImportFormatError

logger = logging.getLogger(__name__)


@runtime_checkable
class CatalogSource(Protocol):
    """Protocol for anything that can list catalog items and decks."""

    @property
    def name(self) -> str:
        """Human-readable source name used in logs."""
        ...

    async def fetch_items(self) -> list[CatalogItem]:
        """Return every item currently in the catalog."""
        ...

    async def fetch_decks(self) -> list[DeckInfo]:
        """Return display metadata for the catalog's decks."""
        ...


class StaticCatalogSource:
    """Catalog held in memory, e.g. items posted to the API or test data."""

    def __init__(
        self,
        items: Iterable[CatalogItem],
        decks: Iterable[DeckInfo] = (),
        name: str = "static",
    ) -> None:
        self._items = list(items)
        self._decks = list(decks)
        self._name = name

    @property
    def name(self) -> str:
        return self._name

    async def fetch_items(self) -> list[CatalogItem]:
        return list(self._items)

    async def fetch_decks(self) -> list[DeckInfo]:
        return list(self._decks)


# ── JSON export format ──────────────────────────────────────────────


class _CatalogModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class _ItemPayload(_CatalogModel):
    front: str = ""
    back: str = ""
    front_lang: str = Field(
        default=DEFAULT_FRONT_LANG, validation_alias=AliasChoices("frontLang", "front_lang")
    )
    back_lang: str = Field(
        default=DEFAULT_BACK_LANG, validation_alias=AliasChoices("backLang", "back_lang")
    )
    deck: str | None = Field(default=None, validation_alias=AliasChoices("cat", "deck"))
    note_front: str = Field(
        default="", validation_alias=AliasChoices("noteDe", "noteFront", "note_front")
    )
    note_back: str = Field(
        default="", validation_alias=AliasChoices("noteAr", "noteBack", "note_back")
    )
    example: str = Field(default="", validation_alias=AliasChoices("ex", "example"))

    def to_item(self) -> CatalogItem:
        return CatalogItem(
            front=self.front,
            back=self.back,
            front_lang=self.front_lang or DEFAULT_FRONT_LANG,
            back_lang=self.back_lang or DEFAULT_BACK_LANG,
            deck=self.deck or None,
            note_front=self.note_front,
            note_back=self.note_back,
            example=self.example,
        )


class _DeckPayload(_CatalogModel):
    id: str = Field(..., min_length=1)
    name: str = ""
    icon: str = DEFAULT_DECK_ICON
    parent_id: str | None = Field(
        default=None, validation_alias=AliasChoices("parentId", "parent", "parent_id")
    )

    def to_deck(self) -> DeckInfo:
        return DeckInfo(
            id=self.id,
            name=self.name or self.id,
            icon=self.icon or DEFAULT_DECK_ICON,
            parent_id=self.parent_id or None,
        )


class _CatalogPayload(_CatalogModel):
    cards: list[_ItemPayload] = Field(default_factory=list)
    categories: list[_DeckPayload] = Field(
        default_factory=list, validation_alias=AliasChoices("categories", "cats", "decks")
    )


def parse_catalog(data: Any) -> tuple[list[CatalogItem], list[DeckInfo]]:
    """Parse a decoded catalog export.

    Accepts ``{"cards": [...], "categories": [...]}`` (``cats`` and
    ``decks`` work for the deck list too) or a bare list of cards.

    Raises:
        ImportFormatError: If the payload does not have that shape.
    """
    if isinstance(data, list):
        data = {"cards": data}
    if not isinstance(data, dict):
        raise ImportFormatError(f"Catalog must be a JSON object or list, got {type(data).__name__}")
    try:
        payload = _CatalogPayload.model_validate(data)
    except ValidationError as e:
        raise ImportFormatError(f"Invalid catalog: {e.error_count()} error(s), {e}") from e

    return [c.to_item() for c in payload.cards], [d.to_deck() for d in payload.categories]


class JsonCatalogSource:
    """Catalog read from a JSON export file on each fetch."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path).expanduser()

    @property
    def name(self) -> str:
        return str(self._path)

    def _load(self) -> tuple[list[CatalogItem], list[DeckInfo]]:
        try:
            raw = self._path.read_text(encoding="utf-8")
        except OSError as e:
            raise ImportFormatError(f"Cannot read catalog {self._path}: {e}") from e
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise ImportFormatError(f"Catalog {self._path} is not valid JSON: {e}") from e
        items, decks = parse_catalog(data)
        logger.debug("Loaded %d items and %d decks from %s", len(items), len(decks), self._path)
        return items, decks

    async def fetch_items(self) -> list[CatalogItem]:
        return self._load()[0]

    async def fetch_decks(self) -> list[DeckInfo]:
        return self._load()[1]
