"""Card sync - reconcile the external catalog into scheduler records.

Every catalog item gets a deterministic id. Items whose id is not yet
stored become NEW cards that are due immediately; items that already
have a card are left untouched, so syncing is idempotent and safe to run
at the start of every session.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING

from vocab_srs.core.card import CardRecord
from vocab_srs.utils.fnv import fnv1a_hex

if TYPE_CHECKING:
    from vocab_srs.core.catalog import CatalogItem
    from vocab_srs.integration.catalog import CatalogSource
    from vocab_srs.storage.base import SRSStorage

logger = logging.getLogger(__name__)

CARD_ID_PREFIX = "srs_"


def _content(item: CatalogItem) -> tuple[str, str, str | None]:
    return (item.front, item.back, item.deck)


def card_id(item: CatalogItem) -> str:
    """Deterministic card identity for a catalog item.

    FNV-1a over ``front|back|deck``, where ``deck`` is the item's raw deck
    key (empty when it has none). Moving an item to another deck
    therefore gives it a new identity.
    """
    return CARD_ID_PREFIX + fnv1a_hex(f"{item.front}|{item.back}|{item.deck or ''}")


@dataclass(frozen=True)
class SyncResult:
    """
    Outcome of one sync run.

    Attributes:
        total: Catalog items read
        created: New cards written
        existing: Items that already had a card (collisions included)
        collisions: Existing cards whose content differs from the item
    """

    total: int
    created: int
    existing: int
    collisions: int = 0

    def to_dict(self) -> dict[str, int]:
        return {
            "total": self.total,
            "created": self.created,
            "existing": self.existing,
            "collisions": self.collisions,
        }


class CardSyncEngine:
    """Creates scheduler records for catalog items not yet tracked."""

    def __init__(self, storage: SRSStorage) -> None:
        self._storage = storage

    async def sync_cards(self, source: CatalogSource) -> SyncResult:
        """Read the whole catalog and create NEW cards for unseen items.

        Args:
            source: The catalog to read

        Returns:
            SyncResult with total/created/existing counts
        """
        start_time = time.monotonic()
        items = await source.fetch_items()

        created = 0
        existing = 0
        collisions = 0
        seen: dict[str, CatalogItem] = {}

        for item in items:
            cid = card_id(item)

            # Two items of this same run hashing together
            earlier = seen.get(cid)
            if earlier is not None:
                existing += 1
                if _content(earlier) != _content(item):
                    collisions += 1
                    logger.warning(
                        "Identity collision on %s: %r and %r share an id",
                        cid,
                        earlier.front,
                        item.front,
                    )
                continue
            seen[cid] = item

            stored = await self._storage.get_card(cid)
            if stored is not None:
                existing += 1
                if (stored.front, stored.back) != (item.front, item.back):
                    collisions += 1
                    logger.warning(
                        "Identity collision on %s: stored %r, catalog %r",
                        cid,
                        stored.front,
                        item.front,
                    )
                continue

            await self._storage.put_card(
                CardRecord.create_new(
                    cid,
                    deck=item.deck_key,
                    front=item.front,
                    back=item.back,
                    front_lang=item.front_lang,
                    back_lang=item.back_lang,
                    note_front=item.note_front,
                    note_back=item.note_back,
                    example=item.example,
                )
            )
            created += 1

        result = SyncResult(
            total=len(items),
            created=created,
            existing=existing,
            collisions=collisions,
        )
        logger.info(
            "Synced %s: %d items, %d new, %d existing (%.2fs)",
            source.name,
            result.total,
            result.created,
            result.existing,
            time.monotonic() - start_time,
        )
        return result
