from __future__ import annotations

"""Read-only card catalog and its one-shot loader."""
import asyncio
import json
import logging
from collections import defaultdict
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Iterator, List, Mapping, Optional, Tuple

from pydantic import ValidationError

from ..models.card import CardRecord

LOGGER = logging.getLogger(__name__)


class CatalogLoadError(RuntimeError):
    """Raised when the catalog document cannot be read or validated."""


class Catalog(Mapping[str, CardRecord]):
    """Immutable card id -> card mapping, iterated in document order."""

    def __init__(self, cards: Optional[Mapping[str, CardRecord]] = None) -> None:
        self._cards: Mapping[str, CardRecord] = MappingProxyType(dict(cards or {}))

    @classmethod
    def from_payload(cls, payload: Any) -> "Catalog":
        if not isinstance(payload, dict):
            raise CatalogLoadError("Catalog document must be a JSON object")
        cards: Dict[str, CardRecord] = {}
        for card_id, raw in payload.items():
            if not isinstance(raw, dict):
                raise CatalogLoadError(f"Card {card_id!r} is not an object")
            try:
                cards[card_id] = CardRecord(card_id=card_id, **raw)
            except (ValidationError, TypeError) as exc:
                raise CatalogLoadError(f"Card {card_id!r} is invalid: {exc}") from exc
        return cls(cards)

    def __getitem__(self, card_id: str) -> CardRecord:
        return self._cards[card_id]

    def __iter__(self) -> Iterator[str]:
        return iter(self._cards)

    def __len__(self) -> int:
        return len(self._cards)

    def bank_groups(self, query: str = "") -> List[Tuple[str, List[CardRecord]]]:
        grouped: Dict[str, List[CardRecord]] = defaultdict(list)
        for card in self._cards.values():
            grouped[card.bank_name or "Unknown"].append(card)
        needle = query.strip().lower()
        groups = []
        for bank_name in sorted(grouped):
            cards = grouped[bank_name]
            if needle:
                cards = [card for card in cards if _matches(card, needle)]
            if cards:
                groups.append((bank_name, cards))
        return groups


def _matches(card: CardRecord, needle: str) -> bool:
    if card.bank_name and needle in card.bank_name.lower():
        return True
    return bool(card.card_name and needle in card.card_name.lower())


def _read_document(path: Path) -> Any:
    return json.loads(path.read_text(encoding="utf-8"))


async def load_catalog(path: Path) -> Catalog:
    loop = asyncio.get_running_loop()
    try:
        payload = await loop.run_in_executor(None, _read_document, path)
    except FileNotFoundError as exc:
        raise CatalogLoadError(f"Catalog not found at {path}") from exc
    except (OSError, ValueError) as exc:
        raise CatalogLoadError(f"Catalog at {path} is unreadable: {exc}") from exc
    catalog = Catalog.from_payload(payload)
    LOGGER.info("Loaded %d cards from %s", len(catalog), path)
    return catalog
