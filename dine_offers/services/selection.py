from __future__ import annotations

"""Selected card identities, persisted after every change."""
import json
import logging
from typing import Iterable, List, Mapping, Optional, Sequence

from .storage import KeyValueStore, PersistenceError

LOGGER = logging.getLogger(__name__)

SELECTION_KEY = "hulisi_selected_cards"


class SelectionStore:
    def __init__(self, store: KeyValueStore, catalog: Mapping[str, object], *, key: str = SELECTION_KEY) -> None:
        self._store = store
        self._catalog = catalog
        self._key = key
        # dict keeps insertion order for chips and share links
        self._selected: dict[str, None] = {}

    def __contains__(self, card_id: object) -> bool:
        return card_id in self._selected

    def __len__(self) -> int:
        return len(self._selected)

    def __iter__(self):
        return iter(self._selected)

    def snapshot(self) -> List[str]:
        return list(self._selected)

    def toggle(self, card_id: str) -> bool:
        """Flip membership of ``card_id``; returns True when it is now selected."""
        if card_id in self._selected:
            del self._selected[card_id]
            selected = False
        elif card_id not in self._catalog:
            LOGGER.warning("Ignoring unknown card id: %s", card_id)
            return False
        else:
            self._selected[card_id] = None
            selected = True
        self.persist()
        return selected

    def restore(self, url_ids: Optional[Sequence[str]] = None) -> List[str]:
        if url_ids:
            self._replace(url_ids)
            self.persist()
        else:
            self._replace(self._load_snapshot())
        return self.snapshot()

    def set_catalog(self, catalog: Mapping[str, object]) -> None:
        self._catalog = catalog
        self._replace(self.snapshot())

    def clear(self) -> None:
        self._selected.clear()
        self.persist()

    def persist(self) -> bool:
        try:
            self._store.set(self._key, json.dumps(self.snapshot()))
        except PersistenceError:
            LOGGER.exception("Selection snapshot was not saved")
            return False
        return True

    def _replace(self, card_ids: Iterable[str]) -> None:
        valid: dict[str, None] = {}
        dropped = []
        for card_id in card_ids:
            if card_id in self._catalog:
                valid[card_id] = None
            else:
                dropped.append(card_id)
        if dropped:
            LOGGER.warning("Dropping unknown card ids: %s", ", ".join(map(str, dropped)))
        self._selected = valid

    def _load_snapshot(self) -> List[str]:
        raw = self._store.get(self._key)
        if not raw:
            return []
        try:
            payload = json.loads(raw)
        except ValueError:
            LOGGER.warning("Stored selection is not valid JSON, starting empty")
            return []
        if not isinstance(payload, list):
            LOGGER.warning("Stored selection has unexpected shape, starting empty")
            return []
        return [item for item in payload if isinstance(item, str)]
