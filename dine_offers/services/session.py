from __future__ import annotations

"""Session context owning catalog, selection, usage ledger and carousel."""
import logging
from datetime import datetime
from typing import Callable, List, Optional

import pytz

from ..config import Settings
from ..i18n import Translator
from ..models.card import AnnotatedOffer
from ..models.usage import UsageEvent
from ..models.view import BestOffer, OffersScreen
from .aggregator import OfferAggregator
from .carousel import Carousel
from .catalog import Catalog, CatalogLoadError, load_catalog
from .formatting import OfferFormatter
from .ledger import Timestamp, UsageLedger
from .selection import SelectionStore
from .sharing import build_query, cards_from_query
from .storage import KeyValueStore

LOGGER = logging.getLogger(__name__)

SessionListener = Callable[["OfferSession"], None]


class OfferSession:
    def __init__(
        self,
        settings: Settings,
        store: KeyValueStore,
        *,
        catalog: Optional[Catalog] = None,
        translator: Optional[Translator] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.settings = settings
        self.catalog = catalog if catalog is not None else Catalog()
        translator = translator or Translator(default_locale=settings.locale)
        self.selection = SelectionStore(store, self.catalog)
        self.ledger = UsageLedger(store, translator=translator)
        self.aggregator = OfferAggregator(settings.sources)
        self.formatter = OfferFormatter(translator, currency=settings.currency_symbol, locale=settings.locale)
        self.carousel = Carousel(settings.carousel_interval, on_change=lambda _index: self._notify())
        self._timezone = pytz.timezone(settings.timezone)
        self._clock = clock
        self._listeners: List[SessionListener] = []
        self.loaded = catalog is not None
        self.share_query = ""
        self.screen: Optional[OffersScreen] = None

    # ------------------------------------------------------------------ lifecycle -----
    async def load(self, url_query: str = "") -> bool:
        try:
            catalog = await load_catalog(self.settings.catalog_path)
        except CatalogLoadError:
            LOGGER.exception("Catalog could not be loaded, no offers will be shown")
            return False
        self.start(catalog, url_query)
        return True

    def start(self, catalog: Catalog, url_query: str = "") -> None:
        self.catalog = catalog
        self.selection.set_catalog(catalog)
        self.ledger.load()
        self.selection.restore(cards_from_query(url_query))
        self.loaded = True
        if len(self.selection):
            self.show_offers()
        else:
            self._notify()

    def close(self) -> None:
        self.carousel.stop()
        self._listeners.clear()

    def subscribe(self, listener: SessionListener) -> None:
        self._listeners.append(listener)

    def now(self) -> datetime:
        if self._clock is not None:
            return self._clock()
        return datetime.now(self._timezone)

    # ------------------------------------------------------------------ selection -----
    def toggle_card(self, card_id: str) -> bool:
        selected = self.selection.toggle(card_id)
        self._notify()
        return selected

    def selected_chips(self) -> List[str]:
        return [self.formatter.chip(self.catalog[card_id]) for card_id in self.selection if card_id in self.catalog]

    # ------------------------------------------------------------------ offers -----
    def offers(self) -> List[AnnotatedOffer]:
        return self.aggregator.flatten(self.selection, self.catalog)

    def ranked_offers(self) -> List[AnnotatedOffer]:
        return self.aggregator.rank(self.offers())

    def best_offers(self) -> List[BestOffer]:
        return self.aggregator.best_per_source(self.offers())

    def build_screen(self, reference: Optional[Timestamp] = None) -> OffersScreen:
        reference = reference if reference is not None else self.now()
        flat = self.offers()
        best = self.aggregator.best_per_source(flat)
        views = tuple(
            self.formatter.offer_view(
                offer,
                self.ledger.status_for(offer.card_id, offer.source, offer.offer.usage_limit, reference),
            )
            for offer in self.aggregator.rank(flat)
        )
        return OffersScreen(
            chips=tuple(self.selected_chips()),
            offers=views,
            slides=tuple(self.formatter.slide_view(item) for item in best),
            share_query=build_query(self.selection),
            empty_text=None if views else self.formatter.empty_text(),
            best=tuple(best),
        )

    def show_offers(self) -> OffersScreen:
        self.selection.persist()
        self.screen = self.build_screen()
        self.share_query = self.screen.share_query
        self.carousel.start(len(self.screen.slides))
        self._notify()
        return self.screen

    def show_selection(self) -> None:
        self.carousel.stop()
        self.share_query = ""
        self.screen = None
        self._notify()

    # ------------------------------------------------------------------ usage -----
    def mark_used(self, card_id: str, source: str, timestamp: Optional[Timestamp] = None) -> UsageEvent:
        event = self.ledger.record_usage(card_id, source, timestamp if timestamp is not None else self.now())
        self._refresh()
        return event

    def edit_usage(self, card_id: str, source: str, index: int, new_timestamp: Timestamp) -> bool:
        changed = self.ledger.edit_usage(card_id, source, index, new_timestamp)
        if changed:
            self._refresh()
        return changed

    def _refresh(self) -> None:
        if self.screen is not None:
            self.screen = self.build_screen()
        self._notify()

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self)
