from __future__ import annotations

"""Flattens selected cards' offers, ranks them and picks the best per source."""
from typing import Container, Iterable, List, Mapping, Sequence

from ..config import DEFAULT_SOURCES
from ..models.card import NO_OFFER, AnnotatedOffer, CardRecord
from ..models.view import BestOffer


class OfferAggregator:
    def __init__(self, sources: Sequence[str] = DEFAULT_SOURCES) -> None:
        self.sources = tuple(sources)

    def flatten(self, selection: Container[str], catalog: Mapping[str, CardRecord]) -> List[AnnotatedOffer]:
        offers: List[AnnotatedOffer] = []
        for card_id, card in catalog.items():
            if card_id not in selection:
                continue
            for discount in card.discounts:
                offers.append(AnnotatedOffer.from_card(card, discount))
        return offers

    def rank(self, offers: Iterable[AnnotatedOffer]) -> List[AnnotatedOffer]:
        # sorted() is stable, so equal discounts keep flatten order
        return sorted(offers, key=lambda offer: offer.max_discount, reverse=True)

    def best_per_source(self, offers: Sequence[AnnotatedOffer]) -> List[BestOffer]:
        results: List[BestOffer] = []
        for source in self.sources:
            best = None
            for offer in offers:
                if offer.source != source:
                    continue
                if best is None or offer.max_discount > best.max_discount:
                    best = offer
            results.append(BestOffer(source=source, offer=best if best is not None else NO_OFFER))
        return results
