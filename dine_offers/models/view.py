from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Tuple, Union

from .card import AnnotatedOffer, NoOffer
from .usage import UsageStatus


@dataclass(frozen=True)
class BestOffer:
    source: str
    offer: Union[AnnotatedOffer, NoOffer]

    @property
    def available(self) -> bool:
        return isinstance(self.offer, AnnotatedOffer)


@dataclass(frozen=True)
class OfferView:
    source: str
    headline: str
    details: Tuple[str, ...]
    description: str
    card_label: str
    card_id: str
    usage: Optional[UsageStatus] = None


@dataclass(frozen=True)
class SlideView:
    source: str
    headline: str
    card_label: str = ""
    disabled: bool = False


@dataclass(frozen=True)
class OffersScreen:
    chips: Tuple[str, ...]
    offers: Tuple[OfferView, ...]
    slides: Tuple[SlideView, ...]
    share_query: str
    empty_text: Optional[str] = None
    best: Tuple[BestOffer, ...] = field(default=())
