from __future__ import annotations

"""Builds immutable display view models from aggregated offers."""
from typing import List, Optional

from ..i18n import Translator
from ..models.card import AnnotatedOffer, CardRecord
from ..models.usage import UsageStatus
from ..models.view import BestOffer, OfferView, SlideView


def format_amount(value: float) -> str:
    return f"{value:.0f}" if float(value).is_integer() else f"{value:.2f}"


class OfferFormatter:
    def __init__(self, translator: Optional[Translator] = None, *, currency: str = "₹", locale: str | None = None) -> None:
        self._translator = translator or Translator()
        self._currency = currency
        self._locale = locale

    def _t(self, key: str) -> str:
        return self._translator.translate(key, self._locale)

    def card_label(self, bank_name: Optional[str], card_name: Optional[str], card_type: Optional[str] = None) -> str:
        label = self._t("card_label").format(
            bank=bank_name or self._t("unknown_bank"), card=card_name or self._t("any_card")
        )
        return f"{label} {card_type}" if card_type else label

    def chip(self, card: CardRecord) -> str:
        return self.card_label(card.bank_name, card.card_name)

    def headline(self, offer: AnnotatedOffer) -> str:
        if offer.offer.offer:
            return offer.offer.offer
        return self._t("headline_flat").format(currency=self._currency, amount=format_amount(offer.max_discount))

    def details(self, offer: AnnotatedOffer) -> List[str]:
        discount = offer.offer
        details: List[str] = []
        if discount.applicable_on:
            details.append(self._t("detail_on").format(items=", ".join(discount.applicable_on)))
        if discount.max_discount:
            details.append(
                self._t("detail_max").format(currency=self._currency, amount=format_amount(discount.max_discount))
            )
        if discount.min_bill_amount:
            details.append(
                self._t("detail_min_bill").format(currency=self._currency, amount=format_amount(discount.min_bill_amount))
            )
        if discount.usage_limit is not None:
            details.append(
                self._t("detail_limit").format(
                    count=discount.usage_limit.max_usage_count, months=discount.usage_limit.duration_in_months
                )
            )
        return details

    def offer_view(self, offer: AnnotatedOffer, usage: Optional[UsageStatus] = None) -> OfferView:
        return OfferView(
            source=offer.source,
            headline=self.headline(offer),
            details=tuple(self.details(offer)),
            description=offer.offer.offer_text or self._t("no_details"),
            card_label=self.card_label(offer.bank_name, offer.card_name, offer.card_type),
            card_id=offer.card_id,
            usage=usage,
        )

    def slide_view(self, best: BestOffer) -> SlideView:
        if not isinstance(best.offer, AnnotatedOffer):
            return SlideView(source=best.source, headline=self._t("no_offers_slide"), disabled=True)
        offer = best.offer
        headline = offer.offer.offer or self._t("headline_up_to").format(
            currency=self._currency, amount=format_amount(offer.max_discount)
        )
        return SlideView(
            source=best.source,
            headline=headline,
            card_label=self.card_label(offer.bank_name, offer.card_name),
        )

    def empty_text(self) -> str:
        return self._t("no_offers_found")
