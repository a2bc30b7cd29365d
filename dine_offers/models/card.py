from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


class UsageLimit(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    max_usage_count: int = Field(alias="maxUsageCount", ge=1)
    duration_in_months: int = Field(alias="durationInMonths", ge=1)


class DiscountOffer(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    source: str
    offer: Optional[str] = Field(default=None, description="Short headline shown on slides and list rows.")
    offer_text: Optional[str] = Field(default=None, alias="offerText")
    max_discount: Optional[float] = Field(default=None, alias="maxDiscount", ge=0)
    min_bill_amount: Optional[float] = Field(default=None, alias="minBillAmount")
    applicable_on: Optional[Tuple[str, ...]] = Field(default=None, alias="applicableOn")
    usage_limit: Optional[UsageLimit] = Field(default=None, alias="usageLimit")

    def ranking_value(self) -> float:
        return self.max_discount or 0.0


class CardRecord(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    card_id: str
    bank_name: Optional[str] = Field(default=None, alias="bankName")
    card_name: Optional[str] = Field(default=None, alias="cardName")
    card_type: Optional[str] = Field(default=None, alias="cardType")
    discounts: Tuple[DiscountOffer, ...] = ()

    def display_name(self) -> str:
        return self.card_name or "Any"


@dataclass(frozen=True)
class AnnotatedOffer:
    """An offer joined with the identity of the card that unlocks it."""

    offer: DiscountOffer
    card_id: str
    bank_name: Optional[str] = None
    card_name: Optional[str] = None
    card_type: Optional[str] = None

    @classmethod
    def from_card(cls, card: CardRecord, offer: DiscountOffer) -> "AnnotatedOffer":
        return cls(
            offer=offer,
            card_id=card.card_id,
            bank_name=card.bank_name,
            card_name=card.card_name,
            card_type=card.card_type,
        )

    @property
    def source(self) -> str:
        return self.offer.source

    @property
    def max_discount(self) -> float:
        return self.offer.ranking_value()


class NoOffer:
    """Marker for a source that no selected card unlocks."""

    _instance: Optional["NoOffer"] = None

    def __new__(cls) -> "NoOffer":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "NO_OFFER"


NO_OFFER = NoOffer()
