from __future__ import annotations

"""Display strings for offer and usage view models."""
from dataclasses import dataclass, field
from typing import Dict


@dataclass
class Translator:
    default_locale: str = "en"
    _translations: Dict[str, Dict[str, str]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self._translations:
            return
        self._translations = {
            "en": {
                "any_card": "Any",
                "unknown_bank": "Unknown",
                "headline_flat": "{currency}{amount} off",
                "headline_up_to": "Up to {currency}{amount} off",
                "no_offers_slide": "No offers available",
                "no_offers_found": "No offers found for selected cards",
                "no_details": "No additional details",
                "detail_on": "On: {items}",
                "detail_max": "Max: {currency}{amount}",
                "detail_min_bill": "Min bill: {currency}{amount}",
                "detail_limit": "Limit: {count}x/{months}mo",
                "card_label": "{bank} {card}",
                "usage_last_used": "Used on {date}",
                "usage_count_month": "Used {count}/{limit} times this month",
                "usage_count_months": "Used {count}/{limit} times in the last {months} months",
            },
        }

    def translate(self, key: str, locale: str | None = None) -> str:
        catalog = (
            self._translations.get(locale or self.default_locale)
            or self._translations.get(self.default_locale)
            or self._translations["en"]
        )
        return catalog.get(key, key)
