from __future__ import annotations

"""Per card/source usage history and eligibility-window status."""
import json
import logging
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional, Sequence, Union

from pydantic import TypeAdapter, ValidationError

from ..i18n import Translator
from ..models.card import UsageLimit
from ..models.usage import CardUsage, SourceUsage, UsageEvent, UsageKind, UsageStatus
from .storage import KeyValueStore, PersistenceError

LOGGER = logging.getLogger(__name__)

USAGE_KEY = "hulisi_card_usage"

Timestamp = Union[datetime, str]

_PAYLOAD = TypeAdapter(Dict[str, CardUsage])


def parse_timestamp(value: Timestamp) -> datetime:
    if isinstance(value, datetime):
        parsed = value
    else:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def format_timestamp(value: datetime) -> str:
    if value.utcoffset() == timedelta(0):
        return value.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")
    return value.isoformat(timespec="milliseconds")


def window_start(reference: datetime, duration_in_months: int) -> datetime:
    """First instant of the month ``duration_in_months - 1`` months before ``reference``.

    The current partial month counts as one whole month, so a three-month
    window evaluated on 2024-06-20 starts at 2024-04-01 00:00 local time.
    """
    reference = parse_timestamp(reference)
    months = reference.year * 12 + (reference.month - 1) - (duration_in_months - 1)
    year, month_index = divmod(months, 12)
    start = datetime(year, month_index + 1, 1)
    tz = reference.tzinfo
    if hasattr(tz, "localize"):
        return tz.localize(start)
    return start.replace(tzinfo=tz)


def period_usage_count(usages: Sequence[datetime], duration_in_months: int, reference: Timestamp) -> int:
    reference = parse_timestamp(reference)
    start = window_start(reference, duration_in_months)
    return sum(1 for used_at in usages if start <= parse_timestamp(used_at) <= reference)


def latest_usage(usages: Sequence[datetime]) -> Optional[datetime]:
    latest: Optional[datetime] = None
    for used_at in usages:
        used_at = parse_timestamp(used_at)
        # >= so that equal timestamps resolve to the later insertion
        if latest is None or used_at >= latest:
            latest = used_at
    return latest


def usage_status(
    usages: Sequence[datetime],
    usage_limit: Optional[UsageLimit],
    reference: Timestamp,
    translator: Optional[Translator] = None,
) -> Optional[UsageStatus]:
    if not usages:
        return None
    translator = translator or Translator()
    reference = parse_timestamp(reference)
    if usage_limit is not None and usage_limit.max_usage_count > 1:
        count = period_usage_count(usages, usage_limit.duration_in_months, reference)
        text = translator.translate(
            "usage_count_month" if usage_limit.duration_in_months == 1 else "usage_count_months"
        ).format(count=count, limit=usage_limit.max_usage_count, months=usage_limit.duration_in_months)
        return UsageStatus(
            kind=UsageKind.COUNT,
            text=text,
            count=count,
            window_months=usage_limit.duration_in_months,
            max_usage_count=usage_limit.max_usage_count,
        )
    latest = latest_usage(usages)
    used_on = latest.astimezone(reference.tzinfo).date()
    text = translator.translate("usage_last_used").format(date=f"{used_on:%b} {used_on.day}")
    return UsageStatus(kind=UsageKind.LAST_USED, text=text, last_used=used_on)


class UsageLedger:
    """Append-only usage log keyed by card and source."""

    def __init__(self, store: KeyValueStore, *, key: str = USAGE_KEY, translator: Optional[Translator] = None) -> None:
        self._store = store
        self._key = key
        self._translator = translator or Translator()
        self._usage: Dict[str, Dict[str, List[UsageEvent]]] = {}

    def load(self) -> None:
        self._usage = {}
        raw = self._store.get(self._key)
        if not raw:
            return
        try:
            payload = _PAYLOAD.validate_json(raw)
        except ValidationError:
            LOGGER.warning("Stored usage history is malformed, starting empty")
            return
        for card_id, card_usage in payload.items():
            sources = self._usage.setdefault(card_id, {})
            for entry in card_usage.discounts:
                sources.setdefault(entry.source, []).extend(entry.used)

    def record_usage(self, card_id: str, source: str, timestamp: Optional[Timestamp] = None) -> UsageEvent:
        event = UsageEvent(date=parse_timestamp(timestamp) if timestamp is not None else datetime.now(timezone.utc))
        self._usage.setdefault(card_id, {}).setdefault(source, []).append(event)
        LOGGER.debug("Recorded usage of %s/%s at %s", card_id, source, event.date)
        self.persist()
        return event

    def edit_usage(self, card_id: str, source: str, index: int, new_timestamp: Timestamp) -> bool:
        events = self._usage.get(card_id, {}).get(source)
        if not events or not 0 <= index < len(events):
            return False
        events[index] = UsageEvent(date=parse_timestamp(new_timestamp))
        self.persist()
        return True

    def usages_for(self, card_id: str, source: str) -> List[datetime]:
        return [event.date for event in self._usage.get(card_id, {}).get(source, [])]

    def status_for(
        self, card_id: str, source: str, usage_limit: Optional[UsageLimit], reference: Timestamp
    ) -> Optional[UsageStatus]:
        return usage_status(self.usages_for(card_id, source), usage_limit, reference, self._translator)

    def to_payload(self) -> Dict[str, CardUsage]:
        return {
            card_id: CardUsage(discounts=[SourceUsage(source=source, used=events) for source, events in sources.items()])
            for card_id, sources in self._usage.items()
        }

    def dumps(self) -> str:
        payload = {
            card_id: {
                "discounts": [
                    {"source": entry.source, "used": [{"date": format_timestamp(event.date)} for event in entry.used]}
                    for entry in card_usage.discounts
                ]
            }
            for card_id, card_usage in self.to_payload().items()
        }
        return json.dumps(payload)

    def persist(self) -> bool:
        try:
            self._store.set(self._key, self.dumps())
        except PersistenceError:
            LOGGER.exception("Usage history was not saved")
            return False
        return True
