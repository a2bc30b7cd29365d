from datetime import datetime, timezone
import json
from pathlib import Path
import sys

import pytz

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from dine_offers.models.card import UsageLimit
from dine_offers.models.usage import UsageKind
from dine_offers.services.ledger import (
    USAGE_KEY,
    UsageLedger,
    latest_usage,
    parse_timestamp,
    period_usage_count,
    usage_status,
    window_start,
)
from dine_offers.services.storage import InMemoryStore, PersistenceError


class FailingStore(InMemoryStore):
    def set(self, key: str, value: str) -> None:
        raise PersistenceError("disk full")


def utc(*args: int) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


def test_window_floors_to_month_start() -> None:
    assert window_start(utc(2024, 6, 20, 15, 30), 3) == utc(2024, 4, 1)
    assert window_start(utc(2024, 6, 20), 1) == utc(2024, 6, 1)
    assert window_start(utc(2024, 1, 10), 3) == utc(2023, 11, 1)
    assert window_start(utc(2024, 2, 29), 14) == utc(2023, 1, 1)


def test_period_count_includes_current_and_previous_month_only() -> None:
    reference = utc(2024, 6, 15, 12)
    usages = [utc(2024, 6, 2), utc(2024, 5, 20), utc(2024, 4, 30)]
    assert period_usage_count(usages, 2, reference) == 2
    assert period_usage_count(usages, 3, reference) == 3
    assert period_usage_count(usages, 1, reference) == 1


def test_period_count_boundaries() -> None:
    reference = utc(2024, 6, 15, 12)
    usages = [utc(2024, 5, 1), utc(2024, 4, 30, 23, 59, 59), utc(2024, 6, 15, 12), utc(2024, 6, 16)]
    # window is [2024-05-01, reference]
    assert period_usage_count(usages, 2, reference) == 2


def test_period_count_uses_local_month() -> None:
    kolkata = pytz.timezone("Asia/Kolkata")
    reference = kolkata.localize(datetime(2024, 6, 1, 3, 0))
    inside = utc(2024, 5, 31, 20, 0)  # 01:30 on June 1st in Kolkata
    outside = utc(2024, 5, 31, 18, 0)  # 23:30 on May 31st in Kolkata
    assert period_usage_count([inside, outside], 1, reference) == 1


def test_parse_timestamp_accepts_iso_strings() -> None:
    assert parse_timestamp("2024-01-05") == utc(2024, 1, 5)
    assert parse_timestamp("2024-01-05T10:00:00.000Z") == utc(2024, 1, 5, 10)


def test_latest_usage_ignores_insertion_order() -> None:
    assert latest_usage([utc(2024, 3, 1), utc(2024, 1, 1)]) == utc(2024, 3, 1)
    assert latest_usage([]) is None


def test_status_absent_without_usage() -> None:
    assert usage_status([], UsageLimit(maxUsageCount=2, durationInMonths=1), utc(2024, 6, 1)) is None


def test_single_use_reports_last_used_date() -> None:
    limit = UsageLimit(maxUsageCount=1, durationInMonths=1)
    status = usage_status([parse_timestamp("2024-01-05")], limit, "2024-06-01")
    assert status is not None
    assert status.kind is UsageKind.LAST_USED
    assert status.text == "Used on Jan 5"
    assert status.last_used.isoformat() == "2024-01-05"
    assert not status.limit_reached


def test_unlimited_reports_latest_date() -> None:
    status = usage_status([utc(2024, 2, 10), utc(2024, 5, 3), utc(2024, 4, 1)], None, utc(2024, 6, 1))
    assert status.text == "Used on May 3"


def test_multi_use_reports_count_in_window() -> None:
    limit = UsageLimit(maxUsageCount=2, durationInMonths=3)
    usages = [utc(2024, 1, 5), utc(2024, 5, 2), utc(2024, 6, 1)]
    status = usage_status(usages, limit, utc(2024, 6, 10))
    assert status.kind is UsageKind.COUNT
    assert status.count == 2
    assert status.window_months == 3
    assert status.text == "Used 2/2 times in the last 3 months"
    assert status.limit_reached


def test_multi_use_single_month_wording() -> None:
    limit = UsageLimit(maxUsageCount=4, durationInMonths=1)
    status = usage_status([utc(2024, 6, 2)], limit, utc(2024, 6, 10))
    assert status.text == "Used 1/4 times this month"


def test_record_usage_persists_expected_shape() -> None:
    store = InMemoryStore()
    ledger = UsageLedger(store)
    ledger.record_usage("c1", "Zomato", "2024-01-05")
    ledger.record_usage("c1", "Zomato", utc(2024, 2, 1, 8, 30))
    ledger.record_usage("c2", "BookMyShow", "2024-03-01T00:00:00Z")
    payload = json.loads(store.get(USAGE_KEY))
    assert payload == {
        "c1": {
            "discounts": [
                {
                    "source": "Zomato",
                    "used": [{"date": "2024-01-05T00:00:00.000Z"}, {"date": "2024-02-01T08:30:00.000Z"}],
                }
            ]
        },
        "c2": {"discounts": [{"source": "BookMyShow", "used": [{"date": "2024-03-01T00:00:00.000Z"}]}]},
    }


def test_reload_restores_history() -> None:
    store = InMemoryStore()
    first = UsageLedger(store)
    first.record_usage("c1", "Zomato", utc(2024, 1, 5))
    first.record_usage("c1", "EazyDiner", utc(2024, 1, 6))
    second = UsageLedger(store)
    second.load()
    assert second.usages_for("c1", "Zomato") == [utc(2024, 1, 5)]
    assert second.usages_for("c1", "EazyDiner") == [utc(2024, 1, 6)]
    assert second.usages_for("c9", "Zomato") == []


def test_edit_replaces_timestamp_in_place() -> None:
    ledger = UsageLedger(InMemoryStore())
    ledger.record_usage("c1", "Zomato", utc(2024, 1, 1))
    ledger.record_usage("c1", "Zomato", utc(2024, 2, 1))
    assert ledger.edit_usage("c1", "Zomato", 1, utc(2023, 12, 1))
    assert ledger.usages_for("c1", "Zomato") == [utc(2024, 1, 1), utc(2023, 12, 1)]
    status = ledger.status_for("c1", "Zomato", None, utc(2024, 6, 1))
    assert status.text == "Used on Jan 1"


def test_edit_of_missing_entry_is_noop() -> None:
    store = InMemoryStore()
    ledger = UsageLedger(store)
    ledger.record_usage("c1", "Zomato", utc(2024, 1, 1))
    snapshot = store.get(USAGE_KEY)
    assert not ledger.edit_usage("c2", "Zomato", 0, utc(2024, 1, 2))
    assert not ledger.edit_usage("c1", "EazyDiner", 0, utc(2024, 1, 2))
    assert not ledger.edit_usage("c1", "Zomato", 1, utc(2024, 1, 2))
    assert not ledger.edit_usage("c1", "Zomato", -1, utc(2024, 1, 2))
    assert ledger.usages_for("c1", "Zomato") == [utc(2024, 1, 1)]
    assert ledger.usages_for("c2", "Zomato") == []
    assert store.get(USAGE_KEY) == snapshot


def test_corrupt_history_resets_to_empty() -> None:
    for raw in ("{not json", "[1, 2]", '{"c1": {"discounts": "nope"}}'):
        ledger = UsageLedger(InMemoryStore({USAGE_KEY: raw}))
        ledger.load()
        assert ledger.to_payload() == {}
        ledger.record_usage("c1", "Zomato", utc(2024, 1, 1))
        assert ledger.usages_for("c1", "Zomato") == [utc(2024, 1, 1)]


def test_write_failure_keeps_session_alive() -> None:
    ledger = UsageLedger(FailingStore())
    event = ledger.record_usage("c1", "Zomato", utc(2024, 1, 1))
    assert event.date == utc(2024, 1, 1)
    assert ledger.usages_for("c1", "Zomato") == [utc(2024, 1, 1)]
    assert ledger.persist() is False
