from __future__ import annotations

import enum
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator


class UsageEvent(BaseModel):
    date: datetime

    @field_validator("date")
    @classmethod
    def assume_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


class SourceUsage(BaseModel):
    source: str
    used: List[UsageEvent] = Field(default_factory=list)


class CardUsage(BaseModel):
    discounts: List[SourceUsage] = Field(default_factory=list)


class UsageKind(enum.Enum):
    COUNT = "count"
    LAST_USED = "last_used"


@dataclass(frozen=True)
class UsageStatus:
    """Usage summary for one offer, relative to a reference time."""

    kind: UsageKind
    text: str
    count: Optional[int] = None
    window_months: Optional[int] = None
    max_usage_count: Optional[int] = None
    last_used: Optional[date] = None

    @property
    def limit_reached(self) -> bool:
        if self.kind is not UsageKind.COUNT or self.max_usage_count is None:
            return False
        return (self.count or 0) >= self.max_usage_count
