"""
Data models for the daily article quota system.
"""

from enum import Enum
from dataclasses import dataclass, field
from typing import List, Optional


class RecordOutcome(Enum):
    """Result of recording an article view."""
    RECORDED = "recorded"                # New row for today
    ALREADY_COUNTED = "already_counted"  # Same (principal, item, day) existed
    DENIED = "denied"                    # No quota left for a new item
    NOT_TRACKED = "not_tracked"          # Guests are not recorded per view
    FAILED = "failed"                    # Backend error, nothing recorded

    @property
    def ok(self) -> bool:
        return self in (RecordOutcome.RECORDED, RecordOutcome.ALREADY_COUNTED, RecordOutcome.NOT_TRACKED)


@dataclass
class QuotaConfig:
    """Configuration for quota limits."""
    daily_view_limit: int = 5
    guest_daily_limit: int = 5

    @classmethod
    def from_dict(cls, data: dict) -> "QuotaConfig":
        """Create QuotaConfig from dictionary."""
        return cls(
            daily_view_limit=data.get("daily_view_limit", 5),
            guest_daily_limit=data.get("guest_daily_limit", 5),
        )


@dataclass
class DailyAllowance:
    """One day's allowance for an authenticated regular user."""
    already_viewed_ids: List[str] = field(default_factory=list)
    additionally_allowed_ids: List[str] = field(default_factory=list)
    limit: int = 5
    degraded: bool = False  # True when a lookup failed and extras were withheld

    @property
    def allowed_ids(self) -> List[str]:
        return self.already_viewed_ids + [
            i for i in self.additionally_allowed_ids if i not in self.already_viewed_ids
        ]

    @property
    def remaining(self) -> int:
        return max(0, self.limit - len(self.already_viewed_ids))

    @property
    def exhausted(self) -> bool:
        """No new items may be opened today. A normal state, not an error."""
        return self.remaining == 0

    def to_dict(self) -> dict:
        return {
            "already_viewed_ids": self.already_viewed_ids,
            "additionally_allowed_ids": self.additionally_allowed_ids,
            "limit": self.limit,
            "remaining": self.remaining,
            "exhausted": self.exhausted,
            "degraded": self.degraded,
        }


@dataclass
class GuestAllowance:
    """Guest allowance as persisted on the client."""
    date: str  # Day key (YYYY-MM-DD)
    allowed_ids: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {"date": self.date, "allowed_ids": self.allowed_ids}

    @classmethod
    def from_dict(cls, data: dict) -> "GuestAllowance":
        ids = data.get("allowed_ids")
        return cls(
            date=str(data.get("date", "")),
            allowed_ids=[str(i) for i in ids] if isinstance(ids, list) else [],
        )


@dataclass
class QuotaStatus:
    """Quota summary for the daily-limit banners."""
    tier: str
    is_unlimited: bool
    daily_limit: Optional[int] = None
    used_today: int = 0
    remaining: Optional[int] = None
    message: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "tier": self.tier,
            "is_unlimited": self.is_unlimited,
            "daily_limit": self.daily_limit,
            "used_today": self.used_today,
            "remaining": self.remaining,
            "message": self.message,
        }
