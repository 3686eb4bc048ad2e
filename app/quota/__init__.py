"""
Daily article quotas.
Logged-in regular users are tracked server-side per day; guests get a
random allowance held in their session for the day.
"""

from .models import QuotaConfig, DailyAllowance, RecordOutcome, QuotaStatus
from .manager import DailyViewLedger
from .guest import GuestQuotaLedger, InMemoryGuestAllowanceStore, SessionGuestAllowanceStore

__all__ = [
    "QuotaConfig",
    "DailyAllowance",
    "RecordOutcome",
    "QuotaStatus",
    "DailyViewLedger",
    "GuestQuotaLedger",
    "InMemoryGuestAllowanceStore",
    "SessionGuestAllowanceStore",
]
