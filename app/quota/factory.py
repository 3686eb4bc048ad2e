"""
Factory for creating quota management components.
"""

import random
from typing import Optional

from .models import QuotaConfig
from .manager import DailyViewLedger
from .guest import GuestQuotaLedger, SessionGuestAllowanceStore


def create_quota_module(
    storage: dict,
    daily_view_limit: int = 5,
    guest_daily_limit: int = 5,
    guest_store=None,
    rng: Optional[random.Random] = None,
) -> dict:
    """
    Create quota management module.
    
    Args:
        storage: Stores returned by ``create_storage_module``
        daily_view_limit: Distinct articles per logged-in regular user per day
        guest_daily_limit: Articles sampled for a guest per day
        guest_store: Client-side allowance slot (signed session cookie by default)
        rng: Random source shared by both ledgers
        
    Returns:
        Dictionary with:
        - ledger: DailyViewLedger instance
        - guest_ledger: GuestQuotaLedger instance
        - config: QuotaConfig instance
    """
    config = QuotaConfig(
        daily_view_limit=daily_view_limit,
        guest_daily_limit=guest_daily_limit,
    )
    
    ledger = DailyViewLedger(
        view_store=storage["view_records"],
        content_store=storage["content"],
        daily_limit=config.daily_view_limit,
        rng=rng,
    )
    
    guest_ledger = GuestQuotaLedger(
        store=guest_store or SessionGuestAllowanceStore(),
        daily_limit=config.guest_daily_limit,
        rng=rng,
    )
    
    return {
        "ledger": ledger,
        "guest_ledger": guest_ledger,
        "config": config
    }
