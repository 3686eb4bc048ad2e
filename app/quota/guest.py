"""
Daily article allowance for anonymous visitors.

A guest gets one random sample of published articles per calendar day. The
sample is drawn the first time it is needed and then held fixed in a
client-side slot, so every later render that day shows the same articles.
"""

import logging
import random
from typing import List, Optional, Sequence

from flask import session

from app.storage.protocols import GuestAllowanceStore

from .models import GuestAllowance

logger = logging.getLogger(__name__)

SESSION_KEY = "guest_allowance"


class InMemoryGuestAllowanceStore:
    """Keeps a single allowance in memory."""

    def __init__(self):
        self._day_key: Optional[str] = None
        self._ids: List[str] = []

    def get(self, day_key: str) -> Optional[List[str]]:
        if self._day_key != day_key:
            return None
        return list(self._ids)

    def set(self, day_key: str, ids: List[str]) -> None:
        self._day_key = day_key
        self._ids = list(ids)


class SessionGuestAllowanceStore:
    """
    Keeps the allowance in the signed Flask session cookie.

    Must be used inside a request context. Concurrent tabs overwrite each
    other's value; the last response wins.
    """

    def __init__(self, key: str = SESSION_KEY):
        self.key = key

    def get(self, day_key: str) -> Optional[List[str]]:
        raw = session.get(self.key)
        if not isinstance(raw, dict):
            return None
        allowance = GuestAllowance.from_dict(raw)
        if allowance.date != day_key:
            return None
        return allowance.allowed_ids

    def set(self, day_key: str, ids: List[str]) -> None:
        session[self.key] = GuestAllowance(date=day_key, allowed_ids=list(ids)).to_dict()
        session.permanent = True


class GuestQuotaLedger:
    """Random, day-stable allowance for guests."""

    def __init__(self, store: GuestAllowanceStore, daily_limit: int = 5, rng: Optional[random.Random] = None):
        """
        Args:
            store: Client-side slot for today's sample
            daily_limit: Articles a guest may see per day
            rng: Random source for sampling
        """
        self.store = store
        self.daily_limit = daily_limit
        self.rng = rng or random.Random()

    def get_or_init_allowance(self, candidate_ids: Sequence[str], today: str) -> List[str]:
        """
        Return today's allowance, sampling it on first use.

        A stored non-empty allowance for ``today`` is returned unchanged even
        if the candidate set has changed since. A stored value for another
        day is ignored and replaced.
        """
        stored = self.store.get(today)
        if stored:
            return stored

        unique_ids = list(dict.fromkeys(candidate_ids))
        selected = self.rng.sample(unique_ids, min(self.daily_limit, len(unique_ids)))
        self.store.set(today, selected)

        logger.info(f"Sampled guest allowance for {today}: {len(selected)} of {len(unique_ids)}")
        return selected

    def is_allowed(self, item_id: str, today: str) -> bool:
        """Whether ``item_id`` is in today's stored allowance."""
        stored = self.store.get(today) or []
        return item_id in stored
