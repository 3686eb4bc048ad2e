"""
Daily article quota for authenticated regular users.
"""

import logging
import random
from threading import Lock
from typing import List, Optional

from app.errors import DuplicateRecord, TransientBackendFailure
from app.storage.protocols import ContentStore, ViewRecordStore

from .models import DailyAllowance, RecordOutcome

logger = logging.getLogger(__name__)


class DailyViewLedger:
    """
    Tracks which articles a principal has opened today against a fixed limit.

    Behavior:
    - Already viewed items stay visible for the rest of the day
    - While under the limit, the remaining slots are filled with a fresh
      random sample of published, not yet viewed items on every call
    - Recording the same (principal, item, day) twice is a no-op
    """

    def __init__(
        self,
        view_store: ViewRecordStore,
        content_store: ContentStore,
        daily_limit: int = 5,
        rng: Optional[random.Random] = None,
    ):
        """
        Initialize DailyViewLedger.

        Args:
            view_store: Day-scoped view record table
            content_store: Source of published article ids
            daily_limit: Distinct articles per principal per day
            rng: Random source for sampling (module default if omitted)
        """
        self.view_store = view_store
        self.content_store = content_store
        self.daily_limit = daily_limit
        self.rng = rng or random.Random()
        self._lock = Lock()

    def viewed_ids(self, principal_id: str, today: str) -> List[str]:
        """Items recorded today. Raises ``TransientBackendFailure``."""
        return self.view_store.list_item_ids(principal_id, today)

    def get_allowance(self, principal_id: str, today: str) -> DailyAllowance:
        """
        Compute today's allowance.

        Returns:
            DailyAllowance with already viewed ids and a random set of extra
            ids. On backend failure no extra ids are granted.
        """
        try:
            viewed = self.viewed_ids(principal_id, today)
        except TransientBackendFailure as e:
            logger.error(f"Could not load views for {principal_id} on {today}: {e}")
            return DailyAllowance(limit=self.daily_limit, degraded=True)

        remaining = self.daily_limit - len(viewed)
        if remaining <= 0:
            return DailyAllowance(already_viewed_ids=viewed, limit=self.daily_limit)

        try:
            viewed_set = set(viewed)
            candidates = [
                item_id for item_id in self.content_store.list_published_ids()
                if item_id not in viewed_set
            ]
        except TransientBackendFailure as e:
            logger.error(f"Could not load candidate articles: {e}")
            return DailyAllowance(already_viewed_ids=viewed, limit=self.daily_limit, degraded=True)

        extra = self.rng.sample(candidates, min(remaining, len(candidates)))

        logger.debug(f"Allowance for {principal_id} on {today}: {len(viewed)} viewed, {len(extra)} extra")
        return DailyAllowance(
            already_viewed_ids=viewed,
            additionally_allowed_ids=extra,
            limit=self.daily_limit,
        )

    def admits(self, principal_id: str, item_id: str, today: str) -> bool:
        """
        Whether the principal may open ``item_id`` today.

        Already viewed items are always admitted; a new item needs a free
        slot and must be published. Fails closed on backend errors.
        """
        try:
            viewed = self.viewed_ids(principal_id, today)
            if item_id in viewed:
                return True
            if len(viewed) >= self.daily_limit:
                return False
            item = self.content_store.get(item_id)
        except TransientBackendFailure as e:
            logger.error(f"Admission check failed for {principal_id}/{item_id}: {e}")
            return False

        return item is not None and item.published

    def record_view(self, principal_id: str, item_id: str, today: str) -> RecordOutcome:
        """
        Record that the principal opened ``item_id`` today.

        Idempotent: a duplicate tuple, including a uniqueness conflict raised
        by a concurrent writer, is reported as ``ALREADY_COUNTED``.
        """
        try:
            inserted = self.view_store.insert_if_absent(principal_id, item_id, today)
        except DuplicateRecord:
            inserted = False
        except TransientBackendFailure as e:
            logger.error(f"Error recording view {principal_id}/{item_id} on {today}: {e}")
            return RecordOutcome.FAILED

        if not inserted:
            return RecordOutcome.ALREADY_COUNTED

        logger.info(f"Recorded view: user:{principal_id} item:{item_id} day:{today}")
        return RecordOutcome.RECORDED

    def remaining(self, principal_id: str, today: str) -> int:
        """Free slots today; 0 when the count cannot be loaded."""
        try:
            used = self.view_store.count(principal_id, today)
        except TransientBackendFailure as e:
            logger.error(f"Could not count views for {principal_id}: {e}")
            return 0
        return max(0, self.daily_limit - used)

    def record_if_admitted(self, principal_id: str, item_id: str, today: str) -> RecordOutcome:
        """
        Admission check and insert as one step.

        Two requests racing for the last free slot cannot both take it.
        """
        with self._lock:
            if not self.admits(principal_id, item_id, today):
                return RecordOutcome.DENIED
            return self.record_view(principal_id, item_id, today)
