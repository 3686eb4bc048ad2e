"""
Visibility decisions: which articles a viewer may see today.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

from app.errors import TransientBackendFailure
from app.quota.day_keys import guest_day_key, server_day_key
from app.quota.guest import GuestQuotaLedger
from app.quota.manager import DailyViewLedger
from app.quota.models import QuotaStatus, RecordOutcome
from app.roles.models import Role
from app.roles.resolver import RoleResolver
from app.storage.protocols import ContentStore

logger = logging.getLogger(__name__)


def item_id_of(item: Any) -> Optional[str]:
    """
    Accept plain ids, article dicts or objects with an ``id`` attribute.

    Returns None when no usable id can be found.
    """
    if isinstance(item, str):
        return item
    if isinstance(item, int) and not isinstance(item, bool):
        return str(item)
    if isinstance(item, dict):
        item_id = item.get("id")
    else:
        item_id = getattr(item, "id", None)
    if isinstance(item_id, bool) or not isinstance(item_id, (str, int)):
        return None
    return str(item_id)


class VisibilityService:
    """
    Composes the role resolver and the quota ledgers.

    - Roles above regular user: everything is visible
    - Regular users: today's server-side ledger
    - Guests: today's client-side random allowance
    """

    def __init__(
        self,
        resolver: RoleResolver,
        ledger: DailyViewLedger,
        guest_ledger: GuestQuotaLedger,
        content_store: ContentStore,
    ):
        self.resolver = resolver
        self.ledger = ledger
        self.guest_ledger = guest_ledger
        self.content_store = content_store

    def published_ids(self) -> List[str]:
        try:
            return self.content_store.list_published_ids()
        except TransientBackendFailure as e:
            logger.error(f"Could not load published articles: {e}")
            return []

    def _guest_allowance(self, guest_today: str) -> List[str]:
        # Sample from every published article, not the caller's page, so the
        # allowance does not depend on which list was rendered first
        stored = self.guest_ledger.store.get(guest_today)
        if stored:
            return stored
        published = self.published_ids()
        if not published:
            return []
        return self.guest_ledger.get_or_init_allowance(published, guest_today)

    def filter_visible(
        self,
        principal_id: Optional[str],
        candidates: Sequence[Any],
        today: Optional[str] = None,
        guest_today: Optional[str] = None,
    ) -> List[Any]:
        """
        Return the candidates the viewer may see, in their original order.

        Args:
            principal_id: Logged-in principal or None for a guest
            candidates: Article ids, dicts or objects with ``id``
            today: Server day key for authenticated viewers
            guest_today: Client-local day key for guests
        """
        role = self.resolver.resolve_viewer(principal_id)
        candidates = [item for item in candidates if item_id_of(item) is not None]

        if role.is_privileged:
            return candidates

        if role == Role.REGULAR_USER:
            allowance = self.ledger.get_allowance(principal_id, today or server_day_key())
            allowed = set(allowance.allowed_ids)
        else:
            allowed = set(self._guest_allowance(guest_today or guest_day_key()))

        return [item for item in candidates if item_id_of(item) in allowed]

    def can_view(
        self,
        principal_id: Optional[str],
        item_id: str,
        today: Optional[str] = None,
        guest_today: Optional[str] = None,
    ) -> bool:
        """
        Whether the viewer may open ``item_id`` now.

        Regular users are admitted by capacity, not by membership in the
        sampled list: any published item is admitted while a slot is free,
        since ``filter_visible`` resamples on every call. Guests must hold
        the item in their fixed daily allowance.
        """
        role = self.resolver.resolve_viewer(principal_id)

        if role.is_privileged:
            return True

        if role == Role.REGULAR_USER:
            return self.ledger.admits(principal_id, item_id, today or server_day_key())

        guest_today = guest_today or guest_day_key()
        self._guest_allowance(guest_today)
        return self.guest_ledger.is_allowed(item_id, guest_today)

    def record_view(
        self,
        principal_id: Optional[str],
        item_id: str,
        today: Optional[str] = None,
    ) -> RecordOutcome:
        """
        Record an article view.

        Guests are not recorded per view; their allowance is fixed up front.
        Regular users are only recorded while a slot is free.
        """
        if not principal_id:
            return RecordOutcome.NOT_TRACKED

        today = today or server_day_key()
        role = self.resolver.resolve_role(principal_id)
        if role.is_privileged:
            return self.ledger.record_view(principal_id, item_id, today)
        return self.ledger.record_if_admitted(principal_id, item_id, today)

    def quota_status(
        self,
        principal_id: Optional[str],
        today: Optional[str] = None,
        guest_today: Optional[str] = None,
    ) -> QuotaStatus:
        """Quota summary for the daily-limit banners."""
        role = self.resolver.resolve_viewer(principal_id)

        if role.is_privileged:
            return QuotaStatus(tier=role.value, is_unlimited=True, message="无限制")

        if role == Role.REGULAR_USER:
            limit = self.ledger.daily_limit
            remaining = self.ledger.remaining(principal_id, today or server_day_key())
            return QuotaStatus(
                tier=role.value,
                is_unlimited=False,
                daily_limit=limit,
                used_today=limit - remaining,
                remaining=remaining,
                message=f"今日剩余 {remaining}/{limit} 篇" if remaining > 0 else "今日阅读额度已用完，明天再来吧",
            )

        allowed = self._guest_allowance(guest_today or guest_day_key())
        limit = self.guest_ledger.daily_limit
        return QuotaStatus(
            tier=role.value,
            is_unlimited=False,
            daily_limit=limit,
            used_today=len(allowed),
            remaining=None,
            message=f"游客每日可浏览 {limit} 篇随机文章，登录后可查看更多",
        )

    def author_roles(self, items: Sequence[Any]) -> Dict[str, str]:
        """Role badge per author of ``items``; empty when articles cannot be loaded."""
        author_ids = []
        try:
            for item in items:
                article = self.content_store.get(item_id_of(item))
                if article is not None and article.author_id:
                    author_ids.append(article.author_id)
        except TransientBackendFailure as e:
            logger.error(f"Could not load article authors: {e}")
            return {}
        return {pid: role.value for pid, role in self.resolver.resolve_roles(author_ids).items()}

    def can_delete_article(self, principal_id: Optional[str], item_id: str) -> bool:
        """Delete permission for an existing article; False if it cannot be loaded."""
        try:
            item = self.content_store.get(item_id)
        except TransientBackendFailure as e:
            logger.error(f"Could not load article {item_id}: {e}")
            return False
        if item is None:
            return False
        return self.resolver.can_delete_article(principal_id, item.author_id)

    # Names used by page code
    get_visible_articles = filter_visible
    can_view_article = can_view
    record_article_view = record_view
