"""
Origin-based access denial, checked before any other logic.
"""

import logging
from typing import List, Mapping, Optional

from app.errors import TransientBackendFailure
from app.storage.protocols import BannedOriginStore

from .models import BanCheckResult, DEFAULT_ORIGIN_HEADERS, UNKNOWN_ORIGIN

logger = logging.getLogger(__name__)


class BanGate:
    """
    Exact-match origin denylist.

    The gate fails open: if the denylist cannot be read the request is let
    through and the failure is logged.
    """

    def __init__(self, store: BannedOriginStore, origin_headers: Optional[List[str]] = None):
        self.store = store
        self.origin_headers = origin_headers or list(DEFAULT_ORIGIN_HEADERS)

    def client_origin(self, headers: Mapping[str, str], remote_addr: Optional[str] = None) -> str:
        """Get client origin from the first non-empty forwarding header."""
        for name in self.origin_headers:
            value = headers.get(name)
            if not value:
                continue
            # X-Forwarded-For carries a chain; the client is the first hop
            value = value.split(",")[0].strip()
            if value:
                return value
        return remote_addr or UNKNOWN_ORIGIN

    def is_origin_banned(self, origin: Optional[str]) -> BanCheckResult:
        if not origin or origin == UNKNOWN_ORIGIN:
            return BanCheckResult(banned=False, origin=UNKNOWN_ORIGIN)

        try:
            ban = self.store.find(origin)
        except TransientBackendFailure as e:
            logger.error(f"Ban lookup failed for {origin}, failing open: {e}")
            return BanCheckResult(banned=False, origin=origin, checked=False)

        if ban is None:
            return BanCheckResult(banned=False, origin=origin)

        logger.info(f"Blocked banned origin: {origin}")
        return BanCheckResult(banned=True, origin=origin, reason=ban.reason)
