"""
User management models.
"""
from dataclasses import dataclass
from typing import Optional

from app.roles.models import Capabilities
from app.storage.models import Profile

# Events whose origin is written to the IP log
IP_EVENT_TYPES = ("login", "publish", "comment", "other")

UID_COOKIE = "uid"
UID_COOKIE_MAX_AGE = 60 * 60 * 24 * 365 * 3  # 3-year cookie


@dataclass
class CurrentUser:
    """What the page needs to know about the signed-in principal."""
    principal_id: Optional[str]
    capabilities: Capabilities
    profile: Optional[Profile] = None

    @property
    def is_authenticated(self) -> bool:
        return bool(self.principal_id)

    def to_dict(self) -> dict:
        return {
            "uid": self.principal_id,
            "authenticated": self.is_authenticated,
            "display_name": self.profile.display_name if self.profile else None,
            "status": self.profile.status.value if self.profile else None,
            **self.capabilities.to_dict(),
        }
