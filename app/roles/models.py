"""
Role tiers for access control.
"""

from dataclasses import dataclass
from enum import Enum
from functools import total_ordering


@total_ordering
class Role(Enum):
    """Viewer tiers in strict seniority order."""
    GUEST = "guest"                  # No principal
    REGULAR_USER = "regular_user"    # Logged in, daily quota applies
    EDITOR = "editor"                # Approved profile, may publish
    SECOND_ADMIN = "second_admin"    # Moderator, cannot touch admins
    ADMIN = "admin"                  # Full control

    @property
    def rank(self) -> int:
        return _RANKS[self]

    def __lt__(self, other):
        if not isinstance(other, Role):
            return NotImplemented
        return self.rank < other.rank

    @property
    def is_privileged(self) -> bool:
        """Roles above regular user see every article."""
        return self > Role.REGULAR_USER


_RANKS = {
    Role.GUEST: 0,
    Role.REGULAR_USER: 1,
    Role.EDITOR: 2,
    Role.SECOND_ADMIN: 3,
    Role.ADMIN: 4,
}


@dataclass
class Capabilities:
    """What a principal may do, for UI display."""
    role: Role
    can_publish: bool
    can_moderate: bool
    can_set_second_admin: bool
    unlimited_viewing: bool

    def to_dict(self) -> dict:
        return {
            "role": self.role.value,
            "can_publish": self.can_publish,
            "can_moderate": self.can_moderate,
            "can_set_second_admin": self.can_set_second_admin,
            "unlimited_viewing": self.unlimited_viewing,
        }
