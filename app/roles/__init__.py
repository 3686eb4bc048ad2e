"""
Role tiers and capability checks.
Tiers: Admin > Second Admin > Editor > Regular User > Guest.
"""

from .models import Role, Capabilities
from .resolver import RoleResolver
from .permissions import (
    can_publish,
    can_moderate,
    can_set_second_admin,
    can_act_on,
    can_delete_article,
    capabilities_for,
)

__all__ = [
    "Role",
    "Capabilities",
    "RoleResolver",
    "can_publish",
    "can_moderate",
    "can_set_second_admin",
    "can_act_on",
    "can_delete_article",
    "capabilities_for",
]
