"""
Storage collaborators for the access engine.
"""

from .models import (
    ApprovalStatus,
    RoleTag,
    Profile,
    BannedOrigin,
    ContentItem,
    RegistrationRequest,
    IpLogEntry,
)
from .factory import create_storage_module

__all__ = [
    "ApprovalStatus",
    "RoleTag",
    "Profile",
    "BannedOrigin",
    "ContentItem",
    "RegistrationRequest",
    "IpLogEntry",
    "create_storage_module",
]
