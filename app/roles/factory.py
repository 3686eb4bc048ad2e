"""
Factory for creating the role resolver.
"""

import logging
from typing import List

from app.storage.models import RoleTag

from .resolver import RoleResolver

logger = logging.getLogger(__name__)


def create_roles_module(storage: dict, bootstrap_admin_ids: List[str] = None) -> dict:
    """
    Create the role resolver and seed bootstrap admins.

    Args:
        storage: Stores returned by ``create_storage_module``
        bootstrap_admin_ids: Principal ids that always hold the admin role

    Returns:
        Dictionary with:
        - resolver: RoleResolver instance
    """
    for uid in bootstrap_admin_ids or []:
        uid = uid.strip()
        if not uid:
            continue
        if storage["roles"].grant(uid, RoleTag.ADMIN):
            logger.info(f"Seeded bootstrap admin: {uid}")
        storage["roles"].revoke(uid, RoleTag.SECOND_ADMIN)

    resolver = RoleResolver(
        role_store=storage["roles"],
        profile_store=storage["profiles"],
    )

    return {
        "resolver": resolver,
    }
