"""
Role resolution from role-assignment rows and profile approval status.
"""

import logging
from typing import Dict, Iterable, Optional

from app.errors import TransientBackendFailure
from app.storage.models import ApprovalStatus, RoleTag
from app.storage.protocols import ProfileStore, RoleStore

from .models import Capabilities, Role
from .permissions import can_delete_article, capabilities_for

logger = logging.getLogger(__name__)


class RoleResolver:
    """
    Resolves the highest role tier of a principal.

    Precedence is strict: ``admin`` row, then ``second_admin`` row, then an
    ``approved`` profile (editor), otherwise regular user. Anonymous callers
    are guests and never reach the stores.
    """

    def __init__(self, role_store: RoleStore, profile_store: ProfileStore):
        self.role_store = role_store
        self.profile_store = profile_store

    def resolve_role(self, principal_id: str) -> Role:
        """Resolve an authenticated principal. Never raises."""
        try:
            tags = self.role_store.roles_for(principal_id)
            if RoleTag.ADMIN in tags:
                return Role.ADMIN
            if RoleTag.SECOND_ADMIN in tags:
                return Role.SECOND_ADMIN

            profile = self.profile_store.get(principal_id)
            if profile and profile.status == ApprovalStatus.APPROVED:
                return Role.EDITOR
        except TransientBackendFailure as e:
            logger.error(f"Role lookup failed for {principal_id}: {e}")

        return Role.REGULAR_USER

    def resolve_viewer(self, principal_id: Optional[str]) -> Role:
        """Like ``resolve_role`` but maps a missing principal to ``GUEST``."""
        if not principal_id:
            return Role.GUEST
        return self.resolve_role(principal_id)

    def resolve_roles(self, principal_ids: Iterable[str]) -> Dict[str, Role]:
        """
        Resolve many principals at once, e.g. for author badges.

        Uses a single privileged-role query; principals without an elevated
        row fall back to their profile status.
        """
        ids = list(dict.fromkeys(pid for pid in principal_ids if pid))
        try:
            privileged = self.role_store.all_privileged()
        except TransientBackendFailure as e:
            logger.error(f"Bulk role lookup failed: {e}")
            return {pid: Role.REGULAR_USER for pid in ids}

        roles = {}
        for pid in ids:
            tags = privileged.get(pid, [])
            if RoleTag.ADMIN in tags:
                roles[pid] = Role.ADMIN
            elif RoleTag.SECOND_ADMIN in tags:
                roles[pid] = Role.SECOND_ADMIN
            else:
                roles[pid] = self.resolve_role(pid)
        return roles

    def capabilities(self, principal_id: Optional[str]) -> Capabilities:
        return capabilities_for(self.resolve_viewer(principal_id))

    def can_publish(self, principal_id: Optional[str]) -> bool:
        return self.capabilities(principal_id).can_publish

    def can_moderate(self, principal_id: Optional[str]) -> bool:
        return self.capabilities(principal_id).can_moderate

    def can_delete_article(self, principal_id: Optional[str], author_id: Optional[str]) -> bool:
        actor_role = self.resolve_viewer(principal_id)
        author_role = self.resolve_viewer(author_id)
        return can_delete_article(actor_role, principal_id, author_id, author_role)
