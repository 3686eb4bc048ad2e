"""
Moderation services: registration review, principal bans, second-admin
management, origin bans and article deletion.

Every entry point checks the actor's tier before touching storage and raises
``Unauthorized`` instead of silently doing nothing.
"""

import ipaddress
import logging
from datetime import datetime
from typing import List, Optional

from app.errors import InvalidRequest, InvalidTransition, NotFound, Unauthorized
from app.roles.models import Role
from app.roles.permissions import (
    can_act_on,
    can_delete_article,
    can_moderate,
    can_set_second_admin,
)
from app.roles.resolver import RoleResolver
from app.ban_gate.models import UNKNOWN_ORIGIN
from app.storage.models import (
    ApprovalStatus,
    BannedOrigin,
    IpLogEntry,
    Profile,
    RegistrationRequest,
    RoleTag,
)

from .models import ModerationAction, ModerationResult, STATUS_TRANSITIONS

logger = logging.getLogger(__name__)


class ModerationService:
    """Role-gated mutations of the data the role resolver and ban gate read."""

    def __init__(self, resolver: RoleResolver, storage: dict):
        """
        Args:
            resolver: Role resolver used for actor and target tiers
            storage: Stores returned by ``create_storage_module``
        """
        self.resolver = resolver
        self.roles = storage["roles"]
        self.profiles = storage["profiles"]
        self.registrations = storage["registrations"]
        self.banned_origins = storage["banned_origins"]
        self.content = storage["content"]
        self.ip_logs = storage["ip_logs"]

    # =====================
    # Permission helpers
    # =====================

    def _require_moderator(self, actor_id: Optional[str]) -> Role:
        role = self.resolver.resolve_viewer(actor_id)
        if not can_moderate(role):
            logger.warning(f"Denied moderation for {actor_id} ({role.value})")
            raise Unauthorized("需要管理员权限")
        return role

    def _require_admin(self, actor_id: Optional[str]) -> Role:
        role = self.resolver.resolve_viewer(actor_id)
        if not can_set_second_admin(role):
            logger.warning(f"Denied admin-only action for {actor_id} ({role.value})")
            raise Unauthorized("仅管理员可以执行此操作")
        return role

    def _get_profile(self, principal_id: str) -> Profile:
        profile = self.profiles.get(principal_id)
        if profile is None:
            raise NotFound("用户不存在")
        return profile

    # =====================
    # Principal status
    # =====================

    def _change_status(self, actor_id: Optional[str], target_id: str, action: ModerationAction) -> ModerationResult:
        actor_role = self._require_moderator(actor_id)

        # Tier check comes first so configured admins without a profile are
        # refused the same way as any other admin
        target_role = self.resolver.resolve_role(target_id)
        if not can_act_on(actor_role, target_role):
            logger.warning(f"{actor_id} ({actor_role.value}) may not {action.value} {target_id} ({target_role.value})")
            raise Unauthorized("二级管理员不能操作管理员")

        profile = self._get_profile(target_id)

        required, result = STATUS_TRANSITIONS[action]
        if profile.status != required:
            raise InvalidTransition(f"当前状态为 {profile.status.value}，无法执行 {action.value}")

        profile.status = result
        self.profiles.save(profile)
        logger.info(f"{actor_id} {action.value} {target_id}: {required.value} -> {result.value}")
        return ModerationResult(action=action, target=target_id)

    def _close_registration(self, actor_id: str, target_id: str, status: ApprovalStatus) -> None:
        request = self.registrations.latest(target_id)
        if request is None:
            return
        request.status = status
        request.reviewed_at = datetime.now().astimezone().isoformat(timespec="seconds")
        request.reviewed_by = actor_id
        self.registrations.save(request)

    def approve_registration(self, actor_id: Optional[str], target_id: str) -> ModerationResult:
        result = self._change_status(actor_id, target_id, ModerationAction.APPROVE)
        self._close_registration(actor_id, target_id, ApprovalStatus.APPROVED)
        result.message = "已通过注册申请"
        return result

    def reject_registration(self, actor_id: Optional[str], target_id: str) -> ModerationResult:
        result = self._change_status(actor_id, target_id, ModerationAction.REJECT)
        self._close_registration(actor_id, target_id, ApprovalStatus.REJECTED)
        result.message = "已拒绝注册申请"
        return result

    def ban_principal(self, actor_id: Optional[str], target_id: str) -> ModerationResult:
        result = self._change_status(actor_id, target_id, ModerationAction.BAN)
        result.message = "已封禁该用户"
        return result

    def unban_principal(self, actor_id: Optional[str], target_id: str) -> ModerationResult:
        result = self._change_status(actor_id, target_id, ModerationAction.UNBAN)
        result.message = "已解除封禁"
        return result

    def list_pending_registrations(self, actor_id: Optional[str]) -> List[RegistrationRequest]:
        self._require_moderator(actor_id)
        return self.registrations.list_pending()

    # =====================
    # Second admin
    # =====================

    def set_second_admin(self, actor_id: Optional[str], target_id: str, enabled: bool = True) -> ModerationResult:
        """Grant or revoke the second-admin role. Admin only."""
        self._require_admin(actor_id)
        self._get_profile(target_id)

        if not enabled:
            changed = self.roles.revoke(target_id, RoleTag.SECOND_ADMIN)
            logger.info(f"{actor_id} revoked second_admin from {target_id} (changed={changed})")
            return ModerationResult(
                action=ModerationAction.REVOKE_SECOND_ADMIN,
                target=target_id,
                changed=changed,
                message="已取消二级管理员" if changed else "该用户不是二级管理员",
            )

        if RoleTag.ADMIN in self.roles.roles_for(target_id):
            raise InvalidTransition("该用户已是管理员")

        changed = self.roles.grant(target_id, RoleTag.SECOND_ADMIN)
        logger.info(f"{actor_id} granted second_admin to {target_id} (changed={changed})")
        return ModerationResult(
            action=ModerationAction.GRANT_SECOND_ADMIN,
            target=target_id,
            changed=changed,
            message="已设为二级管理员" if changed else "该用户已是二级管理员",
        )

    # =====================
    # Origin bans
    # =====================

    @staticmethod
    def _normalize_origin(origin: Optional[str]) -> str:
        origin = (origin or "").strip()
        if not origin or origin == UNKNOWN_ORIGIN:
            raise InvalidRequest("请输入IP地址")
        try:
            return str(ipaddress.ip_address(origin))
        except ValueError:
            raise InvalidRequest("请输入有效的IP地址格式")

    def ban_origin(self, actor_id: Optional[str], origin: str, reason: Optional[str] = None) -> ModerationResult:
        self._require_moderator(actor_id)
        origin = self._normalize_origin(origin)

        ban = BannedOrigin(origin=origin, reason=(reason or "").strip() or None, banned_by=actor_id)
        changed = self.banned_origins.insert(ban)
        if changed:
            logger.info(f"{actor_id} banned origin {origin}")
        return ModerationResult(
            action=ModerationAction.BAN_ORIGIN,
            target=origin,
            changed=changed,
            message=f"已封禁IP: {origin}" if changed else "该IP已被封禁",
        )

    def unban_origin(self, actor_id: Optional[str], origin: str) -> ModerationResult:
        self._require_moderator(actor_id)
        origin = self._normalize_origin(origin)

        if not self.banned_origins.delete(origin):
            raise NotFound("该IP未被封禁")
        logger.info(f"{actor_id} unbanned origin {origin}")
        return ModerationResult(
            action=ModerationAction.UNBAN_ORIGIN,
            target=origin,
            message=f"已解封IP: {origin}",
        )

    def list_banned_origins(self, actor_id: Optional[str]) -> List[BannedOrigin]:
        self._require_moderator(actor_id)
        return self.banned_origins.list_all()

    def list_user_ips(self, actor_id: Optional[str], target_id: str) -> List[IpLogEntry]:
        self._require_moderator(actor_id)
        self._get_profile(target_id)
        return self.ip_logs.list_for(target_id)

    # =====================
    # Deletion
    # =====================

    def delete_article(self, actor_id: Optional[str], article_id: str) -> ModerationResult:
        article = self.content.get(article_id)
        if article is None:
            raise NotFound("文章不存在")

        actor_role = self.resolver.resolve_viewer(actor_id)
        author_role = self.resolver.resolve_viewer(article.author_id)
        if not can_delete_article(actor_role, actor_id, article.author_id, author_role):
            raise Unauthorized("无权删除该文章")

        self.content.delete(article_id)
        logger.info(f"{actor_id} deleted article {article_id} by {article.author_id}")
        return ModerationResult(
            action=ModerationAction.DELETE_ARTICLE,
            target=article_id,
            message="文章已删除",
        )

