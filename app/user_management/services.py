"""
User management services for sessions, registration and account lifecycle.
"""
import logging
from typing import Optional

from flask import request, make_response, redirect

from app.errors import InvalidRequest, InvalidTransition, NotFound, Unauthorized
from app.moderation.models import ModerationAction, ModerationResult
from app.ban_gate.models import UNKNOWN_ORIGIN
from app.roles.models import Role
from app.roles.resolver import RoleResolver
from app.storage.models import ApprovalStatus, IpLogEntry, IpRegistration, Profile, RegistrationRequest
from .models import CurrentUser, IP_EVENT_TYPES, UID_COOKIE, UID_COOKIE_MAX_AGE

logger = logging.getLogger(__name__)


class UserService:
    """Service for the signed-in principal and their account."""

    def __init__(self, storage: dict, resolver: RoleResolver, ban_gate):
        """
        Args:
            storage: Stores returned by ``create_storage_module``
            resolver: Role resolver for capabilities and admin checks
            ban_gate: Ban gate, used to read the caller's origin
        """
        self.storage = storage
        self.profiles = storage["profiles"]
        self.resolver = resolver
        self.ban_gate = ban_gate

    def get_current_user_id(self) -> Optional[str]:
        """Get the current user ID from cookies."""
        uid = request.cookies.get(UID_COOKIE)
        return uid.strip() if uid and uid.strip() else None

    def is_authenticated(self) -> bool:
        """Check if the current user is authenticated."""
        return bool(self.get_current_user_id())

    def require_auth_json(self) -> tuple[Optional[str], Optional[dict]]:
        """Require authentication for JSON endpoints, return error if not authenticated."""
        uid = self.get_current_user_id()
        if not uid:
            return None, {"error": "no-uid", "message": "请先登录"}
        return uid, None

    def current_origin(self) -> str:
        return self.ban_gate.client_origin(request.headers, request.remote_addr)

    def current_user(self, uid: Optional[str]) -> CurrentUser:
        """Role, capabilities and profile of ``uid`` (guest when None)."""
        profile = self.profiles.get(uid) if uid else None
        return CurrentUser(
            principal_id=uid,
            capabilities=self.resolver.capabilities(uid),
            profile=profile,
        )

    def create_user_session(self, uid: str, redirect_url: str = "/"):
        """Set the uid cookie and record the login origin."""
        uid = (uid or "").strip()
        if not uid:
            return redirect(redirect_url)

        self.log_user_ip(uid, self.current_origin(), "login")

        resp = make_response(redirect(redirect_url))
        resp.set_cookie(UID_COOKIE, uid, max_age=UID_COOKIE_MAX_AGE)
        return resp

    def can_register_from(self, origin: Optional[str], uid: Optional[str] = None) -> bool:
        """
        Whether ``origin`` is still free for a new account.

        Each network origin may register one account; the principal already
        holding it may register again. Unresolvable origins are not tracked.
        """
        if not origin or origin == UNKNOWN_ORIGIN:
            return True
        held = self.storage["ip_registrations"].find(origin)
        return held is None or held.principal_id == uid

    def register_principal(
        self,
        uid: str,
        display_name: str = "",
        request_editor: bool = True,
        origin: Optional[str] = None
    ) -> Profile:
        """
        Create or re-open the profile for ``uid``.

        With ``request_editor`` the profile goes to ``pending`` and a
        registration request is filed for moderators. Without it the profile
        is a plain ``user`` and nothing needs review. Banned principals and
        those with a request under review cannot register again, and an
        origin already used by another account is refused.
        """
        display_name = (display_name or "").strip() or uid
        profile = self.profiles.get(uid)

        if profile is not None:
            if profile.status == ApprovalStatus.BANNED:
                raise Unauthorized("账户已被封禁")
            if profile.status == ApprovalStatus.PENDING:
                raise InvalidTransition("注册申请正在审核中")
            if profile.status == ApprovalStatus.APPROVED:
                raise InvalidTransition("已是认证编辑")
            profile.display_name = display_name
        else:
            profile = Profile(principal_id=uid, display_name=display_name, status=ApprovalStatus.USER)

        if origin and origin != UNKNOWN_ORIGIN:
            claimed = self.storage["ip_registrations"].claim(IpRegistration(origin=origin, principal_id=uid))
            if not claimed:
                logger.warning(f"Registration of {uid} refused: origin {origin} already registered")
                raise Unauthorized("该网络已注册过账户")

        if request_editor:
            profile.status = ApprovalStatus.PENDING
            self.storage["registrations"].save(
                RegistrationRequest(principal_id=uid, display_name=display_name)
            )

        self.profiles.save(profile)
        logger.info(f"Registered {uid} with status {profile.status.value}")
        return profile

    def log_user_ip(self, uid: str, ip: str, event_type: str = "other") -> None:
        """Append to the IP log and remember the last login origin."""
        if event_type not in IP_EVENT_TYPES:
            raise InvalidRequest(f"未知事件类型: {event_type}")

        self.storage["ip_logs"].append(IpLogEntry(principal_id=uid, ip=ip, event_type=event_type))

        if event_type == "login":
            profile = self.profiles.get(uid)
            if profile is not None:
                profile.last_login_ip = ip
                self.profiles.save(profile)

    def delete_account(self, actor_id: Optional[str], target_id: Optional[str] = None) -> ModerationResult:
        """
        Delete a principal and everything keyed by it.

        Principals may delete themselves; admins may delete others but not
        themselves.
        """
        if not actor_id:
            raise Unauthorized("未登录")
        target_id = target_id or actor_id

        is_admin = self.resolver.resolve_role(actor_id) == Role.ADMIN
        if not is_admin and actor_id != target_id:
            raise Unauthorized("无权限删除其他用户")
        if is_admin and actor_id == target_id:
            raise Unauthorized("管理员不能删除自己的账户")

        if self.profiles.get(target_id) is None:
            raise NotFound("用户不存在")

        removed_articles = self.storage["content"].delete_by_author(target_id)
        self.storage["registrations"].delete_principal(target_id)
        self.storage["roles"].delete_principal(target_id)
        self.storage["view_records"].delete_principal(target_id)
        self.storage["ip_logs"].delete_principal(target_id)
        self.storage["ip_registrations"].delete_principal(target_id)
        self.profiles.delete(target_id)

        logger.info(f"{actor_id} deleted account {target_id} ({removed_articles} articles)")
        return ModerationResult(
            action=ModerationAction.DELETE_ACCOUNT,
            target=target_id,
            message="账户已删除",
        )
