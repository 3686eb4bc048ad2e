"""
Data models for moderation actions.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from app.storage.models import ApprovalStatus


class ModerationAction(Enum):
    """Role-gated mutations."""
    APPROVE = "approve"
    REJECT = "reject"
    BAN = "ban"
    UNBAN = "unban"
    GRANT_SECOND_ADMIN = "grant_second_admin"
    REVOKE_SECOND_ADMIN = "revoke_second_admin"
    BAN_ORIGIN = "ban_origin"
    UNBAN_ORIGIN = "unban_origin"
    DELETE_ARTICLE = "delete_article"
    DELETE_ACCOUNT = "delete_account"


# action -> (required current status, resulting status)
STATUS_TRANSITIONS = {
    ModerationAction.APPROVE: (ApprovalStatus.PENDING, ApprovalStatus.APPROVED),
    ModerationAction.REJECT: (ApprovalStatus.PENDING, ApprovalStatus.REJECTED),
    ModerationAction.BAN: (ApprovalStatus.APPROVED, ApprovalStatus.BANNED),
    ModerationAction.UNBAN: (ApprovalStatus.BANNED, ApprovalStatus.APPROVED),
}


@dataclass
class ModerationResult:
    """Outcome of a moderation action that passed its permission check."""
    action: ModerationAction
    target: str
    changed: bool = True  # False when the target was already in the requested state
    message: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "status": "ok",
            "action": self.action.value,
            "target": self.target,
            "changed": self.changed,
            "message": self.message
        }
