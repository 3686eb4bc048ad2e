"""
Row types for the storage collaborators.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional


class ApprovalStatus(Enum):
    """Approval status stored on a principal's profile."""
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    BANNED = "banned"
    USER = "user"        # Registered without asking for editor rights

    @classmethod
    def parse(cls, value: Optional[str]) -> "ApprovalStatus":
        try:
            return cls(value)
        except ValueError:
            return cls.USER


class RoleTag(Enum):
    """Elevated role rows stored in the role-assignment table."""
    ADMIN = "admin"
    SECOND_ADMIN = "second_admin"


def _now() -> str:
    return datetime.now().astimezone().isoformat(timespec="seconds")


@dataclass
class Profile:
    """Authenticated principal's profile row."""
    principal_id: str
    display_name: str = ""
    status: ApprovalStatus = ApprovalStatus.PENDING
    avatar_url: Optional[str] = None
    last_login_ip: Optional[str] = None
    created_at: str = field(default_factory=_now)

    def to_dict(self) -> dict:
        return {
            "principal_id": self.principal_id,
            "display_name": self.display_name,
            "status": self.status.value,
            "avatar_url": self.avatar_url,
            "last_login_ip": self.last_login_ip,
            "created_at": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Profile":
        return cls(
            principal_id=data["principal_id"],
            display_name=data.get("display_name", ""),
            status=ApprovalStatus.parse(data.get("status")),
            avatar_url=data.get("avatar_url"),
            last_login_ip=data.get("last_login_ip"),
            created_at=data.get("created_at") or _now(),
        )


@dataclass
class BannedOrigin:
    """Denylisted network origin."""
    origin: str
    reason: Optional[str] = None
    banned_by: Optional[str] = None
    created_at: str = field(default_factory=_now)

    def to_dict(self) -> dict:
        return {
            "origin": self.origin,
            "reason": self.reason,
            "banned_by": self.banned_by,
            "created_at": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "BannedOrigin":
        return cls(
            origin=data["origin"],
            reason=data.get("reason"),
            banned_by=data.get("banned_by"),
            created_at=data.get("created_at") or _now(),
        )


@dataclass
class ContentItem:
    """Article as seen by the access engine."""
    id: str
    published: bool = True
    author_id: Optional[str] = None
    title: str = ""

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "published": self.published,
            "author_id": self.author_id,
            "title": self.title,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ContentItem":
        return cls(
            id=str(data["id"]),
            published=bool(data.get("published", True)),
            author_id=data.get("author_id"),
            title=data.get("title", ""),
        )


@dataclass
class RegistrationRequest:
    """Editor registration request awaiting review."""
    principal_id: str
    display_name: str = ""
    status: ApprovalStatus = ApprovalStatus.PENDING
    created_at: str = field(default_factory=_now)
    reviewed_at: Optional[str] = None
    reviewed_by: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "principal_id": self.principal_id,
            "display_name": self.display_name,
            "status": self.status.value,
            "created_at": self.created_at,
            "reviewed_at": self.reviewed_at,
            "reviewed_by": self.reviewed_by,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "RegistrationRequest":
        return cls(
            principal_id=data["principal_id"],
            display_name=data.get("display_name", ""),
            status=ApprovalStatus.parse(data.get("status")),
            created_at=data.get("created_at") or _now(),
            reviewed_at=data.get("reviewed_at"),
            reviewed_by=data.get("reviewed_by"),
        )


@dataclass
class IpLogEntry:
    """Network origin observed for a principal action."""
    principal_id: str
    ip: str
    event_type: str = "other"  # "login", "publish", "comment", "other"
    created_at: str = field(default_factory=_now)

    def to_dict(self) -> dict:
        return {
            "principal_id": self.principal_id,
            "ip": self.ip,
            "event_type": self.event_type,
            "created_at": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "IpLogEntry":
        return cls(
            principal_id=data["principal_id"],
            ip=data["ip"],
            event_type=data.get("event_type", "other"),
            created_at=data.get("created_at") or _now(),
        )


@dataclass
class IpRegistration:
    """Network origin that has already been used to register an account."""
    origin: str
    principal_id: str
    created_at: str = field(default_factory=_now)

    def to_dict(self) -> dict:
        return {
            "origin": self.origin,
            "principal_id": self.principal_id,
            "created_at": self.created_at,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "IpRegistration":
        return cls(
            origin=data["origin"],
            principal_id=data["principal_id"],
            created_at=data.get("created_at") or _now(),
        )
