"""
Data models for the ban gate.
"""

from dataclasses import dataclass
from typing import Optional

UNKNOWN_ORIGIN = "unknown"

DEFAULT_ORIGIN_HEADERS = [
    "X-Forwarded-For",
    "CF-Connecting-IP",
    "X-Real-IP",
    "True-Client-IP",
]


@dataclass
class BanCheckResult:
    """Result of an origin ban lookup."""
    banned: bool
    origin: str = UNKNOWN_ORIGIN
    reason: Optional[str] = None
    checked: bool = True  # False when the lookup failed and the gate failed open

    def to_dict(self) -> dict:
        return {
            "banned": self.banned,
            "origin": self.origin,
            "reason": self.reason,
        }
