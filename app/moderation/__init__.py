"""
Role-gated moderation actions.
"""

from .models import ModerationAction, ModerationResult, STATUS_TRANSITIONS
from .services import ModerationService

__all__ = ["ModerationAction", "ModerationResult", "STATUS_TRANSITIONS", "ModerationService"]
