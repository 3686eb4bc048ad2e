"""
Origin ban gate. Fails open when the denylist is unavailable.
"""

from .models import BanCheckResult, UNKNOWN_ORIGIN
from .services import BanGate

__all__ = ["BanCheckResult", "BanGate", "UNKNOWN_ORIGIN"]
