"""
Visibility filter combining role tiers with the daily quota ledgers.
"""

from .services import VisibilityService, item_id_of

__all__ = ["VisibilityService", "item_id_of"]
