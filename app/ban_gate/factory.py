"""
Factory for creating the ban gate module.
"""

from typing import List

from .services import BanGate
from .routes import create_ban_gate_blueprint


def create_ban_gate_module(storage: dict, origin_headers: List[str] = None) -> dict:
    """Create ban gate module with service and routes.

    Args:
        storage: Stores returned by ``create_storage_module``
        origin_headers: Forwarding headers to read the client origin from, in priority order

    Returns:
        Dictionary containing the service and blueprint
    """
    ban_gate = BanGate(storage["banned_origins"], origin_headers)

    blueprint = create_ban_gate_blueprint(ban_gate)

    return {
        "service": ban_gate,
        "blueprint": blueprint
    }
