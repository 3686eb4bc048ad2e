"""
Factory for creating user management module.
"""
from .services import UserService
from .routes import create_user_routes


def create_user_management_module(storage: dict, roles_module: dict, ban_gate_module: dict) -> dict:
    """Create user management module with service and routes.
    
    Args:
        storage: Stores returned by ``create_storage_module``
        roles_module: Result of ``create_roles_module``
        ban_gate_module: Result of ``create_ban_gate_module``
    
    Returns:
        Dictionary containing the service and blueprint
    """
    user_service = UserService(storage, roles_module["resolver"], ban_gate_module["service"])
    
    blueprint = create_user_routes(user_service)
    
    return {
        "service": user_service,
        "blueprint": blueprint
    }
