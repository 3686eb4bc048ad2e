"""
Factory for creating moderation module.
"""
from .services import ModerationService
from .routes import create_moderation_routes


def create_moderation_module(storage: dict, roles_module: dict, user_service) -> dict:
    """Create moderation module with service and routes.
    
    Args:
        storage: Stores returned by ``create_storage_module``
        roles_module: Result of ``create_roles_module``
        user_service: User service for reading the current principal
    
    Returns:
        Dictionary containing the service and blueprint
    """
    moderation_service = ModerationService(roles_module["resolver"], storage)
    
    blueprint = create_moderation_routes(moderation_service, user_service)
    
    return {
        "service": moderation_service,
        "blueprint": blueprint
    }
