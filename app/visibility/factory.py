"""
Factory for creating visibility module.
"""
from .services import VisibilityService
from .routes import create_visibility_routes


def create_visibility_module(
    storage: dict,
    roles_module: dict,
    quota_module: dict,
    user_service,
    tz_offset_cookie: str = "tz_offset_min"
) -> dict:
    """Create visibility module with service and routes.
    
    Args:
        storage: Stores returned by ``create_storage_module``
        roles_module: Result of ``create_roles_module``
        quota_module: Result of ``create_quota_module``
        user_service: User service for reading the current principal
        tz_offset_cookie: Cookie holding the browser timezone offset
    
    Returns:
        Dictionary containing the service and blueprint
    """
    visibility_service = VisibilityService(
        resolver=roles_module["resolver"],
        ledger=quota_module["ledger"],
        guest_ledger=quota_module["guest_ledger"],
        content_store=storage["content"]
    )
    
    blueprint = create_visibility_routes(visibility_service, user_service, tz_offset_cookie)
    
    return {
        "service": visibility_service,
        "blueprint": blueprint
    }
