import argparse
import logging
from datetime import timedelta
from pathlib import Path
from typing import List, Optional

# Import configuration management
import sys
sys.path.append(str(Path(__file__).parent.parent))
from config_manager import AccessConfig, ConfigManager

from flask import Flask, jsonify
from werkzeug.middleware.proxy_fix import ProxyFix

from app.errors import AccessError, http_status_for
from app.storage.factory import create_storage_module
from app.roles.factory import create_roles_module
from app.ban_gate.factory import create_ban_gate_module
from app.ban_gate.routes import install_ban_hook
from app.quota.factory import create_quota_module
from app.user_management.factory import create_user_management_module
from app.visibility.factory import create_visibility_module
from app.moderation.factory import create_moderation_module

logger = logging.getLogger(__name__)

HEALTH_PATH = "/actuator/health"


def create_app(
    data_dir: Optional[Path] = None,
    admin_user_ids: Optional[List[str]] = None,
    access_config: Optional[AccessConfig] = None,
    secret_key: Optional[str] = None,
    guest_store=None,
    rng=None,
) -> Flask:
    """
    Build the Flask app and wire every access subsystem.

    Arguments left as None are read from ``web_app_config.json`` and the
    environment.
    """
    config_manager = ConfigManager()
    app_config = config_manager.get_app_config()
    paths_config = config_manager.get_paths_config()
    access_config = access_config or config_manager.get_access_config()

    if data_dir is None:
        data_dir = Path(__file__).parent.parent / paths_config.data_dir
    if admin_user_ids is None:
        admin_user_ids = app_config.admin_user_ids

    app = Flask(__name__)
    app.wsgi_app = ProxyFix(
            app.wsgi_app,
            x_proto = 1,     # trust 1 hop for X-Forwarded-Proto
            x_host  = 1,     # trust 1 hop for X-Forwarded-Host
            x_prefix= 1)     # <-- pay attention to X-Forwarded-Prefix
    app.secret_key = secret_key or app_config.secret_key
    # Guest allowance lives in the session; it only has to outlive one day
    app.permanent_session_lifetime = timedelta(days=2)

    # -------------------------------------------------------------------------
    # Subsystems
    # -------------------------------------------------------------------------

    storage = create_storage_module(Path(data_dir))
    roles_module = create_roles_module(storage, admin_user_ids)
    ban_gate_module = create_ban_gate_module(storage, access_config.origin_headers)
    quota_module = create_quota_module(
        storage,
        daily_view_limit=access_config.daily_view_limit,
        guest_daily_limit=access_config.guest_daily_limit,
        guest_store=guest_store,
        rng=rng,
    )
    user_management_module = create_user_management_module(storage, roles_module, ban_gate_module)
    user_service = user_management_module["service"]
    visibility_module = create_visibility_module(
        storage,
        roles_module,
        quota_module,
        user_service,
        tz_offset_cookie=access_config.tz_offset_cookie,
    )
    moderation_module = create_moderation_module(storage, roles_module, user_service)

    # The ban check runs before every other hook and view
    install_ban_hook(app, ban_gate_module["service"], exempt_paths=[HEALTH_PATH])

    app.register_blueprint(ban_gate_module["blueprint"])
    app.register_blueprint(user_management_module["blueprint"])
    app.register_blueprint(visibility_module["blueprint"])
    app.register_blueprint(moderation_module["blueprint"])

    app.extensions["access"] = {
        "storage": storage,
        "resolver": roles_module["resolver"],
        "ban_gate": ban_gate_module["service"],
        "ledger": quota_module["ledger"],
        "guest_ledger": quota_module["guest_ledger"],
        "user_service": user_service,
        "visibility": visibility_module["service"],
        "moderation": moderation_module["service"],
    }

    @app.errorhandler(AccessError)
    def handle_access_error(e: AccessError):
        return jsonify(e.to_dict()), http_status_for(e)

    @app.get(HEALTH_PATH)
    def actuator_health():
        """Health check endpoint for monitoring tools and cloud platforms."""
        return jsonify({
            "status": "UP",
            "service": "class-wiki-access"
        }), 200

    logger.info(f"Access engine ready (data: {data_dir}, limit: {access_config.daily_view_limit}/day)")
    return app


app = create_app()

# -----------------------------------------------------------------------------
# Entry point
# -----------------------------------------------------------------------------

if __name__ == "__main__":
    from config_manager import get_app_config
    from app.logging_config import setup_logging

    # Parse command line arguments
    parser = argparse.ArgumentParser(description="Flask application for the class wiki access engine")
    parser.add_argument("--port", type=int, help="Port to run the server on")
    parser.add_argument("--host", type=str, help="Host to bind the server to")
    parser.add_argument("--debug", action="store_true", help="Enable debug mode")
    args = parser.parse_args()

    app_config = get_app_config()
    
    # Override configuration with command line arguments
    if args.port:
        app_config.port = args.port
    if args.host:
        app_config.host = args.host
    if args.debug:
        app_config.debug = args.debug

    setup_logging(app_config.debug)
    print(f"📋 Configuration loaded:")
    print(f"   - Admins: {len(app_config.admin_user_ids)}")
    print(f"   - Server: {app_config.host}:{app_config.port}")
    app.run(
        host=app_config.host, 
        port=app_config.port, 
        debug=app_config.debug
    )
