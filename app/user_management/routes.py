"""
User management routes for sessions, registration and account deletion.
"""
from flask import Blueprint, request, jsonify, make_response
from .models import UID_COOKIE
from .services import UserService


def create_user_routes(user_service: UserService) -> Blueprint:
    """Create user management routes."""
    bp = Blueprint('user_management', __name__)

    @bp.route("/set_user", methods=["POST"])
    def set_user():
        """Set user ID and create session."""
        uid = request.form.get("uid", "").strip()
        return user_service.create_user_session(uid)

    @bp.route("/api/me", methods=["GET"])
    def me():
        """Role and capabilities of the current viewer."""
        uid = user_service.get_current_user_id()
        return jsonify(user_service.current_user(uid).to_dict())

    @bp.route("/api/register", methods=["POST"])
    def register():
        """Register the current user, optionally asking for editor rights."""
        uid, error = user_service.require_auth_json()
        if error:
            return jsonify(error), 400

        data = request.get_json(silent=True) or {}
        profile = user_service.register_principal(
            uid,
            display_name=str(data.get("display_name", "")),
            request_editor=bool(data.get("request_editor", True)),
            origin=user_service.current_origin(),
        )
        return jsonify({"status": "ok", "profile": profile.to_dict()})

    @bp.route("/api/register/check", methods=["GET"])
    def register_check():
        """Whether the caller's network may still register an account."""
        uid = user_service.get_current_user_id()
        origin = user_service.current_origin()
        return jsonify({
            "canRegister": user_service.can_register_from(origin, uid),
            "ip": origin
        })

    @bp.route("/api/log_ip", methods=["POST"])
    def log_ip():
        """Record the caller's origin for an action."""
        uid, error = user_service.require_auth_json()
        if error:
            return jsonify(error), 400

        data = request.get_json(silent=True) or {}
        event_type = str(data.get("event_type", "other"))
        origin = user_service.current_origin()
        user_service.log_user_ip(uid, origin, event_type)
        return jsonify({"status": "ok", "ip": origin})

    @bp.route("/api/delete_account", methods=["POST"])
    def delete_account():
        """Delete own account, or another one when called by an admin."""
        uid, error = user_service.require_auth_json()
        if error:
            return jsonify(error), 400

        data = request.get_json(silent=True) or {}
        target = str(data.get("uid", "")).strip() or uid
        result = user_service.delete_account(uid, target)

        resp = make_response(jsonify(result.to_dict()))
        if target == uid:
            resp.delete_cookie(UID_COOKIE)
        return resp

    return bp
