"""
Moderation routes for admins and second admins.

Permission checks happen in ``ModerationService``; ``AccessError`` raised
there is turned into a JSON error response by the application error handler.
"""
from flask import Blueprint, request, jsonify

from .services import ModerationService


def create_moderation_routes(moderation_service: ModerationService, user_service) -> Blueprint:
    """Create moderation routes."""
    bp = Blueprint('moderation', __name__, url_prefix='/admin/api')

    def form_value(name: str, default: str = "") -> str:
        data = request.get_json(silent=True) or {}
        value = data.get(name, request.form.get(name, default))
        return str(value).strip() if value is not None else default

    @bp.route("/registrations", methods=["GET"])
    def pending_registrations():
        """List registration requests awaiting review."""
        uid = user_service.get_current_user_id()
        requests = moderation_service.list_pending_registrations(uid)
        return jsonify([r.to_dict() for r in requests])

    @bp.route("/registrations/<target_id>/approve", methods=["POST"])
    def approve_registration(target_id):
        uid = user_service.get_current_user_id()
        return jsonify(moderation_service.approve_registration(uid, target_id).to_dict())

    @bp.route("/registrations/<target_id>/reject", methods=["POST"])
    def reject_registration(target_id):
        uid = user_service.get_current_user_id()
        return jsonify(moderation_service.reject_registration(uid, target_id).to_dict())

    @bp.route("/users/<target_id>/ban", methods=["POST"])
    def ban_user(target_id):
        uid = user_service.get_current_user_id()
        return jsonify(moderation_service.ban_principal(uid, target_id).to_dict())

    @bp.route("/users/<target_id>/unban", methods=["POST"])
    def unban_user(target_id):
        uid = user_service.get_current_user_id()
        return jsonify(moderation_service.unban_principal(uid, target_id).to_dict())

    @bp.route("/users/<target_id>/second_admin", methods=["POST", "DELETE"])
    def second_admin(target_id):
        """POST grants the second-admin role, DELETE revokes it."""
        uid = user_service.get_current_user_id()
        enabled = request.method == "POST"
        return jsonify(moderation_service.set_second_admin(uid, target_id, enabled).to_dict())

    @bp.route("/users/<target_id>/ips", methods=["GET"])
    def user_ips(target_id):
        """Origins recorded for a user."""
        uid = user_service.get_current_user_id()
        entries = moderation_service.list_user_ips(uid, target_id)
        return jsonify([e.to_dict() for e in entries])

    @bp.route("/banned_ips", methods=["GET"])
    def banned_ips():
        uid = user_service.get_current_user_id()
        bans = moderation_service.list_banned_origins(uid)
        return jsonify([b.to_dict() for b in bans])

    @bp.route("/banned_ips", methods=["POST"])
    def ban_ip():
        uid = user_service.get_current_user_id()
        result = moderation_service.ban_origin(uid, form_value("ip"), form_value("reason"))
        return jsonify(result.to_dict())

    @bp.route("/banned_ips/<origin>", methods=["DELETE"])
    def unban_ip(origin):
        uid = user_service.get_current_user_id()
        return jsonify(moderation_service.unban_origin(uid, origin).to_dict())

    @bp.route("/articles/<article_id>", methods=["DELETE"])
    def delete_article(article_id):
        uid = user_service.get_current_user_id()
        return jsonify(moderation_service.delete_article(uid, article_id).to_dict())

    return bp
