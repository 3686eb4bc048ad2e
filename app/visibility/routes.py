"""
Visibility routes for article lists, article access and view recording.
"""

from flask import Blueprint, request, jsonify

from app.quota.day_keys import guest_day_key, parse_tz_offset
from app.quota.models import RecordOutcome
from .services import VisibilityService


def create_visibility_routes(
    visibility_service: VisibilityService,
    user_service,
    tz_offset_cookie: str = "tz_offset_min",
) -> Blueprint:
    """Create visibility routes."""
    bp = Blueprint('visibility', __name__)

    def current_guest_day() -> str:
        """Visitor's local date from the browser timezone cookie."""
        return guest_day_key(parse_tz_offset(request.cookies.get(tz_offset_cookie)))

    @bp.route("/api/articles/visible", methods=["POST"])
    def visible_articles():
        """Filter a candidate article list for the current viewer."""
        uid = user_service.get_current_user_id()
        data = request.get_json(silent=True) or {}
        candidates = data.get("candidates")
        if candidates is None:
            candidates = visibility_service.published_ids()
        if not isinstance(candidates, list):
            return jsonify({"error": "invalid_request", "message": "candidates 必须是列表"}), 400

        guest_today = current_guest_day()
        visible = visibility_service.filter_visible(uid, candidates, guest_today=guest_today)
        status = visibility_service.quota_status(uid, guest_today=guest_today)
        return jsonify({
            "visible": visible,
            "author_roles": visibility_service.author_roles(visible),
            "quota": status.to_dict()
        })

    @bp.route("/api/articles/<item_id>/access", methods=["GET"])
    def article_access(item_id):
        """Whether the current viewer may open and delete an article."""
        uid = user_service.get_current_user_id()
        can_view = visibility_service.can_view(uid, item_id, guest_today=current_guest_day())

        can_delete = visibility_service.can_delete_article(uid, item_id)

        return jsonify({
            "item_id": item_id,
            "can_view": can_view,
            "can_delete": can_delete
        })

    @bp.route("/api/articles/<item_id>/view", methods=["POST"])
    def record_article_view(item_id):
        """Record that the current viewer opened an article."""
        uid = user_service.get_current_user_id()
        outcome = visibility_service.record_view(uid, item_id)

        if outcome == RecordOutcome.DENIED:
            return jsonify({
                "status": outcome.value,
                "message": "今日阅读额度已用完，明天再来吧"
            }), 403
        if outcome == RecordOutcome.FAILED:
            return jsonify({
                "status": outcome.value,
                "message": "服务暂时不可用，请稍后再试"
            }), 503
        return jsonify({"status": outcome.value})

    @bp.route("/api/quota", methods=["GET"])
    def quota_status():
        """Daily quota summary for the current viewer."""
        uid = user_service.get_current_user_id()
        status = visibility_service.quota_status(uid, guest_today=current_guest_day())
        return jsonify(status.to_dict())

    return bp
