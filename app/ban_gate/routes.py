"""
Ban gate routes and request hook.
"""

from typing import Iterable

from flask import Blueprint, jsonify, request

from .services import BanGate

BANNED_MESSAGE = "您的IP地址已被封禁，无法访问本网站。如有疑问，请联系管理员。"


def create_ban_gate_blueprint(ban_gate: BanGate) -> Blueprint:
    """Create ban gate blueprint with routes."""
    bp = Blueprint('ban_gate', __name__)

    @bp.route("/api/ban/check", methods=["GET"])
    def check_ban():
        """Report whether the calling origin is banned."""
        origin = ban_gate.client_origin(request.headers, request.remote_addr)
        return jsonify(ban_gate.is_origin_banned(origin).to_dict())

    return bp


def install_ban_hook(app, ban_gate: BanGate, exempt_paths: Iterable[str] = ()) -> None:
    """Reject requests from banned origins before any view runs."""
    exempt = set(exempt_paths)

    @app.before_request
    def enforce_origin_ban():
        if request.path in exempt:
            return None

        origin = ban_gate.client_origin(request.headers, request.remote_addr)
        result = ban_gate.is_origin_banned(origin)
        if result.banned:
            return jsonify({
                "error": "origin_banned",
                "message": BANNED_MESSAGE,
            }), 403
        return None
