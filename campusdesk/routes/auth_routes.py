"""
Auth API routes for CampusDesk.
Status check, the current caller, and demo tokens for the role switcher.
"""
import logging

from flask import Blueprint, g, jsonify, request

from campusdesk import __version__
from campusdesk.auth import issue_token
from campusdesk.repository import DEMO_USERS
from campusdesk.state import get_settings

logger = logging.getLogger(__name__)

auth_bp = Blueprint('auth', __name__)


@auth_bp.route('/api/status')
def status():
    return jsonify({"status": "ok", "version": __version__})


@auth_bp.route('/api/auth/demo-token', methods=['POST'])
def demo_token():
    """Issue a token for one of the demo users (student, teacher, hod)."""
    settings = get_settings()
    if not settings.demo_mode:
        return jsonify({"error": "Demo tokens are disabled"}), 404

    data = request.get_json(silent=True) or {}
    role = data.get('role', 'student')
    user = DEMO_USERS.get(role)
    if user is None:
        return jsonify({"error": f"Unknown role: {role}"}), 400

    token = issue_token(user, settings.jwt_secret, settings.jwt_ttl_seconds)
    logger.info("Issued demo token for %s (%s)", user.name, user.role)
    return jsonify({"token": token, "user": user.to_dict()})


@auth_bp.route('/api/auth/me')
def me():
    return jsonify({"user": g.user.to_dict()})
