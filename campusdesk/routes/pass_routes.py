"""
Pass request API routes for CampusDesk.
Students file requests; teachers and HODs approve or deny them.
"""
import logging

from flask import Blueprint, g, jsonify, request

from campusdesk.auth import require_role
from campusdesk.errors import ValidationFailure
from campusdesk.models import PASS_APPROVED, PASS_DENIED, PASS_PENDING
from campusdesk.repository import new_id
from campusdesk.services import pass_service
from campusdesk.state import get_repository

logger = logging.getLogger(__name__)

pass_bp = Blueprint('passes', __name__)

STATUSES = (PASS_PENDING, PASS_APPROVED, PASS_DENIED)


@pass_bp.route('/api/passes', methods=['GET'])
def list_passes():
    """Students see their own requests; staff see all, optionally filtered by status."""
    status = request.args.get('status') or None
    if status is not None and status not in STATUSES:
        return jsonify({"error": f"Unknown status: {status}", "field": "status"}), 400

    student_id = g.user.id if g.user.role == 'student' else None
    requests = get_repository().list_pass_requests(status=status, student_id=student_id)
    return jsonify({"passes": [r.to_dict() for r in requests]})


@pass_bp.route('/api/passes', methods=['POST'])
@require_role('student')
def create_pass():
    data = request.get_json(silent=True) or {}
    pass_request = pass_service.new_pass_request(g.user, data.get('reason'), new_id("P"))
    if isinstance(pass_request, ValidationFailure):
        return jsonify(pass_request.to_dict()), 400

    get_repository().add_pass_request(pass_request)
    logger.info("Pass request %s filed by %s", pass_request.id, g.user.id)
    return jsonify({"status": "success", "pass": pass_request.to_dict()}), 201


def _review(request_id, decision):
    repo = get_repository()
    with repo.lock:
        pass_request = repo.get_pass_request(request_id)
        if pass_request is None:
            return jsonify({"error": "Pass request not found"}), 404
        reviewed = pass_service.review(pass_request, decision, g.user)
        if isinstance(reviewed, ValidationFailure):
            return jsonify(reviewed.to_dict()), 409
        repo.update_pass_request(reviewed)

    logger.info("Pass request %s %s by %s", request_id, reviewed.status.lower(), g.user.name)
    return jsonify({"status": "success", "pass": reviewed.to_dict()})


@pass_bp.route('/api/passes/<request_id>/approve', methods=['POST'])
@require_role('teacher', 'hod')
def approve_pass(request_id):
    return _review(request_id, 'approve')


@pass_bp.route('/api/passes/<request_id>/deny', methods=['POST'])
@require_role('teacher', 'hod')
def deny_pass(request_id):
    return _review(request_id, 'deny')
