"""
Assistant API routes for CampusDesk.
Chat with the teaching assistant, grounded in the current dashboard data.
"""
from flask import Blueprint, jsonify, request

from campusdesk.auth import require_role
from campusdesk.errors import GenerationError
from campusdesk.models import PASS_PENDING
from campusdesk.services.performance_service import performance_by_year
from campusdesk.state import get_repository, get_text_client

assistant_bp = Blueprint('assistant', __name__)


def build_chat_context(repo):
    """Snapshot of pending passes, performance by year and totals for the assistant prompt."""
    with repo.lock:
        pending = repo.list_pass_requests(status=PASS_PENDING)
        submissions = repo.list_submissions()
        years = repo.assignment_years()
        total_assignments = len(repo.list_assignments())
    return {
        "pendingRequests": [r.to_dict() for r in pending],
        "performanceByYear": performance_by_year(submissions, years),
        "totalAssignments": total_assignments,
        "totalSubmissions": len(submissions),
    }


@assistant_bp.route('/api/assistant/chat', methods=['POST'])
@require_role('teacher', 'hod')
def chat():
    data = request.get_json(silent=True) or {}
    message = str(data.get('message') or '').strip()
    if not message:
        return jsonify({"error": "Message is required", "field": "message"}), 400

    try:
        reply = get_text_client().chat(message, build_chat_context(get_repository()))
    except GenerationError as e:
        return jsonify({"error": str(e), "statusCode": e.status_code}), 502
    return jsonify({"reply": reply})
