"""
Analytics API routes for CampusDesk.
Weekly averages, trends and the head-of-department dashboard summary.
"""
from flask import Blueprint, g, jsonify, request

from campusdesk.auth import require_role
from campusdesk.models import PASS_PENDING
from campusdesk.services.performance_service import (
    analyze, performance_band, performance_by_year,
)
from campusdesk.state import get_repository

analytics_bp = Blueprint('analytics', __name__)


def _with_band(record):
    data = record.to_dict()
    data['band'] = performance_band(record.weekly_average)
    return data


@analytics_bp.route('/api/performance/me', methods=['GET'])
@require_role('student')
def my_performance():
    repo = get_repository()
    record = analyze(repo.list_submissions(), for_student=g.user.id)
    return jsonify({"performance": _with_band(record)})


@analytics_bp.route('/api/performance', methods=['GET'])
@require_role('teacher', 'hod')
def cohort_performance():
    """All students ranked by weekly average, optionally for one year."""
    year = request.args.get('year')
    if year not in (None, ''):
        try:
            year = int(year)
        except ValueError:
            return jsonify({"error": "Year must be a number.", "field": "year"}), 400
    else:
        year = None

    repo = get_repository()
    with repo.lock:
        submissions = repo.list_submissions()
        years = repo.assignment_years()
    records = analyze(submissions, year=year, assignment_years=years)
    return jsonify({"year": year, "students": [_with_band(r) for r in records]})


@analytics_bp.route('/api/dashboard/summary', methods=['GET'])
@require_role('teacher', 'hod')
def dashboard_summary():
    repo = get_repository()
    with repo.lock:
        submissions = repo.list_submissions()
        years = repo.assignment_years()
        total_assignments = len(repo.list_assignments())
        pending = repo.list_pass_requests(status=PASS_PENDING)

    return jsonify({
        "totalAssignments": total_assignments,
        "totalSubmissions": len(submissions),
        "activeStudents": len({s.student_id for s in submissions}),
        "pendingPasses": len(pending),
        "performanceByYear": {str(y): v for y, v in performance_by_year(submissions, years).items()},
    })
