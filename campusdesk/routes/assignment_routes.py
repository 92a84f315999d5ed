"""
Assignment API routes for CampusDesk.
Creating, scheduling and publishing assignments, plus student submission and auto-grading.
"""
import logging

from flask import Blueprint, g, jsonify, request

from campusdesk.auth import require_role
from campusdesk.errors import ValidationFailure
from campusdesk.models import Submission, parse_timestamp, utcnow
from campusdesk.repository import new_id
from campusdesk.services import publisher
from campusdesk.services.grading_service import grade
from campusdesk.state import get_repository

logger = logging.getLogger(__name__)

assignment_bp = Blueprint('assignment', __name__)


def strip_answers(assignment):
    """Student view of an assignment: no correct answers."""
    return assignment.to_dict(include_answers=False)


def staff_view(assignment):
    data = assignment.to_dict()
    data['status'] = publisher.status(assignment)
    return data


def _year_arg():
    raw = request.args.get('year')
    if raw in (None, ''):
        return None
    try:
        return int(raw)
    except ValueError:
        return ValidationFailure("Year must be a number.", "year")


def _schedule_time(data):
    raw = data.get('scheduledAt')
    if raw in (None, ''):
        return None
    try:
        return parse_timestamp(raw)
    except ValueError:
        return ValidationFailure("Please select a valid schedule date and time.", "scheduledAt")


@assignment_bp.route('/api/assignments', methods=['GET'])
def list_assignments():
    """Students get published assignments only; staff get everything with its status."""
    year = _year_arg()
    if isinstance(year, ValidationFailure):
        return jsonify(year.to_dict()), 400

    repo = get_repository()
    if g.user.role == 'student':
        assignments = repo.list_assignments(published_only=True, year=year)
        return jsonify({"assignments": [strip_answers(a) for a in assignments]})

    assignments = repo.list_assignments(year=year)
    return jsonify({"assignments": [staff_view(a) for a in assignments]})


@assignment_bp.route('/api/assignments/<assignment_id>', methods=['GET'])
def get_assignment(assignment_id):
    assignment = get_repository().get_assignment(assignment_id)
    if assignment is None:
        return jsonify({"error": "Assignment not found"}), 404

    if g.user.role == 'student':
        if not assignment.is_published:
            return jsonify({"error": "Assignment not found"}), 404
        return jsonify({"assignment": strip_answers(assignment)})
    return jsonify({"assignment": staff_view(assignment)})


@assignment_bp.route('/api/assignments', methods=['POST'])
@require_role('teacher', 'hod')
def create_assignment():
    """Create an assignment, published now or scheduled for later."""
    data = request.get_json(silent=True) or {}

    draft = publisher.draft_from_payload(data, g.user, new_id("A"))
    if isinstance(draft, ValidationFailure):
        return jsonify(draft.to_dict()), 400

    schedule_enabled = data.get('scheduleEnabled')
    if schedule_enabled is None:
        schedule_enabled = False
    if not isinstance(schedule_enabled, bool):
        return jsonify({"error": "scheduleEnabled must be true or false.", "field": "scheduleEnabled"}), 400

    when = _schedule_time(data)
    if isinstance(when, ValidationFailure):
        return jsonify(when.to_dict()), 400

    assignment = publisher.create(draft, schedule_enabled, when)
    if isinstance(assignment, ValidationFailure):
        return jsonify(assignment.to_dict()), 400

    repo = get_repository()
    with repo.lock:
        repo.add_assignment(assignment)

    if assignment.is_published:
        logger.info("Assignment %s \"%s\" published to %s", assignment.id, assignment.title, assignment.class_id)
    else:
        logger.info("Assignment %s \"%s\" scheduled for %s", assignment.id, assignment.title,
                    assignment.scheduled_at.isoformat())
    return jsonify({"status": "success", "assignment": staff_view(assignment)}), 201


@assignment_bp.route('/api/assignments/<assignment_id>/reschedule', methods=['POST'])
@require_role('teacher', 'hod')
def reschedule_assignment(assignment_id):
    data = request.get_json(silent=True) or {}
    when = _schedule_time(data)
    if when is None:
        return jsonify({"error": "Please select a schedule date and time.", "field": "scheduledAt"}), 400
    if isinstance(when, ValidationFailure):
        return jsonify(when.to_dict()), 400

    repo = get_repository()
    with repo.lock:
        assignment = repo.get_assignment(assignment_id)
        if assignment is None:
            return jsonify({"error": "Assignment not found"}), 404
        updated = publisher.reschedule(assignment, when)
        if isinstance(updated, ValidationFailure):
            return jsonify(updated.to_dict()), 400
        repo.update_assignment(updated)

    logger.info("Assignment %s rescheduled to %s", assignment_id, when.isoformat())
    return jsonify({"status": "success", "assignment": staff_view(updated)})


@assignment_bp.route('/api/assignments/<assignment_id>/publish', methods=['POST'])
@require_role('teacher', 'hod')
def publish_assignment(assignment_id):
    repo = get_repository()
    with repo.lock:
        assignment = repo.get_assignment(assignment_id)
        if assignment is None:
            return jsonify({"error": "Assignment not found"}), 404
        published = publisher.publish_now(assignment)
        if published is not assignment:
            repo.update_assignment(published)
            logger.info("Assignment %s published manually", assignment_id)
    return jsonify({"status": "success", "assignment": staff_view(published)})


@assignment_bp.route('/api/assignments/<assignment_id>', methods=['DELETE'])
@require_role('teacher', 'hod')
def delete_assignment(assignment_id):
    if not get_repository().delete_assignment(assignment_id):
        return jsonify({"error": "Assignment not found"}), 404
    logger.info("Assignment %s deleted", assignment_id)
    return jsonify({"status": "success"})


# ═══════════════════════════════════════════════════════
# SUBMISSIONS
# ═══════════════════════════════════════════════════════

@assignment_bp.route('/api/assignments/<assignment_id>/submit', methods=['POST'])
@require_role('student')
def submit_assignment(assignment_id):
    """Grade a student's answers and store the submission."""
    data = request.get_json(silent=True) or {}
    answers = data.get('answers') or {}
    if not isinstance(answers, dict):
        return jsonify({"error": "Answers must be an object keyed by question id", "field": "answers"}), 400

    repo = get_repository()
    with repo.lock:
        assignment = repo.get_assignment(assignment_id)
        if assignment is None or not assignment.is_published:
            return jsonify({"error": "Assignment not found"}), 404
        if repo.find_submission(assignment_id, g.user.id):
            return jsonify({"error": "You have already submitted this assignment"}), 409

        answers = {str(k): "" if v is None else str(v) for k, v in answers.items()}
        result = grade(answers, assignment.questions)
        submission = Submission(
            id=new_id("SUB"),
            assignment_id=assignment_id,
            student_id=g.user.id,
            student_name=g.user.name,
            student_answers=answers,
            score=result.score,
            max_score=result.max_score,
            percentage=result.percentage,
            feedback=result.feedback,
            corrected_time=utcnow(),
        )
        repo.add_submission(submission)

    logger.info("Graded %s for %s: %d/%d (%d%%)", assignment_id, g.user.id,
                result.score, result.max_score, result.percentage)
    return jsonify({"status": "success", "submission": submission.to_dict(), "result": result.to_dict()}), 201


@assignment_bp.route('/api/assignments/<assignment_id>/submissions', methods=['GET'])
@require_role('teacher', 'hod')
def list_assignment_submissions(assignment_id):
    repo = get_repository()
    if repo.get_assignment(assignment_id) is None:
        return jsonify({"error": "Assignment not found"}), 404
    submissions = repo.list_submissions(assignment_id=assignment_id)
    return jsonify({"submissions": [s.to_dict() for s in submissions]})


@assignment_bp.route('/api/submissions/mine', methods=['GET'])
@require_role('student')
def my_submissions():
    submissions = get_repository().list_submissions(student_id=g.user.id)
    return jsonify({"submissions": [s.to_dict() for s in submissions]})
