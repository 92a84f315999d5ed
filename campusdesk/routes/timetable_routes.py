"""
Department API routes for CampusDesk.
Period timings, the weekly timetable, subjects per year and the teacher list.
Reads are open to any signed-in user; changes are HOD only.
"""
import logging

from flask import Blueprint, jsonify, request

from campusdesk.auth import require_role
from campusdesk.errors import ValidationFailure
from campusdesk.models import DAYS_OF_WEEK
from campusdesk.repository import new_id
from campusdesk.services import department_service
from campusdesk.state import get_repository

logger = logging.getLogger(__name__)

timetable_bp = Blueprint('timetable', __name__)


# ═══════════════════════════════════════════════════════
# PERIOD TIMINGS
# ═══════════════════════════════════════════════════════

@timetable_bp.route('/api/period-timings', methods=['GET'])
def get_period_timings():
    timings = get_repository().list_period_timings()
    return jsonify({"timings": [t.to_dict() for t in timings]})


@timetable_bp.route('/api/period-timings', methods=['PUT'])
@require_role('hod')
def save_period_timings():
    """Replace the whole timing table."""
    data = request.get_json(silent=True) or {}
    timings = department_service.timings_from_payload(data.get('timings'))
    if isinstance(timings, ValidationFailure):
        return jsonify(timings.to_dict()), 400

    saved = get_repository().replace_period_timings(timings)
    logger.info("Period timings saved (%d periods)", len(saved))
    return jsonify({"status": "success", "timings": [t.to_dict() for t in saved]})


# ═══════════════════════════════════════════════════════
# TIMETABLE
# ═══════════════════════════════════════════════════════

@timetable_bp.route('/api/timetable', methods=['GET'])
def get_timetable():
    day = request.args.get('day') or None
    if day is not None and day not in DAYS_OF_WEEK:
        return jsonify({"error": f"Unknown day: {day}", "field": "day"}), 400
    class_id = request.args.get('classID') or None
    entries = get_repository().list_timetable(day=day, class_id=class_id)
    return jsonify({"entries": [e.to_dict() for e in entries]})


@timetable_bp.route('/api/timetable', methods=['POST'])
@require_role('hod')
def add_timetable_entry():
    data = request.get_json(silent=True) or {}
    repo = get_repository()
    with repo.lock:
        entry = department_service.entry_from_payload(
            data, new_id("TT"), repo.list_period_timings(), repo.list_timetable(),
        )
        if isinstance(entry, ValidationFailure):
            return jsonify(entry.to_dict()), 400
        repo.add_timetable_entry(entry)

    logger.info("Timetable entry added: %s %s period %d - %s",
                entry.class_id, entry.day_of_week, entry.period_number, entry.subject)
    return jsonify({"status": "success", "entry": entry.to_dict()}), 201


@timetable_bp.route('/api/timetable/<entry_id>', methods=['DELETE'])
@require_role('hod')
def delete_timetable_entry(entry_id):
    if not get_repository().delete_timetable_entry(entry_id):
        return jsonify({"error": "Timetable entry not found"}), 404
    return jsonify({"status": "success"})


# ═══════════════════════════════════════════════════════
# SUBJECTS
# ═══════════════════════════════════════════════════════

@timetable_bp.route('/api/subjects', methods=['GET'])
def get_subjects():
    subjects = get_repository().subjects_by_year()
    return jsonify({"subjects": {str(year): names for year, names in subjects.items()}})


@timetable_bp.route('/api/subjects/<int:year>', methods=['POST'])
@require_role('hod')
def add_subject(year):
    data = request.get_json(silent=True) or {}
    repo = get_repository()
    with repo.lock:
        name = department_service.validate_subject(year, data.get('subject'), repo.subjects_by_year())
        if isinstance(name, ValidationFailure):
            return jsonify(name.to_dict()), 400
        subjects = repo.add_subject(year, name)

    logger.info("Subject \"%s\" added to Year %d", name, year)
    return jsonify({"status": "success", "year": year, "subjects": subjects}), 201


@timetable_bp.route('/api/subjects/<int:year>/<path:subject>', methods=['DELETE'])
@require_role('hod')
def remove_subject(year, subject):
    if not get_repository().remove_subject(year, subject):
        return jsonify({"error": "Subject not found"}), 404
    return jsonify({"status": "success"})


# ═══════════════════════════════════════════════════════
# TEACHERS
# ═══════════════════════════════════════════════════════

@timetable_bp.route('/api/teachers', methods=['GET'])
def list_teachers():
    teachers = get_repository().list_teachers()
    return jsonify({"teachers": [t.to_dict() for t in teachers]})


@timetable_bp.route('/api/teachers', methods=['POST'])
@require_role('hod')
def add_teacher():
    data = request.get_json(silent=True) or {}
    teacher = department_service.teacher_from_payload(data, new_id("T"))
    if isinstance(teacher, ValidationFailure):
        return jsonify(teacher.to_dict()), 400

    get_repository().add_teacher(teacher)
    logger.info("Teacher %s added (%s)", teacher.name, teacher.id)
    return jsonify({"status": "success", "teacher": teacher.to_dict()}), 201


@timetable_bp.route('/api/teachers/<teacher_id>', methods=['DELETE'])
@require_role('hod')
def remove_teacher(teacher_id):
    if not get_repository().remove_teacher(teacher_id):
        return jsonify({"error": "Teacher not found"}), 404
    return jsonify({"status": "success"})
