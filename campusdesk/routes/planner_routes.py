"""
Planner API routes for CampusDesk.
AI question generation, semester planning and the saved question bank.
"""
import logging

from flask import Blueprint, jsonify, request

from campusdesk.auth import require_role
from campusdesk.errors import GenerationError, ValidationFailure
from campusdesk.models import QuestionBankItem, question_from_dict, utcnow
from campusdesk.repository import new_id
from campusdesk.services.ai_service import (
    DIFFICULTIES, validate_plan_request, validate_question_request,
)
from campusdesk.state import get_repository, get_text_client

logger = logging.getLogger(__name__)

planner_bp = Blueprint('planner', __name__)


def generation_error_response(e):
    return jsonify({"error": str(e), "statusCode": e.status_code}), 502


def bank_item_from_payload(data, source):
    """Build a QuestionBankItem from a question dict plus subject/topic/difficulty."""
    subject = str(data.get('subject') or '').strip()
    if not subject:
        return ValidationFailure("Please select a subject.", "subject")
    difficulty = data.get('difficulty') or 'medium'
    if difficulty not in DIFFICULTIES:
        return ValidationFailure(f"Difficulty must be one of {', '.join(DIFFICULTIES)}.", "difficulty")
    try:
        question = question_from_dict(data, default_id=new_id("QB"))
    except ValueError as e:
        return ValidationFailure(str(e), "question")
    return QuestionBankItem(
        question=question,
        subject=subject,
        topic=str(data.get('topic') or '').strip(),
        difficulty=difficulty,
        source=source,
        created_at=utcnow(),
    )


@planner_bp.route('/api/generate-questions', methods=['POST'])
@require_role('teacher', 'hod')
def generate_questions():
    """Generate questions with AI, optionally saving them to the question bank."""
    data = request.get_json(silent=True) or {}
    topic = str(data.get('topic') or '').strip()
    subject = str(data.get('subject') or '').strip()
    difficulty = data.get('difficulty', 'medium')
    question_count = data.get('questionCount', 5)
    question_types = data.get('questionTypes') or ['multiple-choice']

    failure = validate_question_request(topic, subject, difficulty, question_count, question_types)
    if failure:
        return jsonify(failure.to_dict()), 400

    try:
        questions = get_text_client().generate_questions(
            topic, subject, difficulty, question_count, question_types,
        )
    except GenerationError as e:
        return generation_error_response(e)

    saved = 0
    if data.get('saveToBank'):
        repo = get_repository()
        for q in questions:
            item = bank_item_from_payload({**q, 'subject': subject}, source='ai')
            if isinstance(item, ValidationFailure):
                logger.warning("Skipping generated question %s: %s", q.get('id'), item.message)
                continue
            repo.add_question_bank_item(item)
            saved += 1

    return jsonify({"questions": questions, "saved": saved})


@planner_bp.route('/api/generate-semester-plan', methods=['POST'])
@require_role('teacher', 'hod')
def generate_semester_plan():
    data = request.get_json(silent=True) or {}
    subject = str(data.get('subject') or '').strip()
    topics = data.get('topics') or []
    if isinstance(topics, str):
        topics = [t.strip() for t in topics.split(',') if t.strip()]
    total_periods = data.get('totalPeriods')
    periods_per_week = data.get('periodsPerWeek')
    semester_weeks = data.get('semesterWeeks')

    failure = validate_plan_request(subject, topics, total_periods, periods_per_week, semester_weeks)
    if failure:
        return jsonify(failure.to_dict()), 400

    try:
        plan = get_text_client().generate_semester_plan(
            subject, topics, total_periods, periods_per_week, semester_weeks,
        )
    except GenerationError as e:
        return generation_error_response(e)

    logger.info("Semester plan generated for %s", subject)
    return jsonify({"plan": plan})


# ═══════════════════════════════════════════════════════
# QUESTION BANK
# ═══════════════════════════════════════════════════════

@planner_bp.route('/api/question-bank', methods=['GET'])
@require_role('teacher', 'hod')
def list_question_bank():
    """Saved questions, filtered by subject, difficulty, type and a text search."""
    subject = request.args.get('subject') or None
    difficulty = request.args.get('difficulty') or None
    q_type = request.args.get('type') or None
    search = (request.args.get('q') or '').strip().lower()

    items = get_repository().list_question_bank()
    if subject:
        items = [i for i in items if i.subject == subject]
    if difficulty:
        items = [i for i in items if i.difficulty == difficulty]
    if q_type:
        items = [i for i in items if i.question.type == q_type]
    if search:
        items = [i for i in items
                 if search in i.question.text.lower() or search in i.topic.lower()]
    return jsonify({"questions": [i.to_dict() for i in items]})


@planner_bp.route('/api/question-bank', methods=['POST'])
@require_role('teacher', 'hod')
def add_to_question_bank():
    data = request.get_json(silent=True) or {}
    source = 'ai' if data.get('source') == 'ai' else 'manual'
    item = bank_item_from_payload(data, source)
    if isinstance(item, ValidationFailure):
        return jsonify(item.to_dict()), 400

    get_repository().add_question_bank_item(item)
    logger.info("Question %s saved to bank (%s)", item.id, item.subject)
    return jsonify({"status": "success", "question": item.to_dict()}), 201


@planner_bp.route('/api/question-bank/<item_id>', methods=['DELETE'])
@require_role('teacher', 'hod')
def delete_from_question_bank(item_id):
    if not get_repository().remove_question_bank_item(item_id):
        return jsonify({"error": "Question not found"}), 404
    return jsonify({"status": "success"})
