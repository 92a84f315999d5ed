"""
Assignment Publishing
=====================
Lifecycle of an assignment, derived from ``is_published`` and ``scheduled_at``:

    draft      not published, no schedule
    scheduled  not published, scheduled_at set
    published  is_published (terminal)

All transitions are pure: they return a new Assignment (or a
ValidationFailure) and leave persistence to the caller. ``tick`` is the
periodic sweep that publishes scheduled assignments whose time has come; it is
idempotent, so overlapping sweeps cannot double-publish.
"""
from __future__ import annotations

from dataclasses import replace
from datetime import datetime

from campusdesk.errors import ValidationFailure
from campusdesk.models import (
    YEARS, Assignment, User, parse_timestamp, question_from_dict, utcnow,
)

DRAFT = "draft"
SCHEDULED = "scheduled"
PUBLISHED = "published"


def status(assignment: Assignment) -> str:
    if assignment.is_published:
        return PUBLISHED
    if assignment.scheduled_at is not None:
        return SCHEDULED
    return DRAFT


# ═══════════════════════════════════════════════════════
# BUILDING
# ═══════════════════════════════════════════════════════

def validate_assignment(assignment: Assignment) -> ValidationFailure | None:
    """Check the fields every assignment needs before it can be created."""
    if not assignment.title.strip():
        return ValidationFailure("Title is required.", "title")
    if not assignment.class_id.strip():
        return ValidationFailure("Class is required.", "classID")
    if assignment.due_date is None:
        return ValidationFailure("Due date is required.", "dueDate")
    if not assignment.questions:
        return ValidationFailure("An assignment needs at least one question.", "questions")
    ids = [q.id for q in assignment.questions]
    if len(set(ids)) != len(ids):
        return ValidationFailure("Question ids must be unique within an assignment.", "questions")
    if assignment.target_year is not None and assignment.target_year not in YEARS:
        return ValidationFailure("Target year must be between 1 and 4.", "targetYear")
    return None


def draft_from_payload(payload: dict, teacher: User, assignment_id: str,
                       now: datetime | None = None) -> Assignment | ValidationFailure:
    """Turn a create-assignment request body into an unpublished draft."""
    now = now or utcnow()

    raw_questions = payload.get("questions") or []
    if not isinstance(raw_questions, list) or not raw_questions:
        return ValidationFailure("An assignment needs at least one question.", "questions")
    questions = []
    for index, raw in enumerate(raw_questions):
        try:
            questions.append(question_from_dict(raw, default_id=f"Q{index + 1}"))
        except ValueError as e:
            return ValidationFailure(str(e), "questions")

    try:
        due_date = parse_timestamp(payload.get("dueDate"))
    except ValueError:
        return ValidationFailure("A valid due date is required.", "dueDate")

    target_year = payload.get("targetYear")
    if target_year not in (None, ""):
        try:
            target_year = int(target_year)
        except (TypeError, ValueError):
            return ValidationFailure("Target year must be between 1 and 4.", "targetYear")
    else:
        target_year = None

    draft = Assignment(
        id=assignment_id,
        teacher_id=teacher.id,
        teacher_name=teacher.name,
        class_id=str(payload.get("classID") or ""),
        title=str(payload.get("title") or ""),
        description=str(payload.get("description") or ""),
        questions=tuple(questions),
        due_date=due_date,
        created_at=now,
        target_year=target_year,
    )
    failure = validate_assignment(draft)
    return failure or draft


# ═══════════════════════════════════════════════════════
# TRANSITIONS
# ═══════════════════════════════════════════════════════

def create(assignment: Assignment, schedule_enabled: bool, when: datetime | None = None,
           now: datetime | None = None) -> Assignment | ValidationFailure:
    """Start an assignment as published, or as scheduled for a future `when`."""
    failure = validate_assignment(assignment)
    if failure:
        return failure

    if not schedule_enabled:
        return replace(assignment, is_published=True, scheduled_at=None)

    now = now or utcnow()
    if when is None:
        return ValidationFailure("Please select a schedule date and time.", "scheduledAt")
    if when <= now:
        return ValidationFailure("Schedule date must be in the future.", "scheduledAt")
    return replace(assignment, is_published=False, scheduled_at=when)


def tick(now: datetime, assignments) -> list[Assignment]:
    """Publish every scheduled assignment that is due. Returns only the newly published ones."""
    published = []
    for assignment in assignments:
        if status(assignment) != SCHEDULED:
            continue
        if assignment.scheduled_at <= now:
            published.append(replace(assignment, is_published=True))
    return published


def reschedule(assignment: Assignment, new_when: datetime,
               now: datetime | None = None) -> Assignment | ValidationFailure:
    """Move a scheduled assignment to a new future time."""
    if status(assignment) != SCHEDULED:
        return ValidationFailure("Only scheduled assignments can be rescheduled.", "scheduledAt")
    now = now or utcnow()
    if new_when <= now:
        return ValidationFailure("Schedule date must be in the future.", "scheduledAt")
    return replace(assignment, scheduled_at=new_when)


def publish_now(assignment: Assignment) -> Assignment:
    """Publish immediately, dropping any schedule. Already-published assignments come back unchanged."""
    if assignment.is_published:
        return assignment
    return replace(assignment, is_published=True, scheduled_at=None)
