"""
Department Administration
=========================
Validation for the head-of-department screens: period timings, the weekly
timetable, subjects per year and the teaching staff list. Every builder
returns either the new model object or a ValidationFailure.
"""
from __future__ import annotations

import re

from campusdesk.errors import ValidationFailure
from campusdesk.models import (
    DAYS_OF_WEEK, YEARS, PeriodTiming, Teacher, TimetableEntry,
)

_TIME_RE = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")
_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def _minutes(value):
    match = _TIME_RE.match(str(value or "").strip())
    if not match:
        return None
    return int(match.group(1)) * 60 + int(match.group(2))


def _as_int(value):
    if isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


# ═══════════════════════════════════════════════════════
# PERIOD TIMINGS
# ═══════════════════════════════════════════════════════

def timings_from_payload(items) -> list[PeriodTiming] | ValidationFailure:
    """Build the full period-timing table that replaces the current one."""
    if not isinstance(items, list) or not items:
        return ValidationFailure("At least one period timing is required.", "timings")

    timings = []
    seen_numbers = set()
    for index, item in enumerate(items):
        if not isinstance(item, dict):
            return ValidationFailure("Each timing must be an object.", "timings")
        number = _as_int(item.get("periodNumber"))
        if number is None or number <= 0:
            return ValidationFailure("Period number must be a positive integer.", "periodNumber")
        if number in seen_numbers:
            return ValidationFailure(f"Period {number} appears more than once.", "periodNumber")
        seen_numbers.add(number)

        start, end = _minutes(item.get("startTime")), _minutes(item.get("endTime"))
        if start is None or end is None:
            return ValidationFailure(f"Period {number} needs HH:MM start and end times.", "startTime")
        if start >= end:
            return ValidationFailure(f"Period {number} must end after it starts.", "endTime")

        timings.append(PeriodTiming(
            id=str(item.get("id") or f"PT{number}"),
            period_number=number,
            start_time=item["startTime"].strip(),
            end_time=item["endTime"].strip(),
            is_break=bool(item.get("isBreak", False)),
            label=str(item.get("label") or f"Period {index + 1}").strip(),
        ))
    return timings


# ═══════════════════════════════════════════════════════
# TIMETABLE
# ═══════════════════════════════════════════════════════

def entry_from_payload(payload: dict, entry_id: str, timings, existing_entries) -> TimetableEntry | ValidationFailure:
    """Validate a new timetable slot against the period table and the current timetable."""
    class_id = str(payload.get("classID") or "").strip()
    subject = str(payload.get("subject") or "").strip()
    teacher_name = str(payload.get("teacherName") or "").strip()
    if not class_id or not subject or not teacher_name:
        return ValidationFailure("Please fill all required fields.", "classID")

    day = payload.get("dayOfWeek", "Monday")
    if day not in DAYS_OF_WEEK:
        return ValidationFailure(f"Unknown day: {day}", "dayOfWeek")

    year = _as_int(payload.get("year"))
    if year not in YEARS:
        return ValidationFailure("Year must be between 1 and 4.", "year")

    period_number = _as_int(payload.get("periodNumber"))
    period = next((t for t in timings if t.period_number == period_number), None)
    if period is None:
        return ValidationFailure(f"No period {payload.get('periodNumber')} in the timings.", "periodNumber")
    if period.is_break:
        return ValidationFailure(f"{period.label} is a break.", "periodNumber")

    for existing in existing_entries:
        if (existing.class_id == class_id and existing.day_of_week == day
                and existing.period_number == period_number):
            return ValidationFailure(
                f"{class_id} already has {existing.subject} on {day} period {period_number}.",
                "periodNumber",
            )

    return TimetableEntry(
        id=entry_id,
        class_id=class_id,
        year=year,
        day_of_week=day,
        period_number=period_number,
        subject=subject,
        teacher_id=str(payload.get("teacherID") or "").strip(),
        teacher_name=teacher_name,
    )


# ═══════════════════════════════════════════════════════
# SUBJECTS & TEACHERS
# ═══════════════════════════════════════════════════════

def validate_subject(year, subject, subjects_by_year) -> str | ValidationFailure:
    """Return the cleaned subject name, or why it cannot be added to `year`."""
    if year not in YEARS:
        return ValidationFailure("Year must be between 1 and 4.", "year")
    name = str(subject or "").strip()
    if not name:
        return ValidationFailure("Please enter a subject name.", "subject")
    existing = [s.lower() for s in subjects_by_year.get(year, [])]
    if name.lower() in existing:
        return ValidationFailure(f"{name} is already a Year {year} subject.", "subject")
    return name


def teacher_from_payload(payload: dict, teacher_id: str) -> Teacher | ValidationFailure:
    name = str(payload.get("name") or "").strip()
    email = str(payload.get("email") or "").strip()
    if not name or not email:
        return ValidationFailure("Please enter name and email.", "name")
    if not _EMAIL_RE.match(email):
        return ValidationFailure("Please enter a valid email address.", "email")

    assigned_year = payload.get("assignedYear")
    if assigned_year not in (None, ""):
        assigned_year = _as_int(assigned_year)
        if assigned_year not in YEARS:
            return ValidationFailure("Year must be between 1 and 4.", "assignedYear")
    else:
        assigned_year = None

    return Teacher(
        id=teacher_id,
        name=name,
        email=email,
        phone=str(payload.get("phone") or "").strip() or None,
        assigned_year=assigned_year,
        assigned_subject=str(payload.get("assignedSubject") or "").strip() or None,
    )
