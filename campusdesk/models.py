"""Domain models for the CampusDesk backend."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import ClassVar

MULTIPLE_CHOICE = "multiple-choice"
FILL_BLANK = "fill-blank"
SHORT_ANSWER = "short-answer"
QUESTION_TYPES = (MULTIPLE_CHOICE, FILL_BLANK, SHORT_ANSWER)

DEFAULT_QUESTION_POINTS = 10

ROLES = ("student", "teacher", "hod")

PASS_PENDING = "Pending"
PASS_APPROVED = "Approved"
PASS_DENIED = "Denied"

DAYS_OF_WEEK = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday")
YEARS = (1, 2, 3, 4)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_timestamp(value) -> datetime:
    """Parse an ISO-8601 string (or pass through a datetime) into an aware UTC datetime.

    Naive values are taken to be UTC. Raises ValueError on anything unparseable.
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value.strip():
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    else:
        raise ValueError(f"Invalid timestamp: {value!r}")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


# ═══════════════════════════════════════════════════════
# QUESTIONS
# ═══════════════════════════════════════════════════════

@dataclass(frozen=True)
class Question:
    """Base for the three question kinds. Immutable once part of an assignment."""

    id: str
    text: str
    correct_answer: str
    points: int

    type: ClassVar[str] = ""

    def to_dict(self, include_answer: bool = True) -> dict:
        data = {
            "id": self.id,
            "type": self.type,
            "text": self.text,
            "points": self.points,
        }
        if include_answer:
            data["correctAnswer"] = self.correct_answer
        return data


@dataclass(frozen=True)
class MultipleChoiceQuestion(Question):
    options: tuple[str, ...] = ()

    type: ClassVar[str] = MULTIPLE_CHOICE

    def to_dict(self, include_answer: bool = True) -> dict:
        data = Question.to_dict(self, include_answer)
        data["options"] = list(self.options)
        return data


@dataclass(frozen=True)
class FillBlankQuestion(Question):
    type: ClassVar[str] = FILL_BLANK


@dataclass(frozen=True)
class ShortAnswerQuestion(Question):
    type: ClassVar[str] = SHORT_ANSWER


QUESTION_CLASSES: dict[str, type[Question]] = {
    MULTIPLE_CHOICE: MultipleChoiceQuestion,
    FILL_BLANK: FillBlankQuestion,
    SHORT_ANSWER: ShortAnswerQuestion,
}


def _parse_points(raw) -> int:
    if raw is None:
        return DEFAULT_QUESTION_POINTS
    if isinstance(raw, bool):
        raise ValueError("Points must be a positive integer.")
    if isinstance(raw, str):
        raw = raw.strip()
    try:
        points = int(raw)
    except (TypeError, ValueError):
        raise ValueError("Points must be a positive integer.") from None
    if isinstance(raw, float) and raw != points:
        raise ValueError("Points must be a positive integer.")
    if points <= 0:
        raise ValueError("Points must be a positive integer.")
    return points


def question_from_dict(data: dict, default_id: str | None = None) -> Question:
    """Build the right Question variant from a JSON payload.

    Accepts either ``text`` or ``question`` for the prompt text. Raises
    ValueError when the payload cannot form a valid question.
    """
    if not isinstance(data, dict):
        raise ValueError("Question must be an object.")

    q_type = data.get("type")
    cls = QUESTION_CLASSES.get(q_type)
    if cls is None:
        raise ValueError(f"Unknown question type: {q_type!r}")

    question_id = str(data.get("id") or default_id or "").strip()
    if not question_id:
        raise ValueError("Question id is required.")

    text = str(data.get("text") or data.get("question") or "").strip()
    if not text:
        raise ValueError("Question text must not be empty.")

    correct_answer = data.get("correctAnswer")
    if correct_answer is None or not str(correct_answer).strip():
        raise ValueError(f"Question {question_id} has no correct answer.")

    points = _parse_points(data.get("points"))

    if cls is MultipleChoiceQuestion:
        options = [str(o).strip() for o in (data.get("options") or [])]
        if len(options) < 2 or any(not o for o in options):
            raise ValueError(f"Question {question_id} needs at least two non-empty options.")
        return MultipleChoiceQuestion(
            id=question_id,
            text=text,
            correct_answer=str(correct_answer),
            points=points,
            options=tuple(options),
        )

    return cls(id=question_id, text=text, correct_answer=str(correct_answer), points=points)


# ═══════════════════════════════════════════════════════
# ASSIGNMENTS & SUBMISSIONS
# ═══════════════════════════════════════════════════════

@dataclass(frozen=True)
class Assignment:
    id: str
    teacher_id: str
    teacher_name: str
    class_id: str
    title: str
    description: str
    questions: tuple[Question, ...]
    due_date: datetime
    created_at: datetime
    target_year: int | None = None
    is_published: bool = False
    scheduled_at: datetime | None = None

    @property
    def total_points(self) -> int:
        return sum(q.points for q in self.questions)

    def to_dict(self, include_answers: bool = True) -> dict:
        return {
            "id": self.id,
            "teacherID": self.teacher_id,
            "teacherName": self.teacher_name,
            "classID": self.class_id,
            "targetYear": self.target_year,
            "title": self.title,
            "description": self.description,
            "questions": [q.to_dict(include_answers) for q in self.questions],
            "dueDate": _iso(self.due_date),
            "totalPoints": self.total_points,
            "isPublished": self.is_published,
            "scheduledAt": _iso(self.scheduled_at),
            "createdAt": _iso(self.created_at),
        }


@dataclass(frozen=True)
class QuestionFeedback:
    correct: bool
    correct_answer: str

    def to_dict(self) -> dict:
        return {"correct": self.correct, "correctAnswer": self.correct_answer}


@dataclass(frozen=True)
class GradeResult:
    score: int
    max_score: int
    percentage: int
    feedback: dict[str, QuestionFeedback] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "score": self.score,
            "maxScore": self.max_score,
            "percentage": self.percentage,
            "feedback": {qid: fb.to_dict() for qid, fb in self.feedback.items()},
        }


@dataclass(frozen=True)
class Submission:
    id: str
    assignment_id: str
    student_id: str
    student_name: str
    student_answers: dict[str, str]
    score: int
    max_score: int
    percentage: int
    feedback: dict[str, QuestionFeedback]
    corrected_time: datetime

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "assignmentID": self.assignment_id,
            "studentID": self.student_id,
            "studentName": self.student_name,
            "studentAnswers": dict(self.student_answers),
            "score": self.score,
            "maxScore": self.max_score,
            "percentage": self.percentage,
            "feedback": {qid: fb.to_dict() for qid, fb in self.feedback.items()},
            "correctedTime": _iso(self.corrected_time),
        }


@dataclass(frozen=True)
class PerformanceRecord:
    """Derived per-student summary; recomputed on demand, never stored."""

    student_id: str
    student_name: str
    weekly_average: int
    total_assignments: int
    completed_assignments: int
    trend: str

    def to_dict(self) -> dict:
        return {
            "studentID": self.student_id,
            "studentName": self.student_name,
            "weeklyAverage": self.weekly_average,
            "totalAssignments": self.total_assignments,
            "completedAssignments": self.completed_assignments,
            "trend": self.trend,
        }


# ═══════════════════════════════════════════════════════
# ADMINISTRATION
# ═══════════════════════════════════════════════════════

@dataclass(frozen=True)
class PassRequest:
    id: str
    student_id: str
    student_name: str
    reason: str
    requested_time: datetime
    status: str = PASS_PENDING
    reviewed_by: str | None = None
    reviewed_at: datetime | None = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "studentID": self.student_id,
            "studentName": self.student_name,
            "reason": self.reason,
            "requestedTime": _iso(self.requested_time),
            "status": self.status,
            "reviewedBy": self.reviewed_by,
            "reviewedAt": _iso(self.reviewed_at),
        }


@dataclass(frozen=True)
class PeriodTiming:
    id: str
    period_number: int
    start_time: str  # "HH:MM"
    end_time: str
    is_break: bool
    label: str

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "periodNumber": self.period_number,
            "startTime": self.start_time,
            "endTime": self.end_time,
            "isBreak": self.is_break,
            "label": self.label,
        }


@dataclass(frozen=True)
class TimetableEntry:
    id: str
    class_id: str
    year: int
    day_of_week: str
    period_number: int
    subject: str
    teacher_id: str
    teacher_name: str

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "classID": self.class_id,
            "year": self.year,
            "dayOfWeek": self.day_of_week,
            "periodNumber": self.period_number,
            "subject": self.subject,
            "teacherID": self.teacher_id,
            "teacherName": self.teacher_name,
        }


@dataclass(frozen=True)
class Teacher:
    id: str
    name: str
    email: str
    phone: str | None = None
    assigned_year: int | None = None
    assigned_subject: str | None = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "assignedYear": self.assigned_year,
            "assignedSubject": self.assigned_subject,
        }


@dataclass(frozen=True)
class QuestionBankItem:
    question: Question
    subject: str
    topic: str
    difficulty: str
    source: str  # "ai" or "manual"
    created_at: datetime

    @property
    def id(self) -> str:
        return self.question.id

    def to_dict(self) -> dict:
        data = self.question.to_dict()
        data.update({
            "subject": self.subject,
            "topic": self.topic,
            "difficulty": self.difficulty,
            "source": self.source,
            "createdAt": _iso(self.created_at),
        })
        return data


@dataclass(frozen=True)
class User:
    """Identity attached to a request by the auth layer."""

    id: str
    name: str
    role: str

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name, "role": self.role}
