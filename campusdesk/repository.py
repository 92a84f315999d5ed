"""
In-memory data store for CampusDesk.

Holds every collection the dashboards work with. New assignments, submissions
and pass requests are prepended so lists read most-recent-first. A re-entrant
lock serializes the request threads and the auto-publish sweep.
"""
from __future__ import annotations

import threading
from datetime import timedelta
from uuid import uuid4

from campusdesk.models import (
    DAYS_OF_WEEK, PASS_PENDING, YEARS,
    Assignment, FillBlankQuestion, MultipleChoiceQuestion, PassRequest,
    PeriodTiming, Teacher, User, utcnow,
)
from campusdesk.services.performance_service import year_from_class_id

DEMO_USERS = {
    "student": User(id="S001", name="Aarav Sharma", role="student"),
    "teacher": User(id="T001", name="Dr. Rajesh Kumar", role="teacher"),
    "hod": User(id="H001", name="Prof. Sunita Desai", role="hod"),
}


def new_id(prefix: str) -> str:
    return f"{prefix}{uuid4().hex[:10].upper()}"


class InMemoryRepository:
    """CRUD over the dashboard collections. Every method is safe to call from any thread."""

    def __init__(self) -> None:
        self.lock = threading.RLock()
        self._assignments: list[Assignment] = []
        self._submissions = []
        self._pass_requests: list[PassRequest] = []
        self._period_timings: list[PeriodTiming] = []
        self._timetable = []
        self._subjects_by_year: dict[int, list[str]] = {year: [] for year in YEARS}
        self._teachers: list[Teacher] = []
        self._question_bank = []

    # ── Assignments ─────────────────────────────────────

    def list_assignments(self, published_only: bool = False, year: int | None = None) -> list[Assignment]:
        with self.lock:
            items = list(self._assignments)
        if published_only:
            items = [a for a in items if a.is_published]
        if year is not None:
            items = [a for a in items if self._year_of(a) == year]
        return items

    def get_assignment(self, assignment_id: str) -> Assignment | None:
        with self.lock:
            for assignment in self._assignments:
                if assignment.id == assignment_id:
                    return assignment
        return None

    def add_assignment(self, assignment: Assignment) -> Assignment:
        with self.lock:
            if any(a.id == assignment.id for a in self._assignments):
                raise ValueError(f"Assignment {assignment.id} already exists.")
            self._assignments.insert(0, assignment)
        return assignment

    def update_assignment(self, assignment: Assignment) -> Assignment:
        with self.lock:
            for index, existing in enumerate(self._assignments):
                if existing.id == assignment.id:
                    self._assignments[index] = assignment
                    return assignment
        raise KeyError(assignment.id)

    def delete_assignment(self, assignment_id: str) -> bool:
        with self.lock:
            before = len(self._assignments)
            self._assignments = [a for a in self._assignments if a.id != assignment_id]
            return len(self._assignments) != before

    def assignment_years(self) -> dict[str, int]:
        """Map assignment id -> year (target year, else the digit in the class id, else 0)."""
        with self.lock:
            return {a.id: self._year_of(a) for a in self._assignments}

    @staticmethod
    def _year_of(assignment: Assignment) -> int:
        if assignment.target_year:
            return assignment.target_year
        return year_from_class_id(assignment.class_id)

    # ── Submissions ─────────────────────────────────────

    def add_submission(self, submission):
        with self.lock:
            if self.find_submission(submission.assignment_id, submission.student_id):
                raise ValueError(
                    f"{submission.student_id} has already submitted {submission.assignment_id}."
                )
            self._submissions.insert(0, submission)
        return submission

    def find_submission(self, assignment_id: str, student_id: str):
        with self.lock:
            for sub in self._submissions:
                if sub.assignment_id == assignment_id and sub.student_id == student_id:
                    return sub
        return None

    def list_submissions(self, student_id: str | None = None, assignment_id: str | None = None):
        with self.lock:
            items = list(self._submissions)
        if student_id is not None:
            items = [s for s in items if s.student_id == student_id]
        if assignment_id is not None:
            items = [s for s in items if s.assignment_id == assignment_id]
        return items

    # ── Pass requests ───────────────────────────────────

    def add_pass_request(self, request: PassRequest) -> PassRequest:
        with self.lock:
            self._pass_requests.insert(0, request)
        return request

    def get_pass_request(self, request_id: str) -> PassRequest | None:
        with self.lock:
            return next((r for r in self._pass_requests if r.id == request_id), None)

    def update_pass_request(self, request: PassRequest) -> PassRequest:
        with self.lock:
            for index, existing in enumerate(self._pass_requests):
                if existing.id == request.id:
                    self._pass_requests[index] = request
                    return request
        raise KeyError(request.id)

    def list_pass_requests(self, status: str | None = None, student_id: str | None = None) -> list[PassRequest]:
        with self.lock:
            items = list(self._pass_requests)
        if status is not None:
            items = [r for r in items if r.status == status]
        if student_id is not None:
            items = [r for r in items if r.student_id == student_id]
        return items

    # ── Period timings & timetable ──────────────────────

    def list_period_timings(self) -> list[PeriodTiming]:
        with self.lock:
            return sorted(self._period_timings, key=lambda t: t.period_number)

    def replace_period_timings(self, timings: list[PeriodTiming]) -> list[PeriodTiming]:
        with self.lock:
            self._period_timings = list(timings)
        return self.list_period_timings()

    def list_timetable(self, day: str | None = None, class_id: str | None = None):
        with self.lock:
            items = list(self._timetable)
        if day is not None:
            items = [e for e in items if e.day_of_week == day]
        if class_id is not None:
            items = [e for e in items if e.class_id == class_id]
        return sorted(items, key=lambda e: (DAYS_OF_WEEK.index(e.day_of_week), e.period_number, e.class_id))

    def add_timetable_entry(self, entry):
        with self.lock:
            self._timetable.append(entry)
        return entry

    def delete_timetable_entry(self, entry_id: str) -> bool:
        with self.lock:
            before = len(self._timetable)
            self._timetable = [e for e in self._timetable if e.id != entry_id]
            return len(self._timetable) != before

    # ── Subjects & teachers ─────────────────────────────

    def subjects_by_year(self) -> dict[int, list[str]]:
        with self.lock:
            return {year: list(subjects) for year, subjects in self._subjects_by_year.items()}

    def add_subject(self, year: int, subject: str) -> list[str]:
        with self.lock:
            self._subjects_by_year.setdefault(year, []).append(subject)
            return list(self._subjects_by_year[year])

    def remove_subject(self, year: int, subject: str) -> bool:
        with self.lock:
            subjects = self._subjects_by_year.get(year, [])
            if subject not in subjects:
                return False
            subjects.remove(subject)
            return True

    def list_teachers(self) -> list[Teacher]:
        with self.lock:
            return list(self._teachers)

    def add_teacher(self, teacher: Teacher) -> Teacher:
        with self.lock:
            self._teachers.append(teacher)
        return teacher

    def remove_teacher(self, teacher_id: str) -> bool:
        with self.lock:
            before = len(self._teachers)
            self._teachers = [t for t in self._teachers if t.id != teacher_id]
            return len(self._teachers) != before

    # ── Question bank ───────────────────────────────────

    def list_question_bank(self):
        with self.lock:
            return list(self._question_bank)

    def add_question_bank_item(self, item):
        with self.lock:
            self._question_bank.insert(0, item)
        return item

    def remove_question_bank_item(self, item_id: str) -> bool:
        with self.lock:
            before = len(self._question_bank)
            self._question_bank = [q for q in self._question_bank if q.id != item_id]
            return len(self._question_bank) != before


# ═══════════════════════════════════════════════════════
# DEMO DATA
# ═══════════════════════════════════════════════════════

DEFAULT_PERIOD_TIMINGS = [
    (1, "09:00", "09:50", False, "Period 1"),
    (2, "09:50", "10:40", False, "Period 2"),
    (3, "10:40", "10:55", True, "Short Break"),
    (4, "10:55", "11:45", False, "Period 3"),
    (5, "11:45", "12:35", False, "Period 4"),
    (6, "12:35", "13:20", True, "Lunch Break"),
    (7, "13:20", "14:10", False, "Period 5"),
    (8, "14:10", "15:00", False, "Period 6"),
]

DEFAULT_SUBJECTS = {
    1: ["Programming Fundamentals", "Engineering Mathematics", "Digital Logic"],
    2: ["Data Structures", "Database Management Systems", "Object Oriented Programming"],
    3: ["Operating Systems", "Computer Networks", "Software Engineering"],
    4: ["Machine Learning", "Cloud Computing", "Compiler Design"],
}


def seed_demo_data(repo: InMemoryRepository, now=None) -> InMemoryRepository:
    """Load the demo dataset: pending passes, one published assignment, timings, subjects, a teacher."""
    now = now or utcnow()

    repo.add_pass_request(PassRequest(
        id="2",
        student_id="S002",
        student_name="Priya Patel",
        reason="Family Emergency",
        requested_time=now - timedelta(minutes=45),
        status=PASS_PENDING,
    ))
    repo.add_pass_request(PassRequest(
        id="1",
        student_id="S001",
        student_name="Aarav Sharma",
        reason="Medical Emergency - Doctor Appointment",
        requested_time=now - timedelta(minutes=30),
        status=PASS_PENDING,
    ))

    teacher = DEMO_USERS["teacher"]
    repo.add_assignment(Assignment(
        id="A001",
        teacher_id=teacher.id,
        teacher_name=teacher.name,
        class_id="CS-2A",
        target_year=2,
        title="Data Structures - Arrays & Linked Lists",
        description="Complete the following questions on basic data structures",
        questions=(
            MultipleChoiceQuestion(
                id="Q1",
                text="What is the time complexity of accessing an element in an array?",
                options=("O(1)", "O(n)", "O(log n)", "O(n^2)"),
                correct_answer="O(1)",
                points=10,
            ),
            FillBlankQuestion(
                id="Q2",
                text="A linked list consists of nodes where each node contains data and a ___ to the next node.",
                correct_answer="pointer",
                points=10,
            ),
        ),
        due_date=now + timedelta(days=2),
        created_at=now - timedelta(days=1),
        is_published=True,
    ))

    repo.replace_period_timings([
        PeriodTiming(id=f"PT{number}", period_number=number, start_time=start,
                     end_time=end, is_break=is_break, label=label)
        for number, start, end, is_break, label in DEFAULT_PERIOD_TIMINGS
    ])

    for year, subjects in DEFAULT_SUBJECTS.items():
        for subject in subjects:
            repo.add_subject(year, subject)

    repo.add_teacher(Teacher(
        id=teacher.id,
        name=teacher.name,
        email="rajesh.kumar@college.edu",
        assigned_year=2,
        assigned_subject="Data Structures",
    ))
    return repo
