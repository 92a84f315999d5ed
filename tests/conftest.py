"""
Shared test fixtures for CampusDesk.
Seeded in-memory repository, Flask test client with demo tokens, and a fake
chat-completions client. Zero network calls.
"""
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import httpx
import openai
import pytest

from campusdesk.app import create_app
from campusdesk.auth import issue_token
from campusdesk.models import (
    Assignment, FillBlankQuestion, MultipleChoiceQuestion, ShortAnswerQuestion, Submission,
)
from campusdesk.repository import DEMO_USERS, InMemoryRepository, seed_demo_data
from campusdesk.services.ai_service import TextGenerationClient

JWT_SECRET = "test-secret-for-campusdesk-0123456789abcdef"
NOW = datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc)


# ═══════════════════════════════════════════════════════
# FAKE TEXT GENERATION
# ═══════════════════════════════════════════════════════

class FakeCompletions:
    """Stands in for `client.chat.completions`; replies from a queue and records every call."""

    def __init__(self):
        self.replies = []
        self.calls = []

    def queue(self, reply):
        """Queue a string (returned as content) or an exception (raised)."""
        self.replies.append(reply)

    def create(self, **kwargs):
        self.calls.append(kwargs)
        reply = self.replies.pop(0) if self.replies else ""
        if isinstance(reply, Exception):
            raise reply
        message = SimpleNamespace(role="assistant", content=reply)
        return SimpleNamespace(choices=[SimpleNamespace(index=0, message=message)])


def status_error(code):
    """An openai.APIStatusError carrying the given HTTP status."""
    request = httpx.Request("POST", "https://ai.test/v1/chat/completions")
    response = httpx.Response(code, request=request)
    return openai.APIStatusError(f"Error code: {code}", response=response, body=None)


def connection_error():
    request = httpx.Request("POST", "https://ai.test/v1/chat/completions")
    return openai.APIConnectionError(request=request)


@pytest.fixture
def completions():
    return FakeCompletions()


@pytest.fixture
def text_client(completions):
    fake_openai = SimpleNamespace(chat=SimpleNamespace(completions=completions))
    return TextGenerationClient(api_key="test-key", model="test-model", client=fake_openai)


# ═══════════════════════════════════════════════════════
# DOMAIN DATA
# ═══════════════════════════════════════════════════════

@pytest.fixture
def now():
    return NOW


@pytest.fixture
def questions():
    return (
        MultipleChoiceQuestion(id="Q1", text="Array access complexity?", correct_answer="O(1)",
                               points=10, options=("O(1)", "O(n)", "O(log n)", "O(n^2)")),
        FillBlankQuestion(id="Q2", text="Each node holds data and a ___.", correct_answer="pointer",
                          points=10),
        ShortAnswerQuestion(id="Q3", text="Define a stack.", correct_answer="last in first out",
                            points=5),
    )


@pytest.fixture
def make_assignment(questions, now):
    """Factory for assignments; keyword arguments override the defaults."""
    def _make(**overrides):
        fields = dict(
            id="A100",
            teacher_id="T001",
            teacher_name="Dr. Rajesh Kumar",
            class_id="CS-2A",
            title="Data Structures Quiz",
            description="Arrays, lists and stacks",
            questions=questions,
            due_date=now + timedelta(days=3),
            created_at=now,
        )
        fields.update(overrides)
        return Assignment(**fields)
    return _make


@pytest.fixture
def make_submission(now):
    """Factory for submissions; only the fields analytics looks at need to vary."""
    counter = iter(range(1, 10_000))

    def _make(student_id, percentage, assignment_id="A001", student_name=None):
        return Submission(
            id=f"SUB{next(counter)}",
            assignment_id=assignment_id,
            student_id=student_id,
            student_name=student_name or f"Student {student_id}",
            student_answers={},
            score=percentage,
            max_score=100,
            percentage=percentage,
            feedback={},
            corrected_time=now,
        )
    return _make


# ═══════════════════════════════════════════════════════
# APP
# ═══════════════════════════════════════════════════════

@pytest.fixture
def repo(now):
    return seed_demo_data(InMemoryRepository(), now=now)


@pytest.fixture
def app(repo, text_client):
    app = create_app(
        overrides={
            "jwt_secret": JWT_SECRET,
            "demo_mode": True,
            "auto_publish": False,
            "seed_demo_data": False,
        },
        repository=repo,
        text_client=text_client,
    )
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def auth_headers():
    """Bearer headers for a demo role ('student', 'teacher', 'hod')."""
    def _headers(role="teacher"):
        token = issue_token(DEMO_USERS[role], JWT_SECRET)
        return {"Authorization": f"Bearer {token}"}
    return _headers
