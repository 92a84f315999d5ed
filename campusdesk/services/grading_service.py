"""
Auto-Grading Service
====================
Scores a student's answers against an assignment's questions.

Matching is per question type, after trimming and lowercasing both sides:

- multiple-choice: exact match
- fill-blank: either string contains the other
- short-answer: any keyword of the model answer appears in the student answer

No partial credit. The short-answer rule is lenient: a single overlapping
keyword is enough to award full points.
"""
from __future__ import annotations

import math
from collections.abc import Mapping, Sequence

from campusdesk.models import (
    FILL_BLANK, MULTIPLE_CHOICE, SHORT_ANSWER,
    GradeResult, Question, QuestionFeedback,
)


def normalize_answer(value) -> str:
    """Trim and lowercase an answer for comparison."""
    if value is None:
        return ""
    return str(value).strip().lower()


def round_percentage(score, max_score) -> int:
    """Percentage rounded half-up; 0 when there is nothing to score."""
    if max_score <= 0:
        return 0
    return int(math.floor(100 * score / max_score + 0.5))


def is_answer_correct(question: Question, student_answer) -> bool:
    """Apply the question type's matching rule to one answer."""
    answer = normalize_answer(student_answer)
    correct = normalize_answer(question.correct_answer)

    # A missing answer never scores, even though "" is a substring of everything
    if not answer:
        return False

    if question.type == MULTIPLE_CHOICE:
        return answer == correct
    if question.type == FILL_BLANK:
        return correct in answer or answer in correct
    if question.type == SHORT_ANSWER:
        keywords = correct.split()
        return any(keyword in answer for keyword in keywords)
    return False


def grade(answers: Mapping[str, str] | None, questions: Sequence[Question]) -> GradeResult:
    """Grade all answers against the question list.

    Missing answers count as incorrect and answers for unknown question ids are
    ignored. Deterministic: the same inputs always give the same result.
    """
    answers = answers or {}
    score = 0
    max_score = 0
    feedback = {}

    for question in questions:
        max_score += question.points
        correct = is_answer_correct(question, answers.get(question.id, ""))
        if correct:
            score += question.points
        feedback[question.id] = QuestionFeedback(
            correct=correct,
            correct_answer=question.correct_answer,
        )

    return GradeResult(
        score=score,
        max_score=max_score,
        percentage=round_percentage(score, max_score),
        feedback=feedback,
    )
