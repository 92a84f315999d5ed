"""
AI Text Generation Service
==========================
Thin wrapper around an OpenAI-compatible chat-completions endpoint used for
question generation, semester planning and the assistant chat.

Generated content is not checked for academic correctness; the only contract
is that JSON endpoints return something parseable. Any failure (missing key,
non-success status, no content, bad JSON) raises GenerationError and is never
retried.
"""
import json
import logging
import re
import time

import openai
from openai import OpenAI

from campusdesk.errors import GenerationError, ValidationFailure
from campusdesk.models import QUESTION_TYPES

logger = logging.getLogger(__name__)

SERVICE = "text-generation"

DIFFICULTIES = ("easy", "medium", "hard")
POINTS_BY_DIFFICULTY = {"easy": 5, "medium": 10, "hard": 15}
MAX_QUESTION_COUNT = 50

ASSISTANT_NAME = "VINSA"

_FENCE_RE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)


# ═══════════════════════════════════════════════════════
# PROMPTS
# ═══════════════════════════════════════════════════════

QUESTION_SYSTEM_PROMPT = """You are {name}, an educational assistant that writes exam-style questions for college students.

RULES:
1. Generate exactly {count} questions
2. Difficulty: {difficulty}
3. Question types to include: {types}
4. Subject: {subject}
5. Topic: {topic}

For each question provide:
- Clear, unambiguous question text
- multiple-choice: exactly 4 options, one of which is the correct answer verbatim
- fill-blank: use ___ in the question; the answer is the exact missing word or phrase
- short-answer: a short model answer containing the key terms
- Points by difficulty: easy=5, medium=10, hard=15

Return ONLY a JSON array:
[
  {{
    "type": "multiple-choice" | "fill-blank" | "short-answer",
    "question": "question text",
    "options": ["A", "B", "C", "D"],
    "correctAnswer": "correct answer",
    "points": 10,
    "difficulty": "{difficulty}",
    "topic": "{topic}"
  }}
]
Omit "options" for fill-blank and short-answer questions."""

SEMESTER_PLAN_SYSTEM_PROMPT = """You are {name}, an academic planner helping a teacher lay out a semester.

Create a week-by-week, day-by-day teaching plan:
- Subject: {subject}
- Topics to cover: {topics}
- Total periods available: {total_periods}
- Periods per week: {periods_per_week}
- Semester duration: {semester_weeks} weeks

Distribute topics evenly, include revision before exams, leave buffer time for
doubt clearing and mark milestones.

Return ONLY a JSON object:
{{
  "greeting": "short friendly message about the plan",
  "summary": {{"totalWeeks": 0, "totalPeriods": 0, "topicsCount": 0, "periodsPerTopic": 0}},
  "weeklyPlan": [
    {{
      "week": 1,
      "theme": "...",
      "days": [{{"day": "Monday", "periodNumber": 1, "topic": "...", "subtopic": "...",
                 "objectives": ["..."], "activities": "Lecture/Lab/Discussion", "duration": "50 mins"}}],
      "weekGoal": "...",
      "assessment": "Quiz/Assignment if any"
    }}
  ],
  "milestones": [{{"week": 4, "milestone": "...", "topics": ["..."]}}],
  "tips": ["..."]
}}"""

CHAT_SYSTEM_PROMPT = """You are {name} (Virtual Intelligent Smart Assistant), a friendly and helpful assistant for teachers and heads of department.

You can help with exam questions, semester plans, syllabus organization, timetable
planning, teaching strategies, pending student pass requests and performance by year.

Keep answers concise and specific, use bullet points for lists, and say so
plainly when you do not know something.

CURRENT DATA:{context}"""


# ═══════════════════════════════════════════════════════
# REQUEST VALIDATION
# ═══════════════════════════════════════════════════════

def validate_question_request(topic, subject, difficulty, question_count, question_types):
    """Return a ValidationFailure for a bad generate-questions request, else None."""
    if not str(topic or "").strip():
        return ValidationFailure("Please enter a topic.", "topic")
    if not str(subject or "").strip():
        return ValidationFailure("Please select a subject.", "subject")
    if difficulty not in DIFFICULTIES:
        return ValidationFailure(f"Difficulty must be one of {', '.join(DIFFICULTIES)}.", "difficulty")
    if isinstance(question_count, bool) or not isinstance(question_count, int) \
            or not 1 <= question_count <= MAX_QUESTION_COUNT:
        return ValidationFailure(f"Question count must be between 1 and {MAX_QUESTION_COUNT}.", "questionCount")
    if not isinstance(question_types, list) or not question_types \
            or any(t not in QUESTION_TYPES for t in question_types):
        return ValidationFailure(f"Question types must be chosen from {', '.join(QUESTION_TYPES)}.", "questionTypes")
    return None


def validate_plan_request(subject, topics, total_periods, periods_per_week, semester_weeks):
    """Return a ValidationFailure for a bad semester-plan request, else None."""
    if not str(subject or "").strip():
        return ValidationFailure("Please select a subject.", "subject")
    if not isinstance(topics, list) or not topics or not all(str(t).strip() for t in topics):
        return ValidationFailure("Please list at least one topic.", "topics")
    for name, value in (("totalPeriods", total_periods),
                        ("periodsPerWeek", periods_per_week),
                        ("semesterWeeks", semester_weeks)):
        if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
            return ValidationFailure(f"{name} must be a positive whole number.", name)
    return None


# ═══════════════════════════════════════════════════════
# RESPONSE PARSING
# ═══════════════════════════════════════════════════════

def extract_json(content, what="response", expect=list):
    """Parse JSON from model output, tolerating markdown fences and surrounding chatter."""
    text = _FENCE_RE.sub("", content.strip())
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        pass

    patterns = (r"\[[\s\S]*\]", r"\{[\s\S]*\}")
    if expect is dict:
        patterns = patterns[::-1]
    for pattern in patterns:
        match = re.search(pattern, text)
        if not match:
            continue
        try:
            return json.loads(match.group(0))
        except json.JSONDecodeError:
            continue

    logger.error("AI returned non-JSON %s: %.200s", what, content)
    raise GenerationError(f"Failed to parse {what} from AI response", service=SERVICE)


def normalize_generated_questions(payload, difficulty, topic):
    """Turn the parsed payload into a list of question dicts with ids, points and difficulty filled in."""
    if isinstance(payload, dict):
        payload = payload.get("questions")
    if not isinstance(payload, list) or not all(isinstance(q, dict) for q in payload):
        raise GenerationError("AI response did not contain a list of questions", service=SERVICE)

    stamp = int(time.time() * 1000)
    questions = []
    for index, item in enumerate(payload):
        question = dict(item)
        question["id"] = question.get("id") or f"Q{stamp}_{index}"
        question["difficulty"] = question.get("difficulty") or difficulty
        question["points"] = question.get("points") or POINTS_BY_DIFFICULTY.get(difficulty, 10)
        question.setdefault("topic", topic)
        questions.append(question)
    return questions


def render_chat_context(context):
    """Render dashboard data (pending passes, performance by year, totals) for the system prompt."""
    if not context:
        return " General conversation."
    if isinstance(context, str):
        try:
            context = json.loads(context)
        except json.JSONDecodeError:
            return f"\n{context}"
    if not isinstance(context, dict):
        return f"\n{context}"

    lines = []
    pending = context.get("pendingRequests") or []
    if pending:
        lines.append(f"PENDING PASS REQUESTS ({len(pending)} total):")
        for i, req in enumerate(pending, 1):
            lines.append(f"{i}. {req.get('studentName', 'Unknown')} - \"{req.get('reason', '')}\" "
                         f"(requested: {req.get('requestedTime', 'unknown')})")
    else:
        lines.append("No pending pass requests at the moment.")

    by_year = context.get("performanceByYear") or {}
    if by_year:
        lines.append("")
        lines.append("STUDENT PERFORMANCE BY YEAR:")
        for year, data in by_year.items():
            lines.append(f"- Year {year}: Average score {data.get('avgScore', 0)}% "
                         f"across {data.get('submissions', 0)} submissions")

    lines.append("")
    lines.append(f"OVERALL: {context.get('totalAssignments', 0)} assignments created, "
                 f"{context.get('totalSubmissions', 0)} submissions received.")
    return "\n\n" + "\n".join(lines)


# ═══════════════════════════════════════════════════════
# CLIENT
# ═══════════════════════════════════════════════════════

class TextGenerationClient:
    """Calls the chat-completions endpoint. Pass `client` to supply a ready OpenAI client."""

    def __init__(self, api_key=None, base_url=None, model="gpt-4o-mini", timeout=60.0, client=None):
        self.api_key = api_key
        self.base_url = base_url
        self.model = model
        self.timeout = timeout
        self._client = client

    @classmethod
    def from_config(cls, cfg):
        return cls(
            api_key=cfg.ai_api_key,
            base_url=cfg.ai_base_url,
            model=cfg.ai_model,
            timeout=cfg.ai_timeout_seconds,
        )

    def _get_client(self):
        if self._client is None:
            if not self.api_key or not self.api_key.strip() or "your-key-here" in self.api_key:
                raise GenerationError("AI API key is not configured", service=SERVICE)
            self._client = OpenAI(api_key=self.api_key, base_url=self.base_url, timeout=self.timeout)
        return self._client

    def _complete(self, system_prompt, user_prompt):
        client = self._get_client()
        try:
            completion = client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
            )
        except openai.APIStatusError as e:
            logger.error("AI gateway error: %s %s", e.status_code, e.message)
            if e.status_code == 429:
                raise GenerationError("Rate limit exceeded. Please try again in a moment.",
                                      status_code=429, service=SERVICE) from e
            if e.status_code == 402:
                raise GenerationError("Usage limit reached. Please add credits to continue.",
                                      status_code=402, service=SERVICE) from e
            raise GenerationError(f"AI gateway error: {e.status_code}",
                                  status_code=e.status_code, service=SERVICE) from e
        except openai.APIError as e:
            logger.error("AI gateway request failed: %s", e)
            raise GenerationError(f"AI gateway request failed: {e}", service=SERVICE) from e

        choices = getattr(completion, "choices", None) or []
        content = choices[0].message.content if choices else None
        if not content or not content.strip():
            raise GenerationError("No content in AI response", service=SERVICE)
        return content

    def generate_questions(self, topic, subject, difficulty, question_count, question_types):
        """Generate questions; returns a list of question dicts in the wire format."""
        logger.info("Generating %d questions for %s - %s (%s)", question_count, subject, topic, difficulty)
        system_prompt = QUESTION_SYSTEM_PROMPT.format(
            name=ASSISTANT_NAME,
            count=question_count,
            difficulty=difficulty,
            types=", ".join(question_types),
            subject=subject,
            topic=topic,
        )
        user_prompt = (f"Generate {question_count} {difficulty} difficulty "
                       f"{' and '.join(question_types)} questions about \"{topic}\" in {subject}.")

        content = self._complete(system_prompt, user_prompt)
        questions = normalize_generated_questions(
            extract_json(content, "questions"), difficulty, topic,
        )
        logger.info("Generated %d questions", len(questions))
        return questions

    def generate_semester_plan(self, subject, topics, total_periods, periods_per_week, semester_weeks):
        """Generate a week-by-week teaching plan; returns the plan object."""
        logger.info("Generating semester plan for %s with %d topics, %d total periods",
                    subject, len(topics), total_periods)
        system_prompt = SEMESTER_PLAN_SYSTEM_PROMPT.format(
            name=ASSISTANT_NAME,
            subject=subject,
            topics=", ".join(topics),
            total_periods=total_periods,
            periods_per_week=periods_per_week,
            semester_weeks=semester_weeks,
        )
        user_prompt = (f"Create a comprehensive semester plan for teaching {subject}. "
                       f"The topics are: {', '.join(topics)}. I have {total_periods} periods total, "
                       f"{periods_per_week} periods per week, over {semester_weeks} weeks.")

        plan = extract_json(self._complete(system_prompt, user_prompt), "semester plan", expect=dict)
        if not isinstance(plan, dict):
            raise GenerationError("Failed to parse semester plan from AI response", service=SERVICE)
        return plan

    def chat(self, message, context=None):
        """Free-text assistant reply, returned verbatim."""
        logger.info("Assistant chat: %.50s", message)
        system_prompt = CHAT_SYSTEM_PROMPT.format(name=ASSISTANT_NAME, context=render_chat_context(context))
        return self._complete(system_prompt, message)
