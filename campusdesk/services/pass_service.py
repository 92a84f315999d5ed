"""Pass request workflow: students file requests, teachers and HODs decide them."""
from __future__ import annotations

from dataclasses import replace

from campusdesk.errors import ValidationFailure
from campusdesk.models import (
    PASS_APPROVED, PASS_DENIED, PASS_PENDING, PassRequest, User, utcnow,
)

DECISIONS = {"approve": PASS_APPROVED, "deny": PASS_DENIED}


def new_pass_request(student: User, reason, request_id: str, now=None) -> PassRequest | ValidationFailure:
    reason = str(reason or "").strip()
    if not reason:
        return ValidationFailure("Please give a reason for the pass.", "reason")
    return PassRequest(
        id=request_id,
        student_id=student.id,
        student_name=student.name,
        reason=reason,
        requested_time=now or utcnow(),
        status=PASS_PENDING,
    )


def review(request: PassRequest, decision: str, reviewer: User, now=None) -> PassRequest | ValidationFailure:
    """Approve or deny a pending request. Decided requests cannot be reviewed again."""
    status = DECISIONS.get(decision)
    if status is None:
        return ValidationFailure(f"Unknown decision: {decision}", "decision")
    if request.status != PASS_PENDING:
        return ValidationFailure(f"Pass request is already {request.status.lower()}.", "status")
    return replace(
        request,
        status=status,
        reviewed_by=reviewer.name,
        reviewed_at=now or utcnow(),
    )
