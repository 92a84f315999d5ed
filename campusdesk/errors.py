"""Failure types shared by the services and routes."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ValidationFailure:
    """Returned (never raised) when an operation rejects its input."""

    message: str
    field: str | None = None

    def to_dict(self) -> dict:
        data = {"error": self.message}
        if self.field:
            data["field"] = self.field
        return data


class CampusDeskError(Exception):
    """Base exception for all application-specific errors."""
    pass


class GenerationError(CampusDeskError):
    """Error from the external text-generation service (bad status, bad JSON, no content)."""

    def __init__(self, message: str, status_code: int | None = None, service: str | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.service = service

    def __str__(self) -> str:
        base = super().__str__()
        details = []
        if self.service:
            details.append(f"Service: {self.service}")
        if self.status_code:
            details.append(f"Status Code: {self.status_code}")
        if details:
            return f"{base} ({', '.join(details)})"
        return base
