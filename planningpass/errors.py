"""Typed exceptions for the report pipeline and its collaborators."""

from __future__ import annotations


class PlanningPassError(Exception):
    """Base class for service errors."""


class ValidationError(PlanningPassError, ValueError):
    """Raised when a request payload is missing a required field."""

    def __init__(self, message: str, *, field: str | None = None):
        super().__init__(message)
        self.field = field


class RenderError(PlanningPassError):
    """Raised when a report has no content to render."""


class UpstreamGenerationError(PlanningPassError):
    """Raised when the report text source fails or returns nothing."""


class PersistenceError(PlanningPassError):
    """Raised when a submission cannot be stored."""


class NotificationError(PlanningPassError):
    """Raised when a confirmation message cannot be sent."""
