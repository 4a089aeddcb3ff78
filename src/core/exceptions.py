"""Custom exception hierarchy for the content cleaning service.

Every service-layer error inherits from PipelineError, giving the API
layer a single base class to catch and translate into structured JSON
responses. Subclasses carry domain-specific context (the failing stage
for cleaning errors, details dict for debugging).
"""

from __future__ import annotations

from typing import Any


class PipelineError(Exception):
    """Base exception for all service errors."""

    def __init__(
        self,
        message: str,
        *,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message
        self.details: dict[str, Any] = details or {}
        super().__init__(message)


class ContentCleaningError(PipelineError):
    """Raised when a cleaning stage fails unexpectedly."""

    def __init__(
        self,
        message: str,
        *,
        stage: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details={"stage": stage, **(details or {})})
        self.stage = stage


class DatabaseError(PipelineError):
    """Raised when a database operation fails."""


class NotFoundError(PipelineError):
    """Raised when a requested resource does not exist."""
