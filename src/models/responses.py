"""API response schemas.

Every outbound response is serialized through one of these models.
Structured error responses are included; the API never leaks raw
stack traces.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from src.models.domain import ReviewStatus, RowResult

# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------


class DependencyHealth(BaseModel):
    """Health status of a single infrastructure dependency."""

    model_config = ConfigDict(frozen=True)

    name: str
    status: str = Field(..., description="'healthy', 'unhealthy', or 'not_configured'")
    latency_ms: float | None = None
    details: str | None = None


class HealthResponse(BaseModel):
    """Aggregate health check response."""

    model_config = ConfigDict(frozen=True)

    status: str = Field(..., description="'healthy', 'degraded', or 'unhealthy'")
    version: str
    uptime_seconds: float
    dependencies: list[DependencyHealth]


# ---------------------------------------------------------------------------
# Cleaning
# ---------------------------------------------------------------------------


class CleanContentResponse(BaseModel):
    """Result of cleaning a single piece of content."""

    model_config = ConfigDict(frozen=True)

    content: str
    changed: bool
    original_length: int = Field(..., ge=0)
    cleaned_length: int = Field(..., ge=0)
    issues: dict[str, int] = Field(
        default_factory=dict,
        description="Fixes applied, by issue category",
    )


class PostContentResponse(BaseModel):
    """Outcome of a post content update.

    When cleaning fails the submission is held for review and ``content``
    is the post's previously published content, never the raw submission.
    """

    model_config = ConfigDict(frozen=True)

    post_id: int
    review_status: ReviewStatus
    content: str | None
    issues: dict[str, int] = Field(default_factory=dict)
    reason: str | None = None


class BulkCleanReport(BaseModel):
    """Summary of a bulk cleaning run."""

    model_config = ConfigDict(frozen=True)

    run_id: str
    dry_run: bool = False
    total_rows: int = Field(..., ge=0)
    cleaned: int = Field(default=0, ge=0)
    unchanged: int = Field(default=0, ge=0)
    skipped: int = Field(default=0, ge=0)
    failed: int = Field(default=0, ge=0)
    persist_failed: int = Field(default=0, ge=0)
    issues: dict[str, int] = Field(default_factory=dict)
    failed_ids: list[int] = Field(default_factory=list)
    elapsed_seconds: float = Field(..., ge=0.0)
    results: list[RowResult] | None = None


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class ErrorResponse(BaseModel):
    """Structured error body returned for all 4xx/5xx responses."""

    model_config = ConfigDict(frozen=True)

    error: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable description")
    details: dict[str, Any] = Field(default_factory=dict)
    request_id: str | None = None
