"""Core domain models and enumerations.

These are the canonical data shapes for the content cleaning service.
Every service produces or consumes these types, never raw dicts. Frozen
models are used for value objects that should be immutable once created.
"""

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class IssueCategory(StrEnum):
    """Kinds of problems a cleaning stage can find and fix."""

    HTML_ENTITIES = "html_entities"
    SHORTCODES = "shortcodes"
    SCRIPT_TAGS = "script_tags"
    STYLE_TAGS = "style_tags"
    EMBEDDED_OBJECTS = "embedded_objects"
    FORM_CONTROLS = "form_controls"
    META_TAGS = "meta_tags"
    HTML_COMMENTS = "html_comments"
    EVENT_HANDLERS = "event_handlers"
    UNSAFE_URLS = "unsafe_urls"
    WORDPRESS_ARTIFACTS = "wordpress_artifacts"
    MALFORMED_HTML = "malformed_html"
    PRESENTATIONAL_TAGS = "presentational_tags"
    UNWRAPPED_CONTENT = "unwrapped_content"


class ContentIssue(StrEnum):
    """Issues the analyzer can detect in stored content without cleaning it."""

    ENTITY_ESCAPES = "entity_escapes"
    SHORTCODES = "shortcodes"
    UNSAFE_MARKUP = "unsafe_markup"
    WORDPRESS_ARTIFACTS = "wordpress_artifacts"
    INLINE_CSS = "inline_css"
    PRESENTATIONAL_TAGS = "presentational_tags"
    EXCESS_WHITESPACE = "excess_whitespace"
    EMPTY_ELEMENTS = "empty_elements"
    NOT_WRAPPED = "not_wrapped"


class RowOutcome(StrEnum):
    """What happened to a single row during a bulk cleaning run."""

    CLEANED = "cleaned"
    UNCHANGED = "unchanged"
    SKIPPED = "skipped"
    FAILED = "failed"
    PERSIST_FAILED = "persist_failed"


class ReviewStatus(StrEnum):
    """Moderation state of a post's content."""

    CLEAN = "clean"
    PENDING_REVIEW = "pending_review"


# ---------------------------------------------------------------------------
# Domain models (immutable value objects)
# ---------------------------------------------------------------------------


class ContentRow(BaseModel):
    """A stored post as seen by the batch tools."""

    model_config = ConfigDict(frozen=True)

    id: int
    title: str = ""
    content: str | None = None


class RowResult(BaseModel):
    """Outcome of cleaning (and possibly persisting) one row."""

    model_config = ConfigDict(frozen=True)

    row_id: int
    outcome: RowOutcome
    original_length: int = Field(default=0, ge=0)
    cleaned_length: int = Field(default=0, ge=0)
    error: str | None = None


class ContentIssues(BaseModel):
    """Issues detected in a single content string."""

    model_config = ConfigDict(frozen=True)

    issues: list[ContentIssue] = Field(default_factory=list)

    @property
    def has_issues(self) -> bool:
        return bool(self.issues)


class ContentAnalysis(BaseModel):
    """Aggregate issue analysis over a set of rows."""

    model_config = ConfigDict(frozen=True)

    total_rows: int = Field(..., ge=0)
    rows_with_issues: int = Field(..., ge=0)
    clean_rows: int = Field(..., ge=0)
    issue_counts: dict[ContentIssue, int] = Field(default_factory=dict)
    sample_ids: list[int] = Field(
        default_factory=list,
        description="A few row ids that still carry issues, for spot checks",
    )
