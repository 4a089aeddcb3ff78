"""API request schemas.

Every inbound request body is validated through one of these models.
No raw dicts ever reach the service layer.
"""

from pydantic import BaseModel, ConfigDict, Field

# ---------------------------------------------------------------------------
# Cleaning
# ---------------------------------------------------------------------------


class CleanContentRequest(BaseModel):
    """Clean a piece of content without storing it."""

    model_config = ConfigDict(frozen=True)

    content: str = Field(..., max_length=2_000_000, description="Raw post HTML")


class PostContentRequest(BaseModel):
    """Replace a post's content. The submission is cleaned before it is stored."""

    model_config = ConfigDict(frozen=True)

    content: str = Field(..., max_length=2_000_000)


class BulkCleanRequest(BaseModel):
    """Run the cleaner over every stored post."""

    model_config = ConfigDict(frozen=True)

    batch_size: int | None = Field(
        default=None,
        ge=1,
        le=100,
        description="Rows cleaned concurrently per batch; defaults to CLEANER_BATCH_SIZE",
    )
    dry_run: bool = Field(default=False, description="Clean and report without writing")
    include_results: bool = Field(default=False, description="Return the per-row outcomes")
