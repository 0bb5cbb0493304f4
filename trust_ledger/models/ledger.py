# =============================================================================
# Provenance Ledger Models
# =============================================================================
# LedgerEntry: append-only, hash-addressed AI insight record.
# InsightInput: one insight returned by the analysis engine.
# =============================================================================

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from .base import DocumentModel, HexDigest, utcnow

__all__ = ["LedgerEntry", "InsightInput"]


class InsightInput(BaseModel):
    """Insight text and confidence as produced by the analysis engine."""

    insight_text: str
    confidence: Optional[float] = Field(None, ge=0.0, le=1.0)

    @field_validator("insight_text")
    @classmethod
    def validate_insight_text(cls, v: str) -> str:
        """Reject empty or whitespace-only insight text."""
        if not v.strip():
            raise ValueError("insight_text cannot be empty")
        return v


class LedgerEntry(DocumentModel):
    """
    Ledger entry document in the ``ledger_entries`` collection.

    Attributes:
        dataset_id: Owning dataset
        insight_text: Free-text insight
        insight_hash: SHA-256 of ``insight_text``
        dataset_version: Dataset version the insight was computed against
        verified: Always True at creation; reserved for future corroboration
        confidence: Oracle confidence in [0, 1], if supplied
        created_at: Append time (UTC)
    """

    dataset_id: int = Field(..., ge=1)
    insight_text: str
    insight_hash: HexDigest
    dataset_version: int = Field(..., ge=1)
    verified: bool = True
    confidence: Optional[float] = Field(None, ge=0.0, le=1.0)
    created_at: datetime = Field(default_factory=utcnow)
