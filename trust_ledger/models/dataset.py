# =============================================================================
# Dataset Record Model
# =============================================================================
# Aggregate root of the trust ledger: identity, hashes, sub-scores, derived
# trust score and current version.
# =============================================================================

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from .base import DocumentModel, HexDigest, SubScore, utcnow
from .trust import TrustComponents

__all__ = ["DatasetRecord", "DatasetCreate", "AI_REPORT_PENDING"]

AI_REPORT_PENDING = "pending"
"""ai_report_hash value before the first analysis run."""


class DatasetCreate(BaseModel):
    """
    Caller input for dataset creation.

    Attributes:
        name: Dataset display name (required, non-empty)
        description: Free-text description
        owner_wallet: Wallet identity of the uploader (required, not verified)
        content_hash: SHA-256 of the uploaded file
        filename: Original filename, recorded in event metadata
    """

    name: str = Field(..., min_length=1)
    description: str = ""
    owner_wallet: str = Field(..., min_length=1)
    content_hash: HexDigest
    filename: Optional[str] = None


class DatasetRecord(DocumentModel):
    """
    Dataset document in the ``datasets`` collection.

    ``trust_score`` is derived: it equals the weighted sum of the five
    sub-scores after every mutation that touches one. ``revision`` is bumped
    on every update and checked by the store to reject lost updates.
    """

    name: str
    description: str = ""
    owner_wallet: str
    storage_id: str
    file_hash: HexDigest
    metadata_hash: str
    ai_report_hash: str = AI_REPORT_PENDING
    completeness_score: SubScore
    freshness_score: SubScore
    consistency_score: SubScore
    schema_score: SubScore
    verification_score: SubScore
    trust_score: float = Field(..., ge=0.0, le=100.0)
    version: int = Field(1, ge=1)
    revision: int = Field(0, ge=0)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    def components(self) -> TrustComponents:
        """Current sub-scores as a TrustComponents value."""
        return TrustComponents(
            completeness=self.completeness_score,
            freshness=self.freshness_score,
            consistency=self.consistency_score,
            schema=self.schema_score,
            verification=self.verification_score,
        )
