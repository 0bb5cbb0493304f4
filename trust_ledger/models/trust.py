# =============================================================================
# Trust Score Models
# =============================================================================
# Defines the weight table, the five sub-score components and the breakdown
# returned to readers.
# =============================================================================

import math

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .base import SubScore

__all__ = ["TrustWeights", "TrustComponents", "TrustBreakdown", "SUB_SCORE_FIELDS"]

SUB_SCORE_FIELDS = (
    "completeness",
    "freshness",
    "consistency",
    "schema",
    "verification",
)
"""Sub-score names in weight-table order."""


class TrustWeights(BaseModel):
    """
    Immutable weight table for the composite trust score.

    Defaults are the production weights. A custom table may be injected into
    the engine but must still sum to 1.0.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    completeness: float = Field(0.30, ge=0.0, le=1.0)
    freshness: float = Field(0.25, ge=0.0, le=1.0)
    consistency: float = Field(0.20, ge=0.0, le=1.0)
    schema_: float = Field(0.15, ge=0.0, le=1.0, alias="schema")
    verification: float = Field(0.10, ge=0.0, le=1.0)

    @model_validator(mode="after")
    def check_sum(self) -> "TrustWeights":
        total = sum(self.as_dict().values())
        if not math.isclose(total, 1.0, abs_tol=1e-9):
            raise ValueError(f"Trust weights must sum to 1.0, got {total}")
        return self

    def as_dict(self) -> dict[str, float]:
        return {
            "completeness": self.completeness,
            "freshness": self.freshness,
            "consistency": self.consistency,
            "schema": self.schema_,
            "verification": self.verification,
        }


class TrustComponents(BaseModel):
    """The five sub-scores feeding the trust score, each in [0, 100]."""

    model_config = ConfigDict(populate_by_name=True)

    completeness: SubScore
    freshness: SubScore
    consistency: SubScore
    schema_: SubScore = Field(..., alias="schema")
    verification: SubScore

    def as_dict(self) -> dict[str, float]:
        return {
            "completeness": self.completeness,
            "freshness": self.freshness,
            "consistency": self.consistency,
            "schema": self.schema_,
            "verification": self.verification,
        }


class TrustBreakdown(BaseModel):
    """
    Read model for the trust panel.

    Attributes:
        dataset_id: Dataset the breakdown belongs to
        completeness..verification: Current sub-scores
        total: Stored trust score
        weights: Weight table used to derive ``total``
    """

    dataset_id: int
    completeness: float
    freshness: float
    consistency: float
    schema_: float = Field(..., alias="schema")
    verification: float
    total: float
    weights: dict[str, float]

    model_config = ConfigDict(populate_by_name=True)
