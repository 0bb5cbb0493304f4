# =============================================================================
# Base Models and Shared Types
# =============================================================================
# Shared base model for persisted documents plus validated scalar types.
# =============================================================================

"""Base models and shared field types."""

import re
from datetime import datetime, timezone
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, Field

__all__ = [
    "DocumentModel",
    "HexDigest",
    "SubScore",
    "utcnow",
    "validate_hex_digest",
    "validate_sub_score",
]

_HEX_DIGEST = re.compile(r"^[a-f0-9]{64}$")


def utcnow() -> datetime:
    """Current time as an aware UTC datetime, at BSON (millisecond) precision."""
    now = datetime.now(timezone.utc)
    return now.replace(microsecond=now.microsecond // 1000 * 1000)


# =============================================================================
# Hex Digest Validation
# =============================================================================


def validate_hex_digest(value: str) -> str:
    """
    Validate a SHA-256 hex digest.

    Expected format: 64 hexadecimal characters, no prefix.

    Args:
        value: Digest string to validate

    Returns:
        Normalized digest (trimmed, lowercase)

    Raises:
        TypeError: If the value is not a string
        ValueError: If the digest format is invalid
    """
    if not isinstance(value, str):
        raise TypeError(f"Digest must be a string, got {type(value).__name__}")

    value = value.strip().lower()
    if not _HEX_DIGEST.match(value):
        raise ValueError(
            "Invalid digest format. Expected 64 hex characters, "
            f"got: {value[:50]}{'...' if len(value) > 50 else ''}"
        )
    return value


HexDigest = Annotated[
    str,
    Field(..., description="SHA-256 hex digest (64 hex chars)"),
    BeforeValidator(validate_hex_digest),
]
"""SHA-256 hex digest type. Normalized to lowercase."""


# =============================================================================
# Sub-score Validation
# =============================================================================


def validate_sub_score(value: Any) -> float:
    """
    Validate a trust sub-score.

    Sub-scores are real numbers in [0, 100]. Booleans are rejected even though
    they are ints in Python.

    Raises:
        TypeError: If the value is not a real number
        ValueError: If the value is outside [0, 100]
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"Sub-score must be a number, got {type(value).__name__}")
    value = float(value)
    if not 0.0 <= value <= 100.0:
        raise ValueError(f"Sub-score must be within [0, 100], got {value}")
    return value


SubScore = Annotated[float, BeforeValidator(validate_sub_score)]


# =============================================================================
# Document Model
# =============================================================================


class DocumentModel(BaseModel):
    """
    Base for models persisted as MongoDB documents.

    Documents use an integer ``_id`` allocated from the counters collection;
    models expose it as ``id``.
    """

    id: int = Field(..., ge=1, description="Auto-incrementing identifier")

    @classmethod
    def from_document(cls, document: dict[str, Any]):
        """Build a model from a raw MongoDB document."""
        data = dict(document)
        data["id"] = data.pop("_id")
        return cls.model_validate(data)

    def to_document(self) -> dict[str, Any]:
        """
        Dump to a MongoDB document.

        Uses model_dump() without mode="json" so datetimes stay native and are
        stored as BSON dates.
        """
        data = self.model_dump()
        data["_id"] = data.pop("id")
        return data
