# =============================================================================
# Event Models
# =============================================================================
# Two append-only streams scoped by dataset id:
# - LifecycleEvent: where the dataset is in its verification pipeline
# - AuditEvent: who triggered an action and with what side effects
# =============================================================================

from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import Field, field_validator

from .base import DocumentModel, utcnow

__all__ = [
    "LifecycleEventType",
    "AuditEventType",
    "LifecycleStage",
    "LifecycleEvent",
    "AuditEvent",
    "VerificationLog",
    "SYSTEM_ACTOR",
]

SYSTEM_ACTOR = "system"


class LifecycleEventType(str, Enum):
    """Well-known lifecycle event types. The stream accepts any non-empty type."""

    UPLOAD = "UPLOAD"
    ANALYZED = "ANALYZED"
    VERIFIED = "VERIFIED"
    BLOCKCHAIN_REGISTERED = "BLOCKCHAIN_REGISTERED"
    VERSIONED = "VERSIONED"


class AuditEventType(str, Enum):
    """Well-known audit event types. The stream accepts any non-empty type."""

    DATASET_CREATED = "DATASET_CREATED"
    ANALYSIS_RUN = "ANALYSIS_RUN"
    BLOCKCHAIN_REGISTERED = "BLOCKCHAIN_REGISTERED"
    REGISTRATION_FAILED = "REGISTRATION_FAILED"
    VERSION_CREATED = "VERSION_CREATED"
    SCORES_UPDATED = "SCORES_UPDATED"
    CONTENT_VERIFIED = "CONTENT_VERIFIED"


class LifecycleStage(int, Enum):
    """Ordered verification pipeline stages derived from lifecycle events."""

    UPLOADED = 1
    ANALYZED = 2
    VERIFIED = 3

    @classmethod
    def for_event(cls, event_type: str) -> Optional["LifecycleStage"]:
        return _STAGE_BY_EVENT.get(event_type)


_STAGE_BY_EVENT = {
    LifecycleEventType.UPLOAD.value: LifecycleStage.UPLOADED,
    LifecycleEventType.ANALYZED.value: LifecycleStage.ANALYZED,
    LifecycleEventType.VERIFIED.value: LifecycleStage.VERIFIED,
    LifecycleEventType.BLOCKCHAIN_REGISTERED.value: LifecycleStage.VERIFIED,
}


def _validate_event_type(value: Any) -> str:
    if isinstance(value, Enum):
        value = value.value
    if not isinstance(value, str) or not value.strip():
        raise ValueError("event_type must be a non-empty string")
    return value.strip()


class LifecycleEvent(DocumentModel):
    """Lifecycle event document in the ``lifecycle_events`` collection."""

    dataset_id: int = Field(..., ge=1)
    event_type: str
    metadata: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=utcnow)

    @field_validator("event_type", mode="before")
    @classmethod
    def validate_event_type(cls, v: Any) -> str:
        return _validate_event_type(v)


class AuditEvent(DocumentModel):
    """
    Audit event document in the ``audit_events`` collection.

    Attributes:
        dataset_id: Dataset the action touched
        event_type: What happened (e.g., DATASET_CREATED, ANALYSIS_RUN)
        actor: Wallet identity or "system" for automated triggers
        metadata: Side effects and context (flexible dict)
        created_at: When the action was recorded (UTC)
    """

    dataset_id: int = Field(..., ge=1)
    event_type: str
    actor: str = SYSTEM_ACTOR
    metadata: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=utcnow)

    @field_validator("event_type", mode="before")
    @classmethod
    def validate_event_type(cls, v: Any) -> str:
        return _validate_event_type(v)

    @field_validator("actor", mode="before")
    @classmethod
    def default_actor(cls, v: Any) -> str:
        """Blank or missing actors are attributed to the system."""
        if v is None or (isinstance(v, str) and not v.strip()):
            return SYSTEM_ACTOR
        return v


class VerificationLog(DocumentModel):
    """
    Result of one content verification lookup (``verification_logs``).

    ``dataset_id`` is None when no dataset matched the hash.
    """

    dataset_id: Optional[int] = Field(None, ge=1)
    content_hash: str
    wallet: str
    result: bool
    created_at: datetime = Field(default_factory=utcnow)
