# =============================================================================
# Data Models Library
# =============================================================================
# Pydantic models and settings for the trust ledger.
# =============================================================================

"""
Data models for the trust ledger.

This library provides:
- DatasetRecord: aggregate root with sub-scores and trust score
- DatasetVersion: version chain entries
- LedgerEntry: hash-addressed AI insights
- LifecycleEvent / AuditEvent: the two event streams
- StorageProof: simulated storage attestation
- Configuration models
"""

# Shared types
from .base import (
    DocumentModel,
    HexDigest,
    SubScore,
    validate_hex_digest,
    validate_sub_score,
)

# Trust score models
from .trust import (
    SUB_SCORE_FIELDS,
    TrustBreakdown,
    TrustComponents,
    TrustWeights,
)

# Dataset models
from .dataset import (
    AI_REPORT_PENDING,
    DatasetCreate,
    DatasetRecord,
)

# Version models
from .version import DatasetVersion

# Ledger models
from .ledger import (
    InsightInput,
    LedgerEntry,
)

# Event models
from .events import (
    SYSTEM_ACTOR,
    AuditEvent,
    AuditEventType,
    LifecycleEvent,
    LifecycleEventType,
    LifecycleStage,
    VerificationLog,
)

# Proof models
from .proof import (
    AttestationReceipt,
    StorageProof,
)

# Configuration models
from .config import (
    LedgerSettings,
    MongoSettings,
)

__all__ = [
    # Shared types
    "DocumentModel",
    "HexDigest",
    "SubScore",
    "validate_hex_digest",
    "validate_sub_score",
    # Trust score models
    "SUB_SCORE_FIELDS",
    "TrustBreakdown",
    "TrustComponents",
    "TrustWeights",
    # Dataset models
    "AI_REPORT_PENDING",
    "DatasetCreate",
    "DatasetRecord",
    # Version models
    "DatasetVersion",
    # Ledger models
    "InsightInput",
    "LedgerEntry",
    # Event models
    "SYSTEM_ACTOR",
    "AuditEvent",
    "AuditEventType",
    "LifecycleEvent",
    "LifecycleEventType",
    "LifecycleStage",
    "VerificationLog",
    # Proof models
    "AttestationReceipt",
    "StorageProof",
    # Configuration models
    "LedgerSettings",
    "MongoSettings",
]
