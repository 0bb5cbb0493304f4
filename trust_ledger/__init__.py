# =============================================================================
# Trust Ledger Library
# =============================================================================
# Provenance, versioning and trust scoring for ingested datasets.
# See individual modules for detailed documentation.
# =============================================================================

"""
Trust ledger library.

Modules:
- models: Pydantic data models and settings
- store: MongoDB persistence and unit of work
- scoring: weighted trust score engine
- versions / provenance / timeline / proofs: ledger components
- service: TrustLedgerService facade used by the web layer
"""

from trust_ledger.errors import (
    AttestationError,
    ConflictError,
    InternalError,
    InvalidInputError,
    LedgerError,
    NotFoundError,
)
from trust_ledger.service import TrustLedgerService
from trust_ledger.store import LedgerStore

__version__ = "0.1.0"

__all__ = [
    "AttestationError",
    "ConflictError",
    "InternalError",
    "InvalidInputError",
    "LedgerError",
    "NotFoundError",
    "LedgerStore",
    "TrustLedgerService",
]
