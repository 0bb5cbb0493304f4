# =============================================================================
# Storage Proof Models
# =============================================================================
# Ephemeral attestation documents. Never persisted.
# =============================================================================

from datetime import datetime

from pydantic import BaseModel, Field

from .base import HexDigest, utcnow

__all__ = ["StorageProof", "AttestationReceipt"]


class StorageProof(BaseModel):
    """
    Simulated storage attestation.

    ``attestation_digest`` is a single SHA-256 over the file hash and the
    concatenated node ids. It is not a Merkle root and cannot be verified
    per node.
    """

    proof_id: str
    dataset_id: int = Field(..., ge=1)
    storage_nodes: list[str]
    attestation_digest: HexDigest
    timestamp: datetime = Field(default_factory=utcnow)
    network: str
    verified: bool = True


class AttestationReceipt(BaseModel):
    """Outcome of registering a dataset with the attestation authority."""

    dataset_id: int
    proof_ref: str
    status: str = "success"
    verification_score: float
    trust_score: float
