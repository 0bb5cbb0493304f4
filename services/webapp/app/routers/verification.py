# =============================================================================
# Verification Router
# =============================================================================
# Endpoints for attestation registration, storage proofs and content lookups.
# =============================================================================

from typing import Optional

from fastapi import APIRouter, Query
from pydantic import BaseModel

from trust_ledger.models import (
    SYSTEM_ACTOR,
    AttestationReceipt,
    LifecycleEvent,
    StorageProof,
    VerificationLog,
)

from app.services.ledger_service import get_ledger_service

router = APIRouter(prefix="/verification", tags=["verification"])


class RegisterRequest(BaseModel):
    """Request for registering a dataset with the attestation authority."""

    dataset_id: int
    actor: str = SYSTEM_ACTOR


@router.post("/register", response_model=AttestationReceipt)
def register_attestation(request: RegisterRequest) -> AttestationReceipt:
    """
    Register a dataset and raise its verification sub-score.

    Returns 502 if the attestation authority fails or times out; nothing is
    recorded against the dataset beyond a REGISTRATION_FAILED audit event.
    """
    return get_ledger_service().register_attestation(request.dataset_id, actor=request.actor)


@router.get("/{dataset_id}/timeline", response_model=list[LifecycleEvent])
def get_timeline(
    dataset_id: int,
    newest_first: bool = Query(False, description="Reverse chronological order"),
) -> list[LifecycleEvent]:
    """Lifecycle timeline of a dataset."""
    return get_ledger_service().get_timeline(dataset_id, newest_first=newest_first)


@router.get("/{dataset_id}/proof", response_model=StorageProof)
def get_storage_proof(
    dataset_id: int,
    content_hash: Optional[str] = Query(None, description="Hash to attest, defaults to the current file hash"),
) -> StorageProof:
    """Generate a simulated storage proof for a dataset."""
    return get_ledger_service().get_storage_proof(dataset_id, content_hash=content_hash)


@router.post("/verify/{content_hash}", response_model=VerificationLog)
def verify_content(
    content_hash: str,
    wallet: str = Query(SYSTEM_ACTOR, description="Wallet performing the lookup"),
) -> VerificationLog:
    """Check whether content with this hash was registered. Every lookup is logged."""
    return get_ledger_service().verify_content(content_hash, wallet=wallet)
