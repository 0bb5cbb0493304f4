# =============================================================================
# Ledger Router
# =============================================================================
# Endpoints for reading the provenance ledger of a dataset.
# =============================================================================

from fastapi import APIRouter
from pydantic import BaseModel

from trust_ledger.models import LedgerEntry
from trust_ledger.provenance import ProvenanceLedger

from app.services.ledger_service import get_ledger_service

router = APIRouter(prefix="/ledger", tags=["ledger"])


class EntryCheckResponse(BaseModel):
    """Result of re-hashing one ledger entry."""

    entry_id: int
    insight_hash: str
    intact: bool


@router.get("/{dataset_id}", response_model=list[LedgerEntry])
def get_ledger(dataset_id: int) -> list[LedgerEntry]:
    """Every insight recorded for a dataset, oldest first."""
    return get_ledger_service().get_ledger(dataset_id)


@router.get("/{dataset_id}/check", response_model=list[EntryCheckResponse])
def check_ledger(dataset_id: int) -> list[EntryCheckResponse]:
    """Re-hash each entry's text and compare it with the stored hash."""
    return [
        EntryCheckResponse(
            entry_id=entry.id,
            insight_hash=entry.insight_hash,
            intact=ProvenanceLedger.verify_entry(entry),
        )
        for entry in get_ledger_service().get_ledger(dataset_id)
    ]
