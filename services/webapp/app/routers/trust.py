# =============================================================================
# Trust Router
# =============================================================================
# Endpoints for trust score breakdowns.
# =============================================================================

from fastapi import APIRouter

from trust_ledger.models import DatasetRecord, TrustBreakdown

from app.services.ledger_service import get_ledger_service

router = APIRouter(prefix="/trust", tags=["trust"])


@router.get("/{dataset_id}", response_model=TrustBreakdown)
def get_trust_breakdown(dataset_id: int) -> TrustBreakdown:
    """Sub-scores, stored trust score and the weight table behind it."""
    return get_ledger_service().get_trust_breakdown(dataset_id)


@router.post("/{dataset_id}/recompute", response_model=DatasetRecord)
def recompute_trust(dataset_id: int) -> DatasetRecord:
    """Re-derive the trust score from the stored sub-scores."""
    return get_ledger_service().recompute_trust(dataset_id)
