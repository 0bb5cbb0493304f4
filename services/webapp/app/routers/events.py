# =============================================================================
# Events Router
# =============================================================================
# Endpoints for the lifecycle and audit streams of a dataset.
# =============================================================================

from typing import Optional

from fastapi import APIRouter, Query
from pydantic import BaseModel

from trust_ledger.models import AuditEvent, LifecycleEvent

from app.services.ledger_service import get_ledger_service

router = APIRouter(prefix="/events", tags=["events"])


class StageResponse(BaseModel):
    """Furthest lifecycle stage reached by a dataset."""

    dataset_id: int
    stage: Optional[str]


@router.get("/{dataset_id}/audit", response_model=list[AuditEvent])
def get_audit_log(
    dataset_id: int,
    newest_first: bool = Query(False, description="Reverse chronological order"),
) -> list[AuditEvent]:
    """Actor-attributed audit events for a dataset."""
    return get_ledger_service().get_audit_log(dataset_id, newest_first=newest_first)


@router.get("/{dataset_id}/lifecycle", response_model=list[LifecycleEvent])
def get_lifecycle(
    dataset_id: int,
    newest_first: bool = Query(False, description="Reverse chronological order"),
) -> list[LifecycleEvent]:
    """Lifecycle events for a dataset."""
    return get_ledger_service().get_timeline(dataset_id, newest_first=newest_first)


@router.get("/{dataset_id}/stage", response_model=StageResponse)
def get_stage(dataset_id: int) -> StageResponse:
    stage = get_ledger_service().get_lifecycle_stage(dataset_id)
    return StageResponse(dataset_id=dataset_id, stage=stage.name if stage else None)
