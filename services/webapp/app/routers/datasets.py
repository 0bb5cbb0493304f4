# =============================================================================
# Datasets Router
# =============================================================================
# Endpoints for dataset ingestion, analysis, versions and sub-scores.
# =============================================================================

from typing import Optional

from fastapi import APIRouter, Query, Request, status
from pydantic import BaseModel, Field
from starlette.concurrency import run_in_threadpool
from starlette.datastructures import UploadFile

from trust_ledger import InvalidInputError
from trust_ledger.models import (
    SYSTEM_ACTOR,
    DatasetRecord,
    DatasetVersion,
    InsightInput,
    LedgerEntry,
)

from app.config import get_settings
from app.services.ledger_service import get_ledger_service

router = APIRouter(prefix="/datasets", tags=["datasets"])

UPLOAD_CHUNK_BYTES = 1024 * 1024


class DatasetCreateRequest(BaseModel):
    """JSON body for registering a dataset by content hash."""

    name: str
    owner_wallet: str
    description: str = ""
    content_hash: str
    filename: Optional[str] = None


class DatasetListResponse(BaseModel):
    """Response for dataset listing."""

    datasets: list[DatasetRecord]
    count: int
    offset: int
    limit: int


class DatasetDeleteResponse(BaseModel):
    """Response for dataset deletion."""

    dataset_id: int
    deleted: dict[str, int]
    message: str


class AnalysisRequest(BaseModel):
    """One analysis run: the insights it produced."""

    insights: list[InsightInput] = Field(..., min_length=1)
    actor: str = SYSTEM_ACTOR


class VersionCreateRequest(BaseModel):
    """New content for a dataset, parented on its current version."""

    content_hash: str
    parent_version: int = Field(..., ge=1)
    actor: str = SYSTEM_ACTOR


class ScoresUpdateRequest(BaseModel):
    """Sub-scores to overwrite, keyed by name (e.g. "freshness")."""

    scores: dict[str, float]
    actor: str = SYSTEM_ACTOR


async def _read_upload(request: Request) -> dict:
    form = await request.form()
    upload = form.get("file")
    if not isinstance(upload, UploadFile):
        raise InvalidInputError("Multipart uploads need a 'file' part")

    limit = get_settings().max_upload_bytes
    content = bytearray()
    while True:
        chunk = await upload.read(UPLOAD_CHUNK_BYTES)
        if not chunk:
            break
        content.extend(chunk)
        if len(content) > limit:
            raise InvalidInputError(f"Upload exceeds {limit} bytes")

    return {
        "name": form.get("name") or upload.filename or "",
        "owner_wallet": form.get("owner_wallet") or "",
        "description": form.get("description") or "",
        "content": bytes(content),
        "filename": upload.filename,
    }


@router.get("", response_model=DatasetListResponse)
def list_datasets(
    offset: int = Query(0, ge=0, description="Offset for pagination"),
    limit: int = Query(50, ge=1, le=100, description="Limit for pagination"),
) -> DatasetListResponse:
    """List datasets, most recently created first."""
    datasets = get_ledger_service().list_datasets(limit=limit, offset=offset)
    return DatasetListResponse(datasets=datasets, count=len(datasets), offset=offset, limit=limit)


@router.post("", response_model=DatasetRecord, status_code=status.HTTP_201_CREATED)
async def create_dataset(request: Request) -> DatasetRecord:
    """
    Register a dataset.

    Accepts either a multipart upload (``file`` plus ``name``,
    ``owner_wallet`` and optional ``description`` form fields), hashed
    server-side, or a JSON body carrying a precomputed ``content_hash``.
    """
    content_type = request.headers.get("content-type", "")
    if content_type.startswith("multipart/form-data"):
        kwargs = await _read_upload(request)
    else:
        try:
            payload = DatasetCreateRequest.model_validate(await request.json())
        except ValueError as e:
            raise InvalidInputError(f"Invalid dataset request: {e}") from e
        kwargs = payload.model_dump()

    return await run_in_threadpool(get_ledger_service().create_dataset, **kwargs)


@router.get("/{dataset_id}", response_model=DatasetRecord)
def get_dataset(dataset_id: int) -> DatasetRecord:
    """Get a dataset with its current sub-scores and trust score."""
    return get_ledger_service().get_dataset(dataset_id)


@router.delete("/{dataset_id}", response_model=DatasetDeleteResponse)
def delete_dataset(dataset_id: int) -> DatasetDeleteResponse:
    """Delete a dataset and everything recorded against it."""
    deleted = get_ledger_service().delete_dataset(dataset_id)
    return DatasetDeleteResponse(
        dataset_id=dataset_id,
        deleted=deleted,
        message=f"Dataset {dataset_id} deleted",
    )


@router.post(
    "/{dataset_id}/analysis",
    response_model=list[LedgerEntry],
    status_code=status.HTTP_201_CREATED,
)
def record_analysis(dataset_id: int, request: AnalysisRequest) -> list[LedgerEntry]:
    """Record the insights produced by one analysis run."""
    return get_ledger_service().record_insights(
        dataset_id, request.insights, actor=request.actor
    )


@router.get("/{dataset_id}/versions", response_model=list[DatasetVersion])
def list_versions(dataset_id: int) -> list[DatasetVersion]:
    """Version chain of a dataset, oldest first."""
    return get_ledger_service().get_versions(dataset_id)


@router.post(
    "/{dataset_id}/versions",
    response_model=DatasetVersion,
    status_code=status.HTTP_201_CREATED,
)
def create_version(dataset_id: int, request: VersionCreateRequest) -> DatasetVersion:
    """Record new content as the next version. 409 if parent_version is stale."""
    return get_ledger_service().add_version(
        dataset_id,
        parent_version=request.parent_version,
        content_hash=request.content_hash,
        actor=request.actor,
    )


@router.patch("/{dataset_id}/scores", response_model=DatasetRecord)
def update_scores(dataset_id: int, request: ScoresUpdateRequest) -> DatasetRecord:
    """Overwrite sub-scores and recompute the trust score."""
    return get_ledger_service().update_scores(dataset_id, request.scores, actor=request.actor)
