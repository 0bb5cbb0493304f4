# =============================================================================
# Dataset Version Model
# =============================================================================

from datetime import datetime
from typing import Optional

from pydantic import Field, model_validator

from .base import DocumentModel, HexDigest, utcnow

__all__ = ["DatasetVersion"]


class DatasetVersion(DocumentModel):
    """
    One immutable point in a dataset's content lineage.

    Version 1 has no parent; every later version points at a lower version
    number of the same dataset.
    """

    dataset_id: int = Field(..., ge=1)
    version_number: int = Field(..., ge=1)
    parent_version: Optional[int] = Field(None, ge=1)
    file_hash: HexDigest
    created_at: datetime = Field(default_factory=utcnow)

    @model_validator(mode="after")
    def check_parent(self) -> "DatasetVersion":
        if self.version_number == 1 and self.parent_version is not None:
            raise ValueError("Version 1 cannot have a parent")
        if self.version_number > 1:
            if self.parent_version is None:
                raise ValueError(f"Version {self.version_number} requires a parent")
            if self.parent_version >= self.version_number:
                raise ValueError("Parent version must be lower than the version itself")
        return self
