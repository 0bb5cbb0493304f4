# =============================================================================
# Trust Score Engine
# =============================================================================
# Weighted trust score over five bounded sub-scores, plus the per-dataset
# read-modify-write that keeps the stored score in step with its inputs.
# =============================================================================

"""Trust score computation and recomputation."""

import logging
from typing import Any, Mapping, Optional

from pydantic import ValidationError

from trust_ledger.errors import InvalidInputError
from trust_ledger.locks import DatasetLocks
from trust_ledger.models import (
    SUB_SCORE_FIELDS,
    DatasetRecord,
    TrustBreakdown,
    TrustComponents,
    TrustWeights,
    validate_sub_score,
)
from trust_ledger.store import LedgerStore

__all__ = ["TrustScoreEngine", "compute_trust_score", "score_field"]

logger = logging.getLogger(__name__)

MAX_SCORE = 100.0


def score_field(name: str) -> str:
    """DatasetRecord attribute holding sub-score ``name``."""
    return f"{name}_score"


def compute_trust_score(
    components: TrustComponents | Mapping[str, Any],
    weights: TrustWeights,
) -> float:
    """
    Weighted sum of the five sub-scores.

    No clamping: inputs are validated into [0, 100] and the weights sum to
    1.0, so the result stays within [0, 100].

    Raises:
        InvalidInputError: If a component is missing or out of range
    """
    if not isinstance(components, TrustComponents):
        try:
            components = TrustComponents.model_validate(components)
        except ValidationError as e:
            raise InvalidInputError(f"Invalid trust components: {e}") from e

    values = components.as_dict()
    return sum(weight * values[name] for name, weight in weights.as_dict().items())


class TrustScoreEngine:
    """
    Computes trust scores and writes them back to datasets.

    The weight table is an immutable value injected at construction; there is
    no process-wide mutable state.
    """

    def __init__(
        self,
        store: LedgerStore,
        locks: DatasetLocks,
        weights: Optional[TrustWeights] = None,
    ) -> None:
        self.store = store
        self.locks = locks
        self.weights = weights or TrustWeights()

    def compute(self, components: TrustComponents | Mapping[str, Any]) -> float:
        return compute_trust_score(components, self.weights)

    @staticmethod
    def bump_verification(current: float, amount: float) -> float:
        """Raise a verification sub-score by ``amount``, capped at 100."""
        return min(MAX_SCORE, current + amount)

    def recompute(self, dataset_id: int) -> DatasetRecord:
        """
        Re-derive the trust score from the dataset's stored sub-scores.

        Serialized per dataset so that two racing recomputes cannot write a
        score derived from stale sub-scores.

        Raises:
            NotFoundError: If the dataset does not exist
        """
        with self.locks.hold(dataset_id):
            record = self.store.get_dataset(dataset_id)
            trust_score = self.compute(record.components())
            updated = self.store.update_dataset(record, {"trust_score": trust_score})
            logger.debug("Recomputed trust score for dataset %s: %.4f", dataset_id, trust_score)
            return updated

    def apply_scores(self, dataset_id: int, scores: Mapping[str, Any]) -> DatasetRecord:
        """
        Set one or more sub-scores and the derived trust score in one write.

        Args:
            dataset_id: Dataset to update
            scores: Mapping of sub-score name (e.g. "verification") to value

        Raises:
            InvalidInputError: On unknown names, empty input or out-of-range values
            NotFoundError: If the dataset does not exist
        """
        if not scores:
            raise InvalidInputError("At least one sub-score is required")
        unknown = set(scores) - set(SUB_SCORE_FIELDS)
        if unknown:
            raise InvalidInputError(f"Unknown sub-scores: {sorted(unknown)}")

        changes: dict[str, float] = {}
        for name, value in scores.items():
            try:
                changes[score_field(name)] = validate_sub_score(value)
            except (TypeError, ValueError) as e:
                raise InvalidInputError(f"Invalid {name} score: {e}") from e

        with self.locks.hold(dataset_id):
            record = self.store.get_dataset(dataset_id)
            merged = record.components().as_dict()
            merged.update({name: changes[score_field(name)] for name in scores})
            changes["trust_score"] = self.compute(merged)
            return self.store.update_dataset(record, changes)

    def breakdown(self, record: DatasetRecord) -> TrustBreakdown:
        """Sub-scores, stored total and weight table of a dataset."""
        values = record.components().as_dict()
        return TrustBreakdown(
            dataset_id=record.id,
            total=record.trust_score,
            weights=self.weights.as_dict(),
            **values,
        )
