# =============================================================================
# Event Timeline
# =============================================================================
# Two independent append-only streams sharing the dataset key:
# - lifecycle: UPLOAD, ANALYZED, VERIFIED, ...
# - audit: actor-attributed actions and their side effects
# =============================================================================

"""Lifecycle and audit event streams."""

import logging
from typing import Any, Optional

from pydantic import ValidationError

from trust_ledger.errors import InvalidInputError
from trust_ledger.models import (
    SYSTEM_ACTOR,
    AuditEvent,
    LifecycleEvent,
    LifecycleStage,
)
from trust_ledger.store import LedgerStore

__all__ = ["EventTimeline"]

logger = logging.getLogger(__name__)


class EventTimeline:
    """
    Appends to and reads the two event streams.

    Event types form an open set: any non-empty string is accepted. Reads are
    ordered by (created_at, id), so ties keep insertion order.
    """

    def __init__(self, store: LedgerStore) -> None:
        self.store = store

    def log_lifecycle(
        self,
        dataset_id: int,
        event_type: str,
        metadata: Optional[dict[str, Any]] = None,
    ) -> LifecycleEvent:
        """
        Record that a dataset reached a pipeline stage.

        Raises:
            InvalidInputError: If event_type is empty
        """
        try:
            event = LifecycleEvent(
                id=self.store.next_id(LedgerStore.LIFECYCLE),
                dataset_id=dataset_id,
                event_type=event_type,
                metadata=metadata or {},
            )
        except ValidationError as e:
            raise InvalidInputError(f"Invalid lifecycle event: {e}") from e
        self.store.insert(LedgerStore.LIFECYCLE, event)
        logger.debug("Lifecycle %s logged for dataset %s", event.event_type, dataset_id)
        return event

    def log_audit(
        self,
        dataset_id: int,
        event_type: str,
        actor: str = SYSTEM_ACTOR,
        metadata: Optional[dict[str, Any]] = None,
    ) -> AuditEvent:
        """
        Record who did what to a dataset.

        Args:
            dataset_id: Dataset the action touched
            event_type: Action performed
            actor: Wallet identity, or "system" for automated triggers
            metadata: Optional side-effect details

        Raises:
            InvalidInputError: If event_type is empty
        """
        try:
            event = AuditEvent(
                id=self.store.next_id(LedgerStore.AUDIT),
                dataset_id=dataset_id,
                event_type=event_type,
                actor=actor,
                metadata=metadata or {},
            )
        except ValidationError as e:
            raise InvalidInputError(f"Invalid audit event: {e}") from e
        self.store.insert(LedgerStore.AUDIT, event)
        logger.debug(
            "Audit %s by %s logged for dataset %s", event.event_type, event.actor, dataset_id
        )
        return event

    def list_lifecycle(self, dataset_id: int, newest_first: bool = False) -> list[LifecycleEvent]:
        return self.store.list_for_dataset(
            LedgerStore.LIFECYCLE, dataset_id, LifecycleEvent, newest_first=newest_first
        )

    def list_audit(self, dataset_id: int, newest_first: bool = False) -> list[AuditEvent]:
        return self.store.list_for_dataset(
            LedgerStore.AUDIT, dataset_id, AuditEvent, newest_first=newest_first
        )

    def current_stage(self, dataset_id: int) -> Optional[LifecycleStage]:
        """
        Furthest pipeline stage the dataset has reached.

        Out-of-order events are tolerated: the stage is the maximum seen, not
        the last logged.
        """
        stages = [
            stage
            for stage in (
                LifecycleStage.for_event(event.event_type)
                for event in self.list_lifecycle(dataset_id)
            )
            if stage is not None
        ]
        return max(stages, default=None)
