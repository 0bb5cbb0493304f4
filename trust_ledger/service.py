# =============================================================================
# Trust Ledger Service
# =============================================================================
# Facade used by the web layer. Each public method is one logical operation:
# mutations hold the dataset lock and run inside a unit of work so that the
# record update and its event log entries commit together or not at all.
# =============================================================================

"""Trust ledger facade."""

import logging
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import Any, Iterable, Mapping, Optional, TypeVar

from pydantic import BaseModel, ValidationError

from trust_ledger.errors import AttestationError, ConflictError, InvalidInputError
from trust_ledger.hashing import content_hash as hash_content
from trust_ledger.hashing import random_id
from trust_ledger.locks import DatasetLocks
from trust_ledger.models import (
    SYSTEM_ACTOR,
    AttestationReceipt,
    AuditEvent,
    AuditEventType,
    DatasetCreate,
    DatasetRecord,
    DatasetVersion,
    InsightInput,
    LedgerEntry,
    LedgerSettings,
    LifecycleEvent,
    LifecycleEventType,
    LifecycleStage,
    StorageProof,
    TrustBreakdown,
    TrustWeights,
    VerificationLog,
    validate_hex_digest,
)
from trust_ledger.proofs import (
    AttestationAuthority,
    SimulatedAttestationAuthority,
    StorageProofGenerator,
)
from trust_ledger.provenance import ProvenanceLedger
from trust_ledger.scoring import TrustScoreEngine
from trust_ledger.store import LedgerStore
from trust_ledger.timeline import EventTimeline
from trust_ledger.versions import VersionChain

__all__ = ["TrustLedgerService"]

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


def _validate(model_cls: type[ModelT], **data: Any) -> ModelT:
    try:
        return model_cls(**data)
    except ValidationError as e:
        raise InvalidInputError(f"Invalid {model_cls.__name__}: {e}") from e


def _require_hash(value: Optional[str]) -> str:
    if not value:
        raise InvalidInputError("A content hash is required")
    try:
        return validate_hex_digest(value)
    except (TypeError, ValueError) as e:
        raise InvalidInputError(str(e)) from e


class TrustLedgerService:
    """
    Entry point for every trust ledger operation.

    Args:
        store: Ledger store
        settings: Scoring defaults and attestation behavior
        weights: Trust weight table (defaults to the production table)
        authority: Attestation authority (defaults to the simulated one)
        locks: Per-dataset lock registry, shareable between services
    """

    def __init__(
        self,
        store: LedgerStore,
        settings: Optional[LedgerSettings] = None,
        weights: Optional[TrustWeights] = None,
        authority: Optional[AttestationAuthority] = None,
        locks: Optional[DatasetLocks] = None,
    ) -> None:
        self.store = store
        self.settings = settings or LedgerSettings()
        self.locks = locks or DatasetLocks(timeout=self.settings.lock_timeout_seconds)
        self.engine = TrustScoreEngine(store, self.locks, weights)
        self.versions = VersionChain(store, self.locks)
        self.ledger = ProvenanceLedger(store, self.locks)
        self.timeline = EventTimeline(store)
        self.proofs = StorageProofGenerator(self.settings)
        self.authority: AttestationAuthority = authority or SimulatedAttestationAuthority()
        self._executor = ThreadPoolExecutor(max_workers=4, thread_name_prefix="attestation")

    def close(self) -> None:
        self._executor.shutdown(wait=False, cancel_futures=True)

    # ------------------------------------------------------------------
    # Datasets
    # ------------------------------------------------------------------

    def create_dataset(
        self,
        name: str,
        owner_wallet: str,
        description: str = "",
        content_hash: Optional[str] = None,
        content: Optional[bytes] = None,
        filename: Optional[str] = None,
    ) -> DatasetRecord:
        """
        Register an ingested file as a new dataset.

        Either ``content`` (raw file bytes, hashed here) or a precomputed
        ``content_hash`` must be given. Seeds version 1, logs UPLOAD and
        DATASET_CREATED and computes the initial trust score from the default
        sub-scores.

        Raises:
            InvalidInputError: On missing name, wallet or content
        """
        if content is not None:
            content_hash = hash_content(content)
        if content_hash is None:
            raise InvalidInputError("Either content or content_hash is required")

        request = _validate(
            DatasetCreate,
            name=name,
            description=description or "",
            owner_wallet=owner_wallet,
            content_hash=content_hash,
            filename=filename,
        )

        s = self.settings
        scores = {
            "completeness": s.default_completeness,
            "freshness": s.default_freshness,
            "consistency": s.default_consistency,
            "schema": s.default_schema,
            "verification": s.default_verification,
        }

        dataset_id = self.store.next_id(LedgerStore.DATASETS)
        record = DatasetRecord(
            id=dataset_id,
            name=request.name,
            description=request.description,
            owner_wallet=request.owner_wallet,
            storage_id=f"datahaven://{random_id(16)}",
            file_hash=request.content_hash,
            metadata_hash=random_id(32),
            completeness_score=scores["completeness"],
            freshness_score=scores["freshness"],
            consistency_score=scores["consistency"],
            schema_score=scores["schema"],
            verification_score=scores["verification"],
            trust_score=self.engine.compute(scores),
            version=1,
        )

        with self.locks.hold(dataset_id), self.store.unit_of_work():
            self.store.insert(LedgerStore.DATASETS, record)
            self.versions.create_initial(dataset_id, request.content_hash)
            self.timeline.log_lifecycle(
                dataset_id,
                LifecycleEventType.UPLOAD,
                {"filename": request.filename},
            )
            self.timeline.log_audit(
                dataset_id,
                AuditEventType.DATASET_CREATED,
                actor=request.owner_wallet,
                metadata={"filename": request.filename, "file_hash": request.content_hash},
            )

        logger.info(
            "Created dataset %s (%s) for %s, trust score %.2f",
            dataset_id,
            request.name,
            request.owner_wallet,
            record.trust_score,
        )
        return record

    def get_dataset(self, dataset_id: int) -> DatasetRecord:
        return self.store.get_dataset(dataset_id)

    def list_datasets(self, limit: int = 50, offset: int = 0) -> list[DatasetRecord]:
        return self.store.list_datasets(limit=limit, offset=offset)

    def delete_dataset(self, dataset_id: int) -> dict[str, int]:
        """
        Delete a dataset and cascade to everything it owns.

        Raises:
            NotFoundError: If the dataset does not exist
        """
        with self.locks.hold(dataset_id):
            self.store.get_dataset(dataset_id)
            deleted = self.store.delete_dataset(dataset_id)
        logger.info("Deleted dataset %s: %s", dataset_id, deleted)
        return deleted

    # ------------------------------------------------------------------
    # Analysis
    # ------------------------------------------------------------------

    def record_analysis(
        self,
        dataset_id: int,
        insight_text: str,
        confidence: Optional[float] = None,
        actor: str = SYSTEM_ACTOR,
    ) -> LedgerEntry:
        """
        Record one analysis result returned by the analysis engine.

        Raises:
            NotFoundError: If the dataset does not exist
            InvalidInputError: If the insight text is empty
        """
        insight = _validate(InsightInput, insight_text=insight_text, confidence=confidence)
        return self.record_insights(dataset_id, [insight], actor=actor)[0]

    def record_insights(
        self,
        dataset_id: int,
        insights: Iterable[InsightInput | Mapping[str, Any]],
        actor: str = SYSTEM_ACTOR,
    ) -> list[LedgerEntry]:
        """
        Record one analysis run that produced one or more insights.

        Appends a ledger entry per insight against the dataset's current
        version, stores the run's report hash on the dataset, and logs
        ANALYZED and ANALYSIS_RUN.
        """
        items = [
            item if isinstance(item, InsightInput) else _validate(InsightInput, **item)
            for item in insights
        ]
        if not items:
            raise InvalidInputError("An analysis run needs at least one insight")

        with self.locks.hold(dataset_id), self.store.unit_of_work():
            record = self.store.get_dataset(dataset_id)
            entries = [
                self.ledger.append(dataset_id, item.insight_text, record.version, item.confidence)
                for item in items
            ]
            report_hash = hash_content("".join(entry.insight_hash for entry in entries))
            self.store.update_dataset(record, {"ai_report_hash": report_hash})
            self.timeline.log_lifecycle(
                dataset_id,
                LifecycleEventType.ANALYZED,
                {
                    "entry_ids": [entry.id for entry in entries],
                    "dataset_version": record.version,
                },
            )
            self.timeline.log_audit(
                dataset_id,
                AuditEventType.ANALYSIS_RUN,
                actor=actor,
                metadata={
                    "insight_count": len(entries),
                    "ai_report_hash": report_hash,
                    "confidences": [entry.confidence for entry in entries],
                },
            )

        logger.info("Recorded %d insight(s) for dataset %s", len(entries), dataset_id)
        return entries

    def get_ledger(self, dataset_id: int) -> list[LedgerEntry]:
        self.store.get_dataset(dataset_id)
        return self.ledger.list_by_dataset(dataset_id)

    # ------------------------------------------------------------------
    # Attestation
    # ------------------------------------------------------------------

    def register_attestation(self, dataset_id: int, actor: str = SYSTEM_ACTOR) -> AttestationReceipt:
        """
        Register a dataset with the attestation authority.

        The authority is called outside the dataset lock with a bounded
        timeout. Only after it succeeds are VERIFIED and BLOCKCHAIN_REGISTERED
        logged and the verification sub-score bumped (capped at 100), all in
        one unit of work. Repeating the call at the cap leaves the score at
        100 but logs another VERIFIED event.

        Raises:
            NotFoundError: If the dataset does not exist
            ConflictError: If lifecycle ordering is enforced and the dataset
                has not been analyzed
            AttestationError: If the authority fails or times out
        """
        record = self.store.get_dataset(dataset_id)

        if self.settings.enforce_lifecycle_order:
            stage = self.timeline.current_stage(dataset_id)
            if stage is None or stage < LifecycleStage.ANALYZED:
                raise ConflictError(
                    f"Dataset {dataset_id} must be analyzed before registration"
                )

        try:
            proof_ref = self._call_authority(record)
        except AttestationError as e:
            logger.warning("Attestation failed for dataset %s: %s", dataset_id, e)
            with self.locks.hold(dataset_id), self.store.unit_of_work():
                if self.store.find_dataset(dataset_id) is None:
                    logger.warning(
                        "Dataset %s was deleted during attestation, failure not logged", dataset_id
                    )
                else:
                    self.timeline.log_audit(
                        dataset_id,
                        AuditEventType.REGISTRATION_FAILED,
                        actor=actor,
                        metadata={"error": e.message},
                    )
            raise

        with self.locks.hold(dataset_id), self.store.unit_of_work():
            current = self.store.get_dataset(dataset_id)
            verification = self.engine.bump_verification(
                current.verification_score, self.settings.verification_bump
            )
            self.timeline.log_lifecycle(
                dataset_id,
                LifecycleEventType.VERIFIED,
                {"tx_hash": proof_ref, "network": self.settings.network},
            )
            self.timeline.log_audit(
                dataset_id,
                AuditEventType.BLOCKCHAIN_REGISTERED,
                actor=actor,
                metadata={"tx_hash": proof_ref, "verification_score": verification},
            )
            updated = self.engine.apply_scores(dataset_id, {"verification": verification})

        logger.info(
            "Registered dataset %s (tx %s), trust score %.2f",
            dataset_id,
            proof_ref,
            updated.trust_score,
        )
        return AttestationReceipt(
            dataset_id=dataset_id,
            proof_ref=proof_ref,
            status="success",
            verification_score=updated.verification_score,
            trust_score=updated.trust_score,
        )

    def _call_authority(self, record: DatasetRecord) -> str:
        timeout = self.settings.attestation_timeout_seconds
        future = self._executor.submit(self.authority.register, record.id, record.file_hash)
        try:
            proof_ref = future.result(timeout=timeout)
        except FutureTimeoutError as e:
            future.cancel()
            raise AttestationError(
                f"Attestation authority timed out after {timeout}s"
            ) from e
        except Exception as e:
            raise AttestationError(f"Attestation authority failed: {e}") from e

        if not isinstance(proof_ref, str) or not proof_ref:
            raise AttestationError("Attestation authority returned no proof reference")
        return proof_ref

    def get_storage_proof(self, dataset_id: int, content_hash: Optional[str] = None) -> StorageProof:
        """
        Regenerate a storage proof. Defaults to the dataset's current file hash.

        Raises:
            NotFoundError: If the dataset does not exist
        """
        record = self.store.get_dataset(dataset_id)
        file_hash = _require_hash(content_hash) if content_hash else record.file_hash
        return self.proofs.generate(dataset_id, file_hash)

    def verify_content(self, content_hash: str, wallet: str = SYSTEM_ACTOR) -> VerificationLog:
        """
        Look up a content hash against dataset heads and their history.

        Every lookup is logged in ``verification_logs``; a match is also
        written to the dataset's audit stream.
        """
        content_hash = _require_hash(content_hash)
        wallet = wallet.strip() if wallet and wallet.strip() else SYSTEM_ACTOR

        matched_version: Optional[DatasetVersion] = None
        datasets = self.store.find_datasets_by_hash(content_hash)
        if datasets:
            dataset_id: Optional[int] = datasets[0].id
        else:
            versions = self.store.find_versions_by_hash(content_hash)
            matched_version = versions[0] if versions else None
            dataset_id = matched_version.dataset_id if matched_version else None

        log = VerificationLog(
            id=self.store.next_id(LedgerStore.VERIFICATION_LOGS),
            dataset_id=dataset_id,
            content_hash=content_hash,
            wallet=wallet,
            result=dataset_id is not None,
        )
        if dataset_id is None:
            self.store.insert(LedgerStore.VERIFICATION_LOGS, log)
            logger.info("Content %s did not match any dataset", content_hash)
            return log

        with self.locks.hold(dataset_id), self.store.unit_of_work():
            self.store.insert(LedgerStore.VERIFICATION_LOGS, log)
            self.timeline.log_audit(
                dataset_id,
                AuditEventType.CONTENT_VERIFIED,
                actor=wallet,
                metadata={
                    "content_hash": content_hash,
                    "matched_version": matched_version.version_number if matched_version else None,
                },
            )
        return log

    # ------------------------------------------------------------------
    # Trust
    # ------------------------------------------------------------------

    def get_trust_breakdown(self, dataset_id: int) -> TrustBreakdown:
        return self.engine.breakdown(self.store.get_dataset(dataset_id))

    def recompute_trust(self, dataset_id: int) -> DatasetRecord:
        return self.engine.recompute(dataset_id)

    def update_scores(
        self,
        dataset_id: int,
        scores: Mapping[str, Any],
        actor: str = SYSTEM_ACTOR,
    ) -> DatasetRecord:
        """
        Set sub-scores, recompute the trust score and audit the change.

        Raises:
            NotFoundError: If the dataset does not exist
            InvalidInputError: On unknown sub-scores or values outside [0, 100]
        """
        with self.locks.hold(dataset_id), self.store.unit_of_work():
            updated = self.engine.apply_scores(dataset_id, scores)
            self.timeline.log_audit(
                dataset_id,
                AuditEventType.SCORES_UPDATED,
                actor=actor,
                metadata={"scores": dict(scores), "trust_score": updated.trust_score},
            )
        return updated

    # ------------------------------------------------------------------
    # Versions
    # ------------------------------------------------------------------

    def add_version(
        self,
        dataset_id: int,
        parent_version: int,
        content_hash: Optional[str] = None,
        content: Optional[bytes] = None,
        actor: str = SYSTEM_ACTOR,
    ) -> DatasetVersion:
        """
        Record new content for a dataset as version N+1.

        Raises:
            NotFoundError: If the dataset does not exist
            ConflictError: If ``parent_version`` is not the current version
        """
        if content is not None:
            content_hash = hash_content(content)
        file_hash = _require_hash(content_hash)

        with self.locks.hold(dataset_id), self.store.unit_of_work():
            record = self.store.get_dataset(dataset_id)
            version = self.versions.create_next(dataset_id, file_hash, parent_version)
            self.store.update_dataset(
                record, {"version": version.version_number, "file_hash": file_hash}
            )
            self.timeline.log_lifecycle(
                dataset_id,
                LifecycleEventType.VERSIONED,
                {"version": version.version_number, "parent_version": version.parent_version},
            )
            self.timeline.log_audit(
                dataset_id,
                AuditEventType.VERSION_CREATED,
                actor=actor,
                metadata={"version": version.version_number, "file_hash": file_hash},
            )

        logger.info("Dataset %s advanced to version %s", dataset_id, version.version_number)
        return version

    def get_versions(self, dataset_id: int) -> list[DatasetVersion]:
        self.store.get_dataset(dataset_id)
        return self.versions.list_versions(dataset_id)

    # ------------------------------------------------------------------
    # Timeline
    # ------------------------------------------------------------------

    def get_timeline(self, dataset_id: int, newest_first: bool = False) -> list[LifecycleEvent]:
        self.store.get_dataset(dataset_id)
        return self.timeline.list_lifecycle(dataset_id, newest_first=newest_first)

    def get_audit_log(self, dataset_id: int, newest_first: bool = False) -> list[AuditEvent]:
        self.store.get_dataset(dataset_id)
        return self.timeline.list_audit(dataset_id, newest_first=newest_first)

    def get_lifecycle_stage(self, dataset_id: int) -> Optional[LifecycleStage]:
        self.store.get_dataset(dataset_id)
        return self.timeline.current_stage(dataset_id)
