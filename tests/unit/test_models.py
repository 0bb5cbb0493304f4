"""
Unit tests for trust ledger Pydantic models.

Covers validation rules on digests, sub-scores, weights, versions, insights
and events, and the document round trip through MongoDB field names.
"""

from datetime import timedelta

import pytest
from pydantic import ValidationError

from trust_ledger.hashing import content_hash
from trust_ledger.models import (
    SYSTEM_ACTOR,
    AuditEvent,
    AuditEventType,
    DatasetCreate,
    DatasetRecord,
    DatasetVersion,
    InsightInput,
    LifecycleEvent,
    LifecycleEventType,
    LifecycleStage,
    TrustBreakdown,
    TrustComponents,
    TrustWeights,
    validate_hex_digest,
    validate_sub_score,
)
from trust_ledger.models.base import utcnow

VALID_HASH = content_hash(b"payload")


# =============================================================================
# Shared Types
# =============================================================================

class TestHexDigest:
    def test_normalizes_case_and_whitespace(self):
        assert validate_hex_digest(f"  {VALID_HASH.upper()} ") == VALID_HASH

    @pytest.mark.parametrize("value", ["", "abc", "g" * 64, VALID_HASH + "0"])
    def test_rejects_malformed(self, value):
        with pytest.raises(ValueError, match="Invalid digest format"):
            validate_hex_digest(value)

    def test_rejects_non_string(self):
        with pytest.raises(TypeError):
            validate_hex_digest(123)


class TestUtcnow:
    def test_aware_and_millisecond_precise(self):
        now = utcnow()
        assert now.utcoffset() == timedelta(0)
        assert now.microsecond % 1000 == 0


class TestSubScore:
    @pytest.mark.parametrize("value", [0, 0.0, 55.5, 100])
    def test_accepts_bounds(self, value):
        assert validate_sub_score(value) == float(value)

    @pytest.mark.parametrize("value", [-0.1, 100.01, 250])
    def test_rejects_out_of_range(self, value):
        with pytest.raises(ValueError):
            validate_sub_score(value)

    @pytest.mark.parametrize("value", [True, "80", None])
    def test_rejects_non_numbers(self, value):
        with pytest.raises(TypeError):
            validate_sub_score(value)


# =============================================================================
# Trust Models
# =============================================================================

class TestTrustWeights:
    def test_defaults_sum_to_one(self):
        weights = TrustWeights()
        assert weights.as_dict() == {
            "completeness": 0.30,
            "freshness": 0.25,
            "consistency": 0.20,
            "schema": 0.15,
            "verification": 0.10,
        }
        assert sum(weights.as_dict().values()) == pytest.approx(1.0, abs=1e-9)

    def test_custom_table_must_sum_to_one(self):
        with pytest.raises(ValidationError, match="sum to 1.0"):
            TrustWeights(completeness=0.5, freshness=0.5, consistency=0.5, schema=0.0, verification=0.0)

    def test_custom_table_by_alias(self):
        weights = TrustWeights(completeness=0.2, freshness=0.2, consistency=0.2, schema=0.2, verification=0.2)
        assert weights.schema_ == 0.2

    def test_is_immutable(self):
        weights = TrustWeights()
        with pytest.raises(ValidationError):
            weights.completeness = 0.9


class TestTrustComponents:
    def test_rejects_out_of_range_component(self):
        with pytest.raises(ValidationError):
            TrustComponents(completeness=101, freshness=0, consistency=0, schema=0, verification=0)

    def test_breakdown_serializes_schema_alias(self):
        breakdown = TrustBreakdown(
            dataset_id=1,
            completeness=80,
            freshness=70,
            consistency=75,
            schema=85,
            verification=0,
            total=69.25,
            weights=TrustWeights().as_dict(),
        )
        assert breakdown.model_dump(by_alias=True)["schema"] == 85


# =============================================================================
# Dataset and Version Models
# =============================================================================

class TestDatasetModels:
    def test_create_requires_name_and_wallet(self):
        with pytest.raises(ValidationError):
            DatasetCreate(name="", owner_wallet="0xabc", content_hash=VALID_HASH)
        with pytest.raises(ValidationError):
            DatasetCreate(name="sales", owner_wallet="", content_hash=VALID_HASH)

    def test_create_validates_hash(self):
        with pytest.raises(ValidationError):
            DatasetCreate(name="sales", owner_wallet="0xabc", content_hash="not-a-hash")

    def test_record_document_round_trip(self):
        record = DatasetRecord(
            id=7,
            name="sales",
            owner_wallet="0xabc",
            storage_id="datahaven://abc",
            file_hash=VALID_HASH,
            metadata_hash=VALID_HASH,
            completeness_score=80,
            freshness_score=70,
            consistency_score=75,
            schema_score=85,
            verification_score=0,
            trust_score=69.25,
        )
        document = record.to_document()
        assert document["_id"] == 7
        assert "id" not in document
        assert document["ai_report_hash"] == "pending"

        restored = DatasetRecord.from_document(document)
        assert restored == record
        assert restored.components().as_dict()["schema"] == 85


class TestDatasetVersion:
    def test_initial_version_has_no_parent(self):
        with pytest.raises(ValidationError, match="cannot have a parent"):
            DatasetVersion(id=1, dataset_id=1, version_number=1, parent_version=1, file_hash=VALID_HASH)

    def test_later_version_requires_lower_parent(self):
        with pytest.raises(ValidationError, match="requires a parent"):
            DatasetVersion(id=2, dataset_id=1, version_number=2, file_hash=VALID_HASH)
        with pytest.raises(ValidationError, match="must be lower"):
            DatasetVersion(id=2, dataset_id=1, version_number=2, parent_version=3, file_hash=VALID_HASH)

    def test_valid_chain_link(self):
        version = DatasetVersion(id=2, dataset_id=1, version_number=2, parent_version=1, file_hash=VALID_HASH)
        assert version.parent_version == 1


# =============================================================================
# Ledger and Event Models
# =============================================================================

class TestInsightInput:
    def test_rejects_blank_text(self):
        with pytest.raises(ValidationError, match="cannot be empty"):
            InsightInput(insight_text="   ")

    def test_confidence_bounds(self):
        assert InsightInput(insight_text="ok", confidence=0.9).confidence == 0.9
        with pytest.raises(ValidationError):
            InsightInput(insight_text="ok", confidence=1.5)


class TestEvents:
    def test_enum_event_type_is_stored_as_value(self):
        event = LifecycleEvent(id=1, dataset_id=1, event_type=LifecycleEventType.UPLOAD)
        assert event.event_type == "UPLOAD"

    def test_event_type_is_open_but_non_empty(self):
        assert LifecycleEvent(id=1, dataset_id=1, event_type="ARCHIVED").event_type == "ARCHIVED"
        with pytest.raises(ValidationError):
            LifecycleEvent(id=1, dataset_id=1, event_type="")

    @pytest.mark.parametrize("actor", [None, "", "   "])
    def test_blank_actor_defaults_to_system(self, actor):
        event = AuditEvent(id=1, dataset_id=1, event_type=AuditEventType.ANALYSIS_RUN, actor=actor)
        assert event.actor == SYSTEM_ACTOR

    def test_stage_mapping(self):
        assert LifecycleStage.for_event("UPLOAD") is LifecycleStage.UPLOADED
        assert LifecycleStage.for_event("BLOCKCHAIN_REGISTERED") is LifecycleStage.VERIFIED
        assert LifecycleStage.for_event("VERSIONED") is None
        assert LifecycleStage.VERIFIED > LifecycleStage.ANALYZED > LifecycleStage.UPLOADED
