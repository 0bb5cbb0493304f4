# =============================================================================
# Datasets Router Tests
# =============================================================================

from unittest.mock import MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from trust_ledger import InternalError
from trust_ledger.hashing import content_hash

from app.main import app

client = TestClient(app)

CSV = b"region,revenue\nnorth,120\nsouth,95\n"


def create_json(file_hash, **overrides):
    body = {
        "name": "Regional revenue",
        "owner_wallet": "0xabc",
        "description": "Q3",
        "content_hash": file_hash,
        "filename": "revenue.csv",
    }
    body.update(overrides)
    return client.post("/datasets", json=body)


class TestCreate:
    def test_create_from_json(self, live_service, file_hash):
        response = create_json(file_hash)

        assert response.status_code == 201
        data = response.json()
        assert data["id"] == 1
        assert data["file_hash"] == file_hash
        assert data["trust_score"] == pytest.approx(69.25)
        assert data["ai_report_hash"] == "pending"

    def test_create_from_upload(self, live_service):
        response = client.post(
            "/datasets",
            files={"file": ("revenue.csv", CSV, "text/csv")},
            data={"name": "Regional revenue", "owner_wallet": "0xabc"},
        )

        assert response.status_code == 201
        assert response.json()["file_hash"] == content_hash(CSV)
        upload = live_service.get_timeline(response.json()["id"])[0]
        assert upload.metadata == {"filename": "revenue.csv"}

    def test_oversized_upload_is_rejected(self, live_service, monkeypatch):
        monkeypatch.setattr(
            "app.routers.datasets.get_settings", lambda: MagicMock(max_upload_bytes=len(CSV) - 1)
        )
        monkeypatch.setattr("app.routers.datasets.UPLOAD_CHUNK_BYTES", 8)

        response = client.post(
            "/datasets",
            files={"file": ("revenue.csv", CSV, "text/csv")},
            data={"name": "Regional revenue", "owner_wallet": "0xabc"},
        )

        assert response.status_code == 400
        assert f"{len(CSV) - 1} bytes" in response.json()["detail"]
        assert live_service.list_datasets() == []

    def test_upload_at_limit_is_accepted(self, live_service, monkeypatch):
        monkeypatch.setattr(
            "app.routers.datasets.get_settings", lambda: MagicMock(max_upload_bytes=len(CSV))
        )
        monkeypatch.setattr("app.routers.datasets.UPLOAD_CHUNK_BYTES", 8)

        response = client.post(
            "/datasets",
            files={"file": ("revenue.csv", CSV, "text/csv")},
            data={"name": "Regional revenue", "owner_wallet": "0xabc"},
        )

        assert response.status_code == 201
        assert response.json()["file_hash"] == content_hash(CSV)

    def test_upload_without_file(self, live_service):
        response = client.post(
            "/datasets",
            files={"other": ("x.txt", b"x", "text/plain")},
            data={"name": "n", "owner_wallet": "0xabc"},
        )
        assert response.status_code == 400
        assert "file" in response.json()["detail"]

    def test_invalid_json(self, live_service):
        response = client.post(
            "/datasets", content=b"{not json", headers={"content-type": "application/json"}
        )
        assert response.status_code == 400

    def test_missing_wallet(self, live_service, file_hash):
        assert create_json(file_hash, owner_wallet="").status_code == 400

    def test_bad_hash(self, live_service):
        assert create_json("abc").status_code == 400


class TestRead:
    def test_get_and_list(self, live_service, dataset):
        assert client.get(f"/datasets/{dataset.id}").json()["name"] == "Quarterly sales"

        listing = client.get("/datasets?limit=10").json()
        assert listing["count"] == 1
        assert listing["datasets"][0]["id"] == dataset.id

    def test_unknown_dataset(self, live_service):
        response = client.get("/datasets/404")
        assert response.status_code == 404
        assert response.json() == {"detail": "Dataset not found: 404"}

    def test_limit_is_bounded(self, live_service):
        assert client.get("/datasets?limit=0").status_code == 400


class TestAnalysisAndVersions:
    def test_record_analysis(self, live_service, dataset):
        response = client.post(
            f"/datasets/{dataset.id}/analysis",
            json={"insights": [{"insight_text": "Revenue skewed north", "confidence": 0.7}]},
        )

        assert response.status_code == 201
        entries = response.json()
        assert entries[0]["insight_hash"] == content_hash("Revenue skewed north")
        assert entries[0]["dataset_version"] == 1

    def test_analysis_requires_insights(self, live_service, dataset):
        response = client.post(f"/datasets/{dataset.id}/analysis", json={"insights": []})
        assert response.status_code == 400

    def test_versions(self, live_service, dataset, other_file_hash):
        created = client.post(
            f"/datasets/{dataset.id}/versions",
            json={"content_hash": other_file_hash, "parent_version": 1},
        )
        assert created.status_code == 201
        assert created.json()["version_number"] == 2

        stale = client.post(
            f"/datasets/{dataset.id}/versions",
            json={"content_hash": other_file_hash, "parent_version": 1},
        )
        assert stale.status_code == 409

        versions = client.get(f"/datasets/{dataset.id}/versions").json()
        assert [v["version_number"] for v in versions] == [1, 2]

    def test_update_scores(self, live_service, dataset):
        response = client.patch(
            f"/datasets/{dataset.id}/scores",
            json={"scores": {"completeness": 100}, "actor": "0xauditor"},
        )
        assert response.status_code == 200
        assert response.json()["trust_score"] == pytest.approx(75.25)

    def test_update_scores_out_of_range(self, live_service, dataset):
        response = client.patch(f"/datasets/{dataset.id}/scores", json={"scores": {"schema": 101}})
        assert response.status_code == 400


class TestDelete:
    def test_delete(self, live_service, dataset):
        response = client.delete(f"/datasets/{dataset.id}")

        assert response.status_code == 200
        assert response.json()["deleted"]["datasets"] == 1
        assert client.get(f"/datasets/{dataset.id}").status_code == 404


def test_store_failure_is_500():
    with patch("app.routers.datasets.get_ledger_service") as mock:
        service = MagicMock()
        service.get_dataset.side_effect = InternalError("Ledger store failure in find_dataset")
        mock.return_value = service

        response = client.get("/datasets/1")

    assert response.status_code == 500
    assert response.json() == {"detail": "Ledger store failure in find_dataset"}
