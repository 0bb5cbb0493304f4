# =============================================================================
# Health Router Tests
# =============================================================================

from unittest.mock import MagicMock, patch

import pytest
from fastapi.testclient import TestClient

from trust_ledger import InternalError

from app.main import app

client = TestClient(app)


@pytest.fixture
def mock_ledger_service():
    with patch("app.routers.health.get_ledger_service") as mock:
        service = MagicMock()
        mock.return_value = service
        yield service


def test_health():
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy", "version": "0.1.0"}


def test_ready_when_mongodb_answers(mock_ledger_service):
    mock_ledger_service.store.ping.return_value = True

    response = client.get("/ready")

    assert response.status_code == 200
    assert response.json()["services"] == {"mongodb": "ok"}


def test_not_ready_when_mongodb_unreachable(mock_ledger_service):
    mock_ledger_service.store.ping.side_effect = InternalError("no servers")

    response = client.get("/ready")

    assert response.status_code == 503
    assert response.json() == {"status": "not_ready", "services": {"mongodb": "unreachable"}}
