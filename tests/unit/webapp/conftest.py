"""Fixtures for webapp router tests."""

import pytest


@pytest.fixture
def live_service(monkeypatch, ledger_service):
    """Serve requests from a real TrustLedgerService backed by mongomock."""
    monkeypatch.setattr("app.services.ledger_service._ledger_service", ledger_service)
    return ledger_service
