# =============================================================================
# Ledger Service - Trust Ledger Facade Wiring
# =============================================================================
# Builds the process-wide TrustLedgerService from webapp settings.
# =============================================================================

import logging
from typing import Optional

from trust_ledger import LedgerStore, TrustLedgerService
from trust_ledger.models import LedgerSettings

from app.config import get_settings

logger = logging.getLogger(__name__)

_ledger_service: Optional[TrustLedgerService] = None


def get_ledger_service() -> TrustLedgerService:
    """Get or create the TrustLedgerService singleton."""
    global _ledger_service
    if _ledger_service is None:
        settings = get_settings()
        store = LedgerStore(settings.mongo_connection_string, database=settings.mongo_database)
        _ledger_service = TrustLedgerService(store, settings=LedgerSettings())
        logger.info("Trust ledger service ready (database %s)", settings.mongo_database)
    return _ledger_service


def close_ledger_service() -> None:
    """Release the singleton's worker threads. Safe to call when unset."""
    global _ledger_service
    if _ledger_service is not None:
        _ledger_service.close()
        _ledger_service = None
