# =============================================================================
# Services Module
# =============================================================================
# Service wrappers used by the routers.
# =============================================================================

from app.services.ledger_service import close_ledger_service, get_ledger_service

__all__ = [
    "close_ledger_service",
    "get_ledger_service",
]
