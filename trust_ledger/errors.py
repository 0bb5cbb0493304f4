# =============================================================================
# Ledger Errors
# =============================================================================
# Error kinds raised by the trust ledger. Each carries the HTTP status the
# web layer should surface.
# =============================================================================

"""Exception hierarchy for the trust ledger."""

__all__ = [
    "LedgerError",
    "NotFoundError",
    "ConflictError",
    "InvalidInputError",
    "InternalError",
    "AttestationError",
]


class LedgerError(Exception):
    """Base class for all ledger errors."""

    status_code: int = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFoundError(LedgerError):
    """Unknown dataset or version id."""

    status_code = 404


class ConflictError(LedgerError):
    """Version parent mismatch, duplicate version or a lost update race."""

    status_code = 409


class InvalidInputError(LedgerError):
    """Missing or malformed caller input."""

    status_code = 400


class InternalError(LedgerError):
    """Backing-store failure. Logged, never retried here."""

    status_code = 500


class AttestationError(InternalError):
    """The attestation authority failed or timed out."""

    status_code = 502
