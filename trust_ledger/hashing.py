# =============================================================================
# Content Hashing
# =============================================================================
# Deterministic SHA-256 digests and random hex identifiers.
# =============================================================================

"""Hashing helpers shared by the ledger components."""

import hashlib
import secrets

__all__ = ["content_hash", "random_id"]


def content_hash(data: bytes | str) -> str:
    """
    Compute the SHA-256 hex digest of ``data``.

    Strings are encoded as UTF-8 first, so hashing ``"X"`` and ``b"X"`` gives
    the same digest. Empty input is valid and yields the digest of the empty
    string.

    Args:
        data: Raw bytes or text to hash

    Returns:
        64-character lowercase hex digest

    Raises:
        TypeError: If data is neither bytes nor str
    """
    if isinstance(data, str):
        data = data.encode("utf-8")
    if not isinstance(data, (bytes, bytearray, memoryview)):
        raise TypeError(f"Cannot hash value of type {type(data).__name__}")
    return hashlib.sha256(data).hexdigest()


def random_id(n_bytes: int = 32) -> str:
    """
    Generate an opaque random identifier.

    Not deterministic: use only for locators, proof ids and similar handles.

    Args:
        n_bytes: Number of random bytes (hex output is twice as long)

    Returns:
        Hex string of length ``2 * n_bytes``
    """
    if n_bytes < 1:
        raise ValueError("n_bytes must be at least 1")
    return secrets.token_hex(n_bytes)
