"""Unit tests for content hashing and random identifiers."""

import hashlib

import pytest

from trust_ledger.hashing import content_hash, random_id


class TestContentHash:
    def test_known_digest(self):
        assert content_hash(b"abc") == (
            "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad"
        )

    def test_text_is_utf8_encoded(self):
        assert content_hash("Sales rose 12% in Q3") == content_hash("Sales rose 12% in Q3".encode("utf-8"))
        assert content_hash("café") == hashlib.sha256("café".encode("utf-8")).hexdigest()

    def test_empty_input_is_valid(self):
        assert content_hash(b"") == hashlib.sha256(b"").hexdigest()

    def test_deterministic_and_distinct(self):
        assert content_hash("insight one") == content_hash("insight one")
        assert content_hash("insight one") != content_hash("insight two")

    def test_rejects_other_types(self):
        with pytest.raises(TypeError):
            content_hash(42)


class TestRandomId:
    def test_length_is_twice_bytes(self):
        assert len(random_id(16)) == 32
        assert len(random_id()) == 64

    def test_values_differ(self):
        assert random_id(8) != random_id(8)

    def test_rejects_non_positive(self):
        with pytest.raises(ValueError):
            random_id(0)
