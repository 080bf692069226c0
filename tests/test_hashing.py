"""Tests for the SHAd-256 double hash."""

import hashlib

import pytest

from fortuna.errors import IndexOutOfRangeError, InvalidArgumentError
from fortuna.hashing import ShaD256, shad256


def _reference(data: bytes) -> bytes:
    inner = hashlib.sha256(bytes(64) + data).digest()
    return hashlib.sha256(inner).digest()


class TestShaD256:
    def test_matches_definition(self):
        assert shad256(b"abc") == _reference(b"abc")

    def test_empty_input(self):
        assert ShaD256().digest() == _reference(b"")

    def test_streaming_equals_one_shot(self):
        h = ShaD256()
        h.update(b"hello ")
        h.update(b"world")
        assert h.digest() == shad256(b"hello world")

    def test_digest_restarts_context(self):
        h = ShaD256()
        h.update(b"first")
        h.digest()
        h.update(b"second")
        assert h.digest() == shad256(b"second")

    def test_reset(self):
        h = ShaD256()
        h.update(b"discard me")
        h.reset()
        assert h.digest(b"keep") == shad256(b"keep")

    def test_update_with_offset_and_length(self):
        h = ShaD256()
        h.update(b"xxabcxx", 2, 3)
        assert h.digest() == shad256(b"abc")

    def test_digest_size(self):
        assert len(shad256(b"x")) == ShaD256.digest_size == 32

    def test_clone_is_independent(self):
        h = ShaD256()
        h.update(b"shared")
        copy = h.clone()
        copy.update(b" extra")
        assert h.digest() == shad256(b"shared")
        assert copy.digest() == shad256(b"shared extra")

    def test_can_clone(self):
        assert ShaD256().can_clone() is True

    def test_rejects_str(self):
        with pytest.raises(InvalidArgumentError):
            ShaD256().update("text")

    def test_bad_offset(self):
        with pytest.raises(IndexOutOfRangeError):
            ShaD256().update(b"abc", 4)
