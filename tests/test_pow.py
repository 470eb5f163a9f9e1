# tests/test_pow.py
"""Tests for proof-of-work primitives."""

from __future__ import annotations

import hashlib

import pytest

from nonce_effort.core.errors import EffortError
from nonce_effort.core.nonce import Nonce
from nonce_effort.core.pow import (
    MAX_EFFORT_BITS,
    check_proof,
    count_leading_zero_bits,
    validate_effort_bits,
)


class TestCountLeadingZeroBits:
    """Leading zero bit counting."""

    @pytest.mark.parametrize(
        ("digest", "expected"),
        [
            (b"\x80", 0),
            (b"\x40", 1),
            (b"\x01", 7),
            (b"\x00\x80", 8),
            (b"\x00\x00\x10", 19),
            (b"\x00\x01\x00", 15),
            (b"\xff\x00", 0),
        ],
    )
    def test_counts(self, digest, expected):
        """Zero bytes add eight; the first non-zero byte ends the scan."""
        assert count_leading_zero_bits(digest) == expected

    def test_all_zero(self):
        """An all-zero digest counts every bit."""
        assert count_leading_zero_bits(bytes(20)) == 160

    def test_empty(self):
        """An empty digest has no bits."""
        assert count_leading_zero_bits(b"") == 0


class TestValidateEffortBits:
    """Effort level validation."""

    def test_bounds_accepted(self):
        """Zero and the maximum are valid."""
        assert validate_effort_bits(0) == 0
        assert validate_effort_bits(MAX_EFFORT_BITS) == MAX_EFFORT_BITS
        assert MAX_EFFORT_BITS == 2032

    @pytest.mark.parametrize("bits", [-1, MAX_EFFORT_BITS + 1])
    def test_out_of_range(self, bits):
        """Negative and impossible effort levels are rejected."""
        with pytest.raises(EffortError):
            validate_effort_bits(bits)

    def test_non_integer(self):
        """Effort levels must be integers."""
        with pytest.raises(EffortError):
            validate_effort_bits(1.5)


class TestCheckProof:
    """Single-digest proof verification."""

    def _find_proof(self, data: bytes, bits: int) -> Nonce:
        while True:
            proof = Nonce.random(8)
            if count_leading_zero_bits(hashlib.sha1(data + proof.content).digest()) >= bits:
                return proof

    def test_valid_proof(self):
        """A proof meeting the bit requirement is accepted."""
        data = b"challenge-bytes"
        proof = self._find_proof(data, 6)
        assert check_proof(6, data, proof)
        assert check_proof(6, data, proof.content)
        assert check_proof(0, data, proof)

    def test_rejects_insufficient_proof(self):
        """A proof short of the bit requirement is rejected."""
        data = b"challenge-bytes"
        while True:
            proof = Nonce.random(8)
            zeros = count_leading_zero_bits(hashlib.sha1(data + proof.content).digest())
            if zeros < 4:
                break
        assert not check_proof(zeros + 1, data, proof)
        assert check_proof(zeros, data, proof)

    def test_uses_configured_digest(self):
        """A named digest replaces SHA-1."""
        data = b"challenge-bytes"
        proof = Nonce.random(8)
        zeros = count_leading_zero_bits(hashlib.sha256(data + proof.content).digest())
        assert check_proof(zeros, data, proof, digest_name="sha256")
        assert not check_proof(zeros + 1, data, proof, digest_name="sha256")
