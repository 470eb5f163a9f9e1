# tests/test_schemas.py
"""Tests for effort claim schemas."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from nonce_effort.core.nonce import Nonce
from nonce_effort.core.pow import MAX_EFFORT_BITS, check_proof
from nonce_effort.schemas.effort import EffortClaim
from nonce_effort.services.effort import Effort


def test_claim_from_effort(base_nonce, salt_nonce) -> None:
    """A claim carries the encoded prefix and the proof text."""
    effort = Effort(6, base_nonce, salt_nonce)
    proof = effort.get_proof()
    claim = EffortClaim.from_effort(effort)
    assert claim.effort_bits == 6
    assert claim.data == effort.encoded_input
    assert claim.proof == proof.text
    assert claim.verify()


def test_claim_round_trips_as_json(base_nonce) -> None:
    """Claims survive JSON transport."""
    effort = Effort(4, base_nonce)
    effort.get_proof()
    claim = EffortClaim.from_effort(effort)
    restored = EffortClaim.model_validate_json(claim.model_dump_json())
    assert restored == claim
    assert restored.verify()


def test_claim_rejects_wrong_proof(base_nonce) -> None:
    """A proof that misses the bit requirement fails verification."""
    effort = Effort(8, base_nonce)
    effort.get_proof()
    while True:
        wrong = Nonce.random(8)
        if not check_proof(8, effort.input_bytes, wrong):
            break
    claim = EffortClaim(effort_bits=8, data=effort.encoded_input, proof=wrong.text)
    assert not claim.verify()


def test_claim_requires_found_proof(base_nonce) -> None:
    """An unsearched effort cannot be claimed."""
    with pytest.raises(ValueError):
        EffortClaim.from_effort(Effort(4, base_nonce))


@pytest.mark.parametrize("bits", [-1, MAX_EFFORT_BITS + 1])
def test_claim_validates_bits(bits) -> None:
    """Effort bits are range-checked."""
    with pytest.raises(ValidationError):
        EffortClaim(effort_bits=bits, data="AAAA", proof="AAAA")


def test_claim_validates_encodings() -> None:
    """Both base64 fields must decode."""
    with pytest.raises(ValidationError):
        EffortClaim(effort_bits=4, data="!!!", proof="AAAA")
    with pytest.raises(ValidationError):
        EffortClaim(effort_bits=4, data="AAAA", proof="!!!")
