"""Schemas for presenting effort proofs to a verifier."""
from __future__ import annotations

from typing import cast

from pydantic import BaseModel, Field, field_validator

from nonce_effort.core.errors import NonceDecodeError
from nonce_effort.core.nonce import Nonce, decode_base64
from nonce_effort.core.pow import MAX_EFFORT_BITS
from nonce_effort.services.effort import Effort


class EffortClaim(BaseModel):
    """A completed effort: the input prefix, the required bits and the proof.

    `data` is the URL-safe base64 input prefix (base nonce content followed
    by each salt's content). `proof` is the proof nonce's text form.
    """

    effort_bits: int = Field(ge=0, le=MAX_EFFORT_BITS)
    data: str
    proof: str

    @field_validator("data")
    @classmethod
    def _check_data(cls, value: str) -> str:
        try:
            decode_base64(value)
        except NonceDecodeError as err:
            raise ValueError(str(err)) from err
        return value

    @field_validator("proof")
    @classmethod
    def _check_proof(cls, value: str) -> str:
        try:
            Nonce.from_text(value)
        except NonceDecodeError as err:
            raise ValueError(str(err)) from err
        return value

    @classmethod
    def from_effort(cls, effort: Effort) -> EffortClaim:
        """Build a claim from an effort whose proof has been found.

        Raises:
            ValueError: If the effort has not found a proof yet.
        """
        if not effort.has_proof:
            raise ValueError("Effort has no proof yet")
        proof = cast(Nonce, effort.get_proof())
        return cls(effort_bits=effort.effort_bits, data=effort.encoded_input, proof=proof.text)

    def verify(self, digest_name: str | None = None) -> bool:
        """Return True if the proof satisfies the claimed effort."""
        effort = Effort.from_encoded(self.effort_bits, self.data, digest_name=digest_name)
        return effort.verify(Nonce.from_text(self.proof))
