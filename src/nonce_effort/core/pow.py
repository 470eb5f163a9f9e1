"""Proof-of-work helpers.

An effort proof is a byte string appended to a fixed input prefix such that
the digest of `prefix | proof` begins with at least `effort_bits` zero bits.
Finding one takes about `2 ** effort_bits` digests; checking it takes one.
"""
from __future__ import annotations

from typing import Final

from nonce_effort.core.errors import EffortError
from nonce_effort.core.nonce import MAXIMUM_NUMBER_OF_BYTES, Nonce
from nonce_effort.utils.hash import Digest

BITS_PER_BYTE: Final[int] = 8
MAX_EFFORT_BITS: Final[int] = MAXIMUM_NUMBER_OF_BYTES * BITS_PER_BYTE


def validate_effort_bits(effort_bits: int) -> int:
    """Return `effort_bits` if it is a satisfiable effort level.

    Raises:
        EffortError: If the value is negative or exceeds `MAX_EFFORT_BITS`.
    """
    if not isinstance(effort_bits, int) or isinstance(effort_bits, bool):
        raise EffortError(f"Effort must be an integer, got {type(effort_bits).__name__}")
    if effort_bits < 0:
        raise EffortError("Effort must be non-negative. Use 0 for no effort expended.")
    if effort_bits > MAX_EFFORT_BITS:
        raise EffortError(f"An effort of {effort_bits} bits is impossible.")
    return effort_bits


def count_leading_zero_bits(digest: bytes | bytearray | memoryview) -> int:
    """Count the number of leading zero bits in a digest.

    Args:
        digest: Digest bytes to analyze.

    Returns:
        Number of leading zero bits, between 0 and `8 * len(digest)`.
    """
    zeros = 0
    for byte in digest:
        if byte == 0:
            zeros += BITS_PER_BYTE
            continue
        # Count bits in first non-zero byte
        for bit in range(7, -1, -1):
            if (byte >> bit) & 1 == 0:
                zeros += 1
            else:
                break  # Found first non-zero bit
        break  # Exit outer loop after processing the first non-zero byte
    return zeros


def check_proof(
    effort_bits: int,
    data: bytes,
    proof: Nonce | bytes,
    digest_name: str | None = None,
) -> bool:
    """Validate a proposed effort proof.

    Args:
        effort_bits: Number of leading zero bits required in the digest.
        data: The exact input prefix the proof was searched against
            (base nonce content followed by each salt's content, in order).
        proof: The proof nonce, or its raw content bytes.
        digest_name: Digest algorithm; defaults to the configured one.

    Returns:
        True if the digest of `data | proof` has at least `effort_bits`
        leading zero bits; False otherwise.
    """
    validate_effort_bits(effort_bits)
    digest = Digest(digest_name)
    digest.update(data)
    digest.update(bytes(proof))
    return count_leading_zero_bits(digest.finalize()) >= effort_bits
