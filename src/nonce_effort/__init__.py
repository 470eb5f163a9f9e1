"""Collision-resistant nonces and hashcash-style proof-of-work effort."""

from nonce_effort.core.errors import (
    DigestUnavailableError,
    EffortError,
    NonceDecodeError,
    NonceError,
    NonceStateError,
)
from nonce_effort.core.nonce import (
    DEFAULT_NUMBER_OF_BYTES,
    MAXIMUM_NUMBER_OF_BYTES,
    ZERO,
    MutableNonce,
    Nonce,
    from_sms_safe,
    nonces_equal,
    to_sms_safe,
)
from nonce_effort.core.pow import MAX_EFFORT_BITS, check_proof, count_leading_zero_bits
from nonce_effort.schemas.effort import EffortClaim
from nonce_effort.services.effort import Effort
from nonce_effort.services.tickets import TicketOrder

__all__ = [
    "DEFAULT_NUMBER_OF_BYTES",
    "MAXIMUM_NUMBER_OF_BYTES",
    "MAX_EFFORT_BITS",
    "ZERO",
    "DigestUnavailableError",
    "Effort",
    "EffortClaim",
    "EffortError",
    "MutableNonce",
    "Nonce",
    "NonceDecodeError",
    "NonceError",
    "NonceStateError",
    "TicketOrder",
    "check_proof",
    "count_leading_zero_bits",
    "from_sms_safe",
    "nonces_equal",
    "to_sms_safe",
]
