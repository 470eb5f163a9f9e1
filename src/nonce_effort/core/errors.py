"""Exception types raised by nonce and effort operations."""

from __future__ import annotations


class NonceError(ValueError):
    """Raised when a nonce is requested with invalid parameters."""


class NonceDecodeError(NonceError):
    """Raised when a binary or text representation cannot be decoded.

    Decoding failures are recoverable: the caller received malformed data
    from a peer and may reject the message without tearing anything down.
    """


class NonceStateError(RuntimeError):
    """Raised when a mutable nonce is used after it has been frozen."""


class EffortError(ValueError):
    """Raised when an effort cannot be constructed from the given inputs."""


class DigestUnavailableError(RuntimeError):
    """Raised when the configured digest algorithm cannot be provided.

    This is a configuration error. Effort guarantees depend on the digest,
    so there is no fallback to a different algorithm.
    """
