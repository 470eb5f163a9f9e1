# src/nonce_effort/utils/hash.py
"""Digest helpers with an explicit update/finalize contract."""

from __future__ import annotations

import hashlib
from collections.abc import Callable
from typing import Protocol, cast

from blake3 import blake3

from nonce_effort.core.errors import DigestUnavailableError
from nonce_effort.core.settings import settings

SHA1 = "sha1"
BLAKE3 = "blake3"


class _HashLike(Protocol):
    """Protocol capturing the subset of the hashlib API we rely on."""

    def update(self, data: bytes, /) -> None: ...

    def digest(self) -> bytes: ...


HashFactory = Callable[[], _HashLike]


def _resolve_factory(name: str) -> HashFactory:
    """Return a zero-argument constructor for the named digest."""
    normalized = name.strip().lower()
    if normalized == BLAKE3:
        return cast(HashFactory, blake3)
    if normalized not in hashlib.algorithms_available:
        raise DigestUnavailableError(f"Unsupported digest algorithm: {name}")

    def _factory() -> _HashLike:
        return cast(_HashLike, hashlib.new(normalized))

    return _factory


class Digest:
    """An incremental digest whose `finalize` resets it for the next message.

    Effort search hashes millions of candidate buffers; keeping one `Digest`
    around avoids re-resolving the algorithm on every trial.
    """

    def __init__(self, name: str | None = None) -> None:
        self.name = (name or settings.effort_digest).strip().lower()
        self._factory = _resolve_factory(self.name)
        try:
            self._state = self._factory()
            # Extendable-output digests (shake_*) have no fixed width.
            self.digest_size = len(self._state.digest())
        except (ValueError, TypeError) as err:
            # hashlib refuses some algorithms at runtime (e.g. FIPS builds).
            raise DigestUnavailableError(
                f"Digest algorithm {self.name} is not usable: {err}"
            ) from err

    def update(self, data: bytes | bytearray | memoryview) -> None:
        """Feed more bytes into the current message."""
        self._state.update(data)

    def finalize(self) -> bytes:
        """Return the digest of everything fed since the last finalize and reset."""
        out = self._state.digest()
        self._state = self._factory()
        return out


def digest_bytes(data: bytes, name: str | None = None) -> bytes:
    """Return the digest of `data` in a single call."""
    d = Digest(name)
    d.update(data)
    return d.finalize()


def sha1_bytes(text: str) -> bytes:
    """Return the SHA-1 digest of the UTF-8 encoding of `text`."""
    return digest_bytes(text.encode("utf-8"), SHA1)
