"""Effort: hashcash-style proof-of-work over nonces.

An `Effort` is constructed with a required number of leading zero bits, a
base nonce and any number of salt nonces. `get_proof()` searches for a proof
nonce such that the digest of

    base | salt_1 | ... | salt_n | proof

has at least that many leading zero bits. Only content bytes are
concatenated; the length-prefixed binary form is never used, so verifiers
must rebuild the same concatenation from raw content.

Construction is cheap. The first `get_proof()` can take a long time; later
calls on the same instance return the same proof object. A new instance
built from the same inputs will generally find a different proof.
"""

from __future__ import annotations

import asyncio
import base64
import logging
import threading
import time
from typing import Final

from nonce_effort.core.errors import EffortError, NonceDecodeError
from nonce_effort.core.nonce import (
    MAXIMUM_NUMBER_OF_BYTES,
    MutableNonce,
    Nonce,
    decode_base64,
)
from nonce_effort.core.pow import check_proof, count_leading_zero_bits, validate_effort_bits
from nonce_effort.core.settings import settings
from nonce_effort.utils.hash import Digest

logger = logging.getLogger(__name__)

# The candidate proof always fills the reserved region.
PROOF_NUMBER_OF_BYTES: Final[int] = MAXIMUM_NUMBER_OF_BYTES
MILLISECONDS_PER_SECOND: Final[int] = 1000


class Effort:
    """Computes and memoizes a proof of work over a base nonce and salts."""

    def __init__(
        self,
        effort_bits: int,
        nonce: Nonce,
        *salts: Nonce,
        digest_name: str | None = None,
    ) -> None:
        """Prepare an effort without searching.

        Args:
            effort_bits: Required leading zero bits, 0 to `MAX_EFFORT_BITS`.
            nonce: The base nonce.
            *salts: Additional nonces appended after the base, in order.
            digest_name: Digest algorithm; defaults to the configured one.

        Raises:
            EffortError: If `effort_bits` is out of range.
            TypeError: If the nonce or any salt is `None`.
            DigestUnavailableError: If the digest cannot be provided.
        """
        validate_effort_bits(effort_bits)
        if nonce is None:
            raise TypeError("Nonce must not be None.")
        if any(salt is None for salt in salts):
            raise TypeError("Salt must not be None.")

        prefix = b"".join(n.content for n in (nonce, *salts))
        self._setup(effort_bits, prefix, digest_name)

    @classmethod
    def from_encoded(
        cls,
        effort_bits: int,
        b64data: str,
        digest_name: str | None = None,
    ) -> Effort:
        """Build an effort whose input prefix is the decoded URL-safe base64 data.

        The decoded bytes are used verbatim; no nonce boundaries are implied.

        Raises:
            EffortError: If `effort_bits` is out of range or the data fails
                to decode.
            TypeError: If `b64data` is `None`.
        """
        validate_effort_bits(effort_bits)
        if b64data is None:
            raise TypeError("Data must not be None.")
        try:
            data = decode_base64(b64data)
        except NonceDecodeError as err:
            raise EffortError("Provided data string failed url-safe b64 decode.") from err

        effort = cls.__new__(cls)
        effort._setup(effort_bits, data, digest_name)
        return effort

    def _setup(self, effort_bits: int, prefix: bytes, digest_name: str | None) -> None:
        self._effort_bits = effort_bits
        self._input_length = len(prefix)
        # The final PROOF_NUMBER_OF_BYTES are reserved for the candidate proof.
        self._data = bytearray(prefix) + bytearray(PROOF_NUMBER_OF_BYTES)
        # Resolve the digest now so a bad configuration fails before any search.
        self._digest = Digest(digest_name)
        self._lock = threading.Lock()
        self._proof: Nonce | None = None
        self._trials = 0
        self._elapsed_ms = 0

    # ------------------------------------------------------------------ #
    # Inspection
    # ------------------------------------------------------------------ #

    @property
    def effort_bits(self) -> int:
        return self._effort_bits

    @property
    def digest_name(self) -> str:
        return self._digest.name

    @property
    def input_length(self) -> int:
        """Number of prefix bytes preceding the proof region."""
        return self._input_length

    @property
    def input_bytes(self) -> bytes:
        """The concatenated base and salt content bytes."""
        return bytes(self._data[: self._input_length])

    @property
    def encoded_input(self) -> str:
        """The input prefix as URL-safe base64, as accepted by `from_encoded`."""
        return base64.urlsafe_b64encode(self.input_bytes).decode("ascii")

    @property
    def has_proof(self) -> bool:
        """Whether `get_proof()` will return immediately."""
        return self._proof is not None

    @property
    def trials(self) -> int:
        """Digest evaluations made by the most recent search."""
        return self._trials

    @property
    def elapsed_ms(self) -> int:
        """Milliseconds the successful search took; 0 until a proof is found."""
        return self._elapsed_ms

    def __repr__(self) -> str:
        state = "found" if self.has_proof else "unsearched"
        return (
            f"Effort(effort_bits={self._effort_bits}, input_length={self._input_length}, "
            f"digest={self.digest_name!r}, {state})"
        )

    # ------------------------------------------------------------------ #
    # Search
    # ------------------------------------------------------------------ #

    def get_proof(
        self,
        max_millis: int = 0,
        cancel: threading.Event | None = None,
    ) -> Nonce | None:
        """Return the proof, searching for it if necessary.

        Args:
            max_millis: Wall-clock budget for the search; 0 means unbounded.
                Ignored when a proof was already found.
            cancel: Optional event; when set the search stops at its next
                iteration.

        Returns:
            The proof nonce, or None if the budget ran out or the search was
            cancelled. A later call starts a fresh search.
        """
        proof = self._proof
        if proof is not None:
            return proof
        with self._lock:
            if self._proof is None:
                # Publish only the frozen proof; readers never see the scratch buffer.
                self._proof = self._search(max_millis, cancel)
            return self._proof

    async def get_proof_async(self, max_millis: int = 0) -> Nonce | None:
        """Run `get_proof` in a worker thread.

        Cancelling the awaiting task stops the worker at its next iteration.
        """
        if self._proof is not None:
            return self._proof
        cancel = threading.Event()
        try:
            return await asyncio.to_thread(self.get_proof, max_millis, cancel)
        except asyncio.CancelledError:
            cancel.set()
            raise

    def verify(self, proof: Nonce | bytes) -> bool:
        """Return True if `proof` satisfies this effort's input and bit requirement."""
        return check_proof(self._effort_bits, self.input_bytes, proof, self._digest.name)

    def _search(self, max_millis: int, cancel: threading.Event | None) -> Nonce | None:
        self._trials = 0
        self._elapsed_ms = 0
        started = time.monotonic()
        progress_every = settings.effort_progress_trials

        candidate = MutableNonce(PROOF_NUMBER_OF_BYTES)
        region = memoryview(self._data)[self._input_length :]
        digest = self._digest
        logger.debug(
            "Searching for %d-bit effort over %d input bytes (max_millis=%d)",
            self._effort_bits,
            self._input_length,
            max_millis,
        )

        while True:
            self._trials += 1
            candidate.regenerate()
            region[:] = candidate.view

            digest.update(self._data)
            if count_leading_zero_bits(digest.finalize()) >= self._effort_bits:
                elapsed = time.monotonic() - started
                self._elapsed_ms = int(elapsed * MILLISECONDS_PER_SECOND)
                logger.info(
                    "Found %d-bit effort after %d trials in %d ms",
                    self._effort_bits,
                    self._trials,
                    self._elapsed_ms,
                )
                return candidate.freeze()

            elapsed_ms = (time.monotonic() - started) * MILLISECONDS_PER_SECOND
            if max_millis > 0 and elapsed_ms > max_millis:
                logger.debug(
                    "Effort search timed out after %d trials (%d ms)", self._trials, elapsed_ms
                )
                return None
            if cancel is not None and cancel.is_set():
                logger.debug("Effort search cancelled after %d trials", self._trials)
                return None
            if progress_every and self._trials % progress_every == 0:
                logger.debug("Effort search still running: %d trials", self._trials)
