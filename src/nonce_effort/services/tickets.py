"""Ticket orders: effort performed over an opaque server-issued ticket.

A ticket is a URL-safe base64 string created by a server for its own later
processing. The holder never unpacks it; it only performs the requested
effort over the decoded bytes before presenting the ticket again.
"""

from __future__ import annotations

import logging
import threading
from typing import cast

from nonce_effort.core.nonce import Nonce
from nonce_effort.schemas.effort import EffortClaim
from nonce_effort.services.effort import Effort

logger = logging.getLogger(__name__)


class TicketOrder:
    """Work that must be completed before a ticket is accepted."""

    def __init__(self, ticket: str, effort_bits: int, digest_name: str | None = None) -> None:
        self._ticket = ticket
        self._effort = Effort.from_encoded(effort_bits, ticket, digest_name=digest_name)
        self._lock = threading.Lock()

    @property
    def ticket(self) -> str:
        return self._ticket

    @property
    def effort_bits(self) -> int:
        return self._effort.effort_bits

    @property
    def is_complete(self) -> bool:
        return self._effort.has_proof

    def perform_work(self, max_millis: int = 0) -> bool:
        """Perform the work, taking at most `max_millis` (0 means no limit).

        Returns:
            Whether the work is complete. If False, keep making granular calls.
        """
        with self._lock:
            was_complete = self._effort.has_proof
            done = self._effort.get_proof(max_millis) is not None
        if done and not was_complete:
            logger.info(
                "Ticket work complete: %d bits in %d trials",
                self._effort.effort_bits,
                self._effort.trials,
            )
        return done

    @property
    def proof(self) -> Nonce:
        """The proof nonce, performing any outstanding work first."""
        with self._lock:
            # Unbounded and uncancelled, so the search only returns with a proof.
            return cast(Nonce, self._effort.get_proof())

    def to_claim(self) -> EffortClaim:
        """Return the claim to present alongside the ticket."""
        return EffortClaim.from_effort(self._effort)
