# tests/services/test_tickets.py
"""Tests for ticket orders."""

from __future__ import annotations

import base64
import logging

import pytest

from nonce_effort.core.errors import EffortError
from nonce_effort.core.nonce import Nonce
from nonce_effort.core.pow import check_proof
from nonce_effort.services.tickets import TicketOrder

TICKET_BYTES = b"server-issued-match-ticket"
TICKET = base64.urlsafe_b64encode(TICKET_BYTES).decode()


def test_ticket_work_completes() -> None:
    """Work over a ticket finds a proof over its decoded bytes."""
    order = TicketOrder(TICKET, 6)
    assert order.ticket == TICKET
    assert order.effort_bits == 6
    assert not order.is_complete

    assert order.perform_work() is True
    assert order.is_complete
    assert check_proof(6, TICKET_BYTES, order.proof)


def test_ticket_proof_blocks_until_done() -> None:
    """Reading the proof performs outstanding work."""
    order = TicketOrder(TICKET, 4)
    proof = order.proof
    assert order.is_complete
    assert order.proof is proof


def test_ticket_work_with_budget() -> None:
    """A budget too small for the effort reports incomplete work."""
    order = TicketOrder(TICKET, 150)
    assert order.perform_work(10) is False
    assert not order.is_complete


def test_ticket_claim_verifies() -> None:
    """A completed ticket produces a claim a verifier accepts."""
    order = TicketOrder(TICKET, 6)
    order.perform_work()
    claim = order.to_claim()
    assert claim.data == TICKET
    assert claim.verify()


def test_ticket_claim_requires_work() -> None:
    """Claims are only available once the work is complete."""
    with pytest.raises(ValueError):
        TicketOrder(TICKET, 6).to_claim()


def test_malformed_ticket() -> None:
    """Tickets that are not base64 are rejected."""
    with pytest.raises(EffortError):
        TicketOrder("%%%", 6)


def test_ticket_completion_logged_once(caplog) -> None:
    """Completion is logged when the work finishes, not on every later call."""
    caplog.set_level(logging.INFO, logger="nonce_effort.services.tickets")
    order = TicketOrder(TICKET, 4)
    assert order.perform_work() is True
    assert order.perform_work() is True
    completions = [r for r in caplog.records if "Ticket work complete" in r.getMessage()]
    assert len(completions) == 1


def test_ticket_proof_is_nonce() -> None:
    """The proof property always yields a nonce, even with no prior work."""
    order = TicketOrder(TICKET, 4)
    assert isinstance(order.proof, Nonce)
    assert check_proof(4, TICKET_BYTES, order.proof)
