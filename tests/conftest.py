# tests/conftest.py
from __future__ import annotations

import pytest

from nonce_effort.core.nonce import Nonce

BASE_NONCE_BYTES = 18
SALT_NONCE_BYTES = 4


@pytest.fixture()
def base_nonce() -> Nonce:
    """A deterministic 18-byte base nonce."""
    return Nonce.from_string_hash("lobby-base", BASE_NONCE_BYTES)


@pytest.fixture()
def salt_nonce() -> Nonce:
    """A deterministic 4-byte salt nonce."""
    return Nonce.from_string_hash("lobby-salt", SALT_NONCE_BYTES)
