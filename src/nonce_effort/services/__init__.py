"""Effort services built on top of nonces."""

from .effort import Effort

__all__ = ["Effort"]
