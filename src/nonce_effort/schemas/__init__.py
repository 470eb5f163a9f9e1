"""
Pydantic schemas for transporting effort proofs.
"""

from .effort import EffortClaim

__all__ = ["EffortClaim"]
