"""Business logic services."""

from . import ledger, pricing


__all__ = [
    "ledger",
    "pricing",
]
