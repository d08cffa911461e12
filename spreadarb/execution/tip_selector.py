"""
Tip account selection strategies.

The pool is passed in on every call so a selector never holds a stale
copy of the tip-account snapshot.
"""

from __future__ import annotations

import random
from typing import Optional, Sequence


class TipSelector:
    """Strategy interface: pick one account from the pool."""

    def select(self, accounts: Sequence[str]) -> str:
        raise NotImplementedError


class RandomTipSelector(TipSelector):
    """Uniform random choice to spread contention across tip accounts."""

    def __init__(self, rng: Optional[random.Random] = None):
        self._rng = rng or random.Random()

    def select(self, accounts: Sequence[str]) -> str:
        if not accounts:
            raise ValueError("No tip accounts available")
        return self._rng.choice(list(accounts))


class RoundRobinTipSelector(TipSelector):
    """Cycle through the pool in order."""

    def __init__(self):
        self._index = 0

    def select(self, accounts: Sequence[str]) -> str:
        if not accounts:
            raise ValueError("No tip accounts available")
        account = accounts[self._index % len(accounts)]
        self._index = (self._index + 1) % len(accounts)
        return account


class FixedTipSelector(TipSelector):
    """Always the same position in the pool."""

    def __init__(self, index: int = 0):
        self.index = index

    def select(self, accounts: Sequence[str]) -> str:
        if not accounts:
            raise ValueError("No tip accounts available")
        return accounts[self.index % len(accounts)]


def get_tip_selector(name: str) -> TipSelector:
    if name == "round_robin":
        return RoundRobinTipSelector()
    return RandomTipSelector()
