"""
Tip Account Registry
====================
Versioned, immutable snapshots of the Jito tip-account pool.

The pool is refreshed from the Block Engine (getTipAccounts). A refresh
never mutates the snapshot a cycle is holding; it swaps in a new one.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Callable, Iterable, Optional, Tuple

from spreadarb.shared.system.logging import Logger


@dataclass(frozen=True)
class TipAccountSnapshot:
    """Read-only view of the tip pool at one version."""

    version: int
    accounts: Tuple[str, ...]
    fetched_at: float = field(default_factory=time.time)

    def __len__(self) -> int:
        return len(self.accounts)


class TipAccountRegistry:
    """
    Holds the current TipAccountSnapshot.

    Usage:
        registry = TipAccountRegistry(Settings.JITO_TIP_ACCOUNTS)
        await registry.refresh(jito_client)
        snapshot = registry.current()
    """

    def __init__(self, defaults: Iterable[str], clock: Callable[[], float] = time.time):
        self._clock = clock
        accounts = tuple(defaults)
        if not accounts:
            raise ValueError("Tip account pool cannot be empty")
        self._snapshot = TipAccountSnapshot(version=1, accounts=accounts, fetched_at=clock())
        self._last_refresh_attempt: Optional[float] = None

    def current(self) -> TipAccountSnapshot:
        return self._snapshot

    def replace(self, accounts: Iterable[str]) -> TipAccountSnapshot:
        """Atomically swap in a new snapshot (version + 1)."""
        new_accounts = tuple(accounts)
        if not new_accounts:
            raise ValueError("Tip account pool cannot be empty")

        snapshot = TipAccountSnapshot(
            version=self._snapshot.version + 1,
            accounts=new_accounts,
            fetched_at=self._clock(),
        )
        self._snapshot = snapshot
        return snapshot

    def is_stale(self, max_age_sec: float) -> bool:
        last = self._last_refresh_attempt
        return last is None or self._clock() - last >= max_age_sec

    async def refresh(self, jito_client) -> TipAccountSnapshot:
        """
        Fetch the tip pool from the Block Engine.

        On failure the current snapshot stays in place.
        """
        self._last_refresh_attempt = self._clock()
        try:
            accounts = await jito_client.get_tip_accounts()
        except Exception as e:
            Logger.warning(f"[TIPS] Failed to update tip accounts, keeping v{self._snapshot.version}: {e}")
            return self._snapshot

        if not accounts:
            Logger.warning(f"[TIPS] Empty tip account list, keeping v{self._snapshot.version}")
            return self._snapshot

        if tuple(accounts) == self._snapshot.accounts:
            return self._snapshot

        snapshot = self.replace(accounts)
        Logger.info(f"[TIPS] Updated tip accounts: v{snapshot.version} ({len(snapshot)} accounts)")
        return snapshot
