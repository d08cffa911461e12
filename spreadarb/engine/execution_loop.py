"""
Execution Loop
==============
Orchestrates one pipeline cycle per tick:

    IDLE → FETCHING → ANALYZING → (IDLE | EXECUTING) → IDLE

- Cycles are strictly sequential; the analyzer only sees one fetch.
- Single-flight: at most one EXECUTING at a time.
- Every pipeline failure is caught here, logged, and converted into a
  delay (normal or error backoff). Only FatalConfigError escapes.
- stop() takes effect at the next IDLE boundary; an in-flight execution
  always finishes.
"""

from __future__ import annotations

import asyncio
from collections import deque
from enum import Enum
from typing import Deque, Dict, Optional

from spreadarb.engine.scheduler import TickScheduler
from spreadarb.execution.bundle_builder import BundleBuilder
from spreadarb.execution.bundle_submitter import RelaySubmitter
from spreadarb.execution.route_resolver import RouteResolver
from spreadarb.feeds.price_oracle import PriceOracleClient
from spreadarb.shared.config.tip_accounts import TipAccountRegistry
from spreadarb.shared.config.trading import TradingConfig
from spreadarb.shared.execution.errors import FatalConfigError
from spreadarb.shared.execution.execution_result import Err
from spreadarb.shared.models.trading import BundleStatus, Opportunity
from spreadarb.shared.system.logging import Logger
from spreadarb.strategy.spread_analyzer import SpreadAnalyzer


class LoopState(Enum):
    IDLE = "IDLE"
    FETCHING = "FETCHING"
    ANALYZING = "ANALYZING"
    EXECUTING = "EXECUTING"


class ExecutionLoop:
    """
    Usage:
        loop = ExecutionLoop(config, oracle, analyzer, resolver, builder,
                             submitter, rpc, tip_registry, jito)
        await loop.run()      # until stop()
        delay = await loop.run_cycle()   # one cycle, for tests
    """

    HISTORY_SIZE = 256

    def __init__(
        self,
        config: TradingConfig,
        oracle: PriceOracleClient,
        analyzer: SpreadAnalyzer,
        resolver: RouteResolver,
        builder: BundleBuilder,
        submitter: RelaySubmitter,
        rpc,
        tip_registry: TipAccountRegistry,
        jito=None,
        scheduler: Optional[TickScheduler] = None,
    ):
        self.config = config
        self.oracle = oracle
        self.analyzer = analyzer
        self.resolver = resolver
        self.builder = builder
        self.submitter = submitter
        self.rpc = rpc
        self.tip_registry = tip_registry
        self.jito = jito
        self.scheduler = scheduler or TickScheduler(
            config.poll_interval_sec, config.error_backoff_multiplier
        )

        self._state = LoopState.IDLE
        self.history: Deque[LoopState] = deque([LoopState.IDLE], maxlen=self.HISTORY_SIZE)
        self._execution_lock = asyncio.Lock()
        self._stop_requested = False
        self._running = False

        self._stats: Dict[str, int] = {
            "cycles": 0,
            "opportunities": 0,
            "submitted": 0,
            "landed": 0,
            "failed": 0,
            "unknown": 0,
            "oracle_failures": 0,
            "no_route": 0,
            "errors": 0,
        }

    # ═══════════════════════════════════════════════════════════════════
    # STATE
    # ═══════════════════════════════════════════════════════════════════

    @property
    def state(self) -> LoopState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def execution_in_flight(self) -> bool:
        return self._execution_lock.locked()

    def _transition(self, state: LoopState) -> None:
        if state != self._state:
            self._state = state
            self.history.append(state)

    def stop(self) -> None:
        """Request shutdown; honoured at the next IDLE boundary."""
        if not self._stop_requested:
            Logger.info("[LOOP] Stopping trading bot...")
        self._stop_requested = True

    # ═══════════════════════════════════════════════════════════════════
    # RUN
    # ═══════════════════════════════════════════════════════════════════

    async def run(self) -> None:
        if self._running:
            Logger.warning("[LOOP] Bot is already running")
            return

        self._running = True
        Logger.info("[LOOP] Starting trading loop...")
        try:
            while not self._stop_requested:
                delay = await self.safe_cycle()
                if self._stop_requested:
                    break
                await self.scheduler.sleep(delay)
        finally:
            self._transition(LoopState.IDLE)
            self._running = False
            Logger.info(f"[LOOP] Loop stopped | {self.get_stats()}")

    async def safe_cycle(self) -> float:
        """run_cycle() with the error boundary applied."""
        try:
            return await self.run_cycle()
        except FatalConfigError:
            raise
        except Exception as e:
            self._stats["errors"] += 1
            Logger.error(f"[LOOP] Error in trading loop: {e}")
            self._transition(LoopState.IDLE)
            return self.scheduler.next_delay(ok=False)

    async def run_cycle(self) -> float:
        """
        One full cycle. Returns the delay before the next tick.
        """
        if self._stop_requested:
            return 0.0

        self._stats["cycles"] += 1
        await self._maybe_refresh_tips()

        # FETCHING
        self._transition(LoopState.FETCHING)
        fetched = await self.oracle.fetch_quotes(self.config.watched_assets)
        if isinstance(fetched, Err):
            self._stats["oracle_failures"] += 1
            Logger.warning(f"[LOOP] Unable to fetch price data ({fetched.error.code.value}), backing off")
            self._transition(LoopState.IDLE)
            return self.scheduler.next_delay(ok=False)

        # ANALYZING
        self._transition(LoopState.ANALYZING)
        quotes = fetched.value
        self.analyzer.log_spreads(quotes)
        tradable = {k: q for k, q in quotes.items() if k != self.config.quote_mint}
        opportunity = self.analyzer.evaluate(tradable)

        if opportunity is None:
            self._transition(LoopState.IDLE)
            return self.scheduler.next_delay(ok=True)

        self._stats["opportunities"] += 1
        Logger.success(
            f"[SPREAD] Profitable Arbitrage Opportunity Found for {opportunity.asset_id[:8]}... | "
            f"Spread: {opportunity.profit_percentage}%"
        )

        if self._execution_lock.locked():
            Logger.warning("[LOOP] Execution already in flight, skipping opportunity")
            self._transition(LoopState.IDLE)
            return self.scheduler.next_delay(ok=True)

        # EXECUTING
        self._transition(LoopState.EXECUTING)
        try:
            async with self._execution_lock:
                ok = await self._execute(opportunity)
        except FatalConfigError:
            raise
        except Exception as e:
            self._stats["errors"] += 1
            Logger.error(f"[LOOP] Execution error: {e}")
            ok = False
        finally:
            self._transition(LoopState.IDLE)

        return self.scheduler.next_delay(ok=ok)

    # ═══════════════════════════════════════════════════════════════════
    # EXECUTION
    # ═══════════════════════════════════════════════════════════════════

    async def _maybe_refresh_tips(self) -> None:
        if self.jito is None:
            return
        if self.tip_registry.is_stale(self.config.tip_refresh_sec):
            await self.tip_registry.refresh(self.jito)

    async def _execute(self, opportunity: Opportunity) -> bool:
        """
        Resolve → build → submit → wait. Returns False when the next tick
        should use the error backoff.
        """
        tip_snapshot = self.tip_registry.current()

        resolved = await self.resolver.resolve(
            self.config.quote_mint,
            opportunity.asset_id,
            self.config.trade_amount_atomic,
            self.config.max_slippage_bps,
        )
        if isinstance(resolved, Err):
            self._stats["no_route"] += 1
            Logger.warning(f"[LOOP] Skipping opportunity: {resolved.error}")
            return True

        blockhash = await self.rpc.get_latest_blockhash()
        bundle = self.builder.build(
            resolved.value,
            self.config.tip_lamports,
            tip_snapshot,
            blockhash,
        )

        submitted = await self.submitter.submit(bundle)
        if isinstance(submitted, Err):
            self._stats["failed"] += 1
            Logger.error(f"[LOOP] Bundle not accepted: {submitted.error}")
            return False

        self._stats["submitted"] += 1
        final = await self.submitter.wait_for_terminal(submitted.value.bundle_id)

        if final.status == BundleStatus.LANDED:
            self._stats["landed"] += 1
            Logger.success(f"[LOOP] Atomic arbitrage executed successfully: {final.bundle_id}")
        elif final.status == BundleStatus.FAILED:
            self._stats["failed"] += 1
            Logger.warning(f"[LOOP] Bundle failed on-chain: {final.bundle_id}")
        else:
            self._stats["unknown"] += 1
            Logger.warning(f"[LOOP] Bundle outcome unknown: {final.bundle_id}")
        return True

    def get_stats(self) -> Dict[str, int]:
        return dict(self._stats)
