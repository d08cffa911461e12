"""
Trading Bot
===========
Process-level wiring for the spread arbitrage pipeline.

Startup:
1. Validate configuration and load the fee-payer wallet (fatal on failure)
2. Log public key and SOL balance
3. Refresh the Jito tip-account pool
4. Hand control to the ExecutionLoop until stop()

All HTTP/RPC clients are closed on shutdown.
"""

from __future__ import annotations

from typing import Optional

from spreadarb.engine.execution_loop import ExecutionLoop
from spreadarb.execution.bundle_builder import BundleBuilder
from spreadarb.execution.bundle_submitter import RelaySubmitter
from spreadarb.execution.route_resolver import JupiterClient, RouteResolver
from spreadarb.execution.tip_selector import get_tip_selector
from spreadarb.execution.wallet import WalletManager
from spreadarb.feeds.price_oracle import PriceOracleClient
from spreadarb.shared.config.tip_accounts import TipAccountRegistry
from spreadarb.shared.config.trading import TradingConfig
from spreadarb.shared.infrastructure.jito_client import JitoClient
from spreadarb.shared.infrastructure.rpc_client import SolanaRpc
from spreadarb.shared.system.logging import Logger
from spreadarb.strategy.spread_analyzer import SpreadAnalyzer


class TradingBot:
    """
    Usage:
        bot = TradingBot(TradingConfig.from_settings())
        await bot.start()     # returns after stop()
    """

    def __init__(
        self,
        config: TradingConfig,
        wallet: Optional[WalletManager] = None,
        rpc: Optional[SolanaRpc] = None,
        jito: Optional[JitoClient] = None,
        oracle: Optional[PriceOracleClient] = None,
        jupiter: Optional[JupiterClient] = None,
    ):
        self.config = config
        self.wallet = wallet
        self.rpc = rpc
        self.jito = jito
        self.oracle = oracle
        self.jupiter = jupiter
        self.loop: Optional[ExecutionLoop] = None
        self._stop_requested = False

    def _wire(self) -> ExecutionLoop:
        cfg = self.config
        self.rpc = self.rpc or SolanaRpc(cfg.rpc_url)
        self.jito = self.jito or JitoClient(cfg.jito_url, timeout=cfg.http_timeout_sec)
        self.oracle = self.oracle or PriceOracleClient(cfg.price_api_url, timeout=cfg.http_timeout_sec)
        self.jupiter = self.jupiter or JupiterClient(cfg.jupiter_api_url, timeout=cfg.http_timeout_sec)

        self.tip_registry = TipAccountRegistry(cfg.default_tip_accounts)

        return ExecutionLoop(
            config=cfg,
            oracle=self.oracle,
            analyzer=SpreadAnalyzer(cfg.min_profit_threshold),
            resolver=RouteResolver(self.jupiter, self.rpc, self.wallet.get_public_key()),
            builder=BundleBuilder(self.wallet.keypair, get_tip_selector(cfg.tip_selection)),
            submitter=RelaySubmitter(
                self.jito,
                max_status_polls=cfg.max_status_polls,
                poll_initial_sec=cfg.status_poll_initial_sec,
                poll_factor=cfg.status_poll_factor,
                poll_max_sec=cfg.status_poll_max_sec,
            ),
            rpc=self.rpc,
            tip_registry=self.tip_registry,
            jito=self.jito,
        )

    async def start(self) -> None:
        """
        Raises:
            FatalConfigError: invalid configuration or wallet.
        """
        Logger.section("SPREAD ARBITRAGE BOT")
        self.config.validate()
        if self.wallet is None:
            self.wallet = WalletManager.load()

        try:
            self.loop = self._wire()
            await self._log_wallet()
            await self.tip_registry.refresh(self.jito)

            if self._stop_requested:
                self.loop.stop()
            await self.loop.run()
        finally:
            await self.close()

    async def _log_wallet(self) -> None:
        Logger.info(f"[WALLET] Wallet public key: {self.wallet.get_public_key()}")
        try:
            balance = await self.rpc.get_balance_sol(self.wallet.pubkey)
            Logger.info(f"[WALLET] Wallet balance: {balance:.4f} SOL")
        except Exception as e:
            Logger.warning(f"[WALLET] Balance lookup failed: {e}")

    def stop(self) -> None:
        self._stop_requested = True
        if self.loop is not None:
            self.loop.stop()

    async def close(self) -> None:
        for client in (self.oracle, self.jupiter, self.jito, self.rpc):
            if client is None:
                continue
            try:
                await client.close()
            except Exception as e:
                Logger.debug(f"[SYSTEM] Close error: {e}")
        Logger.info("[SYSTEM] Clients closed")
