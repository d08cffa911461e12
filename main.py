"""
PhantomSpread - Entrypoint
==========================
Runs the spread arbitrage bot until SIGINT/SIGTERM.

    python main.py

All configuration comes from the environment / .env (see config/settings.py).
"""

import asyncio
import signal
import sys

from config.settings import Settings
from spreadarb.engine.trading_bot import TradingBot
from spreadarb.shared.config.trading import TradingConfig
from spreadarb.shared.execution.errors import FatalConfigError
from spreadarb.shared.system.logging import Logger


def install_signal_handlers(bot: TradingBot) -> None:
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, bot.stop)
        except NotImplementedError:
            # Windows event loops
            signal.signal(sig, lambda *_: bot.stop())


async def run() -> int:
    Logger.debug(f"[SYSTEM] Settings: {Settings.describe()}")
    try:
        bot = TradingBot(TradingConfig.from_settings())
        install_signal_handlers(bot)
        await bot.start()
    except FatalConfigError as e:
        Logger.critical(f"[SYSTEM] Fatal error: {e}")
        return 1
    return 0


def main() -> int:
    try:
        return asyncio.run(run())
    except KeyboardInterrupt:
        Logger.info("[SYSTEM] Interrupted")
        return 0


if __name__ == "__main__":
    sys.exit(main())
