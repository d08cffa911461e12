import os
import json
from dotenv import load_dotenv

# Load Environment Variables from project root .env
env_path = os.path.join(os.path.dirname(__file__), "../.env")
load_dotenv(env_path)


def format_endpoint(endpoint: str, default: str) -> str:
    """Ensure an endpoint carries a scheme (bare hosts get https://)."""
    if not endpoint:
        return default
    if not endpoint.startswith(("http://", "https://")):
        return f"https://{endpoint}"
    return endpoint


def _parse_list(raw: str, default: list) -> list:
    """Comma separated env value -> list (empty -> default)."""
    items = [item.strip() for item in raw.split(",") if item.strip()]
    return items or list(default)


class Settings:
    # ═══════════════════════════════════════════════════════════════════
    # PHANTOM SPREAD CONFIGURATION (Env-Based)
    # ═══════════════════════════════════════════════════════════════════

    # --- Console ---
    SILENT_MODE = os.getenv("SILENT_MODE", "false").lower() == "true"
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

    # Paths
    LOG_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), "../logs"))

    # ─── Endpoints ───
    RPC_URL = format_endpoint(
        os.getenv("RPC_ENDPOINT", ""), "https://api.mainnet-beta.solana.com"
    )
    JITO_URL = format_endpoint(
        os.getenv("JITO_ENDPOINT", ""),
        "https://frankfurt.mainnet.block-engine.jito.wtf",
    )
    JITO_BUNDLES_PATH = "/api/v1/bundles"
    JUPITER_PRICE_URL = os.getenv("JUPITER_PRICE_URL", "https://api.jup.ag/price/v2")
    JUPITER_API_URL = os.getenv("JUPITER_API_URL", "https://quote-api.jup.ag/v6")
    HTTP_TIMEOUT_SEC = os.getenv("HTTP_TIMEOUT_SEC", "10")

    # ─── Mints ───
    SOL_MINT = "So11111111111111111111111111111111111111112"
    USDC_MINT = "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v"
    JUP_MINT = "JUPyiwrYJFskUPiHa7hkeR8VUtAeFoSYbKedZNsDvCN"
    USDC_DECIMALS = 6

    WATCHED_ASSETS = _parse_list(
        os.getenv("WATCHED_ASSETS", ""), [SOL_MINT, USDC_MINT, JUP_MINT]
    )

    # ─── Strategy ───
    # Numeric values stay raw strings; TradingConfig.from_settings() parses them.
    MIN_PROFIT_THRESHOLD = os.getenv("MIN_PROFIT_THRESHOLD", "0.0025")  # 0.25%
    TRADE_AMOUNT_USDC = os.getenv("TRADE_AMOUNT_USDC", "50")
    MAX_SLIPPAGE_BPS = os.getenv("MAX_SLIPPAGE_BPS", "50")  # 0.5%

    # ─── Jito Bundle Config ───
    JITO_TIP_LAMPORTS = os.getenv("JITO_TIP_LAMPORTS", "100000")
    TIP_REFRESH_SEC = os.getenv("TIP_REFRESH_SEC", "300")
    TIP_SELECTION = os.getenv("TIP_SELECTION", "random")  # random | round_robin
    JITO_TIP_ACCOUNTS = [
        "96gYZGLnJYVFmbjzopPSU6QiEV5fGqZNyN9nmNhvrZU5",
        "HFqU5x63VTqvQss8hp11i4wVV8bD44PvwucfZ2bU7gRe",
        "Cw8CFyM9FkoMi7K7Crf6HNQqf4uEMzpKw6QNghXLvLkY",
        "ADaUMid9yfUytqMBgopwjb2DTLSokTSzL1zt6iGPaS49",
        "DfXygSm4jCyNCybVYYK6DwvWqjKee8pbDmJGcLWNDXjh",
        "ADuUkR4vqLUMWXxW9gh6D6L8pMSawimctcNZ5pGwDcEt",
        "DttWaMuVvTiduZRnguLF7jNxTgiMBZ1hyAumKUiL2KRL",
        "3AVi9Tg9Uo68tJfuvoKvqKNWKkC5wPdSSdeBnizKZ6jT",
    ]

    # ─── Loop Cadence ───
    POLL_INTERVAL_SEC = os.getenv("POLL_INTERVAL_SEC", "1.0")
    ERROR_BACKOFF_MULTIPLIER = os.getenv("ERROR_BACKOFF_MULTIPLIER", "5")

    # ─── Bundle Status Polling ───
    MAX_STATUS_POLLS = os.getenv("MAX_STATUS_POLLS", "10")
    STATUS_POLL_INITIAL_SEC = 0.5
    STATUS_POLL_FACTOR = 1.5
    STATUS_POLL_MAX_SEC = 5.0

    # ─── Wallet ───
    # SOLANA_PRIVATE_KEY (base58) or PRIVATE_KEY (JSON byte array)
    SOLANA_PRIVATE_KEY = os.getenv("SOLANA_PRIVATE_KEY", "")
    PRIVATE_KEY_JSON = os.getenv("PRIVATE_KEY", "")

    @staticmethod
    def describe() -> str:
        """Non-secret settings summary for the startup banner."""
        return json.dumps(
            {
                "rpc": Settings.RPC_URL,
                "jito": Settings.JITO_URL,
                "min_profit_threshold": Settings.MIN_PROFIT_THRESHOLD,
                "trade_amount_usdc": Settings.TRADE_AMOUNT_USDC,
                "tip_lamports": Settings.JITO_TIP_LAMPORTS,
                "assets": len(Settings.WATCHED_ASSETS),
            }
        )
