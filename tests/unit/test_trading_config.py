"""
Configuration Unit Tests
========================
Settings helpers, TradingConfig derivation and validation, scheduler.
"""

from dataclasses import replace
from decimal import Decimal

import pytest

from config.settings import Settings, _parse_list, format_endpoint
from spreadarb.engine.scheduler import ScheduleMode, TickScheduler
from spreadarb.shared.config.trading import TradingConfig
from spreadarb.shared.execution.errors import ErrorCode, FatalConfigError


class TestSettingsHelpers:
    def test_format_endpoint_adds_scheme(self):
        assert format_endpoint("rpc.example.com", "x") == "https://rpc.example.com"

    def test_format_endpoint_keeps_scheme(self):
        assert format_endpoint("http://localhost:8899", "x") == "http://localhost:8899"

    def test_format_endpoint_default(self):
        assert format_endpoint("", "https://default") == "https://default"

    def test_parse_list(self):
        assert _parse_list(" a, b ,,c ", ["z"]) == ["a", "b", "c"]
        assert _parse_list("", ["z"]) == ["z"]

    def test_describe_has_no_secrets(self):
        summary = Settings.describe()
        assert "PRIVATE" not in summary.upper()


class TestTradingConfig:
    def test_defaults(self):
        cfg = TradingConfig()
        assert cfg.min_profit_threshold == Decimal("0.0025")
        assert cfg.max_slippage_bps == 50
        assert cfg.tip_lamports == 100_000
        assert cfg.error_interval_sec == 5.0

    def test_trade_amount_atomic(self):
        cfg = TradingConfig(trade_amount=Decimal("50"), quote_decimals=6)
        assert cfg.trade_amount_atomic == 50_000_000

    def test_from_settings(self):
        cfg = TradingConfig.from_settings()
        assert cfg.jito_url.endswith("/api/v1/bundles")
        assert cfg.quote_mint == Settings.USDC_MINT
        assert cfg.default_tip_accounts == tuple(Settings.JITO_TIP_ACCOUNTS)
        assert isinstance(cfg.min_profit_threshold, Decimal)

    def test_from_settings_parses_numbers(self, monkeypatch):
        monkeypatch.setattr(Settings, "MIN_PROFIT_THRESHOLD", "0.004")
        monkeypatch.setattr(Settings, "MAX_SLIPPAGE_BPS", " 75 ")

        cfg = TradingConfig.from_settings()

        assert cfg.min_profit_threshold == Decimal("0.004")
        assert cfg.max_slippage_bps == 75

    @pytest.mark.parametrize("name, raw", [
        ("POLL_INTERVAL_SEC", "abc"),
        ("MIN_PROFIT_THRESHOLD", "0.25%"),
        ("JITO_TIP_LAMPORTS", "1e5"),
        ("TIP_REFRESH_SEC", "nan"),
    ])
    def test_malformed_setting_is_fatal(self, monkeypatch, name, raw):
        monkeypatch.setattr(Settings, name, raw)

        with pytest.raises(FatalConfigError, match=name) as exc:
            TradingConfig.from_settings()
        assert exc.value.code == ErrorCode.CONFIG_INVALID

    def test_every_malformed_setting_is_reported(self, monkeypatch):
        monkeypatch.setattr(Settings, "MAX_STATUS_POLLS", "ten")
        monkeypatch.setattr(Settings, "HTTP_TIMEOUT_SEC", "")

        with pytest.raises(FatalConfigError) as exc:
            TradingConfig.from_settings()
        assert "MAX_STATUS_POLLS" in str(exc.value)
        assert "HTTP_TIMEOUT_SEC" in str(exc.value)

    def test_frozen(self, trading_config):
        with pytest.raises(Exception):
            trading_config.tip_lamports = 1

    def test_valid_config_passes(self, trading_config):
        trading_config.validate()

    @pytest.mark.parametrize("changes, fragment", [
        ({"min_profit_threshold": Decimal("-0.1")}, "min_profit_threshold"),
        ({"trade_amount": Decimal("0")}, "trade_amount"),
        ({"tip_lamports": 0}, "tip_lamports"),
        ({"max_slippage_bps": 0}, "max_slippage_bps"),
        ({"poll_interval_sec": 0}, "poll_interval_sec"),
        ({"max_status_polls": 0}, "max_status_polls"),
        ({"watched_assets": ()}, "watched_assets"),
        ({"default_tip_accounts": ()}, "default_tip_accounts"),
        ({"tip_selection": "weighted"}, "tip_selection"),
    ])
    def test_invalid_config_is_fatal(self, trading_config, changes, fragment):
        with pytest.raises(FatalConfigError, match=fragment) as exc:
            replace(trading_config, **changes).validate()
        assert exc.value.code == ErrorCode.CONFIG_INVALID


class TestTickScheduler:
    def test_normal_and_backoff_delays(self):
        scheduler = TickScheduler(interval_sec=1.0, error_multiplier=5.0)

        assert scheduler.next_delay(ok=False) == 5.0
        assert scheduler.mode == ScheduleMode.BACKOFF
        assert scheduler.next_delay(ok=True) == 1.0
        assert scheduler.mode == ScheduleMode.NORMAL

    @pytest.mark.asyncio
    async def test_sleep_is_injected(self, clock):
        scheduler = TickScheduler(sleep=clock.sleep)
        await scheduler.sleep(2.5)
        assert clock.sleeps == [2.5]
