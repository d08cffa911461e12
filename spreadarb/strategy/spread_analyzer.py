"""
Spread Analyzer
===============
Pure opportunity detection over one batch of quotes.

    spread = (sell - buy) / buy

An asset qualifies when spread > min_profit_threshold and the oracle
confidence is HIGH. The widest qualifying spread wins; exact ties go to
the first asset in input order.
"""

from __future__ import annotations

import time
from decimal import Decimal
from typing import Callable, Dict, Mapping, Optional

from spreadarb.shared.models.trading import ConfidenceLevel, Opportunity, Quote
from spreadarb.shared.system.logging import Logger


def compute_spread(quote: Quote) -> Decimal:
    return (quote.sell_price - quote.buy_price) / quote.buy_price


class SpreadAnalyzer:
    """
    Usage:
        analyzer = SpreadAnalyzer(Decimal("0.0025"))
        opportunity = analyzer.evaluate(quotes)
    """

    def __init__(
        self,
        min_profit_threshold: Decimal,
        required_confidence: ConfidenceLevel = ConfidenceLevel.HIGH,
        clock: Callable[[], float] = time.time,
    ):
        self.min_profit_threshold = Decimal(min_profit_threshold)
        self.required_confidence = required_confidence
        self._clock = clock

    def spreads(self, quotes: Mapping[str, Quote]) -> Dict[str, Decimal]:
        """Per-asset spread table, in input order."""
        return {asset_id: compute_spread(q) for asset_id, q in quotes.items()}

    def qualifies(self, quote: Quote, spread: Optional[Decimal] = None) -> bool:
        if spread is None:
            spread = compute_spread(quote)
        return spread > self.min_profit_threshold and quote.confidence == self.required_confidence

    def evaluate(self, quotes: Mapping[str, Quote]) -> Optional[Opportunity]:
        best_quote: Optional[Quote] = None
        best_spread: Optional[Decimal] = None

        for asset_id, quote in quotes.items():
            spread = compute_spread(quote)
            if not self.qualifies(quote, spread):
                continue
            # strict > keeps the first of equal spreads
            if best_spread is None or spread > best_spread:
                best_quote, best_spread = quote, spread

        if best_quote is None:
            return None

        return Opportunity(
            asset_id=best_quote.asset_id,
            buy_price=best_quote.buy_price,
            sell_price=best_quote.sell_price,
            spread_pct=best_spread,
            confidence=best_quote.confidence,
            detected_at=self._clock(),
        )

    def log_spreads(self, quotes: Mapping[str, Quote]) -> None:
        for asset_id, spread in self.spreads(quotes).items():
            q = quotes[asset_id]
            Logger.info(
                f"[SPREAD] Token {asset_id[:8]}... | Buy Price: {q.buy_price} | "
                f"Sell Price: {q.sell_price} | Spread: {spread * 100:.4f}% | "
                f"Confidence: {q.confidence.value}"
            )
