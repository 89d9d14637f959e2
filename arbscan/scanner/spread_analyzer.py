"""Spread detection: fee-adjusted best buy and sell legs per symbol."""

import math
from typing import Dict, List, Mapping, Optional

from config.strategy_params import StrategyParams
from arbscan.models import ExchangeFees, PriceByExchange, PricesBySymbol
from arbscan.scanner.opportunity import ArbitrageOpportunity, OpportunityLeg, TradeSide
from arbscan.utils.logger import get_logger

logger = get_logger("arbscan.analyzer")


def build_leg(
    fees: Optional[ExchangeFees],
    exchange: str,
    price: float,
    side: TradeSide,
) -> OpportunityLeg:
    """
    Build a leg whose effective price includes the venue's total fee.

    Buying costs ``price * (1 + fee%)``; selling yields ``price * (1 - fee%)``.
    A venue without a fee entry is treated as fee-free.
    """
    total_fee_percent = fees.total_fee_percent if fees is not None else 0.0
    if side == TradeSide.BUY:
        multiplier = 1 + total_fee_percent / 100
    else:
        multiplier = 1 - total_fee_percent / 100

    return OpportunityLeg(
        exchange=exchange,
        price=price,
        effective_price=price * multiplier,
        fee_percent_applied=total_fee_percent,
    )


class SpreadAnalyzer:
    """
    Finds symbols whose fee-adjusted cross-venue spread clears a threshold.

    Fees are applied before choosing legs: the cheapest raw quote is not
    necessarily the cheapest once venue fees differ.
    """

    def __init__(
        self,
        fees: Mapping[str, ExchangeFees],
        config: StrategyParams,
    ) -> None:
        """
        Initialize the spread analyzer.

        Args:
            fees: Fee snapshot per venue name
            config: Strategy parameters (default threshold)
        """
        self._fees: Dict[str, ExchangeFees] = dict(fees)
        self._config = config

    @property
    def config(self) -> StrategyParams:
        """Get the current strategy configuration."""
        return self._config

    def fees_for(self, exchange: str) -> Optional[ExchangeFees]:
        return self._fees.get(exchange)

    def analyze_symbol(
        self,
        symbol: str,
        exchange_prices: PriceByExchange,
        min_diff_percent: float,
    ) -> Optional[ArbitrageOpportunity]:
        """
        Analyze one symbol's quotes.

        Args:
            symbol: Canonical symbol
            exchange_prices: Raw price per venue
            min_diff_percent: Minimum fee-adjusted spread (%)

        Returns:
            ArbitrageOpportunity if the net spread clears the threshold, None otherwise
        """
        entries = list(exchange_prices.items())
        if len(entries) < 2:
            return None

        raw_prices = [price for _, price in entries]
        min_price = min(raw_prices)
        max_price = max(raw_prices)
        gross_diff = (max_price - min_price) / min_price * 100

        best_buy: Optional[OpportunityLeg] = None
        best_sell: Optional[OpportunityLeg] = None
        for exchange, price in entries:
            fees = self.fees_for(exchange)
            buy_leg = build_leg(fees, exchange, price, TradeSide.BUY)
            sell_leg = build_leg(fees, exchange, price, TradeSide.SELL)
            if best_buy is None or buy_leg.effective_price < best_buy.effective_price:
                best_buy = buy_leg
            if best_sell is None or sell_leg.effective_price > best_sell.effective_price:
                best_sell = sell_leg

        net_diff = (
            (best_sell.effective_price - best_buy.effective_price)
            / best_buy.effective_price * 100
        )

        if net_diff < min_diff_percent:
            logger.debug(
                f"Skipping {symbol}: net diff {net_diff:.3f}% < min {min_diff_percent}%"
            )
            return None

        logger.debug(
            f"Candidate {symbol}: buy {best_buy.exchange}@{best_buy.price} "
            f"sell {best_sell.exchange}@{best_sell.price} net={net_diff:.2f}%"
        )

        return ArbitrageOpportunity(
            symbol=symbol,
            min_price=min_price,
            max_price=max_price,
            diff=round(gross_diff, 2),
            net_diff=round(net_diff, 2),
            buy=best_buy,
            sell=best_sell,
            exchanges=dict(exchange_prices),
        )

    def find_arbitrage(
        self,
        prices: PricesBySymbol,
        min_diff_percent: Optional[float] = None,
    ) -> List[ArbitrageOpportunity]:
        """
        Find every symbol with a net spread at or above the threshold.

        Args:
            prices: Aggregated prices
            min_diff_percent: Threshold (%); the configured default when None or NaN

        Returns:
            Candidates in symbol iteration order
        """
        threshold = resolve_threshold(min_diff_percent, self._config.min_diff_percent)

        opportunities: List[ArbitrageOpportunity] = []
        for symbol, exchange_prices in prices.items():
            opportunity = self.analyze_symbol(symbol, exchange_prices, threshold)
            if opportunity is not None:
                opportunities.append(opportunity)

        logger.info(
            f"Found {len(opportunities)} candidates >= {threshold}% "
            f"from {len(prices)} symbols"
        )
        return opportunities


def resolve_threshold(value: Optional[float], default: float) -> float:
    """Use ``value`` when it is a real number, otherwise ``default``."""
    if value is None or not math.isfinite(value):
        return default
    return value
