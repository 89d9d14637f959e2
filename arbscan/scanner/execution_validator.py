"""
Execution validation of arbitrage candidates.

Each candidate runs through four checks in order and stops at the first one
that fails:

1. liquidity: 24h quote volume known and above the minimum on both legs
2. depth: the trade notional fills on both books within the slippage limit
3. transfer: a network exists to move the asset from the buy to the sell venue
4. profit: the simulated trade clears the minimum profit after fees

Missing data always rejects. Rejections are recorded on the candidate, never
raised.
"""

import asyncio
from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional, Sequence, Set, Tuple

from config.strategy_params import StrategyParams
from arbscan.api.provider import DataProvider, ProviderResult
from arbscan.models import CurrencyInfo, OrderBook, Ticker24h
from arbscan.scanner.fill_simulator import FillResult, simulate_buy, simulate_sell
from arbscan.scanner.opportunity import (
    ArbitrageOpportunity,
    LegExecution,
    OpportunityValidation,
    TransferCheck,
    ValidationStatus,
)
from arbscan.scanner.transfer import CurrencyTable, base_asset_from_symbol, check_transferability
from arbscan.utils.logger import get_logger

logger = get_logger("arbscan.validator")


@dataclass
class ReferenceData:
    """Per-venue 24h tickers and currency metadata fetched once per scan."""

    tickers: Dict[str, ProviderResult[Dict[str, Ticker24h]]] = field(default_factory=dict)
    currencies: Dict[str, ProviderResult[Dict[str, CurrencyInfo]]] = field(default_factory=dict)

    def volume(self, exchange: str, symbol: str) -> Optional[float]:
        """24h quote volume, or None when unknown."""
        result = self.tickers.get(exchange)
        tickers = result.value_or({}) if result is not None else {}
        ticker = tickers.get(symbol)
        return ticker.quote_volume_24h if ticker is not None else None

    def currency_table(self, exchange: str) -> Optional[CurrencyTable]:
        """Currency metadata, or None when the venue cannot provide it."""
        result = self.currencies.get(exchange)
        if result is None or not result.ok or result.value is None:
            return None
        return result.value


class ExecutionValidator:
    """Confirms or rejects candidates against live depth and venue metadata."""

    def __init__(
        self,
        providers: Sequence[DataProvider],
        config: StrategyParams,
    ) -> None:
        """
        Initialize the validator.

        Args:
            providers: Venue providers, looked up by name
            config: Strategy thresholds
        """
        self._providers: Dict[str, DataProvider] = {p.name: p for p in providers}
        self._config = config

    @property
    def config(self) -> StrategyParams:
        """Get the current strategy configuration."""
        return self._config

    # ==================== Reference data ====================

    async def prefetch(self, candidates: Sequence[ArbitrageOpportunity]) -> ReferenceData:
        """
        Fetch 24h tickers and currencies once per venue for all candidates.

        Args:
            candidates: Opportunities about to be validated

        Returns:
            Scan-scoped reference table keyed by venue name
        """
        symbols_by_exchange: Dict[str, Set[str]] = {}
        for candidate in candidates:
            for leg in (candidate.buy, candidate.sell):
                symbols_by_exchange.setdefault(leg.exchange, set()).add(candidate.symbol)

        exchanges = [name for name in symbols_by_exchange if name in self._providers]
        ticker_results, currency_results = await asyncio.gather(
            asyncio.gather(*(
                self._providers[name].fetch_tickers(sorted(symbols_by_exchange[name]))
                for name in exchanges
            )),
            asyncio.gather(*(
                self._providers[name].fetch_currencies() for name in exchanges
            )),
        )

        reference = ReferenceData(
            tickers=dict(zip(exchanges, ticker_results)),
            currencies=dict(zip(exchanges, currency_results)),
        )
        logger.debug(f"Reference data fetched for {len(exchanges)} exchanges")
        return reference

    # ==================== Validation ====================

    async def validate_all(
        self,
        candidates: Sequence[ArbitrageOpportunity],
    ) -> List[ArbitrageOpportunity]:
        """
        Validate every candidate; each gets its ``validation`` attached.

        Args:
            candidates: Output of the spread detector

        Returns:
            The same candidates, validated and rejected alike
        """
        if not candidates:
            return []

        reference = await self.prefetch(candidates)
        await asyncio.gather(*(self.validate(c, reference) for c in candidates))

        validated = sum(1 for c in candidates if c.is_validated)
        logger.info(
            f"Validation: {validated} validated, {len(candidates) - validated} rejected"
        )
        return list(candidates)

    async def validate(
        self,
        candidate: ArbitrageOpportunity,
        reference: ReferenceData,
    ) -> OpportunityValidation:
        """
        Run the checks for one candidate and attach the outcome.

        On success ``net_diff`` is replaced by the depth-aware estimate.

        Args:
            candidate: Candidate opportunity
            reference: Scan-scoped reference data

        Returns:
            The attached validation record
        """
        notional = self._config.trade_amount_usd
        candidate.trade_amount_usd = notional

        reasons, buy_leg, sell_leg = self._check_liquidity(candidate, reference)
        if reasons:
            return self._finish(candidate, reasons, buy_leg, sell_leg)

        reasons, buy_leg, sell_leg, fills = await self._check_depth(
            candidate, buy_leg, sell_leg
        )
        if reasons or fills is None:
            return self._finish(candidate, reasons, buy_leg, sell_leg)
        buy_fill, sell_fill = fills

        transfer = self._check_transfer(candidate, reference)
        if not transfer.is_ok:
            return self._finish(
                candidate, [transfer.reason or f"transfer {transfer.status.value}"],
                buy_leg, sell_leg, transfer,
            )

        cost = buy_fill.quote_amount * (1 + candidate.buy.fee_percent_applied / 100)
        proceeds = sell_fill.quote_amount * (1 - candidate.sell.fee_percent_applied / 100)
        real_profit = proceeds - cost
        candidate.real_profit_usd = round(real_profit, 2)

        if real_profit < self._config.min_real_profit_usd:
            reason = (
                f"real profit {real_profit:.2f} {self._config.settlement_currency} below "
                f"minimum {self._config.min_real_profit_usd} for "
                f"{notional} {self._config.settlement_currency} trade"
            )
            return self._finish(candidate, [reason], buy_leg, sell_leg, transfer)

        candidate.net_diff = round(real_profit / cost * 100, 2)
        return self._finish(candidate, [], buy_leg, sell_leg, transfer)

    def _finish(
        self,
        candidate: ArbitrageOpportunity,
        reasons: List[str],
        buy_leg: LegExecution,
        sell_leg: LegExecution,
        transfer: Optional[TransferCheck] = None,
    ) -> OpportunityValidation:
        status = ValidationStatus.REJECTED if reasons else ValidationStatus.VALIDATED
        validation = OpportunityValidation(
            status=status,
            reasons=list(reasons),
            buy=buy_leg,
            sell=sell_leg,
            transfer=transfer,
        )
        candidate.validation = validation

        if reasons:
            logger.debug(f"Rejected {candidate.symbol}: {'; '.join(reasons)}")
        else:
            logger.info(
                f"Validated {candidate.symbol}: buy {candidate.buy.exchange} "
                f"sell {candidate.sell.exchange} profit={candidate.real_profit_usd} "
                f"net={candidate.net_diff}%"
            )
        return validation

    # ==================== Checks ====================

    def _check_liquidity(
        self,
        candidate: ArbitrageOpportunity,
        reference: ReferenceData,
    ) -> Tuple[List[str], LegExecution, LegExecution]:
        reasons: List[str] = []
        legs: List[LegExecution] = []
        minimum = self._config.min_volume_24h

        for side, leg in (("buy", candidate.buy), ("sell", candidate.sell)):
            volume = reference.volume(leg.exchange, candidate.symbol)
            legs.append(LegExecution(exchange=leg.exchange, volume_24h=volume))
            if volume is None:
                reasons.append(f"24h volume unknown on {leg.exchange} ({side} leg)")
            elif volume < minimum:
                reasons.append(
                    f"24h volume {volume:,.0f} below minimum {minimum:,.0f} "
                    f"on {leg.exchange} ({side} leg)"
                )

        return reasons, legs[0], legs[1]

    async def _fetch_book(self, exchange: str, symbol: str) -> Optional[OrderBook]:
        provider = self._providers.get(exchange)
        if provider is None:
            return None
        result = await provider.fetch_order_book(symbol)
        return result.value if result.ok else None

    async def _check_depth(
        self,
        candidate: ArbitrageOpportunity,
        buy_leg: LegExecution,
        sell_leg: LegExecution,
    ) -> Tuple[List[str], LegExecution, LegExecution, Optional[Tuple[FillResult, FillResult]]]:
        symbol = candidate.symbol
        notional = self._config.trade_amount_usd
        quote = self._config.settlement_currency

        buy_book, sell_book = await asyncio.gather(
            self._fetch_book(candidate.buy.exchange, symbol),
            self._fetch_book(candidate.sell.exchange, symbol),
        )

        reasons: List[str] = []
        if buy_book is None:
            reasons.append(f"order book unavailable on {candidate.buy.exchange} (buy leg)")
        if sell_book is None:
            reasons.append(f"order book unavailable on {candidate.sell.exchange} (sell leg)")
        if buy_book is None or sell_book is None:
            return reasons, buy_leg, sell_leg, None

        buy_fill = simulate_buy(buy_book.asks, notional)
        if buy_fill is None:
            reasons.append(
                f"insufficient buy-side depth on {candidate.buy.exchange} "
                f"to fill {notional} {quote}"
            )
            return reasons, buy_leg, sell_leg, None
        buy_leg = _with_fill(buy_leg, buy_fill)

        sell_fill = simulate_sell(sell_book.bids, buy_fill.base_amount)
        if sell_fill is None:
            reasons.append(
                f"insufficient sell-side depth on {candidate.sell.exchange} "
                f"to sell {buy_fill.base_amount:.8g} {symbol}"
            )
            return reasons, buy_leg, sell_leg, None
        sell_leg = _with_fill(sell_leg, sell_fill)

        limit = self._config.max_slippage_percent
        if buy_fill.slippage_percent > limit:
            reasons.append(
                f"buy slippage {buy_fill.slippage_percent:.2f}% exceeds max {limit}% "
                f"on {candidate.buy.exchange}"
            )
        if sell_fill.slippage_percent > limit:
            reasons.append(
                f"sell slippage {sell_fill.slippage_percent:.2f}% exceeds max {limit}% "
                f"on {candidate.sell.exchange}"
            )

        return reasons, buy_leg, sell_leg, (buy_fill, sell_fill)

    def _check_transfer(
        self,
        candidate: ArbitrageOpportunity,
        reference: ReferenceData,
    ) -> TransferCheck:
        asset = base_asset_from_symbol(candidate.symbol, self._config.settlement_currency)
        return check_transferability(
            asset,
            candidate.buy.exchange,
            candidate.sell.exchange,
            reference.currency_table(candidate.buy.exchange),
            reference.currency_table(candidate.sell.exchange),
        )


def _with_fill(leg: LegExecution, fill: FillResult) -> LegExecution:
    return replace(
        leg,
        best_price=fill.best_price,
        executable_price=fill.executable_price,
        base_amount=fill.base_amount,
        slippage_percent=round(fill.slippage_percent, 4),
    )
