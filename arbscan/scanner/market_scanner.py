"""Top-level scan over all configured venues."""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from config.strategy_params import StrategyParams
from arbscan.api.provider import DataProvider
from arbscan.models import ExchangeFees
from arbscan.scanner.execution_validator import ExecutionValidator
from arbscan.scanner.opportunity import ArbitrageOpportunity
from arbscan.scanner.pair_registry import collect_pairs
from arbscan.scanner.price_aggregator import collect_prices
from arbscan.scanner.spread_analyzer import SpreadAnalyzer, resolve_threshold
from arbscan.utils.logger import get_logger

logger = get_logger("arbscan.scanner")


@dataclass
class ScanResult:
    """Every candidate of one scan, split by validation outcome."""

    candidates: List[ArbitrageOpportunity] = field(default_factory=list)
    validated: List[ArbitrageOpportunity] = field(default_factory=list)
    rejected: List[ArbitrageOpportunity] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "validated": [o.to_dict() for o in self.validated],
            "rejected": [o.to_dict() for o in self.rejected],
        }


def _by_net_diff(opportunities: List[ArbitrageOpportunity]) -> List[ArbitrageOpportunity]:
    return sorted(opportunities, key=lambda o: o.net_diff, reverse=True)


class ArbitrageScanner:
    """
    Scans venues for executable cross-exchange arbitrage.

    Pipeline per scan:
    - Pair registry: which venues list which symbols
    - Price aggregation: last price per symbol per venue
    - Spread detection: fee-adjusted best buy and sell legs
    - Execution validation: liquidity, depth, transfer and profit checks
    """

    def __init__(
        self,
        providers: Sequence[DataProvider],
        config: StrategyParams,
    ) -> None:
        """
        Initialize the scanner.

        Args:
            providers: One provider per venue
            config: Strategy thresholds
        """
        self._providers = list(providers)
        self._config = config
        fees: Dict[str, ExchangeFees] = {p.name: p.fees for p in self._providers}
        self._analyzer = SpreadAnalyzer(fees, config)
        self._validator = ExecutionValidator(self._providers, config)

    @property
    def config(self) -> StrategyParams:
        """Get the current strategy configuration."""
        return self._config

    @property
    def providers(self) -> List[DataProvider]:
        return list(self._providers)

    async def find_candidates(
        self,
        min_diff_percent: Optional[float] = None,
    ) -> List[ArbitrageOpportunity]:
        """
        Run detection only (no validation).

        Args:
            min_diff_percent: Net spread threshold (%); the configured default
                when None or NaN

        Returns:
            Candidates sorted by net spread, highest first
        """
        threshold = resolve_threshold(min_diff_percent, self._config.min_diff_percent)

        logger.info(f"Starting scan across {len(self._providers)} exchanges...")
        pair_map = await collect_pairs(self._providers)
        prices = await collect_prices(self._providers, pair_map)
        candidates = self._analyzer.find_arbitrage(prices, threshold)
        return _by_net_diff(candidates)

    async def scan_all(self, min_diff_percent: Optional[float] = None) -> ScanResult:
        """
        Detect and validate, keeping rejected candidates with their reasons.

        Args:
            min_diff_percent: Net spread threshold (%)

        Returns:
            ScanResult whose lists are sorted by net spread, highest first
        """
        candidates = await self.find_candidates(min_diff_percent)
        await self._validator.validate_all(candidates)

        result = ScanResult(
            candidates=_by_net_diff(candidates),
            validated=_by_net_diff([c for c in candidates if c.is_validated]),
            rejected=_by_net_diff([c for c in candidates if not c.is_validated]),
        )
        logger.info(
            f"Scan complete: {len(result.candidates)} candidates, "
            f"{len(result.validated)} validated"
        )
        return result

    async def scan(self, min_diff_percent: Optional[float] = None) -> List[ArbitrageOpportunity]:
        """
        Detect and validate, returning only executable opportunities.

        Args:
            min_diff_percent: Net spread threshold (%)

        Returns:
            Validated opportunities sorted by net spread, highest first
        """
        result = await self.scan_all(min_diff_percent)
        return result.validated

    def refresh(self) -> None:
        """Drop every provider's identifier caches."""
        for provider in self._providers:
            provider.refresh()

    async def close(self) -> None:
        for provider in self._providers:
            await provider.close()
