"""Arbitrage detection and execution validation."""

from arbscan.scanner.execution_validator import ExecutionValidator, ReferenceData
from arbscan.scanner.fill_simulator import FillResult, simulate_buy, simulate_sell
from arbscan.scanner.market_scanner import ArbitrageScanner, ScanResult
from arbscan.scanner.opportunity import (
    ArbitrageOpportunity,
    LegExecution,
    OpportunityLeg,
    OpportunityValidation,
    TradeSide,
    TransferCheck,
    TransferStatus,
    ValidationStatus,
)
from arbscan.scanner.pair_registry import PairMap, collect_pairs, symbols_for_exchange
from arbscan.scanner.price_aggregator import collect_prices
from arbscan.scanner.spread_analyzer import SpreadAnalyzer, build_leg
from arbscan.scanner.transfer import base_asset_from_symbol, check_transferability

__all__ = [
    "ArbitrageOpportunity",
    "ArbitrageScanner",
    "ExecutionValidator",
    "FillResult",
    "LegExecution",
    "OpportunityLeg",
    "OpportunityValidation",
    "PairMap",
    "ReferenceData",
    "ScanResult",
    "SpreadAnalyzer",
    "TradeSide",
    "TransferCheck",
    "TransferStatus",
    "ValidationStatus",
    "base_asset_from_symbol",
    "build_leg",
    "check_transferability",
    "collect_pairs",
    "collect_prices",
    "simulate_buy",
    "simulate_sell",
    "symbols_for_exchange",
]
