"""Cross-exchange spot arbitrage scanner."""

__version__ = "0.1.0"
