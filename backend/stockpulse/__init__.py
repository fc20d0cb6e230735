"""StockPulse: stock forum post ingestion."""

__version__ = "0.1.0"
