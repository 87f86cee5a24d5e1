"""Stock consistency engine: movement ledger, transfers, counts and fulfillment."""

__version__ = "1.0.0"
