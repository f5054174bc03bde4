"""Installment generation, rebalancing and reconciliation engine for ledger entries"""

__version__ = "0.1.0"
