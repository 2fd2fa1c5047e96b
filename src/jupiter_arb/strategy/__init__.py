"""Strategy module for round-trip opportunity discovery."""

from jupiter_arb.strategy.finder import OpportunityFinder, ScanStats, rank_opportunities


__all__ = [
    "OpportunityFinder",
    "ScanStats",
    "rank_opportunities",
]
