"""
Jupiter Round-Trip Arbitrage Engine.

An asynchronous bot that scans base/quote token pairs on the Jupiter
aggregator for profitable round-trip swaps and executes the best one.
"""

__version__ = "1.0.0"
