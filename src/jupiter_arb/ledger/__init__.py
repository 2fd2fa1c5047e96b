"""Solana ledger access."""

from jupiter_arb.ledger.rpc import SolanaRpcClient


__all__ = ["SolanaRpcClient"]
