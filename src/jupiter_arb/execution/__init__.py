"""Execution module for round-trip swaps."""

from jupiter_arb.execution.executor import ExecutionSequencer, ExecutorConfig
from jupiter_arb.execution.signer import WalletSigner, load_keypair


__all__ = [
    "ExecutionSequencer",
    "ExecutorConfig",
    "WalletSigner",
    "load_keypair",
]
