"""Telemetry module for logging and status reporting."""

from jupiter_arb.telemetry.logger import AsyncLogger, setup_logging
from jupiter_arb.telemetry.reporter import StatusReporter


__all__ = [
    "AsyncLogger",
    "StatusReporter",
    "setup_logging",
]
