"""
Constants and default configuration values.

Values are organized by category for easy maintenance and auditing.
"""

from typing import Final


# =============================================================================
# Jupiter API Endpoints
# =============================================================================

JUPITER_API_URL: Final[str] = "https://quote-api.jup.ag/v6"
JUPITER_TOKEN_API_URL: Final[str] = "https://lite-api.jup.ag/tokens/v2"

ENDPOINT_QUOTE: Final[str] = "/quote"
ENDPOINT_SWAP: Final[str] = "/swap"
ENDPOINT_TOKEN_SEARCH: Final[str] = "/search"
ENDPOINT_TOKEN_TRENDING: Final[str] = "/toptrending/24h"

SWAP_MODE_EXACT_IN: Final[str] = "ExactIn"


# =============================================================================
# Solana
# =============================================================================

SOLANA_RPC_URL: Final[str] = "https://api.mainnet-beta.solana.com"

WSOL_MINT: Final[str] = "So11111111111111111111111111111111111111112"
USDC_MINT: Final[str] = "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v"
USDT_MINT: Final[str] = "Es9vMFrzaCERmJfrF4H2FYD4KCoNkY11McCe8BenwNYB"
JUP_MINT: Final[str] = "JUPyiwrYJFskUPiHa7hkeR8VUtAeFoSYbKedZXnKzLf"
BONK_MINT: Final[str] = "DezXAZ8z7PnrnRJjz3wXBoRgixCa6xjnB7YaB1pPB263"

# Commitment levels that count as settled for the reverse leg
SETTLED_COMMITMENTS: Final[frozenset[str]] = frozenset({"confirmed", "finalized"})


# =============================================================================
# Trading Defaults
# =============================================================================

DEFAULT_MIN_PROFIT_PERCENT: Final[float] = 0.5
DEFAULT_SLIPPAGE_BPS: Final[int] = 50

# Execution re-quotes use a wider tolerance than discovery (1%)
DEFAULT_EXECUTION_SLIPPAGE_BPS: Final[int] = 100

DEFAULT_INTERVAL_MS: Final[int] = 1000
DEFAULT_MAX_CONCURRENT_QUOTES: Final[int] = 4
DEFAULT_QUOTES_PER_SECOND: Final[float] = 10.0


# =============================================================================
# Timeouts
# =============================================================================

DEFAULT_REQUEST_TIMEOUT_S: Final[float] = 10.0
DEFAULT_CONFIRM_TIMEOUT_S: Final[float] = 60.0
DEFAULT_CONFIRM_POLL_INTERVAL_S: Final[float] = 1.0


# =============================================================================
# Persistence
# =============================================================================

DEFAULT_STATE_DIR: Final[str] = "./temp"


# =============================================================================
# Logging & Telemetry
# =============================================================================

LOG_FORMAT: Final[str] = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOG_DATE_FORMAT: Final[str] = "%Y-%m-%d %H:%M:%S"

MAX_LOG_QUEUE_SIZE: Final[int] = 10_000

STATUS_REPORT_INTERVAL_S: Final[float] = 30.0
