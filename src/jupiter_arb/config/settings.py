"""
Application settings.

Uses Pydantic Settings for type-safe configuration. Values come from the
JSON config file passed on the command line, falling back to environment
variables (and a ``.env`` file) and then to the defaults below.
"""

from pathlib import Path
from typing import Literal

import orjson
from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from jupiter_arb.config.constants import (
    DEFAULT_CONFIRM_POLL_INTERVAL_S,
    DEFAULT_CONFIRM_TIMEOUT_S,
    DEFAULT_EXECUTION_SLIPPAGE_BPS,
    DEFAULT_INTERVAL_MS,
    DEFAULT_MAX_CONCURRENT_QUOTES,
    DEFAULT_MIN_PROFIT_PERCENT,
    DEFAULT_QUOTES_PER_SECOND,
    DEFAULT_REQUEST_TIMEOUT_S,
    DEFAULT_SLIPPAGE_BPS,
    DEFAULT_STATE_DIR,
    JUPITER_API_URL,
    JUPITER_TOKEN_API_URL,
    SOLANA_RPC_URL,
)
from jupiter_arb.core.errors import ConfigurationError
from jupiter_arb.utils.addresses import validate_mint_address


class Settings(BaseSettings):
    """
    Engine settings.

    Init values (the JSON config file) take precedence over environment
    variables, which take precedence over defaults.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # =========================================================================
    # Network
    # =========================================================================

    rpc_url: str = Field(
        default=SOLANA_RPC_URL,
        description="Solana JSON-RPC endpoint",
    )

    jupiter_api_url: str = Field(
        default=JUPITER_API_URL,
        description="Jupiter quote/swap API base URL",
    )

    token_api_url: str = Field(
        default=JUPITER_TOKEN_API_URL,
        description="Jupiter token API base URL",
    )

    request_timeout_s: float = Field(
        default=DEFAULT_REQUEST_TIMEOUT_S,
        gt=0.0,
        le=120.0,
        description="Total timeout per HTTP request in seconds",
    )

    # =========================================================================
    # Wallet
    # =========================================================================

    wallet_path: Path = Field(
        ...,
        description="Path to the wallet keypair file (Solana CLI JSON format)",
    )

    # =========================================================================
    # Trading Configuration
    # =========================================================================

    base_tokens: list[str] = Field(
        ...,
        min_length=1,
        description="Mint addresses the round trip starts and ends in",
    )

    quote_tokens: list[str] = Field(
        ...,
        min_length=1,
        description="Intermediate mint addresses",
    )

    base_amount_ui: float = Field(
        ...,
        gt=0.0,
        description="Trade size in UI units of the first base token",
    )

    min_profit_percent: float = Field(
        default=DEFAULT_MIN_PROFIT_PERCENT,
        description="Minimum round-trip profit percent to act on",
    )

    slippage_bps: int = Field(
        default=DEFAULT_SLIPPAGE_BPS,
        ge=0,
        le=10_000,
        description="Slippage tolerance for discovery quotes in basis points",
    )

    execution_slippage_bps: int = Field(
        default=DEFAULT_EXECUTION_SLIPPAGE_BPS,
        ge=0,
        le=10_000,
        description="Slippage tolerance for execution re-quotes in basis points",
    )

    interval_ms: int = Field(
        default=DEFAULT_INTERVAL_MS,
        ge=0,
        description="Sleep between scan cycles in milliseconds",
    )

    # =========================================================================
    # Performance Tuning
    # =========================================================================

    max_concurrent_quotes: int = Field(
        default=DEFAULT_MAX_CONCURRENT_QUOTES,
        ge=1,
        le=32,
        description="Maximum token pairs quoted concurrently",
    )

    quote_requests_per_second: float = Field(
        default=DEFAULT_QUOTES_PER_SECOND,
        gt=0.0,
        description="Quote API request rate limit",
    )

    # =========================================================================
    # Execution
    # =========================================================================

    confirm_timeout_s: float = Field(
        default=DEFAULT_CONFIRM_TIMEOUT_S,
        gt=0.0,
        description="Maximum time to wait for a transaction to confirm",
    )

    confirm_poll_interval_s: float = Field(
        default=DEFAULT_CONFIRM_POLL_INTERVAL_S,
        gt=0.0,
        description="Interval between confirmation status polls",
    )

    # =========================================================================
    # Operation Mode
    # =========================================================================

    trading_enabled: bool = Field(
        default=True,
        description="Execute the best opportunity of each scan",
    )

    dry_run: bool = Field(
        default=True,
        description="Quote and simulate trades without signing or sending",
    )

    state_dir: Path = Field(
        default=Path(DEFAULT_STATE_DIR),
        description="Directory for cache.json and tradeHistory.json",
    )

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Logging verbosity level",
    )

    log_file: Path | None = Field(
        default=None,
        description="Optional log file in addition to stdout",
    )

    # =========================================================================
    # Validators
    # =========================================================================

    @field_validator("base_tokens", "quote_tokens", mode="after")
    @classmethod
    def validate_token_addresses(cls, v: list[str]) -> list[str]:
        """Ensure every token is a well-formed mint address."""
        return [validate_mint_address(address.strip()) for address in v]

    @field_validator("rpc_url", "jupiter_api_url", "token_api_url", mode="after")
    @classmethod
    def validate_url(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"Expected an http(s) URL, got {v!r}")
        return v

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v: object) -> object:
        return v.upper() if isinstance(v, str) else v


def load_settings(path: Path) -> Settings:
    """
    Load settings from a JSON config file.

    Raises:
        ConfigurationError: If the file is missing, is not a JSON object,
            or fails validation.
    """
    try:
        raw = path.read_bytes()
    except OSError as e:
        raise ConfigurationError(f"Cannot read config file {path}: {e}") from e

    try:
        data = orjson.loads(raw)
    except orjson.JSONDecodeError as e:
        raise ConfigurationError(f"Malformed JSON in {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file {path} must contain a JSON object")

    try:
        return Settings(**data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration in {path}:\n{e}") from e

