"""
Unit tests for config file loading and validation.
"""

from pathlib import Path
from typing import Any

import orjson
import pytest

import jupiter_arb.config as config
from jupiter_arb.config.constants import DEFAULT_INTERVAL_MS, JUP_MINT, USDC_MINT, WSOL_MINT
from jupiter_arb.config.settings import Settings, load_settings
from jupiter_arb.core.errors import ConfigurationError


def _write_config(tmp_path: Path, **overrides: Any) -> Path:
    data: dict[str, Any] = {
        "wallet_path": str(tmp_path / "wallet.json"),
        "base_tokens": [WSOL_MINT],
        "quote_tokens": [USDC_MINT, JUP_MINT],
        "base_amount_ui": 0.5,
    }
    data.update(overrides)
    path = tmp_path / "config.json"
    path.write_bytes(orjson.dumps(data))
    return path


class TestLoadSettings:
    """Tests for load_settings."""

    def test_valid_file(self, tmp_path: Path) -> None:
        settings = load_settings(_write_config(tmp_path, min_profit_percent=0.3, dry_run=False))

        assert isinstance(settings, Settings)
        assert settings.base_tokens == [WSOL_MINT]
        assert settings.quote_tokens == [USDC_MINT, JUP_MINT]
        assert settings.base_amount_ui == 0.5
        assert settings.min_profit_percent == 0.3
        assert settings.dry_run is False
        assert settings.wallet_path == tmp_path / "wallet.json"

    def test_defaults(self, tmp_path: Path) -> None:
        settings = load_settings(_write_config(tmp_path))

        assert settings.dry_run is True
        assert settings.trading_enabled is True
        assert settings.interval_ms == DEFAULT_INTERVAL_MS
        assert settings.log_file is None

    def test_addresses_are_stripped(self, tmp_path: Path) -> None:
        settings = load_settings(_write_config(tmp_path, base_tokens=[f"  {WSOL_MINT} "]))

        assert settings.base_tokens == [WSOL_MINT]

    def test_log_level_is_normalized(self, tmp_path: Path) -> None:
        assert load_settings(_write_config(tmp_path, log_level="debug")).log_level == "DEBUG"

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigurationError, match="Cannot read"):
            load_settings(tmp_path / "nope.json")

    def test_malformed_json(self, tmp_path: Path) -> None:
        path = tmp_path / "config.json"
        path.write_text('{"base_tokens": [')

        with pytest.raises(ConfigurationError, match="Malformed JSON"):
            load_settings(path)

    def test_non_object(self, tmp_path: Path) -> None:
        path = tmp_path / "config.json"
        path.write_text("[1, 2, 3]")

        with pytest.raises(ConfigurationError, match="JSON object"):
            load_settings(path)

    @pytest.mark.parametrize(
        "overrides",
        [
            {"base_tokens": ["not-a-mint"]},
            {"quote_tokens": [USDC_MINT, "0OIl"]},
            {"base_tokens": []},
            {"quote_tokens": []},
            {"slippage_bps": 20_000},
            {"execution_slippage_bps": -1},
            {"base_amount_ui": 0},
            {"interval_ms": -5},
            {"max_concurrent_quotes": 0},
            {"rpc_url": "ws://localhost:8900"},
            {"log_level": "TRACE"},
        ],
    )
    def test_invalid_values(self, tmp_path: Path, overrides: dict[str, Any]) -> None:
        with pytest.raises(ConfigurationError, match="Invalid configuration"):
            load_settings(_write_config(tmp_path, **overrides))

    def test_missing_wallet_path(self, tmp_path: Path) -> None:
        path = tmp_path / "config.json"
        path.write_bytes(
            orjson.dumps({"base_tokens": [WSOL_MINT], "quote_tokens": [USDC_MINT], "base_amount_ui": 1.0})
        )

        with pytest.raises(ConfigurationError, match="wallet_path"):
            load_settings(path)


class TestEnvironmentFallback:
    """Environment variables fill in values the file leaves out."""

    def test_env_fills_missing_value(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("INTERVAL_MS", "250")

        assert load_settings(_write_config(tmp_path)).interval_ms == 250

    def test_file_value_beats_env(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("INTERVAL_MS", "250")

        assert load_settings(_write_config(tmp_path, interval_ms=1_000)).interval_ms == 1_000


class TestPackageExports:
    def test_file_loader_is_the_only_entry_point(self) -> None:
        assert "load_settings" in config.__all__
        assert not hasattr(config, "get_settings")
