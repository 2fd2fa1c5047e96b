"""
Integration tests for ArbitrageEngine wiring that need no network.
"""

import io
from pathlib import Path
from typing import Any

import orjson
import pytest

from jupiter_arb.config.constants import USDC_MINT, WSOL_MINT
from jupiter_arb.config.settings import Settings
from jupiter_arb.core.engine import ArbitrageEngine
from jupiter_arb.core.errors import ConfigurationError
from jupiter_arb.telemetry.reporter import StatusReporter
from tests.mocks.factories import BONK, SOL, USDC


def _settings(tmp_path: Path, **overrides: Any) -> Settings:
    values: dict[str, Any] = {
        "wallet_path": tmp_path / "wallet.json",
        "base_tokens": [WSOL_MINT],
        "quote_tokens": [USDC_MINT],
        "base_amount_ui": 0.25,
        "state_dir": tmp_path / "state",
    }
    values.update(overrides)
    return Settings(**values)


class TestBaseAmount:
    """Trade size conversion at startup."""

    def test_uses_first_base_token_decimals(self, tmp_path: Path) -> None:
        engine = ArbitrageEngine(_settings(tmp_path))

        assert engine._resolve_base_amount([SOL]) == 250_000_000
        assert engine._resolve_base_amount([USDC]) == 250_000

    def test_mixed_decimals_warn(self, tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
        engine = ArbitrageEngine(_settings(tmp_path))

        assert engine._resolve_base_amount([USDC, BONK]) == 250_000
        assert "different decimals" in caplog.text

    def test_below_one_unit_is_rejected(self, tmp_path: Path) -> None:
        engine = ArbitrageEngine(_settings(tmp_path, base_amount_ui=0.000001))

        with pytest.raises(ConfigurationError, match="below one base unit"):
            engine._resolve_base_amount([BONK])


class TestShutdown:
    """State persistence on shutdown."""

    @pytest.mark.asyncio
    async def test_shutdown_saves_state_once(self, tmp_path: Path) -> None:
        engine = ArbitrageEngine(_settings(tmp_path, trading_enabled=False))
        engine.state.advance_iteration(3_000)

        await engine.shutdown()
        await engine.shutdown()

        cache = orjson.loads((tmp_path / "state" / "cache.json").read_bytes())
        assert cache["iteration"] == 1
        assert cache["trading_enabled"] is False
        assert orjson.loads((tmp_path / "state" / "tradeHistory.json").read_bytes()) == []

    @pytest.mark.asyncio
    async def test_shutdown_waits_for_reporter_task(self, tmp_path: Path) -> None:
        engine = ArbitrageEngine(_settings(tmp_path))
        engine._reporter = StatusReporter(engine.state.snapshot, output=io.StringIO())
        task = engine._reporter.start(interval=60.0)

        await engine.shutdown()

        assert task.cancelled()

    @pytest.mark.asyncio
    async def test_run_requires_setup(self, tmp_path: Path) -> None:
        engine = ArbitrageEngine(_settings(tmp_path))

        with pytest.raises(RuntimeError, match="not set up"):
            await engine.run()
