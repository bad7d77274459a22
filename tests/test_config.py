"""Tests for voltrade.config — environment variable loading and validation."""

import pytest

from voltrade.config import Config, load_config


_VARS = [
    "SYMBOL",
    "INITIAL_CAPITAL",
    "INITIAL_PRICE",
    "TICK_INTERVAL_MS",
    "LOOKBACK_PERIOD",
    "VOLATILITY_MULTIPLIER",
    "TRAILING_STOP_PCT",
    "MAX_CHART_POINTS",
    "PRICE_DRIFT",
    "PRICE_VOLATILITY",
    "RANDOM_SEED",
    "GEMINI_API_KEY",
    "API_KEY",
    "GEMINI_MODEL",
    "LOG_LEVEL",
    "API_PORT",
]


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    """Ensure simulation env vars are cleared between tests."""
    for var in _VARS:
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def env_path(tmp_path):
    """A non-existent .env so load_dotenv never reads a real file."""
    return str(tmp_path / "nonexistent.env")


class TestLoadConfig:
    def test_defaults(self, env_path):
        cfg = load_config(env_path=env_path)
        assert isinstance(cfg, Config)
        assert cfg.symbol == "SPY"
        assert cfg.initial_capital == 100_000.0
        assert cfg.initial_price == 450.0
        assert cfg.tick_interval_ms == 800
        assert cfg.lookback_period == 30
        assert cfg.volatility_multiplier == 2.0
        assert cfg.trailing_stop_pct == 0.02
        assert cfg.max_chart_points == 60
        assert cfg.price_drift == 0.00005
        assert cfg.price_volatility == 0.002
        assert cfg.random_seed is None
        assert cfg.gemini_model == "gemini-2.5-flash"
        assert cfg.log_level == "INFO"
        assert cfg.api_port == 8080

    def test_raw_history_size(self, env_path):
        cfg = load_config(env_path=env_path)
        assert cfg.raw_history_size == 80

    def test_missing_api_key_disables_advisory(self, env_path):
        cfg = load_config(env_path=env_path)
        assert cfg.gemini_api_key is None
        assert cfg.advisory_enabled is False

    def test_gemini_api_key(self, monkeypatch, env_path):
        monkeypatch.setenv("GEMINI_API_KEY", "key-123")
        cfg = load_config(env_path=env_path)
        assert cfg.gemini_api_key == "key-123"
        assert cfg.advisory_enabled is True

    def test_api_key_fallback(self, monkeypatch, env_path):
        monkeypatch.setenv("API_KEY", "legacy-key")
        cfg = load_config(env_path=env_path)
        assert cfg.gemini_api_key == "legacy-key"

    def test_overrides(self, monkeypatch, env_path):
        monkeypatch.setenv("LOOKBACK_PERIOD", "20")
        monkeypatch.setenv("TRAILING_STOP_PCT", "0.05")
        monkeypatch.setenv("RANDOM_SEED", "7")
        cfg = load_config(env_path=env_path)
        assert cfg.lookback_period == 20
        assert cfg.trailing_stop_pct == 0.05
        assert cfg.random_seed == 7
        assert cfg.raw_history_size == 70

    def test_config_frozen(self, env_path):
        cfg = load_config(env_path=env_path)
        with pytest.raises(AttributeError):
            cfg.symbol = "QQQ"


class TestValidation:
    def test_rejects_non_positive_capital(self, monkeypatch, env_path):
        monkeypatch.setenv("INITIAL_CAPITAL", "0")
        with pytest.raises(ValueError, match="INITIAL_CAPITAL"):
            load_config(env_path=env_path)

    def test_rejects_non_positive_lookback(self, monkeypatch, env_path):
        monkeypatch.setenv("LOOKBACK_PERIOD", "-5")
        with pytest.raises(ValueError, match="LOOKBACK_PERIOD"):
            load_config(env_path=env_path)

    def test_rejects_stop_pct_out_of_range(self, monkeypatch, env_path):
        monkeypatch.setenv("TRAILING_STOP_PCT", "1.5")
        with pytest.raises(ValueError, match="TRAILING_STOP_PCT"):
            load_config(env_path=env_path)

    def test_rejects_negative_volatility(self, monkeypatch, env_path):
        monkeypatch.setenv("PRICE_VOLATILITY", "-0.1")
        with pytest.raises(ValueError, match="PRICE_VOLATILITY"):
            load_config(env_path=env_path)
