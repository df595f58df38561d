from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from barsim.core.config import AlpacaConfig, BacktestSettings, Config
from barsim.core.exceptions import ConfigError


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("BARSIM_ALPACA__API_KEY", "BARSIM_ALPACA__API_SECRET", "BARSIM_BACKTEST__STARTING_CASH"):
        monkeypatch.delenv(name, raising=False)


def test_defaults() -> None:
    cfg = Config()
    assert cfg.backtest.starting_cash == 10000.0
    assert cfg.backtest.risk_free_rate == 0.02
    assert cfg.data.provider == "csv"
    assert cfg.alpaca.feed == "iex"
    assert cfg.logging.level == "INFO"


def test_repo_default_yaml_loads() -> None:
    repo_root = Path(__file__).resolve().parents[2]
    cfg = Config.from_repo_defaults(repo_root)
    assert cfg.backtest.strategy == "buy_and_hold"
    assert cfg.http.max_retries == 3


def test_from_yaml_with_overrides(tmp_path: Path) -> None:
    p = tmp_path / "cfg.yaml"
    p.write_text("backtest:\n  starting_cash: 5000\n  strategy: momentum\ndata:\n  provider: alpaca\n")

    cfg = Config.from_yaml(p, overrides={"backtest": {"starting_cash": 2500}})
    assert cfg.backtest.starting_cash == 2500
    assert cfg.backtest.strategy == "momentum"  # untouched by the overlay
    assert cfg.data.provider == "alpaca"


def test_env_supplies_secrets(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("BARSIM_ALPACA__API_KEY", "k")
    monkeypatch.setenv("BARSIM_ALPACA__API_SECRET", "s")
    cfg = Config()
    assert cfg.alpaca.api_key == "k"
    assert cfg.alpaca.api_secret == "s"


def test_missing_file(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="not found"):
        Config.from_yaml(tmp_path / "missing.yaml")


def test_invalid_yaml(tmp_path: Path) -> None:
    p = tmp_path / "bad.yaml"
    p.write_text("backtest: [unclosed\n")
    with pytest.raises(ConfigError, match="not valid YAML"):
        Config.from_yaml(p)


def test_yaml_must_be_mapping(tmp_path: Path) -> None:
    p = tmp_path / "list.yaml"
    p.write_text("- a\n- b\n")
    with pytest.raises(ConfigError, match="mapping"):
        Config.from_yaml(p)


def test_empty_yaml_is_defaults(tmp_path: Path) -> None:
    p = tmp_path / "empty.yaml"
    p.write_text("")
    assert Config.from_yaml(p).backtest.starting_cash == 10000.0


def test_validators() -> None:
    with pytest.raises(ValidationError):
        BacktestSettings(starting_cash=0)
    with pytest.raises(ValidationError):
        AlpacaConfig(page_limit=0)
    with pytest.raises(ValidationError):
        AlpacaConfig(feed="otc")
