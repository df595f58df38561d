"""barsim.core.config

Two config surfaces only:
1) `config/default.yaml` (or any YAML file passed explicitly)
2) Environment variables (secrets, and overrides for automation)

Everything else is derived.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings

from barsim.core.exceptions import ConfigError


def _deep_merge(base: dict[str, Any], overlay: dict[str, Any]) -> dict[str, Any]:
    result: dict[str, Any] = dict(base)
    for k, v in overlay.items():
        if k in result and isinstance(result[k], dict) and isinstance(v, dict):
            result[k] = _deep_merge(result[k], v)
        else:
            result[k] = v
    return result


class BacktestSettings(BaseModel):
    starting_cash: float = 10000.0
    risk_free_rate: float = 0.02  # annual
    strategy: str = "buy_and_hold"

    @field_validator("starting_cash")
    @classmethod
    def starting_cash_must_be_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("starting_cash must be > 0")
        return v


class DataConfig(BaseModel):
    provider: Literal["csv", "alpaca"] = "csv"
    csv_path: Path | None = None


class AlpacaConfig(BaseModel):
    api_key: str = ""
    api_secret: str = ""
    base_url: str = "https://data.alpaca.markets"
    feed: Literal["iex", "sip"] = "iex"
    page_limit: int = 1000

    @field_validator("page_limit")
    @classmethod
    def page_limit_in_range(cls, v: int) -> int:
        if not 1 <= v <= 10000:
            raise ValueError("page_limit must be between 1 and 10000")
        return v


class HttpConfig(BaseModel):
    rate_limit_rps: float = 3.0
    max_retries: int = 3
    timeout_s: float = 20.0


class LoggingConfig(BaseModel):
    level: str = "INFO"
    json_output: bool = False


class Config(BaseSettings):
    """Root configuration. Single source of truth."""

    backtest: BacktestSettings = Field(default_factory=BacktestSettings)
    data: DataConfig = Field(default_factory=DataConfig)
    alpaca: AlpacaConfig = Field(default_factory=AlpacaConfig)
    http: HttpConfig = Field(default_factory=HttpConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = {"env_prefix": "BARSIM_", "env_nested_delimiter": "__"}

    @classmethod
    def from_yaml(cls, path: Path, *, overrides: dict[str, Any] | None = None) -> Config:
        if not path.exists():
            raise ConfigError(f"Config file not found: {path}")

        try:
            raw = yaml.safe_load(path.read_text()) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Config file is not valid YAML: {path}: {e}") from e
        if not isinstance(raw, dict):
            raise ConfigError(f"Config file must contain a mapping: {path}")

        if overrides:
            raw = _deep_merge(raw, overrides)

        return cls(**raw)

    @classmethod
    def from_repo_defaults(cls, repo_root: Path | None = None, *, overrides: dict[str, Any] | None = None) -> Config:
        root = repo_root or Path.cwd()
        return cls.from_yaml(root / "config" / "default.yaml", overrides=overrides)
