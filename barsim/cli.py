"""barsim.cli

Command line interface entry point for barsim.

Design constraints:
- argparse-based.
- Lazy imports: do not import numpy/pydantic/httpx at parse time.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import math
import sys
from collections.abc import Callable
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any

EPILOG = "Past performance is a fact. Future performance is a hypothesis."


@dataclass(frozen=True)
class CliContext:
    repo_root: Path


def _repo_root_from_cwd() -> Path:
    return Path.cwd()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="barsim",
        description="Bar-by-bar strategy simulation and performance scoring.",
        epilog=EPILOG,
    )
    parser.add_argument(
        "--version",
        action="store_true",
        help="Print version and exit.",
    )

    sub = parser.add_subparsers(dest="command")

    p_run = sub.add_parser("run", help="Run one backtest and print the result")
    p_run.add_argument("--symbol", required=True)
    p_run.add_argument("--start", required=True, help="Start date (YYYY-MM-DD).")
    p_run.add_argument("--end", default=None, help="End date (YYYY-MM-DD). Defaults to open-ended.")
    p_run.add_argument("--strategy", default=None, help="Built-in strategy name (see `barsim strategies`).")
    p_run.add_argument("--cash", type=float, default=None, help="Starting cash.")
    p_run.add_argument("--risk-free-rate", type=float, default=None, help="Annual risk-free rate, e.g. 0.02.")
    p_run.add_argument("--provider", choices=["csv", "alpaca"], default=None)
    p_run.add_argument("--csv", dest="csv_path", default=None, help="CSV file for the csv provider.")
    p_run.add_argument("--resolution-value", type=int, default=1)
    p_run.add_argument(
        "--resolution-period",
        choices=["minute", "hour", "day", "week", "month"],
        default="day",
    )
    p_run.add_argument("--config", default=None, help="YAML config file. Defaults to config/default.yaml if present.")
    p_run.add_argument("--json", action="store_true", help="Print the result as JSON.")

    sub.add_parser("strategies", help="List built-in strategies")

    return parser


def _print_version() -> None:
    from barsim import __version__

    print(f"barsim v{__version__}")


def _overrides_from_args(args: argparse.Namespace) -> dict[str, Any]:
    out: dict[str, Any] = {}
    bt: dict[str, Any] = {}
    if args.cash is not None:
        bt["starting_cash"] = args.cash
    if args.risk_free_rate is not None:
        bt["risk_free_rate"] = args.risk_free_rate
    if args.strategy is not None:
        bt["strategy"] = args.strategy
    if bt:
        out["backtest"] = bt

    data: dict[str, Any] = {}
    if args.provider is not None:
        data["provider"] = args.provider
    if args.csv_path is not None:
        data["csv_path"] = args.csv_path
        data.setdefault("provider", "csv")
    if data:
        out["data"] = data
    return out


def _load_config(ctx: CliContext, args: argparse.Namespace):
    from barsim.core.config import Config

    overrides = _overrides_from_args(args)
    if args.config:
        return Config.from_yaml(Path(args.config), overrides=overrides)
    default = ctx.repo_root / "config" / "default.yaml"
    if default.exists():
        return Config.from_yaml(default, overrides=overrides)
    return Config(**overrides)


def _build_data_source(config):
    from barsim.core.client import ClientConfig, DataClient
    from barsim.core.exceptions import ConfigError
    from barsim.data import AlpacaDataSource, CsvDataSource

    if config.data.provider == "csv":
        if config.data.csv_path is None:
            raise ConfigError("csv provider needs a file: pass --csv or set data.csv_path")
        return CsvDataSource(config.data.csv_path)

    client = DataClient(
        ClientConfig(
            rate_limit_rps=config.http.rate_limit_rps,
            max_retries=config.http.max_retries,
            timeout_s=config.http.timeout_s,
        )
    )
    return AlpacaDataSource(
        api_key=config.alpaca.api_key,
        api_secret=config.alpaca.api_secret,
        client=client,
        base_url=config.alpaca.base_url,
        feed=config.alpaca.feed,
        page_limit=config.alpaca.page_limit,
    )


async def _run_and_close(source, **kwargs: Any):
    from barsim.backtest.engine import backtest

    try:
        return await backtest(data_source=source, **kwargs)
    finally:
        client = getattr(source, "client", None)
        if client is not None:
            await client.aclose()


def _fmt(v: float) -> str:
    if math.isnan(v):
        return "nan"
    if math.isinf(v):
        return "inf" if v > 0 else "-inf"
    return f"{v:.4f}"


def _json_safe(d: dict[str, Any]) -> dict[str, Any]:
    # JSON has no infinity; ratios with no downside are reported as "inf".
    return {k: _fmt(v) if isinstance(v, float) and not math.isfinite(v) else v for k, v in d.items()}


def result_summary(result) -> dict[str, Any]:
    return {
        "timestamp": result.timestamp.isoformat(),
        "steps": len(result.history),
        "portfolio": _json_safe(asdict(result.portfolio_data)),
        "metrics": _json_safe(asdict(result.performance_metrics)),
    }


def _print_result(symbol: str, result) -> None:
    p = result.portfolio_data
    m = result.performance_metrics
    print(f"barsim backtest: {symbol}")
    print(f"- steps: {len(result.history)}")
    print(f"- starting cash: {p.starting_cash:.2f}")
    print(f"- final value: {p.portfolio_value:.2f} ({p.portfolio_percent_change:+.2f}%)")
    print(f"- buy and hold: {p.stock_percent_change:+.2f}%")
    print(f"- shares owned: {p.shares_owned:g}, cash: {p.available_cash:.2f}")
    print("metrics")
    for k, v in asdict(m).items():
        print(f"- {k}: {v if isinstance(v, int) else _fmt(v)}")


def _cmd_run(ctx: CliContext, args: argparse.Namespace) -> int:
    from pydantic import ValidationError

    from barsim.backtest.strategies import STRATEGIES
    from barsim.core.exceptions import BarsimError
    from barsim.core.logging import configure_logging
    from barsim.data.base import BarRequest

    try:
        config = _load_config(ctx, args)
        configure_logging(config.logging)

        factory = STRATEGIES.get(config.backtest.strategy)
        if factory is None:
            print(f"error: unknown strategy: {config.backtest.strategy}", file=sys.stderr)
            return 2

        request = BarRequest(
            symbol=args.symbol,
            start_date=args.start,
            end_date=args.end,
            resolution_value=args.resolution_value,
            resolution_period=args.resolution_period,
        )
        source = _build_data_source(config)
        result = asyncio.run(
            _run_and_close(
                source,
                request=request,
                strategy=factory(),
                starting_cash=config.backtest.starting_cash,
                risk_free_rate=config.backtest.risk_free_rate,
            )
        )
    except ValidationError as e:
        print(f"error: invalid input: {e}", file=sys.stderr)
        return 2
    except BarsimError as e:
        print(f"backtest failed: {type(e).__name__}: {e}", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps(result_summary(result), indent=2, allow_nan=False))
    else:
        _print_result(request.symbol, result)
    return 0


def _cmd_strategies(ctx: CliContext, args: argparse.Namespace) -> int:
    from barsim.backtest.strategies import STRATEGIES

    for name in sorted(STRATEGIES):
        print(name)
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.version:
        _print_version()
        return 0

    if not args.command:
        parser.print_help()
        return 2

    ctx = CliContext(repo_root=_repo_root_from_cwd())

    dispatch: dict[str, Callable[[CliContext, argparse.Namespace], int]] = {
        "run": _cmd_run,
        "strategies": _cmd_strategies,
    }
    fn = dispatch.get(str(args.command))
    if fn is None:
        print(f"Unknown command: {args.command}", file=sys.stderr)
        return 2

    return int(fn(ctx, args))


if __name__ == "__main__":
    raise SystemExit(main())
