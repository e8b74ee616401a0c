"""
Stream a synthetic correlated pair through a PairTracker and summarize the signals.

Example:

    pair-signals-demo --points 2000 --window 60 --correlation 0.9 --seed 7

or, without the console script:

    python -m research.signal_demo --basic --log-level DEBUG

Prices are two geometric random walks whose log returns share the requested
correlation. Every tick's PairSignal is collected into a DataFrame and a
summary (signal counts, last regime, mean position size, cost vetoes) is
logged at the end.
"""

from __future__ import annotations

import argparse
import logging
from typing import Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from common.config import StatArbSettings, TrackerSettings
from common.logging import log_execution_time, log_system_event, setup_logging
from signal_lib import PairTracker, SignalDirection

LOGGER = logging.getLogger("pairs.demo")

START_PRICE = 100.0
DAILY_VOLATILITY = 0.01
TICK_INTERVAL_MICRO = 1_000_000


def parse_args(args: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the pair signal engine over synthetic correlated prices.")
    parser.add_argument("--points", type=int, default=1000, help="Number of ticks to generate.")
    parser.add_argument("--window", type=int, default=50, help="Rolling window size of the tracker.")
    parser.add_argument("--correlation", type=float, default=0.85, help="Correlation of the two return series, in [-1, 1].")
    parser.add_argument("--seed", type=int, default=42, help="Random seed for the price generator.")
    parser.add_argument("--basic", action="store_true", help="Disable dynamic hedging, regime detection and transaction costs.")
    parser.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"], help="Log level.")
    namespace = parser.parse_args(args)

    if namespace.points < 1:
        parser.error("--points must be at least 1")
    if namespace.window < 2:
        parser.error("--window must be at least 2")
    if not -1.0 <= namespace.correlation <= 1.0:
        parser.error("--correlation must be within [-1, 1]")
    return namespace


def generate_prices(
    points: int,
    correlation: float,
    seed: int,
    volatility: float = DAILY_VOLATILITY,
) -> Tuple[np.ndarray, np.ndarray]:
    """Two correlated geometric random walks starting at 100."""
    rng = np.random.default_rng(seed)
    shocks = rng.standard_normal((2, points))
    returns1 = shocks[0] * volatility
    returns2 = (correlation * shocks[0] + np.sqrt(1.0 - correlation ** 2) * shocks[1]) * volatility
    return START_PRICE * np.exp(np.cumsum(returns1)), START_PRICE * np.exp(np.cumsum(returns2))


def build_settings(window: int, basic: bool) -> StatArbSettings:
    tracker = TrackerSettings(
        window_size=window,
        dynamic_hedging=not basic,
        regime_detection=not basic,
        transaction_costs=not basic,
    )
    return StatArbSettings(tracker=tracker)


def run_tracker(tracker: PairTracker, prices1: np.ndarray, prices2: np.ndarray) -> pd.DataFrame:
    """Feed every tick to the tracker; one row per emitted signal."""
    rows = []
    for i, (price1, price2) in enumerate(zip(prices1, prices2)):
        signal = tracker.update(float(price1), float(price2), timestamp_micro=i * TICK_INTERVAL_MICRO)
        rows.append({
            "timestamp_micro": signal.timestamp_micro,
            "price1": float(price1),
            "price2": float(price2),
            "spread": signal.spread,
            "z_score": signal.z_score,
            "hedge_ratio": signal.hedge_ratio,
            "entry_threshold": signal.entry_threshold,
            "exit_threshold": signal.exit_threshold,
            "signal": signal.signal.name,
            "held_position": tracker.position.name,
            "regime": signal.regime.name,
            "position_size": signal.position_size,
            "net_pnl": signal.pnl.net_pnl_after_costs,
            "cointegration_stat": signal.cointegration_stat,
        })
    return pd.DataFrame(rows)


def summarize(frame: pd.DataFrame) -> dict:
    if frame.empty:
        return {"ticks": 0}

    counts = frame["signal"].value_counts()
    vetoed = (frame["held_position"] != SignalDirection.FLAT.name) & (frame["signal"] == SignalDirection.FLAT.name)
    return {
        "ticks": int(len(frame)),
        "long": int(counts.get(SignalDirection.LONG.name, 0)),
        "short": int(counts.get(SignalDirection.SHORT.name, 0)),
        "flat": int(counts.get(SignalDirection.FLAT.name, 0)),
        "cost_vetoes": int(vetoed.sum()),
        "last_regime": frame["regime"].iloc[-1],
        "mean_position_size": round(float(frame["position_size"].mean()), 2),
        "mean_abs_z": round(float(frame["z_score"].abs().mean()), 4),
    }


def run_demo(args: Optional[Sequence[str]] = None) -> pd.DataFrame:
    namespace = parse_args(args)
    setup_logging("pair-signals-demo", log_level=namespace.log_level)

    settings = build_settings(namespace.window, namespace.basic)
    tracker = PairTracker(settings)
    prices1, prices2 = generate_prices(namespace.points, namespace.correlation, namespace.seed)

    LOGGER.info(
        "Streaming %d ticks (window=%d, correlation=%.2f, basic=%s)",
        namespace.points, namespace.window, namespace.correlation, namespace.basic,
    )
    with log_execution_time(LOGGER, "signal stream"):
        frame = run_tracker(tracker, prices1, prices2)

    summary = summarize(frame)
    report = tracker.cointegration_report()
    log_system_event(LOGGER, "run_complete", **summary, cointegration=report.to_dict())
    return frame


def main() -> None:
    run_demo()


if __name__ == "__main__":
    main()
