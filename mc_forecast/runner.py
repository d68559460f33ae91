"""
CLI runner for the Monte Carlo price forecast.

Usage:
    mc-forecast --symbol AAPL --data-dir data/ --horizon 252 --iterations 10000

    # Fatter tails
    mc-forecast --symbol AAPL --data-dir data/ --distribution student-t --df 4

    # Download history from Yahoo Finance first (writes data/AAPL.csv)
    mc-forecast --symbol AAPL --data-dir data/ --download \
        --start 2020-01-01 --end 2024-01-01
"""

import argparse
import logging
import sys

from mc_forecast.config import SimulationConfig
from mc_forecast.errors import SimulationError


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Monte Carlo price forecast from daily history"
    )
    parser.add_argument("--symbol", default="AAPL",
                        help="Symbol to simulate; reads <data-dir>/<symbol>.csv")
    parser.add_argument("--data-dir", default="data",
                        help="Folder holding <symbol>.csv files (default: data)")
    parser.add_argument("--horizon", type=int, default=252,
                        help="Days to simulate forward (default: 252)")
    parser.add_argument("--iterations", type=int, default=10_000,
                        help="Number of simulated paths (default: 10000)")
    parser.add_argument("--distribution", choices=["normal", "student-t"],
                        default="normal")
    parser.add_argument("--df", type=float, default=5.0,
                        help="Degrees of freedom for student-t (default: 5)")
    parser.add_argument("--seed", type=int, default=42,
                        help="Random seed (default: 42, use -1 for random)")
    parser.add_argument("--workers", type=int, default=1,
                        help="Threads used to build paths (default: 1)")
    parser.add_argument("--percentiles", type=int, nargs="+", default=[5, 50, 95],
                        help="Percentile bands drawn on the fan chart (default: 5 50 95)")
    parser.add_argument("--describe", action="store_true",
                        help="Print per-day count/mean/stddev/min/percentiles/max")
    parser.add_argument("--no-plot", action="store_true",
                        help="Disable visualization")
    parser.add_argument("--save-plot", default=None,
                        help="Write the chart to this file instead of showing it")
    parser.add_argument("--verbose", "-v", action="store_true")

    parser.add_argument("--download", action="store_true",
                        help="Fetch history from Yahoo Finance before simulating")
    parser.add_argument("--start", default=None,
                        help="Download start date (YYYY-MM-DD)")
    parser.add_argument("--end", default=None,
                        help="Download end date (YYYY-MM-DD)")
    return parser


def run(args=None):
    parsed = build_parser().parse_args(args)

    logging.basicConfig(
        level=logging.DEBUG if parsed.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    config = SimulationConfig(
        symbol=parsed.symbol,
        data_dir=parsed.data_dir,
        horizon=parsed.horizon,
        iterations=parsed.iterations,
        seed=parsed.seed if parsed.seed >= 0 else None,
        workers=parsed.workers,
        distribution=parsed.distribution,
        t_df=parsed.df,
        percentiles=tuple(parsed.percentiles),
        describe=parsed.describe,
        no_plot=parsed.no_plot,
        save_plot=parsed.save_plot,
    ).validate()

    if parsed.download:
        if not (parsed.start and parsed.end):
            raise SystemExit("--download needs --start and --end")
        from mc_forecast.data import fetch_price_history, save_price_history

        print(f"\nDownloading {config.symbol} from {parsed.start} to {parsed.end}...")
        bars = fetch_price_history(config.symbol, parsed.start, parsed.end)
        path = save_price_history(bars, config.data_dir, config.symbol)
        print(f"  Saved {len(bars)} bars to {path}")

    from mc_forecast.distributions import get_distribution
    from mc_forecast.engine import MonteCarloSimulation

    params = {"df": config.t_df} if config.distribution == "student-t" else {}
    sim = MonteCarloSimulation(
        symbol=config.symbol,
        distribution=get_distribution(config.distribution, **params),
        seed=config.seed,
        workers=config.workers,
    )

    print(f"\nSimulating {config.iterations:,} paths x {config.horizon} days...")
    result = sim.run_from_csv(config.data_dir, config.horizon, config.iterations)

    stats = result.statistics
    print(f"\n  Log-return statistics ({stats.n_observations} observations):")
    print(f"    Mean:       {stats.mean:+.6f}")
    print(f"    Variance:   {stats.variance:.6f}")
    print(f"    Deviation:  {stats.deviation:.6f}")
    print(f"    Drift:      {stats.drift:+.6f}")

    from mc_forecast.summary import describe_paths, format_summary

    print("\n" + "=" * 60)
    print(format_summary(result.summary))
    print("=" * 60)

    if config.describe:
        print("\n  Per-day price distribution:")
        print(describe_paths(result.paths).to_string(float_format=lambda x: f"{x:.2f}"))

    if not config.no_plot or config.save_plot:
        from mc_forecast.plotting import plot_simulation
        plot_simulation(
            result,
            percentiles=config.percentiles,
            show=not config.no_plot,
            save_path=config.save_plot,
        )

    return result


def main():
    try:
        run()
    except SimulationError as exc:
        print(f"error in {exc.stage or 'simulation'}: {exc.args[0]}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
