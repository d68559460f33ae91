"""Forecast visualization: percentile fan chart + terminal distribution."""

import numpy as np
import matplotlib.pyplot as plt
import matplotlib.ticker as mticker

from mc_forecast.summary import AVERAGE_PCT, BEST_PCT, WORST_PCT, percentile_paths

N_SAMPLE_PATHS = 20


def plot_simulation(
    result,
    percentiles: tuple[int, ...] = (WORST_PCT, AVERAGE_PCT, BEST_PCT),
    show: bool = True,
    save_path: str | None = None,
):
    """
    Two-panel plot:
      1. Fan chart: band between the lowest and highest of ``percentiles``,
         the median when 50 is among them, and a handful of sample paths
      2. Histogram: distribution of final prices with P5/P50/P95 markers

    Returns the matplotlib Figure.
    """
    summary = result.summary
    paths = result.paths
    initial = result.starting_price
    bands = percentile_paths(paths, tuple(percentiles))
    lo, hi = min(percentiles), max(percentiles)
    days = np.arange(paths.shape[0])

    fig, (ax_fan, ax_hist) = plt.subplots(
        2, 1, figsize=(14, 10), height_ratios=[2, 1],
    )
    fig.suptitle(
        f"{result.symbol} Monte Carlo Forecast  |  "
        f"{result.iterations:,} paths x {result.horizon} days  |  "
        f"drift={result.statistics.drift:.5f}  dev={result.statistics.deviation:.5f}",
        fontsize=11, fontweight="bold",
    )

    # ── Panel 1: Fan chart ──
    ax_fan.fill_between(
        days, bands[lo], bands[hi],
        alpha=0.3, color="#3498db", label=f"P{lo}-P{hi}",
    )
    if AVERAGE_PCT in bands:
        ax_fan.plot(days, bands[AVERAGE_PCT], color="#2c3e50", linewidth=2,
                    label=f"Median (P{AVERAGE_PCT})")

    if paths.shape[1] >= N_SAMPLE_PATHS:
        rng = np.random.default_rng(0)
        sample_idx = rng.choice(paths.shape[1], size=N_SAMPLE_PATHS, replace=False)
        for idx in sample_idx:
            ax_fan.plot(days, paths[:, idx], color="gray", alpha=0.08, linewidth=0.5)

    ax_fan.axhline(y=initial, color="red", linestyle="--",
                   linewidth=0.8, alpha=0.7, label=f"Start ${initial:,.2f}")
    ax_fan.set_xlabel("Days Forward", fontsize=10)
    ax_fan.set_ylabel(f"{result.symbol} Price ($)", fontsize=10)
    ax_fan.legend(loc="upper left", fontsize=9, framealpha=0.9)
    ax_fan.grid(True, alpha=0.25, linestyle="--")
    ax_fan.yaxis.set_major_formatter(
        mticker.FuncFormatter(lambda x, _: f"${x:,.0f}")
    )
    ax_fan.margins(x=0.02)

    # ── Panel 2: Terminal price distribution ──
    final_prices = paths[-1]
    finite = final_prices[np.isfinite(final_prices)]
    ax_hist.hist(finite, bins=80, color="#3498db", alpha=0.7,
                 edgecolor="white", linewidth=0.3)

    for label, val in (
        (f"P{WORST_PCT}", summary.worst_case),
        (f"P{AVERAGE_PCT}", summary.average_case),
        (f"P{BEST_PCT}", summary.best_case),
    ):
        median = label == f"P{AVERAGE_PCT}"
        ax_hist.axvline(
            x=val, color="navy" if median else "gray",
            linestyle="-" if median else "--",
            linewidth=1.2 if median else 0.8,
            label=f"{label}: ${val:,.2f}",
        )
    ax_hist.axvline(x=initial, color="red", linestyle="--",
                    linewidth=1, alpha=0.8, label=f"Start ${initial:,.2f}")

    ax_hist.annotate(
        f"Worst: {summary.worst_case_pct:+.2f}%\n"
        f"Average: {summary.average_case_pct:+.2f}%\n"
        f"Best: {summary.best_case_pct:+.2f}%",
        xy=(0.98, 0.92), xycoords="axes fraction",
        ha="right", va="top", fontsize=9,
        bbox=dict(boxstyle="round,pad=0.4", facecolor="wheat", alpha=0.85),
    )
    ax_hist.set_xlabel(f"Final {result.symbol} Price ($)", fontsize=10)
    ax_hist.set_ylabel("Frequency", fontsize=10)
    ax_hist.legend(loc="upper left", fontsize=8, framealpha=0.9)
    ax_hist.grid(True, alpha=0.25, linestyle="--")
    ax_hist.xaxis.set_major_formatter(
        mticker.FuncFormatter(lambda x, _: f"${x:,.0f}")
    )
    ax_hist.margins(x=0.02)

    plt.tight_layout()
    if save_path:
        fig.savefig(save_path, dpi=120)
    if show:
        plt.show(block=True)
    return fig
