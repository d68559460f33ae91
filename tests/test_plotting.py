import matplotlib.pyplot as plt

from mc_forecast.engine import MonteCarloSimulation
from mc_forecast.plotting import plot_simulation


def test_plot_saves_figure(synthetic_series, tmp_path):
    result = MonteCarloSimulation("TEST", seed=42).run(synthetic_series, 30, 200)
    out = tmp_path / "fan.png"
    fig = plot_simulation(result, show=False, save_path=str(out))
    try:
        assert out.exists()
        assert len(fig.axes) == 2
    finally:
        plt.close(fig)


def test_plot_few_paths(five_day_series):
    result = MonteCarloSimulation("FIVE", seed=1).run(five_day_series, 5, 3)
    fig = plot_simulation(result, show=False)
    plt.close(fig)


def _fan_labels(fig):
    return [t.get_text() for t in fig.axes[0].get_legend().get_texts()]


def test_plot_uses_requested_percentiles(synthetic_series):
    result = MonteCarloSimulation("TEST", seed=42).run(synthetic_series, 20, 100)
    fig = plot_simulation(result, percentiles=(10, 50, 90), show=False)
    try:
        labels = _fan_labels(fig)
        assert "P10-P90" in labels
        assert "Median (P50)" in labels
    finally:
        plt.close(fig)


def test_plot_without_median(synthetic_series):
    result = MonteCarloSimulation("TEST", seed=42).run(synthetic_series, 20, 100)
    fig = plot_simulation(result, percentiles=(25, 75), show=False)
    try:
        labels = _fan_labels(fig)
        assert "P25-P75" in labels
        assert "Median (P50)" not in labels
    finally:
        plt.close(fig)
