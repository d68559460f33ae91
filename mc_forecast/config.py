"""Configuration for the Monte Carlo price forecast."""

from dataclasses import dataclass

from mc_forecast.errors import EmptyResultError


@dataclass
class SimulationConfig:
    symbol: str = "AAPL"
    data_dir: str = "data"

    # Simulation
    horizon: int = 252               # days forward
    iterations: int = 10_000
    seed: int | None = 42
    workers: int = 1

    # Distribution
    distribution: str = "normal"     # normal | student-t
    t_df: float = 5.0

    # Reporting
    percentiles: tuple[int, ...] = (5, 50, 95)
    describe: bool = False
    no_plot: bool = False
    save_plot: str | None = None

    def validate(self) -> "SimulationConfig":
        if self.horizon <= 0:
            raise EmptyResultError(
                f"horizon must be positive, got {self.horizon}",
                stage="config", value=self.horizon,
            )
        if self.iterations <= 0:
            raise EmptyResultError(
                f"iterations must be positive, got {self.iterations}",
                stage="config", value=self.iterations,
            )
        if self.workers <= 0:
            raise ValueError(f"workers must be positive, got {self.workers}")
        bad = [p for p in self.percentiles if not 0 < p < 100]
        if not self.percentiles or bad:
            raise ValueError(f"percentiles must lie in (0, 100), got {self.percentiles}")
        return self
