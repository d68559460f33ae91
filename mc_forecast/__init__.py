"""Monte Carlo forecast of a single instrument's price distribution."""
from .config import SimulationConfig
from .distributions import Distribution, NormalDistribution, StudentTDistribution
from .engine import MonteCarloSimulation, SimulationResult
from .errors import (
    DomainError,
    EmptyResultError,
    InsufficientDataError,
    SchemaError,
    SimulationCancelled,
    SimulationError,
)
from .estimator import ColumnStatistics, estimate
from .summary import SimulationSummary, summarize
