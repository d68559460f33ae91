"""Error taxonomy for the forecast pipeline."""


class SimulationError(Exception):
    """Base error. Carries the failing stage and the offending value."""

    def __init__(self, message: str, stage: str | None = None, value=None):
        super().__init__(message)
        self.stage = stage
        self.value = value

    def __str__(self) -> str:
        msg = super().__str__()
        if self.stage:
            return f"[{self.stage}] {msg}"
        return msg


class SchemaError(SimulationError):
    """Input table is missing columns or holds malformed rows."""


class InsufficientDataError(SimulationError):
    """Too few observations to estimate return statistics."""


class DomainError(SimulationError):
    """Probability handed to an inverse CDF is outside (0, 1)."""


class EmptyResultError(SimulationError):
    """Zero-sized simulation request or result."""


class SimulationCancelled(SimulationError):
    """Run was interrupted through its cancel event."""
