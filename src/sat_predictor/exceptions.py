"""
Exception hierarchy for the satellite pass predictor.
"""


class PredictorError(Exception):
    """Base class for all predictor errors."""


class PredictionCancelled(PredictorError):
    """Raised inside a worker when the caller cancelled the computation."""


class SearchLimitExceeded(PredictorError):
    """Raised when a horizon-crossing search takes more steps than allowed."""

    def __init__(self, satellite_name: str, max_steps: int) -> None:
        self.satellite_name = satellite_name
        self.max_steps = max_steps
        super().__init__(
            f"Horizon search for {satellite_name} exceeded {max_steps} steps"
        )


class ConfigurationError(PredictorError):
    """Raised when a configuration file cannot be loaded or validated."""
