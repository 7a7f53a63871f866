"""
Predictor configuration.

Settings are read from a YAML file and validated with pydantic. Lookup
order for the file: explicit path, ``SAT_PREDICTOR_CONFIG``, then
``config/predictor.yaml`` under the working directory. Individual values can
be overridden through environment variables.
"""

from pathlib import Path
from typing import Any, Dict, Optional, Union
import logging
import os

import yaml  # type: ignore[import-untyped]
from pydantic import BaseModel, Field, ValidationError, field_validator

from .exceptions import ConfigurationError
from .models import GeoPos

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("config") / "predictor.yaml"

ENV_OVERRIDES = {
    "SAT_PREDICTOR_HOURS_AHEAD": "hours_ahead",
    "SAT_PREDICTOR_MIN_ELEVATION": "min_elevation",
}


class ObserverSettings(BaseModel):
    """Default observer location."""

    latitude: float
    longitude: float
    altitude: float = 0.0  # metres

    @field_validator("latitude")
    @classmethod
    def validate_latitude(cls, v: float) -> float:
        if not -90 <= v <= 90:
            raise ValueError("Latitude must be between -90 and 90 degrees")
        return v

    @field_validator("longitude")
    @classmethod
    def validate_longitude(cls, v: float) -> float:
        if not -180 <= v <= 180:
            raise ValueError("Longitude must be between -180 and 180 degrees")
        return v

    def to_geo_pos(self) -> GeoPos:
        return GeoPos(self.latitude, self.longitude, self.altitude)


class PredictorSettings(BaseModel):
    """Tunables of the pass predictor."""

    hours_ahead: int = Field(default=8, ge=1, le=240, description="Timeline horizon in hours")
    min_elevation: float = Field(
        default=16.0, ge=0.0, le=90.0, description="Minimum peak elevation in degrees"
    )
    track_step_seconds: int = Field(
        default=15, ge=1, description="Sampling interval of satellite tracks"
    )
    max_search_steps: int = Field(
        default=20000, ge=100, description="Cap on samples per horizon-crossing loop"
    )
    observer: Optional[ObserverSettings] = None


def _apply_env_overrides(data: Dict[str, Any]) -> Dict[str, Any]:
    for env_name, key in ENV_OVERRIDES.items():
        value = os.environ.get(env_name)
        if value:
            logger.debug(f"Overriding {key} from {env_name}")
            data[key] = value
    return data


def load_settings(config_path: Optional[Union[str, Path]] = None) -> PredictorSettings:
    """
    Load predictor settings.

    Args:
        config_path: Optional YAML file; see module docstring for fallbacks

    Returns:
        Validated PredictorSettings (defaults when no file exists)

    Raises:
        ConfigurationError: If an explicitly given file is missing, or any
            file is malformed or fails validation
    """
    explicit = config_path is not None
    if config_path is None:
        env_path = os.environ.get("SAT_PREDICTOR_CONFIG")
        explicit = bool(env_path)
        config_path = env_path or DEFAULT_CONFIG_PATH
    path = Path(config_path)

    data: Dict[str, Any] = {}
    if path.exists():
        try:
            with open(path, "r") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigurationError(f"Expected a mapping in {path}")
        data = data.get("predictor", data) or {}
        if not isinstance(data, dict):
            raise ConfigurationError(f"Expected a mapping under 'predictor' in {path}")
        data = dict(data)
        logger.info(f"Loaded predictor configuration from {path}")
    elif explicit:
        raise ConfigurationError(f"Configuration file not found: {path}")
    else:
        logger.debug(f"No configuration file at {path}, using defaults")

    try:
        return PredictorSettings(**_apply_env_overrides(data))
    except ValidationError as e:
        raise ConfigurationError(f"Invalid predictor configuration: {e}") from e
