"""
Value types shared by the pass predictor.

All records are immutable: recomputations build new instances with
``dataclasses.replace`` instead of mutating records that may already have
been handed to subscribers.
"""

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, List, Optional, Union
import json
import logging
import math

logger = logging.getLogger(__name__)

SPEED_OF_LIGHT_MPS = 299_792_458.0


@dataclass(frozen=True)
class GeoPos:
    """Observer position on the ground."""

    latitude: float  # degrees, -90 to +90
    longitude: float  # degrees, -180 to +180
    altitude: float = 0.0  # metres above sea level

    def __post_init__(self) -> None:
        if not -90 <= self.latitude <= 90:
            raise ValueError(
                f"Invalid latitude: {self.latitude}. Must be between -90 and 90 degrees."
            )
        if not -180 <= self.longitude <= 180:
            raise ValueError(
                f"Invalid longitude: {self.longitude}. Must be between -180 and 180 degrees."
            )


@dataclass(frozen=True)
class SatPos:
    """
    A single oracle sample of a satellite as seen by an observer.

    Angles are radians, altitude is km above the ellipsoid and range rate is
    km/s (positive while the satellite is receding).
    """

    time: int  # epoch milliseconds, UTC
    azimuth: float
    elevation: float
    altitude: float
    range_rate: float

    @property
    def azimuth_deg(self) -> float:
        return math.degrees(self.azimuth)

    @property
    def elevation_deg(self) -> float:
        return math.degrees(self.elevation)

    def get_downlink_freq(self, frequency: int) -> int:
        """Frequency heard by the observer for a satellite transmitting ``frequency`` Hz."""
        return int(
            frequency
            * (SPEED_OF_LIGHT_MPS - self.range_rate * 1000.0)
            / SPEED_OF_LIGHT_MPS
        )

    def get_uplink_freq(self, frequency: int) -> int:
        """Frequency the observer must transmit for the satellite to hear ``frequency`` Hz."""
        return int(
            frequency
            * (SPEED_OF_LIGHT_MPS + self.range_rate * 1000.0)
            / SPEED_OF_LIGHT_MPS
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "time": self.time,
            "azimuth_deg": round(self.azimuth_deg, 2),
            "elevation_deg": round(self.elevation_deg, 2),
            "altitude_km": round(self.altitude, 2),
            "range_rate_kms": round(self.range_rate, 4),
        }


@dataclass(frozen=True)
class SatPass:
    """
    One visibility window of a satellite over an observer.

    Times are epoch milliseconds, azimuths and elevation are degrees and
    altitude is the satellite altitude (km) at peak elevation.
    """

    aos_time: int
    aos_azimuth: float
    los_time: int
    los_azimuth: float
    tca_time: int
    tca_azimuth: float
    altitude: float
    max_elevation: float
    satellite: Any = field(repr=False, compare=False)
    progress: int = 0  # 0-100

    @property
    def is_deepspace(self) -> bool:
        return bool(self.satellite.is_deepspace)

    @property
    def satellite_name(self) -> str:
        return getattr(self.satellite, "satellite_name", str(self.satellite))

    @property
    def duration_ms(self) -> int:
        return self.los_time - self.aos_time

    def with_progress(self, progress: int) -> "SatPass":
        return replace(self, progress=progress)

    def to_dict(self) -> Dict[str, Any]:
        """Convert pass to dictionary representation."""
        return {
            "satellite_name": self.satellite_name,
            "aos_time": self.aos_time,
            "aos_azimuth": round(self.aos_azimuth, 2),
            "tca_time": self.tca_time,
            "tca_azimuth": round(self.tca_azimuth, 2),
            "los_time": self.los_time,
            "los_azimuth": round(self.los_azimuth, 2),
            "duration_s": round(self.duration_ms / 1000.0, 1),
            "max_elevation": round(self.max_elevation, 2),
            "altitude_km": round(self.altitude, 2),
            "progress": self.progress,
            "deepspace": self.is_deepspace,
        }

    def __str__(self) -> str:
        return (
            f"Pass of {self.satellite_name}: "
            f"AOS {self.aos_time} - LOS {self.los_time}, "
            f"Max Elev: {self.max_elevation:.1f}°"
        )


@dataclass(frozen=True)
class SatRadio:
    """A transmitter entry; frequencies are Hz and either link may be absent."""

    uuid: str
    info: str = ""
    is_alive: bool = True
    downlink: Optional[int] = None
    uplink: Optional[int] = None
    mode: Optional[str] = None
    is_inverted: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "uuid": self.uuid,
            "info": self.info,
            "is_alive": self.is_alive,
            "downlink": self.downlink,
            "uplink": self.uplink,
            "mode": self.mode,
            "is_inverted": self.is_inverted,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SatRadio":
        """Create SatRadio from dictionary, ignoring unknown keys."""
        known = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        if "uuid" not in known:
            raise ValueError(f"Transmitter entry without uuid: {data}")
        return cls(**known)


def load_radios(file_path: Union[str, Path]) -> List[SatRadio]:
    """
    Load a transmitter list from a JSON file.

    Args:
        file_path: Path to a JSON file holding a list of transmitter objects,
            or an object with a "radios" list

    Returns:
        List of SatRadio objects

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the file content is malformed
    """
    path = Path(file_path)
    if not path.exists():
        raise FileNotFoundError(f"Transmitter file not found: {file_path}")

    with open(path, "r") as f:
        data = json.load(f)

    if isinstance(data, dict):
        data = data.get("radios", [])
    if not isinstance(data, list):
        raise ValueError(f"Expected a list of transmitters in {file_path}")

    radios = [SatRadio.from_dict(item) for item in data]
    logger.info(f"Loaded {len(radios)} transmitters from {path}")
    return radios
