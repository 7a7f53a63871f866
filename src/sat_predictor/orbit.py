"""
Satellite position oracle backed by TLE propagation.

This module loads TLE data and turns orbit-predictor propagation results
into observer-relative samples (azimuth, elevation, altitude, range rate)
consumed by the pass search.
"""

from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple, Union
import logging
import math

import numpy as np
from orbit_predictor.locations import Location  # type: ignore[import-untyped]
from orbit_predictor.sources import get_predictor_from_tle_lines  # type: ignore[import-untyped]

from .models import GeoPos, SatPos
from .utils import from_millis

logger = logging.getLogger(__name__)

EARTH_RADIUS_KM = 6378.137
MINUTES_PER_DAY = 1440.0

# SGP4 switches to deep-space perturbations at this period
DEEPSPACE_PERIOD_MINUTES = 225.0


def parse_orbital_elements(line2: str) -> Tuple[float, float, float]:
    """
    Extract the elements needed for visibility screening from TLE line 2.

    Args:
        line2: Second TLE line

    Returns:
        Tuple of (inclination_deg, eccentricity, mean_motion_revs_per_day)

    Raises:
        ValueError: If the line is malformed
    """
    line2 = line2.strip()
    if not line2.startswith("2 ") or len(line2) < 63:
        raise ValueError(f"Malformed TLE line 2: {line2!r}")
    inclination = float(line2[8:16])
    eccentricity = float("0." + line2[26:33].strip())
    mean_motion = float(line2[52:63])
    return inclination, eccentricity, mean_motion


class TLESatellite:
    """
    A catalog satellite that answers position queries from its TLE.

    Exposes the oracle surface used by the predictor: ``get_position``,
    ``will_be_seen``, ``orbital_period`` (minutes) and ``is_deepspace``.
    """

    def __init__(self, tle_lines: List[str], satellite_name: str) -> None:
        """
        Initialize satellite from TLE data.

        Args:
            tle_lines: List of 3 strings (name, line1, line2) or 2 strings (line1, line2)
            satellite_name: Name of the satellite

        Raises:
            ValueError: If TLE data is invalid
        """
        self.satellite_name = satellite_name
        self.tle_lines = tle_lines

        predictor_lines = tle_lines[1:3] if len(tle_lines) == 3 else tle_lines
        try:
            self.inclination, self.eccentricity, self.mean_motion = (
                parse_orbital_elements(predictor_lines[1])
            )
            self.predictor = get_predictor_from_tle_lines(tuple(predictor_lines))
        except Exception as e:
            logger.error(f"Failed to initialize satellite {satellite_name}: {e}")
            raise ValueError(f"Invalid TLE data for satellite {satellite_name}: {e}")

        self._location_cache: Dict[GeoPos, Location] = {}
        logger.debug(f"Loaded orbit for satellite: {satellite_name}")

    @classmethod
    def from_tle_file(
        cls, tle_file_path: Union[str, Path], satellite_name: str
    ) -> "TLESatellite":
        """
        Create a TLESatellite for one named satellite in a TLE file.

        Raises:
            FileNotFoundError: If TLE file doesn't exist
            ValueError: If satellite not found in TLE file
        """
        for satellite in load_satellites(tle_file_path):
            if satellite_name.upper() in satellite.satellite_name.upper():
                return satellite
        raise ValueError(f"Satellite '{satellite_name}' not found in TLE file")

    @property
    def orbital_period(self) -> float:
        """Orbital period in minutes."""
        return MINUTES_PER_DAY / self.mean_motion

    @property
    def is_deepspace(self) -> bool:
        return self.orbital_period > DEEPSPACE_PERIOD_MINUTES

    def will_be_seen(self, pos: GeoPos) -> bool:
        """
        Check whether the orbit can ever rise above the observer's horizon.

        Compares the observer latitude with the highest latitude from which
        the apogee is still above the horizon.
        """
        if self.mean_motion < 1e-8:
            return False
        semi_major_axis = 331.25 * math.exp(
            math.log(MINUTES_PER_DAY / self.mean_motion) * (2.0 / 3.0)
        )
        apogee = semi_major_axis * (1.0 + self.eccentricity) - EARTH_RADIUS_KM
        inclination = self.inclination
        if inclination >= 90.0:
            inclination = 180.0 - inclination
        reach = math.acos(EARTH_RADIUS_KM / (apogee + EARTH_RADIUS_KM))
        return reach + math.radians(inclination) > math.radians(abs(pos.latitude))

    def _get_location(self, pos: GeoPos) -> Location:
        if pos not in self._location_cache:
            self._location_cache[pos] = Location(
                "observer", pos.latitude, pos.longitude, pos.altitude
            )
        return self._location_cache[pos]

    def get_position(self, pos: GeoPos, time: int) -> SatPos:
        """
        Sample the satellite as seen from an observer.

        Args:
            pos: Observer position
            time: Epoch milliseconds, UTC

        Returns:
            SatPos with azimuth/elevation in radians, altitude in km and
            range rate in km/s
        """
        position = self.predictor.get_position(from_millis(time))
        location = self._get_location(pos)

        sat_ecef = np.asarray(position.position_ecef, dtype=float)
        sat_velocity = np.asarray(position.velocity_ecef, dtype=float)
        range_vector = sat_ecef - np.asarray(location.position_ecef, dtype=float)
        range_km = float(np.linalg.norm(range_vector))

        lat = math.radians(pos.latitude)
        lon = math.radians(pos.longitude)
        east = np.array([-math.sin(lon), math.cos(lon), 0.0])
        north = np.array(
            [
                -math.sin(lat) * math.cos(lon),
                -math.sin(lat) * math.sin(lon),
                math.cos(lat),
            ]
        )
        up = np.array(
            [math.cos(lat) * math.cos(lon), math.cos(lat) * math.sin(lon), math.sin(lat)]
        )

        elevation = math.asin(float(np.dot(range_vector, up)) / range_km)
        azimuth = math.atan2(
            float(np.dot(range_vector, east)), float(np.dot(range_vector, north))
        ) % (2 * math.pi)
        range_rate = float(np.dot(range_vector, sat_velocity)) / range_km
        altitude = float(position.position_llh[2])

        return SatPos(time, azimuth, elevation, altitude, range_rate)

    def __repr__(self) -> str:
        return (
            f"TLESatellite(name='{self.satellite_name}', "
            f"period={self.orbital_period:.1f}min)"
        )


def load_satellites(
    tle_file_path: Union[str, Path], names: Optional[Sequence[str]] = None
) -> List[TLESatellite]:
    """
    Load every satellite of a three-line TLE file.

    Args:
        tle_file_path: Path to TLE file
        names: Optional name filter (case-insensitive substring match)

    Returns:
        List of TLESatellite objects; malformed entries are skipped

    Raises:
        FileNotFoundError: If TLE file doesn't exist
    """
    tle_path = Path(tle_file_path)
    if not tle_path.exists():
        raise FileNotFoundError(f"TLE file not found: {tle_file_path}")

    with open(tle_path, "r") as f:
        lines = [line.strip() for line in f.readlines() if line.strip()]

    wanted = [name.upper() for name in names] if names else None
    satellites = []
    for i in range(0, len(lines) - 2, 3):
        name_line = lines[i]
        if wanted is not None and not any(w in name_line.upper() for w in wanted):
            continue
        try:
            satellites.append(
                TLESatellite([lines[i], lines[i + 1], lines[i + 2]], name_line)
            )
        except ValueError as e:
            logger.warning(f"Skipping TLE entry '{name_line}': {e}")

    logger.info(f"Loaded {len(satellites)} satellites from {tle_path}")
    return satellites
