"""
Pytest configuration and shared fixtures.

This file is automatically loaded by pytest and provides:
- Custom markers for test categorization
- A fake position oracle with an analytic elevation curve
- Shared fixtures for common test setup
"""

import math
import sys
import threading
import time as time_module
from pathlib import Path
from typing import Any, Callable, List, Optional

import pytest
from _pytest.config import Config

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from sat_predictor.models import GeoPos, SatPos  # noqa: E402

# 2023-11-14 22:13:20 UTC
BASE_TIME_MS = 1_700_000_000_000
MINUTE_MS = 60_000


def pytest_configure(config: Config) -> None:
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line("markers", "integration: marks integration tests")


# =============================================================================
# FAKE ORACLE
# =============================================================================


class FakeSatellite:
    """
    Position oracle with a periodic bell-shaped elevation curve.

    Elevation peaks at ``peak_deg`` every orbital period starting at
    ``first_peak`` and crosses the horizon exactly ``half_window_min`` minutes
    either side of each peak, so AOS/LOS times are known in closed form.
    """

    def __init__(
        self,
        name: str = "FAKE-1",
        period_min: float = 95.0,
        peak_deg: float = 40.0,
        half_window_min: float = 5.0,
        first_peak: int = BASE_TIME_MS + 60 * MINUTE_MS + 7_000,
        deepspace: bool = False,
        visible: bool = True,
        fixed_elevation_deg: Optional[float] = None,
        range_rate: Optional[float] = None,
        delay_s: float = 0.0,
    ) -> None:
        self.satellite_name = name
        self.orbital_period = period_min
        self.is_deepspace = deepspace
        self.visible = visible
        self.peak_deg = peak_deg
        self.first_peak = first_peak
        self.period_ms = int(period_min * MINUTE_MS)
        self.half_window_ms = int(half_window_min * MINUTE_MS)
        self.sigma_ms = self.half_window_ms / math.sqrt(
            math.log((peak_deg + 90.0) / 90.0)
        )
        self.fixed_elevation_deg = fixed_elevation_deg
        self.range_rate = range_rate
        self.delay_s = delay_s
        self.queries: List[SatPos] = []
        self.threads: List[str] = []

    def will_be_seen(self, pos: GeoPos) -> bool:
        return self.visible

    def offset(self, time: int) -> int:
        """Signed distance in ms to the nearest peak."""
        half = self.period_ms // 2
        return (time - self.first_peak + half) % self.period_ms - half

    def aos(self, n: int = 0) -> int:
        return self.first_peak + n * self.period_ms - self.half_window_ms

    def los(self, n: int = 0) -> int:
        return self.first_peak + n * self.period_ms + self.half_window_ms

    def elevation_deg_at(self, time: int) -> float:
        if self.fixed_elevation_deg is not None:
            return self.fixed_elevation_deg
        dt = self.offset(time)
        return (self.peak_deg + 90.0) * math.exp(-((dt / self.sigma_ms) ** 2)) - 90.0

    def get_position(self, pos: GeoPos, time: int) -> SatPos:
        if self.delay_s:
            time_module.sleep(self.delay_s)
        dt = self.offset(time)
        azimuth = (math.pi + 0.5 * dt / self.sigma_ms) % (2 * math.pi)
        altitude = 500.0 + dt / MINUTE_MS
        if self.range_rate is not None:
            range_rate = self.range_rate
        else:
            range_rate = max(-7.0, min(7.0, dt / MINUTE_MS))
        sat_pos = SatPos(
            time,
            azimuth,
            math.radians(self.elevation_deg_at(time)),
            altitude,
            range_rate,
        )
        self.queries.append(sat_pos)
        self.threads.append(threading.current_thread().name)
        return sat_pos


# =============================================================================
# FIXTURES - Common test setup
# =============================================================================


@pytest.fixture
def base_time() -> int:
    """Standard reference time for tests (epoch ms)."""
    return BASE_TIME_MS


@pytest.fixture
def observer() -> GeoPos:
    """Observer in London."""
    return GeoPos(latitude=51.5, longitude=0.0, altitude=0.0)


@pytest.fixture
def make_satellite() -> Callable[..., FakeSatellite]:
    """Factory for fake satellites."""

    def factory(**kwargs: Any) -> FakeSatellite:
        return FakeSatellite(**kwargs)

    return factory


@pytest.fixture
def leo_satellite() -> FakeSatellite:
    """95-minute orbit peaking at 40° just over an hour after the base time."""
    return FakeSatellite()


@pytest.fixture
def geo_satellite() -> FakeSatellite:
    """Geostationary satellite sitting at 30° elevation."""
    return FakeSatellite(
        name="FAKE-GEO", period_min=1436.0, deepspace=True, fixed_elevation_deg=30.0
    )


@pytest.fixture
def sample_tle_file(tmp_path: Path) -> Path:
    """Sample TLE file written by the package helper."""
    from sat_predictor.utils import create_sample_tle_file

    tle_file = tmp_path / "sample.tle"
    create_sample_tle_file(tle_file)
    return tle_file
