"""
Visibility window search and pass timeline aggregation.

The search treats the satellite as a black-box position oracle and brackets
horizon crossings by stepping forward in time: coarse steps find the
crossing, short steps refine it. Geostationary satellites are modelled as
continuously visible over a fixed window around the reference time.
"""

from threading import Event
from typing import Any, Iterable, List, Optional
import logging
import math

from .exceptions import PredictionCancelled, SearchLimitExceeded
from .models import GeoPos, SatPass, SatPos
from .utils import MILLIS_PER_HOUR, MILLIS_PER_MINUTE, MILLIS_PER_SECOND

logger = logging.getLogger(__name__)

# Step sizes of the horizon-crossing search
ACTIVE_PASS_STEP_MS = 30 * MILLIS_PER_SECOND
AOS_COARSE_STEP_MS = 60 * MILLIS_PER_SECOND
LOS_COARSE_STEP_MS = 30 * MILLIS_PER_SECOND
REFINE_STEP_MS = 3 * MILLIS_PER_SECOND

GEO_HALF_WINDOW_MS = 24 * MILLIS_PER_HOUR

DEFAULT_HOURS_AHEAD = 8
DEFAULT_MIN_ELEVATION = 16.0

# Upper bound on samples per stepping loop. A 60 s coarse scan covers
# roughly two weeks before tripping it.
DEFAULT_MAX_SEARCH_STEPS = 20000


class _PeakTracker:
    """Highest elevation seen so far, with altitude and azimuth at that sample."""

    def __init__(self) -> None:
        self.elevation = 0.0
        self.altitude = 0.0
        self.azimuth = 0.0

    def update(self, sat_pos: SatPos) -> None:
        if sat_pos.elevation > self.elevation:
            self.elevation = sat_pos.elevation
            self.altitude = sat_pos.altitude
            self.azimuth = math.degrees(sat_pos.azimuth)


def quarter_orbit_ms(satellite: Any) -> int:
    """Whole minutes of a quarter orbit, in milliseconds."""
    return int(satellite.orbital_period / 4.0) * MILLIS_PER_MINUTE


def next_search_time(satellite: Any, sat_pass: SatPass) -> int:
    """Time at which the search for the pass after ``sat_pass`` resumes."""
    return sat_pass.los_time + 3 * quarter_orbit_ms(satellite)


class PassFinder:
    """
    Finds visibility windows of satellites over one observer.

    A finder owns its cancellation event and keeps no state between calls
    other than the observer, so each worker call can use its own instance.
    """

    def __init__(
        self,
        pos: GeoPos,
        cancel_event: Optional[Event] = None,
        max_search_steps: int = DEFAULT_MAX_SEARCH_STEPS,
    ) -> None:
        self.pos = pos
        self.cancel_event = cancel_event
        self.max_search_steps = max_search_steps

    def _check_cancelled(self) -> None:
        if self.cancel_event is not None and self.cancel_event.is_set():
            raise PredictionCancelled("Pass search cancelled")

    def _step(
        self,
        satellite: Any,
        time: int,
        step_ms: int,
        until_visible: bool,
        peak: Optional[_PeakTracker] = None,
    ) -> SatPos:
        """
        Step forward from ``time`` until the satellite crosses the horizon.

        Args:
            satellite: Position oracle
            time: Start time (not sampled)
            step_ms: Step size in milliseconds
            until_visible: Stop on the first sample above the horizon when
                True, on the first sample at or below it when False
            peak: Optional tracker updated with every sample

        Returns:
            The first sample on the far side of the crossing
        """
        for _ in range(self.max_search_steps):
            self._check_cancelled()
            time += step_ms
            sat_pos = satellite.get_position(self.pos, time)
            if peak is not None:
                peak.update(sat_pos)
            if (sat_pos.elevation > 0.0) == until_visible:
                return sat_pos
        raise SearchLimitExceeded(
            getattr(satellite, "satellite_name", repr(satellite)),
            self.max_search_steps,
        )

    def find_geo_pass(self, satellite: Any, time: int) -> SatPass:
        """
        Build the fixed window of a geostationary satellite.

        The window is [time - 24h, time + 24h] around a single sample; the
        elevation is not verified over the window.
        """
        sat_pos = satellite.get_position(self.pos, time)
        azimuth = math.degrees(sat_pos.azimuth)
        return SatPass(
            aos_time=time - GEO_HALF_WINDOW_MS,
            aos_azimuth=azimuth,
            los_time=time + GEO_HALF_WINDOW_MS,
            los_azimuth=azimuth,
            tca_time=time,
            tca_azimuth=azimuth,
            altitude=sat_pos.altitude,
            max_elevation=math.degrees(sat_pos.elevation),
            satellite=satellite,
        )

    def find_leo_pass(self, satellite: Any, time: int, rewind: bool) -> SatPass:
        """
        Find the next horizon-crossing window starting at ``time``.

        Args:
            satellite: Position oracle
            time: Search start, epoch milliseconds
            rewind: Step back a quarter orbit first so that a pass already in
                progress at ``time`` is found (first search only)

        Returns:
            SatPass with AOS/LOS refined to 3 seconds
        """
        quarter_orbit = quarter_orbit_ms(satellite)
        peak = _PeakTracker()

        if rewind:
            time -= quarter_orbit

        sat_pos = satellite.get_position(self.pos, time)
        if sat_pos.elevation > 0.0:
            # finish the pass in progress, then skip the one behind the earth
            sat_pos = self._step(satellite, time, ACTIVE_PASS_STEP_MS, False)
            time = sat_pos.time + 3 * quarter_orbit

        sat_pos = self._step(satellite, time, AOS_COARSE_STEP_MS, True, peak)
        sat_pos = self._step(
            satellite, sat_pos.time - AOS_COARSE_STEP_MS, REFINE_STEP_MS, True, peak
        )
        aos_time = sat_pos.time
        aos_azimuth = math.degrees(sat_pos.azimuth)

        sat_pos = self._step(satellite, aos_time, LOS_COARSE_STEP_MS, False, peak)
        sat_pos = self._step(
            satellite, sat_pos.time - LOS_COARSE_STEP_MS, REFINE_STEP_MS, False, peak
        )
        los_time = sat_pos.time
        los_azimuth = math.degrees(sat_pos.azimuth)

        return SatPass(
            aos_time=aos_time,
            aos_azimuth=aos_azimuth,
            los_time=los_time,
            los_azimuth=los_azimuth,
            tca_time=(aos_time + los_time) // 2,
            tca_azimuth=peak.azimuth,
            altitude=peak.altitude,
            max_elevation=math.degrees(peak.elevation),
            satellite=satellite,
        )

    def find_passes(
        self, satellite: Any, time: int, hours_ahead: int = DEFAULT_HOURS_AHEAD
    ) -> List[SatPass]:
        """
        Find all windows of one satellite from ``time`` up to the horizon.

        The last pass returned is the first one whose AOS is at or past the
        horizon end; filtering is left to the caller.

        Returns:
            Passes in search order; empty if the satellite is never visible
        """
        if not satellite.will_be_seen(self.pos):
            return []
        if satellite.is_deepspace:
            return [self.find_geo_pass(satellite, time)]

        end_time = time + hours_ahead * MILLIS_PER_HOUR
        passes: List[SatPass] = []
        start_time = time
        try:
            while True:
                sat_pass = self.find_leo_pass(satellite, start_time, rewind=not passes)
                passes.append(sat_pass)
                if sat_pass.aos_time >= end_time:
                    break
                start_time = next_search_time(satellite, sat_pass)
        except SearchLimitExceeded as e:
            logger.warning(f"{e}; keeping {len(passes)} passes found so far")

        logger.debug(
            f"Found {len(passes)} passes for "
            f"{getattr(satellite, 'satellite_name', satellite)}"
        )
        return passes


def filter_passes(
    passes: Iterable[SatPass],
    time: int,
    hours_ahead: int = DEFAULT_HOURS_AHEAD,
    min_elevation: float = DEFAULT_MIN_ELEVATION,
) -> List[SatPass]:
    """
    Keep passes that overlap [time, time + hours_ahead) and peak above
    ``min_elevation`` degrees, sorted by AOS.
    """
    time_future = time + hours_ahead * MILLIS_PER_HOUR
    return sorted(
        (
            p
            for p in passes
            if p.los_time > time
            and p.aos_time < time_future
            and p.max_elevation > min_elevation
        ),
        key=lambda p: p.aos_time,
    )


def calculate_passes(
    satellites: Iterable[Any],
    pos: GeoPos,
    time: int,
    hours_ahead: int = DEFAULT_HOURS_AHEAD,
    min_elevation: float = DEFAULT_MIN_ELEVATION,
    cancel_event: Optional[Event] = None,
    max_search_steps: int = DEFAULT_MAX_SEARCH_STEPS,
) -> List[SatPass]:
    """
    Build the full pass timeline for a satellite catalog.

    Args:
        satellites: Catalog of position oracles
        pos: Observer position
        time: Reference time, epoch milliseconds
        hours_ahead: Horizon length in hours
        min_elevation: Minimum peak elevation in degrees
        cancel_event: Set by the caller to abort the search
        max_search_steps: Cap on samples per stepping loop

    Returns:
        Filtered passes sorted by AOS

    Raises:
        PredictionCancelled: If ``cancel_event`` was set during the search
    """
    satellites = list(satellites)
    if not satellites:
        return []

    finder = PassFinder(pos, cancel_event, max_search_steps)
    all_passes: List[SatPass] = []
    for satellite in satellites:
        all_passes.extend(finder.find_passes(satellite, time, hours_ahead))

    passes = filter_passes(all_passes, time, hours_ahead, min_elevation)
    logger.info(
        f"Calculated {len(passes)} passes ({len(all_passes)} before filtering) "
        f"for {len(satellites)} satellites over {hours_ahead}h"
    )
    return passes
