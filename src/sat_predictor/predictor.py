"""
Asynchronous pass predictor.

All CPU-bound work (pass search, timeline scan, progress update and Doppler
correction) runs on one dedicated worker thread so the calling event loop
stays responsive. The latest full timeline is published through a
``ReplayChannel``.
"""

from concurrent.futures import ThreadPoolExecutor
from functools import partial
from threading import Event
from typing import Any, Callable, List, Optional, Sequence, TypeVar
import asyncio
import logging

from .config import PredictorSettings
from .models import GeoPos, SatPass, SatPos, SatRadio
from .passes import calculate_passes
from .publisher import ReplayChannel
from .tracking import correct_radios, update_progress
from .utils import MILLIS_PER_SECOND

logger = logging.getLogger(__name__)

R = TypeVar("R")


class Predictor:
    """
    Runs predictions off the caller's thread and publishes pass timelines.

    Overlapping ``force_calculation`` calls are not de-duplicated; each one
    publishes its own result when it finishes, so callers should serialize
    them.
    """

    def __init__(self, settings: Optional[PredictorSettings] = None) -> None:
        self.settings = settings or PredictorSettings()
        self._executor = ThreadPoolExecutor(
            max_workers=1, thread_name_prefix="predictor"
        )
        self._calculated_passes: ReplayChannel[List[SatPass]] = ReplayChannel()
        logger.info(
            f"Initialized Predictor (hours_ahead={self.settings.hours_ahead}, "
            f"min_elevation={self.settings.min_elevation})"
        )

    @property
    def calculated_passes(self) -> ReplayChannel[List[SatPass]]:
        """Channel holding the most recently calculated timeline."""
        return self._calculated_passes

    async def _run(self, func: Callable[..., R], *args: Any, **kwargs: Any) -> R:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self._executor, partial(func, *args, **kwargs))

    async def get_sat_pos(self, satellite: Any, pos: GeoPos, time: int) -> SatPos:
        return await self._run(satellite.get_position, pos, time)

    async def get_sat_track(
        self, satellite: Any, pos: GeoPos, start: int, end: int
    ) -> List[SatPos]:
        """Positions every ``track_step_seconds`` from ``start`` up to ``end`` (exclusive)."""
        step = self.settings.track_step_seconds * MILLIS_PER_SECOND

        def track() -> List[SatPos]:
            return [satellite.get_position(pos, t) for t in range(start, end, step)]

        return await self._run(track)

    async def process_radios(
        self, satellite: Any, pos: GeoPos, radios: Sequence[SatRadio], time: int
    ) -> List[SatRadio]:
        return await self._run(correct_radios, satellite, pos, list(radios), time)

    async def process_passes(self, passes: Sequence[SatPass], time: int) -> List[SatPass]:
        return await self._run(update_progress, list(passes), time)

    async def force_calculation(
        self,
        satellites: Sequence[Any],
        pos: GeoPos,
        time: int,
        hours_ahead: Optional[int] = None,
        min_elevation: Optional[float] = None,
    ) -> None:
        """
        Recalculate the pass timeline and publish it.

        Args:
            satellites: Satellite catalog
            pos: Observer position
            time: Reference time, epoch milliseconds
            hours_ahead: Horizon in hours (settings default when None)
            min_elevation: Minimum peak elevation (settings default when None)

        Cancelling the awaiting task stops the worker search at its next step
        and leaves the published timeline unchanged.
        """
        if not satellites:
            self._calculated_passes.publish([])
            return

        if hours_ahead is None:
            hours_ahead = self.settings.hours_ahead
        if min_elevation is None:
            min_elevation = self.settings.min_elevation

        cancel_event = Event()
        try:
            passes = await self._run(
                calculate_passes,
                list(satellites),
                pos,
                time,
                hours_ahead,
                min_elevation,
                cancel_event=cancel_event,
                max_search_steps=self.settings.max_search_steps,
            )
        except asyncio.CancelledError:
            cancel_event.set()
            logger.info("Pass calculation cancelled")
            raise
        self._calculated_passes.publish(passes)

    def close(self, wait: bool = True) -> None:
        """Shut down the worker thread."""
        logger.debug("Shutting down predictor worker")
        self._executor.shutdown(wait=wait)

    def __enter__(self) -> "Predictor":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()
