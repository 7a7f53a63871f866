"""
Live tracking helpers: pass progress and Doppler correction.

Both operations return freshly built records and never touch their inputs,
so results can be handed to several consumers at once.
"""

from dataclasses import replace
from typing import Any, Iterable, List
import logging

from .models import GeoPos, SatPass, SatRadio

logger = logging.getLogger(__name__)

COMPLETE = 100


def pass_progress(sat_pass: SatPass, time: int) -> int:
    """
    Elapsed share of a pass in whole percent, clamped to [0, 100].

    A zero-length pass counts as complete as soon as ``time`` passes its AOS.
    Deepspace passes and passes that have not started keep their progress.
    """
    if sat_pass.is_deepspace or time <= sat_pass.aos_time:
        return sat_pass.progress
    duration = sat_pass.los_time - sat_pass.aos_time
    if duration <= 0:
        return COMPLETE
    return min(COMPLETE, 100 * (time - sat_pass.aos_time) // duration)


def update_progress(passes: Iterable[SatPass], time: int) -> List[SatPass]:
    """
    Recompute progress of every pass and drop the completed ones.

    Args:
        passes: Currently held passes
        time: Current time, epoch milliseconds

    Returns:
        New SatPass instances for the passes still in progress or upcoming
    """
    updated = []
    dropped = 0
    for sat_pass in passes:
        progress = pass_progress(sat_pass, time)
        if progress >= COMPLETE:
            dropped += 1
            continue
        updated.append(sat_pass.with_progress(progress))
    if dropped:
        logger.debug(f"Dropped {dropped} completed passes")
    return updated


def correct_radios(
    satellite: Any, pos: GeoPos, radios: Iterable[SatRadio], time: int
) -> List[SatRadio]:
    """
    Doppler-correct transmitter frequencies for the current range rate.

    One position sample is taken at ``time`` and shared by every radio.
    Downlinks use the receiving convention, uplinks the transmitting one.

    Returns:
        New SatRadio instances; the input list is left unchanged
    """
    sat_pos = satellite.get_position(pos, time)
    corrected = []
    for radio in radios:
        downlink = radio.downlink
        uplink = radio.uplink
        if downlink is not None:
            downlink = sat_pos.get_downlink_freq(downlink)
        if uplink is not None:
            uplink = sat_pos.get_uplink_freq(uplink)
        corrected.append(replace(radio, downlink=downlink, uplink=uplink))
    return corrected
