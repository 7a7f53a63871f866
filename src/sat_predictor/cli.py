"""
Command-line interface for the satellite pass predictor.

This module provides a CLI for predicting passes, Doppler-correcting
transmitters and sampling satellite positions from the command line.
"""

from datetime import timedelta
from typing import List, Optional, Tuple
import asyncio
import json
import logging
import sys

import click

from .config import PredictorSettings, load_settings
from .exceptions import PredictorError
from .models import GeoPos, load_radios
from .orbit import TLESatellite, load_satellites
from .predictor import Predictor
from .utils import (
    create_sample_tle_file,
    format_duration,
    format_frequency,
    format_millis,
    get_current_millis,
    parse_datetime,
    setup_logging,
    to_millis,
)

logger = logging.getLogger(__name__)


def _observer(
    settings: PredictorSettings,
    lat: Optional[float],
    lon: Optional[float],
    alt: Optional[float],
) -> GeoPos:
    if lat is None or lon is None:
        if settings.observer is None:
            raise click.UsageError(
                "Observer location required: pass --lat/--lon or set it in the config file"
            )
        default = settings.observer.to_geo_pos()
        lat = default.latitude if lat is None else lat
        lon = default.longitude if lon is None else lon
        alt = default.altitude if alt is None else alt
    return GeoPos(lat, lon, alt or 0.0)


def _time(value: Optional[str]) -> int:
    return to_millis(parse_datetime(value)) if value else get_current_millis()


def _load_one(tle: str, satellite: str) -> TLESatellite:
    return TLESatellite.from_tle_file(tle, satellite)


def observer_options(func):
    """Shared --lat/--lon/--alt options."""
    func = click.option("--alt", type=float, help="Observer altitude in metres")(func)
    func = click.option("--lon", type=float, help="Observer longitude in degrees")(func)
    func = click.option("--lat", type=float, help="Observer latitude in degrees")(func)
    return func


@click.group()
@click.option(
    "--log-level",
    default="INFO",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"]),
    help="Set logging level",
)
@click.option("--log-file", type=click.Path(), help="Log file path")
@click.option("--config", "config_path", type=click.Path(), help="Predictor YAML config")
@click.pass_context
def main(
    ctx: click.Context, log_level: str, log_file: Optional[str], config_path: Optional[str]
) -> None:
    """Satellite Pass Predictor - visibility windows and Doppler for ground observers."""
    setup_logging(log_level, log_file)
    try:
        ctx.obj = load_settings(config_path)
    except PredictorError as e:
        raise click.ClickException(str(e))


@main.command()
@click.option("--tle", required=True, type=click.Path(exists=True), help="Path to TLE file")
@click.option(
    "--satellite",
    "names",
    multiple=True,
    help="Satellite name filter (repeatable, default: whole file)",
)
@observer_options
@click.option("--start-time", type=str, help="Reference time (YYYY-MM-DD HH:MM:SS UTC, default: now)")
@click.option("--hours", type=int, help="Horizon in hours (default from config: 8)")
@click.option("--min-elevation", type=float, help="Minimum peak elevation in degrees (default from config: 16)")
@click.option(
    "--format",
    "output_format",
    default="table",
    type=click.Choice(["table", "json"]),
    help="Output format",
)
@click.pass_obj
def passes(
    settings: PredictorSettings,
    tle: str,
    names: Tuple[str, ...],
    lat: Optional[float],
    lon: Optional[float],
    alt: Optional[float],
    start_time: Optional[str],
    hours: Optional[int],
    min_elevation: Optional[float],
    output_format: str,
) -> None:
    """Predict passes of the satellites in a TLE file.

    Example:
    passes --tle amateur.tle --lat 51.5 --lon 0 --hours 12 --min-elevation 10
    """
    try:
        pos = _observer(settings, lat, lon, alt)
        time = _time(start_time)
        satellites = load_satellites(tle, names or None)

        async def run() -> List:
            with Predictor(settings) as predictor:
                await predictor.force_calculation(
                    satellites, pos, time, hours, min_elevation
                )
                return predictor.calculated_passes.value or []

        results = asyncio.run(run())
    except (PredictorError, ValueError, OSError) as e:
        logger.error(f"Pass prediction failed: {e}")
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if output_format == "json":
        click.echo(json.dumps([p.to_dict() for p in results], indent=2))
        return

    click.echo(f"{len(results)} passes from {format_millis(time)}")
    for p in results:
        duration = format_duration(p.duration_ms / 1000.0)
        click.echo(
            f"{p.satellite_name:<24} AOS {format_millis(p.aos_time)} "
            f"({p.aos_azimuth:5.1f}°)  LOS {format_millis(p.los_time)} "
            f"({p.los_azimuth:5.1f}°)  max {p.max_elevation:4.1f}°  {duration}"
        )


@main.command()
@click.option("--tle", required=True, type=click.Path(exists=True), help="Path to TLE file")
@click.option("--satellite", required=True, help="Satellite name (must match name in TLE file)")
@click.option("--radios", required=True, type=click.Path(exists=True), help="JSON transmitter list")
@observer_options
@click.option("--time", "time_str", type=str, help="Time (YYYY-MM-DD HH:MM:SS UTC, default: now)")
@click.option("--json", "as_json", is_flag=True, help="Print JSON instead of a table")
@click.pass_obj
def doppler(
    settings: PredictorSettings,
    tle: str,
    satellite: str,
    radios: str,
    lat: Optional[float],
    lon: Optional[float],
    alt: Optional[float],
    time_str: Optional[str],
    as_json: bool,
) -> None:
    """Doppler-correct a satellite's transmitters for the given time."""
    try:
        pos = _observer(settings, lat, lon, alt)
        time = _time(time_str)
        sat = _load_one(tle, satellite)
        radio_list = load_radios(radios)

        async def run() -> List:
            with Predictor(settings) as predictor:
                return await predictor.process_radios(sat, pos, radio_list, time)

        corrected = asyncio.run(run())
    except (PredictorError, ValueError, OSError) as e:
        logger.error(f"Doppler correction failed: {e}")
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if as_json:
        click.echo(json.dumps([r.to_dict() for r in corrected], indent=2))
        return

    for radio in corrected:
        click.echo(
            f"{radio.info or radio.uuid:<28} down {format_frequency(radio.downlink):>18}  "
            f"up {format_frequency(radio.uplink):>18}  mode {radio.mode or '-'}"
            f"{'  inverted' if radio.is_inverted else ''}"
        )


@main.command()
@click.option("--tle", required=True, type=click.Path(exists=True), help="Path to TLE file")
@click.option("--satellite", required=True, help="Satellite name (must match name in TLE file)")
@observer_options
@click.option("--time", "time_str", type=str, help="Time (YYYY-MM-DD HH:MM:SS UTC, default: now)")
@click.pass_obj
def position(
    settings: PredictorSettings,
    tle: str,
    satellite: str,
    lat: Optional[float],
    lon: Optional[float],
    alt: Optional[float],
    time_str: Optional[str],
) -> None:
    """Print one observer-relative position sample as JSON."""
    try:
        pos = _observer(settings, lat, lon, alt)
        time = _time(time_str)
        sat = _load_one(tle, satellite)

        async def run():
            with Predictor(settings) as predictor:
                return await predictor.get_sat_pos(sat, pos, time)

        sat_pos = asyncio.run(run())
    except (PredictorError, ValueError, OSError) as e:
        logger.error(f"Position query failed: {e}")
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    click.echo(json.dumps(sat_pos.to_dict(), indent=2))


@main.command()
@click.option("--tle", required=True, type=click.Path(exists=True), help="Path to TLE file")
@click.option("--satellite", required=True, help="Satellite name (must match name in TLE file)")
@observer_options
@click.option("--start-time", type=str, help="Start time (YYYY-MM-DD HH:MM:SS UTC, default: now)")
@click.option("--duration", default=15.0, type=float, help="Track length in minutes (default: 15)")
@click.pass_obj
def track(
    settings: PredictorSettings,
    tle: str,
    satellite: str,
    lat: Optional[float],
    lon: Optional[float],
    alt: Optional[float],
    start_time: Optional[str],
    duration: float,
) -> None:
    """Print a position track as JSON lines."""
    try:
        pos = _observer(settings, lat, lon, alt)
        start = _time(start_time)
        end = start + int(timedelta(minutes=duration).total_seconds() * 1000)
        sat = _load_one(tle, satellite)

        async def run():
            with Predictor(settings) as predictor:
                return await predictor.get_sat_track(sat, pos, start, end)

        positions = asyncio.run(run())
    except (PredictorError, ValueError, OSError) as e:
        logger.error(f"Track calculation failed: {e}")
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    for sat_pos in positions:
        click.echo(json.dumps(sat_pos.to_dict()))


@main.command("sample-tle")
@click.argument("output", type=click.Path())
def sample_tle(output: str) -> None:
    """Write a sample TLE file with a few amateur satellites."""
    try:
        create_sample_tle_file(output)
    except OSError as e:
        logger.error(f"Sample TLE creation failed: {e}")
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    click.echo(f"Sample TLE file written to {output}")


if __name__ == "__main__":
    main()
