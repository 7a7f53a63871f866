"""
Utility functions for the satellite pass predictor.

This module provides logging setup, time conversion and formatting helpers
used throughout the package.
"""

from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Union
import logging
import os

logger = logging.getLogger(__name__)

MILLIS_PER_SECOND = 1000
MILLIS_PER_MINUTE = 60 * MILLIS_PER_SECOND
MILLIS_PER_HOUR = 60 * MILLIS_PER_MINUTE


def setup_logging(level: str = "INFO", log_file: Optional[str] = None) -> None:
    """
    Set up logging configuration.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_file: Optional log file path

    Environment Variables:
        SAT_PREDICTOR_LOG_LEVEL: Override log level (DEBUG, INFO, WARNING, ERROR)
    """
    env_level = os.environ.get("SAT_PREDICTOR_LOG_LEVEL")
    if env_level:
        level = env_level
    log_level = getattr(logging, level.upper(), logging.INFO)

    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

    logger.info(f"Logging configured at {level} level")


def parse_datetime(date_string: str) -> datetime:
    """
    Parse datetime string in various formats.

    Args:
        date_string: Date string to parse

    Returns:
        Parsed datetime object (naive, UTC)

    Raises:
        ValueError: If date string cannot be parsed
    """
    formats = [
        "%Y-%m-%d %H:%M:%S",
        "%Y-%m-%d %H:%M",
        "%Y-%m-%dT%H:%M:%S",
        "%Y-%m-%dT%H:%M:%SZ",
        "%Y-%m-%dT%H:%M:%S.%fZ",
        "%Y-%m-%d",
    ]

    for fmt in formats:
        try:
            dt = datetime.strptime(date_string, fmt)
            if dt.tzinfo is None:
                dt = dt.replace(tzinfo=timezone.utc)
            return dt.astimezone(timezone.utc).replace(tzinfo=None)
        except ValueError:
            continue

    raise ValueError(f"Could not parse datetime string: {date_string}")


def to_millis(dt: datetime) -> int:
    """Convert a naive UTC (or aware) datetime to epoch milliseconds."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return int(round(dt.timestamp() * MILLIS_PER_SECOND))


def from_millis(millis: int) -> datetime:
    """Convert epoch milliseconds to a naive UTC datetime."""
    return datetime.fromtimestamp(millis / MILLIS_PER_SECOND, tz=timezone.utc).replace(
        tzinfo=None
    )


def get_current_millis() -> int:
    """
    Get current UTC time.

    Returns:
        Current epoch time in milliseconds
    """
    return to_millis(datetime.now(timezone.utc))


def format_millis(millis: int) -> str:
    """Format epoch milliseconds as an ISO-8601 UTC string."""
    return from_millis(millis).strftime("%Y-%m-%dT%H:%M:%SZ")


def format_duration(seconds: float) -> str:
    """
    Format duration in seconds to human-readable string.

    Args:
        seconds: Duration in seconds

    Returns:
        Formatted duration string
    """
    if seconds < 60:
        return f"{seconds:.1f}s"
    elif seconds < 3600:
        minutes = seconds / 60
        return f"{minutes:.1f}m"
    else:
        hours = seconds / 3600
        return f"{hours:.1f}h"


def format_frequency(hertz: Optional[int]) -> str:
    """Format a frequency in Hz as MHz, or a dash when the link is absent."""
    if hertz is None:
        return "-"
    return f"{hertz / 1_000_000:.6f} MHz"


def create_sample_tle_file(output_file: Union[str, Path]) -> None:
    """
    Create a sample TLE file with a few LEO satellites and one geostationary.

    Args:
        output_file: Path to create sample TLE file
    """
    sample_tle_data = """ISS (ZARYA)
1 25544U 98067A   24001.00000000  .00002182  00000-0  40864-4 0  9990
2 25544  51.6461 339.7939 0001220  92.8340 267.3124 15.49309239426382
NOAA 18
1 28654U 05018A   24001.00000000  .00000012  00000-0  28110-4 0  9997
2 28654  99.0581 161.3857 0013414  73.9446 286.3932 14.12501637967188
NOAA 19
1 33591U 09005A   24001.00000000  .00000150  00000-0  10865-3 0  9993
2 33591  99.1003  62.6912 0013467 283.3722  76.5937 14.12935702769842
QO-100
1 43700U 18090A   24001.00000000  .00000138  00000-0  00000+0 0  9991
2 43700   0.0160 276.2990 0001520 218.5280 237.9890  1.00271655 18702"""

    output_path = Path(output_file)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, "w") as f:
        f.write(sample_tle_data)

    logger.info(f"Created sample TLE file: {output_path}")
