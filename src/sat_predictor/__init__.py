"""
Satellite Pass Predictor

Finds visibility windows of satellites over a ground observer, tracks the
progress of passes in flight and Doppler-corrects transmitter frequencies.
"""

from .models import GeoPos, SatPass, SatPos, SatRadio
from .orbit import TLESatellite
from .passes import PassFinder, calculate_passes
from .predictor import Predictor
from .publisher import ReplayChannel

__version__ = "0.1.0"

__all__ = [
    "GeoPos",
    "SatPass",
    "SatPos",
    "SatRadio",
    "TLESatellite",
    "PassFinder",
    "calculate_passes",
    "Predictor",
    "ReplayChannel",
]
