"""
GlideRatio - glide ratio estimation and polar fitting for gliders
"""

from glideratio.computer.glide_ratio import GlideRatioCalculator, update_gr
from glideratio.core.config import GlideComputerConfig
from glideratio.core.models import INVALID_GR, AverageEffTime, EffAltitudeSource
from glideratio.polar.polar import PolarCoefficients, PolarInfo

__version__ = "0.1.0"

__all__ = [
    "GlideRatioCalculator",
    "update_gr",
    "GlideComputerConfig",
    "INVALID_GR",
    "AverageEffTime",
    "EffAltitudeSource",
    "PolarCoefficients",
    "PolarInfo",
]
