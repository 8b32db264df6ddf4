"""
Core data models for the glideratio package.
"""

import math
from dataclasses import dataclass
from enum import Enum

# Sentinel for an undefined or unbounded glide ratio
INVALID_GR = 999

# Averaged glide ratios above this are reported as INVALID_GR
MAX_EFFICIENCY_SHOW = 200

# Per-sample travel outside this range (metres) is treated as sensor noise
MIN_SAMPLE_DISTANCE = 3
MAX_SAMPLE_DISTANCE = 150

RECORD_CAPACITY = 180
DEFAULT_WINDOW = 3


class AverageEffTime(Enum):
    """Averaging period of the rolling glide ratio, in samples (seconds)."""

    SECONDS_15 = 15
    SECONDS_30 = 30
    SECONDS_60 = 60
    SECONDS_90 = 90
    MINUTES_2 = 120
    MINUTES_3 = 180


class EffAltitudeSource(Enum):
    """Altitude used for the rolling glide ratio."""

    TE_ALTITUDE = "te"
    NAV_ALTITUDE = "nav"


class BufferState(Enum):
    """Fill state of the rolling sample buffer."""

    EMPTY = "empty"
    FILLING = "filling"
    FULL = "full"


@dataclass
class SampleRecord:
    """One slot of the rolling buffer."""

    distance: int = 0  # metres since previous sample
    altitude: int = 0  # metres
    te_altitude: int = 0  # metres, total energy


def is_valid_gr(value: float) -> bool:
    """True if value is a usable glide ratio (not unavailable, not INVALID_GR)."""
    return value != 0 and value != INVALID_GR and math.isfinite(value)
