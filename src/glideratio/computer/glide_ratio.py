"""
Glide ratio computation.

Two independent estimators live here:

- GlideRatioCalculator keeps a fixed-size circular buffer of recent samples
  and reports the average glide ratio over the configured period.
- update_gr smooths an instantaneous glide ratio derived from the height
  above a reference leg. It is a pure function; the caller threads the
  previous value through successive calls.

Both report INVALID_GR when the ratio is undefined or too large to be
meaningful. The rolling calculator also reports 0 while no ratio is
available yet.
"""

import logging
from copy import copy
from dataclasses import replace
from typing import List, Optional

from glideratio.core.config import GlideComputerConfig
from glideratio.core.models import (
    DEFAULT_WINDOW,
    INVALID_GR,
    MAX_EFFICIENCY_SHOW,
    MAX_SAMPLE_DISTANCE,
    MIN_SAMPLE_DISTANCE,
    RECORD_CAPACITY,
    AverageEffTime,
    BufferState,
    SampleRecord,
    is_valid_gr,
)

logger = logging.getLogger(__name__)

# Consecutive rejected samples tolerated before the error counter restarts
MAX_CONSECUTIVE_ERRORS = 2


class GlideRatioCalculator:
    """Rolling average glide ratio over the most recent samples."""

    def __init__(self, config: Optional[GlideComputerConfig] = None):
        self.config = config or GlideComputerConfig()
        self._records = [SampleRecord() for _ in range(RECORD_CAPACITY)]
        self.initialize(self.config.average_eff_time)

    def initialize(self, average_eff_time) -> None:
        """Reset the buffer for a new averaging period.

        Args:
            average_eff_time: An AverageEffTime choice. Anything else falls
                back to the minimum window so the misconfiguration is evident.
                A valid choice is also recorded in the config.
        """
        if isinstance(average_eff_time, AverageEffTime):
            size = average_eff_time.value
            if self.config.average_eff_time != average_eff_time:
                self.config = replace(self.config, average_eff_time=average_eff_time)
        else:
            logger.warning(
                f"Unknown averaging period {average_eff_time!r}, "
                f"using {DEFAULT_WINDOW} samples"
            )
            size = DEFAULT_WINDOW

        assert size >= 3
        assert size <= len(self._records)

        for record in self._records:
            record.distance = record.altitude = record.te_altitude = 0
        self._size = size
        self._start = 0
        self._state = BufferState.EMPTY
        self._total_distance = 0
        self._errors = 0

    @property
    def size(self) -> int:
        return self._size

    @property
    def state(self) -> BufferState:
        return self._state

    @property
    def start(self) -> int:
        """Slot of the most recent sample, -1 while empty."""
        if self._state == BufferState.EMPTY:
            return -1
        return self._start

    @property
    def valid(self) -> bool:
        """True once the buffer holds a full window."""
        return self._state == BufferState.FULL

    @property
    def total_distance(self):
        return self._total_distance

    @property
    def rejected_in_row(self) -> int:
        """Consecutive out of range samples seen by this calculator."""
        return self._errors

    @property
    def records(self) -> List[SampleRecord]:
        """Copy of the active window, oldest sample first."""
        if self._state == BufferState.EMPTY:
            return []
        if self._state == BufferState.FILLING:
            window = self._records[: self._start + 1]
        else:
            oldest = self._oldest_slot()
            window = self._records[oldest : self._size] + self._records[:oldest]
        return [copy(record) for record in window]

    def add(self, distance, altitude, te_altitude) -> None:
        """Add one sample.

        Args:
            distance: Metres travelled since the previous sample
            altitude: Navigation altitude in metres
            te_altitude: Total energy altitude in metres
        """
        if distance < MIN_SAMPLE_DISTANCE or distance > MAX_SAMPLE_DISTANCE:
            # Noise: drop the sample, the window itself is kept
            if self._errors > MAX_CONSECUTIVE_ERRORS:
                self._errors = 0
                return
            self._errors += 1
            logger.debug(f"Ignoring sample with distance {distance}")
            return
        self._errors = 0

        if self._state == BufferState.EMPTY:
            self._start = 0
            self._state = BufferState.FILLING
        else:
            self._start += 1
            if self._start >= self._size:
                self._start = 0

        record = self._records[self._start]
        # Slots are only recycled once the window is full
        if self._state == BufferState.FULL:
            self._total_distance -= record.distance
        self._total_distance += distance
        record.distance = distance
        record.altitude = altitude
        record.te_altitude = te_altitude

        if self._start == self._size - 1:
            self._state = BufferState.FULL

    def _oldest_slot(self) -> int:
        if self._state == BufferState.FULL and self._start < self._size - 1:
            return self._start + 1
        return 0

    def calculate(self, use_total_energy: Optional[bool] = None) -> float:
        """Average glide ratio over the window.

        Args:
            use_total_energy: Prefer the energy compensated path. Defaults to
                the configured altitude source.

        Returns:
            float: The glide ratio, 0 if not available yet, or INVALID_GR
            when no altitude was lost or the ratio exceeds
            MAX_EFFICIENCY_SHOW.
        """
        if use_total_energy is None:
            use_total_energy = self.config.use_total_energy

        if self._state == BufferState.EMPTY:
            return 0.0
        if self._state == BufferState.FILLING and self._start == 0:
            return 0.0  # a single sample has no altitude difference

        oldest = self._records[self._oldest_slot()]
        newest = self._records[self._start]

        if use_total_energy and oldest.te_altitude > 0 and newest.te_altitude > 0:
            altdiff = oldest.altitude - newest.altitude
        else:
            altdiff = oldest.te_altitude - newest.te_altitude

        if altdiff == 0:
            return INVALID_GR

        eff = self._total_distance / altdiff
        if abs(eff) > MAX_EFFICIENCY_SHOW:
            return INVALID_GR
        return eff


def low_pass_filter(y_last: float, x_in: float, fact: float) -> float:
    """Single pole low pass filter, a larger fact weights x_in more."""
    return (1.0 - fact) * y_last + fact * x_in


def limit_gr(gr: float) -> float:
    """Clamp a glide ratio to a magnitude of at least 1 and at most INVALID_GR.

    update_gr never passes a magnitude above MAX_EFFICIENCY_SHOW, so the
    INVALID_GR fold only applies to direct callers.
    """
    if abs(gr) > INVALID_GR:
        return INVALID_GR
    if 0 <= gr < 1:
        return 1.0
    if -1 < gr < 0:
        return -1.0
    return gr


def update_gr(
    gr: float, leg_distance: float, height_above_leg: float, filter_factor: float
) -> float:
    """
    Smooth the glide ratio with a new observation.

    Filtering happens on the glide angle (height over distance), the inverse
    of the ratio, which stays linear when the ratio grows very large.

    Args:
        gr: Previous glide ratio, or INVALID_GR if there was none
        leg_distance: Horizontal distance of the observation (m)
        height_above_leg: Height lost over that distance (m)
        filter_factor: Weight of the new observation, 0 < filter_factor < 1

    Returns:
        float: The new glide ratio, or INVALID_GR
    """
    if leg_distance <= 0:
        return gr

    glide_angle = height_above_leg / leg_distance
    if is_valid_gr(gr):
        glide_angle = low_pass_filter(1.0 / gr, glide_angle, filter_factor)

    if abs(glide_angle) >= 1.0 / MAX_EFFICIENCY_SHOW:
        return limit_gr(1.0 / glide_angle)
    return INVALID_GR
