"""
Glide computer configuration.
"""

from dataclasses import dataclass

from glideratio.core.models import AverageEffTime, EffAltitudeSource


@dataclass
class GlideComputerConfig:
    """Settings read when the glide ratio computers are (re)initialised."""

    average_eff_time: AverageEffTime = AverageEffTime.SECONDS_90
    eff_altitude: EffAltitudeSource = EffAltitudeSource.TE_ALTITUDE
    gr_filter_factor: float = 0.5
    sample_interval: float = 1.0  # seconds between telemetry ticks

    def __post_init__(self):
        """Validate configuration."""
        if not 0 < self.gr_filter_factor < 1:
            raise ValueError("gr_filter_factor must be between 0 and 1")
        if self.sample_interval <= 0:
            raise ValueError("sample_interval must be positive")

    @property
    def use_total_energy(self) -> bool:
        return self.eff_altitude == EffAltitudeSource.TE_ALTITUDE
