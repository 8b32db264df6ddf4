"""
Glider polar: sink rate as a quadratic function of airspeed.

Airspeeds are in m/s, sink rates are positive magnitudes in m/s.
"""

from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

import numpy as np


@dataclass(frozen=True)
class PolarCoefficients:
    """Coefficients of sink = a * v**2 + b * v + c."""

    a: float
    b: float
    c: float

    @classmethod
    def from_3vw(cls, v1, v2, v3, w1, w2, w3) -> "PolarCoefficients":
        """Fit the quadratic through three (airspeed, sink rate) points.

        Equal airspeeds make the system singular; the result then carries
        NaN coefficients and is not valid.
        """
        if (v1 - v2) * (v1 - v3) * (v2 - v3) == 0:
            return cls(float("nan"), float("nan"), float("nan"))

        vandermonde = np.vander(np.array([v1, v2, v3], dtype=float), 3)
        a, b, c = np.linalg.solve(vandermonde, np.array([w1, w2, w3], dtype=float))
        return cls(float(a), float(b), float(c))

    def is_valid(self) -> bool:
        return bool(np.all(np.isfinite([self.a, self.b, self.c]))) and self.a >= 0

    def sink_rate(self, v):
        """Sink rate at airspeed v (scalar or array)."""
        return np.polyval([self.a, self.b, self.c], v)

    @property
    def min_sink_speed(self) -> float:
        if not self.is_valid() or self.a == 0:
            return float("nan")
        return -self.b / (2 * self.a)

    @property
    def min_sink_rate(self) -> float:
        return float(self.sink_rate(self.min_sink_speed))

    @property
    def best_glide_speed(self) -> float:
        """Airspeed where the tangent from the origin touches the polar."""
        if not self.is_valid() or self.a == 0 or self.c / self.a < 0:
            return float("nan")
        return float(np.sqrt(self.c / self.a))

    @property
    def best_glide_ratio(self) -> float:
        v = self.best_glide_speed
        sink = self.sink_rate(v)
        if not np.isfinite(v) or sink <= 0:
            return float("nan")
        return float(v / sink)


@dataclass(frozen=True)
class PolarInfo:
    """Three calibration points of a polar, plus descriptive data."""

    v1: float
    w1: float
    v2: float
    w2: float
    v3: float
    w3: float
    name: str = ""
    reference_mass: Optional[float] = None  # kg
    wing_area: Optional[float] = None  # m^2

    @classmethod
    def from_points(
        cls, points: Sequence[Tuple[float, float]], **kwargs
    ) -> "PolarInfo":
        """Build from three (airspeed, sink rate) pairs."""
        if len(points) != 3:
            raise ValueError("A polar needs exactly three calibration points")
        (v1, w1), (v2, w2), (v3, w3) = points
        return cls(v1=v1, w1=w1, v2=v2, w2=w2, v3=v3, w3=w3, **kwargs)

    @property
    def points(self) -> Tuple[Tuple[float, float], ...]:
        return ((self.v1, self.w1), (self.v2, self.w2), (self.v3, self.w3))

    @property
    def wing_loading(self) -> Optional[float]:
        """Reference wing loading in kg/m^2, if mass and area are known."""
        if not self.reference_mass or not self.wing_area:
            return None
        return self.reference_mass / self.wing_area

    def calculate_coefficients(self) -> PolarCoefficients:
        return PolarCoefficients.from_3vw(
            self.v1, self.v2, self.v3, self.w1, self.w2, self.w3
        )

    def is_valid(self) -> bool:
        return self.calculate_coefficients().is_valid()
