"""
Replay of recorded telemetry through the glide ratio computers.
"""

import logging
from typing import Dict, List, Optional

import numpy as np
import pandas as pd

from glideratio.computer.glide_ratio import GlideRatioCalculator, update_gr
from glideratio.core.config import GlideComputerConfig
from glideratio.core.models import INVALID_GR, MAX_EFFICIENCY_SHOW, is_valid_gr
from glideratio.parser.nmea0183 import (
    GGASentence,
    NMEASentence,
    RMCSentence,
    RMZSentence,
)

logger = logging.getLogger(__name__)

EARTH_RADIUS = 6371000.0  # metres
GRAVITY = 9.81  # m/s^2

TRACK_COLUMNS = [
    "timestamp",
    "latitude",
    "longitude",
    "speed",
    "altitude",
    "te_altitude",
    "distance",
]


def haversine_distance(lat1, lon1, lat2, lon2):
    """Great circle distance in metres, element-wise for arrays."""
    lat1, lon1, lat2, lon2 = map(np.radians, (lat1, lon1, lat2, lon2))
    dlat = lat2 - lat1
    dlon = lon2 - lon1
    a = np.sin(dlat / 2) ** 2 + np.cos(lat1) * np.cos(lat2) * np.sin(dlon / 2) ** 2
    return 2 * EARTH_RADIUS * np.arcsin(np.sqrt(a))


def total_energy_altitude(altitude, speed):
    """Altitude plus the height the kinetic energy at speed would buy."""
    return altitude + np.asarray(speed) ** 2 / (2 * GRAVITY)


class FlightAnalyzer:
    def __init__(self, config: Optional[GlideComputerConfig] = None):
        self.config = config or GlideComputerConfig()

    def build_track(self, sentences: List[NMEASentence]) -> pd.DataFrame:
        """Turn parsed sentences into one row per retained fix.

        Fixes come from active RMC sentences; the altitude is the latest
        barometric (PGRMZ) reading, else the latest GPS (GGA) altitude.
        Fixes closer together than the configured sample interval are skipped.
        """
        rows = []
        gps_altitude = None
        baro_altitude = None
        last_time = None

        for sentence in sentences:
            if isinstance(sentence, RMZSentence):
                baro_altitude = sentence.altitude
            elif isinstance(sentence, GGASentence):
                if sentence.has_fix and sentence.altitude is not None:
                    gps_altitude = sentence.altitude
            elif isinstance(sentence, RMCSentence):
                if not sentence.is_active or sentence.timestamp is None:
                    continue
                if sentence.latitude is None or sentence.longitude is None:
                    continue
                altitude = baro_altitude if baro_altitude is not None else gps_altitude
                if altitude is None:
                    continue
                if last_time is not None:
                    elapsed = (sentence.timestamp - last_time).total_seconds()
                    if elapsed < self.config.sample_interval:
                        continue
                last_time = sentence.timestamp

                rows.append(
                    {
                        "timestamp": sentence.timestamp,
                        "latitude": sentence.latitude,
                        "longitude": sentence.longitude,
                        "speed": sentence.speed_ms or 0.0,
                        "altitude": altitude,
                    }
                )

        if not rows:
            return pd.DataFrame(columns=TRACK_COLUMNS)

        df = pd.DataFrame(rows)
        df["te_altitude"] = total_energy_altitude(df["altitude"], df["speed"])

        distance = haversine_distance(
            df["latitude"].shift(),
            df["longitude"].shift(),
            df["latitude"],
            df["longitude"],
        )
        df["distance"] = distance.fillna(0).round().astype(int)
        return df[TRACK_COLUMNS]

    def analyze(self, sentences: List[NMEASentence]) -> pd.DataFrame:
        """Replay a flight and add the averaged and instant glide ratios.

        Returns:
            DataFrame with the track columns plus gr_average and gr_instant
        """
        df = self.build_track(sentences)
        if df.empty:
            logger.warning("No usable fixes found")
            return df.assign(gr_average=[], gr_instant=[])

        calculator = GlideRatioCalculator(self.config)
        gr_instant = INVALID_GR
        previous_te = None
        averages = []
        instants = []

        for row in df.itertuples(index=False):
            altitude = int(round(row.altitude))
            te_altitude = int(round(row.te_altitude))
            calculator.add(row.distance, altitude, te_altitude)
            averages.append(calculator.calculate())

            # Continuous glide ratio is always based on TE altitude
            if previous_te is not None:
                gr_instant = update_gr(
                    gr_instant,
                    row.distance,
                    previous_te - row.te_altitude,
                    self.config.gr_filter_factor,
                )
            previous_te = row.te_altitude
            instants.append(gr_instant)

        df["gr_average"] = averages
        df["gr_instant"] = instants
        logger.info(
            f"Replayed {len(df)} fixes with a {calculator.size} sample window"
        )
        return df

    def summarize(self, df: pd.DataFrame) -> Dict:
        """Overall figures of a replayed flight."""
        if df.empty:
            return {
                "samples": 0,
                "total_distance": 0,
                "altitude_lost": 0.0,
                "overall_gr": INVALID_GR,
                "last_gr_average": None,
            }

        total_distance = int(df["distance"].sum())
        altitude_lost = float(df["altitude"].iloc[0] - df["altitude"].iloc[-1])

        overall_gr = INVALID_GR
        if altitude_lost != 0:
            overall_gr = total_distance / altitude_lost
            if abs(overall_gr) > MAX_EFFICIENCY_SHOW:
                overall_gr = INVALID_GR

        last_gr_average = None
        if "gr_average" in df:
            valid = [gr for gr in df["gr_average"] if is_valid_gr(gr)]
            if valid:
                last_gr_average = valid[-1]

        return {
            "samples": len(df),
            "total_distance": total_distance,
            "altitude_lost": altitude_lost,
            "overall_gr": overall_gr,
            "last_gr_average": last_gr_average,
        }
