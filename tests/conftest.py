from datetime import datetime, timedelta

import pytest

from glideratio.parser.nmea0183 import calculate_checksum


def make_sentence(body):
    """Wrap a sentence body with $ and its checksum."""
    return f"${body}*{calculate_checksum(body)}"


def format_latitude(lat):
    hemi = "N" if lat >= 0 else "S"
    lat = abs(lat)
    degrees = int(lat)
    return f"{degrees:02d}{(lat - degrees) * 60:07.4f}", hemi


def format_longitude(lon):
    hemi = "E" if lon >= 0 else "W"
    lon = abs(lon)
    degrees = int(lon)
    return f"{degrees:03d}{(lon - degrees) * 60:07.4f}", hemi


def glide_lines(
    seconds=60,
    start_altitude=1500.0,
    sink=1.0,
    speed_knots=48.6,
    start=datetime(2026, 8, 19, 12, 0, 0),
):
    """NMEA lines of a straight glide to the north, one GGA and RMC per second.

    48.6 knots is 25 m/s, about 25 metres of travel per second.
    """
    lines = []
    lat0, lon0 = 46.5, 7.25
    metres_per_degree = 6371000.0 * 3.141592653589793 / 180
    for i in range(seconds):
        timestamp = start + timedelta(seconds=i)
        lat, lat_hemi = format_latitude(lat0 + i * 25.0 / metres_per_degree)
        lon, lon_hemi = format_longitude(lon0)
        hhmmss = timestamp.strftime("%H%M%S")
        altitude = start_altitude - i * sink
        lines.append(
            make_sentence(
                f"GPGGA,{hhmmss},{lat},{lat_hemi},{lon},{lon_hemi},1,09,0.9,"
                f"{altitude:.1f},M,48.0,M,,"
            )
        )
        lines.append(
            make_sentence(
                f"GPRMC,{hhmmss},A,{lat},{lat_hemi},{lon},{lon_hemi},"
                f"{speed_knots:.1f},0.0,{timestamp.strftime('%d%m%y')},,"
            )
        )
    return lines


@pytest.fixture
def glide_log():
    return glide_lines()
