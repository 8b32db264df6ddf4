"""
NMEA 0183 parser module.

This module implements a parser for the NMEA 0183 sentences a glide computer
needs to build its telemetry:
- RMC (Recommended Minimum Navigation Information)
- GGA (Global Positioning System Fix Data)
- PGRMZ (Garmin barometric altitude)
"""

from dataclasses import dataclass
from datetime import datetime, time
from typing import Iterable, List, Optional, Tuple

FEET_TO_METERS = 0.3048
KNOTS_TO_MS = 1852.0 / 3600.0


@dataclass
class NMEA0183Error(Exception):
    """Base class for NMEA 0183 parsing errors."""

    message: str


@dataclass
class ChecksumError(NMEA0183Error):
    """Raised when checksum validation fails."""

    sentence: str
    computed: str
    received: str


def validate_checksum(data: str, checksum: str) -> bool:
    """Validate NMEA checksum."""
    return calculate_checksum(data) == checksum.strip().upper()


def calculate_checksum(data: str) -> str:
    """Calculate NMEA checksum."""
    checksum = 0
    for char in data:
        checksum ^= ord(char)
    return f"{checksum:02X}"


def split_fields(raw_sentence: str) -> List[str]:
    """Validate a raw sentence and return its comma separated fields."""
    if not raw_sentence.startswith("$"):
        raise NMEA0183Error("Sentence must start with $")

    # Need at least $XXXXX
    if len(raw_sentence) < 6:
        raise NMEA0183Error("Invalid sentence identifier")

    if "*" in raw_sentence:
        sentence, checksum = raw_sentence.rsplit("*", 1)
        if not validate_checksum(sentence[1:], checksum):
            raise ChecksumError(
                message="Checksum validation failed",
                sentence=raw_sentence,
                computed=calculate_checksum(sentence[1:]),
                received=checksum,
            )
    else:
        sentence = raw_sentence

    fields = sentence.split(",")
    if len(fields) < 2:
        raise NMEA0183Error("Invalid sentence format")
    return fields


def _parse_time(time_str: str) -> Optional[time]:
    if not time_str:
        return None
    return time(
        hour=int(time_str[0:2]),
        minute=int(time_str[2:4]),
        second=int(time_str[4:6]),
    )


def _parse_position(
    lat: str, lat_hemi: str, lon: str, lon_hemi: str
) -> Tuple[Optional[float], Optional[float]]:
    if not (lat and lat_hemi and lon and lon_hemi):
        return None, None

    latitude = float(lat[:2]) + float(lat[2:]) / 60
    if lat_hemi == "S":
        latitude = -latitude

    longitude = float(lon[:3]) + float(lon[3:]) / 60
    if lon_hemi == "W":
        longitude = -longitude
    return latitude, longitude


@dataclass
class NMEASentence:
    """Base class for NMEA sentences."""

    talker_id: str
    sentence_type: str
    raw: str
    timestamp: Optional[datetime] = None

    @classmethod
    def parse(cls, raw_sentence: str) -> "NMEASentence":
        """Parse the sentence header."""
        fields = split_fields(raw_sentence)
        sentence_id = fields[0][1:]  # Remove $
        return NMEASentence(
            talker_id=sentence_id[:2],
            sentence_type=sentence_id[2:],
            raw=raw_sentence,
        )


@dataclass
class RMCSentence(NMEASentence):
    """
    RMC - Recommended Minimum Navigation Information

    Format:
    $GPRMC,hhmmss.ss,A,llll.ll,a,yyyyy.yy,a,x.x,x.x,ddmmyy,x.x,a*hh
    1    = UTC of position fix
    2    = Status (A = active or V = void)
    3    = Latitude
    4    = N or S
    5    = Longitude
    6    = E or W
    7    = Speed over ground in knots
    8    = Track made good in degrees True
    9    = Date
    10   = Magnetic variation degrees
    11   = E or W
    """

    status: str = None
    latitude: float = None
    longitude: float = None
    sog: float = None
    cog: float = None

    @classmethod
    def parse(cls, raw_sentence: str) -> "RMCSentence":
        """Parse RMC sentence."""
        base = super().parse(raw_sentence)
        fields = split_fields(raw_sentence)

        if len(fields) < 10:
            raise NMEA0183Error("Invalid RMC sentence")

        time_utc = _parse_time(fields[1])
        if time_utc and fields[9]:
            date_utc = datetime.strptime(fields[9], "%d%m%y").date()
            timestamp = datetime.combine(date_utc, time_utc)
        else:
            timestamp = None

        lat, lon = _parse_position(fields[3], fields[4], fields[5], fields[6])

        return cls(
            talker_id=base.talker_id,
            sentence_type=base.sentence_type,
            raw=raw_sentence,
            timestamp=timestamp,
            status=fields[2],
            latitude=lat,
            longitude=lon,
            sog=float(fields[7]) if fields[7] else None,
            cog=float(fields[8]) if fields[8] else None,
        )

    @property
    def is_active(self) -> bool:
        return self.status == "A"

    @property
    def speed_ms(self) -> Optional[float]:
        return self.sog * KNOTS_TO_MS if self.sog is not None else None


@dataclass
class GGASentence(NMEASentence):
    """
    GGA - Global Positioning System Fix Data

    Format:
    $GPGGA,hhmmss.ss,llll.ll,a,yyyyy.yy,a,q,nn,x.x,x.x,M,x.x,M,x.x,xxxx*hh
    1    = UTC of position fix
    2    = Latitude
    3    = N or S
    4    = Longitude
    5    = E or W
    6    = Fix quality (0 = invalid)
    7    = Number of satellites in use
    8    = Horizontal dilution of precision
    9    = Antenna altitude above mean sea level
    10   = Units of altitude, M = metres
    """

    time_utc: Optional[time] = None
    latitude: float = None
    longitude: float = None
    fix_quality: int = 0
    satellites: int = None
    altitude: float = None

    @classmethod
    def parse(cls, raw_sentence: str) -> "GGASentence":
        """Parse GGA sentence."""
        base = super().parse(raw_sentence)
        fields = split_fields(raw_sentence)

        if len(fields) < 11:
            raise NMEA0183Error("Invalid GGA sentence")

        lat, lon = _parse_position(fields[2], fields[3], fields[4], fields[5])

        return cls(
            talker_id=base.talker_id,
            sentence_type=base.sentence_type,
            raw=raw_sentence,
            time_utc=_parse_time(fields[1]),
            latitude=lat,
            longitude=lon,
            fix_quality=int(fields[6]) if fields[6] else 0,
            satellites=int(fields[7]) if fields[7] else None,
            altitude=float(fields[9]) if fields[9] else None,
        )

    @property
    def has_fix(self) -> bool:
        return self.fix_quality > 0


@dataclass
class RMZSentence(NMEASentence):
    """
    PGRMZ - Garmin barometric (pressure) altitude

    Format:
    $PGRMZ,x.x,f,x*hh
    1    = Altitude
    2    = Units, f = feet, m = metres
    3    = Position fix dimensions
    """

    altitude: float = None  # metres

    @classmethod
    def parse(cls, raw_sentence: str) -> "RMZSentence":
        """Parse PGRMZ sentence."""
        base = super().parse(raw_sentence)
        fields = split_fields(raw_sentence)

        if len(fields) < 3:
            raise NMEA0183Error("Invalid RMZ sentence")

        altitude = None
        if fields[1]:
            altitude = float(fields[1])
            if fields[2].lower() == "f":
                altitude *= FEET_TO_METERS

        return cls(
            talker_id=base.talker_id,
            sentence_type=base.sentence_type,
            raw=raw_sentence,
            altitude=altitude,
        )


class NMEA0183Parser:
    """Parser for NMEA 0183 sentences."""

    def __init__(self, fail_unknown=False):
        """Initialize the parser.

        Args:
            fail_unknown (bool): If True, raise NMEA0183Error when encountering
                               unknown sentence types. If False, skip them.
        """
        self.fail_unknown = fail_unknown
        # Map of sentence types to their parser classes
        self._sentence_parsers = {
            "RMC": RMCSentence,
            "GGA": GGASentence,
            "RMZ": RMZSentence,
        }

    def parse_sentence(self, line):
        """Parse a single NMEA sentence.

        Args:
            line (str): The NMEA sentence to parse

        Returns:
            NMEASentence: The parsed sentence, or None if the sentence is invalid
            or unknown and fail_unknown is False

        Raises:
            NMEA0183Error: If the sentence is invalid or unknown and fail_unknown is True
        """
        if not line.startswith("$"):
            return None

        try:
            sentence_type = line[3:6]  # 'RMC' from '$GPRMC', 'RMZ' from '$PGRMZ'

            if sentence_type not in self._sentence_parsers:
                if self.fail_unknown:
                    raise NMEA0183Error(f"Unsupported sentence type: {sentence_type}")
                return None

            return self._sentence_parsers[sentence_type].parse(line)

        except NMEA0183Error:
            raise
        except (ValueError, IndexError) as e:
            raise NMEA0183Error(f"Failed to parse sentence: {str(e)}")

    def parse_lines(self, lines: Iterable[str]) -> List[NMEASentence]:
        """Parse NMEA lines, skipping blank, unknown and corrupt ones.

        Raises:
            NMEA0183Error: If fail_unknown is True and a sentence cannot be parsed
        """
        sentences = []
        for line in lines:
            line = line.strip()
            if not line:
                continue

            try:
                sentence = self.parse_sentence(line)
                if sentence:
                    sentences.append(sentence)
            except NMEA0183Error:
                if self.fail_unknown:
                    raise
                continue

        return sentences

    def parse_file(self, filepath: str) -> List[NMEASentence]:
        """Parse a file containing NMEA sentences.

        Args:
            filepath (str): Path to the file containing NMEA sentences

        Returns:
            List[NMEASentence]: List of parsed sentences
        """
        with open(filepath, "r") as f:
            return self.parse_lines(f)
