#!/usr/bin/env python3
"""
Replay an NMEA flight log and report its glide ratios.
"""
import logging
import os
import sys

# Add the src directory to the Python path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..', 'src')))

from glideratio.analysis.flight_analyzer import FlightAnalyzer
from glideratio.core.config import GlideComputerConfig
from glideratio.core.models import AverageEffTime, INVALID_GR
from glideratio.parser.nmea0183 import NMEA0183Parser

PERIODS = {member.value: member for member in AverageEffTime}


def analyze_file(filepath, period):
    """Replay a flight log through the glide ratio computers."""
    config = GlideComputerConfig(average_eff_time=period)
    sentences = NMEA0183Parser().parse_file(filepath)
    print(f"\nAnalyzing {filepath}...")
    print(f"Parsed sentences: {len(sentences)}")

    analyzer = FlightAnalyzer(config)
    df = analyzer.analyze(sentences)
    summary = analyzer.summarize(df)

    print(f"Fixes used: {summary['samples']}")
    if not summary['samples']:
        return

    print(f"From: {df['timestamp'].iloc[0]}")
    print(f"To: {df['timestamp'].iloc[-1]}")
    print(f"\nDistance flown: {summary['total_distance'] / 1000:.1f} km")
    print(f"Altitude lost: {summary['altitude_lost']:.0f} m")
    if summary['overall_gr'] == INVALID_GR:
        print("Overall glide ratio: ---")
    else:
        print(f"Overall glide ratio: {summary['overall_gr']:.1f}")
    if summary['last_gr_average'] is not None:
        print(f"Last {period.value}s glide ratio: {summary['last_gr_average']:.1f}")


if __name__ == '__main__':
    if len(sys.argv) not in (2, 3):
        print("Usage: analyze_flight.py <nmea_file> [period_seconds]")
        sys.exit(1)

    filepath = sys.argv[1]
    if not os.path.exists(filepath):
        print(f"Error: File not found: {filepath}")
        sys.exit(1)

    seconds = int(sys.argv[2]) if len(sys.argv) == 3 else 90
    if seconds not in PERIODS:
        print(f"Error: period must be one of {sorted(PERIODS)}")
        sys.exit(1)

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    analyze_file(filepath, PERIODS[seconds])
