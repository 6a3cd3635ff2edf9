"""
Moveslink to GPX conversion tool

Converts Suunto Moveslink (.sml) telemetry exports into GPX 1.1 track
files that can be uploaded to Strava and other fitness services.
"""

__version__ = "0.3.0"

from .parser import MoveParser, BatchConverter, ConversionResult, convert
from .converter import to_track_point
from .exporter import GpxExporter

__all__ = [
    "MoveParser",
    "BatchConverter",
    "ConversionResult",
    "convert",
    "to_track_point",
    "GpxExporter",
]
