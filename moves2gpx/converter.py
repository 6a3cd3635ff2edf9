"""
Unit conversion and validation of accumulated Moveslink samples.
Turns the raw text of a sample into a TrackPoint ready for GPX output.
"""

import math
import re
from datetime import datetime, timezone

from dateutil.parser import isoparse

from .errors import FieldConversionError
from .models import SampleField, SampleRecord, TrackPoint
from .utils import to_u16

# Triple point of water. The conventional Kelvin offset is 273.15; the
# exported Celsius values keep the constant earlier releases used.
KELVIN_OFFSET = 273.16

# Decimal or exponent notation, inf or nan. No padding, no digit separators.
FLOAT_LITERAL = re.compile(
    r"[+-]?(?:inf|infinity|nan|(?:\d+\.?\d*|\.\d+)(?:e[+-]?\d+)?)", re.IGNORECASE
)


def parse_float(text: str) -> float:
    """Parse a numeric field, rejecting text float() would otherwise tolerate."""
    if FLOAT_LITERAL.fullmatch(text) is None:
        raise ValueError(f"invalid float literal: {text!r}")
    return float(text)


def degrees_from_native(value: float) -> float:
    """Convert the watch's angular unit (radians) to degrees."""
    return value * 180.0 / math.pi


def per_minute_from_per_second(value: float) -> int:
    """Convert an events/second rate to a rounded events/minute count."""
    return to_u16(value * 60.0)


def celsius_from_kelvin(value: float) -> float:
    return value - KELVIN_OFFSET


def millibar_from_pascals(value: float) -> int:
    return to_u16(value / 100.0)


def parse_utc_time(text: str) -> datetime:
    """Parse an ISO 8601 timestamp carrying an explicit offset into UTC."""
    parsed = isoparse(text)
    if parsed.tzinfo is None:
        raise ValueError(f"timestamp {text!r} has no UTC offset")
    return parsed.astimezone(timezone.utc)


def parse_local_time(text: str) -> datetime:
    """Parse the device-local start time, keeping only its wall-clock fields."""
    return isoparse(text).replace(tzinfo=None)


def _text(record: SampleRecord, sample_field: SampleField) -> str:
    return record.get(sample_field)


def _float(record: SampleRecord, sample_field: SampleField, name: str) -> float:
    try:
        return parse_float(_text(record, sample_field))
    except ValueError as e:
        raise FieldConversionError(name, e) from e


def _optional_rate(record: SampleRecord, sample_field: SampleField, name: str):
    text = _text(record, sample_field)
    if not text:
        return None
    try:
        return per_minute_from_per_second(parse_float(text))
    except (ValueError, OverflowError) as e:
        raise FieldConversionError(name, e) from e


def to_track_point(record: SampleRecord) -> TrackPoint:
    """Convert the current sample values into a TrackPoint.

    Raises:
        FieldConversionError: naming the first field that is empty,
            not numeric, or out of range after conversion.
    """
    cadence = _optional_rate(record, SampleField.CADENCE, "cadence")
    heart_rate = _optional_rate(record, SampleField.HEART_RATE, "heart rate")

    latitude = degrees_from_native(_float(record, SampleField.LATITUDE, "latitude"))
    longitude = degrees_from_native(
        _float(record, SampleField.LONGITUDE, "longitude")
    )

    try:
        time_utc = parse_utc_time(_text(record, SampleField.TIME_UTC))
    except (ValueError, OverflowError) as e:
        raise FieldConversionError("time", e) from e

    temperature = celsius_from_kelvin(
        _float(record, SampleField.TEMPERATURE, "temperature")
    )
    distance = _float(record, SampleField.DISTANCE, "distance")
    altitude = _float(record, SampleField.ALTITUDE, "altitude")

    pressure_pa = _float(record, SampleField.SEA_LEVEL_PRESSURE, "sea level pressure")
    try:
        sea_level_pressure = millibar_from_pascals(pressure_pa)
    except (ValueError, OverflowError) as e:
        raise FieldConversionError("sea level pressure", e) from e

    speed = _float(record, SampleField.SPEED, "speed")
    vertical_speed = _float(record, SampleField.VERTICAL_SPEED, "vertical speed")

    return TrackPoint(
        latitude=latitude,
        longitude=longitude,
        time_utc=time_utc,
        heart_rate=heart_rate,
        cadence=cadence,
        temperature=temperature,
        distance=distance,
        altitude=altitude,
        sea_level_pressure=sea_level_pressure,
        speed=speed,
        vertical_speed=vertical_speed,
    )
