"""
Tests for unit conversion and sample validation.
"""

import math
from datetime import datetime, timezone

import pytest

from moves2gpx.converter import (
    celsius_from_kelvin,
    degrees_from_native,
    millibar_from_pascals,
    parse_float,
    parse_local_time,
    parse_utc_time,
    per_minute_from_per_second,
    to_track_point,
)
from moves2gpx.errors import FieldConversionError
from moves2gpx.models import SampleField


class TestUnitConversions:
    """Tests for the individual unit conversions."""

    @pytest.mark.parametrize("value", [0.0, 0.5, -1.2, math.pi, 0.6981317])
    def test_degrees(self, value):
        assert degrees_from_native(value) == value * 180 / math.pi

    def test_degrees_of_pi(self):
        assert degrees_from_native(math.pi) == pytest.approx(180.0)

    def test_celsius_uses_triple_point(self):
        assert celsius_from_kelvin(300.0) == 300.0 - 273.16
        assert celsius_from_kelvin(273.16) == 0.0

    def test_per_minute(self):
        assert per_minute_from_per_second(1.2) == 72
        assert per_minute_from_per_second(0.0) == 0
        assert per_minute_from_per_second(2.5) == 150

    def test_per_minute_rounds_half_away_from_zero(self):
        # 0.025 * 60 == 1.5
        assert per_minute_from_per_second(0.025) == 2

    def test_per_minute_out_of_range(self):
        with pytest.raises(ValueError):
            per_minute_from_per_second(1100.0)
        with pytest.raises(ValueError):
            per_minute_from_per_second(-1.0)

    def test_millibar(self):
        assert millibar_from_pascals(101325) == 1013
        assert millibar_from_pascals(101250) == 1013
        assert millibar_from_pascals(99949) == 999

    def test_millibar_out_of_range(self):
        with pytest.raises(ValueError):
            millibar_from_pascals(10_000_000)


class TestParseFloat:
    """Tests for the numeric field grammar."""

    @pytest.mark.parametrize(
        "text, expected",
        [
            ("10", 10.0),
            ("-0.25", -0.25),
            ("+1.", 1.0),
            (".5", 0.5),
            ("1E3", 1000.0),
            ("2.5e-1", 0.25),
        ],
    )
    def test_accepts(self, text, expected):
        assert parse_float(text) == expected

    def test_accepts_special_values(self):
        assert math.isinf(parse_float("inf"))
        assert math.isinf(parse_float("-Infinity"))
        assert math.isnan(parse_float("NaN"))

    @pytest.mark.parametrize(
        "text", [" 10 ", "10\n", "\t1.5", "1_0", "1_000.5", ".", "1e", "0x10", ""]
    )
    def test_rejects(self, text):
        with pytest.raises(ValueError):
            parse_float(text)


class TestTimeParsing:
    """Tests for timestamp parsing."""

    def test_utc_with_z(self):
        assert parse_utc_time("2021-03-05T18:00:00Z") == datetime(
            2021, 3, 5, 18, tzinfo=timezone.utc
        )

    def test_utc_with_offset_is_normalized(self):
        parsed = parse_utc_time("2021-03-05T20:00:00.250+02:00")
        assert parsed == datetime(2021, 3, 5, 18, 0, 0, 250000, tzinfo=timezone.utc)
        assert parsed.utcoffset().total_seconds() == 0

    def test_utc_without_offset_fails(self):
        with pytest.raises(ValueError):
            parse_utc_time("2021-03-05T18:00:00")

    @pytest.mark.parametrize(
        "text", ["2021-03-05 10:00:00", "2021-03-05T10:00:00", "2021-03-05T10:00:00.000"]
    )
    def test_local_time(self, text):
        assert parse_local_time(text) == datetime(2021, 3, 5, 10, 0, 0)

    def test_local_time_ignores_offset(self):
        assert parse_local_time("2021-03-05T10:00:00+01:00") == datetime(
            2021, 3, 5, 10, 0, 0
        )

    def test_local_time_empty(self):
        with pytest.raises(ValueError):
            parse_local_time("")


class TestToTrackPoint:
    """Tests for converting a full sample."""

    def test_converts_all_fields(self, filled_record):
        point = to_track_point(filled_record)

        assert point.latitude == 0.0
        assert point.longitude == 0.0
        assert point.time_utc == datetime(2021, 3, 5, 18, tzinfo=timezone.utc)
        assert point.heart_rate == 72
        assert point.cadence is None
        assert point.temperature == 300.0 - 273.16
        assert point.distance == 1500.5
        assert point.altitude == 10.0
        assert point.sea_level_pressure == 1013
        assert point.speed == 2.5
        assert point.vertical_speed == -0.25

    def test_latitude_longitude_in_degrees(self, filled_record):
        filled_record.set(SampleField.LATITUDE, "0.7")
        filled_record.set(SampleField.LONGITUDE, "-1.5")
        point = to_track_point(filled_record)
        assert point.latitude == 0.7 * 180 / math.pi
        assert point.longitude == -1.5 * 180 / math.pi

    def test_cadence_converted(self, filled_record):
        filled_record.set(SampleField.CADENCE, "1.4")
        assert to_track_point(filled_record).cadence == 84

    def test_empty_heart_rate_is_absent(self, filled_record):
        filled_record.set(SampleField.HEART_RATE, "")
        assert to_track_point(filled_record).heart_rate is None

    @pytest.mark.parametrize(
        "sample_field, text, name",
        [
            (SampleField.ALTITUDE, "abc", "altitude"),
            (SampleField.ALTITUDE, "", "altitude"),
            (SampleField.ALTITUDE, " 10 ", "altitude"),
            (SampleField.DISTANCE, "1_0", "distance"),
            (SampleField.HEART_RATE, " 1.2", "heart rate"),
            (SampleField.CADENCE, "1_4", "cadence"),
            (SampleField.LATITUDE, "north", "latitude"),
            (SampleField.LONGITUDE, "", "longitude"),
            (SampleField.TEMPERATURE, "warm", "temperature"),
            (SampleField.DISTANCE, "", "distance"),
            (SampleField.SPEED, "fast", "speed"),
            (SampleField.VERTICAL_SPEED, "", "vertical speed"),
            (SampleField.SEA_LEVEL_PRESSURE, "", "sea level pressure"),
            (SampleField.SEA_LEVEL_PRESSURE, "1e9", "sea level pressure"),
            (SampleField.HEART_RATE, "lots", "heart rate"),
            (SampleField.HEART_RATE, "2000", "heart rate"),
            (SampleField.CADENCE, "x", "cadence"),
            (SampleField.TIME_UTC, "yesterday", "time"),
            (SampleField.TIME_UTC, "2021-03-05T18:00:00", "time"),
        ],
    )
    def test_field_errors(self, filled_record, sample_field, text, name):
        filled_record.set(sample_field, text)
        with pytest.raises(FieldConversionError) as excinfo:
            to_track_point(filled_record)

        assert excinfo.value.field == name
        assert isinstance(excinfo.value.cause, (ValueError, OverflowError))
        assert str(excinfo.value).startswith(f"{name}: ")
