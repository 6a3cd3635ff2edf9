"""
Data models for Suunto Moveslink telemetry samples and GPX track points.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, Optional

from pydantic import BaseModel, Field

U16_MAX = 65535


class SampleField(str, Enum):
    """Telemetry fields collected from a Moveslink export."""

    LOCAL_TIME = "local_time"
    LATITUDE = "latitude"
    LONGITUDE = "longitude"
    VERTICAL_SPEED = "vertical_speed"
    CADENCE = "cadence"
    HEART_RATE = "heart_rate"
    TEMPERATURE = "temperature"
    SEA_LEVEL_PRESSURE = "sea_level_pressure"
    ALTITUDE = "altitude"
    DISTANCE = "distance"
    SPEED = "speed"
    ELAPSED_TIME = "elapsed_time"
    SAMPLE_TYPE = "sample_type"
    TIME_UTC = "time_utc"


# Element local name -> accumulator field. GPSAltitude and Altitude
# both feed the altitude field.
TAG_FIELDS: Dict[str, SampleField] = {
    "DateTime": SampleField.LOCAL_TIME,
    "GPSAltitude": SampleField.ALTITUDE,
    "Latitude": SampleField.LATITUDE,
    "Longitude": SampleField.LONGITUDE,
    "VerticalSpeed": SampleField.VERTICAL_SPEED,
    "Cadence": SampleField.CADENCE,
    "HR": SampleField.HEART_RATE,
    "Temperature": SampleField.TEMPERATURE,
    "SeaLevelPressure": SampleField.SEA_LEVEL_PRESSURE,
    "Altitude": SampleField.ALTITUDE,
    "Distance": SampleField.DISTANCE,
    "Speed": SampleField.SPEED,
    "Time": SampleField.ELAPSED_TIME,
    "SampleType": SampleField.SAMPLE_TYPE,
    "UTC": SampleField.TIME_UTC,
}

PERIODIC_SAMPLE_TYPE = "periodic"


def route(tag_name: str) -> Optional[SampleField]:
    """Return the field fed by an element, or None for unrecognized tags."""
    return TAG_FIELDS.get(tag_name)


@dataclass
class SampleRecord:
    """Most recently seen text for every recognized field.

    One record is used for a whole export and is never reset between
    samples: a field that a sample does not supply keeps the value it had
    in an earlier sample (or in the header, for the local time).
    """

    values: Dict[SampleField, str] = field(
        default_factory=lambda: {f: "" for f in SampleField}
    )

    def set(self, sample_field: SampleField, text: str):
        self.values[sample_field] = text

    def get(self, sample_field: SampleField) -> str:
        return self.values[sample_field]

    def is_periodic(self) -> bool:
        return self.values[SampleField.SAMPLE_TYPE] == PERIODIC_SAMPLE_TYPE

    def has_cadence(self) -> bool:
        return self.values[SampleField.CADENCE] != ""

    def snapshot(self) -> Dict[SampleField, str]:
        """Copy of the current values, for diagnostics."""
        return dict(self.values)


class TrackPoint(BaseModel):
    """Validated, unit-converted GPS fix ready for GPX output."""

    latitude: float  # degrees
    longitude: float  # degrees
    time_utc: datetime
    heart_rate: Optional[int] = Field(None, ge=0, le=U16_MAX)  # bpm
    cadence: Optional[int] = Field(None, ge=0, le=U16_MAX)  # steps/min
    temperature: float  # Celsius
    distance: float  # m
    altitude: float  # m
    sea_level_pressure: int = Field(ge=0, le=U16_MAX)  # millibar
    speed: float  # m/s
    vertical_speed: float  # m/s

    @property
    def has_cadence(self) -> bool:
        return self.cadence is not None
