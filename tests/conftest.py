"""
Shared fixtures for moves2gpx tests.
"""

import pytest

from moves2gpx.models import SampleField, SampleRecord

LOCAL_TIME = "2021-03-05 10:00:00"


def _sample(**overrides):
    sample = {
        "Latitude": "0.0",
        "Longitude": "0.0",
        "Altitude": "10.0",
        "Distance": "0",
        "Speed": "2.5",
        "VerticalSpeed": "0",
        "HR": "1.2",
        "Temperature": "300.0",
        "SeaLevelPressure": "101325",
        "UTC": "2021-03-05T18:00:00Z",
        "SampleType": "periodic",
    }
    for tag, text in overrides.items():
        if text is None:
            sample.pop(tag, None)
        else:
            sample[tag] = text
    return sample


def _sml(samples, local_time=LOCAL_TIME):
    lines = [
        '<?xml version="1.0" encoding="utf-8"?>',
        '<sml xmlns="http://www.suunto.com/schemas/sml">',
        "  <DeviceLog>",
        "    <Header>",
    ]
    if local_time is not None:
        lines.append(f"      <DateTime>{local_time}</DateTime>")
    lines += ["    </Header>", "    <Samples>"]
    for sample in samples:
        lines.append("      <Sample>")
        for tag, text in sample.items():
            lines.append(f"        <{tag}>{text}</{tag}>")
        lines.append("      </Sample>")
    lines += ["    </Samples>", "  </DeviceLog>", "</sml>"]
    return "\n".join(lines).encode("utf-8")


@pytest.fixture
def make_sample():
    """Build a periodic sample dict; pass tag=None to leave a tag out."""
    return _sample


@pytest.fixture
def make_sml():
    """Build an .sml document (bytes) from a list of sample dicts."""
    return _sml


@pytest.fixture
def sml_file(tmp_path):
    """Write an .sml document to a temporary file and return its path."""

    def write(content: bytes, name: str = "move.sml"):
        path = tmp_path / name
        path.write_bytes(content)
        return path

    return write


@pytest.fixture
def filled_record():
    """SampleRecord holding a complete, valid periodic sample."""
    record = SampleRecord()
    values = {
        SampleField.LOCAL_TIME: "2021-03-05T10:00:00",
        SampleField.LATITUDE: "0.0",
        SampleField.LONGITUDE: "0.0",
        SampleField.ALTITUDE: "10.0",
        SampleField.DISTANCE: "1500.5",
        SampleField.SPEED: "2.5",
        SampleField.VERTICAL_SPEED: "-0.25",
        SampleField.HEART_RATE: "1.2",
        SampleField.TEMPERATURE: "300.0",
        SampleField.SEA_LEVEL_PRESSURE: "101325",
        SampleField.TIME_UTC: "2021-03-05T18:00:00Z",
        SampleField.SAMPLE_TYPE: "periodic",
    }
    for sample_field, text in values.items():
        record.set(sample_field, text)
    return record
