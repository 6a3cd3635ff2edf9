"""
Streaming GPX 1.1 writer for converted Moveslink track points.

The document is written incrementally: the prelude when the exporter is
opened, one <trkpt> per exported point, and the closing tags when the
exporter is finished. Output is indented with two spaces and uses CRLF
line endings.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Iterable, Tuple, Union
from xml.etree.ElementTree import Element, SubElement
from xml.sax.saxutils import escape

from .errors import OutputError
from .models import TrackPoint
from .utils import format_number

logger = logging.getLogger(__name__)

GPX_NAMESPACE = "http://www.topografix.com/GPX/1/1"
GPXDATA_NAMESPACE = "http://www.cluetrust.com/XML/GPXDATA/1/0"
GPXTPX_NAMESPACE = "http://www.garmin.com/xmlschemas/TrackPointExtension/v1"
XSI_NAMESPACE = "http://www.w3.org/2001/XMLSchema-instance"
SCHEMA_LOCATION = (
    "http://www.topografix.com/GPX/1/1 "
    "http://www.topografix.com/GPX/1/1/gpx.xsd "
    "http://www.cluetrust.com/XML/GPXDATA/1/0 "
    "http://www.cluetrust.com/Schemas/gpxdata10.xsd "
    "http://www.garmin.com/xmlschemas/TrackPointExtension/v1 "
    "http://www.garmin.com/xmlschemas/TrackPointExtensionv1.xsd"
)
CREATOR = "Movescount - http://www.movescount.com"
TRACK_NAME = "Move"
FILENAME_FORMAT = "Move_%Y_%m_%d_%H_%M_%S_Running.gpx"

XML_DECLARATION = '<?xml version="1.0" encoding="utf-8" standalone="no"?>'
INDENT = "  "
NEWLINE = "\r\n"

# What the writer emitted last; decides how the next end tag is laid out.
_START, _TEXT, _END = "start", "text", "end"

_ATTRIBUTE_ENTITIES = {'"': "&quot;"}


def gpx_filename(local_time: datetime) -> str:
    """Name of the GPX file for a move that started at ``local_time``."""
    return local_time.strftime(FILENAME_FORMAT)


def format_time(time_utc: datetime) -> str:
    """RFC 3339 UTC time with millisecond precision and a Z suffix."""
    millis = time_utc.microsecond // 1000
    return f"{time_utc.strftime('%Y-%m-%dT%H:%M:%S')}.{millis:03d}Z"


def _attributes(attributes: Iterable[Tuple[str, str]]) -> str:
    return "".join(
        f' {name}="{escape(value, _ATTRIBUTE_ENTITIES)}"' for name, value in attributes
    )


class GpxExporter:
    """Write one GPX track, point by point, to a file."""

    def __init__(self, filepath: Union[str, Path]):
        self.filepath = Path(filepath)
        self.points_written = 0
        self._file = None
        self._open_tags = []
        self._state = _END

    @classmethod
    def for_local_time(
        cls, output_dir: Union[str, Path], local_time: datetime
    ) -> "GpxExporter":
        """Create and open the exporter for a move started at ``local_time``."""
        exporter = cls(Path(output_dir) / gpx_filename(local_time))
        exporter.open()
        return exporter

    def open(self):
        """Create the file (replacing any existing one) and write the prelude."""
        try:
            self._file = open(self.filepath, "w", encoding="utf-8", newline="")
        except OSError as e:
            raise OutputError(f"Could not create {self.filepath}: {e}") from e

        logger.info(f"Writing GPX file: {self.filepath}")
        self._write(XML_DECLARATION)
        self._start(
            "gpx",
            [
                ("xmlns", GPX_NAMESPACE),
                ("xmlns:gpxdata", GPXDATA_NAMESPACE),
                ("xmlns:gpxtpx", GPXTPX_NAMESPACE),
                ("xmlns:xsi", XSI_NAMESPACE),
                ("version", "1.1"),
                ("creator", CREATOR),
                ("xsi:schemaLocation", SCHEMA_LOCATION),
            ],
        )
        self._start("trk")
        self._start("name")
        self._characters(TRACK_NAME)
        self._end()
        self._start("trkseg")

    def write_point(self, point: TrackPoint):
        """Append one <trkpt> to the open track segment."""
        self._write_element(self._trackpoint_element(point))
        self.points_written += 1

    def finish(self):
        """Close trkseg, trk and gpx, then close the file."""
        self._end()  # trkseg
        self._end()  # trk
        self._end()  # gpx
        self.close()
        logger.info(f"Finished {self.filepath} with {self.points_written} track points")

    def close(self):
        """Close the underlying file without writing anything further."""
        if self._file is None:
            return
        try:
            self._file.close()
        except OSError as e:
            raise OutputError(f"Could not write {self.filepath}: {e}") from e
        finally:
            self._file = None

    @property
    def is_open(self) -> bool:
        return self._file is not None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()

    def _trackpoint_element(self, point: TrackPoint) -> Element:
        trkpt = Element("trkpt")
        trkpt.set("lat", format_number(point.latitude))
        trkpt.set("lon", format_number(point.longitude))

        SubElement(trkpt, "ele").text = format_number(point.altitude)
        SubElement(trkpt, "time").text = format_time(point.time_utc)

        extensions = SubElement(trkpt, "extensions")
        tpx = SubElement(extensions, "gpxtpx:TrackPointExtension")
        if point.heart_rate is not None:
            SubElement(tpx, "gpxtpx:hr").text = format_number(point.heart_rate)

        if point.has_cadence:
            SubElement(extensions, "gpxdata:cadence").text = format_number(
                point.cadence
            )

        SubElement(extensions, "gpxdata:temp").text = format_number(point.temperature)

        # Distance and altitude extensions are only written alongside cadence.
        if point.has_cadence:
            SubElement(extensions, "gpxdata:distance").text = format_number(
                point.distance
            )
            SubElement(extensions, "gpxdata:altitude").text = format_number(
                point.altitude
            )

        SubElement(extensions, "gpxdata:seaLevelPressure").text = format_number(
            point.sea_level_pressure
        )
        SubElement(extensions, "gpxdata:speed").text = format_number(point.speed)
        SubElement(extensions, "gpxdata:verticalSpeed").text = format_number(
            point.vertical_speed
        )
        return trkpt

    def _write_element(self, element: Element):
        self._start(element.tag, element.attrib.items())
        if element.text:
            self._characters(element.text)
        for child in element:
            self._write_element(child)
        self._end()

    def _start(self, tag: str, attributes: Iterable[Tuple[str, str]] = ()):
        self._close_start_tag()
        depth = len(self._open_tags)
        self._write(f"{NEWLINE}{INDENT * depth}<{tag}{_attributes(attributes)}")
        self._open_tags.append(tag)
        self._state = _START

    def _characters(self, text: str):
        self._close_start_tag()
        self._write(escape(text))
        self._state = _TEXT

    def _end(self):
        tag = self._open_tags.pop()
        if self._state == _START:
            self._write(" />")
        elif self._state == _TEXT:
            self._write(f"</{tag}>")
        else:
            self._write(f"{NEWLINE}{INDENT * len(self._open_tags)}</{tag}>")
        self._state = _END

    def _close_start_tag(self):
        if self._state == _START:
            self._write(">")

    def _write(self, text: str):
        try:
            self._file.write(text)
        except OSError as e:
            raise OutputError(f"Could not write {self.filepath}: {e}") from e
