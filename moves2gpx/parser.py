"""
Moveslink (.sml) export parser.

Streams the XML export, accumulates the telemetry fields of each sample
and writes the periodic samples selected by the emission policy to a
GPX file.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import BinaryIO, Iterator, List, NamedTuple, Optional, Union
from xml.etree.ElementTree import ParseError, XMLPullParser

from tqdm import tqdm

from .converter import parse_local_time, to_track_point
from .errors import (
    ConversionError,
    FieldConversionError,
    LocalTimeError,
    MalformedStreamError,
    NoPeriodicSamplesError,
)
from .exporter import GpxExporter
from .models import SampleField, SampleRecord, route

logger = logging.getLogger(__name__)

SAMPLE_TAG = "Sample"
READ_CHUNK_SIZE = 64 * 1024


class TokenKind(str, Enum):
    START = "start"
    CHARACTERS = "characters"
    END = "end"


class Token(NamedTuple):
    kind: TokenKind
    value: str  # element local name, or the text itself


def local_name(tag: str) -> str:
    """Strip the ``{namespace}`` part of an ElementTree tag."""
    return tag.rsplit("}", 1)[-1]


def _pull_events(stream: BinaryIO, chunk_size: int):
    parser = XMLPullParser(events=("start", "end"))
    try:
        while True:
            chunk = stream.read(chunk_size)
            if not chunk:
                break
            parser.feed(chunk)
            yield from parser.read_events()
        parser.close()
        yield from parser.read_events()
    except ParseError as e:
        raise MalformedStreamError(f"Malformed XML: {e}") from e


def iter_tokens(stream: BinaryIO, chunk_size: int = READ_CHUNK_SIZE) -> Iterator[Token]:
    """Yield start/characters/end tokens for an XML byte stream.

    A text run is reported once it is complete, i.e. just before the token
    that ends it. Whitespace-only runs are skipped. An element is detached
    from its parent once its trailing text has been reported, so only the
    currently open elements stay in memory.
    """
    open_elements = []
    # Element whose text (or tail, after its end tag) is still being read.
    pending = None
    pending_is_tail = False

    for event, element in _pull_events(stream, chunk_size):
        if pending is not None:
            text = pending.tail if pending_is_tail else pending.text
            if text and not text.isspace():
                yield Token(TokenKind.CHARACTERS, text)
            if pending_is_tail and open_elements:
                open_elements[-1].remove(pending)

        name = local_name(element.tag)
        if event == "start":
            open_elements.append(element)
            pending, pending_is_tail = element, False
            yield Token(TokenKind.START, name)
        else:
            open_elements.pop()
            pending, pending_is_tail = element, True
            yield Token(TokenKind.END, name)


class EmissionPolicy:
    """Decides which periodic samples become track points.

    The first periodic sample is always emitted. After it, periodic
    samples are suppressed until a cadence value has been seen anywhere
    in the stream; from then on every periodic sample is emitted.
    """

    def __init__(self):
        self.writer_opened = False
        self.dumped = False
        self.cadence_seen = False

    def observe(self, record: SampleRecord):
        """Record cadence availability after every character update."""
        if not self.cadence_seen and record.has_cadence():
            self.cadence_seen = True

    def should_emit(self) -> bool:
        """Whether the periodic sample ending now is emitted."""
        emit = self.cadence_seen or not self.dumped
        if emit:
            self.dumped = True
        return emit


@dataclass
class ConversionResult:
    """Outcome of converting one export."""

    output_path: Path
    points_written: int = 0
    samples_dropped: int = 0


class MoveParser:
    """Convert one Moveslink export into one GPX file."""

    def __init__(self, stream: BinaryIO, output_dir: Union[str, Path] = "."):
        self.stream = stream
        self.output_dir = Path(output_dir)

    def convert(self) -> ConversionResult:
        """Run the conversion.

        Raises:
            MalformedStreamError: the input is not well-formed XML.
            LocalTimeError: the local start time cannot be parsed.
            NoPeriodicSamplesError: no periodic sample was found.
            OutputError: the GPX file could not be created or written.
        """
        record = SampleRecord()
        policy = EmissionPolicy()
        active_field: Optional[SampleField] = None
        exporter: Optional[GpxExporter] = None
        samples_dropped = 0

        try:
            for token in iter_tokens(self.stream):
                if token.kind is TokenKind.START:
                    active_field = route(token.value)
                elif token.kind is TokenKind.CHARACTERS:
                    if active_field is not None:
                        record.set(active_field, token.value)
                        policy.observe(record)
                elif (
                    token.kind is TokenKind.END
                    and token.value == SAMPLE_TAG
                    and record.is_periodic()
                ):
                    if not policy.writer_opened:
                        exporter = self._open_exporter(record)
                        policy.writer_opened = True
                    if policy.should_emit():
                        if not self._emit(record, exporter):
                            samples_dropped += 1
                    else:
                        logger.debug("Skipping periodic sample before cadence lock")

            if exporter is None:
                raise NoPeriodicSamplesError()
            exporter.finish()
        finally:
            if exporter is not None:
                exporter.close()

        return ConversionResult(
            output_path=exporter.filepath,
            points_written=exporter.points_written,
            samples_dropped=samples_dropped,
        )

    def _open_exporter(self, record: SampleRecord) -> GpxExporter:
        # The header's DateTime is the only local time in the export; every
        # sample time is UTC.
        text = record.get(SampleField.LOCAL_TIME)
        try:
            local_time = parse_local_time(text)
        except (ValueError, OverflowError) as e:
            raise LocalTimeError(f"Could not parse local time {text!r}: {e}") from e
        return GpxExporter.for_local_time(self.output_dir, local_time)

    def _emit(self, record: SampleRecord, exporter: GpxExporter) -> bool:
        try:
            point = to_track_point(record)
        except FieldConversionError as e:
            logger.warning(f"Dropping sample ({e.field}): {e.cause}")
            logger.debug(f"Dropped sample values: {record.snapshot()}")
            return False
        exporter.write_point(point)
        return True


def convert(stream: BinaryIO, output_dir: Union[str, Path] = ".") -> ConversionResult:
    """Convert a Moveslink export stream to a GPX file in ``output_dir``."""
    return MoveParser(stream, output_dir).convert()


class BatchConverter:
    """Convert several exports strictly one after another.

    The first fatal error stops the batch; files after it are not touched.
    """

    def __init__(self, output_dir: Union[str, Path] = ".", show_progress: bool = True):
        self.output_dir = Path(output_dir)
        self.show_progress = show_progress
        self.results: List[ConversionResult] = []

    def convert_files(self, files: List[Path]) -> List[ConversionResult]:
        """Convert each file in order and return their conversion results."""
        self.results = []
        for file_path in tqdm(
            files,
            desc="Converting moves",
            disable=not self.show_progress,
            leave=False,
        ):
            logger.info(f"Converting {file_path}")
            try:
                with open(file_path, "rb") as stream:
                    result = convert(stream, self.output_dir)
            except ConversionError as e:
                logger.error(f"Failed to convert {file_path}: {e}")
                raise
            self.results.append(result)

        logger.info(f"Converted {len(self.results)} of {len(files)} files")
        return self.results
