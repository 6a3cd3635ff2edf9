"""
Exceptions raised while converting Moveslink exports.
"""


class ConversionError(Exception):
    """Fatal error: the current file cannot be converted."""


class MalformedStreamError(ConversionError):
    """The input is not a well-formed XML document."""


class LocalTimeError(ConversionError):
    """The local start time needed to name the output file is unusable."""


class NoPeriodicSamplesError(ConversionError):
    """The export contained no periodic samples, so nothing was written."""

    def __init__(self, message: str = "no periodic samples found"):
        super().__init__(message)


class OutputError(ConversionError):
    """The GPX file could not be created or written."""


class FieldConversionError(ValueError):
    """A single sample field failed to parse or convert.

    Only the affected sample is dropped; conversion of the file continues.
    """

    def __init__(self, field: str, cause: Exception):
        self.field = field
        self.cause = cause
        super().__init__(f"{field}: {cause}")
