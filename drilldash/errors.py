"""Errors raised while ingesting an uploaded drilling file."""


class IngestError(Exception):
    """Base class for every error surfaced at the upload boundary."""


class DecodeError(IngestError):
    """The file could not be read at the byte or workbook level."""


# The row parser reports decode failures under this name
ParseError = DecodeError


class NoValidDataError(IngestError):
    """The file decoded but no row carried the mandatory stand fields."""
