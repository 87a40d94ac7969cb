"""Drilling stand dashboard: ingestion pipeline for stand-level telemetry."""

from drilldash.errors import DecodeError, IngestError, NoValidDataError, ParseError
from drilldash.pipeline import load_dashboard

__version__ = "0.1.0"

__all__ = [
    "DecodeError",
    "IngestError",
    "NoValidDataError",
    "ParseError",
    "load_dashboard",
]
