"""
Upload pipeline: parse, normalize, aggregate and adapt one file in a single
synchronous pass.
"""

import hashlib
import logging
from typing import Callable, MutableMapping

from drilldash import config
from drilldash.adapter import build_dashboard
from drilldash.errors import IngestError
from drilldash.models import DashboardData
from drilldash.normalize import normalize_records
from drilldash.parser import read_records

logger = logging.getLogger(__name__)


def load_dashboard(filename: str, content: bytes) -> DashboardData:
    """Build the dashboard dataset for an uploaded file.

    Raises DecodeError when the bytes cannot be read and NoValidDataError
    when no row carries the mandatory stand fields.
    """
    logger.info("Processing %s (%d bytes)", filename, len(content))
    records = read_records(filename, content)
    normalized = normalize_records(records)
    dashboard = build_dashboard(normalized)
    logger.info(
        "Loaded %d stands for well %s from %d raw rows",
        len(dashboard.stands), dashboard.well_id, normalized.raw_count,
    )
    return dashboard


def upload_key(filename: str, content: bytes) -> str:
    """Identity of one upload; any change to the bytes gives a new key."""
    return f"{filename}:{hashlib.sha256(content).hexdigest()}"


def ingest_upload(
    state: MutableMapping,
    uploaded_file,
    loader: Callable[[str, bytes], DashboardData] = load_dashboard,
) -> bool:
    """Process an uploaded file into ``state`` unless it was already seen.

    On success ``state["dashboard"]`` is replaced and ``state["upload_error"]``
    cleared. On IngestError only the error message is stored, the previous
    dashboard stays. Returns True when the file was processed.
    """
    content = uploaded_file.getvalue()
    key = upload_key(uploaded_file.name, content)
    if key == state.get("upload_key"):
        return False

    state["upload_key"] = key
    try:
        dashboard = loader(uploaded_file.name, content)
    except IngestError as e:
        logger.error("Upload of %s failed: %s", uploaded_file.name, e)
        state["upload_error"] = config.UPLOAD_ERROR_MESSAGE.format(e)
        return True

    state["dashboard"] = dashboard
    state["upload_error"] = None
    return True
