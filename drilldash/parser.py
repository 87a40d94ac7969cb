"""
Row parser: turns uploaded file bytes into an ordered list of records.

A record maps header name to the raw cell value. Text files keep every
value as a string; workbooks keep the native cell type. Nothing is
validated here.
"""

import io
import logging
from typing import Any, Dict, List

import numpy as np
import pandas as pd

from drilldash import config
from drilldash.errors import DecodeError

logger = logging.getLogger(__name__)

Record = Dict[str, Any]


def file_extension(filename: str) -> str:
    return filename.rsplit(".", 1)[-1].lower() if "." in filename else ""


def decode_text(content: bytes) -> str:
    """Decode uploaded text as UTF-8, tolerating a byte order mark."""
    try:
        return content.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise DecodeError(f"file is not valid UTF-8 text: {e}") from e


def parse_delimited_text(text: str, delimiter: str = config.TEXT_DELIMITER) -> List[Record]:
    """Parse tab-delimited text whose first line is the header row."""
    lines = text.splitlines()
    if not lines:
        return []

    headers = [h.strip() for h in lines[0].split(delimiter)]

    records = []
    for line in lines[1:]:
        if not line.strip():
            continue
        values = line.split(delimiter)
        # Short rows are padded with "", surplus cells are dropped
        record = {}
        for i, header in enumerate(headers):
            record[header] = values[i].strip() if i < len(values) else ""
        records.append(record)

    return records


def _cell_value(value):
    if isinstance(value, np.generic):
        return value.item()
    return value


def parse_workbook(content: bytes) -> List[Record]:
    """Parse the first sheet of an Excel workbook; its first row is the header."""
    try:
        sheet = pd.read_excel(io.BytesIO(content), sheet_name=0, header=None, dtype=object)
    except Exception as e:
        raise DecodeError(f"could not read workbook: {e}") from e

    if sheet.empty:
        return []

    header_row = sheet.iloc[0].tolist()
    headers = [None if pd.isna(h) else str(h).strip() for h in header_row]

    records = []
    for _, row in sheet.iloc[1:].iterrows():
        record = {}
        for header, value in zip(headers, row.tolist()):
            # Empty cells and unnamed columns are left out of the record
            if header is None or pd.isna(value):
                continue
            record[header] = _cell_value(value)
        records.append(record)

    return records


def read_records(filename: str, content: bytes) -> List[Record]:
    """Dispatch on the file extension and return the raw records."""
    extension = file_extension(filename)
    if extension in config.EXCEL_EXTENSIONS:
        logger.debug("Reading %s as Excel workbook", filename)
        records = parse_workbook(content)
    else:
        logger.debug("Reading %s as delimited text", filename)
        records = parse_delimited_text(decode_text(content))

    logger.info("Parsed %d raw rows from %s", len(records), filename)
    return records
