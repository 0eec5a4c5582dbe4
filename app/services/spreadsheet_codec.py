"""
Spreadsheet decoding.

Turns uploaded bytes into rows of ``{column name: cell value}`` (first sheet
only, header row as keys) and re-serialises a workbook's first sheet as CSV
text for summarisation. xlsx/xlsm workbooks are read with openpyxl, anything
that decodes as text is treated as CSV.
"""

import csv
import io
import re
from datetime import date, datetime, time, timedelta
from typing import Any

import openpyxl

from app.utils.logger import setup_logger

logger = setup_logger("spreadsheet_codec")

ZIP_SIGNATURE = b"PK\x03\x04"
OLE2_SIGNATURE = b"\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1"

CSV_MIME_TYPES = {"text/csv", "application/csv", "text/plain"}
EXCEL_MIME_TYPES = {
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "application/vnd.ms-excel",
    "application/vnd.ms-excel.sheet.macroenabled.12",
}

_INT_RE = re.compile(r"^[+-]?\d+$")
_FLOAT_RE = re.compile(r"^[+-]?(\d+\.\d*|\.\d+|\d+)([eE][+-]?\d+)?$")


class SpreadsheetDecodeError(ValueError):
    """Raised when bytes cannot be read as a workbook or CSV table."""


def is_workbook(raw: bytes) -> bool:
    return raw.startswith(ZIP_SIGNATURE)


def _decode_text(raw: bytes) -> str:
    if raw.startswith(OLE2_SIGNATURE):
        raise SpreadsheetDecodeError(
            "Legacy .xls workbooks are not supported, save the file as .xlsx or .csv"
        )
    if b"\x00" in raw[:4096]:
        raise SpreadsheetDecodeError("File is neither an xlsx workbook nor CSV text")
    try:
        return raw.decode("utf-8-sig")
    except UnicodeDecodeError:
        logger.debug("Content is not UTF-8, falling back to latin-1")
        return raw.decode("latin-1")


def _coerce_text_cell(value: str) -> Any:
    stripped = value.strip()
    if _INT_RE.match(stripped):
        return int(stripped)
    if _FLOAT_RE.match(stripped):
        return float(stripped)
    upper = stripped.upper()
    if upper in ("TRUE", "FALSE"):
        return upper == "TRUE"
    return value


def _json_cell(value: Any) -> Any:
    if isinstance(value, datetime | date | time):
        return value.isoformat()
    if isinstance(value, timedelta):
        return value.total_seconds()
    return value


def _is_empty(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value == "")


def _header_keys(header_row: tuple) -> list[str]:
    """Column names from the header row; blanks and duplicates get suffixes."""
    keys: list[str] = []
    seen: dict[str, int] = {}
    for cell in header_row:
        base = "__EMPTY" if _is_empty(cell) else str(_json_cell(cell))
        count = seen.get(base, 0)
        seen[base] = count + 1
        keys.append(base if count == 0 else f"{base}_{count}")
    return keys


def _rows_to_mappings(rows: list[tuple], coerce_text: bool) -> list[dict[str, Any]]:
    if not rows:
        return []
    keys = _header_keys(rows[0])
    records = []
    for row in rows[1:]:
        record = {}
        for index, value in enumerate(row):
            if _is_empty(value):
                continue
            key = keys[index] if index < len(keys) else f"__EMPTY_{index}"
            if coerce_text and isinstance(value, str):
                value = _coerce_text_cell(value)
            record[key] = _json_cell(value)
        if record:
            records.append(record)
    return records


def _first_sheet_rows(raw: bytes) -> list[tuple]:
    try:
        workbook = openpyxl.load_workbook(io.BytesIO(raw), read_only=True, data_only=True)
    except Exception as e:
        raise SpreadsheetDecodeError(f"Could not open workbook: {e}") from e
    try:
        if not workbook.sheetnames:
            return []
        sheet = workbook[workbook.sheetnames[0]]
        return [tuple(row) for row in sheet.iter_rows(values_only=True)]
    finally:
        workbook.close()


def _csv_rows(text: str) -> list[tuple]:
    sample = text[:4096]
    try:
        dialect = csv.Sniffer().sniff(sample, delimiters=",;\t")
    except csv.Error:
        dialect = csv.excel
    try:
        return [tuple(row) for row in csv.reader(io.StringIO(text), dialect)]
    except csv.Error as e:
        raise SpreadsheetDecodeError(f"Could not parse CSV content: {e}") from e


def decode_rows(raw: bytes) -> list[dict[str, Any]]:
    """Decode the first sheet (or the CSV table) into row mappings."""
    if is_workbook(raw):
        rows = _first_sheet_rows(raw)
        return _rows_to_mappings(rows, coerce_text=False)
    return _rows_to_mappings(_csv_rows(_decode_text(raw)), coerce_text=True)


def workbook_to_csv(raw: bytes) -> str:
    """First sheet of a workbook as CSV text; CSV input is returned as text."""
    if not is_workbook(raw):
        return _decode_text(raw)

    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    for row in _first_sheet_rows(raw):
        writer.writerow(["" if value is None else _json_cell(value) for value in row])
    return buffer.getvalue()


def decode_csv_text(raw: bytes) -> str:
    return _decode_text(raw)
