"""Tabular file normalization

Converts an uploaded CSV or Excel file into plain comma-separated text
that the schema-inference collaborator can read. Only the first sheet
of a workbook is used.
"""

import logging
import os
import re
from io import BytesIO
from typing import Iterable, List, Sequence

import pandas as pd

from src.domain.tabular_import import SourceKind, TabularDocument

logger = logging.getLogger(__name__)

SPREADSHEET_EXTENSIONS = (".xlsx", ".xls")

_NEEDS_QUOTES = re.compile(r'[\n\r,"\\]')


class TabularFileError(Exception):
    """Upload could not be read as a spreadsheet"""


def file_extension(file_name: str) -> str:
    return os.path.splitext(file_name or "")[1].lower()


def escape_cell(value: str) -> str:
    """Quote a cell holding a comma, quote, backslash or line break"""
    escaped = value.replace('"', '""')
    if _NEEDS_QUOTES.search(value):
        return f'"{escaped}"'
    return escaped


def is_blank_row(row: Iterable) -> bool:
    return all(str(cell if cell is not None else "").strip() == "" for cell in row)


def rows_to_text(rows: Sequence[Sequence[str]]) -> str:
    return "\n".join(",".join(escape_cell(str(cell)) for cell in row) for row in rows)


def decode_text(content: bytes) -> str:
    return content.decode("utf-8-sig", errors="replace")


def read_first_sheet(content: bytes, file_name: str) -> TabularDocument:
    """
    Read the first worksheet as strings

    Empty cells become empty strings; rows with nothing but blanks are
    dropped.

    Raises:
        TabularFileError: unreadable workbook or no sheets
    """
    engine = "openpyxl" if file_extension(file_name) == ".xlsx" else None
    try:
        workbook = pd.ExcelFile(BytesIO(content), engine=engine)
    except Exception as e:
        raise TabularFileError(f"Could not read {file_name}: {e}") from e

    if not workbook.sheet_names:
        raise TabularFileError("No sheets found in the Excel file")

    sheet_name = workbook.sheet_names[0]
    df = workbook.parse(sheet_name, header=None, dtype=str, keep_default_na=False)
    df = df.fillna("")

    rows: List[List[str]] = [
        [str(cell) for cell in row]
        for row in df.itertuples(index=False, name=None)
        if not is_blank_row(row)
    ]
    logger.info(f"Normalized sheet '{sheet_name}' of {file_name}: {len(rows)} rows")

    return TabularDocument(
        content=rows_to_text(rows),
        source_kind=SourceKind.XLSX,
        sheet_name=str(sheet_name),
        row_count=len(rows),
    )


def normalize_tabular_file(file_name: str, content: bytes) -> TabularDocument:
    """
    Produce the canonical text rendering of an upload

    .xlsx/.xls go through the first-sheet reader; .csv and any other
    extension are passed through as text.
    """
    if file_extension(file_name) in SPREADSHEET_EXTENSIONS:
        return read_first_sheet(content, file_name)
    return TabularDocument(content=decode_text(content), source_kind=SourceKind.CSV)
