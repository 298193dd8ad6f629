"""
Spreadsheet Row Parser

Decodes an uploaded workbook into row records keyed by header text.
Only the first sheet is read and the header row is not validated:
missing columns simply come back as None from RowRecord.get().

Row numbers are the rows as the user sees them in the sheet. Blank rows
are dropped but not renumbered, so a blank line between data rows leaves
a gap (rows 2 and 4, not 2 and 3).

Supported formats:
    .xlsx   -> openpyxl
    .xls    -> xlrd (legacy BIFF workbooks)
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from io import BytesIO
from typing import Any, Dict, List, Optional

import openpyxl
import xlrd
from openpyxl.utils.datetime import from_excel

from .exceptions import SpreadsheetError, InvalidDateError

logger = logging.getLogger(__name__)

XLSX_MAGIC = b'PK\x03\x04'
XLS_MAGIC = b'\xd0\xcf\x11\xe0\xa1\xb1\x1a\xe1'

# Display formats accepted for visit dates typed as text
DATE_FORMATS = [
    '%Y-%m-%d',
    '%m/%d/%Y',
    '%m/%d/%y',
    '%m-%d-%Y',
    '%Y/%m/%d',
    '%B %d, %Y',
    '%b %d, %Y',
    '%d %B %Y',
    '%d %b %Y',
]

# Largest serial Excel can display (9999-12-31)
MAX_EXCEL_SERIAL = 2958465


@dataclass
class RowRecord:
    """
    One data row of the sheet.

    Attributes:
        row_number: 1-based spreadsheet row (the header is row 1)
        values: Header text -> cell value
    """
    row_number: int
    values: Dict[str, Any] = field(default_factory=dict)

    def get(self, column: str, default=None):
        return self.values.get(column, default)

    def text(self, column: str) -> Optional[str]:
        """Cell value as stripped text, or None when absent or blank."""
        value = self.values.get(column)
        if value is None:
            return None
        text = str(value).strip()
        return text or None


def parse_spreadsheet(data: bytes) -> List[RowRecord]:
    """
    Parse workbook bytes into row records.

    Args:
        data: Raw file contents

    Returns:
        List of RowRecord in sheet order, blank rows skipped

    Raises:
        SpreadsheetError: If the file is empty or cannot be decoded
    """
    if not data:
        raise SpreadsheetError('File is empty')

    if data.startswith(XLSX_MAGIC):
        rows = _read_xlsx(data)
    elif data.startswith(XLS_MAGIC):
        rows = _read_xls(data)
    else:
        raise SpreadsheetError('Unsupported file format (expected .xlsx or .xls)')

    records = _rows_to_records(rows)
    logger.debug(f"Parsed {len(records)} data rows from spreadsheet")
    return records


def to_iso_date(value) -> str:
    """
    Normalize a visit-date cell to YYYY-MM-DD.

    Accepts Excel serial numbers, date/datetime objects and common
    display strings.

    Raises:
        InvalidDateError: If the value is not a valid calendar date
    """
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, bool) or value is None:
        raise InvalidDateError(value)

    if isinstance(value, (int, float)):
        if value < 1 or value > MAX_EXCEL_SERIAL:
            raise InvalidDateError(value)
        try:
            return from_excel(value).date().isoformat()
        except (ValueError, OverflowError, TypeError):
            raise InvalidDateError(value)

    text = str(value).strip()
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date().isoformat()
        except ValueError:
            continue

    try:
        return datetime.fromisoformat(text).date().isoformat()
    except ValueError:
        raise InvalidDateError(value)


def _read_xlsx(data: bytes) -> List[list]:
    try:
        workbook = openpyxl.load_workbook(BytesIO(data), data_only=True)
    except Exception as e:
        raise SpreadsheetError(f"Could not read .xlsx workbook: {e}") from e

    try:
        if not workbook.worksheets:
            raise SpreadsheetError('Workbook contains no sheets')
        sheet = workbook.worksheets[0]
        return [list(row) for row in sheet.iter_rows(values_only=True)]
    finally:
        workbook.close()


def _read_xls(data: bytes) -> List[list]:
    try:
        book = xlrd.open_workbook(file_contents=data)
    except Exception as e:
        raise SpreadsheetError(f"Could not read .xls workbook: {e}") from e

    if book.nsheets == 0:
        raise SpreadsheetError('Workbook contains no sheets')

    sheet = book.sheet_by_index(0)
    rows = []
    for r in range(sheet.nrows):
        row = []
        for c in range(sheet.ncols):
            cell = sheet.cell(r, c)
            if cell.ctype in (xlrd.XL_CELL_EMPTY, xlrd.XL_CELL_BLANK):
                row.append(None)
            elif cell.ctype == xlrd.XL_CELL_DATE:
                row.append(xlrd.xldate_as_datetime(cell.value, book.datemode))
            elif cell.ctype == xlrd.XL_CELL_BOOLEAN:
                row.append(bool(cell.value))
            else:
                row.append(cell.value)
        rows.append(row)
    return rows


def _is_blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _clean_cell(value):
    # Phone numbers and flags typed as numbers come back as floats from xlrd
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def _rows_to_records(rows: List[list]) -> List[RowRecord]:
    header = None
    header_row = 0
    records = []

    for index, row in enumerate(rows, start=1):
        if all(_is_blank(v) for v in row):
            continue

        if header is None:
            header = [str(v).strip() if not _is_blank(v) else None for v in row]
            header_row = index
            continue

        values = {}
        for column, value in zip(header, row):
            if column and not _is_blank(value):
                values[column] = _clean_cell(value)
        records.append(RowRecord(row_number=index, values=values))

    if header is None:
        logger.info("Spreadsheet has no header row")
    else:
        logger.debug(f"Header found on row {header_row}: {header}")

    return records
