"""
Spreadsheet parser tests: file detection, row numbering and
visit-date normalization.

Run with: python -m pytest tests/test_spreadsheet_parser.py -v
"""

from datetime import date, datetime

import pytest

from services.exceptions import SpreadsheetError, InvalidDateError
from services.spreadsheet_parser import (
    RowRecord,
    parse_spreadsheet,
    to_iso_date,
    XLS_MAGIC,
)
from conftest import build_workbook, build_xls_workbook


class TestToIsoDate:

    def test_excel_serial(self):
        assert to_iso_date(45000) == '2023-03-15'

    def test_excel_serial_with_time_fraction(self):
        assert to_iso_date(45000.75) == '2023-03-15'

    @pytest.mark.parametrize('text', [
        '2023-03-15',
        '03/15/2023',
        '3/15/23',
        '03-15-2023',
        '2023/03/15',
        'March 15, 2023',
        'Mar 15, 2023',
        '15 March 2023',
        ' 2023-03-15 ',
        '2023-03-15T09:30:00',
    ])
    def test_display_strings(self, text):
        assert to_iso_date(text) == '2023-03-15'

    def test_date_objects(self):
        assert to_iso_date(date(2023, 3, 15)) == '2023-03-15'
        assert to_iso_date(datetime(2023, 3, 15, 14, 30)) == '2023-03-15'

    @pytest.mark.parametrize('value', [
        'not a date',
        '2023-02-30',
        '13/45/2023',
        0,
        -5,
        10 ** 9,
        True,
        None,
    ])
    def test_invalid(self, value):
        with pytest.raises(InvalidDateError) as exc:
            to_iso_date(value)
        assert str(exc.value) == f"Invalid date format: {value}"

    def test_invalid_date_is_a_spreadsheet_error(self):
        assert issubclass(InvalidDateError, SpreadsheetError)


class TestParseSpreadsheet:

    def test_rows_keyed_by_header(self):
        data = build_workbook([
            {'First Name': 'Ann', 'Last Name': 'Lee', 'phone': '555-111-2222', 'Date of visit': 45000},
        ])
        rows = parse_spreadsheet(data)

        assert len(rows) == 1
        assert rows[0].row_number == 2
        assert rows[0].get('First Name') == 'Ann'
        assert rows[0].get('Date of visit') == 45000
        assert rows[0].get('Agent Name') is None

    def test_blank_rows_are_skipped_but_numbering_follows_the_sheet(self):
        data = build_workbook([
            {'First Name': 'Ann', 'Last Name': 'Lee', 'phone': '5551112222'},
            None,
            {'First Name': 'Bo', 'Last Name': 'Kim', 'phone': '5553334444'},
        ])
        rows = parse_spreadsheet(data)

        assert [r.row_number for r in rows] == [2, 4]
        assert rows[1].get('First Name') == 'Bo'

    def test_missing_columns_read_as_none(self):
        data = build_workbook(
            [{'First Name': 'Ann', 'phone': '5551112222'}],
            header=['First Name', 'phone'],
        )
        row = parse_spreadsheet(data)[0]

        assert row.get('Last Name') is None
        assert row.get('Date of visit') is None
        assert row.text('Last Name') is None

    def test_whole_number_floats_become_ints(self):
        data = build_workbook([
            {'First Name': 'Ann', 'Last Name': 'Lee', 'phone': 5551112222.0},
        ])
        row = parse_spreadsheet(data)[0]

        assert row.get('phone') == 5551112222
        assert isinstance(row.get('phone'), int)
        assert row.text('phone') == '5551112222'

    def test_date_cells(self):
        data = build_workbook([
            {'First Name': 'Ann', 'Last Name': 'Lee', 'phone': '5551112222',
             'Date of visit': datetime(2023, 3, 15)},
        ])
        row = parse_spreadsheet(data)[0]

        assert to_iso_date(row.get('Date of visit')) == '2023-03-15'

    def test_header_only(self):
        assert parse_spreadsheet(build_workbook([])) == []

    @pytest.mark.parametrize('data', [
        b'',
        b'first,last,phone\nAnn,Lee,5551112222\n',
        b'PK\x03\x04 not really a zip',
        XLS_MAGIC + b'\x00' * 64,
    ])
    def test_undecodable_files(self, data):
        with pytest.raises(SpreadsheetError):
            parse_spreadsheet(data)


class TestRowRecord:

    def test_text_strips_and_blanks_to_none(self):
        row = RowRecord(row_number=2, values={'First Name': '  Ann ', 'Last Name': '   '})
        assert row.text('First Name') == 'Ann'
        assert row.text('Last Name') is None
        assert row.text('phone') is None


class TestLegacyXls:

    def test_cells_are_decoded(self):
        data = build_xls_workbook([
            {'First Name': 'Ann', 'Last Name': 'Lee', 'phone': 5551112222,
             'Date of visit': datetime(2023, 3, 15), 'Whether to create task': True},
            None,
            {'First Name': 'Bo', 'Last Name': 'Kim', 'phone': '555-333-4444',
             'Whether to create task': False},
        ])
        assert data.startswith(XLS_MAGIC)

        rows = parse_spreadsheet(data)

        assert [r.row_number for r in rows] == [2, 4]
        assert rows[0].get('First Name') == 'Ann'
        assert rows[0].get('phone') == 5551112222
        assert isinstance(rows[0].get('phone'), int)
        assert to_iso_date(rows[0].get('Date of visit')) == '2023-03-15'
        assert rows[0].get('Whether to create task') is True
        assert rows[1].get('Whether to create task') is False
        assert rows[1].get('Date of visit') is None
