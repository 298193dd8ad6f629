"""
Shared fixtures: an app bound to in-memory SQLite with the default
agents seeded, and a helper that builds .xlsx uploads in memory.
"""

import sys
from datetime import date
from io import BytesIO
from pathlib import Path

import openpyxl
import pytest
import xlwt

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from app import create_app
from config import TestConfig
from models import db as _db
from services.agent_service import AgentService
from services.import_service import PatientImporter

IMPORT_HEADER = [
    'First Name',
    'Last Name',
    'phone',
    'Date of visit',
    'Whether to create task',
    'Task Type',
    'Agent Name',
]


class SequenceRng:
    """Stand-in for random.Random that replays fixed randint results."""
    def __init__(self, values):
        self.values = list(values)
        self.calls = 0

    def randint(self, low, high):
        value = self.values[min(self.calls, len(self.values) - 1)]
        self.calls += 1
        return value


@pytest.fixture
def app():
    app = create_app(TestConfig)
    with app.app_context():
        _db.create_all()
        AgentService(_db.session).seed_default_agents()
        yield app
        _db.session.remove()
        _db.drop_all()


@pytest.fixture
def db(app):
    return _db


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def importer(app):
    return PatientImporter.from_config(_db.session, app.config)


def build_workbook(rows, header=None):
    """Build .xlsx bytes from a list of {column: value} dicts."""
    header = header or IMPORT_HEADER
    workbook = openpyxl.Workbook()
    sheet = workbook.active
    sheet.append(header)
    for row in rows:
        if row is None:
            sheet.append([])
        else:
            sheet.append([row.get(column) for column in header])
    buffer = BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


@pytest.fixture
def make_workbook():
    return build_workbook


def build_xls_workbook(rows, header=None):
    """Build legacy .xls (BIFF8) bytes; date values get a date number format."""
    header = header or IMPORT_HEADER
    workbook = xlwt.Workbook()
    sheet = workbook.add_sheet('Patients')
    date_style = xlwt.easyxf(num_format_str='YYYY-MM-DD')

    for col, column in enumerate(header):
        sheet.write(0, col, column)

    for row_index, row in enumerate(rows, start=1):
        for col, column in enumerate(header):
            value = (row or {}).get(column)
            if value is None:
                continue
            if isinstance(value, date):
                sheet.write(row_index, col, value, date_style)
            else:
                sheet.write(row_index, col, value)

    buffer = BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


@pytest.fixture
def make_xls_workbook():
    return build_xls_workbook
