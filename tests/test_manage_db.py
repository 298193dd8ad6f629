"""
Command-line helper tests.

Run with: python -m pytest tests/test_manage_db.py -v
"""

from models import Patient
import manage_db


def test_import_file(app, db, tmp_path, make_workbook, capsys):
    path = tmp_path / 'patients.xlsx'
    path.write_bytes(make_workbook([
        {'First Name': 'Ann', 'Last Name': 'Lee', 'phone': '555-111-2222'},
    ]))

    summary = manage_db.import_file(str(path), app=app)

    assert summary['success'] is True
    assert summary['patientsCreated'] == 1
    assert '"patientsCreated": 1' in capsys.readouterr().out
    assert db.session.query(Patient).count() == 1


def test_seed_agents_is_idempotent(app):
    # the app fixture has already seeded the defaults
    assert manage_db.seed_agents(app=app) == 0
