#!/usr/bin/env python3
"""
Database Management Script
Schema migrations, agent seeding and offline patient imports.
"""

import json
import sys

from flask_migrate import upgrade, current, history

from app import create_app
from models import db
from services.agent_service import AgentService
from services.import_service import PatientImporter


def upgrade_database(app=None):
    """Upgrade database to latest migration."""
    app = app or create_app()

    with app.app_context():
        print(f"Upgrading database: {app.config['SQLALCHEMY_DATABASE_URI']}")
        upgrade()
        print("Database upgraded successfully!")


def show_migration_status(app=None):
    """Show current migration status."""
    app = app or create_app()

    with app.app_context():
        print(f"Database: {app.config['SQLALCHEMY_DATABASE_URI']}")
        print("\nCurrent revision:")
        current()
        print("\nMigration history:")
        history()


def seed_agents(app=None):
    """Insert any missing default agents."""
    app = app or create_app()

    with app.app_context():
        added = AgentService(db.session).seed_default_agents()
        print(f"Seeded {added} agents")
        return added


def import_file(path, app=None):
    """Run a patient import from a workbook on disk and return the result dict."""
    app = app or create_app()

    with open(path, 'rb') as f:
        data = f.read()

    with app.app_context():
        result = PatientImporter.from_config(db.session, app.config).import_from_file(data)

    summary = result.to_dict()
    print(json.dumps(summary, indent=2))
    return summary


def main():
    if len(sys.argv) < 2:
        print("Usage: python manage_db.py <command>")
        print("Commands:")
        print("  upgrade         - Upgrade database to latest migration")
        print("  status          - Show migration status")
        print("  seed            - Insert missing default agents")
        print("  import <file>   - Import patients from an .xlsx/.xls file")
        return

    command = sys.argv[1]

    try:
        if command == 'upgrade':
            upgrade_database()
        elif command == 'status':
            show_migration_status()
        elif command == 'seed':
            seed_agents()
        elif command == 'import':
            if len(sys.argv) < 3:
                print("Usage: python manage_db.py import <file>")
                sys.exit(1)
            summary = import_file(sys.argv[2])
            if not summary['success']:
                sys.exit(1)
        else:
            print(f"Unknown command: {command}")
    except Exception as e:
        print(f"Error: {e}")
        sys.exit(1)


if __name__ == '__main__':
    main()
