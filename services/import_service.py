# services/import_service.py
"""
Patient Import Service

Imports patients from an uploaded Excel workbook. For each row, in sheet
order:

    1. Validate First Name, Last Name and phone
    2. Normalize the phone and upsert the patient (keyed by phone)
    3. Record an appointment when "Date of visit" is present
    4. Create a follow-up task unless "Whether to create task" opts out

Failures are isolated per row and collected in ImportResult.errors.
Writes are not wrapped in a per-row transaction: a patient upserted in
step 2 stays even if the task in step 4 fails.

Usage:
    importer = PatientImporter.from_config(db.session, app.config)
    result = importer.import_from_file(file_bytes)
    return jsonify(result.to_dict())
"""

import logging
from dataclasses import dataclass, field
from typing import List

from .agent_service import AgentService
from .appointment_service import AppointmentService
from .exceptions import InvalidPhoneError
from .patient_service import PatientService
from .spreadsheet_parser import RowRecord, parse_spreadsheet
from .task_service import (
    TaskService,
    should_create_task,
    resolve_task_type,
    default_description,
)

logger = logging.getLogger(__name__)

# Expected column headers (as documented to practice staff)
COL_FIRST_NAME = 'First Name'
COL_LAST_NAME = 'Last Name'
COL_PHONE = 'phone'
COL_VISIT_DATE = 'Date of visit'
COL_CREATE_TASK = 'Whether to create task'
COL_TASK_TYPE = 'Task Type'
COL_AGENT_NAME = 'Agent Name'

REQUIRED_COLUMNS = [COL_FIRST_NAME, COL_LAST_NAME, COL_PHONE]
OPTIONAL_COLUMNS = [COL_VISIT_DATE, COL_CREATE_TASK, COL_TASK_TYPE, COL_AGENT_NAME]


@dataclass
class RowError:
    row: int
    error: str

    def to_dict(self):
        return {'row': self.row, 'error': self.error}


@dataclass
class ImportResult:
    success: bool = True
    total_rows: int = 0
    patients_created: int = 0
    patients_updated: int = 0
    appointments_created: int = 0
    tasks_created: int = 0
    errors: List[RowError] = field(default_factory=list)

    def add_error(self, row: int, message: str):
        self.errors.append(RowError(row=row, error=message))

    def to_dict(self):
        return {
            'success': self.success,
            'totalRows': self.total_rows,
            'patientsCreated': self.patients_created,
            'patientsUpdated': self.patients_updated,
            'appointmentsCreated': self.appointments_created,
            'tasksCreated': self.tasks_created,
            'errors': [e.to_dict() for e in self.errors],
        }


class PatientImporter:
    """
    Drives spreadsheet rows through the patient, appointment and task
    services. All collaborators are injected.
    """

    def __init__(self, session, patient_service: PatientService,
                 appointment_service: AppointmentService,
                 task_service: TaskService,
                 agent_service: AgentService,
                 provider: str = 'Imported'):
        self.session = session
        self.patients = patient_service
        self.appointments = appointment_service
        self.tasks = task_service
        self.agents = agent_service
        self.provider = provider

    @classmethod
    def from_config(cls, session, config) -> 'PatientImporter':
        """Build an importer and its services from a Flask config mapping."""
        return cls(
            session,
            patient_service=PatientService(
                session,
                default_region=config.get('DEFAULT_PHONE_REGION', 'US'),
                id_attempts=config.get('PATIENT_ID_MAX_ATTEMPTS', 10),
            ),
            appointment_service=AppointmentService(session),
            task_service=TaskService(session, timezone=config.get('PRACTICE_TIMEZONE', 'America/Chicago')),
            agent_service=AgentService(session, default_agent_id=config.get('DEFAULT_AGENT_ID', 'ai-maggi')),
            provider=config.get('IMPORT_TASK_PROVIDER', 'Imported'),
        )

    def import_from_file(self, data: bytes) -> ImportResult:
        """
        Import every row of the workbook.

        Never raises for row-level problems. A workbook that cannot be
        decoded yields a single row-0 error and success=False.
        """
        result = ImportResult()

        try:
            rows = parse_spreadsheet(data)
        except Exception as e:
            logger.error(f"Failed to parse import file: {e}")
            result.success = False
            result.add_error(0, f"Failed to parse Excel file: {e}")
            return result

        result.total_rows = len(rows)

        for row in rows:
            try:
                self._import_row(row, result)
            except Exception as e:
                self.session.rollback()
                logger.warning(f"Row {row.row_number} failed: {e}")
                result.add_error(row.row_number, str(e) or e.__class__.__name__)

        result.success = (result.patients_created + result.patients_updated) > 0

        logger.info(
            f"Patient import finished: {result.total_rows} rows, "
            f"{result.patients_created} created, {result.patients_updated} updated, "
            f"{result.appointments_created} appointments, {result.tasks_created} tasks, "
            f"{len(result.errors)} errors"
        )
        return result

    def _import_row(self, row: RowRecord, result: ImportResult):
        first_name = row.text(COL_FIRST_NAME)
        last_name = row.text(COL_LAST_NAME)
        phone = row.text(COL_PHONE)

        if not first_name or not last_name or not phone:
            result.add_error(row.row_number, 'Missing required fields: First Name, Last Name, or phone')
            return

        try:
            patient, created = self.patients.upsert(first_name, last_name, phone)
        except InvalidPhoneError:
            result.add_error(row.row_number, f"Invalid phone number: {phone}")
            return

        if created:
            result.patients_created += 1
        else:
            result.patients_updated += 1

        # 0 and FALSE cells count as "no visit date"
        visit_date = row.get(COL_VISIT_DATE)
        if visit_date:
            try:
                if self.appointments.record_visit(patient.id, visit_date) is not None:
                    result.appointments_created += 1
            except Exception as e:
                self.session.rollback()
                result.add_error(row.row_number, f"Failed to create appointment: {e}")

        if not should_create_task(row.get(COL_CREATE_TASK)):
            return

        try:
            task_type = resolve_task_type(row.get(COL_TASK_TYPE))
            agent_id = self.agents.resolve_agent_id(row.text(COL_AGENT_NAME))
            self.tasks.create_task(
                patient_id=patient.id,
                provider=self.provider,
                task_type=task_type,
                status='pending',
                description=default_description(task_type, first_name, last_name),
                assigned_agent_id=agent_id,
            )
            result.tasks_created += 1
        except Exception as e:
            self.session.rollback()
            result.add_error(row.row_number, f"Failed to create task: {e}")
