# routes/helpers.py
"""
Shared helpers for API routes: service construction from app config.
"""

from flask import current_app, request

from models import db
from services.agent_service import AgentService
from services.appointment_service import AppointmentService
from services.import_service import PatientImporter
from services.patient_service import PatientService
from services.task_service import TaskService


def get_patient_service():
    return PatientService(
        db.session,
        default_region=current_app.config['DEFAULT_PHONE_REGION'],
        id_attempts=current_app.config['PATIENT_ID_MAX_ATTEMPTS'],
    )


def get_appointment_service():
    return AppointmentService(db.session)


def get_task_service():
    return TaskService(db.session, timezone=current_app.config['PRACTICE_TIMEZONE'])


def get_agent_service():
    return AgentService(db.session, default_agent_id=current_app.config['DEFAULT_AGENT_ID'])


def get_importer():
    return PatientImporter.from_config(db.session, current_app.config)


def error_response(message, status):
    return {'error': message}, status


def json_body():
    """Request JSON as a dict; anything else (missing, list, scalar) reads as {}."""
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def non_string_fields(data, keys):
    """Keys whose values are present but not strings."""
    return [key for key in keys if data.get(key) is not None and not isinstance(data[key], str)]
