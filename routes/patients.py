import logging

from flask import Blueprint, request, jsonify

from models import db
from services.exceptions import (
    PatientError,
    PatientNotFoundError,
    InvalidFlagReasonError,
)
from .helpers import (
    get_patient_service,
    get_appointment_service,
    get_task_service,
    get_importer,
    error_response,
    json_body,
    non_string_fields,
)

logger = logging.getLogger(__name__)

patients_bp = Blueprint('patients', __name__, url_prefix='/api/patients')

ALLOWED_IMPORT_EXTENSIONS = ('.xlsx', '.xls')
PATIENT_FIELDS = ('firstName', 'lastName', 'phone', 'dob')


@patients_bp.route('/', methods=['GET'])
def list_patients():
    try:
        patients = get_patient_service().get_all()
        return jsonify([p.to_dict() for p in patients])
    except Exception:
        logger.exception("Error fetching patients")
        return error_response('Failed to fetch patients', 500)


@patients_bp.route('/<patient_id>', methods=['GET'])
def get_patient(patient_id):
    patient = get_patient_service().get_by_id(patient_id)
    if not patient:
        return error_response('Patient not found', 404)
    return patient.to_dict()


@patients_bp.route('/', methods=['POST'])
def create_patient():
    data = json_body()

    invalid = non_string_fields(data, PATIENT_FIELDS)
    if invalid:
        return error_response(f"Fields must be strings: {', '.join(invalid)}", 400)

    first_name = (data.get('firstName') or '').strip()
    last_name = (data.get('lastName') or '').strip()
    phone = (data.get('phone') or '').strip()

    if not first_name or not last_name or not phone:
        return error_response('Missing required fields: firstName, lastName, phone', 400)

    try:
        patient = get_patient_service().create(first_name, last_name, phone, dob=data.get('dob'))
        return patient.to_dict(), 201
    except PatientError as e:
        db.session.rollback()
        return error_response(str(e), 400)
    except Exception:
        db.session.rollback()
        logger.exception("Error creating patient")
        return error_response('Failed to create patient', 500)


@patients_bp.route('/<patient_id>', methods=['PATCH'])
def update_patient(patient_id):
    data = json_body()

    invalid = non_string_fields(data, PATIENT_FIELDS)
    if invalid:
        return error_response(f"Fields must be strings: {', '.join(invalid)}", 400)

    try:
        patient = get_patient_service().update(
            patient_id,
            first_name=data.get('firstName'),
            last_name=data.get('lastName'),
            phone=data.get('phone'),
            dob=data.get('dob'),
        )
        return patient.to_dict()
    except PatientNotFoundError as e:
        return error_response(str(e), 404)
    except PatientError as e:
        db.session.rollback()
        return error_response(str(e), 400)
    except Exception:
        db.session.rollback()
        logger.exception(f"Error updating patient {patient_id}")
        return error_response('Failed to update patient', 500)


@patients_bp.route('/<patient_id>', methods=['DELETE'])
def delete_patient(patient_id):
    try:
        if not get_patient_service().delete(patient_id):
            return error_response('Patient not found', 404)
        return {'success': True}
    except Exception:
        db.session.rollback()
        logger.exception(f"Error deleting patient {patient_id}")
        return error_response('Failed to delete patient', 500)


@patients_bp.route('/<patient_id>/appointments', methods=['GET'])
def list_patient_appointments(patient_id):
    if not get_patient_service().get_by_id(patient_id):
        return error_response('Patient not found', 404)
    appointments = get_appointment_service().list_for_patient(patient_id)
    return jsonify([a.to_dict() for a in appointments])


@patients_bp.route('/<patient_id>/tasks', methods=['GET'])
def list_patient_tasks(patient_id):
    if not get_patient_service().get_by_id(patient_id):
        return error_response('Patient not found', 404)
    tasks = get_task_service().get_tasks_for_patient(patient_id)
    return jsonify([t.to_dict() for t in tasks])


@patients_bp.route('/<patient_id>/flag', methods=['POST'])
def flag_patient(patient_id):
    data = json_body()
    reasons = data.get('reasons') or []
    if isinstance(reasons, str):
        reasons = [reasons]
    if not isinstance(reasons, list) or not all(isinstance(r, str) for r in reasons):
        return error_response('reasons must be a list of strings', 400)

    try:
        patient = get_patient_service().flag(patient_id, reasons, flagged_by=data.get('flaggedBy'))
        return patient.to_dict()
    except PatientNotFoundError as e:
        return error_response(str(e), 404)
    except InvalidFlagReasonError as e:
        return error_response(str(e), 400)


@patients_bp.route('/<patient_id>/flag', methods=['DELETE'])
def unflag_patient(patient_id):
    try:
        patient = get_patient_service().unflag(patient_id)
        return patient.to_dict()
    except PatientNotFoundError as e:
        return error_response(str(e), 404)


@patients_bp.route('/import', methods=['POST'])
def import_patients():
    """
    Import patients from an Excel workbook.

    Accepts multipart/form-data with a 'file' field, or the raw workbook
    bytes as the request body. Row-level failures still return 200 with
    the errors listed in the result.
    """
    try:
        if 'multipart/form-data' in (request.content_type or ''):
            if 'file' not in request.files:
                return error_response('No file provided', 400)

            file = request.files['file']
            if file.filename == '':
                return error_response('No file selected', 400)

            if not file.filename.lower().endswith(ALLOWED_IMPORT_EXTENSIONS):
                return error_response('File must be an Excel file (.xlsx or .xls)', 400)

            data = file.read()
        else:
            data = request.get_data()
            if not data:
                return error_response('No file data provided', 400)

        result = get_importer().import_from_file(data)
        return jsonify(result.to_dict())

    except Exception as e:
        db.session.rollback()
        logger.exception("Error importing patients")
        return error_response(str(e) or 'Failed to import patients', 500)
