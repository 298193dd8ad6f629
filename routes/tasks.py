import logging

from flask import Blueprint, request, jsonify

from models import db
from services.exceptions import InvalidTaskError
from .helpers import get_task_service, get_patient_service, error_response, json_body

logger = logging.getLogger(__name__)

tasks_bp = Blueprint('tasks', __name__, url_prefix='/api/tasks')

# JSON body keys -> Task attributes
FIELD_MAP = {
    'provider': 'provider',
    'type': 'type',
    'status': 'status',
    'description': 'description',
    'amount': 'amount',
    'assignedAgentId': 'assigned_agent_id',
    'unread': 'unread',
}


@tasks_bp.route('/', methods=['GET'])
def list_tasks():
    status_param = request.args.get('status')
    statuses = [s.strip() for s in status_param.split(',') if s.strip()] if status_param else None

    try:
        tasks = get_task_service().get_tasks(
            statuses=statuses,
            agent=request.args.get('agent') or 'all',
            task_type=request.args.get('type') or 'all',
            search=request.args.get('search'),
        )
        return jsonify([t.to_dict(include_patient=True) for t in tasks])
    except Exception:
        logger.exception("Error fetching tasks")
        return error_response('Failed to fetch tasks', 500)


@tasks_bp.route('/counts', methods=['GET'])
def task_counts():
    return get_task_service().get_status_counts()


@tasks_bp.route('/<int:task_id>', methods=['GET'])
def get_task(task_id):
    task = get_task_service().get_task_by_id(task_id)
    if not task:
        return error_response('Task not found', 404)
    return task.to_dict(include_patient=True)


@tasks_bp.route('/', methods=['POST'])
def create_task():
    data = json_body()

    required = ('patientId', 'provider', 'type', 'description')
    if any(not data.get(key) for key in required):
        return error_response('Missing required fields: patientId, provider, type, description', 400)

    if not get_patient_service().get_by_id(data['patientId']):
        return error_response('Patient not found', 404)

    try:
        task = get_task_service().create_task(
            patient_id=data['patientId'],
            provider=data['provider'],
            task_type=data['type'],
            description=data['description'],
            assigned_agent_id=data.get('assignedAgentId'),
            status=data.get('status') or 'pending',
            amount=data.get('amount'),
        )
        return task.to_dict(), 201
    except InvalidTaskError as e:
        return error_response(str(e), 400)
    except Exception:
        db.session.rollback()
        logger.exception("Error creating task")
        return error_response('Failed to create task', 500)


@tasks_bp.route('/<int:task_id>', methods=['PATCH'])
def update_task(task_id):
    data = json_body()
    fields = {FIELD_MAP[key]: value for key, value in data.items() if key in FIELD_MAP}

    try:
        task = get_task_service().update_task(task_id, **fields)
    except InvalidTaskError as e:
        return error_response(str(e), 400)
    except Exception:
        db.session.rollback()
        logger.exception(f"Error updating task {task_id}")
        return error_response('Failed to update task', 500)

    if not task:
        return error_response('Task not found', 404)
    return task.to_dict()


@tasks_bp.route('/<int:task_id>/complete', methods=['POST'])
def complete_task(task_id):
    data = json_body()
    task = get_task_service().complete_task(task_id, data.get('description'))
    if not task:
        return error_response('Task not found', 404)
    return task.to_dict()


@tasks_bp.route('/<int:task_id>/escalate', methods=['POST'])
def escalate_task(task_id):
    data = json_body()
    if not data.get('assignedTo') or not data.get('reason'):
        return error_response('Missing required fields: assignedTo, reason', 400)

    task = get_task_service().escalate_task(task_id, data['assignedTo'], data['reason'])
    if not task:
        return error_response('Task not found', 404)
    return task.to_dict()


@tasks_bp.route('/<int:task_id>/note', methods=['POST'])
def add_note(task_id):
    data = json_body()
    if not data.get('content'):
        return error_response('Missing required field: content', 400)

    task = get_task_service().add_note(task_id, data['content'])
    if not task:
        return error_response('Task not found', 404)
    return task.to_dict()


@tasks_bp.route('/<int:task_id>/read', methods=['POST'])
def mark_read(task_id):
    task = get_task_service().mark_as_read(task_id)
    if not task:
        return error_response('Task not found', 404)
    return task.to_dict()


@tasks_bp.route('/<int:task_id>/unread', methods=['POST'])
def mark_unread(task_id):
    task = get_task_service().mark_as_unread(task_id)
    if not task:
        return error_response('Task not found', 404)
    return task.to_dict()


@tasks_bp.route('/<int:task_id>', methods=['DELETE'])
def delete_task(task_id):
    if not get_task_service().delete_task(task_id):
        return error_response('Task not found', 404)
    return {'success': True}
