# services/task_service.py
"""
Task Service

Creates and manages patient follow-up tasks owned by agents. Each task
keeps a JSON timeline of events (created, note, escalated, completed).

Import helpers:
    should_create_task()   -> eligibility from the "Whether to create task" cell
    resolve_task_type()    -> "Task Type" cell to a TASK_TYPES member
    default_description()  -> templated description for imported tasks
"""

import logging
import secrets
import time
from datetime import datetime
from typing import Dict, List, Optional

import pytz
from sqlalchemy import or_

from models import Task, Patient, TASK_TYPES, TASK_STATUSES
from .exceptions import InvalidTaskError

logger = logging.getLogger(__name__)

DEFAULT_TASK_TYPE = 'post-visit'

# Spellings of the create-task flag that keep a row eligible
TASK_FLAG_TRUTHY = ('true', 'yes', 'Yes', '1')

UPDATABLE_FIELDS = ('provider', 'type', 'status', 'description', 'amount',
                    'assigned_agent_id', 'unread')


def should_create_task(value) -> bool:
    """
    Decide whether an imported row gets a task.

    Unset, blank, True and the spellings in TASK_FLAG_TRUTHY are eligible;
    any other present value opts the row out.
    """
    if value is None or value is True:
        return True
    if isinstance(value, bool):
        return False
    if isinstance(value, (int, float)):
        return value == 1
    text = str(value).strip()
    return text == '' or text in TASK_FLAG_TRUTHY


def resolve_task_type(value) -> str:
    """Lowercase/trim a Task Type cell; unknown values fall back to post-visit."""
    if value is None:
        return DEFAULT_TASK_TYPE
    requested = str(value).strip().lower()
    return requested if requested in TASK_TYPES else DEFAULT_TASK_TYPE


def default_description(task_type: str, first_name: str, last_name: str) -> str:
    """e.g. 'post-visit' -> 'Post visit call for Ann Lee'"""
    label = task_type[:1].upper() + task_type[1:].replace('-', ' ', 1)
    return f"{label} call for {first_name} {last_name}"


def format_timestamp(moment: datetime) -> str:
    """Timeline display time, e.g. 'Oct 19, 3:04 PM'."""
    hour = moment.hour % 12 or 12
    return f"{moment:%b} {moment.day}, {hour}:{moment:%M} {moment:%p}"


class TaskService:

    def __init__(self, session, timezone: str = 'America/Chicago'):
        self.session = session
        self.timezone = pytz.timezone(timezone)

    # =========================================================================
    # QUERIES
    # =========================================================================

    def get_tasks(self, statuses: Optional[List[str]] = None, agent: str = 'all',
                  task_type: str = 'all', search: Optional[str] = None) -> List[Task]:
        query = self.session.query(Task).join(Patient, Task.patient_id == Patient.id)

        if statuses:
            query = query.filter(Task.status.in_(statuses))

        if agent and agent != 'all':
            query = query.filter(Task.assigned_agent_id == agent)

        if task_type and task_type != 'all':
            query = query.filter(Task.type == task_type)

        if search:
            pattern = f'%{search}%'
            query = query.filter(or_(
                Patient.first_name.ilike(pattern),
                Patient.last_name.ilike(pattern),
                (Patient.first_name + ' ' + Patient.last_name).ilike(pattern),
                Patient.id.ilike(pattern),
                Task.description.ilike(pattern),
            ))

        return query.order_by(Task.updated_at.desc(), Task.id.desc()).all()

    def get_task_by_id(self, task_id: int) -> Optional[Task]:
        return self.session.get(Task, task_id)

    def get_tasks_for_patient(self, patient_id: str) -> List[Task]:
        return self.session.query(Task).filter_by(
            patient_id=patient_id
        ).order_by(Task.created_at.desc(), Task.id.desc()).all()

    def get_status_counts(self) -> Dict[str, int]:
        counts = {status: 0 for status in TASK_STATUSES}
        total = 0
        for (status,) in self.session.query(Task.status).all():
            total += 1
            if status in counts:
                counts[status] += 1
        counts['total'] = total
        return counts

    # =========================================================================
    # WRITES
    # =========================================================================

    def create_task(self, patient_id: str, provider: str, task_type: str,
                    description: str, assigned_agent_id: Optional[str] = None,
                    status: str = 'pending', amount: Optional[str] = None) -> Task:
        """
        Create a task with an initial 'created' timeline event.

        Raises:
            InvalidTaskError: If the type or status is not recognised
        """
        self._validate(task_type=task_type, status=status)

        created_event = self._timeline_event('created', 'Task Created', description=description)
        task = Task(
            patient_id=patient_id,
            provider=provider,
            type=task_type,
            status=status,
            description=description,
            amount=amount,
            assigned_agent_id=assigned_agent_id,
            timeline=[created_event],
        )
        self.session.add(task)
        self.session.commit()
        logger.debug(f"Created {task_type} task {task.id} for patient {patient_id}")
        return task

    def update_task(self, task_id: int, **fields) -> Optional[Task]:
        task = self.get_task_by_id(task_id)
        if task is None:
            return None

        unknown = set(fields) - set(UPDATABLE_FIELDS)
        if unknown:
            raise InvalidTaskError(f"Unknown task field(s): {', '.join(sorted(unknown))}")
        self._validate(task_type=fields.get('type'), status=fields.get('status'))

        for name, value in fields.items():
            setattr(task, name, value)
        self.session.commit()
        return task

    def update_status(self, task_id: int, status: str) -> Optional[Task]:
        return self.update_task(task_id, status=status)

    def complete_task(self, task_id: int, description: Optional[str] = None) -> Optional[Task]:
        event = self._timeline_event(
            'completed', 'Task Completed',
            description=description or 'Task marked as complete'
        )
        return self._append_event(task_id, event, status='completed')

    def escalate_task(self, task_id: int, assigned_to: str, reason: str) -> Optional[Task]:
        event = self._timeline_event(
            'escalated', 'Escalated to Staff',
            assignedTo=assigned_to, reason=reason
        )
        return self._append_event(task_id, event, status='escalated', assigned_agent_id=assigned_to)

    def add_note(self, task_id: int, content: str) -> Optional[Task]:
        event = self._timeline_event('note', 'Note Added', content=content)
        return self._append_event(task_id, event)

    def mark_as_read(self, task_id: int) -> Optional[Task]:
        return self.update_task(task_id, unread=False)

    def mark_as_unread(self, task_id: int) -> Optional[Task]:
        return self.update_task(task_id, unread=True)

    def delete_task(self, task_id: int) -> bool:
        task = self.get_task_by_id(task_id)
        if task is None:
            return False
        self.session.delete(task)
        self.session.commit()
        return True

    # =========================================================================
    # INTERNALS
    # =========================================================================

    def _validate(self, task_type: Optional[str] = None, status: Optional[str] = None):
        if task_type is not None and task_type not in TASK_TYPES:
            raise InvalidTaskError(f"Invalid task type: {task_type}")
        if status is not None and status not in TASK_STATUSES:
            raise InvalidTaskError(f"Invalid task status: {status}")

    def _timeline_event(self, event_type: str, title: str, **extra) -> dict:
        now = datetime.now(self.timezone)
        event = {
            'id': f"{event_type}-{int(time.time() * 1000)}-{secrets.token_hex(4)}",
            'type': event_type,
            'timestamp': format_timestamp(now),
            'title': title,
        }
        event.update(extra)
        return event

    def _append_event(self, task_id: int, event: dict, **fields) -> Optional[Task]:
        task = self.get_task_by_id(task_id)
        if task is None:
            return None

        # Reassign so the JSON column is marked dirty
        task.timeline = list(task.timeline or []) + [event]
        for name, value in fields.items():
            setattr(task, name, value)
        self.session.commit()
        return task
