# models.py
from flask_sqlalchemy import SQLAlchemy
from datetime import datetime

db = SQLAlchemy()

TASK_TYPES = ('confirmation', 'no-show', 'pre-visit', 'post-visit', 'recall', 'collections')
TASK_STATUSES = ('in-progress', 'scheduled', 'escalated', 'pending', 'completed')
AGENT_TYPES = ('ai', 'staff')
FLAG_REASONS = ('abusive-language', 'verbal-threats', 'harassment', 'discriminatory', 'other')


class Agent(db.Model):
    """AI voice agents and staff members that own tasks."""
    __tablename__ = 'agents'

    id = db.Column(db.String(50), primary_key=True)  # e.g. 'ai-luna', 'sarah'
    name = db.Column(db.String(100), nullable=False)
    type = db.Column(db.String(10), nullable=False)  # 'ai' | 'staff'
    role = db.Column(db.String(100), nullable=False)
    avatar = db.Column(db.String(20))
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow,
                          onupdate=datetime.utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'type': self.type,
            'role': self.role,
            'avatar': self.avatar,
        }

    def __repr__(self):
        return f'<Agent {self.id}>'


class Patient(db.Model):
    __tablename__ = 'patients'

    id = db.Column(db.String(20), primary_key=True)  # e.g. 'PT-2847'
    first_name = db.Column(db.String(80), nullable=False)
    last_name = db.Column(db.String(80), nullable=False)
    phone = db.Column(db.String(20), unique=True)  # E.164, e.g. +14155551234
    dob = db.Column(db.String(20))

    # Behavior flags
    flag_reasons = db.Column(db.JSON)
    flagged_by = db.Column(db.String(100))
    flagged_at = db.Column(db.DateTime)

    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow,
                          onupdate=datetime.utcnow)

    appointments = db.relationship('Appointment', backref='patient', lazy=True,
                                   cascade='all, delete-orphan')
    tasks = db.relationship('Task', backref='patient', lazy=True,
                            cascade='all, delete-orphan')

    @property
    def full_name(self):
        return f"{self.first_name} {self.last_name}".strip()

    def to_dict(self):
        return {
            'id': self.id,
            'firstName': self.first_name,
            'lastName': self.last_name,
            'phone': self.phone,
            'dob': self.dob,
            'flagReasons': self.flag_reasons,
            'flaggedBy': self.flagged_by,
            'flaggedAt': self.flagged_at.isoformat() if self.flagged_at else None,
            'createdAt': self.created_at.isoformat() if self.created_at else None,
            'updatedAt': self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self):
        return f'<Patient {self.id} {self.first_name} {self.last_name}>'


class Appointment(db.Model):
    """Patient visit dates, recorded mostly from spreadsheet imports."""
    __tablename__ = 'appointments'

    id = db.Column(db.Integer, primary_key=True)
    patient_id = db.Column(db.String(20), db.ForeignKey('patients.id'), nullable=False, index=True)
    visit_date = db.Column(db.Date, nullable=False)
    notes = db.Column(db.Text)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow,
                          onupdate=datetime.utcnow)

    def to_dict(self):
        return {
            'id': self.id,
            'patientId': self.patient_id,
            'visitDate': self.visit_date.isoformat(),
            'notes': self.notes,
        }


class Task(db.Model):
    __tablename__ = 'tasks'

    id = db.Column(db.Integer, primary_key=True)
    patient_id = db.Column(db.String(20), db.ForeignKey('patients.id'), nullable=False, index=True)

    # Task Details
    provider = db.Column(db.String(100), nullable=False)
    type = db.Column(db.String(20), nullable=False)  # one of TASK_TYPES
    status = db.Column(db.String(20), nullable=False, default='pending', index=True)  # one of TASK_STATUSES
    description = db.Column(db.Text, nullable=False)
    amount = db.Column(db.String(20))  # collections tasks only

    # Assignment
    assigned_agent_id = db.Column(db.String(50), db.ForeignKey('agents.id'))

    timeline = db.Column(db.JSON, nullable=False, default=list)
    unread = db.Column(db.Boolean, nullable=False, default=True)

    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow,
                          onupdate=datetime.utcnow)

    assigned_agent = db.relationship('Agent', backref=db.backref('tasks', lazy=True))

    def to_dict(self, include_patient=False):
        data = {
            'id': self.id,
            'patientId': self.patient_id,
            'provider': self.provider,
            'type': self.type,
            'status': self.status,
            'description': self.description,
            'amount': self.amount,
            'assignedAgentId': self.assigned_agent_id,
            'timeline': self.timeline or [],
            'unread': self.unread,
            'createdAt': self.created_at.isoformat() if self.created_at else None,
            'updatedAt': self.updated_at.isoformat() if self.updated_at else None,
        }
        if include_patient:
            data['patient'] = self.patient.to_dict()
        return data

    def __repr__(self):
        return f'<Task {self.id} {self.type} {self.status}>'
