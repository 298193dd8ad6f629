"""Create agents, patients, appointments and tasks tables

Revision ID: create_practice_tables
Revises:
Create Date: 2026-10-19

Initial schema for patient imports:
- agents: AI voice agents and staff that own tasks
- patients: keyed by PT-#### ids, phone unique in E.164 form
- appointments: one row per recorded visit date
- tasks: follow-up work with a JSON timeline
"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = 'create_practice_tables'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table('agents',
        sa.Column('id', sa.String(50), nullable=False),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('type', sa.String(10), nullable=False),
        sa.Column('role', sa.String(100), nullable=False),
        sa.Column('avatar', sa.String(20), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )

    op.create_table('patients',
        sa.Column('id', sa.String(20), nullable=False),
        sa.Column('first_name', sa.String(80), nullable=False),
        sa.Column('last_name', sa.String(80), nullable=False),
        sa.Column('phone', sa.String(20), nullable=True),
        sa.Column('dob', sa.String(20), nullable=True),
        sa.Column('flag_reasons', sa.JSON(), nullable=True),
        sa.Column('flagged_by', sa.String(100), nullable=True),
        sa.Column('flagged_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('phone')
    )

    op.create_table('appointments',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('patient_id', sa.String(20), nullable=False),
        sa.Column('visit_date', sa.Date(), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['patient_id'], ['patients.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_appointments_patient_id', 'appointments', ['patient_id'])

    op.create_table('tasks',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('patient_id', sa.String(20), nullable=False),
        sa.Column('provider', sa.String(100), nullable=False),
        sa.Column('type', sa.String(20), nullable=False),
        sa.Column('status', sa.String(20), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('amount', sa.String(20), nullable=True),
        sa.Column('assigned_agent_id', sa.String(50), nullable=True),
        sa.Column('timeline', sa.JSON(), nullable=False),
        sa.Column('unread', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['patient_id'], ['patients.id']),
        sa.ForeignKeyConstraint(['assigned_agent_id'], ['agents.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_tasks_patient_id', 'tasks', ['patient_id'])
    op.create_index('ix_tasks_status', 'tasks', ['status'])


def downgrade():
    op.drop_index('ix_tasks_status', 'tasks')
    op.drop_index('ix_tasks_patient_id', 'tasks')
    op.drop_table('tasks')
    op.drop_index('ix_appointments_patient_id', 'appointments')
    op.drop_table('appointments')
    op.drop_table('patients')
    op.drop_table('agents')
