"""Initial database schema

Revision ID: 001
Revises:
Create Date: 2024-01-01

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

FORM_STATUSES = ('draft', 'submitted', 'under_review', 'approved', 'returned', 'rejected')
NOTIFICATION_TYPES = (
    'info', 'success', 'warning', 'error',
    'form_submitted', 'form_returned', 'form_approved', 'form_rejected', 'form_assigned',
)
NOTIFICATION_STATUSES = ('unread', 'read', 'archived')


def upgrade() -> None:
    # Form templates table
    op.create_table(
        'form_templates',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('description', sa.String(500), nullable=True),
        sa.Column('category', sa.String(100), nullable=True),
        sa.Column('structure_json', sa.Text(), nullable=False),
        sa.Column('total_pages', sa.Integer(), nullable=True),
        sa.Column('original_file_name', sa.String(255), nullable=True),
        sa.Column('generated_by', sa.String(100), nullable=True),
        sa.Column('generated_at', sa.DateTime(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=True, default=True),
        sa.Column('created_by', sa.String(100), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_form_templates_id', 'form_templates', ['id'])

    # Form submissions table
    op.create_table(
        'form_submissions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('form_template_id', sa.Integer(), nullable=False),
        sa.Column('submitted_by', sa.String(100), nullable=False),
        sa.Column('data', sa.JSON(), nullable=False),
        sa.Column('status', sa.Enum(*FORM_STATUSES, name='formstatus', native_enum=False), nullable=False),
        sa.Column('current_page', sa.Integer(), nullable=True),
        sa.Column('is_complete', sa.Boolean(), nullable=True),
        sa.Column('reviewed_by', sa.String(100), nullable=True),
        sa.Column('reviewed_at', sa.DateTime(), nullable=True),
        sa.Column('review_notes', sa.Text(), nullable=True),
        sa.Column('return_reason', sa.Text(), nullable=True),
        sa.Column('is_under_review', sa.Boolean(), nullable=True),
        sa.Column('assigned_reviewer', sa.String(100), nullable=True),
        sa.Column('review_attempts', sa.Integer(), nullable=True),
        sa.Column('revision_of_id', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.Column('submitted_at', sa.DateTime(), nullable=True),
        sa.Column('approved_at', sa.DateTime(), nullable=True),
        sa.Column('returned_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['form_template_id'], ['form_templates.id']),
        sa.ForeignKeyConstraint(['revision_of_id'], ['form_submissions.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_form_submissions_id', 'form_submissions', ['id'])
    op.create_index('ix_form_submissions_form_template_id', 'form_submissions', ['form_template_id'])
    op.create_index('ix_form_submissions_submitted_by', 'form_submissions', ['submitted_by'])
    op.create_index('ix_form_submissions_status', 'form_submissions', ['status'])
    op.create_index('ix_form_submissions_assigned_reviewer', 'form_submissions', ['assigned_reviewer'])
    # At most one draft per (template, submitter)
    op.create_index(
        'uq_form_submissions_one_draft',
        'form_submissions',
        ['form_template_id', 'submitted_by'],
        unique=True,
        sqlite_where=sa.text("status = 'draft'"),
        postgresql_where=sa.text("status = 'draft'"),
    )

    # Notifications table
    op.create_table(
        'notifications',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('recipient_id', sa.String(100), nullable=False),
        sa.Column('title', sa.String(200), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('type', sa.Enum(*NOTIFICATION_TYPES, name='notificationtype', native_enum=False), nullable=False),
        sa.Column('status', sa.Enum(*NOTIFICATION_STATUSES, name='notificationstatus', native_enum=False), nullable=False),
        sa.Column('form_submission_id', sa.Integer(), nullable=True),
        sa.Column('form_template_id', sa.Integer(), nullable=True),
        sa.Column('action_url', sa.String(512), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('read_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['form_submission_id'], ['form_submissions.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['form_template_id'], ['form_templates.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_notifications_id', 'notifications', ['id'])
    op.create_index('ix_notifications_recipient_id', 'notifications', ['recipient_id'])
    op.create_index('ix_notifications_status', 'notifications', ['status'])

    # Audit logs table
    op.create_table(
        'audit_logs',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.String(100), nullable=False),
        sa.Column('action', sa.String(100), nullable=False),
        sa.Column('entity_type', sa.String(100), nullable=False),
        sa.Column('entity_id', sa.Integer(), nullable=True),
        sa.Column('details', sa.Text(), nullable=True),
        sa.Column('old_values', sa.JSON(), nullable=True),
        sa.Column('new_values', sa.JSON(), nullable=True),
        sa.Column('ip_address', sa.String(45), nullable=True),
        sa.Column('user_agent', sa.String(512), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_audit_logs_id', 'audit_logs', ['id'])
    op.create_index('ix_audit_logs_user_id', 'audit_logs', ['user_id'])
    op.create_index('ix_audit_logs_action', 'audit_logs', ['action'])
    op.create_index('ix_audit_logs_entity_id', 'audit_logs', ['entity_id'])


def downgrade() -> None:
    op.drop_table('audit_logs')
    op.drop_table('notifications')
    op.drop_index('uq_form_submissions_one_draft', table_name='form_submissions')
    op.drop_table('form_submissions')
    op.drop_table('form_templates')
