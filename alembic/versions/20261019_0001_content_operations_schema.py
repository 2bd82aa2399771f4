"""Content operations schema

Revision ID: 0001
Revises: 
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '0001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Users table
    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('email', sa.String(255), unique=True, nullable=False, index=True),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('role', sa.String(50), nullable=False, index=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, default=True),
        sa.Column('verified_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('reset_token_hash', sa.String(64), nullable=True, index=True),
        sa.Column('reset_token_expires_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )

    # Role-selected profiles
    op.create_table(
        'founder_profiles',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('user_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='CASCADE'), unique=True, nullable=False),
        sa.Column('company_name', sa.String(255), nullable=False),
        sa.Column('industry', sa.String(255), nullable=True, index=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_table(
        'admin_profiles',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('user_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='CASCADE'), unique=True, nullable=False),
        sa.Column('bio', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )

    # Admin-founder assignment graph
    op.create_table(
        'assignments',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('founder_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('admin_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('assigned_by', sa.Uuid(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('assigned_at', sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint('founder_id', 'admin_id', name='uq_assignments_founder_admin'),
    )
    op.create_index('ix_assignments_founder', 'assignments', ['founder_id'])
    op.create_index('ix_assignments_admin', 'assignments', ['admin_id'])

    # Monthly metrics
    op.create_table(
        'founder_metrics',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('founder_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('uploaded_by', sa.Uuid(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('month', sa.String(7), nullable=False),
        sa.Column('total_posts', sa.Integer(), nullable=False, default=0),
        sa.Column('total_impressions', sa.Integer(), nullable=False, default=0),
        sa.Column('total_comment_outreach', sa.Integer(), nullable=False, default=0),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint('founder_id', 'month', name='uq_founder_metrics_founder_month'),
        sa.CheckConstraint('total_posts >= 0', name='ck_founder_metrics_posts_nonneg'),
        sa.CheckConstraint('total_impressions >= 0', name='ck_founder_metrics_impressions_nonneg'),
        sa.CheckConstraint('total_comment_outreach >= 0', name='ck_founder_metrics_outreach_nonneg'),
    )
    op.create_index(
        'ix_founder_metrics_founder_created',
        'founder_metrics',
        ['founder_id', sa.text('created_at DESC')],
    )
    op.create_index('ix_founder_metrics_uploaded_by', 'founder_metrics', ['uploaded_by'])
    op.create_index('ix_founder_metrics_month', 'founder_metrics', ['month'])

    # Monthly PDF reports
    op.create_table(
        'founder_reports',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('founder_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('uploaded_by', sa.Uuid(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('month', sa.String(7), nullable=False),
        sa.Column('url', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint('founder_id', 'month', name='uq_founder_reports_founder_month'),
    )
    op.create_index(
        'ix_founder_reports_founder_created',
        'founder_reports',
        ['founder_id', sa.text('created_at DESC')],
    )
    op.create_index('ix_founder_reports_uploaded_by', 'founder_reports', ['uploaded_by'])

    # Posts
    op.create_table(
        'posts',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('founder_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('admin_id', sa.Uuid(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('caption', sa.Text(), nullable=False),
        sa.Column('images', sa.JSON(), nullable=False),
        sa.Column('status', sa.String(50), nullable=False, default='pending'),
        sa.Column('feedback', sa.Text(), nullable=True),
        sa.Column('scheduled_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_posts_founder_status', 'posts', ['founder_id', 'status'])
    op.create_index('ix_posts_admin_status', 'posts', ['admin_id', 'status'])
    op.create_index('ix_posts_status_scheduled', 'posts', ['status', 'scheduled_date'])

    # Activity log (append-only)
    op.create_table(
        'activity_logs',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('user_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('role', sa.String(50), nullable=False),
        sa.Column('action', sa.String(255), nullable=False),
        sa.Column('meta', sa.JSON(), nullable=False),
        sa.Column('timestamp', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_activity_logs_user_timestamp', 'activity_logs', ['user_id', 'timestamp'])
    op.create_index('ix_activity_logs_action_timestamp', 'activity_logs', ['action', 'timestamp'])
    op.create_index('ix_activity_logs_timestamp', 'activity_logs', ['timestamp'])


def downgrade() -> None:
    op.drop_table('activity_logs')
    op.drop_table('posts')
    op.drop_table('founder_reports')
    op.drop_table('founder_metrics')
    op.drop_table('assignments')
    op.drop_table('admin_profiles')
    op.drop_table('founder_profiles')
    op.drop_table('users')
