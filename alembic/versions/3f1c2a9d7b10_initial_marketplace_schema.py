"""initial_marketplace_schema

Revision ID: 3f1c2a9d7b10
Revises:
Create Date: 2026-10-16 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f1c2a9d7b10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create marketplace tables."""

    op.create_table('users',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('full_name', sa.String(length=255), nullable=True),
        sa.Column('role', sa.String(length=50), nullable=False),
        sa.Column('free_posts_used', sa.Integer(), nullable=False),
        sa.Column('last_free_post_reset', sa.DateTime(), nullable=True),
        sa.Column('free_bids_used', sa.Integer(), nullable=False),
        sa.Column('last_free_bid_reset', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_users_id', 'users', ['id'], unique=False)
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    # Named sequences backing the public numeric ids
    op.create_table('counters',
        sa.Column('name', sa.String(length=50), nullable=False),
        sa.Column('sequence', sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint('name'),
    )

    op.create_table('user_subscriptions',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('subscription_id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('plan_name', sa.String(length=50), nullable=False),
        sa.Column('plan_price', sa.Float(), nullable=False),
        sa.Column('plan_post_limit', sa.Integer(), nullable=False),
        sa.Column('plan_bid_limit', sa.Integer(), nullable=False),
        sa.Column('plan_validity_months', sa.Integer(), nullable=False),
        sa.Column('payment_status', sa.String(length=20), nullable=False),
        sa.Column('transaction_id', sa.String(length=255), nullable=False),
        sa.Column('posts_used', sa.Integer(), nullable=False),
        sa.Column('bids_used', sa.Integer(), nullable=False),
        sa.Column('end_date', sa.DateTime(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_user_subscriptions_subscription_id', 'user_subscriptions', ['subscription_id'], unique=True)
    op.create_index('ix_user_subscriptions_user_id', 'user_subscriptions', ['user_id'], unique=False)

    op.create_table('projects',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('project_id', sa.Integer(), nullable=False),
        sa.Column('owner_id', sa.Uuid(), nullable=False),
        sa.Column('project_name', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('skills', sa.JSON(), nullable=False),
        sa.Column('min_budget', sa.Float(), nullable=False),
        sa.Column('max_budget', sa.Float(), nullable=False),
        sa.Column('duration_days', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(length=50), nullable=False),
        sa.Column('assigned_to', sa.Uuid(), nullable=True),
        sa.Column('work_url', sa.String(length=1024), nullable=True),
        sa.Column('additional_info', sa.Text(), nullable=False),
        sa.Column('chat_room_id', sa.String(length=64), nullable=False),
        sa.Column('review_submitted', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['owner_id'], ['users.id'], ondelete='RESTRICT'),
        sa.ForeignKeyConstraint(['assigned_to'], ['users.id'], ondelete='RESTRICT'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_projects_project_id', 'projects', ['project_id'], unique=True)
    op.create_index('ix_projects_owner_id', 'projects', ['owner_id'], unique=False)
    op.create_index('ix_projects_status', 'projects', ['status'], unique=False)

    op.create_table('bids',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('bid_id', sa.Integer(), nullable=False),
        sa.Column('project_id', sa.Integer(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('amount', sa.Float(), nullable=False),
        sa.Column('proposal', sa.Text(), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['project_id'], ['projects.project_id'], ondelete='RESTRICT'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='RESTRICT'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('project_id', 'user_id', name='ux_bids_project_user'),
    )
    op.create_index('ix_bids_bid_id', 'bids', ['bid_id'], unique=True)
    op.create_index('ix_bids_project_id', 'bids', ['project_id'], unique=False)
    op.create_index('ix_bids_user_id', 'bids', ['user_id'], unique=False)

    op.create_table('project_payments',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('payment_id', sa.Integer(), nullable=False),
        sa.Column('project_id', sa.Integer(), nullable=False),
        sa.Column('bidder_id', sa.Uuid(), nullable=False),
        sa.Column('owner_id', sa.Uuid(), nullable=False),
        sa.Column('bid_amount', sa.Float(), nullable=False),
        sa.Column('admin_cut', sa.Float(), nullable=False),
        sa.Column('final_amount', sa.Float(), nullable=False),
        sa.Column('payment_status', sa.String(length=20), nullable=False),
        sa.Column('transaction_id', sa.String(length=255), nullable=True),
        sa.Column('verified_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['project_id'], ['projects.project_id'], ondelete='RESTRICT'),
        sa.ForeignKeyConstraint(['bidder_id'], ['users.id'], ondelete='RESTRICT'),
        sa.ForeignKeyConstraint(['owner_id'], ['users.id'], ondelete='RESTRICT'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_project_payments_payment_id', 'project_payments', ['payment_id'], unique=True)
    # One escrow record per project
    op.create_index('ix_project_payments_project_id', 'project_payments', ['project_id'], unique=True)
    op.create_index('ix_project_payments_bidder_id', 'project_payments', ['bidder_id'], unique=False)
    op.create_index('ix_project_payments_owner_id', 'project_payments', ['owner_id'], unique=False)

    op.create_table('project_works',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('work_id', sa.Integer(), nullable=False),
        sa.Column('submission_id', sa.Integer(), nullable=False),
        sa.Column('project_id', sa.Integer(), nullable=False),
        sa.Column('bidder_id', sa.Uuid(), nullable=False),
        sa.Column('owner_id', sa.Uuid(), nullable=False),
        sa.Column('file_url', sa.String(length=1024), nullable=False),
        sa.Column('attempt_number', sa.Integer(), nullable=False),
        sa.Column('work_status', sa.String(length=30), nullable=False),
        sa.Column('owner_comment', sa.Text(), nullable=False),
        sa.Column('dispute_status', sa.String(length=30), nullable=False),
        sa.Column('dispute_reason', sa.Text(), nullable=False),
        sa.Column('admin_decision', sa.Text(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['project_id'], ['projects.project_id'], ondelete='RESTRICT'),
        sa.ForeignKeyConstraint(['bidder_id'], ['users.id'], ondelete='RESTRICT'),
        sa.ForeignKeyConstraint(['owner_id'], ['users.id'], ondelete='RESTRICT'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('submission_id'),
    )
    op.create_index('ix_project_works_work_id', 'project_works', ['work_id'], unique=True)
    op.create_index('ix_project_works_project_id', 'project_works', ['project_id'], unique=False)
    op.create_index('ix_project_works_bidder_id', 'project_works', ['bidder_id'], unique=False)

    op.create_table('notifications',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('type', sa.String(length=50), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('project_id', sa.Integer(), nullable=False),
        sa.Column('read', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_notifications_user_id', 'notifications', ['user_id'], unique=False)


def downgrade() -> None:
    """Drop marketplace tables."""
    op.drop_index('ix_notifications_user_id', table_name='notifications')
    op.drop_table('notifications')
    op.drop_index('ix_project_works_bidder_id', table_name='project_works')
    op.drop_index('ix_project_works_project_id', table_name='project_works')
    op.drop_index('ix_project_works_work_id', table_name='project_works')
    op.drop_table('project_works')
    op.drop_index('ix_project_payments_owner_id', table_name='project_payments')
    op.drop_index('ix_project_payments_bidder_id', table_name='project_payments')
    op.drop_index('ix_project_payments_project_id', table_name='project_payments')
    op.drop_index('ix_project_payments_payment_id', table_name='project_payments')
    op.drop_table('project_payments')
    op.drop_index('ix_bids_user_id', table_name='bids')
    op.drop_index('ix_bids_project_id', table_name='bids')
    op.drop_index('ix_bids_bid_id', table_name='bids')
    op.drop_table('bids')
    op.drop_index('ix_projects_status', table_name='projects')
    op.drop_index('ix_projects_owner_id', table_name='projects')
    op.drop_index('ix_projects_project_id', table_name='projects')
    op.drop_table('projects')
    op.drop_index('ix_user_subscriptions_user_id', table_name='user_subscriptions')
    op.drop_index('ix_user_subscriptions_subscription_id', table_name='user_subscriptions')
    op.drop_table('user_subscriptions')
    op.drop_table('counters')
    op.drop_index('ix_users_email', table_name='users')
    op.drop_index('ix_users_id', table_name='users')
    op.drop_table('users')
