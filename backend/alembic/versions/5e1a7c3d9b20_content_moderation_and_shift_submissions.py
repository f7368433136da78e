"""content moderation and shift submissions

Revision ID: 5e1a7c3d9b20
Revises:
Create Date: 2026-10-18

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


revision: str = '5e1a7c3d9b20'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'sites',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('code', sa.String(length=20), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.text('true')),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_sites_code'), 'sites', ['code'], unique=True)

    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('full_name', sa.String(length=128), nullable=False),
        sa.Column('phone', sa.String(length=32), nullable=True),
        sa.Column('role', sa.String(length=32), nullable=False, server_default='LOCAL_GUIDE'),
        sa.Column('status', sa.String(length=16), nullable=False, server_default='active'),
        sa.Column('site_id', sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(['site_id'], ['sites.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_users_email'), 'users', ['email'], unique=True)
    op.create_index(op.f('ix_users_site_id'), 'users', ['site_id'], unique=False)

    op.create_table(
        'content_items',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('code', sa.String(length=20), nullable=False),
        sa.Column('site_id', sa.Integer(), nullable=False),
        sa.Column('kind', sa.String(length=20), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='pending'),
        sa.Column('rejection_reason', sa.String(length=1000), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.text('true')),
        sa.Column('payload', sa.JSON(), nullable=False),
        sa.Column('created_by_user_id', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('reviewed_by_user_id', sa.Integer(), nullable=True),
        sa.Column('reviewed_at', sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint(
            "(status = 'rejected') = (rejection_reason IS NOT NULL)",
            name='ck_content_items_rejection_reason',
        ),
        sa.ForeignKeyConstraint(['created_by_user_id'], ['users.id']),
        sa.ForeignKeyConstraint(['reviewed_by_user_id'], ['users.id']),
        sa.ForeignKeyConstraint(['site_id'], ['sites.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('code'),
    )
    op.create_index(op.f('ix_content_items_site_id'), 'content_items', ['site_id'], unique=False)
    op.create_index(op.f('ix_content_items_kind'), 'content_items', ['kind'], unique=False)
    op.create_index(op.f('ix_content_items_status'), 'content_items', ['status'], unique=False)
    op.create_index('ix_content_items_site_kind_status', 'content_items', ['site_id', 'kind', 'status'], unique=False)

    op.create_table(
        'shift_submissions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('code', sa.String(length=20), nullable=False),
        sa.Column('guide_id', sa.Integer(), nullable=False),
        sa.Column('site_id', sa.Integer(), nullable=False),
        sa.Column('submission_type', sa.String(length=10), nullable=False),
        sa.Column('week_start_date', sa.Date(), nullable=False),
        sa.Column('change_reason', sa.String(length=1000), nullable=True),
        sa.Column('previous_submission_id', sa.Integer(), nullable=True),
        sa.Column('changes', sa.JSON(), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='pending'),
        sa.Column('rejection_reason', sa.String(length=1000), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.text('true')),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('reviewed_by_user_id', sa.Integer(), nullable=True),
        sa.Column('reviewed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('superseded_by_id', sa.Integer(), nullable=True),
        sa.Column('superseded_at', sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint(
            "(status = 'rejected') = (rejection_reason IS NOT NULL)",
            name='ck_shift_submissions_rejection_reason',
        ),
        sa.ForeignKeyConstraint(['guide_id'], ['users.id']),
        sa.ForeignKeyConstraint(['site_id'], ['sites.id']),
        sa.ForeignKeyConstraint(['reviewed_by_user_id'], ['users.id']),
        sa.ForeignKeyConstraint(['previous_submission_id'], ['shift_submissions.id']),
        sa.ForeignKeyConstraint(['superseded_by_id'], ['shift_submissions.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('code'),
    )
    op.create_index(op.f('ix_shift_submissions_guide_id'), 'shift_submissions', ['guide_id'], unique=False)
    op.create_index(op.f('ix_shift_submissions_site_id'), 'shift_submissions', ['site_id'], unique=False)
    op.create_index(op.f('ix_shift_submissions_week_start_date'), 'shift_submissions', ['week_start_date'], unique=False)
    op.create_index(op.f('ix_shift_submissions_status'), 'shift_submissions', ['status'], unique=False)
    op.create_index('ix_shift_submissions_site_status', 'shift_submissions', ['site_id', 'status'], unique=False)
    # at most one approved schedule per guide
    op.create_index(
        'uq_shift_submissions_guide_approved',
        'shift_submissions',
        ['guide_id'],
        unique=True,
        postgresql_where=sa.text("status = 'approved'"),
        sqlite_where=sa.text("status = 'approved'"),
    )

    op.create_table(
        'submission_shifts',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('submission_id', sa.Integer(), nullable=False),
        sa.Column('day_of_week', sa.Integer(), nullable=False),
        sa.Column('start_time', sa.Time(), nullable=False),
        sa.Column('end_time', sa.Time(), nullable=False),
        sa.ForeignKeyConstraint(['submission_id'], ['shift_submissions.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('submission_id', 'day_of_week', name='uq_submission_shifts_day'),
    )
    op.create_index(op.f('ix_submission_shifts_submission_id'), 'submission_shifts', ['submission_id'], unique=False)

    op.create_table(
        'moderation_audit',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('entity_type', sa.String(length=20), nullable=False),
        sa.Column('entity_id', sa.Integer(), nullable=False),
        sa.Column('action', sa.String(length=20), nullable=False),
        sa.Column('actor_user_id', sa.Integer(), nullable=True),
        sa.Column('from_status', sa.String(length=20), nullable=True),
        sa.Column('to_status', sa.String(length=20), nullable=True),
        sa.Column('from_active', sa.Boolean(), nullable=True),
        sa.Column('to_active', sa.Boolean(), nullable=True),
        sa.Column('note', sa.String(length=1000), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['actor_user_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_moderation_audit_entity', 'moderation_audit', ['entity_type', 'entity_id'], unique=False)


def downgrade() -> None:
    op.drop_index('ix_moderation_audit_entity', table_name='moderation_audit')
    op.drop_table('moderation_audit')

    op.drop_index(op.f('ix_submission_shifts_submission_id'), table_name='submission_shifts')
    op.drop_table('submission_shifts')

    op.drop_index('uq_shift_submissions_guide_approved', table_name='shift_submissions')
    op.drop_index('ix_shift_submissions_site_status', table_name='shift_submissions')
    op.drop_index(op.f('ix_shift_submissions_status'), table_name='shift_submissions')
    op.drop_index(op.f('ix_shift_submissions_week_start_date'), table_name='shift_submissions')
    op.drop_index(op.f('ix_shift_submissions_site_id'), table_name='shift_submissions')
    op.drop_index(op.f('ix_shift_submissions_guide_id'), table_name='shift_submissions')
    op.drop_table('shift_submissions')

    op.drop_index('ix_content_items_site_kind_status', table_name='content_items')
    op.drop_index(op.f('ix_content_items_status'), table_name='content_items')
    op.drop_index(op.f('ix_content_items_kind'), table_name='content_items')
    op.drop_index(op.f('ix_content_items_site_id'), table_name='content_items')
    op.drop_table('content_items')

    op.drop_index(op.f('ix_users_site_id'), table_name='users')
    op.drop_index(op.f('ix_users_email'), table_name='users')
    op.drop_table('users')

    op.drop_index(op.f('ix_sites_code'), table_name='sites')
    op.drop_table('sites')
