"""Initial scheduling schema

Revision ID: 001_initial_scheduling
Revises:
Create Date: 2026-10-19

Creates the scheduling tables:
- events: shifts, meetings and activities (draft/published)
- event_sign_ups: roster entries, one per (event, user)
- users: read-only mirror of the identity provider's members
"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision = '001_initial_scheduling'
down_revision = None
branch_labels = None
depends_on = None


def _uuid_column():
    return sa.Column(
        'uuid',
        postgresql.UUID(as_uuid=True).with_variant(
            sa.LargeBinary(16), 'sqlite'
        ),
        nullable=False
    )


def upgrade() -> None:
    """
    Create events, event_sign_ups and users tables.

    Constraints:
    - events.max_capacity >= 0 (0 = unlimited)
    - events.end_time > events.start_time
    - events.status in (draft, published)
    - event_sign_ups unique on (event_id, user_uid); rows are deleted
      with their event
    """
    op.create_table(
        'events',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        _uuid_column(),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=False, server_default=''),
        sa.Column('type', sa.String(length=50), nullable=False),
        sa.Column('start_time', sa.DateTime(), nullable=False),
        sa.Column('end_time', sa.DateTime(), nullable=False),
        sa.Column('max_capacity', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='draft'),
        sa.Column('coordinator_uid', sa.String(length=128), nullable=True),
        sa.Column(
            'supervisor',
            postgresql.JSONB().with_variant(sa.JSON(), 'sqlite'),
            nullable=True
        ),
        sa.Column('published_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint('max_capacity >= 0', name='ck_events_max_capacity_non_negative'),
        sa.CheckConstraint('end_time > start_time', name='ck_events_end_after_start'),
        sa.CheckConstraint("status IN ('draft', 'published')", name='ck_events_status'),
    )
    op.create_index('ix_events_uuid', 'events', ['uuid'], unique=True)
    op.create_index('ix_events_start_time', 'events', ['start_time'])
    op.create_index('ix_events_coordinator_uid', 'events', ['coordinator_uid'])
    op.create_index('ix_events_status_type', 'events', ['status', 'type'])

    op.create_table(
        'event_sign_ups',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        _uuid_column(),
        sa.Column('event_id', sa.Integer(), nullable=False),
        sa.Column('user_uid', sa.String(length=128), nullable=False),
        sa.Column('signed_up_at', sa.DateTime(), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(
            ['event_id'], ['events.id'],
            name='fk_event_sign_ups_event_id',
            ondelete='CASCADE'
        ),
        sa.UniqueConstraint('event_id', 'user_uid', name='uq_event_sign_ups_event_user'),
    )
    op.create_index('ix_event_sign_ups_uuid', 'event_sign_ups', ['uuid'], unique=True)
    op.create_index('ix_event_sign_ups_event_id', 'event_sign_ups', ['event_id'])
    op.create_index('ix_event_sign_ups_user_uid', 'event_sign_ups', ['user_uid'])

    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        _uuid_column(),
        sa.Column('uid', sa.String(length=128), nullable=False),
        sa.Column('id_number', sa.String(length=10), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=True),
        sa.Column('role', sa.String(length=20), nullable=False, server_default='volunteer'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_users_uuid', 'users', ['uuid'], unique=True)
    op.create_index('ix_users_uid', 'users', ['uid'], unique=True)
    op.create_index('ix_users_id_number', 'users', ['id_number'], unique=True)


def downgrade() -> None:
    """Drop scheduling tables."""
    op.drop_index('ix_users_id_number', table_name='users')
    op.drop_index('ix_users_uid', table_name='users')
    op.drop_index('ix_users_uuid', table_name='users')
    op.drop_table('users')

    op.drop_index('ix_event_sign_ups_user_uid', table_name='event_sign_ups')
    op.drop_index('ix_event_sign_ups_event_id', table_name='event_sign_ups')
    op.drop_index('ix_event_sign_ups_uuid', table_name='event_sign_ups')
    op.drop_table('event_sign_ups')

    op.drop_index('ix_events_status_type', table_name='events')
    op.drop_index('ix_events_coordinator_uid', table_name='events')
    op.drop_index('ix_events_start_time', table_name='events')
    op.drop_index('ix_events_uuid', table_name='events')
    op.drop_table('events')
