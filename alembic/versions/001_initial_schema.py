"""initial schema

Revision ID: 001
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = '001'
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Detect database type
    bind = op.get_bind()
    is_sqlite = bind.dialect.name == 'sqlite'

    json_type = sa.JSON() if is_sqlite else postgresql.JSONB(astext_type=sa.Text())
    timestamp_default = sa.text("(datetime('now'))") if is_sqlite else sa.text('now()')

    # Conversation memory
    op.create_table(
        'conversation_turns',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('env_id', sa.String(length=64), nullable=False),
        sa.Column('role', sa.String(length=20), nullable=False),
        sa.Column('content', sa.Text(), nullable=False, server_default=''),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=timestamp_default),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_conversation_turns_env_id', 'conversation_turns', ['env_id'])
    op.create_index('ix_conversation_turns_created_at', 'conversation_turns', ['created_at'])

    # Approval records
    op.create_table(
        'approval_records',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('approval_id', sa.String(length=36), nullable=False),
        sa.Column('env_id', sa.String(length=64), nullable=False),
        sa.Column('tool_id', sa.String(length=100), nullable=False),
        sa.Column('tool_name', sa.String(length=255), nullable=False),
        sa.Column('tool_description', sa.Text(), nullable=True),
        sa.Column('scopes', json_type, nullable=True),
        sa.Column('args', json_type, nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='pending'),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=timestamp_default),
        sa.Column('decision_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('approval_id')
    )
    op.create_index('ix_approval_records_approval_id', 'approval_records', ['approval_id'])
    op.create_index('ix_approval_records_env_id', 'approval_records', ['env_id'])
    op.create_index('ix_approval_records_tool_id', 'approval_records', ['tool_id'])
    op.create_index('ix_approval_records_status', 'approval_records', ['status'])
    op.create_index('ix_approval_records_created_at', 'approval_records', ['created_at'])

    # Audit events
    op.create_table(
        'audit_events',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('event_id', sa.String(length=36), nullable=False),
        sa.Column('env_id', sa.String(length=64), nullable=False),
        sa.Column('event_type', sa.String(length=30), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('detail', sa.Text(), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=True),
        sa.Column('feature', sa.String(length=100), nullable=True),
        sa.Column('request_id', sa.String(length=64), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=timestamp_default),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('event_id')
    )
    op.create_index('ix_audit_events_event_id', 'audit_events', ['event_id'])
    op.create_index('ix_audit_events_env_id', 'audit_events', ['env_id'])
    op.create_index('ix_audit_events_event_type', 'audit_events', ['event_type'])
    op.create_index('ix_audit_events_created_at', 'audit_events', ['created_at'])

    # Tool executions
    op.create_table(
        'tool_executions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('env_id', sa.String(length=64), nullable=False),
        sa.Column('tool_id', sa.String(length=100), nullable=False),
        sa.Column('tool_name', sa.String(length=255), nullable=False),
        sa.Column('status', sa.String(length=30), nullable=False),
        sa.Column('args', json_type, nullable=True),
        sa.Column('result', json_type, nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=timestamp_default),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_tool_executions_env_id', 'tool_executions', ['env_id'])
    op.create_index('ix_tool_executions_tool_id', 'tool_executions', ['tool_id'])
    op.create_index('ix_tool_executions_created_at', 'tool_executions', ['created_at'])

    # Custom demos
    op.create_table(
        'demo_environments',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('env_id', sa.String(length=64), nullable=False),
        sa.Column('auth0_sub', sa.String(length=255), nullable=False),
        sa.Column('template_id', sa.String(length=100), nullable=False),
        sa.Column('env_type', sa.String(length=30), nullable=False, server_default='custom'),
        sa.Column('config_overrides', json_type, nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=timestamp_default),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=timestamp_default),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('env_id')
    )
    op.create_index('ix_demo_environments_env_id', 'demo_environments', ['env_id'])
    op.create_index('ix_demo_environments_auth0_sub', 'demo_environments', ['auth0_sub'])

    # Stored templates
    op.create_table(
        'stored_templates',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('template_id', sa.String(length=100), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('config', json_type, nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=timestamp_default),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('template_id')
    )
    op.create_index('ix_stored_templates_template_id', 'stored_templates', ['template_id'])


def downgrade() -> None:
    op.drop_table('stored_templates')
    op.drop_table('demo_environments')
    op.drop_table('tool_executions')
    op.drop_table('audit_events')
    op.drop_table('approval_records')
    op.drop_table('conversation_turns')
