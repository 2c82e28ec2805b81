"""initial delegation tables

Revision ID: 7c1e4a9b2d10
Revises:
Create Date: 2026-10-19 10:12:41.218304

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '7c1e4a9b2d10'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table('users',
    sa.Column('id', sa.String(length=36), nullable=False),
    sa.Column('email', sa.String(length=255), nullable=False),
    sa.Column('password_hash', sa.String(length=255), nullable=False),
    sa.Column('full_name', sa.String(length=255), nullable=True),
    sa.Column('is_active', sa.Boolean(), nullable=True),
    sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=True),
    sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=True),
    sa.PrimaryKeyConstraint('id'),
    sa.UniqueConstraint('email')
    )
    op.create_table('organizations',
    sa.Column('id', sa.String(length=36), nullable=False),
    sa.Column('name', sa.String(length=255), nullable=False),
    sa.Column('owner_id', sa.String(length=36), nullable=False),
    sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=True),
    sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=True),
    sa.ForeignKeyConstraint(['owner_id'], ['users.id'], ),
    sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_organizations_owner_id', 'organizations', ['owner_id'])
    op.create_table('employee_memberships',
    sa.Column('id', sa.String(length=36), nullable=False),
    sa.Column('organization_id', sa.String(length=36), nullable=False),
    sa.Column('user_id', sa.String(length=36), nullable=False),
    sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=True),
    sa.ForeignKeyConstraint(['organization_id'], ['organizations.id'], ),
    sa.ForeignKeyConstraint(['user_id'], ['users.id'], ),
    sa.PrimaryKeyConstraint('id'),
    sa.UniqueConstraint('organization_id', 'user_id', name='uq_organization_employee')
    )
    op.create_index('ix_employee_memberships_user_id', 'employee_memberships', ['user_id'])
    op.create_table('workspaces',
    sa.Column('id', sa.String(length=36), nullable=False),
    sa.Column('owner_id', sa.String(length=36), nullable=False),
    sa.Column('type', sa.String(length=50), nullable=False),
    sa.Column('name', sa.String(length=255), nullable=False),
    sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=True),
    sa.ForeignKeyConstraint(['owner_id'], ['users.id'], ),
    sa.PrimaryKeyConstraint('id'),
    sa.UniqueConstraint('owner_id', 'type', name='uq_workspace_owner_type')
    )
    op.create_index('ix_workspaces_owner_id', 'workspaces', ['owner_id'])
    op.create_table('friends',
    sa.Column('id', sa.String(length=36), nullable=False),
    sa.Column('workspace_id', sa.String(length=36), nullable=False),
    sa.Column('owner_id', sa.String(length=36), nullable=False),
    sa.Column('friend_user_id', sa.String(length=36), nullable=False),
    sa.Column('email', sa.String(length=255), nullable=False),
    sa.Column('nickname', sa.String(length=255), nullable=True),
    sa.Column('status', sa.String(length=20), nullable=False),
    sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=True),
    sa.ForeignKeyConstraint(['workspace_id'], ['workspaces.id'], ),
    sa.ForeignKeyConstraint(['owner_id'], ['users.id'], ),
    sa.ForeignKeyConstraint(['friend_user_id'], ['users.id'], ),
    sa.PrimaryKeyConstraint('id'),
    sa.UniqueConstraint('workspace_id', 'friend_user_id', name='uq_workspace_friend')
    )
    op.create_index('ix_friends_owner_id', 'friends', ['owner_id'])
    op.create_index('ix_friends_friend_user_id', 'friends', ['friend_user_id'])
    op.create_table('bords',
    sa.Column('id', sa.String(length=36), nullable=False),
    sa.Column('organization_id', sa.String(length=36), nullable=False),
    sa.Column('local_board_id', sa.String(length=255), nullable=False),
    sa.Column('title', sa.String(length=255), nullable=False),
    sa.Column('owner_id', sa.String(length=36), nullable=False),
    sa.Column('last_published_at', sa.DateTime(timezone=True), nullable=True),
    sa.Column('publish_version', sa.Integer(), nullable=False, server_default='0'),
    sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=True),
    sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=True),
    sa.ForeignKeyConstraint(['organization_id'], ['organizations.id'], ),
    sa.ForeignKeyConstraint(['owner_id'], ['users.id'], ),
    sa.PrimaryKeyConstraint('id'),
    sa.UniqueConstraint('organization_id', 'local_board_id', name='uq_bord_org_local_board')
    )
    op.create_index('ix_bords_organization_id', 'bords', ['organization_id'])
    op.create_index('ix_bords_owner_id', 'bords', ['owner_id'])
    op.create_table('task_assignments',
    sa.Column('id', sa.String(length=36), nullable=False),
    sa.Column('bord_id', sa.String(length=36), nullable=True),
    sa.Column('workspace_id', sa.String(length=36), nullable=True),
    sa.Column('organization_id', sa.String(length=36), nullable=True),
    sa.Column('context_type', sa.String(length=20), nullable=False),
    sa.Column('source_type', sa.String(length=30), nullable=False),
    sa.Column('source_id', sa.String(length=255), nullable=False),
    sa.Column('content', sa.Text(), nullable=False),
    sa.Column('assigned_to', sa.String(length=36), nullable=False),
    sa.Column('assigned_by', sa.String(length=36), nullable=False),
    sa.Column('priority', sa.String(length=20), nullable=False),
    sa.Column('due_date', sa.DateTime(timezone=True), nullable=True),
    sa.Column('execution_note', sa.Text(), nullable=True),
    sa.Column('status', sa.String(length=20), nullable=False),
    sa.Column('lifecycle_stage', sa.String(length=30), nullable=False),
    sa.Column('published_at', sa.DateTime(timezone=True), nullable=True),
    sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
    sa.Column('is_deleted', sa.Boolean(), nullable=False),
    sa.Column('column_id', sa.String(length=255), nullable=True),
    sa.Column('column_title', sa.String(length=255), nullable=True),
    sa.Column('available_columns', sa.JSON(), nullable=True),
    sa.Column('employee_updates', sa.JSON(), nullable=True),
    sa.Column('active_slot', sa.String(length=700), nullable=True),
    sa.Column('kanban_slot', sa.String(length=400), nullable=True),
    sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=True),
    sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=True),
    sa.ForeignKeyConstraint(['bord_id'], ['bords.id'], ),
    sa.ForeignKeyConstraint(['workspace_id'], ['workspaces.id'], ),
    sa.ForeignKeyConstraint(['organization_id'], ['organizations.id'], ),
    sa.ForeignKeyConstraint(['assigned_to'], ['users.id'], ),
    sa.ForeignKeyConstraint(['assigned_by'], ['users.id'], ),
    sa.PrimaryKeyConstraint('id'),
    sa.UniqueConstraint('active_slot'),
    sa.UniqueConstraint('kanban_slot')
    )
    op.create_index('ix_task_assignments_bord_id', 'task_assignments', ['bord_id'])
    op.create_index('ix_task_assignments_workspace_id', 'task_assignments', ['workspace_id'])
    op.create_index('ix_task_assignments_organization_id', 'task_assignments', ['organization_id'])
    op.create_index('ix_task_assignments_assigned_to', 'task_assignments', ['assigned_to'])
    op.create_index('ix_task_assignments_status', 'task_assignments', ['status'])
    op.create_index('ix_assignment_bord_status', 'task_assignments', ['bord_id', 'status'])
    op.create_index('ix_assignment_assignee_status', 'task_assignments', ['assigned_to', 'status'])
    op.create_index('ix_assignment_bord_source', 'task_assignments', ['bord_id', 'source_type', 'source_id'])
    op.create_index('ix_assignment_context_assignee', 'task_assignments', ['context_type', 'assigned_to', 'status'])
    op.create_table('change_trackers',
    sa.Column('id', sa.String(length=36), nullable=False),
    sa.Column('bord_id', sa.String(length=36), nullable=False),
    sa.Column('change_count', sa.Integer(), nullable=False),
    sa.Column('last_modified_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=True),
    sa.ForeignKeyConstraint(['bord_id'], ['bords.id'], ),
    sa.PrimaryKeyConstraint('id'),
    sa.UniqueConstraint('bord_id')
    )
    op.create_table('publish_snapshots',
    sa.Column('id', sa.String(length=36), nullable=False),
    sa.Column('bord_id', sa.String(length=36), nullable=False),
    sa.Column('version_number', sa.Integer(), nullable=False),
    sa.Column('published_by', sa.String(length=36), nullable=False),
    sa.Column('new_assignments', sa.Integer(), nullable=False),
    sa.Column('reassignments', sa.Integer(), nullable=False),
    sa.Column('unassignments', sa.Integer(), nullable=False),
    sa.Column('request_key', sa.String(length=255), nullable=True),
    sa.Column('published_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=True),
    sa.ForeignKeyConstraint(['bord_id'], ['bords.id'], ),
    sa.ForeignKeyConstraint(['published_by'], ['users.id'], ),
    sa.PrimaryKeyConstraint('id'),
    sa.UniqueConstraint('bord_id', 'version_number', name='uq_snapshot_bord_version'),
    sa.UniqueConstraint('bord_id', 'request_key', name='uq_snapshot_bord_request_key')
    )
    op.create_index('ix_publish_snapshots_bord_id', 'publish_snapshots', ['bord_id'])
    op.create_table('notifications',
    sa.Column('id', sa.String(length=36), nullable=False),
    sa.Column('user_id', sa.String(length=36), nullable=False),
    sa.Column('type', sa.String(length=50), nullable=False),
    sa.Column('title', sa.String(length=255), nullable=False),
    sa.Column('message', sa.Text(), nullable=False),
    sa.Column('metadata', sa.JSON(), nullable=True),
    sa.Column('is_read', sa.Boolean(), nullable=False),
    sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=True),
    sa.ForeignKeyConstraint(['user_id'], ['users.id'], ),
    sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_notification_user_read', 'notifications', ['user_id', 'is_read', 'created_at'])
    op.create_table('audit_events',
    sa.Column('id', sa.String(length=36), nullable=False),
    sa.Column('bord_id', sa.String(length=36), nullable=True),
    sa.Column('actor_user_id', sa.String(length=36), nullable=True),
    sa.Column('action', sa.String(length=255), nullable=False),
    sa.Column('metadata', sa.JSON(), nullable=True),
    sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=True),
    sa.ForeignKeyConstraint(['bord_id'], ['bords.id'], ),
    sa.ForeignKeyConstraint(['actor_user_id'], ['users.id'], ),
    sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_audit_events_bord_id', 'audit_events', ['bord_id'])


def downgrade():
    op.drop_index('ix_audit_events_bord_id', table_name='audit_events')
    op.drop_table('audit_events')
    op.drop_index('ix_notification_user_read', table_name='notifications')
    op.drop_table('notifications')
    op.drop_index('ix_publish_snapshots_bord_id', table_name='publish_snapshots')
    op.drop_table('publish_snapshots')
    op.drop_table('change_trackers')
    op.drop_table('task_assignments')
    op.drop_table('bords')
    op.drop_table('friends')
    op.drop_table('workspaces')
    op.drop_table('employee_memberships')
    op.drop_table('organizations')
    op.drop_table('users')
