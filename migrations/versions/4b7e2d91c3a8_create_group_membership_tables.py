"""create_group_membership_tables

Revision ID: 4b7e2d91c3a8
Revises:
Create Date: 2026-10-18 09:12:31.204117

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '4b7e2d91c3a8'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create users, groups, group_members and group_join_requests tables."""
    op.create_table('users',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('username', sa.String(length=50), nullable=True),
        sa.Column('first_name', sa.String(length=100), nullable=True),
        sa.Column('last_name', sa.String(length=100), nullable=True),
        sa.Column('avatar_url', sa.String(length=500), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('now()')),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email'),
    )

    op.create_table('groups',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('location', sa.String(length=255), nullable=True),
        sa.Column('avatar_url', sa.String(length=500), nullable=True),
        sa.Column('created_by', sa.UUID(), nullable=False),
        sa.Column('is_private', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('total_distance', sa.Float(), nullable=False, server_default='0'),
        sa.Column('total_rides', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.text('now()')),
        sa.ForeignKeyConstraint(['created_by'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_groups_created_by', 'groups', ['created_by'], unique=False)
    op.create_index('ix_groups_location', 'groups', ['location'], unique=False)

    op.create_table('group_members',
        sa.Column('group_id', sa.UUID(), nullable=False),
        sa.Column('user_id', sa.UUID(), nullable=False),
        sa.Column('role', sa.String(length=20), nullable=False, server_default='member'),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='active'),
        sa.Column('joined_at', sa.DateTime(), nullable=False, server_default=sa.text('now()')),
        sa.CheckConstraint("role IN ('owner', 'admin', 'member')", name='ck_group_members_role'),
        sa.CheckConstraint("status IN ('active', 'left', 'removed')", name='ck_group_members_status'),
        sa.ForeignKeyConstraint(['group_id'], ['groups.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('group_id', 'user_id'),
    )
    op.create_index('ix_group_members_user_id', 'group_members', ['user_id'], unique=False)

    op.create_table('group_join_requests',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('group_id', sa.UUID(), nullable=False),
        sa.Column('user_id', sa.UUID(), nullable=False),
        sa.Column('message', sa.Text(), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='pending'),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('now()')),
        sa.CheckConstraint(
            "status IN ('pending', 'approved', 'rejected')",
            name='ck_group_join_requests_status',
        ),
        sa.ForeignKeyConstraint(['group_id'], ['groups.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('group_id', 'user_id', name='uq_group_join_requests_group_user'),
    )
    op.create_index('ix_group_join_requests_group_id', 'group_join_requests', ['group_id'], unique=False)
    op.create_index('ix_group_join_requests_user_id', 'group_join_requests', ['user_id'], unique=False)

    # Clients only read through RLS; writes go through the API (service role)
    op.execute("ALTER TABLE groups ENABLE ROW LEVEL SECURITY;")
    op.execute("ALTER TABLE group_members ENABLE ROW LEVEL SECURITY;")
    op.execute("ALTER TABLE group_join_requests ENABLE ROW LEVEL SECURITY;")

    op.execute("""
        CREATE POLICY groups_select ON groups
            FOR SELECT TO authenticated USING (true);
    """)
    op.execute("""
        CREATE POLICY group_members_select ON group_members
            FOR SELECT TO authenticated USING (status = 'active');
    """)
    op.execute("""
        CREATE POLICY group_join_requests_select ON group_join_requests
            FOR SELECT USING (
                user_id = (SELECT auth.uid())
                OR group_id IN (
                    SELECT group_id FROM group_members
                    WHERE user_id = (SELECT auth.uid())
                    AND status = 'active'
                    AND role IN ('owner', 'admin')
                )
            );
    """)


def downgrade() -> None:
    """Drop group membership tables and RLS policies."""
    op.execute("DROP POLICY IF EXISTS group_join_requests_select ON group_join_requests;")
    op.execute("DROP POLICY IF EXISTS group_members_select ON group_members;")
    op.execute("DROP POLICY IF EXISTS groups_select ON groups;")

    op.drop_index('ix_group_join_requests_user_id', table_name='group_join_requests')
    op.drop_index('ix_group_join_requests_group_id', table_name='group_join_requests')
    op.drop_table('group_join_requests')
    op.drop_index('ix_group_members_user_id', table_name='group_members')
    op.drop_table('group_members')
    op.drop_index('ix_groups_location', table_name='groups')
    op.drop_index('ix_groups_created_by', table_name='groups')
    op.drop_table('groups')
    op.drop_table('users')
