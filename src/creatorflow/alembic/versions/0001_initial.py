"""initial

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19
"""
from __future__ import annotations
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '0001_initial'
down_revision = None
branch_labels = None
depends_on = None

priority_enum = sa.Enum('Low', 'Medium', 'High', name='priority')


def upgrade() -> None:
    op.create_table(
        'profiles',
        sa.Column('id', sa.Uuid(as_uuid=True), nullable=False),
        sa.Column('display_name', sa.String(length=255), nullable=False, server_default=''),
        sa.Column('avatar_url', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.PrimaryKeyConstraint('id', name='pk_profiles'),
    )
    op.create_table(
        'channels',
        sa.Column('id', sa.Uuid(as_uuid=True), nullable=False),
        sa.Column('user_id', sa.Uuid(as_uuid=True), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False, server_default=''),
        sa.Column('color', sa.String(length=32), nullable=False, server_default='#52525b'),
        sa.Column('icon', sa.String(length=64), nullable=False, server_default='Folder'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.ForeignKeyConstraint(['user_id'], ['profiles.id'], name='fk_channels_user_id_profiles', ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id', name='pk_channels'),
    )
    op.create_index('ix_channels_user_id', 'channels', ['user_id'])
    op.create_table(
        'statuses',
        sa.Column('id', sa.Uuid(as_uuid=True), nullable=False),
        sa.Column('user_id', sa.Uuid(as_uuid=True), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False, server_default=''),
        sa.Column('color', sa.String(length=32), nullable=False, server_default='#71717a'),
        sa.Column('order', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.ForeignKeyConstraint(['user_id'], ['profiles.id'], name='fk_statuses_user_id_profiles', ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id', name='pk_statuses'),
    )
    op.create_index('ix_statuses_user_id', 'statuses', ['user_id'])
    op.create_table(
        'ideas',
        sa.Column('id', sa.Uuid(as_uuid=True), nullable=False),
        sa.Column('user_id', sa.Uuid(as_uuid=True), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False, server_default=''),
        sa.Column('description', sa.Text(), nullable=False, server_default=''),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('channel_id', sa.Uuid(as_uuid=True), nullable=False),
        sa.Column('status_id', sa.Uuid(as_uuid=True), nullable=False),
        sa.Column('priority', priority_enum, nullable=False, server_default='Medium'),
        sa.Column('tags', sa.JSON(), nullable=False),
        sa.Column('scheduled_date', sa.Date(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('is_deleted', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.ForeignKeyConstraint(['user_id'], ['profiles.id'], name='fk_ideas_user_id_profiles', ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id', name='pk_ideas'),
    )
    op.create_index('ix_ideas_user_id', 'ideas', ['user_id'])
    op.create_index('ix_ideas_title', 'ideas', ['title'])
    op.create_index('ix_ideas_channel_id', 'ideas', ['channel_id'])
    op.create_index('ix_ideas_status_id', 'ideas', ['status_id'])
    op.create_index('ix_ideas_is_deleted', 'ideas', ['is_deleted'])


def downgrade() -> None:
    op.drop_index('ix_ideas_is_deleted', table_name='ideas')
    op.drop_index('ix_ideas_status_id', table_name='ideas')
    op.drop_index('ix_ideas_channel_id', table_name='ideas')
    op.drop_index('ix_ideas_title', table_name='ideas')
    op.drop_index('ix_ideas_user_id', table_name='ideas')
    op.drop_table('ideas')
    priority_enum.drop(op.get_bind(), checkfirst=True)
    op.drop_index('ix_statuses_user_id', table_name='statuses')
    op.drop_table('statuses')
    op.drop_index('ix_channels_user_id', table_name='channels')
    op.drop_table('channels')
    op.drop_table('profiles')
