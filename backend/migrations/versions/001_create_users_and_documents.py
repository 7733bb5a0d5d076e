"""Create users and documents tables

Revision ID: 001
Revises:
Create Date: 2026-02-04 18:00:00.000000

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = '001'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('username', sa.Text(), nullable=False),
        sa.Column('email', sa.Text(), nullable=False),
        sa.Column('password_hash', sa.Text(), nullable=False),
        sa.Column('role', sa.Text(), nullable=False),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email', name='users_email_key'),
        sa.CheckConstraint("role IN ('admin', 'user')", name='ck_users_role'),
    )

    op.create_table(
        'documents',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.Text(), nullable=False),
        sa.Column('mime_type', sa.Text(), server_default='application/octet-stream', nullable=False),
        sa.Column('size', sa.BigInteger(), server_default='0', nullable=False),
        sa.Column('notes', sa.Text(), server_default='', nullable=False),
        sa.Column('owner_id', sa.Uuid(), nullable=False),
        sa.Column('permission', sa.Text(), server_default='public', nullable=False),
        sa.Column('allowed_users', postgresql.JSONB(astext_type=sa.Text()).with_variant(sa.JSON(), 'sqlite'),
                  server_default=sa.text("'[]'"), nullable=False),
        sa.Column('is_generated', sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column('storage_rel_path', sa.Text(), nullable=False),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['owner_id'], ['users.id'], ondelete='CASCADE'),
        sa.CheckConstraint("permission IN ('public', 'private', 'specific')", name='ck_documents_permission'),
        sa.CheckConstraint('size >= 0', name='ck_documents_size'),
    )

    op.create_index('idx_documents_owner', 'documents', ['owner_id'])
    op.create_index('idx_documents_created_at', 'documents', [sa.text('created_at DESC')])


def downgrade():
    op.drop_index('idx_documents_created_at', table_name='documents')
    op.drop_index('idx_documents_owner', table_name='documents')
    op.drop_table('documents')
    op.drop_table('users')
