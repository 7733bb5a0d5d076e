"""Add self-registration with admin approval

Users gain a status (pending/active/disabled) and a registration note.
Email becomes optional, unique only when present; username becomes unique.
Existing accounts are marked active.

Revision ID: 002
Revises: 001
Create Date: 2026-02-04 19:40:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '002'
down_revision = '001'
branch_labels = None
depends_on = None


def upgrade():
    with op.batch_alter_table('users') as batch_op:
        batch_op.add_column(sa.Column('status', sa.Text(), nullable=True))
        batch_op.add_column(sa.Column('note', sa.Text(), nullable=True))

    op.execute("UPDATE users SET status = 'active' WHERE status IS NULL")
    op.execute("UPDATE users SET note = '' WHERE note IS NULL")

    with op.batch_alter_table('users') as batch_op:
        batch_op.alter_column('status', existing_type=sa.Text(), nullable=False, server_default='pending')
        batch_op.alter_column('note', existing_type=sa.Text(), nullable=False, server_default='')
        batch_op.alter_column('email', existing_type=sa.Text(), nullable=True)
        batch_op.drop_constraint('users_email_key', type_='unique')
        batch_op.create_unique_constraint('uq_users_username', ['username'])
        batch_op.create_check_constraint(
            'ck_users_status', "status IN ('pending', 'active', 'disabled')"
        )

    op.create_index(
        'uq_users_email',
        'users',
        ['email'],
        unique=True,
        postgresql_where=sa.text('email IS NOT NULL'),
        sqlite_where=sa.text('email IS NOT NULL'),
    )


def downgrade():
    op.drop_index('uq_users_email', table_name='users')
    with op.batch_alter_table('users') as batch_op:
        batch_op.drop_constraint('ck_users_status', type_='check')
        batch_op.drop_constraint('uq_users_username', type_='unique')
        batch_op.create_unique_constraint('users_email_key', ['email'])
        batch_op.alter_column('email', existing_type=sa.Text(), nullable=False)
        batch_op.drop_column('note')
        batch_op.drop_column('status')
