"""Create download request ledger and preauthorization flag

Revision ID: 003
Revises: 002
Create Date: 2026-02-04 20:15:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '003'
down_revision = '002'
branch_labels = None
depends_on = None


def upgrade():
    with op.batch_alter_table('documents') as batch_op:
        batch_op.add_column(
            sa.Column('download_preauthorized', sa.Boolean(), server_default=sa.false(), nullable=False)
        )

    op.create_table(
        'download_requests',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('document_id', sa.Uuid(), nullable=False),
        sa.Column('requester_id', sa.Uuid(), nullable=False),
        sa.Column('applicant_name', sa.Text(), nullable=False),
        sa.Column('applicant_company', sa.Text(), nullable=False),
        sa.Column('applicant_contact', sa.Text(), nullable=False),
        sa.Column('message', sa.Text(), server_default='', nullable=False),
        sa.Column('status', sa.Text(), server_default='pending', nullable=False),
        sa.Column('approver_id', sa.Uuid(), nullable=True),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('approved_at', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column('rejected_at', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column('expires_at', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['document_id'], ['documents.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['requester_id'], ['users.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['approver_id'], ['users.id'], ondelete='SET NULL'),
        sa.CheckConstraint(
            "status IN ('pending', 'approved', 'rejected')",
            name='ck_download_requests_status'
        ),
    )

    op.create_index('idx_download_requests_document', 'download_requests', ['document_id'])
    op.create_index('idx_download_requests_requester', 'download_requests', ['requester_id', 'created_at'])
    op.create_index('idx_download_requests_status', 'download_requests', ['status'])
    # At most one pending request per (document, requester)
    op.create_index(
        'uq_download_requests_pending',
        'download_requests',
        ['document_id', 'requester_id'],
        unique=True,
        postgresql_where=sa.text("status = 'pending'"),
        sqlite_where=sa.text("status = 'pending'"),
    )


def downgrade():
    op.drop_index('uq_download_requests_pending', table_name='download_requests')
    op.drop_index('idx_download_requests_status', table_name='download_requests')
    op.drop_index('idx_download_requests_requester', table_name='download_requests')
    op.drop_index('idx_download_requests_document', table_name='download_requests')
    op.drop_table('download_requests')
    with op.batch_alter_table('documents') as batch_op:
        batch_op.drop_column('download_preauthorized')
