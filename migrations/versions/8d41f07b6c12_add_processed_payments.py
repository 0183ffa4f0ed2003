"""add processed payments for webhook dedup

Revision ID: 8d41f07b6c12
Revises: 5a7c1e9d3b20
Create Date: 2026-10-19 09:30:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '8d41f07b6c12'
down_revision = '5a7c1e9d3b20'
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'processed_payments',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('payment_id', sa.String(length=64), nullable=False),
        sa.Column('processed_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    with op.batch_alter_table('processed_payments', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_processed_payments_payment_id'), ['payment_id'], unique=True)


def downgrade():
    with op.batch_alter_table('processed_payments', schema=None) as batch_op:
        batch_op.drop_index(batch_op.f('ix_processed_payments_payment_id'))

    op.drop_table('processed_payments')
