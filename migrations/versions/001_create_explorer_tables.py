"""create explorer tables

Revision ID: 001
Revises:
Create Date: 2024-01-01 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'transactions',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('transaction_id', sa.String(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('confirmation_block', sa.BigInteger(), nullable=False),
        sa.Column('amount', sa.BigInteger(), nullable=False),
        sa.Column('confirmations_number', sa.Integer(), nullable=False),
        sa.Column('sender', sa.String(), nullable=False),
        sa.Column('receiver', sa.String(), nullable=False),
        sa.Column('input', sa.JSON(), nullable=True),
        sa.Column('outputs', sa.JSON(), nullable=False),
        sa.PrimaryKeyConstraint('id', name=op.f('pk__transactions')),
        sa.UniqueConstraint('transaction_id', name=op.f('uq__transactions__transaction_id')),
    )
    op.create_index(op.f('ix__transactions_confirmation_block'), 'transactions', ['confirmation_block'])

    op.create_table(
        'addresses',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('address', sa.String(), nullable=False),
        sa.Column('balance', sa.BigInteger(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id', name=op.f('pk__addresses')),
        sa.UniqueConstraint('address', name=op.f('uq__addresses__address')),
    )

    op.create_table(
        'address_transactions',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('address', sa.String(), nullable=False),
        sa.Column('transaction_id', sa.String(), nullable=False),
        sa.Column('is_sender', sa.Boolean(), nullable=False),
        sa.Column('amount', sa.BigInteger(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id', name=op.f('pk__address_transactions')),
        sa.UniqueConstraint('address', 'transaction_id', 'is_sender', name='uq_address_transaction_side'),
    )
    op.create_index(op.f('ix__address_transactions_address'), 'address_transactions', ['address'])


def downgrade() -> None:
    op.drop_index(op.f('ix__address_transactions_address'), table_name='address_transactions')
    op.drop_table('address_transactions')
    op.drop_table('addresses')
    op.drop_index(op.f('ix__transactions_confirmation_block'), table_name='transactions')
    op.drop_table('transactions')
