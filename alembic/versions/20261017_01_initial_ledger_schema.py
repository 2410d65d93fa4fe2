"""Initial ledger schema

Revision ID: 20261017_01
Revises:
Create Date: 2026-10-17 09:12:41.118203

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '20261017_01'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'token_stats',
        sa.Column('symbol_id', sa.BigInteger(), autoincrement=False, nullable=False),
        sa.Column('parent_id', sa.BigInteger(), nullable=False),
        sa.Column('supply', sa.BigInteger(), nullable=False),
        sa.Column('max_supply', sa.BigInteger(), nullable=False),
        sa.Column('issuer', sa.String(), nullable=False),
        sa.Column('ip_owner', sa.String(), nullable=False),
        sa.Column('token_uri', sa.Text(), nullable=False),
        sa.Column(
            'token_uri_hash',
            sa.String(length=64),
            nullable=False,
            comment='sha256 of token_uri; unique at creation, settokenuri may introduce duplicates',
        ),
        sa.Column('notary', sa.String(), nullable=False),
        sa.Column('notarized_at', sa.DateTime(), nullable=True),
        sa.Column('issued_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('symbol_id'),
    )
    op.create_index('ix_token_stats_issuer', 'token_stats', ['issuer'])
    op.create_index('ix_token_stats_token_uri_hash', 'token_stats', ['token_uri_hash'])
    op.create_index('ix_token_stats_parent_symbol', 'token_stats', ['parent_id', 'symbol_id'])

    op.create_table(
        'balances',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('owner', sa.String(), nullable=False),
        sa.Column('symbol_id', sa.BigInteger(), nullable=False),
        sa.Column('parent_id', sa.BigInteger(), nullable=False),
        sa.Column('amount', sa.BigInteger(), nullable=False),
        sa.Column('allow_send', sa.Boolean(), nullable=False),
        sa.Column('allow_recv', sa.Boolean(), nullable=False),
        sa.Column('paused', sa.Boolean(), nullable=False),
        sa.Column('payer', sa.String(), nullable=False, comment='Account charged for the row when it was created'),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('owner', 'symbol_id'),
    )
    op.create_index('ix_balances_owner', 'balances', ['owner'])
    op.create_index('ix_balances_symbol_id', 'balances', ['symbol_id'])

    op.create_table(
        'allowances',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('owner', sa.String(), nullable=False),
        sa.Column('spender', sa.String(), nullable=False),
        sa.Column('parent_id', sa.BigInteger(), nullable=False),
        sa.Column('remaining', sa.BigInteger(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('owner', 'spender', 'parent_id', name='uq_allowance_owner_spender_pid'),
    )
    op.create_index('ix_allowances_owner', 'allowances', ['owner'])
    op.create_index('ix_allowances_spender', 'allowances', ['spender'])

    op.create_table(
        'global_state',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('notaries', sa.JSON(), nullable=False),
        sa.Column('creators', sa.JSON(), nullable=False, comment='Creator whitelist'),
        sa.Column('check_creator', sa.Boolean(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )


def downgrade():
    op.drop_table('global_state')
    op.drop_index('ix_allowances_spender', table_name='allowances')
    op.drop_index('ix_allowances_owner', table_name='allowances')
    op.drop_table('allowances')
    op.drop_index('ix_balances_symbol_id', table_name='balances')
    op.drop_index('ix_balances_owner', table_name='balances')
    op.drop_table('balances')
    op.drop_index('ix_token_stats_parent_symbol', table_name='token_stats')
    op.drop_index('ix_token_stats_token_uri_hash', table_name='token_stats')
    op.drop_index('ix_token_stats_issuer', table_name='token_stats')
    op.drop_table('token_stats')
