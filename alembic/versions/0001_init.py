from alembic import op
import sqlalchemy as sa

revision = '0001_init'
down_revision = None
branch_labels = None
depends_on = None

def upgrade():
    op.create_table(
        'accounts',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('address', sa.String(500), nullable=False),
        sa.Column('phone_number', sa.String(50), nullable=False),
        sa.Column('bank_account_number', sa.BigInteger, nullable=True)
    )
    op.create_table(
        'payments',
        sa.Column('id', sa.Integer, primary_key=True, autoincrement=True),
        sa.Column('amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('notes', sa.Text, nullable=True),
        sa.Column('status', sa.String(20), nullable=False, server_default='PENDING'),
        sa.Column('account_id', sa.Integer, nullable=False),
        sa.Column('recipient_name', sa.String(200), nullable=False),
        sa.Column('recipient_bank_name', sa.String(200), nullable=False),
        sa.Column('recipient_account_number', sa.String(50), nullable=False)
    )
    op.create_foreign_key(
        'fk_payments_account_id_accounts',
        source_table='payments',
        referent_table='accounts',
        local_cols=['account_id'],
        remote_cols=['id'],
        ondelete='RESTRICT'
    )
    op.create_index('ix_payments_account_id', 'payments', ['account_id'])

def downgrade():
    op.drop_index('ix_payments_account_id', table_name='payments')
    op.drop_constraint('fk_payments_account_id_accounts', 'payments', type_='foreignkey')
    op.drop_table('payments')
    op.drop_table('accounts')
