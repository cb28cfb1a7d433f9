"""create_phorest_sync_tables

Revision ID: 4f2a9c1e7b30
Revises:
Create Date: 2026-10-17 09:12:44.118203

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '4f2a9c1e7b30'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    # Use inspection to check if tables already exist (create_all() may have
    # already created them on a fresh database)
    from sqlalchemy import inspect
    conn = op.get_bind()
    inspector = inspect(conn)
    existing_tables = inspector.get_table_names()

    if 'locations' not in existing_tables:
        op.create_table(
            'locations',
            sa.Column('id', sa.String(length=50), nullable=False),
            sa.Column('name', sa.String(length=150), nullable=False),
            sa.Column('phorest_branch_id', sa.String(length=100), nullable=True),
            sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
            sa.Column('created_at', sa.DateTime(), nullable=True),
            sa.PrimaryKeyConstraint('id')
        )

    if 'phorest_staff_mapping' not in existing_tables:
        op.create_table(
            'phorest_staff_mapping',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('user_id', sa.String(length=50), nullable=False),
            sa.Column('phorest_staff_id', sa.String(length=100), nullable=False),
            sa.Column('phorest_staff_name', sa.String(length=150), nullable=True),
            sa.Column('phorest_staff_email', sa.String(length=150), nullable=True),
            sa.Column('phorest_branch_id', sa.String(length=100), nullable=True),
            sa.Column('phorest_branch_name', sa.String(length=150), nullable=True),
            sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
            sa.Column('created_at', sa.DateTime(), nullable=True),
            sa.Column('updated_at', sa.DateTime(), nullable=True),
            sa.PrimaryKeyConstraint('id'),
            sa.UniqueConstraint('phorest_staff_id')
        )
        op.create_index('ix_phorest_staff_mapping_user_id', 'phorest_staff_mapping', ['user_id'])

    if 'phorest_appointments' not in existing_tables:
        op.create_table(
            'phorest_appointments',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('phorest_id', sa.String(length=100), nullable=False),
            sa.Column('stylist_user_id', sa.String(length=50), nullable=True),
            sa.Column('phorest_staff_id', sa.String(length=100), nullable=True),
            sa.Column('phorest_client_id', sa.String(length=100), nullable=True),
            sa.Column('location_id', sa.String(length=50), nullable=True),
            sa.Column('client_name', sa.String(length=200), nullable=True),
            sa.Column('client_phone', sa.String(length=50), nullable=True),
            sa.Column('appointment_date', sa.Date(), nullable=True),
            sa.Column('start_time', sa.String(length=5), nullable=False),
            sa.Column('end_time', sa.String(length=5), nullable=False),
            sa.Column('service_name', sa.String(length=200), nullable=True),
            sa.Column('service_category', sa.String(length=100), nullable=True),
            sa.Column('status', sa.String(length=30), nullable=False),
            sa.Column('total_price', sa.Numeric(precision=12, scale=2), nullable=True),
            sa.Column('is_new_client', sa.Boolean(), nullable=True),
            sa.Column('notes', sa.Text(), nullable=True),
            sa.Column('created_at', sa.DateTime(), nullable=True),
            sa.Column('updated_at', sa.DateTime(), nullable=True),
            sa.PrimaryKeyConstraint('id'),
            sa.UniqueConstraint('phorest_id')
        )
        op.create_index('ix_phorest_appointments_stylist_user_id', 'phorest_appointments', ['stylist_user_id'])
        op.create_index('ix_phorest_appointments_appointment_date', 'phorest_appointments', ['appointment_date'])
        op.create_index('idx_phorest_appointments_stylist_date', 'phorest_appointments',
                        ['stylist_user_id', 'appointment_date'])

    if 'phorest_clients' not in existing_tables:
        op.create_table(
            'phorest_clients',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('phorest_client_id', sa.String(length=100), nullable=False),
            sa.Column('name', sa.String(length=200), nullable=False),
            sa.Column('email', sa.String(length=150), nullable=True),
            sa.Column('phone', sa.String(length=50), nullable=True),
            sa.Column('visit_count', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('last_visit', sa.DateTime(), nullable=True),
            sa.Column('first_visit', sa.DateTime(), nullable=True),
            sa.Column('preferred_stylist_id', sa.String(length=50), nullable=True),
            sa.Column('total_spend', sa.Numeric(precision=12, scale=2), nullable=False, server_default='0'),
            sa.Column('is_vip', sa.Boolean(), nullable=True),
            sa.Column('notes', sa.Text(), nullable=True),
            sa.Column('location_id', sa.String(length=50), nullable=True),
            sa.Column('phorest_branch_id', sa.String(length=100), nullable=True),
            sa.Column('branch_name', sa.String(length=150), nullable=True),
            sa.Column('created_at', sa.DateTime(), nullable=True),
            sa.Column('updated_at', sa.DateTime(), nullable=True),
            sa.PrimaryKeyConstraint('id'),
            sa.UniqueConstraint('phorest_client_id')
        )
        op.create_index('ix_phorest_clients_location_id', 'phorest_clients', ['location_id'])

    if 'phorest_performance_metrics' not in existing_tables:
        op.create_table(
            'phorest_performance_metrics',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('user_id', sa.String(length=50), nullable=False),
            sa.Column('phorest_staff_id', sa.String(length=100), nullable=True),
            sa.Column('week_start', sa.Date(), nullable=False),
            sa.Column('new_clients', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('retention_rate', sa.Float(), nullable=True),
            sa.Column('retail_sales', sa.Numeric(precision=12, scale=2), nullable=False, server_default='0'),
            sa.Column('extension_clients', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('total_revenue', sa.Numeric(precision=12, scale=2), nullable=False, server_default='0'),
            sa.Column('service_count', sa.Integer(), nullable=False, server_default='0'),
            sa.Column('average_ticket', sa.Numeric(precision=12, scale=2), nullable=True),
            sa.Column('rebooking_rate', sa.Float(), nullable=True),
            sa.Column('created_at', sa.DateTime(), nullable=True),
            sa.Column('updated_at', sa.DateTime(), nullable=True),
            sa.PrimaryKeyConstraint('id'),
            sa.UniqueConstraint('user_id', 'week_start', name='uq_performance_user_week')
        )

    if 'phorest_sales_transactions' not in existing_tables:
        op.create_table(
            'phorest_sales_transactions',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('phorest_transaction_id', sa.String(length=100), nullable=False),
            sa.Column('line_key', sa.String(length=100), nullable=False),
            sa.Column('stylist_user_id', sa.String(length=50), nullable=True),
            sa.Column('phorest_staff_id', sa.String(length=100), nullable=True),
            sa.Column('phorest_branch_id', sa.String(length=100), nullable=True),
            sa.Column('branch_name', sa.String(length=150), nullable=True),
            sa.Column('location_id', sa.String(length=50), nullable=True),
            sa.Column('transaction_date', sa.Date(), nullable=False),
            sa.Column('transaction_time', sa.String(length=5), nullable=True),
            sa.Column('client_name', sa.String(length=200), nullable=True),
            sa.Column('client_phone', sa.String(length=50), nullable=True),
            sa.Column('item_type', sa.String(length=20), nullable=False),
            sa.Column('item_name', sa.String(length=200), nullable=False),
            sa.Column('item_category', sa.String(length=100), nullable=True),
            sa.Column('quantity', sa.Integer(), nullable=True),
            sa.Column('unit_price', sa.Numeric(precision=12, scale=2), nullable=True),
            sa.Column('discount_amount', sa.Numeric(precision=12, scale=2), nullable=True),
            sa.Column('tax_amount', sa.Numeric(precision=12, scale=2), nullable=True),
            sa.Column('total_amount', sa.Numeric(precision=12, scale=2), nullable=False),
            sa.Column('payment_method', sa.String(length=50), nullable=True),
            sa.Column('created_at', sa.DateTime(), nullable=True),
            sa.Column('updated_at', sa.DateTime(), nullable=True),
            sa.PrimaryKeyConstraint('id'),
            sa.UniqueConstraint('phorest_transaction_id', 'line_key', name='uq_sales_transaction_line')
        )
        op.create_index('ix_phorest_sales_transactions_stylist_user_id', 'phorest_sales_transactions',
                        ['stylist_user_id'])
        op.create_index('ix_phorest_sales_transactions_transaction_date', 'phorest_sales_transactions',
                        ['transaction_date'])
        op.create_index('idx_sales_stylist_branch_date', 'phorest_sales_transactions',
                        ['stylist_user_id', 'phorest_branch_id', 'transaction_date'])

    if 'phorest_daily_sales_summary' not in existing_tables:
        op.create_table(
            'phorest_daily_sales_summary',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('user_id', sa.String(length=50), nullable=False),
            sa.Column('phorest_branch_id', sa.String(length=100), nullable=False),
            sa.Column('location_id', sa.String(length=50), nullable=True),
            sa.Column('branch_name', sa.String(length=150), nullable=True),
            sa.Column('summary_date', sa.Date(), nullable=False),
            sa.Column('total_services', sa.Integer(), nullable=True),
            sa.Column('total_products', sa.Integer(), nullable=True),
            sa.Column('service_revenue', sa.Numeric(precision=12, scale=2), nullable=True),
            sa.Column('product_revenue', sa.Numeric(precision=12, scale=2), nullable=True),
            sa.Column('total_revenue', sa.Numeric(precision=12, scale=2), nullable=True),
            sa.Column('total_transactions', sa.Integer(), nullable=True),
            sa.Column('total_discounts', sa.Numeric(precision=12, scale=2), nullable=True),
            sa.Column('average_ticket', sa.Numeric(precision=12, scale=2), nullable=True),
            sa.Column('created_at', sa.DateTime(), nullable=True),
            sa.Column('updated_at', sa.DateTime(), nullable=True),
            sa.PrimaryKeyConstraint('id'),
            sa.UniqueConstraint('user_id', 'phorest_branch_id', 'summary_date',
                                name='uq_daily_sales_user_branch_date')
        )
        op.create_index('idx_daily_sales_location_date', 'phorest_daily_sales_summary',
                        ['location_id', 'summary_date'])

    if 'phorest_sync_log' not in existing_tables:
        op.create_table(
            'phorest_sync_log',
            sa.Column('id', sa.Integer(), nullable=False),
            sa.Column('sync_type', sa.String(length=30), nullable=False),
            sa.Column('status', sa.String(length=20), nullable=False),
            sa.Column('records_synced', sa.Integer(), nullable=True),
            sa.Column('started_at', sa.DateTime(), nullable=False),
            sa.Column('completed_at', sa.DateTime(), nullable=True),
            sa.Column('error_message', sa.Text(), nullable=True),
            sa.Column('metadata', sa.JSON(), nullable=True),
            sa.PrimaryKeyConstraint('id')
        )
        op.create_index('ix_phorest_sync_log_sync_type', 'phorest_sync_log', ['sync_type'])
        op.create_index('idx_sync_log_started', 'phorest_sync_log', ['started_at'])


def downgrade():
    op.drop_table('phorest_sync_log')
    op.drop_table('phorest_daily_sales_summary')
    op.drop_table('phorest_sales_transactions')
    op.drop_table('phorest_performance_metrics')
    op.drop_table('phorest_clients')
    op.drop_table('phorest_appointments')
    op.drop_table('phorest_staff_mapping')
    op.drop_table('locations')
