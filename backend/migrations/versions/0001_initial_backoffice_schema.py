"""initial back-office schema: catalog, regional stock, ledger, orders, leads, users

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-12 09:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '0001_initial'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    # ========================================================================
    # REGIONS - state hubs
    # ========================================================================
    op.create_table('regions',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=120), nullable=False),
        sa.Column('whatsapp_group_link', sa.String(length=255), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name', name='uq_regions_name'),
        sqlite_autoincrement=True
    )

    # ========================================================================
    # PRODUCTS - master data plus the central warehouse counter
    # ========================================================================
    op.create_table('products',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('sku', sa.String(length=64), nullable=True),
        sa.Column('cost_price', sa.Integer(), nullable=False),
        sa.Column('selling_price', sa.Integer(), nullable=False),
        sa.Column('batch_number', sa.String(length=64), nullable=True),
        sa.Column('expiry_date', sa.Date(), nullable=True),
        sa.Column('total_stock', sa.Integer(), nullable=False),
        sa.Column('low_stock_threshold', sa.Integer(), nullable=False),
        sa.Column('version_id', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('products', schema=None) as batch_op:
        batch_op.create_index('ix_products_name', ['name'], unique=False)

    # ========================================================================
    # REGION_STOCK - one counter per (product, region)
    # ========================================================================
    op.create_table('region_stock',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('product_id', sa.Integer(), nullable=False),
        sa.Column('region_id', sa.Integer(), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('version_id', sa.Integer(), nullable=False),
        sa.CheckConstraint('quantity >= 0', name='ck_region_stock_non_negative'),
        sa.ForeignKeyConstraint(['product_id'], ['products.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['region_id'], ['regions.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('product_id', 'region_id', name='uq_region_stock_product_region'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('region_stock', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_region_stock_product_id'), ['product_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_region_stock_region_id'), ['region_id'], unique=False)

    # ========================================================================
    # LOGISTICS_PARTNERS
    # ========================================================================
    op.create_table('logistics_partners',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=120), nullable=False),
        sa.Column('region_id', sa.Integer(), nullable=True),
        sa.Column('contact_person', sa.String(length=120), nullable=True),
        sa.Column('phone', sa.String(length=32), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.ForeignKeyConstraint(['region_id'], ['regions.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('logistics_partners', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_logistics_partners_region_id'), ['region_id'], unique=False)

    # ========================================================================
    # USERS - approval state, role and region (credentials live elsewhere)
    # ========================================================================
    op.create_table('users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('phone', sa.String(length=32), nullable=True),
        sa.Column('role', sa.String(length=32), nullable=False),
        sa.Column('region_id', sa.Integer(), nullable=True),
        sa.Column('status', sa.String(length=16), nullable=False),
        sa.Column('is_approved', sa.Boolean(), nullable=False),
        sa.Column('is_bootstrap', sa.Boolean(), nullable=False),
        sa.Column('registered_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('decided_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('decided_by_user_id', sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(['region_id'], ['regions.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email', name='uq_users_email'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('users', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_users_status'), ['status'], unique=False)
        # At most one bootstrap admin
        batch_op.create_index(
            'uq_users_single_bootstrap',
            ['is_bootstrap'],
            unique=True,
            sqlite_where=sa.text('is_bootstrap = 1'),
            postgresql_where=sa.text('is_bootstrap'),
        )

    # ========================================================================
    # WEB_LEADS / WEB_LEAD_ITEMS - landing-page form submissions
    # ========================================================================
    op.create_table('web_leads',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('form_id', sa.String(length=64), nullable=True),
        sa.Column('customer_name', sa.String(length=255), nullable=False),
        sa.Column('phone', sa.String(length=32), nullable=False),
        sa.Column('whatsapp', sa.String(length=32), nullable=True),
        sa.Column('address', sa.Text(), nullable=True),
        sa.Column('delivery_instructions', sa.Text(), nullable=True),
        sa.Column('region_id', sa.Integer(), nullable=True),
        sa.Column('status', sa.String(length=32), nullable=False),
        sa.Column('notes', sa.Text(), nullable=False),
        sa.Column('agent_name', sa.String(length=255), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.ForeignKeyConstraint(['region_id'], ['regions.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('web_leads', schema=None) as batch_op:
        batch_op.create_index('ix_web_leads_created_at', ['created_at'], unique=False)
        batch_op.create_index(batch_op.f('ix_web_leads_agent_name'), ['agent_name'], unique=False)

    op.create_table('web_lead_items',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('lead_id', sa.Integer(), nullable=False),
        sa.Column('product_id', sa.Integer(), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['lead_id'], ['web_leads.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('web_lead_items', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_web_lead_items_lead_id'), ['lead_id'], unique=False)

    # ========================================================================
    # ABANDONED_CARTS - keyed by client session id
    # ========================================================================
    op.create_table('abandoned_carts',
        sa.Column('id', sa.String(length=64), nullable=False),
        sa.Column('form_id', sa.String(length=64), nullable=True),
        sa.Column('customer_name', sa.String(length=255), nullable=True),
        sa.Column('phone', sa.String(length=32), nullable=True),
        sa.Column('whatsapp', sa.String(length=32), nullable=True),
        sa.Column('address', sa.Text(), nullable=True),
        sa.Column('delivery_instructions', sa.Text(), nullable=True),
        sa.Column('items', sa.JSON(), nullable=False),
        sa.Column('agent_name', sa.String(length=255), nullable=True),
        sa.Column('page_url', sa.String(length=512), nullable=True),
        sa.Column('status', sa.String(length=16), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('last_updated_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    with op.batch_alter_table('abandoned_carts', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_abandoned_carts_agent_name'), ['agent_name'], unique=False)
        batch_op.create_index(batch_op.f('ix_abandoned_carts_status'), ['status'], unique=False)

    # ========================================================================
    # ORDERS / ORDER_ITEMS - snapshot-priced customer orders
    # ========================================================================
    op.create_table('orders',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('order_number', sa.String(length=32), nullable=False),
        sa.Column('tracking_id', sa.String(length=32), nullable=False),
        sa.Column('customer_name', sa.String(length=255), nullable=False),
        sa.Column('phone', sa.String(length=32), nullable=False),
        sa.Column('whatsapp', sa.String(length=32), nullable=True),
        sa.Column('address', sa.Text(), nullable=False),
        sa.Column('delivery_instructions', sa.Text(), nullable=True),
        sa.Column('region_id', sa.Integer(), nullable=False),
        sa.Column('total_amount', sa.Integer(), nullable=False),
        sa.Column('logistics_cost', sa.Integer(), nullable=False),
        sa.Column('payment_status', sa.String(length=32), nullable=False),
        sa.Column('delivery_status', sa.String(length=32), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('created_by', sa.String(length=255), nullable=False),
        sa.Column('created_by_user_id', sa.Integer(), nullable=True),
        sa.Column('lead_id', sa.Integer(), nullable=True),
        sa.Column('reschedule_date', sa.Date(), nullable=True),
        sa.Column('reschedule_notes', sa.Text(), nullable=True),
        sa.Column('reminder_enabled', sa.Boolean(), nullable=True),
        sa.Column('version_id', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['created_by_user_id'], ['users.id'], ),
        sa.ForeignKeyConstraint(['lead_id'], ['web_leads.id'], ),
        sa.ForeignKeyConstraint(['region_id'], ['regions.id'], ),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('order_number', name='uq_orders_order_number'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('orders', schema=None) as batch_op:
        batch_op.create_index('ix_orders_status', ['delivery_status'], unique=False)
        batch_op.create_index('ix_orders_created_by', ['created_by'], unique=False)
        batch_op.create_index(batch_op.f('ix_orders_region_id'), ['region_id'], unique=False)
        batch_op.create_index(batch_op.f('ix_orders_lead_id'), ['lead_id'], unique=False)

    op.create_table('order_items',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('order_id', sa.Integer(), nullable=False),
        sa.Column('product_id', sa.Integer(), nullable=True),
        sa.Column('product_name', sa.String(length=255), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('price_at_order', sa.Integer(), nullable=False),
        sa.Column('cost_at_order', sa.Integer(), nullable=False),
        sa.CheckConstraint('quantity > 0', name='ck_order_items_quantity_positive'),
        sa.ForeignKeyConstraint(['order_id'], ['orders.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('order_items', schema=None) as batch_op:
        batch_op.create_index(batch_op.f('ix_order_items_order_id'), ['order_id'], unique=False)

    # ========================================================================
    # STOCK_MOVEMENTS - append-only ledger (no FKs, history outlives deletes)
    # ========================================================================
    op.create_table('stock_movements',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('product_id', sa.Integer(), nullable=False),
        sa.Column('region_id', sa.Integer(), nullable=True),
        sa.Column('pool', sa.String(length=16), nullable=False),
        sa.Column('kind', sa.String(length=32), nullable=False),
        sa.Column('requested_delta', sa.Integer(), nullable=False),
        sa.Column('applied_delta', sa.Integer(), nullable=False),
        sa.Column('quantity_after', sa.Integer(), nullable=False),
        sa.Column('actor_user_id', sa.Integer(), nullable=True),
        sa.Column('order_id', sa.Integer(), nullable=True),
        sa.Column('note', sa.String(length=255), nullable=True),
        sa.Column('occurred_at', sa.DateTime(timezone=True), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sqlite_autoincrement=True
    )
    with op.batch_alter_table('stock_movements', schema=None) as batch_op:
        batch_op.create_index('ix_stock_movements_product_occurred', ['product_id', 'occurred_at'], unique=False)
        batch_op.create_index(batch_op.f('ix_stock_movements_kind'), ['kind'], unique=False)
        batch_op.create_index(batch_op.f('ix_stock_movements_order_id'), ['order_id'], unique=False)


def downgrade():
    op.drop_table('stock_movements')
    op.drop_table('order_items')
    op.drop_table('orders')
    op.drop_table('abandoned_carts')
    op.drop_table('web_lead_items')
    op.drop_table('web_leads')
    op.drop_table('users')
    op.drop_table('logistics_partners')
    op.drop_table('region_stock')
    op.drop_table('products')
    op.drop_table('regions')
