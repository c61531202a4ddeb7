"""Create catalog snapshot, cart, wishlist and address tables.

Revision ID: 001
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

LIVE_ROWS = sa.text('deleted_at IS NULL')


def _catalog_columns() -> list[sa.Column]:
    """Columns shared by products and product_variations."""
    return [
        sa.Column('name', sa.String(500), nullable=False),
        sa.Column('sku', sa.String(100), nullable=True),
        sa.Column('regular_price', sa.Numeric(10, 2), nullable=True),
        sa.Column('sale_price', sa.Numeric(10, 2), nullable=True),
        sa.Column('sale_price_start_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('sale_price_end_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('delivery_types', postgresql.JSONB(), nullable=True),
        sa.Column('tax_class', sa.String(100), nullable=True),
        sa.Column('tax_status', sa.String(50), nullable=True),
        sa.Column('shipping_class', sa.String(100), nullable=True),
        sa.Column('weight', sa.Numeric(10, 3), nullable=True),
        sa.Column('weight_unit', sa.String(10), nullable=True),
        sa.Column('length', sa.Numeric(10, 2), nullable=True),
        sa.Column('width', sa.Numeric(10, 2), nullable=True),
        sa.Column('height', sa.Numeric(10, 2), nullable=True),
        sa.Column('dimension_unit', sa.String(10), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True),
    ]


def upgrade() -> None:
    """Create cart engine tables and their live-row unique indexes."""
    # Catalog snapshot
    op.create_table(
        'products',
        sa.Column('id', sa.String(36), primary_key=True),
        *_catalog_columns(),
    )
    op.create_index('ix_products_sku', 'products', ['sku'])

    op.create_table(
        'product_variations',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('product_id', sa.String(36),
                  sa.ForeignKey('products.id', ondelete='CASCADE'), nullable=False, index=True),
        *_catalog_columns(),
    )

    op.create_table(
        'coupons',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('code', sa.String(100), nullable=False, unique=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('discount_type', sa.String(20), nullable=False),
        sa.Column('discount_value', sa.Numeric(10, 2), nullable=False),
        sa.Column('minimum_spend', sa.Numeric(10, 2), nullable=True),
        sa.Column('maximum_spend', sa.Numeric(10, 2), nullable=True),
        sa.Column('free_shipping', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('expiry_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('max_usage', sa.Integer(), nullable=True),
        sa.Column('usage_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('allowed_emails', postgresql.JSONB(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True),
    )

    # Carts
    op.create_table(
        'carts',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('created_by', sa.String(100), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index(
        'uq_carts_live_owner', 'carts', ['created_by'],
        unique=True, postgresql_where=LIVE_ROWS,
    )

    op.create_table(
        'cart_items',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('cart_id', sa.String(36),
                  sa.ForeignKey('carts.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('product_id', sa.String(36), sa.ForeignKey('products.id'), nullable=False),
        sa.Column('variation_id', sa.String(36), sa.ForeignKey('product_variations.id'), nullable=True),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint('quantity > 0', name='ck_cart_items_quantity_positive'),
    )
    op.create_index(
        'uq_cart_items_live_identity', 'cart_items',
        ['cart_id', 'product_id', sa.text("coalesce(variation_id, '')")],
        unique=True, postgresql_where=LIVE_ROWS,
    )

    op.create_table(
        'cart_coupons',
        sa.Column('cart_id', sa.String(36),
                  sa.ForeignKey('carts.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('coupon_id', sa.String(36),
                  sa.ForeignKey('coupons.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
    )

    # Wishlists
    op.create_table(
        'wishlists',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('created_by', sa.String(100), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index(
        'uq_wishlists_live_owner', 'wishlists', ['created_by'],
        unique=True, postgresql_where=LIVE_ROWS,
    )

    op.create_table(
        'wishlist_items',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('wishlist_id', sa.String(36),
                  sa.ForeignKey('wishlists.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('product_id', sa.String(36), sa.ForeignKey('products.id'), nullable=False),
        sa.Column('variation_id', sa.String(36), sa.ForeignKey('product_variations.id'), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index(
        'uq_wishlist_items_live_identity', 'wishlist_items',
        ['wishlist_id', 'product_id', sa.text("coalesce(variation_id, '')")],
        unique=True, postgresql_where=LIVE_ROWS,
    )

    # Addresses
    op.create_table(
        'addresses',
        sa.Column('id', sa.String(36), primary_key=True),
        sa.Column('user_id', sa.String(100), nullable=False, index=True),
        sa.Column('line1', sa.String(255), nullable=False),
        sa.Column('line2', sa.String(255), nullable=True),
        sa.Column('city', sa.String(100), nullable=False),
        sa.Column('state', sa.String(100), nullable=True),
        sa.Column('postal_code', sa.String(20), nullable=False),
        sa.Column('country', sa.String(2), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True),
    )


def downgrade() -> None:
    """Drop cart engine tables."""
    op.drop_table('addresses')
    op.drop_index('uq_wishlist_items_live_identity', table_name='wishlist_items')
    op.drop_table('wishlist_items')
    op.drop_index('uq_wishlists_live_owner', table_name='wishlists')
    op.drop_table('wishlists')
    op.drop_table('cart_coupons')
    op.drop_index('uq_cart_items_live_identity', table_name='cart_items')
    op.drop_table('cart_items')
    op.drop_index('uq_carts_live_owner', table_name='carts')
    op.drop_table('carts')
    op.drop_table('coupons')
    op.drop_table('product_variations')
    op.drop_index('ix_products_sku', table_name='products')
    op.drop_table('products')
