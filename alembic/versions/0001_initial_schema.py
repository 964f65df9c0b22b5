"""initial schema

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-18 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '0001_initial_schema'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create the restaurant, menu, order and engagement tables."""
    op.create_table(
        'restaurants',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('slug', sa.String(), nullable=False),
        sa.Column('owner_name', sa.String(), nullable=True),
        sa.Column('email', sa.String(), nullable=True),
        sa.Column('phone', sa.String(), nullable=True),
        sa.Column('username', sa.String(), nullable=True),
        sa.Column('password_hash', sa.String(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('business_type', sa.String(), nullable=False),
        sa.Column('address', sa.Text(), nullable=True),
        sa.Column('logo_url', sa.String(), nullable=True),
        sa.Column('trial_end_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.Column('tax_enabled', sa.Boolean(), nullable=False),
        sa.Column('tax_percentage', sa.Float(), nullable=False),
        sa.Column('delivery_charges_enabled', sa.Boolean(), nullable=False),
        sa.Column('delivery_charges', sa.Float(), nullable=False),
        sa.Column('delivery_free_threshold', sa.Float(), nullable=False),
        sa.Column('dine_in_enabled', sa.Boolean(), nullable=False),
        sa.Column('takeaway_enabled', sa.Boolean(), nullable=False),
        sa.Column('delivery_enabled', sa.Boolean(), nullable=False),
        sa.Column('require_table_number', sa.Boolean(), nullable=False),
        sa.Column('ai_upsell_enabled', sa.Boolean(), nullable=False),
        sa.Column('ai_upsell_popup_enabled', sa.Boolean(), nullable=False),
        sa.Column('popup_mode', sa.String(), nullable=False),
        sa.Column('popup_item1_id', sa.String(length=36), nullable=True),
        sa.Column('popup_item2_id', sa.String(length=36), nullable=True),
        sa.Column('popup1_text', sa.String(), nullable=True),
        sa.Column('popup2_text', sa.String(), nullable=True),
        sa.Column('gift_threshold', sa.Float(), nullable=True),
        sa.Column('gift_item_id', sa.String(length=36), nullable=True),
        sa.Column('ai_marketing_enabled', sa.Boolean(), nullable=False),
        sa.Column('max_ai_discount_pct', sa.Float(), nullable=False),
        sa.Column('mystery_box_enabled', sa.Boolean(), nullable=False),
        sa.Column('mystery_box_price', sa.Float(), nullable=False),
        sa.Column('mystery_box_item_ids', sa.JSON(), nullable=False),
        sa.Column('dessert_prompt_enabled', sa.Boolean(), nullable=False),
        sa.Column('dessert_prompt_minutes', sa.Integer(), nullable=False),
        sa.Column('dessert_prompt_item_ids', sa.JSON(), nullable=False),
        sa.Column('ai_custom_prompt', sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_restaurants_slug', 'restaurants', ['slug'], unique=True)
    op.create_index('ix_restaurants_username', 'restaurants', ['username'], unique=True)
    op.create_index('ix_restaurants_created_at', 'restaurants', ['created_at'], unique=False)

    op.create_table(
        'categories',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('restaurant_id', sa.String(length=36), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('icon', sa.String(), nullable=False),
        sa.Column('fake_discount_pct', sa.Float(), nullable=False),
        sa.Column('position', sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(['restaurant_id'], ['restaurants.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_categories_restaurant_id', 'categories', ['restaurant_id'], unique=False)

    op.create_table(
        'menu_items',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('restaurant_id', sa.String(length=36), nullable=False),
        sa.Column('category_id', sa.String(length=36), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('full_price', sa.Float(), nullable=False),
        sa.Column('half_price', sa.Float(), nullable=True),
        sa.Column('image_url', sa.String(), nullable=True),
        sa.Column('is_veg', sa.Boolean(), nullable=False),
        sa.Column('is_available', sa.Boolean(), nullable=False),
        sa.Column('recommended_item_ids', sa.JSON(), nullable=False),
        sa.ForeignKeyConstraint(['restaurant_id'], ['restaurants.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['category_id'], ['categories.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_menu_items_restaurant_id', 'menu_items', ['restaurant_id'], unique=False)
    op.create_index('ix_menu_items_category_id', 'menu_items', ['category_id'], unique=False)

    op.create_table(
        'orders',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('restaurant_id', sa.String(length=36), nullable=False),
        sa.Column('customer_name', sa.String(), nullable=False),
        sa.Column('customer_phone', sa.String(), nullable=False),
        sa.Column('subtotal', sa.Float(), nullable=False),
        sa.Column('tax_amount', sa.Float(), nullable=False),
        sa.Column('delivery_fee', sa.Float(), nullable=False),
        sa.Column('total_amount', sa.Float(), nullable=False),
        sa.Column('status', sa.String(), nullable=False),
        sa.Column('order_type', sa.String(), nullable=False),
        sa.Column('table_number', sa.String(), nullable=True),
        sa.Column('address', sa.Text(), nullable=True),
        sa.Column('payment_status', sa.String(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.ForeignKeyConstraint(['restaurant_id'], ['restaurants.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_orders_restaurant_id', 'orders', ['restaurant_id'], unique=False)
    op.create_index('ix_orders_status', 'orders', ['status'], unique=False)
    op.create_index('ix_orders_created_at', 'orders', ['created_at'], unique=False)
    op.create_index('ix_orders_restaurant_created_at', 'orders', ['restaurant_id', 'created_at'], unique=False)

    op.create_table(
        'order_items',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('order_id', sa.String(length=36), nullable=False),
        sa.Column('menu_item_id', sa.String(length=36), nullable=True),
        sa.Column('menu_item_name', sa.String(), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('price', sa.Float(), nullable=False),
        sa.Column('portion', sa.String(), nullable=False),
        sa.Column('is_upsell', sa.Boolean(), nullable=False),
        sa.Column('marketing_source', sa.String(), nullable=True),
        sa.ForeignKeyConstraint(['order_id'], ['orders.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['menu_item_id'], ['menu_items.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_order_items_id', 'order_items', ['id'], unique=False)
    op.create_index('ix_order_items_order_id', 'order_items', ['order_id'], unique=False)

    op.create_table(
        'banners',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('restaurant_id', sa.String(length=36), nullable=False),
        sa.Column('image_url', sa.String(), nullable=False),
        sa.Column('title', sa.String(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.ForeignKeyConstraint(['restaurant_id'], ['restaurants.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_banners_restaurant_id', 'banners', ['restaurant_id'], unique=False)

    op.create_table(
        'notifications',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('restaurant_id', sa.String(length=36), nullable=False),
        sa.Column('table_number', sa.String(), nullable=False),
        sa.Column('type', sa.String(), nullable=False),
        sa.Column('status', sa.String(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.ForeignKeyConstraint(['restaurant_id'], ['restaurants.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_notifications_restaurant_id', 'notifications', ['restaurant_id'], unique=False)
    op.create_index('ix_notifications_status', 'notifications', ['status'], unique=False)

    op.create_table(
        'marketing_rules',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('restaurant_id', sa.String(length=36), nullable=False),
        sa.Column('type', sa.String(), nullable=False),
        sa.Column('trigger_item_id', sa.String(length=36), nullable=True),
        sa.Column('target_item_id', sa.String(length=36), nullable=True),
        sa.Column('discount_pct', sa.Float(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('is_ai_managed', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('(CURRENT_TIMESTAMP)'), nullable=False),
        sa.ForeignKeyConstraint(['restaurant_id'], ['restaurants.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_marketing_rules_restaurant_id', 'marketing_rules', ['restaurant_id'], unique=False)


def downgrade() -> None:
    """Drop all tables."""
    op.drop_index('ix_marketing_rules_restaurant_id', table_name='marketing_rules')
    op.drop_table('marketing_rules')
    op.drop_index('ix_notifications_status', table_name='notifications')
    op.drop_index('ix_notifications_restaurant_id', table_name='notifications')
    op.drop_table('notifications')
    op.drop_index('ix_banners_restaurant_id', table_name='banners')
    op.drop_table('banners')
    op.drop_index('ix_order_items_order_id', table_name='order_items')
    op.drop_index('ix_order_items_id', table_name='order_items')
    op.drop_table('order_items')
    op.drop_index('ix_orders_restaurant_created_at', table_name='orders')
    op.drop_index('ix_orders_created_at', table_name='orders')
    op.drop_index('ix_orders_status', table_name='orders')
    op.drop_index('ix_orders_restaurant_id', table_name='orders')
    op.drop_table('orders')
    op.drop_index('ix_menu_items_category_id', table_name='menu_items')
    op.drop_index('ix_menu_items_restaurant_id', table_name='menu_items')
    op.drop_table('menu_items')
    op.drop_index('ix_categories_restaurant_id', table_name='categories')
    op.drop_table('categories')
    op.drop_index('ix_restaurants_created_at', table_name='restaurants')
    op.drop_index('ix_restaurants_username', table_name='restaurants')
    op.drop_index('ix_restaurants_slug', table_name='restaurants')
    op.drop_table('restaurants')
