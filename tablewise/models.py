import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    Column,
    String,
    Float,
    Boolean,
    Integer,
    JSON,
    DateTime,
    ForeignKey,
    Text,
    Index,
    func,
)
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


def generate_id() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Restaurant(Base):
    """A tenant. Every other row hangs off a restaurant_id."""

    __tablename__ = "restaurants"

    id = Column(String(36), primary_key=True, default=generate_id)
    name = Column(String, nullable=False)
    slug = Column(String, nullable=False, unique=True, index=True)
    owner_name = Column(String, nullable=True)
    email = Column(String, nullable=True)
    phone = Column(String, nullable=True)
    username = Column(String, nullable=True, unique=True, index=True)
    password_hash = Column(String, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    business_type = Column(String, nullable=False, default="restaurant")  # restaurant/hotel
    address = Column(Text, nullable=True)
    logo_url = Column(String, nullable=True)
    trial_end_date = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False, index=True)

    # Pricing
    tax_enabled = Column(Boolean, nullable=False, default=False)
    tax_percentage = Column(Float, nullable=False, default=0.0)
    delivery_charges_enabled = Column(Boolean, nullable=False, default=False)
    delivery_charges = Column(Float, nullable=False, default=0.0)
    delivery_free_threshold = Column(Float, nullable=False, default=0.0)

    # Order preferences
    dine_in_enabled = Column(Boolean, nullable=False, default=True)
    takeaway_enabled = Column(Boolean, nullable=False, default=True)
    delivery_enabled = Column(Boolean, nullable=False, default=False)
    require_table_number = Column(Boolean, nullable=False, default=True)

    # Upsell popups
    ai_upsell_enabled = Column(Boolean, nullable=False, default=False)
    ai_upsell_popup_enabled = Column(Boolean, nullable=False, default=False)
    popup_mode = Column(String, nullable=False, default="manual")  # manual/ai
    popup_item1_id = Column(String(36), nullable=True)
    popup_item2_id = Column(String(36), nullable=True)
    popup1_text = Column(String, nullable=True)
    popup2_text = Column(String, nullable=True)

    # Gift threshold, AI marketing
    gift_threshold = Column(Float, nullable=True)
    gift_item_id = Column(String(36), nullable=True)
    ai_marketing_enabled = Column(Boolean, nullable=False, default=False)
    max_ai_discount_pct = Column(Float, nullable=False, default=15.0)

    # Mystery box
    mystery_box_enabled = Column(Boolean, nullable=False, default=False)
    mystery_box_price = Column(Float, nullable=False, default=49.0)
    mystery_box_item_ids = Column(JSON, nullable=False, default=list)

    # Dessert prompt
    dessert_prompt_enabled = Column(Boolean, nullable=False, default=False)
    dessert_prompt_minutes = Column(Integer, nullable=False, default=15)
    dessert_prompt_item_ids = Column(JSON, nullable=False, default=list)

    ai_custom_prompt = Column(Text, nullable=True)

    categories = relationship(
        "Category", back_populates="restaurant", cascade="all, delete-orphan",
        order_by="Category.position",
    )
    menu_items = relationship("MenuItem", back_populates="restaurant", cascade="all, delete-orphan")
    orders = relationship("Order", back_populates="restaurant", cascade="all, delete-orphan")
    banners = relationship("Banner", back_populates="restaurant", cascade="all, delete-orphan")
    notifications = relationship("Notification", back_populates="restaurant", cascade="all, delete-orphan")
    marketing_rules = relationship("MarketingRule", back_populates="restaurant", cascade="all, delete-orphan")


class Category(Base):
    __tablename__ = "categories"

    id = Column(String(36), primary_key=True, default=generate_id)
    restaurant_id = Column(String(36), ForeignKey("restaurants.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String, nullable=False)
    icon = Column(String, nullable=False, default="utensils")
    fake_discount_pct = Column(Float, nullable=False, default=0.0)
    # Insertion order; keeps "first category" stable across databases
    position = Column(Integer, nullable=False, default=0)

    restaurant = relationship("Restaurant", back_populates="categories")
    menu_items = relationship("MenuItem", back_populates="category", cascade="all, delete-orphan")


class MenuItem(Base):
    __tablename__ = "menu_items"

    id = Column(String(36), primary_key=True, default=generate_id)
    restaurant_id = Column(String(36), ForeignKey("restaurants.id", ondelete="CASCADE"), nullable=False, index=True)
    category_id = Column(String(36), ForeignKey("categories.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    full_price = Column(Float, nullable=False)
    half_price = Column(Float, nullable=True)
    image_url = Column(String, nullable=True)
    is_veg = Column(Boolean, nullable=False, default=True)
    is_available = Column(Boolean, nullable=False, default=True)
    # Cross-sell targets written by the AI menu sync
    recommended_item_ids = Column(JSON, nullable=False, default=list)

    restaurant = relationship("Restaurant", back_populates="menu_items")
    category = relationship("Category", back_populates="menu_items")


class Order(Base):
    __tablename__ = "orders"

    id = Column(String(36), primary_key=True, default=generate_id)
    restaurant_id = Column(String(36), ForeignKey("restaurants.id", ondelete="CASCADE"), nullable=False, index=True)
    customer_name = Column(String, nullable=False)
    customer_phone = Column(String, nullable=False, default="0000000000")
    subtotal = Column(Float, nullable=False, default=0.0)
    tax_amount = Column(Float, nullable=False, default=0.0)
    delivery_fee = Column(Float, nullable=False, default=0.0)
    total_amount = Column(Float, nullable=False, default=0.0)
    status = Column(String, nullable=False, default="pending", index=True)  # pending/preparing/ready/delivered/cancelled
    order_type = Column(String, nullable=False, default="dine-in")  # dine-in/takeaway/delivery
    table_number = Column(String, nullable=True)
    address = Column(Text, nullable=True)
    payment_status = Column(String, nullable=False, default="pending")  # pending/paid/failed
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False, index=True)

    restaurant = relationship("Restaurant", back_populates="orders")
    items = relationship("OrderItem", back_populates="order", cascade="all, delete-orphan")

    __table_args__ = (
        Index("ix_orders_restaurant_created_at", "restaurant_id", "created_at"),
    )


class OrderItem(Base):
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, index=True)
    order_id = Column(String(36), ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    menu_item_id = Column(String(36), ForeignKey("menu_items.id", ondelete="SET NULL"), nullable=True)

    # Snapshot so tickets still read correctly after the menu item is renamed or removed
    menu_item_name = Column(String, nullable=False)

    quantity = Column(Integer, nullable=False)
    price = Column(Float, nullable=False)  # unit price for the chosen portion
    portion = Column(String, nullable=False, default="full")  # full/half
    is_upsell = Column(Boolean, nullable=False, default=False)
    marketing_source = Column(String, nullable=True)  # REWARD, MYSTERY_BOX, AI_UPSELL, POPUP, ...

    order = relationship("Order", back_populates="items")
    menu_item = relationship("MenuItem")


class Banner(Base):
    __tablename__ = "banners"

    id = Column(String(36), primary_key=True, default=generate_id)
    restaurant_id = Column(String(36), ForeignKey("restaurants.id", ondelete="CASCADE"), nullable=False, index=True)
    image_url = Column(String, nullable=False)
    title = Column(String, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)

    restaurant = relationship("Restaurant", back_populates="banners")


class Notification(Base):
    __tablename__ = "notifications"

    id = Column(String(36), primary_key=True, default=generate_id)
    restaurant_id = Column(String(36), ForeignKey("restaurants.id", ondelete="CASCADE"), nullable=False, index=True)
    table_number = Column(String, nullable=False)
    type = Column(String, nullable=False, default="WAITER_CALL")  # WAITER_CALL/BILL_REQUEST
    status = Column(String, nullable=False, default="pending", index=True)  # pending/resolved
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)

    restaurant = relationship("Restaurant", back_populates="notifications")


class MarketingRule(Base):
    __tablename__ = "marketing_rules"

    id = Column(String(36), primary_key=True, default=generate_id)
    restaurant_id = Column(String(36), ForeignKey("restaurants.id", ondelete="CASCADE"), nullable=False, index=True)
    type = Column(String, nullable=False)  # CROSS_SELL/UP_SELL/IMPULSE/COMBO/MYSTERY_BOX/POPUP
    trigger_item_id = Column(String(36), nullable=True)
    target_item_id = Column(String(36), nullable=True)
    discount_pct = Column(Float, nullable=False, default=0.0)
    is_active = Column(Boolean, nullable=False, default=True)
    is_ai_managed = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)

    restaurant = relationship("Restaurant", back_populates="marketing_rules")
