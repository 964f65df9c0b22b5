"""
Tests for cart pricing, totals and checkout validation.
"""
from types import SimpleNamespace

import pytest

from tablewise.models import MenuItem, Restaurant
from tablewise.services.pricing import (
    CheckoutError,
    build_cart,
    calculate_totals,
    portion_price,
    resolve_order_type,
    validate_checkout,
)


def _line(item_id, quantity=1, portion="full", source=None, is_upsell=False):
    return SimpleNamespace(
        id=item_id,
        quantity=quantity,
        portion_type=portion,
        is_upsell=is_upsell,
        marketing_source=source,
    )


def _restaurant(**overrides):
    defaults = dict(
        tax_enabled=False,
        tax_percentage=0.0,
        delivery_charges_enabled=False,
        delivery_charges=0.0,
        delivery_free_threshold=0.0,
        dine_in_enabled=True,
        takeaway_enabled=True,
        delivery_enabled=False,
        require_table_number=True,
    )
    defaults.update(overrides)
    return Restaurant(**defaults)


class TestPortionPrice:
    def test_half_uses_half_price(self):
        item = MenuItem(full_price=280.0, half_price=160.0)
        assert portion_price(item, "half") == 160.0
        assert portion_price(item, "full") == 280.0

    def test_half_falls_back_to_full(self):
        item = MenuItem(full_price=180.0, half_price=None)
        assert portion_price(item, "half") == 180.0


class TestTotals:
    def test_tax_applied_when_enabled(self):
        totals = calculate_totals(_restaurant(tax_enabled=True, tax_percentage=5), 200.0, "dine-in")
        assert totals.tax == 10.0
        assert totals.total == 210.0

    def test_tax_ignored_when_disabled(self):
        totals = calculate_totals(_restaurant(tax_percentage=5), 200.0, "dine-in")
        assert totals.tax == 0.0

    def test_delivery_fee_only_for_delivery_orders(self):
        r = _restaurant(delivery_enabled=True, delivery_charges_enabled=True, delivery_charges=40)
        assert calculate_totals(r, 200.0, "delivery").delivery_fee == 40.0
        assert calculate_totals(r, 200.0, "takeaway").delivery_fee == 0.0

    def test_delivery_free_above_threshold(self):
        r = _restaurant(
            delivery_enabled=True,
            delivery_charges_enabled=True,
            delivery_charges=40,
            delivery_free_threshold=500,
        )
        assert calculate_totals(r, 500.0, "delivery").delivery_fee == 40.0
        assert calculate_totals(r, 500.01, "delivery").delivery_fee == 0.0

    def test_zero_threshold_never_waives(self):
        r = _restaurant(delivery_enabled=True, delivery_charges_enabled=True, delivery_charges=40)
        assert calculate_totals(r, 10000.0, "delivery").delivery_fee == 40.0

    def test_amounts_rounded_to_two_places(self):
        totals = calculate_totals(_restaurant(tax_enabled=True, tax_percentage=18), 99.99, "dine-in")
        assert totals.tax == 18.0
        assert totals.total == 117.99


class TestOrderTypes:
    def test_requested_type_used_when_enabled(self):
        assert resolve_order_type(_restaurant(), "takeaway") == "takeaway"

    def test_disabled_type_falls_back(self):
        r = _restaurant(dine_in_enabled=False)
        assert resolve_order_type(r, "delivery") == "takeaway"


class TestCheckoutValidation:
    def test_name_required(self):
        with pytest.raises(CheckoutError, match="name"):
            validate_checkout(_restaurant(), "  ", "takeaway")

    def test_table_required_for_dine_in(self):
        with pytest.raises(CheckoutError, match="Table"):
            validate_checkout(_restaurant(), "Ravi", "dine-in")

    def test_table_optional_when_not_required(self):
        validate_checkout(_restaurant(require_table_number=False), "Ravi", "dine-in")

    def test_delivery_needs_address_and_phone(self):
        r = _restaurant(delivery_enabled=True)
        with pytest.raises(CheckoutError, match="address"):
            validate_checkout(r, "Ravi", "delivery", phone="98765")
        with pytest.raises(CheckoutError, match="Phone"):
            validate_checkout(r, "Ravi", "delivery", address="12 MG Road")
        validate_checkout(r, "Ravi", "delivery", address="12 MG Road", phone="98765")

    def test_disabled_order_type_rejected(self):
        with pytest.raises(CheckoutError, match="not available"):
            validate_checkout(_restaurant(), "Ravi", "delivery", address="x", phone="1")


class TestBuildCart:
    def test_prices_come_from_menu(self, db_session, seeded):
        restaurant = db_session.get(Restaurant, seeded["restaurant_id"])
        cart = build_cart(
            db_session,
            restaurant,
            [_line(seeded["paneer_id"], 2, "half"), _line(seeded["jamun_id"])],
            "dine-in",
        )
        assert [(l.name, l.price, l.quantity) for l in cart.lines] == [
            ("Paneer Tikka", 160.0, 2),
            ("Gulab Jamun", 90.0, 1),
        ]
        assert cart.totals.subtotal == 410.0
        assert cart.totals.tax == 20.5
        assert cart.totals.total == 430.5

    def test_empty_cart_rejected(self, db_session, seeded):
        restaurant = db_session.get(Restaurant, seeded["restaurant_id"])
        with pytest.raises(CheckoutError, match="empty"):
            build_cart(db_session, restaurant, [], "dine-in")

    def test_unavailable_item_rejected(self, db_session, seeded):
        restaurant = db_session.get(Restaurant, seeded["restaurant_id"])
        with pytest.raises(CheckoutError, match="unavailable"):
            build_cart(db_session, restaurant, [_line(seeded["kulfi_id"])], "dine-in")

    def test_other_restaurants_item_rejected(self, db_session, seeded):
        restaurant = db_session.get(Restaurant, seeded["restaurant_id"])
        with pytest.raises(CheckoutError, match="Unknown"):
            build_cart(db_session, restaurant, [_line(seeded["naan_id"])], "dine-in")

    def test_gift_added_at_threshold(self, db_session, seeded):
        restaurant = db_session.get(Restaurant, seeded["restaurant_id"])
        restaurant.gift_threshold = 500.0
        restaurant.gift_item_id = seeded["jamun_id"]
        db_session.commit()

        cart = build_cart(db_session, restaurant, [_line(seeded["paneer_id"], 2)], "dine-in")
        assert cart.gift_applied is True
        gift = cart.lines[-1]
        assert (gift.name, gift.price, gift.marketing_source) == ("Gulab Jamun", 0.0, "REWARD")
        assert cart.totals.subtotal == 560.0

    def test_gift_dropped_below_threshold(self, db_session, seeded):
        restaurant = db_session.get(Restaurant, seeded["restaurant_id"])
        restaurant.gift_threshold = 500.0
        restaurant.gift_item_id = seeded["jamun_id"]
        db_session.commit()

        cart = build_cart(
            db_session,
            restaurant,
            [_line(seeded["spring_roll_id"]), _line(seeded["jamun_id"], source="REWARD")],
            "dine-in",
        )
        assert cart.gift_applied is False
        assert [l.name for l in cart.lines] == ["Veg Spring Roll"]
        assert cart.warnings

    def test_mystery_box_quote_does_not_write(self, db_session, seeded):
        from tablewise.models import MenuItem as Item

        restaurant = db_session.get(Restaurant, seeded["restaurant_id"])
        restaurant.mystery_box_enabled = True
        restaurant.mystery_box_price = 99.0
        db_session.commit()

        cart = build_cart(db_session, restaurant, [_line("mystery_box", 2)], "dine-in")
        line = cart.lines[0]
        assert (line.menu_item_id, line.price, line.marketing_source) == ("mystery_box", 99.0, "MYSTERY_BOX")
        assert cart.totals.subtotal == 198.0
        assert db_session.query(Item).filter(Item.name == "Mystery Box").count() == 0

    def test_mystery_box_disabled_rejected(self, db_session, seeded):
        restaurant = db_session.get(Restaurant, seeded["restaurant_id"])
        with pytest.raises(CheckoutError, match="Mystery box"):
            build_cart(db_session, restaurant, [_line("mystery_box")], "dine-in")
