"""
Tests for restaurant management, settings and the public menu.
"""
API = "/api/v1"


def test_list_restaurants_includes_counts(client, admin_auth, seeded):
    resp = client.get(f"{API}/restaurants", auth=admin_auth)
    assert resp.status_code == 200
    by_slug = {r["slug"]: r for r in resp.json()}
    assert set(by_slug) == {"spice-route", "tandoor-express"}
    assert by_slug["spice-route"]["menu_item_count"] == 5
    assert by_slug["spice-route"]["order_count"] == 0
    assert "password_hash" not in by_slug["spice-route"]


def test_create_restaurant_derives_slug(client, admin_auth):
    resp = client.post(
        f"{API}/restaurants",
        json={"name": "Tony's Pizza & Grill", "username": "tony", "password": "margherita"},
        auth=admin_auth,
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["slug"] == "tonys-pizza-grill"
    assert data["is_active"] is True
    assert data["business_type"] == "restaurant"
    assert "password" not in data

    # The new owner can log in straight away
    login = client.post(f"{API}/auth/login", auth=("tony", "margherita"))
    assert login.status_code == 200
    assert login.json()["restaurant_id"] == data["id"]


def test_create_restaurant_rejects_duplicate_slug(client, admin_auth):
    resp = client.post(f"{API}/restaurants", json={"name": "Spice Route"}, auth=admin_auth)
    assert resp.status_code == 400
    assert "already taken" in resp.json()["detail"]


def test_create_restaurant_rejects_duplicate_username(client, admin_auth):
    resp = client.post(
        f"{API}/restaurants",
        json={"name": "New Place", "username": "spiceroute", "password": "abcd1234"},
        auth=admin_auth,
    )
    assert resp.status_code == 400


def test_update_restaurant_changes_password(client, admin_auth, seeded):
    resp = client.put(
        f"{API}/restaurants/{seeded['restaurant_id']}",
        json={"password": "new-password"},
        auth=admin_auth,
    )
    assert resp.status_code == 200
    assert client.post(f"{API}/auth/login", auth=("spiceroute", "curry-house")).status_code == 401
    assert client.post(f"{API}/auth/login", auth=("spiceroute", "new-password")).status_code == 200


def test_delete_restaurant_removes_its_data(client, admin_auth, seeded, session_factory):
    from tablewise.models import Category, MenuItem

    resp = client.delete(f"{API}/restaurants/{seeded['restaurant_id']}", auth=admin_auth)
    assert resp.status_code == 200
    assert resp.json() == {"success": True}

    resp = client.get(f"{API}/restaurants/{seeded['restaurant_id']}", auth=admin_auth)
    assert resp.status_code == 404

    session = session_factory()
    try:
        assert session.query(MenuItem).filter(MenuItem.restaurant_id == seeded["restaurant_id"]).count() == 0
        assert session.query(Category).filter(Category.restaurant_id == seeded["restaurant_id"]).count() == 0
        # The other tenant is untouched
        assert session.query(MenuItem).filter(MenuItem.restaurant_id == seeded["other_restaurant_id"]).count() == 1
    finally:
        session.close()


def test_platform_stats(client, admin_auth):
    resp = client.get(f"{API}/restaurants/stats", auth=admin_auth)
    assert resp.status_code == 200
    assert resp.json() == {
        "total_restaurants": 2,
        "active_restaurants": 2,
        "total_orders": 0,
        "total_revenue": 0.0,
    }


class TestSettings:
    def test_owner_can_update_settings(self, client, restaurant_auth, seeded):
        resp = client.put(
            f"{API}/restaurants/{seeded['restaurant_id']}/settings",
            json={"tax_percentage": 12, "mystery_box_enabled": True, "gift_threshold": 800},
            auth=restaurant_auth,
        )
        assert resp.status_code == 200
        data = resp.json()
        assert data["tax_percentage"] == 12
        assert data["mystery_box_enabled"] is True
        assert data["gift_threshold"] == 800

    def test_null_clears_optional_setting_only(self, client, restaurant_auth, seeded):
        url = f"{API}/restaurants/{seeded['restaurant_id']}/settings"
        client.put(url, json={"gift_threshold": 800, "gift_item_id": seeded["jamun_id"]}, auth=restaurant_auth)

        resp = client.put(url, json={"gift_threshold": None, "tax_enabled": None}, auth=restaurant_auth)
        assert resp.status_code == 200
        data = resp.json()
        assert data["gift_threshold"] is None
        assert data["gift_item_id"] == seeded["jamun_id"]
        # Non-nullable flags ignore null
        assert data["tax_enabled"] is True

    def test_settings_reject_out_of_range_tax(self, client, restaurant_auth, seeded):
        resp = client.put(
            f"{API}/restaurants/{seeded['restaurant_id']}/settings",
            json={"tax_percentage": 150},
            auth=restaurant_auth,
        )
        assert resp.status_code == 422

    def test_other_owner_cannot_update_settings(self, client, other_auth, seeded):
        resp = client.put(
            f"{API}/restaurants/{seeded['restaurant_id']}/settings",
            json={"tax_percentage": 1},
            auth=other_auth,
        )
        assert resp.status_code == 403


class TestPublicMenu:
    def test_public_menu_by_slug(self, client, seeded):
        resp = client.get(f"{API}/restaurants/slug/spice-route")
        assert resp.status_code == 200
        data = resp.json()
        assert data["name"] == "Spice Route"
        assert [c["name"] for c in data["categories"]] == ["Starters", "Desserts"]
        assert "password_hash" not in data

        items = {i["name"]: i for i in data["menu_items"]}
        # 20% fake discount on Starters: 280 / 0.8 = 350
        assert items["Paneer Tikka"]["fake_original_price"] == 350.0
        assert items["Paneer Tikka"]["half_price"] == 160.0
        assert items["Gulab Jamun"]["fake_original_price"] is None

    def test_unknown_slug_returns_404(self, client):
        assert client.get(f"{API}/restaurants/slug/nowhere").status_code == 404

    def test_inactive_restaurant_menu_hidden(self, client, admin_auth, seeded):
        client.put(f"{API}/restaurants/{seeded['restaurant_id']}", json={"is_active": False}, auth=admin_auth)
        assert client.get(f"{API}/restaurants/slug/spice-route").status_code == 404


def test_table_qr_code(client, restaurant_auth, seeded):
    resp = client.get(f"{API}/restaurants/{seeded['restaurant_id']}/qr?table=5", auth=restaurant_auth)
    assert resp.status_code == 200
    data = resp.json()
    assert data["url"].endswith("/r/spice-route?table=5")
    assert data["qr_code"].startswith("data:image/png;base64,")
