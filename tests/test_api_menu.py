"""
Tests for category and menu item management.
"""
from tablewise.models import Category

API = "/api/v1"


class TestCategories:
    def test_list_categories_in_creation_order(self, client, restaurant_auth, seeded):
        resp = client.get(f"{API}/menu/categories/{seeded['restaurant_id']}", auth=restaurant_auth)
        assert resp.status_code == 200
        assert [c["name"] for c in resp.json()] == ["Starters", "Desserts"]

    def test_create_category_defaults_icon(self, client, restaurant_auth, seeded):
        resp = client.post(
            f"{API}/menu/categories",
            json={"restaurant_id": seeded["restaurant_id"], "name": "Mains"},
            auth=restaurant_auth,
        )
        assert resp.status_code == 200
        assert resp.json()["icon"] == "utensils"

        names = [c["name"] for c in client.get(
            f"{API}/menu/categories/{seeded['restaurant_id']}", auth=restaurant_auth
        ).json()]
        assert names == ["Starters", "Desserts", "Mains"]

    def test_bulk_create_keeps_order(self, client, restaurant_auth, seeded):
        resp = client.post(
            f"{API}/menu/categories/bulk",
            json={
                "restaurant_id": seeded["restaurant_id"],
                "categories": [{"name": "Soups"}, {"name": "Biryani", "icon": "bowl"}],
            },
            auth=restaurant_auth,
        )
        assert resp.status_code == 200
        assert [c["name"] for c in resp.json()] == ["Soups", "Biryani"]

    def test_bulk_create_requires_entries(self, client, restaurant_auth, seeded):
        resp = client.post(
            f"{API}/menu/categories/bulk",
            json={"restaurant_id": seeded["restaurant_id"], "categories": []},
            auth=restaurant_auth,
        )
        assert resp.status_code == 400

    def test_update_category_discount(self, client, restaurant_auth, seeded):
        resp = client.put(
            f"{API}/menu/categories/{seeded['desserts_id']}",
            json={"fake_discount_pct": 10},
            auth=restaurant_auth,
        )
        assert resp.status_code == 200
        assert resp.json()["fake_discount_pct"] == 10
        assert resp.json()["name"] == "Desserts"

    def test_delete_category_deletes_items(self, client, restaurant_auth, seeded):
        resp = client.delete(f"{API}/menu/categories/{seeded['desserts_id']}", auth=restaurant_auth)
        assert resp.status_code == 200

        names = {i["name"] for i in client.get(
            f"{API}/menu/items/{seeded['restaurant_id']}", auth=restaurant_auth
        ).json()}
        assert "Gulab Jamun" not in names
        assert "Paneer Tikka" in names

    def test_new_category_goes_after_existing_ones_after_delete(self, client, restaurant_auth, session_factory, seeded):
        client.delete(f"{API}/menu/categories/{seeded['starters_id']}", auth=restaurant_auth)
        resp = client.post(
            f"{API}/menu/categories",
            json={"restaurant_id": seeded["restaurant_id"], "name": "Mains"},
            auth=restaurant_auth,
        )
        assert resp.status_code == 200

        session = session_factory()
        try:
            positions = {
                c.name: c.position
                for c in session.query(Category).filter(Category.restaurant_id == seeded["restaurant_id"])
            }
        finally:
            session.close()
        assert positions == {"Desserts": 1, "Mains": 2}

    def test_unknown_category_returns_404(self, client, restaurant_auth):
        resp = client.put(f"{API}/menu/categories/missing", json={"name": "x"}, auth=restaurant_auth)
        assert resp.status_code == 404


class TestMenuItems:
    def test_create_item(self, client, restaurant_auth, seeded):
        resp = client.post(
            f"{API}/menu/items",
            json={
                "restaurant_id": seeded["restaurant_id"],
                "category_id": seeded["starters_id"],
                "name": "Hara Bhara Kabab",
                "full_price": 220,
                "half_price": 130,
            },
            auth=restaurant_auth,
        )
        assert resp.status_code == 200
        data = resp.json()
        assert data["is_veg"] is True
        assert data["is_available"] is True
        assert data["recommended_item_ids"] == []
        # 220 / 0.8 = 275
        assert data["fake_original_price"] == 275.0

    def test_create_item_in_foreign_category_rejected(self, client, restaurant_auth, seeded):
        resp = client.post(
            f"{API}/menu/items",
            json={
                "restaurant_id": seeded["restaurant_id"],
                "category_id": seeded["breads_id"],
                "name": "Stolen Naan",
                "full_price": 50,
            },
            auth=restaurant_auth,
        )
        assert resp.status_code == 400

    def test_negative_price_rejected(self, client, restaurant_auth, seeded):
        resp = client.post(
            f"{API}/menu/items",
            json={
                "restaurant_id": seeded["restaurant_id"],
                "category_id": seeded["starters_id"],
                "name": "Free Lunch",
                "full_price": -1,
            },
            auth=restaurant_auth,
        )
        assert resp.status_code == 422

    def test_update_item_partial(self, client, restaurant_auth, seeded):
        resp = client.put(
            f"{API}/menu/items/{seeded['paneer_id']}",
            json={"full_price": 300, "is_available": False},
            auth=restaurant_auth,
        )
        assert resp.status_code == 200
        data = resp.json()
        assert data["full_price"] == 300
        assert data["is_available"] is False
        assert data["half_price"] == 160
        assert data["name"] == "Paneer Tikka"

    def test_update_item_clears_half_price_with_null(self, client, restaurant_auth, seeded):
        resp = client.put(
            f"{API}/menu/items/{seeded['paneer_id']}",
            json={"half_price": None},
            auth=restaurant_auth,
        )
        assert resp.status_code == 200
        assert resp.json()["half_price"] is None

    def test_move_item_to_other_category(self, client, restaurant_auth, seeded):
        resp = client.put(
            f"{API}/menu/items/{seeded['spring_roll_id']}",
            json={"category_id": seeded["desserts_id"]},
            auth=restaurant_auth,
        )
        assert resp.status_code == 200
        assert resp.json()["category_id"] == seeded["desserts_id"]
        assert resp.json()["fake_original_price"] is None

    def test_delete_item(self, client, restaurant_auth, seeded):
        resp = client.delete(f"{API}/menu/items/{seeded['chicken_id']}", auth=restaurant_auth)
        assert resp.status_code == 200
        resp = client.delete(f"{API}/menu/items/{seeded['chicken_id']}", auth=restaurant_auth)
        assert resp.status_code == 404

    def test_menu_requires_auth(self, client, seeded):
        assert client.get(f"{API}/menu/items/{seeded['restaurant_id']}").status_code == 401
