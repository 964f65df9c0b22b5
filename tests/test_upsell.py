"""
Tests for cart recommendations, the LLM menu sync and flash item picks.
"""
import json
from types import SimpleNamespace
from unittest.mock import patch

import pytest

from tablewise import llm_client
from tablewise.llm_client import LLMError
from tablewise.models import MenuItem, Restaurant
from tablewise.services import upsell

API = "/api/v1"


def _item(item_id, name, recs=()):
    return SimpleNamespace(id=item_id, name=name, recommended_item_ids=list(recs))


class TestRecommendForCart:
    def test_most_frequent_recommendations_first(self):
        menu = [
            _item("a", "Dal", ["c", "d"]),
            _item("b", "Rice", ["d", "e"]),
            _item("c", "Raita"),
            _item("d", "Papad"),
            _item("e", "Pickle"),
        ]
        cart = [SimpleNamespace(id="a", name="Dal"), SimpleNamespace(id="b", name="Rice")]
        picks = upsell.recommend_for_cart(menu, cart)
        assert [m.id for m in picks] == ["d", "c", "e"]

    def test_items_already_in_cart_are_skipped(self):
        menu = [_item("a", "Dal", ["b", "c"]), _item("b", "Rice"), _item("c", "Raita")]
        cart = [SimpleNamespace(id="a", name=None), SimpleNamespace(id="b", name="Rice")]
        assert [m.id for m in upsell.recommend_for_cart(menu, cart)] == ["c"]

    def test_unknown_cart_items_and_stale_ids_ignored(self):
        menu = [_item("a", "Dal", ["gone", "b"]), _item("b", "Rice")]
        cart = [SimpleNamespace(id="a", name="Dal"), SimpleNamespace(id="zzz", name="Ghost")]
        assert [m.id for m in upsell.recommend_for_cart(menu, cart)] == ["b"]

    def test_empty_when_nothing_linked(self):
        menu = [_item("a", "Dal")]
        assert upsell.recommend_for_cart(menu, [SimpleNamespace(id="a", name="Dal")]) == []


class TestMenuSync:
    def _reply(self, seeded):
        return json.dumps({
            seeded["paneer_id"]: [seeded["spring_roll_id"], seeded["chicken_id"], seeded["jamun_id"]],
            seeded["spring_roll_id"]: [seeded["paneer_id"], "not-a-real-id", seeded["spring_roll_id"]],
            seeded["chicken_id"]: [seeded["jamun_id"]],
            seeded["jamun_id"]: [seeded["paneer_id"], seeded["kulfi_id"]],
        })

    def test_sync_in_chunks_and_filter_ids(self, db_session, seeded):
        rid = seeded["restaurant_id"]
        with patch.object(llm_client, "call_llm", return_value=self._reply(seeded)) as mock_llm:
            updated = upsell.sync_menu_recommendations(db_session, rid, api_key="sk-test", chunk_size=2)

        # four available items, two per chunk
        assert mock_llm.call_count == 2
        assert mock_llm.call_args[1]["json_mode"] is True
        assert updated == 4

        paneer = db_session.get(MenuItem, seeded["paneer_id"])
        spring_roll = db_session.get(MenuItem, seeded["spring_roll_id"])
        jamun = db_session.get(MenuItem, seeded["jamun_id"])
        assert paneer.recommended_item_ids == [
            seeded["spring_roll_id"], seeded["chicken_id"], seeded["jamun_id"]
        ]
        assert spring_roll.recommended_item_ids == [seeded["paneer_id"]]
        # kulfi is unavailable so it is never recommended
        assert jamun.recommended_item_ids == [seeded["paneer_id"]]

    def test_unavailable_items_not_sent(self, db_session, seeded):
        with patch.object(llm_client, "call_llm", return_value="{}") as mock_llm:
            upsell.sync_menu_recommendations(db_session, seeded["restaurant_id"], api_key="sk-test")
        prompt = mock_llm.call_args[0][0]
        assert "Paneer Tikka" in prompt
        assert "Kulfi" not in prompt

    def test_unparseable_reply_updates_nothing(self, db_session, seeded):
        with patch.object(llm_client, "call_llm", return_value="Sorry, I can't help"):
            updated = upsell.sync_menu_recommendations(db_session, seeded["restaurant_id"], api_key="sk-test")
        assert updated == 0
        assert db_session.get(MenuItem, seeded["paneer_id"]).recommended_item_ids == []

    def test_background_job_logs_failures(self, session_factory, seeded):
        with patch.object(llm_client, "call_llm", side_effect=LLMError("quota exceeded")):
            upsell.run_menu_sync_job(session_factory, seeded["restaurant_id"], api_key="sk-test")

        session = session_factory()
        try:
            assert session.get(MenuItem, seeded["paneer_id"]).recommended_item_ids == []
        finally:
            session.close()


class TestPickFlashItems:
    def test_picks_saved_as_popups(self, db_session, seeded):
        restaurant = db_session.get(Restaurant, seeded["restaurant_id"])
        reply = json.dumps(["bogus", seeded["chicken_id"], seeded["jamun_id"]])
        with patch.object(llm_client, "call_llm", return_value=reply):
            picked = upsell.pick_flash_items(db_session, restaurant, api_key="sk-test")

        assert picked == [seeded["chicken_id"], seeded["jamun_id"]]
        assert restaurant.popup_item1_id == seeded["chicken_id"]
        assert restaurant.popup_item2_id == seeded["jamun_id"]

    @pytest.mark.parametrize("reply", ["not json", '{"a": 1}', '["only-one"]'])
    def test_bad_replies_raise(self, db_session, seeded, reply):
        restaurant = db_session.get(Restaurant, seeded["restaurant_id"])
        with patch.object(llm_client, "call_llm", return_value=reply):
            with pytest.raises(upsell.UpsellError):
                upsell.pick_flash_items(db_session, restaurant, api_key="sk-test")
        assert restaurant.popup_item1_id is None


class TestUpsellRoutes:
    def _enable_upsell(self, client, restaurant_auth, seeded):
        resp = client.put(
            f"{API}/restaurants/{seeded['restaurant_id']}/settings",
            json={"ai_upsell_enabled": True},
            auth=restaurant_auth,
        )
        assert resp.status_code == 200

    def test_recommend_disabled_by_default(self, client, seeded):
        resp = client.post(f"{API}/ai-upsell/recommend", json={
            "restaurant_id": seeded["restaurant_id"],
            "cart_items": [{"id": seeded["paneer_id"]}],
        })
        assert resp.status_code == 403

    def test_recommend_requires_cart(self, client, seeded):
        resp = client.post(f"{API}/ai-upsell/recommend", json={"restaurant_id": seeded["restaurant_id"]})
        assert resp.status_code == 400

    def test_recommend_uses_stored_links(self, client, restaurant_auth, seeded):
        self._enable_upsell(client, restaurant_auth, seeded)
        resp = client.put(
            f"{API}/menu/items/{seeded['paneer_id']}",
            json={"recommended_item_ids": [seeded["jamun_id"], seeded["spring_roll_id"]]},
            auth=restaurant_auth,
        )
        assert resp.status_code == 200

        resp = client.post(f"{API}/ai-upsell/recommend", json={
            "restaurant_id": seeded["restaurant_id"],
            "cart_items": [
                {"id": seeded["paneer_id"], "name": "Paneer Tikka"},
                {"id": seeded["spring_roll_id"], "name": "Veg Spring Roll"},
            ],
        })
        assert resp.status_code == 200
        assert [m["name"] for m in resp.json()] == ["Gulab Jamun"]

    def test_sync_menu_runs_in_background(self, client, restaurant_auth, seeded):
        reply = json.dumps({seeded["paneer_id"]: [seeded["jamun_id"]]})
        with patch.object(llm_client, "call_llm", return_value=reply):
            resp = client.post(
                f"{API}/ai-upsell/sync-menu",
                json={"restaurant_id": seeded["restaurant_id"], "api_key": "sk-test"},
                auth=restaurant_auth,
            )
        assert resp.status_code == 200
        assert "4 items" in resp.json()["message"]

        items = client.get(f"{API}/menu/items/{seeded['restaurant_id']}", auth=restaurant_auth).json()
        paneer = next(i for i in items if i["id"] == seeded["paneer_id"])
        assert paneer["recommended_item_ids"] == [seeded["jamun_id"]]

    def test_sync_menu_without_key_returns_500(self, client, restaurant_auth, seeded):
        resp = client.post(
            f"{API}/ai-upsell/sync-menu",
            json={"restaurant_id": seeded["restaurant_id"]},
            auth=restaurant_auth,
        )
        assert resp.status_code == 500

    def test_sync_menu_other_tenant_forbidden(self, client, other_auth, seeded):
        resp = client.post(
            f"{API}/ai-upsell/sync-menu",
            json={"restaurant_id": seeded["restaurant_id"], "api_key": "sk-test"},
            auth=other_auth,
        )
        assert resp.status_code == 403

    def test_pick_flash_items(self, client, restaurant_auth, seeded):
        reply = json.dumps([seeded["chicken_id"], seeded["paneer_id"]])
        with patch.object(llm_client, "call_llm", return_value=reply):
            resp = client.post(
                f"{API}/ai-upsell/pick-flash-items",
                json={"restaurant_id": seeded["restaurant_id"], "api_key": "sk-test"},
                auth=restaurant_auth,
            )
        assert resp.status_code == 200
        assert resp.json() == {
            "success": True,
            "popup_item1_id": seeded["chicken_id"],
            "popup_item2_id": seeded["paneer_id"],
        }

    def test_pick_flash_items_bad_reply_returns_500(self, client, restaurant_auth, seeded):
        with patch.object(llm_client, "call_llm", return_value="[]"):
            resp = client.post(
                f"{API}/ai-upsell/pick-flash-items",
                json={"restaurant_id": seeded["restaurant_id"], "api_key": "sk-test"},
                auth=restaurant_auth,
            )
        assert resp.status_code == 500
