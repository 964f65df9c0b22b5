"""
Tests for the business analyst, the master assistant and confirmed actions.
"""
import json
from types import SimpleNamespace
from unittest.mock import patch

import pytest

from tablewise import config, llm_client
from tablewise.models import Category, MenuItem, Restaurant
from tablewise.services import assistants
from tablewise.services.assistants import ActionError

API = "/api/v1"


# =============================================================================
# Reply Parsing
# =============================================================================

class TestParseMasterReply:
    def test_fenced_action(self):
        reply = '```json\n{"type": "CONFIRM_DELETE", "item_id": "abc"}\n```'
        assert assistants.parse_master_reply(reply) == {"type": "CONFIRM_DELETE", "item_id": "abc"}

    def test_action_embedded_in_text(self):
        reply = 'Here you go: {"type": "FETCH_MENU", "restaurant_id": "r1"} let me know.'
        assert assistants.parse_master_reply(reply)["type"] == "FETCH_MENU"

    def test_plain_text_is_a_response(self):
        assert assistants.parse_master_reply("There are 2 restaurants.") == {
            "type": "RESPONSE",
            "message": "There are 2 restaurants.",
        }

    def test_unknown_type_is_a_response(self):
        reply = '{"type": "DROP_EVERYTHING"}'
        assert assistants.parse_master_reply(reply) == {"type": "RESPONSE", "message": reply}

    def test_empty_reply(self):
        assert assistants.parse_master_reply(None) == {"type": "RESPONSE", "message": ""}


# =============================================================================
# Prompts
# =============================================================================

class TestMasterPrompt:
    def test_broad_prompt_lists_restaurants_and_history(self, db_session):
        history = [
            SimpleNamespace(role="user", content="How many restaurants?"),
            SimpleNamespace(role="assistant", content="Two."),
        ]
        prompt = assistants.build_master_prompt(db_session, "Rename Tandoor", history=history)

        assert "Spice Route" in prompt
        assert "Tandoor Express" in prompt
        assert "User: How many restaurants?\nAI: Two." in prompt
        assert '"Rename Tandoor"' in prompt

    def test_menu_prompt_lists_items(self, db_session, seeded):
        restaurant = db_session.get(Restaurant, seeded["restaurant_id"])
        prompt = assistants.build_master_prompt(db_session, "Delete the kulfi", restaurant=restaurant)

        assert seeded["kulfi_id"] in prompt
        assert "Gulab Jamun" in prompt
        assert "Butter Naan" not in prompt
        assert f'"restaurant_id": "{seeded["restaurant_id"]}"' in prompt


class TestAskAssistants:
    def test_analyst_uses_analyst_model_and_custom_prompt(self, db_session, seeded):
        restaurant = db_session.get(Restaurant, seeded["restaurant_id"])
        restaurant.ai_custom_prompt = "Answer in Hindi."
        db_session.commit()

        with patch.object(llm_client, "call_llm", return_value="**Sales** are up") as mock_llm:
            answer = assistants.ask_analyst(db_session, restaurant, "How are sales?", api_key="sk-test")

        assert answer == "**Sales** are up"
        prompt = mock_llm.call_args[0][0]
        assert '"How are sales?"' in prompt
        assert "Paneer Tikka" in prompt
        assert prompt.rstrip().endswith("Answer in Hindi.")
        assert mock_llm.call_args[1]["model"] == config.OPENAI_ANALYST_MODEL

    def test_analyst_gemini_uses_default_model(self, db_session, seeded):
        restaurant = db_session.get(Restaurant, seeded["restaurant_id"])
        with patch.object(llm_client, "call_llm", return_value="ok") as mock_llm:
            assistants.ask_analyst(db_session, restaurant, "Best seller?", api_key="AIza-test")
        assert mock_llm.call_args[1]["model"] is None

    def test_analyst_empty_reply_fallback(self, db_session, seeded):
        restaurant = db_session.get(Restaurant, seeded["restaurant_id"])
        with patch.object(llm_client, "call_llm", return_value=""):
            answer = assistants.ask_analyst(db_session, restaurant, "Anything?", api_key="sk-test")
        assert answer == "I couldn't generate a response."

    def test_master_returns_parsed_action(self, db_session):
        reply = '{"type": "FETCH_MENU", "restaurant_id": "r1", "restaurant_name": "Spice Route", "reason": "find item"}'
        with patch.object(llm_client, "call_llm", return_value=reply):
            action = assistants.ask_master(db_session, "Delete paneer at Spice Route", api_key="sk-test")
        assert action["type"] == "FETCH_MENU"
        assert action["reason"] == "find item"

    def test_generate_sql_cleans_reply(self):
        with patch.object(llm_client, "call_llm", return_value="```sql\nSELECT 1;\n```"):
            assert assistants.generate_sql("one?", "schema", api_key="sk-test") == "SELECT 1"


# =============================================================================
# Applying Actions
# =============================================================================

class TestApplyMasterAction:
    def test_update_price(self, db_session, seeded):
        detail = assistants.apply_master_action(db_session, {
            "type": "CONFIRM_UPDATE_PRICE",
            "item_id": seeded["paneer_id"],
            "restaurant_id": seeded["restaurant_id"],
            "new_price": "300",
        })
        assert detail == {"item_id": seeded["paneer_id"], "new_price": 300.0}
        assert db_session.get(MenuItem, seeded["paneer_id"]).full_price == 300.0

    @pytest.mark.parametrize("new_price", [-5, "free", None])
    def test_update_price_rejects_bad_values(self, db_session, seeded, new_price):
        with pytest.raises(ActionError):
            assistants.apply_master_action(db_session, {
                "type": "CONFIRM_UPDATE_PRICE",
                "item_id": seeded["paneer_id"],
                "new_price": new_price,
            })

    def test_delete_item(self, db_session, seeded):
        assistants.apply_master_action(db_session, {
            "type": "CONFIRM_DELETE",
            "item_id": seeded["chicken_id"],
            "restaurant_id": seeded["restaurant_id"],
        })
        assert db_session.get(MenuItem, seeded["chicken_id"]) is None

    def test_item_from_another_restaurant_not_found(self, db_session, seeded):
        with pytest.raises(LookupError):
            assistants.apply_master_action(db_session, {
                "type": "CONFIRM_DELETE",
                "item_id": seeded["naan_id"],
                "restaurant_id": seeded["restaurant_id"],
            })

    def test_add_item_goes_to_first_category(self, db_session, seeded):
        detail = assistants.apply_master_action(db_session, {
            "type": "CONFIRM_ADD_ITEM",
            "restaurant_id": seeded["restaurant_id"],
            "name": "Masala Papad",
            "price": 60,
            "is_veg": True,
        })
        assert detail["category_id"] == seeded["starters_id"]
        item = db_session.get(MenuItem, detail["item_id"])
        assert item.full_price == 60.0
        assert item.is_available is True

    def test_add_item_creates_general_category(self, db_session):
        restaurant = Restaurant(name="Chai Point", slug="chai-point")
        db_session.add(restaurant)
        db_session.commit()

        detail = assistants.apply_master_action(db_session, {
            "type": "CONFIRM_ADD_ITEM",
            "restaurant_id": restaurant.id,
            "name": "Cutting Chai",
            "price": 20,
        })
        category = db_session.get(Category, detail["category_id"])
        assert category.name == "General"
        assert category.restaurant_id == restaurant.id

    def test_update_restaurant_only_whitelisted_fields(self, db_session, seeded):
        detail = assistants.apply_master_action(db_session, {
            "type": "CONFIRM_UPDATE_RESTAURANT",
            "restaurant_id": seeded["other_restaurant_id"],
            "updates": {"phone": "9876543210", "slug": "hijacked"},
        })
        assert detail["updates"] == {"phone": "9876543210"}
        restaurant = db_session.get(Restaurant, seeded["other_restaurant_id"])
        assert restaurant.phone == "9876543210"
        assert restaurant.slug == "tandoor-express"

    def test_update_restaurant_without_fields(self, db_session, seeded):
        with pytest.raises(ActionError):
            assistants.apply_master_action(db_session, {
                "type": "CONFIRM_UPDATE_RESTAURANT",
                "restaurant_id": seeded["other_restaurant_id"],
                "updates": {"slug": "x"},
            })

    def test_delete_restaurant_cascades(self, db_session, seeded):
        assistants.apply_master_action(db_session, {
            "type": "CONFIRM_DELETE_RESTAURANT",
            "restaurant_id": seeded["other_restaurant_id"],
        })
        assert db_session.get(Restaurant, seeded["other_restaurant_id"]) is None
        assert db_session.get(MenuItem, seeded["naan_id"]) is None

    def test_missing_restaurant(self, db_session):
        with pytest.raises(LookupError):
            assistants.apply_master_action(db_session, {
                "type": "CONFIRM_DELETE_RESTAURANT",
                "restaurant_id": "does-not-exist",
            })

    @pytest.mark.parametrize("action_type", ["RESPONSE", "FETCH_MENU", "NUKE"])
    def test_non_mutating_types_rejected(self, db_session, action_type):
        with pytest.raises(ActionError):
            assistants.apply_master_action(db_session, {"type": action_type})


# =============================================================================
# Routes
# =============================================================================

class TestAssistantRoutes:
    def test_analyst(self, client, restaurant_auth, seeded):
        with patch.object(llm_client, "call_llm", return_value="Revenue is 0"):
            resp = client.post(f"{API}/ai/analyst", json={
                "restaurant_id": seeded["restaurant_id"],
                "query": "Revenue?",
                "api_key": "sk-test",
            }, auth=restaurant_auth)
        assert resp.status_code == 200
        assert resp.json() == {"answer": "Revenue is 0"}

    def test_analyst_other_tenant_forbidden(self, client, other_auth, seeded):
        resp = client.post(f"{API}/ai/analyst", json={
            "restaurant_id": seeded["restaurant_id"],
            "query": "Revenue?",
            "api_key": "sk-test",
        }, auth=other_auth)
        assert resp.status_code == 403

    def test_analyst_without_key_returns_500(self, client, restaurant_auth, seeded):
        resp = client.post(f"{API}/ai/analyst", json={
            "restaurant_id": seeded["restaurant_id"],
            "query": "Revenue?",
        }, auth=restaurant_auth)
        assert resp.status_code == 500

    def test_master_returns_action_fields(self, client, admin_auth, seeded):
        reply = json.dumps({
            "type": "CONFIRM_UPDATE_PRICE",
            "item_id": seeded["paneer_id"],
            "item_name": "Paneer Tikka",
            "new_price": 299,
            "restaurant_id": seeded["restaurant_id"],
        })
        with patch.object(llm_client, "call_llm", return_value=reply):
            resp = client.post(f"{API}/ai/master", json={
                "query": "Make paneer tikka 299",
                "restaurant_id": seeded["restaurant_id"],
                "history": [{"role": "user", "content": "Open Spice Route"}],
                "api_key": "sk-test",
            }, auth=admin_auth)

        assert resp.status_code == 200
        data = resp.json()
        assert data["type"] == "CONFIRM_UPDATE_PRICE"
        assert data["item_id"] == seeded["paneer_id"]
        assert data["new_price"] == 299

    def test_master_requires_super_admin(self, client, restaurant_auth):
        resp = client.post(f"{API}/ai/master", json={"query": "hi"}, auth=restaurant_auth)
        assert resp.status_code == 401

    def test_apply_price_update(self, client, admin_auth, restaurant_auth, seeded):
        resp = client.post(f"{API}/ai/master/apply", json={
            "type": "CONFIRM_UPDATE_PRICE",
            "item_id": seeded["paneer_id"],
            "restaurant_id": seeded["restaurant_id"],
            "new_price": 299,
        }, auth=admin_auth)
        assert resp.status_code == 200
        assert resp.json()["success"] is True

        items = client.get(f"{API}/menu/items/{seeded['restaurant_id']}", auth=restaurant_auth).json()
        paneer = next(i for i in items if i["id"] == seeded["paneer_id"])
        assert paneer["full_price"] == 299.0

    def test_apply_missing_item_returns_404(self, client, admin_auth):
        resp = client.post(f"{API}/ai/master/apply", json={
            "type": "CONFIRM_DELETE",
            "item_id": "missing",
        }, auth=admin_auth)
        assert resp.status_code == 404

    def test_apply_unsupported_returns_400(self, client, admin_auth):
        resp = client.post(f"{API}/ai/master/apply", json={"type": "RESPONSE", "message": "hi"}, auth=admin_auth)
        assert resp.status_code == 400
