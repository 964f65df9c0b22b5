"""
AI Assistants for Tablewise
===========================

Three conversational helpers built on llm_client:

- Business analyst (restaurant admin): answers questions about one
  restaurant's orders and menu.
- SQL generator (super admin): turns a question into a SQL statement for
  the query console.
- Master AI (super admin): interprets platform-administration requests
  and returns a typed action. Nothing is changed until the super admin
  confirms and the action is posted to apply_master_action.

Master Action Flow:
-------------------
1. With no restaurant selected the prompt carries every restaurant's
   summary plus global stats. The model either answers in text or returns
   an action JSON (delete/update restaurant, add item, fetch menu).
2. After FETCH_MENU the client resends the query with restaurant_id; the
   prompt then carries that restaurant's menu so the model can pick item
   ids for CONFIRM_DELETE / CONFIRM_UPDATE_PRICE / CONFIRM_ADD_ITEM.
3. The reply is stripped of code fences and the first {...} block is
   parsed. Anything that isn't an object with a "type" becomes a RESPONSE
   carrying the raw text.
"""

import json
import logging
from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy import func
from sqlalchemy.orm import Session

from .. import config, llm_client
from ..models import Category, MenuItem, Order, Restaurant
from .order import order_stats, platform_stats

logger = logging.getLogger(__name__)

RESPONSE = "RESPONSE"
FETCH_MENU = "FETCH_MENU"
CONFIRM_DELETE = "CONFIRM_DELETE"
CONFIRM_UPDATE_PRICE = "CONFIRM_UPDATE_PRICE"
CONFIRM_DELETE_RESTAURANT = "CONFIRM_DELETE_RESTAURANT"
CONFIRM_ADD_ITEM = "CONFIRM_ADD_ITEM"
CONFIRM_UPDATE_RESTAURANT = "CONFIRM_UPDATE_RESTAURANT"

ACTION_TYPES = (
    RESPONSE,
    FETCH_MENU,
    CONFIRM_DELETE,
    CONFIRM_UPDATE_PRICE,
    CONFIRM_DELETE_RESTAURANT,
    CONFIRM_ADD_ITEM,
    CONFIRM_UPDATE_RESTAURANT,
)

# Restaurant columns the master assistant may change
UPDATABLE_RESTAURANT_FIELDS = ("name", "owner_name", "phone", "email")

DEFAULT_CATEGORY_NAME = "General"


class ActionError(ValueError):
    """Raised when a confirmed master action cannot be applied."""


def _model_for(api_key: Optional[str], provider: Optional[str]) -> Optional[str]:
    """OpenAI requests for the assistants use the stronger analyst model."""
    resolved, _ = llm_client.resolve_provider(api_key, provider)
    return config.OPENAI_ANALYST_MODEL if resolved == llm_client.OPENAI else None


# =============================================================================
# Business Analyst
# =============================================================================

ANALYST_PROMPT = """
You are an expert restaurant business analyst.
Below is the current JSON data of the restaurant:
{data}

User Query: "{query}"

Instructions:
1. Answer based ONLY on the provided data.
2. If asked for sales, calculate them correctly.
3. If asked for best-sellers, analyze the item frequencies in orders.
4. Provide actionable insights if possible.
5. Format the output in Markdown with bold headers.
"""


def build_analyst_data(db: Session, restaurant: Restaurant) -> Dict[str, Any]:
    """Summarize a restaurant's orders and menu for the analyst prompt."""
    orders: List[Order] = (
        db.query(Order)
        .filter(Order.restaurant_id == restaurant.id)
        .order_by(Order.created_at.desc())
        .all()
    )
    stats = order_stats(db, restaurant.id)
    return {
        "total_orders": stats["total_orders"],
        "total_revenue": stats["total_revenue"],
        "order_stats": [
            {
                "date": o.created_at.isoformat() if o.created_at else None,
                "total": o.total_amount,
                "status": o.status,
                "order_type": o.order_type,
                "items": [line.menu_item_name for line in o.items],
            }
            for o in orders
        ],
        "menu": [
            {
                "name": m.name,
                "price": m.full_price,
                "category": m.category.name if m.category else None,
            }
            for m in restaurant.menu_items
        ],
    }


def ask_analyst(
    db: Session,
    restaurant: Restaurant,
    query: str,
    api_key: Optional[str] = None,
    provider: Optional[str] = None,
) -> str:
    """
    Answer a business question about one restaurant.

    Raises:
        LLMError: On provider failure or missing configuration
    """
    data = build_analyst_data(db, restaurant)
    prompt = ANALYST_PROMPT.format(data=json.dumps(data, default=str), query=query)
    if restaurant.ai_custom_prompt:
        prompt += f"\nAdditional instructions from the restaurant:\n{restaurant.ai_custom_prompt}\n"

    answer = llm_client.call_llm(
        prompt,
        api_key=api_key,
        provider=provider,
        model=_model_for(api_key, provider),
        temperature=0.2,
    )
    logger.info("Analyst answered query for restaurant %s", restaurant.id)
    return answer or "I couldn't generate a response."


# =============================================================================
# SQL Generation
# =============================================================================

SQL_PROMPT = """
You are a SQL expert for a restaurant SaaS platform.
{schema}

Write ONE SQL SELECT statement that answers the question below.
- Use only the tables and columns listed above.
- Do not end the statement with a semicolon.
- Return ONLY the SQL, no explanation and no markdown.

Question: "{question}"
"""


def generate_sql(
    question: str,
    schema: str,
    api_key: Optional[str] = None,
    provider: Optional[str] = None,
) -> str:
    text = llm_client.call_llm(
        SQL_PROMPT.format(schema=schema, question=question),
        api_key=api_key,
        provider=provider,
        temperature=0.1,
    )
    sql = llm_client.strip_code_fences(text).rstrip(";").strip()
    logger.info("Generated SQL for console question (%d chars)", len(sql))
    return sql


# =============================================================================
# Master AI
# =============================================================================

BROAD_PROMPT = """
You are the "Master AI" for a Restaurant SaaS Platform. You have Super Admin privileges.

Global Business Stats:
{stats}

Current System State (Restaurants):
{restaurants}

Conversation History:
{history}

Current User Query: "{query}"

Instructions:
1. If the user asks for GENERAL stats, answer directly.
2. If the user wants to DELETE a RESTAURANT:
   - Return JSON: {{ "type": "CONFIRM_DELETE_RESTAURANT", "restaurant_id": "...", "restaurant_name": "..." }}
3. If the user wants to UPDATE RESTAURANT DETAILS (name, owner_name, phone, email):
   - Return JSON: {{ "type": "CONFIRM_UPDATE_RESTAURANT", "restaurant_id": "...", "restaurant_name": "...", "updates": {{ "name": "New Name", "phone": "..." }} }}
4. If the user wants to ADD a NEW MENU ITEM:
   - Return JSON: {{ "type": "CONFIRM_ADD_ITEM", "restaurant_id": "...", "restaurant_name": "...", "name": "...", "price": 100, "description": "...", "is_veg": true }}
5. If the user wants to DELETE/MODIFY a MENU ITEM:
   - Return JSON: {{ "type": "FETCH_MENU", "restaurant_id": "...", "restaurant_name": "...", "reason": "To find the item..." }}
6. If the restaurant is not found, ask for clarification.

CRITICAL RULES:
- NEVER say "I have updated/deleted it" in text. YOU CANNOT DO IT.
- YOU MUST RETURN THE JSON OBJECT to trigger the system action.
- ONLY return JSON for actions.

Output Format:
- If answering info: Just the text answer.
- If taking action: ONLY the JSON object. NO markdown, NO text explanation.
"""

MENU_PROMPT = """
You are the "Master AI". You are processing a request for restaurant: "{restaurant_name}".

Conversation History:
{history}

User Query: "{query}"

Loaded Menu Items for {restaurant_name}:
{menu}

Instructions:
1. Identify the item the user means.
2. If DELETE: Return JSON {{ "type": "CONFIRM_DELETE", "item_id": "...", "item_name": "...", "restaurant_id": "{restaurant_id}" }}
3. If UPDATE PRICE: Return JSON {{ "type": "CONFIRM_UPDATE_PRICE", "item_id": "...", "item_name": "...", "new_price": 123, "restaurant_id": "{restaurant_id}" }}
4. If ADDING ITEM: Return JSON {{ "type": "CONFIRM_ADD_ITEM", "restaurant_id": "{restaurant_id}", "restaurant_name": "{restaurant_name}", "name": "...", "price": 100, "description": "...", "is_veg": true }}

CRITICAL RULES:
- NEVER say "I have updated/deleted it" in text. YOU CANNOT DO IT.
- YOU MUST RETURN THE JSON OBJECT to trigger the system action.
- ONLY return JSON for actions.

Output Format:
- JSON Object for actions.
- Text for errors/questions.
"""


def format_history(history: Sequence) -> str:
    return "\n".join(
        f"{'User' if turn.role == 'user' else 'AI'}: {turn.content}" for turn in history
    )


def restaurant_summaries(db: Session) -> List[Dict[str, Any]]:
    item_counts = dict(
        db.query(MenuItem.restaurant_id, func.count(MenuItem.id)).group_by(MenuItem.restaurant_id).all()
    )
    order_counts = dict(
        db.query(Order.restaurant_id, func.count(Order.id)).group_by(Order.restaurant_id).all()
    )
    return [
        {
            "id": r.id,
            "name": r.name,
            "owner_name": r.owner_name,
            "phone": r.phone,
            "status": "Active" if r.is_active else "Inactive",
            "item_count": item_counts.get(r.id, 0),
            "order_count": order_counts.get(r.id, 0),
            "trial_ends": r.trial_end_date.date().isoformat() if r.trial_end_date else "N/A",
        }
        for r in db.query(Restaurant).order_by(Restaurant.name).all()
    ]


def build_master_prompt(
    db: Session,
    query: str,
    restaurant: Optional[Restaurant] = None,
    history: Sequence = (),
) -> str:
    history_text = format_history(history)
    if restaurant is None:
        return BROAD_PROMPT.format(
            stats=json.dumps(platform_stats(db)),
            restaurants=json.dumps(restaurant_summaries(db)),
            history=history_text,
            query=query,
        )

    menu = [{"id": m.id, "name": m.name, "price": m.full_price} for m in restaurant.menu_items]
    return MENU_PROMPT.format(
        restaurant_name=restaurant.name,
        restaurant_id=restaurant.id,
        history=history_text,
        query=query,
        menu=json.dumps(menu),
    )


def parse_master_reply(text: Optional[str]) -> Dict[str, Any]:
    """Turn the model's reply into an action dict."""
    cleaned = llm_client.strip_code_fences(text)
    candidate = llm_client.extract_json_object(cleaned) or cleaned

    if candidate.startswith("{"):
        try:
            action = json.loads(candidate)
        except json.JSONDecodeError:
            action = None
        if isinstance(action, dict) and action.get("type") in ACTION_TYPES:
            return action

    return {"type": RESPONSE, "message": text or ""}


def ask_master(
    db: Session,
    query: str,
    restaurant: Optional[Restaurant] = None,
    history: Sequence = (),
    api_key: Optional[str] = None,
    provider: Optional[str] = None,
) -> Dict[str, Any]:
    prompt = build_master_prompt(db, query, restaurant=restaurant, history=history)
    text = llm_client.call_llm(
        prompt,
        api_key=api_key,
        provider=provider,
        model=_model_for(api_key, provider),
        temperature=0.1,
    )
    action = parse_master_reply(text)
    logger.info("Master AI returned action %s", action["type"])
    return action


# =============================================================================
# Applying Confirmed Actions
# =============================================================================

def _require(action: Dict[str, Any], key: str) -> Any:
    value = action.get(key)
    if value in (None, ""):
        raise ActionError(f"Action is missing '{key}'")
    return value


def _get_restaurant(db: Session, restaurant_id: str) -> Restaurant:
    restaurant = db.query(Restaurant).filter(Restaurant.id == restaurant_id).first()
    if not restaurant:
        raise LookupError("Restaurant not found")
    return restaurant


def _get_item(db: Session, action: Dict[str, Any]) -> MenuItem:
    query = db.query(MenuItem).filter(MenuItem.id == _require(action, "item_id"))
    if action.get("restaurant_id"):
        query = query.filter(MenuItem.restaurant_id == action["restaurant_id"])
    item = query.first()
    if not item:
        raise LookupError("Menu item not found")
    return item


def apply_master_action(db: Session, action: Dict[str, Any]) -> Dict[str, Any]:
    """
    Execute a confirmed master action.

    Returns:
        Detail dict describing what changed

    Raises:
        ActionError: Unknown action type or missing fields
        LookupError: Referenced restaurant or item does not exist
    """
    action_type = action.get("type")

    if action_type == CONFIRM_DELETE_RESTAURANT:
        restaurant = _get_restaurant(db, _require(action, "restaurant_id"))
        detail = {"restaurant_id": restaurant.id, "restaurant_name": restaurant.name}
        db.delete(restaurant)

    elif action_type == CONFIRM_UPDATE_RESTAURANT:
        restaurant = _get_restaurant(db, _require(action, "restaurant_id"))
        updates = action.get("updates") or {}
        if not isinstance(updates, dict):
            raise ActionError("updates must be an object")
        applied = {}
        for field_name in UPDATABLE_RESTAURANT_FIELDS:
            if updates.get(field_name) is not None:
                setattr(restaurant, field_name, updates[field_name])
                applied[field_name] = updates[field_name]
        if not applied:
            raise ActionError("No updatable restaurant fields supplied")
        detail = {"restaurant_id": restaurant.id, "updates": applied}

    elif action_type == CONFIRM_ADD_ITEM:
        restaurant = _get_restaurant(db, _require(action, "restaurant_id"))
        category = restaurant.categories[0] if restaurant.categories else None
        if category is None:
            category = Category(restaurant_id=restaurant.id, name=DEFAULT_CATEGORY_NAME)
            db.add(category)
            db.flush()
        try:
            price = float(action.get("price") or 0)
        except (TypeError, ValueError):
            raise ActionError("price must be a number")
        item = MenuItem(
            restaurant_id=restaurant.id,
            category_id=category.id,
            name=_require(action, "name"),
            description=action.get("description") or "",
            full_price=price,
            is_veg=bool(action.get("is_veg", True)),
            is_available=True,
        )
        db.add(item)
        db.flush()
        detail = {"item_id": item.id, "category_id": category.id, "name": item.name}

    elif action_type == CONFIRM_DELETE:
        item = _get_item(db, action)
        detail = {"item_id": item.id, "item_name": item.name}
        db.delete(item)

    elif action_type == CONFIRM_UPDATE_PRICE:
        item = _get_item(db, action)
        try:
            new_price = float(_require(action, "new_price"))
        except (TypeError, ValueError):
            raise ActionError("new_price must be a number")
        if new_price < 0:
            raise ActionError("new_price must not be negative")
        item.full_price = new_price
        detail = {"item_id": item.id, "new_price": new_price}

    else:
        raise ActionError(f"Unsupported action type: {action_type}")

    db.commit()
    logger.info("Applied master action %s", action_type)
    return detail
