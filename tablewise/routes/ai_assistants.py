"""
AI Assistant Routes for Tablewise
=================================

Endpoints:
----------
- POST /ai/analyst: Business Q&A over one restaurant's data (owner or super admin)
- POST /ai/master: Natural-language platform administration (super admin)
- POST /ai/master/apply: Execute an action the super admin confirmed

The master endpoint never changes anything. It returns an action such as
CONFIRM_UPDATE_PRICE; the dashboard shows a confirmation and, if accepted,
posts the same action to /ai/master/apply.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from ..auth import AdminPrincipal, ensure_restaurant_access, get_current_principal, verify_admin_credentials
from ..config import get_rate_limit_ai
from ..db import get_db
from ..llm_client import LLMError
from ..rate_limit import limiter
from ..schemas.ai import AnalystOut, AnalystRequest, ApplyActionOut, MasterAction, MasterRequest
from ..services import assistants
from ..services.helpers import get_restaurant_or_404


logger = logging.getLogger(__name__)

ai_router = APIRouter(prefix="/ai", tags=["AI Assistants"])


@ai_router.post("/analyst", response_model=AnalystOut)
@limiter.limit(get_rate_limit_ai)
def ask_analyst(
    request: Request,
    payload: AnalystRequest,
    db: Session = Depends(get_db),
    principal: AdminPrincipal = Depends(get_current_principal),
) -> AnalystOut:
    ensure_restaurant_access(principal, payload.restaurant_id)
    restaurant = get_restaurant_or_404(db, payload.restaurant_id)
    try:
        answer = assistants.ask_analyst(
            db, restaurant, payload.query, api_key=payload.api_key, provider=payload.provider
        )
    except LLMError as e:
        raise HTTPException(status_code=500, detail=str(e))
    return AnalystOut(answer=answer)


@ai_router.post("/master", response_model=MasterAction)
@limiter.limit(get_rate_limit_ai)
def ask_master(
    request: Request,
    payload: MasterRequest,
    db: Session = Depends(get_db),
    _admin: str = Depends(verify_admin_credentials),
) -> MasterAction:
    restaurant = None
    if payload.restaurant_id:
        restaurant = get_restaurant_or_404(db, payload.restaurant_id)
    try:
        action = assistants.ask_master(
            db,
            payload.query,
            restaurant=restaurant,
            history=payload.history,
            api_key=payload.api_key,
            provider=payload.provider,
        )
    except LLMError as e:
        raise HTTPException(status_code=500, detail=str(e))
    return MasterAction(**action)


@ai_router.post("/master/apply", response_model=ApplyActionOut)
def apply_master_action(
    action: MasterAction,
    db: Session = Depends(get_db),
    _admin: str = Depends(verify_admin_credentials),
) -> ApplyActionOut:
    try:
        detail = assistants.apply_master_action(db, action.model_dump())
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except assistants.ActionError as e:
        db.rollback()
        raise HTTPException(status_code=400, detail=str(e))
    return ApplyActionOut(success=True, type=action.type, detail=detail)
