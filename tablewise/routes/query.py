"""
Query Console Routes for Tablewise
==================================

Super admin SQL console: canned platform reports, ad-hoc SQL and
natural-language-to-SQL generation.

Endpoints:
----------
- GET /query/predefined: Available canned reports
- GET /query/schema: Table/column reference shown next to the editor
- POST /query/execute: Run a canned report (query_key) or custom SQL
- POST /query/generate-sql: Draft SQL for a question using the LLM

Safety:
-------
See services/query_console.py. Blocked statements return 403 with
{"error", "sql"} in the detail so the console can show what was rejected.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from ..auth import verify_admin_credentials
from ..config import get_rate_limit_ai
from ..db import get_db
from ..llm_client import LLMError
from ..rate_limit import limiter
from ..schemas.query import (
    GenerateSqlOut,
    GenerateSqlRequest,
    PredefinedQueryOut,
    QueryExecuteRequest,
    QueryResultOut,
    SchemaOut,
)
from ..services import query_console
from ..services.assistants import generate_sql


logger = logging.getLogger(__name__)

query_router = APIRouter(prefix="/query", tags=["Query Console"])


@query_router.get("/predefined", response_model=List[PredefinedQueryOut])
def list_predefined_queries(_admin: str = Depends(verify_admin_credentials)) -> List[PredefinedQueryOut]:
    return [PredefinedQueryOut(**q) for q in query_console.list_predefined()]


@query_router.get("/schema", response_model=SchemaOut)
def get_schema(_admin: str = Depends(verify_admin_credentials)) -> SchemaOut:
    return SchemaOut(schema_text=query_console.DB_SCHEMA)


@query_router.post("/execute", response_model=QueryResultOut)
def execute_query(
    payload: QueryExecuteRequest,
    db: Session = Depends(get_db),
    _admin: str = Depends(verify_admin_credentials),
) -> QueryResultOut:
    try:
        result = query_console.execute_query(
            db,
            query_key=payload.query_key,
            custom_sql=payload.custom_sql,
        )
    except query_console.QueryBlockedError as e:
        logger.warning("Blocked console statement: %s", e)
        raise HTTPException(
            status_code=403,
            detail={"error": str(e), "sql": payload.custom_sql or payload.query_key},
        )
    except query_console.QueryExecutionError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return QueryResultOut(**result)


@query_router.post("/generate-sql", response_model=GenerateSqlOut)
@limiter.limit(get_rate_limit_ai)
def generate_sql_for_question(
    request: Request,
    payload: GenerateSqlRequest,
    _admin: str = Depends(verify_admin_credentials),
) -> GenerateSqlOut:
    if not payload.question.strip():
        raise HTTPException(status_code=400, detail="Question is required")
    try:
        sql = generate_sql(
            payload.question,
            query_console.DB_SCHEMA,
            api_key=payload.api_key,
            provider=payload.provider,
        )
    except LLMError as e:
        raise HTTPException(status_code=500, detail=str(e))
    return GenerateSqlOut(sql=sql)
