"""
Query Console Schemas for Tablewise
===================================

Pydantic models for the super admin SQL console.

Endpoint Coverage:
------------------
- GET /query/predefined: Catalogue of canned reports
- GET /query/schema: Table/column reference text
- POST /query/execute: Run a canned report or custom SQL
- POST /query/generate-sql: Turn a question into SQL with the LLM
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel


class PredefinedQueryOut(BaseModel):
    key: str
    label: str
    description: str


class SchemaOut(BaseModel):
    schema_text: str


class QueryExecuteRequest(BaseModel):
    query_key: Optional[str] = None
    custom_sql: Optional[str] = None


class QueryResultOut(BaseModel):
    """
    Result of a console query.

    Attributes:
        execution_time: Wall time formatted like "12ms"
    """
    label: str
    sql: str
    data: List[Dict[str, Any]]
    row_count: int
    execution_time: str


class GenerateSqlRequest(BaseModel):
    question: str
    provider: Optional[str] = None
    api_key: Optional[str] = None


class GenerateSqlOut(BaseModel):
    sql: str
