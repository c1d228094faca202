# wavy/routers/db.py
#
# Generic table access used by the admin back-office query builder:
#   GET /api/db/{table}?col=eq.value&order=created_at:desc&limit=20
# Every table and column goes through the allow-list and the filter
# translator; methods not registered here get FastAPI's 405.

import logging
from typing import Any, Union

from fastapi import APIRouter, Body, Depends, Request, status
from fastapi.encoders import jsonable_encoder
from sqlalchemy import Table, delete, func, insert, update
from sqlalchemy.orm import Session

from ..db.base import Base
from ..db.filters import TableQuery, build_query, coerce_value, get_column
from ..db.session import get_db
from ..errors import FilterError, TableAccessDenied
from ..security.deps import AuthUser, require_user
from ..services.table_access import AccessGrant, resolve_access

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/db", tags=["Generic tables"])


def _resolve_table(table_name: str, method: str, user: AuthUser) -> tuple[Table, AccessGrant]:
    grant = resolve_access(table_name, method, user)
    table = Base.metadata.tables.get(table_name)
    if table is None:
        raise TableAccessDenied(table_name)
    return table, grant


def _scoped_query(table: Table, grant: AccessGrant, request: Request, user: AuthUser, require_filter: bool) -> TableQuery:
    query = build_query(table, request.query_params)
    if require_filter and not query.has_filters:
        raise FilterError("Au moins un filtre est requis pour cette opération")
    if grant.owner_scoped:
        query.add_condition(table.c[grant.owner_column] == user.id)
    return query


def _row_values(table: Table, data: dict, grant: AccessGrant, user: AuthUser) -> dict[str, Any]:
    if not isinstance(data, dict):
        raise FilterError("Objet JSON attendu")
    values = {}
    for key, raw in data.items():
        column = get_column(table, key)
        values[column.name] = coerce_value(column, raw)
    if grant.owner_scoped:
        values[grant.owner_column] = user.id
    return values


@router.get("/{table_name}")
def select_rows(
    table_name: str,
    request: Request,
    db: Session = Depends(get_db),
    user: AuthUser = Depends(require_user),
):
    table, grant = _resolve_table(table_name, "GET", user)
    query = _scoped_query(table, grant, request, user, require_filter=False)
    rows = db.execute(query.to_select()).mappings().all()
    return jsonable_encoder([dict(row) for row in rows])


@router.post("/{table_name}", status_code=status.HTTP_201_CREATED)
def insert_rows(
    table_name: str,
    payload: Union[dict, list] = Body(...),
    db: Session = Depends(get_db),
    user: AuthUser = Depends(require_user),
):
    """Accepts one object or an array of objects; answers in the same shape."""
    table, grant = _resolve_table(table_name, "POST", user)
    items = payload if isinstance(payload, list) else [payload]
    if not items:
        raise FilterError("Aucune ligne à insérer")

    inserted = []
    for item in items:
        values = _row_values(table, item, grant, user)
        row = db.execute(insert(table).values(**values).returning(*table.c)).mappings().one()
        inserted.append(dict(row))
    db.commit()
    logger.info(f"{len(inserted)} row(s) inserted into {table_name} by {user.id}")

    result = inserted if isinstance(payload, list) else inserted[0]
    return jsonable_encoder(result)


@router.patch("/{table_name}")
def update_rows(
    table_name: str,
    request: Request,
    payload: dict = Body(...),
    db: Session = Depends(get_db),
    user: AuthUser = Depends(require_user),
):
    """Updates every matching row and returns the first one, or null."""
    table, grant = _resolve_table(table_name, "PATCH", user)
    query = _scoped_query(table, grant, request, user, require_filter=True)
    values = _row_values(table, payload, grant, user)
    if "updated_at" in table.c and "updated_at" not in values:
        values["updated_at"] = func.now()

    rows = db.execute(query.apply_where(update(table)).values(**values).returning(*table.c)).mappings().all()
    db.commit()
    return jsonable_encoder(dict(rows[0]) if rows else None)


@router.delete("/{table_name}")
def delete_rows(
    table_name: str,
    request: Request,
    db: Session = Depends(get_db),
    user: AuthUser = Depends(require_user),
):
    table, grant = _resolve_table(table_name, "DELETE", user)
    query = _scoped_query(table, grant, request, user, require_filter=True)
    result = db.execute(query.apply_where(delete(table)))
    db.commit()
    logger.info(f"{result.rowcount} row(s) deleted from {table_name} by {user.id}")
    return {"success": True}
