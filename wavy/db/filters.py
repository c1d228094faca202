"""
Query-string filters for the generic ``/api/db/{table}`` endpoint.

The frontend query builder mimics the hosted-backend client it replaced and
encodes every filter as ``column=<op>.<value>``::

    /api/db/jobs?status=eq.published&featured=eq.true&order=created_at:desc&limit=10
    /api/db/cra_reports?month=in.(2024-01,2024-02)&user_id=eq.<uuid>

Supported operators are ``eq``, ``neq``, ``gt``, ``gte``, ``lt``, ``lte`` and
``in``. ``select``, ``order``, ``limit`` and ``offset`` are reserved; any other
key whose value does not start with a known operator is ignored.

Every value becomes a bound parameter; only column names, validated against the
table, ever reach the SQL text.
"""

import re
import uuid
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any
from urllib.parse import unquote

from sqlalchemy import Column, Table, select
from sqlalchemy.sql import ColumnElement, Select

from ..errors import FilterError

RESERVED_KEYS = {"select", "order", "limit", "offset"}

_COLUMN_SANITIZER = re.compile(r"[^a-zA-Z0-9_]")
_OPERATOR_PATTERN = re.compile(r"^(eq|neq|gt|gte|lt|lte)\.(.+)$", re.DOTALL)
_IN_PATTERN = re.compile(r"^in\.\((.+)\)$", re.DOTALL)
_ORDER_PATTERN = re.compile(r"^([a-zA-Z0-9_]+):(asc|desc)$", re.IGNORECASE)

_TRUE_VALUES = {"true", "t", "1", "yes"}
_FALSE_VALUES = {"false", "f", "0", "no"}


def sanitize_column(name: str) -> str:
    return _COLUMN_SANITIZER.sub("", name)


def get_column(table: Table, name: str) -> Column:
    column_name = sanitize_column(name)
    if not column_name or column_name not in table.c:
        raise FilterError(f"Colonne inconnue : {name}")
    return table.c[column_name]


def coerce_value(column: Column, raw: Any) -> Any:
    """
    Convert a raw value (query string or JSON body) to the column's Python type.

    Non-string values are passed through unchanged; JSON already typed them.
    """
    if not isinstance(raw, str):
        return raw

    try:
        python_type = column.type.python_type
    except NotImplementedError:
        return raw

    try:
        if python_type is bool:
            lowered = raw.strip().lower()
            if lowered in _TRUE_VALUES:
                return True
            if lowered in _FALSE_VALUES:
                return False
            raise ValueError(raw)
        if python_type is uuid.UUID:
            return uuid.UUID(raw)
        if python_type is int:
            return int(raw)
        if python_type is float:
            return float(raw)
        if python_type is Decimal:
            return Decimal(raw)
        if python_type is datetime:
            return datetime.fromisoformat(raw.replace("Z", "+00:00"))
        if python_type is date:
            return date.fromisoformat(raw[:10])
    except (ValueError, InvalidOperation):
        raise FilterError(f"Valeur invalide pour la colonne {column.name} : {raw}")
    return raw


def _pairs(query: Mapping[str, Any] | Iterable[tuple[str, Any]]) -> list[tuple[str, Any]]:
    if hasattr(query, "multi_items"):
        return list(query.multi_items())
    if isinstance(query, Mapping):
        return list(query.items())
    return list(query)


def _condition(column: Column, operator: str, raw: str) -> ColumnElement:
    value = coerce_value(column, unquote(raw))
    if operator == "eq":
        return column == value
    if operator == "neq":
        return column != value
    if operator == "gt":
        return column > value
    if operator == "gte":
        return column >= value
    if operator == "lt":
        return column < value
    return column <= value


def parse_filters(table: Table, query) -> list[ColumnElement]:
    """Translate ``col=<op>.<value>`` pairs into SQLAlchemy conditions, ANDed by the caller."""
    conditions = []
    for key, raw_value in _pairs(query):
        if key in RESERVED_KEYS:
            continue
        value = str(raw_value)

        in_match = _IN_PATTERN.match(value)
        if in_match:
            column = get_column(table, key)
            values = [coerce_value(column, unquote(v.strip())) for v in in_match.group(1).split(",")]
            conditions.append(column.in_(values))
            continue

        op_match = _OPERATOR_PATTERN.match(value)
        if op_match:
            column = get_column(table, key)
            conditions.append(_condition(column, op_match.group(1), op_match.group(2)))

    return conditions


def _parse_non_negative_int(name: str, raw: str | None) -> int | None:
    if raw is None or raw == "":
        return None
    try:
        value = int(raw)
    except ValueError:
        raise FilterError(f"Paramètre {name} invalide : {raw}")
    if value < 0:
        raise FilterError(f"Paramètre {name} invalide : {raw}")
    return value


def parse_order(table: Table, raw: str | None) -> list[ColumnElement]:
    if not raw:
        return []
    order_by = []
    for part in raw.split(","):
        match = _ORDER_PATTERN.match(part.strip())
        if not match:
            raise FilterError(f"Tri invalide : {part}")
        column = get_column(table, match.group(1))
        order_by.append(column.desc() if match.group(2).lower() == "desc" else column.asc())
    return order_by


def parse_select(table: Table, raw: str | None) -> list[Column]:
    """
    Column projection. Embedded relations (``*, jobs(title)``) are not
    supported, so any ``*`` or embedded resource falls back to all columns.
    """
    if not raw:
        return list(table.c)
    names = [part.strip() for part in raw.split(",") if part.strip()]
    if not names or any(name == "*" or "(" in name for name in names):
        return list(table.c)
    return [get_column(table, name) for name in names]


@dataclass
class TableQuery:
    table: Table
    conditions: list[ColumnElement] = field(default_factory=list)
    order_by: list[ColumnElement] = field(default_factory=list)
    limit: int | None = None
    offset: int | None = None
    columns: list[Column] = field(default_factory=list)

    @property
    def has_filters(self) -> bool:
        return bool(self.conditions)

    def add_condition(self, condition: ColumnElement) -> None:
        self.conditions.append(condition)

    def apply_where(self, stmt):
        if self.conditions:
            stmt = stmt.where(*self.conditions)
        return stmt

    def to_select(self) -> Select:
        stmt = self.apply_where(select(*(self.columns or list(self.table.c))))
        if self.order_by:
            stmt = stmt.order_by(*self.order_by)
        if self.limit is not None:
            stmt = stmt.limit(self.limit)
        if self.offset is not None:
            stmt = stmt.offset(self.offset)
        return stmt


def build_query(table: Table, query) -> TableQuery:
    """Parse the whole query string for ``table`` into a :class:`TableQuery`."""
    params = dict(_pairs(query))
    return TableQuery(
        table=table,
        conditions=parse_filters(table, query),
        order_by=parse_order(table, params.get("order")),
        limit=_parse_non_negative_int("limit", params.get("limit")),
        offset=_parse_non_negative_int("offset", params.get("offset")),
        columns=parse_select(table, params.get("select")),
    )
