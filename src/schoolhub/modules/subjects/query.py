"""
Subject list query parsing.

Turns ``GET /subjects`` query parameters into SQLAlchemy filter and ordering
clauses:

- ``select=name,school_year``  -> returned fields (``id`` always included)
- ``sort=-created_at,name``    -> ordering, ``-`` prefix for descending
- ``page`` / ``limit``         -> pagination (limit capped at MAX_LIMIT)
- ``field=value``              -> equality filter
- ``field[op]=value``          -> comparison filter, op in gt/gte/lt/lte/in
"""

import re
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from sqlalchemy import ColumnElement

from schoolhub.modules.shared import is_valid_id

from .models import Subject

DEFAULT_LIMIT = 25
MAX_LIMIT = 100
DEFAULT_SORT = "-created_at"

# Parameters consumed by the list endpoint itself, never treated as filters
RESERVED_PARAMS = frozenset({"select", "sort", "page", "limit", "archived", "teacher"})

FILTERABLE_FIELDS: dict[str, str] = {
    "name": "str",
    "description": "str",
    "grade_level": "str",
    "section": "str",
    "school_year": "str",
    "teacher_id": "uuid",
    "created_at": "datetime",
    "updated_at": "datetime",
    "archived_at": "datetime",
}

SELECTABLE_FIELDS = (
    "id",
    "name",
    "description",
    "grade_level",
    "section",
    "school_year",
    "teacher_id",
    "students",
    "student_count",
    "is_archived",
    "archived_at",
    "archived_by",
    "created_at",
    "updated_at",
)

SORTABLE_FIELDS = frozenset(FILTERABLE_FIELDS) | {"is_archived"}

_FILTER_KEY = re.compile(r"^(?P<field>\w+)(?:\[(?P<op>gt|gte|lt|lte|in)\])?$")


class InvalidQueryError(ValueError):
    """Raised for a malformed list query parameter."""


@dataclass
class SubjectQuery:
    """Parsed list parameters."""

    filters: list[ColumnElement[bool]] = field(default_factory=list)
    order_by: list[Any] = field(default_factory=list)
    fields: tuple[str, ...] = SELECTABLE_FIELDS
    page: int = 1
    limit: int = DEFAULT_LIMIT

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def _coerce(field_name: str, raw: str) -> Any:
    kind = FILTERABLE_FIELDS[field_name]
    if kind == "uuid":
        if not is_valid_id(raw):
            raise InvalidQueryError(f"Invalid id for {field_name}: {raw}")
        return raw
    if kind == "datetime":
        try:
            return datetime.fromisoformat(raw.replace("Z", "+00:00"))
        except ValueError as e:
            raise InvalidQueryError(f"Invalid date for {field_name}: {raw}") from e
    return raw


def _positive_int(name: str, raw: str | None, default: int) -> int:
    if raw is None or raw == "":
        return default
    try:
        value = int(raw)
    except ValueError as e:
        raise InvalidQueryError(f"{name} must be a positive integer") from e
    if value < 1:
        raise InvalidQueryError(f"{name} must be a positive integer")
    return value


def parse_fields(raw: str | None) -> tuple[str, ...]:
    if not raw:
        return SELECTABLE_FIELDS
    requested = [name.strip() for name in raw.split(",") if name.strip()]
    unknown = [name for name in requested if name not in SELECTABLE_FIELDS]
    if unknown:
        raise InvalidQueryError(f"Cannot select field(s): {', '.join(unknown)}")
    return ("id", *(name for name in requested if name != "id"))


def parse_sort(raw: str | None) -> list[Any]:
    order_by = []
    for token in (raw or DEFAULT_SORT).split(","):
        token = token.strip()
        if not token:
            continue
        descending = token.startswith("-")
        name = token.lstrip("-")
        if name not in SORTABLE_FIELDS:
            raise InvalidQueryError(f"Cannot sort by field: {name}")
        column = getattr(Subject, name)
        order_by.append(column.desc() if descending else column.asc())
    return order_by


def parse_filter(key: str, raw: str) -> ColumnElement[bool]:
    match = _FILTER_KEY.match(key)
    if not match or match.group("field") not in FILTERABLE_FIELDS:
        raise InvalidQueryError(f"Cannot filter by: {key}")

    name, op = match.group("field"), match.group("op")
    column = getattr(Subject, name)

    if op == "in":
        values = [_coerce(name, part.strip()) for part in raw.split(",") if part.strip()]
        return column.in_(values)

    value = _coerce(name, raw)
    if op == "gt":
        return column > value
    if op == "gte":
        return column >= value
    if op == "lt":
        return column < value
    if op == "lte":
        return column <= value
    return column == value


def parse_subject_query(params: Iterable[tuple[str, str]]) -> SubjectQuery:
    """
    Parse raw query string pairs.

    Args:
        params: ``(key, value)`` pairs, e.g. ``request.query_params.multi_items()``

    Raises:
        InvalidQueryError: For unknown fields, bad operators, or bad numbers
    """
    params = list(params)
    single = dict(params)

    query = SubjectQuery(
        fields=parse_fields(single.get("select")),
        order_by=parse_sort(single.get("sort")),
        page=_positive_int("page", single.get("page"), 1),
        limit=min(_positive_int("limit", single.get("limit"), DEFAULT_LIMIT), MAX_LIMIT),
    )

    for key, value in params:
        if key in RESERVED_PARAMS:
            continue
        query.filters.append(parse_filter(key, value))

    return query
