# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Query specification models.

Plain dataclasses describing what a Strapi query selects, populates, sorts,
filters and paginates. They carry no behavior beyond conversion to and from
the camelCase mappings used by the Strapi REST API; compilation to a query
string lives in :mod:`strapi_query.compiler`.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from ..core._error_codes import VALIDATION_FILTER_VALUE_REQUIRED
from ..core.errors import ValidationError

# Scalar or list value stored on a filter condition
FilterValue = Union[str, int, float, bool, None, List[Union[str, int, float]]]

_DECIMAL_LITERAL = re.compile(r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?\Z")
_INTEGER_LITERAL = re.compile(r"[+-]?[0-9]+\Z")
_RADIX_LITERAL = re.compile(r"0(?:[xX][0-9a-fA-F]+|[oO][0-7]+|[bB][01]+)\Z")


class SortOrder(str, Enum):
    """Sort direction."""

    ASC = "asc"
    DESC = "desc"


class FilterOperator(str, Enum):
    """Strapi v5 filter operators."""

    EQ = "$eq"
    NE = "$ne"
    LT = "$lt"
    LTE = "$lte"
    GT = "$gt"
    GTE = "$gte"
    IN = "$in"
    NOT_IN = "$notIn"
    CONTAINS = "$contains"
    NOT_CONTAINS = "$notContains"
    CONTAINSI = "$containsi"
    NOT_CONTAINSI = "$notContainsi"
    NULL = "$null"
    NOT_NULL = "$notNull"
    STARTS_WITH = "$startsWith"
    ENDS_WITH = "$endsWith"
    # Accepted and passed through; never offered by the editing session
    BETWEEN = "$between"


class GroupOperator(str, Enum):
    """Boolean combinator of a filter group."""

    AND = "$and"
    OR = "$or"


NULL_OPERATORS = frozenset({FilterOperator.NULL.value, FilterOperator.NOT_NULL.value})
LIST_OPERATORS = frozenset({FilterOperator.IN.value, FilterOperator.NOT_IN.value})

# Operators offered for interactive editing, with display labels
OPERATOR_LABELS: Dict[FilterOperator, str] = {
    FilterOperator.EQ: "Equals",
    FilterOperator.NE: "Not Equals",
    FilterOperator.LT: "Less Than",
    FilterOperator.LTE: "Less Than or Equal",
    FilterOperator.GT: "Greater Than",
    FilterOperator.GTE: "Greater Than or Equal",
    FilterOperator.IN: "In Array",
    FilterOperator.NOT_IN: "Not In Array",
    FilterOperator.CONTAINS: "Contains",
    FilterOperator.NOT_CONTAINS: "Not Contains",
    FilterOperator.CONTAINSI: "Contains (case insensitive)",
    FilterOperator.NOT_CONTAINSI: "Not Contains (case insensitive)",
    FilterOperator.NULL: "Is Null",
    FilterOperator.NOT_NULL: "Is Not Null",
    FilterOperator.STARTS_WITH: "Starts With",
    FilterOperator.ENDS_WITH: "Ends With",
}


def token(value: Union[Enum, str]) -> str:
    """Return the wire token of an enum member or a plain string."""
    return value.value if isinstance(value, Enum) else str(value)


def _coerce(enum_cls, value):
    """Return the enum member for ``value`` when there is one, else ``value`` unchanged."""
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        return value


@dataclass
class PopulateField:
    """
    One relation to populate.

    :param field: Relation attribute name.
    :type field: str
    :param fields: Attributes of the related record to return; None or empty returns all.
    :type fields: list[str] | None
    :param populate: Relations of the related record to populate in turn.
    :type populate: list[PopulateField] | None

    Example::

        PopulateField("author", fields=["name"], populate=[PopulateField("avatar")])
    """

    field: str
    fields: Optional[List[str]] = None
    populate: Optional[List["PopulateField"]] = None

    @property
    def has_fields(self) -> bool:
        return bool(self.fields)

    @property
    def has_populate(self) -> bool:
        return bool(self.populate)

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {"field": self.field}
        if self.fields is not None:
            out["fields"] = list(self.fields)
        if self.populate is not None:
            out["populate"] = [child.to_dict() for child in self.populate]
        return out

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PopulateField":
        children = data.get("populate")
        fields = data.get("fields")
        return cls(
            field=data["field"],
            fields=list(fields) if fields is not None else None,
            populate=[cls.from_dict(c) for c in children] if children is not None else None,
        )


@dataclass
class SortOption:
    """A single ``field:direction`` sort entry."""

    field: str
    order: Union[SortOrder, str] = SortOrder.ASC

    def __post_init__(self) -> None:
        self.order = _coerce(SortOrder, self.order)

    def to_dict(self) -> Dict[str, Any]:
        return {"field": self.field, "order": token(self.order)}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SortOption":
        return cls(field=data["field"], order=data.get("order", SortOrder.ASC))


@dataclass
class FilterCondition:
    """Leaf predicate: ``field operator value``."""

    field: str
    operator: Union[FilterOperator, str] = FilterOperator.EQ
    value: FilterValue = None

    def __post_init__(self) -> None:
        self.operator = _coerce(FilterOperator, self.operator)

    def to_dict(self) -> Dict[str, Any]:
        return {"field": self.field, "operator": token(self.operator), "value": self.value}


@dataclass
class FilterGroup:
    """Boolean combination of conditions and nested groups, in order."""

    operator: Union[GroupOperator, str] = GroupOperator.AND
    conditions: List["FilterNode"] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.operator = _coerce(GroupOperator, self.operator)

    def to_dict(self) -> Dict[str, Any]:
        return {"operator": token(self.operator), "conditions": [c.to_dict() for c in self.conditions]}


FilterNode = Union[FilterCondition, FilterGroup]


def filter_from_dict(data: Dict[str, Any]) -> FilterNode:
    """Build a filter node from its mapping form; a mapping with ``operator`` and ``conditions`` is a group."""
    if "operator" in data and "conditions" in data:
        return FilterGroup(
            operator=data["operator"],
            conditions=[filter_from_dict(c) for c in data["conditions"]],
        )
    return FilterCondition(field=data["field"], operator=data["operator"], value=data.get("value"))


@dataclass
class PaginationOptions:
    """
    Page-based (``page``/``page_size``) or offset-based (``start``/``limit``) pagination.

    ``None`` means the key is absent. Any other value, ``0`` included, is sent.
    """

    page: Optional[int] = None
    page_size: Optional[int] = None
    start: Optional[int] = None
    limit: Optional[int] = None

    def merged(self, **changes: Optional[int]) -> "PaginationOptions":
        values = self.to_kwargs()
        values.update(changes)
        return PaginationOptions(**values)

    def to_kwargs(self) -> Dict[str, Optional[int]]:
        return {"page": self.page, "page_size": self.page_size, "start": self.start, "limit": self.limit}

    def to_dict(self) -> Dict[str, int]:
        out: Dict[str, int] = {}
        if self.page is not None:
            out["page"] = self.page
        if self.page_size is not None:
            out["pageSize"] = self.page_size
        if self.start is not None:
            out["start"] = self.start
        if self.limit is not None:
            out["limit"] = self.limit
        return out

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PaginationOptions":
        return cls(
            page=data.get("page"),
            page_size=data.get("pageSize"),
            start=data.get("start"),
            limit=data.get("limit"),
        )


@dataclass
class QuerySpec:
    """The complete, editable description of one collection query."""

    fields: List[str] = field(default_factory=list)
    populate: List[PopulateField] = field(default_factory=list)
    sort: List[SortOption] = field(default_factory=list)
    filters: Optional[FilterNode] = None
    pagination: Optional[PaginationOptions] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "fields": list(self.fields),
            "populate": [p.to_dict() for p in self.populate],
            "sort": [s.to_dict() for s in self.sort],
            "filters": self.filters.to_dict() if self.filters is not None else None,
            "pagination": self.pagination.to_dict() if self.pagination is not None else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "QuerySpec":
        filters = data.get("filters")
        pagination = data.get("pagination")
        root = filter_from_dict(filters) if filters else None
        return cls(
            fields=list(data.get("fields") or []),
            populate=[PopulateField.from_dict(p) for p in data.get("populate") or []],
            sort=[SortOption.from_dict(s) for s in data.get("sort") or []],
            filters=root,
            pagination=PaginationOptions.from_dict(pagination) if pagination is not None else None,
        )


def _parse_number(raw: str) -> Optional[Union[int, float]]:
    # Same grammar as JavaScript Number(): no digit separators, and blank text is 0.
    text = raw.strip()
    if not text:
        return 0
    if _RADIX_LITERAL.match(text):
        return int(text, 0)
    if not _DECIMAL_LITERAL.match(text):
        return None
    if _INTEGER_LITERAL.match(text):
        return int(text)
    number = float(text)
    # overflow to inf is not a JSON number
    if number in (float("inf"), float("-inf")):
        return None
    return int(number) if number.is_integer() else number


def parse_filter_value(operator: Union[FilterOperator, str], raw: str) -> FilterValue:
    """
    Convert text typed by a user into the value stored on a condition.

    - ``$null`` / ``$notNull``: ``None``
    - ``$in`` / ``$notIn``: comma-separated list, items stripped
    - numeric text (JavaScript number syntax, including ``0x``/``0o``/``0b``
      prefixes; blank text is ``0``): ``int`` or ``float``
    - ``"true"`` / ``"false"``: ``bool``
    - anything else: the text itself

    :raises ~strapi_query.core.errors.ValidationError: If the operator needs a value and ``raw`` is empty.
    """
    op = token(operator)
    if op in NULL_OPERATORS:
        return None
    if not raw:
        raise ValidationError(f"A value is required for operator {op}.", subcode=VALIDATION_FILTER_VALUE_REQUIRED)
    if op in LIST_OPERATORS:
        return [v.strip() for v in raw.split(",")]
    number = _parse_number(raw.strip())
    if number is not None:
        return number
    if raw in ("true", "false"):
        return raw == "true"
    return raw


__all__ = [
    "SortOrder",
    "FilterOperator",
    "GroupOperator",
    "OPERATOR_LABELS",
    "PopulateField",
    "SortOption",
    "FilterCondition",
    "FilterGroup",
    "FilterNode",
    "FilterValue",
    "PaginationOptions",
    "QuerySpec",
    "filter_from_dict",
    "parse_filter_value",
    "token",
]
