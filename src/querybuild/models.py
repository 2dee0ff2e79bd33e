"""
Request models: the wire representation of a query.

A ``FilterRequest`` collects filters, sorts, groups, aggregations, joins,
an optional sub-query and pagination.  Field names used inside it are the
*logical* entity field names; the compiler maps them to columns.

The models are plain pydantic models so a request can be parsed straight
from JSON::

    req = FilterRequest.model_validate_json(body)

Multi-valued operands (``IN``, ``NOT_IN``, ``BETWEEN``) are encoded as one
comma-joined string, so a single operand cannot itself contain a comma.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .operators import AggregationOp, Operator, coerce_enum


class _RequestModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class Filter(_RequestModel):
    field: str
    op: Operator = Operator.EQ
    value: str = ""
    nocase: bool = False

    @field_validator("op", mode="before")
    @classmethod
    def _coerce_op(cls, v: Any) -> Any:
        return coerce_enum(Operator, v)


class Sort(_RequestModel):
    field: str = ""
    desc: bool = False
    nocase: bool = False
    scope: str = ""


class Group(_RequestModel):
    field: str = ""
    having: str = ""
    scope: str = ""


class Aggregation(_RequestModel):
    field: str
    op: AggregationOp
    nocase: bool = False
    alias: str = ""
    add_selects: list[str] = Field(default_factory=list)

    @field_validator("op", mode="before")
    @classmethod
    def _coerce_op(cls, v: Any) -> Any:
        return coerce_enum(AggregationOp, v)


class Join(_RequestModel):
    """
    A join against a raw table name with a raw ``ON`` condition.

    ``kind`` is serialised as ``type`` (LEFT, RIGHT, INNER or FULL).
    The condition text is inserted verbatim; it must come from a trusted
    source.
    """

    kind: str = Field(default="", alias="type")
    table: str = ""
    condition: str = ""
    scope: str = ""


class Pagination(_RequestModel):
    page: int = Field(default=1, ge=1)
    page_size: int = Field(default=20, ge=1)
    total: int = 0


class CustomField(_RequestModel):
    name: str = ""
    scope: str


class CustomFilter(_RequestModel):
    scope: str = ""
    values: list[Any] = Field(default_factory=list)


class SubQuery(_RequestModel):
    """A nested request joined to the parent as a derived table."""

    field: str
    table: str
    filter: FilterRequest = Field(default_factory=lambda: FilterRequest())
    join_cond: str = ""


class FilterRequest(_RequestModel):
    filters: list[Filter] = Field(default_factory=list)
    custom_fields: list[CustomField] = Field(default_factory=list)
    custom_filter: CustomFilter | None = None
    sorts: list[Sort] = Field(default_factory=list)
    aggrs: list[Aggregation] = Field(default_factory=list)
    page: Pagination | None = None
    groups: list[Group] = Field(default_factory=list)
    joins: list[Join] = Field(default_factory=list)
    sub_query: SubQuery | None = None
    distinct: bool = False


SubQuery.model_rebuild()

__all__: list[str] = [
    "Aggregation",
    "CustomField",
    "CustomFilter",
    "Filter",
    "FilterRequest",
    "Group",
    "Join",
    "Pagination",
    "SubQuery",
]
