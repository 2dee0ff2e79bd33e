"""
Statement introspection helpers.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sqlalchemy.sql.expression import Alias, Subquery, TableClause
from sqlalchemy.sql.selectable import Join

if TYPE_CHECKING:
    from sqlalchemy import Select


def extract_tables_from_statement(stmt: Select[Any]) -> list[str]:
    """
    Names of the tables and derived tables in the FROM clause of a statement
    (including joins), in rendering order.
    """
    names: list[str] = []
    for from_obj in stmt.get_final_froms():
        _extract_tables_recursive(from_obj, names)
    return names


def _extract_tables_recursive(from_obj: Any, names: list[str]) -> None:
    """Recursively collect names from a FROM object (table, alias, join or subquery)."""
    if isinstance(from_obj, Join):
        _extract_tables_recursive(from_obj.left, names)
        _extract_tables_recursive(from_obj.right, names)
    elif isinstance(from_obj, (TableClause, Alias, Subquery)):
        name = str(from_obj.name)
        if name not in names:
            names.append(name)
