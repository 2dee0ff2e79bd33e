"""
FieldCatalog: the allow-list of field names for one entity.

The catalog is the only source of identifiers that reach generated SQL.
Each logical field maps to a :class:`FieldInfo`; references are rendered
from a single lightweight ``TableClause`` whose table and column names are
force-quoted, so the dialect's identifier preparer always quotes them.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from sqlalchemy import Table, column, inspect, table
from sqlalchemy.sql import quoted_name

from .exceptions import FieldValidationError

if TYPE_CHECKING:
    from collections.abc import Collection, Iterable, Iterator, Mapping

    from sqlalchemy import MetaData
    from sqlalchemy.sql.expression import ColumnClause, TableClause


@dataclass(frozen=True)
class FieldInfo:
    """Physical location of one logical field."""

    name: str
    table_name: str


class FieldCatalog:
    """
    Immutable mapping of logical field names to physical columns.

    Build one per entity type, usually through :meth:`from_model`.  Lookups
    are exact and case-sensitive.
    """

    def __init__(
        self,
        table_name: str,
        fields: Mapping[str, str],
        *,
        entity_name: str | None = None,
        metadata: MetaData | None = None,
    ) -> None:
        if not table_name:
            raise ValueError("table_name is required")
        self._table_name = table_name
        self._entity_name = entity_name or table_name
        self._metadata = metadata
        self._fields: Mapping[str, FieldInfo] = MappingProxyType(
            {
                logical: FieldInfo(name=physical, table_name=table_name)
                for logical, physical in fields.items()
            }
        )
        physical_names = dict.fromkeys(fields.values())
        self._table: TableClause = table(
            quoted_name(table_name, True),
            *(column(quoted_name(name, True)) for name in physical_names),
        )

    # -- construction -------------------------------------------------------

    @classmethod
    def from_model(
        cls,
        model: type[Any],
        *,
        include: Collection[str] | None = None,
        exclude: Collection[str] | None = None,
    ) -> FieldCatalog:
        """Catalog every mapped column attribute of a declarative class."""
        mapper = inspect(model)
        local_table = mapper.local_table
        fields: dict[str, str] = {}
        for attr in mapper.column_attrs:
            col = attr.columns[0]
            if getattr(col, "table", None) is not local_table:
                continue
            fields[attr.key] = col.name
        return cls(
            local_table.name,
            _narrow(fields, include, exclude),
            entity_name=model.__name__,
            metadata=getattr(local_table, "metadata", None),
        )

    @classmethod
    def from_table(
        cls,
        source: Table,
        *,
        include: Collection[str] | None = None,
        exclude: Collection[str] | None = None,
    ) -> FieldCatalog:
        """Catalog the columns of a Core ``Table``, keyed by column key."""
        fields = {col.key: col.name for col in source.columns}
        return cls(
            source.name,
            _narrow(fields, include, exclude),
            metadata=source.metadata,
        )

    @classmethod
    def from_mapping(
        cls,
        table_name: str,
        fields: Mapping[str, str] | Iterable[str],
        *,
        entity_name: str | None = None,
    ) -> FieldCatalog:
        """
        Catalog from an explicit field map.

        ``fields`` is either ``{logical_name: column_name}`` or an iterable of
        names used for both.
        """
        if not hasattr(fields, "items"):
            fields = {name: name for name in fields}
        return cls(table_name, dict(fields), entity_name=entity_name)

    def rebind(self, table_name: str) -> FieldCatalog:
        """Same logical fields, located in another table."""
        return FieldCatalog(
            table_name,
            {logical: info.name for logical, info in self._fields.items()},
            entity_name=table_name,
            metadata=self._metadata,
        )

    def catalog_for(self, table_name: str) -> FieldCatalog:
        """
        Catalog for a related table.

        Uses the table definition from the same ``MetaData`` when known,
        otherwise rebinds this catalog's fields to *table_name*.
        """
        if table_name == self._table_name:
            return self
        if self._metadata is not None and table_name in self._metadata.tables:
            return FieldCatalog.from_table(self._metadata.tables[table_name])
        return self.rebind(table_name)

    # -- lookups ------------------------------------------------------------

    @property
    def table_name(self) -> str:
        return self._table_name

    @property
    def entity_name(self) -> str:
        return self._entity_name

    @property
    def table(self) -> TableClause:
        """The FROM element every qualified reference is bound to."""
        return self._table

    @property
    def field_names(self) -> list[str]:
        return list(self._fields)

    def resolve(self, name: str, *, clause: str | None = None) -> FieldInfo:
        """
        Return the :class:`FieldInfo` for *name*.

        Raises:
            FieldValidationError: If *name* is not an allowed field.
        """
        info = self._fields.get(name)
        if info is None:
            raise FieldValidationError(
                name, self._entity_name, self._fields.keys(), clause=clause
            )
        return info

    def qualified(self, name: str, *, clause: str | None = None) -> ColumnClause[Any]:
        """Table-prefixed, quoted column reference for filters/sorts/groups."""
        info = self.resolve(name, clause=clause)
        return self._table.c[info.name]

    def unqualified(self, name: str, *, clause: str | None = None) -> str:
        """Bare column name, used as the default aggregate label."""
        return self.resolve(name, clause=clause).name

    def columns(self) -> list[ColumnClause[Any]]:
        """Default projection: every catalogued column."""
        return list(self._table.c)

    def __contains__(self, name: object) -> bool:
        return name in self._fields

    def __iter__(self) -> Iterator[str]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def __repr__(self) -> str:
        return f"FieldCatalog({self._table_name!r}, fields={list(self._fields)!r})"


def _narrow(
    fields: dict[str, str],
    include: Collection[str] | None,
    exclude: Collection[str] | None,
) -> dict[str, str]:
    if include is not None:
        unknown = set(include) - fields.keys()
        if unknown:
            raise ValueError(f"Cannot include unknown fields: {sorted(unknown)}")
        fields = {k: v for k, v in fields.items() if k in include}
    if exclude:
        fields = {k: v for k, v in fields.items() if k not in exclude}
    return fields
