"""
Row Store Protocol.

Defines the narrow read/insert/update/delete interface the domain
modules depend on. SupabaseRowStore implements it over the
PostgREST query builder; tests use an in-memory fake.

Filters are combined with AND. Only the predicates the domain needs
are supported: equality, date ranges, "in set" and "not null".
"""

from typing import Any, Literal, Protocol, runtime_checkable

from pydantic import BaseModel


class Filter(BaseModel):
    """A single filter condition for queries."""

    field: str
    op: Literal["=", ">=", "<=", "in", "not_null"]
    value: Any = None


def eq(field: str, value: Any) -> Filter:
    return Filter(field=field, op="=", value=value)


def gte(field: str, value: Any) -> Filter:
    return Filter(field=field, op=">=", value=value)


def lte(field: str, value: Any) -> Filter:
    return Filter(field=field, op="<=", value=value)


def in_(field: str, values: list[Any]) -> Filter:
    return Filter(field=field, op="in", value=list(values))


def not_null(field: str) -> Filter:
    return Filter(field=field, op="not_null")


# (column, descending)
OrderBy = list[tuple[str, bool]]


@runtime_checkable
class RowStore(Protocol):
    """
    Abstract row access.

    Every method is a single blocking round trip and raises on failure.
    """

    def select(
        self,
        table: str,
        filters: list[Filter],
        columns: list[str] | None = None,
        order: OrderBy | None = None,
    ) -> list[dict]:
        """Return rows matching all filters."""
        ...

    def insert(self, table: str, rows: list[dict]) -> list[dict]:
        """Batch insert. Returns the inserted rows."""
        ...

    def update(self, table: str, filters: list[Filter], data: dict) -> list[dict]:
        """Update rows matching all filters. Returns the updated rows."""
        ...

    def delete(self, table: str, filters: list[Filter]) -> int:
        """Delete rows matching all filters. Returns the deleted count."""
        ...


# =============================================================================
# Supabase implementation
# =============================================================================


def apply_filter(query: Any, f: Filter) -> Any:
    """Apply a single filter clause to a Supabase query."""
    match f.op:
        case "=":
            return query.eq(f.field, f.value)
        case ">=":
            return query.gte(f.field, f.value)
        case "<=":
            return query.lte(f.field, f.value)
        case "in":
            return query.in_(f.field, f.value)
        case "not_null":
            return query.not_.is_(f.field, "null")
    return query


class SupabaseRowStore:
    """RowStore backed by a supabase-py client."""

    def __init__(self, client: Any):
        self.client = client

    def select(
        self,
        table: str,
        filters: list[Filter],
        columns: list[str] | None = None,
        order: OrderBy | None = None,
    ) -> list[dict]:
        select_clause = ",".join(columns) if columns else "*"
        query = self.client.table(table).select(select_clause)

        for f in filters:
            query = apply_filter(query, f)

        for column, desc in order or []:
            query = query.order(column, desc=desc)

        result = query.execute()
        return result.data or []

    def insert(self, table: str, rows: list[dict]) -> list[dict]:
        if not rows:
            return []
        result = self.client.table(table).insert(rows).execute()
        return result.data or []

    def update(self, table: str, filters: list[Filter], data: dict) -> list[dict]:
        # No accidental full-table updates
        if not filters:
            raise ValueError(f"Refusing to update '{table}' without filters")

        query = self.client.table(table).update(data)
        for f in filters:
            query = apply_filter(query, f)

        result = query.execute()
        return result.data or []

    def delete(self, table: str, filters: list[Filter]) -> int:
        # No accidental full-table deletes
        if not filters:
            raise ValueError(f"Refusing to delete from '{table}' without filters")

        query = self.client.table(table).delete()
        for f in filters:
            query = apply_filter(query, f)

        result = query.execute()
        return len(result.data or [])
