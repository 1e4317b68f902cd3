"""
SQL compilation utilities translating predicates into SQL strings.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, List, Tuple

from ..dialects.base import Dialect
from .expressions import Q

if TYPE_CHECKING:
    from ..core.model import Model


LOOKUP_OPERATORS = {
    "exact": "=",
    "ne": "<>",
    "iexact": "LIKE",
    "gt": ">",
    "gte": ">=",
    "lt": "<",
    "lte": "<=",
    "contains": "LIKE",
}


class SQLCompiler:
    """
    Compile QuerySet state into SELECT or COUNT statements and parameters.
    """

    def __init__(
        self,
        model: type["Model"],
        dialect: Dialect,
        where: Q | None = None,
        ordering: tuple[str, ...] = (),
        limit: int | None = None,
    ) -> None:
        self.model = model
        self.dialect = dialect
        self.where = where
        self.ordering = ordering
        self.limit = limit

    def compile(self) -> Tuple[str, List[Any]]:
        select_list = ", ".join(
            self.dialect.quote_identifier(field.column_name())
            for field in self.model._meta.get_fields()
        )
        sql_parts, params = self._from_where(f"SELECT {select_list}")

        if self.ordering:
            order_sql = ", ".join(self._compile_ordering(name) for name in self.ordering)
            sql_parts.append(f"ORDER BY {order_sql}")
        if self.limit is not None:
            sql_parts.append(f"LIMIT {int(self.limit)}")

        return " ".join(sql_parts), params

    def compile_count(self) -> Tuple[str, List[Any]]:
        sql_parts, params = self._from_where("SELECT COUNT(*)")
        return " ".join(sql_parts), params

    # Helpers -----------------------------------------------------------
    def _from_where(self, head: str) -> Tuple[List[str], List[Any]]:
        sql_parts = [head, "FROM", self.dialect.format_table(self.model._meta.table_name)]
        params: List[Any] = []
        if self.where is not None and not self.where.is_empty():
            where_sql, where_params = self._compile_q(self.where)
            if where_sql:
                sql_parts.append(f"WHERE {where_sql}")
                params.extend(where_params)
        return sql_parts, params

    def _compile_ordering(self, field_name: str) -> str:
        descending = field_name.startswith("-")
        name = field_name[1:] if descending else field_name
        field = self.model._meta.get_field(name)
        clause = self.dialect.quote_identifier(field.column_name())
        if descending:
            clause += " DESC"
        return clause

    def _compile_q(self, q: Q) -> Tuple[str, List[Any]]:
        parts: List[str] = []
        params: List[Any] = []

        for child in q.children:
            if isinstance(child, Q):
                child_sql, child_params = self._compile_q(child)
                if child_sql:
                    parts.append(f"({child_sql})")
                    params.extend(child_params)
            else:
                field_lookup, value = child
                sql, child_params = self._compile_lookup(field_lookup, value)
                parts.append(sql)
                params.extend(child_params)

        if not parts:
            return "", []

        sql = f" {q.connector} ".join(parts)
        if q.negated:
            sql = f"NOT ({sql})"
        return sql, params

    def _compile_lookup(self, field_lookup: str, value: Any) -> Tuple[str, List[Any]]:
        if "__" in field_lookup:
            field_name, lookup = field_lookup.split("__", 1)
        else:
            field_name, lookup = field_lookup, "exact"

        field = self.model._meta.get_field(field_name)
        column = self.dialect.quote_identifier(field.column_name())

        if value is None:
            if lookup == "exact":
                return f"{column} IS NULL", []
            if lookup == "ne":
                return f"{column} IS NOT NULL", []
            raise ValueError("NULL comparison only supported for equality.")

        operator = LOOKUP_OPERATORS.get(lookup)
        if operator is None:
            raise ValueError(f"Unsupported lookup '{lookup}'")

        if lookup == "contains":
            value = f"%{value}%"
        if lookup == "iexact":
            value = str(value).lower()

        return f"{column} {operator} {self.dialect.parameter_placeholder()}", [value]
