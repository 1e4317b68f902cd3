"""
SQLite dialect implementation.
"""

from __future__ import annotations

from typing import Final


class SQLiteDialect:
    """
    SQLite dialect using the qmark parameter style.
    """

    name: Final[str] = "sqlite"

    def quote_identifier(self, identifier: str) -> str:
        escaped = identifier.replace('"', '""')
        return f'"{escaped}"'

    def format_table(self, table_name: str) -> str:
        return self.quote_identifier(table_name)

    def parameter_placeholder(self) -> str:
        return "?"

    def render_column_definition(
        self, column: str, column_type: str, *, nullable: bool, primary_key: bool = False
    ) -> str:
        # SQLite only aliases ROWID for the exact "INTEGER PRIMARY KEY" form.
        if primary_key:
            return f"{self.quote_identifier(column)} {column_type} PRIMARY KEY"
        null_clause = "" if nullable else " NOT NULL"
        return f"{self.quote_identifier(column)} {column_type}{null_clause}"
