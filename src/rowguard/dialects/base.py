"""
Dialect strategy interface describing SQL rendering behaviors.
"""

from __future__ import annotations

from typing import Protocol


class Dialect(Protocol):
    """
    Strategy interface consumed by the query, schema and adapter layers.
    """

    @property
    def name(self) -> str: ...

    def quote_identifier(self, identifier: str) -> str: ...

    def format_table(self, table_name: str) -> str: ...

    def parameter_placeholder(self) -> str: ...

    def render_column_definition(
        self, column: str, column_type: str, *, nullable: bool, primary_key: bool = False
    ) -> str: ...
