"""
Expression tree primitives for query predicates.
"""

from __future__ import annotations

from typing import Any, List


AND = "AND"
OR = "OR"


class Q:
    """
    Boolean predicate container: keyword lookups joined by AND, combinable
    with ``&``, ``|`` and ``~``.
    """

    def __init__(self, *children: Any, **lookups: Any) -> None:
        self.children: List[Any] = list(children)
        self.children.extend(lookups.items())
        self.connector = AND
        self.negated = False

    def __repr__(self) -> str:
        prefix = "NOT " if self.negated else ""
        return f"<Q {prefix}{self.connector}: {self.children!r}>"

    def __or__(self, other: "Q") -> "Q":
        return self._combine(other, OR)

    def __and__(self, other: "Q") -> "Q":
        return self._combine(other, AND)

    def __invert__(self) -> "Q":
        q = self._clone()
        q.negated = not q.negated
        return q

    def _clone(self) -> "Q":
        clone = Q()
        clone.children = list(self.children)
        clone.connector = self.connector
        clone.negated = self.negated
        return clone

    def _combine(self, other: "Q", connector: str) -> "Q":
        if self.is_empty():
            return other._clone()
        if other.is_empty():
            return self._clone()
        q = Q(self._clone(), other._clone())
        q.connector = connector
        return q

    def is_empty(self) -> bool:
        return not self.children
