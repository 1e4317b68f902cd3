"""
QuerySet implementation providing a chainable query API.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Iterator, List, Optional, Tuple

from ..dialects.sqlite import SQLiteDialect
from .compiler import SQLCompiler
from .expressions import Q

if TYPE_CHECKING:
    from ..core.model import Model
    from ..persistence.session import Session


class QuerySet:
    """
    Lazy, immutable query over one model's table. Execution requires a bound
    :class:`~rowguard.persistence.Session`.
    """

    def __init__(
        self,
        model: type["Model"],
        *,
        session: "Session | None" = None,
        where: Optional[Q] = None,
        ordering: Tuple[str, ...] = (),
        limit: Optional[int] = None,
    ) -> None:
        self.model = model
        self._session = session
        self._where = where or Q()
        self._ordering = ordering
        self._limit = limit

    @property
    def dialect(self):
        if self._session is not None:
            return self._session.dialect
        return SQLiteDialect()

    # Public API --------------------------------------------------------
    def filter(self, **lookups: Any) -> "QuerySet":
        return self._clone(where=self._where & Q(**lookups))

    def exclude(self, **lookups: Any) -> "QuerySet":
        return self._clone(where=self._where & ~Q(**lookups))

    def where(self, q_object: Q) -> "QuerySet":
        return self._clone(where=self._where & q_object)

    def order_by(self, *fields: str) -> "QuerySet":
        return self._clone(ordering=tuple(fields))

    def limit(self, value: int) -> "QuerySet":
        return self._clone(limit=value)

    def using(self, session: "Session | None") -> "QuerySet":
        return self._clone(session=session)

    def to_sql(self) -> tuple[str, list[Any]]:
        return self._compiler().compile()

    def count_sql(self) -> tuple[str, list[Any]]:
        return self._compiler().compile_count()

    def count(self) -> int:
        sql, params = self.count_sql()
        row = self._require_session().execute(sql, params).fetchone()
        return int(row[0])

    def exists(self) -> bool:
        return self.count() > 0

    def first(self) -> "Model | None":
        for instance in self.limit(1):
            return instance
        return None

    def __iter__(self) -> Iterator["Model"]:
        session = self._require_session()
        sql, params = self.to_sql()
        cursor = session.execute(sql, params)
        instances: List["Model"] = [
            session._materialize(self.model, dict(row)) for row in cursor.fetchall()
        ]
        return iter(instances)

    # Internal helpers --------------------------------------------------
    def _compiler(self) -> SQLCompiler:
        return SQLCompiler(
            model=self.model,
            dialect=self.dialect,
            where=self._where,
            ordering=self._ordering,
            limit=self._limit,
        )

    def _require_session(self) -> "Session":
        if self._session is None:
            raise RuntimeError(
                f"Query on '{self.model.__name__}' requires a bound Session. "
                "Use Session.query(model), Session.new(model) or Model.objects.using(session)."
            )
        return self._session

    def _clone(self, **overrides: Any) -> "QuerySet":
        return QuerySet(
            self.model,
            session=overrides.get("session", self._session),
            where=overrides.get("where", self._where),
            ordering=overrides.get("ordering", self._ordering),
            limit=overrides.get("limit", self._limit),
        )


class QueryManager:
    """
    Default manager for models providing QuerySet access.
    """

    def __init__(self, model: type["Model"]) -> None:
        self.model = model

    def all(self) -> QuerySet:
        return QuerySet(self.model)

    def using(self, session: "Session | None") -> QuerySet:
        return QuerySet(self.model, session=session)

    def filter(self, **lookups: Any) -> QuerySet:
        return self.all().filter(**lookups)

    def exclude(self, **lookups: Any) -> QuerySet:
        return self.all().exclude(**lookups)

    def where(self, q_object: Q) -> QuerySet:
        return self.all().where(q_object)

    def order_by(self, *fields: str) -> QuerySet:
        return self.all().order_by(*fields)
