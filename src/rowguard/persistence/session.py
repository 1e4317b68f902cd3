"""
Session coordinating the adapter, pending changes and loaded records.
"""

from __future__ import annotations

from contextlib import contextmanager
from datetime import date, datetime
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple, Type, TypeVar

from ..adapters.base import ConnectionConfig, DatabaseAdapter
from ..adapters.sqlite import SQLiteAdapter
from ..core.fields import AutoField
from ..core.model import Model
from ..dialects.base import Dialect
from ..query.queryset import QuerySet
from ..schema.builder import SchemaBuilder
from ..utils import get_logger, time_call

TModel = TypeVar("TModel", bound=Model)


class Session:
    """
    Coordinates persistence operations for a set of model instances.

    Records are validated with :meth:`Model.full_clean` before they are
    inserted or updated, so a failing record raises
    :class:`~rowguard.validation.ValidationError` from :meth:`flush`.
    """

    def __init__(
        self,
        adapter: Optional[DatabaseAdapter] = None,
        *,
        connection_config: Optional[ConnectionConfig] = None,
        autocommit: Optional[bool] = None,
    ) -> None:
        self.adapter = adapter or SQLiteAdapter()
        self.dialect: Dialect = self.adapter.dialect
        self.connection_config = connection_config or ConnectionConfig(url="sqlite:///:memory:")
        self.autocommit = self.connection_config.autocommit if autocommit is None else autocommit
        self.schema = SchemaBuilder(self.dialect)
        self.logger = get_logger("persistence.session")

        self._identity_map: Dict[Tuple[type, Any], Model] = {}
        self._new: List[Model] = []
        self._dirty: List[Model] = []
        self._deleted: List[Model] = []
        self._inserted_in_transaction: List[Model] = []
        self._in_transaction = False

        self.adapter.connect(self.connection_config)

    # ------------------------------------------------------------------ #
    # Context management
    # ------------------------------------------------------------------ #
    def __enter__(self) -> "Session":
        self.begin()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            if exc_type:
                self.rollback()
            else:
                self.commit()
        finally:
            self.close()

    @contextmanager
    def transaction(self) -> Iterator["Session"]:
        self.begin()
        try:
            yield self
        except Exception:
            self.rollback()
            raise
        else:
            self.commit()

    # ------------------------------------------------------------------ #
    # Transactions
    # ------------------------------------------------------------------ #
    def begin(self) -> None:
        if self._in_transaction:
            return
        self.adapter.begin()
        self._in_transaction = True

    def commit(self) -> None:
        self.begin()
        try:
            self.flush()
        except Exception:
            self.rollback()
            raise
        self.adapter.commit()
        self._in_transaction = False
        self._inserted_in_transaction.clear()

    def rollback(self) -> None:
        if self._in_transaction:
            self.adapter.rollback()
            self._in_transaction = False
        for instance in self._inserted_in_transaction:
            self._forget(instance)
            pk_field = instance._meta.primary_key
            if isinstance(pk_field, AutoField):
                instance._field_values.pop(pk_field.name, None)
            instance._in_storage = False
        self._inserted_in_transaction.clear()
        self._new.clear()
        self._dirty.clear()
        self._deleted.clear()

    def close(self) -> None:
        self.adapter.close()
        self._identity_map.clear()
        self._in_transaction = False

    # ------------------------------------------------------------------ #
    # Registration
    # ------------------------------------------------------------------ #
    def new(self, model: Type[TModel], **values: Any) -> TModel:
        """
        Create a record bound to this session without persisting it.
        """
        instance = model(**values)
        instance._session = self
        return instance

    def add(self, instance: Model) -> None:
        instance._session = self
        if instance.in_storage:
            self.mark_dirty(instance)
        elif instance not in self._new:
            self._new.append(instance)
        if self.autocommit:
            self.commit()

    def mark_dirty(self, instance: Model) -> None:
        if instance not in self._new and instance not in self._dirty:
            self._dirty.append(instance)

    def delete(self, instance: Model) -> None:
        if instance in self._new:
            self._new.remove(instance)
            return
        if instance not in self._deleted:
            self._deleted.append(instance)
        if self.autocommit:
            self.commit()

    def flush(self) -> None:
        for instance in self._identity_map.values():
            if instance.is_dirty():
                self.mark_dirty(instance)

        while self._new:
            self._insert(self._new[0])
            self._new.pop(0)
        while self._dirty:
            self._update(self._dirty[0])
            self._dirty.pop(0)
        while self._deleted:
            self._remove(self._deleted[0])
            self._deleted.pop(0)

    # ------------------------------------------------------------------ #
    # Queries
    # ------------------------------------------------------------------ #
    def query(self, model: Type[TModel]) -> QuerySet:
        return model.objects.using(self)

    def get(self, model: Type[TModel], **filters: Any) -> Optional[TModel]:
        pk_field = model._meta.primary_key
        if pk_field is not None and list(filters) == [pk_field.name]:
            cached = self._identity_map.get((model, filters[pk_field.name]))
            if cached is not None:
                return cached
        return self.query(model).filter(**filters).first()

    def count(self, model: Type[Model], **filters: Any) -> int:
        return self.query(model).filter(**filters).count()

    def execute(self, sql: str, params: Iterable[Any] | None = None):
        param_list = [self._to_db(value) for value in params or ()]
        with time_call("session.execute", self.logger, sql=sql, params=self._redact(param_list), threshold_ms=200):
            return self.adapter.execute(sql, param_list)

    # ------------------------------------------------------------------ #
    # Schema
    # ------------------------------------------------------------------ #
    def create_table(self, model: Type[Model]) -> None:
        self.execute(self.schema.create_table_sql(model))

    def drop_table(self, model: Type[Model]) -> None:
        self.execute(self.schema.drop_table_sql(model))

    # ------------------------------------------------------------------ #
    # Persistence helpers
    # ------------------------------------------------------------------ #
    def _insert(self, instance: Model) -> None:
        instance.full_clean()
        table = self.dialect.format_table(instance._meta.table_name)
        columns = []
        params = []
        for field in instance._meta.get_fields():
            value = getattr(instance, field.name, None)
            if field.primary_key and value is None:
                continue
            columns.append(self.dialect.quote_identifier(field.column_name()))
            params.append(value)

        placeholders = ", ".join(self.dialect.parameter_placeholder() for _ in columns)
        sql = f"INSERT INTO {table} ({', '.join(columns)}) VALUES ({placeholders})"
        cursor = self.execute(sql, params)

        pk_field = instance._meta.primary_key
        if pk_field and getattr(instance, pk_field.name, None) is None:
            pk_value = self.adapter.last_insert_id(cursor, instance._meta.table_name, pk_field.column_name())
            setattr(instance, pk_field.name, pk_value)

        instance._initial_state = dict(instance._field_values)
        instance._in_storage = True
        self._remember(instance)
        self._inserted_in_transaction.append(instance)

    def _update(self, instance: Model) -> None:
        instance.full_clean()
        pk_field = instance._meta.primary_key
        if pk_field is None or instance.pk is None:
            raise ValueError(f"Dirty '{instance.__class__.__name__}' instance lacks a primary key value.")

        set_clauses = []
        params = []
        for field in instance._meta.get_fields():
            if field.primary_key:
                continue
            value = getattr(instance, field.name)
            if value != instance._initial_state.get(field.name):
                set_clauses.append(
                    f"{self.dialect.quote_identifier(field.column_name())} = {self.dialect.parameter_placeholder()}"
                )
                params.append(value)
        if not set_clauses:
            return

        table = self.dialect.format_table(instance._meta.table_name)
        pk_clause = f"{self.dialect.quote_identifier(pk_field.column_name())} = {self.dialect.parameter_placeholder()}"
        params.append(instance.pk)
        self.execute(f"UPDATE {table} SET {', '.join(set_clauses)} WHERE {pk_clause}", params)
        instance._initial_state = dict(instance._field_values)

    def _remove(self, instance: Model) -> None:
        pk_field = instance._meta.primary_key
        if pk_field is None or instance.pk is None:
            return
        table = self.dialect.format_table(instance._meta.table_name)
        pk_clause = f"{self.dialect.quote_identifier(pk_field.column_name())} = {self.dialect.parameter_placeholder()}"
        self.execute(f"DELETE FROM {table} WHERE {pk_clause}", (instance.pk,))
        self._forget(instance)
        instance._in_storage = False

    def _materialize(self, model: Type[TModel], row: Dict[str, Any]) -> TModel:
        columns = {field.column_name(): field for field in model._meta.get_fields()}
        data = {
            columns[key].require_name(): columns[key].from_db(value)
            for key, value in row.items()
            if key in columns
        }
        pk_field = model._meta.primary_key
        if pk_field is not None:
            cached = self._identity_map.get((model, data.get(pk_field.name)))
            if cached is not None:
                return cached
        instance = model(**data)
        instance._initial_state = dict(instance._field_values)
        instance._session = self
        instance._in_storage = True
        self._remember(instance)
        return instance

    def _remember(self, instance: Model) -> None:
        if instance.pk is not None:
            self._identity_map[(instance.__class__, instance.pk)] = instance

    def _forget(self, instance: Model) -> None:
        self._identity_map.pop((instance.__class__, instance.pk), None)

    @staticmethod
    def _to_db(value: Any) -> Any:
        if isinstance(value, (date, datetime)):
            return value.isoformat()
        return value

    @staticmethod
    def _redact(params: Iterable[Any]) -> list[Any]:
        redacted = []
        for value in params:
            if isinstance(value, str) and any(token in value.lower() for token in ("password", "secret", "token")):
                redacted.append("***")
            else:
                redacted.append(value)
        return redacted
