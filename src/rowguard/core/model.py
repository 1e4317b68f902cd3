"""
Model base classes and metadata orchestration for rowguard.
"""

from __future__ import annotations

import re
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, Iterable, Iterator, Optional, Type

from ..query.queryset import QueryManager, QuerySet
from ..utils import get_logger
from ..validation.errors import ValidationError
from ..validation.mixin import ValidationMixin
from .fields import AutoField, Field

if TYPE_CHECKING:
    from ..persistence.session import Session


logger = get_logger("core.model")

_FIRST_CAP_RE = re.compile("(.)([A-Z][a-z]+)")
_ALL_CAP_RE = re.compile("([a-z0-9])([A-Z])")


def camel_to_snake(name: str) -> str:
    step1 = _FIRST_CAP_RE.sub(r"\1_\2", name)
    return _ALL_CAP_RE.sub(r"\1_\2", step1).lower()


class ModelConfigurationError(Exception):
    """Raised when a model class is misconfigured."""


@dataclass
class ModelOptions:
    """
    Container for model metadata calculated by :class:`ModelMeta`.
    """

    model: Type["Model"]
    table_name: str = ""
    abstract: bool = False
    fields: "OrderedDict[str, Field]" = field(default_factory=OrderedDict)
    primary_key: Optional[Field] = None

    def add_field(self, field_obj: Field) -> None:
        if field_obj.name in self.fields:
            raise ModelConfigurationError(
                f"Duplicate field name '{field_obj.name}' on model '{self.model.__name__}'"
            )
        self.fields[field_obj.name] = field_obj
        if field_obj.primary_key:
            if self.primary_key and self.primary_key is not field_obj:
                raise ModelConfigurationError(
                    f"Multiple primary keys defined on model '{self.model.__name__}'"
                )
            self.primary_key = field_obj

    def get_field(self, name: str) -> Field:
        try:
            return self.fields[name]
        except KeyError as exc:
            raise KeyError(f"Unknown field '{name}' on model '{self.model.__name__}'") from exc

    def find_field(self, name: str) -> Optional[Field]:
        return self.fields.get(name)

    def get_fields(self) -> Iterable[Field]:
        return self.fields.values()


class ModelMeta(type):
    """
    Metaclass responsible for collecting fields and establishing metadata.
    """

    def __new__(mcls, name: str, bases: tuple[type, ...], attrs: Dict[str, Any]) -> "ModelMeta":
        # Allow creation of the base Model class without processing fields.
        if not any(isinstance(base, ModelMeta) for base in bases):
            return super().__new__(mcls, name, bases, attrs)

        declared_fields: Dict[str, Field] = {}
        for attr_name, value in list(attrs.items()):
            if isinstance(value, Field):
                declared_fields[attr_name] = attrs.pop(attr_name)

        cls = super().__new__(mcls, name, bases, attrs)

        meta = getattr(cls, "Meta", None)
        table_name = camel_to_snake(name)
        abstract = False
        if meta:
            table_name = getattr(meta, "table", table_name)
            abstract = getattr(meta, "abstract", False)

        cls._meta = ModelOptions(model=cls, table_name=table_name, abstract=abstract)

        sorted_fields = sorted(declared_fields.items(), key=lambda item: item[1].creation_counter)
        for attr_name, field_obj in sorted_fields:
            field_obj.contribute_to_class(cls, attr_name)
            cls._meta.add_field(field_obj)

        if not cls._meta.primary_key and not cls._meta.abstract:
            if "id" in cls._meta.fields:
                raise ModelConfigurationError(
                    f"Model '{cls.__name__}' defines a field named 'id' but no primary key. "
                    "Either set primary_key=True on that field or define a different name."
                )
            auto_field = AutoField()
            auto_field.contribute_to_class(cls, "id")
            cls._meta.add_field(auto_field)
            cls._meta.fields = OrderedDict(
                sorted(
                    cls._meta.fields.items(),
                    key=lambda item: (0 if item[0] == "id" else 1, item[1].creation_counter),
                )
            )

        if "objects" not in cls.__dict__:
            cls.objects = QueryManager(cls)

        return cls


class Model(ValidationMixin, metaclass=ModelMeta):
    """
    Base model providing data container functionality and column validation.
    Persistence operations are supplied by :class:`~rowguard.persistence.Session`.
    """

    _meta: ModelOptions
    objects: QueryManager

    def __init__(self, **kwargs: Any) -> None:
        self._field_values: Dict[str, Any] = {}
        self._initial_state: Dict[str, Any] = {}
        self._session: "Session | None" = None
        self._in_storage = False

        unknown = set(kwargs) - set(self._meta.fields)
        if unknown:
            raise TypeError(
                f"{self.__class__.__name__} got unexpected field(s): {', '.join(sorted(unknown))}"
            )

        for field_obj in self._meta.get_fields():
            if field_obj.name in kwargs:
                setattr(self, field_obj.name, kwargs[field_obj.name])
            elif field_obj.has_default:
                default_value = field_obj.get_default()
                if default_value is not None:
                    setattr(self, field_obj.name, default_value)

        # Retain snapshot for simple dirty tracking
        self._initial_state = dict(self._field_values)

    def __repr__(self) -> str:
        field_parts = ", ".join(
            f"{name}={value!r}" for name, value in self._field_values.items()
        )
        return f"<{self.__class__.__name__} {field_parts}>"

    @property
    def pk(self) -> Any:
        if not self._meta.primary_key:
            raise ModelConfigurationError(
                f"Model '{self.__class__.__name__}' does not define a primary key."
            )
        return getattr(self, self._meta.primary_key.require_name())

    @property
    def in_storage(self) -> bool:
        """True once the record has been inserted into or loaded from the store."""
        return self._in_storage

    @property
    def session(self) -> "Session | None":
        return self._session

    def to_dict(self) -> Dict[str, Any]:
        return {name: getattr(self, name) for name in self.columns()}

    def is_dirty(self) -> bool:
        return any(
            self._field_values.get(name) != self._initial_state.get(name)
            for name in self._field_values
        )

    # Column metadata -------------------------------------------------
    @classmethod
    def columns(cls) -> Iterator[str]:
        return iter(list(cls._meta.fields))

    @classmethod
    def primary_columns(cls) -> list[str]:
        if cls._meta.primary_key is None:
            return []
        return [cls._meta.primary_key.require_name()]

    @classmethod
    def column_info(cls, name: str) -> Optional[Field]:
        found = cls._meta.find_field(name)
        if found is None:
            logger.warning("bad column name: %s", name)
        return found

    @classmethod
    def has_field(cls, name: str) -> bool:
        return name in cls._meta.fields

    def query(self) -> QuerySet:
        """QuerySet over this record's table, bound to the record's session."""
        return type(self).objects.using(self._session)

    # Validation --------------------------------------------------------
    def full_clean(self) -> None:
        errors = dict(self.validate_object() or {})

        try:
            self.clean()
        except ValidationError as exc:
            for column, message in exc.errors.items():
                errors.setdefault(column, message)

        if errors:
            raise ValidationError(errors)

    def clean(self) -> None:
        """
        Hook for subclasses to implement model-level validation.
        """
        return None
