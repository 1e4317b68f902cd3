"""
Field definitions and descriptors for rowguard models.

A field doubles as the column descriptor read by the validation engine: it
carries the declared data type, the optional size limit and the optional
validation rule.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import TYPE_CHECKING, Any, Mapping, Optional, Sequence, Union, cast

from ..validation.rules import ValidationRule

if TYPE_CHECKING:
    from .model import Model


BOUNDED_TEXT_TYPES = frozenset({"varchar", "char"})


class FieldError(Exception):
    """Internal exception for field configuration issues."""


class Field:
    """
    Base class for model field descriptors.

    Fields manage attribute storage on model instances and retain metadata
    required for schema generation and validation.
    """

    _creation_counter = 0

    def __init__(
        self,
        *,
        primary_key: bool = False,
        unique: bool = False,
        nullable: bool = True,
        default: Any = None,
        db_type: Optional[str] = None,
        db_column: Optional[str] = None,
        size: Optional[int] = None,
        choices: Optional[Sequence[Any]] = None,
        validation: Union[ValidationRule, Mapping[str, Any], None] = None,
        help_text: Optional[str] = None,
    ) -> None:
        self.primary_key = primary_key
        self.unique = unique
        self.nullable = nullable
        self.default = default
        self.db_type = db_type
        self.db_column = db_column
        self.size = size
        self.choices = tuple(choices) if choices is not None else None
        self.validation = ValidationRule.coerce(validation)
        self.help_text = help_text

        self.model: type["Model"] | None = None  # Will be set during contribute_to_class
        self.name: str | None = None
        self.creation_counter = Field._creation_counter
        Field._creation_counter += 1

    # Descriptor protocol -------------------------------------------------
    def __get__(self, instance: object | None, owner: type | None = None) -> Any:
        if instance is None:
            return self

        model_instance = cast("Model", instance)
        name = self.require_name()
        value = model_instance._field_values.get(name)
        if value is None and name not in model_instance._field_values:
            default = self.get_default()
            if default is not None:
                model_instance._field_values[name] = default
                return default
        return value

    def __set__(self, instance: object, value: Any) -> None:
        model_instance = cast("Model", instance)
        name = self.require_name()
        if value is None:
            if not self.nullable and not self.primary_key:
                raise ValueError(f"Field '{name}' cannot be None")
            model_instance._field_values[name] = None
            return

        if self.choices and value not in self.choices:
            raise ValueError(f"Value '{value}' for field '{name}' not in choices {self.choices}")

        model_instance._field_values[name] = self.to_python(value)

    # Metadata helpers ----------------------------------------------------
    def contribute_to_class(self, model: type["Model"], name: str) -> None:
        """
        Attach the field to the model class as a descriptor.
        """
        self.model = model
        self.name = name
        if self.db_column is None:
            self.db_column = name
        setattr(model, name, self)

    def require_name(self) -> str:
        if self.name is None:
            raise FieldError("Field name is not set.")
        return self.name

    def column_name(self) -> str:
        if self.db_column:
            return self.db_column
        return self.require_name()

    @property
    def data_type(self) -> str:
        return (self.db_type or "").lower()

    @property
    def is_bounded_text(self) -> bool:
        return self.data_type in BOUNDED_TEXT_TYPES and self.size is not None

    def column_type_sql(self) -> str:
        if not self.db_type:
            raise FieldError(f"Field '{self.name}' missing db_type for schema generation.")
        if self.is_bounded_text:
            return f"{self.db_type}({self.size})"
        return self.db_type

    # Conversion ----------------------------------------------------------
    def get_default(self) -> Any:
        if callable(self.default):
            return self.default()
        return self.default

    @property
    def has_default(self) -> bool:
        return self.default is not None

    def to_python(self, value: Any) -> Any:
        return value

    def from_db(self, value: Any) -> Any:
        """
        Convert a value read from the database before it is assigned.
        """
        return value


class AutoField(Field):
    """
    Auto-incrementing integer field used as default primary key.
    """

    def __init__(self) -> None:
        super().__init__(primary_key=True, nullable=False, db_type="INTEGER")

    def to_python(self, value: Any) -> int | None:
        if value is None:
            return value
        try:
            return int(value)
        except (TypeError, ValueError) as exc:
            raise ValueError(f"Invalid value '{value}' for AutoField") from exc


class IntegerField(Field):
    """
    Integer column. Values are stored as given so that the ``int`` checker
    sees exactly what the caller assigned.
    """

    def __init__(self, **kwargs: Any) -> None:
        kwargs.setdefault("db_type", "INTEGER")
        super().__init__(**kwargs)


class FloatField(Field):
    def __init__(self, **kwargs: Any) -> None:
        kwargs.setdefault("db_type", "REAL")
        super().__init__(**kwargs)


class BooleanField(Field):
    def __init__(self, *, default: Any = False, **kwargs: Any) -> None:
        kwargs.setdefault("db_type", "BOOLEAN")
        kwargs.setdefault("nullable", False)
        super().__init__(default=default, **kwargs)

    def to_python(self, value: Any) -> bool | None:
        if value is None:
            return value
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            lowered = value.lower()
            if lowered in {"true", "t", "1"}:
                return True
            if lowered in {"false", "f", "0"}:
                return False
        if isinstance(value, (int, float)):
            return bool(value)
        raise ValueError(f"Invalid boolean value '{value}'")


class StringField(Field):
    """
    Variable-length character column. ``max_length`` becomes the declared
    size; columns with a validation rule accept over-long values on
    assignment and report them from the size check. Columns without one
    reject them on assignment.
    """

    def __init__(self, *, max_length: Optional[int] = 255, **kwargs: Any) -> None:
        kwargs.setdefault("db_type", "VARCHAR")
        kwargs.setdefault("size", max_length)
        super().__init__(**kwargs)

    @property
    def max_length(self) -> Optional[int]:
        return self.size

    def to_python(self, value: Any) -> Any:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            value = str(value)
        if isinstance(value, str) and self.size and len(value) > self.size and not self._size_validated:
            raise ValueError(f"Value for field '{self.require_name()}' exceeds max_length {self.size}")
        return value

    @property
    def _size_validated(self) -> bool:
        return self.validation is not None and self.validation.size_check


class CharField(StringField):
    """Fixed-length character column."""

    def __init__(self, *, length: int, **kwargs: Any) -> None:
        kwargs.setdefault("db_type", "CHAR")
        super().__init__(max_length=length, **kwargs)


class TextField(Field):
    def __init__(self, **kwargs: Any) -> None:
        kwargs.setdefault("db_type", "TEXT")
        super().__init__(**kwargs)


class DateField(Field):
    """
    Date column. Strings are kept verbatim so that the ``date`` checker can
    report unparseable input instead of failing on assignment.
    """

    def __init__(self, **kwargs: Any) -> None:
        kwargs.setdefault("db_type", "DATE")
        super().__init__(**kwargs)

    def from_db(self, value: Any) -> Any:
        if isinstance(value, str):
            try:
                return date.fromisoformat(value)
            except ValueError:
                return value
        return value


class DateTimeField(Field):
    def __init__(
        self, *, auto_now: bool = False, auto_now_add: bool = False, **kwargs: Any
    ) -> None:
        kwargs.setdefault("db_type", "TIMESTAMP")
        super().__init__(**kwargs)
        self.auto_now = auto_now
        self.auto_now_add = auto_now_add

    @property
    def has_default(self) -> bool:
        return self.auto_now or self.auto_now_add or super().has_default

    def get_default(self) -> Any:
        if self.auto_now or self.auto_now_add:
            return datetime.now(timezone.utc)
        return super().get_default()

    def to_python(self, value: Any) -> Any:
        # Values that are not datetimes are kept so the ``datetime`` checker
        # can reject them.
        if isinstance(value, date) and not isinstance(value, datetime):
            return datetime(value.year, value.month, value.day)
        return value

    def from_db(self, value: Any) -> Any:
        # Stored as ISO 8601 text by the session.
        if isinstance(value, str):
            try:
                return datetime.fromisoformat(value)
            except ValueError:
                return value
        return value
