"""
Declarative validation rules attached to column metadata.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Iterable, Mapping, Optional, Tuple, Union

from ..utils import get_logger

logger = get_logger("validation.rules")

CustomCheck = Callable[[Any, Any, str], Optional[str]]


class CheckType(str, Enum):
    """Names of the built-in type checkers."""

    INT = "int"
    INTEGER = "integer"
    FLOAT = "float"
    MONEY = "money"
    BOOL = "bool"
    SHORTNAME = "shortname"
    EMAIL = "email"
    PERCENTAGE = "percentage"
    TEMPLATE = "template"
    TEXT = "text"
    TIME = "time"
    UNIQUE = "unique"
    DATE = "date"
    DATETIME = "datetime"
    PHONE = "phone"

    @classmethod
    def lookup(cls, name: Union[str, "CheckType"]) -> Optional["CheckType"]:
        if isinstance(name, CheckType):
            return name
        try:
            return cls(name)
        except ValueError:
            return None


TypeName = Union[CheckType, str]


def _normalize_types(types: Union[TypeName, Iterable[TypeName], None]) -> Tuple[TypeName, ...]:
    if types is None:
        return ()
    if isinstance(types, str):
        types = (types,)
    normalized: list[TypeName] = []
    for name in types:
        check_type = CheckType.lookup(name)
        if check_type is None:
            logger.warning("Unknown validation type (%s)", name)
            normalized.append(str(name))
        else:
            normalized.append(check_type)
    return tuple(normalized)


@dataclass(frozen=True)
class ValidationRule:
    """
    Validation configuration for a single column.

    ``types`` are evaluated in declaration order and the first failure wins.
    ``check`` is a caller supplied predicate ``(record, value, column)`` run
    once every typed check has passed. ``size_check`` controls the length
    check applied to VARCHAR/CHAR columns that declare a size.
    """

    required: bool = False
    types: Tuple[TypeName, ...] = field(default_factory=tuple)
    check: Optional[CustomCheck] = None
    size_check: bool = True

    def __post_init__(self) -> None:
        object.__setattr__(self, "types", _normalize_types(self.types))
        if self.check is not None and not callable(self.check):
            raise TypeError("ValidationRule.check must be callable")

    @classmethod
    def coerce(cls, value: Union["ValidationRule", Mapping[str, Any], None]) -> Optional["ValidationRule"]:
        """
        Build a rule from a field's ``validation`` argument.

        Mappings accept ``required``/``is_required``, ``types``/``type`` and
        ``check``/``validate_sub`` keys.
        """
        if value is None or isinstance(value, ValidationRule):
            return value
        if not isinstance(value, Mapping):
            raise TypeError(f"Unsupported validation configuration: {value!r}")

        known = {"required", "is_required", "types", "type", "check", "validate_sub", "size_check"}
        unknown = set(value) - known
        if unknown:
            raise TypeError(f"Unknown validation option(s): {', '.join(sorted(unknown))}")

        required = value.get("required", value.get("is_required", False))
        types = value.get("types", value.get("type"))
        check = value.get("check", value.get("validate_sub"))
        return cls(
            required=bool(required),
            types=types,
            check=check,
            size_check=bool(value.get("size_check", True)),
        )

    @property
    def unknown_types(self) -> Tuple[str, ...]:
        return tuple(name for name in self.types if not isinstance(name, CheckType))
