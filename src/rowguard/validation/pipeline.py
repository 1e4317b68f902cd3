"""
Column validation pipeline and the record-level aggregators built on it.

The record passed to these functions only needs the accessor surface exposed
by :class:`~rowguard.core.Model`: ``columns()``, ``column_info(name)``,
``has_field(name)`` and attribute access for stored values. The ``unique``
checker additionally uses ``query()``, ``in_storage`` and
``primary_columns()``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Optional, Tuple, Union

from ..utils import get_logger
from .checkers import get_checker
from .rules import ValidationRule

logger = get_logger("validation.pipeline")

REQUIRED_MESSAGE = "Field is required"
INVALID_COLUMN_MESSAGE = "Invalid column name"


class _Marker:
    def __init__(self, name: str) -> None:
        self.name = name

    def __repr__(self) -> str:
        return self.name


MISSING: Any = _Marker("MISSING")
NEXT: Any = _Marker("NEXT")

ErrorMap = Dict[str, str]


@dataclass(frozen=True)
class ColumnContext:
    record: Any
    column: str
    rule: ValidationRule
    value: Any
    field: Any


StageResult = Union[str, None, _Marker]
Stage = Callable[[ColumnContext], StageResult]


def _is_empty(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value == "")


def required_stage(ctx: ColumnContext) -> StageResult:
    if ctx.rule.required and _is_empty(ctx.value):
        return REQUIRED_MESSAGE
    return NEXT


def absent_stage(ctx: ColumnContext) -> StageResult:
    # Optional columns without a value pass untouched.
    if ctx.value is None:
        return None
    return NEXT


def typed_stage(ctx: ColumnContext) -> StageResult:
    for type_name in ctx.rule.types:
        checker = get_checker(type_name)
        if checker is None:
            logger.warning("Unknown validation type (%s) on column %s", type_name, ctx.column)
            continue
        message = checker(ctx.record, ctx.value, ctx.column)
        if message:
            return message
    return NEXT


def custom_stage(ctx: ColumnContext) -> StageResult:
    if ctx.rule.check is not None:
        message = ctx.rule.check(ctx.record, ctx.value, ctx.column)
        if message:
            return message
    return NEXT


def size_stage(ctx: ColumnContext) -> StageResult:
    field = ctx.field
    if not ctx.rule.size_check or field is None or not field.is_bounded_text:
        return NEXT
    if len(ctx.value if isinstance(ctx.value, str) else str(ctx.value)) > field.size:
        return f"Can not exceed {field.size} characters"
    return NEXT


# Order matters: the required check must run before absent values pass.
STAGES: Tuple[Stage, ...] = (
    required_stage,
    absent_stage,
    typed_stage,
    custom_stage,
    size_stage,
)


def get_validation_rule(record: Any, column: str) -> Optional[ValidationRule]:
    field = record.column_info(column)
    if field is None:
        return None
    return field.validation


def validate_column(record: Any, column: str, value: Any = MISSING) -> Optional[str]:
    """
    Validate ``value`` (or the record's stored value) for ``column``.

    Returns the first error message produced by the pipeline, or ``None``.
    Columns without a validation rule always pass. The value is never
    written to the record.
    """
    field = record.column_info(column)
    rule = field.validation if field is not None else None
    if rule is None:
        return None

    if value is MISSING:
        value = getattr(record, column)

    ctx = ColumnContext(record=record, column=column, rule=rule, value=value, field=field)
    for stage in STAGES:
        outcome = stage(ctx)
        if outcome is NEXT:
            continue
        if outcome is not None:
            logger.debug("Column %s failed validation: %s", column, outcome)
        return outcome
    return None


def validate_object(record: Any) -> Optional[ErrorMap]:
    """
    Validate the stored value of every column on ``record``.

    Returns a mapping of column name to error message, or ``None`` when every
    column passes.
    """
    errors: ErrorMap = {}
    for column in record.columns():
        message = validate_column(record, column, getattr(record, column))
        if message:
            errors[column] = message
    return errors or None


def validate_values(record: Any, values: Mapping[str, Any]) -> Optional[ErrorMap]:
    """
    Validate the supplied ``values`` against the record's columns.

    Keys that are not fields of the record report ``"Invalid column name"``.
    The supplied values are checked as given and are not stored on the record.
    """
    errors: ErrorMap = {}
    for column, value in values.items():
        if not record.has_field(column):
            errors[column] = INVALID_COLUMN_MESSAGE
            continue
        message = validate_column(record, column, value)
        if message:
            errors[column] = message
    return errors or None


def validate(record: Any, *args: Any) -> Union[ErrorMap, str, None]:
    """
    Route to whole-record, bulk-map or single-column validation.

    * ``validate(record)`` validates every stored column value.
    * ``validate(record, {"col": value, ...})`` validates a mapping.
    * ``validate(record, "col")`` validates the stored value of one column.
    * ``validate(record, "col", value)`` validates ``value`` for one column.
    """
    if not args:
        return validate_object(record)
    if len(args) == 1 and isinstance(args[0], Mapping):
        return validate_values(record, args[0])
    if len(args) > 2:
        raise TypeError(f"validate() takes at most 2 arguments ({len(args)} given)")
    return validate_column(record, *args)
