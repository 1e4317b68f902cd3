"""
Built-in type checkers.

Every checker has the signature ``(record, value, column)`` and returns an
error message, or ``None`` when the value passes. Only ``unique`` touches the
backing store.
"""

from __future__ import annotations

import re
from datetime import date, datetime
from decimal import Decimal
from types import MappingProxyType
from typing import Any, Callable, Mapping, Optional

from dateutil import parser as date_parser
from email_validator import EmailNotValidError, validate_email
from jinja2 import ChainableUndefined, TemplateError
from jinja2.sandbox import SandboxedEnvironment

from .rules import CheckType, TypeName

Checker = Callable[[Any, Any, str], Optional[str]]

_NON_DIGIT_RE = re.compile(r"\D")
_FLOAT_RE = re.compile(r"\d+\.\d+")
_MONEY_RE = re.compile(r"\d+(?:\.\d{2})?\Z")
_SHORTNAME_RE = re.compile(r"[\w\-]+")
_LEADING_NUMBER_RE = re.compile(r"\d+(?:\.\d+)?(?:[eE][+-]?\d+)?")
_TIME_RE = re.compile(r"\d\d?:\d\d?(?::\d\d?)?")
_PHONE_RE = re.compile(r"\d{10}")

# Templates are rendered without access to Python internals.
_template_env = SandboxedEnvironment(autoescape=False, undefined=ChainableUndefined)


def _text(value: Any) -> str:
    return value if isinstance(value, str) else str(value)


def check_int(record: Any, value: Any, column: str) -> Optional[str]:
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if _NON_DIGIT_RE.search(_text(value)):
        return "Not a valid number"
    return None


def check_float(record: Any, value: Any, column: str) -> Optional[str]:
    if _FLOAT_RE.fullmatch(_text(value)):
        return None
    return "Not a valid number"


def check_money(record: Any, value: Any, column: str) -> Optional[str]:
    if _MONEY_RE.search(_text(value)):
        return None
    return "Not a valid dollar amount"


def check_bool(record: Any, value: Any, column: str) -> Optional[str]:
    if isinstance(value, (bool, int, float, Decimal)):
        number = value
    else:
        try:
            number = float(_text(value).strip())
        except ValueError:
            return "Not a valid boolean"
    if number == 0 or number == 1:
        return None
    return "Not a valid boolean"


def check_shortname(record: Any, value: Any, column: str) -> Optional[str]:
    if _SHORTNAME_RE.fullmatch(_text(value)):
        return None
    return "Only letters, numbers, (-) and (_) are allowed"


def check_email(record: Any, value: Any, column: str) -> Optional[str]:
    try:
        validate_email(_text(value), check_deliverability=False)
    except EmailNotValidError:
        return "Invalid E-Mail address"
    return None


def check_percentage(record: Any, value: Any, column: str) -> Optional[str]:
    # The leading number, exponent included, is compared; "40%" is accepted.
    match = _LEADING_NUMBER_RE.match(_text(value))
    if match and 0 <= float(match.group()) <= 100:
        return None
    return "Requires a whole number between 0-100"


def check_template(record: Any, value: Any, column: str) -> Optional[str]:
    try:
        _template_env.from_string(_text(value)).render()
    except (TemplateError, ArithmeticError, LookupError, TypeError, ValueError) as exc:
        return str(exc) or exc.__class__.__name__
    return None


def check_text(record: Any, value: Any, column: str) -> Optional[str]:
    return None


def check_time(record: Any, value: Any, column: str) -> Optional[str]:
    # Matches the H:MM[:SS] shape only; hour and minute ranges are not checked.
    if _TIME_RE.fullmatch(_text(value)):
        return None
    return f"Invalid 24h time format: {value}"


def check_unique(record: Any, value: Any, column: str) -> Optional[str]:
    queryset = record.query().filter(**{column: value})
    if record.in_storage:
        for pk_name in record.primary_columns():
            queryset = queryset.exclude(**{pk_name: getattr(record, pk_name)})
    if queryset.count():
        return f"{value} is already in use"
    return None


def check_date(record: Any, value: Any, column: str) -> Optional[str]:
    if isinstance(value, date):
        return None
    try:
        date_parser.parse(_text(value))
    except (ValueError, OverflowError):
        return "Invalid date format"
    return None


def check_datetime(record: Any, value: Any, column: str) -> Optional[str]:
    if isinstance(value, datetime):
        return None
    return "Invalid date/time format"


def check_phone(record: Any, value: Any, column: str) -> Optional[str]:
    digits = _NON_DIGIT_RE.sub("", _text(value))
    if _PHONE_RE.fullmatch(digits):
        return None
    return "A 10-digit phone number is required"


CHECKERS: Mapping[CheckType, Checker] = MappingProxyType(
    {
        CheckType.INT: check_int,
        CheckType.INTEGER: check_int,
        CheckType.FLOAT: check_float,
        CheckType.MONEY: check_money,
        CheckType.BOOL: check_bool,
        CheckType.SHORTNAME: check_shortname,
        CheckType.EMAIL: check_email,
        CheckType.PERCENTAGE: check_percentage,
        CheckType.TEMPLATE: check_template,
        CheckType.TEXT: check_text,
        CheckType.TIME: check_time,
        CheckType.UNIQUE: check_unique,
        CheckType.DATE: check_date,
        CheckType.DATETIME: check_datetime,
        CheckType.PHONE: check_phone,
    }
)


def get_checker(name: TypeName) -> Optional[Checker]:
    check_type = CheckType.lookup(name)
    if check_type is None:
        return None
    return CHECKERS.get(check_type)
