"""
Column validation engine exposed at the package level.
"""

from .checkers import CHECKERS, get_checker
from .errors import ValidationError
from .mixin import ValidationMixin
from .password import PasswordPolicy, check_password_strength
from .pipeline import (
    INVALID_COLUMN_MESSAGE,
    MISSING,
    REQUIRED_MESSAGE,
    STAGES,
    get_validation_rule,
    validate,
    validate_column,
    validate_object,
    validate_values,
)
from .rules import CheckType, ValidationRule

__all__ = [
    "CHECKERS",
    "CheckType",
    "INVALID_COLUMN_MESSAGE",
    "MISSING",
    "PasswordPolicy",
    "REQUIRED_MESSAGE",
    "STAGES",
    "ValidationError",
    "ValidationMixin",
    "ValidationRule",
    "check_password_strength",
    "get_checker",
    "get_validation_rule",
    "validate",
    "validate_column",
    "validate_object",
    "validate_values",
]
