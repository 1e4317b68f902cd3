"""
rowguard public package initialization.

Declarative per-column validation for a small ORM: attach a
:class:`ValidationRule` to a field and call ``record.validate()``.
"""

from .adapters import ConnectionConfig, SQLiteAdapter  # noqa: F401
from .core.fields import (
    AutoField,
    BooleanField,
    CharField,
    DateField,
    DateTimeField,
    FloatField,
    IntegerField,
    StringField,
    TextField,
)  # noqa: F401
from .core.model import Model, ModelConfigurationError  # noqa: F401
from .persistence import Session  # noqa: F401
from .query import Q, QuerySet  # noqa: F401
from .schema import SchemaBuilder  # noqa: F401
from .utils import configure_logging  # noqa: F401
from .validation import (
    CheckType,
    PasswordPolicy,
    ValidationError,
    ValidationMixin,
    ValidationRule,
    check_password_strength,
)  # noqa: F401

__version__ = "0.2.0"

__all__ = [
    "Model",
    "AutoField",
    "BooleanField",
    "CharField",
    "DateField",
    "DateTimeField",
    "FloatField",
    "IntegerField",
    "StringField",
    "TextField",
    "ModelConfigurationError",
    "ConnectionConfig",
    "SQLiteAdapter",
    "Session",
    "QuerySet",
    "Q",
    "SchemaBuilder",
    "CheckType",
    "PasswordPolicy",
    "ValidationError",
    "ValidationMixin",
    "ValidationRule",
    "check_password_strength",
    "configure_logging",
]
