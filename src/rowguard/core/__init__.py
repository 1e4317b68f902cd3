"""
Core building blocks for rowguard models and column metadata.
"""

from .fields import (
    AutoField,
    BooleanField,
    CharField,
    DateField,
    DateTimeField,
    Field,
    FieldError,
    FloatField,
    IntegerField,
    StringField,
    TextField,
)
from .model import Model, ModelConfigurationError, ModelMeta, ModelOptions

__all__ = [
    "AutoField",
    "BooleanField",
    "CharField",
    "DateField",
    "DateTimeField",
    "Field",
    "FieldError",
    "FloatField",
    "IntegerField",
    "Model",
    "ModelConfigurationError",
    "ModelMeta",
    "ModelOptions",
    "StringField",
    "TextField",
]
