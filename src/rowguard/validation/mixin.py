"""
Mixin exposing the validation pipeline as record methods.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional, Union

from . import pipeline
from .password import PasswordPolicy, check_password_strength
from .rules import ValidationRule


class ValidationMixin:
    """
    Adds ``validate`` and friends to a record class.

    The host class provides ``columns()``, ``column_info(name)`` and
    ``has_field(name)``; see :class:`rowguard.core.Model`.
    """

    def validate(self, *args: Any) -> Union[pipeline.ErrorMap, str, None]:
        """
        Validate the record.

        ``record.validate()`` checks every stored column value,
        ``record.validate({"col": value})`` checks a mapping of values,
        ``record.validate("col")`` checks one stored value and
        ``record.validate("col", value)`` checks ``value`` for one column.
        Mapping results are ``None`` when nothing failed.
        """
        return pipeline.validate(self, *args)

    def validate_object(self) -> Optional[pipeline.ErrorMap]:
        return pipeline.validate_object(self)

    def validate_values(self, values: Mapping[str, Any]) -> Optional[pipeline.ErrorMap]:
        return pipeline.validate_values(self, values)

    def validate_column(self, column: str, value: Any = pipeline.MISSING) -> Optional[str]:
        return pipeline.validate_column(self, column, value)

    def get_validation_rule(self, column: str) -> Optional[ValidationRule]:
        return pipeline.get_validation_rule(self, column)

    def check_password_strength(
        self,
        password: str,
        policy: Union[PasswordPolicy, Mapping[str, Any], None] = None,
    ) -> Optional[str]:
        return check_password_strength(password, policy)
