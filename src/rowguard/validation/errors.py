"""
Validation error raised when a record is cleaned before persistence.
"""

from __future__ import annotations

from typing import Dict, Mapping


class ValidationError(Exception):
    """
    Aggregated validation error storing a column-to-message mapping.
    """

    def __init__(self, errors: Mapping[str, str]) -> None:
        self.errors: Dict[str, str] = dict(errors)
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        segments = []
        for column, message in self.errors.items():
            prefix = column if column != "__all__" else "non-field"
            segments.append(f"{prefix}: {message}")
        return "; ".join(segments)
