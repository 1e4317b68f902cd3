"""
Query construction APIs for rowguard.
"""

from .compiler import SQLCompiler
from .expressions import Q
from .queryset import QueryManager, QuerySet

__all__ = ["Q", "QueryManager", "QuerySet", "SQLCompiler"]
