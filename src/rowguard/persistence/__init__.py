"""
Persistence layer: sessions binding records to a backing store.
"""

from .session import Session

__all__ = ["Session"]
