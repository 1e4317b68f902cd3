"""
Adapter protocol and connection configuration for rowguard.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Protocol, Sequence
from urllib.parse import parse_qsl, urlsplit

from ..dialects.base import Dialect


class AdapterError(RuntimeError):
    """Base error for adapter-related failures."""


class AdapterConfigurationError(AdapterError):
    """Raised when configuration values are invalid."""


class AdapterConnectionError(AdapterError):
    """Raised when establishing or using a connection fails."""


_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def _parse_bool(value: str, *, key: str) -> bool:
    normalized = value.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise AdapterConfigurationError(f"Invalid boolean value for '{key}': {value!r}")


def _parse_float(value: str, *, key: str) -> float:
    try:
        return float(value)
    except ValueError as exc:
        raise AdapterConfigurationError(f"Invalid float value for '{key}': {value!r}") from exc


@dataclass
class ConnectionConfig:
    """
    Normalized connection configuration for adapters.
    """

    url: str
    autocommit: bool = False
    isolation_level: str | None = None
    timeout: float | None = None
    source: str | None = None

    @classmethod
    def from_url(cls, url: str, **kwargs: Any) -> "ConnectionConfig":
        """
        Build a config from a URL, reading ``autocommit``, ``timeout`` and
        ``isolation_level`` from its query string.
        """
        if not urlsplit(url).scheme:
            raise AdapterConfigurationError(f"Connection URL lacks a scheme: {url!r}")
        base_url, _, query_string = url.partition("?")
        query = dict(parse_qsl(query_string))

        if "autocommit" in query:
            kwargs.setdefault("autocommit", _parse_bool(query.pop("autocommit"), key="autocommit"))
        if "timeout" in query:
            kwargs.setdefault("timeout", _parse_float(query.pop("timeout"), key="timeout"))
        if "isolation_level" in query:
            kwargs.setdefault("isolation_level", query.pop("isolation_level"))
        if query:
            raise AdapterConfigurationError(
                f"Unsupported connection option(s): {', '.join(sorted(query))}"
            )
        return cls(url=base_url, **kwargs)

    @classmethod
    def from_env(cls, env_var: str, **kwargs: Any) -> "ConnectionConfig":
        """
        Build a config from an environment variable containing a URL.
        """
        value = os.getenv(env_var)
        if not value:
            raise AdapterConfigurationError(f"Environment variable {env_var} is not set")
        return cls.from_url(value, source=env_var, **kwargs)


class DatabaseAdapter(Protocol):
    """
    Adapter interface exposing database operations used by higher layers.
    """

    dialect: Dialect

    def connect(self, config: ConnectionConfig) -> Any:
        """
        Establish a connection handle using the supplied configuration.
        """

    def close(self) -> None:
        """
        Close underlying resources. Implementations should be idempotent.
        """

    def execute(self, sql: str, params: Sequence[Any] | None = None) -> Any:
        """
        Execute a single SQL statement returning a cursor-like object.
        """

    def begin(self) -> None: ...

    def commit(self) -> None: ...

    def rollback(self) -> None: ...

    def last_insert_id(self, cursor: Any, table: str, pk_column: str) -> Any:
        """
        Retrieve the primary key value generated by the previous insert.
        """
