"""
SQL Server-specific bulk copy strategy.

This module handles SQL Server's differences for bulk copies:
- Identifiers quoted with square brackets
- pyodbc `fast_executemany` for batched parameter arrays
- Query timeout set on the pyodbc connection, reported as SQLSTATE HYT00
"""
import logging
import math
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

import sqlalchemy as sa
from datahelpers.strategy.base import BulkCopyStrategy, register_strategy

if TYPE_CHECKING:
    from datahelpers.options import SinkOptions

logger = logging.getLogger(__name__)

TIMEOUT_SQLSTATE = 'HYT00'


@register_strategy('mssql')
class SQLServerStrategy(BulkCopyStrategy):
    """SQL Server operations"""

    @property
    def dialect_name(self) -> str:
        return 'mssql'

    def build_connection_url(self, options: 'SinkOptions') -> sa.URL:
        """Build the SQLAlchemy connection URL for SQL Server over ODBC."""
        query = {'driver': options.driver}
        if options.appname:
            query['APP'] = options.appname

        return sa.URL.create(
            drivername='mssql+pyodbc',
            username=options.username,
            password=options.password,
            host=options.hostname,
            port=options.port or None,
            database=options.database,
            query=query
        )

    def get_engine_kwargs(self, options: 'SinkOptions') -> dict[str, Any]:
        return {'fast_executemany': True}

    @classmethod
    def get_required_options(cls) -> list[str]:
        return ['hostname', 'username', 'password', 'database', 'driver']

    @contextmanager
    def statement_timeout(self, connection: sa.Connection, timeout: int,
                          deadline: float | None,
                          clock: Callable[[], float]) -> Iterator[None]:
        """Set the pyodbc query timeout for the duration of the block."""
        if deadline is None:
            yield
            return

        raw_conn = connection.connection.driver_connection
        previous = raw_conn.timeout
        self.limit_remaining(connection, deadline - clock())
        try:
            yield
        finally:
            raw_conn.timeout = previous

    def limit_remaining(self, connection: sa.Connection, remaining: float) -> None:
        """Set the pyodbc query timeout to the whole seconds left (0 disables it)."""
        connection.connection.driver_connection.timeout = max(1, math.ceil(remaining))

    def is_timeout_error(self, exc: BaseException) -> bool:
        return any(TIMEOUT_SQLSTATE in str(arg) for arg in getattr(exc, 'args', ()))
