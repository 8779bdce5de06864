"""
SQLite-specific bulk copy strategy.

SQLite has no statement timeout setting; a progress handler aborts the
running statement once the transfer deadline has passed, which surfaces as
`sqlite3.OperationalError: interrupted`.
"""
import datetime
import decimal
import logging
import sqlite3
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

import sqlalchemy as sa
from datahelpers.strategy.base import BulkCopyStrategy, register_strategy

if TYPE_CHECKING:
    from datahelpers.options import SinkOptions

logger = logging.getLogger(__name__)

# SQLite virtual machine instructions between progress handler calls
PROGRESS_INTERVAL = 1000


def _adapt_value(value: Any) -> Any:
    if isinstance(value, decimal.Decimal):
        return str(value)
    if isinstance(value, datetime.datetime):
        return value.isoformat(sep=' ')
    if isinstance(value, datetime.date | datetime.time):
        return value.isoformat()
    return value


@register_strategy('sqlite')
class SQLiteStrategy(BulkCopyStrategy):
    """SQLite-specific operations.
    """

    @property
    def dialect_name(self) -> str:
        return 'sqlite'

    def build_connection_url(self, options: 'SinkOptions') -> sa.URL:
        """Build the SQLAlchemy connection URL for SQLite."""
        return sa.URL.create(drivername='sqlite', database=options.database)

    @classmethod
    def get_required_options(cls) -> list[str]:
        return ['database']

    @contextmanager
    def statement_timeout(self, connection: sa.Connection, timeout: int,
                          deadline: float | None,
                          clock: Callable[[], float]) -> Iterator[None]:
        """Interrupt statements that run past the deadline."""
        if deadline is None:
            yield
            return

        raw_conn = connection.connection.driver_connection
        raw_conn.set_progress_handler(lambda: int(clock() > deadline), PROGRESS_INTERVAL)
        try:
            yield
        finally:
            raw_conn.set_progress_handler(None, PROGRESS_INTERVAL)

    def adapt_row(self, row: tuple[Any, ...]) -> tuple[Any, ...]:
        """Bind Decimal as text and temporal values as ISO-8601 text."""
        return tuple(_adapt_value(v) for v in super().adapt_row(row))

    def is_timeout_error(self, exc: BaseException) -> bool:
        return isinstance(exc, sqlite3.OperationalError) and 'interrupted' in str(exc).lower()
