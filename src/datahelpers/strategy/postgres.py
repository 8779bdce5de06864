"""
PostgreSQL-specific bulk copy strategy.

The transfer timeout is applied with `SET LOCAL statement_timeout`, scoped to
the transaction the rows are written in. It is re-issued before every batch
with the time left, so the whole transfer stays within its budget.
"""
import logging
import math
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING

import psycopg
import sqlalchemy as sa
from datahelpers.strategy.base import BulkCopyStrategy, register_strategy

if TYPE_CHECKING:
    from datahelpers.options import SinkOptions

logger = logging.getLogger(__name__)


@register_strategy('postgresql')
class PostgresStrategy(BulkCopyStrategy):
    """PostgreSQL-specific operations.
    """

    @property
    def dialect_name(self) -> str:
        return 'postgresql'

    def build_connection_url(self, options: 'SinkOptions') -> sa.URL:
        """Build the SQLAlchemy connection URL for PostgreSQL."""
        query = {}
        if options.timeout:
            query['connect_timeout'] = str(options.timeout)
        if options.appname:
            query['application_name'] = options.appname

        return sa.URL.create(
            drivername='postgresql+psycopg',
            username=options.username,
            password=options.password,
            host=options.hostname,
            port=options.port,
            database=options.database,
            query=query
        )

    @classmethod
    def get_required_options(cls) -> list[str]:
        return ['hostname', 'username', 'password', 'database', 'port']

    @contextmanager
    def statement_timeout(self, connection: sa.Connection, timeout: int,
                          deadline: float | None,
                          clock: Callable[[], float]) -> Iterator[None]:
        if deadline is not None:
            self.limit_remaining(connection, deadline - clock())
        yield

    def limit_remaining(self, connection: sa.Connection, remaining: float) -> None:
        """Re-issue the transaction-scoped statement timeout, in milliseconds."""
        millis = max(1, math.ceil(remaining * 1000))
        connection.exec_driver_sql(f'SET LOCAL statement_timeout = {millis}')
        logger.debug(f'Set statement_timeout to {millis}ms')

    def is_timeout_error(self, exc: BaseException) -> bool:
        return isinstance(exc, psycopg.errors.QueryCanceled)
