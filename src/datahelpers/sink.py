"""
Bulk-loadable sinks.

A sink is anything that can be opened, bulk-written to and closed:

- `open()` returns a connection handle
- `bulk_write(handle, destination_table, table, timeout)` writes every row
- `close(handle)` releases the handle

`SqlAlchemySink` is the relational implementation. It maps each table
column to the same-named destination column (case-sensitive) before sending
anything, then streams the rows in batches inside a single transaction,
bounded by a per-dialect statement timeout and a deadline checked between
batches.
"""
import logging
import time
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Any

import sqlalchemy as sa
from more_itertools import chunked
from sqlalchemy import inspect
from sqlalchemy.engine import Engine
from datahelpers.exceptions import MappingError, SinkError, TransferError
from datahelpers.options import DEFAULT_BATCH_SIZE, DEFAULT_BULK_TIMEOUT
from datahelpers.strategy import BulkCopyStrategy, get_db_strategy
from datahelpers.table import Table

logger = logging.getLogger(__name__)

__all__ = ['Sink', 'SqlAlchemySink', 'scoped_connection']


class Sink(ABC):
    """Destination a Table can be bulk copied into.
    """

    default_timeout: int = DEFAULT_BULK_TIMEOUT

    @abstractmethod
    def open(self) -> Any:
        """Open a connection and return its handle.

        Raises
            TransferError: If the connection is refused
        """

    @abstractmethod
    def bulk_write(self, handle: Any, destination_table: str, table: Table,
                   timeout: int) -> int:
        """Write every row of `table` into `destination_table`.

        Returns
            Number of rows written

        Raises
            MappingError: If a column has no destination counterpart
            TransferError: If the write is rejected or times out
        """

    @abstractmethod
    def close(self, handle: Any) -> None:
        """Release a handle returned by `open`."""


@contextmanager
def scoped_connection(sink: Sink) -> Iterator[Any]:
    """Open a sink connection for the duration of the block.

    The handle is closed on every exit path.
    """
    handle = sink.open()
    try:
        yield handle
    finally:
        sink.close(handle)
        logger.debug(f'Released {type(sink).__name__} connection')


class SqlAlchemySink(Sink):
    """Relational sink over a SQLAlchemy engine.

    Each `open()` checks out a new connection from the engine; with the
    default NullPool that is a fresh DBAPI connection closed again by
    `close()`.
    """

    def __init__(self, engine: Engine, batch_size: int = DEFAULT_BATCH_SIZE,
                 default_timeout: int = DEFAULT_BULK_TIMEOUT,
                 clock: Callable[[], float] = time.monotonic) -> None:
        self.engine = engine
        self.batch_size = batch_size
        self.default_timeout = default_timeout
        self.clock = clock
        self.strategy: BulkCopyStrategy = get_db_strategy(engine)

    def __repr__(self) -> str:
        return f'SqlAlchemySink({self.engine.url!r})'

    @property
    def dialect(self) -> str:
        return self.strategy.dialect_name

    def open(self) -> sa.Connection:
        try:
            connection = self.engine.connect()
        except SinkError as e:
            raise TransferError(f'Could not connect to {self.engine.url!r}: {e}') from e
        logger.debug(f'Opened {self.dialect} connection')
        return connection

    def close(self, handle: sa.Connection) -> None:
        if not handle.closed:
            handle.close()
            logger.debug(f'Closed {self.dialect} connection')

    def get_destination_columns(self, handle: sa.Connection, destination_table: str) -> list[str]:
        """Column names of the destination table, in ordinal order.

        Raises
            MappingError: If the table does not exist
        """
        try:
            return [col['name'] for col in inspect(handle).get_columns(destination_table)]
        except sa.exc.NoSuchTableError as e:
            raise MappingError(f'Destination table {destination_table!r} does not exist') from e
        except sa.exc.SQLAlchemyError as e:
            raise TransferError(f'Could not read columns of {destination_table!r}: {e}') from e

    def map_columns(self, handle: sa.Connection, destination_table: str,
                    table: Table) -> list[tuple[str, str]]:
        """Map every table column to the same-named destination column.

        Returns
            (source, destination) pairs in table column order

        Raises
            MappingError: If the table has no columns or a column is unmatched
        """
        if not table.columns:
            raise MappingError(f'Cannot copy a table without columns into {destination_table!r}')

        destination = set(self.get_destination_columns(handle, destination_table))
        missing = [name for name in table.column_names if name not in destination]
        if missing:
            raise MappingError(f'Columns {missing} have no match in {destination_table!r}')
        return [(name, name) for name in table.column_names]

    def _remaining_time(self, deadline: float | None, destination_table: str,
                        timeout: int) -> float | None:
        """Seconds left before the deadline, None when unbounded."""
        if deadline is None:
            return None
        remaining = deadline - self.clock()
        if remaining <= 0:
            raise TransferError(f'Bulk copy into {destination_table!r} exceeded timeout of {timeout}s')
        return remaining

    def bulk_write(self, handle: sa.Connection, destination_table: str, table: Table,
                   timeout: int) -> int:
        deadline = self.clock() + timeout if timeout else None
        written = 0
        start = time.time()
        try:
            with handle.begin():
                # Reflection runs in the same transaction, before any row is sent
                mappings = self.map_columns(handle, destination_table, table)
                sql = self.strategy.build_insert_sql(destination_table, [dest for _, dest in mappings])
                with self.strategy.statement_timeout(handle, timeout, deadline, self.clock):
                    self._write_batches(handle, sql, table, destination_table, deadline, timeout)
                written = len(table)
        except sa.exc.DBAPIError as e:
            if self.strategy.is_timeout_error(e.orig):
                raise TransferError(
                    f'Bulk copy into {destination_table!r} exceeded timeout of {timeout}s'
                    ) from e
            raise TransferError(f'Bulk copy into {destination_table!r} failed: {e.orig}') from e
        except SinkError as e:
            raise TransferError(f'Bulk copy into {destination_table!r} failed: {e}') from e

        logger.debug(f'Bulk copied {written} rows into {destination_table} in {time.time() - start:.2f}s')
        return written

    def _write_batches(self, handle: sa.Connection, sql: str, table: Table,
                       destination_table: str, deadline: float | None, timeout: int) -> None:
        sent = 0
        for batch in chunked(table.rows, self.batch_size):
            remaining = self._remaining_time(deadline, destination_table, timeout)
            if remaining is not None:
                self.strategy.limit_remaining(handle, remaining)
            handle.exec_driver_sql(sql, [self.strategy.adapt_row(row) for row in batch])
            sent += len(batch)
            logger.debug(f'Sent {sent}/{len(table)} rows to {destination_table}')
