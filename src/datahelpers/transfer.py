"""
Bulk transfer of tables into sinks.

A transfer opens one sink connection, writes every row of the table into the
named destination as a single timeout-bounded bulk operation, and releases
the connection whatever the outcome. Transfers are not retried and not
idempotent: copying the same table twice appends its rows twice.
"""
import logging
from collections.abc import Iterable
from typing import Any

from datahelpers.cache import DescriptorCache
from datahelpers.exceptions import ValidationError
from datahelpers.sink import Sink, scoped_connection
from datahelpers.table import Table, to_table

logger = logging.getLogger(__name__)

__all__ = ['bulk_copy', 'bulk_copy_records']


def bulk_copy(sink: Sink, table_name: str, table: Table,
              timeout: int | None = None) -> int:
    """Copy every row of `table` into `table_name`.

    Args:
        sink: Destination sink
        table_name: Destination table, taken literally (case-sensitive)
        table: Rows to copy; columns map to same-named destination columns
        timeout: Seconds the transfer may run, 0 for no limit; defaults to
            the sink's `default_timeout`

    Returns
        Number of rows written

    Raises
        MappingError: If the destination table or a column is missing; raised
            before any row is sent
        TransferError: If the connection or write fails, or the timeout expires
    """
    if not table_name:
        raise ValidationError('table_name cannot be empty')
    if timeout is None:
        timeout = sink.default_timeout
    if timeout < 0:
        raise ValidationError(f'timeout cannot be negative, got {timeout}')

    logger.debug(f'Bulk copying {len(table)} rows into {table_name} (timeout {timeout}s)')
    with scoped_connection(sink) as handle:
        return sink.bulk_write(handle, table_name, table, timeout)


def bulk_copy_records(sink: Sink, records: Iterable[Any], table_name: str | None = None,
                      record_type: type | None = None, timeout: int | None = None,
                      cache: DescriptorCache | None = None) -> int:
    """Convert records to a table and copy it into the sink.

    The destination defaults to the record type's name. The table is built
    before any connection is opened.
    """
    table = to_table(records, record_type, cache)
    return bulk_copy(sink, table_name or table.name, table, timeout)
