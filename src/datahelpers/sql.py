"""
SQL text generation for bulk inserts.
"""
import logging
from collections.abc import Sequence

logger = logging.getLogger(__name__)

__all__ = ['quote_identifier', 'make_placeholders', 'build_insert_sql']

# DBAPI paramstyle of the driver each dialect connects with
PLACEHOLDERS = {
    'postgresql': '%s',
    'sqlite': '?',
    'mssql': '?',
}


def quote_identifier(identifier: str, dialect: str = 'postgresql') -> str:
    """Quote a table or column name for a dialect.

    SQL Server uses brackets, other dialects double quotes. The identifier is
    otherwise taken literally.

    Raises
        ValueError: If dialect is unsupported
    """
    if dialect in {'postgresql', 'sqlite'}:
        return '"' + identifier.replace('"', '""') + '"'

    if dialect == 'mssql':
        return '[' + identifier.replace(']', ']]') + ']'

    raise ValueError(f'Unknown dialect: {dialect}')


def make_placeholders(count: int, dialect: str = 'postgresql') -> str:
    """Comma-separated parameter placeholders for one row."""
    if dialect not in PLACEHOLDERS:
        raise ValueError(f'Unknown dialect: {dialect}')
    return ', '.join([PLACEHOLDERS[dialect]] * count)


def build_insert_sql(dialect: str, table: str, columns: Sequence[str]) -> str:
    """Generate a parameterised INSERT statement.

    >>> build_insert_sql('sqlite', 'Person', ['Id', 'Name'])
    'INSERT INTO "Person" ("Id", "Name") VALUES (?, ?)'
    """
    quoted_table = quote_identifier(table, dialect)
    quoted_cols = ', '.join(quote_identifier(col, dialect) for col in columns)
    placeholders = make_placeholders(len(columns), dialect)
    return f'INSERT INTO {quoted_table} ({quoted_cols}) VALUES ({placeholders})'
