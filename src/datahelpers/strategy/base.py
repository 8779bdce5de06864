"""
Base strategy interface for bulk copy sinks.

Defines the abstract base class that every dialect-specific strategy inherits
from. A strategy encapsulates what differs between backends during a bulk
copy: connection URLs, identifier quoting, parameter placeholders, and how a
statement timeout is applied and recognised.
"""
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterator, Sequence
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

import sqlalchemy as sa
from datahelpers.sql import build_insert_sql, quote_identifier
from datahelpers.types import TypeConverter

if TYPE_CHECKING:
    from datahelpers.options import SinkOptions

# Registry of dialect name -> strategy class
# Defined here to avoid circular imports (concrete strategies import from base)
_STRATEGY_REGISTRY: dict[str, type['BulkCopyStrategy']] = {}


def register_strategy(dialect: str):
    """Decorator to register a strategy class for a dialect.

    Usage:
        @register_strategy('postgresql')
        class PostgresStrategy(BulkCopyStrategy):
            ...
    """
    def decorator(cls: type['BulkCopyStrategy']) -> type['BulkCopyStrategy']:
        _STRATEGY_REGISTRY[dialect] = cls
        return cls
    return decorator


class BulkCopyStrategy(ABC):
    """Base class for dialect-specific bulk copy behaviour.
    """

    @property
    @abstractmethod
    def dialect_name(self) -> str:
        """Return the dialect identifier (e.g., 'postgresql', 'sqlite')."""

    @abstractmethod
    def build_connection_url(self, options: 'SinkOptions') -> sa.URL:
        """Build the SQLAlchemy connection URL for this dialect.

        Args:
            options: SinkOptions containing connection parameters
        """

    def get_engine_kwargs(self, options: 'SinkOptions') -> dict[str, Any]:
        """Return extra SQLAlchemy create_engine kwargs for this dialect."""
        return {}

    @classmethod
    @abstractmethod
    def get_required_options(cls) -> list[str]:
        """Return list of option field names that must be set for this dialect."""

    @classmethod
    def validate_options(cls, options: 'SinkOptions') -> None:
        """Validate options for this dialect.

        Raises
            ValueError: If any required field is None or 0
        """
        for field in cls.get_required_options():
            if not getattr(options, field):
                raise ValueError(f'field {field} cannot be None or 0')

    def quote_identifier(self, identifier: str) -> str:
        """Quote a table or column name for this dialect."""
        return quote_identifier(identifier, self.dialect_name)

    def build_insert_sql(self, table: str, columns: Sequence[str]) -> str:
        """Generate the INSERT statement used for every batch."""
        return build_insert_sql(self.dialect_name, table, columns)

    @contextmanager
    def statement_timeout(self, connection: sa.Connection, timeout: int,
                          deadline: float | None,
                          clock: Callable[[], float]) -> Iterator[None]:
        """Bound the statements executed inside the block.

        The default implementation applies no driver-level limit; the sink
        still checks the deadline between batches.

        Args:
            connection: Open SQLAlchemy connection, inside a transaction
            timeout: Timeout in seconds, 0 for no limit
            deadline: Absolute deadline on `clock`, None for no limit
            clock: Monotonic clock the deadline is measured on
        """
        yield

    def is_timeout_error(self, exc: BaseException) -> bool:
        """Check if a driver exception reports an expired statement timeout."""
        return False

    def adapt_row(self, row: tuple[Any, ...]) -> tuple[Any, ...]:
        """Convert one table row to driver parameters."""
        return TypeConverter.convert_row(row)

    def limit_remaining(self, connection: sa.Connection, remaining: float) -> None:
        """Cap the next statement at the `remaining` seconds of the transfer budget.

        Called before every batch. The default does nothing; dialects whose
        driver limit is per statement override it.
        """
