"""
Bulk copy strategy factory for dialect-specific operations.
"""
from functools import lru_cache

from datahelpers.strategy.base import _STRATEGY_REGISTRY
from datahelpers.strategy.base import BulkCopyStrategy as BulkCopyStrategy
from datahelpers.strategy.base import register_strategy as register_strategy
from datahelpers.strategy.postgres import PostgresStrategy as PostgresStrategy
from datahelpers.strategy.sqlite import SQLiteStrategy as SQLiteStrategy
from datahelpers.strategy.sqlserver import SQLServerStrategy as SQLServerStrategy


def _validate_dialect(dialect: str) -> None:
    """Raise ValueError if dialect is not registered."""
    if dialect not in _STRATEGY_REGISTRY:
        available = list(_STRATEGY_REGISTRY.keys())
        raise ValueError(f'Unsupported dialect: {dialect}. Available: {available}')


@lru_cache(maxsize=8)
def _get_strategy(dialect: str) -> BulkCopyStrategy:
    """Get cached strategy instance for a dialect."""
    _validate_dialect(dialect)
    return _STRATEGY_REGISTRY[dialect]()


def get_strategy(dialect: str) -> BulkCopyStrategy:
    """Get strategy instance for a dialect name."""
    return _get_strategy(dialect)


def get_db_strategy(obj) -> BulkCopyStrategy:
    """Get strategy for a SQLAlchemy engine or connection."""
    return _get_strategy(get_dialect_name(obj))


def get_dialect_name(obj) -> str:
    """Get dialect name for a SQLAlchemy engine or connection."""
    if hasattr(obj, 'dialect'):
        dialect = obj.dialect
        if isinstance(dialect, str):
            return dialect.lower()
        return str(dialect.name).lower()

    if hasattr(obj, 'engine') and hasattr(obj.engine, 'dialect'):
        return str(obj.engine.dialect.name).lower()

    raise AttributeError(f'Cannot determine dialect for {type(obj)}')


def get_available_dialects() -> list[str]:
    """Return list of registered dialect names."""
    return list(_STRATEGY_REGISTRY.keys())


def is_supported_dialect(dialect: str) -> bool:
    """Check if a dialect is supported."""
    return dialect in _STRATEGY_REGISTRY


def get_strategy_class(dialect: str) -> type['BulkCopyStrategy']:
    """Get the strategy class for a dialect without instantiating."""
    _validate_dialect(dialect)
    return _STRATEGY_REGISTRY[dialect]
