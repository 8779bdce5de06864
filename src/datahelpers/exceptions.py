"""
Data conversion and transfer exception classes.
"""
import sqlite3

import psycopg
import sqlalchemy as sa


class DataHelpersError(Exception):
    """Base class for all datahelpers errors.
    """


class MappingError(DataHelpersError):
    """Error mapping a record attribute or a table column.

    Raised when an attribute cannot be read from a record, or when a table
    column has no matching column in the destination.
    """


class TransferError(DataHelpersError):
    """Error moving rows into a sink.

    Covers refused connections, rejected writes and timeouts.
    """


class FormatError(DataHelpersError):
    """Malformed input to a serialization codec.
    """


class ValidationError(DataHelpersError):
    """Error in input validation.
    """


SinkError = (
    sa.exc.SQLAlchemyError,
    sqlite3.Error,
    psycopg.Error,
    )
