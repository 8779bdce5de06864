"""
CSV text formatting of record sequences.

Quoting rules, applied per value in this order:

- None -> `""`
- str -> quoted, embedded `"` escaped as `\\"` (backslash, not doubled)
- anything whose text parses as a float -> unquoted
- everything else -> quoted, unescaped

The backslash escaping differs from RFC 4180 doubled quotes; consumers of
this format depend on it, so it is kept as is. No header row is written.
"""
import logging
from collections.abc import Iterable
from typing import Any

from datahelpers.cache import DescriptorCache
from datahelpers.describe import describe
from datahelpers.exceptions import ValidationError
from datahelpers.table import read_record, resolve_record_type

logger = logging.getLogger(__name__)

__all__ = ['to_csv', 'format_csv_value']


def _parses_as_float(text: str) -> bool:
    try:
        float(text)
    except ValueError:
        return False
    return True


def format_csv_value(value: Any) -> str:
    """Format a single value as a CSV field.

    >>> format_csv_value(None)
    '""'
    >>> format_csv_value('say "hi"')
    '"say \\\\"hi\\\\""'
    >>> format_csv_value(1.5)
    '1.5'
    """
    if value is None:
        return '""'

    if isinstance(value, str):
        return '"' + value.replace('"', '\\"') + '"'

    text = str(value)
    if _parses_as_float(text):
        return text
    return f'"{text}"'


def to_csv(records: Iterable[Any], record_type: type | None = None,
           cache: DescriptorCache | None = None,
           line_separator: str = '\n') -> str:
    """Format records as CSV text, one line per record.

    Fields follow the descriptor order of the record type; every line,
    including the last, ends with `line_separator`.
    """
    if not line_separator:
        raise ValidationError('line_separator cannot be empty')

    records = list(records)
    if not records:
        return ''

    record_type = resolve_record_type(records, record_type)

    attributes = describe(record_type, cache)
    lines = []
    for i, record in enumerate(records):
        row = read_record(record, attributes, i)
        lines.append(','.join(format_csv_value(v) for v in row) + line_separator)

    logger.debug(f'Formatted {len(lines)} {record_type.__name__} records as CSV')
    return ''.join(lines)
