"""
Generic data-shape conversion helpers.

Records of any type can be converted to:
- a column-typed Table: to_table(records)
- CSV text: to_csv(records)
- binary, XML or JSON text: serialize_to_binary/xml/json(obj)

and Tables are bulk copied into relational sinks:
- sink = connect_sink({'drivername': 'sqlite', 'database': 'app.db'})
- bulk_copy(sink, 'Person', table) or bulk_copy_records(sink, people)
"""
__version__ = '0.1.0'

from datahelpers.cache import DescriptorCache
from datahelpers.connection import connect_sink, dispose_all_engines
from datahelpers.describe import AttributeDescriptor, describe
from datahelpers.exceptions import DataHelpersError, FormatError, MappingError
from datahelpers.exceptions import SinkError, TransferError, ValidationError
from datahelpers.formatting import format_csv_value, to_csv
from datahelpers.iterutils import shuffle, split, traverse
from datahelpers.options import DEFAULT_BULK_TIMEOUT, SinkOptions
from datahelpers.ordering import NaturalOrder, compare_natural, natural_key
from datahelpers.ordering import natural_sorted
from datahelpers.serialization import clone, deserialize_from_binary
from datahelpers.serialization import deserialize_from_json
from datahelpers.serialization import deserialize_from_xml, serialize_to_binary
from datahelpers.serialization import serialize_to_json, serialize_to_xml
from datahelpers.sink import Sink, SqlAlchemySink, scoped_connection
from datahelpers.table import ColumnDescriptor, Table, to_table
from datahelpers.transfer import bulk_copy, bulk_copy_records

__all__ = [
    'describe',
    'to_table',
    'to_csv',
    'format_csv_value',
    'bulk_copy',
    'bulk_copy_records',
    'connect_sink',
    'dispose_all_engines',
    'scoped_connection',
    'shuffle',
    'traverse',
    'split',
    'natural_key',
    'compare_natural',
    'natural_sorted',
    'NaturalOrder',
    'serialize_to_binary',
    'deserialize_from_binary',
    'serialize_to_xml',
    'deserialize_from_xml',
    'serialize_to_json',
    'deserialize_from_json',
    'clone',
    'AttributeDescriptor',
    'ColumnDescriptor',
    'DescriptorCache',
    'Table',
    'Sink',
    'SqlAlchemySink',
    'SinkOptions',
    'DEFAULT_BULK_TIMEOUT',
    'DataHelpersError',
    'MappingError',
    'TransferError',
    'FormatError',
    'ValidationError',
    'SinkError',
]
