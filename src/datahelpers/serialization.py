"""
Round-trip codecs for records and plain values.

Three codecs are provided, each with a serialize/deserialize pair satisfying
`deserialize(serialize(x)) == x`:

- binary: pickle, carried as base64 text
- XML: one element per exposed attribute, driven by the record descriptors
- JSON: structural codec backed by pydantic; `clone` is a JSON round trip

Malformed input to any deserializer raises FormatError.
"""
import base64
import binascii
import datetime
import decimal
import enum
import functools
import logging
import pickle
import typing
import uuid
import xml.etree.ElementTree as ET
from collections.abc import Mapping
from typing import Any, TypeVar

import pydantic
from datahelpers.describe import describe, unwrap_optional
from datahelpers.exceptions import FormatError

logger = logging.getLogger(__name__)

__all__ = [
    'serialize_to_binary',
    'deserialize_from_binary',
    'serialize_to_xml',
    'deserialize_from_xml',
    'serialize_to_json',
    'deserialize_from_json',
    'clone',
]

T = TypeVar('T')

SCALAR_TYPES = (str, bytes, bool, int, float, decimal.Decimal, datetime.date,
                datetime.time, uuid.UUID, enum.Enum)
SEQUENCE_TYPES = (list, tuple, set, frozenset)


# Binary

def serialize_to_binary(obj: Any) -> str:
    """Serialize an object to base64-encoded pickle text."""
    return base64.b64encode(pickle.dumps(obj)).decode('ascii')


def deserialize_from_binary(text: str, expected_type: type | None = None) -> Any:
    """Deserialize an object produced by `serialize_to_binary`.

    Only use on trusted input: unpickling can execute arbitrary code.
    """
    try:
        obj = pickle.loads(base64.b64decode(text, validate=True))
    except (binascii.Error, ValueError, TypeError, EOFError,
            pickle.UnpicklingError, AttributeError, ImportError) as e:
        raise FormatError(f'Invalid binary payload: {e}') from e

    if expected_type is not None and not isinstance(obj, expected_type):
        raise FormatError(f'Expected {expected_type.__name__}, got {type(obj).__name__}')
    return obj


# XML

def _is_record(value_type: Any) -> bool:
    return (isinstance(value_type, type)
            and not issubclass(value_type, (*SCALAR_TYPES, *SEQUENCE_TYPES, Mapping))
            and bool(describe(value_type)))


def _scalar_text(value: Any) -> str:
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, enum.Enum):
        return _scalar_text(value.value)
    if isinstance(value, bytes):
        return base64.b64encode(value).decode('ascii')
    if isinstance(value, datetime.date | datetime.time):
        return value.isoformat()
    return str(value)


def _to_element(tag: str, value: Any) -> ET.Element:
    elem = ET.Element(tag)

    if _is_record(type(value)):
        for attribute in describe(type(value)):
            child = attribute.get_value(value)
            if child is not None:
                elem.append(_to_element(attribute.name, child))
    elif isinstance(value, Mapping):
        for key, child in value.items():
            if child is not None:
                elem.append(_to_element(str(key), child))
    elif isinstance(value, SEQUENCE_TYPES):
        for item in value:
            elem.append(_to_element(type(item).__name__, item))
    else:
        elem.text = _scalar_text(value)

    return elem


def serialize_to_xml(obj: Any) -> str:
    """Serialize a record to XML.

    The root element is named after the record type and holds one child per
    exposed attribute; None attributes are omitted. Empty elements are written
    with an explicit end tag.
    """
    root = _to_element(type(obj).__name__, obj)
    return ET.tostring(root, encoding='unicode', short_empty_elements=False)


def _from_element(elem: ET.Element, declared: Any) -> Any:
    value_type, _ = unwrap_optional(declared)
    origin = typing.get_origin(value_type) or value_type

    if _is_record(value_type):
        by_tag = {child.tag: child for child in elem}
        data = {}
        for a in describe(value_type):
            if a.name in by_tag:
                data[a.name] = _from_element(by_tag[a.name], a.declared_type)
            elif a.nullable:
                # None attributes are omitted on write
                data[a.name] = None
        return data

    if isinstance(origin, type) and issubclass(origin, SEQUENCE_TYPES):
        args = typing.get_args(value_type)
        item_type = args[0] if args else Any
        return [_from_element(child, item_type) for child in elem]

    if isinstance(origin, type) and issubclass(origin, Mapping):
        args = typing.get_args(value_type)
        item_type = args[1] if len(args) == 2 else Any
        return {child.tag: _from_element(child, item_type) for child in elem}

    if value_type is bytes:
        return base64.b64decode(elem.text or '')

    return elem.text or ''


def deserialize_from_xml(text: str, record_type: type[T]) -> T:
    """Deserialize a record produced by `serialize_to_xml`."""
    try:
        root = ET.fromstring(text)
    except ET.ParseError as e:
        raise FormatError(f'Invalid XML: {e}') from e

    if root.tag != record_type.__name__:
        raise FormatError(f'Expected root element {record_type.__name__!r}, got {root.tag!r}')

    try:
        data = _from_element(root, record_type)
    except binascii.Error as e:
        raise FormatError(f'Invalid base64 content: {e}') from e
    return _validate(record_type, data)


# JSON

@functools.lru_cache(maxsize=128)
def _cached_adapter(type_: Any) -> pydantic.TypeAdapter:
    return pydantic.TypeAdapter(type_)


def _type_adapter(type_: Any) -> pydantic.TypeAdapter:
    """Structural adapter for `type_`.

    Raises
        FormatError: If the type has no constructible structure (plain classes
            without dataclass or model fields)
    """
    try:
        return _cached_adapter(type_)
    except pydantic.PydanticSchemaGenerationError as e:
        raise FormatError(f'{getattr(type_, "__name__", type_)} cannot be serialized structurally: {e}') from e


def _validate(type_: Any, data: Any) -> Any:
    adapter = _type_adapter(type_)
    try:
        return adapter.validate_python(data)
    except pydantic.ValidationError as e:
        raise FormatError(f'Invalid {getattr(type_, "__name__", type_)} data: {e}') from e


def serialize_to_json(obj: Any, type_: Any = None) -> str:
    """Serialize to JSON text using the structure of `type_` (default: type of obj)."""
    adapter = _type_adapter(type(obj) if type_ is None else type_)
    return adapter.dump_json(obj).decode()


def deserialize_from_json(text: str | bytes, type_: type[T]) -> T:
    """Deserialize JSON text into an instance of `type_`."""
    adapter = _type_adapter(type_)
    try:
        return adapter.validate_json(text)
    except pydantic.ValidationError as e:
        raise FormatError(f'Invalid JSON for {getattr(type_, "__name__", type_)}: {e}') from e


def clone(obj: T, type_: Any = None) -> T:
    """Return a deep, independent copy of `obj` via a JSON round trip.

    Pass `type_` for generic containers (`list[Person]`) whose item types
    cannot be recovered from the object itself.
    """
    if obj is None:
        return None
    type_ = type(obj) if type_ is None else type_
    return deserialize_from_json(serialize_to_json(obj, type_), type_)
