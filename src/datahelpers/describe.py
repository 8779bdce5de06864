"""
Attribute discovery for arbitrary record types.

A record type exposes, in declaration order:

1. its declared fields (dataclass fields, pydantic model fields, NamedTuple
   fields, TypedDict keys, or class annotations over the MRO)
2. its readable properties
3. its public `__slots__`

Names starting with an underscore are never exposed. Each attribute's
declared type has any `Optional[...]` / `X | None` wrapper stripped so the
resulting column type is the underlying scalar.
"""
import dataclasses
import functools
import logging
import types
import typing
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Annotated, Any, ClassVar, Union

import pydantic
from datahelpers.cache import DescriptorCache

logger = logging.getLogger(__name__)

__all__ = [
    'AttributeDescriptor',
    'describe',
    'unwrap_optional',
    'resolve_value_type',
]


@dataclass(frozen=True, slots=True)
class AttributeDescriptor:
    """One exposed, readable attribute of a record type.
    """
    name: str
    value_type: type
    nullable: bool = False
    declared_type: Any = None
    keyed: bool = False

    def get_value(self, record: Any) -> Any:
        """Read this attribute from a record."""
        if self.keyed and isinstance(record, Mapping):
            return record[self.name]
        return getattr(record, self.name)


def unwrap_optional(tp: Any) -> tuple[Any, bool]:
    """Strip an optional wrapper.

    Returns the inner type and whether the wrapper was present.

    >>> unwrap_optional(int | None)
    (<class 'int'>, True)
    >>> unwrap_optional(str)
    (<class 'str'>, False)
    """
    if typing.get_origin(tp) is Annotated:
        tp = typing.get_args(tp)[0]

    if typing.get_origin(tp) in {Union, types.UnionType}:
        args = typing.get_args(tp)
        inner = [a for a in args if a is not type(None)]
        nullable = len(inner) != len(args)
        if len(inner) == 1:
            return inner[0], nullable
        return Union[tuple(inner)], nullable

    return tp, False


def resolve_value_type(tp: Any) -> type:
    """Resolve a declared annotation to a concrete scalar type.

    Generic aliases resolve to their origin (`list[int]` -> `list`), `NewType`
    to its supertype, and anything else that is not a class to `object`.
    """
    tp, _ = unwrap_optional(tp)

    while hasattr(tp, '__supertype__'):
        tp = tp.__supertype__

    origin = typing.get_origin(tp)
    if origin in {Union, types.UnionType}:
        return object
    if isinstance(origin, type):
        return origin

    if tp is Any or not isinstance(tp, type):
        return object
    return tp


def _type_hints(obj: Any) -> dict[str, Any]:
    """Resolve annotations, falling back to the raw mapping on bad forward refs."""
    try:
        return typing.get_type_hints(obj, include_extras=True)
    except Exception as e:
        logger.debug(f'Could not resolve type hints for {obj!r}: {e}')
        hints: dict[str, Any] = {}
        for klass in reversed(getattr(obj, '__mro__', (obj,))):
            hints.update(getattr(klass, '__annotations__', {}))
        return hints


def _is_classvar(tp: Any) -> bool:
    return tp is ClassVar or typing.get_origin(tp) is ClassVar


def _declared_fields(record_type: type) -> list[tuple[str, Any]]:
    """Declared fields in declaration order."""
    hints = _type_hints(record_type)

    if dataclasses.is_dataclass(record_type):
        return [(f.name, hints.get(f.name, f.type)) for f in dataclasses.fields(record_type)]

    if isinstance(record_type, type) and issubclass(record_type, pydantic.BaseModel):
        return [(name, field.annotation) for name, field in record_type.model_fields.items()]

    if isinstance(record_type, type) and issubclass(record_type, tuple) \
            and hasattr(record_type, '_fields'):
        return [(name, hints.get(name, Any)) for name in record_type._fields]

    return [(name, tp) for name, tp in hints.items() if not _is_classvar(tp)]


def _readable_properties(record_type: type) -> list[tuple[str, Any]]:
    """Properties with a getter, in definition order over the MRO."""
    found: dict[str, Any] = {}
    for klass in reversed(record_type.__mro__):
        if klass in {object, pydantic.BaseModel}:
            continue
        for name, member in vars(klass).items():
            if isinstance(member, property):
                if member.fget is None:
                    found.pop(name, None)
                    continue
                getter = member.fget
            elif isinstance(member, functools.cached_property):
                getter = member.func
            else:
                continue
            found[name] = _type_hints(getter).get('return', Any)
    return list(found.items())


def _public_slots(record_type: type) -> list[str]:
    slots: list[str] = []
    for klass in reversed(record_type.__mro__):
        declared = vars(klass).get('__slots__', ())
        if isinstance(declared, str):
            declared = (declared,)
        slots.extend(declared)
    return slots


def _inspect(record_type: type) -> tuple[AttributeDescriptor, ...]:
    """Compute the descriptors for a record type (uncached)."""
    keyed = typing.is_typeddict(record_type)

    candidates: dict[str, Any] = {}
    for name, tp in _declared_fields(record_type):
        candidates.setdefault(name, tp)
    if not keyed:
        for name, tp in _readable_properties(record_type):
            candidates.setdefault(name, tp)
        for name in _public_slots(record_type):
            candidates.setdefault(name, Any)

    descriptors = []
    for name, declared in candidates.items():
        if name.startswith('_'):
            continue
        if isinstance(declared, str):
            declared = Any
        inner, nullable = unwrap_optional(declared)
        descriptors.append(AttributeDescriptor(
            name=name,
            value_type=resolve_value_type(inner),
            nullable=nullable,
            declared_type=declared,
            keyed=keyed,
        ))

    logger.debug(f'Described {record_type.__qualname__}: {[d.name for d in descriptors]}')
    return tuple(descriptors)


def describe(record_type: type,
             cache: DescriptorCache | None = None) -> tuple[AttributeDescriptor, ...]:
    """Return the ordered attribute descriptors for a record type.

    Results are memoized in `cache` (the shared `DescriptorCache` by default),
    so repeated calls for the same type return the same tuple.
    """
    if not isinstance(record_type, type):
        raise TypeError(f'Expected a type, got {type(record_type).__name__}')
    if cache is None:
        cache = DescriptorCache.get_instance()
    return cache.get_or_compute(record_type, _inspect)
