"""
Natural ("logical") string ordering: `item2` sorts before `item10`.
"""
import functools
import re
from collections.abc import Iterable

__all__ = ['natural_key', 'compare_natural', 'natural_sorted', 'NaturalOrder']

_DIGITS = re.compile(r'(\d+)')


def natural_key(text: str) -> tuple[str | int, ...]:
    """Sort key splitting `text` into alternating text and number runs.

    Text runs compare case-insensitively and digit runs numerically. Even
    positions are always text and odd positions always numbers, so keys of
    different strings compare element by element without type clashes.

    >>> sorted(['item10', 'Item2', 'item1'], key=natural_key)
    ['item1', 'Item2', 'item10']
    """
    parts = _DIGITS.split(text)
    return tuple(int(part) if i % 2 else part.casefold() for i, part in enumerate(parts))


def compare_natural(a: str, b: str) -> int:
    """Three-way natural comparison returning -1, 0 or 1."""
    ka, kb = natural_key(a), natural_key(b)
    return (ka > kb) - (ka < kb)


NaturalOrder = functools.cmp_to_key(compare_natural)


def natural_sorted(items: Iterable[str], reverse: bool = False) -> list[str]:
    """Return `items` sorted in natural order."""
    return sorted(items, key=natural_key, reverse=reverse)
