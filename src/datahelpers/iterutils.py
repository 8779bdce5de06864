"""
Collection helpers used to prepare record sequences.
"""
import math
import random
from collections.abc import Callable, Iterable, Iterator
from typing import TypeVar

from more_itertools import chunked

__all__ = ['shuffle', 'traverse', 'split']

T = TypeVar('T')


def shuffle(source: Iterable[T], rnd: random.Random | None = None) -> Iterator[T]:
    """Lazily yield a uniformly random permutation of `source`.

    Fisher-Yates over a copy of the input; each element is yielded exactly
    once. Only a fully consumed generator is a uniform permutation.
    """
    rnd = rnd or random.Random()
    elements = list(source)
    for i in range(len(elements)):
        swap_index = i + rnd.randrange(len(elements) - i)
        yield elements[swap_index]
        elements[swap_index] = elements[i]


def traverse(items: Iterable[T], child_selector: Callable[[T], Iterable[T]]) -> Iterator[T]:
    """Lazily walk `items` and their descendants with an explicit stack.

    Items are pushed in order and popped last-in-first-out, so the last root
    is visited first and each node's children are expanded before its
    siblings. Cyclic child relations never terminate.
    """
    stack = list(items)
    while stack:
        node = stack.pop()
        yield node
        for child in child_selector(node):
            stack.append(child)


def split(source: Iterable[T], group_by: int) -> list[list[T]]:
    """Split `source` into at most `group_by` contiguous, nearly-equal chunks.

    The chunk size is `ceil(len(source) / group_by)`, so fewer chunks are
    returned when the items do not fill every group.

    >>> split([1, 2, 3, 4, 5], 2)
    [[1, 2, 3], [4, 5]]
    """
    if group_by < 1:
        raise ValueError(f'group_by must be at least 1, got {group_by}')
    items = list(source)
    if not items:
        return []
    return list(chunked(items, math.ceil(len(items) / group_by)))
