"""
Process-wide cache of record type descriptors.

Entries are keyed by type identity, populated lazily on first use and never
evicted. The attribute list computed for a type is immutable, so concurrent
first-time computation of the same type converges on whichever entry is stored
first.
"""
import logging
import math
import threading
from collections.abc import Callable
from typing import Any

import cachetools

logger = logging.getLogger(__name__)


class DescriptorCache:
    """Thread-safe store of attribute descriptors keyed by record type.

    A single shared instance is available through `get_instance()`; callers
    that need isolation may construct their own and pass it explicitly to
    `describe`, `to_table` and `to_csv`.
    """

    _instance = None
    _instance_lock = threading.RLock()

    def __init__(self, maxsize: float = math.inf) -> None:
        self._entries: cachetools.Cache = cachetools.Cache(maxsize=maxsize)
        self._lock = threading.RLock()

    @classmethod
    def get_instance(cls) -> 'DescriptorCache':
        """Get singleton instance."""
        if cls._instance is None:
            with cls._instance_lock:
                if cls._instance is None:
                    cls._instance = cls()
        return cls._instance

    def get_or_compute(self, record_type: type,
                       compute: Callable[[type], tuple[Any, ...]]) -> tuple[Any, ...]:
        """Return the cached descriptors for `record_type`, computing them once.

        The computation runs outside the lock; when two callers race on the
        same type the first stored result is returned to both.
        """
        with self._lock:
            if record_type in self._entries:
                return self._entries[record_type]

        logger.debug(f'Descriptor cache miss for {record_type.__qualname__}')
        descriptors = compute(record_type)

        with self._lock:
            if record_type not in self._entries:
                self._entries[record_type] = descriptors
            return self._entries[record_type]

    def __contains__(self, record_type: type) -> bool:
        with self._lock:
            return record_type in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def clear(self) -> None:
        """Drop every cached entry."""
        with self._lock:
            self._entries.clear()
