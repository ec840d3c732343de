"""Process-wide cache for constant tables (window, DFT basis, mel filterbank).

Every entry is built at most once per key. Construction happens under a lock;
lookups of an existing entry do not take it.
"""

import logging
import threading
from typing import Any, Callable, Dict, Hashable, TypeVar

import numpy as np

logger = logging.getLogger(__name__)

T = TypeVar("T")

_tables: Dict[Hashable, Any] = {}
_lock = threading.Lock()


def _freeze(value: Any) -> Any:
    if isinstance(value, np.ndarray):
        value.setflags(write=False)
    elif isinstance(value, tuple):
        for item in value:
            _freeze(item)
    return value


def cached(key: Hashable, builder: Callable[[], T]) -> T:
    """Return the table stored under ``key``, building it on first use.

    Arrays (or tuples of arrays) returned by ``builder`` are made read-only
    before they are published.
    """
    try:
        return _tables[key]
    except KeyError:
        pass
    with _lock:
        if key not in _tables:
            logger.debug("Building cached table %r", key)
            _tables[key] = _freeze(builder())
        return _tables[key]


def clear_cache() -> None:
    """Drop all cached tables (tests only)."""
    with _lock:
        _tables.clear()


def cache_size() -> int:
    return len(_tables)
