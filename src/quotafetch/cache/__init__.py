"""In-memory response caching for quotafetch.

This package provides :class:`ResponseCacheInterface`, the two-method
contract the governor depends on, and :class:`MemoryCache`, a
process-scoped implementation that expires entries after a TTL.  Entries
are keyed by request URL and checked for expiry only when read.
"""

from quotafetch.cache.base import ResponseCacheInterface
from quotafetch.cache.memory import CachedEntry, MemoryCache

__all__ = ["CachedEntry", "MemoryCache", "ResponseCacheInterface"]
