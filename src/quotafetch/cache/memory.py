"""Process-scoped in-memory response cache with lazy TTL expiry.

Responses are stored as independent snapshots (see
:func:`~quotafetch.response.snapshot_response`) and every hit returns a
fresh snapshot, so neither the producer nor any consumer can alter what
the cache holds.

There is no background eviction.  An entry is checked against its TTL
only when it is read; an expired entry is deleted at that point.  Entries
that are never read again stay in memory until :meth:`MemoryCache.clear`
or process exit.

See Also:
    :class:`~quotafetch.models.CacheConfig` -- carries ``ttl_seconds``.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Optional

import httpx

from quotafetch.cache.base import ResponseCacheInterface
from quotafetch.output import get_output
from quotafetch.response import snapshot_response


@dataclass(frozen=True)
class CachedEntry:
    """A stored response snapshot and its monotonic insertion time."""

    response: httpx.Response
    stored_at: float


class MemoryCache(ResponseCacheInterface):
    """Dictionary-backed cache of HTTP responses keyed by URL.

    Args:
        ttl_seconds: How long an entry stays visible after :meth:`set`.
        logger: Diagnostics sink with a ``debug(message)`` method.  Defaults
            to the global :class:`~quotafetch.output.OutputManager`.

    Example::

        cache = MemoryCache(ttl_seconds=30)
        cache.set("https://api.example.com/docs", response)
        hit = cache.get("https://api.example.com/docs")
    """

    def __init__(self, ttl_seconds: float, logger: Any = None) -> None:
        self._ttl = ttl_seconds
        self._logger = logger
        self._entries: dict[str, CachedEntry] = {}

    @property
    def ttl_seconds(self) -> float:
        return self._ttl

    def get(self, key: str) -> Optional[httpx.Response]:
        """Return a snapshot of the cached response, or ``None``.

        An entry older than the TTL is evicted and reported as a miss.
        """
        entry = self._entries.get(key)
        if entry is None:
            return None
        if time.monotonic() - entry.stored_at < self._ttl:
            self._log(
                f"Using cached API response from {key}. "
                f"There are {len(self._entries)} response(s) in the cache"
            )
            return snapshot_response(entry.response)
        del self._entries[key]
        return None

    def set(self, key: str, response: httpx.Response) -> None:
        """Store a snapshot of *response* under *key*."""
        self._entries[key] = CachedEntry(
            response=snapshot_response(response),
            stored_at=time.monotonic(),
        )
        self._log(
            f"Cached API response from {key} for {self._ttl} s. "
            f"There are {len(self._entries)} response(s) in the cache"
        )

    def invalidate(self, key: str) -> None:
        """Remove the entry for *key*, if any."""
        self._entries.pop(key, None)

    def clear(self) -> None:
        """Remove all entries."""
        self._entries.clear()

    def stats(self) -> dict[str, Any]:
        """Return ``size`` (stored entries, expired or not) and ``ttl_seconds``."""
        return {"size": len(self._entries), "ttl_seconds": self._ttl}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def _log(self, message: str) -> None:
        logger = self._logger if self._logger is not None else get_output()
        logger.debug(message)
