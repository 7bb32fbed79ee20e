"""Abstract cache capability consumed by the request governor.

:class:`~quotafetch.client.governor.RequestGovernor` only ever calls
:meth:`ResponseCacheInterface.get` and :meth:`ResponseCacheInterface.set`,
so any object implementing those two methods can back it.  The bundled
implementation is :class:`~quotafetch.cache.memory.MemoryCache`.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

import httpx


class ResponseCacheInterface(ABC):
    """Key/value store of HTTP responses, keyed by request URL.

    Implementations must store independent snapshots so that later
    mutation of the response passed to :meth:`set` (or of a response
    returned by :meth:`get`) does not leak into the cache.
    """

    @abstractmethod
    def get(self, key: str) -> Optional[httpx.Response]:
        """Return the cached response for *key*, or ``None`` on a miss."""

    @abstractmethod
    def set(self, key: str, response: httpx.Response) -> None:
        """Store a snapshot of *response* under *key*, replacing any prior entry."""
