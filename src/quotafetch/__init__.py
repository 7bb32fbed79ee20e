"""quotafetch -- paced, caching, rate-limit-aware fetch for quota-bound HTTP APIs.

Some third-party APIs allow only a fixed number of requests per minute and
answer HTTP 429 beyond that.  quotafetch sits between application code and
:mod:`httpx` and makes every request well behaved:

* a short pacing delay before each live request,
* a full rate-limit window of waiting, then a retry, after HTTP 429,
* an optional in-memory TTL cache for GET responses,
* :class:`~quotafetch.exceptions.ApiError` for other unsuccessful statuses.

Typical use::

    from quotafetch import MemoryCache, RequestGovernor

    governor = RequestGovernor(MemoryCache(ttl_seconds=60), token=token)
    fetch = governor.new_governed_fetch(use_cache=True)
    response = await fetch("https://api.example.com/docs")

Modules:
    client: The request governor and governed fetch callables.
    cache: Cache capability and the in-memory implementation.
    models: Pydantic configuration models.
    config: Config file loading, env overrides, credential resolution.
    exceptions: Tagged exception hierarchy.
    output: stderr diagnostics with Rich support.
"""

from quotafetch.cache import MemoryCache, ResponseCacheInterface
from quotafetch.client import GovernedFetch, RequestGovernor
from quotafetch.exceptions import (
    ApiError,
    ConfigError,
    ErrorKind,
    QuotafetchError,
    RateLimitExceededError,
    is_api_error,
)

__version__ = "0.1.0"

__all__ = [
    "ApiError",
    "ConfigError",
    "ErrorKind",
    "GovernedFetch",
    "MemoryCache",
    "QuotafetchError",
    "RateLimitExceededError",
    "RequestGovernor",
    "ResponseCacheInterface",
    "is_api_error",
]
