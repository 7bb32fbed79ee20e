"""Governed HTTP access for quotafetch.

Provides :class:`RequestGovernor`, which produces :class:`GovernedFetch`
callables wrapping :class:`httpx.AsyncClient` with request pacing, bearer
auth injection, optional response caching, HTTP 429 recovery, and typed
errors.

Example::

    from quotafetch.client import RequestGovernor

    async with RequestGovernor.from_config(load_config()) as governor:
        fetch = governor.new_governed_fetch(use_cache=True)
        resp = await fetch("https://api.example.com/docs")
"""

from quotafetch.client.governor import GovernedFetch, RequestGovernor

__all__ = ["GovernedFetch", "RequestGovernor"]
