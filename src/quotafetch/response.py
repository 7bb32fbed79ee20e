"""Helpers for working with :class:`httpx.Response` objects.

Used by both the cache (to take independent snapshots) and the governor
(to classify status codes).
"""

from __future__ import annotations

from typing import Union

import httpx

Target = Union[str, httpx.URL, httpx.Request]

# The snapshot body is already decoded, so these no longer describe it.
_STALE_HEADERS = frozenset({"content-encoding", "content-length", "transfer-encoding"})


def is_success(status_code: int) -> bool:
    """Return ``True`` for status codes in ``[200, 400)``."""
    return 200 <= status_code < 400


def snapshot_response(response: httpx.Response) -> httpx.Response:
    """Return an independent copy of a fully read *response*.

    The copy shares no mutable state with the original: headers are copied
    and the body is the already-decoded content.  Mutating one response
    (e.g. its headers) leaves the other untouched.

    Args:
        response: A response whose body has been read.

    Returns:
        A new :class:`httpx.Response` with the same status, headers, body,
        reason phrase, and originating request.
    """
    headers = [
        (name, value)
        for name, value in response.headers.multi_items()
        if name.lower() not in _STALE_HEADERS
    ]
    extensions = {}
    if "reason_phrase" in response.extensions:
        extensions["reason_phrase"] = response.extensions["reason_phrase"]

    try:
        request = response.request
    except RuntimeError:
        request = None

    return httpx.Response(
        status_code=response.status_code,
        headers=headers,
        content=response.content,
        request=request,
        extensions=extensions,
    )
