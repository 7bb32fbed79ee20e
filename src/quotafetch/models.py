"""Pydantic models shared across quotafetch.

These are the configuration shapes read by :func:`~quotafetch.config.load_config`
and consumed by :meth:`~quotafetch.client.governor.RequestGovernor.from_config`:

* :class:`CacheConfig` -- in-memory response cache TTL.
* :class:`PacingConfig` -- pacing interval, rate-limit window, retry cap.
* :class:`RequestConfig` -- transport settings for the underlying httpx client.
* :class:`GovernorConfig` -- the top-level document bundling the above.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class CacheConfig(BaseModel):
    """In-memory response cache settings."""

    ttl_seconds: float = Field(
        default=60.0, gt=0, description="How long a cached GET response stays visible"
    )


class PacingConfig(BaseModel):
    """Request pacing and rate-limit recovery settings.

    The provider allows a fixed number of requests per minute.  Every live
    request first waits ``pacing_interval`` seconds; a 429 answer makes the
    request wait a full ``rate_limit_window`` before it is sent again.
    """

    pacing_interval: float = Field(
        default=1.0, ge=0, description="Delay before every non-cached request, in seconds"
    )
    rate_limit_window: float = Field(
        default=60.0, ge=0, description="Delay after an HTTP 429 before retrying, in seconds"
    )
    max_rate_limit_retries: Optional[int] = Field(
        default=None,
        ge=0,
        description="Give up after this many 429 retries (None retries forever)",
    )


class RequestConfig(BaseModel):
    """Settings for the :class:`httpx.AsyncClient` created by the governor."""

    base_url: Optional[str] = Field(
        default=None, description="Base URL prepended to relative targets"
    )
    timeout: Optional[float] = Field(
        default=None, description="Request timeout in seconds; None disables it"
    )
    verify_ssl: bool = Field(default=True, description="Verify SSL certificates")


class GovernorConfig(BaseModel):
    """Top-level configuration persisted as ``config.json``.

    See Also:
        :func:`~quotafetch.config.load_config` for file and environment
        precedence.
    """

    token_source: str = Field(
        default="env:QUOTAFETCH_TOKEN",
        description="Credential source for the bearer token: env:VAR or file:/path",
    )
    cache: CacheConfig = Field(default_factory=CacheConfig)
    pacing: PacingConfig = Field(default_factory=PacingConfig)
    request: RequestConfig = Field(default_factory=RequestConfig)
