"""Shared HTTP client utilities for whereis."""

from __future__ import annotations

import ssl
from contextlib import contextmanager
from typing import Iterator

import httpx

from .config import AppSettings
from .constants import USER_AGENT

try:  # pragma: no cover - optional dependency used only when available
    import h2  # noqa: F401
except ModuleNotFoundError:  # pragma: no cover
    HTTP2_AVAILABLE = False
else:  # pragma: no cover
    HTTP2_AVAILABLE = True

# Connections stay in the pool for the whole batch.
POOL_LIMITS = httpx.Limits(max_keepalive_connections=10, max_connections=10, keepalive_expiry=None)


def build_ssl_context() -> ssl.SSLContext:
    """Default verifying context that refuses anything older than TLS 1.2."""
    context = ssl.create_default_context()
    context.minimum_version = ssl.TLSVersion.TLSv1_2
    return context


def build_timeout(settings: AppSettings) -> httpx.Timeout:
    # Only connection setup (TCP + TLS handshake) is bounded.
    return httpx.Timeout(None, connect=settings.handshake_timeout)


@contextmanager
def get_client(settings: AppSettings) -> Iterator[httpx.Client]:
    """Yield a configured Client reused for every lookup of a run.

    The client negotiates HTTP/2 when ``h2`` is installed, so lookups share
    one multiplexed connection.
    """
    with httpx.Client(
        http2=HTTP2_AVAILABLE,
        verify=build_ssl_context(),
        timeout=build_timeout(settings),
        limits=POOL_LIMITS,
        headers={
            "accept": "application/json",
            "user-agent": USER_AGENT,
        },
    ) as client:
        yield client
