"""HTTP client factory: builds the transport and dispatcher from settings (no wiring logic elsewhere)."""
from __future__ import annotations

import httpx

from batchhttp.application.dispatcher import HttpClient, SyncHttpClient
from batchhttp.config.settings import Settings
from batchhttp.domain.options import BatchOptions
from batchhttp.infrastructure.http.httpx_transport import HttpxTransport
from batchhttp.ports.transport import Transport


def create_transport(settings: Settings) -> Transport:
    """Build the httpx transport. Redirect limit and TLS verification are client-wide."""
    async_client = httpx.AsyncClient(
        verify=settings.verify_tls,
        max_redirects=settings.max_redirects,
    )
    return HttpxTransport(async_client)


def default_options(settings: Settings) -> BatchOptions:
    return BatchOptions(
        timeout=settings.timeout_seconds,
        concurrency=settings.concurrency,
        user_agent=settings.user_agent,
    )


def create_http_client(settings: Settings, transport: Transport | None = None) -> HttpClient:
    return HttpClient(transport or create_transport(settings), defaults=default_options(settings))


def create_sync_http_client(settings: Settings, transport: Transport | None = None) -> SyncHttpClient:
    return SyncHttpClient(create_http_client(settings, transport))
