"""Composition root: build and lifecycle-manage the concrete client.

Composition may: import concrete classes, call factories, store interface types,
manage high-level lifecycle.
"""
from __future__ import annotations

from loguru import logger

from batchhttp.application.dispatcher import HttpClient
from batchhttp.config.settings import Settings
from batchhttp.infrastructure.http.factory import create_http_client
from batchhttp.ports.transport import Transport


class ClientDependencies:
    """Holds the wired HttpClient and its lifecycle."""

    def __init__(self, *, settings: Settings, transport: Transport | None = None) -> None:
        self._settings = settings
        self._transport = transport
        self._client: HttpClient | None = None
        self._connected = False

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def connected(self) -> bool:
        return self._connected

    @property
    def client(self) -> HttpClient:
        if self._client is None:
            raise RuntimeError("http client is not initialized")
        return self._client

    async def connect(self) -> None:
        self._client = create_http_client(self._settings, self._transport)
        self._connected = True

    async def close(self) -> None:
        if self._client is not None:
            try:
                await self._client.close()
            except Exception as exc:
                logger.warning("http client close failed: {}", exc)
            self._client = None
        self._connected = False


def create_client_dependencies(
    settings: Settings | None = None,
    transport: Transport | None = None,
) -> ClientDependencies:
    return ClientDependencies(settings=settings or Settings(), transport=transport)
