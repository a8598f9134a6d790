"""Dispatcher: owns default options, normalizes batch input and picks an executor.

``HttpClient`` is the async surface. ``SyncHttpClient`` wraps it for callers that
do not run an event loop of their own.
"""
from __future__ import annotations

import asyncio
import time
from typing import Any, Iterable, Mapping, Union

from loguru import logger

from batchhttp.constants import HTTP_METHOD
from batchhttp.core import SERVICE_NAME
from batchhttp.domain.errors import InvalidInputError
from batchhttp.domain.models import Outcome, Request, normalize_method
from batchhttp.domain.options import BatchOptions
from batchhttp.application.executors import BoundedConcurrentExecutor, SequentialExecutor
from batchhttp.ports.transport import Transport, probe_multiplexing

RequestLike = Union[str, Mapping[str, Any], Request]


def _log(event: str, **kwargs: Any) -> None:
    logger.bind(service_name=SERVICE_NAME, event=event, **kwargs).info("")


class HttpClient:
    """Runs batches of HTTP requests and returns ``{url: Outcome}``.

    Whether the transport can multiplex is probed once here (or injected via
    ``async_available``). Batches of more than one request go through the
    bounded concurrent executor when it can; everything else runs sequentially.
    """

    def __init__(
        self,
        transport: Transport,
        *,
        defaults: BatchOptions | None = None,
        async_available: bool | None = None,
    ) -> None:
        self._transport = transport
        self._defaults = defaults or BatchOptions()
        if async_available is None:
            async_available = probe_multiplexing(transport)
        self._async_available = bool(async_available)
        self._concurrent = BoundedConcurrentExecutor(transport)
        self._sequential = SequentialExecutor(transport)

    @property
    def defaults(self) -> BatchOptions:
        return self._defaults

    def is_async_available(self) -> bool:
        return self._async_available

    async def get(self, urls: Iterable[str], **options: Any) -> dict[str, Outcome]:
        _check_batch(urls)
        requests: list[Request] = []
        for url in urls:
            if not isinstance(url, str):
                raise InvalidInputError(f"url must be a string, got {type(url).__name__}")
            requests.append(Request.get(url))
        return await self.request(HTTP_METHOD.GET, requests, **options)

    async def post(self, requests: Iterable[RequestLike], **options: Any) -> dict[str, Outcome]:
        """POST each ``{"url": ..., "body": ...}`` descriptor; Request objects keep their own method."""
        return await self.request(HTTP_METHOD.POST, requests, **options)

    async def request(
        self,
        method: str,
        requests: Iterable[RequestLike],
        **options: Any,
    ) -> dict[str, Outcome]:
        _check_batch(requests)
        method = normalize_method(method)
        merged = self._defaults.merge(options)
        normalized = [self._normalize(method, item) for item in requests]

        executor = self._select_executor(len(normalized))
        _log(
            "batch_dispatched",
            executor=executor.name,
            method=method,
            total=len(normalized),
            concurrency=merged.concurrency,
        )
        started = time.perf_counter()
        results = await executor.run(normalized, merged)
        _log(
            "batch_completed",
            executor=executor.name,
            total=len(normalized),
            distinct_urls=len(results),
            failed=sum(1 for outcome in results.values() if outcome.error is not None),
            elapsed_seconds=round(time.perf_counter() - started, 3),
        )
        return results

    async def close(self) -> None:
        await self._transport.close()

    async def __aenter__(self) -> "HttpClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    def _select_executor(self, total: int) -> BoundedConcurrentExecutor | SequentialExecutor:
        if self._async_available and total > 1:
            return self._concurrent
        return self._sequential

    @staticmethod
    def _normalize(method: str, item: RequestLike) -> Request:
        if isinstance(item, Request):
            return item
        if isinstance(item, str):
            return Request(method, item)
        if isinstance(item, Mapping):
            url = item.get("url")
            if not isinstance(url, str) or not url.strip():
                raise InvalidInputError("request descriptor missing required field: url")
            return Request(
                item.get("method") or method,
                url,
                item.get("headers") or {},
                item.get("body"),
                item.get("options") or {},
            )
        raise InvalidInputError(f"unsupported request item: {type(item).__name__}")


class SyncHttpClient:
    """Blocking facade over HttpClient.

    Every call runs on one private event loop, so the transport's connection
    pool stays bound to a single loop. Must not be used from inside a running
    event loop.
    """

    def __init__(self, client: HttpClient) -> None:
        self._client = client
        self._runner = asyncio.Runner()

    @property
    def defaults(self) -> BatchOptions:
        return self._client.defaults

    def is_async_available(self) -> bool:
        return self._client.is_async_available()

    def get(self, urls: Iterable[str], **options: Any) -> dict[str, Outcome]:
        return self._runner.run(self._client.get(urls, **options))

    def post(self, requests: Iterable[RequestLike], **options: Any) -> dict[str, Outcome]:
        return self._runner.run(self._client.post(requests, **options))

    def request(self, method: str, requests: Iterable[RequestLike], **options: Any) -> dict[str, Outcome]:
        return self._runner.run(self._client.request(method, requests, **options))

    def close(self) -> None:
        try:
            self._runner.run(self._client.close())
        finally:
            self._runner.close()

    def __enter__(self) -> "SyncHttpClient":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


def _check_batch(requests: object) -> None:
    if isinstance(requests, (str, bytes, Mapping, Request)):
        raise InvalidInputError("requests must be a sequence of urls, descriptors or Request objects")
