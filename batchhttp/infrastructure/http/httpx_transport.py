"""Concrete transport implementation using httpx (injected where Transport is needed)."""
from __future__ import annotations

import asyncio
import time
from typing import Any

import httpx

from batchhttp.domain.headers import split_header_line
from batchhttp.ports.transport import PreparedRequest, RawResult


def _header_pairs(header_lines: tuple[str, ...]) -> list[tuple[str, str]]:
    pairs: list[tuple[str, str]] = []
    for line in header_lines:
        parts = split_header_line(line)
        if parts is not None:
            pairs.append(parts)
    return pairs


def _header_block(response: httpx.Response) -> str:
    """Rebuild the raw header section: one block per redirect hop, final response last."""
    blocks: list[str] = []
    for hop in [*response.history, response]:
        lines = [f"{hop.http_version} {hop.status_code} {hop.reason_phrase}".rstrip()]
        lines.extend(
            f"{name.decode('latin-1')}: {value.decode('latin-1')}" for name, value in hop.headers.raw
        )
        blocks.append("\r\n".join(lines) + "\r\n\r\n")
    return "".join(blocks)


class HttpxTransport:
    """Transport implementation using httpx.AsyncClient.

    Many transfers share the client's connection pool and are advanced by the
    running event loop, so the transport supports multiplexing.
    """

    supports_multiplexing = True

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    async def perform(self, prepared: PreparedRequest) -> RawResult:
        started = time.perf_counter()
        try:
            # httpx timeouts are per phase; the overall deadline bounds the whole transfer.
            async with asyncio.timeout(prepared.timeout):
                response = await self._client.request(
                    prepared.method,
                    prepared.url,
                    headers=_header_pairs(prepared.header_lines),
                    content=prepared.body,
                    timeout=prepared.timeout,
                    follow_redirects=prepared.follow_redirects,
                    **dict(prepared.transport_options),
                )
        except TimeoutError:
            return self._failure(
                prepared, f"timeout while fetching {prepared.url}: exceeded {prepared.timeout}s", started
            )
        except httpx.TimeoutException as exc:
            return self._failure(prepared, f"timeout while fetching {prepared.url}: {_describe(exc)}", started)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            return self._failure(prepared, f"http fetch failed for {prepared.url}: {_describe(exc)}", started)

        head = _header_block(response)
        info: dict[str, Any] = {
            "url": str(response.url),
            "method": prepared.method,
            "http_code": response.status_code,
            "total_time": time.perf_counter() - started,
            "header_size": len(head),
            "size_download": len(response.content),
            "redirect_count": len(response.history),
        }
        return RawResult(
            status=response.status_code,
            content=head + response.text,
            header_size=len(head),
            error=None,
            info=info,
        )

    async def close(self) -> None:
        await self._client.aclose()

    @staticmethod
    def _failure(prepared: PreparedRequest, error: str, started: float) -> RawResult:
        info = {
            "url": prepared.url,
            "method": prepared.method,
            "http_code": 0,
            "total_time": time.perf_counter() - started,
        }
        return RawResult(status=None, error=error, info=info)


def _describe(exc: Exception) -> str:
    return str(exc) or type(exc).__name__
