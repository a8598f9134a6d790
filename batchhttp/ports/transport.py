"""Transport port: contract for performing one prepared HTTP call.

The application depends on this port; infrastructure (httpx) implements it.
A transport that can advance many transfers from one event loop sets
``supports_multiplexing``; the dispatcher probes it once at construction.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Protocol, runtime_checkable


@dataclass(frozen=True)
class PreparedRequest:
    """Everything the transport needs for one call; built by prepare_request()."""

    method: str
    url: str
    header_lines: tuple[str, ...]
    body: str | None
    timeout: float
    follow_redirects: bool = True
    transport_options: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class RawResult:
    """Unparsed transport result.

    ``content`` is the raw header block followed by the payload; ``header_size``
    is the length of the header block. ``error`` is set on transport failure.
    """

    status: int | None
    content: str = ""
    header_size: int = 0
    error: str | None = None
    info: dict[str, Any] = field(default_factory=dict)


@runtime_checkable
class Transport(Protocol):
    """Port: perform one prepared request. Implementations live in infrastructure."""

    supports_multiplexing: bool

    async def perform(self, prepared: PreparedRequest) -> RawResult:
        """Perform the call; network failures are returned in RawResult.error, not raised."""
        ...

    async def close(self) -> None:
        """Release resources (e.g. connection pool). No-op allowed if nothing to close."""
        ...


def probe_multiplexing(transport: object) -> bool:
    """Capability probe: does the transport advance many transfers from one control thread?"""
    return bool(getattr(transport, "supports_multiplexing", False))
