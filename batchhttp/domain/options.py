"""Batch-level options and the completion callback contract."""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Mapping, Protocol

from batchhttp.constants import (
    BATCH_OPTION_KEYS,
    DEFAULT_CONCURRENCY,
    DEFAULT_TIMEOUT_SECONDS,
    DEFAULT_USER_AGENT,
    TRANSPORT_OPTION_NAMES,
)
from batchhttp.domain.errors import InvalidConfigError
from batchhttp.domain.headers import HeaderInput, freeze_headers
from batchhttp.domain.models import check_timeout

if TYPE_CHECKING:
    from batchhttp.domain.models import Outcome


class CompletionCallback(Protocol):
    """Called once per completed request, synchronously, in completion order."""

    def __call__(self, url: str, outcome: "Outcome") -> None: ...


@dataclass(frozen=True)
class BatchOptions:
    """Options applied to every request of a batch; Request.options win per request."""

    timeout: float = DEFAULT_TIMEOUT_SECONDS
    headers: HeaderInput = field(default_factory=dict)
    concurrency: int = DEFAULT_CONCURRENCY
    callback: CompletionCallback | None = None
    user_agent: str = DEFAULT_USER_AGENT
    transport_options: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        check_timeout(self.timeout)
        if isinstance(self.concurrency, bool) or not isinstance(self.concurrency, int) or self.concurrency < 1:
            raise InvalidConfigError(f"concurrency must be an integer >= 1, got {self.concurrency!r}")
        if self.callback is not None and not callable(self.callback):
            raise InvalidConfigError("callback must be callable")
        if not isinstance(self.user_agent, str):
            raise InvalidConfigError("user_agent must be a string")
        object.__setattr__(self, "headers", freeze_headers(self.headers))
        object.__setattr__(self, "transport_options", MappingProxyType(dict(self.transport_options)))
        unknown = set(self.transport_options) - TRANSPORT_OPTION_NAMES
        if unknown:
            raise InvalidConfigError(f"unknown transport option(s): {', '.join(sorted(unknown))}")

    def merge(self, overrides: Mapping[str, Any] | None) -> "BatchOptions":
        """Return new options with ``overrides`` applied; per-call values win."""
        if not overrides:
            return self
        unknown = set(overrides) - BATCH_OPTION_KEYS - TRANSPORT_OPTION_NAMES
        if unknown:
            raise InvalidConfigError(f"unknown option(s): {', '.join(sorted(unknown))}")

        changes: dict[str, Any] = {key: value for key, value in overrides.items() if key in BATCH_OPTION_KEYS}
        passthrough = {key: value for key, value in overrides.items() if key in TRANSPORT_OPTION_NAMES}
        if passthrough:
            changes["transport_options"] = {**self.transport_options, **passthrough}
        return replace(self, **changes)
