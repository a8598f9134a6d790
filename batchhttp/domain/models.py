"""Domain models: the request descriptor and the per-request outcome."""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, Mapping

from batchhttp.constants import HTTP_METHOD, HTTP_METHODS, REQUEST_OPTION_KEYS
from batchhttp.domain.errors import InvalidConfigError, InvalidInputError
from batchhttp.domain.headers import HeaderInput, freeze_headers


def normalize_method(method: str) -> str:
    if not isinstance(method, str):
        raise InvalidConfigError(f"http method must be a string, got {method!r}")
    normalized = method.strip().upper()
    if normalized not in HTTP_METHODS:
        raise InvalidConfigError(f"unsupported http method: {method!r}")
    return normalized


@dataclass(frozen=True)
class Request:
    """One HTTP call inside a batch (value object).

    ``url`` is the correlation key of the batch result. ``options`` overrides the
    batch options for this request only (timeout, user agent, transport
    pass-through). ``headers`` and ``options`` are copied into read-only
    containers on construction. The ``with_*`` helpers return a new Request.
    """

    method: str
    url: str
    headers: HeaderInput = field(default_factory=dict)
    body: str | None = None
    options: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "method", normalize_method(self.method))
        if not isinstance(self.url, str) or not self.url.strip():
            raise InvalidInputError("request missing required field: url")
        if self.body is not None and not isinstance(self.body, str):
            raise InvalidInputError("request body must be a str or None")
        object.__setattr__(self, "headers", freeze_headers(self.headers))
        object.__setattr__(self, "options", MappingProxyType(dict(self.options)))
        unknown = set(self.options) - REQUEST_OPTION_KEYS
        if unknown:
            raise InvalidConfigError(f"unknown request option(s): {', '.join(sorted(unknown))}")
        if "timeout" in self.options:
            check_timeout(self.options["timeout"])

    @classmethod
    def get(
        cls,
        url: str,
        headers: HeaderInput | None = None,
        options: Mapping[str, Any] | None = None,
    ) -> "Request":
        return cls(HTTP_METHOD.GET, url, headers or {}, None, options or {})

    @classmethod
    def post(
        cls,
        url: str,
        body: str | None = None,
        headers: HeaderInput | None = None,
        options: Mapping[str, Any] | None = None,
    ) -> "Request":
        return cls(HTTP_METHOD.POST, url, headers or {}, body, options or {})

    @classmethod
    def put(
        cls,
        url: str,
        body: str | None = None,
        headers: HeaderInput | None = None,
        options: Mapping[str, Any] | None = None,
    ) -> "Request":
        return cls(HTTP_METHOD.PUT, url, headers or {}, body, options or {})

    @classmethod
    def delete(
        cls,
        url: str,
        body: str | None = None,
        headers: HeaderInput | None = None,
        options: Mapping[str, Any] | None = None,
    ) -> "Request":
        return cls(HTTP_METHOD.DELETE, url, headers or {}, body, options or {})

    def with_header(self, name: str, value: str) -> "Request":
        if isinstance(self.headers, Mapping):
            headers: HeaderInput = {**self.headers, name: value}
        else:
            headers = [*self.headers, (name, value)]
        return replace(self, headers=headers)

    def with_body(self, body: str) -> "Request":
        return replace(self, body=body)

    def with_option(self, key: str, value: Any) -> "Request":
        return replace(self, options={**self.options, key: value})

    def to_dict(self) -> dict[str, Any]:
        headers = dict(self.headers) if isinstance(self.headers, Mapping) else list(self.headers)
        return {
            "method": self.method,
            "url": self.url,
            "headers": headers,
            "body": self.body,
            "options": dict(self.options),
        }


@dataclass(frozen=True)
class Outcome:
    """Result of one completed request attempt.

    ``error`` is the failure signal: when it is set, ``status`` is not a
    trustworthy HTTP code. A status >= 400 without an error is a normal outcome.
    """

    status: int | None = None
    headers: Mapping[str, str] = field(default_factory=dict)
    body: str = ""
    error: str | None = None
    info: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "headers", MappingProxyType(dict(self.headers)))
        object.__setattr__(self, "info", MappingProxyType(dict(self.info)))

    @classmethod
    def failure(cls, error: str, info: Mapping[str, Any] | None = None) -> "Outcome":
        return cls(status=None, headers={}, body="", error=error, info=info or {})

    def is_success(self) -> bool:
        # Only the status is consulted; an outcome may carry both a 2xx status and an error.
        return self.status is not None and 200 <= self.status < 300

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status,
            "headers": dict(self.headers),
            "body": self.body,
            "error": self.error,
            "info": dict(self.info),
        }


def check_timeout(value: Any) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        raise InvalidConfigError(f"timeout must be a positive number of seconds, got {value!r}")
