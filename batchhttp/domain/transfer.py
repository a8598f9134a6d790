"""Transfer preparation and result parsing around the Transport port."""
from __future__ import annotations

from batchhttp.constants import TRANSPORT_OPTION_NAMES
from batchhttp.domain.headers import has_header, merge_headers, parse_header_block
from batchhttp.domain.models import Outcome, Request
from batchhttp.domain.options import BatchOptions
from batchhttp.ports.transport import PreparedRequest, RawResult

DEFAULT_TRANSPORT_ERROR = "transport error"


def prepare_request(request: Request, options: BatchOptions) -> PreparedRequest:
    """Merge batch options with the request's own overrides into a PreparedRequest."""
    timeout = request.options.get("timeout", options.timeout)
    user_agent = request.options.get("user_agent", options.user_agent)

    passthrough = dict(options.transport_options)
    passthrough.update(
        (key, value) for key, value in request.options.items() if key in TRANSPORT_OPTION_NAMES
    )
    follow_redirects = bool(passthrough.pop("follow_redirects", True))

    header_lines = merge_headers(options.headers, request.headers)
    if user_agent and not has_header(header_lines, "User-Agent"):
        header_lines.insert(0, f"User-Agent: {user_agent}")

    return PreparedRequest(
        method=request.method,
        url=request.url,
        header_lines=tuple(header_lines),
        body=request.body,
        timeout=float(timeout),
        follow_redirects=follow_redirects,
        transport_options=passthrough,
    )


def parse_raw_result(raw: RawResult | None) -> Outcome:
    """Turn a RawResult into an Outcome; missing result, missing status or an error means failure."""
    if raw is None:
        return Outcome.failure(DEFAULT_TRANSPORT_ERROR)
    if raw.error or raw.status is None:
        return Outcome.failure(raw.error or DEFAULT_TRANSPORT_ERROR, raw.info)

    head = raw.content[: raw.header_size]
    body = raw.content[raw.header_size :]
    return Outcome(
        status=int(raw.status),
        headers=parse_header_block(head),
        body=body,
        error=None,
        info=dict(raw.info),
    )
