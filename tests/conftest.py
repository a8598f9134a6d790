from __future__ import annotations

import pytest

from batchhttp.application.dispatcher import HttpClient
from batchhttp.domain.options import BatchOptions
from tests.fakes import RecordingTransport, Reply


@pytest.fixture()
def transport() -> RecordingTransport:
    return RecordingTransport(
        {
            "http://ok": Reply(status=200, body="fine", headers={"Content-Type": "text/plain"}),
            "http://missing": Reply(status=404, body="nope"),
            "http://fail": Reply(error="Could not resolve host: fail"),
        }
    )


@pytest.fixture()
def client(transport: RecordingTransport) -> HttpClient:
    return HttpClient(transport, defaults=BatchOptions(concurrency=2))
