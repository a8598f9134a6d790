"""Unit tests for the bounded concurrent and sequential executors."""
from __future__ import annotations

import asyncio

import pytest

from batchhttp.application.executors import BoundedConcurrentExecutor, SequentialExecutor, execute_one
from batchhttp.domain.models import Outcome, Request
from batchhttp.domain.options import BatchOptions
from tests.fakes import RecordingTransport, Reply


def _urls(count: int) -> list[str]:
    return [f"http://host/{i}" for i in range(count)]


def test_empty_batch_returns_empty_mapping_without_touching_transport():
    transport = RecordingTransport()
    executor = BoundedConcurrentExecutor(transport)

    results = asyncio.run(executor.run([], BatchOptions()))

    assert results == {}
    assert transport.prepared == []


def test_every_distinct_url_gets_exactly_one_entry():
    urls = _urls(25)
    transport = RecordingTransport({url: Reply(body=url, delay=0.001 * (i % 4)) for i, url in enumerate(urls)})
    executor = BoundedConcurrentExecutor(transport)

    results = asyncio.run(executor.run([Request.get(url) for url in urls], BatchOptions(concurrency=4)))

    assert set(results) == set(urls)
    assert all(results[url].body == url for url in urls)


@pytest.mark.parametrize("concurrency", [1, 2, 3, 7])
def test_in_flight_count_never_exceeds_ceiling(concurrency):
    urls = _urls(20)
    observed: list[int] = []
    transport = RecordingTransport(
        {url: Reply(delay=0.002 * (i % 3 + 1)) for i, url in enumerate(urls)},
        on_perform=lambda prepared: observed.append(transport.active + 1),
    )
    executor = BoundedConcurrentExecutor(transport)

    results = asyncio.run(executor.run([Request.get(url) for url in urls], BatchOptions(concurrency=concurrency)))

    assert len(results) == 20
    assert len(observed) == 20
    assert max(observed) <= concurrency
    assert transport.peak == concurrency


def test_callbacks_fire_in_completion_order_and_match_mapping():
    transport = RecordingTransport(
        {
            "http://slow": Reply(delay=0.06),
            "http://fast": Reply(delay=0.0),
            "http://medium": Reply(delay=0.03),
        }
    )
    seen: list[tuple[str, Outcome]] = []
    options = BatchOptions(concurrency=3, callback=lambda url, outcome: seen.append((url, outcome)))
    executor = BoundedConcurrentExecutor(transport)

    results = asyncio.run(
        executor.run([Request.get("http://slow"), Request.get("http://fast"), Request.get("http://medium")], options)
    )

    assert [url for url, _ in seen] == ["http://fast", "http://medium", "http://slow"]
    assert list(results) == ["http://fast", "http://medium", "http://slow"]
    assert dict(seen) == results


def test_next_request_is_admitted_only_when_a_slot_frees():
    transport = RecordingTransport({"http://a": Reply(delay=0.05), "http://b": Reply(delay=0.01), "http://c": Reply()})
    executor = BoundedConcurrentExecutor(transport)

    asyncio.run(
        executor.run(
            [Request.get("http://a"), Request.get("http://b"), Request.get("http://c")],
            BatchOptions(concurrency=2),
        )
    )

    assert [p.url for p in transport.prepared] == ["http://a", "http://b", "http://c"]
    assert transport.peak == 2


def test_failed_transfer_does_not_abort_siblings():
    transport = RecordingTransport(
        {
            "http://one": Reply(body="1"),
            "http://two": Reply(error="Could not resolve host: two"),
            "http://three": Reply(body="3"),
        }
    )
    executor = BoundedConcurrentExecutor(transport)

    results = asyncio.run(
        executor.run(
            [Request.get("http://one"), Request.get("http://two"), Request.get("http://three")],
            BatchOptions(concurrency=3),
        )
    )

    assert len(results) == 3
    assert results["http://one"].error is None
    assert results["http://three"].error is None
    assert results["http://two"].error == "Could not resolve host: two"
    assert results["http://two"].status is None


def test_exception_raised_by_transport_becomes_failure_outcome():
    transport = RecordingTransport({"http://boom": Reply(raises=RuntimeError("socket exploded"))})

    outcome = asyncio.run(execute_one(transport, Request.get("http://boom"), BatchOptions()))

    assert outcome.status is None
    assert outcome.error == "socket exploded"


def test_duplicate_urls_both_execute_and_mapping_keeps_one():
    transport = RecordingTransport(default=Reply(echo_body=True))
    calls: list[str] = []
    options = BatchOptions(concurrency=2, callback=lambda url, outcome: calls.append(outcome.body))
    executor = BoundedConcurrentExecutor(transport)

    results = asyncio.run(
        executor.run([Request.post("http://dup", "first"), Request.post("http://dup", "second")], options)
    )

    assert len(transport.prepared) == 2
    assert sorted(calls) == ["first", "second"]
    assert list(results) == ["http://dup"]
    assert results["http://dup"].body in ("first", "second")
    assert results["http://dup"].body == calls[-1]


def test_callback_error_propagates_and_cancels_in_flight_transfers():
    transport = RecordingTransport({"http://fast": Reply(), "http://slow": Reply(delay=5)})

    def callback(url: str, outcome: Outcome) -> None:
        raise RuntimeError(f"callback refused {url}")

    executor = BoundedConcurrentExecutor(transport)

    with pytest.raises(RuntimeError, match="callback refused http://fast"):
        asyncio.run(
            executor.run(
                [Request.get("http://fast"), Request.get("http://slow")],
                BatchOptions(concurrency=2, callback=callback),
            )
        )

    assert transport.cancelled == 1
    assert transport.active == 0


def test_sequential_executor_runs_in_submission_order():
    transport = RecordingTransport({"http://slow": Reply(delay=0.02), "http://fast": Reply()})
    seen: list[str] = []
    executor = SequentialExecutor(transport)

    results = asyncio.run(
        executor.run(
            [Request.get("http://slow"), Request.get("http://fast")],
            BatchOptions(callback=lambda url, outcome: seen.append(url)),
        )
    )

    assert seen == ["http://slow", "http://fast"]
    assert list(results) == ["http://slow", "http://fast"]
    assert transport.peak == 1


def test_concurrency_one_matches_sequential_outcomes():
    replies = {
        "http://a": Reply(status=200, body="a", headers={"X": "1"}),
        "http://b": Reply(status=500, body="b"),
        "http://c": Reply(error="Connection refused"),
    }
    requests = [Request.get(url) for url in replies]

    concurrent = asyncio.run(
        BoundedConcurrentExecutor(RecordingTransport(replies)).run(requests, BatchOptions(concurrency=1))
    )
    sequential = asyncio.run(SequentialExecutor(RecordingTransport(replies)).run(requests, BatchOptions()))

    assert list(concurrent) == list(sequential)
    for url in replies:
        assert concurrent[url].status == sequential[url].status
        assert concurrent[url].body == sequential[url].body
        assert concurrent[url].error == sequential[url].error
