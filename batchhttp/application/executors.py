"""Batch executors: bounded concurrent (event-loop multiplexed) and sequential.

Both return ``{url: Outcome}``. Failures are carried inside each Outcome and
never abort sibling requests. The callback runs on the event loop thread, right
after the outcome is recorded and before the next request is admitted.
"""
from __future__ import annotations

import asyncio
from collections import deque
from typing import Any, Sequence

from loguru import logger

from batchhttp.core import SERVICE_NAME
from batchhttp.domain.models import Outcome, Request
from batchhttp.domain.options import BatchOptions
from batchhttp.domain.transfer import parse_raw_result, prepare_request
from batchhttp.ports.transport import RawResult, Transport


def _log(event: str, level: str = "INFO", **kwargs: Any) -> None:
    logger.bind(service_name=SERVICE_NAME, event=event, **kwargs).log(level, "")


async def execute_one(transport: Transport, request: Request, options: BatchOptions) -> Outcome:
    """Prepare, perform and parse a single request. Never raises for transport failures."""
    prepared = prepare_request(request, options)
    try:
        raw = await transport.perform(prepared)
    except Exception as exc:
        raw = RawResult(status=None, error=str(exc) or type(exc).__name__)

    outcome = parse_raw_result(raw)
    if outcome.error is not None:
        _log("transfer_failed", "WARNING", url=request.url, method=request.method, error=outcome.error)
    else:
        _log("transfer_completed", "DEBUG", url=request.url, method=request.method, status=outcome.status)
    return outcome


class SequentialExecutor:
    """Runs requests one at a time, in submission order."""

    name = "sequential"

    def __init__(self, transport: Transport) -> None:
        self._transport = transport

    async def run(self, requests: Sequence[Request], options: BatchOptions) -> dict[str, Outcome]:
        results: dict[str, Outcome] = {}
        for request in requests:
            outcome = await execute_one(self._transport, request, options)
            results[request.url] = outcome
            if options.callback is not None:
                options.callback(request.url, outcome)
        return results


class BoundedConcurrentExecutor:
    """Runs requests with at most ``options.concurrency`` transfers in flight.

    Admission is interleaved with draining: after every readiness wait all
    finished transfers are drained (in the order they finished) and freed slots
    are refilled from the queue. The ceiling therefore holds at every instant,
    not just on average.
    """

    name = "concurrent"

    def __init__(self, transport: Transport) -> None:
        self._transport = transport

    async def run(self, requests: Sequence[Request], options: BatchOptions) -> dict[str, Outcome]:
        total = len(requests)
        results: dict[str, Outcome] = {}
        if total == 0:
            return results

        concurrency = options.concurrency
        # task -> admission index; consulted at drain time
        in_flight: dict[asyncio.Task[Outcome], int] = {}
        finished: deque[asyncio.Task[Outcome]] = deque()
        running = 0
        completed = 0

        try:
            while completed < total:
                while running < concurrency and completed + running < total:
                    index = completed + running
                    task = asyncio.create_task(execute_one(self._transport, requests[index], options))
                    task.add_done_callback(finished.append)
                    in_flight[task] = index
                    running += 1

                await asyncio.wait(set(in_flight), return_when=asyncio.FIRST_COMPLETED)

                while finished:
                    task = finished.popleft()
                    request = requests[in_flight.pop(task)]
                    outcome = task.result()
                    results[request.url] = outcome
                    running -= 1
                    completed += 1
                    if options.callback is not None:
                        options.callback(request.url, outcome)
        finally:
            if in_flight:
                for task in in_flight:
                    task.cancel()
                await asyncio.gather(*in_flight, return_exceptions=True)

        return results
