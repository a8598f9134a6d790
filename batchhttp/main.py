import argparse
import asyncio
import sys
from typing import Any, Sequence

from loguru import logger

from batchhttp.composition import create_client_dependencies
from batchhttp.config.settings import Settings
from batchhttp.core import SERVICE_NAME
from batchhttp.domain.errors import BatchHttpError
from batchhttp.domain.models import Outcome
from batchhttp.ports.transport import Transport


def _log(event: str, **kwargs: Any) -> None:
    logger.bind(service_name=SERVICE_NAME, event=event, **kwargs).info("")


def _on_complete(url: str, outcome: Outcome) -> None:
    _log(
        "request_completed",
        url=url,
        status=outcome.status,
        error=outcome.error,
        body_length=len(outcome.body),
    )


async def run_batch(
    urls: Sequence[str],
    *,
    concurrency: int | None = None,
    timeout: float | None = None,
    settings: Settings | None = None,
    transport: Transport | None = None,
) -> dict[str, Outcome]:
    """GET every url with the configured client; every completion is logged as it arrives."""
    dependencies = create_client_dependencies(settings, transport)
    await dependencies.connect()

    options: dict[str, Any] = {"callback": _on_complete}
    if concurrency is not None:
        options["concurrency"] = concurrency
    if timeout is not None:
        options["timeout"] = timeout

    try:
        return await dependencies.client.get(urls, **options)
    finally:
        await dependencies.close()


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="batchhttp", description="GET many URLs with bounded concurrency.")
    parser.add_argument("urls", nargs="+", help="URLs to fetch")
    parser.add_argument("--concurrency", type=int, default=None, help="max requests in flight")
    parser.add_argument("--timeout", type=float, default=None, help="per-request timeout in seconds")
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)
    try:
        results = asyncio.run(run_batch(args.urls, concurrency=args.concurrency, timeout=args.timeout))
    except KeyboardInterrupt:
        _log("batch_interrupted")
        return 130
    except BatchHttpError as e:
        logger.error("invalid batch: {}", e)
        return 2

    failed = [url for url, outcome in results.items() if outcome.error is not None]
    _log("batch_summary", total=len(results), failed=len(failed))
    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())
