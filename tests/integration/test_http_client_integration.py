"""
Integration tests for the httpx-backed HttpClient using real HTTP.

Requires network. Run with:
  pytest tests/integration -m integration -v
"""
from __future__ import annotations

import time

import pytest

from batchhttp.config.settings import Settings
from batchhttp.infrastructure.http.factory import create_http_client
from tests.test_data import (
    TEST_URL_DELAY,
    TEST_URL_POST,
    TEST_URL_UNRESOLVABLE,
    TEST_URLS_ERROR_STATUS,
    TEST_URLS_SUCCESS,
)


def _settings() -> Settings:
    return Settings(_env_file=None, timeout_seconds=15, user_agent="batchhttp-test/1.0 (integration tests)")


@pytest.mark.integration
@pytest.mark.asyncio
async def test_success_urls_return_2xx():
    async with create_http_client(_settings()) as client:
        results = await client.get(TEST_URLS_SUCCESS)

    assert set(results) == set(TEST_URLS_SUCCESS)
    for url in TEST_URLS_SUCCESS:
        assert results[url].error is None
        assert results[url].is_success(), url
        assert isinstance(results[url].headers, dict)


@pytest.mark.integration
@pytest.mark.asyncio
async def test_error_statuses_and_unresolvable_host():
    urls = [url for url, _ in TEST_URLS_ERROR_STATUS] + [TEST_URL_UNRESOLVABLE]

    async with create_http_client(_settings()) as client:
        results = await client.get(urls)

    assert len(results) == 3
    for url, expected_status in TEST_URLS_ERROR_STATUS:
        assert results[url].status == expected_status
        assert results[url].error is None
    assert results[TEST_URL_UNRESOLVABLE].error
    assert results[TEST_URL_UNRESOLVABLE].status is None


@pytest.mark.integration
@pytest.mark.asyncio
async def test_post_bodies_reach_server():
    async with create_http_client(_settings()) as client:
        results = await client.post([{"url": TEST_URL_POST, "body": "Hello from batchhttp"}])

    assert results[TEST_URL_POST].status == 200
    assert "Hello from batchhttp" in results[TEST_URL_POST].body


@pytest.mark.integration
@pytest.mark.asyncio
async def test_concurrency_ceiling_bounds_wall_time():
    """Six one-second requests with a ceiling of three need at least two rounds."""
    delayed = [f"{TEST_URL_DELAY}?n={i}" for i in range(6)]

    async with create_http_client(_settings()) as client:
        started = time.perf_counter()
        results = await client.get(delayed, concurrency=3)
        elapsed = time.perf_counter() - started

    assert len(results) == 6
    assert elapsed > 2
