import asyncio

import pytest
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from maps_scraper.core import retry
from maps_scraper.core.config import Settings


def run(coro):
    return asyncio.run(coro)


def test_classify_error():
    assert retry.classify_error(retry.StructuralError("no title")) is retry.ErrorKind.STRUCTURAL
    assert retry.classify_error(PlaywrightError("net::ERR_CONNECTION_REFUSED at https://x")) is retry.ErrorKind.TRANSPORT
    assert retry.classify_error(PlaywrightError("net::ERR_NAME_NOT_RESOLVED")) is retry.ErrorKind.TRANSPORT
    assert retry.classify_error(PlaywrightTimeoutError("Timeout 30000ms exceeded.")) is retry.ErrorKind.TRANSPORT
    assert retry.classify_error(PlaywrightError("Execution context was destroyed")) is retry.ErrorKind.UNCLASSIFIED
    assert retry.classify_error(KeyError("boom")) is retry.ErrorKind.UNCLASSIFIED


def test_policy_from_settings_converts_milliseconds():
    policy = retry.RetryPolicy.from_settings(Settings(retry_limit=5, retry_min_backoff_ms=1500, retry_max_backoff_ms=4000))
    assert policy.retries == 5
    assert policy.min_backoff_s == 1.5
    assert policy.max_backoff_s == 4.0
    assert policy.factor == 2.0


def test_policy_retries_then_succeeds():
    calls = []
    retries = []

    async def operation():
        calls.append(1)
        if len(calls) < 3:
            raise PlaywrightError("net::ERR_CONNECTION_RESET")
        return "ok"

    policy = retry.RetryPolicy(retries=3, min_backoff_s=0, max_backoff_s=0)
    result = run(policy.call(operation, on_retry=lambda exc, attempt, left: retries.append((attempt, left))))

    assert result == "ok"
    assert len(calls) == 3
    assert retries == [(1, 3), (2, 2)]


def test_policy_reraises_after_exhausting_retries():
    calls = []

    async def operation():
        calls.append(1)
        raise retry.StructuralError("no title")

    policy = retry.RetryPolicy(retries=2, min_backoff_s=0, max_backoff_s=0)
    with pytest.raises(retry.StructuralError):
        run(policy.call(operation))

    assert len(calls) == 3


def test_policy_does_not_retry_unclassified_errors():
    calls = []

    async def operation():
        calls.append(1)
        raise ValueError("unexpected")

    policy = retry.RetryPolicy(retries=3, min_backoff_s=0, max_backoff_s=0)
    with pytest.raises(ValueError):
        run(policy.call(operation))

    assert len(calls) == 1


def test_policy_backoff_grows_and_is_capped():
    waits = []

    async def fake_sleep(seconds):
        waits.append(seconds)

    async def operation():
        raise PlaywrightError("net::ERR_TIMED_OUT")

    policy = retry.RetryPolicy(retries=3, min_backoff_s=1, max_backoff_s=3)
    with pytest.raises(PlaywrightError):
        run(policy.call(operation, sleep=fake_sleep))

    assert waits == [1, 2, 3]
