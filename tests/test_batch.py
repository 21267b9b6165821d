from __future__ import annotations

import asyncio
import threading
import time

import pytest
from conftest import FakeExtractionClient, make_file

from insta_username_app.processing import (
    BatchError,
    ConfigurationError,
    ExtractionError,
    UnknownError,
    classify_error,
    process_batch,
)
from insta_username_app.processing.errors import CONFIGURATION_ERROR_MESSAGE, UNKNOWN_ERROR_MESSAGE


@pytest.mark.anyio
async def test_empty_batch_issues_no_calls(fake_client: FakeExtractionClient) -> None:
    result_set = await process_batch([], fake_client)

    assert len(result_set) == 0
    assert fake_client.calls == []


@pytest.mark.anyio
async def test_results_follow_submission_order_not_completion_order() -> None:
    # The first image finishes last.
    client = FakeExtractionClient(
        outcomes={b"a": ["@alice"], b"b": ["bob", "carol"], b"c": []},
        delays={b"a": 0.3, b"b": 0.1, b"c": 0.0},
    )
    files = [make_file(b"a"), make_file(b"b"), make_file(b"c")]

    result_set = await process_batch(files, client)

    assert [r.file.name for r in result_set.results] == ["a.png", "b.png", "c.png"]
    assert [r.usernames for r in result_set.results] == [["alice"], ["bob", "carol"], []]


@pytest.mark.anyio
async def test_all_calls_run_at_the_same_time() -> None:
    # Each call waits until every call has started; serial execution would break the barrier.
    files = [make_file(str(i).encode()) for i in range(20)]
    client = FakeExtractionClient(barrier=threading.Barrier(len(files), timeout=5))

    result_set = await process_batch(files, client)

    assert len(result_set) == 20
    assert len(client.calls) == 20


@pytest.mark.anyio
async def test_extracted_usernames_are_normalized() -> None:
    client = FakeExtractionClient(outcomes={b"a": [" @alice ", "", "@", "bob"]})

    result_set = await process_batch([make_file(b"a")], client)

    assert result_set.results[0].usernames == ["alice", "bob"]


@pytest.mark.anyio
async def test_any_failure_fails_the_whole_batch() -> None:
    client = FakeExtractionClient(outcomes={
        b"a": ["alice"],
        b"b": ExtractionError("Image processing failed: API error 500"),
        b"c": ["carol"],
    })
    files = [make_file(b"a"), make_file(b"b"), make_file(b"c")]

    with pytest.raises(BatchError) as excinfo:
        await process_batch(files, client)

    assert excinfo.value.message == "Image processing failed: API error 500"
    assert excinfo.value.image_index == 1
    assert isinstance(excinfo.value.cause, ExtractionError)
    # Every call still ran to completion.
    assert len(client.calls) == 3


@pytest.mark.anyio
async def test_lowest_index_failure_is_surfaced() -> None:
    client = FakeExtractionClient(
        outcomes={
            b"a": ExtractionError("Image processing failed: first"),
            b"b": ExtractionError("Image processing failed: second"),
        },
        delays={b"a": 0.2},
    )

    with pytest.raises(BatchError) as excinfo:
        await process_batch([make_file(b"a"), make_file(b"b")], client)

    assert excinfo.value.message == "Image processing failed: first"
    assert excinfo.value.image_index == 0


@pytest.mark.anyio
async def test_credential_failure_on_any_image_is_a_configuration_error() -> None:
    client = FakeExtractionClient(outcomes={
        b"c": ExtractionError("Image processing failed: API key rejected (HTTP 401)"),
    })
    files = [make_file(b"a"), make_file(b"b"), make_file(b"c")]

    with pytest.raises(BatchError) as excinfo:
        await process_batch(files, client)

    assert isinstance(excinfo.value.cause, ConfigurationError)
    assert excinfo.value.message == CONFIGURATION_ERROR_MESSAGE


@pytest.mark.anyio
async def test_unexpected_exception_becomes_unknown_error() -> None:
    client = FakeExtractionClient(outcomes={b"a": RuntimeError("boom")})

    with pytest.raises(BatchError) as excinfo:
        await process_batch([make_file(b"a")], client)

    assert isinstance(excinfo.value.cause, UnknownError)
    assert excinfo.value.message == UNKNOWN_ERROR_MESSAGE


@pytest.mark.parametrize(
    "error, expected_type, expected_message",
    [
        (ExtractionError("Image processing failed: API key not configured"), ConfigurationError, CONFIGURATION_ERROR_MESSAGE),
        (RuntimeError("401 Unauthorized"), ConfigurationError, CONFIGURATION_ERROR_MESSAGE),
        (ConfigurationError(), ConfigurationError, CONFIGURATION_ERROR_MESSAGE),
        (ExtractionError("Image processing failed: request timed out"), ExtractionError,
         "Image processing failed: request timed out"),
        (ValueError("bad"), UnknownError, UNKNOWN_ERROR_MESSAGE),
    ],
)
def test_classify_error(error: Exception, expected_type: type, expected_message: str) -> None:
    classified = classify_error(error)

    assert type(classified) is expected_type
    assert classified.message == expected_message


@pytest.mark.anyio
async def test_cancelled_batch_does_not_wait_for_in_flight_calls() -> None:
    client = FakeExtractionClient(outcomes={b"a": ["alice"]}, delays={b"a": 1.0})
    task = asyncio.create_task(process_batch([make_file(b"a")], client))
    await asyncio.sleep(0.05)

    started = time.monotonic()
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    assert time.monotonic() - started < 0.5
