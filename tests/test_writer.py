"""Tests for the single-slot progress writer."""
import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from workout_runner.errors import TransportError

from fakes import BlockingGateway, InMemoryGateway, build_workout


async def _wait_until(predicate, timeout=2.0):
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    while not predicate():
        if loop.time() > deadline:
            raise AssertionError("condition not reached in time")
        await asyncio.sleep(0.005)


def _snapshot(completion):
    workout = build_workout([[0, 0]])
    workout.completion_status = completion
    return workout


class TestSubmit:
    @pytest.mark.asyncio
    async def test_successful_save(self, fast_writer_factory):
        gateway = InMemoryGateway()
        writer = fast_writer_factory(gateway)

        error = await writer.submit(_snapshot(50))

        assert error is None
        assert [w.completion_status for w in gateway.saved] == [50]
        assert not writer.has_pending
        assert writer.last_error is None

    @pytest.mark.asyncio
    async def test_snapshot_is_isolated_from_later_edits(self, fast_writer_factory):
        gateway = BlockingGateway()
        writer = fast_writer_factory(gateway)
        workout = _snapshot(50)

        task = asyncio.ensure_future(writer.submit(workout))
        await gateway.started.wait()
        workout.completion_status = 99
        gateway.release.set()
        await task

        assert gateway.saved[0].completion_status == 50

    @pytest.mark.asyncio
    async def test_rapid_changes_coalesce_to_latest(self, fast_writer_factory):
        """Only the newest snapshot waiting behind an in-flight save is sent."""
        gateway = BlockingGateway()
        writer = fast_writer_factory(gateway)

        first = asyncio.ensure_future(writer.submit(_snapshot(25)))
        await gateway.started.wait()

        assert await writer.submit(_snapshot(50)) is None
        assert await writer.submit(_snapshot(75)) is None
        assert writer.has_pending

        gateway.release.set()
        assert await first is None

        assert [w.completion_status for w in gateway.saved] == [25, 75]
        assert gateway.save_calls == 2
        assert not writer.has_pending


class TestRetry:
    @pytest.mark.asyncio
    async def test_failed_save_returns_error_and_retries(self, fast_writer_factory):
        gateway = InMemoryGateway()
        gateway.save_errors = [TransportError("network down")]
        writer = fast_writer_factory(gateway)

        error = await writer.submit(_snapshot(40))

        assert isinstance(error, TransportError)
        assert writer.last_error is error
        assert writer.has_pending
        assert writer.is_retrying

        await _wait_until(lambda: gateway.saved)

        assert gateway.saved[-1].completion_status == 40
        assert not writer.has_pending
        assert writer.last_error is None
        await writer.aclose()

    @pytest.mark.asyncio
    async def test_newer_snapshot_replaces_queued_one(self, fast_writer_factory):
        gateway = InMemoryGateway()
        gateway.save_errors = [TransportError("network down")]
        writer = fast_writer_factory(gateway, min_wait_seconds=10, max_wait_seconds=10)

        await writer.submit(_snapshot(20))
        assert await writer.submit(_snapshot(60)) is None

        assert [w.completion_status for w in gateway.saved] == [60]
        assert not writer.is_retrying
        assert not writer.has_pending

    @pytest.mark.asyncio
    async def test_notify_online_sends_immediately(self, fast_writer_factory):
        gateway = InMemoryGateway()
        gateway.save_errors = [TransportError("network down")]
        writer = fast_writer_factory(gateway, min_wait_seconds=10, max_wait_seconds=10)

        await writer.submit(_snapshot(80))
        assert writer.is_retrying

        assert await writer.notify_online() is None

        assert [w.completion_status for w in gateway.saved] == [80]
        assert not writer.is_retrying

    @pytest.mark.asyncio
    async def test_gives_up_after_max_attempts(self, fast_writer_factory):
        gateway = InMemoryGateway()
        gateway.save_errors = [TransportError("offline") for _ in range(4)]
        on_failure = MagicMock()
        writer = fast_writer_factory(gateway, sleep=AsyncMock(), on_failure=on_failure)

        await writer.submit(_snapshot(10))
        await _wait_until(lambda: on_failure.called)

        # One direct attempt plus three background attempts
        assert gateway.save_calls == 4
        assert isinstance(on_failure.call_args[0][0], TransportError)
        assert writer.has_pending
        assert not writer.is_retrying

    @pytest.mark.asyncio
    async def test_rejected_save_is_not_retried(self, fast_writer_factory):
        gateway = InMemoryGateway()
        gateway.save_errors = [TransportError("invalid payload", status_code=422)]
        writer = fast_writer_factory(gateway, sleep=AsyncMock())

        error = await writer.submit(_snapshot(30))

        assert error.status_code == 422
        assert not writer.is_retrying
        assert writer.has_pending
        assert gateway.save_calls == 1

        # Kept until the next change
        assert await writer.submit(_snapshot(45)) is None
        assert [w.completion_status for w in gateway.saved] == [45]

    @pytest.mark.asyncio
    async def test_aclose_stops_background_retry(self, fast_writer_factory):
        gateway = InMemoryGateway()
        gateway.save_errors = [TransportError("network down")]
        writer = fast_writer_factory(gateway, min_wait_seconds=10, max_wait_seconds=10)

        await writer.submit(_snapshot(70))
        assert writer.is_retrying

        await writer.aclose()

        assert not writer.is_retrying
        assert gateway.save_calls == 1
