"""Tests for CompletionSignal: settle-once semantics and the progress channel."""

import asyncio

import pytest

from pylayoutexport.core import FailureKind, SignalState
from pylayoutexport.executor import CompletionSignal, Failure, Success


@pytest.mark.asyncio
async def test_signal_starts_pending():
    signal = CompletionSignal()

    assert signal.state is SignalState.PENDING
    assert signal.outcome is None
    assert signal.is_pending()
    assert not signal.is_stopped()
    assert signal.file_id is None


@pytest.mark.asyncio
async def test_first_settlement_wins():
    signal = CompletionSignal()

    assert signal.resolve({"output-url": "u"}, "F1") is True
    assert signal.reject(Failure("generation-error", "F1")) is False
    assert signal.resolve({"output-url": "other"}, "F1") is False

    assert signal.state is SignalState.RESOLVED
    assert signal.outcome == Success({"output-url": "u"}, "F1")
    assert signal.is_stopped()


@pytest.mark.asyncio
async def test_reject_settles_rejected():
    signal = CompletionSignal()
    failure = Failure("polling-timeout", "F1", FailureKind.POLL)

    signal.reject(failure)

    assert signal.state is SignalState.REJECTED
    assert signal.state.is_settled
    assert await signal.wait() == failure


@pytest.mark.asyncio
async def test_wait_returns_outcome_set_later():
    signal = CompletionSignal()

    async def settle_soon():
        await asyncio.sleep(0.01)
        signal.resolve({"output-url": "u"}, "F1")

    task = asyncio.create_task(settle_soon())
    outcome = await signal.wait()
    await task

    assert outcome.file_id == "F1"


@pytest.mark.asyncio
async def test_cancelling_a_waiter_does_not_settle():
    signal = CompletionSignal()
    waiter = asyncio.create_task(signal.wait())
    await asyncio.sleep(0)

    waiter.cancel()
    with pytest.raises(asyncio.CancelledError):
        await waiter

    assert signal.is_pending()
    assert signal.resolve({"output-url": "u"}, "F1")


@pytest.mark.asyncio
async def test_notifications_after_settlement_are_dropped():
    signal = CompletionSignal()
    received = []
    signal.add_progress_listener(received.append)

    signal.notify("Setting up the export")
    signal.reject(Failure("empty", None, FailureKind.EMPTY))
    signal.notify("Processing your export")

    assert received == ["Setting up the export"]
    assert signal.messages == ["Setting up the export"]


@pytest.mark.asyncio
async def test_late_listener_gets_history_replayed():
    signal = CompletionSignal()
    signal.notify("one")
    signal.notify("two")
    received = []

    signal.add_progress_listener(received.append)
    signal.notify("three")

    assert received == ["one", "two", "three"]


@pytest.mark.asyncio
async def test_listener_error_is_contained(caplog):
    signal = CompletionSignal()
    received = []

    def broken(message):
        raise ValueError("bad listener")

    signal.add_progress_listener(broken)
    signal.add_progress_listener(received.append)
    signal.notify("Uploading 10%")

    assert received == ["Uploading 10%"]
    assert "Progress listener failed" in caplog.text


@pytest.mark.asyncio
async def test_progress_iterator_follows_live_messages():
    signal = CompletionSignal()

    async def drive():
        for message in ("Setting up the export", "Uploading 50%", "Processing your export"):
            await asyncio.sleep(0.005)
            signal.notify(message)
        signal.resolve({"output-url": "u"}, "F1")

    task = asyncio.create_task(drive())
    messages = [message async for message in signal.progress()]
    await task

    assert messages == ["Setting up the export", "Uploading 50%", "Processing your export"]


@pytest.mark.concurrency
@pytest.mark.asyncio
async def test_multiple_progress_readers_see_everything():
    signal = CompletionSignal()

    async def read():
        return [message async for message in signal.progress()]

    readers = [asyncio.create_task(read()) for _ in range(3)]
    await asyncio.sleep(0)
    signal.notify("a")
    await asyncio.sleep(0)
    signal.notify("b")
    signal.notify("c")
    signal.resolve({"output-url": "u"}, "F1")

    results = await asyncio.gather(*readers)

    assert results == [["a", "b", "c"]] * 3
