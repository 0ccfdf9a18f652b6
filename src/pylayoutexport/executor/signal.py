"""Completion signal shared by an export job and its pollers.

Provides:
- A settle-once outcome (pending → resolved | rejected)
- A cooperative stop predicate for pollers (is_stopped)
- An advisory progress channel (listeners and async iteration)

Design: Information Hiding (Parnas)
Encapsulates decisions about settlement and notification. Uses an
asyncio.Future for the outcome and an asyncio.Event that is pulsed on
every change so progress readers never poll.
"""

import asyncio
import logging
from collections.abc import AsyncIterator, Callable

from pylayoutexport.core.status import SignalState
from pylayoutexport.executor.outcome import Failure, Success, WorkflowOutcome

logger = logging.getLogger(__name__)

ProgressListener = Callable[[str], object]

__all__ = ["CompletionSignal", "ProgressListener"]


class CompletionSignal:
    """Single observable completion state of an export.

    The first call to settle() (or resolve()/reject()) wins; later calls
    are no-ops that return False. Progress notifications after settlement
    are dropped.

    Must be created while an event loop is running.

    Example:
        ```python
        signal = CompletionSignal()
        signal.notify("Setting up the export")

        # Pollers stop as soon as this turns true
        await storage.poll(url, stopped_semaphore=signal.is_stopped)

        signal.resolve({"output-url": url}, file_id)
        outcome = await signal.wait()
        ```
    """

    def __init__(self):
        self._future: asyncio.Future[WorkflowOutcome] = asyncio.get_running_loop().create_future()
        self._messages: list[str] = []
        self._listeners: list[ProgressListener] = []
        self._changed = asyncio.Event()
        self.file_id: str | None = None

    @property
    def state(self) -> SignalState:
        """Current settlement state."""
        outcome = self.outcome
        if outcome is None:
            return SignalState.PENDING
        if isinstance(outcome, Success):
            return SignalState.RESOLVED
        return SignalState.REJECTED

    @property
    def outcome(self) -> WorkflowOutcome | None:
        """Settled outcome, or None while pending."""
        if not self._future.done():
            return None
        return self._future.result()

    @property
    def messages(self) -> list[str]:
        """Progress messages delivered so far."""
        return list(self._messages)

    def is_pending(self) -> bool:
        return not self._future.done()

    def is_stopped(self) -> bool:
        """Stop predicate handed to pollers: true once settled."""
        return self._future.done()

    # ========================================================================
    # Settlement
    # ========================================================================

    def settle(self, outcome: WorkflowOutcome) -> bool:
        """Settle the signal with an outcome.

        Returns:
            True if this call settled the signal, False if it was already settled
        """
        if self._future.done():
            logger.debug(f"Ignoring late settlement {outcome}, already {self.state}")
            return False
        self._future.set_result(outcome)
        self._pulse()
        return True

    def resolve(self, result, file_id: str) -> bool:
        """Settle with Success(result, file_id)."""
        return self.settle(Success(result=result, file_id=file_id))

    def reject(self, failure: Failure) -> bool:
        """Settle with a Failure."""
        return self.settle(failure)

    async def wait(self) -> WorkflowOutcome:
        """Wait for the outcome.

        Shielded so that cancelling one waiter does not settle the signal.
        """
        return await asyncio.shield(self._future)

    # ========================================================================
    # Progress
    # ========================================================================

    def notify(self, message: str) -> None:
        """Deliver a progress message to listeners and iterators.

        Listener errors are logged and never reach the workflow.
        """
        if self._future.done():
            logger.debug(f"Dropping progress {message!r} after settlement")
            return

        self._messages.append(message)
        for listener in list(self._listeners):
            self._call_listener(listener, message)
        self._pulse()

    def add_progress_listener(self, listener: ProgressListener) -> None:
        """Register a progress callback.

        Messages delivered before registration are replayed immediately.
        """
        for message in self._messages:
            self._call_listener(listener, message)
        self._listeners.append(listener)

    async def progress(self) -> AsyncIterator[str]:
        """Iterate over progress messages until the signal settles.

        Starts from the first message, so late readers see the full history.

        Example:
            ```python
            async for message in signal.progress():
                print(message)
            ```
        """
        index = 0
        while True:
            while index < len(self._messages):
                yield self._messages[index]
                index += 1
            if self._future.done():
                return
            changed = self._changed
            await changed.wait()

    def _pulse(self) -> None:
        # Wake everyone waiting on the current event, then arm a fresh one
        changed = self._changed
        self._changed = asyncio.Event()
        changed.set()

    def _call_listener(self, listener: ProgressListener, message: str) -> None:
        try:
            listener(message)
        except Exception as e:
            logger.warning(f"Progress listener failed for {message!r}: {e!r}")

    def __repr__(self) -> str:
        return f"CompletionSignal(state={self.state}, file_id={self.file_id!r})"
