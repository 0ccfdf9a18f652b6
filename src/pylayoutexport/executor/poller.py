"""Dual poller racing the error listing against the output listing.

Runs two storage polls concurrently, each with its own cadence, and
reports which one decided the export:

- error poll found a payload → conversion failed
- output poll found a payload → conversion succeeded
- output poll raised (timeout, transport error) → export failed

An error poll that ends without finding anything (timeout, stop) is not
decisive; the race keeps waiting for the output poll.

Design: asyncio.wait with FIRST_COMPLETED
The first decisive completion wins. Both polls share a stop predicate
that turns true the moment the race is decided, and the losing poll task
is cancelled and awaited before race() returns, so it issues no further
checks.
"""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any

from pylayoutexport.models import PollPolicy
from pylayoutexport.storage.base import StorageApi, StoppedSemaphore

logger = logging.getLogger(__name__)

__all__ = ["PollChannel", "PollVerdict", "DualPoller"]


class PollChannel(Enum):
    """Endpoint that decided the race."""

    ERROR = "error"
    OUTPUT = "output"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class PollVerdict:
    """
    Result of a dual poll race.

    Attributes:
        channel: Endpoint whose poll decided the race
        payload: Key found at the endpoint, None if the poll failed
        error: Exception raised by the output poll, None if a payload was found
    """

    channel: PollChannel
    payload: Any = None
    error: BaseException | None = None

    @property
    def found(self) -> bool:
        return self.error is None

    @property
    def is_generation_error(self) -> bool:
        return self.channel is PollChannel.ERROR

    @property
    def is_output(self) -> bool:
        return self.channel is PollChannel.OUTPUT and self.error is None


class DualPoller:
    """Races an error-list poll against an output-list poll.

    Example:
        ```python
        poller = DualPoller(storage, stopped=signal.is_stopped, policy=PollPolicy.STANDARD)
        verdict = await poller.race(config.signed_error_list_url, config.signed_output_list_url)
        if verdict.is_output:
            ...
        ```
    """

    def __init__(
        self,
        storage: StorageApi,
        stopped: StoppedSemaphore | None = None,
        policy: PollPolicy = PollPolicy.STANDARD,
    ):
        """
        Args:
            storage: Transport whose poll() is raced
            stopped: External stop predicate (typically the job's is_stopped)
            policy: Sleep periods of the two polls
        """
        self._storage = storage
        self._external_stopped = stopped or (lambda: False)
        self._policy = policy
        self._decided = False

    def is_stopped(self) -> bool:
        """Stop predicate handed to both polls."""
        return self._decided or self._external_stopped()

    async def race(self, error_list_url: str, output_list_url: str) -> PollVerdict:
        """Poll both endpoints until one decides the export.

        Returns:
            Verdict naming the deciding channel

        Raises:
            asyncio.CancelledError: If the caller is cancelled (both polls
                are cancelled with it)
        """
        self._decided = False
        tasks: dict[asyncio.Task, PollChannel] = {
            asyncio.create_task(
                self._storage.poll(
                    error_list_url,
                    stopped_semaphore=self.is_stopped,
                    sleep_period=self._policy.error_sleep_period_ms,
                ),
                name=f"poll-error:{error_list_url}",
            ): PollChannel.ERROR,
            asyncio.create_task(
                self._storage.poll(
                    output_list_url,
                    stopped_semaphore=self.is_stopped,
                    sleep_period=self._policy.output_sleep_period_ms,
                ),
                name=f"poll-output:{output_list_url}",
            ): PollChannel.OUTPUT,
        }

        try:
            while tasks:
                done, _ = await asyncio.wait(tasks.keys(), return_when=asyncio.FIRST_COMPLETED)

                # Same tick: the error channel is examined first
                for task in sorted(done, key=lambda t: tasks[t] is not PollChannel.ERROR):
                    channel = tasks.pop(task)
                    verdict = self._judge(channel, task)
                    if verdict is not None:
                        self._decided = True
                        logger.debug(f"Poll race decided by {channel}: {verdict}")
                        return verdict

            # The output poll always produces a verdict; reaching this is a bug
            raise RuntimeError("dual poll finished without a verdict")
        finally:
            self._decided = True
            for task in tasks:
                task.cancel()
            for task in tasks:
                try:
                    await task
                except asyncio.CancelledError:
                    pass
                except Exception as e:
                    logger.debug(f"Losing poll {task.get_name()} ended with {e!r}")

    def _judge(self, channel: PollChannel, task: asyncio.Task) -> PollVerdict | None:
        if task.cancelled():
            return None

        error = task.exception()
        if channel is PollChannel.ERROR:
            if error is None:
                return PollVerdict(channel, payload=task.result())
            logger.debug(f"Error poll ended without a marker: {error!r}")
            return None

        if error is None:
            return PollVerdict(channel, payload=task.result())
        return PollVerdict(channel, error=error)
