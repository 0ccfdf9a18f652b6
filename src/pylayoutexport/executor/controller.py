"""Export controller - drives the export workflow.

Workflow of one export:

1. Produce content with the format's exporter and merge export properties
2. Ask the configuration generator for an upload identifier, upload
   destination and signed polling URLs
3. Upload the content (private) to the storage transport
4. Race the error listing poll against the output listing poll
5. Run the format's result processor (if any) on the signed output URL

Every export produces exactly one outcome: Success(result, file_id) or
Failure(reason, file_id). Failures after step 2 always carry the file id.

Design: Template Method
_run() fixes the sequence; exporters, processors, decorators and
collaborators are interchangeable strategies passed in from outside.
"""

import asyncio
import inspect
import json
import logging
from collections.abc import AsyncIterator, Generator, Mapping
from functools import partial
from typing import Any

from pylayoutexport.activity.base import ActivityLog, ActivityTimer
from pylayoutexport.activity.logger import LoggingActivityLog
from pylayoutexport.configuration import ConfigurationGenerator
from pylayoutexport.core.errors import EmptyContentError, reason_of
from pylayoutexport.core.registry import ExporterRegistry, ExporterSpec, WithProcessor
from pylayoutexport.core.status import FailureKind, SignalState
from pylayoutexport.executor.outcome import Failure, WorkflowOutcome
from pylayoutexport.executor.poller import DualPoller
from pylayoutexport.executor.signal import CompletionSignal, ProgressListener
from pylayoutexport.models import ExportConfiguration, ExportRequest, PollPolicy
from pylayoutexport.storage.base import StorageApi

logger = logging.getLogger(__name__)

__all__ = ["ExportController", "ExportJob"]

DEFAULT_CATEGORY = "Map"

PROGRESS_SETTING_UP = "Setting up the export"
PROGRESS_UPLOADING = "Uploading "
PROGRESS_PROCESSING = "Processing your export"


class ExportJob:
    """Handle of a running export.

    Awaiting the job returns its WorkflowOutcome. Progress messages are
    available as callbacks or as an async iterator.

    Example:
        ```python
        job = controller.start_export("pdf", {"export": {"page-size": "A4"}})
        job.add_progress_listener(print)
        outcome = await job
        ```
    """

    def __init__(
        self,
        request: ExportRequest,
        signal: CompletionSignal,
        task: asyncio.Task | None = None,
    ):
        self.request = request
        self._signal = signal
        self._task = task

    @property
    def format(self) -> str:
        return self.request.format

    @property
    def state(self) -> SignalState:
        return self._signal.state

    @property
    def file_id(self) -> str | None:
        """Upload identifier, known once the configuration is obtained."""
        return self._signal.file_id

    @property
    def outcome(self) -> WorkflowOutcome | None:
        """Settled outcome, None while running."""
        return self._signal.outcome

    @property
    def messages(self) -> list[str]:
        """Progress messages delivered so far."""
        return self._signal.messages

    def done(self) -> bool:
        return not self._signal.is_pending()

    def add_progress_listener(self, listener: ProgressListener) -> "ExportJob":
        """Register a progress callback (earlier messages are replayed).

        Returns:
            self for method chaining
        """
        self._signal.add_progress_listener(listener)
        return self

    def progress(self) -> AsyncIterator[str]:
        """Iterate over progress messages until the export settles."""
        return self._signal.progress()

    async def result(self) -> WorkflowOutcome:
        """Wait for the outcome."""
        return await self._signal.wait()

    def __await__(self) -> Generator[Any, None, WorkflowOutcome]:
        return self.result().__await__()

    def __repr__(self) -> str:
        return f"ExportJob(format={self.format!r}, state={self.state}, file_id={self.file_id!r})"


class ExportController:
    """Starts exports and coordinates their collaborators.

    All dependencies passed explicitly, no globals.

    Use builder methods to configure the controller:
    - controller.with_poll_policy(policy) to change polling cadence
    - controller.with_category(category) to change the activity category

    Usage:
        registry = ExporterRegistry()
        registry.register("pdf", layout_exporter)

        controller = ExportController(
            registry,
            LocalConfigurationGenerator(),
            InMemoryStorage(),
        ).with_poll_policy(PollPolicy.FAST)

        outcome = await controller.start_export("pdf")
    """

    def __init__(
        self,
        registry: ExporterRegistry,
        configuration_generator: ConfigurationGenerator,
        storage: StorageApi,
        activity_log: ActivityLog | None = None,
    ):
        """Initialize controller.

        Args:
            registry: Exporters and processors by format
            configuration_generator: Issues signed export configurations
            storage: Upload and poll transport
            activity_log: Business activity log (default: LoggingActivityLog)
        """
        self._registry = registry
        self._configuration_generator = configuration_generator
        self._storage = storage
        self._activity_log = activity_log or LoggingActivityLog()
        self._poll_policy = PollPolicy.STANDARD
        self._category = DEFAULT_CATEGORY

        # Track background tasks to prevent garbage collection
        # See: asyncio docs - "Save a reference to avoid task disappearing mid-execution"
        self._background_tasks: set[asyncio.Task] = set()

    def with_poll_policy(self, policy: PollPolicy) -> "ExportController":
        """Set polling cadence (builder pattern).

        Returns:
            self for method chaining
        """
        self._poll_policy = policy
        return self

    def with_category(self, category: str) -> "ExportController":
        """Set the activity log category (builder pattern).

        Default is "Map".

        Returns:
            self for method chaining
        """
        self._category = category
        return self

    @property
    def registry(self) -> ExporterRegistry:
        return self._registry

    @property
    def running_jobs(self) -> int:
        """Number of exports still running in the background."""
        return len(self._background_tasks)

    def start_export(
        self, format: str, export_properties: Mapping[str, Any] | None = None
    ) -> ExportJob:
        """Kick off an export.

        Generates the content with the format's exporter, merges
        export_properties over it, then uploads and polls in a background
        task. Must be called while an event loop is running.

        Args:
            format: One of the registered formats
            export_properties: Generic properties merged over the exported
                content before uploading, and passed to the result processor

        Returns:
            ExportJob; await it for the WorkflowOutcome

        Raises:
            UnknownFormatError: If no exporter is registered for format
        """
        spec = self._registry.get(format)
        request = ExportRequest(format, export_properties or {})
        signal = CompletionSignal()

        exported = spec.exporter()
        if not exported:
            signal.reject(
                Failure(
                    reason=EmptyContentError.default_reason,
                    file_id=None,
                    kind=FailureKind.EMPTY,
                )
            )
            logger.info(f"{request.event_type} rejected: exporter produced no content")
            return ExportJob(request, signal)

        payload = request.payload(exported)

        task = asyncio.create_task(
            self._run(request, spec, payload, signal), name=f"export:{format}"
        )
        self._background_tasks.add(task)
        task.add_done_callback(self._background_tasks.discard)
        task.add_done_callback(partial(self._settle_unfinished, signal, request.event_type))
        return ExportJob(request, signal, task)

    async def export(
        self, format: str, export_properties: Mapping[str, Any] | None = None
    ) -> WorkflowOutcome:
        """Run an export to completion and return its outcome."""
        return await self.start_export(format, export_properties)

    async def _run(
        self,
        request: ExportRequest,
        spec: ExporterSpec,
        payload: dict[str, Any],
        signal: CompletionSignal,
    ) -> None:
        """Drive one export from configuration to outcome."""
        event_type = request.event_type

        self._activity_log.log(self._category, f"{event_type} started")
        signal.notify(PROGRESS_SETTING_UP)

        try:
            config = await self._configuration_generator.generate_export_configuration(
                request.format
            )
        except Exception as e:
            self._reject(signal, event_type, FailureKind.CONFIGURATION, e, file_id=None)
            return

        file_id = config.file_id
        signal.file_id = file_id
        logger.info(f"{event_type} {file_id}: configuration issued")

        try:
            await self._storage.upload(
                json.dumps(payload),
                config.destination,
                is_private=True,
                on_progress=lambda event: signal.notify(f"{PROGRESS_UPLOADING}{event or ''}"),
            )
        except Exception as e:
            self._reject(signal, event_type, FailureKind.UPLOAD, e, file_id)
            return

        await self._poll(request, spec, config, signal)

    async def _poll(
        self,
        request: ExportRequest,
        spec: ExporterSpec,
        config: ExportConfiguration,
        signal: CompletionSignal,
    ) -> None:
        """Race the error and output listings, then post-process."""
        event_type = request.event_type
        file_id = config.file_id

        poll_timer = self._timer(f"{event_type}:polling-completed")
        poll_timeout_timer = self._timer(f"{event_type}:polling-timeout")
        poll_error_timer = self._timer(f"{event_type}:polling-error")

        signal.notify(PROGRESS_PROCESSING)

        poller = DualPoller(self._storage, stopped=signal.is_stopped, policy=self._poll_policy)
        verdict = await poller.race(config.signed_error_list_url, config.signed_output_list_url)

        if verdict.is_generation_error:
            poll_error_timer.end()
            self._reject(
                signal, event_type, FailureKind.GENERATION, None, file_id, reason="generation-error"
            )
            return

        if not verdict.found:
            poll_timeout_timer.end()
            self._reject(signal, event_type, FailureKind.POLL, verdict.error, file_id)
            return

        poll_timer.end()
        self._activity_log.log(self._category, f"{event_type} completed")

        try:
            result = await self._post_process(spec, config.signed_output_url, request)
        except Exception as e:
            self._reject(signal, event_type, FailureKind.POST_PROCESS, e, file_id)
            return

        if signal.resolve(result, file_id):
            logger.info(f"{event_type} {file_id}: completed")

    async def _post_process(
        self, spec: ExporterSpec, output_url: str, request: ExportRequest
    ) -> dict[str, Any]:
        result: dict[str, Any] = {"output-url": output_url}
        if not isinstance(spec, WithProcessor):
            return result

        processed = spec.processor({**result, **request.properties})
        if inspect.isawaitable(processed):
            processed = await processed
        return dict(processed)

    def _reject(
        self,
        signal: CompletionSignal,
        event_type: str,
        kind: FailureKind,
        error: BaseException | None,
        file_id: str | None,
        reason: str | None = None,
    ) -> None:
        if reason is None:
            reason = reason_of(error) if error is not None else kind.value.lower()

        self._activity_log.log(self._category, f"{event_type} failed", reason)
        settled = signal.reject(Failure(reason=reason, file_id=file_id, kind=kind, error=error))
        if settled:
            logger.error(f"{event_type} {file_id or '(no file id)'} failed at {kind}: {reason}")

    def _settle_unfinished(
        self, signal: CompletionSignal, event_type: str, task: asyncio.Task
    ) -> None:
        """Reject a job whose task ended without settling it (cancelled or crashed)."""
        if not signal.is_pending():
            return

        if task.cancelled():
            error = None
            reason = "cancelled"
        else:
            error = task.exception()
            reason = None
            logger.error(f"{event_type} task crashed", exc_info=error)

        kind = FailureKind.POLL if signal.file_id is not None else FailureKind.CONFIGURATION
        self._reject(signal, event_type, kind, error, signal.file_id, reason=reason)

    def _timer(self, event_name: str) -> ActivityTimer:
        return self._activity_log.timer(self._category, event_name)

    async def wait_all(self) -> None:
        """Wait until every running export has settled."""
        while self._background_tasks:
            await asyncio.gather(*list(self._background_tasks), return_exceptions=True)
