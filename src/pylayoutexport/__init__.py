"""
pylayoutexport: asynchronous map layout export workflow

Produces an export, uploads it, waits for a conversion service by racing
an error listing against an output listing, and post-processes the
result.

Design Pattern: Façade Pattern
This module provides a simplified interface to the package, hiding the
wiring of registry, storage, activity log and polling.

Example:
    ```python
    import asyncio
    from pylayoutexport import (
        ExporterRegistry,
        ExportController,
        InMemoryStorage,
        LocalConfigurationGenerator,
        is_success,
    )

    async def main():
        registry = ExporterRegistry()
        registry.register("pdf", lambda: {"nodes": {"1": {"title": "Root"}}})

        controller = ExportController(
            registry, LocalConfigurationGenerator(), InMemoryStorage()
        )

        job = controller.start_export("pdf", {"export": {"page-size": "A4"}})
        async for message in job.progress():
            print(message)

        outcome = await job
        if is_success(outcome):
            print(outcome.result["output-url"])

    asyncio.run(main())
    ```
"""

# Core types
from pylayoutexport.core import (
    ConfigurationError,
    EmptyContentError,
    Exporter,
    ExporterRegistry,
    ExporterSpec,
    ExportError,
    FailureKind,
    GenerationError,
    PollStoppedError,
    PollTimeoutError,
    PostProcessError,
    SignalState,
    Simple,
    StorageError,
    UnknownFormatError,
    UploadError,
    WithProcessor,
)

# Models
from pylayoutexport.models import (
    PDF_ORIENTATIONS,
    PDF_PAGE_SIZES,
    ExportConfiguration,
    ExportRequest,
    PollPolicy,
    UploadDestination,
)

# Collaborators (Adapter pattern)
from pylayoutexport.activity import ActivityLog, InMemoryActivityLog, LoggingActivityLog
from pylayoutexport.configuration import ConfigurationGenerator, LocalConfigurationGenerator
from pylayoutexport.storage import InMemoryStorage, StorageApi

# Decorators, exporters and processors
from pylayoutexport.decorators import (
    LAYOUT_EXPORT_DECORATORS,
    SEND_EXPORT_DECORATORS,
    apply_decorators,
    build_decorated_result_processor,
)
from pylayoutexport.exporters import build_map_layout_exporter
from pylayoutexport.processors import json_result_processor

# Execution
from pylayoutexport.executor import (
    CompletionSignal,
    ExportController,
    ExportJob,
    Failure,
    Success,
    WorkflowOutcome,
    is_failure,
    is_success,
)

# Version
__version__ = "0.1.0"

__all__ = [
    # Core types
    "SignalState",
    "FailureKind",
    "Exporter",
    "ExporterRegistry",
    "ExporterSpec",
    "Simple",
    "WithProcessor",

    # Errors
    "ExportError",
    "EmptyContentError",
    "ConfigurationError",
    "UploadError",
    "GenerationError",
    "PollTimeoutError",
    "PollStoppedError",
    "PostProcessError",
    "StorageError",
    "UnknownFormatError",

    # Models
    "ExportRequest",
    "ExportConfiguration",
    "UploadDestination",
    "PollPolicy",
    "PDF_ORIENTATIONS",
    "PDF_PAGE_SIZES",

    # Collaborators
    "ActivityLog",
    "LoggingActivityLog",
    "InMemoryActivityLog",
    "ConfigurationGenerator",
    "LocalConfigurationGenerator",
    "StorageApi",
    "InMemoryStorage",

    # Decorators, exporters and processors
    "apply_decorators",
    "build_decorated_result_processor",
    "LAYOUT_EXPORT_DECORATORS",
    "SEND_EXPORT_DECORATORS",
    "build_map_layout_exporter",
    "json_result_processor",

    # Execution
    "ExportController",
    "ExportJob",
    "CompletionSignal",
    "Success",
    "Failure",
    "WorkflowOutcome",
    "is_success",
    "is_failure",

    # Version
    "__version__",
]
