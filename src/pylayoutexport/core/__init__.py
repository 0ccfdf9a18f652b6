"""
Core types for the export workflow.

This module contains the fundamental types used throughout pylayoutexport:
- SignalState: Settlement state of an export job
- FailureKind: Workflow stage that produced a failure
- ExportError and subclasses: Error taxonomy with reason codes
- ExporterRegistry, ExporterSpec: Format → exporter/processor mapping
"""

from pylayoutexport.core.errors import (
    ConfigurationError,
    EmptyContentError,
    ExportError,
    GenerationError,
    PollStoppedError,
    PollTimeoutError,
    PostProcessError,
    StorageError,
    UnknownFormatError,
    UploadError,
    reason_of,
)
from pylayoutexport.core.registry import (
    Exporter,
    ExporterRegistry,
    ExporterSpec,
    Simple,
    WithProcessor,
    passthrough_processor,
)
from pylayoutexport.core.status import FailureKind, SignalState

__all__ = [
    "SignalState",
    "FailureKind",
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
    "reason_of",
    "Exporter",
    "ExporterRegistry",
    "ExporterSpec",
    "Simple",
    "WithProcessor",
    "passthrough_processor",
]
