"""
Executor module - Runtime engine for exports.

This module contains the execution components:
- controller: Export workflow orchestration (ExportController, ExportJob)
- outcome: WorkflowOutcome union (Success/Failure)
- signal: Settle-once completion signal with progress channel
- poller: Error/output dual poll race
"""

from pylayoutexport.executor.controller import ExportController, ExportJob
from pylayoutexport.executor.outcome import (
    Failure,
    Success,
    WorkflowOutcome,
    is_failure,
    is_success,
)
from pylayoutexport.executor.poller import DualPoller, PollChannel, PollVerdict
from pylayoutexport.executor.signal import CompletionSignal, ProgressListener

__all__ = [
    # Controller
    "ExportController",
    "ExportJob",
    # WorkflowOutcome union
    "Success",
    "Failure",
    "WorkflowOutcome",
    "is_success",
    "is_failure",
    # Coordination
    "CompletionSignal",
    "ProgressListener",
    "DualPoller",
    "PollChannel",
    "PollVerdict",
]
