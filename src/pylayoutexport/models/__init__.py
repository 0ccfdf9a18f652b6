"""Core data models for the export workflow.

Defines the request, the issued configuration and polling cadence.

Design: Dependency-Free Models
These types have no dependencies on core or storage modules to
prevent circular imports and enable clean layering.
"""

from pylayoutexport.models.configuration import ExportConfiguration, UploadDestination
from pylayoutexport.models.poll_policy import PollPolicy
from pylayoutexport.models.request import PDF_ORIENTATIONS, PDF_PAGE_SIZES, ExportRequest

__all__ = [
    "ExportRequest",
    "ExportConfiguration",
    "UploadDestination",
    "PollPolicy",
    "PDF_ORIENTATIONS",
    "PDF_PAGE_SIZES",
]
