"""Export request value object.

Represents one call to ExportController.start_export: the requested
format and the caller supplied properties merged into the upload.
"""

from __future__ import annotations

import copy
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

__all__ = [
    "ExportRequest",
    "PDF_ORIENTATIONS",
    "PDF_PAGE_SIZES",
]

PDF_ORIENTATIONS = ("portrait", "landscape")
"""Accepted values of ``export.orientation`` for the pdf format."""

PDF_PAGE_SIZES = ("A0", "A1", "A2", "A3", "A4", "A5")
"""Accepted values of ``export.page-size`` for the pdf format."""


@dataclass(frozen=True)
class ExportRequest:
    """Export requested by a caller.

    Design: Value Object
        Immutable once the workflow starts. Properties are deep-copied into a
        read-only mapping so later changes to the caller's dict, nested
        values included, do not leak into a running workflow.

    Example:
        ```python
        request = ExportRequest("pdf", {"export": {"page-size": "A4"}})
        payload = request.payload({"nodes": [...]})
        ```
    """

    format: str
    """Format identifier, a key of the exporter registry."""

    properties: Mapping[str, Any] = field(default_factory=dict)
    """Generic properties merged over the exported content."""

    def __post_init__(self) -> None:
        properties = copy.deepcopy(dict(self.properties or {}))
        object.__setattr__(self, "properties", MappingProxyType(properties))

    @property
    def event_type(self) -> str:
        """Activity event prefix, e.g. "PDF Export"."""
        if not self.format:
            return "Export"
        return f"{self.format.upper()} Export"

    def payload(self, exported: Mapping[str, Any]) -> dict[str, Any]:
        """Shallow merge of exported content and request properties.

        Properties win on key conflicts.

        Example:
            ```python
            ExportRequest("png", {"b": 3, "c": 4}).payload({"a": 1, "b": 2})
            # {"a": 1, "b": 3, "c": 4}
            ```
        """
        return {**exported, **self.properties}
