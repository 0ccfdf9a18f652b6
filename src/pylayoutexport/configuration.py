"""Export configuration generators.

A configuration generator authorizes an export and answers with
everything needed to run it: an upload identifier, the upload destination
and the signed URLs to poll. In production this is a license API; the
LocalConfigurationGenerator here issues configurations from URL templates
for self-hosted stores (Redis, in-memory) and tests.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Protocol, runtime_checkable

from uuid_extensions import uuid7

from pylayoutexport.models import ExportConfiguration, UploadDestination

logger = logging.getLogger(__name__)

__all__ = [
    "ConfigurationGenerator",
    "LocalConfigurationGenerator",
    "DEFAULT_URL_TEMPLATES",
]

DEFAULT_URL_TEMPLATES: Mapping[str, str] = {
    "upload_url": "memory://exports/",
    "upload_key": "exports/{file_id}/source.json",
    "output_url": "memory://exports/{file_id}/output.{format}",
    "error_list_url": "exports/{file_id}/errors",
    "output_list_url": "exports/{file_id}/output",
}


@runtime_checkable
class ConfigurationGenerator(Protocol):
    """
    Protocol for services that authorize exports.

    Implementations raise (any exception) when the export is not allowed
    or the service is unavailable; the exception's reason becomes the
    failure reason of the export.
    """

    async def generate_export_configuration(self, format: str) -> ExportConfiguration:
        """Issue a fresh configuration for one export of the given format."""
        ...


class LocalConfigurationGenerator:
    """Configuration generator driven by URL templates.

    Templates may use ``{file_id}`` and ``{format}``. Every call issues a
    new time-ordered uuid7 file id.

    Example:
        ```python
        generator = LocalConfigurationGenerator(
            output_url="https://cdn.example.com/{file_id}.{format}",
        )
        config = await generator.generate_export_configuration("pdf")
        ```
    """

    def __init__(
        self,
        id_factory: Callable[[], str] | None = None,
        **templates: str,
    ):
        """
        Args:
            id_factory: Produces file ids (default: uuid7 strings)
            **templates: Overrides for DEFAULT_URL_TEMPLATES entries

        Raises:
            ValueError: If an unknown template name is given
        """
        unknown = set(templates) - set(DEFAULT_URL_TEMPLATES)
        if unknown:
            raise ValueError(f"Unknown URL templates: {sorted(unknown)}")

        self._id_factory = id_factory or (lambda: str(uuid7()))
        self._templates = {**DEFAULT_URL_TEMPLATES, **templates}

    def _render(self, name: str, file_id: str, format: str) -> str:
        return self._templates[name].format(file_id=file_id, format=format)

    async def generate_export_configuration(self, format: str) -> ExportConfiguration:
        """Issue a configuration with a new file id."""
        file_id = self._id_factory()
        logger.debug(f"Issued export configuration {file_id} for format {format!r}")
        return ExportConfiguration(
            file_id=file_id,
            destination=UploadDestination(
                url=self._render("upload_url", file_id, format),
                key=self._render("upload_key", file_id, format),
            ),
            signed_output_url=self._render("output_url", file_id, format),
            signed_error_list_url=self._render("error_list_url", file_id, format),
            signed_output_list_url=self._render("output_list_url", file_id, format),
        )
