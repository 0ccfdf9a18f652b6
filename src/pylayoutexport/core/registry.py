"""Registry mapping export formats to exporters and result processors.

An exporter produces the content uploaded for a format. A result
processor optionally turns the signed output URL into a richer result
(for example by downloading an index document). Registry entries are
resolved once, at registration time, into the ExporterSpec union.

Design: explicit value, no globals
A registry is built at startup and passed to ExportController.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Iterator, Mapping
from dataclasses import dataclass
from typing import Any

from pylayoutexport.core.errors import UnknownFormatError
from pylayoutexport.decorators import (
    Decorator,
    ResultProcessor,
    build_decorated_result_processor,
)

logger = logging.getLogger(__name__)

Exporter = Callable[[], Mapping[str, Any] | None]

__all__ = [
    "Exporter",
    "Simple",
    "WithProcessor",
    "ExporterSpec",
    "ExporterRegistry",
    "passthrough_processor",
]


@dataclass(frozen=True)
class Simple:
    """Exporter with no result processor.

    The export result is exactly ``{"output-url": <signed output url>}``.
    """

    exporter: Exporter

    @property
    def processor(self) -> None:
        return None


@dataclass(frozen=True)
class WithProcessor:
    """Exporter whose result is post-processed.

    The processor is called with ``{"output-url": ...}`` merged with the
    request's export properties. Properties win on key conflicts, so a
    caller property named ``output-url`` replaces the signed URL.
    """

    exporter: Exporter
    processor: ResultProcessor


ExporterSpec = Simple | WithProcessor


async def passthrough_processor(export_config: dict[str, Any]) -> dict[str, Any]:
    """Result processor returning its input unchanged.

    Used as the base processor when decorators are registered for a
    format that has no processor of its own.
    """
    return dict(export_config)


class ExporterRegistry:
    """Registry of export formats.

    Lookups are case-sensitive and fail fast with UnknownFormatError.

    Example:
        ```python
        registry = ExporterRegistry()
        registry.register("png", layout_exporter)
        registry.register("pdf", layout_exporter, json_result_processor)
        registry.register(
            "publish",
            layout_exporter,
            json_result_processor,
            decorators=LAYOUT_EXPORT_DECORATORS,
        )

        spec = registry.get("pdf")
        ```
    """

    def __init__(self):
        """Create a new empty registry."""
        self._specs: dict[str, ExporterSpec] = {}

    @classmethod
    def from_mapping(
        cls, entries: Mapping[str, Exporter | ExporterSpec]
    ) -> ExporterRegistry:
        """Build a registry from ``{format: exporter or spec}``.

        Bare callables become Simple specs.
        """
        registry = cls()
        for format, entry in entries.items():
            registry.register(format, entry)
        return registry

    def register(
        self,
        format: str,
        exporter: Exporter | ExporterSpec,
        processor: ResultProcessor | None = None,
        decorators: Iterable[Decorator] = (),
    ) -> ExporterSpec:
        """Register an exporter for a format.

        Args:
            format: Format identifier (case-sensitive)
            exporter: Content producing function, or a ready ExporterSpec
            processor: Optional result processor
            decorators: Optional decorators applied after the processor

        Returns:
            The resolved ExporterSpec

        Raises:
            TypeError: If exporter is neither callable nor an ExporterSpec
        """
        if isinstance(exporter, Simple | WithProcessor):
            if processor is None:
                processor = exporter.processor
            exporter = exporter.exporter

        if not callable(exporter):
            raise TypeError(f"Exporter for format {format!r} must be callable")

        chain = tuple(decorators)
        if chain:
            processor = build_decorated_result_processor(
                processor or passthrough_processor, chain
            )

        spec: ExporterSpec
        if processor is None:
            spec = Simple(exporter)
        else:
            spec = WithProcessor(exporter, processor)

        if format in self._specs:
            logger.warning(f"Overwriting existing exporter for format {format!r}")
        self._specs[format] = spec
        logger.debug(f"Registered exporter for format {format!r}: {type(spec).__name__}")
        return spec

    def get(self, format: str) -> ExporterSpec:
        """Get the spec registered for a format.

        Raises:
            UnknownFormatError: If nothing is registered for the format
        """
        try:
            return self._specs[format]
        except KeyError:
            raise UnknownFormatError(format) from None

    def formats(self) -> list[str]:
        """Registered format identifiers, in registration order."""
        return list(self._specs)

    def __contains__(self, format: object) -> bool:
        return format in self._specs

    def __iter__(self) -> Iterator[str]:
        return iter(self._specs)

    def __len__(self) -> int:
        """Returns the number of registered formats."""
        return len(self._specs)

    def is_empty(self) -> bool:
        """Returns True if no formats are registered."""
        return len(self._specs) == 0
