"""Exporters producing upload content from a mind map layout."""

import copy
import logging
from collections.abc import Callable, Mapping
from typing import Any

from pylayoutexport.core.registry import Exporter

logger = logging.getLogger(__name__)

LayoutSource = Callable[[], Mapping[str, Any] | None]
ResourceTranslator = Callable[[str], str]

__all__ = ["LayoutSource", "ResourceTranslator", "build_map_layout_exporter"]


def build_map_layout_exporter(
    layout_source: LayoutSource, resource_translator: ResourceTranslator
) -> Exporter:
    """
    Build an exporter returning the current map layout.

    Icon URLs of the layout nodes (``node["attr"]["icon"]["url"]``) are
    passed through resource_translator, so embedded resource references
    become URLs the conversion service can download. The exporter works on
    a deep copy; the layout held by layout_source is never modified.

    Args:
        layout_source: Returns the current layout (``{"nodes": {...}, ...}``)
        resource_translator: Maps an icon URL to a downloadable URL

    Returns:
        Exporter for ExporterRegistry.register()

    Example:
        ```python
        exporter = build_map_layout_exporter(
            map_model.current_layout,
            lambda url: resources.get(url, url),
        )
        registry.register("pdf", exporter)
        ```
    """

    def export_layout() -> dict[str, Any] | None:
        layout = layout_source()
        if not layout:
            return None

        layout = copy.deepcopy(dict(layout))
        nodes = layout.get("nodes") or {}
        node_list = nodes.values() if isinstance(nodes, Mapping) else nodes

        translated = 0
        for node in node_list:
            icon = (node.get("attr") or {}).get("icon") if isinstance(node, dict) else None
            if icon and icon.get("url"):
                icon["url"] = resource_translator(icon["url"])
                translated += 1

        if translated:
            logger.debug(f"Translated {translated} icon URLs in exported layout")
        return layout

    return export_layout
