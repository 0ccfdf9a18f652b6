"""Result processors turning the signed output URL into a result object.

A processor receives the export configuration ``{"output-url": ...,
**export_properties}`` and returns the final result. Register one with
ExporterRegistry.register(format, exporter, processor).
"""

import logging
from typing import Any

import httpx

from pylayoutexport.core.errors import GenerationError

logger = logging.getLogger(__name__)

__all__ = ["json_result_processor"]

DEFAULT_TIMEOUT = 30.0


async def json_result_processor(
    export_config: dict[str, Any], client: httpx.AsyncClient | None = None
) -> dict[str, Any]:
    """
    Download the JSON document at ``output-url`` and merge it over the config.

    Used by formats whose conversion produces an index document (for
    example a published map listing ``index-html``, ``thumb-png`` and
    ``archive-zip``) rather than a single file.

    Args:
        export_config: Export configuration with "output-url"
        client: Shared HTTP client; a short-lived one is used when omitted

    Returns:
        ``{**export_config, **document}``

    Raises:
        GenerationError: If the document could not be fetched or is not a
            JSON object
    """
    url = export_config["output-url"]

    try:
        if client is not None:
            response = await client.get(url)
        else:
            async with httpx.AsyncClient(timeout=DEFAULT_TIMEOUT) as own_client:
                response = await own_client.get(url)
        response.raise_for_status()
        document = response.json()
    except httpx.TimeoutException as e:
        logger.warning(f"Timed out fetching export result {url}")
        raise GenerationError() from e
    except (httpx.HTTPError, ValueError) as e:
        logger.warning(f"Could not fetch export result {url}: {e!r}")
        raise GenerationError() from e

    if not isinstance(document, dict):
        logger.warning(f"Export result at {url} is not a JSON object")
        raise GenerationError()

    return {**export_config, **document}
