"""
Result decorators for successful exports.

A decorator enriches a successful export result with derived convenience
fields: social share links, mail links, embed markup. Decorators never
change whether an export succeeded.

Design: Pure additive transforms
Each decorator receives a read-only snapshot of the result and returns
the keys it wants to add. apply_decorators() merges those keys over the
result without touching keys that are already present, so decorators
cannot remove or overwrite earlier data and applying a chain twice is
the same as applying it once.

Example:
    ```python
    processor = build_decorated_result_processor(
        json_result_processor,
        [twitter_intent_result_decorator, embed_result_decorator],
    )
    registry.register("publish", layout_exporter, processor)
    ```
"""

import inspect
import logging
from collections.abc import Awaitable, Callable, Iterable, Mapping
from types import MappingProxyType
from typing import Any
from urllib.parse import quote

logger = logging.getLogger(__name__)

Decorator = Callable[[Mapping[str, Any]], Mapping[str, Any]]
ResultProcessor = Callable[[dict[str, Any]], Awaitable[Mapping[str, Any]]]

__all__ = [
    "Decorator",
    "ResultProcessor",
    "apply_decorators",
    "build_decorated_result_processor",
    "encode_uri_component",
    "twitter_intent_result_decorator",
    "facebook_result_decorator",
    "google_plus_result_decorator",
    "linkedin_result_decorator",
    "tumblr_result_decorator",
    "pinterest_result_decorator",
    "embed_result_decorator",
    "gmail_result_decorator",
    "email_result_decorator",
    "gmail_zip_result_decorator",
    "email_zip_result_decorator",
    "email_output_url_decorator",
    "gmail_output_url_result_decorator",
    "LAYOUT_EXPORT_DECORATORS",
    "SEND_EXPORT_DECORATORS",
]

FACEBOOK_APP_ID = "621299297886954"
GMAIL_COMPOSE_URL = "https://mail.google.com/mail/u/0/?view=cm&ui=2&cmid=0&fs=1&tf=1&body="


def encode_uri_component(value: Any) -> str:
    """Percent-encode a value the way browsers encode URI components.

    Leaves the characters ``A-Z a-z 0-9 - _ . ! ~ * ' ( )`` untouched and
    encodes everything else as UTF-8 escapes.
    """
    return quote(str(value), safe="!~*'()")


def apply_decorators(
    result: Mapping[str, Any], decorators: Iterable[Decorator]
) -> dict[str, Any]:
    """
    Apply decorators to a result in order.

    Each decorator sees a read-only snapshot that includes the keys added
    by the decorators before it. Keys it returns are added only if the
    result does not already have them.

    A decorator that raises, or returns something other than a mapping,
    is logged and skipped; the remaining
    decorators still run and the result keeps every key added so far.

    Args:
        result: Successful, post-processed export result
        decorators: Decorators in registration order

    Returns:
        New dict with the decorated keys added

    Example:
        ```python
        decorated = apply_decorators(
            {"export": {"title": "T"}, "index-html": "http://x"},
            [twitter_intent_result_decorator],
        )
        decorated["twitter-url"]
        ```
    """
    decorated = dict(result)
    for decorator in decorators:
        name = getattr(decorator, "__name__", repr(decorator))
        try:
            added = decorator(MappingProxyType(decorated))
        except Exception as e:
            logger.warning(f"Result decorator {name} failed, skipping: {e!r}")
            continue

        if added is None:
            continue
        if not isinstance(added, Mapping):
            logger.warning(
                f"Result decorator {name} returned {type(added).__name__}, not a mapping, skipping"
            )
            continue

        for key, value in added.items():
            if key in decorated:
                logger.debug(f"Result decorator {name} tried to overwrite {key!r}, ignored")
                continue
            decorated[key] = value
    return decorated


def build_decorated_result_processor(
    result_processor: ResultProcessor, decorators: Iterable[Decorator]
) -> ResultProcessor:
    """
    Wrap a result processor so its results are decorated.

    The returned processor has the same contract as the wrapped one: it
    resolves with the decorated result, and an exception raised by the
    wrapped processor propagates unchanged (decorators do not run).

    Args:
        result_processor: Async (or plain) function taking the export config
        decorators: Decorators applied in order to the processed result

    Returns:
        Async result processor
    """
    chain = tuple(decorators)

    async def decorated_processor(export_config: dict[str, Any]) -> dict[str, Any]:
        result = result_processor(export_config)
        if inspect.isawaitable(result):
            result = await result
        return apply_decorators(result, chain)

    decorated_processor.__name__ = f"decorated_{getattr(result_processor, '__name__', 'processor')}"
    return decorated_processor


# =============================================================================
# Layout export decorators
# =============================================================================


def twitter_intent_result_decorator(result: Mapping[str, Any]) -> dict[str, str]:
    return {
        "twitter-url": "https://twitter.com/intent/tweet?text="
        + encode_uri_component(result["export"]["title"])
        + "&url="
        + encode_uri_component(result["index-html"])
        + "&source=mindmup.com&related=mindmup&via=mindmup"
    }


def facebook_result_decorator(result: Mapping[str, Any]) -> dict[str, str]:
    return {
        "facebook-url": "https://www.facebook.com/dialog/share_open_graph?"
        + f"app_id={FACEBOOK_APP_ID}"
        + "&display=popup"
        + "&action_type=og.likes"
        + "&action_properties=%7B%22object%22%3A%22"
        + encode_uri_component(result["index-html"])
        + "%22%7D"
        + "&redirect_uri="
        + encode_uri_component("http://www.mindmup.com/fb")
    }


def google_plus_result_decorator(result: Mapping[str, Any]) -> dict[str, str]:
    return {
        "google-plus-url": "https://plus.google.com/share?url="
        + encode_uri_component(result["index-html"])
    }


def linkedin_result_decorator(result: Mapping[str, Any]) -> dict[str, str]:
    return {
        "linkedin-url": "http://www.linkedin.com/shareArticle?mini=true"
        + "&url="
        + encode_uri_component(result["index-html"])
        + "&title="
        + encode_uri_component(result["export"]["title"])
        + "&summary="
        + encode_uri_component(result["export"]["description"])
        + "&source=MindMup"
    }


def tumblr_result_decorator(result: Mapping[str, Any]) -> dict[str, str]:
    return {
        "tumblr-url": "http://www.tumblr.com/share/link?url="
        + encode_uri_component(result["index-html"])
        + "&name="
        + encode_uri_component(result["export"]["title"])
        + "&description="
        + encode_uri_component(result["export"]["description"])
    }


def pinterest_result_decorator(result: Mapping[str, Any]) -> dict[str, str]:
    return {
        "pinterest-url": "https://pinterest.com/pin/create/button/?media="
        + encode_uri_component(result["thumb-png"])
        + "&url="
        + encode_uri_component(result["index-html"])
        + "&is_video=false&description="
        + encode_uri_component(result["export"]["description"])
    }


def embed_result_decorator(result: Mapping[str, Any]) -> dict[str, str]:
    return {"embed-markup": f'<iframe src="{result["index-html"]}"></iframe>'}


def gmail_result_decorator(result: Mapping[str, Any]) -> dict[str, str]:
    return {
        "gmail-index-html": GMAIL_COMPOSE_URL
        + encode_uri_component(result["export"]["title"] + "\n\n")
        + encode_uri_component(result["index-html"])
    }


def email_result_decorator(result: Mapping[str, Any]) -> dict[str, str]:
    return {
        "email-index-html": "mailto:?subject="
        + encode_uri_component(result["export"]["title"])
        + "&body="
        + encode_uri_component(result["export"]["description"] + ":\r\n\r\n")
        + encode_uri_component(result["index-html"])
    }


def gmail_zip_result_decorator(result: Mapping[str, Any]) -> dict[str, str]:
    return {
        "gmail-archive-zip": GMAIL_COMPOSE_URL
        + encode_uri_component(result["export"]["title"] + "\n\n")
        + encode_uri_component(result["archive-zip"])
    }


def email_zip_result_decorator(result: Mapping[str, Any]) -> dict[str, str]:
    return {
        "email-archive-zip": "mailto:?subject="
        + encode_uri_component(result["export"]["title"])
        + "&body="
        + encode_uri_component(result["export"]["description"] + ":\r\n\r\n")
        + encode_uri_component(result["archive-zip"])
    }


# =============================================================================
# Send export decorators (links to a temporary signed output URL)
# =============================================================================


def email_output_url_decorator(result: Mapping[str, Any]) -> dict[str, str]:
    return {
        "email-output-url": "mailto:?&body="
        + encode_uri_component(result["output-url"] + "\n\nThe link will be valid for 24 hours")
    }


def gmail_output_url_result_decorator(result: Mapping[str, Any]) -> dict[str, str]:
    return {
        "gmail-output-url": GMAIL_COMPOSE_URL
        + encode_uri_component(result["output-url"] + "\n\n the link will be valid for 24 hours")
    }


LAYOUT_EXPORT_DECORATORS: tuple[Decorator, ...] = (
    twitter_intent_result_decorator,
    facebook_result_decorator,
    google_plus_result_decorator,
    linkedin_result_decorator,
    tumblr_result_decorator,
    pinterest_result_decorator,
    embed_result_decorator,
    gmail_result_decorator,
    email_result_decorator,
    gmail_zip_result_decorator,
    email_zip_result_decorator,
)

SEND_EXPORT_DECORATORS: tuple[Decorator, ...] = (
    email_output_url_decorator,
    gmail_output_url_result_decorator,
)
