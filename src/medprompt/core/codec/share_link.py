"""JSON and share-link codec for ``AppConfig``.

A share link carries the whole configuration in one query parameter ``c``:
``base64(percent_encode(json))``. Percent-encoding uses the unreserved set of
JavaScript's ``encodeURIComponent`` and base64 uses the standard padded
alphabet, so links round-trip with the browser version of the tool.

Every function here returns a sentinel (``None`` or ``""``) instead of raising.
"""

from __future__ import annotations

import base64
import json
import logging
from urllib.parse import parse_qs, quote, unquote, urlsplit, urlunsplit

from medprompt.core.template.models import AppConfig

logger = logging.getLogger(__name__)

MAX_SHARE_URL_LENGTH = 2000
SHARE_QUERY_PARAM = "c"
DEFAULT_SHARE_BASE_URL = "http://localhost:3000/"

# Characters encodeURIComponent leaves alone, besides ASCII letters and digits.
_URI_COMPONENT_SAFE = "-_.!~*'()"

# Presence of this key is the minimal shape check for a parsed config.
_SHAPE_MARKER = "activeTab"


def config_to_json(config: AppConfig) -> str:
    """Pretty-printed JSON with camelCase keys."""
    return json.dumps(config.to_dict(), ensure_ascii=False, indent=2)


def parse_config_json(text: str) -> AppConfig | None:
    """Parse config JSON; ``None`` on malformed text or a missing shape marker.

    No deep validation happens here (see ``medprompt.core.template.schemas``);
    fields that are missing or of the wrong type take their defaults.
    """
    try:
        data = json.loads(text)
    except (TypeError, ValueError, RecursionError):
        return None
    if not isinstance(data, dict) or _SHAPE_MARKER not in data:
        return None
    return AppConfig.from_dict(data)


def _base_of(url: str) -> str:
    parts = urlsplit(url)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, "", ""))


def encode_config_to_url(config: AppConfig, base_url: str = DEFAULT_SHARE_BASE_URL) -> str:
    """Share link for ``config`` on ``base_url``; ``""`` if encoding fails.

    The query string and fragment of ``base_url`` are dropped. An oversized
    link is still returned; see ``is_share_link_too_long``.
    """
    try:
        payload = json.dumps(config.to_dict(), ensure_ascii=False, separators=(",", ":"))
        percent_encoded = quote(payload, safe=_URI_COMPONENT_SAFE)
        encoded = base64.b64encode(percent_encoded.encode("ascii")).decode("ascii")
        return f"{_base_of(base_url)}?{SHARE_QUERY_PARAM}={encoded}"
    except (TypeError, ValueError):
        logger.exception("Failed to encode share link")
        return ""


def decode_config_from_url(url: str) -> AppConfig | None:
    """Configuration carried by a share link; ``None`` on any failure."""
    try:
        query = urlsplit(url).query
        values = parse_qs(query).get(SHARE_QUERY_PARAM)
        if not values or not values[0]:
            return None
        # A '+' from the base64 alphabet reads back as a space after query parsing.
        encoded = values[0].replace(" ", "+")
        percent_encoded = base64.b64decode(encoded, validate=True).decode("ascii")
        payload = unquote(percent_encoded, errors="strict")
    except (TypeError, ValueError) as exc:
        logger.debug("Share link rejected: %s", exc)
        return None
    return parse_config_json(payload)


def is_share_link_too_long(config: AppConfig, base_url: str = DEFAULT_SHARE_BASE_URL) -> bool:
    return len(encode_config_to_url(config, base_url)) > MAX_SHARE_URL_LENGTH
