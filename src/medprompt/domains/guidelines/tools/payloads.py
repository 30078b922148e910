"""Helpers shared by the guideline tools for JSON arguments and responses."""

from __future__ import annotations

import json
from typing import Any


class ArgumentError(ValueError):
    """Raised when a tool argument cannot be parsed."""


def parse_json_object(text: str, name: str) -> dict[str, Any]:
    """Parse a JSON-object tool argument.

    Raises:
        ArgumentError: If ``text`` is not JSON or not an object.
    """
    try:
        data = json.loads(text)
    except (ValueError, RecursionError) as exc:
        raise ArgumentError(f"{name} is not valid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise ArgumentError(f"{name} must be a JSON object")
    return data


def respond(status: str, **fields: Any) -> str:
    return json.dumps({"status": status, **fields}, ensure_ascii=False, indent=2)
