"""Writing JSON bodies to responses."""

from __future__ import annotations

import dataclasses
import json
import logging
from typing import Any

from werkzeug.wrappers import Response

logger = logging.getLogger(__name__)

_HTML_ESCAPES = {
    "<": "\\u003c",
    ">": "\\u003e",
    "&": "\\u0026",
    "\u2028": "\\u2028",
    "\u2029": "\\u2029",
}


def _default(value: Any) -> Any:
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def _encode(schema: Any) -> str:
    text = json.dumps(
        schema,
        separators=(",", ":"),
        ensure_ascii=False,
        allow_nan=False,
        default=_default,
    )
    for char, escaped in _HTML_ESCAPES.items():
        text = text.replace(char, escaped)
    return text


def write_json(response: Response, schema: Any, status: int) -> None:
    """Serialise ``schema`` into ``response`` as JSON with the given status.

    If the value cannot be serialised, the response status is set to 500
    and the error is logged.
    """
    try:
        body = _encode(schema)
    except (TypeError, ValueError) as exc:
        response.status_code = 500
        logger.error("%s", exc)
        return
    response.headers["Content-Type"] = "application/json"
    response.status_code = status
    response.set_data(body.encode("utf-8"))