"""JSON serialization utilities using orjson.

orjson handles datetimes, dataclasses and most primitives natively; the
default handler covers what MySQL drivers hand back beyond that.
"""

import base64
import datetime
import decimal
from typing import Any

import orjson
from pydantic import BaseModel


def _default_handler(obj: Any) -> Any:
    """
    Custom default handler for types orjson doesn't handle natively.

    Args:
        obj: Object to serialize

    Returns:
        JSON-serializable representation

    Raises:
        TypeError: If object cannot be serialized
    """
    if isinstance(obj, BaseModel):
        return obj.model_dump(mode="json")

    # TIME columns come back as timedelta
    if isinstance(obj, datetime.timedelta):
        return obj.total_seconds()

    if isinstance(obj, decimal.Decimal):
        return str(obj)

    # bytes/bytearray - try UTF-8 decode, fall back to base64
    if isinstance(obj, (bytes, bytearray)):
        try:
            return obj.decode("utf-8")
        except UnicodeDecodeError:
            return base64.b64encode(obj).decode("ascii")

    if isinstance(obj, (set, frozenset)):
        return sorted(obj, key=str)

    raise TypeError(f"Object of type {type(obj)} is not JSON serializable")


def dumps(obj: Any, indent: bool = False) -> str:
    """
    Serialize object to JSON string using orjson.

    Args:
        obj: Object to serialize
        indent: Pretty-print with two-space indentation

    Returns:
        JSON string
    """
    option = orjson.OPT_SORT_KEYS
    if indent:
        option |= orjson.OPT_INDENT_2
    return orjson.dumps(obj, default=_default_handler, option=option).decode("utf-8")
