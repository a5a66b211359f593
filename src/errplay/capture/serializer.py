"""
Depth- and cycle-safe conversion of arbitrary values into JSON-safe values.
"""

import math
import traceback
from enum import Enum
from typing import Any, Optional, Set

MAX_DEPTH = 5
MAX_KEYS = 20

CIRCULAR_MARKER = "[Circular]"
MAX_DEPTH_MARKER = "[Max depth]"


class Shape(str, Enum):
    """Closed set of value shapes the serializer knows how to emit."""

    PRIMITIVE = "primitive"
    ERROR = "error"
    SEQUENCE = "sequence"
    MAPPING = "mapping"
    OPAQUE = "opaque"


def shape_of(value: Any) -> Shape:
    """Classify a value into one of the recognized shapes."""
    if value is None or isinstance(value, (bool, int, float, str)):
        return Shape.PRIMITIVE
    if isinstance(value, BaseException):
        return Shape.ERROR
    if isinstance(value, (list, tuple)):
        return Shape.SEQUENCE
    if isinstance(value, dict):
        return Shape.MAPPING
    return Shape.OPAQUE


def type_tag(value: Any) -> str:
    """Short tag naming a value's runtime type, e.g. ``[function]``."""
    return f"[{type(value).__name__}]"


def _safe_str(value: Any) -> str:
    try:
        return str(value)
    except Exception:
        return type_tag(value)


def format_stack(exc: BaseException) -> Optional[str]:
    """Return the formatted traceback of ``exc``, or None if it was never raised."""
    if exc.__traceback__ is None:
        return None
    try:
        return "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    except Exception:
        return None


def serialize_error(exc: BaseException) -> dict:
    """Tagged record preserving an exception's diagnostic fields."""
    return {
        "kind": "Error",
        "name": type(exc).__name__,
        "message": _safe_str(exc),
        "stack": format_stack(exc),
    }


def serialize(value: Any, _seen: Optional[Set[int]] = None, _depth: int = 0) -> Any:
    """
    Turn ``value`` into something ``json.dumps`` always accepts.

    - Nesting deeper than MAX_DEPTH levels is replaced by MAX_DEPTH_MARKER.
    - An object already visited during this call is replaced by CIRCULAR_MARKER.
    - Exceptions become ``{"kind": "Error", "name", "message", "stack"}``.
    - Lists and tuples are serialized element-wise.
    - Dicts keep only their first MAX_KEYS entries, keys coerced to str.
    - Anything else becomes a type tag such as ``[function]``.

    Never raises.
    """
    if _depth > MAX_DEPTH:
        return MAX_DEPTH_MARKER

    shape = shape_of(value)
    if shape is Shape.PRIMITIVE:
        if isinstance(value, float) and not math.isfinite(value):
            return None
        return value

    if _seen is None:
        _seen = set()
    if id(value) in _seen:
        return CIRCULAR_MARKER
    _seen.add(id(value))

    try:
        if shape is Shape.ERROR:
            return serialize_error(value)
        if shape is Shape.SEQUENCE:
            return [serialize(item, _seen, _depth + 1) for item in value]
        if shape is Shape.MAPPING:
            result = {}
            for index, (key, item) in enumerate(value.items()):
                if index >= MAX_KEYS:
                    break
                result[_safe_str(key)] = serialize(item, _seen, _depth + 1)
            return result
    except Exception:
        # Mutated while iterating or a hostile __str__; fall back to the tag.
        pass
    return type_tag(value)
