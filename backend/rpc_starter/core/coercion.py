"""REST Input Coercion — explicit string → scalar conversion for path/query values.

Invariants:
    - Applied only to values that arrived as URL strings (REST path + query)
    - Only top-level fields annotated bool/int/float (optionally Optional) are touched
    - A string that does not convert cleanly is passed through unchanged, so the
      schema reports the mismatch instead of this module guessing
    - Pure: returns a new dict, never mutates its input

Design Decisions:
    - Runs before strict validation: strictness lives in one place (pydantic),
      leniency for URL strings lives here and is visible
    - bool accepts only "true"/"false" (any case): "1"/"yes" stay strings
"""

import math
import re
import types
from collections.abc import Mapping
from typing import Any, Union, get_args, get_origin

from pydantic import BaseModel

_INT_RE = re.compile(r"^[+-]?\d+$")


def coerce_url_values(
    values: Mapping[str, str], schema: type[BaseModel] | None,
) -> dict[str, Any]:
    """Coerce URL string values to the scalar types the input model declares."""
    if schema is None:
        return dict(values)
    fields = schema.model_fields
    coerced: dict[str, Any] = {}
    for key, raw in values.items():
        target = _field_for(fields, key)
        coerced[key] = _coerce(raw, _scalar_type(target.annotation)) if target else raw
    return coerced


def _field_for(fields: dict, key: str):
    if key in fields:
        return fields[key]
    for info in fields.values():
        if info.alias == key:
            return info
    return None


def _scalar_type(annotation: Any) -> type | None:
    origin = get_origin(annotation)
    if origin is Union or origin is types.UnionType:
        args = [a for a in get_args(annotation) if a is not type(None)]
        if len(args) != 1:
            return None
        annotation = args[0]
    if annotation in (bool, int, float):
        return annotation
    return None


def _coerce(raw: Any, target: type | None) -> Any:
    if target is None or not isinstance(raw, str):
        return raw
    text = raw.strip()
    if target is bool:
        lowered = text.lower()
        if lowered in ("true", "false"):
            return lowered == "true"
        return raw
    if target is int:
        return int(text) if _INT_RE.match(text) else raw
    try:
        number = float(text)
    except ValueError:
        return raw
    if not math.isfinite(number):
        return raw
    return int(number) if _INT_RE.match(text) else number
