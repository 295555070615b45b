import json
from typing import Any


def dumps_compact(obj: Any) -> str:
    """
    Strict, compact serialization used to measure stored values.

    Produces the same text a JavaScript ``JSON.stringify`` would for plain
    JSON data, and raises ValueError/TypeError for anything that is not
    plain JSON (NaN, sets, arbitrary objects).
    """
    return json.dumps(obj, separators=(",", ":"), ensure_ascii=False, allow_nan=False)


def serialized_length(obj: Any) -> int:
    """Length in characters of the compact JSON form of ``obj``."""
    return len(dumps_compact(obj))
