"""
Shaping of caller-supplied key collections before schema validation.

Per-field rules for keys, owners, values and token names live on the
pydantic input schemas.
"""

from typing import Any, Iterable, List, Optional

from ..exceptions import validation_failed


def normalize_keys(keys: Optional[Iterable[Any]]) -> List[Any]:
    """
    Materialize requested keys as a list.

    A bare string is rejected instead of being read as one key per character.

    Raises:
        ConfigStoreError: INVALID_INPUT on field ``keys``
    """
    if keys is None:
        return []
    if isinstance(keys, (str, bytes)):
        raise validation_failed("keys", keys, "Keys must be a collection of keys, not a single string")
    return list(keys)
