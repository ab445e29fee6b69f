"""
Field and sort specification parsers.

Turns the compact string form used by callers ("name -password", "-created_at
name") into the projection and sort mappings the driver expects.
"""

from typing import Any

from ..constants import ASCENDING, DESCENDING, EXCLUDE_PREFIX


def _tokens(spec: str) -> list[str]:
    return [token for token in spec.split() if token]


def parse_fields(spec: Any) -> Any:
    """
    Parse a projection string into an inclusion/exclusion mapping.

    ``"one -two three"`` becomes ``{"one": True, "two": False, "three": True}``.
    A repeated field keeps its last occurrence. Non-string input (an already
    structured projection, or None) is returned unchanged.
    """
    if not isinstance(spec, str):
        return spec

    document: dict[str, bool] = {}
    for token in _tokens(spec):
        include = not token.startswith(EXCLUDE_PREFIX)
        document[token if include else token[1:]] = include
    return document


def parse_sort(spec: Any) -> Any:
    """
    Parse a sort string into a field -> direction mapping.

    ``"one -two"`` becomes ``{"one": 1, "two": -1}``. Non-string input is
    returned unchanged.
    """
    if not isinstance(spec, str):
        return spec

    document: dict[str, int] = {}
    for token in _tokens(spec):
        if token.startswith(EXCLUDE_PREFIX):
            document[token[1:]] = DESCENDING
        else:
            document[token] = ASCENDING
    return document
