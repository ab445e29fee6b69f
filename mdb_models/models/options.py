"""
Per-operation option structures.

Each CRUD method takes one of these dataclasses instead of trailing
positional options. ``projection`` and ``sort`` also accept the string forms
understood by ``parse_fields`` / ``parse_sort``. Defaults are documented on
the fields; ``extra`` carries any other keyword the driver accepts
(``collation``, ``hint``, ``session``...) and is merged last.
"""

from dataclasses import dataclass, field
from typing import Any

from pymongo import ReturnDocument

from .adapters import parse_fields, parse_sort


def merge_options(defaults: dict[str, Any], overrides: dict[str, Any] | None) -> dict[str, Any]:
    """
    Apply caller options over defaults.

    Nested dictionaries are merged recursively; every other value in
    ``overrides`` replaces the default. Neither argument is mutated.
    """
    merged = dict(defaults)
    for key, value in (overrides or {}).items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_options(merged[key], value)
        else:
            merged[key] = value
    return merged


def _shape_kwargs(projection: Any, sort: Any) -> dict[str, Any]:
    kwargs: dict[str, Any] = {}
    projection = parse_fields(projection)
    if projection:
        kwargs["projection"] = projection
    sort = parse_sort(sort)
    if sort:
        # pymongo wants a list of (key, direction) pairs
        kwargs["sort"] = list(sort.items()) if isinstance(sort, dict) else sort
    return kwargs


@dataclass
class FindOptions:
    """Options for find / find_one / paged_find windows. ``limit=0`` means no limit."""

    projection: Any = None
    sort: Any = None
    limit: int = 0
    skip: int = 0
    extra: dict[str, Any] = field(default_factory=dict)

    def to_kwargs(self) -> dict[str, Any]:
        kwargs = _shape_kwargs(self.projection, self.sort)
        if self.limit:
            kwargs["limit"] = self.limit
        if self.skip:
            kwargs["skip"] = self.skip
        return merge_options(kwargs, self.extra)


@dataclass
class FindAndModifyOptions:
    """
    Options for find-and-update / find-and-replace.

    ``return_original`` defaults to False so the post-update document is
    returned.
    """

    return_original: bool = False
    projection: Any = None
    sort: Any = None
    upsert: bool = False
    extra: dict[str, Any] = field(default_factory=dict)

    def to_kwargs(self) -> dict[str, Any]:
        kwargs: dict[str, Any] = {
            "return_document": (
                ReturnDocument.BEFORE if self.return_original else ReturnDocument.AFTER
            ),
            "upsert": self.upsert,
        }
        kwargs.update(_shape_kwargs(self.projection, self.sort))
        return merge_options(kwargs, self.extra)


@dataclass
class WriteOptions:
    """Options for update_one / update_many / replace_one."""

    upsert: bool = False
    extra: dict[str, Any] = field(default_factory=dict)

    def to_kwargs(self) -> dict[str, Any]:
        return merge_options({"upsert": self.upsert}, self.extra)


@dataclass
class DeleteOptions:
    """
    Options for delete and find-and-delete operations.

    ``projection`` and ``sort`` only apply to find-and-delete.
    """

    projection: Any = None
    sort: Any = None
    extra: dict[str, Any] = field(default_factory=dict)

    def to_kwargs(self) -> dict[str, Any]:
        return merge_options(_shape_kwargs(self.projection, self.sort), self.extra)
