"""
Result shape normalization.

Driver responses come in a few shapes: a list of documents, a find-and-modify
envelope (``{"value": doc}``), a legacy write-result envelope
(``{"ops": [...]}``) or a single document. ``classify_result`` turns a raw
response into one of a closed set of variants, and ``normalize_result``
turns the variant into model instances.

The detection order is: sequence, ``value`` without ``_id``, ``ops``,
``_id``. A real document may carry its own ``value`` or ``ops`` field, so
the order must not change.
"""

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any, Union

from ..constants import FIND_AND_MODIFY_VALUE_KEY, ID_FIELD, WRITE_RESULT_OPS_KEY


@dataclass(frozen=True)
class Found:
    """A single document."""

    document: Mapping[str, Any]


@dataclass(frozen=True)
class NotFound:
    """A find-and-modify response that matched nothing."""


@dataclass(frozen=True)
class Many:
    """A sequence of documents."""

    documents: list[Mapping[str, Any]] = field(default_factory=list)


@dataclass(frozen=True)
class WriteResult:
    """A write-result envelope; only its affected documents are kept."""

    ops: list[Mapping[str, Any]] = field(default_factory=list)


@dataclass(frozen=True)
class Passthrough:
    """Anything that is not document shaped (counts, acknowledgements, ...)."""

    value: Any = None


DriverResult = Union[Found, NotFound, Many, WriteResult, Passthrough]


def classify_result(result: Any) -> DriverResult:
    """Adapt a raw driver response into a DriverResult variant."""
    if isinstance(result, (list, tuple)):
        if all(isinstance(item, Mapping) for item in result):
            return Many(list(result))
        return Passthrough(result)

    if isinstance(result, Mapping):
        value = result.get(FIND_AND_MODIFY_VALUE_KEY)
        if (
            FIND_AND_MODIFY_VALUE_KEY in result
            and ID_FIELD not in result
            and (value is None or isinstance(value, Mapping))
        ):
            # A scalar "value" is an ordinary field, not a find-and-modify envelope
            return NotFound() if value is None else Found(value)
        if WRITE_RESULT_OPS_KEY in result:
            return WriteResult(list(result[WRITE_RESULT_OPS_KEY]))
        if ID_FIELD in result:
            return Found(result)

    return Passthrough(result)


def normalize_result(
    model_cls: type,
    result: Any,
    error: BaseException | None = None,
) -> tuple[BaseException | None, Any]:
    """
    Convert a driver response into model instances.

    Args:
        model_cls: Class constructed from each document
        result: Raw driver response
        error: Error propagated from the driver call, if any

    Returns:
        ``(error, result)``. When an error is given both are returned
        untouched. A find-and-modify miss yields ``(None, None)``.
    """
    if error:
        return error, result

    variant = classify_result(result)
    if isinstance(variant, Found):
        return None, model_cls(variant.document)
    if isinstance(variant, NotFound):
        return None, None
    if isinstance(variant, Many):
        return None, [model_cls(doc) for doc in variant.documents]
    if isinstance(variant, WriteResult):
        return None, [model_cls(doc) for doc in variant.ops]
    return None, variant.value


def result_factory(
    model_cls: type,
    callback: Callable[..., Any],
    error: BaseException | None,
    result: Any,
    *extra: Any,
) -> Any:
    """
    Error-first callback adapter around normalize_result.

    Calls ``callback(error, normalized_result, *extra)`` and returns what the
    callback returns.
    """
    error, normalized = normalize_result(model_cls, result, error)
    return callback(error, normalized, *extra)
