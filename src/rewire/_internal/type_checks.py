from __future__ import annotations

import builtins
import datetime
import decimal
import enum
import inspect
import pathlib
import types
import uuid
from typing import Annotated, Any, TypeGuard, Union, get_args, get_origin

from typing_extensions import is_protocol

# Classes that carry values rather than behavior. Parameters annotated with
# them are looked up as scalars by name instead of being built.
SCALAR_BASE_TYPES: tuple[type[Any], ...] = (
    pathlib.PurePath,
    datetime.datetime,
    datetime.date,
    datetime.time,
    datetime.timedelta,
    uuid.UUID,
    decimal.Decimal,
    enum.Enum,
)

_UNION_ORIGINS: tuple[Any, ...] = (Union, types.UnionType)


def is_runtime_class(candidate: object) -> TypeGuard[type[Any]]:
    """Return true when candidate is a runtime class safe for class-only operations.

    Args:
        candidate: Value being checked for eligibility or runtime type constraints.

    """
    return isinstance(candidate, type) and not isinstance(candidate, types.GenericAlias)


def strip_annotated(annotation: Any) -> Any:
    """Return the inner type of ``Annotated[T, ...]``, or the annotation unchanged."""
    while get_origin(annotation) is Annotated:
        annotation = get_args(annotation)[0]
    return annotation


def is_union_annotation(annotation: Any) -> bool:
    return get_origin(annotation) in _UNION_ORIGINS


def is_scalar_annotation(annotation: Any) -> bool:
    """Return true when a parameter annotation names a builtin or value type.

    ``None`` and ``Any`` count as "no declared type". Parametrized builtin
    generics such as ``list[int]`` are scalars because their origin lives in
    ``builtins``.
    """
    if annotation is None or annotation is Any or annotation is inspect.Parameter.empty:
        return True

    origin = get_origin(annotation)
    if origin is not None and not is_union_annotation(annotation):
        return is_runtime_class(origin) and origin.__module__ == builtins.__name__

    if not is_runtime_class(annotation):
        return False
    if annotation.__module__ == builtins.__name__:
        return True
    return issubclass(annotation, SCALAR_BASE_TYPES)


def is_protocol_class(candidate: type[Any]) -> bool:
    try:
        return is_protocol(candidate)
    except TypeError:
        return False


def is_instantiable_class(candidate: object) -> TypeGuard[type[Any]]:
    """Return true when a class can be constructed by calling it with collected arguments.

    Abstract classes, Protocols, metaclasses and builtin scalar types are
    rejected.

    Args:
        candidate: Value being checked for eligibility or runtime type constraints.

    """
    if not is_runtime_class(candidate):
        return False
    if is_scalar_annotation(candidate):
        return False
    if inspect.isabstract(candidate):
        return False
    if is_protocol_class(candidate):
        return False
    return not issubclass(candidate, type)


__all__ = [
    "SCALAR_BASE_TYPES",
    "is_instantiable_class",
    "is_protocol_class",
    "is_runtime_class",
    "is_scalar_annotation",
    "is_union_annotation",
    "strip_annotated",
]
