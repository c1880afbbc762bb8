from __future__ import annotations

import importlib
import warnings
from collections.abc import Iterator
from typing import Any

from rewire._internal.type_checks import is_runtime_class

_PYDANTIC_V1_WARNING_PATTERN = (
    r"Core Pydantic V1 functionality isn't compatible with Python 3\.14 or greater\."
)


def _load_pydantic_settings_base() -> type[Any] | None:
    return _load_base_settings("pydantic_settings")


def _load_pydantic_v1_base() -> type[Any] | None:
    with warnings.catch_warnings():
        warnings.filterwarnings(
            "ignore",
            message=_PYDANTIC_V1_WARNING_PATTERN,
            category=UserWarning,
        )
        return _load_base_settings("pydantic.v1")


def _load_base_settings(module_name: str) -> type[Any] | None:
    try:
        module = importlib.import_module(module_name)
    except ImportError:
        return None
    base_settings = getattr(module, "BaseSettings", None)
    if isinstance(base_settings, type):
        return base_settings
    return None


def _build_settings_bases() -> tuple[type[Any], ...]:
    seen_ids: set[int] = set()
    bases: list[type[Any]] = []

    for candidate in (_load_pydantic_settings_base(), _load_pydantic_v1_base()):
        if candidate is None:
            continue
        candidate_id = id(candidate)
        if candidate_id in seen_ids:
            continue
        seen_ids.add(candidate_id)
        bases.append(candidate)

    return tuple(bases)


SETTINGS_BASES: tuple[type[Any], ...] = _build_settings_bases()


def is_pydantic_settings_subclass(candidate: object) -> bool:
    """Return whether a class is a supported Pydantic settings model.

    Both ``pydantic_settings.BaseSettings`` and legacy
    ``pydantic.v1.BaseSettings`` are checked when available. If Pydantic is not
    installed, this function returns ``False`` for every candidate.

    Args:
        candidate: Object to test.

    Returns:
        ``True`` when ``candidate`` is a runtime class and subclasses any
        discovered settings base; otherwise ``False``.

    """
    if not is_runtime_class(candidate):
        return False
    try:
        return any(issubclass(candidate, base) for base in SETTINGS_BASES)
    except TypeError:
        return False


def iter_settings_fields(settings: object) -> Iterator[tuple[str, Any]]:
    """Yield ``(field_name, value)`` pairs of a settings instance.

    Args:
        settings: Instance of a Pydantic settings model.

    Raises:
        TypeError: If ``settings`` is not a settings model instance.

    """
    if not is_pydantic_settings_subclass(type(settings)):
        msg = f"Expected a pydantic BaseSettings instance, got {type(settings).__qualname__}."
        raise TypeError(msg)

    # v2 exposes model_fields on the class; v1 uses __fields__.
    fields = getattr(type(settings), "model_fields", None)
    if fields is None:
        fields = type(settings).__fields__
    for name in fields:
        yield name, getattr(settings, name)


__all__ = [
    "SETTINGS_BASES",
    "is_pydantic_settings_subclass",
    "iter_settings_fields",
]
