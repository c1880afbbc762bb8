from __future__ import annotations

import dataclasses
import functools
import inspect
import threading
from collections.abc import Callable, Hashable
from dataclasses import dataclass
from types import MethodType
from typing import Any, Protocol, get_type_hints, runtime_checkable

from rewire._internal.type_checks import is_instantiable_class, is_runtime_class

_VARIADIC_KINDS = (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)


@dataclass(frozen=True, slots=True)
class Parameter:
    """One constructor/callable parameter as seen by the resolver.

    Attributes:
        name: Parameter name, used as the scalar lookup key.
        annotation: Declared type with forward references evaluated, or
            ``None`` when the parameter is not annotated.
        has_default: Whether the callee supplies its own default value.
        kind: ``inspect.Parameter`` kind, used to pass keyword-only values by
            keyword and to skip ``*args``/``**kwargs``.

    """

    name: str
    annotation: Any = None
    has_default: bool = False
    kind: inspect._ParameterKind = inspect.Parameter.POSITIONAL_OR_KEYWORD

    @property
    def is_variadic(self) -> bool:
        return self.kind in _VARIADIC_KINDS

    @property
    def is_keyword_only(self) -> bool:
        return self.kind is inspect.Parameter.KEYWORD_ONLY


@runtime_checkable
class SignatureProvider(Protocol):
    """Introspection capability the resolver relies on.

    Implementations may raise ``TypeError``, ``ValueError`` or ``NameError``
    when a target cannot be introspected; the resolver reports those as
    ``RewireReflectionError``.
    """

    def parameters_of(self, target: Callable[..., Any]) -> tuple[Parameter, ...]:
        """Return the ordered parameters of a class constructor or callable."""
        ...

    def is_constructible(self, cls: type[Any]) -> bool:
        """Return whether ``cls`` can be built by calling it."""
        ...


class InspectSignatureProvider:
    """Signature provider backed by ``inspect.signature`` and ``get_type_hints``.

    Results are cached per target. Bound methods are never cached so that
    caching does not keep built instances alive.
    """

    def __init__(self) -> None:
        self._cache: dict[Any, tuple[Parameter, ...]] = {}
        self._lock = threading.Lock()

    def parameters_of(self, target: Callable[..., Any]) -> tuple[Parameter, ...]:
        cacheable = not isinstance(target, MethodType) and isinstance(target, Hashable)
        if cacheable:
            cached = self._cache.get(target)
            if cached is not None:
                return cached

        signature = inspect.signature(target)
        type_hints = get_type_hints(self._get_hints_source(target), include_extras=True)

        result = tuple(
            Parameter(
                name=name,
                annotation=type_hints.get(name),
                has_default=param.default is not inspect.Parameter.empty,
                kind=param.kind,
            )
            for name, param in signature.parameters.items()
        )
        if cacheable:
            with self._lock:
                self._cache[target] = result
        return result

    def is_constructible(self, cls: type[Any]) -> bool:
        return is_instantiable_class(cls)

    def _get_hints_source(self, target: Any) -> Any:
        if isinstance(target, functools.partial):
            return self._get_hints_source(target.func)
        if not is_runtime_class(target):
            if callable(target) and not inspect.isroutine(target):
                # Callable instances: hints live on __call__.
                return type(target).__call__
            return target

        # Dataclass __init__ annotations may be strings; the class resolves them.
        if dataclasses.is_dataclass(target):
            return target

        init_func = target.__init__
        if init_func is object.__init__ and target.__new__ is not object.__new__:
            return target.__new__
        return init_func


__all__ = ["InspectSignatureProvider", "Parameter", "SignatureProvider"]
