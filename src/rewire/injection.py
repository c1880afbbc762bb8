from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, TypeAlias

from rewire.exceptions import RewireInjectionTargetError


@dataclass(frozen=True, slots=True)
class MethodInjection:
    """Call ``method_name`` on every built value implementing the interface.

    The method's own parameters are collected like constructor parameters.
    """

    method_name: str


@dataclass(frozen=True, slots=True)
class CallableInjection:
    """Call ``func(value, ...)`` on every built value implementing the interface.

    The first parameter receives the built value; the rest are collected like
    constructor parameters. A non-``None`` return value replaces the built
    value.
    """

    func: Callable[..., Any]


InjectionAction: TypeAlias = MethodInjection | CallableInjection


def as_injection_action(action: Any) -> InjectionAction:
    """Normalize a method name or callable into an injection action.

    Args:
        action: Method name, callable, or an existing injection action.

    Raises:
        RewireInjectionTargetError: If ``action`` is neither a non-empty method
            name nor a callable.

    """
    if isinstance(action, MethodInjection | CallableInjection):
        return action
    if isinstance(action, str):
        if not action.isidentifier():
            msg = f"Injection method name must be an identifier, got {action!r}"
            raise RewireInjectionTargetError(msg, key=action)
        return MethodInjection(action)
    if callable(action):
        return CallableInjection(action)
    msg = f"Injection action must be a method name or a callable, got {action!r}"
    raise RewireInjectionTargetError(msg, key=action)


__all__ = [
    "CallableInjection",
    "InjectionAction",
    "MethodInjection",
    "as_injection_action",
]
