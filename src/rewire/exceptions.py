from __future__ import annotations

from collections.abc import Iterable
from typing import Any


class RewireError(Exception):
    """Represent a base class for all rewire-specific failures.

    Catch this type when you want to handle any rewire error path without
    matching each concrete exception class individually.
    """


class RewireInvalidRegistrationError(RewireError):
    """Signal invalid registration configuration.

    Raised by registration APIs such as ``Resolver.add_alias``,
    ``Resolver.add_scalar`` and ``Resolver.add_factory`` when arguments are
    invalid, for example when an alias would chain onto another alias.
    """


class RewireResolutionError(RewireError):
    """Signal that a ``resolve`` call could not build the requested value.

    Every resolution error carries ``chain``: the display names of the keys
    that were under construction when the failure happened, shallowest first.
    The message ends with ``while building A - B - C`` so the chain shows up in
    tracebacks without inspecting the attribute.
    """

    def __init__(self, message: str, *, key: Any = None, chain: Iterable[str] = ()) -> None:
        self.key = key
        self.chain: tuple[str, ...] = tuple(chain)
        self.reason = message
        if self.chain:
            message = f"{message}: while building {' - '.join(self.chain)}"
        super().__init__(message)


class RewireNotFoundError(RewireResolutionError):
    """Signal that a key has no alias, factory, shared instance, nor class.

    Typical fixes include registering a factory or alias for the key, or
    passing the class itself instead of an unknown string identifier.
    """


class RewireNotInstantiableError(RewireResolutionError):
    """Signal that a class exists but cannot be constructed directly.

    Raised for abstract classes, Protocols and builtin scalar types. Register
    an alias to a concrete implementation or a factory for the key.
    """


class RewireCircularDependencyError(RewireResolutionError):
    """Signal that a key was requested again while it was still being built."""


class RewireScalarMissingError(RewireResolutionError):
    """Signal that a scalar parameter has no registered value.

    Typical fix is ``resolver.add_scalar(name, value)`` for the parameter name
    reported in ``name``.
    """

    def __init__(self, name: str, *, chain: Iterable[str] = ()) -> None:
        self.name = name
        super().__init__(f"Scalar value not found: {name}", key=name, chain=chain)


class RewireAmbiguousParameterTypeError(RewireResolutionError):
    """Signal a parameter annotation that does not name exactly one class.

    Union and Optional annotations, TypeVars and other typing constructs are
    rejected instead of guessed. Annotate the parameter with one concrete
    class or interface, or register a factory for the owner.
    """

    def __init__(self, parameter: str, annotation: Any, *, chain: Iterable[str] = ()) -> None:
        self.parameter = parameter
        self.annotation = annotation
        super().__init__(
            f"Parameter '{parameter}' has an ambiguous type {annotation!r}",
            key=annotation,
            chain=chain,
        )


class RewireReflectionError(RewireResolutionError):
    """Signal that signature introspection failed for a target.

    The original exception (usually a ``NameError`` from an unresolvable
    forward reference) is available as ``__cause__``.
    """


class RewireInjectionTargetError(RewireResolutionError):
    """Signal an injection action that is neither a method name nor a callable.

    Raised by ``Resolver.inject`` for invalid actions and during resolution
    when the named method does not exist on the built value.
    """


class RewireResolutionDepthError(RewireResolutionError):
    """Signal that the dependency graph is deeper than ``max_depth``."""
