from __future__ import annotations

import importlib
import logging
import threading
from collections.abc import Callable, Hashable, Iterable, Mapping
from contextlib import AbstractContextManager, nullcontext
from dataclasses import dataclass, field
from typing import Any, TypeVar, overload

from rewire._internal.build_stack import ThreadLocalBuildStacks
from rewire._internal.integrations.pydantic_settings import (
    is_pydantic_settings_subclass,
    iter_settings_fields,
)
from rewire._internal.type_checks import is_runtime_class, is_scalar_annotation, strip_annotated
from rewire.exceptions import (
    RewireAmbiguousParameterTypeError,
    RewireCircularDependencyError,
    RewireInjectionTargetError,
    RewireInvalidRegistrationError,
    RewireNotFoundError,
    RewireNotInstantiableError,
    RewireReflectionError,
    RewireResolutionDepthError,
    RewireScalarMissingError,
)
from rewire.injection import CallableInjection, InjectionAction, MethodInjection, as_injection_action
from rewire.lock_mode import LockMode
from rewire.signatures import InspectSignatureProvider, Parameter, SignatureProvider

T = TypeVar("T")
F = TypeVar("F", bound=Callable[..., Any])

logger = logging.getLogger(__name__)
_MISSING = object()


@dataclass(frozen=True, slots=True)
class Arguments:
    """Values collected for one call: positional values, then keyword-only values."""

    args: tuple[Any, ...] = ()
    kwargs: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class _ScalarProducer:
    func: Callable[..., Any]


@dataclass(frozen=True, slots=True)
class _ScalarFrame:
    """Build-stack entry for a scalar producer that is running."""

    name: str


def _always_share(_key: Any) -> bool:
    return True


def describe_key(key: Any) -> str:
    """Return the display name used for ``key`` in error messages and logs."""
    if is_runtime_class(key):
        return key.__qualname__
    if isinstance(key, str):
        return key
    if isinstance(key, _ScalarFrame):
        return f"${key.name}"
    return getattr(key, "__qualname__", None) or repr(key)


def _import_class(path: str) -> type[Any] | None:
    """Import the class named by a dotted path such as ``"pkg.module.Outer.Inner"``."""
    parts = path.split(".")
    for split in range(len(parts) - 1, 0, -1):
        try:
            target: Any = importlib.import_module(".".join(parts[:split]))
        except (ImportError, TypeError, ValueError):
            continue
        for attr in parts[split:]:
            target = getattr(target, attr, None)
            if target is None:
                return None
        return target if is_runtime_class(target) else None
    return None


def _is_hashable(key: object) -> bool:
    try:
        hash(key)
    except TypeError:
        return False
    return True


class Resolver:
    """Build object graphs from constructor signatures.

    Keys are classes, abstract classes or Protocols, string identifiers used
    with ``add_factory``/``add_alias``/``set``, or dotted import paths naming
    a class. For every required parameter of a constructor or factory the
    resolver supplies either a scalar registered under the parameter's name
    (for unannotated and builtin-typed parameters) or the resolved instance of
    the annotated class.

    Every built value is shared by default: resolving the same key twice
    returns the same instance. Use ``set_should_share`` to opt keys out.

    Example:
        resolver = Resolver(scalars={"speed": 100}, aliases={Engine: ElectricEngine})
        taxi = resolver.resolve(PassengerTaxi)

    """

    def __init__(
        self,
        scalars: Mapping[str, Any] | None = None,
        aliases: Mapping[Any, Any] | None = None,
        *,
        should_share: Callable[[Any], bool] | None = None,
        signature_provider: SignatureProvider | None = None,
        lock_mode: LockMode = LockMode.THREAD,
        max_depth: int | None = None,
    ) -> None:
        """Initialize a resolver with optional scalar values and aliases.

        Args:
            scalars: Scalar values or producers keyed by parameter name.
            aliases: Alias keys mapped to concrete targets.
            should_share: Predicate deciding whether a built value is cached.
                Defaults to sharing everything.
            signature_provider: Introspection capability. Defaults to
                ``InspectSignatureProvider``.
            lock_mode: ``LockMode.THREAD`` guards shared-cache and scalar
                writes with a lock; ``LockMode.NONE`` disables locking.
            max_depth: Optional ceiling on the depth of nested builds.

        Raises:
            RewireInvalidRegistrationError: If ``max_depth`` is not positive or
                any seeded scalar or alias is invalid.

        """
        if max_depth is not None and max_depth < 1:
            msg = f"max_depth must be a positive integer, got {max_depth!r}."
            raise RewireInvalidRegistrationError(msg)

        self._shared: dict[Hashable, Any] = {}
        self._aliases: dict[Hashable, Hashable] = {}
        self._scalars: dict[str, Any] = {}
        self._factories: dict[Hashable, Callable[..., Any]] = {}
        self._injections: dict[type[Any], InjectionAction] = {}
        self._should_share: Callable[[Any], bool] = should_share or _always_share
        self._signature_provider: SignatureProvider = (
            signature_provider or InspectSignatureProvider()
        )
        self._lock_mode = lock_mode
        self._lock: AbstractContextManager[Any] = (
            threading.RLock() if lock_mode is LockMode.THREAD else nullcontext()
        )
        self._producer_locks: dict[str, AbstractContextManager[Any]] = {}
        self._max_depth = max_depth
        self._build_stacks = ThreadLocalBuildStacks()

        self.add_scalars(scalars or {})
        for alias, target in (aliases or {}).items():
            self.add_alias(alias, target)

    # -- resolution ---------------------------------------------------------

    @overload
    def resolve(self, key: type[T]) -> T: ...

    @overload
    def resolve(self, key: Any) -> Any: ...

    def resolve(self, key: Any) -> Any:
        """Return the instance for ``key``, building it and its dependencies if needed.

        Args:
            key: Class, registered identifier, alias, or dotted class path.

        Returns:
            The shared instance when one exists, otherwise a freshly built value.

        Raises:
            RewireNotFoundError: If nothing is registered for ``key`` and it is
                not a class.
            RewireNotInstantiableError: If ``key`` is an abstract class,
                Protocol or builtin scalar type.
            RewireCircularDependencyError: If ``key`` is already being built.
            RewireScalarMissingError: If a scalar parameter has no value.
            RewireAmbiguousParameterTypeError: If a parameter type is a union
                or another non-class annotation.
            RewireReflectionError: If a signature cannot be inspected.
            RewireInjectionTargetError: If an injection method is missing.
            RewireResolutionDepthError: If ``max_depth`` is exceeded.

        """
        key = self._canonical_key(key)
        shared = self._shared.get(key, _MISSING)
        if shared is not _MISSING:
            return shared

        stack = self._build_stacks.stack
        if key in stack:
            msg = f"Circular dependency while building {describe_key(key)}"
            raise RewireCircularDependencyError(msg, key=key, chain=self._chain())
        if self._max_depth is not None and len(stack) >= self._max_depth:
            msg = f"Maximum resolution depth {self._max_depth} exceeded by {describe_key(key)}"
            raise RewireResolutionDepthError(msg, key=key, chain=self._chain())

        with stack.frame(key):
            value = self._build(key)
            if self._should_share(key):
                with self._lock:
                    value = self._shared.setdefault(key, value)
                logger.debug("Shared %s", describe_key(key))
        return value

    def collect_arguments(self, parameters: Iterable[Parameter]) -> Arguments:
        """Collect values for an ordered parameter list.

        Collection stops at the first parameter with a default value; that
        parameter and every one after it keep the callee's defaults.
        ``*args``/``**kwargs`` are never supplied.

        Args:
            parameters: Parameters in declaration order.

        Returns:
            Positional values in order plus keyword-only values by name.

        """
        args: list[Any] = []
        kwargs: dict[str, Any] = {}
        for parameter in parameters:
            if parameter.is_variadic:
                continue
            if parameter.has_default:
                break
            value = self._argument_for(parameter)
            if parameter.is_keyword_only:
                kwargs[parameter.name] = value
            else:
                args.append(value)
        return Arguments(tuple(args), kwargs)

    def scalar(self, name: str) -> Any:
        """Return the scalar registered under ``name``.

        A producer is invoked the first time it is needed, with its own
        parameters collected like a factory's, and its result replaces it.

        Raises:
            RewireScalarMissingError: If no scalar is registered under ``name``.

        """
        try:
            value = self._scalars[name]
        except KeyError:
            raise RewireScalarMissingError(name, chain=self._chain()) from None
        if not isinstance(value, _ScalarProducer):
            return value

        # Only lookups of the same name wait for a running producer.
        with self._producer_lock(name):
            value = self._scalars.get(name, _MISSING)
            if value is _MISSING:
                raise RewireScalarMissingError(name, chain=self._chain())
            if not isinstance(value, _ScalarProducer):
                return value

            frame = _ScalarFrame(name)
            stack = self._build_stacks.stack
            if frame in stack:
                msg = f"Circular dependency while producing scalar {name}"
                raise RewireCircularDependencyError(msg, key=name, chain=self._chain())
            with stack.frame(frame):
                produced = self._invoke(value.func)
            with self._lock:
                self._scalars[name] = produced
        logger.debug("Memoized scalar %s", name)
        return produced

    def call(self, func: Callable[..., T]) -> T:
        """Call ``func`` with arguments collected from its signature.

        The result is not cached.
        """
        return self._invoke(func)

    # -- registration -------------------------------------------------------

    def set(self, key: Any, instance: Any) -> None:
        """Store a pre-built instance for ``key``, replacing any shared value."""
        with self._lock:
            self._shared[key] = instance

    def has(self, key: Any) -> bool:
        """Return whether ``key`` is a known identifier.

        True for shared, alias, scalar and factory keys and for any class
        (passed directly or as a dotted path). A true result does not
        guarantee that ``resolve`` succeeds. Never raises and never builds.
        """
        if not _is_hashable(key):
            return False
        if key in self._shared or key in self._aliases or key in self._factories:
            return True
        if is_runtime_class(key):
            return True
        if not isinstance(key, str):
            return False
        if key in self._scalars:
            return True
        try:
            return _import_class(key) is not None
        except Exception:  # noqa: BLE001
            logger.debug("Importing %s failed while checking has()", key, exc_info=True)
            return False

    def forget(self, key: Any) -> Resolver:
        """Evict the shared instance for ``key`` so the next ``resolve`` rebuilds it."""
        if not _is_hashable(key):
            return self
        with self._lock:
            self._shared.pop(key, None)
            self._shared.pop(self._canonical_key(key), None)
        return self

    def add_alias(self, alias: Any, target: Any) -> Resolver:
        """Make ``alias`` resolve to ``target``.

        The target must be directly buildable: aliases never chain.

        Raises:
            RewireInvalidRegistrationError: If the alias points to itself, the
                target is an alias, or the alias is already another alias's
                target.

        """
        if not _is_hashable(alias) or not _is_hashable(target):
            msg = f"Alias keys must be hashable, got {alias!r} -> {target!r}."
            raise RewireInvalidRegistrationError(msg)
        if alias == target:
            msg = f"Alias {describe_key(alias)} cannot point to itself."
            raise RewireInvalidRegistrationError(msg)
        if target in self._aliases:
            msg = (
                f"Alias {describe_key(alias)} cannot point to {describe_key(target)}, "
                "which is itself an alias."
            )
            raise RewireInvalidRegistrationError(msg)
        if alias in self._aliases.values():
            msg = f"{describe_key(alias)} is already the target of another alias."
            raise RewireInvalidRegistrationError(msg)

        with self._lock:
            self._aliases[alias] = target
        return self

    def add_scalar(self, name: str, value: Any) -> Resolver:
        """Register a scalar parameter value, or a producer called once on first use.

        Any callable other than a class is treated as a producer. Register a
        callable literal by wrapping it in a producer that returns it.
        """
        if not isinstance(name, str) or not name:
            msg = f"Scalar names must be non-empty strings, got {name!r}."
            raise RewireInvalidRegistrationError(msg)
        if callable(value) and not is_runtime_class(value):
            value = _ScalarProducer(value)
        with self._lock:
            self._scalars[name] = value
        return self

    def add_scalars(self, scalars: Mapping[str, Any]) -> Resolver:
        for name, value in scalars.items():
            self.add_scalar(name, value)
        return self

    def add_scalars_from_settings(self, settings: Any) -> Resolver:
        """Register every field of a pydantic settings instance as a scalar.

        Field values are stored as literals. The settings instance itself is
        shared under its class so components can also depend on it directly.

        Raises:
            RewireInvalidRegistrationError: If ``settings`` is not a pydantic
                ``BaseSettings`` instance.

        """
        try:
            fields = dict(iter_settings_fields(settings))
        except TypeError as e:
            raise RewireInvalidRegistrationError(str(e)) from e

        with self._lock:
            self._scalars.update(fields)
            self._shared[type(settings)] = settings
        return self

    def add_factory(self, key: Any, factory: Callable[..., Any]) -> Resolver:
        """Build ``key`` by calling ``factory`` instead of its constructor.

        Factory parameters are collected like constructor parameters, and
        setter injections still apply to the factory's result.
        """
        if not callable(factory):
            msg = f"Factory for {describe_key(key)} must be callable, got {factory!r}."
            raise RewireInvalidRegistrationError(msg)
        with self._lock:
            self._factories[key] = factory
        return self

    def factory(self, key: Any) -> Callable[[F], F]:
        """Register the decorated function as the factory for ``key``.

        Example:
            @resolver.factory(Car)
            def make_car(engine: EngineInterface) -> Car:
                return Car(engine)

        """

        def decorator(func: F) -> F:
            self.add_factory(key, func)
            return func

        return decorator

    def set_should_share(self, should_share: Callable[[Any], bool]) -> Resolver:
        """Replace the predicate deciding which built values are cached."""
        if not callable(should_share):
            msg = f"should_share must be callable, got {should_share!r}."
            raise RewireInvalidRegistrationError(msg)
        self._should_share = should_share
        return self

    def inject(self, interface: type[Any], action: Any) -> Resolver:
        """Run ``action`` on every built value that is an instance of ``interface``.

        Args:
            interface: Class, ABC, or runtime-checkable Protocol.
            action: Method name to call on the built value, or a callable
                receiving the built value first. See ``MethodInjection`` and
                ``CallableInjection``.

        Raises:
            RewireInvalidRegistrationError: If ``interface`` cannot be used
                with ``isinstance``.
            RewireInjectionTargetError: If ``action`` is neither a method name
                nor a callable.

        """
        if not is_runtime_class(interface):
            msg = f"Injection interface must be a class, got {interface!r}."
            raise RewireInvalidRegistrationError(msg)
        try:
            isinstance(None, interface)
        except TypeError as e:
            msg = f"{describe_key(interface)} cannot be checked with isinstance()."
            raise RewireInvalidRegistrationError(msg) from e

        injection_action = as_injection_action(action)
        with self._lock:
            self._injections[interface] = injection_action
        return self

    # -- internals ----------------------------------------------------------

    def _canonical_key(self, key: Any) -> Any:
        if not _is_hashable(key):
            msg = f"Can not resolve unhashable key {key!r}"
            raise RewireNotFoundError(msg, key=key, chain=self._chain())
        key = self._import_if_path(key)
        key = self._aliases.get(key, key)
        return self._import_if_path(key)

    def _import_if_path(self, key: Any) -> Any:
        if not isinstance(key, str) or "." not in key:
            return key
        if key in self._shared or key in self._aliases or key in self._factories:
            return key
        imported = _import_class(key)
        return key if imported is None else imported

    def _producer_lock(self, name: str) -> AbstractContextManager[Any]:
        if self._lock_mode is not LockMode.THREAD:
            return nullcontext()
        with self._lock:
            return self._producer_locks.setdefault(name, threading.RLock())

    def _chain(self) -> tuple[str, ...]:
        return tuple(describe_key(key) for key in self._build_stacks.stack.keys())

    def _build(self, key: Any) -> Any:
        factory = self._factories.get(key)
        if factory is not None:
            logger.debug("Building %s with factory %r", describe_key(key), factory)
            value = self._invoke(factory)
        else:
            value = self._construct(key)
        if self._injections:
            value = self._apply_injections(value)
        return value

    def _construct(self, key: Any) -> Any:
        if not is_runtime_class(key):
            msg = f"No factory, alias or class found for {describe_key(key)}"
            raise RewireNotFoundError(msg, key=key, chain=self._chain())

        if is_pydantic_settings_subclass(key):
            logger.debug("Building settings %s from its own sources", describe_key(key))
            return key()

        if not self._signature_provider.is_constructible(key):
            msg = f"Class is not instantiable {describe_key(key)}"
            raise RewireNotInstantiableError(msg, key=key, chain=self._chain())

        logger.debug("Building %s", describe_key(key))
        return self._invoke(key)

    def _invoke(self, target: Callable[..., Any], *leading: Any) -> Any:
        parameters = self._parameters_of(target)[len(leading) :]
        arguments = self.collect_arguments(parameters)
        return target(*leading, *arguments.args, **arguments.kwargs)

    def _parameters_of(self, target: Callable[..., Any]) -> tuple[Parameter, ...]:
        try:
            return tuple(self._signature_provider.parameters_of(target))
        except (TypeError, ValueError, NameError, SyntaxError, AttributeError) as e:
            msg = f"Reflection failed: can not build {describe_key(target)} ({e})"
            raise RewireReflectionError(msg, key=target, chain=self._chain()) from e

    def _argument_for(self, parameter: Parameter) -> Any:
        annotation = strip_annotated(parameter.annotation)
        if is_scalar_annotation(annotation):
            return self.scalar(parameter.name)
        if is_runtime_class(annotation):
            return self.resolve(annotation)
        raise RewireAmbiguousParameterTypeError(
            parameter.name,
            parameter.annotation,
            chain=self._chain(),
        )

    def _apply_injections(self, value: Any) -> Any:
        for interface, action in list(self._injections.items()):
            if not isinstance(value, interface):
                continue
            logger.debug("Injecting %s into %s", action, describe_key(type(value)))
            if isinstance(action, MethodInjection):
                method = getattr(value, action.method_name, None)
                if not callable(method):
                    msg = (
                        f"{describe_key(type(value))} has no method {action.method_name!r} "
                        f"required by the injection for {describe_key(interface)}"
                    )
                    raise RewireInjectionTargetError(msg, key=interface, chain=self._chain())
                self._invoke(method)
            elif isinstance(action, CallableInjection):
                result = self._invoke(action.func, value)
                if result is not None:
                    value = result
        return value


__all__ = ["Arguments", "Resolver", "describe_key"]
