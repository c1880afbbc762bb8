"""Vehicle-domain classes shared by the resolver tests."""

from abc import ABC, abstractmethod
from typing import Protocol, runtime_checkable


class IgnitionListener:
    def __init__(self) -> None:
        self.started = False

    def on_start(self) -> None:
        self.started = True

    def on_stop(self) -> None:
        self.started = False


class EngineInterface(ABC):
    @abstractmethod
    def set_ignition_listener(self, listener: IgnitionListener) -> None: ...

    @abstractmethod
    def get_ignition_listener(self) -> IgnitionListener | None: ...


class IgnitionListenerAwareMixin:
    ignition_listener: IgnitionListener | None = None

    def set_ignition_listener(self, listener: IgnitionListener) -> None:
        self.ignition_listener = listener

    def get_ignition_listener(self) -> IgnitionListener | None:
        return self.ignition_listener


class ElectricEngine(IgnitionListenerAwareMixin, EngineInterface):
    def __init__(self) -> None:
        self.fuel_percent = 0

    def refuel(self, percentage: int = 100) -> None:
        self.fuel_percent = percentage


class V8Engine(IgnitionListenerAwareMixin, EngineInterface):
    pass


class Car:
    def __init__(self, engine: EngineInterface) -> None:
        self.engine = engine
        self.fuel_percent = 0

    def refuel(self, percentage: int) -> None:
        self.fuel_percent = percentage


class PassengerTaxi:
    DEFAULT_SEATS = 4

    def __init__(
        self,
        engine: EngineInterface,
        road_speed_limit,
        road_speed_unit: str,
        maximum_passengers: int,
        number_of_seats: int = DEFAULT_SEATS,
    ) -> None:
        self.engine = engine
        self.road_speed_limit = road_speed_limit
        self.road_speed_unit = road_speed_unit
        self.maximum_passengers = maximum_passengers
        self.number_of_seats = number_of_seats


class Tachograph:
    def __init__(self, engine: EngineInterface, x: int, y: int = 5) -> None:
        self.engine = engine
        self.x = x
        self.y = y


class MissingScalarArgument:
    def __init__(self, not_configured_anywhere: str) -> None:
        self.value = not_configured_anywhere


class UnresolvableForwardReference:
    def __init__(self, part: "DoesNotExist") -> None:  # noqa: F821
        self.part = part


class UnionArgument:
    def __init__(self, engine: ElectricEngine | V8Engine) -> None:
        self.engine = engine


class OptionalArgument:
    def __init__(self, engine: EngineInterface | None) -> None:
        self.engine = engine


@runtime_checkable
class Horn(Protocol):
    def honk(self) -> str: ...


class AirHorn:
    def honk(self) -> str:
        return "HONK"


class CircularDependency:
    def __init__(self, same: "CircularDependency") -> None:
        self.same = same


class CircularDependencyA:
    def __init__(self, b: "CircularDependencyB") -> None:
        self.b = b


class CircularDependencyB:
    def __init__(self, c: "CircularDependencyC") -> None:
        self.c = c


class CircularDependencyC:
    def __init__(self, a: CircularDependencyA) -> None:
        self.a = a


class CircularDependencyInterface(ABC):
    @abstractmethod
    def ping(self) -> None: ...


class CircularThroughAlias(CircularDependencyInterface):
    def __init__(self, other: CircularDependencyInterface) -> None:
        self.other = other

    def ping(self) -> None:
        return None
