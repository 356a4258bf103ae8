from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Callable, Dict, Optional, Set, Type

from ..errors import CircularDependencyError, ResolutionError


class Lifetime(Enum):
    SINGLETON = auto()
    TRANSIENT = auto()


@dataclass
class Registration:
    interface: Type
    lifetime: Lifetime
    implementation: Optional[Type] = None
    factory: Optional[Callable[[], Any]] = None
    instance: Any = None


class Container:
    """Minimal service registry keyed by interface type."""

    def __init__(self) -> None:
        self._registrations: Dict[Type, Registration] = {}
        self._singletons: Dict[Type, Any] = {}
        self._resolving: Set[Type] = set()

    def register_singleton(self, interface: Type, implementation: Optional[Type] = None) -> None:
        self._registrations[interface] = Registration(
            interface=interface,
            lifetime=Lifetime.SINGLETON,
            implementation=implementation or interface,
        )
        self._singletons.pop(interface, None)

    def register_transient(self, interface: Type, implementation: Optional[Type] = None) -> None:
        self._registrations[interface] = Registration(
            interface=interface,
            lifetime=Lifetime.TRANSIENT,
            implementation=implementation or interface,
        )

    def register_factory(
        self,
        interface: Type,
        factory: Callable[[], Any],
        singleton: bool = True,
    ) -> None:
        self._registrations[interface] = Registration(
            interface=interface,
            lifetime=Lifetime.SINGLETON if singleton else Lifetime.TRANSIENT,
            factory=factory,
        )
        self._singletons.pop(interface, None)

    def register_instance(self, interface: Type, instance: Any) -> None:
        self._registrations[interface] = Registration(
            interface=interface,
            lifetime=Lifetime.SINGLETON,
        )
        self._singletons[interface] = instance

    def is_registered(self, interface: Type) -> bool:
        return interface in self._registrations

    def resolve(self, interface: Type) -> Any:
        reg = self._registrations.get(interface)
        if reg is None:
            raise ResolutionError(f"No registration found for {interface}")
        if reg.lifetime is Lifetime.SINGLETON and interface in self._singletons:
            return self._singletons[interface]
        if interface in self._resolving:
            raise CircularDependencyError(f"Circular dependency detected for {interface}")
        self._resolving.add(interface)
        try:
            instance = self._create(reg)
        finally:
            self._resolving.discard(interface)
        if reg.lifetime is Lifetime.SINGLETON:
            self._singletons[interface] = instance
        return instance

    def _create(self, reg: Registration) -> Any:
        if reg.factory is not None:
            return reg.factory()
        impl = reg.implementation or reg.interface
        return impl()
