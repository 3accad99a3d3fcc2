from __future__ import annotations

from collections.abc import Iterator
from typing import Any, TypeVar

import pytest

from typelocator._internal.locator import ServiceLocator
from typelocator._internal.locator import service_locator as process_service_locator

T = TypeVar("T")

_UNBOUND = object()


class LocatorBindings:
    """Record override bindings made during a test so they can be rolled back.

    Each contract remembers the binding it had before its first ``bind`` in the
    test; ``restore`` puts that binding back, or unbinds the contract when it had
    none.
    """

    def __init__(self, locator: ServiceLocator) -> None:
        self._locator = locator
        self._previous: dict[type[Any], Any] = {}

    @property
    def locator(self) -> ServiceLocator:
        return self._locator

    def bind(self, contract: type[T], implementation: type[T]) -> None:
        if contract not in self._previous:
            self._previous[contract] = self._locator.bindings.get(contract, _UNBOUND)
        self._locator.bind(contract, implementation)

    def unbind(self, contract: type[Any]) -> None:
        if contract not in self._previous:
            self._previous[contract] = self._locator.bindings.get(contract, _UNBOUND)
        self._locator.unbind(contract)

    def restore(self) -> None:
        for contract, previous in reversed(self._previous.items()):
            if previous is _UNBOUND:
                self._locator.unbind(contract)
            else:
                self._locator.bind(contract, previous)
        self._previous.clear()


@pytest.fixture()
def service_locator() -> ServiceLocator:
    """Return the process-wide locator.

    Override this fixture to run plugin-managed bindings against a locator over
    a custom inventory.

    Returns:
        The process-wide ``ServiceLocator`` instance.

    """
    return process_service_locator


@pytest.fixture()
def locator_bindings(service_locator: ServiceLocator) -> Iterator[LocatorBindings]:
    """Bind contracts for one test; bindings are rolled back at teardown.

    Yields:
        A ``LocatorBindings`` helper over the ``service_locator`` fixture.

    """
    bindings = LocatorBindings(service_locator)
    try:
        yield bindings
    finally:
        bindings.restore()


__all__ = ["LocatorBindings", "locator_bindings", "service_locator"]
