"""Shared pytest fixtures for typelocator tests."""

from __future__ import annotations

import threading
from collections.abc import Callable, Iterable, Iterator
from typing import Any

import pytest

from typelocator import (
    FactoryBuilder,
    ServiceLocator,
    StaticTypeSource,
    TypeGroup,
    TypeInventory,
)
from typelocator._internal.factories import Factory


class CountingTypeSource:
    """Type source that records how many times discovery enumerated it."""

    def __init__(self, types: Iterable[type[Any]]) -> None:
        self._inner = StaticTypeSource(types)
        self._lock = threading.Lock()
        self.enumerations = 0

    def iter_groups(self) -> Iterator[TypeGroup]:
        with self._lock:
            self.enumerations += 1
        yield from self._inner.iter_groups()


class CountingFactoryBuilder(FactoryBuilder):
    """Factory builder that records every built implementation."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.built: list[type[Any]] = []

    def build(self, concrete_type: type[Any], contract: Any) -> Factory[Any]:
        with self._lock:
            self.built.append(concrete_type)
        return super().build(concrete_type, contract)


@pytest.fixture()
def locator() -> ServiceLocator:
    """Fresh locator over the process-wide inventory, with its own caches and bindings."""
    return ServiceLocator()


@pytest.fixture()
def counting_source_factory() -> Callable[..., CountingTypeSource]:
    def build(*types: type[Any]) -> CountingTypeSource:
        return CountingTypeSource(types)

    return build


@pytest.fixture()
def counting_factory_builder() -> CountingFactoryBuilder:
    return CountingFactoryBuilder()


@pytest.fixture()
def static_inventory_factory() -> Callable[..., TypeInventory]:
    """Build an inventory over exactly the given classes."""

    def build(*types: type[Any]) -> TypeInventory:
        return TypeInventory(StaticTypeSource(types))

    return build
