"""Caching behavior of ServiceLocator over explicit inventories."""

from __future__ import annotations

from abc import ABC
from collections.abc import Callable
from typing import Any

import pytest

from typelocator import (
    LockMode,
    ServiceLocator,
    TypeInventory,
    TypeLocatorAmbiguousContractError,
    TypeLocatorNoParameterlessConstructorError,
    TypeLocatorUnsatisfiedContractError,
)


class Notifier(ABC):
    pass


class EmailNotifier(Notifier):
    pass


class SlackNotifier(Notifier):
    pass


class BrokenNotifier(Notifier):
    def __init__(self, token: str) -> None:
        self.token = token


def test_discovery_and_factory_build_happen_once_per_contract(
    counting_source_factory: Callable[..., Any],
    counting_factory_builder: Any,
) -> None:
    source = counting_source_factory(EmailNotifier)
    locator = ServiceLocator(TypeInventory(source), factory_builder=counting_factory_builder)

    instances = [locator.resolve(Notifier) for _ in range(3)]

    assert source.enumerations == 1
    assert counting_factory_builder.built == [EmailNotifier]
    assert len({id(instance) for instance in instances}) == 3


def test_resolve_all_builds_factories_once(
    counting_source_factory: Callable[..., Any],
    counting_factory_builder: Any,
) -> None:
    source = counting_source_factory(EmailNotifier, SlackNotifier)
    locator = ServiceLocator(TypeInventory(source), factory_builder=counting_factory_builder)

    first = [type(instance) for instance in locator.resolve_all(Notifier)]
    second = [type(instance) for instance in locator.resolve_all(Notifier)]

    assert first == second == [EmailNotifier, SlackNotifier]
    assert counting_factory_builder.built == [EmailNotifier, SlackNotifier]
    assert source.enumerations == 1


def test_single_and_multiple_caches_are_independent(
    static_inventory_factory: Callable[..., TypeInventory],
    counting_factory_builder: Any,
) -> None:
    locator = ServiceLocator(
        static_inventory_factory(EmailNotifier),
        factory_builder=counting_factory_builder,
    )

    locator.resolve(Notifier)
    list(locator.resolve_all(Notifier))

    assert counting_factory_builder.built == [EmailNotifier, EmailNotifier]


def test_errors_are_not_cached(
    static_inventory_factory: Callable[..., TypeInventory],
    counting_factory_builder: Any,
) -> None:
    locator = ServiceLocator(
        static_inventory_factory(EmailNotifier, SlackNotifier),
        factory_builder=counting_factory_builder,
    )

    for _ in range(2):
        with pytest.raises(TypeLocatorAmbiguousContractError):
            locator.resolve(Notifier)

    locator.bind(Notifier, SlackNotifier)

    assert type(locator.resolve(Notifier)) is SlackNotifier
    assert counting_factory_builder.built == [SlackNotifier]


def test_binding_resolves_through_bound_implementation_cache(
    static_inventory_factory: Callable[..., TypeInventory],
    counting_factory_builder: Any,
) -> None:
    locator = ServiceLocator(
        static_inventory_factory(EmailNotifier, SlackNotifier),
        factory_builder=counting_factory_builder,
    )
    locator.bind(Notifier, EmailNotifier)

    locator.resolve(Notifier)
    locator.resolve(EmailNotifier)

    assert counting_factory_builder.built == [EmailNotifier]


def test_unbinding_restores_discovery_after_cached_binding(
    static_inventory_factory: Callable[..., TypeInventory],
) -> None:
    locator = ServiceLocator(static_inventory_factory(EmailNotifier))
    locator.bind(Notifier, EmailNotifier)
    locator.resolve(Notifier)

    locator.unbind(Notifier)

    assert type(locator.resolve(Notifier)) is EmailNotifier


def test_empty_inventory_is_unsatisfied(
    static_inventory_factory: Callable[..., TypeInventory],
) -> None:
    locator = ServiceLocator(static_inventory_factory())

    with pytest.raises(TypeLocatorUnsatisfiedContractError):
        locator.resolve(Notifier)
    assert list(locator.resolve_all(Notifier)) == []


def test_resolve_all_fails_when_any_implementation_needs_arguments(
    static_inventory_factory: Callable[..., TypeInventory],
) -> None:
    locator = ServiceLocator(static_inventory_factory(EmailNotifier, BrokenNotifier))

    with pytest.raises(TypeLocatorNoParameterlessConstructorError) as exc_info:
        locator.resolve_all(Notifier)

    assert exc_info.value.implementation is BrokenNotifier


def test_unlocked_locator_resolves(
    static_inventory_factory: Callable[..., TypeInventory],
) -> None:
    locator = ServiceLocator(static_inventory_factory(SlackNotifier), lock_mode=LockMode.NONE)

    assert type(locator.resolve(Notifier)) is SlackNotifier


def test_locator_exposes_inventory_diagnostics(
    static_inventory_factory: Callable[..., TypeInventory],
) -> None:
    inventory = static_inventory_factory(SlackNotifier)
    locator = ServiceLocator(inventory)

    assert locator.inventory is inventory
    assert locator.failed_sources == ()
