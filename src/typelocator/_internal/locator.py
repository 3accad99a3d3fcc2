from __future__ import annotations

import logging
from collections.abc import Callable, Iterator, Mapping
from contextlib import contextmanager
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, TypeVar, overload

from typelocator._internal.cache import ResolutionCache
from typelocator._internal.factories import Factory, FactoryBuilder
from typelocator._internal.inventory import TypeInventory, default_type_inventory
from typelocator._internal.type_checks import is_assignable, is_contract_only, is_runtime_class
from typelocator.exceptions import (
    TypeLocatorAmbiguousContractError,
    TypeLocatorInvalidContractError,
    TypeLocatorPredicateAmbiguousError,
    TypeLocatorPredicateUnsatisfiedError,
    TypeLocatorUnsatisfiedContractError,
)
from typelocator.lock_mode import LockMode

if TYPE_CHECKING:
    from typing_extensions import Self

T = TypeVar("T")

logger = logging.getLogger(__name__)


class ServiceLocator:
    """Locate and instantiate implementations of a contract without naming them.

    Contracts are classes: ABCs, plain base classes or protocols. Implementations
    are found in a ``TypeInventory`` (by default every concrete class defined in a
    loaded module) and are always constructed with no arguments. Ownership of each
    returned instance passes to the caller.

    Resolved factories are cached per contract for the lifetime of the locator.
    Override bindings registered with ``bind`` take precedence over discovery for
    single-instance resolution.
    """

    def __init__(
        self,
        inventory: TypeInventory | None = None,
        *,
        lock_mode: LockMode = LockMode.THREAD,
        factory_builder: FactoryBuilder | None = None,
    ) -> None:
        """Initialize a locator over an inventory.

        Args:
            inventory: Inventory to discover implementations in. Defaults to the
                process-wide inventory over loaded modules.
            lock_mode: Locking strategy for cache population. ``LockMode.NONE``
                suits single-threaded embeddings.
            factory_builder: Builder used to turn implementations into factories.

        """
        self._inventory = inventory if inventory is not None else default_type_inventory()
        self._factory_builder = factory_builder if factory_builder is not None else FactoryBuilder()
        self._factories: ResolutionCache[type[Any], Factory[Any]] = ResolutionCache(lock_mode)
        self._multiple_factories: ResolutionCache[type[Any], tuple[Factory[Any], ...]] = (
            ResolutionCache(lock_mode)
        )
        self._bound_implementations: dict[type[Any], type[Any]] = {}

    @property
    def inventory(self) -> TypeInventory:
        return self._inventory

    @property
    def failed_sources(self) -> tuple[str, ...]:
        """Type groups the inventory failed to enumerate, as ``"<identity>: <error>"``."""
        return self._inventory.failed_sources

    @property
    def bindings(self) -> Mapping[type[Any], type[Any]]:
        """Read-only snapshot of the override binding table."""
        return MappingProxyType(dict(self._bound_implementations))

    @overload
    def resolve(self, contract: type[T]) -> T: ...

    @overload
    def resolve(self, contract: type[T], predicate: Callable[[T], bool]) -> T: ...

    def resolve(
        self,
        contract: type[T],
        predicate: Callable[[T], bool] | None = None,
    ) -> T:
        """Create an instance of the single implementation of ``contract``.

        Without a predicate an override binding for ``contract`` is used when
        present; otherwise the contract is resolved by discovery. A concrete
        contract is its own and only implementation. With a predicate, every
        implementation is instantiated and exactly one instance must satisfy it.

        Args:
            contract: Interface, base class or concrete class to resolve.
            predicate: Optional filter applied to one fresh instance of each
                implementation.

        Returns:
            A new instance owned by the caller.

        Raises:
            TypeLocatorInvalidContractError: If ``contract`` is not a class.
            TypeLocatorUnsatisfiedContractError: If no implementation exists.
            TypeLocatorAmbiguousContractError: If several implementations exist
                and ``contract`` is not bound.
            TypeLocatorNoParameterlessConstructorError: If the implementation
                requires constructor arguments.
            TypeLocatorPredicateUnsatisfiedError: If no instance matched the predicate.
            TypeLocatorPredicateAmbiguousError: If several instances matched the predicate.

        Examples:
            .. code-block:: python

                algorithm = service_locator.resolve(
                    HashingAlgorithm,
                    lambda algorithm: algorithm.is_this_algorithm(hashed_value),
                )

        """
        self._validate_contract(contract)
        if predicate is not None:
            return self._resolve_matching(contract, predicate)

        implementation = self._bound_implementations.get(contract, contract)
        factory = self._factories.get_or_create(implementation, self._create_factory)
        return factory()

    def resolve_all(self, contract: type[T]) -> Iterator[T]:
        """Lazily create one instance of every implementation of ``contract``.

        The factories are discovered and cached on the first call; each pull from
        the returned iterator builds a fresh instance. Override bindings are not
        consulted. No implementations yields an empty iterator.

        Raises:
            TypeLocatorInvalidContractError: If ``contract`` is not a class.
            TypeLocatorNoParameterlessConstructorError: If an implementation
                requires constructor arguments.

        """
        self._validate_contract(contract)
        factories = self._multiple_factories.get_or_create(contract, self._create_factories)
        return (factory() for factory in factories)

    def bind(self, contract: type[T], implementation: type[T]) -> None:
        """Resolve ``contract`` to ``implementation`` until ``unbind`` is called.

        The last binding wins. Whether ``implementation`` is unique and
        constructible is checked when ``contract`` is next resolved.

        Raises:
            TypeLocatorInvalidContractError: If either argument is not a class, or
                ``implementation`` is not assignable to ``contract``.

        """
        self._validate_contract(contract)
        if not is_runtime_class(implementation):
            raise TypeLocatorInvalidContractError(
                contract,
                f"binding target {implementation!r} is not a class",
            )
        if not is_assignable(implementation, contract):
            raise TypeLocatorInvalidContractError(
                contract,
                f"{implementation.__qualname__} does not implement {contract.__qualname__}",
            )
        self._bound_implementations[contract] = implementation
        logger.debug("Bound %s to %s", contract.__qualname__, implementation.__qualname__)

    def unbind(self, contract: type[Any]) -> None:
        """Remove the binding for ``contract``; a no-op when it is not bound."""
        if self._bound_implementations.pop(contract, None) is not None:
            logger.debug("Unbound %s", contract.__qualname__)

    def is_bound(self, contract: type[Any]) -> bool:
        return contract in self._bound_implementations

    @contextmanager
    def binding(self, contract: type[T], implementation: type[T]) -> Iterator[Self]:
        """Bind ``contract`` for the duration of a ``with`` block.

        The previous binding, if any, is restored on exit.
        """
        previous = self._bound_implementations.get(contract)
        self.bind(contract, implementation)
        try:
            yield self
        finally:
            if previous is None:
                self.unbind(contract)
            else:
                self._bound_implementations[contract] = previous

    def _resolve_matching(self, contract: type[T], predicate: Callable[[T], bool]) -> T:
        matches = [instance for instance in self.resolve_all(contract) if predicate(instance)]
        if not matches:
            raise TypeLocatorPredicateUnsatisfiedError(contract)
        if len(matches) > 1:
            raise TypeLocatorPredicateAmbiguousError(
                contract,
                [type(instance) for instance in matches],
            )
        return matches[0]

    def _create_factory(self, contract: type[Any]) -> Factory[Any]:
        implementation = self._find_single_implementation(contract)
        factory = self._factory_builder.build(implementation, contract)
        logger.debug(
            "Cached factory for %s: %s",
            contract.__qualname__,
            implementation.__qualname__,
        )
        return factory

    def _create_factories(self, contract: type[Any]) -> tuple[Factory[Any], ...]:
        implementations = self._inventory.find_assignable(contract)
        factories = tuple(
            self._factory_builder.build(implementation, contract)
            for implementation in implementations
        )
        logger.debug(
            "Cached %d factories for %s",
            len(factories),
            contract.__qualname__,
        )
        return factories

    def _find_single_implementation(self, contract: type[Any]) -> type[Any]:
        if not is_contract_only(contract):
            return contract

        implementations = self._inventory.find_assignable(contract)
        if len(implementations) > 1:
            raise TypeLocatorAmbiguousContractError(contract, implementations)
        if not implementations:
            raise TypeLocatorUnsatisfiedContractError(contract)
        return implementations[0]

    def _validate_contract(self, contract: Any) -> None:
        if not is_runtime_class(contract):
            raise TypeLocatorInvalidContractError(contract, "contracts must be runtime classes")


service_locator = ServiceLocator()
"""Process-wide locator over the process-wide type inventory."""


__all__ = ["ServiceLocator", "service_locator"]
