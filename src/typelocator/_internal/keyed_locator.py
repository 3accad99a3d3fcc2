from __future__ import annotations

import logging
import types
from abc import ABC, abstractmethod
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any, ClassVar, Generic, TypeVar, get_args, get_origin

from typelocator._internal.cache import ResolutionCache
from typelocator._internal.factories import Factory, FactoryBuilder
from typelocator._internal.inventory import TypeInventory, default_type_inventory
from typelocator._internal.type_checks import is_runtime_class
from typelocator.exceptions import (
    TypeLocatorDuplicateKeyError,
    TypeLocatorInvalidContractError,
    TypeLocatorUnknownKeyError,
    TypeLocatorUnsatisfiedContractError,
)

KeyT = TypeVar("KeyT")
ContractT = TypeVar("ContractT", bound="Locatable[Any]")

logger = logging.getLogger(__name__)


class Locatable(ABC, Generic[KeyT]):
    """Base for keyed contracts whose implementations report their own key.

    Examples:
        .. code-block:: python

            class Repository(Locatable[RepositoryType]):
                @abstractmethod
                def load(self, entity_id: int) -> dict[str, object]: ...


            class UserRepository(Repository):
                locator_key = RepositoryType.USER

                def load(self, entity_id: int) -> dict[str, object]: ...

    """

    @property
    @abstractmethod
    def locator_key(self) -> KeyT:
        """Discriminator identifying this implementation within its contract."""


@dataclass(frozen=True, slots=True)
class _KeyedRegistration:
    implementation: type[Any]
    factory: Factory[Any]


_SpecializationIdentity = tuple[type[Any], type[Any], TypeInventory]


class KeyedServiceLocator(Generic[KeyT, ContractT]):
    """Locate implementations of a keyed contract by the key they report.

    Parameterizing with concrete arguments yields a specialization class, one per
    ``(key type, contract)`` pair, that can be constructed directly:

    .. code-block:: python

        users = KeyedServiceLocator[RepositoryType, Repository]().resolve(RepositoryType.USER)

    Named specializations subclass it:

    .. code-block:: python

        class RepositoryLocator(KeyedServiceLocator[RepositoryType, Repository]):
            pass

    The first construction of a specialization discovers every implementation of
    the contract, instantiates each once to read its ``locator_key`` and caches
    the key to factory map. Later constructions of the same specialization reuse
    that map. The cache is keyed by the locator class itself, so two different
    subclasses over the same contract discover independently.
    """

    _registrations_cache: ClassVar[
        ResolutionCache[_SpecializationIdentity, dict[Any, _KeyedRegistration]]
    ] = ResolutionCache()
    _specializations: ClassVar[ResolutionCache[tuple[Any, Any], type[Any]]] = ResolutionCache()

    def __class_getitem__(cls, params: Any) -> Any:
        alias = super().__class_getitem__(params)  # type: ignore[misc]
        if cls is not KeyedServiceLocator:
            return alias
        key_type, contract = get_args(alias)
        if isinstance(key_type, TypeVar) or not is_runtime_class(contract):
            return alias
        return cls._specializations.get_or_create(
            (key_type, contract),
            lambda _pair: _new_specialization(alias),
        )

    def __init__(
        self,
        contract: type[ContractT] | None = None,
        *,
        inventory: TypeInventory | None = None,
        factory_builder: FactoryBuilder | None = None,
    ) -> None:
        """Initialize the locator, building its key map on first use of the specialization.

        Args:
            contract: Keyed contract, for ad-hoc specializations. Defaults to the
                contract declared in the generic base.
            inventory: Inventory to discover implementations in. Defaults to the
                process-wide inventory over loaded modules.
            factory_builder: Builder used to turn implementations into factories.

        Raises:
            TypeLocatorInvalidContractError: If no contract class is given or declared.
            TypeLocatorUnsatisfiedContractError: If the contract has no implementations.
            TypeLocatorDuplicateKeyError: If two implementations report the same key.
            TypeLocatorNoParameterlessConstructorError: If an implementation
                requires constructor arguments.

        """
        self._contract: type[ContractT] = (
            contract if contract is not None else self._declared_contract()
        )
        if not is_runtime_class(self._contract):
            raise TypeLocatorInvalidContractError(
                self._contract,
                "contracts must be runtime classes",
            )
        self._inventory = inventory if inventory is not None else default_type_inventory()
        self._factory_builder = factory_builder if factory_builder is not None else FactoryBuilder()
        self._registrations = self._registrations_cache.get_or_create(
            (type(self), self._contract, self._inventory),
            self._create_registrations,
        )

    @property
    def contract(self) -> type[ContractT]:
        return self._contract

    def resolve(self, key: KeyT) -> ContractT:
        """Create a new instance of the implementation reporting ``key``.

        Raises:
            TypeLocatorUnknownKeyError: If no implementation reports ``key``.

        """
        registration = self._registrations.get(key)
        if registration is None:
            raise TypeLocatorUnknownKeyError(self._contract, key)
        return registration.factory()

    def resolve_all(self) -> Iterator[ContractT]:
        """Lazily create one new instance per registered implementation, in discovery order."""
        return (registration.factory() for registration in self._registrations.values())

    def keys(self) -> tuple[KeyT, ...]:
        return tuple(self._registrations)

    def __contains__(self, key: object) -> bool:
        return key in self._registrations

    def __len__(self) -> int:
        return len(self._registrations)

    def _create_registrations(
        self,
        _identity: _SpecializationIdentity,
    ) -> dict[Any, _KeyedRegistration]:
        implementations = self._inventory.find_assignable(self._contract)
        if not implementations:
            raise TypeLocatorUnsatisfiedContractError(
                self._contract,
                f"The type {self._contract.__qualname__} has no implementations.",
            )

        registrations: dict[Any, _KeyedRegistration] = {}
        for implementation in implementations:
            factory = self._factory_builder.build(implementation, self._contract)
            key = factory().locator_key
            existing = registrations.get(key)
            if existing is not None:
                raise TypeLocatorDuplicateKeyError(
                    self._contract,
                    key,
                    [existing.implementation, implementation],
                )
            registrations[key] = _KeyedRegistration(implementation=implementation, factory=factory)

        logger.debug(
            "Cached %d keyed factories for %s in %s",
            len(registrations),
            self._contract.__qualname__,
            type(self).__qualname__,
        )
        return registrations

    @classmethod
    def _declared_contract(cls) -> Any:
        for klass in cls.__mro__:
            for base in klass.__dict__.get("__orig_bases__", ()):
                if get_origin(base) is not KeyedServiceLocator:
                    continue
                declared = get_args(base)[1]
                if is_runtime_class(declared):
                    return declared
        msg = (
            f"{cls.__qualname__} does not declare a contract; subclass "
            "KeyedServiceLocator[KeyT, ContractT] with concrete arguments or pass contract=..."
        )
        raise TypeLocatorInvalidContractError(None, "no contract declared", msg)


def _new_specialization(alias: Any) -> type[Any]:
    key_type, contract = get_args(alias)
    name = f"KeyedServiceLocator[{_type_name(key_type)}, {_type_name(contract)}]"
    specialization = types.new_class(
        name,
        (alias,),
        exec_body=lambda namespace: namespace.update(
            {"__module__": __name__, "__qualname__": name},
        ),
    )
    logger.debug("Created keyed locator specialization %s", name)
    return specialization


def _type_name(value: Any) -> str:
    return getattr(value, "__qualname__", None) or repr(value)


__all__ = ["KeyedServiceLocator", "Locatable"]
