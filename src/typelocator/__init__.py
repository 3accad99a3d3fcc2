from typelocator._internal.factories import ConstructorFactory, DefaultValueFactory, FactoryBuilder
from typelocator._internal.inventory import (
    DiscoveryResult,
    LoadedModulesTypeSource,
    StaticTypeSource,
    TypeGroup,
    TypeInventory,
    TypeSource,
    default_type_inventory,
    failed_sources,
)
from typelocator._internal.keyed_locator import KeyedServiceLocator, Locatable
from typelocator._internal.locator import ServiceLocator, service_locator
from typelocator._internal.policies import ConcreteTypePolicy
from typelocator.exceptions import (
    TypeLocatorAmbiguousContractError,
    TypeLocatorDuplicateKeyError,
    TypeLocatorError,
    TypeLocatorInvalidContractError,
    TypeLocatorNoParameterlessConstructorError,
    TypeLocatorPredicateAmbiguousError,
    TypeLocatorPredicateUnsatisfiedError,
    TypeLocatorUnknownKeyError,
    TypeLocatorUnsatisfiedContractError,
)
from typelocator.lock_mode import LockMode

__all__ = [
    "ConcreteTypePolicy",
    "ConstructorFactory",
    "DefaultValueFactory",
    "DiscoveryResult",
    "FactoryBuilder",
    "KeyedServiceLocator",
    "LoadedModulesTypeSource",
    "Locatable",
    "LockMode",
    "ServiceLocator",
    "StaticTypeSource",
    "TypeGroup",
    "TypeInventory",
    "TypeLocatorAmbiguousContractError",
    "TypeLocatorDuplicateKeyError",
    "TypeLocatorError",
    "TypeLocatorInvalidContractError",
    "TypeLocatorNoParameterlessConstructorError",
    "TypeLocatorPredicateAmbiguousError",
    "TypeLocatorPredicateUnsatisfiedError",
    "TypeLocatorUnknownKeyError",
    "TypeLocatorUnsatisfiedContractError",
    "TypeSource",
    "default_type_inventory",
    "failed_sources",
    "service_locator",
]
