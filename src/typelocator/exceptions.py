from __future__ import annotations

from collections.abc import Sequence
from typing import Any


def _type_name(value: Any) -> str:
    return getattr(value, "__qualname__", None) or repr(value)


class TypeLocatorError(Exception):
    """Represent a base class for all typelocator-specific failures.

    Catch this type when you want to handle any resolution error path without
    matching each concrete exception class individually. Every typelocator error
    is an ordinary recoverable condition; nothing is retried internally.
    """


class TypeLocatorInvalidContractError(TypeLocatorError):
    """Signal that a contract or binding target is not usable.

    Raised by ``ServiceLocator.resolve``/``resolve_all`` when the requested
    contract is not a runtime class (for example a parameterized generic alias),
    by ``ServiceLocator.bind`` when the implementation is not a class
    assignable to the contract, and by ``KeyedServiceLocator`` when no contract
    is passed or declared in its generic base (``contract`` is then ``None``).

    Typical fixes include passing the bare class instead of ``Repo[int]`` and
    binding a subclass (or registered virtual subclass) of the contract.
    """

    def __init__(self, contract: Any, reason: str, message: str | None = None) -> None:
        self.contract = contract
        self.reason = reason
        if message is None:
            message = f"Cannot use {contract!r} as a contract: {reason}"
        super().__init__(message)


class TypeLocatorUnsatisfiedContractError(TypeLocatorError):
    """Signal that no concrete type implements the requested contract.

    Raised by ``ServiceLocator.resolve`` and by ``KeyedServiceLocator``
    construction when discovery finds zero assignable concrete types.

    Typical fixes include importing the module that defines the implementation
    before the first resolution (discovery runs once per inventory), or checking
    ``failed_sources()`` for modules that could not be enumerated.
    """

    def __init__(self, contract: Any, message: str | None = None) -> None:
        self.contract = contract
        if message is None:
            message = (
                f"No implementations of type {_type_name(contract)} exist, "
                "cannot create an instance."
            )
        super().__init__(message)


class TypeLocatorAmbiguousContractError(TypeLocatorError):
    """Signal that several concrete types implement a single-instance contract.

    Raised by ``ServiceLocator.resolve`` when discovery finds more than one
    assignable concrete type and no override binding exists for the contract.

    Typical fixes include ``ServiceLocator.bind(contract, implementation)``,
    resolving with a predicate, or using ``resolve_all``.
    """

    def __init__(
        self,
        contract: Any,
        implementations: Sequence[type[Any]],
        message: str | None = None,
    ) -> None:
        self.contract = contract
        self.implementations = tuple(implementations)
        if message is None:
            names = ", ".join(_type_name(implementation) for implementation in implementations)
            message = (
                f"Multiple implementations of type {_type_name(contract)} exist ({names}), "
                "cannot create a single instance."
            )
        super().__init__(message)


class TypeLocatorNoParameterlessConstructorError(TypeLocatorError):
    """Signal that the matched implementation cannot be built without arguments.

    Every located implementation is constructed with no arguments. This error is
    raised when the sole match (or any match, for ``resolve_all`` and keyed
    locators) has required ``__init__``/``__new__`` parameters.

    Typical fixes include giving every constructor parameter a default value.
    """

    def __init__(self, contract: Any, implementation: type[Any]) -> None:
        self.contract = contract
        self.implementation = implementation
        super().__init__(
            f"The implementation {_type_name(implementation)} of type {_type_name(contract)} "
            "doesn't have a parameterless constructor. This is required to create an instance.",
        )


class TypeLocatorPredicateUnsatisfiedError(TypeLocatorUnsatisfiedContractError):
    """Signal that no implementation matched the predicate given to ``resolve``."""

    def __init__(self, contract: Any) -> None:
        super().__init__(
            contract,
            f"No implementations of {_type_name(contract)} matched the given predicate.",
        )


class TypeLocatorPredicateAmbiguousError(TypeLocatorAmbiguousContractError):
    """Signal that more than one implementation matched the predicate given to ``resolve``."""

    def __init__(self, contract: Any, implementations: Sequence[type[Any]]) -> None:
        super().__init__(
            contract,
            implementations,
            f"Multiple implementations of {_type_name(contract)} matched the given predicate.",
        )


class TypeLocatorDuplicateKeyError(TypeLocatorError):
    """Signal that two keyed implementations report the same locator key.

    Raised while a ``KeyedServiceLocator`` specialization builds its key map,
    so the failure surfaces at construction time rather than at lookup time.
    """

    def __init__(self, contract: Any, key: Any, implementations: Sequence[type[Any]]) -> None:
        self.contract = contract
        self.key = key
        self.implementations = tuple(implementations)
        names = ", ".join(_type_name(implementation) for implementation in implementations)
        super().__init__(
            f"Multiple classes implementing {_type_name(contract)} are not allowed to return "
            f"the same locator_key: {key!r} ({names}).",
        )


class TypeLocatorUnknownKeyError(TypeLocatorError):
    """Signal a keyed lookup with a key no implementation reports."""

    def __init__(self, contract: Any, key: Any) -> None:
        self.contract = contract
        self.key = key
        super().__init__(
            f"Couldn't find any class that implements type {_type_name(contract)} "
            f"and has the key {key!r}.",
        )
