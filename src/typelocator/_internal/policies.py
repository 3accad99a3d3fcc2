from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, TypeGuard

from typelocator._internal.type_checks import is_contract_only, is_runtime_class

VALUE_TYPE_BASES: tuple[type[Any], ...] = (
    int,
    float,
    complex,
    str,
    bytes,
    tuple,
    frozenset,
)


@dataclass(frozen=True, slots=True)
class ConcreteTypePolicy:
    """Decide which classes the type inventory treats as concrete implementations."""

    ignored_modules: tuple[str, ...] = ("builtins",)

    def is_concrete(self, candidate: object) -> TypeGuard[type[Any]]:
        """Return true when a candidate can be located and instantiated.

        Abstract classes, protocols, ABC marker interfaces, metaclasses and
        member-less enums are contracts or bases, never implementations.

        Args:
            candidate: Value being checked for eligibility or runtime type constraints.

        """
        if not is_runtime_class(candidate):
            return False
        if getattr(candidate, "__module__", None) in self.ignored_modules:
            return False
        if is_contract_only(candidate):
            return False
        if issubclass(candidate, type):
            return False
        return not (issubclass(candidate, Enum) and not len(candidate))


def is_value_type(candidate: type[Any]) -> bool:
    """Return whether instances of ``candidate`` are immutable values.

    Value types get a default-value factory instead of a constructor call.
    """
    return issubclass(candidate, Enum) or issubclass(candidate, VALUE_TYPE_BASES)


__all__ = ["VALUE_TYPE_BASES", "ConcreteTypePolicy", "is_value_type"]
