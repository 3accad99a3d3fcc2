from __future__ import annotations

import abc
import inspect
import types
from typing import Any, TypeGuard


# attributes Python itself puts in a class namespace
_IMPLICIT_CLASS_ATTRIBUTES = frozenset(
    {
        "__abstractmethods__",
        "__annotate__",
        "__annotate_func__",
        "__annotations__",
        "__annotations_cache__",
        "__dict__",
        "__doc__",
        "__firstlineno__",
        "__module__",
        "__orig_bases__",
        "__parameters__",
        "__qualname__",
        "__slots__",
        "__static_attributes__",
        "__type_params__",
        "__weakref__",
        "_abc_impl",
    },
)


def is_runtime_class(candidate: object) -> TypeGuard[type[Any]]:
    """Return true when candidate is a runtime class safe for class-only operations.

    Args:
        candidate: Value being checked for eligibility or runtime type constraints.

    """
    return isinstance(candidate, type) and not isinstance(candidate, types.GenericAlias)


def is_protocol_class(candidate: type[Any]) -> bool:
    """Return true when candidate is a ``typing.Protocol`` definition."""
    return bool(getattr(candidate, "_is_protocol", False))


def is_marker_interface(candidate: type[Any]) -> bool:
    """Return true when candidate derives directly from ``abc.ABC`` and declares nothing.

    ``class Repository(ABC): pass`` only names a role. A direct ``ABC`` subclass
    that defines methods or attributes of its own is an ordinary class and can be
    located and instantiated.
    """
    if abc.ABC not in getattr(candidate, "__bases__", ()):
        return False
    return all(name in _IMPLICIT_CLASS_ATTRIBUTES for name in vars(candidate))


def is_contract_only(candidate: type[Any]) -> bool:
    """Return true when candidate can only serve as a contract, never as an implementation.

    That covers classes with unimplemented abstract methods, protocols, and
    empty marker interfaces declared directly on ``abc.ABC``.

    Args:
        candidate: Class being classified.

    """
    return (
        inspect.isabstract(candidate)
        or is_protocol_class(candidate)
        or is_marker_interface(candidate)
    )


def is_assignable(candidate: type[Any], contract: type[Any]) -> bool:
    """Return whether instances of ``candidate`` satisfy ``contract``.

    ``issubclass`` is tried first so ABC virtual subclasses and runtime-checkable
    protocols are honored. Protocols that refuse class checks fall back to nominal
    inheritance.

    Args:
        candidate: Concrete class taken from the type inventory.
        contract: Contract class being resolved.

    """
    try:
        return issubclass(candidate, contract)
    except TypeError:
        return contract in getattr(candidate, "__mro__", ())
    except Exception:  # noqa: BLE001
        return False


__all__ = [
    "is_assignable",
    "is_contract_only",
    "is_marker_interface",
    "is_protocol_class",
    "is_runtime_class",
]
