"""Zero-argument factories for located implementations.

A factory is bound to one concrete class and builds a new value on every call.
Reference types are constructed through their own no-argument constructor;
value types yield their default value without running user ``__new__``/``__init__``.
"""

from __future__ import annotations

import inspect
from collections.abc import Callable
from enum import Enum
from inspect import Parameter
from typing import Any, Generic, Protocol, TypeVar

from typelocator._internal.policies import VALUE_TYPE_BASES, is_value_type
from typelocator.exceptions import TypeLocatorNoParameterlessConstructorError

T_co = TypeVar("T_co", covariant=True)


class Factory(Protocol[T_co]):
    """Zero-argument callable producing a new instance on every invocation."""

    @property
    def implementation(self) -> type[Any]: ...

    def __call__(self) -> T_co: ...


class ConstructorFactory(Generic[T_co]):
    """Factory for reference types: calls the class with no arguments."""

    __slots__ = ("_type",)

    def __init__(self, t: type[Any]) -> None:
        self._type = t

    @property
    def implementation(self) -> type[Any]:
        return self._type

    def __call__(self) -> T_co:
        return self._type()

    def __repr__(self) -> str:
        return f"ConstructorFactory({self._type.__qualname__})"


class DefaultValueFactory(Generic[T_co]):
    """Factory for value types: yields the type's zero value.

    The default is computed from the builtin value base directly, so a subclass's
    own ``__new__``/``__init__`` never runs.
    """

    __slots__ = ("_build", "_type")

    def __init__(self, t: type[Any]) -> None:
        self._type = t
        self._build = _default_value_builder(t)

    @property
    def implementation(self) -> type[Any]:
        return self._type

    def __call__(self) -> T_co:
        return self._build()

    def __repr__(self) -> str:
        return f"DefaultValueFactory({self._type.__qualname__})"


def _default_value_builder(t: type[Any]) -> Callable[[], Any]:
    if issubclass(t, Enum):
        first_member = next(iter(t))
        return lambda: first_member

    if issubclass(t, tuple) and hasattr(t, "_fields"):
        field_defaults: dict[str, Any] = getattr(t, "_field_defaults", {})
        values = tuple(field_defaults.get(name) for name in t._fields)
        return lambda: tuple.__new__(t, values)

    value_base = next(base for base in t.__mro__ if base in VALUE_TYPE_BASES)
    return lambda: value_base.__new__(t)


class FactoryBuilder:
    """Build factories for concrete classes after validating the constructor contract."""

    def build(self, concrete_type: type[Any], contract: Any) -> Factory[Any]:
        """Return a factory producing instances of ``concrete_type``.

        Args:
            concrete_type: Concrete implementation selected for ``contract``.
            contract: Contract the implementation is returned as; used in error
                messages.

        Raises:
            TypeLocatorNoParameterlessConstructorError: If ``concrete_type`` is a
                reference type whose constructor has required parameters, or an
                enum without members.

        """
        if is_value_type(concrete_type):
            if issubclass(concrete_type, Enum) and not len(concrete_type):
                raise TypeLocatorNoParameterlessConstructorError(contract, concrete_type)
            return DefaultValueFactory(concrete_type)
        if not self.has_parameterless_constructor(concrete_type):
            raise TypeLocatorNoParameterlessConstructorError(contract, concrete_type)
        return ConstructorFactory(concrete_type)

    def has_parameterless_constructor(self, concrete_type: type[Any]) -> bool:
        try:
            parameters = inspect.signature(concrete_type).parameters.values()
        except (TypeError, ValueError):
            # no introspectable signature (some extension types); assume callable
            return True
        return not any(self._is_required_parameter(parameter) for parameter in parameters)

    def _is_required_parameter(self, parameter: Parameter) -> bool:
        return (
            parameter.default is Parameter.empty
            and parameter.kind is not Parameter.VAR_POSITIONAL
            and parameter.kind is not Parameter.VAR_KEYWORD
        )


__all__ = [
    "ConstructorFactory",
    "DefaultValueFactory",
    "Factory",
    "FactoryBuilder",
]
