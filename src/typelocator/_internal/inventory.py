from __future__ import annotations

import functools
import logging
import sys
import threading
from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass, field
from types import ModuleType
from typing import Any, Protocol

from typelocator._internal.policies import ConcreteTypePolicy
from typelocator._internal.type_checks import is_assignable, is_runtime_class

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class TypeGroup:
    """One loadable unit of classes, typically a module.

    ``load`` is called once during discovery. It may raise; the failure is
    recorded against ``identity`` and the group contributes no types.
    """

    identity: str
    load: Callable[[], Iterable[type[Any]]]


class TypeSource(Protocol):
    """Enumerate the classes currently available to the process, grouped by unit."""

    def iter_groups(self) -> Iterable[TypeGroup]: ...


class LoadedModulesTypeSource:
    """Type source backed by the modules present in ``sys.modules``.

    A module contributes the classes defined in it (``__module__`` matches) and,
    recursively, the classes nested inside those.
    """

    def iter_groups(self) -> Iterator[TypeGroup]:
        for module_name, module in list(sys.modules.items()):
            if module is None:
                continue
            yield TypeGroup(
                identity=module_name,
                load=functools.partial(self._module_types, module=module, module_name=module_name),
            )

    def _module_types(self, *, module: ModuleType, module_name: str) -> list[type[Any]]:
        defined_in = getattr(module, "__name__", module_name)
        found: list[type[Any]] = []
        for value in list(vars(module).values()):
            if is_runtime_class(value) and getattr(value, "__module__", None) == defined_in:
                found.append(value)
                found.extend(self._nested_types(value))
        return found

    def _nested_types(self, owner: type[Any]) -> Iterator[type[Any]]:
        prefix = f"{owner.__qualname__}."
        for value in list(vars(owner).values()):
            if (
                is_runtime_class(value)
                and value.__module__ == owner.__module__
                and value.__qualname__.startswith(prefix)
            ):
                yield value
                yield from self._nested_types(value)


class StaticTypeSource:
    """Type source over an explicitly registered, fixed set of classes."""

    def __init__(self, types: Iterable[type[Any]], *, identity: str = "static") -> None:
        self._types = tuple(types)
        self._identity = identity

    def iter_groups(self) -> Iterator[TypeGroup]:
        yield TypeGroup(identity=self._identity, load=lambda: self._types)


@dataclass(frozen=True, slots=True)
class DiscoveryResult:
    """Immutable outcome of one discovery pass."""

    types: tuple[type[Any], ...]
    failed_sources: tuple[str, ...] = field(default=())


class TypeInventory:
    """Snapshot of every concrete class visible through a type source.

    Discovery runs once, lazily, on first access and is guarded so concurrent
    first use enumerates the source only once. The result is read without
    locking afterwards.
    """

    def __init__(
        self,
        source: TypeSource | None = None,
        *,
        policy: ConcreteTypePolicy | None = None,
    ) -> None:
        self._source = source if source is not None else LoadedModulesTypeSource()
        self._policy = policy if policy is not None else ConcreteTypePolicy()
        self._result: DiscoveryResult | None = None
        self._lock = threading.Lock()

    @property
    def types(self) -> tuple[type[Any], ...]:
        """Concrete classes in discovery order."""
        return self.discover().types

    @property
    def failed_sources(self) -> tuple[str, ...]:
        """``"<identity>: <error>"`` entries for groups that could not be enumerated."""
        return self.discover().failed_sources

    @property
    def is_discovered(self) -> bool:
        return self._result is not None

    def discover(self) -> DiscoveryResult:
        """Return the memoized discovery result, running discovery on first call."""
        result = self._result
        if result is not None:
            return result
        with self._lock:
            if self._result is None:
                self._result = self._run_discovery()
            return self._result

    def find_assignable(self, contract: type[Any]) -> list[type[Any]]:
        """Return the concrete classes assignable to ``contract`` in inventory order.

        Args:
            contract: Contract class being resolved.

        """
        return [candidate for candidate in self.types if is_assignable(candidate, contract)]

    def _run_discovery(self) -> DiscoveryResult:
        found: dict[type[Any], None] = {}
        failed: list[str] = []
        group_count = 0

        for group in self._source.iter_groups():
            group_count += 1
            try:
                concrete_types = [
                    candidate for candidate in group.load() if self._policy.is_concrete(candidate)
                ]
            except Exception as error:  # noqa: BLE001
                failed.append(f"{group.identity}: {error!r}")
                logger.debug("Failed to enumerate types of %s: %r", group.identity, error)
                continue
            for candidate in concrete_types:
                found.setdefault(candidate, None)

        logger.info(
            "Type discovery finished: type_count=%d group_count=%d failed_count=%d",
            len(found),
            group_count,
            len(failed),
        )
        return DiscoveryResult(types=tuple(found), failed_sources=tuple(failed))


_default_inventory = TypeInventory()


def default_type_inventory() -> TypeInventory:
    """Return the process-wide inventory over loaded modules."""
    return _default_inventory


def failed_sources() -> tuple[str, ...]:
    """Return modules the process-wide inventory failed to enumerate.

    Intended for debugging "my implementation wasn't found" cases. Triggers
    discovery when it has not run yet.
    """
    return _default_inventory.failed_sources


__all__ = [
    "DiscoveryResult",
    "LoadedModulesTypeSource",
    "StaticTypeSource",
    "TypeGroup",
    "TypeInventory",
    "TypeSource",
    "default_type_inventory",
    "failed_sources",
]
