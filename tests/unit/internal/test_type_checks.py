from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Protocol, runtime_checkable

from typelocator._internal.type_checks import (
    is_assignable,
    is_contract_only,
    is_marker_interface,
    is_protocol_class,
    is_runtime_class,
)


class Closeable(Protocol):
    def close(self) -> None: ...


@runtime_checkable
class Flushable(Protocol):
    def flush(self) -> None: ...


class Sized(Protocol):
    size: int


class Marker(ABC):
    pass


class DocumentedMarker(ABC):
    """Role without members."""


class AuditTrail(ABC):
    def record(self, event: str) -> str:
        return event


class AbstractRepository(ABC):
    @abstractmethod
    def load(self) -> str: ...


class FileHandle(Closeable):
    def close(self) -> None:
        return None


class Buffer:
    def flush(self) -> None:
        return None


class Registered:
    pass


Marker.register(Registered)


class MarkedRepository(Marker, AbstractRepository):
    def load(self) -> str:
        return "marked"


class ExplodingMeta(type):
    def __subclasscheck__(cls, subclass: type) -> bool:
        raise RuntimeError


class Exploding(metaclass=ExplodingMeta):
    pass


def test_is_runtime_class_rejects_generic_aliases() -> None:
    assert is_runtime_class(FileHandle)
    assert not is_runtime_class(list[int])
    assert not is_runtime_class(FileHandle())


def test_is_protocol_class_only_for_protocol_definitions() -> None:
    assert is_protocol_class(Closeable)
    assert is_protocol_class(Sized)
    assert not is_protocol_class(FileHandle)


def test_is_contract_only_classifies_contracts() -> None:
    assert is_contract_only(Closeable)
    assert is_contract_only(Marker)
    assert is_contract_only(AbstractRepository)
    assert not is_contract_only(FileHandle)
    assert not is_contract_only(MarkedRepository)
    assert not is_contract_only(Buffer)


def test_direct_abc_subclass_with_members_is_not_a_marker() -> None:
    assert is_marker_interface(Marker)
    assert is_marker_interface(DocumentedMarker)
    assert not is_marker_interface(AuditTrail)
    assert not is_marker_interface(MarkedRepository)
    assert not is_contract_only(AuditTrail)


def test_is_assignable_follows_subclassing_and_virtual_registration() -> None:
    assert is_assignable(MarkedRepository, Marker)
    assert is_assignable(MarkedRepository, AbstractRepository)
    assert is_assignable(Registered, Marker)
    assert not is_assignable(Buffer, Marker)


def test_is_assignable_uses_structure_for_runtime_checkable_protocols() -> None:
    assert is_assignable(Buffer, Flushable)
    assert not is_assignable(FileHandle, Flushable)


def test_is_assignable_falls_back_to_nominal_for_plain_protocols() -> None:
    assert is_assignable(FileHandle, Closeable)
    assert not is_assignable(Buffer, Closeable)


def test_is_assignable_treats_failing_checks_as_unassignable() -> None:
    assert not is_assignable(Buffer, Exploding)
