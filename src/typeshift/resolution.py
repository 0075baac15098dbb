"""
Type pairs and the lookup order used to resolve converters for a value.

A value is resolved against the registry by trying, in order, its exact runtime
type, the interfaces that type declares directly, and its superclass. Only one
level of interfaces and one superclass are considered, which keeps a resolution
to a short, fixed list of dictionary lookups. The list is computed once per type.
"""

from __future__ import annotations

import inspect
from abc import ABC, ABCMeta
from functools import lru_cache
from typing import Generic, NamedTuple, Protocol

__all__ = ["TypePair", "interfaces_of", "is_interface", "superclass_of", "type_lineage"]

# typing markers, never a lookup tier of their own
_TYPING_BASES = (Generic, Protocol)


class TypePair(NamedTuple):
    """
    Immutable key identifying one conversion direction.

    :ivar source: The type converted from
    :ivar target: The type converted to
    """

    source: type
    target: type

    def __str__(self) -> str:
        return f"{_name(self.source)} -> {_name(self.target)}"


def _name(value: type) -> str:
    return getattr(value, "__qualname__", repr(value))


def is_interface(cls: type) -> bool:
    """
    Check if a class acts as an interface for resolution purposes.

    ``typing.Protocol`` classes, classes deriving directly from ``abc.ABC`` and
    classes with unimplemented abstract methods are interfaces. Concrete classes
    that merely inherit from an ABC further up are not.

    :param cls: The class to check
    :return: True if the class is an interface
    """
    if getattr(cls, "_is_protocol", False):
        return True

    return isinstance(cls, ABCMeta) and (ABC in cls.__bases__ or inspect.isabstract(cls))


def interfaces_of(cls: type) -> tuple[type, ...]:
    """
    Get the interfaces declared directly by ``cls``, in declaration order.
    """
    return tuple(
        base
        for base in cls.__bases__
        if base not in _TYPING_BASES and is_interface(base)
    )


def superclass_of(cls: type) -> type | None:
    """
    Get the single superclass consulted during resolution.

    This is the first direct base that is not an interface, falling back to
    ``object``. ``typing.Generic`` is skipped like an interface, so
    ``class Box(Generic[T])`` resolves to ``object``. ``object`` itself has no
    superclass.
    """
    if cls is object:
        return None

    for base in cls.__bases__:
        if base not in _TYPING_BASES and not is_interface(base):
            return base

    return object


@lru_cache(maxsize=1024)
def type_lineage(cls: type) -> tuple[type, ...]:
    """
    Get the ordered list of types a value of ``cls`` is resolved as.

    The order is the exact type, then its directly declared interfaces, then
    its superclass. Duplicates are dropped keeping the first occurrence.

    Example:
    ::
        class Shape(ABC): ...
        class Base: ...
        class Square(Base, Shape): ...

        type_lineage(Square)  # (Square, Shape, Base)

    :param cls: The runtime type of the value being converted
    :return: Tuple of types to look up, most specific first
    """
    lineage: list[type] = [cls, *interfaces_of(cls)]
    superclass = superclass_of(cls)

    if superclass is not None:
        lineage.append(superclass)

    return tuple(dict.fromkeys(lineage))
