"""
Converter registry: registration, resolution and invocation of converters.

The registry maps a ``TypePair`` (source type, target type) to exactly one
converter entry. Candidates are registered as objects; their converter methods
are found by a discovery callable (``discover_converters`` by default) and
validated before being stored. Conversions look up the most specific converter
for a value's runtime type and invoke it, classifying every failure with an
``ErrorCategory``.

Example:
::
    class NumberConverter:
        @converter
        def to_int(self, value: str) -> int:
            return int(value)

        @converter
        def to_text(self, value: int, signed: bool) -> str:
            return f"{value:+d}" if signed else str(value)

    registry = ConverterRegistry([NumberConverter()])
    registry.convert("20", int)  # 20
    registry.convert(20, str, True)  # "+20"

Registries are plain objects with no process-wide instance; pass the one you
build to whatever needs it. Every mutation and lookup takes an internal
re-entrant lock, so a registry can be shared across threads. Converters
themselves run outside the lock.
"""

from __future__ import annotations

import threading
import types
from collections.abc import Iterable, Iterator
from typing import (
    Any,
    Callable,
    Literal,
    Optional,
    TypeVar,
    Union,
    get_args,
    get_origin,
)

from typeshift.discovery import ConverterDescriptor, discover_converters
from typeshift.exceptions import ConversionError, ErrorCategory, RegistrationError
from typeshift.logging import logger
from typeshift.resolution import TypePair, type_lineage

__all__ = [
    "ConverterEntry",
    "ConverterRegistry",
    "DiscoveryFunc",
    "TargetT",
    "is_public_type",
    "matches_annotation",
]


TargetT = TypeVar("TargetT")
"""Generic type variable for the result of a conversion."""

DiscoveryFunc = Callable[[Any], Iterable[ConverterDescriptor]]
"""Callable producing the converter descriptors of a candidate."""

_NUMERIC_PROMOTIONS: dict[type, tuple[type, ...]] = {
    float: (int,),
    complex: (int, float),
}


def is_public_type(cls: type) -> bool:
    """
    Check if a class is public: no part of its qualified name starts with ``_``.
    """
    return not any(part.startswith("_") for part in cls.__qualname__.split("."))


def matches_annotation(value: Any, annotation: Any) -> bool:
    """
    Check if ``value`` is acceptable for a parameter annotated with ``annotation``.

    Plain classes are checked with ``isinstance`` (an ``int`` is accepted for a
    ``float``), unions and ``Optional`` accept any member, ``Literal`` checks
    membership and parametrised generics are checked against their origin.
    Annotations that cannot be checked at runtime, such as ``Any`` or type
    variables, accept every value.

    :param value: The argument value
    :param annotation: The parameter annotation
    :return: True if the value is acceptable
    """
    if annotation is Any or isinstance(annotation, TypeVar):
        return True

    if annotation is None or annotation is type(None):
        return value is None

    origin = get_origin(annotation)

    if origin is Union or origin is types.UnionType:
        return any(matches_annotation(value, arg) for arg in get_args(annotation))

    if origin is Literal:
        return value in get_args(annotation)

    if isinstance(origin, type):
        return isinstance(value, origin)

    if isinstance(annotation, type):
        return isinstance(value, annotation) or (
            not isinstance(value, bool)
            and isinstance(value, _NUMERIC_PROMOTIONS.get(annotation, ()))
        )

    return True


class ConverterEntry:
    """
    A validated converter stored in the registry.

    :param descriptor: The descriptor the entry was validated from
    """

    def __init__(self, descriptor: ConverterDescriptor):
        self.descriptor = descriptor
        self.pair = TypePair(descriptor.source_type, descriptor.target_type)
        self.owner_type = descriptor.owner_type
        self.min_args = sum(
            1 for param in descriptor.parameters if not param.has_default
        )
        self.max_args: Optional[int] = (
            None if descriptor.variadic else len(descriptor.parameters)
        )

    def check_arguments(self, source_type: type, args: tuple[Any, ...]):
        """
        Check the extra arguments against the converter's signature.

        :param source_type: Runtime type of the value being converted
        :param args: The extra arguments supplied for the conversion
        :raises ConversionError: TOO_FEW_ARGUMENTS, TOO_MANY_ARGUMENTS or
            ARGUMENT_TYPE_MISMATCH
        """
        category = None
        if len(args) < self.min_args:
            category = ErrorCategory.TOO_FEW_ARGUMENTS
        elif self.max_args is not None and len(args) > self.max_args:
            category = ErrorCategory.TOO_MANY_ARGUMENTS
        elif not all(
            matches_annotation(value, annotation)
            for annotation, value in zip(self._annotations(len(args)), args)
        ):
            category = ErrorCategory.ARGUMENT_TYPE_MISMATCH

        if category is not None:
            raise ConversionError.of(
                category,
                source_type=source_type,
                target_type=self.pair.target,
                converter_type=self.owner_type,
            )

    def _annotations(self, count: int) -> list[Any]:
        # declared parameters first, variadic extras repeat the *args annotation
        annotations = [param.annotation for param in self.descriptor.parameters]
        if self.descriptor.variadic and count > len(annotations):
            annotations += [self.descriptor.variadic_annotation] * (
                count - len(annotations)
            )
        return annotations

    def invoke(self, source: Any, *args: Any) -> Any:
        return self.descriptor.invoke(source, *args)

    def __repr__(self) -> str:
        return (
            f"ConverterEntry(pair={self.pair!s}, "
            f"converter={self.descriptor.qualified_name}, "
            f"args={self.min_args}..{'*' if self.max_args is None else self.max_args})"
        )


class ConverterRegistry:
    """
    Registry of converters keyed by source and target type.

    :param converters: Optional candidates registered on construction, in order
    :param discovery: Callable producing the descriptors of a candidate,
        defaults to scanning for ``@converter`` methods
    :raises RegistrationError: If any of ``converters`` fails to register
    """

    def __init__(
        self,
        converters: Optional[Iterable[Any]] = None,
        discovery: DiscoveryFunc = discover_converters,
    ):
        self._discovery = discovery
        self._entries: dict[TypePair, ConverterEntry] = {}
        self._lock = threading.RLock()

        if converters is not None:
            self.set_converters(converters)

    def register(self, candidate: Any):
        """
        Register every converter exposed by ``candidate``.

        Descriptors are validated and stored one at a time. If one fails, the
        entries already stored from earlier descriptors of the same candidate stay
        registered; nothing is rolled back.

        :param candidate: The object exposing converter methods
        :raises RegistrationError: If the candidate is None or not public, a
            converter method is invalid, a converter is already registered for
            one of its type pairs, or no converter was found at all
        """
        if candidate is None:
            raise RegistrationError.of(ErrorCategory.CANDIDATE_REQUIRED)

        owner = type(candidate)
        if not is_public_type(owner):
            raise RegistrationError.of(
                ErrorCategory.CANDIDATE_NOT_ACCESSIBLE, candidate_type=owner
            )

        with self._lock:
            added = 0

            for descriptor in self._discovery(candidate):
                entry = self._validate(descriptor)
                existing = self._entries.get(entry.pair)

                if existing is not None:
                    category = (
                        ErrorCategory.DUPLICATE_REGISTRATION
                        if existing.owner_type is entry.owner_type
                        else ErrorCategory.CONFLICTING_CONVERTER
                    )
                    raise RegistrationError.of(
                        category,
                        source_type=entry.pair.source,
                        target_type=entry.pair.target,
                        converter_type=existing.owner_type,
                        candidate_type=entry.owner_type,
                        existing=existing.descriptor.owner_type,
                    )

                self._entries[entry.pair] = entry
                added += 1
                logger.debug(f"Registered converter {entry!r}")

            if added == 0:
                raise RegistrationError.of(
                    ErrorCategory.NO_CONVERTERS_FOUND, candidate_type=owner
                )

    def set_converters(self, candidates: Iterable[Any]):
        """
        Replace all registered converters with the converters of ``candidates``.

        The registry is cleared, then each candidate is registered in order. An
        error stops the process immediately, leaving the candidates before the
        failing one registered.

        :param candidates: The candidates to register
        :raises RegistrationError: If any candidate fails to register
        """
        with self._lock:
            self.clear()
            for candidate in candidates:
                self.register(candidate)
            logger.info(f"Registry replaced with {len(self._entries)} converters")

    def clear(self):
        """
        Remove all registered converters.
        """
        with self._lock:
            self._entries.clear()
        logger.debug("Registry cleared")

    def can_convert(self, source: Any, target_type: Optional[type]) -> bool:
        """
        Check if a converter is registered for exactly the given types.

        Only the exact type pair is checked; interfaces and superclasses are not
        consulted.

        :param source: A source type, or a value whose runtime type is used
        :param target_type: The target type
        :return: True if a converter is registered for the pair
        """
        if source is None or target_type is None:
            return False

        source_type = source if isinstance(source, type) else type(source)
        with self._lock:
            return TypePair(source_type, target_type) in self._entries

    def resolve(self, source: Any, target_type: type) -> Optional[ConverterEntry]:
        """
        Find the converter used to convert ``source`` to ``target_type``.

        The runtime type of ``source`` is tried first, then the interfaces it
        declares directly, then its superclass. The first registered pair wins.

        :param source: The value to convert
        :param target_type: The target type
        :return: The matching entry, None if there is none
        """
        source_type = type(source)

        with self._lock:
            for lookup_type in type_lineage(source_type):
                entry = self._entries.get(TypePair(lookup_type, target_type))
                if entry is not None:
                    return entry

        logger.debug(f"No converter for {TypePair(source_type, target_type)}")
        return None

    def convert(
        self, source: Any, target_type: type[TargetT], *args: Any
    ) -> Optional[TargetT]:
        """
        Convert ``source`` to ``target_type``.

        None converts to None and a value already of ``target_type`` is returned
        as is, in both cases without looking up a converter.

        :param source: The value to convert
        :param target_type: The type to convert to
        :param args: Extra arguments passed to the converter after ``source``
        :return: The converted value
        :raises ConversionError: NULL_TARGET if ``target_type`` is None,
            NO_CONVERTER_FOUND if no converter matches, TOO_FEW_ARGUMENTS,
            TOO_MANY_ARGUMENTS or ARGUMENT_TYPE_MISMATCH if ``args`` do not fit
            the converter, CONVERSION_FAILED wrapping any other error the
            converter raises. A ``ConversionError`` raised by the converter is
            propagated unchanged.
        """
        if target_type is None:
            raise ConversionError.of(ErrorCategory.NULL_TARGET)

        if source is None:
            return None

        source_type = type(source)
        if source_type is target_type:
            return source

        entry = self.resolve(source, target_type)
        if entry is None:
            raise ConversionError.of(
                ErrorCategory.NO_CONVERTER_FOUND,
                source_type=source_type,
                target_type=target_type,
            )

        entry.check_arguments(source_type, args)

        try:
            return entry.invoke(source, *args)
        except ConversionError:
            raise
        except Exception as err:
            raise ConversionError.of(
                ErrorCategory.CONVERSION_FAILED,
                source_type=source_type,
                target_type=target_type,
                converter_type=entry.owner_type,
            ) from err

    def pairs(self) -> tuple[TypePair, ...]:
        """
        Get the registered type pairs in registration order.
        """
        with self._lock:
            return tuple(self._entries)

    def entries(self) -> tuple[ConverterEntry, ...]:
        """
        Get the registered entries in registration order.
        """
        with self._lock:
            return tuple(self._entries.values())

    def __contains__(self, pair: object) -> bool:
        with self._lock:
            return pair in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __iter__(self) -> Iterator[TypePair]:
        return iter(self.pairs())

    def _validate(self, descriptor: ConverterDescriptor) -> ConverterEntry:
        fields = {
            "candidate_type": descriptor.owner_type,
            "method": descriptor.name,
        }

        if not descriptor.accessible:
            raise RegistrationError.of(ErrorCategory.METHOD_NOT_ACCESSIBLE, **fields)

        if descriptor.unsupported is not None:
            raise RegistrationError.of(
                ErrorCategory.UNSUPPORTED_SIGNATURE,
                reason=descriptor.unsupported,
                **fields,
            )

        if descriptor.target_type is None:
            raise RegistrationError.of(ErrorCategory.MISSING_RETURN_TYPE, **fields)

        if not descriptor.has_parameters or descriptor.source_type is None:
            raise RegistrationError.of(
                ErrorCategory.MISSING_SOURCE_PARAMETER, **fields
            )

        if descriptor.source_type is descriptor.target_type:
            raise RegistrationError.of(
                ErrorCategory.IDENTITY_CONVERSION_REJECTED,
                source_type=descriptor.source_type,
                target_type=descriptor.target_type,
                **fields,
            )

        return ConverterEntry(descriptor)
