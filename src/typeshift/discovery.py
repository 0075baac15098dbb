"""
Discovery of converter methods on candidate objects.

A converter candidate is any object with one or more methods marked with the
``@converter`` decorator. Each marked method takes the object to convert as its
first parameter, may take extra positional parameters, and declares the type it
converts to through its return annotation:

::
    class TemperatureConverter:
        @converter
        def to_fahrenheit(self, value: Celsius) -> Fahrenheit:
            return Fahrenheit(value.degrees * 9 / 5 + 32)

        @converter
        def to_text(self, value: Celsius, precision: int = 1) -> str:
            return f"{value.degrees:.{precision}f}C"

``discover_converters`` turns such an object into ``ConverterDescriptor`` models,
the only thing the registry consumes. Discovery never rejects a method: problems
with a signature are recorded on the descriptor and reported by the registry,
so any other discovery mechanism can feed the registry the same way.
"""

from __future__ import annotations

import inspect
from collections.abc import Iterator
from typing import Any, Callable, Optional, TypeVar, get_origin, get_type_hints

from pydantic import BaseModel, ConfigDict, Field

__all__ = [
    "CONVERTER_MARKER",
    "ConverterDescriptor",
    "ParameterSpec",
    "converter",
    "discover_converters",
    "is_converter",
]


CONVERTER_MARKER = "__typeshift_converter__"
"""Attribute set on functions marked with ``@converter``."""

FuncT = TypeVar("FuncT")


class ParameterSpec(BaseModel):
    """
    An extra parameter a converter takes after the object to convert.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str = Field(description="The parameter name in the converter signature.")
    annotation: Any = Field(
        default=Any,
        description="The annotated type, Any when the parameter is not annotated.",
    )
    has_default: bool = Field(
        default=False,
        description="True if the parameter may be omitted when converting.",
    )


class ConverterDescriptor(BaseModel):
    """
    A discovered unit of convertibility: one method on one candidate.

    ``source_type`` is None when the method takes no parameters and
    ``target_type`` is None when it declares no result type; both are
    registration errors the registry reports. ``unsupported`` holds the reason
    when the signature cannot be used at all (e.g. an unannotated source).
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    owner_type: type = Field(description="Type of the candidate declaring the method.")
    name: str = Field(description="Name of the converter method.")
    invoke: Callable[..., Any] = Field(
        description="Callable invoked as invoke(source, *extra_args)."
    )
    accessible: bool = Field(
        default=True, description="False if the method is not part of the public API."
    )
    source_type: Optional[type] = Field(default=None)
    target_type: Optional[type] = Field(default=None)
    parameters: tuple[ParameterSpec, ...] = Field(
        default=(), description="Extra parameters after the source parameter."
    )
    variadic: bool = Field(
        default=False, description="True if the method accepts any number of extras."
    )
    variadic_annotation: Any = Field(
        default=Any,
        description="The annotated type of each variadic extra, Any when unannotated.",
    )
    has_parameters: bool = Field(
        default=True,
        description="False if the method takes no parameter for the source object.",
    )
    unsupported: Optional[str] = Field(
        default=None,
        description="Why the signature cannot be registered, None when it can.",
    )

    @property
    def qualified_name(self) -> str:
        return f"{self.owner_type.__qualname__}.{self.name}"


def converter(func: FuncT) -> FuncT:
    """
    Mark a method as a converter.

    Works on plain methods, static methods and class methods; stack it above
    ``@staticmethod`` or ``@classmethod``.

    :param func: The method to mark
    :return: The same method, marked
    """
    target = func.__func__ if isinstance(func, (staticmethod, classmethod)) else func
    setattr(target, CONVERTER_MARKER, True)
    return func


def is_converter(attr: Any) -> bool:
    """
    Check if a class attribute was marked with ``@converter``.
    """
    target = attr.__func__ if isinstance(attr, (staticmethod, classmethod)) else attr
    return callable(target) and getattr(target, CONVERTER_MARKER, False) is True


def discover_converters(candidate: Any) -> Iterator[ConverterDescriptor]:
    """
    Yield a descriptor for every ``@converter`` method of ``candidate``.

    Methods are visited in definition order, most derived class first; a method
    overridden in a subclass is only visited once, using the override. The
    generator is lazy so the registry can fail on the first bad method before
    the rest are inspected.

    :param candidate: The object to scan
    :return: Iterator of converter descriptors
    """
    owner = type(candidate)
    seen: set[str] = set()

    for klass in owner.__mro__:
        for name, attr in vars(klass).items():
            if name in seen:
                continue
            seen.add(name)

            if is_converter(attr):
                yield describe_method(candidate, name, attr)


def describe_method(candidate: Any, name: str, attr: Any) -> ConverterDescriptor:
    """
    Build the descriptor for one marked method of ``candidate``.

    :param candidate: The object declaring the method
    :param name: The attribute name of the method
    :param attr: The raw class attribute (function, staticmethod or classmethod)
    :return: The descriptor, with any signature problem recorded on it
    """
    owner = type(candidate)
    func = attr.__func__ if isinstance(attr, (staticmethod, classmethod)) else attr
    bound = getattr(candidate, name)
    base = {"owner_type": owner, "name": name, "invoke": bound}

    if name.startswith("_"):
        return ConverterDescriptor(**base, accessible=False)

    try:
        hints = get_type_hints(func)
    except (NameError, TypeError) as err:
        return ConverterDescriptor(
            **base, unsupported=f"annotations cannot be resolved ({err})."
        )

    target_type, target_problem = _as_class(hints.get("return"))
    if target_type is type(None):
        target_type = None
    if "return" not in hints:
        target_problem = None

    signature = inspect.signature(bound)
    positional = [
        param
        for param in signature.parameters.values()
        if param.kind in (param.POSITIONAL_ONLY, param.POSITIONAL_OR_KEYWORD)
    ]
    var_positional = next(
        (
            param
            for param in signature.parameters.values()
            if param.kind is param.VAR_POSITIONAL
        ),
        None,
    )
    variadic = var_positional is not None
    if target_problem:
        return ConverterDescriptor(
            **base, unsupported=f"return annotation {target_problem}"
        )

    if not positional:
        return ConverterDescriptor(
            **base, target_type=target_type, has_parameters=False, variadic=variadic
        )

    source, *extras = positional
    source_type, source_problem = _as_class(hints.get(source.name))
    required_keywords = [
        param.name
        for param in signature.parameters.values()
        if param.kind is param.KEYWORD_ONLY and param.default is param.empty
    ]

    # a missing return type takes precedence and is reported by the registry
    unsupported = None
    if target_type is not None and source_problem:
        unsupported = f"source parameter '{source.name}' {source_problem}"
    elif target_type is not None and required_keywords:
        unsupported = f"keyword-only parameters {required_keywords} have no default."

    return ConverterDescriptor(
        **base,
        source_type=source_type,
        target_type=target_type,
        parameters=tuple(
            ParameterSpec(
                name=param.name,
                annotation=hints.get(param.name, Any),
                has_default=param.default is not param.empty,
            )
            for param in extras
        ),
        variadic=variadic,
        variadic_annotation=(
            hints.get(var_positional.name, Any) if var_positional is not None else Any
        ),
        unsupported=unsupported,
    )


def _as_class(hint: Any) -> tuple[Optional[type], Optional[str]]:
    # reduce an annotation to the runtime class values are checked against
    if hint is None:
        return None, "is missing."

    origin = get_origin(hint)
    if isinstance(origin, type):
        return origin, None

    if isinstance(hint, type):
        return hint, None

    return None, f"{hint!r} is not a class."
