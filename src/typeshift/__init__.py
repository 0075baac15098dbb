"""
typeshift: a runtime type-conversion registry.

Converters are plain objects whose methods are marked with ``@converter``. Each
marked method converts a value of its first parameter's type into its return
type. Register converter objects with a ``ConverterRegistry`` and ask it to
convert values; the registry picks the most specific converter for the value's
runtime type (exact type, then directly declared interfaces, then superclass),
checks any extra arguments against the converter's signature, and reports every
failure as a classified ``RegistrationError`` or ``ConversionError``.

Example:
::
    from typeshift import ConverterRegistry, converter

    class NumberConverter:
        @converter
        def parse(self, value: str) -> int:
            return int(value)

        @converter
        def format(self, value: int) -> str:
            return str(value)

    registry = ConverterRegistry([NumberConverter()])
    registry.convert("20", int)  # 20
    registry.convert(20, str)  # "20"
"""

from .discovery import ConverterDescriptor, ParameterSpec, converter, discover_converters
from .exceptions import ConversionError, ErrorCategory, RegistrationError, TypeshiftError
from .logging import configure_logger, logger
from .registry import ConverterEntry, ConverterRegistry
from .resolution import TypePair, type_lineage
from .settings import settings

__all__ = [
    "ConversionError",
    "ConverterDescriptor",
    "ConverterEntry",
    "ConverterRegistry",
    "ErrorCategory",
    "ParameterSpec",
    "RegistrationError",
    "TypePair",
    "TypeshiftError",
    "configure_logger",
    "converter",
    "discover_converters",
    "logger",
    "settings",
    "type_lineage",
]
