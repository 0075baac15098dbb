"""
Error taxonomy for converter registration and conversion.

Two failure domains are exposed: ``RegistrationError`` for problems found while a
converter candidate is being registered, and ``ConversionError`` for problems
found while a value is being converted. Both carry an ``ErrorCategory`` plus the
types involved so callers can react to the failure without parsing its message.
Converters raise ``ConversionError`` themselves to report a classified failure;
the registry lets those through unchanged.
"""

from __future__ import annotations

from functools import partial
from typing import Any, Optional

from typeshift.messages import Message, get_catalog

__all__ = [
    "REGISTRATION_CATEGORIES",
    "CONVERSION_CATEGORIES",
    "ConversionError",
    "ErrorCategory",
    "RegistrationError",
    "TypeshiftError",
]


# categories double as message catalog keys
ErrorCategory = Message

REGISTRATION_CATEGORIES = frozenset(
    {
        ErrorCategory.CANDIDATE_REQUIRED,
        ErrorCategory.CANDIDATE_NOT_ACCESSIBLE,
        ErrorCategory.METHOD_NOT_ACCESSIBLE,
        ErrorCategory.MISSING_RETURN_TYPE,
        ErrorCategory.MISSING_SOURCE_PARAMETER,
        ErrorCategory.IDENTITY_CONVERSION_REJECTED,
        ErrorCategory.DUPLICATE_REGISTRATION,
        ErrorCategory.CONFLICTING_CONVERTER,
        ErrorCategory.NO_CONVERTERS_FOUND,
        ErrorCategory.UNSUPPORTED_SIGNATURE,
    }
)

CONVERSION_CATEGORIES = frozenset(
    {
        ErrorCategory.NULL_TARGET,
        ErrorCategory.NO_CONVERTER_FOUND,
        ErrorCategory.TOO_FEW_ARGUMENTS,
        ErrorCategory.TOO_MANY_ARGUMENTS,
        ErrorCategory.ARGUMENT_TYPE_MISMATCH,
        ErrorCategory.CONVERSION_FAILED,
    }
)


class TypeshiftError(Exception):
    """
    Base class for all typeshift errors.

    Instances are either built from a category, in which case the message is
    rendered from the message catalog, or from a plain message, which is how
    converters report their own failures.

    Example:
    ::
        raise ConversionError("Long conversion failed")

        raise ConversionError.of(
            ErrorCategory.NO_CONVERTER_FOUND, source_type=str, target_type=bool
        )

    :ivar category: The error category, None for converter raised errors
    :ivar source_type: Source type involved in the failure, if any
    :ivar target_type: Target type involved in the failure, if any
    :ivar converter_type: Owner type of the converter involved, if any
    :ivar candidate_type: Type of the candidate being registered, if any
    """

    allowed_categories: frozenset[ErrorCategory] = frozenset(ErrorCategory)

    def __init__(
        self,
        message: str,
        *,
        category: Optional[ErrorCategory] = None,
        source_type: Optional[type] = None,
        target_type: Optional[type] = None,
        converter_type: Optional[type] = None,
        candidate_type: Optional[type] = None,
    ):
        if category is not None and category not in self.allowed_categories:
            raise ValueError(
                f"{type(self).__name__} cannot be raised with category {category}."
            )

        super().__init__(message)
        self.message = message
        self.category = category
        self.source_type = source_type
        self.target_type = target_type
        self.converter_type = converter_type
        self.candidate_type = candidate_type

    def __reduce__(self):
        # the structured fields are keyword-only, so rebuild through a partial
        return (
            partial(
                type(self),
                category=self.category,
                source_type=self.source_type,
                target_type=self.target_type,
                converter_type=self.converter_type,
                candidate_type=self.candidate_type,
            ),
            (self.message,),
        )

    @classmethod
    def of(
        cls,
        category: ErrorCategory,
        *,
        source_type: Optional[type] = None,
        target_type: Optional[type] = None,
        converter_type: Optional[type] = None,
        candidate_type: Optional[type] = None,
        **fields: Any,
    ) -> TypeshiftError:
        """
        Create an error for ``category`` with its message rendered from the catalog.

        :param category: The error category and message key
        :param source_type: Source type, rendered as ``{source}``
        :param target_type: Target type, rendered as ``{target}``
        :param converter_type: Converter owner type, rendered as ``{converter}``
        :param candidate_type: Candidate type, rendered as ``{candidate}``
        :param fields: Extra template fields such as ``method`` or ``existing``
        :return: The new, unraised error
        """
        message = get_catalog().render(
            category,
            source=source_type,
            target=target_type,
            converter=converter_type,
            candidate=candidate_type,
            **fields,
        )
        return cls(
            message,
            category=category,
            source_type=source_type,
            target_type=target_type,
            converter_type=converter_type,
            candidate_type=candidate_type,
        )


class RegistrationError(TypeshiftError):
    """Error registering a converter candidate."""

    allowed_categories = REGISTRATION_CATEGORIES


class ConversionError(TypeshiftError):
    """Error converting a value between types."""

    allowed_categories = CONVERSION_CATEGORIES
