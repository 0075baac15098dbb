from .converters import (
    FlaggedTextConverter,
    StringIntDuplicateConverter,
    StringNumberConverter,
)

__all__ = [
    "FlaggedTextConverter",
    "StringIntDuplicateConverter",
    "StringNumberConverter",
]
