"""
Message catalog for registry and conversion errors.

Every error raised by typeshift is identified by a stable message key. The text
shown to users is rendered from a template looked up in a catalog, so wording can
be replaced or translated without touching the registry. The built-in catalog is
English; a JSON file of overrides can be layered on top of it through
``settings.messages.catalog_file``.

Example:
::
    from typeshift.messages import Message, MessageCatalog

    catalog = MessageCatalog.from_file("messages_fr.json")
    catalog.render(Message.NO_CONVERTER_FOUND, source="str", target="int")
"""

from __future__ import annotations

import json
from enum import Enum
from pathlib import Path
from typing import Any

from typeshift.logging import logger
from typeshift.settings import settings

__all__ = [
    "DEFAULT_TEMPLATES",
    "Message",
    "MessageCatalog",
    "get_catalog",
    "reload_catalog",
]


class Message(str, Enum):
    """
    Stable message keys, one per error category.
    """

    CANDIDATE_REQUIRED = "CANDIDATE_REQUIRED"
    CANDIDATE_NOT_ACCESSIBLE = "CANDIDATE_NOT_ACCESSIBLE"
    METHOD_NOT_ACCESSIBLE = "METHOD_NOT_ACCESSIBLE"
    MISSING_RETURN_TYPE = "MISSING_RETURN_TYPE"
    MISSING_SOURCE_PARAMETER = "MISSING_SOURCE_PARAMETER"
    IDENTITY_CONVERSION_REJECTED = "IDENTITY_CONVERSION_REJECTED"
    DUPLICATE_REGISTRATION = "DUPLICATE_REGISTRATION"
    CONFLICTING_CONVERTER = "CONFLICTING_CONVERTER"
    NO_CONVERTERS_FOUND = "NO_CONVERTERS_FOUND"
    UNSUPPORTED_SIGNATURE = "UNSUPPORTED_SIGNATURE"
    NULL_TARGET = "NULL_TARGET"
    NO_CONVERTER_FOUND = "NO_CONVERTER_FOUND"
    TOO_FEW_ARGUMENTS = "TOO_FEW_ARGUMENTS"
    TOO_MANY_ARGUMENTS = "TOO_MANY_ARGUMENTS"
    ARGUMENT_TYPE_MISMATCH = "ARGUMENT_TYPE_MISMATCH"
    CONVERSION_FAILED = "CONVERSION_FAILED"


DEFAULT_TEMPLATES: dict[str, str] = {
    Message.CANDIDATE_REQUIRED: "Converter candidate cannot be None.",
    Message.CANDIDATE_NOT_ACCESSIBLE: (
        "Converter candidate {candidate} is not public and cannot be registered."
    ),
    Message.METHOD_NOT_ACCESSIBLE: (
        "Converter method {candidate}.{method} is not public and cannot be registered."
    ),
    Message.MISSING_RETURN_TYPE: (
        "Converter method {candidate}.{method} must declare a return type."
    ),
    Message.MISSING_SOURCE_PARAMETER: (
        "Converter method {candidate}.{method} must take the object to convert "
        "as its first parameter."
    ),
    Message.IDENTITY_CONVERSION_REJECTED: (
        "Converter method {candidate}.{method} converts {source} to the same type."
    ),
    Message.DUPLICATE_REGISTRATION: (
        "Converter {candidate} is already registered for {source} -> {target}."
    ),
    Message.CONFLICTING_CONVERTER: (
        "Converter {candidate} cannot be registered for {source} -> {target}, "
        "{existing} already converts between these types."
    ),
    Message.NO_CONVERTERS_FOUND: (
        "Converter candidate {candidate} does not expose any converter methods."
    ),
    Message.UNSUPPORTED_SIGNATURE: (
        "Converter method {candidate}.{method} has an unsupported signature: {reason}"
    ),
    Message.NULL_TARGET: "Cannot convert to a None target type.",
    Message.NO_CONVERTER_FOUND: "No converter found to convert {source} to {target}.",
    Message.TOO_FEW_ARGUMENTS: (
        "Not enough arguments to convert {source} to {target} with {converter}."
    ),
    Message.TOO_MANY_ARGUMENTS: (
        "Too many arguments to convert {source} to {target} with {converter}."
    ),
    Message.ARGUMENT_TYPE_MISMATCH: (
        "Argument types do not match converter {converter} "
        "for {source} to {target}."
    ),
    Message.CONVERSION_FAILED: (
        "Failed to convert {source} to {target} with {converter}."
    ),
}


class _MissingFields(dict):
    def __missing__(self, key: str) -> str:
        return "{" + key + "}"


class MessageCatalog:
    """
    Lookup table from message keys to ``str.format`` templates.

    Missing keys render as ``!KEY!`` rather than failing, so a partial
    translation never hides the error that is being reported. Missing template
    fields are left in place for the same reason, and a template that cannot be
    rendered (positional fields, attribute access on a field, unbalanced braces)
    falls back to the built-in template for its key.

    :param templates: Overrides layered on top of ``DEFAULT_TEMPLATES``
    """

    def __init__(self, templates: dict[str, str] | None = None):
        self.templates: dict[str, str] = {
            str(key.value if isinstance(key, Message) else key): value
            for key, value in {**DEFAULT_TEMPLATES, **(templates or {})}.items()
        }

    @classmethod
    def from_file(cls, path: str | Path) -> MessageCatalog:
        """
        Build a catalog from a JSON object of ``{"KEY": "template"}`` overrides.

        :param path: Path to the JSON file
        :return: Catalog with the file's templates layered over the defaults
        :raises ValueError: If the file does not contain a JSON object of strings
        """
        path = Path(path)
        with path.open(encoding="utf-8") as file:
            overrides = json.load(file)

        if not isinstance(overrides, dict) or not all(
            isinstance(value, str) for value in overrides.values()
        ):
            raise ValueError(
                f"Message catalog {path} must be a JSON object mapping message keys "
                "to template strings."
            )

        unknown = set(overrides) - {message.value for message in Message}
        if unknown:
            logger.warning(
                f"Message catalog {path} defines unknown keys: {sorted(unknown)}"
            )

        return cls(overrides)

    def template(self, message: Message | str) -> str:
        key = _key(message)
        return self.templates.get(key, f"!{key}!")

    def render(self, message: Message | str, **fields: Any) -> str:
        """
        Render the template for ``message`` with the given named fields.

        :param message: Message key
        :param fields: Values interpolated into the template
        :return: The rendered, human readable message
        """
        values = _MissingFields({key: _display(value) for key, value in fields.items()})

        try:
            return self.template(message).format_map(values)
        except (AttributeError, IndexError, KeyError, TypeError, ValueError) as err:
            logger.warning(
                f"Message template {_key(message)} cannot be rendered ({err}), "
                "using the built-in template"
            )
            return MessageCatalog().template(message).format_map(values)


def _key(message: Message | str) -> str:
    return message.value if isinstance(message, Message) else str(message)


def _display(value: Any) -> str:
    if isinstance(value, type):
        return (
            value.__qualname__
            if value.__module__ == "builtins"
            else f"{value.__module__}.{value.__qualname__}"
        )
    return str(value)


_catalog: MessageCatalog | None = None


def get_catalog() -> MessageCatalog:
    """
    Get the process-wide catalog, loading ``settings.messages.catalog_file`` on
    first use. A file that cannot be loaded is reported as a warning once and the
    built-in templates are used until the catalog is reloaded.
    """
    global _catalog  # noqa: PLW0603
    if _catalog is None:
        catalog_file = settings.messages.catalog_file
        try:
            _catalog = (
                MessageCatalog.from_file(catalog_file)
                if catalog_file
                else MessageCatalog()
            )
        except (OSError, ValueError) as err:
            logger.warning(
                f"Message catalog {catalog_file} cannot be loaded ({err}), "
                "using the built-in templates"
            )
            _catalog = MessageCatalog()
    return _catalog


def reload_catalog() -> MessageCatalog:
    """
    Drop the cached catalog and load it again from the current settings.
    """
    global _catalog  # noqa: PLW0603
    _catalog = None
    return get_catalog()
