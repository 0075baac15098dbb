"""
Logging setup for typeshift.

typeshift logs through loguru under the ``typeshift`` namespace:

- DEBUG: every converter stored by a registry, registry clears and resolution
  misses
- INFO: bulk replacements through ``ConverterRegistry.set_converters``
- WARNING: message catalog problems (unknown keys, templates or files that
  cannot be used)

Registration and conversion failures are raised, not logged. The sinks added
here only receive records from the ``typeshift`` namespace, so an application
that also logs through loguru keeps control of its own records.

Example:
::
    from typeshift.logging import configure_logger
    from typeshift.settings import LoggingSettings

    handler_ids = configure_logger(LoggingSettings(console_log_level="DEBUG"))
"""

import sys

from loguru import logger

from typeshift.settings import LoggingSettings, settings

__all__ = ["LOG_NAMESPACE", "configure_logger", "logger"]


LOG_NAMESPACE = "typeshift"
CONSOLE_FORMAT = "{time} | {name}:{function} | {level} - {message}"


def configure_logger(config: LoggingSettings = settings.logging) -> list[int]:
    """
    Configure the typeshift sinks from ``config``.

    Note: Environment variables take precedence over the function parameters.

    :param config: The logging configuration to apply
    :return: The ids of the loguru handlers added, empty when logging is disabled
    """
    if config.disabled:
        logger.disable(LOG_NAMESPACE)
        return []

    logger.enable(LOG_NAMESPACE)

    if config.clear_loggers:
        logger.remove()

    handler_ids = [
        logger.add(
            sys.stdout,
            level=config.console_log_level.upper(),
            format=CONSOLE_FORMAT,
            filter=LOG_NAMESPACE,
        )
    ]

    if config.log_file or config.log_file_level:
        # records go to the file as json, one object per line
        handler_ids.append(
            logger.add(
                config.log_file or "typeshift.log",
                level=(config.log_file_level or "INFO").upper(),
                serialize=True,
                filter=LOG_NAMESPACE,
            )
        )

    return handler_ids


configure_logger()
