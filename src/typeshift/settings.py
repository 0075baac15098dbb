"""
settings.py

This module provides configuration management for typeshift using Pydantic's
settings management capabilities. It defines the core settings structure,
including logging and message catalog configurations, and allows settings to be
loaded from environment variables or a .env file. The settings are hierarchical
and can be customized through nested environment variables.

Core Interfaces:
- LoggingSettings: Defines logging-related configs such as log levels and file paths.
- MessageSettings: Defines where localized error message templates are loaded from.
- Settings: The main settings class that aggregates all configurations and provides
    methods for generating .env files and reloading settings.
- reload_settings: A utility function to reload settings from the environment.
- print_config: A utility function to print the current configuration in .env format.

Example Usage:
```python
from typeshift import settings

settings.logging.console_log_level = "DEBUG"
settings.messages.catalog_file = "messages_fr.json"
```

or utilizing environment variables:
```bash
export TYPESHIFT__LOGGING__DISABLED=true
export TYPESHIFT__LOGGING__CONSOLE_LOG_LEVEL=DEBUG
export TYPESHIFT__LOGGING__LOG_FILE=typeshift.log
export TYPESHIFT__MESSAGES__CATALOG_FILE=messages_fr.json
```
"""

import json
from collections.abc import Sequence
from typing import Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

__all__ = [
    "LoggingSettings",
    "MessageSettings",
    "Settings",
    "print_config",
    "reload_settings",
    "settings",
]


class LoggingSettings(BaseModel):
    """
    Logging settings for the library
    """

    disabled: bool = Field(
        default=False,
        description="True to disable all logging, False (default) to enable logging.",
    )
    clear_loggers: bool = Field(
        default=True,
        description=(
            "True (default) to clear all loggers which will remove all logging "
            "handlers that may have been added to the logger through other packages. "
            "False to keep the existing loggers."
        ),
    )
    console_log_level: str = Field(
        default="WARNING",
        description=(
            "The log level for the console logger. This should be a valid log level "
            "string (e.g. DEBUG, INFO, WARNING, ERROR, CRITICAL). "
            "DEBUG logs every stored converter and resolution miss. "
            "INFO logs bulk registry replacements. "
            "WARNING and above are quiet for normal registry usage."
        ),
    )
    log_file: Optional[str] = Field(
        default=None,
        description=(
            "The path to the log file. If this is set, the logger will log to this file"
            " as well as to the console. If not set, the logger will only log to the "
            "console."
        ),
    )
    log_file_level: Optional[str] = Field(
        default=None,
        description=(
            "The log level for the file logger. If not set, the file logger will use "
            "INFO when a log file is given."
        ),
    )


class MessageSettings(BaseModel):
    """
    Settings for the error message catalog
    """

    catalog_file: Optional[str] = Field(
        default=None,
        description=(
            "Path to a JSON file mapping message keys (e.g. NO_CONVERTER_FOUND) to "
            "str.format templates. Entries override the built-in English templates, "
            "keys not present in the file keep their default wording."
        ),
    )


class Settings(BaseSettings):
    """
    All the settings are powered by pydantic_settings and can be set through
    environment variables or .env file. The environment variables are prefixed with
    `TYPESHIFT__` and nested properties are separated by `__`. For example, to set
    the `disabled` property of the `LoggingSettings` class, you can set the
    environment variable `TYPESHIFT__LOGGING__DISABLED=true`. The same applies to
    all the other settings.
    """

    model_config = SettingsConfigDict(
        env_prefix="TYPESHIFT__",
        env_nested_delimiter="__",
        extra="ignore",
        validate_default=True,
        env_file=".env",
    )

    logging: LoggingSettings = LoggingSettings()
    messages: MessageSettings = MessageSettings()

    def generate_env_file(self) -> str:
        """
        Generate the .env file from the current settings
        """
        return Settings._recursive_generate_env(
            self,
            self.model_config["env_prefix"],  # type: ignore  # noqa: PGH003
            self.model_config["env_nested_delimiter"],  # type: ignore  # noqa: PGH003
        )

    @staticmethod
    def _recursive_generate_env(model: BaseModel, prefix: str, delimiter: str) -> str:
        env_file = ""
        add_models = []
        for key in type(model).model_fields:
            value = getattr(model, key)
            if isinstance(value, BaseModel):
                # nested models are emitted after the current level
                add_models.append((key, value))
                continue

            tag = f"{prefix}{key.upper()}"
            if isinstance(value, Sequence) and not isinstance(value, str):
                value_str = ",".join(f'"{item}"' for item in value)
                env_file += f"{tag}=[{value_str}]\n"
            elif isinstance(value, dict):
                env_file += f"{tag}={json.dumps(value)}\n"
            elif value is None or value == "":
                env_file += f"{tag}=\n"
            else:
                env_file += f'{tag}="{value}"\n'

        for key, value in add_models:
            env_file += Settings._recursive_generate_env(
                value, f"{prefix}{key.upper()}{delimiter}", delimiter
            )
        return env_file


settings = Settings()


def reload_settings():
    """
    Reload the settings from the environment variables
    """
    new_settings = Settings()
    settings.__dict__.update(new_settings.__dict__)


def print_config():
    """
    Print the current configuration settings
    """
    print(f"Settings: \n{settings.generate_env_file()}")  # noqa: T201
