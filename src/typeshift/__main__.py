"""
CLI entrypoints for the typeshift library.

This module provides a command-line interface for checking converter candidates
outside of an application. The CLI is built using Typer and provides commands
for inspecting which conversions a set of converters provides, printing the
active configuration, and version information.

The CLI can be accessed through the `typeshift` command after installation, or by
running this module directly with `python -m typeshift`.

Commands:
    inspect: Register converter candidates and list the conversions they provide
    config: Print the current settings in .env format

Usage:
    $ typeshift --help
    $ typeshift --version
    $ typeshift inspect myapp.converters:NumberConverter [TARGET ...] [--json]
"""

import importlib
import json
from importlib.metadata import version as pkg_version
from typing import Annotated, Any

import typer

from typeshift.exceptions import RegistrationError
from typeshift.registry import ConverterRegistry
from typeshift.settings import print_config

__all__ = ["app", "load_target"]

app = typer.Typer(
    name="typeshift",
    help="typeshift - runtime type-conversion registry",
    add_completion=False,
    no_args_is_help=True,
)


def version_callback(value: bool):
    """
    Callback function to print the version of the typeshift package and exit.

    :param value: Boolean indicating whether the version option was specified.
        If True, prints version and exits.
    """
    if value:
        typer.echo(f"typeshift version: {pkg_version('typeshift')}")
        raise typer.Exit


@app.callback()
def typeshift(
    ctx: typer.Context,
    version: bool = typer.Option(
        None,
        "--version",
        callback=version_callback,
        is_eager=True,
    ),
):
    """
    Main entry point for the typeshift CLI application.

    :param ctx: The Typer context object containing runtime information.
    :param version: Boolean option to display version information and exit.
    """


def load_target(target: str) -> Any:
    """
    Load a converter candidate from a ``module:attribute`` reference.

    Classes are instantiated without arguments, any other object is returned as
    is. Dotted attributes are followed (``module:Outer.Inner``).

    :param target: The reference to load
    :return: The converter candidate
    :raises typer.BadParameter: If the reference is malformed or cannot be loaded
    """
    module_name, sep, attribute = target.partition(":")
    if not sep or not module_name or not attribute:
        raise typer.BadParameter(
            f"'{target}' must be given as module:attribute", param_hint="TARGET"
        )

    try:
        obj: Any = importlib.import_module(module_name)
        for part in attribute.split("."):
            obj = getattr(obj, part)
    except (ImportError, AttributeError) as err:
        raise typer.BadParameter(f"cannot load '{target}': {err}") from err

    return obj() if isinstance(obj, type) else obj


@app.command()
def inspect(
    targets: Annotated[
        list[str],
        typer.Argument(help="Converter candidates as module:attribute references"),
    ],
    as_json: Annotated[
        bool, typer.Option("--json", help="Print the conversions as a JSON list")
    ] = False,
):
    """
    Register converter candidates into a fresh registry and list the conversions
    they provide. Registration errors, such as two candidates converting between
    the same types, are reported and exit with a non-zero status.
    """
    candidates = [load_target(target) for target in targets]

    try:
        registry = ConverterRegistry(candidates)
    except RegistrationError as err:
        typer.echo(f"Registration failed: {err}", err=True)
        raise typer.Exit(code=1) from err

    rows = [
        {
            "source": entry.pair.source.__qualname__,
            "target": entry.pair.target.__qualname__,
            "converter": entry.descriptor.qualified_name,
            "min_args": entry.min_args,
            "max_args": entry.max_args,
        }
        for entry in registry.entries()
    ]

    if as_json:
        typer.echo(json.dumps(rows, indent=2))
        return

    for row in rows:
        max_args = "*" if row["max_args"] is None else row["max_args"]
        typer.echo(
            f"{row['source']} -> {row['target']} "
            f"({row['converter']}, extra args {row['min_args']}..{max_args})"
        )


@app.command()
def config():
    """
    Print the current typeshift settings in .env format.
    """
    print_config()


if __name__ == "__main__":
    app()
