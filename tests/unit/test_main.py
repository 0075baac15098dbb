"""
Unit tests for the typeshift command line interface.
"""

import json
from unittest import mock

import pytest
import typer
from typer.testing import CliRunner

from tests.unit.mock import StringNumberConverter
from typeshift.__main__ import app, load_target

MOCK_MODULE = "tests.unit.mock.converters"


@pytest.fixture
def runner():
    return CliRunner()


class TestLoadTarget:
    @pytest.mark.smoke
    def test_class_is_instantiated(self):
        candidate = load_target(f"{MOCK_MODULE}:StringNumberConverter")

        assert isinstance(candidate, StringNumberConverter)

    @pytest.mark.sanity
    def test_non_class_returned(self):
        assert load_target("json:dumps") is json.dumps

    @pytest.mark.sanity
    @pytest.mark.parametrize(
        "target",
        [
            "tests.unit.mock.converters",
            ":StringNumberConverter",
            "tests.unit.mock.converters:",
            "tests.unit.mock.converters:Missing",
            "not_a_module_anywhere:Converter",
        ],
    )
    def test_invalid(self, target):
        with pytest.raises(typer.BadParameter):
            load_target(target)


class TestInspect:
    @pytest.mark.smoke
    def test_text(self, runner):
        result = runner.invoke(app, ["inspect", f"{MOCK_MODULE}:StringNumberConverter"])

        assert result.exit_code == 0
        assert result.output.splitlines() == [
            "str -> int (StringNumberConverter.to_int, extra args 0..0)",
            "int -> str (StringNumberConverter.to_text, extra args 0..0)",
        ]

    @pytest.mark.sanity
    def test_json(self, runner):
        result = runner.invoke(
            app, ["inspect", f"{MOCK_MODULE}:FlaggedTextConverter", "--json"]
        )

        assert result.exit_code == 0
        assert json.loads(result.output) == [
            {
                "source": "int",
                "target": "str",
                "converter": "FlaggedTextConverter.to_text",
                "min_args": 1,
                "max_args": 1,
            }
        ]

    @pytest.mark.sanity
    def test_variadic(self, runner):
        result = runner.invoke(app, ["inspect", f"{MOCK_MODULE}:JoinConverter"])

        assert result.exit_code == 0
        assert "extra args 0..*" in result.output

    @pytest.mark.sanity
    def test_conflict(self, runner):
        result = runner.invoke(
            app,
            [
                "inspect",
                f"{MOCK_MODULE}:StringNumberConverter",
                f"{MOCK_MODULE}:StringIntDuplicateConverter",
            ],
        )

        assert result.exit_code == 1
        assert "Registration failed" in result.output

    @pytest.mark.sanity
    def test_bad_target(self, runner):
        result = runner.invoke(app, ["inspect", "no-colon-here"])

        assert result.exit_code == 2


class TestApp:
    @pytest.mark.smoke
    def test_version(self, runner):
        with mock.patch("typeshift.__main__.pkg_version", return_value="1.2.3"):
            result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert result.output.strip() == "typeshift version: 1.2.3"

    @pytest.mark.sanity
    def test_config(self, runner):
        result = runner.invoke(app, ["config"])

        assert result.exit_code == 0
        assert "TYPESHIFT__LOGGING__CONSOLE_LOG_LEVEL" in result.output
        assert "TYPESHIFT__MESSAGES__CATALOG_FILE" in result.output
