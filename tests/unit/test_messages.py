"""
Unit tests for the messages module in the typeshift library.
"""

import json
from unittest import mock

import pytest

from typeshift import ConversionError, ConverterRegistry, ErrorCategory, messages
from typeshift.messages import (
    DEFAULT_TEMPLATES,
    Message,
    MessageCatalog,
    get_catalog,
    reload_catalog,
)


@pytest.fixture
def restore_catalog():
    yield
    reload_catalog()


class TestMessageCatalog:
    @pytest.mark.smoke
    def test_every_message_has_a_template(self):
        catalog = MessageCatalog()

        for message in Message:
            assert not catalog.template(message).startswith("!")
        assert len(DEFAULT_TEMPLATES) == len(Message)

    @pytest.mark.smoke
    def test_render(self):
        rendered = MessageCatalog().render(
            Message.NO_CONVERTER_FOUND, source=str, target=int
        )

        assert rendered == "No converter found to convert str to int."

    @pytest.mark.sanity
    def test_render_qualifies_non_builtin_types(self):
        class Local:
            pass

        rendered = MessageCatalog().render(
            Message.NO_CONVERTER_FOUND, source=Local, target=int
        )

        assert f"{__name__}.TestMessageCatalog" in rendered
        assert "Local to int" in rendered

    @pytest.mark.sanity
    def test_render_missing_key(self):
        catalog = MessageCatalog()

        assert catalog.render("UNKNOWN_KEY") == "!UNKNOWN_KEY!"

    @pytest.mark.sanity
    def test_render_missing_field(self):
        catalog = MessageCatalog({"NULL_TARGET": "Target {target} for {source}"})

        assert catalog.render(Message.NULL_TARGET, target=int) == (
            "Target int for {source}"
        )

    @pytest.mark.regression
    @pytest.mark.parametrize(
        "template",
        ["no {0}", "no {source.missing}", "no {source"],
        ids=["positional", "attribute", "unbalanced"],
    )
    def test_render_unusable_template_falls_back(self, template):
        catalog = MessageCatalog({"NO_CONVERTER_FOUND": template})

        with mock.patch.object(messages, "logger") as mock_logger:
            rendered = catalog.render(
                Message.NO_CONVERTER_FOUND, source=str, target=int
            )

        assert rendered == "No converter found to convert str to int."
        mock_logger.warning.assert_called_once()

    @pytest.mark.regression
    def test_render_unusable_unknown_key(self):
        catalog = MessageCatalog({"NOT_A_KEY": "{0}"})

        with mock.patch.object(messages, "logger"):
            assert catalog.render("NOT_A_KEY") == "!NOT_A_KEY!"

    @pytest.mark.sanity
    def test_overrides(self):
        catalog = MessageCatalog(
            {"NO_CONVERTER_FOUND": "Aucun convertisseur de {source} vers {target}."}
        )

        assert catalog.render(Message.NO_CONVERTER_FOUND, source=str, target=int) == (
            "Aucun convertisseur de str vers int."
        )
        assert catalog.template(Message.NULL_TARGET) == DEFAULT_TEMPLATES[
            Message.NULL_TARGET
        ]

    @pytest.mark.sanity
    def test_from_file(self, tmp_path):
        path = tmp_path / "messages_fr.json"
        path.write_text(
            json.dumps({"NULL_TARGET": "Type cible absent."}), encoding="utf-8"
        )

        catalog = MessageCatalog.from_file(path)

        assert catalog.render(Message.NULL_TARGET) == "Type cible absent."

    @pytest.mark.sanity
    @pytest.mark.parametrize(
        "content", ['["NULL_TARGET"]', '{"NULL_TARGET": 3}'], ids=["list", "number"]
    )
    def test_from_file_invalid(self, tmp_path, content):
        path = tmp_path / "messages.json"
        path.write_text(content, encoding="utf-8")

        with pytest.raises(ValueError) as exc_info:
            MessageCatalog.from_file(path)

        assert "must be a JSON object" in str(exc_info.value)

    @pytest.mark.regression
    def test_from_file_unknown_keys_warns(self, tmp_path):
        path = tmp_path / "messages.json"
        path.write_text(json.dumps({"NOT_A_KEY": "x"}), encoding="utf-8")

        with mock.patch.object(messages, "logger") as mock_logger:
            catalog = MessageCatalog.from_file(path)

        mock_logger.warning.assert_called_once()
        assert catalog.render("NOT_A_KEY") == "x"


class TestProcessCatalog:
    @pytest.mark.smoke
    def test_get_catalog_is_cached(self, restore_catalog):
        assert get_catalog() is get_catalog()

    @pytest.mark.sanity
    def test_reload_catalog_from_settings(self, tmp_path, restore_catalog):
        path = tmp_path / "messages.json"
        path.write_text(
            json.dumps({"NULL_TARGET": "Kein Zieltyp."}), encoding="utf-8"
        )

        with mock.patch.object(
            messages.settings.messages, "catalog_file", str(path)
        ):
            catalog = reload_catalog()

        assert catalog.render(Message.NULL_TARGET) == "Kein Zieltyp."
        assert get_catalog() is catalog

    @pytest.mark.regression
    @pytest.mark.parametrize(
        "content", [None, "not json", '["NULL_TARGET"]'], ids=["missing", "json", "list"]
    )
    def test_unloadable_catalog_falls_back(self, tmp_path, restore_catalog, content):
        path = tmp_path / "messages.json"
        if content is not None:
            path.write_text(content, encoding="utf-8")

        with (
            mock.patch.object(messages.settings.messages, "catalog_file", str(path)),
            mock.patch.object(messages, "logger") as mock_logger,
        ):
            catalog = reload_catalog()
            assert get_catalog() is catalog

        mock_logger.warning.assert_called_once()
        assert catalog.render(Message.NULL_TARGET) == DEFAULT_TEMPLATES[
            Message.NULL_TARGET
        ]

    @pytest.mark.regression
    def test_unloadable_catalog_keeps_error_category(self, tmp_path, restore_catalog):
        registry = ConverterRegistry()

        with (
            mock.patch.object(
                messages.settings.messages,
                "catalog_file",
                str(tmp_path / "missing.json"),
            ),
            mock.patch.object(messages, "logger"),
        ):
            reload_catalog()
            with pytest.raises(ConversionError) as exc_info:
                registry.convert("x", int)

        assert exc_info.value.category is ErrorCategory.NO_CONVERTER_FOUND
        assert str(exc_info.value) == "No converter found to convert str to int."
