"""Tests for configuration."""

import argparse
from pathlib import Path

import pytest
from md_translator.config import TranslatorConfig


class TestTranslatorConfig:

    def test_defaults(self, monkeypatch):
        for name in ("MD_TRANSLATOR_LOCALE", "MD_TRANSLATOR_GRANULARITY", "MD_TRANSLATOR_DEPTH"):
            monkeypatch.delenv(name, raising=False)
        config = TranslatorConfig()
        assert config.locale is None
        assert config.granularity == 1
        assert config.depth == 0
        assert config.catalog_dir == Path("po")
        assert config.validate() is None

    def test_environment(self, monkeypatch):
        monkeypatch.setenv("MD_TRANSLATOR_LOCALE", "de")
        monkeypatch.setenv("MD_TRANSLATOR_GRANULARITY", "10")
        monkeypatch.setenv("MD_TRANSLATOR_DEPTH", "not a number")
        config = TranslatorConfig()
        assert config.locale == "de"
        assert config.granularity == 10
        assert config.depth == 0

    def test_arguments_win_over_environment(self, monkeypatch):
        monkeypatch.setenv("MD_TRANSLATOR_LOCALE", "de")
        args = argparse.Namespace(locale="fr", granularity=0, catalog_dir="translations")
        config = TranslatorConfig.from_args(args)
        assert config.locale == "fr"
        assert config.granularity == 0
        assert config.catalog_dir == Path("translations")
        assert config.output_dir is None

    @pytest.mark.parametrize("changes,message", [
        ({"granularity": -1}, "Granularity"),
        ({"depth": -2}, "Depth"),
        ({"locale": "  "}, "Locale"),
    ])
    def test_validate(self, changes, message):
        assert message in TranslatorConfig(**changes).validate()
