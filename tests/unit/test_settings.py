import pytest
from decimal import Decimal
from pathlib import Path

from gastos.config.settings import ConfigLoader, Settings


@pytest.mark.unit
class TestSettings:

    def test_load_with_custom_config(self):
        settings = Settings.load(config={
            "database_path": "/tmp/x.db",
            "exchange_rate": 3.85,
            "categories": ["A", "B"],
            "models": {"categorize": "small"},
        })

        assert settings.database_path == Path("/tmp/x.db")
        assert settings.exchange_rate == Decimal("3.85")
        assert settings.categories == ["A", "B"]
        assert settings.categorize_model == "small"
        assert settings.extract_model == "gpt-5"
        assert settings.default_category == "Otros"

    def test_bundled_defaults(self):
        settings = Settings.load(config=ConfigLoader.load_config("settings.json"))

        assert settings.exchange_rate == Decimal("3.70")
        assert "Otros" in settings.categories

    def test_missing_config_file(self):
        with pytest.raises(FileNotFoundError):
            ConfigLoader.load_config("does-not-exist.json")
