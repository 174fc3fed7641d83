from dataclasses import dataclass, field
from decimal import Decimal
from pathlib import Path
import json
from typing import Dict, Any, List, Optional

# Package defaults (bundled with code)
PACKAGE_CONFIG_DIR = Path(__file__).parent / "defaults"

# User configs (in project root, gitignored)
PROJECT_ROOT = Path(__file__).parent.parent.parent.parent
USER_CONFIG_DIR = PROJECT_ROOT / "config"

class ConfigLoader:
    """Load configuration with user overrides"""

    @staticmethod
    def load_config(config_name: str) -> Dict[str, Any]:
        """
        Load config with fallback: user config -> default config

        Args:
            config_name: Name of the config file (e.g., 'settings.json')

        Raises:
            FileNotFoundError: If no config file was found

        Returns:
            Parsed JSON configuration
        """
        user_config_path = USER_CONFIG_DIR / config_name
        if user_config_path.exists():
            with open(user_config_path, encoding="utf-8") as f:
                return json.load(f)

        default_config_path = PACKAGE_CONFIG_DIR / config_name
        if default_config_path.exists():
            with open(default_config_path, encoding="utf-8") as f:
                return json.load(f)

        raise FileNotFoundError(
            f"Config file '{config_name}' not found in:\n"
            f" - {user_config_path}\n"
            f" - {default_config_path}"
        )

    @staticmethod
    def load_settings_config() -> Dict[str, Any]:
        """Load application settings"""
        return ConfigLoader.load_config('settings.json')


@dataclass
class Settings:
    """Application settings resolved from config files"""
    database_path: Path = Path("data/gastos.db")
    exchange_rate: Decimal = Decimal("3.70")
    default_category: str = "Otros"
    categories: List[str] = field(default_factory=list)
    categorize_model: str = "gpt-5-mini"
    extract_model: str = "gpt-5"

    @classmethod
    def load(cls, config: Optional[Dict[str, Any]] = None) -> "Settings":
        """
        Build settings from a config dict.

        Args:
            config: Optional config dict. If None, loads from ConfigLoader.
                Keys missing from the dict keep their defaults.
        """
        if config is None:
            config = ConfigLoader.load_settings_config()

        defaults = cls()
        models = config.get("models", {})

        return cls(
            database_path=Path(config.get("database_path", defaults.database_path)),
            exchange_rate=Decimal(str(config.get("exchange_rate", defaults.exchange_rate))),
            default_category=config.get("default_category", defaults.default_category),
            categories=list(config.get("categories", defaults.categories)),
            categorize_model=models.get("categorize", defaults.categorize_model),
            extract_model=models.get("extract", defaults.extract_model),
        )
