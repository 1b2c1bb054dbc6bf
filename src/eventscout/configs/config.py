# src/eventscout/configs/config.py
import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict

import yaml


class Config:
    """
    Configuration for the event discovery application.
    """

    # 1. Setup Base Paths
    # This points to src/eventscout/configs/
    CONFIG_DIR = Path(__file__).parent.resolve()

    # 2. Define File Paths
    SETTINGS_PATH = CONFIG_DIR / "settings.yaml"

    @classmethod
    @lru_cache
    def load_settings(cls) -> dict:
        """Loads the YAML settings for the provider, geocoding and storage."""
        if not cls.SETTINGS_PATH.exists():
            raise FileNotFoundError(f"Missing config at {cls.SETTINGS_PATH}")

        with open(cls.SETTINGS_PATH, "r", encoding="utf-8") as f:
            return yaml.safe_load(f)

    @classmethod
    def get_section(cls, name: str) -> Dict[str, Any]:
        """Return one top-level settings section (empty dict when absent)."""
        return dict(cls.load_settings().get(name) or {})

    @classmethod
    def get_api_key(cls) -> str:
        """
        Resolve the Ticketmaster API key.

        Reads the environment variable named in the settings and falls back
        to the configured placeholder key.
        """
        provider = cls.get_section("ticketmaster")
        env_name = provider.get("api_key_env", "TICKETMASTER_API_KEY")
        return os.getenv(env_name) or provider.get("default_api_key", "")

    @classmethod
    def get_store_path(cls) -> Path:
        """Returns the absolute path of the JSON key-value store file."""
        storage = cls.get_section("storage")
        return Path(storage.get("path", "~/.eventscout/store.json")).expanduser()
