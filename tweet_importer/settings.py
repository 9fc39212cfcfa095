"""
Typed configuration for the importer.

Settings are read from a JSON file (``config/importer_config.json`` by
default) or supplied directly as a dictionary.  Missing values are filled from
environment variables and then from the model defaults, once, when the
settings are loaded.  The resulting :class:`ImporterSettings` instance is
passed explicitly to every component that needs it.
"""

from __future__ import annotations

import json
import os
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .utils.errors import ConfigError

CONFIG_FILE = os.path.join("config", "importer_config.json")

API_TIMEOUT = 60
DOWNLOAD_TIMEOUT = 120


class StorageSettings(BaseModel):
    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    database: str = "data/importer.duckdb"
    site_url: str = "http://localhost"
    media_dir: str = "data/uploads"

    @field_validator("site_url")
    @classmethod
    def _strip_slash(cls, v: str) -> str:
        return v.rstrip("/")


class ImporterSettings(BaseModel):
    """Importer options with their defaults."""

    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    api_base_url: str = ""
    set_featured_image: str = "off"
    api_timeout: float = Field(API_TIMEOUT, gt=0)
    download_timeout: float = Field(DOWNLOAD_TIMEOUT, gt=0)
    user_agent: str = "TweetImporter/1.0"
    report_dir: str = os.path.join("reports", "import")
    storage: StorageSettings = Field(default_factory=StorageSettings)

    @field_validator("api_base_url", mode="before")
    @classmethod
    def _clean_api_url(cls, v: Any) -> str:
        # Stored without a trailing slash; the client adds it back when joining.
        if v is None:
            return ""
        return str(v).strip().rstrip("/")

    @field_validator("set_featured_image", mode="before")
    @classmethod
    def _on_off(cls, v: Any) -> str:
        if v is True or (isinstance(v, str) and v.strip().lower() == "on"):
            return "on"
        return "off"

    @property
    def featured_image_enabled(self) -> bool:
        return self.set_featured_image == "on"

    def require_api_base_url(self) -> str:
        """Return the API base URL with a trailing slash or raise ``ConfigError``."""
        if not self.api_base_url:
            raise ConfigError()
        return self.api_base_url + "/"


def load_settings(
    config_file: Optional[str] = CONFIG_FILE,
    config: Optional[Dict[str, Any]] = None,
) -> ImporterSettings:
    """Build :class:`ImporterSettings` from a JSON file, a dict and the environment."""
    if config_file and os.path.exists(config_file):
        with open(config_file, "r", encoding="utf-8") as f:
            config = json.load(f)
    elif config is None:
        config = {}
    else:
        config = dict(config)

    config.setdefault("api_base_url", os.getenv("TWEET_IMPORTER_API_URL", ""))
    storage = dict(config.get("storage") or {})
    if os.getenv("TWEET_IMPORTER_DATABASE"):
        storage.setdefault("database", os.environ["TWEET_IMPORTER_DATABASE"])
    if os.getenv("TWEET_IMPORTER_SITE_URL"):
        storage.setdefault("site_url", os.environ["TWEET_IMPORTER_SITE_URL"])
    config["storage"] = storage

    return ImporterSettings.model_validate(config)
