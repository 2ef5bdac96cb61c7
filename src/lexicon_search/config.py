"""Configuration management for lexicon-search."""

import json
import os
from pathlib import Path
from typing import List

from loguru import logger
from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DATA_DIR_NAME = ".lexicon-search"
CONFIG_FILE_NAME = "config.json"
DATABASE_NAME = "lexicon.db"

# Target schemes tried when expanding a query into script variants.
DEFAULT_TRANSLITERATION_SCHEMES = ["devanagari", "iast", "itrans", "telugu"]


class LexiconSearchConfig(BaseSettings):
    """Settings for the search engine, read from env vars and config.json."""

    model_config = SettingsConfigDict(
        env_prefix="LEXICON_SEARCH_",
        extra="ignore",
        validate_default=True,
    )

    env: str = Field(default="dev", description="Environment name")

    home: Path = Field(
        default_factory=lambda: Path.home() / DATA_DIR_NAME,
        description="Directory holding the dictionary database",
    )
    database_name: str = Field(default=DATABASE_NAME, description="SQLite database file name")

    full_text_min_query_length: int = Field(
        default=2,
        ge=1,
        description="Trimmed queries at least this long use full-text retrieval",
    )
    default_page_size: int = Field(default=20, ge=1, description="Default result page size")
    max_page_size: int = Field(default=100, ge=1, description="Upper bound for page size")

    transliteration_schemes: List[str] = Field(
        default_factory=lambda: list(DEFAULT_TRANSLITERATION_SCHEMES),
        description="Schemes a query is transliterated into before scoring",
    )

    log_level: str = Field(default="INFO", description="Log level for the lexicon-search logger")
    log_to_file: bool = Field(default=False, description="Also write logs under home/logs")

    @model_validator(mode="after")
    def check_page_sizes(self) -> "LexiconSearchConfig":
        if self.default_page_size > self.max_page_size:
            raise ValueError("default_page_size cannot exceed max_page_size")
        return self

    @property
    def database_path(self) -> Path:
        """Path to the SQLite database file."""
        return self.home / self.database_name

    @property
    def log_dir(self) -> Path:
        return self.home / "logs"


class ConfigManager:
    """Loads and saves LexiconSearchConfig as JSON in the config directory."""

    def __init__(self) -> None:
        config_dir = os.getenv("LEXICON_SEARCH_CONFIG_DIR")
        self.config_dir = Path(config_dir) if config_dir else Path.home() / DATA_DIR_NAME
        self.config_file = self.config_dir / CONFIG_FILE_NAME

    @property
    def config(self) -> LexiconSearchConfig:
        return self.load_config()

    def load_config(self) -> LexiconSearchConfig:
        """Load configuration from config.json, falling back to env and defaults."""
        if not self.config_file.exists():
            return LexiconSearchConfig()

        try:
            data = json.loads(self.config_file.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            logger.error(f"Failed to parse config file {self.config_file}: {e}")
            raise
        return LexiconSearchConfig(**data)

    def save_config(self, config: LexiconSearchConfig) -> None:
        """Write configuration to config.json."""
        self.config_dir.mkdir(parents=True, exist_ok=True)
        self.config_file.write_text(config.model_dump_json(indent=2), encoding="utf-8")
        logger.debug(f"Saved config to {self.config_file}")
