"""Configuration management for schema-sync."""

import json
from enum import Enum
from pathlib import Path
from typing import Optional

from loguru import logger
from pydantic import AliasChoices, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

CONFIG_DIR_NAME = ".schema-sync"
CONFIG_FILE_NAME = "config.json"

DEFAULT_TOPICS = ["configuration", "schema", "gateway", "agents"]


class RetrievalMode(str, Enum):
    """Which retrieval strategy backs the adapter."""

    STRUCTURED = "structured"
    FREE_TEXT = "free_text"


class MergePolicy(str, Enum):
    """How conflicting definitions from different chunks are resolved."""

    LAST = "last"
    RELEVANCE = "relevance"


class SchemaSyncConfig(BaseSettings):
    """Runtime settings, read from the environment with the SCHEMA_SYNC_ prefix.

    Postgres connection fields also accept the standard libpq variables so an
    existing docs database environment works unchanged.
    """

    model_config = SettingsConfigDict(
        env_prefix="SCHEMA_SYNC_",
        extra="ignore",
        populate_by_name=True,
    )

    retrieval_mode: RetrievalMode = Field(
        default=RetrievalMode.STRUCTURED,
        description="structured (Postgres docs table) or free_text (SQLite FTS5 index)",
    )

    # --- Structured store (Postgres) ---
    pg_host: str = Field(
        default="localhost",
        validation_alias=AliasChoices("SCHEMA_SYNC_PG_HOST", "PGHOST", "pg_host"),
    )
    pg_port: int = Field(
        default=5432,
        validation_alias=AliasChoices("SCHEMA_SYNC_PG_PORT", "PGPORT", "pg_port"),
    )
    pg_database: str = Field(
        default="memu_db",
        validation_alias=AliasChoices("SCHEMA_SYNC_PG_DATABASE", "PGDATABASE", "pg_database"),
    )
    pg_user: str = Field(
        default="memu",
        validation_alias=AliasChoices("SCHEMA_SYNC_PG_USER", "PGUSER", "pg_user"),
    )
    pg_password: SecretStr = Field(
        default=SecretStr(""),
        validation_alias=AliasChoices(
            "SCHEMA_SYNC_PG_PASSWORD", "MEMU_DB_PASSWORD", "PGPASSWORD", "pg_password"
        ),
    )
    docs_table: str = Field(default="openclaw_docs_chunks", pattern=r"^[A-Za-z_][A-Za-z0-9_]*$")
    docs_source_filter: str = Field(
        default="%docs.openclaw.ai%",
        description="SQL LIKE pattern every retrieved source must match",
    )

    # --- Free-text index (SQLite FTS5) ---
    fts_database_path: Path = Field(default=Path("docs-index.db"))
    fts_table: str = Field(default="doc_chunks", pattern=r"^[A-Za-z_][A-Za-z0-9_]*$")
    top_k: int = Field(default=10, gt=0)

    # --- Retrieval behaviour ---
    topics: list[str] = Field(default_factory=lambda: list(DEFAULT_TOPICS))
    max_chunks: int = Field(default=50, gt=0)
    retry_max_attempts: int = Field(default=3, ge=1)
    retry_base_delay: float = Field(default=0.5, ge=0)
    version_year_anchor: Optional[str] = Field(
        default=None,
        description="Year that version rows must mention; defaults to the current year",
    )

    # --- Extraction / comparison ---
    merge_policy: MergePolicy = MergePolicy.LAST
    local_schema_path: Path = Field(
        default=Path("reference") / "openclaw-official-schema.json"
    )
    sync_state_path: Path = Field(
        default=Path("reference") / ".sync-state.json",
        description="Where check records the time of the last completed comparison",
    )

    log_level: str = "INFO"


class ConfigManager:
    """Loads and saves the optional JSON config file layered under the environment."""

    def __init__(self, config_dir: Optional[Path] = None) -> None:
        self.config_dir = config_dir or Path.home() / CONFIG_DIR_NAME
        self.config_file = self.config_dir / CONFIG_FILE_NAME
        self._config: Optional[SchemaSyncConfig] = None

    @property
    def config(self) -> SchemaSyncConfig:
        if self._config is None:
            self._config = self.load_config()
        return self._config

    def load_config(self) -> SchemaSyncConfig:
        """Load settings from the config file if present, else from the environment."""
        if self.config_file.exists():
            try:
                data = json.loads(self.config_file.read_text(encoding="utf-8"))
                return SchemaSyncConfig(**data)
            except (json.JSONDecodeError, TypeError, ValueError) as e:
                logger.error(f"Failed to load config from {self.config_file}: {e}")
                raise ValueError(f"Invalid config file {self.config_file}: {e}") from e
        return SchemaSyncConfig()

    def save_config(self, config: SchemaSyncConfig) -> None:
        """Persist settings, leaving the database password out of the file."""
        self.config_dir.mkdir(parents=True, exist_ok=True)
        data = config.model_dump(mode="json", exclude={"pg_password"})
        self.config_file.write_text(json.dumps(data, indent=2), encoding="utf-8")
        self._config = config
        logger.debug(f"Saved config to {self.config_file}")
