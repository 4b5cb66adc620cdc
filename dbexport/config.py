"""Configuration loading and validation utilities."""
from __future__ import annotations

import logging
import tomllib
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from dbexport.data_access.engines import DatabaseType
from dbexport.errors import ConfigError

logger = logging.getLogger(__name__)


class LoggingConfig(BaseModel):
    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(config: Optional[LoggingConfig] = None) -> None:
    config = config or LoggingConfig()
    logging.basicConfig(level=config.level.upper(), format=config.format)


def _check_path_component(value: str, what: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError(f"{what} must not be empty")
    if value in {".", ".."} or "/" in value or "\\" in value:
        raise ValueError(f"{what} {value!r} cannot be used as a file or directory name")
    return value


class CustomQuery(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Output stem for the query result")
    description: str = Field(default="", description="Free-form note about the query")
    query: str = Field(..., description="SQL executed verbatim against the source")

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: str) -> str:
        return _check_path_component(value, "custom query name")

    @field_validator("query")
    @classmethod
    def validate_query(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("custom query text must not be empty")
        return value


class DataSourceConfig(BaseModel):
    """One named source database."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Output subdirectory and DuckDB schema name")
    database_type: DatabaseType
    host: str = ""
    port: Optional[int] = Field(default=None, description="Defaults to the engine's standard port")
    username: str = ""
    password: str = ""
    database: str = Field(..., description="Database name, or file path for SQLite")
    driver: str = Field(
        default="ODBC Driver 17 for SQL Server", description="ODBC driver used for SQL Server"
    )
    override_limits: Dict[str, int] = Field(
        default_factory=dict,
        description="Per-table row caps; negative means unlimited, zero exports the schema only",
    )
    custom_queries: List[CustomQuery] = Field(default_factory=list)

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: str) -> str:
        return _check_path_component(value, "source name")

    @field_validator("database_type", mode="before")
    @classmethod
    def parse_database_type(cls, value: Any) -> DatabaseType:
        return DatabaseType.parse(value)

    @field_validator("port", mode="before")
    @classmethod
    def blank_port_is_default(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @model_validator(mode="after")
    def validate_network_fields(self) -> "DataSourceConfig":
        if self.database_type != DatabaseType.SQLITE and not self.host:
            raise ValueError(f"host is required for {self.database_type.value} sources")
        return self


class ExportConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    sources: List[DataSourceConfig]

    @model_validator(mode="after")
    def validate_unique_names(self) -> "ExportConfig":
        if not self.sources:
            raise ValueError("configuration must define at least one source")
        seen = set()
        for source in self.sources:
            if source.name in seen:
                raise ValueError(f"duplicate source name {source.name!r}")
            seen.add(source.name)
        return self

    def get_source(self, name: str) -> DataSourceConfig:
        for source in self.sources:
            if source.name == name:
                return source
        raise ConfigError(f"Source {name!r} not found in configuration")

    def select(self, names: Optional[List[str]]) -> "ExportConfig":
        """Return a config restricted to ``names``, keeping file order."""
        if not names:
            return self
        wanted = set(names)
        missing = wanted - {s.name for s in self.sources}
        if missing:
            raise ConfigError(f"Sources not found in configuration: {sorted(missing)}")
        return ExportConfig(sources=[s for s in self.sources if s.name in wanted])

    @staticmethod
    def from_mapping(data: Any) -> "ExportConfig":
        """Build a config from ``{source name: record}`` as found in the config file."""
        if not isinstance(data, dict) or not data:
            raise ConfigError("Configuration must be a non-empty mapping of source name to settings")
        sources = []
        for name, record in data.items():
            if not isinstance(record, dict):
                raise ConfigError(f"Settings for source {name!r} must be a mapping")
            sources.append({**record, "name": str(name)})
        try:
            return ExportConfig(sources=sources)
        except ValidationError as exc:
            raise ConfigError(f"Invalid configuration:\n{exc}") from exc

    @staticmethod
    def from_yaml(path: str | Path) -> "ExportConfig":
        with open(path, "r", encoding="utf-8") as f:
            try:
                data = yaml.load(f, Loader=_UniqueKeyLoader)
            except yaml.YAMLError as exc:
                raise ConfigError(f"Unable to parse {path}: {exc}") from exc
        return ExportConfig.from_mapping(data)

    @staticmethod
    def from_toml(path: str | Path) -> "ExportConfig":
        with open(path, "rb") as f:
            try:
                data = tomllib.load(f)
            except tomllib.TOMLDecodeError as exc:
                raise ConfigError(f"Unable to parse {path}: {exc}") from exc
        return ExportConfig.from_mapping(data)


class _UniqueKeyLoader(yaml.SafeLoader):
    """SafeLoader that rejects duplicate mapping keys instead of keeping the last one."""

    def construct_mapping(self, node, deep=False):
        keys = set()
        for key_node, _ in node.value:
            key = self.construct_object(key_node, deep=deep)
            if key in keys:
                raise yaml.constructor.ConstructorError(
                    None, None, f"duplicate key {key!r}", key_node.start_mark
                )
            keys.add(key)
        return super().construct_mapping(node, deep=deep)


TEMPLATE_CONFIG: Dict[str, Dict[str, Any]] = {
    "warehouse": {
        "database_type": "sqlserver",
        "host": "localhost",
        "port": 1433,
        "username": "",
        "password": "",
        "database": "",
        "override_limits": {"audit_log": 0, "customers": -1},
        "custom_queries": [
            {
                "name": "recent_orders",
                "description": "Orders placed in the last 30 days",
                "query": "SELECT * FROM orders WHERE order_date >= DATEADD(day, -30, GETDATE())",
            }
        ],
    },
    "local_notes": {
        "database_type": "sqlite",
        "database": "./notes.db",
    },
}


def write_template_config(path: str | Path) -> Path:
    """Write an example configuration to ``path``, creating parent directories."""
    resolved = Path(path)
    resolved.parent.mkdir(parents=True, exist_ok=True)
    with open(resolved, "w", encoding="utf-8") as f:
        yaml.safe_dump(TEMPLATE_CONFIG, f, sort_keys=False)
    logger.info("Wrote template configuration to %s", resolved)
    return resolved


def load_export_config(path: str | Path) -> ExportConfig:
    """Load the export configuration.

    Args:
        path: YAML file, or TOML when the suffix is ``.toml``.

    Raises:
        ConfigError: If the file is missing or does not validate.
    """
    resolved = Path(path)
    if not resolved.exists():
        raise ConfigError(f"Config file not found: {resolved}")
    if resolved.suffix.lower() == ".toml":
        return ExportConfig.from_toml(resolved)
    return ExportConfig.from_yaml(resolved)
