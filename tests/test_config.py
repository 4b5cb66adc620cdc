"""Tests for configuration loading and validation."""
import pytest
from pydantic import ValidationError

from conftest import write_yaml
from dbexport.config import (
    DataSourceConfig,
    ExportConfig,
    load_export_config,
    write_template_config,
)
from dbexport.data_access.engines import DatabaseType
from dbexport.errors import ConfigError


class TestDataSourceConfig:
    """Tests for a single source entry."""

    def test_engine_tag_aliases(self):
        """Engine tags are parsed case-insensitively with common aliases."""
        for tag, expected in [
            ("SQLServer", DatabaseType.SQLSERVER),
            ("SQL Server", DatabaseType.SQLSERVER),
            ("mssql", DatabaseType.SQLSERVER),
            ("PostgreSQL", DatabaseType.POSTGRES),
            ("mysql", DatabaseType.MYSQL),
            ("sqlite3", DatabaseType.SQLITE),
        ]:
            source = DataSourceConfig(name="s", database_type=tag, host="h", database="d")
            assert source.database_type == expected

    def test_unknown_engine_rejected(self):
        with pytest.raises(ValidationError, match="Unknown database_type"):
            DataSourceConfig(name="s", database_type="oracle", host="h", database="d")

    def test_port_accepts_string(self):
        source = DataSourceConfig(name="s", database_type="postgres", host="h", port="5433", database="d")
        assert source.port == 5433

    def test_blank_port_uses_default(self):
        source = DataSourceConfig(name="s", database_type="postgres", host="h", port="", database="d")
        assert source.port is None

    def test_network_source_requires_host(self):
        with pytest.raises(ValidationError, match="host is required"):
            DataSourceConfig(name="s", database_type="postgres", database="d")

    def test_sqlite_ignores_network_fields(self):
        source = DataSourceConfig(name="s", database_type="sqlite", database="notes.db")
        assert source.host == ""

    @pytest.mark.parametrize("name", ["", "  ", "a/b", "..", "a\\b"])
    def test_bad_names_rejected(self, name):
        with pytest.raises(ValidationError):
            DataSourceConfig(name=name, database_type="sqlite", database="x.db")

    def test_custom_query_requires_text(self):
        with pytest.raises(ValidationError, match="must not be empty"):
            DataSourceConfig(
                name="s",
                database_type="sqlite",
                database="x.db",
                custom_queries=[{"name": "q", "query": "  "}],
            )

    def test_frozen(self):
        source = DataSourceConfig(name="s", database_type="sqlite", database="x.db")
        with pytest.raises(ValidationError):
            source.name = "other"


class TestExportConfig:
    """Tests for the top-level mapping."""

    def test_from_mapping_keeps_file_order(self):
        config = ExportConfig.from_mapping(
            {
                "zeta": {"database_type": "sqlite", "database": "z.db"},
                "alpha": {"database_type": "sqlite", "database": "a.db"},
            }
        )
        assert [s.name for s in config.sources] == ["zeta", "alpha"]

    def test_empty_mapping_rejected(self):
        with pytest.raises(ConfigError, match="non-empty mapping"):
            ExportConfig.from_mapping({})

    def test_validation_error_becomes_config_error(self):
        with pytest.raises(ConfigError, match="Invalid configuration"):
            ExportConfig.from_mapping({"s": {"database_type": "nope", "database": "x"}})

    def test_record_must_be_mapping(self):
        with pytest.raises(ConfigError, match="must be a mapping"):
            ExportConfig.from_mapping({"s": ["not", "a", "mapping"]})

    def test_unknown_overrides_allowed(self):
        config = ExportConfig.from_mapping(
            {"s": {"database_type": "sqlite", "database": "x.db", "override_limits": {"ghost": 3}}}
        )
        assert config.sources[0].override_limits == {"ghost": 3}

    def test_select_sources(self):
        config = ExportConfig.from_mapping(
            {
                "a": {"database_type": "sqlite", "database": "a.db"},
                "b": {"database_type": "sqlite", "database": "b.db"},
            }
        )
        assert [s.name for s in config.select(["b"]).sources] == ["b"]
        assert config.select(None) is config
        with pytest.raises(ConfigError, match="not found"):
            config.select(["c"])


class TestLoadExportConfig:
    """Tests for reading config files."""

    def test_load_yaml(self, tmp_path):
        path = write_yaml(
            tmp_path / "config.yaml",
            {
                "local": {
                    "database_type": "sqlite",
                    "database": "notes.db",
                    "override_limits": {"tags": -1},
                    "custom_queries": [
                        {"name": "top", "description": "first rows", "query": "SELECT 1"}
                    ],
                }
            },
        )
        config = load_export_config(path)
        source = config.get_source("local")
        assert source.override_limits == {"tags": -1}
        assert source.custom_queries[0].description == "first rows"

    def test_load_toml(self, tmp_path):
        path = tmp_path / "config.toml"
        path.write_text(
            '[warehouse]\n'
            'database_type = "postgres"\n'
            'host = "db.internal"\n'
            'port = "5432"\n'
            'username = "reader"\n'
            'password = "secret"\n'
            'database = "sales"\n'
            '\n'
            '[warehouse.override_limits]\n'
            'events = 0\n'
            '\n'
            '[[warehouse.custom_queries]]\n'
            'name = "daily"\n'
            'description = "rollup"\n'
            'query = "SELECT 1"\n',
            encoding="utf-8",
        )
        source = load_export_config(path).get_source("warehouse")
        assert source.database_type == DatabaseType.POSTGRES
        assert source.port == 5432
        assert source.override_limits == {"events": 0}
        assert source.custom_queries[0].name == "daily"

    def test_duplicate_yaml_keys_rejected(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(
            "a:\n  database_type: sqlite\n  database: a.db\n"
            "a:\n  database_type: sqlite\n  database: b.db\n",
            encoding="utf-8",
        )
        with pytest.raises(ConfigError, match="duplicate key"):
            load_export_config(path)

    def test_malformed_yaml(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("a: [unclosed\n", encoding="utf-8")
        with pytest.raises(ConfigError, match="Unable to parse"):
            load_export_config(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError, match="not found"):
            load_export_config(tmp_path / "missing.yaml")

    def test_template_is_loadable(self, tmp_path):
        path = write_template_config(tmp_path / "nested" / "config.yaml")
        config = load_export_config(path)
        assert {s.name for s in config.sources} == {"warehouse", "local_notes"}
