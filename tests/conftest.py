import sqlite3
from pathlib import Path

import pytest
import yaml

from dbexport.config import ExportConfig


def create_notes_db(path: Path, notes: int = 100, tags: int = 5) -> Path:
    """SQLite database with a `notes` and a `tags` table."""
    conn = sqlite3.connect(path)
    conn.execute("CREATE TABLE notes (id INTEGER PRIMARY KEY, body TEXT, score REAL)")
    conn.execute("CREATE TABLE tags (id INTEGER PRIMARY KEY, label TEXT)")
    conn.executemany(
        "INSERT INTO notes (id, body, score) VALUES (?, ?, ?)",
        [(i, f"note {i}", i * 0.5) for i in range(1, notes + 1)],
    )
    conn.executemany(
        "INSERT INTO tags (id, label) VALUES (?, ?)",
        [(i, f"tag-{i}") for i in range(1, tags + 1)],
    )
    conn.commit()
    conn.close()
    return path


@pytest.fixture
def notes_db(tmp_path):
    return create_notes_db(tmp_path / "notes.db")


@pytest.fixture
def export_dir(tmp_path):
    return tmp_path / "parquets"


def sqlite_source(db_path, **extra):
    return {"database_type": "sqlite", "database": str(db_path), **extra}


def make_config(**sources) -> ExportConfig:
    return ExportConfig.from_mapping(sources)


def write_yaml(path: Path, data: dict) -> Path:
    with open(path, "w", encoding="utf-8") as f:
        yaml.safe_dump(data, f, sort_keys=False)
    return path
