"""SQLite connection management and per-project configuration."""

from __future__ import annotations

import json
import logging
import os
import sqlite3
from contextlib import contextmanager
from pathlib import Path

from codemap.db.schema import SCHEMA_SQL

log = logging.getLogger(__name__)

DEFAULT_DB_DIR = ".codemap"
DEFAULT_DB_NAME = "index.db"
CONFIG_NAME = "config.json"
DB_DIR_ENV = "CODEMAP_DB_DIR"


def find_project_root(start: str = ".") -> Path:
    """Find the project root by looking for a .git or .codemap directory."""
    current = Path(start).resolve()
    while current != current.parent:
        if (current / ".git").exists() or (current / DEFAULT_DB_DIR).is_dir():
            return current
        current = current.parent
    return Path(start).resolve()


def _config_path(project_root: Path) -> Path:
    return project_root / DEFAULT_DB_DIR / CONFIG_NAME


def _load_project_config(project_root: Path | None = None) -> dict:
    """Read ``.codemap/config.json``; a missing or broken file yields {}."""
    if project_root is None:
        project_root = find_project_root()
    path = _config_path(project_root)
    if not path.exists():
        return {}
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        log.warning("Ignoring unreadable config %s: %s", path, e)
        return {}
    if not isinstance(data, dict):
        log.warning("Ignoring config %s: expected a JSON object", path)
        return {}
    return data


def write_project_config(updates: dict, project_root: Path | None = None) -> Path:
    """Merge *updates* into ``.codemap/config.json`` and return its path."""
    if project_root is None:
        project_root = find_project_root()
    config = _load_project_config(project_root)
    config.update(updates)
    path = _config_path(project_root)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(config, indent=2, sort_keys=True) + "\n", encoding="utf-8")
    return path


def get_exclude_patterns(project_root: Path | None = None) -> list[str]:
    patterns = _load_project_config(project_root).get("exclude") or []
    return [p for p in patterns if isinstance(p, str)]


def get_db_dir(project_root: Path | None = None) -> Path:
    """Directory holding the index: env var, then config, then ``.codemap``."""
    if project_root is None:
        project_root = find_project_root()
    override = os.environ.get(DB_DIR_ENV)
    if override:
        return Path(override)
    configured = _load_project_config(project_root).get("db_dir")
    if configured:
        # relative to the project root, not the current directory
        db_dir = Path(configured)
        return db_dir if db_dir.is_absolute() else project_root / db_dir
    return project_root / DEFAULT_DB_DIR


def get_db_path(project_root: Path | None = None) -> Path:
    """Get the path to the index database."""
    return get_db_dir(project_root) / DEFAULT_DB_NAME


def get_connection(db_path: Path | None = None, readonly: bool = False) -> sqlite3.Connection:
    """Get a SQLite connection with optimized settings."""
    if db_path is None:
        db_path = get_db_path()

    if readonly:
        uri = f"file:{db_path}?mode=ro"
        conn = sqlite3.connect(uri, uri=True, timeout=30)
    else:
        db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(str(db_path), timeout=30)

    conn.row_factory = sqlite3.Row
    if not readonly:
        conn.execute("PRAGMA journal_mode=WAL")
    conn.execute("PRAGMA synchronous=NORMAL")
    conn.execute("PRAGMA foreign_keys=ON")
    conn.execute("PRAGMA temp_store=MEMORY")
    return conn


def ensure_schema(conn: sqlite3.Connection):
    conn.executescript(SCHEMA_SQL)


def db_exists(project_root: Path | None = None) -> bool:
    """Check if an index database exists."""
    path = get_db_path(project_root)
    return path.exists() and path.stat().st_size > 0


@contextmanager
def open_db(readonly: bool = False, project_root: Path | None = None):
    """Context manager for database access. Creates schema if needed."""
    db_path = get_db_path(project_root)
    conn = get_connection(db_path, readonly=readonly)
    try:
        if not readonly:
            ensure_schema(conn)
        yield conn
        if not readonly:
            conn.commit()
    finally:
        conn.close()
