"""Build and refresh the SQLite symbol index."""

from __future__ import annotations

import logging
import time
from pathlib import Path

from codemap.db.connection import find_project_root, get_exclude_patterns, open_db
from codemap.exit_codes import SourceReadError
from codemap.index.cache import SymbolCache
from codemap.index.discovery import discover_files
from codemap.index.incremental import get_changed_files

log = logging.getLogger(__name__)


class Indexer:
    """Scans a project and stores files, symbols and call references.

    Only files that were added or changed since the last run are re-scanned,
    unless ``force`` is given. Unreadable files are logged, counted and left
    out of the index.
    """

    def __init__(self, project_root: Path | None = None, cache: SymbolCache | None = None):
        self.root = Path(project_root) if project_root else find_project_root()
        self.cache = cache if cache is not None else SymbolCache()
        self.failed: list[str] = []
        self.stats = {"added": 0, "modified": 0, "removed": 0, "symbols": 0}

    def run(self, force: bool = False) -> dict:
        t0 = time.monotonic()
        files = discover_files(self.root, get_exclude_patterns(self.root))
        log.debug("discovered %d files under %s", len(files), self.root)

        with open_db(project_root=self.root) as conn:
            if force:
                conn.execute("DELETE FROM files")
                added, modified, removed = list(files), [], []
            else:
                added, modified, removed = get_changed_files(conn, files, self.root)

            for path in removed:
                conn.execute("DELETE FROM files WHERE path = ?", (path,))
                self.cache.invalidate(self.root / path)

            for path in modified:
                conn.execute("DELETE FROM files WHERE path = ?", (path,))
                self.cache.invalidate(self.root / path)

            for path in added + modified:
                self._index_file(conn, path)

        self.stats.update(added=len(added), modified=len(modified), removed=len(removed))
        log.info(
            "indexed %d added, %d modified, %d removed in %.2fs",
            len(added), len(modified), len(removed), time.monotonic() - t0,
        )
        return self.stats

    def _index_file(self, conn, rel_path: str) -> None:
        try:
            entry = self.cache.get(self.root / rel_path)
        except SourceReadError as e:
            self.failed.append(rel_path)
            log.debug("not indexed: %s", e.format_message())
            return

        cur = conn.execute(
            "INSERT INTO files (path, language, hash, mtime, line_count) "
            "VALUES (?, ?, ?, ?, ?)",
            (rel_path, entry.language.value, entry.hash, entry.mtime,
             entry.source.line_count),
        )
        file_id = cur.lastrowid
        conn.executemany(
            "INSERT INTO symbols (file_id, name, qualified_name, kind, byte_offset, "
            "signature, line_start, line_end, parent_name) "
            "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)",
            [
                (file_id, s["name"], s["qualified_name"], s["kind"], s["offset"],
                 s["signature"], s["line_start"], s["line_end"], s["parent_name"])
                for s in entry.symbols
            ],
        )
        conn.executemany(
            "INSERT INTO refs (file_id, target_name, kind, byte_offset, line, source_name) "
            "VALUES (?, ?, ?, ?, ?, ?)",
            [
                (file_id, r["target_name"], r["kind"], r["offset"], r["line"],
                 r["source_name"])
                for r in entry.references
            ],
        )
        self.stats["symbols"] += len(entry.symbols)
