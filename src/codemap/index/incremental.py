"""Change detection for incremental re-indexing."""

import hashlib
from pathlib import Path


def file_hash(path: Path) -> str:
    """Compute SHA-256 hash of a file."""
    h = hashlib.sha256()
    with open(path, "rb") as f:
        while True:
            chunk = f.read(65536)
            if not chunk:
                break
            h.update(chunk)
    return h.hexdigest()


def bytes_hash(raw: bytes) -> str:
    return hashlib.sha256(raw).hexdigest()


def mtime_matches(stored_mtime, current_mtime: float) -> bool:
    return stored_mtime is not None and abs(current_mtime - stored_mtime) < 0.001


def get_changed_files(conn, file_paths: list[str], root: Path):
    """Split *file_paths* into (added, modified, removed) against the index.

    A stored file counts as modified only when its sha256 changed. When just
    the mtime moved, the stored mtime is refreshed so the next run can skip
    hashing it. Files that vanish or cannot be read during the check are
    reported as removed.
    """
    stored = {
        row["path"]: (row["mtime"], row["hash"])
        for row in conn.execute("SELECT path, mtime, hash FROM files")
    }
    on_disk = set(file_paths)

    added = sorted(on_disk - stored.keys())
    removed = sorted(stored.keys() - on_disk)
    modified: list[str] = []
    touched: list[tuple[float, str]] = []

    for path in sorted(on_disk & stored.keys()):
        stored_mtime, stored_hash = stored[path]
        full_path = root / path
        try:
            mtime = full_path.stat().st_mtime
            if mtime_matches(stored_mtime, mtime):
                continue
            digest = file_hash(full_path)
        except OSError:
            removed.append(path)
            continue
        if digest == stored_hash:
            touched.append((mtime, path))
        else:
            modified.append(path)

    if touched:
        conn.executemany("UPDATE files SET mtime = ? WHERE path = ?", touched)
    return added, modified, removed
