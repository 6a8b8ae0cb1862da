"""Find C and C++ source files under a project root."""

from __future__ import annotations

import fnmatch
import os
from pathlib import Path

from codemap.languages import LanguageTag, classify

SKIP_DIRS = frozenset({
    ".git", ".hg", ".svn", ".codemap", ".venv", "venv", "node_modules",
    "__pycache__", "build", "cmake-build-debug", "cmake-build-release",
    "out", "dist", ".cache", ".idea", ".vscode",
})


def _excluded(rel_path: str, patterns: list[str]) -> bool:
    name = rel_path.rsplit("/", 1)[-1]
    return any(
        fnmatch.fnmatch(rel_path, p) or fnmatch.fnmatch(name, p)
        for p in patterns
    )


def discover_files(root: Path, exclude: list[str] | None = None) -> list[str]:
    """Return sorted relative paths (``/``-separated) of supported files.

    Hidden and build directories in ``SKIP_DIRS`` are not descended into.
    *exclude* holds glob patterns matched against the relative path and
    against the bare file name.
    """
    root = Path(root)
    patterns = list(exclude or [])
    found: list[str] = []
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(d for d in dirnames if d not in SKIP_DIRS)
        rel_dir = os.path.relpath(dirpath, root)
        for fname in filenames:
            if classify(fname) is LanguageTag.UNKNOWN:
                continue
            rel = fname if rel_dir == "." else f"{rel_dir}/{fname}"
            rel = rel.replace(os.sep, "/")
            if _excluded(rel, patterns):
                continue
            found.append(rel)
    return sorted(found)
