"""Caller-owned cache of per-file extraction results."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field

from codemap.exit_codes import SourceReadError
from codemap.index.incremental import bytes_hash, mtime_matches
from codemap.index.parser import SourceFile, detect_language, read_source_file
from codemap.languages import LanguageTag, extract_references, extract_symbols

log = logging.getLogger(__name__)


@dataclass
class FileEntry:
    """Extraction result for one file; replaced wholesale on re-scan."""

    source: SourceFile
    language: LanguageTag
    symbols: list[dict]
    references: list[dict] = field(default_factory=list)
    mtime: float | None = None
    hash: str = ""


class SymbolCache:
    """Maps file paths to their latest ``FileEntry``.

    There is no shared instance: whoever needs caching creates a cache and
    passes it along. An entry is reused while the file's mtime is unchanged,
    or while the mtime moved but the content hash did not. ``invalidate``
    drops an entry explicitly.
    """

    def __init__(self):
        self._entries: dict[str, FileEntry] = {}
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, path) -> bool:
        return self._key(path) in self._entries

    @staticmethod
    def _key(path) -> str:
        return os.path.abspath(os.fspath(path))

    def get(self, path) -> FileEntry:
        """Return the entry for *path*, scanning the file when needed.

        Raises SourceReadError if the file cannot be read.
        """
        key = self._key(path)
        entry = self._entries.get(key)
        try:
            mtime = os.stat(key).st_mtime
        except OSError:
            mtime = None

        if entry is not None and mtime is not None:
            if mtime_matches(entry.mtime, mtime):
                self.hits += 1
                return entry

        try:
            source = read_source_file(path)
        except SourceReadError:
            self._entries.pop(key, None)
            raise
        digest = bytes_hash(source.raw)
        if entry is not None and entry.hash == digest:
            entry.mtime = mtime
            self.hits += 1
            return entry

        self.misses += 1
        entry = scan_source(source)
        entry.mtime = mtime
        entry.hash = digest
        self._entries[key] = entry
        log.debug("scanned %s: %d symbols", path, len(entry.symbols))
        return entry

    def invalidate(self, path) -> bool:
        """Drop the entry for *path*. Returns True if one was present."""
        return self._entries.pop(self._key(path), None) is not None

    def clear(self) -> None:
        self._entries.clear()


def scan_source(source: SourceFile) -> FileEntry:
    """Classify and extract *source* without any caching."""
    language = detect_language(source.path, source.raw)
    return FileEntry(
        source=source,
        language=language,
        symbols=extract_symbols(source, language),
        references=extract_references(source, language),
        hash=bytes_hash(source.raw),
    )
