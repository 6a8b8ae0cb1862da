"""Source file loading and language detection."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from codemap.exit_codes import SourceReadError
from codemap.languages import LanguageTag, classify

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class SourceFile:
    """A file's path and raw bytes, immutable once read."""

    path: str
    raw: bytes

    @property
    def text(self) -> str:
        """Decoded text, for display only. Offsets refer to ``raw``."""
        return self.raw.decode("utf-8", errors="replace")

    @property
    def line_count(self) -> int:
        if not self.raw:
            return 0
        return self.raw.count(b"\n") + (0 if self.raw.endswith(b"\n") else 1)


def read_source_file(path) -> SourceFile:
    """Read *path* from disk.

    Raises SourceReadError when the file cannot be read; this is the only
    failure the extraction pipeline surfaces.
    """
    path = os.fspath(path)
    try:
        with open(path, "rb") as f:
            raw = f.read()
    except OSError as e:
        log.debug("Unreadable file: %s (%s)", path, e.strerror or e)
        raise SourceReadError(path, e.strerror or str(e)) from e
    return SourceFile(path=path, raw=raw)


def detect_language(path, content: bytes | None = None) -> LanguageTag:
    """Detect the language tag of *path*; see ``codemap.languages.classify``."""
    return classify(os.fspath(path), content)


def source_from_text(path: str | Path, text: str) -> SourceFile:
    """Build a SourceFile from in-memory text (UTF-8 encoded)."""
    return SourceFile(path=os.fspath(path), raw=text.encode("utf-8"))
