"""Base class for pattern-matching language extractors."""

from __future__ import annotations

import bisect
from abc import ABC, abstractmethod
from enum import Enum


class LanguageTag(str, Enum):
    """Language a source file is written in, derived from its path."""

    C = "c"
    CPP = "cpp"
    UNKNOWN = "unknown"

    def __str__(self) -> str:
        return self.value


class LanguageExtractor(ABC):
    """Extracts top-level symbols and call references from raw source bytes.

    Extractors are stateless: the same instance may be shared by every
    caller, and calling ``extract_symbols`` twice on the same bytes gives
    the same list.
    """

    @property
    @abstractmethod
    def language_tag(self) -> LanguageTag:
        ...

    @property
    def language_name(self) -> str:
        return self.language_tag.value

    @property
    @abstractmethod
    def file_extensions(self) -> list[str]:
        ...

    @abstractmethod
    def extract_symbols(self, source: bytes, file_path: str) -> list[dict]:
        """Return top-level symbol dicts in source order."""

    def extract_references(self, source: bytes, file_path: str) -> list[dict]:
        return []

    # ---- helpers ----

    @staticmethod
    def line_index(text: str) -> list[int]:
        """Offsets of every newline in *text*, for ``line_of``."""
        return [i for i, ch in enumerate(text) if ch == "\n"]

    @staticmethod
    def line_of(newlines: list[int], offset: int) -> int:
        """1-based line number of *offset* given a ``line_index`` result."""
        return bisect.bisect_left(newlines, offset) + 1

    def _make_symbol(self, name: str, kind: str, offset: int,
                     line_start: int, line_end: int | None = None,
                     qualified_name: str | None = None,
                     signature: str | None = None,
                     parent_name: str | None = None) -> dict:
        return {
            "name": name,
            "kind": kind,
            "offset": offset,
            "qualified_name": qualified_name or name,
            "line_start": line_start,
            "line_end": line_end if line_end is not None else line_start,
            "signature": signature,
            "parent_name": parent_name,
        }

    def _make_reference(self, target_name: str, kind: str, offset: int,
                        line: int, source_name: str | None = None) -> dict:
        return {
            "target_name": target_name,
            "kind": kind,
            "offset": offset,
            "line": line,
            "source_name": source_name,
        }
