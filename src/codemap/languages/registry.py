"""Language classification and extractor lookup."""

from __future__ import annotations

import os
import re

from .base import LanguageExtractor, LanguageTag
from .c_lang import CExtractor, mask_source
from .cpp_lang import CppExtractor

# Map file extensions to language tags. Matching is case-sensitive.
EXTENSION_MAP = {
    ".c": LanguageTag.C,
    ".h": LanguageTag.C,
    ".cpp": LanguageTag.CPP,
    ".cc": LanguageTag.CPP,
    ".cxx": LanguageTag.CPP,
    ".c++": LanguageTag.CPP,
    ".hpp": LanguageTag.CPP,
    ".hh": LanguageTag.CPP,
    ".hxx": LanguageTag.CPP,
}

# Suffixes shared by C and C++; content decides between them.
_AMBIGUOUS_EXTENSIONS = frozenset({".h"})

_RE_CPP_HINTS = re.compile(
    r"^\s*(?:class\s+\w+\s*[:{]|namespace\b|template\s*<|using\s+namespace\b"
    r"|(?:public|private|protected)\s*:)"
    r"|\w::\w",
    re.MULTILINE,
)


def _suffix(file_path) -> str:
    """Text from the last dot of the final path component, e.g. ".c" for "x/.c"."""
    name = re.split(r"[\\/]", os.fspath(file_path))[-1]
    dot = name.rfind(".")
    return name[dot:] if dot >= 0 else ""


_EXTRACTORS: dict[LanguageTag, LanguageExtractor] = {
    LanguageTag.C: CExtractor(),
    LanguageTag.CPP: CppExtractor(),
}


def classify(file_path: str, content: bytes | None = None) -> LanguageTag:
    """Return the language of *file_path*, chosen by suffix.

    Unknown suffixes give ``LanguageTag.UNKNOWN``; this never raises.
    For ``.h`` headers, *content* (when given) switches the tag to C++ if it
    contains C++-only constructs.
    """
    ext = _suffix(file_path)
    tag = EXTENSION_MAP.get(ext, LanguageTag.UNKNOWN)
    if content is not None and ext in _AMBIGUOUS_EXTENSIONS:
        # comments, literals and directives are not evidence of C++
        if _RE_CPP_HINTS.search(mask_source(content.decode("latin-1"))):
            return LanguageTag.CPP
    return tag


def get_language_for_file(file_path: str) -> str | None:
    """Language name for *file_path*, or None when unsupported."""
    tag = classify(file_path)
    if tag is LanguageTag.UNKNOWN:
        return None
    return tag.value


def get_extractor(language) -> LanguageExtractor | None:
    """Extractor for a tag or language name, or None."""
    try:
        tag = LanguageTag(language)
    except ValueError:
        return None
    return _EXTRACTORS.get(tag)


def get_extractor_for_file(file_path: str) -> LanguageExtractor | None:
    return _EXTRACTORS.get(classify(file_path))


def get_supported_extensions() -> list[str]:
    return sorted(EXTENSION_MAP)


def get_supported_languages() -> list[str]:
    return sorted(tag.value for tag in _EXTRACTORS)


def extract_symbols(source_file, language: LanguageTag) -> list[dict]:
    """Top-level symbols of *source_file* in source order.

    Returns an empty list for ``LanguageTag.UNKNOWN``.
    """
    extractor = _EXTRACTORS.get(language)
    if extractor is None:
        return []
    return extractor.extract_symbols(source_file.raw, source_file.path)


def extract_references(source_file, language: LanguageTag) -> list[dict]:
    """Call references inside *source_file*'s function bodies, in source order."""
    extractor = _EXTRACTORS.get(language)
    if extractor is None:
        return []
    return extractor.extract_references(source_file.raw, source_file.path)
