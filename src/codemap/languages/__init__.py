"""Language classification and symbol extraction."""

from .base import LanguageExtractor, LanguageTag
from .registry import (
    classify,
    extract_references,
    extract_symbols,
    get_extractor,
    get_extractor_for_file,
    get_language_for_file,
    get_supported_extensions,
    get_supported_languages,
)

__all__ = [
    "LanguageExtractor",
    "LanguageTag",
    "classify",
    "extract_references",
    "extract_symbols",
    "get_extractor",
    "get_extractor_for_file",
    "get_language_for_file",
    "get_supported_extensions",
    "get_supported_languages",
]
