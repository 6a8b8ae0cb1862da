"""Tests for SymbolCache invalidation and SourceFile reading."""

from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest

from codemap.exit_codes import EXIT_ERROR, SourceReadError
from codemap.index.cache import SymbolCache, scan_source
from codemap.index.parser import read_source_file, source_from_text
from codemap.languages import LanguageTag

sys.path.insert(0, str(Path(__file__).parent))
from conftest import FIXTURES, bump_mtime  # noqa: E402


@pytest.fixture
def c_file(tmp_path):
    path = tmp_path / "unit.c"
    path.write_text("int one(void) { return 1; }\n", encoding="utf-8")
    return path


class TestSourceFile:
    def test_read_fixture(self):
        src = read_source_file(FIXTURES / "test.c")
        assert src.path.endswith("test.c")
        assert src.raw.startswith(b"#include <stdio.h>")
        assert src.line_count == 10

    def test_is_immutable(self):
        src = source_from_text("a.c", "int x;\n")
        with pytest.raises(AttributeError):
            src.raw = b""

    @pytest.mark.parametrize("text,expected", [
        ("", 0),
        ("one line", 1),
        ("one line\n", 1),
        ("a\nb", 2),
        ("a\nb\n\n", 3),
    ])
    def test_line_count(self, text, expected):
        assert source_from_text("a.c", text).line_count == expected

    def test_missing_file_raises(self, tmp_path):
        missing = tmp_path / "nope.c"
        with pytest.raises(SourceReadError) as exc_info:
            read_source_file(missing)
        assert exc_info.value.path == str(missing)
        assert exc_info.value.exit_code == EXIT_ERROR
        assert "Cannot read" in exc_info.value.format_message()

    def test_directory_raises(self, tmp_path):
        with pytest.raises(SourceReadError):
            read_source_file(tmp_path)


class TestScanSource:
    def test_classifies_and_extracts(self):
        entry = scan_source(read_source_file(FIXTURES / "test.cpp"))
        assert entry.language is LanguageTag.CPP
        assert [s["name"] for s in entry.symbols] == ["greet", "main"]
        assert [r["target_name"] for r in entry.references] == ["greet"]
        assert len(entry.hash) == 64

    def test_unknown_file_has_no_symbols(self):
        entry = scan_source(source_from_text("notes.txt", "int f(void) { }\n"))
        assert entry.language is LanguageTag.UNKNOWN
        assert entry.symbols == []
        assert entry.references == []


class TestSymbolCache:
    def test_first_get_scans(self, c_file):
        cache = SymbolCache()
        entry = cache.get(c_file)
        assert [s["name"] for s in entry.symbols] == ["one"]
        assert cache.misses == 1
        assert cache.hits == 0
        assert c_file in cache
        assert len(cache) == 1

    def test_unchanged_file_is_reused(self, c_file):
        cache = SymbolCache()
        first = cache.get(c_file)
        second = cache.get(c_file)
        assert second is first
        assert cache.hits == 1
        assert cache.misses == 1

    def test_relative_and_absolute_paths_share_entry(self, c_file, monkeypatch):
        monkeypatch.chdir(c_file.parent)
        cache = SymbolCache()
        first = cache.get("unit.c")
        assert cache.get(c_file) is first
        assert len(cache) == 1

    def test_modified_file_is_rescanned(self, c_file):
        cache = SymbolCache()
        first = cache.get(c_file)
        c_file.write_text(
            "int one(void) { return 1; }\nint two(void) { return 2; }\n",
            encoding="utf-8",
        )
        bump_mtime(c_file)
        second = cache.get(c_file)
        assert second is not first
        assert [s["name"] for s in second.symbols] == ["one", "two"]
        assert cache.misses == 2

    def test_touched_but_identical_file_is_reused(self, c_file):
        cache = SymbolCache()
        first = cache.get(c_file)
        bump_mtime(c_file)
        second = cache.get(c_file)
        assert second is first
        assert second.mtime == os.stat(c_file).st_mtime
        assert cache.hits == 1

    def test_invalidate_forces_rescan(self, c_file):
        cache = SymbolCache()
        first = cache.get(c_file)
        assert cache.invalidate(c_file) is True
        assert c_file not in cache
        assert cache.invalidate(c_file) is False
        second = cache.get(c_file)
        assert second is not first
        assert second.symbols == first.symbols

    def test_clear(self, c_file, tmp_path):
        other = tmp_path / "other.cpp"
        other.write_text("class A {};\n", encoding="utf-8")
        cache = SymbolCache()
        cache.get(c_file)
        cache.get(other)
        assert len(cache) == 2
        cache.clear()
        assert len(cache) == 0

    def test_caches_are_independent(self, c_file):
        a = SymbolCache()
        b = SymbolCache()
        a.get(c_file)
        assert c_file not in b
        assert len(b) == 0

    def test_missing_file_raises(self, tmp_path):
        cache = SymbolCache()
        with pytest.raises(SourceReadError):
            cache.get(tmp_path / "missing.c")
        assert len(cache) == 0

    def test_deleted_file_raises_even_when_cached(self, c_file):
        cache = SymbolCache()
        cache.get(c_file)
        c_file.unlink()
        with pytest.raises(SourceReadError):
            cache.get(c_file)
        assert c_file not in cache
        assert len(cache) == 0
