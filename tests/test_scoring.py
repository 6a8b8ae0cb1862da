"""Tests for token scoring and the external call graph."""

from __future__ import annotations

import math
import sys
from pathlib import Path

import pytest

from codemap.index.cache import SymbolCache
from codemap.index.scoring import (
    IGNORE_TOKENS,
    base_score,
    build_call_graph,
    external_call_counts,
    score_tokens,
)

sys.path.insert(0, str(Path(__file__).parent))
from conftest import write_files  # noqa: E402


class TestBaseScore:
    def test_top_level_file(self):
        assert base_score("a.c", 8, 1) == pytest.approx(2.0)

    def test_depth_decays(self):
        assert base_score("sub/a.c", 8, 1) == pytest.approx(0.8 * 2.0)
        assert base_score("x/y/a.c", 8, 1) == pytest.approx(0.64 * 2.0)

    def test_windows_separators_count_as_depth(self):
        assert base_score("x\\y\\a.c", 8, 1) == pytest.approx(base_score("x/y/a.c", 8, 1))

    def test_more_identifiers_lower_score(self):
        assert base_score("a.c", 10, 4) < base_score("a.c", 10, 1)

    def test_empty_file(self):
        assert base_score("a.c", 0, 0) == 0.0


class TestCallGraph:
    def test_counts_external_calls(self):
        G = build_call_graph(
            {"a.c": ["helper"], "b.c": ["helper", "helper", "run"]},
            {"a.c": {"helper"}, "b.c": {"run"}},
        )
        assert G[("file", "b.c")][("token", "helper")]["weight"] == 2
        assert not G.has_edge(("file", "a.c"), ("token", "helper"))
        assert not G.has_edge(("file", "b.c"), ("token", "run"))
        assert external_call_counts(G) == {"helper": 2}

    def test_calls_from_many_files(self):
        G = build_call_graph(
            {"a.c": ["log_msg"], "b.c": ["log_msg"], "c.c": []},
            {"c.c": {"log_msg"}},
        )
        assert external_call_counts(G) == {"log_msg": 2}
        assert ("file", "c.c") in G

    def test_empty(self):
        G = build_call_graph({}, {})
        assert external_call_counts(G) == {}


class TestScoreTokens:
    def test_external_calls_boost_score(self, tmp_path):
        write_files(tmp_path, {
            "a.c": "int helper(void) {\n    return 1;\n}\n",
            "sub/b.c": (
                "int run(void) {\n"
                "    helper();\n"
                "    return helper();\n"
                "}\n"
            ),
        })
        scores = score_tokens(tmp_path, ["a.c", "sub/b.c"], SymbolCache())
        assert set(scores) == {"a.c", "sub/b.c"}
        assert scores["a.c"]["helper"] == pytest.approx(
            math.sqrt(3 / 2) * (1 + math.log(3))
        )
        assert scores["sub/b.c"]["run"] == pytest.approx(0.8 * math.sqrt(4 / 2))

    def test_shallow_file_outranks_deep_twin(self, tmp_path):
        body = "void same(void) {\n}\n"
        write_files(tmp_path, {"top.c": body, "deep/er/low.c": body})
        scores = score_tokens(tmp_path, ["top.c", "deep/er/low.c"], SymbolCache())
        assert scores["top.c"]["same"] > scores["deep/er/low.c"]["same"]

    def test_self_calls_do_not_boost(self, tmp_path):
        write_files(tmp_path, {
            "r.c": "int fact(int n) {\n    return n ? n * fact(n - 1) : 1;\n}\n",
        })
        scores = score_tokens(tmp_path, ["r.c"], SymbolCache())
        assert scores["r.c"]["fact"] == pytest.approx(math.sqrt(3 / 2))

    def test_cpp_member_names(self, tmp_path):
        write_files(tmp_path, {
            "w.cpp": (
                "class Widget {};\n"
                "Widget::Widget() {}\n"
                "void Widget::draw() {}\n"
            ),
        })
        scores = score_tokens(tmp_path, ["w.cpp"], SymbolCache())
        assert set(scores["w.cpp"]) == {"Widget", "draw"}

    def test_ignored_tokens(self, tmp_path):
        assert "constructor" in IGNORE_TOKENS
        write_files(tmp_path, {
            "i.c": "void constructor(void) {}\nvoid kept(void) {}\n",
        })
        scores = score_tokens(tmp_path, ["i.c"], SymbolCache())
        assert list(scores["i.c"]) == ["kept"]
        assert scores["i.c"]["kept"] == pytest.approx(math.sqrt(2 / 3))

    def test_unreadable_and_unknown_files_skipped(self, tmp_path):
        write_files(tmp_path, {"ok.c": "void f(void) {}\n", "notes.txt": "hi\n"})
        scores = score_tokens(
            tmp_path, ["ok.c", "notes.txt", "gone.c"], SymbolCache(),
        )
        assert list(scores) == ["ok.c"]

    def test_uses_given_cache(self, tmp_path):
        write_files(tmp_path, {"ok.c": "void f(void) {}\n"})
        cache = SymbolCache()
        score_tokens(tmp_path, ["ok.c"], cache)
        score_tokens(tmp_path, ["ok.c"], cache)
        assert cache.misses == 1
        assert cache.hits == 1
