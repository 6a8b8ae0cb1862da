"""Token relevance scores for defined identifiers.

Each file's identifiers start from a base score that favours shallow files
and files with few definitions per line. Identifiers that other files call
are boosted logarithmically by their external call count.
"""

from __future__ import annotations

import logging
import math
import time
from pathlib import Path, PurePosixPath

import networkx as nx

from codemap.exit_codes import SourceReadError
from codemap.languages import LanguageTag

log = logging.getLogger(__name__)

IGNORE_TOKENS = frozenset({"__init__", "__post_init__", "__call__", "constructor"})

DEPTH_DECAY = 0.8


def _depth(rel_path: str) -> int:
    return len(PurePosixPath(rel_path.replace("\\", "/")).parent.parts)


def base_score(rel_path: str, num_lines: int, num_identifiers: int) -> float:
    return DEPTH_DECAY ** _depth(rel_path) * math.sqrt(num_lines / (num_identifiers + 1))


def build_call_graph(calls_by_file: dict[str, list[str]],
                     defined_by_file: dict[str, set[str]]) -> nx.DiGraph:
    """Directed file -> token graph of external calls.

    A call counts as external when the calling file does not define the
    token itself. Edge ``weight`` is the number of such call sites.
    """
    G = nx.DiGraph()
    for path, calls in calls_by_file.items():
        file_node = ("file", path)
        G.add_node(file_node)
        own = defined_by_file.get(path, set())
        for call in calls:
            if call in own:
                continue
            token_node = ("token", call)
            if G.has_edge(file_node, token_node):
                G[file_node][token_node]["weight"] += 1
            else:
                G.add_edge(file_node, token_node, weight=1)
    return G


def external_call_counts(G: nx.DiGraph) -> dict[str, int]:
    return {
        node[1]: int(G.in_degree(node, weight="weight"))
        for node in G
        if node[0] == "token"
    }


def score_tokens(root, rel_paths: list[str], cache) -> dict[str, dict[str, float]]:
    """Return ``{rel_path: {token: score}}`` for every file with a known language.

    Files that cannot be read are logged and skipped. *cache* is a
    ``SymbolCache`` owned by the caller.
    """
    t0 = time.monotonic()
    root = Path(root)
    token_scores: dict[str, dict[str, float]] = {}
    calls_by_file: dict[str, list[str]] = {}
    defined_by_file: dict[str, set[str]] = {}

    for rel_path in rel_paths:
        try:
            entry = cache.get(root / rel_path)
        except SourceReadError as e:
            log.warning("Skipping %s: %s", rel_path, e.format_message())
            continue
        if entry.language is LanguageTag.UNKNOWN:
            continue

        identifiers = [s["name"] for s in entry.symbols]
        base = base_score(rel_path, entry.source.line_count, len(identifiers))
        scores = {
            name: base for name in identifiers if name not in IGNORE_TOKENS
        }
        token_scores[rel_path] = scores
        defined_by_file[rel_path] = set(scores)
        calls_by_file[rel_path] = [r["target_name"] for r in entry.references]

    G = build_call_graph(calls_by_file, defined_by_file)
    external = external_call_counts(G)
    for scores in token_scores.values():
        for token in scores:
            scores[token] *= 1 + math.log(1 + external.get(token, 0))

    log.debug("Scored %d files in %.0fms", len(token_scores),
              (time.monotonic() - t0) * 1000)
    return token_scores
