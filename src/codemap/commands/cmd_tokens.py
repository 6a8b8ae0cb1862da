"""Rank the identifiers each file defines."""

from __future__ import annotations

from pathlib import Path

import click

from codemap.db.connection import get_exclude_patterns
from codemap.index.cache import SymbolCache
from codemap.index.discovery import discover_files
from codemap.output.formatter import format_table, json_envelope, to_json


@click.command()
@click.argument("root", default=".", type=click.Path(exists=True, file_okay=False))
@click.option("--top", default=10, show_default=True, help="Tokens to show per file")
@click.pass_context
def tokens(ctx, root, top):
    """Score the identifiers defined under ROOT."""
    from codemap.index.scoring import score_tokens
    json_mode = ctx.obj.get("json") if ctx.obj else False
    root = Path(root)
    files = discover_files(root, get_exclude_patterns(root))
    scores = score_tokens(root, files, SymbolCache())

    if json_mode:
        click.echo(to_json(json_envelope(
            "tokens",
            summary={"files": len(scores)},
            scores=scores,
        )))
        return

    if not scores:
        click.echo("(no C/C++ files found)")
        return
    for n, (path, file_scores) in enumerate(scores.items()):
        if n:
            click.echo()
        click.echo(path)
        ranked = sorted(file_scores.items(), key=lambda kv: (-kv[1], kv[0]))
        rows = [[token, f"{score:.3f}"] for token, score in ranked]
        click.echo(format_table(["token", "score"], rows, budget=top))
