"""Classify files and list their top-level symbols, without an index."""

from __future__ import annotations

import click

from codemap.exit_codes import PartialResultError, SourceReadError
from codemap.index.cache import SymbolCache
from codemap.output.formatter import json_envelope, loc, symbol_line, to_json


@click.command()
@click.argument("paths", nargs=-1, required=True, type=click.Path(dir_okay=False))
@click.option("--refs", is_flag=True, help="Also list call references")
@click.option("--full", is_flag=True, help="Show full signatures without truncation")
@click.pass_context
def scan(ctx, paths, refs, full):
    """Detect the language of each file and list its symbols."""
    json_mode = ctx.obj.get("json") if ctx.obj else False
    cache = SymbolCache()
    results = []
    errors: list[SourceReadError] = []

    for path in paths:
        try:
            entry = cache.get(path)
        except SourceReadError as e:
            errors.append(e)
            continue
        results.append((path, entry))

    if errors and not results:
        raise errors[0]

    if json_mode:
        click.echo(to_json(json_envelope(
            "scan",
            summary={
                "files": len(results),
                "symbols": sum(len(e.symbols) for _, e in results),
                "failed": len(errors),
            },
            files=[
                {
                    "path": path,
                    "language": entry.language.value,
                    "line_count": entry.source.line_count,
                    "symbols": entry.symbols,
                    **({"references": entry.references} if refs else {}),
                }
                for path, entry in results
            ],
            failed=[e.path for e in errors],
        )))
    else:
        for n, (path, entry) in enumerate(results):
            if n:
                click.echo()
            click.echo(f"{path}  ({entry.language.value}, {entry.source.line_count} lines)")
            if not entry.symbols:
                click.echo("  (no symbols)")
            for sym in entry.symbols:
                click.echo(f"  {symbol_line(sym, full=full)}")
            if refs and entry.references:
                click.echo("  calls:")
                for ref in entry.references:
                    where = ref["source_name"] or "?"
                    click.echo(f"    {ref['target_name']}  in {where}  {loc(path, ref['line'])}")

    if errors:
        for e in errors:
            click.echo(f"  unreadable: {e.format_message()}", err=True)
        raise PartialResultError([e.path for e in errors])
