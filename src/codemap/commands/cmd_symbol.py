import click

from codemap.db.connection import db_exists, open_db
from codemap.db.queries import CALLERS_OF, SYMBOL_BY_NAME
from codemap.exit_codes import IndexMissingError, EXIT_ERROR, exit_with
from codemap.output.formatter import (
    abbrev_kind, format_signature, json_envelope, loc, to_json,
)


@click.command()
@click.argument('name')
@click.option('--limit', default=20, show_default=True, help='Max callers to list')
@click.pass_context
def symbol(ctx, name, limit):
    """Show where a symbol is defined and which functions call it."""
    json_mode = ctx.obj.get("json") if ctx.obj else False
    if not db_exists():
        raise IndexMissingError()

    with open_db(readonly=True) as conn:
        defs = conn.execute(SYMBOL_BY_NAME, (name, name)).fetchall()
        target = defs[0]["name"] if defs else name
        callers = conn.execute(CALLERS_OF, (target,)).fetchall()

    if not defs and not callers:
        exit_with(EXIT_ERROR, f"Symbol not found: {name}")

    if json_mode:
        click.echo(to_json(json_envelope(
            "symbol",
            summary={"definitions": len(defs), "callers": len(callers)},
            definitions=[
                {"name": d["name"], "qualified_name": d["qualified_name"],
                 "kind": d["kind"], "path": d["file_path"],
                 "line": d["line_start"], "offset": d["byte_offset"]}
                for d in defs
            ],
            callers=[
                {"source_name": c["source_name"], "path": c["file_path"],
                 "line": c["line"]}
                for c in callers[:limit]
            ],
        )))
        return

    if not defs:
        click.echo(f"{name}  (no definition indexed)")
    for d in defs:
        sig = format_signature(d["signature"])
        parts = [abbrev_kind(d["kind"]), d["qualified_name"] or d["name"]]
        if sig:
            parts.append(sig)
        parts.append(loc(d["file_path"], d["line_start"]))
        click.echo("  ".join(parts))

    if callers:
        click.echo()
        click.echo(f"Callers ({len(callers)}):")
        for c in callers[:limit]:
            click.echo(f"  {c['source_name'] or '?'}  {loc(c['file_path'], c['line'])}")
        if len(callers) > limit:
            click.echo(f"  (+{len(callers) - limit} more)")
