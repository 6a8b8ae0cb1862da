import click

from codemap.db.connection import db_exists, open_db
from codemap.db.queries import FILE_BY_PATH, FILE_BY_SUFFIX, SYMBOLS_IN_FILE
from codemap.exit_codes import IndexMissingError, EXIT_ERROR, exit_with
from codemap.output.formatter import json_envelope, symbol_line, to_json


@click.command("file")
@click.argument('path')
@click.option('--full', is_flag=True, help='Show full signatures without truncation')
@click.pass_context
def file_cmd(ctx, path, full):
    """Show the indexed symbols of one file."""
    json_mode = ctx.obj.get("json") if ctx.obj else False
    if not db_exists():
        raise IndexMissingError()

    # Normalise separators
    path = path.replace("\\", "/")

    with open_db(readonly=True) as conn:
        frow = conn.execute(FILE_BY_PATH, (path,)).fetchone()
        if frow is None:
            # Try partial match
            frow = conn.execute(FILE_BY_SUFFIX, (f"%{path}",)).fetchone()
        if frow is None:
            exit_with(EXIT_ERROR, f"File not found in index: {path}\n"
                                  "Hint: use the path relative to the project root.")

        symbols = [dict(s) for s in conn.execute(SYMBOLS_IN_FILE, (frow["id"],)).fetchall()]
        for s in symbols:
            s["offset"] = s.pop("byte_offset")

        if json_mode:
            click.echo(to_json(json_envelope(
                "file",
                summary={"symbols": len(symbols)},
                path=frow["path"],
                language=frow["language"],
                line_count=frow["line_count"],
                symbols=symbols,
            )))
            return

        click.echo(f"{frow['path']}  ({frow['language'] or '?'}, {frow['line_count']} lines)")
        click.echo()
        if not symbols:
            click.echo("  (no symbols)")
            return
        for s in symbols:
            click.echo(f"  {symbol_line(s, full=full)}")
