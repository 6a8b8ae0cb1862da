import time

import click

from codemap.exit_codes import PartialResultError
from codemap.output.formatter import json_envelope, to_json


@click.command()
@click.option('--force', is_flag=True, help='Force full reindex')
@click.pass_context
def index(ctx, force):
    """Build or refresh the symbol index."""
    from codemap.index.indexer import Indexer
    json_mode = ctx.obj.get("json") if ctx.obj else False
    t0 = time.monotonic()
    indexer = Indexer()
    stats = indexer.run(force=force)
    elapsed = time.monotonic() - t0

    if json_mode:
        click.echo(to_json(json_envelope(
            "index",
            summary={"verdict": "partial" if indexer.failed else "ok",
                     "elapsed": round(elapsed, 3)},
            failed=indexer.failed,
            **stats,
        )))
    else:
        click.echo(
            f"Index complete. {stats['added']} added, {stats['modified']} modified, "
            f"{stats['removed']} removed, {stats['symbols']} symbols. ({elapsed:.1f}s)"
        )
    if indexer.failed:
        for path in indexer.failed:
            click.echo(f"  unreadable: {path}", err=True)
        raise PartialResultError(indexer.failed)
