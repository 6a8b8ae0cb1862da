"""Manage per-project codemap configuration (.codemap/config.json)."""

from __future__ import annotations

import click

from codemap.db.connection import (
    _load_project_config,
    find_project_root,
    get_db_path,
    write_project_config,
)
from codemap.output.formatter import json_envelope, to_json


@click.command("config")
@click.option("--set-db-dir", "db_dir", default=None,
              help="Store the index DB in this directory instead of .codemap/.")
@click.option("--add-exclude", "excludes", multiple=True,
              help="Glob of files to leave out of the index (repeatable).")
@click.option("--show", is_flag=True, help="Print current configuration.")
@click.pass_context
def config(ctx, db_dir, excludes, show):
    """Manage per-project codemap configuration (.codemap/config.json).

    The ``CODEMAP_DB_DIR`` environment variable takes precedence over a
    configured ``db_dir``.
    """
    json_mode = ctx.obj.get("json") if ctx.obj else False
    root = find_project_root()
    current = _load_project_config(root)

    updates = {}
    if db_dir is not None:
        updates["db_dir"] = db_dir
    if excludes:
        merged = list(current.get("exclude") or [])
        merged.extend(p for p in excludes if p not in merged)
        updates["exclude"] = merged

    if updates:
        config_path = write_project_config(updates, root)
        if json_mode:
            click.echo(to_json(json_envelope(
                "config",
                summary={"verdict": "saved"},
                config_path=str(config_path),
                **updates,
            )))
            return
        for k, v in updates.items():
            click.echo(f"Saved {k} = {v!r}")
        click.echo(f"Config written to {config_path}")
        click.echo(f"DB will be stored at: {get_db_path(root)}")
        if not show:
            return
        current = _load_project_config(root)
        click.echo()

    if json_mode:
        click.echo(to_json(json_envelope(
            "config",
            summary={"verdict": "ok"},
            db_path=str(get_db_path(root)),
            **current,
        )))
        return
    if not current:
        click.echo("No .codemap/config.json found (using defaults).")
        click.echo(f"Default DB path: {get_db_path(root)}")
    else:
        click.echo(f"Config: {root / '.codemap' / 'config.json'}")
        for k, v in current.items():
            click.echo(f"  {k} = {v!r}")
        click.echo(f"Resolved DB path: {get_db_path(root)}")
