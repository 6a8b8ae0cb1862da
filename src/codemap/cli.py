"""Click CLI entry point with lazy-loaded subcommands."""

from __future__ import annotations

import logging
import os
import sys

# Fix Unicode output on Windows consoles (cp1253, cp1252, etc.)
if sys.platform == "win32" and not os.environ.get("PYTHONIOENCODING"):
    sys.stdout.reconfigure(encoding="utf-8", errors="replace")
    sys.stderr.reconfigure(encoding="utf-8", errors="replace")

import click


# Lazy-loading command group: imports command modules only when invoked.
# Keeps networkx out of commands that never score tokens.
_COMMANDS = {
    # setup
    "index":        ("codemap.commands.cmd_index",   "index"),
    "config":       ("codemap.commands.cmd_config",  "config"),
    # exploration
    "scan":         ("codemap.commands.cmd_scan",    "scan"),
    "file":         ("codemap.commands.cmd_file",    "file_cmd"),
    "symbol":       ("codemap.commands.cmd_symbol",  "symbol"),
    "tokens":       ("codemap.commands.cmd_tokens",  "tokens"),
}

# Command categories for organized --help display
_CATEGORIES = {
    "Setup": ["index", "config"],
    "Exploration": ["scan", "file", "symbol", "tokens"],
}


class LazyGroup(click.Group):
    """A Click group that lazy-loads command modules on first access."""

    def list_commands(self, ctx):
        return sorted(_COMMANDS.keys())

    def get_command(self, ctx, cmd_name):
        if cmd_name not in _COMMANDS:
            return None
        module_path, attr_name = _COMMANDS[cmd_name]
        import importlib
        mod = importlib.import_module(module_path)
        return getattr(mod, attr_name)

    def invoke(self, ctx):
        """Map unhandled exceptions to EXIT_ERROR with a one-line message.

        CodemapError subclasses carry their own exit_code and are handled by
        Click's ClickException machinery.
        """
        try:
            return super().invoke(ctx)
        except click.exceptions.Exit:
            raise
        except (click.Abort, click.ClickException, SystemExit):
            raise
        except Exception as exc:
            from codemap.exit_codes import EXIT_ERROR
            logging.getLogger(__name__).debug("unhandled error", exc_info=True)
            click.echo(f"Error: {exc}", err=True)
            ctx.exit(EXIT_ERROR)

    def format_help(self, ctx, formatter):
        """Categorized help display instead of flat alphabetical list."""
        self.format_usage(ctx, formatter)
        formatter.write("\n")
        if self.help:
            formatter.write(self.help + "\n\n")

        for cat_name, cmds in _CATEGORIES.items():
            formatter.write(f"  {cat_name}:\n")
            for cmd_name in cmds:
                cmd = self.get_command(ctx, cmd_name)
                if cmd is None:
                    continue
                help_text = cmd.get_short_help_str(limit=60)
                formatter.write(f"    {cmd_name:20s} {help_text}\n")
            formatter.write("\n")

        formatter.write("  Options:\n")
        formatter.write("    --json               Output in JSON format\n")
        formatter.write("    --verbose            Debug logging on stderr\n")
        formatter.write("    --version            Show the version and exit\n\n")
        formatter.write("  Run `codemap <command> --help` for details on any command.\n")


class _EchoHandler(logging.Handler):
    """Writes records through click so they follow redirected stderr."""

    def emit(self, record):
        try:
            click.echo(self.format(record), err=True)
        except Exception:
            self.handleError(record)


def _configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.WARNING
    root = logging.getLogger()
    if not any(isinstance(h, _EchoHandler) for h in root.handlers):
        handler = _EchoHandler()
        handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
        root.addHandler(handler)
    root.setLevel(level)


@click.group(cls=LazyGroup)
@click.version_option(package_name="codemap")
@click.option('--json', 'json_mode', is_flag=True, help='Output in JSON format')
@click.option('--verbose', is_flag=True, help='Debug logging on stderr')
@click.pass_context
def cli(ctx, json_mode, verbose):
    """codemap: C/C++ symbol mapper."""
    _configure_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj['json'] = json_mode
    ctx.obj['verbose'] = verbose
