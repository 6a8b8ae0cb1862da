"""Shared test fixtures and helpers for codemap tests."""

import json
import os
from pathlib import Path

import pytest
from click.testing import CliRunner

FIXTURES = Path(__file__).parent / "fixtures"


def invoke_cli(runner, args, cwd=None):
    """Invoke the codemap CLI in-process, optionally from another directory."""
    from codemap.cli import cli

    old_cwd = os.getcwd()
    try:
        if cwd is not None:
            os.chdir(str(cwd))
        return runner.invoke(cli, args)
    finally:
        os.chdir(old_cwd)


def parse_json_output(result):
    """Parse a command's JSON stdout."""
    return json.loads(result.stdout)


def write_files(root, files):
    for rel, content in files.items():
        path = Path(root) / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")


def bump_mtime(path, seconds=10):
    """Move a file's mtime forward so change detection notices a rewrite."""
    st = os.stat(path)
    os.utime(path, (st.st_atime + seconds, st.st_mtime + seconds))


@pytest.fixture
def cli_runner():
    """Provide a Click CliRunner compatible with Click 8.2+."""
    try:
        return CliRunner(mix_stderr=False)
    except TypeError:
        return CliRunner()


@pytest.fixture(autouse=True)
def _no_db_dir_override(monkeypatch):
    monkeypatch.delenv("CODEMAP_DB_DIR", raising=False)


@pytest.fixture
def project_factory(tmp_path):
    """Create a project directory (marked as a git root) from a dict of files."""
    counter = {"n": 0}

    def make(files):
        counter["n"] += 1
        root = tmp_path / f"proj{counter['n']}"
        root.mkdir()
        (root / ".git").mkdir()
        write_files(root, files)
        return root

    return make


@pytest.fixture
def sample_project(project_factory):
    return project_factory({
        "main.c": (FIXTURES / "test.c").read_text(encoding="utf-8"),
        "app/greeter.cpp": (FIXTURES / "test.cpp").read_text(encoding="utf-8"),
        "lib/util.h": (
            "#ifndef UTIL_H\n"
            "#define UTIL_H\n"
            "typedef struct point {\n"
            "    int x, y;\n"
            "} point_t;\n"
            "int add(int a, int b);\n"
            "#endif\n"
        ),
        "lib/util.c": (
            '#include "util.h"\n'
            "int add(int a, int b) {\n"
            "    return a + b;\n"
            "}\n"
        ),
        "README.md": "# not source\n",
    })


@pytest.fixture
def indexed_project(sample_project, cli_runner):
    result = invoke_cli(cli_runner, ["index"], cwd=sample_project)
    assert result.exit_code == 0, result.output
    return sample_project
