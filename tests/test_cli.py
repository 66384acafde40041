#!/usr/bin/env python3
"""CLI tests for the refactor command."""

import json
import os
import shutil
import sys
import tempfile

import pytest
from typer.testing import CliRunner

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from bulk_refactor import __version__
from bulk_refactor.cli import app, main, setup_logging

runner = CliRunner()


@pytest.fixture
def workdir(monkeypatch):
    temp_dir = tempfile.mkdtemp()
    with open(os.path.join(temp_dir, "a.txt"), "w") as f:
        f.write("foo bar foo")
    with open(os.path.join(temp_dir, "b.txt"), "w") as f:
        f.write("baz")
    for var in ("REFACTOR_MAX_WORKERS", "REFACTOR_EXCLUDE", "REFACTOR_LOG_FILE", "REFACTOR_DEBUG"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(temp_dir)
    yield temp_dir
    os.chdir("/")
    shutil.rmtree(temp_dir)


def contents(name):
    with open(name) as f:
        return f.read()


class TestRunCommand:

    def test_preview_default(self, workdir):
        result = runner.invoke(app, ["run", "foo", "qux"])
        assert result.exit_code == 0
        assert "a.txt:1" in result.output
        assert "b.txt" not in result.output
        assert contents("a.txt") == "foo bar foo"

    def test_commit_confirmed(self, workdir):
        result = runner.invoke(app, ["run", "foo", "qux", "-x"], input="y\n")
        assert result.exit_code == 0
        assert contents("a.txt") == "qux bar qux"
        assert contents("b.txt") == "baz"

    def test_commit_declined(self, workdir):
        result = runner.invoke(app, ["run", "foo", "qux", "--commit"], input="n\n")
        assert result.exit_code == 0
        assert "cancelled" in result.output
        assert contents("a.txt") == "foo bar foo"

    def test_noop_exit_code(self, workdir):
        result = runner.invoke(app, ["run", "foo", "foo"])
        assert result.exit_code == 1
        assert "noop" in result.output

    def test_nothing_to_refactor_exit_code(self, workdir):
        result = runner.invoke(app, ["run", "absent", "x"])
        assert result.exit_code == 1
        assert "nothing to refactor" in result.output

    def test_explicit_files(self, workdir):
        result = runner.invoke(app, ["run", "ba", "BA", "b.txt", "-x"], input="y\n")
        assert result.exit_code == 0
        assert contents("b.txt") == "BAz"
        assert contents("a.txt") == "foo bar foo"

    def test_json_preview(self, workdir):
        result = runner.invoke(app, ["run", "foo", "qux", "--json"])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["occurrences"] == 2
        assert data["matches"] == [{"path": "a.txt", "line": 1, "occurrences": 2, "text": "foo bar foo"}]

    def test_json_rejected_with_commit(self, workdir):
        result = runner.invoke(app, ["run", "foo", "qux", "--json", "-x"])
        assert result.exit_code != 0
        assert contents("a.txt") == "foo bar foo"

    def test_invalid_workers(self, workdir):
        result = runner.invoke(app, ["run", "foo", "qux", "--workers", "0"])
        assert result.exit_code != 0

    def test_exclude(self, workdir):
        os.makedirs("skipme")
        with open(os.path.join("skipme", "c.txt"), "w") as f:
            f.write("foo")
        result = runner.invoke(app, ["run", "foo", "qux", "--exclude", "skipme", "--json"])
        data = json.loads(result.stdout)
        assert [m["path"] for m in data["matches"]] == ["a.txt"]

    def test_log_file(self, workdir):
        log_path = os.path.join(workdir, "refactor.log")
        result = runner.invoke(app, ["run", "foo", "qux", "--debug", "--log-file", log_path])
        assert result.exit_code == 0
        setup_logging()
        assert "state idle -> scanning" in contents(log_path)


class TestEntryPoint:

    def test_version(self):
        result = runner.invoke(app, ["version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_main_defaults_to_run(self, workdir, monkeypatch):
        calls = []
        monkeypatch.setattr(sys, "argv", ["refactor", "foo", "qux"])
        monkeypatch.setattr("bulk_refactor.cli.app", lambda: calls.append(list(sys.argv)))
        main()
        assert calls == [["refactor", "run", "foo", "qux"]]

    def test_version_with_arguments_is_a_search(self, workdir, monkeypatch):
        calls = []
        monkeypatch.setattr(sys, "argv", ["refactor", "version", "v2"])
        monkeypatch.setattr("bulk_refactor.cli.app", lambda: calls.append(list(sys.argv)))
        main()
        assert calls == [["refactor", "run", "version", "v2"]]

    def test_bare_version_is_the_command(self, monkeypatch):
        calls = []
        monkeypatch.setattr(sys, "argv", ["refactor", "version"])
        monkeypatch.setattr("bulk_refactor.cli.app", lambda: calls.append(list(sys.argv)))
        main()
        assert calls == [["refactor", "version"]]
