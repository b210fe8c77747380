# tests/test_main.py
"""
Tests for the ``constprop`` command-line front end.
"""

import io
import json

import pytest

from constprop import __version__
from constprop.main import EXIT_INFRA, EXIT_OK, main


class TestMain:

    def test_text_output(self, samples_dir):
        out = io.StringIO()
        rc = main([str(samples_dir / "straight_line.sexp")], stream=out)
        assert rc == EXIT_OK
        text = out.getvalue()
        assert text.startswith("procedure straight_line")
        assert "z = x + y" in text
        assert "OUT {x=#1, y=#2, z=#3}" in text

    def test_json_output(self, samples_dir):
        out = io.StringIO()
        rc = main([str(samples_dir / "branch_merge.sexp"), "--format", "json"], stream=out)
        assert rc == EXIT_OK
        doc = json.loads(out.getvalue())
        assert doc["procedure"] == "branch_merge"
        by_stmt = {row["stmt"]: row for row in doc["nodes"]}
        assert by_stmt["[entry]"]["out"] == {"p": "NAC"}
        assert by_stmt["[exit]"]["in"]["x"] == "NAC"
        assert by_stmt["[exit]"]["in"]["k"] == "#7"

    def test_missing_file(self, tmp_path):
        assert main([str(tmp_path / "nope.sexp")], stream=io.StringIO()) == EXIT_INFRA

    def test_malformed_file(self, tmp_path, caplog):
        bad = tmp_path / "bad.sexp"
        bad.write_text("(procedure f (node 0 (jump)))", encoding="utf-8")
        assert main([str(bad)], stream=io.StringIO()) == EXIT_INFRA
        assert any("Unknown statement" in r.getMessage() for r in caplog.records)

    def test_bad_iteration_bound(self, samples_dir):
        rc = main(
            [str(samples_dir / "loop.sexp"), "--max-iterations", "0"],
            stream=io.StringIO(),
        )
        assert rc == EXIT_INFRA

    def test_tight_iteration_bound(self, samples_dir):
        rc = main(
            [str(samples_dir / "loop.sexp"), "--max-iterations", "2"],
            stream=io.StringIO(),
        )
        assert rc == EXIT_INFRA

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["--version"])
        assert exc_info.value.code == 0
        assert __version__ in capsys.readouterr().out
