"""
Tests for the diffscope command line.

Runs main() in-process against files in a temporary directory.
"""

import json

import pytest
import structlog

from diffscope.cli import main


@pytest.fixture(autouse=True)
def reset_structlog():
    yield
    structlog.reset_defaults()


@pytest.fixture
def workspace(tmp_path, calc_go, calc_go_diff, clean_env):
    """Temporary directory holding calc.go and its diff."""
    (tmp_path / "calc.go").write_text(calc_go, encoding="utf-8")
    (tmp_path / "calc.diff").write_text(calc_go_diff, encoding="utf-8")
    return tmp_path


class TestCommands:
    """Tests for each subcommand's output."""

    def test_parse(self, workspace, capsys):
        assert main(["parse", str(workspace / "calc.diff")]) == 0

        data = json.loads(capsys.readouterr().out)
        assert data["stats"] == {"files_changed": 1, "additions": 1, "deletions": 1}
        assert data["files"][0]["path"] == "calc.go"

    def test_context(self, workspace, capsys):
        code = main(
            [
                "context",
                "--diff",
                str(workspace / "calc.diff"),
                "--file",
                str(workspace / "calc.go"),
            ]
        )

        assert code == 0
        data = json.loads(capsys.readouterr().out)
        assert data["language"] == "go"
        assert data["changed_symbols"] == "Modified functions: Add"

    def test_context_max_length(self, workspace, capsys):
        main(
            [
                "context",
                "--diff",
                str(workspace / "calc.diff"),
                "--file",
                str(workspace / "calc.go"),
                "--max-length",
                "20",
            ]
        )

        data = json.loads(capsys.readouterr().out)
        assert data["structural_context"].endswith("\n... (truncated)")
        assert len(data["structural_context"]) == 20 + len("\n... (truncated)")

    def test_chunk(self, workspace, capsys):
        assert main(["chunk", str(workspace / "calc.go")]) == 0

        chunks = json.loads(capsys.readouterr().out)
        assert [c["name"] for c in chunks] == ["Add", "Subtract"]
        assert "".join(c["content"] for c in chunks) == (workspace / "calc.go").read_text()

    def test_chunk_strict(self, workspace, capsys):
        args = ["chunk", str(workspace / "calc.go"), "--max-tokens", "5", "--strict"]
        assert main(args) == 0

        chunks = json.loads(capsys.readouterr().out)
        assert len(chunks) > 2

    def test_prioritize(self, capsys, clean_env):
        assert main(["prioritize", "README.md", "app_test.go", "app.go", "ci.yml"]) == 0

        assert capsys.readouterr().out.splitlines() == ["app.go", "app_test.go", "ci.yml", "README.md"]

    def test_tokens(self, tmp_path, capsys, clean_env):
        path = tmp_path / "plain.txt"
        path.write_text("a" * 400, encoding="utf-8")

        assert main(["tokens", str(path), "--model", "gpt-4"]) == 0

        data = json.loads(capsys.readouterr().out)
        assert data["tokens"] == 100
        assert data["max_tokens"] == 8192
        assert data["available"] == 6192
        assert data["fits"] is True


class TestFailures:
    """Tests for exit codes."""

    def test_missing_file(self, tmp_path, capsys, clean_env):
        assert main(["parse", str(tmp_path / "missing.diff")]) == 1

        captured = capsys.readouterr()
        assert captured.out == ""
        assert "Command failed" in captured.err

    def test_unparseable_source(self, workspace, capsys):
        (workspace / "bad.go").write_bytes(b"\xff\xfe")

        code = main(
            ["context", "--diff", str(workspace / "calc.diff"), "--file", str(workspace / "bad.go")]
        )

        assert code == 1

    def test_invalid_config(self, workspace, capsys, clean_env):
        clean_env.setenv("DIFFSCOPE_MAX_CHUNK_TOKENS", "many")

        assert main(["chunk", str(workspace / "calc.go")]) == 1
        assert "Invalid configuration" in capsys.readouterr().err

    def test_usage_error(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["unknown-command"])

        assert exc_info.value.code == 2

    def test_missing_subcommand(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main([])

        assert exc_info.value.code == 2
