"""
Unit tests for FilePrioritizer.

Tests review ordering of source, test, config and documentation files.
"""

import pytest

from diffscope.file_classifier import FilePrioritizer, FilePriority, prioritize_files
from diffscope.git_diff import parse_diff
from diffscope.models import FileInfo


@pytest.fixture
def prioritizer() -> FilePrioritizer:
    return FilePrioritizer()


# =============================================================================
# UNIT TESTS: priority()
# =============================================================================

class TestPriority:
    """Tests for single-file classification."""

    @pytest.mark.parametrize(
        "path,expected",
        [
            ("src/app.py", FilePriority.SOURCE),
            ("cmd/main.go", FilePriority.SOURCE),
            ("Makefile", FilePriority.SOURCE),
            ("pkg/app_test.go", FilePriority.TEST),
            ("web/app.test.ts", FilePriority.TEST),
            ("web/app.spec.js", FilePriority.TEST),
            ("config.yaml", FilePriority.CONFIG),
            ("deploy/values.yml", FilePriority.CONFIG),
            ("settings.JSON", FilePriority.CONFIG),
            ("pyproject.toml", FilePriority.CONFIG),
            ("setup.ini", FilePriority.CONFIG),
            ("README.md", FilePriority.DOCS),
            ("docs/guide.RST", FilePriority.DOCS),
            ("notes.txt", FilePriority.DOCS),
            ("manual.adoc", FilePriority.DOCS),
        ],
    )
    def test_priority_by_path(self, prioritizer, path, expected):
        assert prioritizer.priority(FileInfo(path=path)) == expected

    def test_is_test_flag(self, prioritizer):
        """An explicit flag wins over the extension."""
        assert prioritizer.priority(FileInfo(path="fixtures.json", is_test=True)) == FilePriority.TEST

    def test_test_marker_beats_docs(self, prioritizer):
        assert prioritizer.priority(FileInfo(path="golden_test.md")) == FilePriority.TEST


# =============================================================================
# UNIT TESTS: prioritize()
# =============================================================================

class TestPrioritize:
    """Tests for ordering."""

    def test_bucket_order_is_stable(self, prioritizer):
        files = [
            FileInfo(path="README.md"),
            FileInfo(path="a.py"),
            FileInfo(path="a_test.py"),
            FileInfo(path="b.py"),
            FileInfo(path="cfg.toml"),
            FileInfo(path="b_test.py"),
        ]

        result = prioritizer.prioritize(files)

        assert [f.path for f in result] == [
            "a.py",
            "b.py",
            "a_test.py",
            "b_test.py",
            "cfg.toml",
            "README.md",
        ]

    def test_empty(self, prioritizer):
        assert prioritizer.prioritize([]) == []

    def test_module_helper(self):
        result = prioritize_files([FileInfo(path="notes.md"), FileInfo(path="main.go")])

        assert [f.path for f in result] == ["main.go", "notes.md"]

    def test_from_file_diffs(self, prioritizer):
        diff = parse_diff(
            "diff --git a/README.md b/README.md\n"
            "@@ -1 +1 @@\n"
            "-old title\n"
            "+new title\n"
            "diff --git a/src/app.py b/src/app.py\n"
            "@@ -1 +1,2 @@\n"
            " import os\n"
            "+import sys\n"
        )

        files = prioritizer.from_file_diffs(diff)

        assert [(f.path, f.language) for f in files] == [
            ("README.md", "markdown"),
            ("src/app.py", "python"),
        ]
        assert all(f.token_count > 0 for f in files)
        assert [f.path for f in prioritizer.prioritize(files)] == ["src/app.py", "README.md"]
