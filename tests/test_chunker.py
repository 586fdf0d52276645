"""
Unit tests for Chunker.

Tests declaration-boundary and size-based chunking strategies.
"""

import pytest

from diffscope.chunker import Chunker, find_break_point, split_lines_keepends
from diffscope.models import ChunkType
from diffscope.tokens import TokenEstimator


# =============================================================================
# FIXTURES: Sample content for chunking tests
# =============================================================================

GO_CONTENT = """\
package main

func A() {
	x := 1
}

func B() {
	y := 2
}
"""

PYTHON_CONTENT = """\
def a():
    return 1


def b():
    return 2
"""

# 100 lines of about 2 tokens each, no declarations
FLAT_CONTENT = "".join(f"value {i:02d}\n" for i in range(100))

BIG_FUNCTION = "func Big() {\n" + "".join(f"\tx{i} := {i}\n" for i in range(60)) + "}\n"
SMALL_FUNCTION = "\nfunc Small() {\n\treturn\n}\n"


def joined(chunks) -> str:
    return "".join(chunk.content for chunk in chunks)


# =============================================================================
# UNIT TESTS: Declaration boundaries
# =============================================================================

class TestSplitByFunctions:
    """Tests for structural chunking."""

    def test_go_functions(self):
        """Each closed Go function becomes a chunk."""
        chunks = Chunker(language="go").chunk_diff(GO_CONTENT)

        assert [c.name for c in chunks] == ["A", "B"]
        assert all(c.type == ChunkType.FUNCTION for c in chunks)
        assert (chunks[0].start_line, chunks[0].end_line) == (1, 5)
        assert (chunks[1].start_line, chunks[1].end_line) == (6, 9)

    def test_preamble_joins_first_declaration(self):
        """Content before any declaration is carried into the next chunk."""
        chunks = Chunker(language="go").chunk_diff(GO_CONTENT)

        assert chunks[0].content.startswith("package main\n\nfunc A() {")

    def test_python_functions(self):
        """Brace-free languages close a chunk at the next declaration."""
        chunks = Chunker(language="python").chunk_diff(PYTHON_CONTENT)

        assert [c.name for c in chunks] == ["a", "b"]
        assert (chunks[0].start_line, chunks[0].end_line) == (1, 4)
        assert (chunks[1].start_line, chunks[1].end_line) == (5, 6)
        assert chunks[1].type == ChunkType.FUNCTION

    def test_class_kind(self):
        chunks = Chunker(language="python").chunk_diff("class A:\n    pass\ndef f():\n    pass\n")

        assert chunks[0].type == ChunkType.CLASS
        assert chunks[0].name == "A"

    def test_no_declarations_is_raw(self):
        chunks = Chunker().chunk_diff("hello\nworld\n")

        assert len(chunks) == 1
        assert chunks[0].type == ChunkType.RAW
        assert (chunks[0].start_line, chunks[0].end_line) == (1, 2)

    def test_token_counts_filled(self):
        estimator = TokenEstimator()
        chunks = Chunker(language="go", estimator=estimator).chunk_diff(GO_CONTENT)

        for chunk in chunks:
            assert chunk.token_count == estimator.estimate_tokens(chunk.content)

    def test_language_tag_case_insensitive(self):
        chunks = Chunker(language="Go").chunk_diff(GO_CONTENT)

        assert [c.name for c in chunks] == ["A", "B"]


# =============================================================================
# UNIT TESTS: Size-based splitting
# =============================================================================

class TestSplitBySize:
    """Tests for the size fallback."""

    def test_single_oversized_chunk_is_split(self):
        chunks = Chunker(max_chunk_tokens=20).chunk_diff(FLAT_CONTENT)

        assert len(chunks) > 1
        assert all(c.type == ChunkType.BLOCK for c in chunks)
        assert joined(chunks) == FLAT_CONTENT

    def test_line_ranges_are_contiguous(self):
        chunks = Chunker(max_chunk_tokens=20).chunk_diff(FLAT_CONTENT)

        assert chunks[0].start_line == 1
        assert chunks[-1].end_line == 100
        for prev, nxt in zip(chunks, chunks[1:]):
            assert nxt.start_line == prev.end_line + 1

    def test_multiple_oversized_chunks_kept_by_default(self):
        """Several structural chunks are returned as-is even when large."""
        content = BIG_FUNCTION + SMALL_FUNCTION
        chunks = Chunker(max_chunk_tokens=50, language="go").chunk_diff(content)

        assert [c.name for c in chunks] == ["Big", "Small"]
        assert chunks[0].token_count > 50

    def test_strict_budget_resplits(self):
        """Strict mode splits every oversized structural chunk."""
        content = BIG_FUNCTION + SMALL_FUNCTION
        chunks = Chunker(max_chunk_tokens=50, language="go", strict_budget=True).chunk_diff(content)

        assert len(chunks) > 2
        assert joined(chunks) == content
        assert chunks[-1].name == "Small"
        assert {c.name for c in chunks[:-1]} == {"Big"}
        assert chunks[0].start_line == 1

    def test_needs_chunking(self):
        chunker = Chunker(max_chunk_tokens=10)

        assert chunker.needs_chunking("a" * 100)
        assert not chunker.needs_chunking("a" * 8)

    @pytest.mark.parametrize("limit", [0, -1])
    def test_non_positive_budget_uses_default(self, limit):
        assert Chunker(max_chunk_tokens=limit).max_chunk_tokens == 2000


# =============================================================================
# UNIT TESTS: Content preservation
# =============================================================================

class TestContentPreservation:
    """Chunks always concatenate back to the input."""

    @pytest.mark.parametrize(
        "text",
        [
            "",
            "no newline at end",
            "a\n\n\nb",
            "\n\n",
            "}\n}\n{",
            "func x() {\n}\n}\n",
            "def f():\n  pass",
            GO_CONTENT,
            PYTHON_CONTENT,
            FLAT_CONTENT,
            BIG_FUNCTION + SMALL_FUNCTION,
        ],
    )
    @pytest.mark.parametrize("language", ["go", "python", ""])
    @pytest.mark.parametrize("strict", [False, True])
    def test_concatenation(self, text, language, strict):
        chunker = Chunker(max_chunk_tokens=5, language=language, strict_budget=strict)

        assert joined(chunker.chunk_diff(text)) == text

    def test_empty_input(self):
        assert Chunker().chunk_diff("") == []


# =============================================================================
# UNIT TESTS: Helpers
# =============================================================================

class TestHelpers:
    """Tests for line splitting and break points."""

    def test_split_lines_keepends(self):
        assert split_lines_keepends("a\nb\n") == ["a\n", "b\n"]
        assert split_lines_keepends("a\nb") == ["a\n", "b"]
        assert split_lines_keepends("") == []

    def test_break_after_block(self):
        content = "func a() {\n}\nx := 1\n"
        assert find_break_point(content) == content.index("}\n") + 2

    def test_break_at_blank_line(self):
        content = "a\nb\n\nc\n"
        assert find_break_point(content) == 5

    def test_break_at_late_newline(self):
        content = "aaaa\nbbbbbbbb"
        assert find_break_point(content) == 0
        assert find_break_point("aaaaaaaa\nbb") == 9

    def test_no_break(self):
        assert find_break_point("abc") == 0
