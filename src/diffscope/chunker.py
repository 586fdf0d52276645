"""
Diff Chunker

Splits large diffs into reviewable chunks to avoid context overflow.
Uses declaration boundaries (functions, classes) when possible and falls
back to size-based splitting at natural break points.
"""

import re

import structlog

from .models import Chunk, ChunkType
from .tokens import TokenEstimator

logger = structlog.get_logger(__name__)

DEFAULT_MAX_CHUNK_TOKENS = 2000

_GO = [
    (re.compile(r"^\s*func\s+(?:\([^)]+\)\s+)?(\w+)\s*\("), ChunkType.FUNCTION),
    (re.compile(r"^\s*type\s+(\w+)\s+struct\s*\{"), ChunkType.CLASS),
    (re.compile(r"^\s*type\s+(\w+)\s+interface\s*\{"), ChunkType.CLASS),
]
_JAVASCRIPT = [
    (re.compile(r"^\s*(?:export\s+)?(?:async\s+)?function\s+(\w+)\s*\("), ChunkType.FUNCTION),
    (re.compile(r"^\s*(?:export\s+)?(?:const|let|var)\s+(\w+)\s*=\s*(?:async\s+)?\("), ChunkType.FUNCTION),
    (re.compile(r"^\s*(?:export\s+)?(?:const|let|var)\s+(\w+)\s*=\s*(?:async\s+)?function"), ChunkType.FUNCTION),
    (re.compile(r"^\s*(?:export\s+)?class\s+(\w+)"), ChunkType.CLASS),
    (re.compile(r"^\s*(\w+)\s*\([^)]*\)\s*(?::\s*\w+)?\s*\{"), ChunkType.METHOD),
]
_PYTHON = [
    (re.compile(r"^\s*(?:async\s+)?def\s+(\w+)\s*\("), ChunkType.FUNCTION),
    (re.compile(r"^\s*class\s+(\w+)"), ChunkType.CLASS),
]
_JAVA = [
    (re.compile(r"^\s*(?:public|private|protected)?\s*(?:static)?\s*\w+\s+(\w+)\s*\("), ChunkType.METHOD),
    (re.compile(r"^\s*(?:public|private|protected)?\s*class\s+(\w+)"), ChunkType.CLASS),
]
_RUST = [
    (re.compile(r"^\s*(?:pub\s+)?(?:async\s+)?fn\s+(\w+)"), ChunkType.FUNCTION),
    (re.compile(r"^\s*(?:pub\s+)?struct\s+(\w+)"), ChunkType.CLASS),
    (re.compile(r"^\s*(?:pub\s+)?impl\s+(?:<[^>]+>\s+)?(\w+)"), ChunkType.CLASS),
]
_C = [
    (re.compile(r"^\s*(?:\w+\s+)+(\w+)\s*\([^)]*\)\s*\{"), ChunkType.FUNCTION),
    (re.compile(r"^\s*class\s+(\w+)"), ChunkType.CLASS),
    (re.compile(r"^\s*struct\s+(\w+)"), ChunkType.CLASS),
]
_GENERIC = [
    (re.compile(r"^\s*(?:func|function|def|fn)\s+(\w+)"), ChunkType.FUNCTION),
    (re.compile(r"^\s*class\s+(\w+)"), ChunkType.CLASS),
]


def split_lines_keepends(text: str) -> list[str]:
    """Split on "\\n" keeping the terminator, so "".join(result) == text."""
    pieces = text.split("\n")
    lines = [piece + "\n" for piece in pieces[:-1]]
    if pieces[-1]:
        lines.append(pieces[-1])
    return lines


def find_break_point(content: str) -> int:
    """
    Find a good point to cut buffered content.

    Prefers the end of a block, then a blank line, then any line break past
    the midpoint. Returns 0 when there is no good point.
    """
    idx = content.rfind("}\n")
    if idx > 0:
        return idx + 2

    idx = content.rfind("\n\n")
    if idx > 0:
        return idx + 2

    idx = content.rfind("\n")
    if idx > len(content) // 2:
        return idx + 1

    return 0


class Chunker:
    """Split code or diff text into token-bounded chunks."""

    # Declaration boundary patterns by language tag
    FUNCTION_PATTERNS = {
        "go": _GO,
        "golang": _GO,
        "javascript": _JAVASCRIPT,
        "typescript": _JAVASCRIPT,
        "js": _JAVASCRIPT,
        "ts": _JAVASCRIPT,
        "python": _PYTHON,
        "py": _PYTHON,
        "java": _JAVA,
        "kotlin": _JAVA,
        "rust": _RUST,
        "rs": _RUST,
        "c": _C,
        "cpp": _C,
        "c++": _C,
    }

    def __init__(
        self,
        max_chunk_tokens: int = DEFAULT_MAX_CHUNK_TOKENS,
        language: str = "",
        estimator: TokenEstimator | None = None,
        strict_budget: bool = False,
    ):
        """
        Initialize chunker.

        Args:
            max_chunk_tokens: Token budget per chunk (non-positive falls back
                to the default)
            language: Language tag selecting the boundary patterns
            estimator: Token estimator (default estimator when None)
            strict_budget: Also re-split declaration chunks that exceed the
                budget, instead of only a lone oversized chunk
        """
        if max_chunk_tokens <= 0:
            max_chunk_tokens = DEFAULT_MAX_CHUNK_TOKENS
        self.max_chunk_tokens = max_chunk_tokens
        self.language = (language or "").lower()
        self.estimator = estimator or TokenEstimator()
        self.strict_budget = strict_budget

    @property
    def patterns(self) -> list[tuple[re.Pattern, ChunkType]]:
        return self.FUNCTION_PATTERNS.get(self.language, _GENERIC)

    def needs_chunking(self, text: str) -> bool:
        """Check if text exceeds the per-chunk budget."""
        return self.estimator.estimate_tokens(text) > self.max_chunk_tokens

    def chunk_diff(self, text: str) -> list[Chunk]:
        """
        Split text into reviewable chunks.

        Strategy:
        1. Split on declaration boundaries
        2. If that yields nothing, or one chunk over budget, split by size

        The chunk contents always concatenate back to the input.
        """
        lines = split_lines_keepends(text)

        chunks = self._split_by_functions(lines)

        if not chunks or (
            len(chunks) == 1
            and self.estimator.estimate_tokens(chunks[0].content) > self.max_chunk_tokens
        ):
            chunks = self._split_by_size(lines)
        elif self.strict_budget:
            chunks = self._enforce_budget(chunks)

        for chunk in chunks:
            chunk.token_count = self.estimator.estimate_tokens(chunk.content)

        logger.debug(
            "Chunked text",
            language=self.language or "generic",
            lines=len(lines),
            chunks=len(chunks),
            max_chunk_tokens=self.max_chunk_tokens,
        )
        return chunks

    def _split_by_functions(self, lines: list[str]) -> list[Chunk]:
        """Split at declaration boundaries, tracking brace balance."""
        patterns = self.patterns
        chunks: list[Chunk] = []
        buffer: list[str] = []
        start = 1
        name = ""
        kind = ChunkType.RAW
        in_declaration = False
        brace_count = 0

        def flush(end: int, chunk_type: ChunkType) -> None:
            chunks.append(
                Chunk(
                    content="".join(buffer),
                    start_line=start,
                    end_line=end,
                    type=chunk_type,
                    name=name,
                )
            )
            buffer.clear()

        for line_num, line in enumerate(lines, start=1):
            for pattern, chunk_type in patterns:
                match = pattern.match(line)
                if not match:
                    continue
                if buffer and in_declaration:
                    flush(line_num - 1, kind)
                in_declaration = True
                kind = chunk_type
                name = match.group(1) or ""
                break

            brace_count += line.count("{") - line.count("}")

            if not buffer:
                start = line_num
            buffer.append(line)

            if in_declaration and brace_count == 0 and "}" in line:
                flush(line_num, ChunkType.FUNCTION)
                in_declaration = False
                name = ""

        if buffer:
            flush(len(lines), ChunkType.FUNCTION if in_declaration else ChunkType.RAW)

        return chunks

    def _split_by_size(self, lines: list[str], first_line: int = 1) -> list[Chunk]:
        """Split by token size, cutting at natural break points."""
        chunks: list[Chunk] = []
        buffer = ""
        start = first_line
        current_tokens = 0

        for line_num, line in enumerate(lines, start=first_line):
            line_tokens = self.estimator.estimate_tokens(line.rstrip("\n"))

            if current_tokens + line_tokens > self.max_chunk_tokens and buffer:
                cut = find_break_point(buffer) or len(buffer)
                emitted, buffer = buffer[:cut], buffer[cut:]
                emitted_lines = emitted.count("\n")
                chunks.append(
                    Chunk(
                        content=emitted,
                        start_line=start,
                        end_line=start + emitted_lines - 1,
                        type=ChunkType.BLOCK,
                    )
                )
                start += emitted_lines
                current_tokens = self.estimator.estimate_tokens(buffer)

            if not buffer:
                start = line_num
            buffer += line
            current_tokens += line_tokens

        if buffer:
            chunks.append(
                Chunk(
                    content=buffer,
                    start_line=start,
                    end_line=first_line + len(lines) - 1,
                    type=ChunkType.BLOCK,
                )
            )

        return chunks

    def _enforce_budget(self, chunks: list[Chunk]) -> list[Chunk]:
        """Re-split every chunk over budget by size."""
        result: list[Chunk] = []
        for chunk in chunks:
            if self.estimator.estimate_tokens(chunk.content) <= self.max_chunk_tokens:
                result.append(chunk)
                continue
            pieces = self._split_by_size(split_lines_keepends(chunk.content), chunk.start_line)
            for piece in pieces:
                piece.name = chunk.name
            result.extend(pieces)
        return result
