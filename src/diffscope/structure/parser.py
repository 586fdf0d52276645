"""
Structural Parser

Extracts packages, imports and declarations from source text and correlates
them with the line ranges a diff touched.
"""

import re

import structlog

from ..errors import StructuralParseError
from ..languages import detect_language
from .grammars import get_grammar
from .models import Context, DiffContext

logger = structlog.get_logger(__name__)

# New-side start line of a hunk header
HUNK_NEW_START = re.compile(r"^@@\s*-\d+(?:,\d+)?\s*\+(\d+)(?:,(\d+))?\s*@@")


def extract_changed_lines(diff_text: str) -> list[int]:
    """New-start line number of every hunk header in a diff."""
    markers: list[int] = []
    for line in diff_text.split("\n"):
        match = HUNK_NEW_START.match(line)
        if match:
            markers.append(int(match.group(1)))
    return markers


def _as_text(code: str | bytes, file_path: str) -> str:
    if isinstance(code, str):
        return code
    if isinstance(code, (bytes, bytearray)):
        try:
            return bytes(code).decode("utf-8")
        except UnicodeDecodeError as e:
            raise StructuralParseError(f"{file_path or '<source>'} is not valid UTF-8: {e}") from e
    raise StructuralParseError(
        f"source for {file_path or '<source>'} must be str or bytes, got {type(code).__name__}"
    )


class StructuralParser:
    """Parse source code into a structural Context.

    The language tag selects a grammar from the registry; an empty tag is
    resolved from each file's extension at parse time.
    """

    def __init__(self, language: str = ""):
        self.language = (language or "").strip().lower()

    def parse(self, code: str | bytes, file_path: str = "") -> Context:
        """Extract the structural context of one file."""
        text = _as_text(code, file_path)
        language = self.language or detect_language(file_path)
        grammar = get_grammar(language)

        ctx = Context(language=language, file_path=file_path)
        lines = [line.rstrip("\r") for line in text.split("\n")]
        grammar.parse(lines, ctx)

        logger.debug(
            "Parsed structure",
            file_path=file_path,
            language=language,
            grammar=grammar.language,
            functions=len(ctx.functions),
            classes=len(ctx.classes),
            interfaces=len(ctx.interfaces),
        )
        return ctx

    def parse_diff(self, diff_text: str, full_content: str | bytes, file_path: str = "") -> DiffContext:
        """
        Parse a file and pick the declarations a diff touched.

        Each hunk header contributes its new-side start line as a marker; a
        function or class is changed when its line range contains a marker.
        """
        full_ctx = self.parse(full_content, file_path)
        changed_lines = extract_changed_lines(diff_text)

        def touched(start: int, end: int) -> bool:
            return any(start <= line <= end for line in changed_lines)

        return DiffContext(
            full_context=full_ctx,
            changed_functions=[fn for fn in full_ctx.functions if touched(fn.start_line, fn.end_line)],
            changed_classes=[cls for cls in full_ctx.classes if touched(cls.start_line, cls.end_line)],
            changed_lines=changed_lines,
        )
