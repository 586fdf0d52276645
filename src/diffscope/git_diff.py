"""
Git Diff Parser

Parses unified diff text into structured data for review.
"""

import re
from pathlib import Path

import structlog

from .errors import DiffParseError
from .languages import detect_language
from .models import Diff, FileDiff, FileStatus, Hunk, Line, LineType

logger = structlog.get_logger(__name__)


class DiffParser:
    """Parse unified diff output into a Diff tree.

    Parsing is best-effort: unrecognized lines are ignored rather than
    rejected, so a partially garbled diff still yields every file and hunk
    that could be read.
    """

    # Regex patterns for parsing diff output
    FILE_HEADER = re.compile(r"^diff --git a/(.+) b/(.+)$")
    HUNK_HEADER = re.compile(r"^@@ -(\d+)(?:,(\d+))? \+(\d+)(?:,(\d+))? @@(.*)$")
    RENAME_FROM = re.compile(r"^rename from (.+)$")
    COPY_FROM = re.compile(r"^copy from (.+)$")
    NEW_FILE = re.compile(r"^new file mode")
    DELETED_FILE = re.compile(r"^deleted file mode")
    BINARY_FILE = re.compile(r"^Binary files .* differ")

    def parse(self, diff_text: str | bytes) -> Diff:
        """Parse full diff text into a Diff with stats calculated."""
        if isinstance(diff_text, bytes):
            diff_text = diff_text.decode("utf-8", errors="replace")
        elif not isinstance(diff_text, str):
            raise DiffParseError(
                f"diff must be str or bytes, got {type(diff_text).__name__}"
            )

        diff = Diff()
        current_file: FileDiff | None = None
        current_hunk: Hunk | None = None
        old_no = new_no = 0

        for line in diff_text.split("\n"):
            line = line.rstrip("\r")
            if not line:
                continue

            # Check for new file header
            file_match = self.FILE_HEADER.match(line)
            if file_match:
                # Save previous file
                if current_file:
                    if current_hunk:
                        current_file.hunks.append(current_hunk)
                    diff.files.append(current_file)

                # Start new file
                new_path = file_match.group(2)
                current_file = FileDiff(
                    path=new_path,
                    language=detect_language(new_path),
                )
                current_hunk = None
                continue

            if current_file is None:
                continue

            # Check for hunk header
            hunk_match = self.HUNK_HEADER.match(line)
            if hunk_match:
                # Save previous hunk
                if current_hunk:
                    current_file.hunks.append(current_hunk)

                current_hunk = Hunk(
                    old_start=int(hunk_match.group(1)),
                    old_lines=int(hunk_match.group(2) or "1"),
                    new_start=int(hunk_match.group(3)),
                    new_lines=int(hunk_match.group(4) or "1"),
                    header=line,
                    section=hunk_match.group(5).strip(),
                )
                old_no = current_hunk.old_start
                new_no = current_hunk.new_start
                continue

            if current_hunk is None:
                self._apply_file_marker(current_file, line)
                continue

            # Classify hunk content by its prefix character
            prefix = line[0]
            if prefix == "\\":
                # "\ No newline at end of file"
                continue
            if prefix == "+":
                current_hunk.lines.append(
                    Line(type=LineType.ADDITION, content=line[1:], new_number=new_no)
                )
                current_file.additions += 1
                new_no += 1
            elif prefix == "-":
                current_hunk.lines.append(
                    Line(type=LineType.DELETION, content=line[1:], old_number=old_no)
                )
                current_file.deletions += 1
                old_no += 1
            else:
                # Context, or an unexpected line treated as context
                content = line[1:] if prefix == " " else line
                current_hunk.lines.append(
                    Line(
                        type=LineType.CONTEXT,
                        content=content,
                        old_number=old_no,
                        new_number=new_no,
                    )
                )
                old_no += 1
                new_no += 1

        # Save final file
        if current_file:
            if current_hunk:
                current_file.hunks.append(current_hunk)
            diff.files.append(current_file)

        diff.calculate_stats()
        logger.debug(
            "Parsed diff",
            files=diff.stats.files_changed,
            hunks=sum(len(f.hunks) for f in diff.files),
            additions=diff.stats.additions,
            deletions=diff.stats.deletions,
        )
        return diff

    def parse_file(self, path: str | Path) -> Diff:
        """Read and parse a diff stored on disk."""
        return self.parse(Path(path).read_bytes())

    def _apply_file_marker(self, file_diff: FileDiff, line: str) -> None:
        """Apply extended header lines (mode, rename, binary) to a file."""
        if self.NEW_FILE.match(line):
            file_diff.status = FileStatus.ADDED
            return

        if self.DELETED_FILE.match(line):
            file_diff.status = FileStatus.DELETED
            return

        if self.BINARY_FILE.match(line):
            file_diff.is_binary = True
            return

        rename_from = self.RENAME_FROM.match(line)
        if rename_from:
            file_diff.status = FileStatus.RENAMED
            file_diff.old_path = rename_from.group(1)
            return

        copy_from = self.COPY_FROM.match(line)
        if copy_from:
            file_diff.status = FileStatus.COPIED
            file_diff.old_path = copy_from.group(1)


def parse_diff(diff_text: str | bytes) -> Diff:
    """Parse unified diff text with a default parser."""
    return DiffParser().parse(diff_text)
