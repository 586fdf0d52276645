"""
Data models for the diff preparation pipeline.

Defines the parsed diff tree, review chunks and file descriptors shared by
the parser, chunker and prioritizer.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class FileStatus(str, Enum):
    """What happened to a file in a diff."""

    ADDED = "added"
    MODIFIED = "modified"
    DELETED = "deleted"
    RENAMED = "renamed"
    COPIED = "copied"


class LineType(str, Enum):
    """Kind of a line inside a hunk."""

    CONTEXT = "context"
    ADDITION = "addition"
    DELETION = "deletion"


class ChunkType(str, Enum):
    """What a chunk of code represents."""

    UNKNOWN = "unknown"
    FUNCTION = "function"
    CLASS = "class"
    METHOD = "method"
    BLOCK = "block"
    IMPORTS = "imports"
    RAW = "raw"


@dataclass
class Line:
    """A single line within a hunk, prefix character stripped."""

    type: LineType
    content: str
    old_number: int | None = None
    new_number: int | None = None


@dataclass
class Hunk:
    """A contiguous changed region, delimited by an @@ header."""

    old_start: int
    old_lines: int
    new_start: int
    new_lines: int
    lines: list[Line] = field(default_factory=list)
    header: str = ""  # Raw "@@ -a,b +c,d @@ ..." line
    section: str = ""  # Text after the closing @@, usually the enclosing scope


@dataclass
class FileDiff:
    """Diff for a single file."""

    path: str
    old_path: str | None = None  # For renames and copies
    status: FileStatus = FileStatus.MODIFIED
    language: str = "unknown"
    is_binary: bool = False
    hunks: list[Hunk] = field(default_factory=list)
    additions: int = 0
    deletions: int = 0

    @property
    def total_lines_changed(self) -> int:
        """Total lines affected."""
        return self.additions + self.deletions

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON output."""
        return {
            "path": self.path,
            "old_path": self.old_path,
            "status": self.status.value,
            "language": self.language,
            "is_binary": self.is_binary,
            "additions": self.additions,
            "deletions": self.deletions,
            "hunks": [
                {
                    "header": h.header,
                    "old_start": h.old_start,
                    "old_lines": h.old_lines,
                    "new_start": h.new_start,
                    "new_lines": h.new_lines,
                    "lines": [
                        {
                            "type": line.type.value,
                            "content": line.content,
                            "old_number": line.old_number,
                            "new_number": line.new_number,
                        }
                        for line in h.lines
                    ],
                }
                for h in self.hunks
            ],
        }


@dataclass
class DiffStats:
    """Summary statistics for all changes."""

    files_changed: int = 0
    additions: int = 0
    deletions: int = 0


@dataclass
class Diff:
    """A complete diff spanning one or more files."""

    files: list[FileDiff] = field(default_factory=list)
    stats: DiffStats = field(default_factory=DiffStats)

    def calculate_stats(self) -> DiffStats:
        """Recompute aggregate statistics from the file list."""
        self.stats = DiffStats(
            files_changed=len(self.files),
            additions=sum(f.additions for f in self.files),
            deletions=sum(f.deletions for f in self.files),
        )
        return self.stats

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON output."""
        return {
            "stats": {
                "files_changed": self.stats.files_changed,
                "additions": self.stats.additions,
                "deletions": self.stats.deletions,
            },
            "files": [f.to_dict() for f in self.files],
        }


@dataclass
class Chunk:
    """A token-bounded slice of a diff or file."""

    content: str
    start_line: int
    end_line: int
    type: ChunkType = ChunkType.UNKNOWN
    name: str = ""  # Function/class name if applicable
    token_count: int = 0

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON output."""
        return {
            "type": self.type.value,
            "name": self.name,
            "start_line": self.start_line,
            "end_line": self.end_line,
            "token_count": self.token_count,
            "content": self.content,
        }


@dataclass
class FileInfo:
    """A file queued for review, as seen by the prioritizer."""

    path: str
    language: str = "unknown"
    token_count: int = 0
    is_test: bool = False
