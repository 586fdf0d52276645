"""
File Prioritizer

Orders files for review: source first, then tests, configuration and
documentation last.
"""

from enum import IntEnum

from .languages import file_extension
from .models import Diff, FileInfo
from .tokens import TokenEstimator


class FilePriority(IntEnum):
    """Review priority, lower first."""

    SOURCE = 1
    TEST = 2
    CONFIG = 3
    DOCS = 4


class FilePrioritizer:
    """Sort files by review priority."""

    # Path fragments marking test files
    TEST_MARKERS = ("_test", ".test.", ".spec.")

    CONFIG_EXTENSIONS = {".json", ".yaml", ".yml", ".toml", ".ini"}
    DOC_EXTENSIONS = {".md", ".txt", ".rst", ".adoc"}

    def priority(self, file: FileInfo) -> FilePriority:
        """Classify a single file."""
        if file.is_test or any(marker in file.path for marker in self.TEST_MARKERS):
            return FilePriority.TEST

        ext = file_extension(file.path)
        if ext in self.DOC_EXTENSIONS:
            return FilePriority.DOCS
        if ext in self.CONFIG_EXTENSIONS:
            return FilePriority.CONFIG

        return FilePriority.SOURCE

    def prioritize(self, files: list[FileInfo]) -> list[FileInfo]:
        """
        Order files by priority.

        Files keep their input order within a priority bucket.
        """
        buckets: dict[FilePriority, list[FileInfo]] = {p: [] for p in FilePriority}
        for f in files:
            buckets[self.priority(f)].append(f)

        result: list[FileInfo] = []
        for p in sorted(FilePriority):
            result.extend(buckets[p])
        return result

    @staticmethod
    def from_file_diffs(diff: Diff, estimator: TokenEstimator | None = None) -> list[FileInfo]:
        """Describe every file of a parsed diff for prioritization."""
        estimator = estimator or TokenEstimator()
        files = []
        for file_diff in diff.files:
            text = "\n".join(line.content for hunk in file_diff.hunks for line in hunk.lines)
            files.append(
                FileInfo(
                    path=file_diff.path,
                    language=file_diff.language,
                    token_count=estimator.estimate_tokens(text),
                )
            )
        return files


def prioritize_files(files: list[FileInfo]) -> list[FileInfo]:
    """Order files by priority with the default prioritizer."""
    return FilePrioritizer().prioritize(files)
