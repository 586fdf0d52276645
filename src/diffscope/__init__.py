"""
diffscope

Prepares code changes for AI review: parses unified diffs, extracts the
structure of changed files, renders bounded prompt context, estimates
tokens, splits large diffs into chunks and orders files by priority.
"""

from .chunker import Chunker
from .config import PrepConfig
from .context_builder import ContextBuilder, EnhancedReviewRequest
from .errors import (
    ConfigError,
    ContextBuildError,
    DiffParseError,
    DiffscopeError,
    StructuralParseError,
)
from .file_classifier import FilePrioritizer, FilePriority, prioritize_files
from .git_diff import DiffParser, parse_diff
from .languages import detect_language
from .models import (
    Chunk,
    ChunkType,
    Diff,
    DiffStats,
    FileDiff,
    FileInfo,
    FileStatus,
    Hunk,
    Line,
    LineType,
)
from .structure import StructuralParser
from .tokens import Budget, TokenEstimator, estimate_tokens, get_model_max_tokens

__version__ = "0.1.0"

__all__ = [
    "DiffParser",
    "parse_diff",
    "StructuralParser",
    "ContextBuilder",
    "EnhancedReviewRequest",
    "Chunker",
    "FilePrioritizer",
    "FilePriority",
    "prioritize_files",
    "TokenEstimator",
    "Budget",
    "estimate_tokens",
    "get_model_max_tokens",
    "detect_language",
    "PrepConfig",
    "Diff",
    "DiffStats",
    "FileDiff",
    "FileStatus",
    "Hunk",
    "Line",
    "LineType",
    "Chunk",
    "ChunkType",
    "FileInfo",
    "DiffscopeError",
    "DiffParseError",
    "StructuralParseError",
    "ContextBuildError",
    "ConfigError",
]
