"""File extension to language mapping."""

import posixpath

EXT_LANGUAGE_MAP: dict[str, str] = {
    ".go": "go",
    ".py": "python",
    ".js": "javascript",
    ".jsx": "javascript",
    ".ts": "typescript",
    ".tsx": "typescript",
    ".java": "java",
    ".rb": "ruby",
    ".rs": "rust",
    ".c": "c",
    ".h": "c",
    ".cpp": "cpp",
    ".hpp": "cpp",
    ".cs": "csharp",
    ".php": "php",
    ".swift": "swift",
    ".kt": "kotlin",
    ".scala": "scala",
    ".sh": "shell",
    ".bash": "shell",
    ".yaml": "yaml",
    ".yml": "yaml",
    ".json": "json",
    ".xml": "xml",
    ".html": "html",
    ".css": "css",
    ".scss": "scss",
    ".sql": "sql",
    ".md": "markdown",
}

UNKNOWN_LANGUAGE = "unknown"


def file_extension(path: str) -> str:
    """Lowercased extension of the last path component, with the dot."""
    name = posixpath.basename(path.replace("\\", "/"))
    _, ext = posixpath.splitext(name)
    return ext.lower()


def detect_language(path: str) -> str:
    """Detect language from file extension; unmapped extensions are "unknown"."""
    return EXT_LANGUAGE_MAP.get(file_extension(path), UNKNOWN_LANGUAGE)
