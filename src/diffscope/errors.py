"""
Exception types for diffscope.

Parsing is best-effort, so very little here is ever raised. These exist so
callers can tell a failed structural enrichment apart from a bug.
"""


class DiffscopeError(Exception):
    """Base class for all diffscope errors."""


class DiffParseError(DiffscopeError):
    """Raised when diff input is not text at all."""


class StructuralParseError(DiffscopeError):
    """Raised when source content cannot be read as text."""


class ContextBuildError(DiffscopeError):
    """Raised when an enhanced review request cannot be built."""


class ConfigError(DiffscopeError):
    """Raised when environment configuration is invalid."""
