"""
Structural context extraction.

Line-oriented grammars that pull imports and declarations out of source
files, and the correlation of those declarations with diff hunks.
"""

from .grammars import StructuralGrammar, get_grammar, register_grammar, registered_languages
from .models import (
    Class,
    Context,
    DiffContext,
    Field,
    Function,
    Import,
    Interface,
    Param,
    Variable,
)
from .parser import StructuralParser, extract_changed_lines

__all__ = [
    "StructuralParser",
    "extract_changed_lines",
    "StructuralGrammar",
    "get_grammar",
    "register_grammar",
    "registered_languages",
    "Context",
    "DiffContext",
    "Function",
    "Class",
    "Interface",
    "Import",
    "Param",
    "Field",
    "Variable",
]
