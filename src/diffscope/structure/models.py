"""
Structural context models.

Declarations extracted from a source file by the line-oriented grammars.
Line numbers are 1-based and inclusive.
"""

from dataclasses import dataclass, field


@dataclass
class Import:
    """An import statement."""

    path: str
    alias: str = ""


@dataclass
class Param:
    """A function parameter."""

    name: str = ""
    type: str = ""


@dataclass
class Function:
    """A function or method definition."""

    name: str
    start_line: int
    end_line: int
    receiver: str = ""  # Owning type for bound methods
    parameters: list[Param] = field(default_factory=list)
    returns: list[str] = field(default_factory=list)
    is_exported: bool = False
    doc_comment: str = ""


@dataclass
class Field:
    """A class/struct field."""

    name: str
    type: str = ""
    tags: str = ""  # Go struct tags


@dataclass
class Class:
    """A class, struct or impl block."""

    name: str
    start_line: int
    end_line: int
    fields: list[Field] = field(default_factory=list)
    methods: list[str] = field(default_factory=list)
    extends: str = ""
    implements: list[str] = field(default_factory=list)
    is_exported: bool = False


@dataclass
class Interface:
    """An interface or trait definition."""

    name: str
    start_line: int
    end_line: int
    methods: list[str] = field(default_factory=list)
    is_exported: bool = False


@dataclass
class Variable:
    """A variable or constant declaration."""

    name: str
    line: int
    type: str = ""
    value: str = ""
    is_exported: bool = False


@dataclass
class Context:
    """Everything extracted from one source file."""

    language: str
    file_path: str
    package: str = ""
    module: str = ""
    imports: list[Import] = field(default_factory=list)
    functions: list[Function] = field(default_factory=list)
    classes: list[Class] = field(default_factory=list)
    interfaces: list[Interface] = field(default_factory=list)
    variables: list[Variable] = field(default_factory=list)
    constants: list[Variable] = field(default_factory=list)


@dataclass
class DiffContext:
    """Structural context narrowed to what a diff touched."""

    full_context: Context
    changed_functions: list[Function] = field(default_factory=list)
    changed_classes: list[Class] = field(default_factory=list)
    changed_lines: list[int] = field(default_factory=list)
