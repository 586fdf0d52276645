"""
Structural grammars.

Each grammar is a line scanner for one language family that fills a
``Context`` with imports and declarations. Block ends are found with brace
counting or, for Python, indentation. Both heuristics can be fooled by
braces inside strings and comments or by oddly indented literals; that is
accepted in exchange for speed and breadth.

Grammars register themselves by language tag. Unknown tags fall back to
the generic grammar, so adding a language never touches the dispatcher.
"""

import re
from abc import ABC, abstractmethod
from pathlib import PurePosixPath

from .models import Class, Context, Field, Function, Import, Interface, Param, Variable

_REGISTRY: dict[str, "StructuralGrammar"] = {}

# Words that look like identifiers in "type name(" patterns but are statements
CONTROL_KEYWORDS = frozenset(
    {
        "if", "else", "for", "foreach", "while", "do", "switch", "case", "catch",
        "return", "new", "throw", "throws", "sizeof", "typeof", "delete",
        "await", "yield", "import", "package", "function", "super", "this",
    }
)


# =============================================================================
# Shared scanning helpers
# =============================================================================


def find_block_end(lines: list[str], start_idx: int) -> int:
    """
    Index of the line where a brace block opened at or after start_idx closes.

    Counting starts on the declaration line; the block ends once at least one
    "{" has been seen and the cumulative balance is back to zero. An unclosed
    block runs to the last line.
    """
    brace_count = 0
    started = False

    for i in range(start_idx, len(lines)):
        line = lines[i]
        brace_count += line.count("{") - line.count("}")

        if "{" in line:
            started = True

        if started and brace_count <= 0:
            return i

    return len(lines) - 1


def indent_width(line: str) -> int:
    return len(line) - len(line.lstrip(" \t"))


def find_indent_block_end(lines: list[str], start_idx: int, body_from: int | None = None) -> int:
    """
    Index of the last line of an indentation block.

    The block ends before the first later line that is neither blank nor a
    comment and is indented no deeper than the declaration at start_idx.
    ``body_from`` lets a multi-line signature be skipped.
    """
    if start_idx >= len(lines):
        return start_idx

    def_indent = indent_width(lines[start_idx])
    first = (body_from if body_from is not None else start_idx) + 1

    for i in range(first, len(lines)):
        line = lines[i]
        trimmed = line.strip()

        if not trimmed or trimmed.startswith("#"):
            continue

        if indent_width(line) <= def_indent:
            return i - 1

    return len(lines) - 1


def leading_comment(lines: list[str], idx: int, markers: tuple[str, ...] = ("//", "/*", "*")) -> str:
    """Collect the comment block directly above a declaration."""
    collected: list[str] = []
    i = idx - 1
    while i >= 0:
        stripped = lines[i].strip()
        # Annotations and attributes sit between a doc comment and its target
        if stripped.startswith(("@", "#[")):
            i -= 1
            continue
        if not stripped or not stripped.startswith(markers):
            break
        text = stripped.lstrip("/*!#").rstrip("*/").strip()
        if text:
            collected.append(text)
        i -= 1
    return " ".join(reversed(collected))


def split_top_level(text: str, sep: str = ",") -> list[str]:
    """Split on sep, ignoring separators nested in brackets."""
    parts: list[str] = []
    depth = 0
    current: list[str] = []
    for ch in text:
        if ch in "([{<":
            depth += 1
        elif ch in ")]}>" and depth > 0:
            depth -= 1
        if ch == sep and depth == 0:
            parts.append("".join(current).strip())
            current = []
            continue
        current.append(ch)
    tail = "".join(current).strip()
    if tail:
        parts.append(tail)
    return [p for p in parts if p]


def innermost_scope(scopes: list[tuple[str, int, int, object]], line_num: int):
    """The (kind, start, end, obj) scope most tightly enclosing line_num."""
    best = None
    for scope in scopes:
        _, start, end, _ = scope
        if start < line_num <= end and (best is None or start > best[1]):
            best = scope
    return best


# =============================================================================
# Registry
# =============================================================================


class StructuralGrammar(ABC):
    """A line-oriented structural scanner for one language family."""

    language: str = "generic"
    aliases: tuple[str, ...] = ()

    @abstractmethod
    def parse(self, lines: list[str], ctx: Context) -> None:
        """Populate ctx from the file's lines (without line terminators)."""

    def is_exported(self, name: str, line: str = "") -> bool:
        """Whether a declaration is visible outside its module."""
        return False


def register_grammar(grammar_cls: type[StructuralGrammar]) -> type[StructuralGrammar]:
    """Register a grammar under its language tag and aliases."""
    grammar = grammar_cls()
    for tag in (grammar.language, *grammar.aliases):
        _REGISTRY[tag.lower()] = grammar
    return grammar_cls


def get_grammar(language: str) -> StructuralGrammar:
    """Grammar for a language tag, falling back to the generic grammar."""
    return _REGISTRY.get((language or "").strip().lower(), _REGISTRY["generic"])


def registered_languages() -> list[str]:
    return sorted(_REGISTRY)


# =============================================================================
# Go
# =============================================================================


@register_grammar
class GoGrammar(StructuralGrammar):
    """Go: package/import state machine, receivers, struct/interface blocks."""

    language = "go"
    aliases = ("golang",)

    PACKAGE = re.compile(r"^package\s+(\w+)")
    IMPORT = re.compile(r'^\s*(?:import\s+)?(?:([\w.]+)\s+)?"([^"]+)"')
    IMPORT_BLOCK_START = re.compile(r"^import\s*\(")
    FUNC = re.compile(
        r"^func\s+(?:\(\s*(?:\w+\s+)?\*?(\w+)[^)]*\)\s*)?(\w+)\s*(?:\[[^\]]*\])?"
        r"\(([^)]*)\)\s*(?:\(([^)]*)\)|([\w.*\[\]]+))?"
    )
    TYPE = re.compile(r"^type\s+(\w+)(?:\[[^\]]*\])?\s+(struct|interface)\b")
    VAR = re.compile(r"^(var|const)\s+(\w+)(?:\s+([\w.*\[\]]+))?(?:\s*=\s*(.+))?")
    VAR_BLOCK_START = re.compile(r"^(var|const)\s*\(")
    VAR_BLOCK_ENTRY = re.compile(r"^\s+(\w+)(?:\s+([\w.*\[\]]+))?(?:\s*=\s*(.+))?")
    STRUCT_FIELD = re.compile(r"^\s+(\w+(?:\s*,\s*\w+)*)\s+([^\s`/]+)\s*(`[^`]*`)?")
    INTERFACE_METHOD = re.compile(r"^\s+(\w+)\s*\(")

    def is_exported(self, name: str, line: str = "") -> bool:
        return bool(name) and "A" <= name[0] <= "Z"

    def parse(self, lines: list[str], ctx: Context) -> None:
        in_import_block = False
        var_block_kind = ""
        type_name = ""
        type_kind = ""
        type_start = 0
        type_members: list = []
        brace_count = 0

        for idx, line in enumerate(lines):
            line_num = idx + 1

            # Package
            match = self.PACKAGE.match(line)
            if match:
                ctx.package = match.group(1)
                continue

            # Imports
            if self.IMPORT_BLOCK_START.match(line):
                in_import_block = True
                continue

            if in_import_block:
                if line.strip() == ")":
                    in_import_block = False
                    continue
                match = self.IMPORT.match(line)
                if match:
                    ctx.imports.append(Import(path=match.group(2), alias=match.group(1) or ""))
                continue

            if line.strip().startswith("import ") and "(" not in line:
                match = self.IMPORT.match(line)
                if match:
                    ctx.imports.append(Import(path=match.group(2), alias=match.group(1) or ""))
                continue

            # var ( ... ) / const ( ... )
            match = self.VAR_BLOCK_START.match(line)
            if match:
                var_block_kind = match.group(1)
                continue

            if var_block_kind:
                if line.strip() == ")":
                    var_block_kind = ""
                    continue
                match = self.VAR_BLOCK_ENTRY.match(line)
                if match:
                    self._add_variable(ctx, var_block_kind, match.groups(), line_num)
                continue

            # Type blocks
            match = self.TYPE.match(line)
            if match:
                type_name, type_kind = match.group(1), match.group(2)
                type_start = line_num
                type_members = []
                brace_count = line.count("{") - line.count("}")
                if brace_count <= 0 and "{" in line:
                    self._add_type(ctx, type_name, type_kind, type_start, line_num, type_members)
                    type_name = ""
                continue

            if type_name:
                brace_count += line.count("{") - line.count("}")
                if brace_count <= 0:
                    self._add_type(ctx, type_name, type_kind, type_start, line_num, type_members)
                    type_name = ""
                elif brace_count == 1:
                    self._collect_member(type_kind, line, type_members)
                continue

            # Functions
            match = self.FUNC.match(line)
            if match:
                ctx.functions.append(self._function(match, lines, idx))
                continue

            # Top-level variables/constants
            match = self.VAR.match(line)
            if match:
                self._add_variable(ctx, match.group(1), match.groups()[1:], line_num)

        # Bind receiver methods to their structs
        by_name = {cls.name: cls for cls in ctx.classes}
        for fn in ctx.functions:
            if fn.receiver in by_name:
                by_name[fn.receiver].methods.append(fn.name)

    def _function(self, match: re.Match, lines: list[str], idx: int) -> Function:
        receiver, name, params, paren_returns, bare_return = match.groups()
        fn = Function(
            name=name,
            receiver=receiver or "",
            start_line=idx + 1,
            end_line=find_block_end(lines, idx) + 1,
            is_exported=self.is_exported(name),
            doc_comment=leading_comment(lines, idx, ("//",)),
        )
        if params:
            fn.parameters = self._parse_params(params)
        if paren_returns:
            fn.returns = self._parse_returns(paren_returns)
        elif bare_return:
            fn.returns = [bare_return]
        return fn

    def _collect_member(self, kind: str, line: str, members: list) -> None:
        stripped = line.strip()
        if not stripped or stripped.startswith("//"):
            return
        if kind == "interface":
            match = self.INTERFACE_METHOD.match(line)
            if match:
                members.append(match.group(1))
            return
        match = self.STRUCT_FIELD.match(line)
        if match:
            tags = (match.group(3) or "").strip("`")
            for field_name in match.group(1).split(","):
                members.append(Field(name=field_name.strip(), type=match.group(2), tags=tags))
        elif re.match(r"^\s+\*?[\w.]+\s*$", line):
            # Embedded type
            embedded = stripped.lstrip("*")
            members.append(Field(name=embedded.split(".")[-1], type=stripped))

    def _add_type(self, ctx: Context, name: str, kind: str, start: int, end: int, members: list) -> None:
        if kind == "interface":
            ctx.interfaces.append(
                Interface(
                    name=name,
                    start_line=start,
                    end_line=end,
                    methods=list(members),
                    is_exported=self.is_exported(name),
                )
            )
        else:
            ctx.classes.append(
                Class(
                    name=name,
                    start_line=start,
                    end_line=end,
                    fields=list(members),
                    is_exported=self.is_exported(name),
                )
            )

    def _add_variable(self, ctx: Context, kind: str, groups: tuple, line_num: int) -> None:
        name, type_, value = groups
        var = Variable(
            name=name,
            line=line_num,
            type=type_ or "",
            value=(value or "").strip(),
            is_exported=self.is_exported(name),
        )
        if kind == "const":
            ctx.constants.append(var)
        else:
            ctx.variables.append(var)

    @staticmethod
    def _parse_params(params: str) -> list[Param]:
        result: list[Param] = []
        for part in params.split(","):
            fields = part.split()
            if len(fields) >= 2:
                result.append(Param(name=fields[0], type=" ".join(fields[1:])))
            elif len(fields) == 1:
                result.append(Param(type=fields[0]))
        return result

    @staticmethod
    def _parse_returns(returns: str) -> list[str]:
        result: list[str] = []
        for part in returns.split(","):
            fields = part.split()
            if fields:
                # Named results: keep just the type
                result.append(fields[-1])
        return result


# =============================================================================
# JavaScript / TypeScript
# =============================================================================


@register_grammar
class JavaScriptGrammar(StructuralGrammar):
    """JavaScript: ES imports, require(), functions, arrow functions, classes."""

    language = "javascript"
    aliases = ("js", "jsx", "mjs", "cjs")

    IMPORT_FROM = re.compile(
        r"""^import\s+(?:type\s+)?(?:(\w+)\s*,?\s*)?(?:\*\s+as\s+(\w+)\s*)?(?:\{[^}]*\}\s*)?from\s+['"]([^'"]+)['"]"""
    )
    IMPORT_BARE = re.compile(r"""^import\s+['"]([^'"]+)['"]""")
    REQUIRE = re.compile(
        r"""^(?:const|let|var)\s+(\w+|\{[^}]*\})\s*=\s*require\(\s*['"]([^'"]+)['"]\s*\)"""
    )
    FUNC = re.compile(
        r"^(export\s+)?(?:default\s+)?(?:async\s+)?function\s*\*?\s*(\w+)\s*(?:<[^>]*>)?"
        r"\(([^)]*)\)?(?:\s*:\s*([^{]+?))?\s*(?:\{.*)?$"
    )
    ARROW = re.compile(
        r"^(export\s+)?(?:const|let|var)\s+(\w+)\s*(?::\s*[^=]+)?=\s*(?:async\s+)?"
        r"(?:\(([^)]*)\)|(\w+))\s*(?::\s*([^=]+?))?\s*=>"
    )
    CLASS = re.compile(r"^(export\s+)?(?:default\s+)?(?:abstract\s+)?class\s+(\w+)")
    EXTENDS = re.compile(r"\bextends\s+([\w.]+)")
    IMPLEMENTS = re.compile(r"\bimplements\s+([^{]+)")
    METHOD = re.compile(
        r"^\s+(?:(?:public|private|protected|static|async|readonly|override|abstract|get|set)\s+)*"
        r"\*?#?(\w+)\s*(?:<[^>]*>)?\([^)]*\)\s*(?::\s*[^{]+)?\{"
    )

    def is_exported(self, name: str, line: str = "") -> bool:
        return line.lstrip().startswith("export")

    def parse(self, lines: list[str], ctx: Context) -> None:
        classes: list[Class] = []

        for idx, line in enumerate(lines):
            line_num = idx + 1

            if self._parse_import(line, ctx):
                continue

            match = self.FUNC.match(line)
            if match:
                ctx.functions.append(
                    self._function(lines, idx, match.group(2), match.group(3), match.group(4))
                )
                continue

            match = self.ARROW.match(line)
            if match:
                params = match.group(3) if match.group(3) is not None else match.group(4)
                body = line[match.end():].strip()
                # Expression bodies end on the declaration line
                end_idx = idx if body and not body.startswith("{") else None
                ctx.functions.append(
                    self._function(lines, idx, match.group(2), params, match.group(5), end_idx)
                )
                continue

            match = self.CLASS.match(line)
            if match:
                cls = Class(
                    name=match.group(2),
                    start_line=line_num,
                    end_line=find_block_end(lines, idx) + 1,
                    is_exported=self.is_exported(match.group(2), line),
                )
                extends = self.EXTENDS.search(line)
                if extends:
                    cls.extends = extends.group(1)
                implements = self.IMPLEMENTS.search(line)
                if implements:
                    cls.implements = split_top_level(implements.group(1))
                ctx.classes.append(cls)
                classes.append(cls)
                continue

            if self._parse_extra(lines, idx, ctx):
                continue

            # Method names of the enclosing class
            match = self.METHOD.match(line)
            if match and match.group(1) not in CONTROL_KEYWORDS:
                owner = self._enclosing_class(classes, line_num)
                if owner is not None:
                    owner.methods.append(match.group(1))

    def _parse_import(self, line: str, ctx: Context) -> bool:
        match = self.IMPORT_FROM.match(line)
        if match:
            alias = match.group(1) or match.group(2) or ""
            ctx.imports.append(Import(path=match.group(3), alias=alias))
            return True
        match = self.IMPORT_BARE.match(line)
        if match:
            ctx.imports.append(Import(path=match.group(1)))
            return True
        match = self.REQUIRE.match(line)
        if match:
            binding = match.group(1)
            alias = binding if not binding.startswith("{") else ""
            ctx.imports.append(Import(path=match.group(2), alias=alias))
            return True
        return False

    def _parse_extra(self, lines: list[str], idx: int, ctx: Context) -> bool:
        """Hook for dialect-specific declarations."""
        return False

    def _function(self, lines, idx, name, params, returns, end_idx=None) -> Function:
        if end_idx is None:
            end_idx = find_block_end(lines, idx)
        return Function(
            name=name,
            start_line=idx + 1,
            end_line=end_idx + 1,
            parameters=self._parse_params(params or ""),
            returns=[returns.strip()] if returns else [],
            is_exported=self.is_exported(name, lines[idx]),
            doc_comment=leading_comment(lines, idx),
        )

    @staticmethod
    def _parse_params(params: str) -> list[Param]:
        result: list[Param] = []
        for part in split_top_level(params):
            part = part.split("=", 1)[0].strip()
            if ":" in part:
                name, type_ = part.split(":", 1)
                result.append(Param(name=name.strip().rstrip("?"), type=type_.strip()))
            elif part:
                result.append(Param(name=part))
        return result

    @staticmethod
    def _enclosing_class(classes: list[Class], line_num: int) -> Class | None:
        owner = None
        for cls in classes:
            if cls.start_line < line_num <= cls.end_line:
                if owner is None or cls.start_line > owner.start_line:
                    owner = cls
        return owner


@register_grammar
class TypeScriptGrammar(JavaScriptGrammar):
    """TypeScript: JavaScript plus interfaces and type annotations."""

    language = "typescript"
    aliases = ("ts", "tsx")

    INTERFACE = re.compile(r"^(export\s+)?(?:declare\s+)?interface\s+(\w+)")
    INTERFACE_METHOD = re.compile(r"^\s+(\w+)\??\s*(?:<[^>]*>)?\(")

    def _parse_extra(self, lines: list[str], idx: int, ctx: Context) -> bool:
        line = lines[idx]
        match = self.INTERFACE.match(line)
        if not match:
            return False
        end_idx = find_block_end(lines, idx)
        methods = [
            m.group(1)
            for m in (self.INTERFACE_METHOD.match(body) for body in lines[idx + 1 : end_idx + 1])
            if m
        ]
        ctx.interfaces.append(
            Interface(
                name=match.group(2),
                start_line=idx + 1,
                end_line=end_idx + 1,
                methods=methods,
                is_exported=self.is_exported(match.group(2), line),
            )
        )
        return True


# =============================================================================
# Python
# =============================================================================


@register_grammar
class PythonGrammar(StructuralGrammar):
    """Python: def/class blocks delimited by indentation."""

    language = "python"
    aliases = ("py", "python3")

    IMPORT = re.compile(r"^(?:from\s+(\S+)\s+)?import\s+(.+)")
    DEF = re.compile(r"^(\s*)(?:async\s+)?def\s+(\w+)\s*\(")
    CLASS = re.compile(r"^(\s*)class\s+(\w+)")
    SIGNATURE = re.compile(r"def\s+\w+\s*\((.*)\)\s*(?:->\s*(.+?))?\s*:\s*(?:#.*)?$")
    CLASS_BASES = re.compile(r"class\s+\w+\s*(?:\[[^\]]*\])?\s*\((.*)\)\s*:")
    ASSIGNMENT = re.compile(r"^([A-Za-z_]\w*)\s*(?::\s*([^=]+?))?\s*=(?!=)\s*(.+)")

    # Longest multi-line signature we join before giving up
    MAX_SIGNATURE_LINES = 30

    def is_exported(self, name: str, line: str = "") -> bool:
        return not name.startswith("_")

    def parse(self, lines: list[str], ctx: Context) -> None:
        ctx.module = self._module_name(ctx.file_path)
        scopes: list[tuple[str, int, int, object]] = []

        for idx, line in enumerate(lines):
            line_num = idx + 1

            match = self.IMPORT.match(line)
            if match:
                self._add_imports(ctx, match.group(1), match.group(2))
                continue

            def_match = self.DEF.match(line)
            class_match = None if def_match else self.CLASS.match(line)
            if not def_match and not class_match:
                if not line[:1].isspace():
                    self._maybe_variable(ctx, line, line_num)
                continue

            scope = innermost_scope(scopes, line_num)
            if scope is not None and scope[0] == "function":
                # Nested helpers belong to their enclosing function
                continue
            owner = scope[3] if scope is not None else None

            sig_end, signature = self._signature(lines, idx)
            end_idx = find_indent_block_end(lines, idx, body_from=sig_end)

            if def_match:
                fn = self._function(def_match.group(2), signature, lines, idx, sig_end, end_idx)
                if isinstance(owner, Class):
                    fn.receiver = owner.name
                    owner.methods.append(fn.name)
                    if fn.parameters and fn.parameters[0].name in ("self", "cls"):
                        fn.parameters = fn.parameters[1:]
                ctx.functions.append(fn)
                scopes.append(("function", line_num, end_idx + 1, fn))
            else:
                cls = self._class(class_match.group(2), signature, line_num, end_idx)
                ctx.classes.append(cls)
                scopes.append(("class", line_num, end_idx + 1, cls))

    def _signature(self, lines: list[str], idx: int) -> tuple[int, str]:
        """Join a possibly multi-line header until its brackets balance."""
        parts: list[str] = []
        depth = 0
        last = min(len(lines), idx + self.MAX_SIGNATURE_LINES)
        for i in range(idx, last):
            text = lines[i].strip()
            parts.append(text)
            depth += sum(text.count(c) for c in "([{") - sum(text.count(c) for c in ")]}")
            if depth <= 0:
                return i, " ".join(parts)
        return idx, lines[idx].strip()

    def _function(self, name, signature, lines, idx, sig_end, end_idx) -> Function:
        fn = Function(
            name=name,
            start_line=idx + 1,
            end_line=end_idx + 1,
            is_exported=self.is_exported(name),
            doc_comment=self._docstring(lines, sig_end, end_idx),
        )
        match = self.SIGNATURE.search(signature)
        if match:
            fn.parameters = self._parse_params(match.group(1))
            if match.group(2):
                fn.returns = [match.group(2).strip()]
        return fn

    def _class(self, name: str, signature: str, line_num: int, end_idx: int) -> Class:
        cls = Class(
            name=name,
            start_line=line_num,
            end_line=end_idx + 1,
            is_exported=self.is_exported(name),
        )
        match = self.CLASS_BASES.search(signature)
        if match:
            bases = [b for b in split_top_level(match.group(1)) if "=" not in b]
            if bases:
                cls.extends = bases[0]
                cls.implements = bases[1:]
        return cls

    @staticmethod
    def _parse_params(params: str) -> list[Param]:
        result: list[Param] = []
        for part in split_top_level(params):
            if part in ("*", "/"):
                continue
            part = part.split("=", 1)[0].strip()
            if ":" in part:
                name, type_ = part.split(":", 1)
                result.append(Param(name=name.strip(), type=type_.strip()))
            else:
                result.append(Param(name=part))
        return result

    @staticmethod
    def _docstring(lines: list[str], sig_end: int, end_idx: int) -> str:
        for i in range(sig_end + 1, min(end_idx, len(lines) - 1) + 1):
            stripped = lines[i].strip()
            if not stripped:
                continue
            for quote in ('"""', "'''"):
                if stripped.startswith(quote):
                    text = stripped[3:]
                    if quote in text:
                        text = text[: text.index(quote)]
                    if text.strip():
                        return text.strip()
                    # Summary on the following line
                    if i + 1 < len(lines):
                        return lines[i + 1].strip().rstrip(quote).strip()
            return ""
        return ""

    def _add_imports(self, ctx: Context, from_path: str | None, names: str) -> None:
        if from_path:
            ctx.imports.append(Import(path=from_path))
            return
        for item in split_top_level(names.split("#")[0]):
            path, _, alias = item.partition(" as ")
            ctx.imports.append(Import(path=path.strip(), alias=alias.strip()))

    def _maybe_variable(self, ctx: Context, line: str, line_num: int) -> None:
        match = self.ASSIGNMENT.match(line)
        if not match:
            return
        name = match.group(1)
        var = Variable(
            name=name,
            line=line_num,
            type=(match.group(2) or "").strip(),
            value=match.group(3).strip(),
            is_exported=self.is_exported(name),
        )
        if name.isupper():
            ctx.constants.append(var)
        else:
            ctx.variables.append(var)

    @staticmethod
    def _module_name(file_path: str) -> str:
        if not file_path:
            return ""
        path = PurePosixPath(file_path.replace("\\", "/")).with_suffix("")
        parts = [p for p in path.parts if p not in ("/", ".", "..")]
        if parts and parts[-1] == "__init__":
            parts = parts[:-1]
        return ".".join(parts)


# =============================================================================
# Java
# =============================================================================


@register_grammar
class JavaGrammar(StructuralGrammar):
    """Java: package, imports, classes, interfaces and methods."""

    language = "java"

    PACKAGE = re.compile(r"^package\s+([\w.]+)\s*;")
    IMPORT = re.compile(r"^import\s+(?:static\s+)?([\w.*]+)\s*;")
    MODIFIERS = r"((?:(?:public|protected|private|abstract|final|static|sealed|non-sealed|strictfp)\s+)*)"
    CLASS = re.compile(r"^\s*" + MODIFIERS + r"(?:class|enum|record)\s+(\w+)")
    INTERFACE = re.compile(r"^\s*" + MODIFIERS + r"@?interface\s+(\w+)")
    EXTENDS = re.compile(r"\bextends\s+([\w.]+)")
    IMPLEMENTS = re.compile(r"\bimplements\s+([^{]+)")
    METHOD = re.compile(
        r"^\s*((?:(?:public|private|protected|static|final|abstract|synchronized|native|default)\s+)*)"
        r"(?:<[^>]+>\s+)?([\w.]+(?:<[^>]*>)?(?:\[\])*)\s+(\w+)\s*\(([^)]*)\)?"
    )
    CONSTRUCTOR = re.compile(r"^\s*(?:public|private|protected)\s+(\w+)\s*\(([^)]*)\)?")
    MODIFIER_WORDS = frozenset(
        {"public", "private", "protected", "static", "final", "abstract", "synchronized", "native", "default"}
    )

    def is_exported(self, name: str, line: str = "") -> bool:
        return re.search(r"\bpublic\b", line) is not None

    def parse(self, lines: list[str], ctx: Context) -> None:
        scopes: list[tuple[str, int, int, object]] = []

        for idx, line in enumerate(lines):
            line_num = idx + 1

            match = self.PACKAGE.match(line)
            if match:
                ctx.package = match.group(1)
                continue

            match = self.IMPORT.match(line)
            if match:
                ctx.imports.append(Import(path=match.group(1)))
                continue

            match = self.CLASS.match(line)
            if match:
                cls = Class(
                    name=match.group(2),
                    start_line=line_num,
                    end_line=find_block_end(lines, idx) + 1,
                    is_exported=self.is_exported(match.group(2), line),
                )
                extends = self.EXTENDS.search(line)
                if extends:
                    cls.extends = extends.group(1)
                implements = self.IMPLEMENTS.search(line)
                if implements:
                    cls.implements = split_top_level(implements.group(1))
                ctx.classes.append(cls)
                scopes.append(("class", line_num, cls.end_line, cls))
                continue

            match = self.INTERFACE.match(line)
            if match:
                iface = Interface(
                    name=match.group(2),
                    start_line=line_num,
                    end_line=find_block_end(lines, idx) + 1,
                    is_exported=self.is_exported(match.group(2), line),
                )
                ctx.interfaces.append(iface)
                scopes.append(("interface", line_num, iface.end_line, iface))
                continue

            self._parse_method(lines, idx, ctx, scopes)

    def _parse_method(self, lines, idx, ctx: Context, scopes) -> None:
        line = lines[idx]
        line_num = idx + 1
        scope = innermost_scope(scopes, line_num)
        owner = scope[3] if scope is not None else None

        match = self.METHOD.match(line)
        name = returns = params = None
        if (
            match
            and match.group(2) not in CONTROL_KEYWORDS | self.MODIFIER_WORDS
            and match.group(3) not in CONTROL_KEYWORDS
        ):
            returns, name, params = match.group(2), match.group(3), match.group(4)
        else:
            match = self.CONSTRUCTOR.match(line)
            if match and isinstance(owner, Class) and match.group(1) == owner.name:
                name, params = match.group(1), match.group(2)
        if name is None:
            return

        if isinstance(owner, Interface):
            owner.methods.append(name)
            return
        if scope is not None and scope[0] == "function":
            return
        # Abstract or native declarations have no body
        if line.rstrip().endswith(";"):
            if isinstance(owner, Class):
                owner.methods.append(name)
            return

        fn = Function(
            name=name,
            receiver=owner.name if isinstance(owner, Class) else "",
            parameters=self._parse_params(params or ""),
            returns=[returns] if returns else [],
            start_line=line_num,
            end_line=find_block_end(lines, idx) + 1,
            is_exported=self.is_exported(name, line),
            doc_comment=leading_comment(lines, idx),
        )
        if isinstance(owner, Class):
            owner.methods.append(name)
        ctx.functions.append(fn)
        scopes.append(("function", line_num, fn.end_line, fn))

    @staticmethod
    def _parse_params(params: str) -> list[Param]:
        result: list[Param] = []
        for part in split_top_level(params):
            tokens = [t for t in part.split() if t != "final" and not t.startswith("@")]
            if len(tokens) >= 2:
                result.append(Param(name=tokens[-1], type=" ".join(tokens[:-1])))
            elif tokens:
                result.append(Param(type=tokens[0]))
        return result


# =============================================================================
# Rust
# =============================================================================


@register_grammar
class RustGrammar(StructuralGrammar):
    """Rust: use, fn, struct/enum, impl blocks and traits."""

    language = "rust"
    aliases = ("rs",)

    VIS = r"(pub(?:\([^)]*\))?\s+)?"
    USE = re.compile(r"^\s*" + VIS + r"use\s+([^;]+?)(?:\s+as\s+(\w+))?\s*;")
    FN = re.compile(
        r"^\s*" + VIS + r"(?:default\s+)?(?:const\s+)?(?:async\s+)?(?:unsafe\s+)?"
        r'(?:extern\s+"[^"]*"\s+)?fn\s+(\w+)\s*(?:<[^>]*>)?\(([^)]*)\)?'
    )
    RETURNS = re.compile(r"->\s*([^{;]+?)\s*(?:where\b|\{|;|$)")
    STRUCT = re.compile(r"^\s*" + VIS + r"(?:struct|enum|union)\s+(\w+)")
    IMPL = re.compile(r"^\s*(?:unsafe\s+)?impl(?:<[^>]*>)?\s+(?:([\w:]+)(?:<[^>]*>)?\s+for\s+)?([\w:]+)")
    TRAIT = re.compile(r"^\s*" + VIS + r"(?:unsafe\s+)?trait\s+(\w+)")
    FIELD = re.compile(r"^\s*(?:pub(?:\([^)]*\))?\s+)?(\w+)\s*:\s*([^,]+?),?\s*(?://.*)?$")

    def is_exported(self, name: str, line: str = "") -> bool:
        return line.lstrip().startswith("pub")

    def parse(self, lines: list[str], ctx: Context) -> None:
        scopes: list[tuple[str, int, int, object]] = []

        for idx, line in enumerate(lines):
            line_num = idx + 1

            match = self.USE.match(line)
            if match:
                ctx.imports.append(Import(path=match.group(2).strip(), alias=match.group(3) or ""))
                continue

            scope = innermost_scope(scopes, line_num)
            owner = scope[3] if scope is not None else None

            match = self.FN.match(line)
            if match:
                name = match.group(2)
                if isinstance(owner, Interface):
                    owner.methods.append(name)
                    continue
                if scope is not None and scope[0] in ("function", "struct"):
                    continue
                end_line = line_num if line.rstrip().endswith(";") else find_block_end(lines, idx) + 1
                fn = Function(
                    name=name,
                    start_line=line_num,
                    end_line=end_line,
                    parameters=self._parse_params(match.group(3) or ""),
                    is_exported=self.is_exported(name, line),
                    doc_comment=leading_comment(lines, idx, ("///", "//!", "//")),
                )
                returns = self.RETURNS.search(line)
                if returns:
                    fn.returns = [returns.group(1)]
                if isinstance(owner, Class):
                    fn.receiver = owner.name.removesuffix(" (impl)")
                    owner.methods.append(name)
                ctx.functions.append(fn)
                scopes.append(("function", line_num, end_line, fn))
                continue

            if scope is not None and scope[0] == "struct":
                field_match = self.FIELD.match(line)
                if field_match and isinstance(owner, Class):
                    owner.fields.append(Field(name=field_match.group(1), type=field_match.group(2).strip()))
                continue

            match = self.STRUCT.match(line)
            if match:
                balanced = line.rstrip().endswith(";") or "{" not in line and "(" in line
                cls = Class(
                    name=match.group(2),
                    start_line=line_num,
                    end_line=line_num if balanced else find_block_end(lines, idx) + 1,
                    is_exported=self.is_exported(match.group(2), line),
                )
                ctx.classes.append(cls)
                scopes.append(("struct", line_num, cls.end_line, cls))
                continue

            match = self.IMPL.match(line)
            if match:
                cls = Class(
                    name=match.group(2).split("::")[-1] + " (impl)",
                    start_line=line_num,
                    end_line=find_block_end(lines, idx) + 1,
                    is_exported=True,
                )
                if match.group(1):
                    cls.implements = [match.group(1)]
                ctx.classes.append(cls)
                scopes.append(("impl", line_num, cls.end_line, cls))
                continue

            match = self.TRAIT.match(line)
            if match:
                iface = Interface(
                    name=match.group(2),
                    start_line=line_num,
                    end_line=find_block_end(lines, idx) + 1,
                    is_exported=self.is_exported(match.group(2), line),
                )
                ctx.interfaces.append(iface)
                scopes.append(("trait", line_num, iface.end_line, iface))

    @staticmethod
    def _parse_params(params: str) -> list[Param]:
        result: list[Param] = []
        for part in split_top_level(params):
            if ":" in part:
                name, type_ = part.split(":", 1)
                result.append(Param(name=name.replace("mut ", "").strip(), type=type_.strip()))
            else:
                # self, &self, &mut self
                result.append(Param(name=part))
        return result


# =============================================================================
# C / C++
# =============================================================================


@register_grammar
class CGrammar(StructuralGrammar):
    """C and C++: includes, function definitions, structs and classes."""

    language = "c"
    aliases = ("cpp", "c++", "cc", "h", "hpp", "objc")

    INCLUDE = re.compile(r'^\s*#\s*include\s*[<"]([^>"]+)[>"]')
    NAMESPACE = re.compile(r"^\s*namespace\s+([\w:]+)")
    FUNC = re.compile(
        r"^((?:[\w:<>,]+[\s*&]+)+?)\**&?([\w:~]+)\s*\(([^;]*?)\)\s*(?:const\s*)?(?:noexcept\s*)?\{?\s*$"
    )
    STRUCT = re.compile(
        r"^\s*(?:typedef\s+)?(struct|class|union)\s+(\w+)\s*"
        r"(?::\s*(?:public|private|protected)?\s*([\w:]+))?\s*\{?\s*$"
    )

    def is_exported(self, name: str, line: str = "") -> bool:
        return re.search(r"\bstatic\b", line) is None

    def parse(self, lines: list[str], ctx: Context) -> None:
        for idx, line in enumerate(lines):
            line_num = idx + 1

            match = self.INCLUDE.match(line)
            if match:
                ctx.imports.append(Import(path=match.group(1)))
                continue

            match = self.NAMESPACE.match(line)
            if match and not ctx.package:
                ctx.package = match.group(1)
                continue

            match = self.STRUCT.match(line)
            if match:
                cls = Class(
                    name=match.group(2),
                    start_line=line_num,
                    end_line=find_block_end(lines, idx) + 1,
                    extends=match.group(3) or "",
                    is_exported=True,
                )
                ctx.classes.append(cls)
                continue

            match = self.FUNC.match(line)
            if match and match.group(2) not in CONTROL_KEYWORDS:
                return_type = " ".join(
                    t for t in match.group(1).split() if t not in ("static", "inline", "extern", "virtual")
                )
                fn = Function(
                    name=match.group(2).split("::")[-1],
                    receiver=match.group(2).rsplit("::", 1)[0] if "::" in match.group(2) else "",
                    parameters=self._parse_params(match.group(3)),
                    returns=[return_type] if return_type and return_type != "void" else [],
                    start_line=line_num,
                    end_line=find_block_end(lines, idx) + 1,
                    is_exported=self.is_exported(match.group(2), line),
                    doc_comment=leading_comment(lines, idx),
                )
                ctx.functions.append(fn)

    @staticmethod
    def _parse_params(params: str) -> list[Param]:
        result: list[Param] = []
        for part in split_top_level(params):
            if part == "void":
                continue
            match = re.match(r"^(.*?)([\w]+)(\[\])?$", part)
            if match and match.group(1).strip():
                result.append(Param(name=match.group(2), type=match.group(1).strip() + (match.group(3) or "")))
            else:
                result.append(Param(type=part))
        return result


# =============================================================================
# Generic fallback
# =============================================================================


@register_grammar
class GenericGrammar(StructuralGrammar):
    """Cross-language keyword patterns for anything without a dedicated grammar."""

    language = "generic"

    FUNC_PATTERNS = (
        re.compile(r"^(?:func|function|def|fn|sub)\s+(\w+)"),
        re.compile(r"^(?:public|private|protected)?\s*(?:static\s+)?(\w+)\s+(\w+)\s*\("),
    )
    CLASS = re.compile(r"^(?:class|struct|type)\s+(\w+)")

    def parse(self, lines: list[str], ctx: Context) -> None:
        for idx, line in enumerate(lines):
            line_num = idx + 1

            for pattern in self.FUNC_PATTERNS:
                match = pattern.match(line)
                if not match or any(g in CONTROL_KEYWORDS for g in match.groups()):
                    continue
                ctx.functions.append(
                    Function(
                        name=match.group(match.lastindex),
                        start_line=line_num,
                        end_line=find_block_end(lines, idx) + 1,
                    )
                )
                break

            match = self.CLASS.match(line)
            if match:
                ctx.classes.append(
                    Class(
                        name=match.group(1),
                        start_line=line_num,
                        end_line=find_block_end(lines, idx) + 1,
                    )
                )
