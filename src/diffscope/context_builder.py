"""
Context Builder

Renders structural context into bounded prompt text and assembles enhanced
review requests for the AI provider.
"""

import structlog
from pydantic import BaseModel, Field

from .errors import ContextBuildError, StructuralParseError
from .structure import Class, Context, DiffContext, Function, Interface, StructuralParser

logger = structlog.get_logger(__name__)

TRUNCATION_MARKER = "\n... (truncated)"
DEFAULT_MAX_CONTEXT_LENGTH = 2000
MAX_LISTED_IMPORTS = 10


class EnhancedReviewRequest(BaseModel):
    """A review request enriched with structural context."""

    diff: str
    language: str
    file_path: str
    structural_context: str = Field(default="", description="Rendered prompt context")
    changed_symbols: str = Field(
        default="", description='Summary such as "Modified functions: Add"'
    )


class ContextBuilder:
    """Build enhanced context for LLM prompts."""

    def __init__(self, max_context_length: int = DEFAULT_MAX_CONTEXT_LENGTH):
        """
        Initialize the builder.

        Args:
            max_context_length: Characters of rendered context kept before
                truncation (non-positive falls back to the default)
        """
        if max_context_length <= 0:
            max_context_length = DEFAULT_MAX_CONTEXT_LENGTH
        self.max_context_length = max_context_length

    def build_prompt_context(self, ctx: Context, diff_ctx: DiffContext | None = None) -> str:
        """
        Render a structural context as prompt text.

        With a DiffContext only the changed functions and classes are listed;
        otherwise every function, class and interface is. Output longer than
        ``max_context_length`` is cut and ends with a truncation marker.
        """
        parts: list[str] = []

        # File location context
        parts.append(f"## File: {ctx.file_path}\n")
        parts.append(f"Language: {ctx.language}\n")
        if ctx.package:
            parts.append(f"Package: {ctx.package}\n")
        parts.append("\n")

        # Import context (abbreviated)
        if ctx.imports:
            parts.append("### Dependencies:\n")
            for i, imp in enumerate(ctx.imports):
                if i >= MAX_LISTED_IMPORTS:
                    parts.append(f"... and {len(ctx.imports) - MAX_LISTED_IMPORTS} more imports\n")
                    break
                if imp.alias:
                    parts.append(f"- {imp.path} as {imp.alias}\n")
                else:
                    parts.append(f"- {imp.path}\n")
            parts.append("\n")

        if diff_ctx is not None:
            # Focus on changed elements
            parts.append("### Changed Functions:\n")
            parts.extend(self.format_function(fn) for fn in diff_ctx.changed_functions)

            if diff_ctx.changed_classes:
                parts.append("\n### Changed Classes/Structs:\n")
                parts.extend(self.format_class(cls) for cls in diff_ctx.changed_classes)
        else:
            # Full file context
            if ctx.functions:
                parts.append("### Functions:\n")
                parts.extend(self.format_function(fn) for fn in ctx.functions)
                parts.append("\n")

            if ctx.classes:
                parts.append("### Classes/Structs:\n")
                parts.extend(self.format_class(cls) for cls in ctx.classes)
                parts.append("\n")

            if ctx.interfaces:
                parts.append("### Interfaces:\n")
                parts.extend(self.format_interface(iface) for iface in ctx.interfaces)
                parts.append("\n")

        result = "".join(parts)

        if len(result) > self.max_context_length:
            logger.debug(
                "Truncated prompt context",
                file_path=ctx.file_path,
                length=len(result),
                max_length=self.max_context_length,
            )
            result = result[: self.max_context_length] + TRUNCATION_MARKER

        return result

    @staticmethod
    def _visibility(exported: bool) -> str:
        return "public" if exported else "private"

    def format_function(self, fn: Function) -> str:
        """Render "- (visibility) [Receiver.]name(params) -> returns [lines a-b]"."""
        name = f"{fn.receiver}.{fn.name}" if fn.receiver else fn.name
        params = ", ".join(
            f"{p.name} {p.type}".strip() if p.name else p.type for p in fn.parameters
        )
        line = f"- ({self._visibility(fn.is_exported)}) {name}({params})"
        if fn.returns:
            line += " -> " + ", ".join(fn.returns)
        return line + f" [lines {fn.start_line}-{fn.end_line}]\n"

    def format_class(self, cls: Class) -> str:
        line = f"- ({self._visibility(cls.is_exported)}) {cls.name}"
        if cls.extends:
            line += f" extends {cls.extends}"
        if cls.implements:
            line += " implements " + ", ".join(cls.implements)
        line += f" [lines {cls.start_line}-{cls.end_line}]\n"

        # Members summary
        if cls.fields:
            line += f"  Fields: {len(cls.fields)}\n"
        if cls.methods:
            line += "  Methods: " + ", ".join(cls.methods) + "\n"
        return line

    def format_interface(self, iface: Interface) -> str:
        line = (
            f"- ({self._visibility(iface.is_exported)}) {iface.name}"
            f" [lines {iface.start_line}-{iface.end_line}]\n"
        )
        if iface.methods:
            line += "  Methods: " + ", ".join(iface.methods) + "\n"
        return line

    def build_call_graph(self, ctx: Context, target_function: str) -> str:
        """List the other functions in a file as call context for one function."""
        if not any(fn.name == target_function for fn in ctx.functions):
            return f"Function {target_function} not found in context\n"

        lines = [f"### Call context for {target_function}:\n", "Other functions in file:\n"]
        for fn in ctx.functions:
            if fn.name != target_function:
                lines.append(f"  - {fn.name} [lines {fn.start_line}-{fn.end_line}]\n")
        return "".join(lines)

    def build_enhanced_request(
        self,
        diff: str,
        language: str,
        file_path: str,
        full_content: str | bytes,
    ) -> EnhancedReviewRequest:
        """
        Build a review request carrying structural context.

        Raises:
            ContextBuildError: If the full file content cannot be parsed.
                Callers should review the file without enrichment.
        """
        parser = StructuralParser(language)

        try:
            diff_ctx = parser.parse_diff(diff, full_content, file_path)
        except StructuralParseError as e:
            logger.warning("Structural parse failed", file_path=file_path, error=str(e))
            raise ContextBuildError(f"failed to parse file: {e}") from e

        structural_ctx = self.build_prompt_context(diff_ctx.full_context, diff_ctx)

        return EnhancedReviewRequest(
            diff=diff,
            language=language,
            file_path=file_path,
            structural_context=structural_ctx,
            changed_symbols=summarize_changed_symbols(diff_ctx),
        )


def summarize_changed_symbols(diff_ctx: DiffContext) -> str:
    """One-line summary, e.g. "Modified functions: A, B; Modified classes: C"."""
    parts: list[str] = []
    if diff_ctx.changed_functions:
        parts.append("Modified functions: " + ", ".join(fn.name for fn in diff_ctx.changed_functions))
    if diff_ctx.changed_classes:
        parts.append("Modified classes: " + ", ".join(cls.name for cls in diff_ctx.changed_classes))
    return "; ".join(parts)
