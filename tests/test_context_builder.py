"""
Unit tests for ContextBuilder.

Covers prompt rendering, truncation and enhanced review requests.
"""

import pytest

from diffscope.context_builder import (
    TRUNCATION_MARKER,
    ContextBuilder,
    EnhancedReviewRequest,
    summarize_changed_symbols,
)
from diffscope.errors import ContextBuildError
from diffscope.structure import (
    Class,
    Context,
    DiffContext,
    Field,
    Function,
    Import,
    Interface,
    Param,
)


# =============================================================================
# FIXTURES
# =============================================================================

def make_function(name: str, start: int, end: int, **kwargs) -> Function:
    """Helper to create Function objects."""
    return Function(name=name, start_line=start, end_line=end, **kwargs)


@pytest.fixture
def builder() -> ContextBuilder:
    return ContextBuilder()


@pytest.fixture
def go_context() -> Context:
    """A small Go file context."""
    return Context(
        language="go",
        file_path="calc/calc.go",
        package="calc",
        imports=[Import(path="fmt"), Import(path="strings", alias="str")],
        functions=[
            make_function(
                "Add",
                3,
                5,
                parameters=[Param("a", "int"), Param("b", "int")],
                returns=["int"],
                is_exported=True,
            ),
            make_function("helper", 7, 9, receiver="Calc"),
        ],
        classes=[
            Class(
                name="Calc",
                start_line=11,
                end_line=14,
                fields=[Field("total", "int"), Field("name", "string")],
                methods=["helper"],
                is_exported=True,
            )
        ],
        interfaces=[Interface(name="Adder", start_line=16, end_line=18, methods=["Add"])],
    )


# =============================================================================
# UNIT TESTS: build_prompt_context()
# =============================================================================

class TestBuildPromptContext:
    """Tests for prompt rendering."""

    def test_full_context(self, builder, go_context):
        """Without a diff every declaration is listed."""
        result = builder.build_prompt_context(go_context)

        assert result == (
            "## File: calc/calc.go\n"
            "Language: go\n"
            "Package: calc\n"
            "\n"
            "### Dependencies:\n"
            "- fmt\n"
            "- strings as str\n"
            "\n"
            "### Functions:\n"
            "- (public) Add(a int, b int) -> int [lines 3-5]\n"
            "- (private) Calc.helper() [lines 7-9]\n"
            "\n"
            "### Classes/Structs:\n"
            "- (public) Calc [lines 11-14]\n"
            "  Fields: 2\n"
            "  Methods: helper\n"
            "\n"
            "### Interfaces:\n"
            "- (private) Adder [lines 16-18]\n"
            "  Methods: Add\n"
            "\n"
        )

    def test_changed_only(self, builder, go_context):
        """With a diff only changed functions and classes are listed."""
        diff_ctx = DiffContext(
            full_context=go_context,
            changed_functions=[go_context.functions[0]],
            changed_classes=[go_context.classes[0]],
        )

        result = builder.build_prompt_context(go_context, diff_ctx)

        assert "### Changed Functions:\n- (public) Add(a int, b int) -> int [lines 3-5]\n" in result
        assert "\n### Changed Classes/Structs:\n- (public) Calc [lines 11-14]\n" in result
        assert "helper()" not in result
        assert "### Interfaces:" not in result

    def test_changed_heading_always_present(self, builder, go_context):
        diff_ctx = DiffContext(full_context=go_context)

        result = builder.build_prompt_context(go_context, diff_ctx)

        assert result.endswith("### Changed Functions:\n")
        assert "Changed Classes" not in result

    def test_no_package_or_imports(self, builder):
        ctx = Context(language="python", file_path="app.py")

        assert builder.build_prompt_context(ctx) == "## File: app.py\nLanguage: python\n\n"

    def test_import_list_capped(self, builder):
        ctx = Context(
            language="python",
            file_path="app.py",
            imports=[Import(path=f"mod{i}") for i in range(13)],
        )

        result = builder.build_prompt_context(ctx)

        assert "- mod9\n" in result
        assert "- mod10\n" not in result
        assert "... and 3 more imports\n" in result

    def test_class_inheritance(self, builder):
        ctx = Context(
            language="java",
            file_path="Service.java",
            classes=[
                Class(
                    name="Service",
                    start_line=1,
                    end_line=9,
                    extends="Base",
                    implements=["Runnable", "Closeable"],
                )
            ],
        )

        result = builder.build_prompt_context(ctx)

        assert "- (private) Service extends Base implements Runnable, Closeable [lines 1-9]\n" in result

    def test_unnamed_parameters(self, builder):
        fn = make_function("f", 1, 2, parameters=[Param(type="int"), Param(name="x")])

        assert builder.format_function(fn) == "- (private) f(int, x) [lines 1-2]\n"

    def test_multiple_returns(self, builder):
        fn = make_function("f", 1, 2, returns=["int", "error"], is_exported=True)

        assert builder.format_function(fn) == "- (public) f() -> int, error [lines 1-2]\n"


# =============================================================================
# UNIT TESTS: Truncation
# =============================================================================

class TestTruncation:
    """Tests for the context length cap."""

    @pytest.mark.parametrize("limit", [1, 50, 120])
    def test_truncated_length(self, go_context, limit):
        """Output is the cap plus the marker."""
        result = ContextBuilder(max_context_length=limit).build_prompt_context(go_context)

        assert len(result) == limit + len(TRUNCATION_MARKER)
        assert result.endswith("\n... (truncated)")

    def test_exact_length_not_truncated(self, builder, go_context):
        full = builder.build_prompt_context(go_context)

        result = ContextBuilder(max_context_length=len(full)).build_prompt_context(go_context)

        assert result == full

    @pytest.mark.parametrize("limit", [0, -5])
    def test_non_positive_limit_uses_default(self, limit):
        assert ContextBuilder(max_context_length=limit).max_context_length == 2000


# =============================================================================
# UNIT TESTS: build_enhanced_request()
# =============================================================================

class TestEnhancedRequest:
    """Tests for request assembly from diff and file content."""

    def test_add_subtract_scenario(self, builder, calc_go, calc_go_diff):
        """Only the function containing the hunk start is reported."""
        request = builder.build_enhanced_request(calc_go_diff, "go", "calc.go", calc_go)

        assert isinstance(request, EnhancedReviewRequest)
        assert request.changed_symbols == "Modified functions: Add"
        assert request.diff == calc_go_diff
        assert request.language == "go"
        assert request.file_path == "calc.go"
        assert "- (public) Add(" in request.structural_context
        assert "Subtract" not in request.structural_context

    def test_model_dump(self, builder, calc_go, calc_go_diff):
        data = builder.build_enhanced_request(calc_go_diff, "go", "calc.go", calc_go).model_dump()

        assert set(data) == {"diff", "language", "file_path", "structural_context", "changed_symbols"}

    def test_no_changes(self, builder, calc_go):
        request = builder.build_enhanced_request("", "go", "calc.go", calc_go)

        assert request.changed_symbols == ""

    def test_unparseable_content(self, builder, calc_go_diff):
        with pytest.raises(ContextBuildError):
            builder.build_enhanced_request(calc_go_diff, "go", "calc.go", b"\xff\xfe")

    def test_summary_with_classes(self, go_context):
        diff_ctx = DiffContext(
            full_context=go_context,
            changed_functions=go_context.functions,
            changed_classes=go_context.classes,
        )

        assert summarize_changed_symbols(diff_ctx) == (
            "Modified functions: Add, helper; Modified classes: Calc"
        )


# =============================================================================
# UNIT TESTS: build_call_graph()
# =============================================================================

class TestCallGraph:
    """Tests for call context rendering."""

    def test_lists_other_functions(self, builder, go_context):
        result = builder.build_call_graph(go_context, "Add")

        assert result == (
            "### Call context for Add:\n"
            "Other functions in file:\n"
            "  - helper [lines 7-9]\n"
        )

    def test_missing_function(self, builder, go_context):
        assert builder.build_call_graph(go_context, "Nope") == "Function Nope not found in context\n"
